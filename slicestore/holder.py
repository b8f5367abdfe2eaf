"""
slicestore State Holder - Two-Phase Commit with Coalesced Dispatch
==================================================================

``StateHolder`` owns the committed value of one store. A commit has two
phases:

``apply_value(value)``
    Synchronous. The new value is visible through ``get_snapshot()`` as soon
    as ``commit`` returns, before any listener has run.

``schedule_dispatch()``
    Marks the holder dirty and records the value in the pending cell. The
    dispatch runs once the current synchronous pass completes: at the end of
    the ``commit`` call, at the outermost exit of a ``batch()`` block, or after
    the dispatch pass that is already running. Values committed before the
    pending dispatch runs are coalesced: listeners only ever see the last one.

```python
holder = StateHolder({"a": 1, "b": 1})
store = holder.store

store.subscribe(lambda: print("b changed"), lambda s: s["b"])

holder.commit({"a": 2, "b": 1})        # nothing printed
with holder.batch():
    holder.commit({"a": 2, "b": 2})
    holder.commit({"a": 2, "b": 3})    # still nothing printed
# prints "b changed" once, for {"a": 2, "b": 3}
```
"""

import logging
from typing import Any, Callable, Generic, Optional

from .config import SliceStoreConfig
from .dispatcher import NotificationDispatcher
from .equality import NO_VALUE, shallow_equal
from .registry import ListenerRegistry
from .store import Store
from .types import EqualityFunction, T

logger = logging.getLogger(__name__)


class StateHolder(Generic[T]):
    """Committed value of one store plus its listener registry."""

    def __init__(
        self,
        initial: T,
        *,
        equals: EqualityFunction = shallow_equal,
        config: Optional[SliceStoreConfig] = None,
    ):
        self._value = initial
        self._registry = ListenerRegistry(config)
        self._dispatcher = NotificationDispatcher(
            self._registry, equals=equals, config=config
        )
        self._store = None

        self._dirty = False
        self._pending: Any = NO_VALUE
        self._batch_depth = 0
        self._is_dispatching = False

    # ========================================================================
    # READ
    # ========================================================================

    @property
    def value(self) -> T:
        return self._value

    def get(self) -> T:
        return self._value

    @property
    def store(self) -> Store[T]:
        """The store handle; created on first access and never replaced."""
        if self._store is None:
            self._store = Store(self)
        return self._store

    @property
    def registry(self) -> ListenerRegistry:
        return self._registry

    @property
    def pending(self) -> bool:
        """Whether a dispatch is scheduled but has not run yet."""
        return self._dirty

    # ========================================================================
    # WRITE
    # ========================================================================

    def commit(self, value: T) -> bool:
        """
        Commit ``value`` as the current value.

        Returns False (and schedules nothing) when ``value`` is the object
        already held.
        """
        if value is self._value:
            return False
        self.apply_value(value)
        self.schedule_dispatch()
        return True

    def update(self, func: Callable[[T], T]) -> bool:
        """Commit ``func(current_value)``."""
        return self.commit(func(self._value))

    def apply_value(self, value: T) -> None:
        self._value = value

    def schedule_dispatch(self) -> None:
        if self._dirty:
            logger.debug("coalescing pending dispatch into the latest value")
        self._dirty = True
        self._pending = self._value

        if self._batch_depth == 0:
            self.flush()

    def flush(self) -> None:
        """
        Run the pending dispatch now.

        A no-op when nothing is pending. Called while a dispatch is already
        running (from a listener), it returns immediately and the running pass
        picks the new value up once it finishes.
        """
        if self._is_dispatching:
            return

        self._is_dispatching = True
        try:
            while self._dirty:
                value = self._pending
                self._dirty = False
                self._pending = NO_VALUE
                self._dispatcher.dispatch(value)
        finally:
            self._is_dispatching = False

    def batch(self) -> "BatchContext":
        """Defer dispatch until the outermost batch block exits."""
        return BatchContext(self)

    def __repr__(self) -> str:
        return f"StateHolder({self._value!r}, listeners={len(self._registry)})"


class BatchContext:
    """Counts nesting depth; the outermost exit flushes the pending dispatch."""

    def __init__(self, holder: StateHolder):
        self._holder = holder

    def __enter__(self):
        self._holder._batch_depth += 1
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._holder._batch_depth -= 1

        if self._holder._batch_depth == 0:
            self._holder.flush()

        return False
