"""
slicestore Store - Stable Store Handle
======================================

``Store`` is the facade readers hold on to. It is created once per
``StateHolder`` (see ``StateHolder.store``) and stays the same object however
many values are committed, so it can be cached and passed around freely.

```python
holder = StateHolder({"count": 0})
store = holder.store

unsubscribe = store.subscribe(on_count, lambda s: s["count"])
store.get_snapshot()      # {"count": 0}
unsubscribe()
unsubscribe()             # no-op
```
"""

import logging
from typing import TYPE_CHECKING, Any, Callable, Generic

from .types import Listener, T, Unsubscribe

if TYPE_CHECKING:
    from .holder import StateHolder

logger = logging.getLogger(__name__)


class Store(Generic[T]):
    """Read and subscribe facade over a ``StateHolder``."""

    __slots__ = ("_holder",)

    def __init__(self, holder: "StateHolder[T]"):
        self._holder = holder

    def get_snapshot(self) -> T:
        """The most recently committed value."""
        return self._holder._value

    def subscribe(
        self, listener: Listener, selector: Callable[[T], Any]
    ) -> Unsubscribe:
        """
        Notify ``listener`` whenever ``selector``'s result changes.

        The selector is evaluated immediately against the current value to
        seed the comparison baseline. The returned function removes this
        subscription; calling it again, or after the listener subscribed anew,
        does nothing.
        """
        registry = self._holder.registry
        entry = registry.register(listener, selector, self._holder._value)

        def unsubscribe() -> None:
            registry.remove(listener, entry)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._holder.registry)

    def __repr__(self) -> str:
        return f"Store({self._holder._value!r})"
