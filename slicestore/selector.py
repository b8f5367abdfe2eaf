"""
slicestore SelectorSubscription - Memoized Selector Reads
=========================================================

``SelectorSubscription`` is what an individual consumer holds to read one
slice of a store. Every read goes through ``produce_selection()``, which keeps
a per-consumer memo and returns the *previous* object whenever the fresh
selection is shallow-equal to it. A host that calls "give me the current
value" several times per pass therefore never sees a spurious change.

Selector Modes
--------------

**Locked** (no ``deps``): the selector given at construction is used for the
subscription's whole life. Selectors passed to later ``read()`` calls are
ignored.

**Dynamic** (``deps`` given): ``read(selector, deps)`` swaps in ``selector``
whenever the elements of ``deps`` change identity. Swapping never touches the
store subscription; the registry entry always runs the active selector. The
store subscription is only replaced when ``deps`` is a different sequence
object from the one the current subscription was bound to, so keep the same
list (or tuple) around between reads to avoid resubscribing.

```python
context = StoreContext("app")
holder = StateHolder({"a": 1, "b": 1})

with context.provide(holder.store):
    with SelectorSubscription(context, lambda s: {"v": s["b"]}) as sub:
        first = sub.read()
        holder.commit({"a": 2, "b": 1})
        assert sub.read() is first
```

Lifecycle
---------

``UNATTACHED`` until the first ``read()``, then ``ATTACHED_LOCKED`` or
``ATTACHED_DYNAMIC``; ``close()`` moves to the terminal ``DETACHED`` state and
releases the store subscription.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, Sequence, Tuple

from .config import SliceStoreConfig, report_error
from .equality import NO_VALUE, same_value, shallow_equal
from .exceptions import SelectorEvaluationError, UsageError
from .registry import _name
from .sync_external import ExternalStoreBinding
from .types import Listener, S, StoreLookup, SubscribeSlot, T, Unsubscribe

logger = logging.getLogger(__name__)


class SelectorMode(Enum):
    LOCKED = "locked"
    DYNAMIC = "dynamic"


class SubscriptionState(Enum):
    UNATTACHED = "unattached"
    ATTACHED_LOCKED = "attached_locked"
    ATTACHED_DYNAMIC = "attached_dynamic"
    DETACHED = "detached"


@dataclass
class SelectionMemo:
    """The last selection handed to one consumer."""

    has_value: bool = False
    value: Any = NO_VALUE

    def remember(self, value: Any) -> None:
        self.has_value = True
        self.value = value

    def clear(self) -> None:
        self.has_value = False
        self.value = NO_VALUE


def _deps_changed(
    previous: Optional[Tuple[Any, ...]], current: Tuple[Any, ...]
) -> bool:
    if previous is None or len(previous) != len(current):
        return True
    return not all(same_value(a, b) for a, b in zip(previous, current))


class SelectorSubscription(Generic[T, S]):
    """
    A consumer's memoized, selector-gated view of a store.

    Args:
        lookup: Resolves the store. Construction raises ``UsageError`` when it
            returns None.
        selector: Projection from the store value to the consumer's slice.
        deps: Dependency sequence. None locks the selector.
        on_change: Called when the store changed in a way this consumer can
            see (the next ``read()`` will return a new object).
        config: Diagnostics config; defaults to ``get_config()``.
    """

    def __init__(
        self,
        lookup: StoreLookup,
        selector: Callable[[T], S],
        deps: Optional[Sequence[Any]] = None,
        *,
        on_change: Optional[Callable[[], None]] = None,
        config: Optional[SliceStoreConfig] = None,
    ):
        store = lookup.lookup()
        if store is None:
            raise UsageError(
                f"SelectorSubscription must be used while a store is provided; "
                f"{lookup!r} has none"
            )

        self._store = store
        self._config = config
        self._selector = selector
        self._mode = SelectorMode.LOCKED if deps is None else SelectorMode.DYNAMIC
        self._deps_seen = tuple(deps) if deps is not None else None
        self._bound_deps = deps

        self._memo = SelectionMemo()
        self._binding = ExternalStoreBinding(on_change, config=config)
        self._subscribe_slot = self._make_subscribe_slot()
        self._state = SubscriptionState.UNATTACHED

    # ========================================================================
    # PROPERTIES
    # ========================================================================

    @property
    def store(self):
        return self._store

    @property
    def mode(self) -> SelectorMode:
        return self._mode

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def memo(self) -> SelectionMemo:
        return self._memo

    @property
    def selector(self) -> Callable[[T], S]:
        """The active selector."""
        return self._selector

    @property
    def subscribe(self) -> SubscribeSlot:
        """The function bound to the host's subscribe slot."""
        return self._subscribe_slot

    @property
    def stale(self) -> bool:
        return self._binding.stale

    @property
    def binding(self) -> ExternalStoreBinding:
        return self._binding

    # ========================================================================
    # READ PATH
    # ========================================================================

    def produce_selection(self) -> S:
        """
        Current selection, reference-stable while it stays shallow-equal.

        A selector that raises is reported; the previously returned value (or
        ``NO_VALUE`` when there is none) is returned instead.
        """
        try:
            selected = self._selector(self._store.get_snapshot())
        except Exception as e:
            report_error(
                SelectorEvaluationError(
                    f"selector {_name(self._selector)} failed during read",
                    cause=e,
                    phase="read",
                ),
                self._config,
            )
            return self._memo.value if self._memo.has_value else NO_VALUE

        if self._memo.has_value and shallow_equal(self._memo.value, selected):
            return self._memo.value

        self._memo.remember(selected)
        return selected

    def read(
        self,
        selector: Optional[Callable[[T], S]] = None,
        deps: Optional[Sequence[Any]] = None,
    ) -> S:
        """
        One read pass.

        ``selector`` and ``deps`` are the values the consumer would pass on
        this pass; how they are applied depends on the mode (see the module
        docstring).
        """
        if self._state is SubscriptionState.DETACHED:
            raise UsageError("SelectorSubscription was read after close()")

        if selector is not None:
            self._apply_selector(selector, deps)

        value = self._binding.read(self._subscribe_slot, self.produce_selection)

        if self._mode is SelectorMode.LOCKED:
            self._state = SubscriptionState.ATTACHED_LOCKED
        else:
            self._state = SubscriptionState.ATTACHED_DYNAMIC
        return value

    def close(self) -> None:
        """Release the store subscription; further reads raise ``UsageError``."""
        if self._state is SubscriptionState.DETACHED:
            return
        self._binding.close()
        self._memo.clear()
        self._state = SubscriptionState.DETACHED

    def __enter__(self) -> "SelectorSubscription[T, S]":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return (
            f"SelectorSubscription({_name(self._selector)}, "
            f"mode={self._mode.value}, state={self._state.value})"
        )

    # ========================================================================
    # SELECTOR POLICY
    # ========================================================================

    def _apply_selector(
        self, selector: Callable[[T], S], deps: Optional[Sequence[Any]]
    ) -> None:
        if self._mode is SelectorMode.LOCKED or deps is None:
            return

        elements = tuple(deps)
        if _deps_changed(self._deps_seen, elements):
            self._selector = selector
            self._deps_seen = elements
            logger.debug(
                "dependencies changed; selector swapped to %s", _name(selector)
            )

        if deps is not self._bound_deps:
            self._bound_deps = deps
            self._subscribe_slot = self._make_subscribe_slot()

    def _select_active(self, value: T) -> S:
        return self._selector(value)

    def _make_subscribe_slot(self) -> SubscribeSlot:
        store = self._store
        select_active = self._select_active

        def subscribe(listener: Listener) -> Unsubscribe:
            return store.subscribe(listener, select_active)

        return subscribe


def select(
    lookup: StoreLookup,
    selector: Callable[[T], S],
    deps: Optional[Sequence[Any]] = None,
    *,
    config: Optional[SliceStoreConfig] = None,
) -> S:
    """
    Read ``selector``'s slice of the store ``lookup`` resolves, once.

    Raises ``UsageError`` when no store is available. A failing selector is
    reported through ``config`` and yields ``NO_VALUE``.

    ``deps`` only picks the selector mode of the transient subscription; a
    single read has no earlier selector to swap, so the result is the same
    either way. Consumers that read repeatedly should keep a
    ``SelectorSubscription`` instead, which carries the memo and the deps
    policy across reads.
    """
    subscription = SelectorSubscription(lookup, selector, deps, config=config)
    try:
        return subscription.produce_selection()
    finally:
        subscription.close()
