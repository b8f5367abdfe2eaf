"""
slicestore Listener Registry
============================

Maps listener identity to a ``ListenerEntry`` holding the listener's selector
and the last value it was notified with. The registry is written by
subscribe/unsubscribe and read by the dispatcher through ``snapshot()``, so a
listener that (un)subscribes during a dispatch never disturbs the pass in
progress.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import SliceStoreConfig, report_error
from .equality import NO_VALUE
from .exceptions import SelectorEvaluationError
from .types import Listener

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ListenerEntry:
    """A listener, its selector and the last value it was notified with."""

    listener: Listener
    selector: Callable[[Any], Any]
    last_value: Any = NO_VALUE


class ListenerRegistry:
    """
    One entry per listener identity, kept in registration order.

    Entries are keyed on ``id(listener)`` and hold the listener itself, so the
    id stays valid while the entry is registered. Listeners need not be
    hashable, and distinct listeners that compare equal get separate entries.
    """

    def __init__(self, config: Optional[SliceStoreConfig] = None):
        self._entries: Dict[int, ListenerEntry] = {}
        self._config = config

    def register(
        self, listener: Listener, selector: Callable[[Any], Any], current: Any
    ) -> ListenerEntry:
        """
        Register ``listener`` and seed its last value with ``selector(current)``.

        A selector that raises here is reported and the entry is seeded with
        ``NO_VALUE``; registration itself never fails. Registering a listener
        that is already present replaces its entry without moving it in the
        dispatch order.
        """
        try:
            initial = selector(current)
        except Exception as e:
            report_error(
                SelectorEvaluationError(
                    f"selector {_name(selector)} failed during subscribe",
                    cause=e,
                    phase="subscribe",
                ),
                self._config,
            )
            initial = NO_VALUE

        entry = ListenerEntry(listener, selector, initial)
        self._entries[id(listener)] = entry
        logger.debug("registered listener %s (%d total)", _name(listener), len(self))
        return entry

    def remove(self, listener: Listener, entry: Optional[ListenerEntry] = None) -> bool:
        """
        Remove the entry for ``listener``; unknown listeners are a no-op.

        When ``entry`` is given, the listener is only removed while that exact
        entry is still registered for it.
        """
        key = id(listener)
        current = self._entries.get(key)
        if current is None or (entry is not None and current is not entry):
            return False
        del self._entries[key]
        logger.debug("removed listener %s (%d left)", _name(listener), len(self))
        return True

    def get(self, listener: Listener) -> Optional[ListenerEntry]:
        return self._entries.get(id(listener))

    def snapshot(self) -> List[Tuple[Listener, ListenerEntry]]:
        """Entries in registration order, detached from later mutation."""
        return [(entry.listener, entry) for entry in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, listener: object) -> bool:
        return id(listener) in self._entries

    def __repr__(self) -> str:
        return f"ListenerRegistry({len(self)} listeners)"


def _name(func: Any) -> str:
    return getattr(func, "__qualname__", None) or repr(func)
