"""
slicestore Notification Dispatcher
==================================

One dispatch pass re-evaluates every registered selector against a newly
committed value and calls only the listeners whose slice changed:

1. Take a snapshot of the registry (entries added or removed by listeners
   during the pass do not affect it).
2. For each entry evaluate ``selector(new_value)``.
3. If the result is not shallow-equal to the entry's last value, store it and
   call the listener.

Selector and listener failures are reported and skipped; nothing raised by
user code escapes ``dispatch``.
"""

import logging
from typing import Any, Optional

from .config import SliceStoreConfig, report_error
from .equality import shallow_equal
from .exceptions import ListenerCallbackError, SelectorEvaluationError
from .registry import ListenerRegistry, _name
from .types import EqualityFunction

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fires the listeners whose selected slice changed."""

    def __init__(
        self,
        registry: ListenerRegistry,
        *,
        equals: EqualityFunction = shallow_equal,
        config: Optional[SliceStoreConfig] = None,
    ):
        self._registry = registry
        self._equals = equals
        self._config = config

    def dispatch(self, new_value: Any) -> int:
        """Run one pass for ``new_value``; returns the number of listeners called."""
        notified = 0

        for listener, entry in self._registry.snapshot():
            try:
                selected = entry.selector(new_value)
            except Exception as e:
                # last_value stays stale so the next commit compares against it
                report_error(
                    SelectorEvaluationError(
                        f"selector {_name(entry.selector)} failed during dispatch",
                        cause=e,
                        phase="dispatch",
                    ),
                    self._config,
                )
                continue

            if self._equals(entry.last_value, selected):
                continue

            entry.last_value = selected
            notified += 1
            try:
                listener()
            except Exception as e:
                report_error(
                    ListenerCallbackError(
                        f"listener {_name(listener)} failed during dispatch",
                        cause=e,
                        phase="dispatch",
                    ),
                    self._config,
                )

        logger.debug("dispatch notified %d listener(s)", notified)
        return notified
