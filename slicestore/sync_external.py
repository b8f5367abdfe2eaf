"""
slicestore ExternalStoreBinding - Synchronous External-Read Protocol
====================================================================

Models the host side of a synchronous external-store read: the host owns two
slots, ``subscribe`` and ``get_snapshot``, and may call ``get_snapshot``
several times in one read pass. It decides whether its consumer must be read
again purely by reference: a snapshot that is not the same object as the one
last read means "changed".

Rules the binding enforces:

- The subscription is only replaced when the ``subscribe`` slot passed to
  ``read`` is a different object from the bound one.
- With ``check_snapshot_stability`` on, ``get_snapshot`` is called twice per
  read and a warning is logged if the two results differ, since an uncached
  snapshot makes every notification look like a change.
- When the store notifies, the current ``get_snapshot`` is consulted; only a
  new reference marks the binding stale and calls ``on_change``.
"""

import logging
from typing import Any, Callable, Optional

from .config import SliceStoreConfig, get_config
from .equality import NO_VALUE
from .exceptions import UsageError
from .types import SnapshotSlot, SubscribeSlot, Unsubscribe

logger = logging.getLogger(__name__)


class ExternalStoreBinding:
    """One consumer's connection to a store through subscribe/snapshot slots."""

    def __init__(
        self,
        on_change: Optional[Callable[[], None]] = None,
        *,
        config: Optional[SliceStoreConfig] = None,
    ):
        self._on_change = on_change
        self._config = config

        self._subscribe: Optional[SubscribeSlot] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._get_snapshot: Optional[SnapshotSlot] = None
        self._rendered: Any = NO_VALUE

        self._stale = False
        self._closed = False
        self._subscribe_count = 0

        def handle_store_change() -> None:
            self._check_for_change()

        # One listener object for the binding's whole life
        self._listener = handle_store_change

    @property
    def stale(self) -> bool:
        """True when the store changed since the last ``read``."""
        return self._stale

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    @property
    def subscribe_count(self) -> int:
        """How many times a subscribe slot has been invoked."""
        return self._subscribe_count

    def read(self, subscribe: SubscribeSlot, get_snapshot: SnapshotSlot) -> Any:
        """Read the current snapshot, (re)subscribing if ``subscribe`` changed."""
        if self._closed:
            raise UsageError("ExternalStoreBinding was read after close()")

        self._get_snapshot = get_snapshot
        value = get_snapshot()

        config = self._config or get_config()
        if config.check_snapshot_stability and get_snapshot() is not value:
            logger.warning(
                "get_snapshot %r returned a different object on a repeated call; "
                "cache its result or every store change will look like a new value",
                get_snapshot,
            )

        self._rendered = value
        self._stale = False

        if subscribe is not self._subscribe:
            self._resubscribe(subscribe)

        return value

    def close(self) -> None:
        """Release the subscription. Safe to call more than once."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.debug("binding released its subscription")
        self._subscribe = None
        self._closed = True

    def _resubscribe(self, subscribe: SubscribeSlot) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            logger.debug("subscribe slot changed; resubscribing")

        self._subscribe = subscribe
        self._unsubscribe = subscribe(self._listener)
        self._subscribe_count += 1

        # A change that landed between the read and the new subscription
        self._check_for_change()

    def _check_for_change(self) -> None:
        if self._get_snapshot is None or self._closed or self._stale:
            return
        if self._get_snapshot() is self._rendered:
            return

        self._stale = True
        if self._on_change is not None:
            self._on_change()
