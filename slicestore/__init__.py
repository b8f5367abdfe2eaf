"""
slicestore - Selector-Gated Observable Stores
=============================================

A single store wraps an externally-owned value that is replaced as a whole on
every update. Readers subscribe with a selector and are only notified when
their selected slice changes, compared one level deep with SameValue leaves.
"""

from .config import (
    SliceStoreConfig,
    _reset_config,
    configure,
    get_config,
    report_error,
)
from .context import StoreContext
from .dispatcher import NotificationDispatcher
from .equality import NO_VALUE, same_value, shallow_equal
from .exceptions import (
    ListenerCallbackError,
    SelectorEvaluationError,
    SliceStoreError,
    UsageError,
)
from .holder import BatchContext, StateHolder
from .registry import ListenerEntry, ListenerRegistry
from .selector import (
    SelectionMemo,
    SelectorMode,
    SelectorSubscription,
    SubscriptionState,
    select,
)
from .store import Store
from .sync_external import ExternalStoreBinding
from .types import StoreApi, StoreLookup

__all__ = [
    # Write side
    "StateHolder",
    "BatchContext",
    "Store",
    "StoreApi",
    # Subscription engine
    "ListenerEntry",
    "ListenerRegistry",
    "NotificationDispatcher",
    # Read side
    "SelectorSubscription",
    "SelectionMemo",
    "SelectorMode",
    "SubscriptionState",
    "ExternalStoreBinding",
    "select",
    # Lookup
    "StoreContext",
    "StoreLookup",
    # Equality
    "same_value",
    "shallow_equal",
    # Sentinel
    "NO_VALUE",
    # Configuration
    "SliceStoreConfig",
    "configure",
    "get_config",
    "report_error",
    # Exceptions
    "SliceStoreError",
    "SelectorEvaluationError",
    "ListenerCallbackError",
    "UsageError",
    # Testing utilities (internal use)
    "_reset_config",
]
