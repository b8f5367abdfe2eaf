"""
slicestore Types - Shared Type Definitions
==========================================

Type variables, callable aliases and the structural protocols shared by the
store, the lookup layer and the selector adapter. Kept in one module so the
components can refer to each other's shapes without circular imports.
"""

from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

# ============================================================================
# TYPE VARIABLES
# ============================================================================

T = TypeVar("T")
S = TypeVar("S")
T_co = TypeVar("T_co", covariant=True)

# ============================================================================
# CALLABLE TYPES
# ============================================================================

Listener = Callable[[], None]
Unsubscribe = Callable[[], None]
SubscribeSlot = Callable[[Listener], Unsubscribe]
SnapshotSlot = Callable[[], Any]
EqualityFunction = Callable[[Any, Any], bool]

# ============================================================================
# PROTOCOLS
# ============================================================================


@runtime_checkable
class StoreApi(Protocol[T_co]):
    """
    Read-side contract of a store.

    ``get_snapshot`` returns the current committed value without side effects.
    ``subscribe`` registers ``listener`` gated by ``selector`` and returns an
    idempotent unsubscribe function.
    """

    def get_snapshot(self) -> T_co: ...

    def subscribe(
        self, listener: Listener, selector: Callable[[Any], Any]
    ) -> Unsubscribe: ...


@runtime_checkable
class StoreLookup(Protocol):
    """Capability that resolves the active store, or None when there is none."""

    def lookup(self) -> Optional[StoreApi[Any]]: ...
