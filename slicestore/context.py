"""
slicestore StoreContext - Scoped Store Lookup
=============================================

``StoreContext`` is the lookup capability handed to selector adapters. A store
is made available for the duration of a ``with context.provide(store):``
block; nested blocks shadow outer ones. The stack of provided stores is kept
per thread.

```python
app_context = StoreContext("app")
holder = StateHolder({"count": 0})

with app_context.provide(holder.store):
    count = select(app_context, lambda s: s["count"])

select(app_context, lambda s: s["count"])   # raises UsageError
```
"""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from .types import StoreApi


class StoreContext:
    """A named slot resolving to the innermost provided store."""

    def __init__(
        self, name: Optional[str] = None, default: Optional[StoreApi[Any]] = None
    ):
        self.name = name or "<unnamed>"
        self._default = default
        self._local = threading.local()

    def _get_stack(self) -> List[StoreApi[Any]]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    @contextmanager
    def provide(self, store: StoreApi[Any]) -> Iterator[StoreApi[Any]]:
        """Make ``store`` the result of ``lookup()`` inside the block."""
        stack = self._get_stack()
        stack.append(store)
        try:
            yield store
        finally:
            stack.pop()

    def lookup(self) -> Optional[StoreApi[Any]]:
        stack = self._get_stack()
        if stack:
            return stack[-1]
        return self._default

    @property
    def current(self) -> Optional[StoreApi[Any]]:
        return self.lookup()

    def _reset_state(self) -> None:
        """Drop every provided store on this thread, for testing."""
        self._local.__dict__.clear()

    def __repr__(self) -> str:
        return f"StoreContext({self.name!r})"
