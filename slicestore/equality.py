"""
slicestore Equality - SameValue and One-Level Shallow Comparison
================================================================

Two pure predicates decide whether anything "changed":

``same_value(a, b)``
    Identity comparison, except that immutable scalar leaves (int, float,
    complex, str, bytes, bool) compare by value when both sides have exactly
    the same type. Floats follow SameValue rules: ``0.0`` and ``-0.0`` differ,
    and ``nan`` equals ``nan``.

``shallow_equal(a, b)``
    ``same_value`` first. Then, when both sides are the same kind of composite
    (a Mapping, a list/tuple, or a plain object with a ``__dict__``), compares
    one level deep: same keys, and ``same_value`` for every value. Nested
    composites count as changed only when their own reference changed.

```python
from slicestore import shallow_equal

shallow_equal({"v": 1}, {"v": 1})          # True
shallow_equal({"v": [1]}, {"v": [1]})      # False: the nested lists differ
shallow_equal(0.0, -0.0)                   # False
shallow_equal(float("nan"), float("nan"))  # True
shallow_equal(1, 1.0)                      # False: int and float differ
shallow_equal([1], (1,))                   # True: lists and tuples are one kind
```

Scalar types are never mixed: a selector that alternates between ``1`` and
``1.0`` is reported as changed. Convert numbers to one type inside the
selector when that matters. Lists and tuples, on the other hand, are both
positional sequences and compare element by element.

Neither predicate ever raises.
"""

import math
from collections.abc import Mapping
from types import ModuleType
from typing import Any, Optional, Tuple


class _NoValue:
    """Sentinel for 'no value': nothing selected, nothing pending."""

    __slots__ = ()

    def __repr__(self):
        return "NO_VALUE"

    def __bool__(self):
        return False


NO_VALUE = _NoValue()

_SCALAR_TYPES = (int, float, complex, str, bytes)


def _same_float(a: float, b: float) -> bool:
    if math.isnan(a):
        return math.isnan(b)
    if a == 0.0 and b == 0.0:
        return math.copysign(1.0, a) == math.copysign(1.0, b)
    return a == b


def same_value(a: Any, b: Any) -> bool:
    """SameValue comparison; see the module docstring."""
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _SCALAR_TYPES):
        return False
    try:
        if isinstance(a, float):
            return _same_float(a, b)
        if isinstance(a, complex):
            return _same_float(a.real, b.real) and _same_float(a.imag, b.imag)
        return bool(a == b)
    except Exception:
        return False


def _composite_kind(value: Any) -> Optional[Tuple[Any, Any]]:
    """Return ``(kind, view)`` for composites, None for leaves."""
    if isinstance(value, Mapping):
        return Mapping, value
    if isinstance(value, (list, tuple)):
        return list, value
    if isinstance(value, (str, bytes, type, ModuleType)) or callable(value):
        return None
    try:
        attrs = vars(value)
    except TypeError:
        return None
    return type(value), attrs


def shallow_equal(a: Any, b: Any) -> bool:
    """One-level structural comparison with SameValue leaves."""
    if same_value(a, b):
        return True
    if a is None or b is None or a is NO_VALUE or b is NO_VALUE:
        return False

    left = _composite_kind(a)
    right = _composite_kind(b)
    if left is None or right is None or left[0] is not right[0]:
        return False

    kind, view_a = left
    view_b = right[1]
    try:
        if len(view_a) != len(view_b):
            return False
        if kind is list:
            return all(same_value(x, y) for x, y in zip(view_a, view_b))
        for key in view_a:
            if key not in view_b:
                return False
            if not same_value(view_a[key], view_b[key]):
                return False
        return True
    except Exception:
        return False
