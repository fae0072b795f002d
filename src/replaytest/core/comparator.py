"""Structural equality used by ``ResultRecorder.equal``.

Values are compared on a canonical representation rather than through
serialization:

* ``None``, ``bool`` and strings compare by value; ``bool`` never equals an
  ``int``.
* Numbers compare numerically; ``nan`` equals ``nan``.
* Lists and tuples are both sequences and compare element-wise.
* Mappings compare by key set and per-key value, independent of order.
* Sets compare as sets.
* ``numpy`` arrays compare by shape and ``array_equal`` (``nan`` equal).
* Dataclass instances compare by type and fields.
* :class:`Opaque` wrappers, and instances of the ``opaque_types`` passed in
  (see ``Harness.register_opaque_type``), compare by identity. Use them for
  handles owned by something else (sockets, GUI nodes, proxies) whose
  contents are not meaningful to compare.
* Anything else falls back to ``==``.
"""
from __future__ import annotations

import dataclasses
import math
import numbers
from typing import Any, Collection, Dict, List, Mapping, Tuple, Type

import numpy as np

class Opaque:
    """Wraps an external reference so it is compared by identity."""

    __slots__ = ("target",)

    def __init__(self, target: Any) -> None:
        self.target = target

    def __repr__(self) -> str:
        return f"Opaque({type(self.target).__name__})"


OpaqueTypes = Collection[Type[Any]]


def is_opaque(value: Any, opaque_types: OpaqueTypes = ()) -> bool:
    return isinstance(value, Opaque) or isinstance(value, tuple(opaque_types))


def deep_equal(actual: Any, expected: Any, opaque_types: OpaqueTypes = ()) -> bool:
    return _Comparison(tuple(opaque_types)).equal(actual, expected)


def describe(value: Any, opaque_types: OpaqueTypes = ()) -> str:
    """Render ``value`` for failure details."""

    if is_opaque(value, opaque_types):
        target = value.target if isinstance(value, Opaque) else value
        return f"[Opaque {type(target).__name__}]"
    if isinstance(value, np.ndarray):
        return f"array({value.tolist()!r}, dtype={value.dtype})"
    return repr(value)


class _Comparison:
    """One ``deep_equal`` call: the opaque types in force and the pairs already visited."""

    def __init__(self, opaque_types: Tuple[Type[Any], ...]) -> None:
        self._opaque_types = opaque_types
        self._seen: Dict[Tuple[int, int], bool] = {}

    def equal(self, actual: Any, expected: Any) -> bool:
        if is_opaque(actual, self._opaque_types) or is_opaque(expected, self._opaque_types):
            return _unwrap(actual) is _unwrap(expected)
        if actual is expected:
            return True
        if actual is None or expected is None:
            return False
        if isinstance(actual, bool) or isinstance(expected, bool):
            return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
        if isinstance(actual, np.ndarray) or isinstance(expected, np.ndarray):
            return _array_equal(actual, expected)
        if isinstance(actual, numbers.Number) and isinstance(expected, numbers.Number):
            return _number_equal(actual, expected)
        if isinstance(actual, (str, bytes)) or isinstance(expected, (str, bytes)):
            return type(actual) is type(expected) and actual == expected

        key = (id(actual), id(expected))
        if key in self._seen:
            # Cyclic structure: assume equal along the cycle already being checked.
            return self._seen[key]
        self._seen[key] = True
        result = self._container_equal(actual, expected)
        self._seen[key] = result
        return result

    def _container_equal(self, actual: Any, expected: Any) -> bool:
        if isinstance(actual, Mapping) and isinstance(expected, Mapping):
            if set(actual.keys()) != set(expected.keys()):
                return False
            return all(self.equal(actual[key], expected[key]) for key in expected)
        if isinstance(actual, (list, tuple)) and isinstance(expected, (list, tuple)):
            if len(actual) != len(expected):
                return False
            return all(self.equal(a, e) for a, e in zip(actual, expected))
        if isinstance(actual, (set, frozenset)) and isinstance(expected, (set, frozenset)):
            return self._set_equal(list(actual), list(expected))
        if _is_dataclass_instance(actual) or _is_dataclass_instance(expected):
            if type(actual) is not type(expected):
                return False
            return all(
                self.equal(getattr(actual, f.name), getattr(expected, f.name))
                for f in dataclasses.fields(actual)
            )
        return bool(actual == expected)

    def _set_equal(self, actual: List[Any], expected: List[Any]) -> bool:
        if len(actual) != len(expected):
            return False
        remaining = list(expected)
        for item in actual:
            for index, candidate in enumerate(remaining):
                if self.equal(item, candidate):
                    del remaining[index]
                    break
            else:
                return False
        return True


def _number_equal(actual: Any, expected: Any) -> bool:
    if _is_nan(actual) and _is_nan(expected):
        return True
    try:
        return bool(actual == expected)
    except TypeError:  # pragma: no cover - incomparable number types
        return False


def _is_nan(value: Any) -> bool:
    try:
        return isinstance(value, numbers.Real) and math.isnan(value)
    except (TypeError, ValueError):  # pragma: no cover
        return False


def _array_equal(actual: Any, expected: Any) -> bool:
    if not (isinstance(actual, np.ndarray) and isinstance(expected, np.ndarray)):
        return False
    if actual.shape != expected.shape:
        return False
    equal_nan = actual.dtype.kind in "fc" and expected.dtype.kind in "fc"
    return bool(np.array_equal(actual, expected, equal_nan=equal_nan))


def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _unwrap(value: Any) -> Any:
    return value.target if isinstance(value, Opaque) else value
