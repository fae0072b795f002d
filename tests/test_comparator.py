from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from replaytest.core import Opaque, deep_equal, describe


@dataclass
class Point:
    x: int
    y: int


def test_mappings_ignore_key_order() -> None:
    assert deep_equal({"a": 1, "b": {"c": [1, 2]}}, {"b": {"c": [1, 2]}, "a": 1})
    assert not deep_equal({"a": 1}, {"a": 1, "b": None})


def test_sequences_compare_elementwise() -> None:
    assert deep_equal([1, (2, 3)], (1, [2, 3]))
    assert not deep_equal([1, 2], [2, 1])
    assert not deep_equal([None], [])


def test_bool_is_not_an_int() -> None:
    assert not deep_equal(True, 1)
    assert not deep_equal(0, False)
    assert deep_equal(False, False)
    assert deep_equal(1, 1.0)


def test_none_and_nan() -> None:
    assert deep_equal(None, None)
    assert not deep_equal(None, 0)
    assert deep_equal(float("nan"), float("nan"))
    assert deep_equal([float("nan")], [float("nan")])


def test_strings_and_bytes_are_distinct() -> None:
    assert deep_equal("abc", "abc")
    assert not deep_equal("abc", b"abc")


def test_sets() -> None:
    assert deep_equal({1, 2, 3}, frozenset({3, 2, 1}))
    assert not deep_equal({1, 2}, {1, 3})


def test_numpy_arrays() -> None:
    assert deep_equal(np.array([1.0, np.nan]), np.array([1.0, np.nan]))
    assert not deep_equal(np.array([1, 2]), np.array([[1, 2]]))
    assert not deep_equal(np.array([1, 2]), [1, 2])


def test_dataclasses_compare_fields() -> None:
    assert deep_equal(Point(1, 2), Point(1, 2))
    assert not deep_equal(Point(1, 2), Point(2, 1))
    assert not deep_equal(Point(1, 2), {"x": 1, "y": 2})


def test_opaque_values_compare_by_identity() -> None:
    handle = object()
    assert deep_equal(Opaque(handle), Opaque(handle))
    assert deep_equal(Opaque(handle), handle)
    assert not deep_equal(Opaque([1]), Opaque([1]))
    assert describe(Opaque([1])) == "[Opaque list]"


def test_opaque_types_compare_by_identity() -> None:
    class Node:
        def __init__(self, value):
            self.value = value

        def __eq__(self, other):
            return isinstance(other, Node) and other.value == self.value

    first = Node(1)
    assert deep_equal(first, Node(1))
    assert deep_equal(first, first, opaque_types={Node})
    assert not deep_equal(first, Node(1), opaque_types={Node})
    assert describe(first, opaque_types={Node}) == "[Opaque Node]"
    assert describe(first).startswith("<")


def test_cyclic_structures_terminate() -> None:
    left: list = [1]
    left.append(left)
    right: list = [1]
    right.append(right)
    assert deep_equal(left, right)


def test_describe_arrays() -> None:
    assert describe(np.array([1, 2], dtype=np.int64)) == "array([1, 2], dtype=int64)"
