"""Tests for the container capability registry and built-in adapters."""

from collections import OrderedDict, namedtuple
from dataclasses import dataclass, field

import jax.numpy as jnp
import pytest

import arbor.containers as containers
from arbor import (
    capability_for,
    is_container,
    is_leaf,
    register_container,
    register_dataclass,
    register_namedtuple,
    tree_leaves,
    tree_map,
    unregister_container,
)


@pytest.fixture
def isolated_registry(monkeypatch):
    monkeypatch.setattr(
        containers,
        "_CONTAINER_CAPABILITIES",
        dict(containers._CONTAINER_CAPABILITIES),
    )


class Box:
    def __init__(self, items):
        self.items = items


class BoxCapability:
    """Visits a Box's items in reverse order."""

    def traverse(self, container, acc, fun):
        items = []
        for item in reversed(container.items):
            item, acc = fun(item, acc)
            items.append(item)
        return Box(list(reversed(items))), acc

    def reduce(self, container, acc, fun):
        for item in reversed(container.items):
            acc = fun(item, acc)
        return acc


def test_builtin_container_types_are_registered():
    registered = containers.available_container_types()

    assert list in registered
    assert tuple in registered
    assert dict in registered


def test_classification_uses_exact_runtime_type():
    Point = namedtuple("Point", ["x", "y"])

    assert is_container([1])
    assert is_container(())
    assert is_container({})
    assert is_leaf(1)
    assert is_leaf("abc")
    assert is_leaf(None)
    assert is_leaf(jnp.ones(3))
    assert is_leaf({1, 2})
    assert is_leaf(Point(1, 2))
    assert is_leaf(OrderedDict(a=1))
    assert capability_for(3) is None


def test_sorted_keys_orders_comparable_keys():
    assert containers.sorted_keys({"b": 0, "c": 0, "a": 0}) == ["a", "b", "c"]
    assert containers.sorted_keys({3: 0, 1: 0, 2: 0}) == [1, 2, 3]


def test_sorted_keys_falls_back_for_mixed_key_types():
    keys = containers.sorted_keys({"b": 0, 2: 0, "a": 0, 1.5: 0, None: 0})

    assert keys == [1.5, 2, "a", "b", None]


def test_mapping_capability_visits_ascending_keys_and_keeps_insertion_order():
    capability = capability_for({})
    rebuilt, seen = capability.traverse(
        {"b": 1, "a": 2},
        [],
        lambda value, acc: (value * 10, acc + [value]),
    )

    assert seen == [2, 1]
    assert rebuilt == {"b": 10, "a": 20}
    assert list(rebuilt) == ["b", "a"]


def test_tuple_capability_rebuilds_same_arity():
    capability = capability_for(())
    rebuilt, count = capability.traverse(
        (1, 2, 3), 0, lambda value, acc: (str(value), acc + 1)
    )

    assert rebuilt == ("1", "2", "3")
    assert type(rebuilt) is tuple
    assert count == 3


def test_sequence_capability_reduce_is_positional():
    capability = capability_for([])

    assert capability.reduce([1, 2, 3], [], lambda value, acc: acc + [value]) == [
        1,
        2,
        3,
    ]


def test_register_container_makes_custom_type_traversable(isolated_registry):
    register_container(Box, BoxCapability())

    box = Box([1, [2, 3]])
    mapped = tree_map(box, lambda x: x * 2)

    assert is_container(box)
    assert isinstance(mapped, Box)
    assert mapped.items == [2, [4, 6]]
    assert tree_leaves(box) == [2, 3, 1]


def test_register_container_rejects_duplicate_without_overwrite(isolated_registry):
    with pytest.raises(ValueError, match="already registered"):
        register_container(list, BoxCapability())


def test_register_container_overwrite_replaces_builtin(isolated_registry):
    register_container(list, BoxCapability(), overwrite=True)

    assert isinstance(capability_for([]), BoxCapability)


def test_register_container_rejects_non_type(isolated_registry):
    with pytest.raises(ValueError, match="must be a class"):
        register_container("list", BoxCapability())


def test_register_container_rejects_incomplete_capability(isolated_registry):
    class TraverseOnly:
        def traverse(self, container, acc, fun):
            return container, acc

    with pytest.raises(ValueError, match="'reduce'"):
        register_container(Box, TraverseOnly())


def test_unregister_container_turns_type_back_into_leaf(isolated_registry):
    register_container(Box, BoxCapability())
    unregister_container(Box)

    assert is_leaf(Box([1]))


def test_unregister_container_rejects_unknown_type(isolated_registry):
    with pytest.raises(ValueError, match="not registered"):
        unregister_container(Box)


def test_register_namedtuple_rebuilds_same_class(isolated_registry):
    Point = namedtuple("Point", ["x", "y"])
    assert register_namedtuple(Point) is Point

    moved = tree_map(Point(1, (2, 3)), lambda v: v + 1)

    assert moved == Point(2, (3, 4))
    assert type(moved) is Point


def test_register_namedtuple_rejects_plain_tuple(isolated_registry):
    with pytest.raises(ValueError, match="not a named tuple"):
        register_namedtuple(tuple)


def test_register_dataclass_visits_init_fields_in_declaration_order(
    isolated_registry,
):
    @register_dataclass
    @dataclass(frozen=True)
    class Params:
        weight: object
        bias: object
        label: str = field(default="layer", init=False)

    params = Params(weight=[1, 2], bias=3)
    doubled = tree_map(params, lambda v: v * 2)

    assert tree_leaves(params) == [1, 2, 3]
    assert doubled == Params(weight=[2, 4], bias=6)
    assert doubled.label == "layer"


def test_register_dataclass_rejects_non_dataclass(isolated_registry):
    with pytest.raises(ValueError, match="not a dataclass"):
        register_dataclass(Box)


def test_sorted_keys_places_nan_after_numbers_regardless_of_insertion():
    nan = float("nan")

    assert tree_leaves({nan: "n", 2: "two", 1: "one"}) == ["one", "two", "n"]
    assert tree_leaves({1: "one", 2: "two", nan: "n"}) == ["one", "two", "n"]
    assert tree_leaves({"a": "s", nan: "n", 1: "one"}) == ["one", "n", "s"]
