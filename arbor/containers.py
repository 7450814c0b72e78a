"""Container capability registry and the built-in container adapters."""

from __future__ import annotations

import dataclasses
import logging
import numbers
from typing import Any, Optional

from .protocols import ContainerCapability, ReduceFn, TraverseFn

logger = logging.getLogger(__name__)


def _is_nan(key: Any) -> bool:
    return isinstance(key, numbers.Real) and key != key


def _mixed_key_rank(key: Any) -> tuple:
    if _is_nan(key):
        return (1, 0, "")
    if isinstance(key, numbers.Real):
        return (0, key, "")
    if isinstance(key, str):
        return (2, key, "")
    if isinstance(key, bytes):
        return (3, key, "")
    return (4, type(key).__qualname__, repr(key))


def sorted_keys(mapping) -> list:
    """Return mapping keys in canonical (ascending) order.

    Keys that cannot be compared with each other, or NaN keys (which
    compare false with everything), fall back to a stable ordering: numbers,
    NaN, strings, bytes, then everything else grouped by type name and
    ordered by ``repr``.
    """

    if any(_is_nan(key) for key in mapping):
        return sorted(mapping, key=_mixed_key_rank)
    try:
        return sorted(mapping)
    except TypeError:
        return sorted(mapping, key=_mixed_key_rank)


class SequenceCapability:
    """Lists: children are the elements in positional order."""

    def traverse(self, container, acc, fun: TraverseFn):
        children = []
        for child in container:
            child, acc = fun(child, acc)
            children.append(child)
        return children, acc

    def reduce(self, container, acc, fun: ReduceFn):
        for child in container:
            acc = fun(child, acc)
        return acc


class TupleCapability(SequenceCapability):
    """Tuples: positional slots, rebuilt with identical arity."""

    def traverse(self, container, acc, fun: TraverseFn):
        children, acc = super().traverse(container, acc, fun)
        return tuple(children), acc


class MappingCapability:
    """Dicts: children are the values, visited in ascending key order.

    ``fun`` never sees the keys. The rebuilt dict keeps the original key set
    and insertion order.
    """

    def traverse(self, container, acc, fun: TraverseFn):
        values = {}
        for key in sorted_keys(container):
            values[key], acc = fun(container[key], acc)
        return {key: values[key] for key in container}, acc

    def reduce(self, container, acc, fun: ReduceFn):
        for key in sorted_keys(container):
            acc = fun(container[key], acc)
        return acc


class NamedTupleCapability(SequenceCapability):
    """Named tuples of one class, rebuilt through ``_make``."""

    def __init__(self, cls: type):
        self.cls = cls

    def traverse(self, container, acc, fun: TraverseFn):
        children, acc = super().traverse(container, acc, fun)
        return self.cls._make(children), acc


class DataclassCapability:
    """Dataclass instances: ``init`` fields in declaration order."""

    def __init__(self, cls: type):
        self.cls = cls
        self.field_names = tuple(
            field.name for field in dataclasses.fields(cls) if field.init
        )

    def traverse(self, container, acc, fun: TraverseFn):
        changes = {}
        for name in self.field_names:
            changes[name], acc = fun(getattr(container, name), acc)
        return dataclasses.replace(container, **changes), acc

    def reduce(self, container, acc, fun: ReduceFn):
        for name in self.field_names:
            acc = fun(getattr(container, name), acc)
        return acc


# Exact-type registry; subclasses are leaves until registered themselves.
_CONTAINER_CAPABILITIES: dict[type, ContainerCapability] = {
    list: SequenceCapability(),
    tuple: TupleCapability(),
    dict: MappingCapability(),
}


def capability_for(value: Any) -> Optional[ContainerCapability]:
    """Return the capability registered for ``type(value)``, if any."""

    return _CONTAINER_CAPABILITIES.get(type(value))


def is_container(value: Any) -> bool:
    return type(value) in _CONTAINER_CAPABILITIES


def is_leaf(value: Any) -> bool:
    return type(value) not in _CONTAINER_CAPABILITIES


def available_container_types() -> tuple[type, ...]:
    """Return registered container types, sorted by qualified name."""

    return tuple(
        sorted(
            _CONTAINER_CAPABILITIES,
            key=lambda cls: (cls.__module__, cls.__qualname__),
        )
    )


def register_container(
    container_type: type,
    capability: ContainerCapability,
    *,
    overwrite: bool = False,
) -> None:
    """Register ``capability`` so values of ``container_type`` are recursed into."""

    if not isinstance(container_type, type):
        raise ValueError(
            f"container_type must be a class, received {container_type!r}"
        )
    for method in ("traverse", "reduce"):
        if not callable(getattr(capability, method, None)):
            raise ValueError(f"capability must define a callable '{method}' method")
    if (container_type in _CONTAINER_CAPABILITIES) and (not overwrite):
        raise ValueError(
            f"container type '{container_type.__qualname__}' is already registered; "
            "pass overwrite=True to replace it"
        )
    _CONTAINER_CAPABILITIES[container_type] = capability
    logger.debug(
        "registered container capability %s for %s",
        type(capability).__name__,
        container_type.__qualname__,
    )


def unregister_container(container_type: type) -> None:
    """Remove a registration; values of ``container_type`` become leaves."""

    if container_type not in _CONTAINER_CAPABILITIES:
        raise ValueError(f"container type {container_type!r} is not registered")
    del _CONTAINER_CAPABILITIES[container_type]
    logger.debug("unregistered container type %s", container_type.__qualname__)


def register_namedtuple(cls: type, *, overwrite: bool = False) -> type:
    """Treat instances of the named tuple class ``cls`` as containers."""

    is_namedtuple = (
        isinstance(cls, type) and issubclass(cls, tuple) and hasattr(cls, "_make")
    )
    if not is_namedtuple:
        raise ValueError(f"{cls!r} is not a named tuple class")
    register_container(cls, NamedTupleCapability(cls), overwrite=overwrite)
    return cls


def register_dataclass(cls: type, *, overwrite: bool = False) -> type:
    """Treat instances of the dataclass ``cls`` as containers."""

    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise ValueError(f"{cls!r} is not a dataclass type")
    register_container(cls, DataclassCapability(cls), overwrite=overwrite)
    return cls


__all__ = [
    "DataclassCapability",
    "MappingCapability",
    "NamedTupleCapability",
    "SequenceCapability",
    "TupleCapability",
    "available_container_types",
    "capability_for",
    "is_container",
    "is_leaf",
    "register_container",
    "register_dataclass",
    "register_namedtuple",
    "sorted_keys",
    "unregister_container",
]
