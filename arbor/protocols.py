"""Structural protocols for container capabilities."""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar

Acc = TypeVar("Acc")

TraverseFn = Callable[[Any, Any], tuple[Any, Any]]
ReduceFn = Callable[[Any, Any], Any]


class ContainerCapability(Protocol):
    """Minimal contract the tree engine needs to recurse into a container.

    Children are always visited in the container's canonical order:
    positional for sequences, ascending key order for mappings.
    """

    def traverse(self, container: Any, acc: Acc, fun: TraverseFn) -> tuple[Any, Acc]:
        """Map-with-accumulator over immediate children.

        ``fun(child, acc)`` returns ``(new_child, acc)``. The rebuilt
        container has the same type, arity and keys as ``container``.
        """

    def reduce(self, container: Any, acc: Acc, fun: ReduceFn) -> Acc:
        """Fold ``fun(child, acc)`` over immediate children."""


__all__ = ["Acc", "ContainerCapability", "ReduceFn", "TraverseFn"]
