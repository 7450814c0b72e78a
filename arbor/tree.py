"""Generic traversal, reduction and zipping over nested containers.

Every operation walks a tree by asking, at each node, whether a container
capability is registered for the node's type. Leaves get the caller's
function; containers are recursed into through their capability, so any mix
of registered container types nests to arbitrary depth. Recursion depth
equals nesting depth and is bounded by ``sys.getrecursionlimit()``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from beartype import beartype
from beartype.typing import Callable

from .containers import capability_for
from .errors import StructuralMismatchError
from .protocols import ReduceFn
from .types import ZipOutcome

logger = logging.getLogger(__name__)

MapFn = Callable[[Any], Any]
MapReduceFn = Callable[[Any, Any], Any]
PredicateFn = Callable[[Any], Any]
ZipFn = Callable[[Any, Any], Any]
ZipReduceFn = Callable[[Any, Any, Any], Any]


def _map(node, fun):
    capability = capability_for(node)
    if capability is None:
        return fun(node)
    mapped, _ = capability.traverse(
        node, None, lambda child, acc: (_map(child, fun), acc)
    )
    return mapped


def _map_reduce(node, acc, fun):
    capability = capability_for(node)
    if capability is None:
        return fun(node, acc)
    return capability.traverse(
        node, acc, lambda child, acc: _map_reduce(child, acc, fun)
    )


def _reduce(node, acc, fun):
    capability = capability_for(node)
    if capability is None:
        return fun(node, acc)
    return capability.reduce(node, acc, lambda child, acc: _reduce(child, acc, fun))


def _collect(node, out: list, fun) -> list:
    capability = capability_for(node)
    if capability is None:
        out.append(fun(node))
        return out
    return capability.reduce(node, out, lambda child, out: _collect(child, out, fun))


def _identity(leaf):
    return leaf


def _count(_leaf, total: int) -> int:
    return total + 1


@beartype
def tree_map(tree: Any, fun: MapFn) -> Any:
    """Replace every leaf with ``fun(leaf)``, keeping the container shape."""

    return _map(tree, fun)


@beartype
def tree_reduce(tree: Any, acc: Any, fun: ReduceFn) -> Any:
    """Fold ``fun(leaf, acc)`` over the leaves in canonical order."""

    return _reduce(tree, acc, fun)


@beartype
def tree_map_reduce(tree: Any, acc: Any, fun: MapReduceFn) -> tuple[Any, Any]:
    """Map and fold in one pass.

    ``fun(leaf, acc)`` returns ``(new_leaf, acc)``; the accumulator is
    threaded in the same order as :func:`tree_reduce`. Returns the mapped
    tree and the final accumulator.
    """

    return _map_reduce(tree, acc, fun)


@beartype
def tree_flat_map(tree: Any, fun: MapFn) -> list:
    """Return ``[fun(leaf) for leaf in tree_leaves(tree)]`` without the copy."""

    return _collect(tree, [], fun)


@beartype
def tree_flat_map_reduce(tree: Any, acc: Any, fun: MapReduceFn) -> tuple[list, Any]:
    """Flat counterpart of :func:`tree_map_reduce`."""

    def step(leaf, state):
        out, acc = state
        item, acc = fun(leaf, acc)
        out.append(item)
        return out, acc

    return _reduce(tree, ([], acc), step)


@beartype
def tree_leaves(tree: Any) -> list:
    """Return all leaves, depth-first, in canonical order."""

    return _collect(tree, [], _identity)


@beartype
def tree_num_leaves(tree: Any) -> int:
    return _reduce(tree, 0, _count)


@beartype
def tree_all(tree: Any, fun: Optional[PredicateFn] = None) -> bool:
    """Return True if ``fun`` (default: truthiness) holds for every leaf."""

    predicate = bool if fun is None else fun
    return all(predicate(leaf) for leaf in _collect(tree, [], _identity))


@beartype
def tree_any(tree: Any, fun: Optional[PredicateFn] = None) -> bool:
    """Return True if ``fun`` (default: truthiness) holds for some leaf."""

    predicate = bool if fun is None else fun
    return any(predicate(leaf) for leaf in _collect(tree, [], _identity))


@beartype
def tree_is_empty(tree: Any) -> bool:
    """Return True if the tree has no leaves, e.g. ``[({}, [])]``."""

    return _reduce(tree, 0, _count) == 0


@beartype
def tree_each(tree: Any, fun: MapFn) -> None:
    """Call ``fun`` on every leaf for its side effects."""

    def step(leaf, acc):
        fun(leaf)
        return acc

    _reduce(tree, None, step)


def _describe(value) -> str:
    kind = "leaf" if capability_for(value) is None else "container"
    return f"{kind} of type {type(value).__qualname__}"


def _mismatch(reason: str, **counts) -> StructuralMismatchError:
    logger.debug("zip aborted: %s", reason)
    return StructuralMismatchError(reason, **counts)


def _pair_kinds(left, right):
    """Return the capabilities of both roots, rejecting leaf/container pairs."""

    left_capability = capability_for(left)
    right_capability = capability_for(right)
    if (left_capability is None) != (right_capability is None):
        raise _mismatch(f"{_describe(left)} cannot be paired with {_describe(right)}")
    return left_capability, right_capability


def _too_few(left, available: int) -> StructuralMismatchError:
    left_count = _reduce(left, 0, _count)
    return _mismatch(
        f"left tree has {left_count} leaves but right tree has only {available}",
        left_count=left_count,
        right_count=available,
    )


def _check_consumed(consumed: int, available: int) -> None:
    if consumed != available:
        raise _mismatch(
            f"{available - consumed} right leaves left unpaired",
            left_count=consumed,
            right_count=available,
        )


def _zip_with_leaves(left, right, fun):
    left_capability, _ = _pair_kinds(left, right)
    if left_capability is None:
        return fun(left, right)

    # Only the right tree's leaf sequence matters from here on; the zipped
    # result follows the left tree's containers.
    right_leaves = _collect(right, [], _identity)

    def combine(leaf, position):
        if position >= len(right_leaves):
            raise _too_few(left, len(right_leaves))
        return fun(leaf, right_leaves[position]), position + 1

    zipped, consumed = _map_reduce(left, 0, combine)
    _check_consumed(consumed, len(right_leaves))
    return zipped


def _zip_reduce_leaves(left, right, acc, fun):
    left_capability, _ = _pair_kinds(left, right)
    if left_capability is None:
        return fun(left, right, acc)

    right_leaves = _collect(right, [], _identity)

    def combine(leaf, state):
        acc, position = state
        if position >= len(right_leaves):
            raise _too_few(left, len(right_leaves))
        return fun(leaf, right_leaves[position], acc), position + 1

    acc, consumed = _reduce(left, (acc, 0), combine)
    _check_consumed(consumed, len(right_leaves))
    return acc


def _append(child, out: list) -> list:
    out.append(child)
    return out


def _children(value, capability) -> list:
    return capability.reduce(value, [], _append)


def _zip_with_strict(left, right, fun):
    left_capability, right_capability = _pair_kinds(left, right)
    if left_capability is None:
        return fun(left, right)

    right_children = _children(right, right_capability)

    def pair(child, position):
        if position >= len(right_children):
            raise _mismatch(
                f"{_describe(left)} has more children than {_describe(right)}",
                left_count=left_capability.reduce(left, 0, _count),
                right_count=len(right_children),
            )
        return _zip_with_strict(child, right_children[position], fun), position + 1

    zipped, consumed = left_capability.traverse(left, 0, pair)
    if consumed != len(right_children):
        raise _mismatch(
            f"{_describe(right)} has more children than {_describe(left)}",
            left_count=consumed,
            right_count=len(right_children),
        )
    return zipped


def _zip_reduce_strict(left, right, acc, fun):
    left_capability, right_capability = _pair_kinds(left, right)
    if left_capability is None:
        return fun(left, right, acc)

    right_children = _children(right, right_capability)

    def pair(child, state):
        acc, position = state
        if position >= len(right_children):
            raise _mismatch(
                f"{_describe(left)} has more children than {_describe(right)}",
                left_count=left_capability.reduce(left, 0, _count),
                right_count=len(right_children),
            )
        acc = _zip_reduce_strict(child, right_children[position], acc, fun)
        return acc, position + 1

    acc, consumed = left_capability.reduce(left, (acc, 0), pair)
    if consumed != len(right_children):
        raise _mismatch(
            f"{_describe(right)} has more children than {_describe(left)}",
            left_count=consumed,
            right_count=len(right_children),
        )
    return acc


@beartype
def tree_zip_with(left: Any, right: Any, fun: ZipFn, *, strict: bool = False) -> Any:
    """Combine corresponding leaves of two trees with ``fun(left, right)``.

    The result has the left tree's shape and containers. By default only the
    leaf count and order must agree, so ``[[1, 2], 3]`` zips with
    ``[1, [2, 3]]``. With ``strict=True`` the trees are paired level by level
    and every leaf/container must line up, although container types may
    still differ (a tuple pairs with a list).

    Raises:
        StructuralMismatchError: the trees are incompatible. No partial
            result is produced.
    """

    if strict:
        return _zip_with_strict(left, right, fun)
    return _zip_with_leaves(left, right, fun)


@beartype
def tree_zip_reduce(
    left: Any,
    right: Any,
    acc: Any,
    fun: ZipReduceFn,
    *,
    strict: bool = False,
) -> Any:
    """Fold ``fun(left_leaf, right_leaf, acc)`` over corresponding leaves.

    Compatibility rules and errors are the same as :func:`tree_zip_with`.
    """

    if strict:
        return _zip_reduce_strict(left, right, acc, fun)
    return _zip_reduce_leaves(left, right, acc, fun)


class _CombinerMismatch(Exception):
    """Carries a mismatch raised by the caller's combiner past the engine."""

    def __init__(self, error: StructuralMismatchError) -> None:
        super().__init__(str(error))
        self.error = error


def _shielded(fun):
    def call(*args):
        try:
            return fun(*args)
        except StructuralMismatchError as err:
            raise _CombinerMismatch(err) from None

    return call


@beartype
def tree_zip_with_result(
    left: Any, right: Any, fun: ZipFn, *, strict: bool = False
) -> ZipOutcome:
    """Like :func:`tree_zip_with`, but report a mismatch instead of raising.

    Only mismatches between ``left`` and ``right`` are reported; anything
    ``fun`` raises, including its own ``StructuralMismatchError``, propagates.
    """

    try:
        return ZipOutcome(
            value=tree_zip_with(left, right, _shielded(fun), strict=strict)
        )
    except StructuralMismatchError as err:
        return ZipOutcome(error=err)
    except _CombinerMismatch as wrapped:
        raise wrapped.error


@beartype
def tree_zip_reduce_result(
    left: Any,
    right: Any,
    acc: Any,
    fun: ZipReduceFn,
    *,
    strict: bool = False,
) -> ZipOutcome:
    """Like :func:`tree_zip_reduce`, but report a mismatch instead of raising."""

    try:
        return ZipOutcome(
            value=tree_zip_reduce(left, right, acc, _shielded(fun), strict=strict)
        )
    except StructuralMismatchError as err:
        return ZipOutcome(error=err)
    except _CombinerMismatch as wrapped:
        raise wrapped.error


__all__ = [
    "tree_all",
    "tree_any",
    "tree_each",
    "tree_flat_map",
    "tree_flat_map_reduce",
    "tree_is_empty",
    "tree_leaves",
    "tree_map",
    "tree_map_reduce",
    "tree_num_leaves",
    "tree_reduce",
    "tree_zip_reduce",
    "tree_zip_reduce_result",
    "tree_zip_with",
    "tree_zip_with_result",
]
