"""Array arithmetic over trees whose leaves are JAX arrays or scalars."""

from __future__ import annotations

from typing import Any

import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, jaxtyped

from .errors import StructuralMismatchError
from .tree import tree_map, tree_reduce, tree_zip_reduce, tree_zip_with


@beartype
def tree_add(left: Any, right: Any) -> Any:
    """Leafwise ``left + right``; the result has the left tree's shape."""

    return tree_zip_with(left, right, jnp.add)


@beartype
def tree_sub(left: Any, right: Any) -> Any:
    """Leafwise ``left - right``; the result has the left tree's shape."""

    return tree_zip_with(left, right, jnp.subtract)


@beartype
def tree_scale(tree: Any, scalar: Any) -> Any:
    return tree_map(tree, lambda leaf: jnp.multiply(leaf, scalar))


@jaxtyped(typechecker=beartype)
def tree_vdot(left: Any, right: Any) -> Array:
    """Sum of ``jnp.vdot`` over corresponding leaves."""

    return tree_zip_reduce(
        left,
        right,
        jnp.zeros(()),
        lambda x, y, total: total + jnp.vdot(jnp.asarray(x), jnp.asarray(y)),
    )


@jaxtyped(typechecker=beartype)
def tree_sum(tree: Any) -> Array:
    """Sum of every element of every leaf."""

    return tree_reduce(tree, jnp.zeros(()), lambda leaf, total: total + jnp.sum(leaf))


@beartype
def tree_allclose(
    left: Any,
    right: Any,
    *,
    rtol: float = 1e-5,
    atol: float = 1e-8,
) -> bool:
    """Return True if every leaf pair is ``jnp.allclose``.

    Trees that cannot be zipped compare unequal instead of raising.
    """

    try:
        return tree_zip_reduce(
            left,
            right,
            True,
            lambda x, y, same: same
            and bool(
                jnp.allclose(jnp.asarray(x), jnp.asarray(y), rtol=rtol, atol=atol)
            ),
        )
    except StructuralMismatchError:
        return False


__all__ = [
    "tree_add",
    "tree_allclose",
    "tree_scale",
    "tree_sub",
    "tree_vdot",
    "tree_sum",
]
