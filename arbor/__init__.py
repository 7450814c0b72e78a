"""Arbor: generic traversal, reduction, and zipping of nested containers."""

from .containers import (
    DataclassCapability,
    MappingCapability,
    NamedTupleCapability,
    SequenceCapability,
    TupleCapability,
    available_container_types,
    capability_for,
    is_container,
    is_leaf,
    register_container,
    register_dataclass,
    register_namedtuple,
    unregister_container,
)
from .errors import ArborError, StructuralMismatchError
from .numeric import (
    tree_add,
    tree_allclose,
    tree_scale,
    tree_sub,
    tree_sum,
    tree_vdot,
)
from .protocols import ContainerCapability
from .tree import (
    tree_all,
    tree_any,
    tree_each,
    tree_flat_map,
    tree_flat_map_reduce,
    tree_is_empty,
    tree_leaves,
    tree_map,
    tree_map_reduce,
    tree_num_leaves,
    tree_reduce,
    tree_zip_reduce,
    tree_zip_reduce_result,
    tree_zip_with,
    tree_zip_with_result,
)
from .types import ZipOutcome

# Short names for the module-as-namespace style: ``arbor.map(tree, fn)``.
all = tree_all
any = tree_any
each = tree_each
flat_map = tree_flat_map
flat_map_reduce = tree_flat_map_reduce
is_empty = tree_is_empty
leaves = tree_leaves
map = tree_map
map_reduce = tree_map_reduce
reduce = tree_reduce
zip_reduce = tree_zip_reduce
zip_with = tree_zip_with

__all__ = [
    "ArborError",
    "ContainerCapability",
    "DataclassCapability",
    "MappingCapability",
    "NamedTupleCapability",
    "SequenceCapability",
    "StructuralMismatchError",
    "TupleCapability",
    "ZipOutcome",
    "all",
    "any",
    "available_container_types",
    "capability_for",
    "each",
    "flat_map",
    "flat_map_reduce",
    "is_container",
    "is_empty",
    "is_leaf",
    "leaves",
    "map",
    "map_reduce",
    "reduce",
    "register_container",
    "register_dataclass",
    "register_namedtuple",
    "tree_add",
    "tree_all",
    "tree_allclose",
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
    "tree_scale",
    "tree_sub",
    "tree_sum",
    "tree_vdot",
    "tree_zip_reduce",
    "tree_zip_reduce_result",
    "tree_zip_with",
    "tree_zip_with_result",
    "unregister_container",
    "zip_reduce",
    "zip_with",
]
