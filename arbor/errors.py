"""Structured error types for tree operations."""

from __future__ import annotations

from typing import Optional

MISMATCH_MESSAGE = (
    "left and right tree structures are not compatible and could not be zipped"
)


class ArborError(Exception):
    """Base class for arbor errors."""


class StructuralMismatchError(ArborError, ValueError):
    """Two trees could not be zipped leaf by leaf.

    ``left_count``/``right_count`` are the leaf (or, in strict mode, child)
    counts involved when the mismatch is a count mismatch, otherwise ``None``.
    """

    def __init__(
        self,
        reason: str,
        *,
        left_count: Optional[int] = None,
        right_count: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.left_count = left_count
        self.right_count = right_count
        super().__init__(f"{MISMATCH_MESSAGE}: {reason}")


__all__ = ["ArborError", "MISMATCH_MESSAGE", "StructuralMismatchError"]
