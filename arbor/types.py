"""Result contracts returned by the non-raising zip entry points."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .errors import StructuralMismatchError


@dataclass(frozen=True)
class ZipOutcome:
    """Either a zipped value or the structural mismatch that prevented it."""

    value: Any = None
    error: Optional[StructuralMismatchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return ``value``, raising the stored mismatch if there is one."""

        if self.error is not None:
            raise self.error
        return self.value


__all__ = ["ZipOutcome"]
