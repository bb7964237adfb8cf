"""Schema compatibility checks between two registrations of the same tool."""
from __future__ import annotations

from typing import List, Optional

from .schemas import SchemaShape


def detect_breaking_changes(
    old_shape: Optional[SchemaShape],
    new_shape: Optional[SchemaShape],
) -> List[str]:
    """Describe changes that would reject input the old schema accepted.

    Only top-level fields are compared. If either shape is unknown nothing is
    reported.
    """

    if old_shape is None or new_shape is None:
        return []

    changes: List[str] = []
    for name, field in new_shape.items():
        if name not in old_shape and not field.optional:
            changes.append(f"added required field: {name}")

    for name in old_shape:
        if name not in new_shape:
            changes.append(f"removed field: {name}")

    return changes


__all__ = ["detect_breaking_changes"]
