"""Field-level coalescing for frozen dataclass records."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import TypeVar

T = TypeVar("T")


def is_present(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def coalesce(existing: T, incoming: T, *, keep: tuple[str, ...] = ()) -> T:
    """Overlay `incoming` on `existing`: present values win, absent ones never overwrite.

    Field names in `keep` always retain the existing value.
    """
    updates = {}
    for f in fields(existing):
        if f.name in keep:
            continue
        value = getattr(incoming, f.name)
        if is_present(value):
            updates[f.name] = value
    return replace(existing, **updates)
