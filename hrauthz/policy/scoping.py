"""In-memory application of a visibility Scope to a result set."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from .types import Scope

T = TypeVar("T")


@dataclass(frozen=True)
class Caller:
    """Who is asking: only the fields scope filtering needs."""

    user_id: int | str | None
    department_id: int | str | None


def _field(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def in_scope(
    record: Any,
    scope: Scope,
    caller: Caller,
    *,
    owner_key: str = "owner_id",
    department_key: str = "department_id",
) -> bool:
    """
    Return True if ``record`` is visible to ``caller`` under ``scope``.

    Records may be mappings or objects. A None id on either side never
    matches, so a caller without a department only sees their own records
    under ``self-and-department`` and nothing under ``department``.
    """

    scope = Scope.parse(scope) or Scope.NONE

    if scope is Scope.GLOBAL:
        return True
    if scope is Scope.NONE:
        return False

    same_department = caller.department_id is not None and _field(record, department_key) == caller.department_id
    if scope is Scope.DEPARTMENT:
        return same_department

    is_owner = caller.user_id is not None and _field(record, owner_key) == caller.user_id
    return is_owner or same_department


def apply_scope(
    records: Iterable[T],
    scope: Scope,
    caller: Caller,
    *,
    owner_key: str = "owner_id",
    department_key: str = "department_id",
) -> list[T]:
    """Filter ``records`` down to what ``caller`` may see. Order is preserved."""
    return [
        r
        for r in records
        if in_scope(r, scope, caller, owner_key=owner_key, department_key=department_key)
    ]
