from __future__ import annotations

from pydantic import BaseModel

from hrauthz.schemas.hr import EmployeeOut


class MeOut(BaseModel):
    """Caller profile plus what the access policy lets them do and see."""

    employee: EmployeeOut
    role: str
    scope: str
    permissions: dict[str, list[str]]
