from __future__ import annotations

from dataclasses import dataclass

from hrauthz.policy import Caller, Scope


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    This is intentionally small so it can be attached to:
    - request.state (FastAPI request lifetime)
    - Session.info (SQLAlchemy session lifetime)
    """

    user_id: int
    department_id: int | None
    role: str

    # Visibility decision for this caller (from the access policy)
    scope: Scope
    # Whether list/read queries on this request get scope criteria
    scoped: bool

    @property
    def caller(self) -> Caller:
        return Caller(user_id=self.user_id, department_id=self.department_id)
