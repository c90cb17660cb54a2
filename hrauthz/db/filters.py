from __future__ import annotations

from sqlalchemy import event, or_
from sqlalchemy.orm import Session, with_loader_criteria

from hrauthz.policy import Scope


@event.listens_for(Session, "do_orm_execute")
def _apply_scope_filters(execute_state) -> None:
    """
    Transparent data scoping.

    This keeps query code in the routers unchanged:
        db.scalars(select(Employee)).all()
    still returns only the rows the caller's scope allows.
    """

    if not execute_state.is_select:
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.scoped:
        return

    scope = Scope.parse(authz.scope) or Scope.NONE
    if scope is Scope.GLOBAL:
        return

    # Local import to avoid cycles.
    from hrauthz.models.hr import Employee, Task  # noqa: WPS433 (local import)

    execute_state.statement = execute_state.statement.options(
        *_scope_criteria(scope, authz.user_id, authz.department_id, Employee, Task)
    )


def _scope_criteria(scope: Scope, user_id: int, dept_id: int | None, Employee, Task) -> list:
    # A caller without a department matches no department rows (never `IS NULL`).
    has_dept = dept_id is not None

    if scope is Scope.DEPARTMENT and has_dept:
        return [
            with_loader_criteria(Employee, lambda cls: cls.department_id == dept_id, include_aliases=True),
            with_loader_criteria(Task, lambda cls: cls.department_id == dept_id, include_aliases=True),
        ]

    if scope is Scope.SELF_AND_DEPARTMENT and has_dept:
        return [
            with_loader_criteria(
                Employee,
                lambda cls: or_(cls.id == user_id, cls.department_id == dept_id),
                include_aliases=True,
            ),
            with_loader_criteria(
                Task,
                lambda cls: or_(cls.assignee_id == user_id, cls.department_id == dept_id),
                include_aliases=True,
            ),
        ]

    if scope is Scope.SELF_AND_DEPARTMENT:
        return [
            with_loader_criteria(Employee, lambda cls: cls.id == user_id, include_aliases=True),
            with_loader_criteria(Task, lambda cls: cls.assignee_id == user_id, include_aliases=True),
        ]

    # Scope.NONE (or department scope without a department): no primary key is null.
    return [
        with_loader_criteria(Employee, lambda cls: cls.id.is_(None), include_aliases=True),
        with_loader_criteria(Task, lambda cls: cls.id.is_(None), include_aliases=True),
    ]
