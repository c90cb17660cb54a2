from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrauthz.db.session import get_db
from hrauthz.models.hr import Employee
from hrauthz.policy import AccessPolicy, Role, in_scope
from hrauthz.schemas.hr import EmployeeCreate, EmployeeOut, EmployeeUpdate
from hrauthz.schemas.security import MeOut
from hrauthz.security.context import AuthzContext
from hrauthz.security.dependencies import get_access_policy, get_authz, get_current_user

router = APIRouter(tags=["employees"])


@router.get("/me", response_model=MeOut)
def me(
    user: Employee = Depends(get_current_user),
    authz: AuthzContext = Depends(get_authz),
    policy: AccessPolicy = Depends(get_access_policy),
) -> MeOut:
    return MeOut(
        employee=EmployeeOut.model_validate(user),
        role=user.role,
        scope=authz.scope.value,
        permissions=policy.permission_map(user.role),
    )


@router.get("/employees", response_model=list[EmployeeOut])
def list_employees(db: Session = Depends(get_db)) -> list[Employee]:
    # Scope filters are applied transparently via hrauthz/db/filters.py.
    return list(db.scalars(select(Employee).order_by(Employee.id)).all())


@router.get("/employees/{id}", response_model=EmployeeOut)
def get_employee(id: int, db: Session = Depends(get_db)) -> Employee:
    return _get_or_404(db, id)


@router.post("/employees", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)) -> Employee:
    if Role.parse(payload.role) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown role {payload.role!r}. Expected one of: {[r.value for r in Role]}",
        )

    employee = Employee(**payload.model_dump())
    db.add(employee)
    _commit(db)
    db.refresh(employee)
    return employee


@router.patch("/employees/{id}", response_model=EmployeeOut)
def update_employee(
    id: int,
    payload: EmployeeUpdate,
    authz: AuthzContext = Depends(get_authz),
    db: Session = Depends(get_db),
) -> Employee:
    employee = _get_or_404(db, id)
    changes = payload.model_dump(exclude_unset=True)

    # Callers may only move employees to a department they can see.
    if "department_id" in changes:
        moved = {"id": employee.id, "department_id": changes["department_id"]}
        if not in_scope(moved, authz.scope, authz.caller, owner_key="id"):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Target department is outside your visibility scope")

    for field, value in changes.items():
        setattr(employee, field, value)
    _commit(db)
    db.refresh(employee)
    return employee


@router.delete("/employees/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(id: int, db: Session = Depends(get_db)) -> Response:
    employee = _get_or_404(db, id)
    db.delete(employee)
    _commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _get_or_404(db: Session, id: int) -> Employee:
    employee = db.scalars(select(Employee).where(Employee.id == id)).first()
    if employee is None:
        # Employees outside the caller's scope look the same as missing ones.
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return employee


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Employee conflicts with an existing record") from exc
