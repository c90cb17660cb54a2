from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrauthz.db.session import get_db
from hrauthz.models.hr import Department
from hrauthz.policy import in_scope
from hrauthz.schemas.hr import DepartmentCreate, DepartmentOut, SubDepartmentCreate
from hrauthz.security.context import AuthzContext
from hrauthz.security.decorators import require_permission
from hrauthz.security.dependencies import get_authz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("", response_model=list[DepartmentOut])
@require_permission("departments", "read")
def list_departments(db: Session = Depends(get_db)) -> list[Department]:
    # The department directory is not scoped: every role with read sees the org chart.
    return list(db.scalars(select(Department).order_by(Department.id)).all())


@router.get("/{id}", response_model=DepartmentOut)
@require_permission("departments", "read")
def get_department(id: int, db: Session = Depends(get_db)) -> Department:
    department = db.get(Department, id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


@router.post("", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
@require_permission("departments", "create")
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)) -> Department:
    return _save(db, Department(**payload.model_dump()))


@router.post("/sub", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
@require_permission("sub_departments", "create")
def create_sub_department(
    payload: SubDepartmentCreate,
    authz: AuthzContext = Depends(get_authz),
    db: Session = Depends(get_db),
) -> Department:
    if db.get(Department, payload.parent_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent department not found")

    # Sub-departments may only be nested under a department the caller can see.
    if not in_scope({"department_id": payload.parent_id}, authz.scope, authz.caller):
        logger.info("Parent department outside caller scope user_id=%s parent_id=%s", authz.user_id, payload.parent_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Parent department is outside your visibility scope")

    return _save(db, Department(**payload.model_dump()))


def _save(db: Session, department: Department) -> Department:
    db.add(department)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department name or code already exists") from exc
    db.refresh(department)
    return department
