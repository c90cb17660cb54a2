from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from hrauthz.db.session import get_db
from hrauthz.models.hr import Employee, Task
from hrauthz.policy import in_scope
from hrauthz.schemas.hr import TaskCreate, TaskOut, TaskUpdate
from hrauthz.security.context import AuthzContext
from hrauthz.security.dependencies import get_authz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[TaskOut])
def list_tasks(db: Session = Depends(get_db)) -> list[Task]:
    return list(db.scalars(select(Task).order_by(Task.id)).all())


@router.get("/my-tasks", response_model=list[TaskOut])
def my_tasks(authz: AuthzContext = Depends(get_authz), db: Session = Depends(get_db)) -> list[Task]:
    stmt = select(Task).where(Task.assignee_id == authz.user_id).order_by(Task.id)
    return list(db.scalars(stmt).all())


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    authz: AuthzContext = Depends(get_authz),
    db: Session = Depends(get_db),
) -> Task:
    data = payload.model_dump()

    # Assignees come from a scoped query: out-of-scope employees look missing.
    if data["assignee_id"] is not None:
        assignee = db.scalars(select(Employee).where(Employee.id == data["assignee_id"])).first()
        if assignee is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignee not found")

    if data["department_id"] is None:
        data["department_id"] = authz.department_id

    # Callers may only create tasks they would be able to see afterwards.
    if not in_scope(data, authz.scope, authz.caller, owner_key="assignee_id"):
        logger.info("Task outside caller scope user_id=%s department_id=%s", authz.user_id, data["department_id"])
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Task is outside your visibility scope")

    task = Task(**data)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.patch("/{id}", response_model=TaskOut)
def update_task(id: int, payload: TaskUpdate, db: Session = Depends(get_db)) -> Task:
    task = db.scalars(select(Task).where(Task.id == id)).first()
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, field, value)
    db.commit()
    db.refresh(task)
    return task
