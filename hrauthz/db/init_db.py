from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from hrauthz.db.base import Base
from hrauthz.db.session import SessionLocal, engine
from hrauthz.models.hr import Department, Employee, Task


def init_db(seed: bool = True) -> None:
    """
    Create tables and, when `seed` is set, insert the demo company.

    Seeding is deterministic (fixed ids in insertion order) and only happens
    on an empty database.
    """

    Base.metadata.create_all(bind=engine)

    if not seed:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        _seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Department.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    # Departments
    hr = Department(name="Human Resources", code="HR", description="HR Department")
    it = Department(name="Information Technology", code="IT", description="IT Department")
    fin = Department(name="Finance", code="FIN", description="Finance Department")
    db.add_all([hr, it, fin])
    db.flush()

    support = Department(name="IT Support", code="IT-SUP", description="Helpdesk", parent_id=it.id)
    db.add(support)
    db.flush()

    # One of each role; the Employee rows span two departments.
    owner = Employee(
        employee_id="E-0001",
        first_name="Olivia",
        last_name="Owner",
        email="olivia.owner@example.com",
        role="Owner",
        department_id=hr.id,
        position="Founder",
        salary=200000.00,
        hire_date=date(2019, 1, 7),
    )
    admin = Employee(
        employee_id="E-1000",
        first_name="Adam",
        last_name="Admin",
        email="adam.admin@example.com",
        role="Admin",
        department_id=it.id,
        position="IT Manager",
        salary=140000.00,
        hire_date=date(2020, 3, 2),
    )
    ed = Employee(
        employee_id="E-1001",
        first_name="Ed",
        last_name="Engineer",
        email="ed.engineer@example.com",
        role="Employee",
        department_id=it.id,
        position="Software Engineer",
        salary=120000.00,
        hire_date=date(2022, 6, 1),
    )
    ivy = Employee(
        employee_id="E-1002",
        first_name="Ivy",
        last_name="IT",
        email="ivy.it@example.com",
        role="Employee",
        department_id=it.id,
        position="IT Analyst",
        salary=85000.00,
        hire_date=date(2023, 2, 15),
    )
    fran = Employee(
        employee_id="E-2001",
        first_name="Fran",
        last_name="Finance",
        email="fran.finance@example.com",
        role="Employee",
        department_id=fin.id,
        position="Accountant",
        salary=90000.00,
        hire_date=date(2021, 9, 10),
    )
    db.add_all([owner, admin, ed, ivy, fran])
    db.flush()

    db.add_all(
        [
            Task(
                title="Rotate service credentials",
                status="in_progress",
                assignee_id=ed.id,
                department_id=it.id,
                due_date=date(2026, 11, 1),
            ),
            Task(
                title="Laptop inventory",
                status="todo",
                assignee_id=ivy.id,
                department_id=it.id,
                due_date=date(2026, 11, 15),
            ),
            Task(
                title="Quarter close",
                status="todo",
                assignee_id=fran.id,
                department_id=fin.id,
                due_date=date(2026, 12, 31),
            ),
        ]
    )

    db.commit()
