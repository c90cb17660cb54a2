"""
Tests for transparent scope filtering of ORM selects.

Rows are inserted without an AuthzContext, then the context is bound to the
same session and plain `select(...)` queries are checked.
"""
from __future__ import annotations

import pytest
from sqlalchemy import select

from hrauthz.db.session import bind_authz
from hrauthz.models.hr import Department, Employee, Task
from hrauthz.policy import Scope, get_scope
from hrauthz.security.context import AuthzContext


@pytest.fixture
def company(db_session):
    it = Department(name="IT", code="IT")
    fin = Department(name="Finance", code="FIN")
    db_session.add_all([it, fin])
    db_session.flush()

    ed = Employee(employee_id="E-1", first_name="Ed", last_name="E", email="ed@x.com", role="Employee", department_id=it.id)
    ivy = Employee(employee_id="E-2", first_name="Ivy", last_name="I", email="ivy@x.com", role="Employee", department_id=it.id)
    fran = Employee(employee_id="E-3", first_name="Fran", last_name="F", email="fran@x.com", role="Employee", department_id=fin.id)
    db_session.add_all([ed, ivy, fran])
    db_session.flush()

    # Ed owns a task that was filed under Finance.
    db_session.add_all(
        [
            Task(title="ed-it", assignee_id=ed.id, department_id=it.id),
            Task(title="ivy-it", assignee_id=ivy.id, department_id=it.id),
            Task(title="ed-fin", assignee_id=ed.id, department_id=fin.id),
            Task(title="fran-fin", assignee_id=fran.id, department_id=fin.id),
        ]
    )
    db_session.commit()
    return {"it": it.id, "fin": fin.id, "ed": ed.id, "ivy": ivy.id, "fran": fran.id}


def _authz(user_id, department_id, scope, scoped=True):
    return AuthzContext(user_id=user_id, department_id=department_id, role="Employee", scope=scope, scoped=scoped)


def test_no_context_means_no_filtering(db_session, company):
    assert len(db_session.scalars(select(Employee)).all()) == 3
    assert len(db_session.scalars(select(Task)).all()) == 4


def test_global_scope_sees_everything(db_session, company):
    bind_authz(db_session, _authz(company["fran"], company["fin"], Scope.GLOBAL))
    assert len(db_session.scalars(select(Employee)).all()) == 3
    assert len(db_session.scalars(select(Task)).all()) == 4


def test_department_scope(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], get_scope("Admin")))
    names = {e.first_name for e in db_session.scalars(select(Employee)).all()}
    assert names == {"Ed", "Ivy"}
    titles = {t.title for t in db_session.scalars(select(Task)).all()}
    assert titles == {"ed-it", "ivy-it"}


def test_self_and_department_scope_is_union(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], get_scope("Employee")))
    titles = {t.title for t in db_session.scalars(select(Task)).all()}
    assert titles == {"ed-it", "ivy-it", "ed-fin"}


def test_self_and_department_without_department(db_session, company):
    bind_authz(db_session, _authz(company["ed"], None, Scope.SELF_AND_DEPARTMENT))
    assert [e.first_name for e in db_session.scalars(select(Employee)).all()] == ["Ed"]
    titles = {t.title for t in db_session.scalars(select(Task)).all()}
    assert titles == {"ed-it", "ed-fin"}


def test_department_scope_without_department_sees_nothing(db_session, company):
    bind_authz(db_session, _authz(company["ed"], None, Scope.DEPARTMENT))
    assert db_session.scalars(select(Employee)).all() == []


def test_none_scope_sees_nothing(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], get_scope("unknown-role")))
    assert db_session.scalars(select(Employee)).all() == []
    assert db_session.scalars(select(Task)).all() == []


def test_unscoped_request_is_not_filtered(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], Scope.NONE, scoped=False))
    assert len(db_session.scalars(select(Task)).all()) == 4


def test_departments_are_never_filtered(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], Scope.NONE))
    assert len(db_session.scalars(select(Department)).all()) == 2


def test_clearing_the_context_restores_full_view(db_session, company):
    bind_authz(db_session, _authz(company["ed"], company["it"], Scope.NONE))
    bind_authz(db_session, None)
    assert "authz" not in db_session.info
    assert len(db_session.scalars(select(Employee)).all()) == 3
