"""Tests for the dashboard page guard (cookie-driven redirects)."""

import json
from urllib.parse import quote

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hrauthz.security.auth import parse_user_cookie
from hrauthz.security.config import SecurityConfig, SecurityConfigModel
from hrauthz.security.guard import DashboardGuardMiddleware


def _app(**guard) -> FastAPI:
    app = FastAPI()
    app.add_middleware(DashboardGuardMiddleware)
    app.state.security_config = SecurityConfig(
        SecurityConfigModel.model_validate(
            {"guard": {"role_landing": {"Employee": "/dashboard/tasks/my-tasks"}, **guard}}
        )
    )

    @app.get("/dashboard")
    def dashboard():
        return {"page": "dashboard"}

    @app.get("/dashboard/tasks")
    def dashboard_tasks():
        return {"page": "tasks"}

    @app.get("/public")
    def public():
        return {"page": "public"}

    return app


def _user_cookie(role) -> str:
    return quote(json.dumps({"id": 3, "role": role}))


@pytest.fixture
def client():
    return TestClient(_app(), follow_redirects=False)


def test_employee_on_dashboard_root_goes_to_my_tasks(client):
    client.cookies.set("user", _user_cookie("Employee"))
    resp = client.get("/dashboard")
    assert resp.status_code == 307
    assert resp.headers["location"] == "/dashboard/tasks/my-tasks"


def test_employee_elsewhere_in_dashboard_is_not_redirected(client):
    client.cookies.set("user", _user_cookie("Employee"))
    assert client.get("/dashboard/tasks").status_code == 200


@pytest.mark.parametrize("role", ["Owner", "Admin", "Intern", None, 5])
def test_other_roles_stay_on_dashboard(client, role):
    client.cookies.set("user", _user_cookie(role))
    resp = client.get("/dashboard")
    assert resp.status_code == 200
    assert resp.json() == {"page": "dashboard"}


def test_malformed_cookie_is_ignored(client):
    client.cookies.set("user", "%7Bnot-json")
    assert client.get("/dashboard").status_code == 200


def test_auth_cookie_required_when_enabled():
    client = TestClient(_app(require_auth_cookie=True), follow_redirects=False)
    resp = client.get("/dashboard/tasks")
    assert resp.status_code == 307
    assert resp.headers["location"] == "/login?callbackUrl=%2Fdashboard%2Ftasks"

    # Paths outside the protected prefix are untouched.
    assert client.get("/public").status_code == 200

    client.cookies.set("auth", "1")
    assert client.get("/dashboard/tasks").status_code == 200


def test_no_config_means_pass_through():
    app = _app()
    del app.state.security_config
    client = TestClient(app, follow_redirects=False)
    client.cookies.set("user", _user_cookie("Employee"))
    assert client.get("/dashboard").status_code == 200


def test_parse_user_cookie():
    assert parse_user_cookie(_user_cookie("Admin")) == {"id": 3, "role": "Admin"}
    assert parse_user_cookie(None) is None
    assert parse_user_cookie("") is None
    assert parse_user_cookie("%5B1%2C2%5D") is None  # a JSON list, not an object
    assert parse_user_cookie("garbage") is None
