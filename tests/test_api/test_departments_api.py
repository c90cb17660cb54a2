"""HTTP tests for the decorator-protected department endpoints."""

OWNER, ADMIN, ED = 1, 2, 3
IT, FIN = 2, 3


def test_departments_require_auth(client):
    assert client.get("/departments").status_code == 401


def test_everyone_with_read_sees_the_directory(client, as_user):
    for caller in (OWNER, ADMIN, ED):
        resp = client.get("/departments", headers=as_user(caller))
        assert resp.status_code == 200
        codes = {d["code"] for d in resp.json()}
        assert {"HR", "IT", "FIN", "IT-SUP"} <= codes


def test_sub_department_points_at_parent(client, as_user):
    rows = client.get("/departments", headers=as_user(ED)).json()
    by_code = {d["code"]: d for d in rows}
    assert by_code["IT-SUP"]["parent_id"] == by_code["IT"]["id"]


def test_only_owner_creates_departments(client, as_user):
    payload = {"name": "Operations", "code": "OPS"}
    assert client.post("/departments", headers=as_user(ED), json=payload).status_code == 403
    assert client.post("/departments", headers=as_user(ADMIN), json=payload).status_code == 403

    created = client.post("/departments", headers=as_user(OWNER), json=payload)
    assert created.status_code == 201, created.text
    assert client.get(f"/departments/{created.json()['id']}", headers=as_user(ED)).status_code == 200

    assert client.post("/departments", headers=as_user(OWNER), json=payload).status_code == 409


def test_admin_creates_sub_departments_under_own_department(client, as_user):
    payload = {"name": "IT Networks", "code": "IT-NET", "parent_id": IT}
    assert client.post("/departments/sub", headers=as_user(ED), json=payload).status_code == 403

    created = client.post("/departments/sub", headers=as_user(ADMIN), json=payload)
    assert created.status_code == 201, created.text
    assert created.json()["parent_id"] == IT

    elsewhere = {"name": "FIN Payroll", "code": "FIN-PAY", "parent_id": FIN}
    assert client.post("/departments/sub", headers=as_user(ADMIN), json=elsewhere).status_code == 403


def test_owner_creates_sub_departments_anywhere(client, as_user):
    payload = {"name": "Payroll", "code": "FIN-PR", "parent_id": FIN}
    created = client.post("/departments/sub", headers=as_user(OWNER), json=payload)
    assert created.status_code == 201, created.text
    assert created.json()["parent_id"] == FIN


def test_sub_department_needs_a_known_parent(client, as_user):
    payload = {"name": "Ghost", "code": "GHOST", "parent_id": 999}
    assert client.post("/departments/sub", headers=as_user(OWNER), json=payload).status_code == 404

    missing = {"name": "Orphan", "code": "ORPH"}
    assert client.post("/departments/sub", headers=as_user(OWNER), json=missing).status_code == 422
