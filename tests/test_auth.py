from ilaw.models.user import User
from tests.conftest import PASSWORD, auth_headers

REGISTRATION = {
    "email": "Lea@Example.com",
    "username": "lea",
    "password": "Mabuhay#2025",
    "firstName": "Lea",
    "lastName": "Santos",
    "role": "STUDENT",
    "gradeLevel": "3",
}


def test_register_is_pending(client, db):
    res = client.post("/api/auth/register", json=REGISTRATION)
    assert res.status_code == 201
    data = res.json()
    assert data["requiresApproval"] is True
    assert data["token"] is None
    assert data["user"]["email"] == "lea@example.com"
    assert db.query(User).filter(User.username == "lea").one().approval_status == "pending"


def test_pending_user_cannot_login(client):
    client.post("/api/auth/register", json=REGISTRATION)
    res = client.post("/api/auth/login", json={"email": "lea@example.com", "password": "Mabuhay#2025"})
    assert res.status_code == 403


def test_register_rejects_weak_password(client):
    res = client.post("/api/auth/register", json={**REGISTRATION, "password": "password"})
    assert res.status_code == 400


def test_register_rejects_admin_role(client):
    res = client.post("/api/auth/register", json={**REGISTRATION, "role": "ADMIN"})
    assert res.status_code == 400


def test_register_rejects_duplicates(client):
    client.post("/api/auth/register", json=REGISTRATION)
    res = client.post("/api/auth/register", json={**REGISTRATION, "username": "lea2"})
    assert res.status_code == 400


def test_approved_user_logs_in(client, admin):
    client.post("/api/auth/register", json=REGISTRATION)
    pending = client.get("/api/students/pending", headers=auth_headers(admin)).json()
    assert [u["username"] for u in pending] == ["lea"]

    res = client.post(f"/api/students/{pending[0]['id']}/approve", headers=auth_headers(admin))
    assert res.json()["approvalStatus"] == "approved"

    res = client.post("/api/auth/login", json={"email": "lea@example.com", "password": "Mabuhay#2025"})
    assert res.status_code == 200
    token = res.json()["accessToken"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "lea"


def test_rejected_user_sees_reason(client, admin):
    user_id = client.post("/api/auth/register", json=REGISTRATION).json()["user"]["id"]
    client.post(f"/api/students/{user_id}/reject", json={"reason": "Unknown section"}, headers=auth_headers(admin))
    res = client.post("/api/auth/login", json={"email": "lea@example.com", "password": "Mabuhay#2025"})
    assert res.status_code == 403
    assert "Unknown section" in res.json()["detail"]


def test_wrong_password(client, student):
    res = client.post("/api/auth/login", json={"email": student.email, "password": "nope"})
    assert res.status_code == 401


def test_invalid_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401


def test_change_password(client, student):
    res = client.put(
        "/api/auth/me/password",
        json={"currentPassword": PASSWORD, "newPassword": "Bagong#Pass1"},
        headers=auth_headers(student),
    )
    assert res.status_code == 200
    res = client.post("/api/auth/login", json={"email": student.email, "password": "Bagong#Pass1"})
    assert res.status_code == 200


def test_only_admin_approves(client, teacher, student):
    res = client.post(f"/api/students/{student.id}/approve", headers=auth_headers(teacher))
    assert res.status_code == 403


def test_rejected_token_is_refused(client, admin, student):
    client.post(f"/api/students/{student.id}/reject", json={"reason": "Duplicate account"}, headers=auth_headers(admin))
    res = client.get("/api/auth/me", headers=auth_headers(student))
    assert res.status_code == 403
