from ilaw.models.settings import SystemSetting
from tests.conftest import auth_headers

URL = "/api/admin/system-settings"

REGISTRATION = {
    "email": "lea@example.com",
    "username": "lea",
    "password": "Mabuhay#2025",
    "firstName": "Lea",
    "lastName": "Santos",
    "role": "STUDENT",
}


def test_defaults_come_from_environment(client, db, admin):
    res = client.get(URL, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["settings"] == {
        "maintenanceMode": False,
        "allowNewRegistrations": True,
        "autoApproveStudents": False,
        "autoApproveTeachers": False,
        "requireStrongPasswords": True,
    }
    assert db.query(SystemSetting).count() == 1


def test_only_admin_can_manage_settings(client, teacher, student):
    assert client.get(URL, headers=auth_headers(teacher)).status_code == 403
    res = client.put(URL, json={"maintenanceMode": True}, headers=auth_headers(student))
    assert res.status_code == 403


def test_partial_update_keeps_other_values(client, admin):
    res = client.put(URL, json={"autoApproveTeachers": True}, headers=auth_headers(admin))
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "System settings saved successfully"
    assert body["settings"]["autoApproveTeachers"] is True
    assert body["settings"]["allowNewRegistrations"] is True


def test_closing_registrations(client, admin):
    client.put(URL, json={"allowNewRegistrations": False}, headers=auth_headers(admin))
    res = client.post("/api/auth/register", json=REGISTRATION)
    assert res.status_code == 403


def test_auto_approved_student_gets_token(client, admin):
    client.put(URL, json={"autoApproveStudents": True}, headers=auth_headers(admin))
    res = client.post("/api/auth/register", json=REGISTRATION)
    assert res.status_code == 201
    data = res.json()
    assert data["requiresApproval"] is False
    assert data["user"]["approvalStatus"] == "approved"
    assert data["token"]


def test_weak_password_allowed_when_not_required(client, admin):
    client.put(URL, json={"requireStrongPasswords": False}, headers=auth_headers(admin))
    res = client.post("/api/auth/register", json={**REGISTRATION, "password": "password"})
    assert res.status_code == 201


def test_maintenance_status_is_public(client, admin):
    assert client.get("/api/system/maintenance-status").json()["maintenanceMode"] is False
    client.put(URL, json={"maintenanceMode": True}, headers=auth_headers(admin))
    res = client.get("/api/system/maintenance-status")
    assert res.status_code == 200
    assert res.json() == {"success": True, "maintenanceMode": True}
