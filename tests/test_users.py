"""
Tests for the admin user-management endpoints and the admin bootstrap.
"""
from dabetai.core.audit_models import AuditLog
from dabetai.core.bootstrap import admin_exists, create_bootstrap_admin, bootstrap_admin_if_needed
from dabetai.users.models import User, UserRole
from dabetai.users.schemas import CamelModel, StrictRequest


def test_non_admins_are_forbidden(client, patient_headers):
    response = client.get("/users", headers=patient_headers)
    assert response.status_code == 403
    assert response.json() == {"detail": "Access denied. Required roles: ['ADMIN']. Your role: PATIENT"}


def test_list_users(client, admin_headers, patient, create_user):
    create_user(email="doc@clinic.com", role=UserRole.DOCTOR)
    response = client.get("/users", headers=admin_headers)
    assert response.status_code == 200
    assert sorted(u["role"] for u in response.json()) == ["ADMIN", "DOCTOR", "PATIENT"]


def test_get_user_and_full_profile(client, admin_headers, patient):
    response = client.get(f"/users/{patient.id}", headers=admin_headers)
    assert response.status_code == 200
    assert set(response.json()) == {
        "id", "email", "firstName", "lastName", "role", "isActive", "createdAt", "updatedAt"
    }

    profile = client.get(f"/users/{patient.id}/profile", headers=admin_headers).json()
    assert profile["secondLastName"] == "Lopez"
    assert "diabetesType" in profile
    assert "medicalLicense" in profile
    assert all("password" not in key.lower() for key in profile)


def test_get_missing_user(client, admin_headers):
    response = client.get("/users/missing", headers=admin_headers)
    assert response.status_code == 404
    assert response.json() == {"detail": "User with ID missing not found"}


def test_update_user(client, admin_headers, patient):
    response = client.patch(
        f"/users/{patient.id}",
        json={"firstName": "Mariana", "password": "changed1", "isActive": False},
        headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["firstName"] == "Mariana"
    assert response.json()["isActive"] is False

    login = client.post("/auth/login", json={"email": patient.email, "password": "changed1"})
    assert login.json() == {"detail": "Account is deactivated"}


def test_update_user_cannot_change_role(client, admin_headers, patient):
    response = client.patch(f"/users/{patient.id}", json={"role": "ADMIN"}, headers=admin_headers)
    assert response.status_code == 400


def test_explicit_null_does_not_clear_active_flag(client, admin_headers, patient):
    response = client.patch(f"/users/{patient.id}", json={"isActive": None}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["isActive"] is True


def test_delete_user(client, db, admin_headers, patient):
    patient_id = patient.id
    response = client.delete(f"/users/{patient_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "patient@x.com"
    assert all("password" not in key.lower() for key in response.json())

    assert db.query(User).filter(User.id == patient_id).first() is None
    assert client.get(f"/users/{patient_id}", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_own_account(client, db, admin, admin_headers):
    admin_id = admin.id
    response = client.delete(f"/users/{admin_id}", headers=admin_headers)
    assert response.status_code == 409
    assert response.json() == {"detail": "Administrators cannot delete their own account"}

    db.expire_all()
    assert db.query(User).filter(User.id == admin_id).first() is not None
    assert db.query(AuditLog).filter(AuditLog.action == "USER_DELETED").count() == 0


def test_delete_user_is_audited(client, db, admin, admin_headers, patient):
    patient_id = patient.id
    response = client.delete(f"/users/{patient_id}", headers=admin_headers)

    entry = db.query(AuditLog).filter(AuditLog.action == "USER_DELETED").one()
    assert entry.user_id == admin.id
    assert entry.details["deleted_user_id"] == patient_id
    assert entry.request_id == response.headers["X-Request-ID"]


def test_audit_logs(client, admin, admin_headers):
    login = client.post("/auth/login", json={"email": "admin@clinic.com", "password": "secret123"})
    client.post("/auth/login", json={"email": "admin@clinic.com", "password": "wrong-one"})

    response = client.get("/users/audit-logs", headers=admin_headers)
    assert response.status_code == 200
    assert [e["action"] for e in response.json()] == ["LOGIN_FAILED_INVALID_CREDENTIALS", "LOGIN_SUCCESS"]

    filtered = client.get(
        "/users/audit-logs", params={"action": "LOGIN_SUCCESS", "userId": admin.id}, headers=admin_headers
    ).json()
    assert len(filtered) == 1
    assert filtered[0]["userId"] == admin.id
    assert filtered[0]["requestId"] == login.headers["X-Request-ID"]


def test_bootstrap_creates_first_admin(db, hasher):
    assert not admin_exists(db)
    assert create_bootstrap_admin(db, hasher, email="root@clinic.com", password="bootstrap1")
    assert admin_exists(db)

    admin = db.query(User).filter(User.email == "root@clinic.com").one()
    assert admin.role == UserRole.ADMIN
    assert hasher.verify("bootstrap1", admin.password_hash)


def test_bootstrap_skips_existing_email(db, hasher, create_user):
    create_user(email="root@clinic.com")
    assert not create_bootstrap_admin(db, hasher, email="root@clinic.com", password="bootstrap1")
    assert not admin_exists(db)


def test_bootstrap_is_a_noop_when_an_admin_exists(db, hasher, admin):
    bootstrap_admin_if_needed(db, hasher)
    assert db.query(User).filter(User.role == UserRole.ADMIN).count() == 1


def test_schema_bases_share_camel_case_config():
    assert CamelModel.model_config["alias_generator"]("first_name") == "firstName"
    assert CamelModel.model_config["from_attributes"] is True
    assert StrictRequest.model_config["extra"] == "forbid"
    assert StrictRequest.model_config["populate_by_name"] is True
