"""
Tests for the registration endpoints.
"""
import pytest
from datetime import date

from dabetai.core.audit_models import AuditLog
from dabetai.users.models import User, UserRole

REGISTRATION_PATHS = ("/auth/register", "/auth/register/basic", "/auth/register/patient")


def registration_body(path, identity_payload, medical_payload):
    if path == "/auth/register/patient":
        return {**identity_payload, **medical_payload}
    return identity_payload


def assert_no_password_fields(user):
    for key in user:
        assert "password" not in key.lower()


def test_register_creates_generic_user(client, identity_payload, tokens):
    response = client.post("/auth/register", json=identity_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["role"] == "USER"
    assert data["user"]["email"] == "a@x.com"
    assert data["user"]["secondLastName"] == "C"
    assert "isProfileComplete" not in data["user"]
    assert_no_password_fields(data["user"])

    claims = tokens.verify(data["access_token"])
    assert claims["sub"] == data["user"]["id"]
    assert claims["email"] == "a@x.com"
    assert claims["role"] == "USER"


def test_register_basic_creates_incomplete_patient(client, identity_payload):
    response = client.post("/auth/register/basic", json=identity_payload)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "PATIENT"
    assert user["isProfileComplete"] is False
    assert "diabetesType" not in user
    assert_no_password_fields(user)


def test_register_patient_stores_medical_profile(client, db, identity_payload, medical_payload):
    body = {**identity_payload, **medical_payload, "allergies": "Penicillin"}
    response = client.post("/auth/register/patient", json=body)
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["role"] == "PATIENT"
    assert user["diabetesType"] == "TYPE_2"
    assert user["birthDate"] == "1990-03-20"
    assert user["weight"] == 70.5
    assert user["allergies"] == "Penicillin"
    assert "isProfileComplete" not in user
    assert_no_password_fields(user)

    stored = db.query(User).filter(User.email == "a@x.com").one()
    assert stored.diagnosis_year == 2020
    assert stored.birth_date == date(1990, 3, 20)
    assert stored.has_hypertension is False


def test_password_is_stored_hashed(client, db, identity_payload, hasher):
    client.post("/auth/register", json=identity_payload)
    stored = db.query(User).filter(User.email == "a@x.com").one()
    assert stored.password_hash != "abcdef"
    assert hasher.verify("abcdef", stored.password_hash)


@pytest.mark.parametrize("first", REGISTRATION_PATHS)
@pytest.mark.parametrize("second", REGISTRATION_PATHS)
def test_duplicate_email_conflicts_on_every_entry_point(
    client, identity_payload, medical_payload, first, second
):
    assert client.post(first, json=registration_body(first, identity_payload, medical_payload)).status_code == 201

    response = client.post(second, json=registration_body(second, identity_payload, medical_payload))
    assert response.status_code == 409
    assert response.json() == {"detail": "User with this email already exists"}


def test_duplicate_against_admin_created_patient(client, create_user, identity_payload):
    create_user(email="a@x.com", role=UserRole.PATIENT)
    response = client.post("/auth/register/basic", json=identity_payload)
    assert response.status_code == 409


def test_short_password_is_rejected(client, identity_payload):
    response = client.post("/auth/register", json={**identity_payload, "password": "abc"})
    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Validation error"
    assert data["errors"][0]["field"] == "password"


def test_invalid_email_is_rejected(client, identity_payload):
    response = client.post("/auth/register", json={**identity_payload, "email": "not-an-email"})
    assert response.status_code == 400


@pytest.mark.parametrize("missing", ["firstName", "lastName", "secondLastName"])
def test_names_are_required(client, identity_payload, missing):
    body = dict(identity_payload)
    del body[missing]
    response = client.post("/auth/register/basic", json=body)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == missing


def test_unknown_fields_are_rejected(client, identity_payload):
    response = client.post("/auth/register", json={**identity_payload, "role": "ADMIN"})
    assert response.status_code == 400
    error = response.json()["errors"][0]
    assert error["field"] == "role"
    assert error["type"] == "extra_forbidden"


@pytest.mark.parametrize("field,value", [
    ("height", 49),
    ("height", 251),
    ("weight", 19.9),
    ("weight", 300.5),
    ("diagnosisYear", 1899),
    ("diagnosisYear", date.today().year + 1),
])
def test_out_of_range_medical_values_are_rejected(
    client, db, identity_payload, medical_payload, field, value
):
    body = {**identity_payload, **medical_payload, field: value}
    response = client.post("/auth/register/patient", json=body)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == field
    assert db.query(User).count() == 0


@pytest.mark.parametrize("field,value", [("height", 50), ("height", 250), ("weight", 20), ("weight", 300)])
def test_bounds_are_inclusive(client, identity_payload, medical_payload, field, value):
    body = {**identity_payload, **medical_payload, field: value}
    assert client.post("/auth/register/patient", json=body).status_code == 201


def test_mody_is_not_offered_at_registration(client, identity_payload, medical_payload):
    body = {**identity_payload, **medical_payload, "diabetesType": "MODY"}
    response = client.post("/auth/register/patient", json=body)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "diabetesType"


def test_registration_is_audited(client, db, identity_payload):
    client.post("/auth/register", json=identity_payload)
    client.post("/auth/register", json=identity_payload)

    actions = [entry.action for entry in db.query(AuditLog).order_by(AuditLog.id)]
    assert actions == ["REGISTRATION_SUCCESS", "REGISTRATION_FAILED_EMAIL_EXISTS"]
    for entry in db.query(AuditLog):
        assert "password" not in str(entry.details).lower()


def test_profile_returns_token_claims(client, identity_payload):
    token = client.post("/auth/register", json=identity_payload).json()["access_token"]
    response = client.get("/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "a@x.com"
    assert data["role"] == "USER"
    assert "userId" in data
