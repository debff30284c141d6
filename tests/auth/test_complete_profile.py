"""
Tests for two-step onboarding: basic registration followed by profile completion.
"""
from datetime import date, timedelta

from dabetai.users.models import User, DiabetesType, Gender


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_basic_registration_then_profile_completion(client, db, identity_payload, medical_payload):
    response = client.post("/auth/register/basic", json=identity_payload)
    assert response.status_code == 201
    registered = response.json()
    assert registered["user"]["role"] == "PATIENT"
    assert registered["user"]["isProfileComplete"] is False

    response = client.patch(
        "/auth/complete-profile",
        json=medical_payload,
        headers=bearer(registered["access_token"])
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" not in data
    user = data["user"]
    assert user["id"] == registered["user"]["id"]
    assert user["diabetesType"] == "TYPE_2"
    assert user["isProfileComplete"] is True
    assert all("password" not in key.lower() for key in user)

    stored = db.query(User).filter(User.id == user["id"]).one()
    assert stored.diabetes_type == DiabetesType.TYPE_2
    assert stored.diagnosis_year == 2020
    assert stored.has_hypertension is False
    assert stored.birth_date == date(1990, 3, 20)
    assert stored.gender == Gender.FEMALE
    assert stored.height == 165
    assert stored.weight == 70.5


def test_profile_completion_keeps_the_existing_token_valid(client, identity_payload, medical_payload):
    token = client.post("/auth/register/basic", json=identity_payload).json()["access_token"]
    client.patch("/auth/complete-profile", json=medical_payload, headers=bearer(token))

    response = client.get("/auth/profile", headers=bearer(token))
    assert response.status_code == 200


def test_optional_extras_are_stored(client, db, patient, patient_headers, medical_payload):
    body = {**medical_payload, "currentMedications": "Metformin", "emergencyPhone": "555-0100"}
    response = client.patch("/auth/complete-profile", json=body, headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["user"]["currentMedications"] == "Metformin"

    db.refresh(patient)
    assert patient.emergency_phone == "555-0100"


def test_completion_requires_a_token(client, medical_payload):
    response = client.patch("/auth/complete-profile", json=medical_payload)
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_completion_rejects_a_forged_token(client, medical_payload):
    response = client.patch("/auth/complete-profile", json=medical_payload, headers=bearer("not.a.token"))
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid token"}


def test_completion_rejects_an_expired_token(client, patient, tokens, medical_payload):
    from dabetai.users.projections import to_claims

    token = tokens.sign(to_claims(patient), expires_delta=timedelta(seconds=-1))
    response = client.patch("/auth/complete-profile", json=medical_payload, headers=bearer(token))
    assert response.status_code == 401
    assert response.json() == {"detail": "Token has expired"}


def test_completion_for_a_removed_account_is_not_found(client, db, patient, patient_headers, medical_payload):
    patient_id = patient.id
    db.delete(patient)
    db.commit()

    response = client.patch("/auth/complete-profile", json=medical_payload, headers=patient_headers)
    assert response.status_code == 404
    assert patient_id in response.json()["detail"]


def test_completion_validates_medical_fields(client, patient_headers, medical_payload):
    response = client.patch(
        "/auth/complete-profile",
        json={**medical_payload, "height": 300},
        headers=patient_headers
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "height"


def test_completion_rejects_mody(client, patient_headers, medical_payload):
    response = client.patch(
        "/auth/complete-profile",
        json={**medical_payload, "diabetesType": "MODY"},
        headers=patient_headers
    )
    assert response.status_code == 400


def test_completion_cannot_change_email(client, patient_headers, medical_payload):
    response = client.patch(
        "/auth/complete-profile",
        json={**medical_payload, "email": "other@x.com"},
        headers=patient_headers
    )
    assert response.status_code == 400
