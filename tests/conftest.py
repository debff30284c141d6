"""
Test configuration for the dabetai backend.
"""
import os

# Settings are read at import time, so the environment must be ready first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dabetai.database import Base, get_db
from dabetai.main import app
from dabetai.auth.dependencies import get_password_hasher, get_token_issuer
from dabetai.core.security import PasswordHasher, TokenIssuer
from dabetai.users.models import UserRole
from dabetai.users.projections import to_claims
from dabetai.users.repository import UserRepository

TEST_SECRET_KEY = "test-secret-key"

# In-memory database shared by every connection of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenIssuer(secret_key=TEST_SECRET_KEY)


@pytest.fixture(scope="function")
def client(db, hasher, tokens):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_issuer] = lambda: tokens

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture
def create_user(db, hasher):
    """Insert an account directly through the repository."""
    def _create_user(email="user@x.com", password="secret123", role=UserRole.USER, **fields):
        return UserRepository(db).create(
            email=email,
            password_hash=hasher.hash(password),
            role=role,
            **fields
        )
    return _create_user


@pytest.fixture
def auth_headers(tokens):
    """Bearer header for a stored account."""
    def _auth_headers(user):
        return {"Authorization": f"Bearer {tokens.sign(to_claims(user))}"}
    return _auth_headers


@pytest.fixture
def admin(create_user):
    return create_user(
        email="admin@clinic.com", role=UserRole.ADMIN, first_name="Ada", last_name="Admin"
    )


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def patient(create_user):
    return create_user(
        email="patient@x.com",
        role=UserRole.PATIENT,
        first_name="Maria",
        last_name="Garcia",
        second_last_name="Lopez"
    )


@pytest.fixture
def patient_headers(patient, auth_headers):
    return auth_headers(patient)


@pytest.fixture
def identity_payload():
    return {
        "email": "a@x.com",
        "password": "abcdef",
        "firstName": "A",
        "lastName": "B",
        "secondLastName": "C",
    }


@pytest.fixture
def medical_payload():
    return {
        "diabetesType": "TYPE_2",
        "diagnosisYear": 2020,
        "hasHypertension": False,
        "birthDate": "1990-03-20",
        "gender": "FEMALE",
        "height": 165,
        "weight": 70.5,
    }
