"""
User Model - Single identity record for every actor on the platform.

Patients, doctors, admins and generic users all live in the ``users`` table and
are told apart by ``role``. Medical and professional columns are nullable and
only meaningful for the matching role.
"""
import enum
import uuid
from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Enum, Float, Integer, Text, JSON, ForeignKey, Table, func
)
from sqlalchemy.orm import relationship
from ..database import Base

class UserRole(str, enum.Enum):
    """
    Enumeration for user roles.

    Roles:
    - USER: Generic account created through the plain registration endpoint
    - ADMIN: Platform administrators
    - DOCTOR: Medical specialists following patients
    - PATIENT: People living with diabetes
    """
    USER = "USER"
    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    PATIENT = "PATIENT"

class DiabetesType(str, enum.Enum):
    """Diabetes classification stored on patient records."""
    TYPE_1 = "TYPE_1"
    TYPE_2 = "TYPE_2"
    GESTATIONAL = "GESTATIONAL"
    MODY = "MODY"

class Gender(str, enum.Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


def generate_user_id() -> str:
    return str(uuid.uuid4())


# Many-to-many between DOCTOR and PATIENT identity records
doctor_patients = Table(
    "doctor_patients",
    Base.metadata,
    Column("doctor_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("patient_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("assigned_at", DateTime(timezone=True), server_default=func.now()),
)


class User(Base):
    """
    User Model - Stores all identity information in the system

    Fields:
    - id: Opaque primary key (UUID string)
    - email: Unique email address used for login
    - password_hash: bcrypt hash of the password (never exposed)
    - role: USER, ADMIN, DOCTOR or PATIENT
    - first_name / last_name / second_last_name: Display names
    - is_active: False once the account has been soft-deleted
    - diabetes_type ... emergency_phone: Medical profile (patients)
    - medical_license ... bio: Professional profile (doctors)
    - created_at / updated_at: Maintained by the database
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_user_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    second_last_name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Medical profile
    diabetes_type = Column(Enum(DiabetesType), nullable=True)
    diagnosis_year = Column(Integer, nullable=True)
    has_hypertension = Column(Boolean, nullable=True)
    birth_date = Column(Date, nullable=True)
    gender = Column(Enum(Gender), nullable=True)
    height = Column(Float, nullable=True)  # cm
    weight = Column(Float, nullable=True)  # kg
    medical_history = Column(Text, nullable=True)
    current_medications = Column(Text, nullable=True)
    allergies = Column(Text, nullable=True)
    emergency_contact = Column(String, nullable=True)
    emergency_phone = Column(String, nullable=True)

    # Professional profile
    medical_license = Column(String, nullable=True)
    specialty = Column(String, nullable=True, index=True)
    specializations = Column(JSON, nullable=True)
    institution = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    patients = relationship(
        "User",
        secondary=doctor_patients,
        primaryjoin=id == doctor_patients.c.doctor_id,
        secondaryjoin=id == doctor_patients.c.patient_id,
        backref="doctors",
    )

    def __repr__(self):
        """String representation of the User model"""
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
