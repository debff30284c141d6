"""
User Repository - create/read/update access to the identity record collection.

Every persistence call the services make goes through ``UserRepository``.
Storage-level failures are translated into the application exception taxonomy
here, so nothing above this layer sees a raw SQLAlchemy error.
"""
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from ..exceptions import ConflictException, EmailAlreadyExistsException, ResourceNotFoundException
from .models import User, UserRole, doctor_patients

# Set up logging
logger = logging.getLogger(__name__)

ROLE_LABELS = {
    UserRole.USER: "User",
    UserRole.ADMIN: "Admin",
    UserRole.DOCTOR: "Doctor",
    UserRole.PATIENT: "Patient",
}


class UserRepository:
    """
    Repository over the ``users`` table.

    Args:
        db: Database session owned by the caller
    """
    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> User:
        """
        Insert a new identity record.

        The email unique constraint is the authoritative duplicate check: a
        concurrent insert that slipped past a caller's pre-check lands here.

        Raises:
            ValueError: If no password hash was supplied
            EmailAlreadyExistsException: If the email is already registered
        """
        if not fields.get("password_hash"):
            raise ValueError("password_hash is required for every account")

        user = User(**fields)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Insert rejected by unique constraint for email {fields.get('email')}")
            raise EmailAlreadyExistsException()
        self.db.refresh(user)
        logger.info(f"User {user.id} created with role {user.role.value}")
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str, role: Optional[UserRole] = None) -> Optional[User]:
        """Look up a record by id; a role mismatch counts as absent."""
        query = self.db.query(User).filter(User.id == user_id)
        if role is not None:
            query = query.filter(User.role == role)
        return query.first()

    def get_by_id(self, user_id: str, role: Optional[UserRole] = None) -> User:
        """
        Same as ``find_by_id`` but raises when nothing matches.

        Raises:
            ResourceNotFoundException: If no record (of that role) has this id
        """
        user = self.find_by_id(user_id, role)
        if user is None:
            label = ROLE_LABELS.get(role, "User")
            raise ResourceNotFoundException(f"{label} with ID {user_id} not found")
        return user

    def update(self, user_id: str, role: Optional[UserRole] = None, **fields: Any) -> User:
        """
        Overwrite the supplied fields of an existing record.

        Password changes must arrive already hashed as ``password_hash``.
        """
        user = self.get_by_id(user_id, role)
        for field, value in fields.items():
            if not hasattr(User, field):
                raise ValueError(f"Unknown user field: {field}")
            setattr(user, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Update of user {user_id} rejected by a constraint")
            raise ConflictException("Update conflicts with existing data")
        self.db.refresh(user)
        logger.info(f"User {user_id} updated: {sorted(f for f in fields if f != 'password_hash')}")
        return user

    def deactivate(self, user_id: str, role: Optional[UserRole] = None) -> User:
        """Soft delete. Calling it on an inactive record is a no-op."""
        user = self.get_by_id(user_id, role)
        if user.is_active:
            user.is_active = False
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"User {user_id} deactivated")
        return user

    def delete(self, user_id: str) -> None:
        """
        Hard delete, used only by the admin user-management endpoints.

        The instance is unusable afterwards; project it before calling this.
        """
        user = self.get_by_id(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info(f"User {user_id} deleted")

    def list_by_role(self, role: UserRole, is_active: Optional[bool] = None) -> List[User]:
        query = self.db.query(User).filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        return query.order_by(User.created_at, User.email).all()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at, User.email).all()

    def count(self, **filters: Any) -> int:
        """Count records whose columns equal the given values."""
        return (
            self.db.query(func.count(User.id))
            .filter(*self._conditions(filters))
            .scalar()
        )

    def group_by_count(self, field: str, **filters: Any) -> Dict[Any, int]:
        """Map each distinct value of ``field`` to the number of matching records."""
        column = getattr(User, field)
        rows = (
            self.db.query(column, func.count(User.id))
            .filter(*self._conditions(filters))
            .group_by(column)
            .all()
        )
        return {value: total for value, total in rows}

    def find_doctors_by_specialty(self, specialty: str) -> List[User]:
        """Active doctors whose specialty contains the given text, ignoring case."""
        pattern = specialty.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return (
            self.db.query(User)
            .filter(
                User.role == UserRole.DOCTOR,
                User.is_active.is_(True),
                User.specialty.ilike(f"%{pattern}%", escape="\\")
            )
            .order_by(User.last_name, User.first_name)
            .all()
        )

    def assign_patient(self, doctor_id: str, patient_id: str) -> User:
        """Link a patient to a doctor. Re-assigning an existing pair changes nothing."""
        doctor = self.get_by_id(doctor_id, UserRole.DOCTOR)
        patient = self.get_by_id(patient_id, UserRole.PATIENT)
        if patient not in doctor.patients:
            doctor.patients.append(patient)
            self.db.commit()
            logger.info(f"Patient {patient_id} assigned to doctor {doctor_id}")
        return patient

    def unassign_patient(self, doctor_id: str, patient_id: str) -> None:
        doctor = self.get_by_id(doctor_id, UserRole.DOCTOR)
        patient = self.find_by_id(patient_id, UserRole.PATIENT)
        if patient is None or patient not in doctor.patients:
            raise ResourceNotFoundException(
                f"Patient with ID {patient_id} is not assigned to doctor {doctor_id}"
            )
        doctor.patients.remove(patient)
        self.db.commit()
        logger.info(f"Patient {patient_id} unassigned from doctor {doctor_id}")

    def list_patients_for_doctor(self, doctor_id: str, is_active: Optional[bool] = True) -> List[User]:
        self.get_by_id(doctor_id, UserRole.DOCTOR)
        query = (
            self.db.query(User)
            .join(doctor_patients, doctor_patients.c.patient_id == User.id)
            .filter(doctor_patients.c.doctor_id == doctor_id, User.role == UserRole.PATIENT)
        )
        if is_active is not None:
            query = query.filter(User.is_active == is_active)
        return query.order_by(User.last_name, User.first_name).all()

    @staticmethod
    def _conditions(filters: Dict[str, Any]) -> list:
        return [getattr(User, name) == value for name, value in filters.items()]
