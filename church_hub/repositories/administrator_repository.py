"""
Data access layer for Administrator model.
"""

from sqlalchemy.orm import Session, undefer

from church_hub.db.models import Administrator


class AdministratorRepository:
    """Repository for Administrator data access operations."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, administrator_id: int) -> Administrator | None:
        return self.db.get(Administrator, administrator_id)

    def get_by_subject(self, subject_id: str) -> Administrator | None:
        return (
            self.db.query(Administrator)
            .filter(Administrator.external_subject_id == subject_id)
            .first()
        )

    def get_by_email(self, email: str) -> Administrator | None:
        return (
            self.db.query(Administrator)
            .filter(Administrator.email == email.strip().lower())
            .first()
        )

    def get_with_password(self, email: str) -> Administrator | None:
        """Fetch by email with the password hash loaded."""
        return (
            self.db.query(Administrator)
            .options(undefer(Administrator.password_hash))
            .filter(Administrator.email == email.strip().lower())
            .first()
        )

    def create(self, administrator_data: dict) -> Administrator:
        administrator = Administrator(**administrator_data)
        self.db.add(administrator)
        self.db.flush()
        return administrator
