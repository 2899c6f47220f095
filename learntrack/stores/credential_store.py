from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from learntrack.errors import Conflict, StoreError
from learntrack.models.models import User as DbUser
from learntrack.schemas.user_schemas import User
from learntrack.stores.base import CredentialStore
from learntrack.utils.common import normalize_email
from learntrack.utils.logger import configure_logging

logger = configure_logging()


class SqlCredentialStore(CredentialStore):
    """Users table behind a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        try:
            row = self.db.query(DbUser).filter(DbUser.email == normalize_email(email)).first()
        except SQLAlchemyError as e:
            logger.exception("user lookup by email failed")
            raise StoreError("Failed to load user") from e
        return User.model_validate(row) if row else None

    def find_by_id(self, user_id: int) -> Optional[User]:
        try:
            row = self.db.query(DbUser).filter(DbUser.id == user_id).first()
        except SQLAlchemyError as e:
            logger.exception("user lookup by id failed user_id=%s", user_id)
            raise StoreError("Failed to load user") from e
        return User.model_validate(row) if row else None

    def create(self, email: str, name: str, password_hash: str, role: str = "user") -> User:
        row = DbUser(email=normalize_email(email), name=name, hashed_password=password_hash, role=role)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except IntegrityError as e:
            # The unique index on users.email is the source of truth for duplicates.
            self.db.rollback()
            raise Conflict("User already exists") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("user insert failed")
            raise StoreError("Failed to create user") from e
        return User.model_validate(row)
