"""
Wiring: per-request stores and services for FastAPI ``Depends``, plus the
startup seeding of the demo account.
"""

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker

from learntrack.config import Settings, get_app_settings, get_db
from learntrack.services.auth_service import AuthService
from learntrack.services.progress_service import ProgressService
from learntrack.stores.base import CredentialStore, ProgressStore
from learntrack.stores.credential_store import SqlCredentialStore
from learntrack.stores.progress_store import SqlProgressStore
from learntrack.utils.logger import configure_logging, log_operation

logger = configure_logging()


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return SqlCredentialStore(db)


def get_progress_store(db: Session = Depends(get_db)) -> ProgressStore:
    return SqlProgressStore(db)


def get_auth_service(
    credentials: CredentialStore = Depends(get_credential_store),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(credentials, settings)


def get_progress_service(store: ProgressStore = Depends(get_progress_store)) -> ProgressService:
    return ProgressService(store)


def seed_demo_user(session_factory: sessionmaker, settings: Settings) -> None:
    db = session_factory()
    try:
        with log_operation(logger, "seed demo user"):
            AuthService(SqlCredentialStore(db), settings).seed_demo_user()
    finally:
        db.close()
