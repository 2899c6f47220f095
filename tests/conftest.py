"""
Pytest configuration and shared fixtures for the test suite.
Ensures the project root is importable, points logging at a temp dir, and
provides in-memory stores, an in-memory SQLite session and service fixtures.
"""
import os
import sys
import tempfile
from pathlib import Path

# Must be set before learntrack is imported: settings and logging read them at import.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-suite-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "learntrack-test-logs"))

import pytest
from sqlalchemy.orm import sessionmaker

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from learntrack.config import Base, Settings, build_engine  # noqa: E402
from learntrack.services.auth_service import AuthService  # noqa: E402
from learntrack.services.progress_service import ProgressService  # noqa: E402
from learntrack.stores.memory import InMemoryCredentialStore, InMemoryProgressStore  # noqa: E402

TEST_SECRET = "unit-test-secret"


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", jwt_secret=TEST_SECRET, database_url="sqlite://")


# ----- In-memory doubles -----
@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def memory_progress_store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture
def auth_service(credential_store, settings) -> AuthService:
    return AuthService(credential_store, settings)


@pytest.fixture
def progress_service(memory_progress_store) -> ProgressService:
    return ProgressService(memory_progress_store)


# ----- In-memory DB (for tests that exercise the SQL stores) -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine with the schema applied."""
    import learntrack.models  # noqa: F401

    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(in_memory_engine):
    SessionLocal = sessionmaker(bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def db_user(db_session):
    """A persisted learner row so progress rows satisfy the users foreign key."""
    from learntrack.models.models import User

    user = User(email="learner@kenbright.com", name="Learner", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
