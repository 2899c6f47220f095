"""
Runtime configuration and database plumbing.

Settings come from environment variables (optionally a local .env file). The
engine and session factory are built explicitly by the app factory and kept on
``app.state``; nothing here opens a connection at import time.
"""

import json
import secrets
from functools import lru_cache
from typing import Annotated, Literal, Optional

from dotenv import load_dotenv
from fastapi import Request
from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from learntrack.utils.logger import configure_logging

load_dotenv()
logger = configure_logging()

Base = declarative_base()

DEFAULT_ORIGINS = [
    "http://localhost:5500",
    "http://127.0.0.1:5500",
    "http://localhost:3000",
    "http://localhost:8000",
]


class Settings(BaseSettings):
    """Application settings. Every field maps to the upper-cased env var of the same name."""

    model_config = SettingsConfigDict(extra="ignore")

    environment: Literal["development", "production", "test"] = "development"
    database_url: str = "sqlite:///./learntrack.db"

    jwt_secret: Optional[SecretStr] = None
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 30
    guest_token_expire_days: int = 1

    # ALLOWED_ORIGINS: comma-separated or a JSON list.
    allowed_origins: Annotated[list[str], NoDecode] = DEFAULT_ORIGINS

    seed_demo_user: bool = True
    demo_email: str = "demo@kenbright.com"
    demo_name: str = "Demo User"
    demo_password: SecretStr = SecretStr("demo123")

    static_dir: Optional[str] = None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value):
        if isinstance(value, str):
            text = value.strip()
            value = json.loads(text) if text.startswith("[") else text.split(",")
        return [str(o).strip() for o in value if str(o).strip()]

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.jwt_secret is None or not self.jwt_secret.get_secret_value():
            if self.environment == "production":
                raise ValueError("JWT_SECRET must be set when ENVIRONMENT=production")
            # Tokens signed with this key do not survive a restart.
            logger.warning("JWT_SECRET not set; using an ephemeral signing key (environment=%s)", self.environment)
            self.jwt_secret = SecretStr(secrets.token_urlsafe(32))
        return self

    @property
    def signing_key(self) -> str:
        if self.jwt_secret is None:
            raise RuntimeError("JWT signing key is not configured")
        return self.jwt_secret.get_secret_value()

    @property
    def cors_origins(self) -> list[str]:
        return list(self.allowed_origins)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections are shared across threads, in-memory ones across sessions."""
    kwargs: dict = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_db(engine: Engine) -> None:
    # Table classes must be registered on Base before create_all.
    import learntrack.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured url=%s", engine.url.render_as_string(hide_password=True))


def reset_db(engine: Engine) -> None:
    import learntrack.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    logger.warning("Database dropped url=%s", engine.url.render_as_string(hide_password=True))
    create_db(engine)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
