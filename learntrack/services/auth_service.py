"""
Account registration, login, guest access and bearer-token verification.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from learntrack.config import Settings
from learntrack.errors import Conflict, NotFound, Unauthorized, ValidationError
from learntrack.schemas.user_schemas import User
from learntrack.stores.base import CredentialStore
from learntrack.utils.common import normalize_email
from learntrack.utils.jwt import (
    BCRYPT_MAX_BYTES,
    build_token_payload,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from learntrack.utils.logger import configure_logging

logger = configure_logging()

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthResult:
    user: User
    token: str
    is_guest: bool = False


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthService:
    """Issues and checks HS256 bearer tokens for accounts held in a CredentialStore."""

    def __init__(self, credentials: CredentialStore, settings: Settings):
        self.credentials = credentials
        self.settings = settings

    def _issue(self, user: User, expires_in: timedelta, guest: bool = False) -> str:
        payload = build_token_payload(user.id, user.email, expires_in, guest=guest)
        return create_access_token(payload, self.settings.signing_key, self.settings.jwt_algorithm)

    def register(self, email: Optional[str], name: Optional[str], password: Optional[str]) -> AuthResult:
        if _blank(email) or _blank(name) or not password:
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        try:
            validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError("Invalid email address", details={"email": str(e)}) from e

        # No pre-check: the store's unique constraint raises Conflict, race-free.
        user = self.credentials.create(normalize_email(email), name.strip(), get_password_hash(password))
        logger.info("user registered user_id=%s", user.id)
        return AuthResult(user=user, token=self._issue(user, timedelta(days=self.settings.token_expire_days)))

    def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        if _blank(email) or not password:
            raise ValidationError("Email and password are required")
        user = self.credentials.find_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("login rejected")
            raise Unauthorized("Invalid credentials")
        logger.info("user logged in user_id=%s", user.id)
        return AuthResult(user=user, token=self._issue(user, timedelta(days=self.settings.token_expire_days)))

    def guest_login(self) -> AuthResult:
        user = self.credentials.find_by_email(self.settings.demo_email)
        if user is None:
            logger.error("guest login failed: demo account %s missing", self.settings.demo_email)
            raise NotFound("Demo account not available")
        token = self._issue(user, timedelta(days=self.settings.guest_token_expire_days), guest=True)
        logger.info("guest login user_id=%s", user.id)
        return AuthResult(user=user, token=token, is_guest=True)

    def verify(self, token: Optional[str]) -> User:
        payload = decode_access_token(token, self.settings.signing_key, self.settings.jwt_algorithm)
        try:
            user_id = int(payload.sub)
        except ValueError as e:
            raise Unauthorized("Invalid token") from e
        user = self.credentials.find_by_id(user_id)
        if user is None:
            raise Unauthorized("User not found")
        return user

    def seed_demo_user(self) -> User:
        """Create the guest/demo account if it does not exist yet. Safe to call on every startup."""
        existing = self.credentials.find_by_email(self.settings.demo_email)
        if existing is not None:
            return existing
        password = self.settings.demo_password.get_secret_value()
        try:
            user = self.credentials.create(
                self.settings.demo_email, self.settings.demo_name, get_password_hash(password)
            )
        except Conflict:
            # Another worker seeded it first.
            return self.credentials.find_by_email(self.settings.demo_email)
        logger.info("demo user created user_id=%s", user.id)
        return user
