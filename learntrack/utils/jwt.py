from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError
from jose.jwt import decode, encode
from pydantic import ValidationError as PydanticValidationError

from learntrack.errors import Unauthorized
from learntrack.schemas.auth_schemas import AuthTokenPayload
from learntrack.utils.logger import configure_logging

logger = configure_logging()

# bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its bcrypt hash (constant-time inside bcrypt)."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("password check failed: unusable hash or oversized password")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def build_token_payload(user_id: int, email: str, expires_in: timedelta, guest: bool = False) -> AuthTokenPayload:
    now = datetime.now(timezone.utc)
    return AuthTokenPayload(sub=str(user_id), email=email, iat=now, exp=now + expires_in, guest=guest)


def create_access_token(data: AuthTokenPayload, secret_key: str, algorithm: str = "HS256") -> str:
    """Create a signed JWT; python-jose converts the iat/exp datetimes to epoch seconds."""
    return encode(data.model_dump(), secret_key, algorithm=algorithm)


def decode_access_token(token: Optional[str], secret_key: str, algorithm: str = "HS256") -> AuthTokenPayload:
    """Verify signature and expiry. Anything short of a valid, unexpired token is Unauthorized."""
    if not token:
        raise Unauthorized("No token provided")
    try:
        payload = decode(token, secret_key, algorithms=[algorithm])
        return AuthTokenPayload(**payload)
    except JWTError as e:
        logger.warning("token rejected: %s", e)
        raise Unauthorized("Invalid token") from e
    except (PydanticValidationError, TypeError) as e:
        logger.warning("token rejected: unexpected claims")
        raise Unauthorized("Invalid token") from e
