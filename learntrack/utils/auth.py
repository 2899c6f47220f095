from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from learntrack.bootstrap import get_auth_service
from learntrack.schemas.user_schemas import User
from learntrack.services.auth_service import AuthService

# auto_error=False: a missing header must surface as our own 401 body, not FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> Optional[str]:
    return credentials.credentials if credentials else None


def get_current_user(
    token: Optional[str] = Depends(bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """Resolve the Authorization: Bearer token to a user or raise Unauthorized (401)."""
    return auth.verify(token)
