from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from learntrack.schemas.user_schemas import PublicUser


# Fields are optional on the wire so AuthService owns the "missing field" message.
class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    user: PublicUser
    token: str


class GuestAuthResponse(AuthResponse):
    model_config = ConfigDict(populate_by_name=True)

    is_guest: bool = Field(True, alias="isGuest")


class VerifyResponse(BaseModel):
    valid: bool
    user: PublicUser


class AuthTokenPayload(BaseModel):
    sub: str  # user id
    email: str
    iat: Optional[datetime] = None
    exp: Optional[datetime] = None
    guest: bool = False
