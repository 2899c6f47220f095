from fastapi import APIRouter, Depends, status

from learntrack.bootstrap import get_auth_service
from learntrack.schemas.auth_schemas import (
    AuthResponse,
    GuestAuthResponse,
    LoginRequest,
    RegisterRequest,
    VerifyResponse,
)
from learntrack.schemas.user_schemas import User
from learntrack.services.auth_service import AuthService
from learntrack.utils.auth import get_current_user

auth_routes = APIRouter()


@auth_routes.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
def register(request: RegisterRequest, auth: AuthService = Depends(get_auth_service)) -> AuthResponse:
    """Create an account and return a session token."""
    result = auth.register(request.email, request.name, request.password)
    return AuthResponse(message="User registered successfully", user=result.user.public(), token=result.token)


@auth_routes.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> AuthResponse:
    result = auth.login(request.email, request.password)
    return AuthResponse(message="Login successful", user=result.user.public(), token=result.token)


@auth_routes.post("/guest", response_model=GuestAuthResponse)
def guest_login(auth: AuthService = Depends(get_auth_service)) -> GuestAuthResponse:
    """Sign in as the shared demo account with a short-lived token."""
    result = auth.guest_login()
    return GuestAuthResponse(message="Guest login successful", user=result.user.public(), token=result.token)


@auth_routes.get("/verify", response_model=VerifyResponse)
def verify(current_user: User = Depends(get_current_user)) -> VerifyResponse:
    return VerifyResponse(valid=True, user=current_user.public())
