"""
API schemas package. Import from submodules or from this package.

Example:
    from learntrack.schemas import ProgressOverview, AuthResponse
    from learntrack.schemas.progress_schemas import ProgressRecord
"""

from learntrack.schemas.auth_schemas import (
    AuthResponse,
    AuthTokenPayload,
    GuestAuthResponse,
    LoginRequest,
    RegisterRequest,
    VerifyResponse,
)
from learntrack.schemas.user_schemas import PublicUser, User
from learntrack.schemas.progress_schemas import (
    AssessmentRecord,
    AssessmentRequest,
    AssessmentSavedResponse,
    MessageResponse,
    ProgressOverview,
    ProgressRecord,
    ProgressUpdateRequest,
)

__all__ = [
    # auth
    "AuthResponse",
    "AuthTokenPayload",
    "GuestAuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "VerifyResponse",
    # user
    "PublicUser",
    "User",
    # progress
    "AssessmentRecord",
    "AssessmentRequest",
    "AssessmentSavedResponse",
    "MessageResponse",
    "ProgressOverview",
    "ProgressRecord",
    "ProgressUpdateRequest",
]
