from learntrack.services.auth_service import AuthResult, AuthService
from learntrack.services.progress_service import ProgressService

__all__ = ["AuthResult", "AuthService", "ProgressService"]
