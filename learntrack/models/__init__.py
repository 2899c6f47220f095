"""
Database entities. Single import surface for the ORM tables:

- User: registered accounts (including the seeded demo account)
- ModuleProgress: one row per (user, module)
- AssessmentResult: append-only quiz attempts
"""

from learntrack.models.models import (
    User,
    ModuleProgress,
    AssessmentResult,
)

__all__ = [
    "User",
    "ModuleProgress",
    "AssessmentResult",
]
