from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from learntrack.schemas.progress_schemas import AssessmentRecord, ProgressRecord
from learntrack.schemas.user_schemas import User


class CredentialStore(ABC):
    """
    Persistence contract for user accounts.

    Implementations must enforce email uniqueness themselves and raise
    ``Conflict`` on a duplicate; callers do not pre-check.
    """

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    def create(self, email: str, name: str, password_hash: str, role: str = "user") -> User:
        raise NotImplementedError


class ProgressStore(ABC):
    """
    Persistence contract for module progress and assessment results.

    ``upsert`` and ``complete`` are read-modify-write operations on a single
    (user_id, module_id) row and must be atomic with respect to concurrent
    writers of the same row.
    """

    @abstractmethod
    def get(self, user_id: int, module_id: int) -> Optional[ProgressRecord]:
        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[ProgressRecord]:
        """All records for the user, ordered by module_id ascending."""

        raise NotImplementedError

    @abstractmethod
    def upsert(
        self, user_id: int, module_id: int, progress: int, score: int, time_spent_delta: int
    ) -> Tuple[ProgressRecord, bool]:
        """
        Insert a fresh record, or merge into the existing one:
          progress = max, score = max, time_spent += delta,
          completed = progress >= 100, last_accessed = now.

        Returns the stored record and whether this call created it.
        """

        raise NotImplementedError

    @abstractmethod
    def complete(self, user_id: int, module_id: int, score: int) -> ProgressRecord:
        """Force the module to 100% / completed, keeping the best score."""

        raise NotImplementedError

    @abstractmethod
    def list_assessments(self, user_id: int, limit: int = 10) -> List[AssessmentRecord]:
        """Most recent attempts first."""

        raise NotImplementedError

    @abstractmethod
    def insert_assessment(
        self,
        user_id: int,
        module_id: int,
        score: int,
        total_questions: int,
        correct_answers: int,
        time_spent: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def record_assessment(
        self,
        user_id: int,
        module_id: int,
        score: int,
        total_questions: int,
        correct_answers: int,
        time_spent: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> int:
        """Append an attempt and complete its module. Returns the attempt id."""

        assessment_id = self.insert_assessment(
            user_id, module_id, score, total_questions, correct_answers, time_spent, feedback
        )
        self.complete(user_id, module_id, score)
        return assessment_id
