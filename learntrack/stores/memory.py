"""
In-memory stores for tests and local experiments.

They honour the same contracts as the SQL stores, including email uniqueness
and atomic row merges (a single lock guards each store).
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple

from learntrack.errors import Conflict
from learntrack.schemas.progress_schemas import AssessmentRecord, ProgressRecord
from learntrack.schemas.user_schemas import User
from learntrack.stores.base import CredentialStore, ProgressStore
from learntrack.utils.common import normalize_email, utcnow


class InMemoryCredentialStore(CredentialStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._next_id = 1

    def find_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy()
        return None

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def create(self, email: str, name: str, password_hash: str, role: str = "user") -> User:
        email = normalize_email(email)
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise Conflict("User already exists")
            user = User(
                id=self._next_id,
                email=email,
                name=name,
                role=role,
                hashed_password=password_hash,
                created_at=utcnow(),
            )
            self._users[user.id] = user
            self._next_id += 1
            return user.model_copy()


class InMemoryProgressStore(ProgressStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._progress: Dict[Tuple[int, int], ProgressRecord] = {}
        self._assessments: List[AssessmentRecord] = []

    def get(self, user_id: int, module_id: int) -> Optional[ProgressRecord]:
        with self._lock:
            record = self._progress.get((user_id, module_id))
            return record.model_copy() if record else None

    def list_for_user(self, user_id: int) -> List[ProgressRecord]:
        with self._lock:
            records = [r.model_copy() for (uid, _), r in self._progress.items() if uid == user_id]
        return sorted(records, key=lambda r: r.module_id)

    def upsert(
        self, user_id: int, module_id: int, progress: int, score: int, time_spent_delta: int
    ) -> Tuple[ProgressRecord, bool]:
        with self._lock:
            existing = self._progress.get((user_id, module_id))
            if existing is None:
                record = ProgressRecord(
                    user_id=user_id,
                    module_id=module_id,
                    progress=progress,
                    completed=progress >= 100,
                    score=score,
                    time_spent=time_spent_delta,
                    last_accessed=utcnow(),
                )
            else:
                new_progress = max(existing.progress, progress)
                record = existing.model_copy(
                    update={
                        "progress": new_progress,
                        "completed": new_progress >= 100,
                        "score": max(existing.score, score),
                        "time_spent": existing.time_spent + time_spent_delta,
                        "last_accessed": utcnow(),
                    }
                )
            self._progress[(user_id, module_id)] = record
            return record.model_copy(), existing is None

    def complete(self, user_id: int, module_id: int, score: int) -> ProgressRecord:
        with self._lock:
            existing = self._progress.get((user_id, module_id))
            record = ProgressRecord(
                user_id=user_id,
                module_id=module_id,
                progress=100,
                completed=True,
                score=max(existing.score, score) if existing else score,
                time_spent=existing.time_spent if existing else 0,
                last_accessed=utcnow(),
            )
            self._progress[(user_id, module_id)] = record
            return record.model_copy()

    def list_assessments(self, user_id: int, limit: int = 10) -> List[AssessmentRecord]:
        with self._lock:
            rows = [a for a in self._assessments if a.user_id == user_id]
        # Appended in time order, so newest-first is reverse insertion order.
        return [a.model_copy() for a in reversed(rows)][:limit]

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
        with self._lock:
            record = AssessmentRecord(
                id=len(self._assessments) + 1,
                user_id=user_id,
                module_id=module_id,
                score=score,
                total_questions=total_questions,
                correct_answers=correct_answers,
                time_spent=time_spent,
                feedback=feedback,
                taken_at=utcnow(),
            )
            self._assessments.append(record)
            return record.id
