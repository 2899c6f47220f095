from typing import List, Optional, Tuple

from sqlalchemy import case
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learntrack.errors import StoreError
from learntrack.models.models import AssessmentResult, ModuleProgress
from learntrack.schemas.progress_schemas import AssessmentRecord, ProgressRecord
from learntrack.stores.base import ProgressStore
from learntrack.utils.common import utcnow
from learntrack.utils.logger import configure_logging

logger = configure_logging()

_INSERT_BY_DIALECT = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _greatest(incoming, current):
    # Portable GREATEST(): SQLite has no GREATEST and its two-argument MAX() is not in PostgreSQL.
    return case((incoming > current, incoming), else_=current)


class SqlProgressStore(ProgressStore):
    """
    user_progress / assessments tables behind a request-scoped session.

    Each write is a single INSERT .. ON CONFLICT (user_id, module_id) statement
    (DO NOTHING to create, DO UPDATE to merge), so concurrent writers to the
    same row cannot lose updates.
    """

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise StoreError(f"Unsupported database dialect: {dialect}")
        return insert(ModuleProgress.__table__)

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("%s failed", what)
            raise StoreError(f"Failed to {what}") from e

    def _load(self, user_id: int, module_id: int) -> Optional[ModuleProgress]:
        return (
            self.db.query(ModuleProgress)
            .filter(ModuleProgress.user_id == user_id, ModuleProgress.module_id == module_id)
            .first()
        )

    def get(self, user_id: int, module_id: int) -> Optional[ProgressRecord]:
        try:
            row = self._load(user_id, module_id)
        except SQLAlchemyError as e:
            raise StoreError("Failed to load progress") from e
        return ProgressRecord.model_validate(row) if row else None

    def list_for_user(self, user_id: int) -> List[ProgressRecord]:
        try:
            rows = (
                self.db.query(ModuleProgress)
                .filter(ModuleProgress.user_id == user_id)
                .order_by(ModuleProgress.module_id.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError("Failed to load progress") from e
        return [ProgressRecord.model_validate(r) for r in rows]

    def _committed_record(self, what: str, user_id: int, module_id: int) -> ProgressRecord:
        self._commit(what)
        record = self.get(user_id, module_id)
        if record is None:
            raise StoreError(f"Failed to {what}")
        return record

    def _execute_merge(self, stmt, what: str, user_id: int, module_id: int) -> ProgressRecord:
        try:
            self.db.execute(stmt)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("%s failed user_id=%s module_id=%s", what, user_id, module_id)
            raise StoreError(f"Failed to {what}") from e
        return self._committed_record(what, user_id, module_id)

    def _progress_values(self, user_id: int, module_id: int, progress: int, score: int, time_spent: int) -> dict:
        return dict(
            user_id=user_id,
            module_id=module_id,
            progress=progress,
            completed=progress >= 100,
            score=score,
            time_spent=time_spent,
            last_accessed=utcnow(),
        )

    def upsert(
        self, user_id: int, module_id: int, progress: int, score: int, time_spent_delta: int
    ) -> Tuple[ProgressRecord, bool]:
        table = ModuleProgress.__table__
        values = self._progress_values(user_id, module_id, progress, score, time_spent_delta)
        create = self._insert().values(**values).on_conflict_do_nothing(
            index_elements=[table.c.user_id, table.c.module_id]
        )
        merge = self._insert().values(**values)
        new_progress = _greatest(merge.excluded.progress, table.c.progress)
        merge = merge.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.module_id],
            set_={
                "progress": new_progress,
                "completed": new_progress >= 100,
                "score": _greatest(merge.excluded.score, table.c.score),
                "time_spent": table.c.time_spent + merge.excluded.time_spent,
                "last_accessed": merge.excluded.last_accessed,
            },
        )
        try:
            # DO NOTHING reports rowcount 0 when the row already exists; the merge then runs
            # in the same transaction, so both branches stay single-statement writes.
            created = self.db.execute(create).rowcount == 1
            if not created:
                self.db.execute(merge)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("save progress failed user_id=%s module_id=%s", user_id, module_id)
            raise StoreError("Failed to save progress") from e
        return self._committed_record("save progress", user_id, module_id), created

    def _complete_stmt(self, user_id: int, module_id: int, score: int):
        table = ModuleProgress.__table__
        stmt = self._insert().values(**self._progress_values(user_id, module_id, 100, score, 0))
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.user_id, table.c.module_id],
            set_={
                "progress": 100,
                "completed": True,
                "score": _greatest(stmt.excluded.score, table.c.score),
                "last_accessed": stmt.excluded.last_accessed,
            },
        )
        return stmt

    def complete(self, user_id: int, module_id: int, score: int) -> ProgressRecord:
        stmt = self._complete_stmt(user_id, module_id, score)
        return self._execute_merge(stmt, "complete module", user_id, module_id)

    def list_assessments(self, user_id: int, limit: int = 10) -> List[AssessmentRecord]:
        try:
            rows = (
                self.db.query(AssessmentResult)
                .filter(AssessmentResult.user_id == user_id)
                .order_by(AssessmentResult.taken_at.desc(), AssessmentResult.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreError("Failed to load assessments") from e
        return [AssessmentRecord.model_validate(r) for r in rows]

    def _add_assessment(self, **fields) -> AssessmentResult:
        row = AssessmentResult(taken_at=utcnow(), **fields)
        self.db.add(row)
        self.db.flush()
        return row

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
        try:
            row = self._add_assessment(
                user_id=user_id,
                module_id=module_id,
                score=score,
                total_questions=total_questions,
                correct_answers=correct_answers,
                time_spent=time_spent,
                feedback=feedback,
            )
            assessment_id = int(row.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Failed to save assessment") from e
        self._commit("save assessment")
        return assessment_id

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
        """Attempt row and module completion commit together or not at all."""
        stmt = self._complete_stmt(user_id, module_id, score)
        try:
            row = self._add_assessment(
                user_id=user_id,
                module_id=module_id,
                score=score,
                total_questions=total_questions,
                correct_answers=correct_answers,
                time_spent=time_spent,
                feedback=feedback,
            )
            assessment_id = int(row.id)
            self.db.execute(stmt)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("record assessment failed user_id=%s module_id=%s", user_id, module_id)
            raise StoreError("Failed to save assessment") from e
        self._commit("save assessment")
        return assessment_id
