"""
Progress service: module progress writes, assessment results and the
dashboard overview.

Writes go through ProgressStore, which owns the merge rules (monotone
progress and score, accumulated time). This layer validates input against the
fixed catalog and derives the aggregate statistics.
"""

from typing import Optional, Tuple

from learntrack.catalog import FIRST_MODULE_ID, LAST_MODULE_ID, MODULE_TITLES, TOTAL_MODULES, is_valid_module_id
from learntrack.errors import ValidationError
from learntrack.schemas.progress_schemas import ProgressOverview, ProgressRecord
from learntrack.stores.base import ProgressStore
from learntrack.utils.common import round_half_up
from learntrack.utils.logger import configure_logging

logger = configure_logging()

RECENT_ASSESSMENTS = 10
# Per-request ceilings; they keep accumulated values well inside a 32-bit INTEGER column.
MAX_TIME_SPENT = 24 * 60  # minutes in one progress update
MAX_QUESTIONS = 1000


def _check_module_id(module_id: int) -> None:
    if not is_valid_module_id(module_id):
        raise ValidationError(
            "Invalid module ID",
            details={"module_id": module_id, "min": FIRST_MODULE_ID, "max": LAST_MODULE_ID},
        )


def _check_percent(field: str, value: int) -> None:
    if not 0 <= value <= 100:
        raise ValidationError(f"{field} must be between 0 and 100", details={field: value})


class ProgressService:
    def __init__(self, store: ProgressStore, total_modules: int = TOTAL_MODULES):
        self.store = store
        self.total_modules = total_modules

    def get_overview(self, user_id: int) -> ProgressOverview:
        modules = self.store.list_for_user(user_id)
        assessments = self.store.list_assessments(user_id, limit=RECENT_ASSESSMENTS)

        completed = [m for m in modules if m.completed]
        scored = [m.score for m in completed if m.score > 0]
        average_score = round_half_up(sum(scored) / len(scored)) if scored else 0
        minutes = sum(m.time_spent or 0 for m in modules)

        return ProgressOverview(
            completed_modules=len(completed),
            total_modules=self.total_modules,
            average_score=average_score,
            time_spent=round_half_up(minutes / 60),
            overall_progress=round_half_up(100 * len(completed) / self.total_modules),
            modules=modules,
            assessments=assessments,
        )

    def record_progress(
        self, user_id: int, module_id: int, progress: int, score: int = 0, time_spent: int = 0
    ) -> Tuple[ProgressRecord, bool]:
        """Merge one progress report; returns the stored record and whether it was created."""
        _check_module_id(module_id)
        _check_percent("progress", progress)
        _check_percent("score", score)
        if not 0 <= time_spent <= MAX_TIME_SPENT:
            raise ValidationError(
                f"timeSpent must be between 0 and {MAX_TIME_SPENT}", details={"timeSpent": time_spent}
            )
        return self.store.upsert(user_id, module_id, progress, score, time_spent)

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
        _check_module_id(module_id)
        _check_percent("score", score)
        if not 0 <= total_questions <= MAX_QUESTIONS:
            raise ValidationError(
                f"totalQuestions must be between 0 and {MAX_QUESTIONS}", details={"totalQuestions": total_questions}
            )
        if not 0 <= correct_answers <= total_questions:
            raise ValidationError(
                "correctAnswers must be between 0 and totalQuestions",
                details={"totalQuestions": total_questions, "correctAnswers": correct_answers},
            )
        assessment_id = self.store.record_assessment(
            user_id, module_id, score, total_questions, correct_answers, time_spent, feedback
        )
        logger.info("assessment saved user_id=%s module_id=%s score=%s id=%s", user_id, module_id, score, assessment_id)
        return assessment_id

    @staticmethod
    def get_module_catalog() -> dict[int, str]:
        return dict(MODULE_TITLES)
