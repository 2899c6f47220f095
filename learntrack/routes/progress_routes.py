"""
Module progress and assessment endpoints.
"""

from fastapi import APIRouter, Depends

from learntrack.bootstrap import get_progress_service
from learntrack.schemas.progress_schemas import (
    AssessmentRequest,
    AssessmentSavedResponse,
    MessageResponse,
    ProgressOverview,
    ProgressUpdateRequest,
)
from learntrack.schemas.user_schemas import User
from learntrack.services.progress_service import ProgressService
from learntrack.utils.auth import get_current_user

progress_routes = APIRouter()


@progress_routes.get("", response_model=ProgressOverview)
def get_progress(
    current_user: User = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
) -> ProgressOverview:
    """Dashboard summary: completion counts, scores, hours, per-module rows and the last 10 assessments."""
    return progress.get_overview(current_user.id)


@progress_routes.get("/modules/titles")
def get_module_titles() -> dict[int, str]:
    """Catalog of module titles keyed by module id. No auth."""
    return ProgressService.get_module_catalog()


@progress_routes.post("/{module_id}", response_model=MessageResponse)
def update_module_progress(
    module_id: int,
    body: ProgressUpdateRequest,
    current_user: User = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
) -> MessageResponse:
    _, created = progress.record_progress(current_user.id, module_id, body.progress, body.score, body.time_spent)
    return MessageResponse(message="Progress saved" if created else "Progress updated")


@progress_routes.post("/{module_id}/assessment", response_model=AssessmentSavedResponse)
def save_assessment(
    module_id: int,
    body: AssessmentRequest,
    current_user: User = Depends(get_current_user),
    progress: ProgressService = Depends(get_progress_service),
) -> AssessmentSavedResponse:
    """Store a quiz attempt; the module is marked completed regardless of earlier progress."""
    assessment_id = progress.record_assessment(
        current_user.id,
        module_id,
        body.score,
        body.total_questions,
        body.correct_answers,
        body.time_spent,
        body.feedback,
    )
    return AssessmentSavedResponse(message="Assessment saved", assessment_id=assessment_id)
