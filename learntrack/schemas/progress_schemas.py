"""
Progress and assessment schemas: request bodies from the module/quiz pages and
the dashboard read model returned by GET /api/progress.
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from learntrack.utils.common import iso_format


class ProgressRecord(BaseModel):
    """Per-(user, module) learning state."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    module_id: int
    progress: int = 0
    completed: bool = False
    score: int = 0
    time_spent: int = 0  # minutes
    last_accessed: Optional[datetime] = None

    @field_serializer("last_accessed")
    def _serialize_last_accessed(self, value: Optional[datetime]) -> Optional[str]:
        return iso_format(value) if value else None


class AssessmentRecord(BaseModel):
    """One quiz attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    module_id: int
    score: int
    total_questions: int
    correct_answers: int
    time_spent: Optional[str] = None
    feedback: Optional[str] = None
    taken_at: Optional[datetime] = None

    @field_serializer("taken_at")
    def _serialize_taken_at(self, value: Optional[datetime]) -> Optional[str]:
        return iso_format(value) if value else None


class ProgressUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    progress: int = 0
    score: int = 0
    time_spent: int = Field(0, alias="timeSpent")

    @field_validator("progress", "score", "time_spent", mode="before")
    @classmethod
    def _null_as_zero(cls, v):
        return 0 if v is None else v


class AssessmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    score: int
    total_questions: int = Field(alias="totalQuestions")
    correct_answers: int = Field(alias="correctAnswers")
    time_spent: Optional[str] = Field(None, alias="timeSpent")
    feedback: Optional[str] = None

    @field_validator("time_spent", mode="before")
    @classmethod
    def _stringify_time(cls, v: Union[str, int, float, None]) -> Optional[str]:
        # Quiz pages send either a "m:ss" string or a bare number of minutes.
        if v is None or v == "":
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ProgressOverview(BaseModel):
    """Dashboard summary for one user."""

    model_config = ConfigDict(populate_by_name=True)

    completed_modules: int = Field(alias="completedModules")
    total_modules: int = Field(alias="totalModules")
    average_score: int = Field(alias="averageScore")
    time_spent: int = Field(alias="timeSpent")  # hours, rounded
    overall_progress: int = Field(alias="overallProgress")  # percent of the catalog completed
    modules: list[ProgressRecord]
    assessments: list[AssessmentRecord]


class MessageResponse(BaseModel):
    message: str


class AssessmentSavedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    assessment_id: int = Field(alias="assessmentId")
