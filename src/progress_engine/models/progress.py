"""Derived progress models shown on the learner dashboard."""

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from progress_engine.models.rubric import Difficulty


class StageLadder(BaseModel):
    """Promotion thresholds for the progression stage."""

    intermediate_points: int = 300
    advanced_points: int = 800
    intermediate_templates: int = 3  # completed templates of intermediate or higher
    advanced_templates: int = 2  # completed advanced templates


class Stage(StrEnum):
    """Coarse progression label."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def from_progress(
        cls,
        total_points: int,
        intermediate_or_higher_completed: int,
        advanced_completed: int,
        ladder: StageLadder | None = None,
    ) -> "Stage":
        """Determine stage from points and completed-difficulty counts.

        Non-decreasing in each argument.
        """
        ladder = ladder or StageLadder()
        if (
            total_points >= ladder.advanced_points
            or advanced_completed >= ladder.advanced_templates
        ):
            return cls.ADVANCED
        elif (
            total_points >= ladder.intermediate_points
            or intermediate_or_higher_completed >= ladder.intermediate_templates
        ):
            return cls.INTERMEDIATE
        else:
            return cls.BEGINNER


class UnresolvedReferenceWarning(BaseModel):
    """Submissions whose template is missing from the catalog."""

    template_id: str
    submission_count: int
    message: str = "template not found in catalog; excluded from points and project count"


class TemplateStatus(BaseModel):
    """Current (latest) result for one template."""

    template_id: str
    name: str
    difficulty: Difficulty
    score: int
    max_points: int
    submitted_at: datetime
    attempts: int = 1
    completed: bool = False

    @property
    def percentage(self) -> float:
        if self.max_points == 0:
            return 0.0
        return round(self.score / self.max_points * 100, 1)


class UserProgress(BaseModel):
    """Aggregate statistics for one user, recomputed from submissions on demand."""

    user_id: str
    total_projects: int = 0
    total_points: int = 0
    streak_days: int = 0
    current_stage: Stage = Stage.BEGINNER
    templates: list[TemplateStatus] = Field(default_factory=list)
    warnings: list[UnresolvedReferenceWarning] = Field(default_factory=list)


class ActivityItem(BaseModel):
    """One entry of the recent-activity feed."""

    id: str
    type: Literal["project_submission"] = "project_submission"
    template_id: str
    title: str
    difficulty: Difficulty | None = None
    description: str = ""
    date: datetime
    score: int | None = None
