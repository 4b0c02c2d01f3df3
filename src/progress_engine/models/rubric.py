"""Project template and grading rubric models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from progress_engine.errors import IntegrityError


class Difficulty(StrEnum):
    """Difficulty tier of a project template."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class GradingCriterion(BaseModel):
    """One weighted category within a rubric, e.g. "Design & UI" worth 25 points."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    description: str = ""
    max_points: int
    requirements: list[str] = Field(default_factory=list)  # informational, not scored


class ProjectTemplate(BaseModel):
    """A catalog project with its grading rubric."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    stack: str | None = None
    difficulty: Difficulty
    technologies: list[str] = Field(default_factory=list)
    estimated_hours: int | None = None
    max_points: int = 100
    requirements: list[str] = Field(default_factory=list)
    grading_criteria: list[GradingCriterion] = Field(default_factory=list)

    def criterion(self, criterion_id: str) -> GradingCriterion | None:
        """Look up a criterion of this template by id."""
        for criterion in self.grading_criteria:
            if criterion.id == criterion_id:
                return criterion
        return None


def validate_template(template: ProjectTemplate) -> None:
    """Check the rubric invariants of a template.

    Args:
        template: Template as read from the catalog.

    Raises:
        IntegrityError: If criterion points do not sum to ``max_points``, a
            criterion has negative points, or criterion ids repeat.
    """
    reasons = []

    seen: set[str] = set()
    for criterion in template.grading_criteria:
        if criterion.id in seen:
            reasons.append(f"duplicate criterion id {criterion.id!r}")
        seen.add(criterion.id)
        if criterion.max_points < 0:
            reasons.append(f"criterion {criterion.id!r} has negative max_points")

    criteria_total = sum(c.max_points for c in template.grading_criteria)
    if criteria_total != template.max_points:
        reasons.append(
            f"criteria sum to {criteria_total}, template declares {template.max_points}"
        )

    if reasons:
        raise IntegrityError(template.id, reasons)
