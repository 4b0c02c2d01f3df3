"""Submission records and per-submission grading rules."""

from datetime import datetime, timezone, tzinfo

from pydantic import BaseModel, ConfigDict, Field

from progress_engine.errors import ValidationError
from progress_engine.models.rubric import ProjectTemplate


class Submission(BaseModel):
    """A user's graded attempt at a project template.

    Submissions are immutable. A correction is a new submission for the same
    template; the latest one wins when computing current status.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    template_id: str
    submitted_at: datetime
    scores_by_criterion: dict[str, int] = Field(default_factory=dict)


def localize(moment: datetime, tz: tzinfo | None = None) -> datetime:
    """Return ``moment`` as an aware datetime.

    Naive datetimes are wall-clock time in ``tz``, or UTC when no zone is
    configured. Aware datetimes are returned unchanged.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz or timezone.utc)
    return moment


def compute_total_score(submission: Submission, template: ProjectTemplate) -> int:
    """Sum awarded points over the template's criteria.

    Keys that do not belong to the template (stale rubric versions) are ignored
    and missing criteria count as zero. Each award is clamped to its
    criterion's range, so the total stays within ``[0, template.max_points]``.
    """
    total = 0
    for criterion in template.grading_criteria:
        awarded = submission.scores_by_criterion.get(criterion.id, 0)
        total += min(max(awarded, 0), criterion.max_points)
    return total


def validate_submission(
    submission: Submission,
    template: ProjectTemplate,
    now: datetime,
    tz: tzinfo | None = None,
) -> None:
    """Validate a submission against an already-trusted template.

    Args:
        submission: Incoming submission.
        template: Template the submission references.
        now: Processing time; submissions timestamped after it are rejected.
        tz: Zone for naive timestamps, see ``localize``.

    Raises:
        ValidationError: Listing every rule the submission breaks.
    """
    reasons = []

    if submission.template_id != template.id:
        reasons.append(
            f"submission references template {submission.template_id!r}, "
            f"validated against {template.id!r}"
        )

    for criterion_id, awarded in submission.scores_by_criterion.items():
        criterion = template.criterion(criterion_id)
        if criterion is None:
            reasons.append(f"unknown criterion {criterion_id!r} for template {template.id!r}")
        elif not 0 <= awarded <= criterion.max_points:
            reasons.append(
                f"score {awarded} for {criterion_id!r} outside 0..{criterion.max_points}"
            )

    if localize(submission.submitted_at, tz) > localize(now, tz):
        reasons.append(f"submitted_at {submission.submitted_at.isoformat()} is in the future")

    if reasons:
        raise ValidationError(reasons)
