"""Fold a user's submission history into dashboard statistics."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta, timezone, tzinfo

import structlog

from progress_engine.catalog import Catalog
from progress_engine.models.progress import (
    Stage,
    StageLadder,
    TemplateStatus,
    UnresolvedReferenceWarning,
    UserProgress,
)
from progress_engine.models.rubric import Difficulty
from progress_engine.models.submission import Submission, compute_total_score, localize

logger = structlog.get_logger()


def local_date(moment: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``moment`` in the user's zone (UTC when none is configured)."""
    return localize(moment, tz).astimezone(tz or timezone.utc).date()


def select_current_submissions(
    submissions: Iterable[Submission], catalog: Catalog, tz: tzinfo | None = None
) -> dict[str, tuple[Submission, int]]:
    """Pick the latest submission per template.

    Ties on ``submitted_at`` go to the higher total score, then to the larger
    submission id. Naive timestamps are read in ``tz``.

    Returns:
        Mapping of template id to (current submission, total score). Templates
        missing from the catalog score 0 here and are left for the caller to
        exclude.
    """
    current: dict[str, tuple[Submission, int]] = {}
    best_keys: dict[str, tuple] = {}
    for submission in submissions:
        template = catalog.get_template(submission.template_id)
        score = compute_total_score(submission, template) if template else 0
        key = (localize(submission.submitted_at, tz), score, submission.id)
        if submission.template_id not in best_keys or key > best_keys[submission.template_id]:
            best_keys[submission.template_id] = key
            current[submission.template_id] = (submission, score)
    return current


def compute_streak(
    submissions: Iterable[Submission], now: datetime, tz: tzinfo | None = None
) -> int:
    """Count consecutive active days ending at the most recent activity day.

    Every submission counts, including resubmissions and ones whose template
    is gone. The streak is 0 when the latest active day is more than one
    calendar day before ``now``.
    """
    active_days = {local_date(s.submitted_at, tz) for s in submissions}
    if not active_days:
        return 0

    latest = max(active_days)
    if (local_date(now, tz) - latest).days > 1:
        return 0

    streak = 0
    day = latest
    while day in active_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def compute_user_progress(
    user_id: str,
    submissions: Iterable[Submission],
    catalog: Catalog,
    now: datetime,
    tz: tzinfo | None = None,
    ladder: StageLadder | None = None,
) -> UserProgress:
    """Compute a user's dashboard statistics.

    Args:
        user_id: User whose history is aggregated; other users' records are skipped.
        submissions: The user's validated submission history, in any order.
        catalog: Template lookup.
        now: Reference instant for streak-break detection.
        tz: Zone defining the user's calendar day.
        ladder: Stage promotion thresholds.

    Returns:
        Progress snapshot. Unknown templates are reported in ``warnings``
        instead of failing the computation.
    """
    history = [s for s in submissions if s.user_id == user_id]
    if not history:
        return UserProgress(user_id=user_id)

    attempts: dict[str, int] = defaultdict(int)
    for submission in history:
        attempts[submission.template_id] += 1

    statuses = []
    warnings = []
    for template_id, (submission, score) in select_current_submissions(
        history, catalog, tz
    ).items():
        template = catalog.get_template(template_id)
        if template is None:
            logger.warning(
                "unresolved_template",
                user_id=user_id,
                template_id=template_id,
                submissions=attempts[template_id],
            )
            warnings.append(
                UnresolvedReferenceWarning(
                    template_id=template_id, submission_count=attempts[template_id]
                )
            )
            continue
        statuses.append(
            TemplateStatus(
                template_id=template_id,
                name=template.name,
                difficulty=template.difficulty,
                score=score,
                max_points=template.max_points,
                submitted_at=submission.submitted_at,
                attempts=attempts[template_id],
                completed=score > 0,
            )
        )

    total_points = sum(s.score for s in statuses)
    completed = [s for s in statuses if s.completed]
    stage = Stage.from_progress(
        total_points,
        intermediate_or_higher_completed=sum(
            1 for s in completed if s.difficulty != Difficulty.BEGINNER
        ),
        advanced_completed=sum(1 for s in completed if s.difficulty == Difficulty.ADVANCED),
        ladder=ladder,
    )

    statuses.sort(key=lambda s: (localize(s.submitted_at, tz), s.template_id), reverse=True)
    return UserProgress(
        user_id=user_id,
        total_projects=len(statuses),
        total_points=total_points,
        streak_days=compute_streak(history, now, tz),
        current_stage=stage,
        templates=statuses,
        warnings=warnings,
    )
