"""Recent-activity feed projection."""

import heapq
from collections.abc import Iterable, Iterator
from datetime import datetime, tzinfo

import structlog

from progress_engine.catalog import Catalog
from progress_engine.models.progress import ActivityItem
from progress_engine.models.submission import Submission, compute_total_score, localize

logger = structlog.get_logger()

DEFAULT_LIMIT = 5


def _ordering_key(submission: Submission, tz: tzinfo | None) -> tuple[datetime, str]:
    return localize(submission.submitted_at, tz), submission.id


def to_activity_item(submission: Submission, catalog: Catalog) -> ActivityItem:
    """Project one submission into a feed entry."""
    template = catalog.get_template(submission.template_id)
    if template is None:
        return ActivityItem(
            id=submission.id,
            template_id=submission.template_id,
            title=submission.template_id,
            date=submission.submitted_at,
        )
    return ActivityItem(
        id=submission.id,
        template_id=template.id,
        title=template.name,
        difficulty=template.difficulty,
        description=template.description,
        date=submission.submitted_at,
        score=compute_total_score(submission, template),
    )


def recent_activity(
    user_id: str,
    submissions: Iterable[Submission],
    catalog: Catalog,
    limit: int = DEFAULT_LIMIT,
    tz: tzinfo | None = None,
) -> Iterator[ActivityItem]:
    """List the user's most recent submissions, newest first.

    Every submission is listed, resubmissions included. Ties on
    ``submitted_at`` are ordered by submission id, descending. The result is
    a one-shot generator of at most ``limit`` items, built lazily.

    Args:
        user_id: Owner of the feed; other users' records are skipped.
        submissions: The user's submission history, in any order.
        catalog: Template lookup for names, difficulty and scoring.
        limit: Maximum number of items.
        tz: Zone for naive timestamps.

    Raises:
        ValueError: If ``limit`` is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    owned = (s for s in submissions if s.user_id == user_id)
    newest = heapq.nlargest(limit, owned, key=lambda s: _ordering_key(s, tz))
    return (to_activity_item(submission, catalog) for submission in newest)
