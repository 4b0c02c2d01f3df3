"""Dashboard entry points binding the engine to a catalog and a submission store."""

from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import structlog

from progress_engine.catalog import Catalog
from progress_engine.config import Settings
from progress_engine.engine.aggregator import compute_user_progress
from progress_engine.engine.feed import DEFAULT_LIMIT, recent_activity
from progress_engine.errors import UnknownTemplateError
from progress_engine.models.progress import ActivityItem, StageLadder, UserProgress
from progress_engine.models.submission import Submission
from progress_engine.storage import submissions as submission_store

logger = structlog.get_logger()


class ProgressService:
    """Loads a user's history and hands it to the aggregator and feed builder.

    Args:
        catalog: Validated template catalog.
        data_dir: Directory of the JSON submission store.
        timezone: Zone defining a user's calendar day; naive timestamps are
            wall-clock time in it.
        ladder: Stage promotion thresholds.
        max_submissions: Most recent submissions considered per user.
        feed_limit: Default number of activity items.
    """

    def __init__(
        self,
        catalog: Catalog,
        data_dir: Path,
        timezone: ZoneInfo | None = None,
        ladder: StageLadder | None = None,
        max_submissions: int = 5000,
        feed_limit: int = DEFAULT_LIMIT,
    ):
        self.catalog = catalog
        self.data_dir = data_dir
        self.timezone = timezone
        self.ladder = ladder or StageLadder()
        self.max_submissions = max_submissions
        self.feed_limit = feed_limit

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProgressService":
        return cls(
            catalog=Catalog.from_yaml(settings.catalog_file),
            data_dir=settings.submissions_dir,
            timezone=ZoneInfo(settings.timezone),
            ladder=StageLadder(
                intermediate_points=settings.intermediate_points,
                advanced_points=settings.advanced_points,
                intermediate_templates=settings.intermediate_templates,
                advanced_templates=settings.advanced_templates,
            ),
            max_submissions=settings.max_submissions_per_user,
            feed_limit=settings.feed_default_limit,
        )

    def _history(self, user_id: str) -> list[Submission]:
        history = submission_store.list_submissions(self.data_dir, user_id)
        if len(history) > self.max_submissions:
            logger.warning(
                "submission_history_truncated",
                user_id=user_id,
                stored=len(history),
                kept=self.max_submissions,
            )
            history = history[-self.max_submissions:]
        return history

    def compute_user_progress(self, user_id: str, now: datetime) -> UserProgress:
        """Aggregate statistics for the user's dashboard."""
        return compute_user_progress(
            user_id,
            self._history(user_id),
            self.catalog,
            now,
            tz=self.timezone,
            ladder=self.ladder,
        )

    def recent_activity(self, user_id: str, limit: int | None = None) -> Iterator[ActivityItem]:
        """Most recent submissions for the activity feed."""
        if limit is None:
            limit = self.feed_limit
        return recent_activity(
            user_id, self._history(user_id), self.catalog, limit, tz=self.timezone
        )

    def record_submission(self, submission: Submission, now: datetime) -> Submission:
        """Validate and persist a new submission.

        Raises:
            UnknownTemplateError: If the template is not served by the catalog.
            ValidationError: If the submission breaks a grading rule.
        """
        template = self.catalog.get_template(submission.template_id)
        if template is None:
            raise UnknownTemplateError(submission.template_id)
        return submission_store.record_submission(
            self.data_dir, submission, template, now, tz=self.timezone
        )
