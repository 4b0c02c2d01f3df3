"""REST API routes for the learner dashboard, submissions and catalog."""

import functools
import re
import uuid
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from progress_engine.config import get_settings
from progress_engine.errors import UnknownTemplateError, ValidationError
from progress_engine.models.progress import ActivityItem, UserProgress
from progress_engine.models.rubric import Difficulty, ProjectTemplate
from progress_engine.models.submission import Submission
from progress_engine.service import ProgressService

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

_USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class SubmissionCreate(BaseModel):
    """Request body for a new submission."""

    template_id: str
    scores_by_criterion: dict[str, int] = Field(default_factory=dict)
    submitted_at: datetime | None = None
    id: str | None = None


@functools.lru_cache
def get_service() -> ProgressService:
    """Get the progress service singleton."""
    return ProgressService.from_settings(get_settings())


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_PATTERN.match(user_id):
        raise HTTPException(status_code=400, detail="Invalid user ID format")
    return user_id


@router.get("/templates")
async def list_templates(difficulty: Difficulty | None = None) -> list[ProjectTemplate]:
    """List catalog templates, optionally of one difficulty tier."""
    catalog = get_service().catalog
    if difficulty is None:
        return catalog.templates
    return catalog.by_difficulty(difficulty)


@router.get("/templates/{template_id}")
async def get_template(template_id: str) -> ProjectTemplate:
    """Get one template with its rubric."""
    template = get_service().catalog.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.get("/users/{user_id}/progress")
async def get_progress(user_id: str) -> UserProgress:
    """Dashboard statistics for a user."""
    user_id = validate_user_id(user_id)
    return get_service().compute_user_progress(user_id, now=datetime.now(timezone.utc))


@router.get("/users/{user_id}/activity")
async def get_activity(user_id: str, limit: int | None = None) -> list[ActivityItem]:
    """Recent submissions for a user, newest first."""
    user_id = validate_user_id(user_id)
    max_limit = get_settings().feed_max_limit
    if limit is not None and not 0 <= limit <= max_limit:
        raise HTTPException(status_code=400, detail=f"limit must be between 0 and {max_limit}")
    return list(get_service().recent_activity(user_id, limit))


@router.post("/users/{user_id}/submissions", status_code=201)
async def create_submission(user_id: str, body: SubmissionCreate) -> Submission:
    """Record a graded submission."""
    user_id = validate_user_id(user_id)
    now = datetime.now(timezone.utc)
    submission = Submission(
        id=body.id or str(uuid.uuid4()),
        user_id=user_id,
        template_id=body.template_id,
        submitted_at=body.submitted_at or now,
        scores_by_criterion=body.scores_by_criterion,
    )
    try:
        return get_service().record_submission(submission, now)
    except UnknownTemplateError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        logger.info("submission_rejected", user_id=user_id, reasons=e.reasons)
        raise HTTPException(status_code=422, detail=e.reasons)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
