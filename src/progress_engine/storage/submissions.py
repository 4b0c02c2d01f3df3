"""Submission persistence (JSON per user + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from datetime import datetime, tzinfo
from pathlib import Path

import structlog

from ..errors import ValidationError
from ..models.rubric import ProjectTemplate
from ..models.submission import Submission, validate_submission

logger = structlog.get_logger()


def get_submissions_path(data_dir: Path, user_id: str) -> Path:
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / f"{user_id}.json"


def get_lock_path(path: Path) -> Path:
    return path.with_suffix(".json.lock")


def _read(path: Path) -> list[dict]:
    if not path.exists():
        return []
    return json.loads(path.read_text()).get("submissions", [])


def list_submissions(data_dir: Path, user_id: str) -> list[Submission]:
    """Return the user's stored submissions in insertion order."""
    path = get_submissions_path(data_dir, user_id)
    if not path.exists():
        return []
    with open(get_lock_path(path), "a") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_SH)
        entries = _read(path)
    return [Submission.model_validate(entry) for entry in entries]


def record_submission(
    data_dir: Path,
    submission: Submission,
    template: ProjectTemplate,
    now: datetime,
    tz: tzinfo | None = None,
) -> Submission:
    """Validate a submission and append it to its owner's history.

    Raises:
        ValidationError: If the submission breaks a grading rule or reuses an
            existing submission id. Nothing is written in that case.
    """
    validate_submission(submission, template, now, tz)

    path = get_submissions_path(data_dir, submission.user_id)
    with open(get_lock_path(path), "a") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)

        entries = _read(path)
        if any(entry.get("id") == submission.id for entry in entries):
            raise ValidationError([f"submission id {submission.id!r} already recorded"])

        entries.append(submission.model_dump(mode="json"))
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, suffix=".json"
        ) as tmp:
            json.dump({"user_id": submission.user_id, "submissions": entries}, tmp, indent=2)
        os.replace(tmp.name, path)

    logger.info(
        "submission_recorded",
        user_id=submission.user_id,
        submission_id=submission.id,
        template_id=submission.template_id,
    )
    return submission
