"""Shared fixtures: the shipped project catalog and a submission factory."""

from datetime import datetime
from pathlib import Path

import pytest

from progress_engine.catalog import Catalog
from progress_engine.models.submission import Submission

CATALOG_PATH = Path(__file__).resolve().parent.parent / "config" / "catalog" / "projects.yaml"


@pytest.fixture(scope="session")
def catalog() -> Catalog:
    return Catalog.from_yaml(CATALOG_PATH)


def make_submission(
    submission_id: str,
    template_id: str,
    submitted_at: datetime,
    scores: dict[str, int] | None = None,
    user_id: str = "user-1",
) -> Submission:
    return Submission(
        id=submission_id,
        user_id=user_id,
        template_id=template_id,
        submitted_at=submitted_at,
        scores_by_criterion=scores or {},
    )


# Awards per template used across tests, keyed by their total
BG1_80 = {"bg-1-design": 25, "bg-1-responsive": 20, "bg-1-functionality": 25, "bg-1-code": 10}
BG1_95 = {
    "bg-1-design": 25,
    "bg-1-responsive": 20,
    "bg-1-functionality": 25,
    "bg-1-code": 20,
    "bg-1-content": 5,
}
BG3_90 = {"bg-3-crud": 35, "bg-3-persistence": 20, "bg-3-ui": 25, "bg-3-features": 10}
BG4_70 = {"bg-4-operations": 40, "bg-4-ui": 25, "bg-4-features": 5}
