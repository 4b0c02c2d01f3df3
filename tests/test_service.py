"""Tests for the dashboard service entry points."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from conftest import BG1_80, BG3_90, make_submission
from progress_engine.config import Settings
from progress_engine.errors import UnknownTemplateError, ValidationError
from progress_engine.models.progress import Stage
from progress_engine.service import ProgressService

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(tmp_path, catalog):
    return ProgressService(catalog=catalog, data_dir=tmp_path, timezone=ZoneInfo("UTC"))


class TestProgressService:
    def test_new_user_gets_empty_progress(self, service):
        progress = service.compute_user_progress("fresh", NOW)
        assert progress.total_projects == 0
        assert progress.current_stage == Stage.BEGINNER
        assert list(service.recent_activity("fresh")) == []

    def test_record_then_compute(self, service):
        service.record_submission(make_submission("s1", "bg-1", NOW - timedelta(days=1), BG1_80), NOW)
        service.record_submission(make_submission("s2", "bg-3", NOW, BG3_90), NOW)
        progress = service.compute_user_progress("user-1", NOW)
        assert progress.total_projects == 2
        assert progress.total_points == 170
        assert progress.streak_days == 2

    def test_rejected_submission_has_no_effect(self, service):
        service.record_submission(make_submission("s1", "bg-1", NOW, BG1_80), NOW)
        with pytest.raises(ValidationError):
            service.record_submission(make_submission("s2", "bg-1", NOW, {"bg-9-x": 10}), NOW)
        assert service.compute_user_progress("user-1", NOW).total_points == 80

    def test_unknown_template(self, service):
        with pytest.raises(UnknownTemplateError):
            service.record_submission(make_submission("s1", "nope", NOW), NOW)

    def test_recent_activity_default_limit(self, service):
        for i in range(7):
            service.record_submission(
                make_submission(f"s{i}", "bg-1", NOW - timedelta(hours=i), BG1_80), NOW
            )
        items = list(service.recent_activity("user-1"))
        assert len(items) == 5
        assert items[0].id == "s0"
        assert len(list(service.recent_activity("user-1", limit=2))) == 2

    def test_history_bounded(self, tmp_path, catalog):
        service = ProgressService(catalog=catalog, data_dir=tmp_path, max_submissions=2)
        for i, template_id in enumerate(["bg-1", "bg-2", "bg-3"]):
            service.record_submission(make_submission(f"s{i}", template_id, NOW), NOW)
        assert service.compute_user_progress("user-1", NOW).total_projects == 2

    def test_from_settings(self, tmp_path):
        settings = Settings(data_dir=tmp_path, feed_default_limit=3, intermediate_points=50)
        service = ProgressService.from_settings(settings)
        assert len(service.catalog) == 8
        assert service.data_dir == tmp_path
        assert service.feed_limit == 3
        assert service.ladder.intermediate_points == 50

    def test_local_wall_clock_submission_in_non_utc_zone(self, tmp_path, catalog):
        tokyo = ZoneInfo("Asia/Tokyo")
        service = ProgressService(catalog=catalog, data_dir=tmp_path, timezone=tokyo)
        now = datetime(2026, 3, 1, 23, 0, tzinfo=timezone.utc)
        local_now = now.astimezone(tokyo).replace(tzinfo=None)
        service.record_submission(make_submission("s1", "bg-1", local_now, BG1_80), now)
        progress = service.compute_user_progress("user-1", now)
        assert progress.streak_days == 1
        assert progress.total_points == 80
        assert [item.id for item in service.recent_activity("user-1")] == ["s1"]
