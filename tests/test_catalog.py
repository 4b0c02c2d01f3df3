"""Tests for catalog loading and integrity screening."""

import pytest

from progress_engine.catalog import Catalog
from progress_engine.config import load_catalog_data
from progress_engine.models.rubric import Difficulty


def _record(template_id: str, *points: int, difficulty: str = "beginner") -> dict:
    return {
        "id": template_id,
        "name": template_id.title(),
        "difficulty": difficulty,
        "max_points": 100,
        "grading_criteria": [
            {"id": f"{template_id}-{i}", "category": f"Part {i}", "max_points": p}
            for i, p in enumerate(points)
        ],
    }


class TestShippedCatalog:
    def test_loads_all_templates(self, catalog):
        assert len(catalog) == 8
        assert catalog.rejected == []

    def test_get_template(self, catalog):
        template = catalog.get_template("int-2")
        assert template.name == "Real-time Chat Application"
        assert template.difficulty == Difficulty.INTERMEDIATE
        assert [c.max_points for c in template.grading_criteria] == [35, 30, 20, 15]

    def test_unknown_template(self, catalog):
        assert catalog.get_template("nope") is None
        assert "nope" not in catalog

    def test_by_difficulty_keeps_catalog_order(self, catalog):
        ids = [t.id for t in catalog.by_difficulty(Difficulty.BEGINNER)]
        assert ids == ["bg-1", "bg-2", "bg-3", "bg-4", "bg-5"]
        assert [t.id for t in catalog.by_difficulty(Difficulty.ADVANCED)] == ["adv-1"]


class TestIntegrityScreening:
    def test_bad_template_rejected_others_served(self):
        catalog = Catalog.from_records([
            _record("good", 60, 40),
            _record("short", 60, 30),
        ])
        assert "good" in catalog
        assert catalog.get_template("short") is None
        assert [e.template_id for e in catalog.rejected] == ["short"]
        assert "criteria sum to 90" in catalog.rejected[0].reasons[0]

    def test_duplicate_criterion_ids_rejected(self):
        record = _record("dup", 50, 50)
        record["grading_criteria"][1]["id"] = record["grading_criteria"][0]["id"]
        catalog = Catalog.from_records([record])
        assert len(catalog) == 0
        assert [e.template_id for e in catalog.rejected] == ["dup"]

    def test_duplicate_template_id_keeps_first(self):
        catalog = Catalog.from_records([_record("same", 100), _record("same", 50, 50)])
        assert len(catalog) == 1
        assert len(catalog.get_template("same").grading_criteria) == 1
        assert [e.template_id for e in catalog.rejected] == ["same"]

    def test_malformed_record_rejected(self):
        catalog = Catalog.from_records([
            _record("odd", 100, difficulty="legendary"),
            _record("fine", 100),
        ])
        assert [e.template_id for e in catalog.rejected] == ["odd"]
        assert "fine" in catalog

    def test_non_mapping_record_rejected(self):
        catalog = Catalog.from_records(["oops", _record("fine", 100)])
        assert [e.template_id for e in catalog.rejected] == ["#0"]
        assert "fine" in catalog

    def test_every_rejection_kept(self):
        catalog = Catalog.from_records([
            _record("served", 100),
            _record("served", 50, 50),
            _record("bad", 60, 30),
            _record("bad", 10),
        ])
        assert [e.template_id for e in catalog.rejected] == ["served", "bad", "bad"]
        assert "duplicate template id" in catalog.rejected[0].reasons[0]
        assert "criteria sum to 90" in catalog.rejected[1].reasons[0]
        assert "criteria sum to 10" in catalog.rejected[2].reasons[0]
        assert catalog.get_template("served").grading_criteria[0].max_points == 100

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog_data(tmp_path / "missing.yaml")

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "projects.yaml"
        path.write_text(
            "projects:\n"
            "  - id: t-1\n"
            "    name: Tiny\n"
            "    difficulty: advanced\n"
            "    max_points: 10\n"
            "    grading_criteria:\n"
            "      - {id: t-1-a, category: A, max_points: 10}\n"
        )
        catalog = Catalog.from_yaml(path)
        assert catalog.get_template("t-1").max_points == 10
