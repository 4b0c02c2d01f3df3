"""Project catalog validated once at load time."""

from collections.abc import Iterable
from pathlib import Path

import pydantic
import structlog

from progress_engine.config import load_catalog_data
from progress_engine.errors import IntegrityError
from progress_engine.models.rubric import Difficulty, ProjectTemplate, validate_template

logger = structlog.get_logger()


class Catalog:
    """Read-only lookup of trusted project templates.

    Templates failing rubric checks are kept out of the lookup and listed in
    ``rejected`` in load order; one bad template never prevents the rest from
    loading.

    Args:
        templates: Parsed templates in catalog order.
    """

    def __init__(self, templates: Iterable[ProjectTemplate] = ()):
        self._templates: dict[str, ProjectTemplate] = {}
        self.rejected: list[IntegrityError] = []
        for template in templates:
            self._add(template)

    def _add(self, template: ProjectTemplate) -> None:
        try:
            if template.id in self._templates:
                raise IntegrityError(template.id, ["duplicate template id in catalog"])
            validate_template(template)
        except IntegrityError as e:
            self._reject(e)
            return
        self._templates[template.id] = template

    def _reject(self, error: IntegrityError) -> None:
        logger.error("template_rejected", template_id=error.template_id, reasons=error.reasons)
        self.rejected.append(error)

    @classmethod
    def from_records(cls, records: Iterable[dict]) -> "Catalog":
        """Build a catalog from raw mappings, rejecting malformed records."""
        catalog = cls()
        for index, record in enumerate(records):
            try:
                template = ProjectTemplate.model_validate(record)
            except pydantic.ValidationError as e:
                if isinstance(record, dict):
                    template_id = str(record.get("id", f"#{index}"))
                else:
                    template_id = f"#{index}"
                catalog._reject(
                    IntegrityError(template_id, [err["msg"] for err in e.errors()])
                )
                continue
            catalog._add(template)
        logger.info(
            "catalog_loaded",
            templates=len(catalog),
            rejected=len(catalog.rejected),
        )
        return catalog

    @classmethod
    def from_yaml(cls, path: Path) -> "Catalog":
        """Load the catalog from a YAML file with a top-level ``projects`` list."""
        return cls.from_records(load_catalog_data(path))

    def get_template(self, template_id: str) -> ProjectTemplate | None:
        """Return the template, or None if unknown or rejected."""
        return self._templates.get(template_id)

    @property
    def templates(self) -> list[ProjectTemplate]:
        return list(self._templates.values())

    def by_difficulty(self, difficulty: Difficulty) -> list[ProjectTemplate]:
        """Templates of one difficulty tier, in catalog order."""
        return [t for t in self._templates.values() if t.difficulty == difficulty]

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)
