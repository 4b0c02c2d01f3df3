"""Error types raised by the grading and progression engine."""


class ProgressEngineError(Exception):
    """Base class for engine errors."""


class IntegrityError(ProgressEngineError):
    """Catalog data violates rubric invariants.

    Raised while loading a project template whose criteria do not add up to the
    template maximum, carry negative points, or reuse an id.
    """

    def __init__(self, template_id: str, reasons: list[str]):
        self.template_id = template_id
        self.reasons = reasons
        super().__init__(f"Template {template_id!r} failed integrity check: {'; '.join(reasons)}")


class ValidationError(ProgressEngineError):
    """A submission was rejected before it could enter the aggregation input set."""

    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        super().__init__("; ".join(reasons))


class UnknownTemplateError(ValidationError):
    """A submission names a template the catalog does not serve."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__([f"unknown template {template_id!r}"])
