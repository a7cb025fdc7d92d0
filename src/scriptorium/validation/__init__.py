"""Schema validation (RELAX NG and XSD) on a dedicated worker thread."""

from scriptorium.validation.types import ValidationIssue, ValidationResult
from scriptorium.validation.worker import (
    SchemaKind,
    ValidationWorker,
    load_schema,
    validate_document,
)

__all__ = [
    "SchemaKind",
    "ValidationIssue",
    "ValidationResult",
    "ValidationWorker",
    "load_schema",
    "validate_document",
]
