"""Validation result types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single validation error or warning.

    ``line`` and ``column`` are None when the validator reports no position.
    """

    message: str
    line: int | None = None
    column: int | None = None
    is_warning: bool = False


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one document against one schema."""

    valid: bool
    schema_name: str
    errors: tuple[ValidationIssue, ...] = ()
    error_count: int = 0
    warning_count: int = 0

    @classmethod
    def success(cls, schema_name: str) -> ValidationResult:
        return cls(True, schema_name)

    @classmethod
    def with_errors(cls, schema_name: str, issues: Iterable[ValidationIssue]) -> ValidationResult:
        """Result from a list of issues; valid when none of them is an error."""
        issues = tuple(issues)
        warning_count = sum(1 for issue in issues if issue.is_warning)
        error_count = len(issues) - warning_count
        return cls(error_count == 0, schema_name, issues, error_count, warning_count)


__all__ = ["ValidationIssue", "ValidationResult"]
