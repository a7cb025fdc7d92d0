"""Exception classes for scriptorium.

The lexer is the only core component that fails hard. Import, manifest and
schema problems get their own subclasses so callers can tell them apart.
"""

from __future__ import annotations


class ScriptoriumError(Exception):
    """Base exception for all scriptorium errors."""

    pass


class ParseError(ScriptoriumError):
    """Error while lexing DSL text.

    Raised for unterminated bracketed constructs and missing closing
    delimiters. A failed parse never yields a partial document.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            lineno: Line of the failing construct (1-indexed)
            col_offset: Column of the failing construct (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class TeiImportError(ScriptoriumError):
    """The tagged document could not be parsed or has no <body> element."""

    pass


class ManifestError(ScriptoriumError):
    """A serialized segment manifest or patch list is malformed."""

    def __init__(self, message: str, type_name: str | None = None) -> None:
        self.type_name = type_name
        suffix = f" (_type={type_name!r})" if type_name else ""
        super().__init__(f"{message}{suffix}")


class SchemaError(ScriptoriumError):
    """A validation schema could not be loaded or compiled."""

    def __init__(self, schema_name: str, message: str) -> None:
        """Initialize schema error.

        Args:
            schema_name: Path or display name of the schema
            message: Underlying parser message
        """
        self.schema_name = schema_name
        super().__init__(f"Schema '{schema_name}': {message}")
