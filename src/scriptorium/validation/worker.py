"""Schema validation worker.

Validation runs on one dedicated thread that owns the lxml schema objects
and their cache. Callers submit requests through a queue and receive a
``concurrent.futures.Future`` per request:

    worker = ValidationWorker()
    worker.start()
    result = worker.validate_relaxng(xml, "schemas/menota.rng").result()
    worker.stop()

Schemas loaded from a path are parsed once and cached by path. Schemas
passed as text are parsed per request.

Thread Safety:
Request methods may be called from any thread. Schema objects are only
touched by the worker thread.

"""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from lxml import etree

from scriptorium.errors import SchemaError
from scriptorium.utils.logger import get_logger
from scriptorium.validation.types import ValidationIssue, ValidationResult

logger = get_logger(__name__)

THREAD_NAME = "scriptorium-validation"


class SchemaKind(Enum):
    RELAXNG = "relaxng"
    XSD = "xsd"


@dataclass(frozen=True, slots=True)
class ValidationRequest:
    """One queued request.

    ``schema_path`` is set for cached file schemas, ``schema_text`` for
    inline ones.
    """

    kind: SchemaKind
    xml: str
    schema_name: str
    reply: Future[ValidationResult]
    schema_path: Path | None = None
    schema_text: str | None = None


_STOP = object()


def _document_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def _issues(error_log: Any) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            entry.message,
            entry.line or None,
            entry.column or None,
            entry.level == etree.ErrorLevels.WARNING,
        )
        for entry in error_log
    ]


def _build_schema(kind: SchemaKind, tree: Any) -> Any:
    if kind is SchemaKind.RELAXNG:
        return etree.RelaxNG(tree)
    return etree.XMLSchema(tree)


def load_schema(kind: SchemaKind, *, path: Path | None = None, text: str | None = None) -> Any:
    """Parse and compile a schema from a file or from text.

    Raises:
        SchemaError: The schema cannot be read, parsed or compiled.
    """
    name = str(path) if path is not None else "<string>"
    try:
        if path is not None:
            tree = etree.parse(str(path), _document_parser())
        else:
            tree = etree.fromstring((text or "").encode("utf-8"), _document_parser())
        return _build_schema(kind, tree)
    except (etree.LxmlError, OSError) as e:
        raise SchemaError(name, str(e)) from e


def validate_document(schema: Any, xml: str, schema_name: str) -> ValidationResult:
    """Validate XML text against a compiled schema.

    XML that does not parse yields an invalid result carrying the parser's
    errors.
    """
    try:
        document = etree.fromstring(xml.encode("utf-8"), _document_parser())
    except etree.XMLSyntaxError as e:
        issues = _issues(e.error_log)
        if not issues:
            line, column = e.position
            issues = [ValidationIssue(str(e), line or None, column or None)]
        return ValidationResult.with_errors(schema_name, issues)

    if schema.validate(document):
        return ValidationResult.success(schema_name)
    return ValidationResult.with_errors(schema_name, _issues(schema.error_log))


class ValidationWorker:
    """Dedicated validation thread with a request queue and schema cache."""

    __slots__ = ("_cache", "_queue", "_thread")

    def __init__(self) -> None:
        self._queue: queue.Queue[ValidationRequest | object] = queue.Queue()
        self._cache: dict[tuple[SchemaKind, Path], Any] = {}
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread. Starting a running worker does nothing."""
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name=THREAD_NAME, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Finish queued requests, then end the worker thread."""
        if self._thread is None:
            return
        self._queue.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def __enter__(self) -> ValidationWorker:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # =========================================================================
    # Requests
    # =========================================================================

    def validate_relaxng(self, xml: str, schema_path: str | Path) -> Future[ValidationResult]:
        path = Path(schema_path)
        return self._submit(SchemaKind.RELAXNG, xml, path.stem, schema_path=path)

    def validate_relaxng_string(
        self, xml: str, schema_text: str, schema_name: str
    ) -> Future[ValidationResult]:
        return self._submit(SchemaKind.RELAXNG, xml, schema_name, schema_text=schema_text)

    def validate_xsd(self, xml: str, schema_path: str | Path) -> Future[ValidationResult]:
        path = Path(schema_path)
        return self._submit(SchemaKind.XSD, xml, path.stem, schema_path=path)

    def validate_xsd_string(
        self, xml: str, schema_text: str, schema_name: str
    ) -> Future[ValidationResult]:
        return self._submit(SchemaKind.XSD, xml, schema_name, schema_text=schema_text)

    def _submit(
        self,
        kind: SchemaKind,
        xml: str,
        schema_name: str,
        *,
        schema_path: Path | None = None,
        schema_text: str | None = None,
    ) -> Future[ValidationResult]:
        if not self.running:
            raise RuntimeError("Validation worker is not running")
        reply: Future[ValidationResult] = Future()
        self._queue.put(
            ValidationRequest(kind, xml, schema_name, reply, schema_path, schema_text)
        )
        return reply

    # =========================================================================
    # Worker thread
    # =========================================================================

    def _run(self) -> None:
        while self._serve(self._queue.get()):
            pass

    def _serve(self, item: object) -> bool:
        """Handle one queue item. Returns False at the stop sentinel."""
        match item:
            case ValidationRequest():
                self._process(item)
                return True
            case _ if item is _STOP:
                return False
        raise TypeError(f"Unknown validation queue item: {type(item).__name__}")

    def _process(self, request: ValidationRequest) -> None:
        if not request.reply.set_running_or_notify_cancel():
            return
        start = time.perf_counter()
        try:
            result = self._handle(request)
        except SchemaError as e:
            logger.info("Schema failed to load: %s", e)
            request.reply.set_exception(e)
        except Exception as e:
            logger.exception("Validation against %s failed", request.schema_name)
            request.reply.set_exception(e)
        else:
            logger.info(
                "%s validation against %s took %.1fms",
                request.kind.value,
                request.schema_name,
                (time.perf_counter() - start) * 1000,
            )
            request.reply.set_result(result)

    def _handle(self, request: ValidationRequest) -> ValidationResult:
        if request.schema_path is None:
            schema = load_schema(request.kind, text=request.schema_text)
        else:
            schema = self._cached_schema(request.kind, request.schema_path)
        return validate_document(schema, request.xml, request.schema_name)

    def _cached_schema(self, kind: SchemaKind, path: Path) -> Any:
        key = (kind, path)
        schema = self._cache.get(key)
        if schema is None:
            logger.info("Cache miss for %s schema: %s", kind.value, path)
            schema = load_schema(kind, path=path)
            self._cache[key] = schema
        else:
            logger.info("Cache hit for %s schema: %s", kind.value, path)
        return schema


__all__ = [
    "SchemaKind",
    "ValidationRequest",
    "ValidationWorker",
    "load_schema",
    "validate_document",
]
