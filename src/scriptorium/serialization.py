"""Manifest serialization: JSON round-trip for segments and patch operations.

An import manifest is written next to the compiled output so a later edit
session can compute patches and reconstruct the document without the
original file.

Example:
    from scriptorium import import_tei
    from scriptorium.serialization import to_json, from_json

    result = import_tei(xml)
    data = to_json(result.manifest)
    assert from_json(data) == result.manifest

All output is deterministic (sorted keys).

Thread Safety:
    All functions are pure.

"""

import json
from dataclasses import fields
from typing import Any

from scriptorium.errors import ManifestError
from scriptorium.importer.segments import (
    HandShiftSegment,
    ImportManifest,
    LineBreakSegment,
    PageBreakSegment,
    PunctuationSegment,
    Segment,
    StructuralSegment,
    WhitespaceSegment,
    WordSegment,
)
from scriptorium.patching import Delete, Insert, Keep, Modify, PatchOperation

type Serializable = Segment | PatchOperation | ImportManifest

# Registry of type names to classes for deserialization
_TYPES: dict[str, type] = {
    "Structural": StructuralSegment,
    "Word": WordSegment,
    "Punctuation": PunctuationSegment,
    "LineBreak": LineBreakSegment,
    "PageBreak": PageBreakSegment,
    "HandShift": HandShiftSegment,
    "Whitespace": WhitespaceSegment,
    "Keep": Keep,
    "Modify": Modify,
    "Insert": Insert,
    "Delete": Delete,
    "ImportManifest": ImportManifest,
}

_TYPE_NAMES: dict[type, str] = {cls: name for name, cls in _TYPES.items()}


def to_dict(obj: Serializable) -> dict[str, Any]:
    """Convert a segment, patch operation or manifest to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.
    """
    type_name = _TYPE_NAMES.get(type(obj))
    if type_name is None:
        raise ManifestError(f"Cannot serialize {type(obj).__name__}")
    result: dict[str, Any] = {"_type": type_name}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, tuple):
            value = [to_dict(item) for item in value]
        elif isinstance(value, dict):
            value = dict(value)
        result[f.name] = value
    return result


def from_dict(data: dict[str, Any]) -> Serializable:
    """Rebuild a typed object from a dict produced by ``to_dict``.

    Raises:
        ManifestError: ``_type`` is missing or unknown, or fields do not fit.
    """
    if not isinstance(data, dict):
        raise ManifestError(f"Expected an object, got {type(data).__name__}")
    type_name = data.get("_type")
    if type_name is None:
        raise ManifestError("Missing '_type' field")
    cls = _TYPES.get(type_name)
    if cls is None:
        raise ManifestError("Unknown type", type_name)

    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data:
            continue
        value = data[f.name]
        if f.name == "segments":
            if not isinstance(value, list):
                raise ManifestError("'segments' must be a list", type_name)
            value = tuple(from_dict(item) for item in value)
        kwargs[f.name] = value
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise ManifestError(str(e), type_name) from e


def to_json(obj: Serializable, *, indent: int | None = None) -> str:
    """Serialize to a JSON string with sorted keys."""
    return json.dumps(to_dict(obj), sort_keys=True, indent=indent, ensure_ascii=False)


def from_json(data: str) -> Serializable:
    """Deserialize from a JSON string produced by ``to_json``.

    Raises:
        ManifestError: The text is not valid JSON or describes an unknown type.
    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON: {e}") from e
    return from_dict(raw)


def patches_to_json(patches: list[PatchOperation], *, indent: int | None = None) -> str:
    return json.dumps(
        [to_dict(op) for op in patches], sort_keys=True, indent=indent, ensure_ascii=False
    )


def patches_from_json(data: str) -> list[PatchOperation]:
    """Deserialize a patch list written by ``patches_to_json``.

    Raises:
        ManifestError: The text is not a JSON list of patch operations.
    """
    try:
        raw = json.loads(data)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise ManifestError("Expected a list of patch operations")
    patches: list[PatchOperation] = []
    for item in raw:
        op = from_dict(item)
        if not isinstance(op, (Keep, Modify, Insert, Delete)):
            raise ManifestError("Not a patch operation", type(op).__name__)
        patches.append(op)
    return patches


__all__ = ["from_dict", "from_json", "patches_from_json", "patches_to_json", "to_dict", "to_json"]
