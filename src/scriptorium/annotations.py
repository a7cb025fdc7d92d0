"""Word, character and span annotations.

Annotations attach scholarly information to the compiled text: lemmas,
semantic categories, notes, paleographic observations, syntax, references
and free-form custom data. The compiler reads them by word index to add
``ana``/``cert``/``reason`` attributes, ``<note>`` children and ``<c>``
character tags.

Targets and values are closed unions of frozen dataclasses:

    AnnotationTarget = WordTarget | CharTarget | SpanTarget
    AnnotationValue  = LemmaValue | SemanticValue | NoteValue
                     | PaleographicValue | SyntaxValue | ReferenceValue
                     | CustomValue | MenotaPaleographicValue

JSON uses camelCase keys with ``type`` tagging targets and ``kind`` tagging
values, so annotation files written by the editor load unchanged:

    {"version": "1.0", "annotations": [
        {"id": "lemma-0", "type": "lemma",
         "target": {"type": "word", "wordIndex": 0},
         "value": {"kind": "lemma", "lemma": "maðr", "msa": "xNC"}}]}

Thread Safety:
Targets, values and annotations are immutable. AnnotationSet is mutable;
build it before handing it to compilers on other threads.

"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

# =============================================================================
# Enumerations
# =============================================================================


class AnnotationType(Enum):
    """Kind of annotation, independent of its value payload."""

    LEMMA = "lemma"
    SEMANTIC = "semantic"
    NOTE = "note"
    PALEOGRAPHIC = "paleographic"
    SYNTAX = "syntax"
    REFERENCE = "reference"
    CUSTOM = "custom"


class PaleographicType(Enum):
    UNCLEAR = "unclear"
    DAMAGE = "damage"
    ERASURE = "erasure"
    LETTERFORM = "letterform"
    ABBREVIATION = "abbreviation"
    CORRECTION = "correction"
    ADDITION = "addition"
    DECORATION = "decoration"
    OTHER = "other"


class MenotaObservationType(Enum):
    UNCLEAR = "unclear"
    ADDITION = "addition"
    DELETION = "deletion"
    SUPPLIED = "supplied"
    CHARACTER = "character"


class MenotaUnclearReason(Enum):
    ILLEGIBLE = "illegible"
    FADED = "faded"
    SMUDGED = "smudged"
    DAMAGE = "damage"
    ERASURE = "erasure"
    OVERWRITING = "overwriting"
    BINDING = "binding"
    OTHER = "other"


class MenotaAddPlace(Enum):
    INLINE = "inline"
    SUPRALINEAR = "supralinear"
    INFRALINEAR = "infralinear"
    MARGIN_LEFT = "margin-left"
    MARGIN_RIGHT = "margin-right"
    MARGIN_TOP = "margin-top"
    MARGIN_BOTTOM = "margin-bottom"
    INTERLINEAR = "interlinear"


class MenotaAddType(Enum):
    SUPPLEMENT = "supplement"
    GLOSS = "gloss"
    CORRECTION = "correction"


class MenotaDelRend(Enum):
    OVERSTRIKE = "overstrike"
    ERASURE = "erasure"
    SUBPUNCTION = "subpunction"
    EXPUNCTION = "expunction"
    BRACKETED = "bracketed"


class MenotaSuppliedReason(Enum):
    OMITTED = "omitted"
    DAMAGE = "damage"
    ILLEGIBLE = "illegible"
    RESTORATION = "restoration"
    EMENDATION = "emendation"


class MenotaCharType(Enum):
    """Value of ``<c type="...">`` for character-level annotations."""

    INITIAL = "initial"
    CAPITAL = "capital"
    RUBRIC = "rubric"
    COLORED = "colored"


# =============================================================================
# Targets
# =============================================================================


@dataclass(frozen=True, slots=True)
class WordTarget:
    """A single word by zero-based index."""

    word_index: int

    def includes_word(self, word_index: int) -> bool:
        return self.word_index == word_index

    @property
    def primary_word_index(self) -> int:
        return self.word_index


@dataclass(frozen=True, slots=True)
class CharTarget:
    """Characters ``[char_start, char_end)`` of one word's facsimile text."""

    word_index: int
    char_start: int
    char_end: int

    def includes_word(self, word_index: int) -> bool:
        return self.word_index == word_index

    @property
    def primary_word_index(self) -> int:
        return self.word_index


@dataclass(frozen=True, slots=True)
class SpanTarget:
    """Words ``start_word`` through ``end_word``, both inclusive."""

    start_word: int
    end_word: int

    def includes_word(self, word_index: int) -> bool:
        return self.start_word <= word_index <= self.end_word

    @property
    def primary_word_index(self) -> int:
        return self.start_word


type AnnotationTarget = WordTarget | CharTarget | SpanTarget

_TARGET_TAGS: dict[str, type] = {
    "word": WordTarget,
    "char": CharTarget,
    "span": SpanTarget,
}

# =============================================================================
# Values
# =============================================================================


@dataclass(frozen=True, slots=True)
class LemmaValue:
    lemma: str
    msa: str
    normalized: str | None = None
    onp_id: str | None = None


@dataclass(frozen=True, slots=True)
class SemanticValue:
    category: str
    subcategory: str | None = None
    identifier: str | None = None
    label: str | None = None


@dataclass(frozen=True, slots=True)
class NoteValue:
    text: str
    category: str | None = None


@dataclass(frozen=True, slots=True)
class PaleographicValue:
    observation_type: PaleographicType
    description: str | None = None
    certainty: float | None = None


@dataclass(frozen=True, slots=True)
class SyntaxValue:
    function: str
    details: str | None = None


@dataclass(frozen=True, slots=True)
class ReferenceValue:
    target: str
    ref_type: str
    label: str | None = None


@dataclass(frozen=True, slots=True)
class CustomValue:
    custom_type: str
    data: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MenotaPaleographicValue:
    """Paleographic observation with MENOTA handbook attributes.

    Which optional fields matter depends on ``observation_type``: unclear
    uses ``unclear_reason``; addition uses ``add_place``, ``add_type`` and
    ``hand``; deletion uses ``del_rend`` and ``hand``; supplied uses
    ``supplied_reason``, ``resp`` and ``source``; character uses
    ``char_type`` and ``char_size``.
    """

    observation_type: MenotaObservationType
    unclear_reason: MenotaUnclearReason | None = None
    add_place: MenotaAddPlace | None = None
    add_type: MenotaAddType | None = None
    hand: str | None = None
    del_rend: MenotaDelRend | None = None
    supplied_reason: MenotaSuppliedReason | None = None
    resp: str | None = None
    source: str | None = None
    char_type: MenotaCharType | None = None
    char_size: int | None = None
    description: str | None = None
    certainty: float | None = None


type AnnotationValue = (
    LemmaValue
    | SemanticValue
    | NoteValue
    | PaleographicValue
    | SyntaxValue
    | ReferenceValue
    | CustomValue
    | MenotaPaleographicValue
)

_VALUE_KINDS: dict[str, type] = {
    "lemma": LemmaValue,
    "semantic": SemanticValue,
    "note": NoteValue,
    "paleographic": PaleographicValue,
    "syntax": SyntaxValue,
    "reference": ReferenceValue,
    "custom": CustomValue,
    "menota-paleographic": MenotaPaleographicValue,
}
_KIND_NAMES: dict[type, str] = {cls: kind for kind, cls in _VALUE_KINDS.items()}

# Enum-typed fields, per value class
_ENUM_FIELDS: dict[type, dict[str, type[Enum]]] = {
    PaleographicValue: {"observation_type": PaleographicType},
    MenotaPaleographicValue: {
        "observation_type": MenotaObservationType,
        "unclear_reason": MenotaUnclearReason,
        "add_place": MenotaAddPlace,
        "add_type": MenotaAddType,
        "del_rend": MenotaDelRend,
        "supplied_reason": MenotaSuppliedReason,
        "char_type": MenotaCharType,
    },
}


@dataclass(frozen=True, slots=True)
class AnnotationMetadata:
    author: str | None = None
    created: str | None = None
    modified: str | None = None
    confidence: float | None = None
    source: str | None = None
    note: str | None = None


# =============================================================================
# Annotation
# =============================================================================


@dataclass(frozen=True, slots=True)
class Annotation:
    """One annotation: what it is, what it targets and what it says."""

    id: str
    type: AnnotationType
    target: AnnotationTarget
    value: AnnotationValue
    metadata: AnnotationMetadata | None = None

    @classmethod
    def lemma(
        cls, word_index: int, lemma: str, msa: str, normalized: str | None = None
    ) -> Annotation:
        """Build a lemma annotation with the conventional ``lemma-N`` id."""
        return cls(
            id=f"lemma-{word_index}",
            type=AnnotationType.LEMMA,
            target=WordTarget(word_index),
            value=LemmaValue(lemma, msa, normalized),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "target": _target_to_dict(self.target),
            "value": _value_to_dict(self.value),
        }
        if self.metadata is not None:
            data["metadata"] = _fields_to_dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Annotation:
        """Build an annotation from its camelCase JSON form.

        Raises:
            ValueError: Unknown annotation type, target type or value kind.
            KeyError: A required field is missing.
        """
        metadata = data.get("metadata")
        return cls(
            id=data["id"],
            type=AnnotationType(data["type"]),
            target=_target_from_dict(data["target"]),
            value=_value_from_dict(data["value"]),
            metadata=_fields_from_dict(AnnotationMetadata, metadata) if metadata else None,
        )


@dataclass(frozen=True, slots=True)
class LemmaMapping:
    """Lemma, morphological analysis and optional stored normalized form."""

    lemma: str
    msa: str
    normalized: str | None = None


class AnnotationSet:
    """All annotations of one document.

    Usage:
        >>> annotations = AnnotationSet()
        >>> annotations.add(Annotation.lemma(0, "maðr", "xNC cN nS gM"))
        >>> annotations.lemma_map()[0].lemma
        'maðr'

    """

    __slots__ = ("version", "annotations")

    def __init__(self, annotations: list[Annotation] | None = None, version: str = "1.0") -> None:
        self.version = version
        self.annotations: list[Annotation] = list(annotations or [])

    def add(self, annotation: Annotation) -> None:
        self.annotations.append(annotation)

    def remove(self, annotation_id: str) -> Annotation | None:
        """Remove and return the annotation with ``annotation_id``, if present."""
        for i, annotation in enumerate(self.annotations):
            if annotation.id == annotation_id:
                return self.annotations.pop(i)
        return None

    def get(self, annotation_id: str) -> Annotation | None:
        for annotation in self.annotations:
            if annotation.id == annotation_id:
                return annotation
        return None

    def for_word(self, word_index: int) -> list[Annotation]:
        """Annotations whose target covers ``word_index``, in insertion order."""
        return [a for a in self.annotations if a.target.includes_word(word_index)]

    def by_type(self, annotation_type: AnnotationType) -> list[Annotation]:
        return [a for a in self.annotations if a.type is annotation_type]

    def lemma_map(self) -> dict[int, LemmaMapping]:
        """Word-targeted lemma annotations as a lemma table for the compiler."""
        result: dict[int, LemmaMapping] = {}
        for annotation in self.annotations:
            match annotation:
                case Annotation(
                    type=AnnotationType.LEMMA,
                    target=WordTarget(word_index=index),
                    value=LemmaValue(lemma=lemma, msa=msa, normalized=normalized),
                ):
                    result[index] = LemmaMapping(lemma, msa, normalized)
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "annotations": [a.to_dict() for a in self.annotations],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnnotationSet:
        return cls(
            [Annotation.from_dict(a) for a in data.get("annotations", [])],
            version=data.get("version", "1.0"),
        )

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_json(cls, text: str) -> AnnotationSet:
        return cls.from_dict(json.loads(text))

    def __len__(self) -> int:
        return len(self.annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(self.annotations)

    def __bool__(self) -> bool:
        return bool(self.annotations)


# =============================================================================
# camelCase conversion
# =============================================================================


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _fields_to_dict(obj: Any) -> dict[str, Any]:
    """Dataclass fields as camelCase keys, omitting None and unwrapping enums."""
    result: dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, dict):
            value = dict(value)
        result[_camel(f.name)] = value
    return result


def _fields_from_dict(cls: type, data: Mapping[str, Any]) -> Any:
    enums = _ENUM_FIELDS.get(cls, {})
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if f.name in enums:
            value = enums[f.name](value)
        kwargs[f.name] = value
    return cls(**kwargs)


def _target_to_dict(target: AnnotationTarget) -> dict[str, Any]:
    match target:
        case WordTarget():
            tag = "word"
        case CharTarget():
            tag = "char"
        case SpanTarget():
            tag = "span"
    return {"type": tag, **_fields_to_dict(target)}


def _target_from_dict(data: Mapping[str, Any]) -> AnnotationTarget:
    tag = data.get("type")
    target_cls = _TARGET_TAGS.get(tag) if isinstance(tag, str) else None
    if target_cls is None:
        raise ValueError(f"Unknown annotation target type: {tag!r}")
    return _fields_from_dict(target_cls, data)


def _value_to_dict(value: AnnotationValue) -> dict[str, Any]:
    return {"kind": _KIND_NAMES[type(value)], **_fields_to_dict(value)}


def _value_from_dict(data: Mapping[str, Any]) -> AnnotationValue:
    kind = data.get("kind")
    value_cls = _VALUE_KINDS.get(kind) if isinstance(kind, str) else None
    if value_cls is None:
        raise ValueError(f"Unknown annotation value kind: {kind!r}")
    return _fields_from_dict(value_cls, data)


__all__ = [
    "Annotation",
    "AnnotationMetadata",
    "AnnotationSet",
    "AnnotationTarget",
    "AnnotationType",
    "AnnotationValue",
    "CharTarget",
    "CustomValue",
    "LemmaMapping",
    "LemmaValue",
    "MenotaAddPlace",
    "MenotaAddType",
    "MenotaCharType",
    "MenotaDelRend",
    "MenotaObservationType",
    "MenotaPaleographicValue",
    "MenotaSuppliedReason",
    "MenotaUnclearReason",
    "NoteValue",
    "PaleographicType",
    "PaleographicValue",
    "ReferenceValue",
    "SemanticValue",
    "SpanTarget",
    "SyntaxValue",
    "WordTarget",
]
