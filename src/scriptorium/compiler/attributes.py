"""Per-word attributes and note children derived from lemmas and annotations."""

from __future__ import annotations

from collections.abc import Mapping

from scriptorium.annotations import (
    AnnotationSet,
    AnnotationType,
    LemmaMapping,
    MenotaObservationType,
    MenotaPaleographicValue,
    NoteValue,
    PaleographicType,
    PaleographicValue,
    SemanticValue,
)
from scriptorium.markup import escape_xml

_PALEO_KINDS: dict[PaleographicType, str] = {
    PaleographicType.UNCLEAR: "unclear",
    PaleographicType.DAMAGE: "damage",
    PaleographicType.ERASURE: "erasure",
    PaleographicType.LETTERFORM: "letterform",
    PaleographicType.ABBREVIATION: "abbrev-mark",
    PaleographicType.CORRECTION: "correction",
    PaleographicType.ADDITION: "addition",
    PaleographicType.DECORATION: "decoration",
    PaleographicType.OTHER: "paleo",
}


def certainty_label(certainty: float) -> str:
    """Bucket a 0..1 certainty into the TEI ``cert`` vocabulary.

        >>> certainty_label(0.8), certainty_label(0.5), certainty_label(0.2)
        ('high', 'medium', 'low')
    """
    if certainty >= 0.8:
        return "high"
    if certainty >= 0.5:
        return "medium"
    return "low"


def _attr(name: str, value: str) -> str:
    return f' {name}="{escape_xml(value)}"'


def _menota_attributes(value: MenotaPaleographicValue, ana: list[str]) -> list[str]:
    attrs: list[str] = []
    match value.observation_type:
        case MenotaObservationType.UNCLEAR:
            ana.append("#unclear")
            if value.unclear_reason is not None:
                attrs.append(_attr("reason", value.unclear_reason.value))
            if value.certainty is not None:
                attrs.append(_attr("cert", certainty_label(value.certainty)))
        case MenotaObservationType.ADDITION:
            ana.append("#addition")
            if value.add_place is not None:
                attrs.append(_attr("place", value.add_place.value))
            if value.add_type is not None:
                attrs.append(_attr("type", value.add_type.value))
            if value.hand is not None:
                attrs.append(_attr("hand", value.hand))
        case MenotaObservationType.DELETION:
            ana.append("#deletion")
            if value.del_rend is not None:
                attrs.append(_attr("rend", value.del_rend.value))
            if value.hand is not None:
                attrs.append(_attr("hand", value.hand))
        case MenotaObservationType.SUPPLIED:
            ana.append("#supplied")
            if value.supplied_reason is not None:
                attrs.append(_attr("reason", value.supplied_reason.value))
            if value.resp is not None:
                attrs.append(_attr("resp", value.resp))
    return attrs


class WordAttributesMixin:
    """Lemma, analysis and note rendering keyed by word index.

    Expects the host class to provide ``_lemma_mappings`` and
    ``_annotations``.

    """

    # These will be set by the Compiler class
    _lemma_mappings: Mapping[int, LemmaMapping]
    _annotations: AnnotationSet | None

    def _lemma_attributes(self, word_index: int) -> str:
        mapping = self._lemma_mappings.get(word_index)
        if mapping is None:
            return ""
        return _attr("lemma", mapping.lemma) + _attr("me:msa", mapping.msa)

    def _stored_normalized(self, word_index: int) -> str | None:
        mapping = self._lemma_mappings.get(word_index)
        return mapping.normalized if mapping else None

    def _annotation_attributes(self, word_index: int) -> str:
        """Attributes from semantic and paleographic annotations.

        Attribute order follows annotation order, and ``ana`` always comes
        last, holding every analysis pointer space-separated.
        """
        if self._annotations is None:
            return ""
        attrs: list[str] = []
        ana: list[str] = []
        for annotation in self._annotations.for_word(word_index):
            match (annotation.type, annotation.value):
                case (AnnotationType.SEMANTIC, SemanticValue(category=cat, subcategory=sub)):
                    ana.append(f"#{cat}:{sub}" if sub is not None else f"#{cat}")
                case (AnnotationType.PALEOGRAPHIC, PaleographicValue() as value):
                    ana.append(f"#paleo:{_PALEO_KINDS[value.observation_type]}")
                    if value.certainty is not None:
                        attrs.append(_attr("cert", certainty_label(value.certainty)))
                case (AnnotationType.PALEOGRAPHIC, MenotaPaleographicValue() as value):
                    attrs.extend(_menota_attributes(value, ana))
        if ana:
            attrs.append(_attr("ana", " ".join(ana)))
        return "".join(attrs)

    def _note_elements(self, word_index: int) -> str:
        if self._annotations is None:
            return ""
        notes: list[str] = []
        for annotation in self._annotations.for_word(word_index):
            match (annotation.type, annotation.value):
                case (AnnotationType.NOTE, NoteValue(text=text, category=category)):
                    type_attr = _attr("type", category) if category is not None else ""
                    notes.append(f"<note{type_attr}>{escape_xml(text)}</note>")
        return "".join(notes)
