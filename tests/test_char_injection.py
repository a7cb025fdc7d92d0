"""Tests for <c> tag injection into facsimile markup."""

from hypothesis import given, settings
from hypothesis import strategies as st

from scriptorium.annotations import (
    Annotation,
    AnnotationSet,
    AnnotationType,
    CharTarget,
    MenotaCharType,
    MenotaObservationType,
    MenotaPaleographicValue,
    PaleographicType,
    PaleographicValue,
)
from scriptorium.compiler.char_injection import CharRange, character_ranges, inject_character_tags


def _char(word: int, start: int, end: int, char_type: MenotaCharType) -> Annotation:
    return Annotation(
        f"c{word}-{start}-{end}",
        AnnotationType.PALEOGRAPHIC,
        CharTarget(word, start, end),
        MenotaPaleographicValue(MenotaObservationType.CHARACTER, char_type=char_type),
    )


class TestInjection:
    """Visible-character addressing."""

    def test_no_ranges_is_identity(self) -> None:
        assert inject_character_tags("M&eth;r", []) == "M&eth;r"

    def test_entity_counts_as_one_character(self) -> None:
        ranges = [CharRange(1, 2, "rubric")]
        assert inject_character_tags("M&eth;r", ranges) == 'M<c type="rubric">&eth;</c>r'

    def test_tags_are_skipped(self) -> None:
        ranges = [CharRange(0, 2, "capital")]
        assert (
            inject_character_tags("<abbr>dn</abbr>i", ranges)
            == '<abbr><c type="capital">dn</c></abbr>i'
        )

    def test_nested_ranges(self) -> None:
        ranges = [CharRange(0, 3, "colored"), CharRange(0, 1, "initial")]
        assert inject_character_tags("abcd", ranges) == (
            '<c type="colored"><c type="initial">a</c>bc</c>d'
        )

    def test_range_past_end_is_closed(self) -> None:
        ranges = [CharRange(1, 10, "rubric")]
        assert inject_character_tags("ab", ranges) == 'a<c type="rubric">b</c>'


class TestCharacterRanges:
    """Which annotations become ranges."""

    def test_only_character_observations_with_type(self) -> None:
        annotations = AnnotationSet(
            [
                _char(0, 2, 3, MenotaCharType.RUBRIC),
                _char(0, 0, 4, MenotaCharType.COLORED),
                _char(0, 0, 1, MenotaCharType.INITIAL),
                _char(1, 0, 1, MenotaCharType.CAPITAL),
                Annotation(
                    "p",
                    AnnotationType.PALEOGRAPHIC,
                    CharTarget(0, 0, 1),
                    PaleographicValue(PaleographicType.DAMAGE),
                ),
                _char(0, 3, 3, MenotaCharType.RUBRIC),
            ]
        )
        assert character_ranges(annotations, 0) == [
            CharRange(0, 4, "colored"),
            CharRange(0, 1, "initial"),
            CharRange(2, 3, "rubric"),
        ]

    def test_no_annotations(self) -> None:
        assert character_ranges(None, 0) == []


class TestProperties:
    """Injection never changes the visible text."""

    @given(
        text=st.text(alphabet="abcðþ", min_size=1, max_size=12),
        start=st.integers(min_value=0, max_value=11),
        length=st.integers(min_value=1, max_value=5),
    )
    @settings(max_examples=50)
    def test_removing_tags_restores_text(self, text: str, start: int, length: int) -> None:
        xml = inject_character_tags(text, [CharRange(start, start + length, "initial")])
        stripped = xml.replace('<c type="initial">', "").replace("</c>", "")
        assert stripped == text
        assert xml.count("<c ") == xml.count("</c>")
