"""Tests for the entity registry and the level dictionary."""

import json

import pytest

from scriptorium.entities import EntityDefinition, EntityRegistry
from scriptorium.normalizer import LevelDictionary

ENTITY_JSON = json.dumps(
    {
        "version": "1.0",
        "name": "test",
        "entities": {
            "eth": {"unicode": "U+00F0", "char": "ð", "description": "eth", "category": "letter"},
            "dstrok": {"unicode": "U+0111", "char": "đ"},
            "ethalt": {"char": "ð"},
        },
    }
)


class TestEntityRegistry:
    """Forward and reverse lookup."""

    def test_from_json(self) -> None:
        registry = EntityRegistry.from_json(ENTITY_JSON)
        assert len(registry) == 3
        assert registry.resolve("eth") == "ð"
        assert registry.get("eth") == EntityDefinition("U+00F0", "ð", "eth", "letter")
        assert "dstrok" in registry
        assert registry.names() == ["dstrok", "eth", "ethalt"]

    def test_unknown_name(self) -> None:
        assert EntityRegistry().resolve("eth") is None

    def test_reverse_lookup_first_loaded_wins(self) -> None:
        registry = EntityRegistry.from_json(ENTITY_JSON)
        assert registry.reverse_lookup("ð") == "eth"
        assert registry.reverse_lookup("x") is None

    def test_later_load_merges(self) -> None:
        registry = EntityRegistry.from_json(ENTITY_JSON)
        registry.load_json(json.dumps({"entities": {"thorn": {"char": "þ"}}}))
        assert registry.resolve("thorn") == "þ"
        assert registry.resolve("eth") == "ð"

    def test_from_file(self, tmp_path) -> None:
        path = tmp_path / "entities.json"
        path.write_text(ENTITY_JSON, encoding="utf-8")
        assert EntityRegistry.from_file(path).resolve("dstrok") == "đ"

    def test_missing_entities_table(self) -> None:
        with pytest.raises(ValueError, match="entities"):
            EntityRegistry.from_json('{"version": "1.0"}')

    def test_malformed_json(self) -> None:
        with pytest.raises(ValueError):
            EntityRegistry.from_json("{")


class TestLevelDictionary:
    """Combining marks, base letters and normalization."""

    DICTIONARY_JSON = json.dumps(
        {
            "diplomatic": {"combining_marks": ["combacute"]},
            "normalized": {
                "character_mappings": {"ð": "d", "æ": "ä"},
                "ligature_expansions": {"æ": "ae", "ꝥ": "þat"},
            },
        }
    )

    def test_from_json(self) -> None:
        dictionary = LevelDictionary.from_json(self.DICTIONARY_JSON)
        assert dictionary.is_combining_mark("combacute")
        assert not dictionary.is_combining_mark("eth")

    def test_character_mapping_wins_over_ligature(self) -> None:
        dictionary = LevelDictionary.from_json(self.DICTIONARY_JSON)
        assert dictionary.normalize_char("æ") == "ä"
        assert dictionary.normalize_char("ꝥ") == "þat"
        assert dictionary.normalize_char("a") is None

    def test_normalize_text(self) -> None:
        dictionary = LevelDictionary.from_json(self.DICTIONARY_JSON)
        assert dictionary.normalize_text("ꝥ var ðar") == "þat var dar"

    def test_missing_section(self) -> None:
        with pytest.raises(ValueError, match="Failed to parse dictionary"):
            LevelDictionary.from_json('{"diplomatic": {}}')

    def test_entity_mappings(self) -> None:
        dictionary = LevelDictionary()
        dictionary.load_entity_mappings('{"mappings": {"rrot": "r"}}')
        assert dictionary.entity_base_letter("rrot") == "r"
        dictionary.add_entity_mappings({"slong": "s"})
        assert dictionary.entity_base_letter("slong") == "s"
        assert dictionary.entity_base_letter("eth") is None

    def test_entity_mappings_require_table(self) -> None:
        with pytest.raises(ValueError, match="mappings"):
            LevelDictionary().load_entity_mappings("[]")

    def test_multi_character_keys_use_first_character(self) -> None:
        dictionary = LevelDictionary(char_mappings={"ðx": "d"})
        assert dictionary.normalize_char("ð") == "d"
