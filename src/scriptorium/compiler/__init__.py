"""DSL to TEI compiler.

Architecture:
    core.py            Compiler, CompileContext and node dispatch
    levels.py          facsimile / diplomatic / normalized renderings
    attributes.py      lemma, ana/cert/reason attributes and note children
    char_injection.py  <c type="..."> ranges in facsimile text
"""

from scriptorium.compiler.attributes import certainty_label
from scriptorium.compiler.char_injection import CharRange, character_ranges, inject_character_tags
from scriptorium.compiler.core import CompileContext, Compiler

__all__ = [
    "CharRange",
    "CompileContext",
    "Compiler",
    "certainty_label",
    "character_ranges",
    "inject_character_tags",
]
