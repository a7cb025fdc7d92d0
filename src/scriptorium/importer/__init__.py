"""TEI import for round-trip editing.

Architecture:
    xmltree.py     lxml helpers: content order, names, verbatim serialization
    segments.py    Segment union and ImportManifest
    extraction.py  Extractor: body element -> segment list
    flatten.py     segment list -> editable DSL
    tei.py         import_tei entry point and ImportResult
"""

from scriptorium.importer.extraction import Extractor, extract_segments, has_multilevel_structure
from scriptorium.importer.flatten import segments_to_dsl
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
    serialize_segment,
)
from scriptorium.importer.tei import ImportResult, import_tei, split_xml_sections

__all__ = [
    "Extractor",
    "HandShiftSegment",
    "ImportManifest",
    "ImportResult",
    "LineBreakSegment",
    "PageBreakSegment",
    "PunctuationSegment",
    "Segment",
    "StructuralSegment",
    "WhitespaceSegment",
    "WordSegment",
    "extract_segments",
    "has_multilevel_structure",
    "import_tei",
    "segments_to_dsl",
    "serialize_segment",
    "split_xml_sections",
]
