"""TEI import: source text -> editable DSL plus a reconstruction manifest."""

from __future__ import annotations

from dataclasses import dataclass

from scriptorium.errors import TeiImportError
from scriptorium.importer.extraction import extract_segments, has_multilevel_structure
from scriptorium.importer.flatten import segments_to_dsl
from scriptorium.importer.segments import ImportManifest
from scriptorium.importer.xmltree import find_body, open_tag, parse_document, serialize_node
from scriptorium.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Result of importing a TEI document.

    Attributes:
        dsl: Editable DSL projection of the body
        manifest: Segments and source fragments for reconstruction
        body_xml: The body element as serialized markup

    """

    dsl: str
    manifest: ImportManifest
    body_xml: str

    @property
    def is_multilevel(self) -> bool:
        return self.manifest.is_multilevel

    def export(self, body_inner: str) -> str:
        return self.manifest.export(body_inner)


def split_xml_sections(xml: str, fallback_open_tag: str = "<body>") -> tuple[str, str, str]:
    """Split source text around the body element.

    Returns:
        ``(preamble, body_open_tag, postamble)``. When no ``<body`` ...
        ``</body>`` pair is found in the text, the preamble and postamble
        are empty and ``fallback_open_tag`` is returned.
    """
    start = xml.find("<body")
    while start != -1 and xml[start + 5 : start + 6] not in (">", " ", "\t", "\n", "\r", "/"):
        start = xml.find("<body", start + 1)
    if start == -1:
        return "", fallback_open_tag, ""
    tag_end = xml.find(">", start)
    close = xml.find("</body>", tag_end)
    if tag_end == -1 or close == -1:
        return "", fallback_open_tag, ""
    return xml[:start], xml[start : tag_end + 1], xml[close + len("</body>") :]


def import_tei(xml: str) -> ImportResult:
    """Import a TEI document for DSL editing.

    Raises:
        TeiImportError: The document is malformed or has no ``<body>``.
    """
    root = parse_document(xml)
    body = find_body(root)
    if body is None:
        raise TeiImportError("No <body> element found")

    is_multilevel = has_multilevel_structure(body)
    segments = extract_segments(body)
    preamble, body_open_tag, postamble = split_xml_sections(xml, open_tag(body))
    manifest = ImportManifest(
        segments=tuple(segments),
        is_multilevel=is_multilevel,
        preamble=preamble,
        body_open_tag=body_open_tag,
        postamble=postamble,
    )
    logger.debug(
        "Imported TEI: %d segments, multilevel=%s", len(segments), is_multilevel
    )
    return ImportResult(segments_to_dsl(segments), manifest, serialize_node(body))


__all__ = ["ImportResult", "import_tei", "split_xml_sections"]
