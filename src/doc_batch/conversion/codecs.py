"""
Text extraction and output encoding.

Extraction turns validated source bytes into plain text; encoding turns
plain text into the bytes of the requested target format. Both are blocking
and are run off the event loop by the batch service.
"""

import io
import re

from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph

from .exceptions import (
    EncodingError,
    ExtractionError,
    NoTextExtractedError,
    UnsupportedSourceError,
    UnsupportedTargetError,
)
from .interfaces import OcrGateway, PdfTextGateway
from .models import SourceKind, TargetKind

_LINE_BREAK = re.compile(r"\r?\n")
# characters lxml refuses in text nodes (XML 1.0 forbids C0 controls except tab, LF, CR)
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def decode_text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _block_lines(container, parent):
    """Paragraph texts of a body or table cell in document order, tables included."""
    for child in container.iterchildren():
        if child.tag == qn("w:p"):
            yield Paragraph(child, parent).text
        elif child.tag == qn("w:tbl"):
            for row in Table(child, parent).rows:
                seen = []
                for cell in row.cells:
                    # merged cells repeat the same w:tc across the row
                    if any(cell._tc is tc for tc in seen):
                        continue
                    seen.append(cell._tc)
                    yield from _block_lines(cell._tc, cell)


def docx_to_text(docx_bytes: bytes) -> str:
    """Raw text of a DOCX: one line per paragraph or table-cell paragraph, trimmed."""
    try:
        doc = Document(io.BytesIO(docx_bytes))
        lines = list(_block_lines(doc.element.body, doc))
    except Exception as exc:
        raise ExtractionError(f"docx extraction failed: {exc}") from exc
    return "\n".join(lines).strip()


def xml_safe(text: str) -> str:
    return _XML_ILLEGAL.sub("", text)


def text_to_docx(text: str) -> bytes:
    """Build a minimal document with one unstyled paragraph per line.

    Control characters that XML cannot carry (form feeds and the like) are dropped.
    """
    doc = Document()
    for line in _LINE_BREAK.split(xml_safe(text)):
        doc.add_paragraph(line)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def encode(text: str, target: TargetKind) -> bytes:
    if target is TargetKind.TXT:
        return text.encode("utf-8")
    if target is TargetKind.DOCX:
        try:
            return text_to_docx(text)
        except Exception as exc:
            raise EncodingError(f"docx encoding failed: {exc}") from exc
    raise UnsupportedTargetError(f"Unsupported target: {target}")


class TextExtractor:
    """Dispatches extraction by detected source kind."""

    def __init__(self, pdf_extractor: PdfTextGateway, ocr: OcrGateway) -> None:
        self._pdf_extractor = pdf_extractor
        self._ocr = ocr

    @property
    def ocr_available(self) -> bool:
        return self._ocr.available

    def extract(self, kind: SourceKind, data: bytes, source_name: str = "") -> str:
        if kind is SourceKind.PDF:
            text = self._pdf_extractor.extract_text(data).strip()
            if not text:
                raise NoTextExtractedError(f"No text extracted (likely scanned PDF): {source_name}")
            return text
        if kind is SourceKind.DOCX:
            return docx_to_text(data)
        if kind is SourceKind.TXT:
            return decode_text(data)
        if kind is SourceKind.IMAGE:
            return self._ocr.image_to_text(data)
        raise UnsupportedSourceError(f"Unsupported source: {source_name}")
