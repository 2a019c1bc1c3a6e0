from __future__ import annotations

import io
import re
import zipfile
from xml.sax.saxutils import unescape

import structlog

from app.core.errors import EmptyContent, ParseFailure, UnsupportedFormat

logger = structlog.get_logger(__name__)

MIME_TEXT = "text/plain"
MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_SLIDE_PART_RE = re.compile(r"^ppt/slides/slide\d+\.xml$")
_TEXT_RUN_RE = re.compile(r"<a:t>(.*?)</a:t>", re.DOTALL)


def _normalize_mime(mime_type: str | None) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return (mime_type or "").split(";", 1)[0].strip().lower()


# ----------------------------
# Per-format strategies
# ----------------------------

def _extract_plain_text(buffer: bytes) -> str:
    return buffer.decode("utf-8", errors="replace")


def _extract_pdf(buffer: bytes) -> str:
    """
    Page text with fragments joined by single spaces; pages joined by newlines.
    """
    if not buffer:
        raise EmptyContent("Could not extract text from PDF. It might be scanned or empty.")

    from pypdf import PdfReader

    try:
        reader = PdfReader(io.BytesIO(buffer))
        if reader.is_encrypted:
            reader.decrypt("")
        pages: list[str] = []
        for page in reader.pages:
            fragments = (page.extract_text() or "").split()
            pages.append(" ".join(fragments))
    except Exception as e:
        raise ParseFailure(
            "Failed to parse PDF. The file might be encrypted, corrupted, or not a valid PDF."
        ) from e

    text = "\n".join(pages)
    if not text.strip():
        raise EmptyContent("Could not extract text from PDF. It might be scanned or empty.")
    return text


def _extract_docx(buffer: bytes) -> str:
    from docx import Document

    try:
        doc = Document(io.BytesIO(buffer))
        lines = [p.text for p in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                for cell in row.cells:
                    lines.append(cell.text)
    except Exception as e:
        raise ParseFailure("Failed to parse DOCX. The file might be corrupted.") from e

    return "\n".join(line for line in lines if line.strip())


def _extract_pptx(buffer: bytes) -> str:
    try:
        with zipfile.ZipFile(io.BytesIO(buffer)) as zf:
            runs: list[str] = []
            for name in zf.namelist():
                if not _SLIDE_PART_RE.match(name):
                    continue
                xml = zf.read(name).decode("utf-8", errors="replace")
                for m in _TEXT_RUN_RE.finditer(xml):
                    run = unescape(m.group(1), {"&quot;": '"', "&apos;": "'"}).strip()
                    if run:
                        runs.append(run)
    except Exception as e:
        raise ParseFailure("Failed to parse PPTX. The file might be corrupted.") from e

    return " ".join(runs)


def _cell_text(value) -> str:
    return "" if value is None else str(value).strip()


def _extract_xlsx(buffer: bytes) -> str:
    from openpyxl import load_workbook

    lines: list[str] = []
    try:
        wb = load_workbook(io.BytesIO(buffer), read_only=True, data_only=True)
        try:
            for ws in wb.worksheets:
                lines.append(f"Sheet: {ws.title}")
                for row in ws.iter_rows(values_only=True):
                    cells = [_cell_text(v) for v in row]
                    while cells and not cells[-1]:
                        cells.pop()
                    # empty row-header slot
                    if cells and not cells[0]:
                        cells = cells[1:]
                    if not any(cells):
                        continue
                    lines.append(" | ".join(cells))
        finally:
            wb.close()
    except Exception as e:
        raise ParseFailure("Failed to parse XLSX. The file might be corrupted.") from e

    # sheet markers alone are not content
    if not any(not line.startswith("Sheet: ") for line in lines):
        return ""
    return "\n".join(lines)


_STRATEGIES = {
    MIME_TEXT: _extract_plain_text,
    MIME_PDF: _extract_pdf,
    MIME_DOCX: _extract_docx,
    MIME_PPTX: _extract_pptx,
    MIME_XLSX: _extract_xlsx,
}

SUPPORTED_MIME_TYPES = tuple(_STRATEGIES)


# ----------------------------
# Public API
# ----------------------------

def extract_text(buffer: bytes, mime_type: str, filename: str) -> str:
    """
    Turn an uploaded document into plain text.

    Raises:
      UnsupportedFormat - mime type is not one of SUPPORTED_MIME_TYPES
      ParseFailure      - the format library could not read the buffer
      EmptyContent      - the document parsed but holds no text
    """
    mime = _normalize_mime(mime_type)
    if mime not in SUPPORTED_MIME_TYPES:
        logger.info(
            "extraction_unsupported",
            filename=filename,
            mime_type=mime_type,
            supported=SUPPORTED_MIME_TYPES,
        )
        raise UnsupportedFormat(mime_type)

    try:
        text = _STRATEGIES[mime](buffer or b"")
    except (ParseFailure, EmptyContent) as e:
        logger.warning(
            "extraction_failed",
            filename=filename,
            mime_type=mime,
            error=e.error_code,
            cause=repr(e.__cause__) if e.__cause__ else None,
        )
        raise

    if not text.strip():
        logger.warning("extraction_empty", filename=filename, mime_type=mime)
        raise EmptyContent(f"Could not extract any text from {filename or 'the uploaded file'}.")

    logger.info("extraction_done", filename=filename, mime_type=mime, chars=len(text))
    return text
