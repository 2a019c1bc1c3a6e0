import io
import zipfile

import pytest
from docx import Document
from openpyxl import Workbook
from pypdf import PdfWriter

from app.core.errors import EmptyContent, ParseFailure, UnsupportedFormat
from app.services.extraction import (
    MIME_DOCX,
    MIME_PDF,
    MIME_PPTX,
    MIME_TEXT,
    MIME_XLSX,
    SUPPORTED_MIME_TYPES,
    extract_text,
)


def _norm(s: str) -> str:
    return " ".join(s.split())


def make_pdf(pages: list[str]) -> bytes:
    """Minimal text PDF: one Helvetica text object per page."""
    n = len(pages)
    font_id = 3 + 2 * n
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        (
            "<< /Type /Pages /Kids ["
            + " ".join(f"{3 + 2 * i} 0 R" for i in range(n))
            + f"] /Count {n} >>"
        ).encode(),
    ]
    for i, text in enumerate(pages):
        page_id, content_id = 3 + 2 * i, 4 + 2 * i
        stream = f"BT /F1 18 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {content_id} 0 R >>"
            ).encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % num + body + b"\nendobj\n")
    xref_at = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for off in offsets:
        out.write(b"%010d 00000 n \n" % off)
    out.write(b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at))
    return out.getvalue()


def make_blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_docx(paragraphs: list[str]) -> bytes:
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Term"
    table.rows[0].cells[1].text = "Stroma"
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def make_pptx(slides: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("[Content_Types].xml", "<Types/>")
        zf.writestr("ppt/presentation.xml", "<p:presentation/>")
        for i, runs in enumerate(slides, start=1):
            body = "".join(f"<a:r><a:t>{r}</a:t></a:r>" for r in runs)
            zf.writestr(
                f"ppt/slides/slide{i}.xml",
                f'<p:sld xmlns:a="a" xmlns:p="p"><p:txBody><a:p>{body}</a:p></p:txBody></p:sld>',
            )
        zf.writestr("ppt/slides/_rels/slide1.xml.rels", "<Relationships><a:t>not slide text</a:t></Relationships>")
    return buf.getvalue()


def make_xlsx() -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Glossary"
    ws.append(["Term", "Meaning"])
    ws.append(["Chlorophyll", "Green pigment"])
    ws.append([None, "Calvin cycle", "Stroma"])
    ws.append([])
    second = wb.create_sheet("Numbers")
    second.append(["Year", 2024])
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_plain_text_is_decoded_verbatim():
    text = "Mitochondria are the powerhouse of the cell.\nSecond line."
    assert extract_text(text.encode("utf-8"), MIME_TEXT, "notes.txt") == text


def test_plain_text_mime_parameters_are_ignored():
    out = extract_text("héllo wörld".encode("utf-8"), "text/plain; charset=utf-8", "notes.txt")
    assert out == "héllo wörld"


def test_pdf_pages_are_joined_with_newlines():
    pdf = make_pdf(["Light reactions happen in thylakoids", "The Calvin cycle happens in the stroma"])
    out = extract_text(pdf, MIME_PDF, "bio.pdf")
    assert "Light reactions happen in thylakoids" in _norm(out)
    assert "The Calvin cycle happens in the stroma" in _norm(out)
    assert len(out.split("\n")) == 2


def test_zero_byte_pdf_is_empty_content():
    with pytest.raises(EmptyContent):
        extract_text(b"", MIME_PDF, "empty.pdf")


def test_blank_page_pdf_is_empty_content():
    with pytest.raises(EmptyContent):
        extract_text(make_blank_pdf(), MIME_PDF, "scan.pdf")


def test_garbage_pdf_is_parse_failure():
    with pytest.raises(ParseFailure) as ei:
        extract_text(b"this is definitely not a pdf", MIME_PDF, "broken.pdf")
    assert ei.value.__cause__ is not None


def test_docx_paragraphs_and_tables():
    out = extract_text(make_docx(["Osmosis moves water across membranes.", "Diffusion is passive."]), MIME_DOCX, "a.docx")
    assert "Osmosis moves water across membranes." in out
    assert "Diffusion is passive." in out
    assert "Stroma" in out


def test_pptx_text_runs_from_every_slide():
    data = make_pptx([["Cell", "Biology"], ["Enzymes &amp; catalysts"]])
    out = extract_text(data, MIME_PPTX, "deck.pptx")
    assert "Cell Biology" in out
    assert "Enzymes & catalysts" in out
    assert "not slide text" not in out


def test_pptx_that_is_not_a_zip_is_parse_failure():
    with pytest.raises(ParseFailure):
        extract_text(b"PK-but-not-really", MIME_PPTX, "deck.pptx")


def test_xlsx_sheets_and_rows():
    out = extract_text(make_xlsx(), MIME_XLSX, "sheet.xlsx")
    lines = out.split("\n")
    assert lines[0] == "Sheet: Glossary"
    assert "Term | Meaning" in lines
    assert "Chlorophyll | Green pigment" in lines
    # leading empty cell skipped
    assert "Calvin cycle | Stroma" in lines
    assert "Sheet: Numbers" in lines
    assert "Year | 2024" in lines


def test_unsupported_mime_names_the_type():
    with pytest.raises(UnsupportedFormat) as ei:
        extract_text(b"PK\x03\x04", "application/zip", "archive.zip")
    assert "application/zip" in ei.value.message


def test_whitespace_only_text_is_empty_content():
    with pytest.raises(EmptyContent):
        extract_text(b"   \n\t ", MIME_TEXT, "blank.txt")


def test_supported_types_cover_every_format():
    assert set(SUPPORTED_MIME_TYPES) == {MIME_TEXT, MIME_PDF, MIME_DOCX, MIME_PPTX, MIME_XLSX}
    for mime in SUPPORTED_MIME_TYPES:
        with pytest.raises((ParseFailure, EmptyContent)):
            extract_text(b"", mime, "empty")
