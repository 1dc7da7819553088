import io

import pytest
from docx import Document
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from atsboost.libs.document_parser import DOCX_MIME, DocumentParser
from atsboost.libs.exceptions import FileUploadException


@pytest.fixture
def parser():
    return DocumentParser(max_pages=5)


def _docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _pdf_bytes(*pages: str) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    for text in pages:
        pdf.drawString(72, 760, text)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.mark.parametrize(
    "filename,content_type,expected",
    [
        ("cv.pdf", "application/pdf", "pdf"),
        ("cv.docx", DOCX_MIME, "docx"),
        ("cv.txt", "text/plain; charset=utf-8", "txt"),
        ("CV.PDF", None, "pdf"),
        ("cv.docx", "application/octet-stream", "docx"),
    ],
)
def test_detect_file_type(parser, filename, content_type, expected):
    assert parser.detect_file_type(filename, content_type) == expected


def test_detect_file_type_rejects_unknown(parser):
    with pytest.raises(FileUploadException, match="Invalid file type"):
        parser.detect_file_type("cv.exe", "application/x-msdownload")


def test_detect_file_type_rejects_disallowed_mime_type(parser):
    with pytest.raises(FileUploadException, match="Invalid file type"):
        parser.detect_file_type("cv.txt", "image/png")


def test_parse_text(parser):
    assert parser.parse("  Python developer\n".encode("utf-8"), "txt") == "Python developer"


def test_parse_docx(parser):
    text = parser.parse(_docx_bytes("Thandi Nkosi", "Project manager, Johannesburg"), "docx")

    assert "Thandi Nkosi" in text
    assert "Project manager, Johannesburg" in text


def test_parse_sanitizes_html(parser):
    text = parser.parse(b"<html><body><p>Python &amp; SQL</p><script>x()</script></body></html>", "txt")

    assert text == "Python & SQL"


def test_parse_empty_content_fails(parser):
    with pytest.raises(FileUploadException, match="Could not extract content"):
        parser.parse(b"   ", "txt")


def test_parse_corrupt_docx_fails(parser):
    with pytest.raises(FileUploadException):
        parser.parse(b"not a zip file", "docx")


def test_parse_pdf_reads_up_to_max_pages():
    content = _pdf_bytes("Thandi Nkosi Project Manager", "Skills Python SQL", "References on request")

    text = DocumentParser(max_pages=2).parse(content, "pdf")

    assert "Thandi Nkosi Project Manager" in text
    assert "Skills Python SQL" in text
    assert "References on request" not in text


def test_parse_corrupt_pdf_fails(parser):
    with pytest.raises(FileUploadException):
        parser.parse(b"%PDF-1.4 truncated", "pdf")
