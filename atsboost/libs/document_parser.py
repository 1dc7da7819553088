"""Text extraction from uploaded CV files (PDF, DOCX, plain text)."""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePath

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from atsboost.config import settings
from atsboost.libs.exceptions import FileUploadException
from atsboost.utils.util import looks_like_html, sanitize_html

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

_EXTENSIONS = {".pdf": "pdf", ".docx": "docx", ".txt": "txt"}
_MIME_TYPES = {PDF_MIME: "pdf", DOCX_MIME: "docx", TEXT_MIME: "txt"}
# sent by clients that do not know the type; the extension decides
_GENERIC_MIME_TYPES = {"application/octet-stream", "binary/octet-stream"}

INVALID_TYPE_MESSAGE = "Invalid file type. Only PDF, DOCX and plain text files are allowed."


class DocumentParser:
    """Detects upload types and extracts their text content."""

    def __init__(self, max_pages: int | None = None) -> None:
        self.max_pages = max_pages or settings.pdf_max_pages

    def detect_file_type(self, filename: str | None, content_type: str | None = None) -> str:
        """Return ``pdf``, ``docx`` or ``txt`` from the MIME type, then the extension."""
        if content_type:
            mime = content_type.split(";")[0].strip().lower()
            if mime in _MIME_TYPES and mime in settings.allowed_mime_types:
                return _MIME_TYPES[mime]
            if mime not in _GENERIC_MIME_TYPES:
                raise FileUploadException(INVALID_TYPE_MESSAGE)
        suffix = PurePath(filename or "").suffix.lower()
        file_type = _EXTENSIONS.get(suffix)
        if file_type is None:
            raise FileUploadException(INVALID_TYPE_MESSAGE)
        return file_type

    def parse(self, content: bytes, file_type: str) -> str:
        """
        Extract text from a file.

        Args:
            content: Raw file bytes.
            file_type: One of ``pdf``, ``docx`` or ``txt``.

        Returns:
            The extracted text, never empty.

        Raises:
            FileUploadException: The file is unreadable or holds no text.
        """
        if file_type == "pdf":
            text = self._parse_pdf(content)
        elif file_type == "docx":
            text = self._parse_docx(content)
        elif file_type == "txt":
            text = content.decode("utf-8", errors="replace")
        else:
            raise FileUploadException(INVALID_TYPE_MESSAGE)

        if looks_like_html(text):
            text = sanitize_html(text)
        text = text.replace("\x00", "").strip()
        if not text:
            raise FileUploadException("Could not extract content from file")
        return text

    def _parse_pdf(self, content: bytes) -> str:
        try:
            reader = PdfReader(io.BytesIO(content))
            pages = reader.pages[: self.max_pages]
            return "\n".join(page.extract_text() or "" for page in pages)
        except (PyPdfError, ValueError, OSError) as exc:
            logger.warning("PDF extraction failed: %s", exc)
            raise FileUploadException("Could not extract content from file") from exc

    def _parse_docx(self, content: bytes) -> str:
        try:
            document = Document(io.BytesIO(content))
        except (zipfile.BadZipFile, PackageNotFoundError, ValueError, KeyError, OSError) as exc:
            logger.warning("DOCX extraction failed: %s", exc)
            raise FileUploadException("Could not extract content from file") from exc
        lines = [paragraph.text for paragraph in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                lines.append(" | ".join(cell.text for cell in row.cells))
        return "\n".join(line for line in lines if line.strip())


_document_parser: DocumentParser | None = None


def get_document_parser() -> DocumentParser:
    """Get the document parser instance (singleton)."""
    global _document_parser
    if _document_parser is None:
        _document_parser = DocumentParser()
    return _document_parser
