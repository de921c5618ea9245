"""Document text extraction.

Responsibilities:
- Return plain text for pasted input and text-based files.
- Extract text from PDFs page by page with `pypdf`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import ExtractionError
from ..models.datatypes import DocumentInput


class TextExtractor(Protocol):
    """Protocol for document text extraction collaborators."""

    def extract(self, document: DocumentInput) -> str:
        """Return the plain text of a document or raise `ExtractionError`."""


class DocumentTextExtractor:
    """Extract plain text from pasted text, text files, and text-based PDFs."""

    _PDF_MIME_TYPE = "application/pdf"

    def extract(self, document: DocumentInput) -> str:
        """Extract all text from a document input."""

        if document.text is not None:
            text = document.text
        elif document.path is None:
            raise ExtractionError(f"Document `{document.name}` has neither text nor a path.")
        elif document.mime_type == self._PDF_MIME_TYPE:
            text = self._extract_pdf(document.path)
        elif document.mime_type.startswith("text/"):
            text = self._read_text_file(document.path)
        else:
            raise ExtractionError(
                f"Unsupported document type `{document.mime_type}` for `{document.name}`. "
                "Supported inputs are PDF, TXT, and MD."
            )

        text = text.replace("\f", "\n").strip()
        if not text:
            raise ExtractionError(f"No extractable text found in `{document.name}`.")
        return text

    def _read_text_file(self, path: Path) -> str:
        """Read a UTF-8 text document."""

        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ExtractionError(f"Input document not found: {path}") from exc
        except UnicodeDecodeError as exc:
            raise ExtractionError(f"Input document `{path}` is not valid UTF-8 text.") from exc

    def _extract_pdf(self, path: Path) -> str:
        """Extract per-page text with `pypdf` and join pages with blank lines."""

        if not path.exists():
            raise ExtractionError(f"Input document not found: {path}")
        try:
            reader = PdfReader(str(path))
            pages = [(page.extract_text() or "").strip() for page in reader.pages]
        except PyPdfError as exc:
            raise ExtractionError(f"Failed to read PDF `{path}`: {exc}") from exc
        return "\n\n".join(page for page in pages if page)
