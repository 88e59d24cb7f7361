"""PDF text extraction using pypdf.

Turns PDF bytes into plain text plus page and character counts.
A PDF without a text layer (scanned or encrypted) is not an error:
it comes back with ``char_count == 0`` and callers warn about it.
"""

import io
import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from docchat.errors import ExtractionError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
PAGE_SEPARATOR = "\n"


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        text: Text of all pages, one page per line block.
        pages: Total number of pages in the document.
        char_count: Characters found on all pages, separators excluded.
        metadata: Document metadata (title, author, etc.).
    """

    text: str
    pages: int = Field(ge=0)
    char_count: int = Field(ge=0)
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def has_text(self) -> bool:
        return self.char_count > 0


def _validate_pdf_bytes(file_content: bytes) -> None:
    if not file_content:
        raise ExtractionError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise ExtractionError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise ExtractionError("Invalid PDF: file does not start with PDF header")


def _extract_metadata(reader: PdfReader) -> dict[str, str]:
    """Read the standard info dictionary fields that are present."""
    fields = {
        "title": "/Title",
        "author": "/Author",
        "subject": "/Subject",
        "creator": "/Creator",
        "producer": "/Producer",
        "creation_date": "/CreationDate",
        "modification_date": "/ModDate",
    }
    metadata: dict[str, str] = {}

    try:
        info = reader.metadata
        if info:
            for name, key in fields.items():
                value = info.get(key)
                if value:
                    metadata[name] = str(value)
    except Exception as e:
        logger.warning(f"Failed to extract some metadata: {e}")

    return metadata


def parse_pdf(file_content: bytes) -> PDFContent:
    """Parse a PDF file and extract its text content.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with extracted text, page count, character count and metadata.

    Raises:
        ExtractionError: If the file is invalid, too large, empty, or corrupt.
    """
    _validate_pdf_bytes(file_content)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        if reader.is_encrypted:
            # Owner-password-only PDFs open with an empty user password
            reader.decrypt("")
        pages = len(reader.pages)
    except PdfReadError as e:
        raise ExtractionError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise ExtractionError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise ExtractionError("PDF contains no pages")

    text_parts: list[str] = []
    char_count = 0
    for i, page in enumerate(reader.pages):
        try:
            page_text = page.extract_text() or ""
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            page_text = ""
        char_count += len(page_text)
        text_parts.append(page_text)

    text = PAGE_SEPARATOR.join(text_parts)

    if char_count == 0:
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFContent(
        text=text,
        pages=pages,
        char_count=char_count,
        metadata=_extract_metadata(reader),
    )


def extract_pdf(path: str | Path) -> PDFContent:
    """Read a PDF from disk and extract its text.

    Raises:
        ExtractionError: If the file cannot be read or parsed.
    """
    try:
        file_content = Path(path).read_bytes()
    except OSError as e:
        raise ExtractionError(f"Cannot read {path}: {e}") from e
    return parse_pdf(file_content)
