"""PDF text extraction for document-grounded chat.

Responsibilities:
    - PDF text extraction with pypdf
    - Page and character counting
    - Metadata extraction (title, author, dates)

Scanned or encrypted PDFs without a text layer are returned with a zero
character count so the caller can warn instead of grounding on nothing.
"""

from docchat.parsing.pdf_parser import PDFContent, extract_pdf, parse_pdf

__all__ = ["PDFContent", "extract_pdf", "parse_pdf"]
