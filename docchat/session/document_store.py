"""Single-slot holder for the most recently uploaded document."""

import logging

from docchat.models.conversation import DocumentRecord

logger = logging.getLogger(__name__)


class DocumentStore:
    """Holds at most one DocumentRecord; a new load replaces it wholesale."""

    def __init__(self) -> None:
        self._record: DocumentRecord | None = None

    def load(
        self,
        text: str,
        page_count: int,
        char_count: int,
        name: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> DocumentRecord:
        """Replace the current document with freshly extracted text.

        Args:
            text: Extracted text.
            page_count: Pages in the source PDF.
            char_count: Characters found while extracting.
            name: Original filename, if known.
            metadata: Document metadata from the extractor.

        Returns:
            The stored record.
        """
        self._record = DocumentRecord(
            text=text,
            page_count=page_count,
            char_count=char_count,
            name=name,
            metadata=metadata or {},
        )
        if self._record.has_text:
            logger.info(f"Loaded document {name or '<unnamed>'}: {page_count} pages, {char_count} chars")
        else:
            logger.warning(f"Loaded document {name or '<unnamed>'} has no extractable text")
        return self._record

    def current(self) -> DocumentRecord | None:
        return self._record

    def has_grounding_text(self) -> bool:
        """True iff a document is loaded and it has extractable text."""
        return self._record is not None and self._record.has_text

    def clear(self) -> None:
        self._record = None
