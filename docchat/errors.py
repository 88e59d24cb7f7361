"""Error taxonomy for document-grounded chat.

Every failure a caller can see is one of a small, closed set of kinds.
Each kind carries a fixed rollback rule:

    - EMPTY_INPUT, NO_DOCUMENT: user-correctable, nothing changed.
    - EXTRACTION: document store left as it was.
    - COMPLETION: history rolled back to its pre-call state.
    - SESSION_BUSY: another submit is outstanding, nothing changed.
    - SESSION_NOT_FOUND: unknown session id, nothing changed.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced to callers."""

    EMPTY_INPUT = "empty_input"
    NO_DOCUMENT = "no_document"
    EXTRACTION = "extraction"
    COMPLETION = "completion"
    SESSION_BUSY = "session_busy"
    SESSION_NOT_FOUND = "session_not_found"


class DocChatError(Exception):
    """Base class for all errors raised to callers."""

    kind: ErrorKind
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyInputError(DocChatError):
    """Raised when a submitted message is empty or whitespace only."""

    kind = ErrorKind.EMPTY_INPUT
    default_message = "Message must not be empty"


class NoDocumentError(DocChatError):
    """Raised when the first question arrives before a usable document."""

    kind = ErrorKind.NO_DOCUMENT
    default_message = "Please upload a PDF with extractable text first"


class ExtractionError(DocChatError):
    """Raised when a PDF cannot be read."""

    kind = ErrorKind.EXTRACTION
    default_message = "Failed to extract text from PDF"


class CompletionError(DocChatError):
    """Raised when the completion service fails or returns no usable text."""

    kind = ErrorKind.COMPLETION
    default_message = "The language model did not return a usable reply"


class SessionBusyError(DocChatError):
    """Raised when a session is used while a submit is still outstanding."""

    kind = ErrorKind.SESSION_BUSY
    default_message = "A previous message is still being answered"


class SessionNotFoundError(DocChatError):
    kind = ErrorKind.SESSION_NOT_FOUND
    default_message = "Session not found"
