from enum import Enum

from pydantic import BaseModel, Field

from docchat.errors import ErrorKind
from docchat.models.conversation import DocumentRecord, Turn, TurnRole


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    RECEIVED = "received"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        message: User's question, passed on unmodified.
        session_id: Session returned by the upload endpoint.
    """

    message: str
    session_id: str | None = None


class ChatResponse(BaseModel):
    """Reply to one chat message.

    Attributes:
        response: The assistant's reply.
        session_id: Session the exchange was recorded in.
        turn_count: Number of turns in history after this exchange.
        grounded: True when this exchange carried the document text.
    """

    response: str
    session_id: str
    turn_count: int = Field(ge=0)
    grounded: bool = False


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text content of this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (received, generating, complete, error).
        error: Error message if something went wrong.
        session_id: Session the exchange belongs to.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None
    session_id: str | None = None


class PDFUploadResponse(BaseModel):
    """Response after PDF upload processing.

    Attributes:
        session_id: Session the document was loaded into.
        filename: Name of the uploaded file.
        pages: Number of pages in the document.
        char_count: Characters of text found in the document.
        success: Whether the document can be asked about.
        warning: Set when the PDF has no extractable text.
    """

    session_id: str
    filename: str
    pages: int
    char_count: int
    success: bool
    warning: str | None = None


class ChatMessage(BaseModel):
    """A single message of the conversation history."""

    role: TurnRole
    content: str

    @classmethod
    def from_turn(cls, turn: Turn) -> "ChatMessage":
        return cls(role=turn.role, content=turn.text)


class DocumentSummary(BaseModel):
    """Document currently loaded into a session."""

    name: str | None
    pages: int
    char_count: int
    has_text: bool

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentSummary":
        return cls(
            name=record.name,
            pages=record.page_count,
            char_count=record.char_count,
            has_text=record.has_text,
        )


class SessionInfo(BaseModel):
    """Information about a chat session.

    Attributes:
        session_id: Unique session identifier.
        turn_count: Number of turns in history.
        document: Loaded document, if any.
        history: Ordered turns, grounding turn included.
    """

    session_id: str
    turn_count: int = Field(ge=0)
    document: DocumentSummary | None = None
    history: list[ChatMessage] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: str
    kind: ErrorKind
