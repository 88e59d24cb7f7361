"""Pydantic models for the conversation core and the HTTP API.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - Turn / TurnRole: One role-tagged message of a conversation
    - DocumentRecord: Extracted text of the uploaded PDF
    - ChatRequest / ChatResponse / StreamChunk: Chat endpoint payloads
    - PDFUploadResponse: Upload result with extraction counts
    - SessionInfo: Session history and loaded document
"""

from docchat.models.conversation import DocumentRecord, Turn, TurnRole
from docchat.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    DocumentSummary,
    ErrorResponse,
    PDFUploadResponse,
    SessionInfo,
    StreamChunk,
    StreamStatus,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "DocumentRecord",
    "DocumentSummary",
    "ErrorResponse",
    "PDFUploadResponse",
    "SessionInfo",
    "StreamChunk",
    "StreamStatus",
    "Turn",
    "TurnRole",
]
