"""Conversation value types: turns and extracted documents."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TurnRole(str, Enum):
    """Speaker of a turn. There is no system role; grounding text rides in a user turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Turn(BaseModel):
    """One message in the conversation.

    Attributes:
        role: Who produced the message.
        text: Message content, never empty.
    """

    model_config = ConfigDict(frozen=True)

    role: TurnRole
    text: str = Field(..., min_length=1)

    @classmethod
    def user(cls, text: str) -> "Turn":
        return cls(role=TurnRole.USER, text=text)

    @classmethod
    def assistant(cls, text: str) -> "Turn":
        return cls(role=TurnRole.ASSISTANT, text=text)


class DocumentRecord(BaseModel):
    """Plain text of one uploaded document plus extraction metadata.

    Attributes:
        text: Extracted text of all pages.
        page_count: Number of pages in the source PDF.
        char_count: Number of characters found on all pages.
        name: Original filename, if known.
        metadata: Document metadata (title, author, etc.).
    """

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int = Field(ge=0)
    char_count: int = Field(ge=0)
    name: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)

    @property
    def has_text(self) -> bool:
        """False for scanned or encrypted PDFs with no text layer."""
        return self.char_count > 0
