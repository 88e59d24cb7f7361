"""Document-grounded conversation core.

Responsibilities:
    - Holding the extracted text of the current document
    - Deciding when the document text is injected (the grounding turn)
    - Keeping strictly alternating user/assistant history
    - Rolling back on completion failures
    - One session per conversation, looked up by id

Knows nothing about HTTP or the UI; talks to the model only through
CompletionClient.
"""

from docchat.session.conversation import (
    GROUNDING_PREAMBLE,
    ConversationSession,
    build_grounding_prompt,
)
from docchat.session.document_store import DocumentStore
from docchat.session.manager import SessionManager, get_session_manager

__all__ = [
    "GROUNDING_PREAMBLE",
    "ConversationSession",
    "DocumentStore",
    "SessionManager",
    "build_grounding_prompt",
    "get_session_manager",
]
