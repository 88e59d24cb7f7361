"""Document-grounded conversation session.

The session owns the turn history and decides what goes out on every
turn. The document text is sent once, inside the first user turn of the
history (the grounding turn). Later turns carry only the question and rely
on the completion service seeing the earlier turns again.

"First turn" is keyed off an empty history, not a separate flag, so
resetting the history (for a new document) re-triggers grounding.

History is append-only and always strictly alternates user, assistant,
starting with user. A turn pair is committed only after the completion
service answered; a failed call leaves history exactly as it was.
"""

import asyncio
import logging

from docchat.agent.completion import CompletionClient
from docchat.errors import (
    CompletionError,
    EmptyInputError,
    NoDocumentError,
    SessionBusyError,
)
from docchat.models.conversation import DocumentRecord, Turn
from docchat.session.document_store import DocumentStore

logger = logging.getLogger(__name__)

GROUNDING_PREAMBLE = "Use the following PDF content to answer questions."
TRUNCATION_MARKER = "[... document truncated: {kept} of {total} characters shown ...]"


def build_grounding_prompt(document_text: str, question: str, max_chars: int = 0) -> str:
    """Combine the preamble, the document text and the question into one block.

    Args:
        document_text: Full extracted text.
        question: The user's question, unmodified.
        max_chars: Keep at most this many document characters (0 keeps all).

    Returns:
        Text of the grounding turn.
    """
    if max_chars and len(document_text) > max_chars:
        marker = TRUNCATION_MARKER.format(kept=max_chars, total=len(document_text))
        document_text = f"{document_text[:max_chars]}\n{marker}"

    return f"{GROUNDING_PREAMBLE}\n\nPDF CONTENT:\n{document_text}\n\nQUESTION:\n{question}"


class ConversationSession:
    """Conversation about one document with a completion service.

    Not safe for overlapping use: callers serialize ``submit`` per session.
    An overlapping call fails with SessionBusyError instead of interleaving.
    """

    def __init__(
        self,
        client: CompletionClient,
        store: DocumentStore | None = None,
        max_grounding_chars: int = 0,
    ) -> None:
        """Initialize an empty session.

        Args:
            client: Completion service, already configured with credentials.
            store: Document store owned by this session. A new one if omitted.
            max_grounding_chars: Cap on document characters in the grounding turn (0 = no cap).
        """
        self._client = client
        self._store = store or DocumentStore()
        self._max_grounding_chars = max_grounding_chars
        self._history: list[Turn] = []
        self._lock = asyncio.Lock()

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def document(self) -> DocumentRecord | None:
        return self._store.current()

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def turn_count(self) -> int:
        return len(self._history)

    @property
    def is_first_turn(self) -> bool:
        """True when the next submit is the grounding turn."""
        return not self._history

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def build_outgoing_turn(self, user_text: str) -> Turn:
        """Build the user turn the next submit would send.

        Raises:
            NoDocumentError: First turn without a document that has text.
        """
        if not self.is_first_turn:
            return Turn.user(user_text)

        document = self._store.current()
        if document is None or not self._store.has_grounding_text():
            raise NoDocumentError()

        if self._max_grounding_chars and len(document.text) > self._max_grounding_chars:
            logger.warning(
                f"Document {document.name or '<unnamed>'} has {len(document.text)} chars, "
                f"sending the first {self._max_grounding_chars}"
            )
        return Turn.user(
            build_grounding_prompt(document.text, user_text, self._max_grounding_chars)
        )

    async def submit(self, user_text: str) -> str:
        """Send one user message and return the assistant's reply.

        Args:
            user_text: The user's message.

        Returns:
            Reply text; history grows by one user and one assistant turn.

        Raises:
            EmptyInputError: Message is empty or whitespace only.
            NoDocumentError: First message without a usable document.
            SessionBusyError: A previous submit is still outstanding.
            CompletionError: The completion service failed; history is unchanged.
        """
        if not user_text or not user_text.strip():
            raise EmptyInputError()
        if self._lock.locked():
            raise SessionBusyError()

        async with self._lock:
            is_first_turn = self.is_first_turn
            staged = self.build_outgoing_turn(user_text)
            if is_first_turn:
                logger.info(f"Sending grounding turn ({len(staged.text)} chars)")

            try:
                reply = await self._client.generate([*self._history, staged])
            except CompletionError:
                logger.warning("Completion failed, history left unchanged")
                raise
            except Exception as e:
                logger.error(f"Completion service error: {e}")
                raise CompletionError(f"Completion service error: {e}") from e

            if not isinstance(reply, str) or not reply.strip():
                raise CompletionError()

            self._history.append(staged)
            self._history.append(Turn.assistant(reply))
            return reply

    def reset_session(self) -> None:
        """Forget the conversation; the next submit grounds again.

        Raises:
            SessionBusyError: A submit is outstanding.
        """
        if self._lock.locked():
            raise SessionBusyError()
        if self._history:
            logger.info(f"Resetting session with {len(self._history)} turns")
        self._history = []

    def load_document(
        self,
        text: str,
        page_count: int,
        char_count: int,
        name: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> DocumentRecord:
        """Replace the document and reset the conversation about the old one.

        Raises:
            SessionBusyError: A submit is outstanding.
        """
        if self._lock.locked():
            raise SessionBusyError()
        record = self._store.load(text, page_count, char_count, name=name, metadata=metadata)
        self.reset_session()
        return record
