"""Registry of conversation sessions keyed by session id.

Each session owns its own DocumentStore and history; only the completion
client is shared, since it holds configuration and no conversation state.
The client is built on first use so the app can start (and serve uploads)
before an API key is configured.

The registry is bounded: creating a session beyond ``max_sessions`` drops
the least recently used idle one.
"""

import logging
import uuid
from collections import OrderedDict
from collections.abc import Sequence

from docchat.agent.completion import AgnoCompletionClient, CompletionClient
from docchat.agent.config import get_session_config
from docchat.errors import SessionNotFoundError
from docchat.models.conversation import Turn
from docchat.session.conversation import ConversationSession

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates, looks up and drops ConversationSessions."""

    def __init__(
        self,
        client: CompletionClient | None = None,
        max_grounding_chars: int | None = None,
        max_sessions: int | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            client: Completion client for all sessions. Built from the
                environment on first submit if not provided.
            max_grounding_chars: Grounding cap passed to every session.
            max_sessions: Sessions kept before the least recently used is dropped.
                Limits not provided are read from the environment.

        Raises:
            ValidationError: A limit from the environment is invalid.
        """
        if max_grounding_chars is None or max_sessions is None:
            config = get_session_config()
            if max_grounding_chars is None:
                max_grounding_chars = config.max_grounding_chars
            if max_sessions is None:
                max_sessions = config.max_sessions
        if max_grounding_chars < 0:
            raise ValueError("max_grounding_chars must be 0 or greater")
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")

        self._client = client
        self._max_grounding_chars = max_grounding_chars
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, ConversationSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @property
    def client(self) -> CompletionClient:
        if self._client is None:
            self._client = AgnoCompletionClient()
        return self._client

    @property
    def max_grounding_chars(self) -> int:
        return self._max_grounding_chars

    @property
    def max_sessions(self) -> int:
        return self._max_sessions

    def create(self) -> tuple[str, ConversationSession]:
        self._evict_for_new_session()
        session_id = str(uuid.uuid4())
        session = ConversationSession(
            client=_LazyClient(self),
            max_grounding_chars=self._max_grounding_chars,
        )
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session_id, session

    def get(self, session_id: str) -> ConversationSession:
        """Return the session for an id and mark it as recently used.

        Raises:
            SessionNotFoundError: No session with this id.
        """
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session {session_id} not found") from None
        self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: str | None) -> tuple[str, ConversationSession]:
        """Return an existing session, or a new one when no id is given."""
        if session_id is None:
            return self.create()
        return session_id, self.get(session_id)

    def drop(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is not None:
            logger.info(f"Dropped session {session_id}")

    def _evict_for_new_session(self) -> None:
        # Oldest first; a session waiting on the model is skipped
        while len(self._sessions) >= self._max_sessions:
            idle = next((sid for sid, s in self._sessions.items() if not s.busy), None)
            if idle is None:
                logger.warning(f"All {len(self._sessions)} sessions are busy, none evicted")
                return
            del self._sessions[idle]
            logger.info(f"Evicted least recently used session {idle}")


class _LazyClient:
    """Defers building the shared client until a session first needs it."""

    def __init__(self, manager: SessionManager) -> None:
        self._manager = manager

    async def generate(self, turns: Sequence[Turn]) -> str:
        return await self._manager.client.generate(turns)


# Module-level singleton instance
_session_manager: SessionManager | None = None


def get_session_manager() -> SessionManager:
    """Get or create the global session manager.

    Returns:
        The SessionManager instance.
    """
    global _session_manager
    if _session_manager is None:
        _session_manager = SessionManager()
    return _session_manager
