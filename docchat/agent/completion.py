"""Completion service used by the conversation session.

The session only needs one capability from a language model: given the
ordered turns so far, produce the text of the next assistant turn.
``CompletionClient`` names that capability; ``AgnoCompletionClient`` is the
production implementation on top of Agno's model layer.

Why the model layer and not ``agno.agent.Agent``: the session owns the
history and decides when document text goes out, so each call must send
exactly the turns it is given. An Agent would add its own system prompt and
stored history on top.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from agno.models.base import Model
from agno.models.message import Message
from agno.models.openai import OpenAIChat

from docchat.agent.config import AgentConfig, get_agent_config
from docchat.errors import CompletionError
from docchat.models.conversation import Turn

logger = logging.getLogger(__name__)


@runtime_checkable
class CompletionClient(Protocol):
    """Anything that can turn an ordered conversation into the next reply."""

    async def generate(self, turns: Sequence[Turn]) -> str:
        """Generate the next assistant turn.

        Args:
            turns: Conversation so far, ending with a user turn.

        Returns:
            Reply text.

        Raises:
            CompletionError: When no usable reply is produced. Transport,
                auth and quota errors may also propagate unwrapped.
        """
        ...


def create_model(config: AgentConfig) -> Model:
    """Build the Agno model for the configured provider."""
    if config.provider == "gemini":
        from agno.models.google import Gemini

        return Gemini(
            id=config.model_name,
            api_key=config.api_key,
            temperature=config.temperature,
            max_output_tokens=config.max_tokens,
        )

    return OpenAIChat(
        id=config.model_name,
        api_key=config.api_key,
        base_url=config.base_url,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


class AgnoCompletionClient:
    """CompletionClient backed by an Agno model.

    Wraps the model with:
    - Turn to Message conversion
    - A per-call timeout
    - Rejection of replies without text
    """

    def __init__(self, config: AgentConfig | None = None, model: Model | None = None) -> None:
        """Initialize the client.

        Args:
            config: Optional configuration. Loads from environment if not provided.
            model: Optional pre-built model, mainly for tests.
        """
        self._config = config or get_agent_config()
        self._model = model or create_model(self._config)

    @property
    def config(self) -> AgentConfig:
        return self._config

    @staticmethod
    def to_messages(turns: Sequence[Turn]) -> list[Message]:
        return [Message(role=turn.role.value, content=turn.text) for turn in turns]

    async def generate(self, turns: Sequence[Turn]) -> str:
        # A fresh list per call: the model appends its reply to the list it is given
        messages = self.to_messages(turns)

        try:
            response = await asyncio.wait_for(
                self._model.aresponse(messages=messages),
                timeout=self._config.timeout,
            )
        except TimeoutError as e:
            raise CompletionError(
                f"No reply from {self._config.model_name} within {self._config.timeout:.0f}s"
            ) from e

        content = getattr(response, "content", None)
        if not isinstance(content, str) or not content.strip():
            logger.warning(f"Model {self._config.model_name} returned no text")
            raise CompletionError("The language model returned an empty reply")

        return content
