"""Language model access for the conversation session.

Responsibilities:
    - Provider and session-limit configuration from the environment
    - Agno model construction (OpenAI or Gemini)
    - Turn history to model message conversion
    - Timeouts and empty-reply detection

Keeps the provider out of the session: the session only sees CompletionClient.
"""

from docchat.agent.completion import AgnoCompletionClient, CompletionClient, create_model
from docchat.agent.config import AgentConfig, SessionConfig, get_agent_config, get_session_config

__all__ = [
    "AgentConfig",
    "AgnoCompletionClient",
    "CompletionClient",
    "SessionConfig",
    "create_model",
    "get_agent_config",
    "get_session_config",
]
