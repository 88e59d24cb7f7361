"""DocChat - hold a conversation with a language model about one PDF.

Combines FastAPI for HTTP endpoints, Agno for model access,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - session: document store and the grounded conversation state machine
    - agent: completion client configuration and model wrapper
    - parsing: PDF text extraction
    - api: HTTP endpoints for upload, chat and session inspection
    - ui: Web interface for chat interactions
    - models: Conversation types and request/response schemas
"""

__version__ = "0.1.0"
