"""FastAPI endpoints for document-grounded chat.

Endpoints:
    - GET /health: Service health status
    - POST /upload/pdf: Upload a PDF into a (new) session
    - POST /chat: Ask a question, get the whole reply
    - POST /chat/stream: Ask a question, get progress as Server-Sent Events
    - GET /sessions/{id}: Session history and loaded document
    - POST /sessions/{id}/reset: Clear a session's history
    - DELETE /sessions/{id}: Forget a session
"""

from docchat.api.app import app, create_app

__all__ = ["app", "create_app"]
