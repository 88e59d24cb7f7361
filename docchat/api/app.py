"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error mapping and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docchat.api.chat import router as chat_router
from docchat.api.routes import router as upload_router
from docchat.api.sessions import router as sessions_router
from docchat.errors import DocChatError, ErrorKind
from docchat.models.schemas import ErrorResponse
from docchat.session.manager import get_session_manager

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.EMPTY_INPUT: status.HTTP_422_UNPROCESSABLE_CONTENT,
    ErrorKind.NO_DOCUMENT: status.HTTP_409_CONFLICT,
    ErrorKind.EXTRACTION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.COMPLETION: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SESSION_BUSY: status.HTTP_409_CONFLICT,
    ErrorKind.SESSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Validate session limits and log application startup and shutdown."""
    logger.info("Starting DocChat API...")
    manager = get_session_manager()
    logger.info(
        f"Keeping up to {manager.max_sessions} sessions, "
        f"grounding cap {manager.max_grounding_chars or 'none'}"
    )
    yield
    logger.info("Shutting down DocChat API...")


async def handle_docchat_error(request: Request, exc: DocChatError) -> JSONResponse:
    """Turn a DocChatError into a JSON error with a status per error kind."""
    status_code = ERROR_STATUS.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.kind.value}): {exc.message}")
    body = ErrorResponse(detail=exc.message, kind=exc.kind)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="DocChat API",
        description=(
            "Ask questions about an uploaded PDF. The extracted text is sent to the "
            "language model with the first question of a session; follow-up "
            "questions build on the conversation so far."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(DocChatError, handle_docchat_error)

    application.include_router(upload_router)
    application.include_router(chat_router)
    application.include_router(sessions_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "docchat"}

    return application


app = create_app()
