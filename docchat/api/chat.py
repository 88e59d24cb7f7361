"""Chat endpoints: one question in, one grounded reply out.

``POST /chat`` returns the whole reply. ``POST /chat/stream`` reports
progress as Server-Sent Events so a UI can show a status while the model
works; the reply itself arrives as one content chunk.
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from docchat.errors import DocChatError, EmptyInputError, NoDocumentError
from docchat.models.schemas import ChatRequest, ChatResponse, StreamChunk, StreamStatus
from docchat.session.conversation import ConversationSession
from docchat.session.manager import SessionManager, get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


def _require_message(message: str) -> None:
    # Checked before the session so a blank message is always a 422
    if not message.strip():
        raise EmptyInputError()


def _resolve_session(manager: SessionManager, session_id: str | None) -> ConversationSession:
    # Without a session there is no document to talk about
    if session_id is None:
        raise NoDocumentError()
    return manager.get(session_id)


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> ChatResponse:
    """Answer one message within a session.

    Raises:
        404: Unknown session id.
        409: No usable document yet, or the session is busy.
        422: Empty message.
        502: The language model failed; the message was not recorded.
    """
    _require_message(request.message)
    session = _resolve_session(manager, request.session_id)
    grounded = session.is_first_turn

    reply = await session.submit(request.message)

    return ChatResponse(
        response=reply,
        session_id=request.session_id,
        turn_count=session.turn_count,
        grounded=grounded,
    )


async def _stream_reply(
    manager: SessionManager,
    request: ChatRequest,
) -> AsyncGenerator[str, None]:
    session_id = request.session_id
    yield _sse(StreamChunk(content="", done=False, status=StreamStatus.RECEIVED, session_id=session_id))

    try:
        session = _resolve_session(manager, session_id)
        yield _sse(
            StreamChunk(content="", done=False, status=StreamStatus.GENERATING, session_id=session_id)
        )
        reply = await session.submit(request.message)
    except DocChatError as e:
        logger.warning(f"Chat stream failed ({e.kind.value}): {e.message}")
        yield _sse(
            StreamChunk(
                content="",
                done=True,
                status=StreamStatus.ERROR,
                error=e.message,
                session_id=session_id,
            )
        )
        return

    yield _sse(StreamChunk(content=reply, done=False, status=StreamStatus.GENERATING, session_id=session_id))
    yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE, session_id=session_id))


@router.post("/stream")
async def chat_stream(
    request: ChatRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> StreamingResponse:
    """Answer one message, reporting progress as Server-Sent Events.

    Errors after the stream has started arrive as a final chunk with
    ``status=error``.
    """
    _require_message(request.message)
    return StreamingResponse(
        _stream_reply(manager, request),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
