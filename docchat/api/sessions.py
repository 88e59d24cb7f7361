"""Session inspection and reset endpoints."""

from fastapi import APIRouter, Depends, Response, status

from docchat.models.schemas import ChatMessage, DocumentSummary, SessionInfo
from docchat.session.conversation import ConversationSession
from docchat.session.manager import SessionManager, get_session_manager

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _session_info(session_id: str, session: ConversationSession) -> SessionInfo:
    document = session.document
    return SessionInfo(
        session_id=session_id,
        turn_count=session.turn_count,
        document=DocumentSummary.from_record(document) if document else None,
        history=[ChatMessage.from_turn(turn) for turn in session.history],
    )


@router.get("/{session_id}", response_model=SessionInfo)
async def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionInfo:
    """Return the history and loaded document of a session."""
    return _session_info(session_id, manager.get(session_id))


@router.post("/{session_id}/reset", response_model=SessionInfo)
async def reset_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionInfo:
    """Clear the history; the document stays and the next question is grounded again."""
    session = manager.get(session_id)
    session.reset_session()
    return _session_info(session_id, session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    manager.get(session_id)
    manager.drop(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
