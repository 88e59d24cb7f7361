"""PDF upload endpoint for document ingestion.

Handles file upload, validation, text extraction, and loading the text
into a conversation session.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status

from docchat.models.schemas import PDFUploadResponse
from docchat.parsing.pdf_parser import MAX_FILE_SIZE, parse_pdf
from docchat.session.manager import SessionManager, get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

# 10MB limit matches pdf_parser constant
MAX_UPLOAD_SIZE = MAX_FILE_SIZE

NO_TEXT_WARNING = "No text found. This PDF might be a scanned image or encrypted."


def _validate_file_extension(filename: str | None) -> str:
    """Validate that file has .pdf extension.

    Raises:
        HTTPException: 400 if the name is missing or not a PDF.
    """
    if not filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    if not filename.lower().endswith(".pdf"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only PDF files are accepted",
        )

    return filename


async def _read_and_validate_size(file: UploadFile) -> bytes:
    """Read file content and validate size.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_UPLOAD_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
        )

    return content


@router.post("/pdf", response_model=PDFUploadResponse)
async def upload_pdf(
    file: UploadFile,
    session_id: Annotated[str | None, Form()] = None,
    manager: SessionManager = Depends(get_session_manager),
) -> PDFUploadResponse:
    """Upload a PDF and make it the subject of a conversation.

    Extracts the text off the event loop and loads it into the given
    session (or a new one). Loading resets the session's history, so the
    next question is grounded on the new document.

    Args:
        file: The uploaded PDF file (multipart/form-data).
        session_id: Existing session to load the document into.
        manager: Session registry.

    Returns:
        PDFUploadResponse with session id, page and character counts.
        ``success`` is false, with a warning, when the PDF has no text.

    Raises:
        400: Invalid file (not PDF, empty, corrupt).
        404: Unknown session id.
        409: The session is answering a message.
        413: File exceeds 10MB limit.
    """
    filename = _validate_file_extension(file.filename)
    content = await _read_and_validate_size(file)

    # Look up before extracting so an unknown id fails fast
    session = manager.get(session_id) if session_id else None

    pdf_content = await asyncio.to_thread(parse_pdf, content)

    if session is None:
        session_id, session = manager.create()

    record = session.load_document(
        text=pdf_content.text,
        page_count=pdf_content.pages,
        char_count=pdf_content.char_count,
        name=filename,
        metadata=pdf_content.metadata,
    )

    if record.has_text:
        logger.info(
            f"Loaded PDF {filename} into session {session_id} "
            f"({record.page_count} pages, {record.char_count} characters)"
        )
    else:
        logger.warning(f"PDF {filename} has no extractable text (session {session_id})")

    return PDFUploadResponse(
        session_id=session_id,
        filename=filename,
        pages=record.page_count,
        char_count=record.char_count,
        success=record.has_text,
        warning=None if record.has_text else NO_TEXT_WARNING,
    )
