"""Chat API routes."""

import uuid

from fastapi import APIRouter, HTTPException

from devtask.api.schemas import (
    ChatRequest,
    ChatResponse,
    IntentInfo,
    PendingChange,
    PendingChangesResponse,
    SessionStateResponse,
    SuccessResponse,
)
from devtask.api.session_store import SessionEntry, get_session_store
from devtask.utils.logging import logger
from devtask.utils.response_formatter import ResponseFormatter

router = APIRouter(prefix="/chat", tags=["chat"])


def _require_session(session_id: str) -> SessionEntry:
    entry = get_session_store().get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return entry


@router.post("", response_model=ChatResponse)
async def send_message(request: ChatRequest):
    """
    Send a message to the agent.
    A new session is opened when no session_id is given.
    """
    logger.info(f"Received message: {request.message[:50]}...")

    session_id, entry = get_session_store().get_or_create(request.session_id)

    async with entry.lock:
        content = await entry.agent.process_message(request.message)
        intent = entry.agent.last_intent

    return ChatResponse(
        id=str(uuid.uuid4()),
        session_id=session_id,
        content=content,
        role="assistant",
        intent=IntentInfo(
            type=intent.type.value,
            action=intent.action,
            parameters=intent.parameters,
        ) if intent else None,
    )


@router.get("/{session_id}/state", response_model=SessionStateResponse)
async def get_state(session_id: str):
    """Get the working state and recent references of a session."""
    context = _require_session(session_id).agent.context
    return SessionStateResponse(
        session_id=session_id,
        state=context.get_state(),
        references=context.references.to_dict(),
    )


@router.get("/{session_id}/changes", response_model=PendingChangesResponse)
async def get_changes(session_id: str):
    """Get the pending change-set with its preview."""
    changes = _require_session(session_id).agent.session.changes
    return PendingChangesResponse(
        session_id=session_id,
        pending=changes.has_pending_changes(),
        changes=[
            PendingChange(kind=patch.kind.value, path=patch.path)
            for patch in changes.get_pending_changes()
        ],
        preview=ResponseFormatter.strip_ansi(changes.show_pending_changes()),
    )


@router.post("/{session_id}/clear", response_model=SuccessResponse)
async def clear_chat(session_id: str):
    """Clear conversation history, references and pending changes."""
    entry = _require_session(session_id)
    async with entry.lock:
        entry.agent.reset()
    return SuccessResponse(success=True, message="Sessão reiniciada.")


@router.delete("/{session_id}", response_model=SuccessResponse)
async def close_session(session_id: str):
    """Drop a session and everything it holds."""
    if not get_session_store().remove(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return SuccessResponse(success=True)
