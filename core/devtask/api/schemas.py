"""Pydantic models for API request/response schemas."""

from typing import Any

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class ChatRequest(BaseModel):
    """Chat message request."""

    message: str
    session_id: str | None = None


class IntentInfo(BaseModel):
    """The intent a message was resolved to."""

    type: str
    action: str
    parameters: dict[str, Any]


class ChatResponse(BaseModel):
    """Chat message response."""

    id: str
    session_id: str
    content: str
    role: str
    intent: IntentInfo | None = None


class SessionStateResponse(BaseModel):
    """Working state of a session."""

    session_id: str
    state: dict[str, Any]
    references: dict[str, list[dict[str, Any]]]


class PendingChange(BaseModel):
    """One staged file operation."""

    kind: str
    path: str


class PendingChangesResponse(BaseModel):
    """Pending change-set of a session."""

    session_id: str
    pending: bool
    changes: list[PendingChange]
    preview: str


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool
    message: str | None = None
