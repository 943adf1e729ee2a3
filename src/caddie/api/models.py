"""API request/response models."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request model for /agents/chat endpoint."""

    session_id: str = Field(default="default", description="Conversation to continue")
    message: Optional[str] = Field(default=None, description="New user message, if any")
    decisions: Dict[str, Literal["approved", "denied"]] = Field(
        default_factory=dict,
        description="Human decisions for confirm-required tool calls, keyed by tool call id",
    )
    max_steps: Optional[int] = Field(
        default=None,
        ge=1,
        le=20,
        description="Maximum number of model round-trips",
    )


class PendingToolCall(BaseModel):
    """A tool call waiting for the user's approval."""

    call_id: str
    tool_name: str
    arguments: Optional[Dict[str, Any]] = None
    state: str = "pending"


class ChatResponse(BaseModel):
    """Response model for /agents/chat endpoint."""

    answer: Optional[str] = Field(default=None, description="Assistant reply")
    pending: List[PendingToolCall] = Field(default_factory=list, description="Tool calls awaiting confirmation")


class KeyCheckResponse(BaseModel):
    success: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
