"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field

from ....core.domain import ChatMessage
from ....core.domain.utils import normalize_text


class ChatMessageModel(BaseModel):
    """A single message in the chat history."""

    role: str = Field(..., description="Role of the message sender (system, user, assistant)")
    content: str = Field(..., description="Content of the message")

    def to_domain(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=normalize_text(self.content))


class ChatRequest(BaseModel):
    """Request model for a chat turn."""

    messages: list[ChatMessageModel] = Field(
        default_factory=list,
        description="Conversation history; the last message is the question",
        json_schema_extra={
            "example": [{"role": "user", "content": "What are workers compensation benefits?"}]
        },
    )


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="API version")


class ErrorDetail(BaseModel):
    """Structured error detail information."""

    type: str = Field(..., description="Exception type name")
    code: str = Field(..., description="Error code (e.g., SBWC_SRC_001)")
    message: str = Field(..., description="Human-readable error message")


class ErrorResponse(BaseModel):
    """Response model for structured errors."""

    error: ErrorDetail = Field(..., description="Error details including type, code, and message")
    location: dict | None = Field(None, description="Source location of the error")
    context: dict | None = Field(None, description="Additional debugging context")
    cause: dict | None = Field(None, description="Underlying exception that caused this error")
    stack_trace: list[str] | None = Field(None, description="Stack trace (debug mode only)")
