"""Conversation log models used by the auto-update flow."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from pmgraph.models.document import DocType, UpdateMode
from pmgraph.utils.id_generator import generate_conversation_id


class UpdateApplied(BaseModel):
    """One merge performed on behalf of a conversation summary."""

    doc_type: DocType
    mode: UpdateMode
    snippet: str = Field(..., description="First 100 characters of the merged content")


class ConversationLog(BaseModel):
    """Record of a classified conversation and the updates it produced."""

    model_config = ConfigDict(json_encoders={datetime: lambda v: v.isoformat()})

    id: str = Field(default_factory=generate_conversation_id)
    project_id: str | None = None
    summary: str = ""
    updates_applied: list[UpdateApplied] = Field(default_factory=list)
    conversation_start: datetime = Field(default_factory=lambda: datetime.now(UTC))
    conversation_end: datetime = Field(default_factory=lambda: datetime.now(UTC))
