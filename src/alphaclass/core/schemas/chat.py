"""
Chat Schemas

Request/response models for assistant conversations.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from alphaclass.core.enums import TurnSender


class ChatRequest(BaseModel):
    """One user message, optionally continuing an existing conversation."""

    message: str = Field(..., min_length=1, description="User message to the assistant")
    conversation_id: UUID | None = Field(
        None, description="Existing conversation to continue; omit to start a new one"
    )


class ChatResponse(BaseModel):
    response: str
    conversation_id: UUID


class ConversationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    created_at: datetime


class ConversationTurnSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    sequence: int
    sender: TurnSender
    body: str
    kind: str
    created_at: datetime


class TranscriptResponse(BaseModel):
    conversation_id: UUID
    turns: list[ConversationTurnSchema]
