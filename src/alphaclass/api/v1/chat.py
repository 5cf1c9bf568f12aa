"""
Chat API Endpoints

Assistant turns and conversation history.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.ai import InferenceClient, get_ai_client
from alphaclass.assistant import ChatService, ConversationManager
from alphaclass.auth.identity import Principal, get_principal
from alphaclass.core.database import get_db
from alphaclass.core.schemas import (
    ChatRequest,
    ChatResponse,
    ConversationSchema,
    ConversationTurnSchema,
    TranscriptResponse,
)

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    ai_client: InferenceClient = Depends(get_ai_client),
) -> ChatResponse:
    """Send a message to the assistant.

    Omit ``conversation_id`` to start a new conversation; the response always
    carries the id to continue with.
    """
    service = ChatService(db, ai_client)
    result = await service.handle_turn(principal, request.message, request.conversation_id)
    return ChatResponse(response=result.response, conversation_id=result.conversation_id)


@router.get("/conversations", response_model=list[ConversationSchema])
async def list_conversations(
    limit: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> list[ConversationSchema]:
    """List the caller's conversations, newest first."""
    conversations = await ConversationManager(db).list_conversations(principal, limit=limit)
    return [ConversationSchema.model_validate(c) for c in conversations]


@router.get("/conversations/{conversation_id}/turns", response_model=TranscriptResponse)
async def get_transcript(
    conversation_id: UUID,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
) -> TranscriptResponse:
    """Full transcript of one of the caller's conversations."""
    turns = await ConversationManager(db).transcript(conversation_id, principal)
    return TranscriptResponse(
        conversation_id=conversation_id,
        turns=[ConversationTurnSchema.model_validate(t) for t in turns],
    )
