"""
Conversation Manager

Threads chat turns into persisted, continuable conversations.

A conversation is created lazily on the first turn when the caller supplies
no id, and is reused by id afterwards, but only by its owner. Turns are
append-only and the transcript is returned in append order.

Per chat turn the sequence is strict: the user's turn is committed before
the inference call, and the assistant's turn only after a successful reply.
A failed inference call therefore leaves exactly one new (user) turn behind.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from alphaclass.assistant.context import build_system_prompt, summarize
from alphaclass.config import settings
from alphaclass.core.database import store_guard
from alphaclass.core.enums import TurnSender
from alphaclass.core.errors import (
    InferenceUnavailable,
    InvalidResource,
    NotFound,
    StoreUnavailable,
    Unauthorized,
)
from alphaclass.core.models import Conversation, ConversationTurn
from alphaclass.core.models.base import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from alphaclass.ai import InferenceClient
    from alphaclass.auth.identity import Principal

logger = logging.getLogger(__name__)


def derive_title(first_message: str, max_length: int | None = None) -> str:
    """Conversation title from the opening message, truncated with an ellipsis."""
    if max_length is None:
        max_length = settings.CHAT_TITLE_LENGTH
    text = " ".join(first_message.split())
    if not text:
        return "New conversation"
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ConversationManager:
    """Create, resume and read conversation threads for one request."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned(self, conversation_id: UUID, principal: Principal) -> Conversation:
        """Load a conversation, enforcing ownership.

        Raises:
            NotFound: no conversation with that id
            Unauthorized: conversation belongs to another user
        """
        async with store_guard("conversation.load"):
            conversation = await self.db.get(Conversation, conversation_id)

        if conversation is None:
            raise NotFound(f"Conversation not found with ID: {conversation_id}")

        if conversation.user_id != principal.id:
            logger.warning(
                f"User {principal.id} attempted to access conversation {conversation_id} "
                f"owned by {conversation.user_id}"
            )
            raise Unauthorized("Conversation belongs to another user")

        return conversation

    async def resolve(
        self,
        principal: Principal,
        conversation_id: UUID | None = None,
        *,
        first_message: str = "",
        context: dict[str, Any] | None = None,
    ) -> UUID:
        """Return the id of the thread this turn belongs to.

        Omitted id: a new conversation owned by ``principal`` is created, titled
        from ``first_message`` and seeded with ``context``. Supplied id: the
        conversation must exist and be owned by ``principal``.
        """
        if conversation_id is not None:
            conversation = await self.get_owned(conversation_id, principal)
            return conversation.id

        conversation = Conversation(
            user_id=principal.id,
            title=derive_title(first_message),
            context={"opened_at": utcnow().isoformat(), **(context or {})},
        )
        async with store_guard("conversation.create"):
            self.db.add(conversation)
            await self.db.flush()

        logger.info(f"Opened conversation {conversation.id} for user {principal.id}")
        return conversation.id

    async def append_turn(
        self,
        conversation_id: UUID,
        sender: TurnSender | str,
        body: str,
        *,
        kind: str = "text",
    ) -> ConversationTurn:
        """Append one turn with a server-assigned timestamp and position.

        Raises:
            InvalidResource: unknown sender
            StoreUnavailable: a concurrent append took the same position; retryable
        """
        try:
            sender = TurnSender(sender)
        except ValueError as e:
            raise InvalidResource(f"Unknown turn sender: {sender!r}") from e

        async with store_guard("conversation.append"):
            turn = ConversationTurn(
                conversation_id=conversation_id,
                sequence=await self._next_sequence(conversation_id),
                sender=sender.value,
                body=body,
                kind=kind,
                created_at=utcnow(),
            )
            self.db.add(turn)
            try:
                await self.db.flush()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(
                    f"Turn position {turn.sequence} in conversation {conversation_id} "
                    "was taken by a concurrent append"
                )
                raise StoreUnavailable("Conversation changed concurrently, please retry") from e

        return turn

    async def _next_sequence(self, conversation_id: UUID) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.max(ConversationTurn.sequence), 0)).where(
                ConversationTurn.conversation_id == conversation_id
            )
        )
        return int(result.scalar_one()) + 1


    async def transcript(
        self, conversation_id: UUID, principal: Principal
    ) -> Sequence[ConversationTurn]:
        """Turns of an owned conversation, in append order."""
        await self.get_owned(conversation_id, principal)

        async with store_guard("conversation.transcript"):
            result = await self.db.execute(
                select(ConversationTurn)
                .where(ConversationTurn.conversation_id == conversation_id)
                .order_by(ConversationTurn.created_at.asc(), ConversationTurn.sequence.asc())
            )
            return result.scalars().all()

    async def list_conversations(
        self, principal: Principal, *, limit: int = 20
    ) -> Sequence[Conversation]:
        """The principal's own conversations, most recently opened first."""
        async with store_guard("conversation.list"):
            result = await self.db.execute(
                select(Conversation)
                .where(Conversation.user_id == principal.id)
                .order_by(Conversation.created_at.desc())
                .limit(limit)
            )
            return result.scalars().all()


@dataclass(frozen=True, slots=True)
class ChatResult:
    response: str
    conversation_id: UUID


class ChatService:
    """Runs one chat turn: context, thread, user turn, inference, assistant turn."""

    def __init__(self, db: AsyncSession, ai_client: InferenceClient):
        self.db = db
        self.ai_client = ai_client
        self.conversations = ConversationManager(db)

    async def handle_turn(
        self,
        principal: Principal,
        message: str,
        conversation_id: UUID | None = None,
    ) -> ChatResult:
        """Process a user message and return the assistant's reply.

        Raises:
            InvalidResource: empty or oversized message
            NotFound / Unauthorized: bad conversation id
            InferenceUnavailable: assistant failed; the user's turn is kept and
                the error carries the conversation id for a retry
        """
        message = message.strip() if message else ""
        if not message:
            raise InvalidResource("Message is required")
        if len(message) > settings.CHAT_MAX_MESSAGE_LENGTH:
            raise InvalidResource(
                f"Message exceeds {settings.CHAT_MAX_MESSAGE_LENGTH} characters"
            )

        context = await summarize(self.db, principal)

        conv_id = await self.conversations.resolve(
            principal,
            conversation_id,
            first_message=message,
            context={"assistant_context": context.snapshot()},
        )

        await self.conversations.append_turn(conv_id, TurnSender.USER, message)
        async with store_guard("chat.commit_user_turn"):
            await self.db.commit()

        try:
            reply = await self.ai_client.generate(build_system_prompt(context), message)
        except InferenceUnavailable as e:
            logger.warning(f"Inference failed for conversation {conv_id}: {e.message}")
            raise InferenceUnavailable(e.message, conversation_id=conv_id) from e

        await self.conversations.append_turn(conv_id, TurnSender.ASSISTANT, reply)
        async with store_guard("chat.commit_assistant_turn"):
            await self.db.commit()

        return ChatResult(response=reply, conversation_id=conv_id)
