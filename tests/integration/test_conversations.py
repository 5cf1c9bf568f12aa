"""
Integration Tests for conversations and the chat turn flow
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from alphaclass.assistant import ChatService, ConversationManager
from alphaclass.core.enums import TurnSender
from alphaclass.core.errors import (
    InferenceUnavailable,
    InvalidResource,
    NotFound,
    StoreUnavailable,
    Unauthorized,
)
from alphaclass.core.models import Conversation, ConversationTurn, User
from tests.conftest import principal_for


async def _turns(db: AsyncSession, conversation_id) -> list[ConversationTurn]:
    result = await db.execute(
        select(ConversationTurn)
        .where(ConversationTurn.conversation_id == conversation_id)
        .order_by(ConversationTurn.sequence)
    )
    return list(result.scalars().all())


class TestResolve:
    async def test_creates_when_id_omitted(self, db_session: AsyncSession, student: User) -> None:
        manager = ConversationManager(db_session)

        conversation_id = await manager.resolve(
            principal_for(student), first_message="When is my next exam?", context={"k": "v"}
        )
        await db_session.commit()

        conversation = await db_session.get(Conversation, conversation_id)
        assert conversation.user_id == student.id
        assert conversation.title == "When is my next exam?"
        assert conversation.context["k"] == "v"
        assert "opened_at" in conversation.context

    async def test_reuses_owned_conversation(self, db_session: AsyncSession, student: User) -> None:
        manager = ConversationManager(db_session)
        principal = principal_for(student)
        created = await manager.resolve(principal, first_message="hi")

        assert await manager.resolve(principal, created) == created
        count = await db_session.execute(select(func.count(Conversation.id)))
        assert count.scalar_one() == 1

    async def test_foreign_conversation_unauthorized(
        self, db_session: AsyncSession, student: User, other_student: User
    ) -> None:
        manager = ConversationManager(db_session)
        theirs = await manager.resolve(principal_for(other_student), first_message="mine")

        with pytest.raises(Unauthorized):
            await manager.resolve(principal_for(student), theirs)

    async def test_unknown_conversation_not_found(
        self, db_session: AsyncSession, student: User
    ) -> None:
        with pytest.raises(NotFound):
            await ConversationManager(db_session).resolve(principal_for(student), uuid4())


class TestTurns:
    async def test_append_order_is_stable(self, db_session: AsyncSession, student: User) -> None:
        manager = ConversationManager(db_session)
        principal = principal_for(student)
        conversation_id = await manager.resolve(principal, first_message="q1")

        bodies = ["q1", "a1", "q2", "a2"]
        senders = [TurnSender.USER, TurnSender.ASSISTANT] * 2
        for sender, body in zip(senders, bodies, strict=True):
            await manager.append_turn(conversation_id, sender, body)
        await db_session.commit()

        first = await manager.transcript(conversation_id, principal)
        second = await manager.transcript(conversation_id, principal)

        assert [t.body for t in first] == bodies
        assert [t.sequence for t in first] == [1, 2, 3, 4]
        assert [t.id for t in first] == [t.id for t in second]

    async def test_position_collision_is_retryable_and_keeps_existing_turn(
        self, db_session: AsyncSession, student: User, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        manager = ConversationManager(db_session)
        conversation_id = await manager.resolve(principal_for(student), first_message="q")
        await manager.append_turn(conversation_id, TurnSender.USER, "q")
        await db_session.commit()

        # Another writer already took position 1 by the time this append inserts
        async def stale_position(_conversation_id):
            return 1

        monkeypatch.setattr(manager, "_next_sequence", stale_position)

        with pytest.raises(StoreUnavailable) as exc_info:
            await manager.append_turn(conversation_id, TurnSender.ASSISTANT, "late")

        assert exc_info.value.retryable is True
        turns = await _turns(db_session, conversation_id)
        assert [(t.sequence, t.body) for t in turns] == [(1, "q")]

    async def test_unknown_sender_rejected(self, db_session: AsyncSession, student: User) -> None:
        manager = ConversationManager(db_session)
        conversation_id = await manager.resolve(principal_for(student), first_message="q")

        with pytest.raises(InvalidResource):
            await manager.append_turn(conversation_id, "system", "nope")

    async def test_transcript_requires_ownership(
        self, db_session: AsyncSession, student: User, other_student: User
    ) -> None:
        manager = ConversationManager(db_session)
        conversation_id = await manager.resolve(principal_for(student), first_message="q")

        with pytest.raises(Unauthorized):
            await manager.transcript(conversation_id, principal_for(other_student))

    async def test_list_conversations_only_own(
        self, db_session: AsyncSession, student: User, other_student: User
    ) -> None:
        manager = ConversationManager(db_session)
        mine = await manager.resolve(principal_for(student), first_message="mine")
        await manager.resolve(principal_for(other_student), first_message="theirs")

        listed = await manager.list_conversations(principal_for(student))

        assert [c.id for c in listed] == [mine]


class TestChatService:
    async def test_successful_turn_persists_both_sides(
        self, db_session: AsyncSession, student: User, active_enrollment, fake_ai
    ) -> None:
        service = ChatService(db_session, fake_ai)

        result = await service.handle_turn(principal_for(student), "What do I have tomorrow?")

        assert result.response == fake_ai.reply
        turns = await _turns(db_session, result.conversation_id)
        assert [(t.sender, t.body) for t in turns] == [
            ("user", "What do I have tomorrow?"),
            ("assistant", fake_ai.reply),
        ]
        system_prompt, user_message = fake_ai.calls[0]
        assert "Student One (student)" in system_prompt
        assert user_message == "What do I have tomorrow?"

    async def test_context_snapshot_stored_on_new_conversation(
        self, db_session: AsyncSession, student: User, fake_ai
    ) -> None:
        result = await ChatService(db_session, fake_ai).handle_turn(principal_for(student), "hi")

        conversation = await db_session.get(Conversation, result.conversation_id)
        assert conversation.context["assistant_context"]["role"] == "student"

    async def test_continues_existing_conversation(
        self, db_session: AsyncSession, student: User, fake_ai
    ) -> None:
        service = ChatService(db_session, fake_ai)
        principal = principal_for(student)

        first = await service.handle_turn(principal, "first")
        second = await service.handle_turn(principal, "second", first.conversation_id)

        assert second.conversation_id == first.conversation_id
        turns = await _turns(db_session, first.conversation_id)
        assert [t.body for t in turns if t.sender == "user"] == ["first", "second"]

    async def test_failed_inference_keeps_only_user_turn(
        self, db_session: AsyncSession, student: User, failing_ai
    ) -> None:
        service = ChatService(db_session, failing_ai)

        with pytest.raises(InferenceUnavailable) as exc_info:
            await service.handle_turn(principal_for(student), "Are you there?")

        conversation_id = exc_info.value.conversation_id
        assert conversation_id is not None
        assert exc_info.value.retryable is True
        turns = await _turns(db_session, conversation_id)
        assert [(t.sender, t.body) for t in turns] == [("user", "Are you there?")]
        assert failing_ai.calls == 1

    async def test_retry_after_failure_reuses_conversation(
        self, db_session: AsyncSession, student: User, failing_ai, fake_ai
    ) -> None:
        principal = principal_for(student)
        with pytest.raises(InferenceUnavailable) as exc_info:
            await ChatService(db_session, failing_ai).handle_turn(principal, "hello?")

        retry = await ChatService(db_session, fake_ai).handle_turn(
            principal, "hello?", exc_info.value.conversation_id
        )

        turns = await _turns(db_session, retry.conversation_id)
        assert [t.sender for t in turns] == ["user", "user", "assistant"]

    @pytest.mark.parametrize("message", ["", "   "])
    async def test_empty_message_rejected(
        self, db_session: AsyncSession, student: User, fake_ai, message: str
    ) -> None:
        with pytest.raises(InvalidResource):
            await ChatService(db_session, fake_ai).handle_turn(principal_for(student), message)

        assert fake_ai.calls == []

    async def test_oversized_message_rejected(
        self, db_session: AsyncSession, student: User, fake_ai
    ) -> None:
        with pytest.raises(InvalidResource):
            await ChatService(db_session, fake_ai).handle_turn(principal_for(student), "x" * 4001)

    async def test_foreign_conversation_rejected_before_inference(
        self, db_session: AsyncSession, student: User, other_student: User, fake_ai
    ) -> None:
        service = ChatService(db_session, fake_ai)
        theirs = await service.handle_turn(principal_for(other_student), "mine")
        fake_ai.calls.clear()

        with pytest.raises(Unauthorized):
            await service.handle_turn(principal_for(student), "let me in", theirs.conversation_id)

        assert fake_ai.calls == []
        turns = await _turns(db_session, theirs.conversation_id)
        assert len(turns) == 2
