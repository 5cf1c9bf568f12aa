"""
Conversation Models

Assistant chat threads and their append-only turns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from .users import User

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alphaclass.core.enums import TurnSender, sql_in

from .base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class Conversation(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """A chat thread owned by one user. Never closed; always appendable."""

    __tablename__ = "conversations"
    __table_args__ = (Index("idx_conversations_user", "user_id"),)

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    context: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True, comment="Snapshot of assistant context when the thread was opened"
    )

    user: Mapped[User] = relationship(back_populates="conversations")
    turns: Mapped[list[ConversationTurn]] = relationship(
        back_populates="conversation",
        order_by=lambda: [ConversationTurn.created_at, ConversationTurn.sequence],
    )


class ConversationTurn(Base, UUIDPrimaryKeyMixin, CreatedAtMixin):
    """One message in a thread. Inserted once, never updated."""

    __tablename__ = "conversation_turns"
    __table_args__ = (
        CheckConstraint(f"sender IN ({sql_in(TurnSender)})", name="check_turn_sender"),
        Index("idx_turns_conversation_order", "conversation_id", "created_at", "sequence"),
        UniqueConstraint("conversation_id", "sequence", name="uq_turn_conversation_sequence"),
    )

    conversation_id: Mapped[UUID] = mapped_column(ForeignKey("conversations.id"), nullable=False)
    sequence: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="1-based append position, unique per conversation"
    )
    sender: Mapped[str] = mapped_column(String(20), nullable=False, comment="user or assistant")
    body: Mapped[str] = mapped_column(Text, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), default="text")

    conversation: Mapped[Conversation] = relationship(back_populates="turns")
