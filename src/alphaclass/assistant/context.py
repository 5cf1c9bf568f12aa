"""
Context Summarizer

Compact academic context for the assistant's system prompt. Only ever used
to prompt the inference service (and snapshotted into a new conversation);
it is not an API resource.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import distinct, func, select

from alphaclass.access.scoping import ResourceKind, scope
from alphaclass.config import settings
from alphaclass.core.database import store_guard
from alphaclass.core.enums import EnrollmentStatus, Role
from alphaclass.core.errors import InvalidCredential, NotFound
from alphaclass.core.models import Enrollment, ScheduleEvent, User
from alphaclass.core.models.base import utcnow

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from alphaclass.auth.identity import Principal


@dataclass(frozen=True, slots=True)
class AssistantContext:
    display_name: str
    role: Role
    timezone: str
    enrolled_class_count: int
    upcoming_event_count: int

    def snapshot(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value
        return data


async def summarize(
    db: AsyncSession, principal: Principal, *, now: datetime | None = None
) -> AssistantContext:
    """Summarize the principal's workload at ``now`` (defaults to current UTC time).

    ``upcoming_event_count`` uses the principal's own schedule scope, so the
    assistant never learns about events the user could not list themselves.

    Raises:
        NotFound: the principal's user record is missing or deactivated
        InvalidCredential: the token's institution does not match the user's
    """
    now = now or utcnow()

    async with store_guard("summarize.user"):
        user = await db.get(User, principal.id)

    if user is None or not user.is_active:
        raise NotFound(f"User not found with ID: {principal.id}")
    if user.institution_id != principal.tenant_id:
        raise InvalidCredential("Token institution does not match the user's institution")

    enrolled_stmt = select(func.count(distinct(Enrollment.class_id))).where(
        Enrollment.student_id == principal.id,
        Enrollment.status == EnrollmentStatus.ACTIVE.value,
    )
    upcoming_stmt = select(func.count(ScheduleEvent.id)).where(
        scope(principal, ResourceKind.SCHEDULE_EVENT),
        ScheduleEvent.start_at > now,
    )

    async with store_guard("summarize.counts"):
        enrolled = (await db.execute(enrolled_stmt)).scalar_one()
        upcoming = (await db.execute(upcoming_stmt)).scalar_one()

    return AssistantContext(
        display_name=user.name,
        role=principal.role,
        timezone=user.timezone or "UTC",
        enrolled_class_count=int(enrolled),
        upcoming_event_count=int(upcoming),
    )


def build_system_prompt(context: AssistantContext) -> str:
    """Render the assistant preamble for one chat turn."""
    return (
        f"You are {settings.ASSISTANT_NAME}, an AI assistant for academic scheduling.\n"
        f"User: {context.display_name} ({context.role.value})\n"
        f"Timezone: {context.timezone}\n"
        f"Enrolled Classes: {context.enrolled_class_count}\n"
        f"Upcoming Events: {context.upcoming_event_count}\n"
        "\n"
        "Help with scheduling, reminders, class information, and academic planning. "
        "Be helpful, concise, and educational-focused."
    )
