"""
Pytest Configuration and Fixtures

Shared test fixtures for unit, API and integration tests. Tests run against
in-memory SQLite unless DATABASE_URL points somewhere else.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import UTC, datetime, time, timedelta  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import configure_mappers  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from alphaclass.auth.identity import Principal, issue_token  # noqa: E402
from alphaclass.core.enums import EnrollmentStatus, EventType, Role  # noqa: E402
from alphaclass.core.errors import InferenceUnavailable  # noqa: E402
from alphaclass.core.models import (  # noqa: E402
    Base,
    ClassSection,
    Enrollment,
    Institution,
    Notification,
    ScheduleEvent,
    Subject,
    User,
)

# Ensure all mappers are configured
configure_mappers()


@pytest.fixture
async def async_engine():
    """Create async engine for testing."""
    database_url = os.environ["DATABASE_URL"]

    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        if not database_url.startswith("sqlite"):
            await conn.execute(text("DROP SCHEMA public CASCADE"))
            await conn.execute(text("CREATE SCHEMA public"))
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ============================================================================
# Clock helpers
# ============================================================================


@pytest.fixture
def today_start() -> datetime:
    """Midnight UTC today."""
    return datetime.combine(datetime.now(UTC).date(), time(0, 0), tzinfo=UTC)


@pytest.fixture
def tomorrow_end(today_start: datetime) -> datetime:
    return today_start + timedelta(days=2) - timedelta(microseconds=1)


# ============================================================================
# Tenancy and people
# ============================================================================


@pytest.fixture
async def institution(db_session: AsyncSession) -> Institution:
    inst = Institution(name="Tech University", code="TU")
    db_session.add(inst)
    await db_session.commit()
    return inst


@pytest.fixture
async def other_institution(db_session: AsyncSession) -> Institution:
    inst = Institution(name="Other College", code="OC")
    db_session.add(inst)
    await db_session.commit()
    return inst


async def _make_user(
    db: AsyncSession, institution: Institution, *, name: str, email: str, role: Role
) -> User:
    user = User(
        institution_id=institution.id,
        name=name,
        email=email,
        role=role.value,
        timezone="Africa/Accra",
        is_active=True,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def teacher(db_session: AsyncSession, institution: Institution) -> User:
    return await _make_user(
        db_session, institution, name="John Teacher", email="john.teacher@tu.edu", role=Role.TEACHER
    )


@pytest.fixture
async def other_teacher(db_session: AsyncSession, institution: Institution) -> User:
    return await _make_user(
        db_session, institution, name="Jane Teacher", email="jane.teacher@tu.edu", role=Role.TEACHER
    )


@pytest.fixture
async def student(db_session: AsyncSession, institution: Institution) -> User:
    return await _make_user(
        db_session, institution, name="Student One", email="student1@tu.edu", role=Role.STUDENT
    )


@pytest.fixture
async def other_student(db_session: AsyncSession, institution: Institution) -> User:
    return await _make_user(
        db_session, institution, name="Student Two", email="student2@tu.edu", role=Role.STUDENT
    )


@pytest.fixture
async def admin(db_session: AsyncSession, institution: Institution) -> User:
    return await _make_user(
        db_session, institution, name="Ada Admin", email="admin@tu.edu", role=Role.ADMIN
    )


@pytest.fixture
async def foreign_admin(db_session: AsyncSession, other_institution: Institution) -> User:
    return await _make_user(
        db_session, other_institution, name="Olu Admin", email="admin@oc.edu", role=Role.ADMIN
    )


def principal_for(user: User) -> Principal:
    """Principal as the credential verifier would produce it for ``user``."""
    return Principal(
        id=user.id, role=Role(user.role), tenant_id=user.institution_id, email=user.email
    )


def auth_headers(user: User) -> dict[str, str]:
    token = issue_token(
        user_id=user.id, role=Role(user.role), tenant_id=user.institution_id, email=user.email
    )
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# Academics
# ============================================================================


@pytest.fixture
async def subject(db_session: AsyncSession, institution: Institution) -> Subject:
    subj = Subject(
        institution_id=institution.id,
        code="CS101",
        name="Introduction to Programming",
        credits=3,
        department="Computer Science",
    )
    db_session.add(subj)
    await db_session.commit()
    return subj


@pytest.fixture
async def class_c(
    db_session: AsyncSession, institution: Institution, subject: Subject, teacher: User
) -> ClassSection:
    """Class C, taught by ``teacher``."""
    section = ClassSection(
        institution_id=institution.id,
        subject_id=subject.id,
        teacher_id=teacher.id,
        section_name="A",
        room="Room 101",
        schedule_pattern={"days": ["MON", "WED"], "start": "09:00", "end": "10:30"},
        max_students=30,
        is_active=True,
    )
    db_session.add(section)
    await db_session.commit()
    return section


@pytest.fixture
async def class_d(
    db_session: AsyncSession, institution: Institution, subject: Subject, other_teacher: User
) -> ClassSection:
    """Class D, taught by ``other_teacher``."""
    section = ClassSection(
        institution_id=institution.id,
        subject_id=subject.id,
        teacher_id=other_teacher.id,
        section_name="B",
        room="Room 202",
        max_students=25,
        is_active=True,
    )
    db_session.add(section)
    await db_session.commit()
    return section


async def enroll(
    db: AsyncSession,
    student: User,
    section: ClassSection,
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
) -> Enrollment:
    enrollment = Enrollment(student_id=student.id, class_id=section.id, status=status.value)
    db.add(enrollment)
    await db.commit()
    return enrollment


@pytest.fixture
async def active_enrollment(
    db_session: AsyncSession, student: User, class_c: ClassSection
) -> Enrollment:
    return await enroll(db_session, student, class_c)


async def make_event(
    db: AsyncSession,
    *,
    institution: Institution,
    title: str,
    start_at: datetime,
    section: ClassSection | None = None,
    creator: User | None = None,
    is_cancelled: bool = False,
    event_type: EventType = EventType.CLASS,
    duration: timedelta = timedelta(minutes=50),
) -> ScheduleEvent:
    event = ScheduleEvent(
        institution_id=institution.id,
        class_id=section.id if section else None,
        creator_id=creator.id if creator else None,
        title=title,
        event_type=event_type.value,
        start_at=start_at,
        end_at=start_at + duration,
        location=section.room if section else None,
        is_cancelled=is_cancelled,
    )
    db.add(event)
    await db.commit()
    return event


@pytest.fixture
async def event_e1(
    db_session: AsyncSession, institution: Institution, class_c: ClassSection, today_start: datetime
) -> ScheduleEvent:
    """Class C lecture tomorrow at 09:00."""
    return await make_event(
        db_session,
        institution=institution,
        title="CS101 Lecture",
        start_at=today_start + timedelta(days=1, hours=9),
        section=class_c,
    )


@pytest.fixture
async def event_e2(
    db_session: AsyncSession, institution: Institution, class_c: ClassSection, today_start: datetime
) -> ScheduleEvent:
    """Cancelled Class C lab tomorrow at 10:00."""
    return await make_event(
        db_session,
        institution=institution,
        title="CS101 Lab",
        start_at=today_start + timedelta(days=1, hours=10),
        section=class_c,
        is_cancelled=True,
    )


# ============================================================================
# Notifications
# ============================================================================


async def make_notification(
    db: AsyncSession,
    user: User,
    *,
    title: str = "Assignment due",
    created_at: datetime | None = None,
    is_read: bool = False,
) -> Notification:
    kwargs = {"created_at": created_at} if created_at else {}
    notification = Notification(
        user_id=user.id,
        title=title,
        message=f"{title} for {user.name}",
        type="reminder",
        priority="high",
        is_read=is_read,
        read_at=datetime.now(UTC) if is_read else None,
        **kwargs,
    )
    db.add(notification)
    await db.commit()
    return notification


@pytest.fixture
async def notification(db_session: AsyncSession, student: User) -> Notification:
    return await make_notification(db_session, student)


# ============================================================================
# Inference doubles
# ============================================================================


class FakeInferenceClient:
    """Records prompts and answers with a canned reply."""

    def __init__(self, reply: str = "You have CS101 tomorrow at 09:00."):
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    async def generate(self, system_context: str, user_message: str) -> str:
        self.calls.append((system_context, user_message))
        return self.reply


class FailingInferenceClient:
    """Always unavailable."""

    def __init__(self) -> None:
        self.calls = 0

    async def generate(self, system_context: str, user_message: str) -> str:
        self.calls += 1
        raise InferenceUnavailable("provider timeout")


@pytest.fixture
def fake_ai() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def failing_ai() -> FailingInferenceClient:
    return FailingInferenceClient()
