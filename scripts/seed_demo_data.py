#!/usr/bin/env python3
"""
Demo Data Seeder

Creates a demo institution with one student, one teacher and one admin, a
couple of class sections, this week's schedule and a few notifications, so
the API can be exercised locally.

Usage:
    python scripts/seed_demo_data.py              # Seed into DATABASE_URL
    python scripts/seed_demo_data.py --reset      # Drop and recreate tables first
    python scripts/seed_demo_data.py --db-url=sqlite+aiosqlite:///./demo.db
"""

import argparse
import asyncio
import sys
from datetime import UTC, datetime, time, timedelta
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alphaclass.config import settings
from alphaclass.core.enums import EventType, NotificationPriority, Role
from alphaclass.core.models import (
    ClassSection,
    Enrollment,
    Institution,
    Notification,
    ScheduleEvent,
    Subject,
    User,
)
from alphaclass.core.models.base import Base

INSTITUTION_CODE = "TECHU"

DEMO_USERS = [
    ("Student One", "student1@student.techuniversity.edu", Role.STUDENT),
    ("John Teacher", "john.teacher@techuniversity.edu", Role.TEACHER),
    ("Campus Admin", "admin@techuniversity.edu", Role.ADMIN),
]

DEMO_SUBJECTS = [
    ("CS101", "Introduction to Programming", "Computer Science"),
    ("MATH201", "Linear Algebra", "Mathematics"),
]


class DemoSeeder:
    """Seeds a self-contained demo tenant."""

    def __init__(self, db_url: str):
        self.db_url = db_url
        self.engine = create_async_engine(db_url, echo=False)
        self.SessionLocal = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self, reset: bool = False) -> None:
        """Create all tables, optionally dropping them first."""
        async with self.engine.begin() as conn:
            if reset:
                await conn.run_sync(Base.metadata.drop_all)
                print("⚠️  Dropped existing tables")
            await conn.run_sync(Base.metadata.create_all)
        print("✅ Database tables created/verified")

    async def seed(self) -> None:
        """Main seeding orchestrator."""
        async with self.SessionLocal() as session:
            existing = await session.execute(
                select(Institution).where(Institution.code == INSTITUTION_CODE)
            )
            if existing.scalar_one_or_none():
                print("ℹ️  Demo institution already present, nothing to do")
                return

            institution = Institution(name="Tech University", code=INSTITUTION_CODE)
            session.add(institution)
            await session.flush()

            users = {}
            for name, email, role in DEMO_USERS:
                user = User(
                    institution_id=institution.id,
                    name=name,
                    email=email,
                    role=role.value,
                    timezone="Africa/Accra",
                )
                session.add(user)
                users[role] = user
            await session.flush()
            print(f"  ✅ Created {len(users)} users")

            sections = await self._seed_classes(session, institution, users[Role.TEACHER])
            for section in sections:
                session.add(Enrollment(student_id=users[Role.STUDENT].id, class_id=section.id))
            await session.flush()
            print(f"  ✅ Enrolled student in {len(sections)} classes")

            events = self._week_of_events(institution, sections, users[Role.TEACHER])
            session.add_all(events)
            print(f"  ✅ Created {len(events)} schedule events")

            session.add_all(self._notifications(users[Role.STUDENT]))
            await session.commit()
            print("  ✅ Created notifications")

    async def _seed_classes(
        self, session: AsyncSession, institution: Institution, teacher: User
    ) -> list[ClassSection]:
        sections = []
        for code, name, department in DEMO_SUBJECTS:
            subject = Subject(
                institution_id=institution.id, code=code, name=name, department=department
            )
            session.add(subject)
            await session.flush()

            section = ClassSection(
                institution_id=institution.id,
                subject_id=subject.id,
                teacher_id=teacher.id,
                section_name="A",
                room=f"Room {100 + len(sections) * 100 + 1}",
                schedule_pattern={"days": ["MON", "WED"], "start": "09:00", "end": "10:30"},
            )
            session.add(section)
            sections.append(section)
        await session.flush()
        return sections

    @staticmethod
    def _week_of_events(
        institution: Institution, sections: list[ClassSection], teacher: User
    ) -> list[ScheduleEvent]:
        today = datetime.combine(datetime.now(UTC).date(), time(0, 0), tzinfo=UTC)
        events = []
        for day in range(5):
            for slot, section in enumerate(sections):
                start = today + timedelta(days=day, hours=9 + slot * 2)
                events.append(
                    ScheduleEvent(
                        institution_id=institution.id,
                        class_id=section.id,
                        title="Lecture",
                        event_type=EventType.CLASS.value,
                        start_at=start,
                        end_at=start + timedelta(minutes=90),
                        location=section.room,
                    )
                )
        exam_start = today + timedelta(days=6, hours=10)
        events.append(
            ScheduleEvent(
                institution_id=institution.id,
                class_id=sections[0].id,
                creator_id=teacher.id,
                title="Midterm Exam",
                event_type=EventType.EXAM.value,
                start_at=exam_start,
                end_at=exam_start + timedelta(hours=2),
                location="Main Hall",
            )
        )
        return events

    @staticmethod
    def _notifications(student: User) -> list[Notification]:
        return [
            Notification(
                user_id=student.id,
                title="Midterm next week",
                message="CS101 midterm is scheduled in the Main Hall.",
                type="reminder",
                priority=NotificationPriority.HIGH.value,
            ),
            Notification(
                user_id=student.id,
                title="Welcome to AlphaClass",
                message="Ask the assistant about your schedule at any time.",
                priority=NotificationPriority.LOW.value,
            ),
        ]


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed AlphaClass demo data")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate all tables before seeding",
    )
    parser.add_argument(
        "--db-url",
        type=str,
        help="Custom database URL (default from settings)",
    )
    args = parser.parse_args()

    db_url = args.db_url or settings.DATABASE_URL

    print("🚀 AlphaClass Demo Seeder")
    print(f"🗄️  Database: {db_url.split('@')[1] if '@' in db_url else db_url}\n")

    seeder = DemoSeeder(db_url)

    try:
        await seeder.create_tables(reset=args.reset)
        await seeder.seed()

        print("\n✅ Seed complete! Demo accounts:")
        for _, email, role in DEMO_USERS:
            print(f"   {role.value:<8} {email}")
        print("   Mint a token with: python scripts/issue_dev_token.py <email>")

    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise
    finally:
        await seeder.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
