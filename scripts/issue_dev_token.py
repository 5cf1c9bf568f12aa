#!/usr/bin/env python3
"""
Development Token Minter

Looks a user up by email and prints a bearer token the API will accept.
Production tokens come from the external auth service; this is for local
use only and refuses to run outside ENVIRONMENT=local.

Usage:
    python scripts/issue_dev_token.py student1@student.techuniversity.edu
    python scripts/issue_dev_token.py admin@techuniversity.edu --ttl-minutes=600
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alphaclass.auth.identity import issue_token
from alphaclass.config import settings
from alphaclass.core.enums import Role
from alphaclass.core.models import User


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Mint a local development JWT")
    parser.add_argument("email", help="Email of an existing user")
    parser.add_argument(
        "--ttl-minutes",
        type=int,
        default=settings.DEV_TOKEN_TTL_MINUTES,
        help="Token lifetime in minutes",
    )
    parser.add_argument(
        "--db-url",
        type=str,
        help="Custom database URL (default from settings)",
    )
    args = parser.parse_args()

    if not settings.is_local:
        print(f"❌ Refusing to mint tokens in {settings.ENVIRONMENT}")
        sys.exit(1)

    engine = create_async_engine(args.db_url or settings.DATABASE_URL, echo=False)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(
                select(User.id, User.role, User.institution_id).where(User.email == args.email)
            )
            row = result.first()
    finally:
        await engine.dispose()

    if row is None:
        print(f"❌ No user with email {args.email}")
        sys.exit(1)

    token = issue_token(
        user_id=row.id,
        role=Role(row.role),
        tenant_id=row.institution_id,
        email=args.email,
        ttl=timedelta(minutes=args.ttl_minutes),
    )
    print(token)


if __name__ == "__main__":
    asyncio.run(main())
