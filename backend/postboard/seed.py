"""Seed Script — inserts demo users and posts.

Usage:
    python -m postboard.seed

Invariants:
    - Idempotent: users whose email already exists are skipped
    - Uses its own engine (db/session.py) and disposes it before exiting
"""

import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.config import get_settings
from postboard.db.session import create_session_factory
from postboard.infrastructure.observability import setup_logging
from postboard.models.post import Post
from postboard.models.user import User

logger = logging.getLogger(__name__)

SEED_USERS = [
    {
        "name": "John Doe",
        "email": "john@example.com",
        "posts": [{
            "title": "Hello World",
            "content": "This is my first post!",
            "published": True,
        }],
    },
    {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "posts": [{
            "title": "Getting Started",
            "content": "Welcome to our Postboard application!",
            "published": True,
        }],
    },
]


async def seed(db: AsyncSession, users: list[dict] = SEED_USERS) -> list[User]:
    """Insert users (with posts) that are not present yet. Returns the created users."""
    created = []
    for entry in users:
        exists = await db.scalar(select(User.id).where(User.email == entry["email"]))
        if exists is not None:
            logger.info(f"Seed user {entry['email']} already present, skipping")
            continue
        user = User(
            name=entry["name"],
            email=entry["email"],
            posts=[Post(**post) for post in entry.get("posts", [])],
        )
        db.add(user)
        created.append(user)
    await db.commit()
    for user in created:
        logger.info(
            f"Seeded user {user.id}", extra={"user_id": user.id, "email": user.email},
        )
    return created


async def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    engine, session_factory = create_session_factory(settings.database_url)
    try:
        async with session_factory() as db:
            created = await seed(db)
        logger.info(f"Database seeded successfully ({len(created)} new users)")
        return 0
    except Exception:
        logger.error("Seeding failed", exc_info=True)
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
