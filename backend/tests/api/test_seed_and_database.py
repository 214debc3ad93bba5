"""Seed script and database session manager.

Invariants:
    - Seeding is idempotent: a second run inserts nothing
    - SQLAlchemy errors escaping a managed session become DatabaseError
    - Domain errors pass through the session untouched
"""

import pytest
from sqlalchemy import func, select, text

from postboard.core.errors import DatabaseError, ResourceNotFoundError
from postboard.models.post import Post
from postboard.models.user import User
from postboard.seed import SEED_USERS, seed


async def test_seed_inserts_users_with_posts(db, seeded):
    assert [u.email for u in seeded] == [u["email"] for u in SEED_USERS]
    assert await db.scalar(select(func.count()).select_from(Post)) == 2


async def test_seed_is_idempotent(db, seeded):
    again = await seed(db)
    assert again == []
    assert await db.scalar(select(func.count()).select_from(User)) == 2


async def test_session_maps_sqlalchemy_errors(app):
    manager = app.state.lifecycle.db
    with pytest.raises(DatabaseError) as exc_info:
        async with manager.session() as session:
            await session.execute(text("SELECT * FROM missing_table"))
    assert exc_info.value.http_status == 500


async def test_session_passes_domain_errors_through(app):
    manager = app.state.lifecycle.db
    with pytest.raises(ResourceNotFoundError):
        async with manager.session():
            raise ResourceNotFoundError("User", 1)


async def test_health_check_round_trip(app):
    assert await app.state.lifecycle.db.health_check() is None
