"""User Service — queries and mutations behind the /users routes.

Invariants:
    - Email uniqueness is pre-checked for a precise 409, and the unique constraint's
      IntegrityError is also mapped to 409 (the pre-check alone races under concurrency)
    - Partial updates touch only the fields the client sent
    - Deleting a user deletes the user's posts (ORM cascade)
    - List queries run count and page fetch concurrently on separate sessions

Design Decisions:
    - Services raise PostboardError subclasses; routes stay thin (ADR: impureim sandwich)
    - Functions take the AsyncSession (or the manager, for concurrent reads) explicitly
"""

import asyncio
import logging

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.core.errors import ConflictError, ResourceNotFoundError
from postboard.core.pagination import PageRequest
from postboard.infrastructure.database import DatabaseSessionManager
from postboard.models.user import User
from postboard.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "User with this email already exists"


def _search_filters(search: str | None) -> list:
    if not search:
        return []
    return [or_(
        User.name.icontains(search, autoescape=True),
        User.email.icontains(search, autoescape=True),
    )]


async def list_users(
    db_manager: DatabaseSessionManager,
    page: PageRequest,
    search: str | None = None,
) -> tuple[list[User], int]:
    """Return one page of users (with posts) and the filtered total."""
    filters = _search_filters(search)

    async def count() -> int:
        async with db_manager.session() as db:
            return await db.scalar(
                select(func.count()).select_from(User).where(*filters),
            )

    async def fetch() -> list[User]:
        async with db_manager.session() as db:
            result = await db.scalars(
                select(User).where(*filters).order_by(User.id)
                .offset(page.offset).limit(page.limit),
            )
            return list(result.all())

    total, users = await asyncio.gather(count(), fetch())
    return users, total


async def get_user_or_404(db: AsyncSession, user_id: int) -> User:
    """Get user (posts eagerly loaded) or raise 404. Shared with the posts routes."""
    user = await db.get(User, user_id)
    if user is None:
        raise ResourceNotFoundError("User", user_id)
    return user


async def _email_taken(
    db: AsyncSession, email: str, exclude_id: int | None = None,
) -> bool:
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    return (await db.scalar(query.limit(1))) is not None


async def _commit_or_conflict(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning(f"Unique constraint rejected write: {e.orig}")
        raise ConflictError(EMAIL_TAKEN, "email") from e


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    if await _email_taken(db, data.email):
        raise ConflictError(EMAIL_TAKEN, "email")
    user = User(name=data.name, email=data.email, posts=[])
    db.add(user)
    await _commit_or_conflict(db)
    logger.info(
        f"User created: {user.id}",
        extra={"user_id": user.id, "email": user.email},
    )
    return user


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> User:
    user = await get_user_or_404(db, user_id)
    changes = data.model_dump(exclude_unset=True)
    new_email = changes.get("email")
    if new_email is not None and new_email != user.email:
        if await _email_taken(db, new_email, exclude_id=user.id):
            raise ConflictError(EMAIL_TAKEN, "email")
    for field_name, value in changes.items():
        setattr(user, field_name, value)
    await _commit_or_conflict(db)
    logger.info(f"User updated: {user.id}", extra={"user_id": user.id})
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    user = await get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info(f"User deleted: {user_id}", extra={"user_id": user_id})
