"""Post Service — queries and mutations behind the /posts routes.

Invariants:
    - A post is always created under an existing user; authorId comes from the route
    - List queries run count and page fetch concurrently on separate sessions
"""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.core.errors import ResourceNotFoundError
from postboard.core.pagination import PageRequest
from postboard.infrastructure.database import DatabaseSessionManager
from postboard.models.post import Post
from postboard.schemas.post import PostCreate, PostUpdate
from postboard.services.users import get_user_or_404

logger = logging.getLogger(__name__)


async def list_posts(
    db_manager: DatabaseSessionManager,
    page: PageRequest,
    published: bool | None = None,
) -> tuple[list[Post], int]:
    """Return one page of posts (with authors) and the filtered total."""
    filters = [] if published is None else [Post.published == published]

    async def count() -> int:
        async with db_manager.session() as db:
            return await db.scalar(
                select(func.count()).select_from(Post).where(*filters),
            )

    async def fetch() -> list[Post]:
        async with db_manager.session() as db:
            result = await db.scalars(
                select(Post).where(*filters).order_by(Post.id)
                .offset(page.offset).limit(page.limit),
            )
            return list(result.all())

    total, posts = await asyncio.gather(count(), fetch())
    return posts, total


async def get_post_or_404(db: AsyncSession, post_id: int) -> Post:
    post = await db.get(Post, post_id)
    if post is None:
        raise ResourceNotFoundError("Post", post_id)
    return post


async def create_post(db: AsyncSession, user_id: int, data: PostCreate) -> Post:
    author = await get_user_or_404(db, user_id)
    post = Post(
        title=data.title,
        content=data.content,
        published=data.published,
        author=author,
    )
    db.add(post)
    await db.commit()
    logger.info(
        f"Post created: {post.id}",
        extra={"post_id": post.id, "user_id": user_id},
    )
    return post


async def update_post(db: AsyncSession, post_id: int, data: PostUpdate) -> Post:
    post = await get_post_or_404(db, post_id)
    for field_name, value in data.model_dump(exclude_unset=True).items():
        setattr(post, field_name, value)
    await db.commit()
    logger.info(f"Post updated: {post.id}", extra={"post_id": post.id})
    return post


async def delete_post(db: AsyncSession, post_id: int) -> None:
    post = await get_post_or_404(db, post_id)
    await db.delete(post)
    await db.commit()
    logger.info(f"Post deleted: {post_id}", extra={"post_id": post_id})
