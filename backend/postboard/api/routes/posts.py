"""Posts Routes — list, create-under-user, read, update and delete posts.

Invariants:
    - POST /users/{id}/posts binds authorId to the path id, never to the body
    - 404 for a missing parent user is raised before any insert
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from postboard.api.validation import validate
from postboard.core.pagination import normalize_page_request, pagination_summary
from postboard.infrastructure.database import (
    DatabaseSessionManager, get_db, get_db_manager,
)
from postboard.schemas.common import IdParams
from postboard.schemas.post import (
    PostCreate, PostListResponse, PostResponse, PostUpdate,
)
from postboard.services import posts as post_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["posts"])


@router.get("/posts", response_model=PostListResponse)
async def list_posts(
    page: int = Query(1),
    limit: int = Query(10),
    published: bool | None = Query(None),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    """List posts with pagination and optional published filter."""
    page_request = normalize_page_request(page, limit)
    posts, total = await post_service.list_posts(
        db_manager, page_request, published,
    )
    return {
        "posts": [PostResponse.model_validate(p) for p in posts],
        "pagination": pagination_summary(page_request, total),
    }


@router.post(
    "/users/{id}/posts", response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_post(
    params: IdParams = Depends(validate(IdParams, "params")),
    body: PostCreate = Depends(validate(PostCreate)),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.create_post(db, params.id, body)
    return PostResponse.model_validate(post)


@router.get("/posts/{id}", response_model=PostResponse)
async def get_post(
    params: IdParams = Depends(validate(IdParams, "params")),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.get_post_or_404(db, params.id)
    return PostResponse.model_validate(post)


@router.put("/posts/{id}", response_model=PostResponse)
async def update_post(
    params: IdParams = Depends(validate(IdParams, "params")),
    body: PostUpdate = Depends(validate(PostUpdate)),
    db: AsyncSession = Depends(get_db),
):
    post = await post_service.update_post(db, params.id, body)
    return PostResponse.model_validate(post)


@router.delete("/posts/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    params: IdParams = Depends(validate(IdParams, "params")),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, params.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
