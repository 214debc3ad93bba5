"""Users Routes — CRUD endpoints for the users resource.

Invariants:
    - Path ids and bodies validated by validate() before the handler body runs
    - Handlers never catch exceptions: failures reach the global error handlers
    - Responses use the camelCase wire schema (UserResponse)
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
from postboard.schemas.user import (
    UserCreate, UserListResponse, UserResponse, UserUpdate,
)
from postboard.services import users as user_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1),
    limit: int = Query(10),
    search: str | None = Query(None),
    db_manager: DatabaseSessionManager = Depends(get_db_manager),
):
    """List users with pagination and optional name/email search."""
    page_request = normalize_page_request(page, limit)
    users, total = await user_service.list_users(
        db_manager, page_request, search,
    )
    return {
        "users": [UserResponse.model_validate(u) for u in users],
        "pagination": pagination_summary(page_request, total),
    }


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate = Depends(validate(UserCreate)),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.create_user(db, body)
    return UserResponse.model_validate(user)


@router.get("/{id}", response_model=UserResponse)
async def get_user(
    params: IdParams = Depends(validate(IdParams, "params")),
    db: AsyncSession = Depends(get_db),
):
    """Get a user with all of their posts."""
    user = await user_service.get_user_or_404(db, params.id)
    return UserResponse.model_validate(user)


@router.put("/{id}", response_model=UserResponse)
async def update_user(
    params: IdParams = Depends(validate(IdParams, "params")),
    body: UserUpdate = Depends(validate(UserUpdate)),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_user(db, params.id, body)
    return UserResponse.model_validate(user)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    params: IdParams = Depends(validate(IdParams, "params")),
    db: AsyncSession = Depends(get_db),
):
    await user_service.delete_user(db, params.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
