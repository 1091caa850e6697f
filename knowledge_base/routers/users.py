"""Users API endpoints.

Provides endpoints for user search, profiles, roles, per-user document
listings and the current user's notifications.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.common import APIResponse, PaginatedResponse, Pagination
from ..schemas.document import DocumentListItem, SharedDocumentItem, UserMentionItem
from ..schemas.notification import NotificationResponse
from ..schemas.user import RoleUpdate, UserResponse, UserSearchResult, UserUpdate
from ..services import listing_service
from ..services.auth_service import get_current_user, get_user_by_email, require_admin
from ..services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_RESULTS = 10
NOTIFICATIONS_PAGE_SIZE = 20


async def _get_user_for_caller(db: AsyncSession, user_id: UUID, caller: User) -> User:
    """
    Load a user the caller may look at: themselves, or anyone for admins.

    Raises:
        HTTPException: 403 for other users' data, 404 if the user does not exist
    """
    if caller.id != user_id and not caller.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


# ============================================================================
# Search and Directory
# ============================================================================


@router.get(
    "/search",
    response_model=APIResponse[List[UserSearchResult]],
    summary="Search users by name or email",
    description="Case-insensitive partial match, used when sharing and mentioning.",
)
async def search_users(
    query: Optional[str] = Query(None, description="Name or email fragment"),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[List[UserSearchResult]]:
    """
    Search for users by name or email.

    - Terms shorter than two characters return an empty list
    - Returns at most ten users, with id, name and email only
    """
    term = (query or "").strip()
    if len(term) < SEARCH_MIN_LENGTH:
        return APIResponse(data=[])

    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    search_pattern = f"%{escaped}%"
    result = await db.execute(
        select(User)
        .where(
            or_(
                User.name.ilike(search_pattern, escape="\\"),
                User.email.ilike(search_pattern, escape="\\"),
            )
        )
        .order_by(User.name.asc())
        .limit(SEARCH_MAX_RESULTS)
    )
    users = result.scalars().all()

    return APIResponse(
        data=[UserSearchResult(id=u.id, name=u.name, email=u.email) for u in users]
    )


@router.get(
    "",
    response_model=APIResponse[List[UserResponse]],
    summary="List all users",
    responses={403: {"description": "Admin only"}},
)
async def list_users(
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[List[UserResponse]]:
    """All users, newest first. Admin only."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return APIResponse(
        data=[UserResponse.model_validate(u) for u in result.scalars().all()]
    )


# ============================================================================
# Notifications of the current user
# ============================================================================


@router.get(
    "/notifications",
    response_model=PaginatedResponse[List[NotificationResponse]],
    summary="List my notifications",
)
async def list_my_notifications(
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (default 20)"),
    unread_only: bool = Query(False, description="Return only unread notifications"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[NotificationResponse]]:
    """The authenticated user's notifications, newest first."""
    page, limit = listing_service.clamp_pagination(
        page, limit, default_limit=NOTIFICATIONS_PAGE_SIZE
    )
    notifications, total = await NotificationService.list_notifications(
        db, current_user.id, page, limit, unread_only=unread_only
    )
    return PaginatedResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        pagination=Pagination.build(page, limit, total),
    )


@router.put(
    "/notifications/read-all",
    response_model=APIResponse[None],
    summary="Mark all my notifications as read",
)
async def mark_all_notifications_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """Mark every unread notification of the caller as read."""
    updated = await NotificationService.mark_all_read(db, current_user.id)
    return APIResponse(message=f"Marked {updated} notification(s) as read")


@router.put(
    "/notifications/{notification_id}/read",
    response_model=APIResponse[NotificationResponse],
    summary="Mark a notification as read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[NotificationResponse]:
    """Mark one of the caller's notifications as read."""
    notification = await NotificationService.mark_read(db, notification_id, current_user.id)
    return APIResponse(data=NotificationResponse.model_validate(notification))


# ============================================================================
# Profile and Role
# ============================================================================


@router.put(
    "/profile",
    response_model=APIResponse[UserResponse],
    summary="Update my profile",
    responses={400: {"description": "Email taken or nothing to update"}},
)
async def update_profile(
    profile_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[UserResponse]:
    """Change the caller's name and/or email."""
    changes = profile_data.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    new_email = changes.get("email")
    if new_email and new_email != current_user.email:
        existing = await get_user_by_email(db, new_email)
        if existing is not None and existing.id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email is already taken",
            )

    for field, value in changes.items():
        setattr(current_user, field, value)
    current_user.updated_at = datetime.utcnow()
    await db.flush()

    logger.info(f"Profile updated: user={current_user.id}, fields={sorted(changes)}")
    return APIResponse(
        data=UserResponse.model_validate(current_user),
        message="Profile updated successfully",
    )


@router.get(
    "/{user_id}",
    response_model=APIResponse[UserResponse],
    summary="Get a user",
    responses={
        403: {"description": "Not yourself and not an admin"},
        404: {"description": "User not found"},
    },
)
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[UserResponse]:
    """A user's profile, visible to the user themselves and to admins."""
    user = await _get_user_for_caller(db, user_id, current_user)
    return APIResponse(data=UserResponse.model_validate(user))


@router.put(
    "/{user_id}/role",
    response_model=APIResponse[UserResponse],
    summary="Change a user's role",
    responses={
        403: {"description": "Admin only"},
        404: {"description": "User not found"},
    },
)
async def update_user_role(
    user_id: UUID,
    role_data: RoleUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[UserResponse]:
    """Set a user's role. Admin only."""
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    user.role = role_data.role
    user.updated_at = datetime.utcnow()
    await db.flush()

    logger.info(f"Role changed: user={user.id}, role={user.role}, by={current_user.id}")
    return APIResponse(
        data=UserResponse.model_validate(user),
        message="User role updated successfully",
    )


# ============================================================================
# Per-user listings
# ============================================================================


@router.get(
    "/{user_id}/documents",
    response_model=PaginatedResponse[List[DocumentListItem]],
    summary="Documents authored by a user",
)
async def get_user_documents(
    user_id: UUID,
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (1-50, default 10)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[DocumentListItem]]:
    """Documents the user wrote, most recently updated first."""
    user = await _get_user_for_caller(db, user_id, current_user)
    page, limit = listing_service.clamp_pagination(page, limit)
    items, total = await listing_service.list_authored_documents(db, user.id, page, limit)
    return PaginatedResponse(data=items, pagination=Pagination.build(page, limit, total))


@router.get(
    "/{user_id}/shared-documents",
    response_model=PaginatedResponse[List[SharedDocumentItem]],
    summary="Documents shared with a user",
)
async def get_shared_documents(
    user_id: UUID,
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (1-50, default 10)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[SharedDocumentItem]]:
    """Documents shared with the user, newest grant first."""
    user = await _get_user_for_caller(db, user_id, current_user)
    page, limit = listing_service.clamp_pagination(page, limit)
    items, total = await listing_service.list_shared_documents(db, user.id, page, limit)
    return PaginatedResponse(data=items, pagination=Pagination.build(page, limit, total))


@router.get(
    "/{user_id}/mentions",
    response_model=PaginatedResponse[List[UserMentionItem]],
    summary="Mentions of a user",
)
async def get_user_mentions(
    user_id: UUID,
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Page size (1-50, default 10)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[List[UserMentionItem]]:
    """Where the user was mentioned, newest first."""
    user = await _get_user_for_caller(db, user_id, current_user)
    page, limit = listing_service.clamp_pagination(page, limit)
    items, total = await listing_service.list_user_mentions(db, user.id, page, limit)
    return PaginatedResponse(data=items, pagination=Pagination.build(page, limit, total))
