"""Notifications API endpoints.

Listing and read-status changes live under /api/users/notifications; this
router serves the badge counts.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.common import APIResponse
from ..schemas.notification import NotificationCount
from ..services.auth_service import get_current_user
from ..services.notification_service import NotificationService

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get(
    "/count",
    response_model=APIResponse[NotificationCount],
    summary="Get notification counts",
    description="Total and unread notification counts for the authenticated user.",
    responses={
        200: {"description": "Counts retrieved successfully"},
        401: {"description": "Not authenticated"},
    },
)
async def get_notification_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[NotificationCount]:
    """Return {total, unread} for the caller's notifications."""
    total, unread = await NotificationService.count_notifications(db, current_user.id)
    return APIResponse(data=NotificationCount(total=total, unread=unread))
