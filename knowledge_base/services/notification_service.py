"""Notification service for creating and reading notifications.

Provides business logic for notification management, including:
- Creating notifications for document events (share, update)
- Listing and counting a user's notifications
- Managing notification read status
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import false, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document import Document
from ..models.notification import Notification
from ..models.user import User
from ..schemas.notification import NotificationCreate, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Service for managing notifications.

    Notifications are flushed into the caller's transaction so that they
    commit or roll back together with the event that produced them.
    """

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        notification_data: NotificationCreate,
    ) -> Notification:
        """
        Create a notification.

        Args:
            db: Database session
            notification_data: Notification data

        Returns:
            Notification: The created notification
        """
        notification = Notification(
            user_id=notification_data.user_id,
            type=notification_data.type.value,
            title=notification_data.title,
            message=notification_data.message,
            data=notification_data.data,
            is_read=False,
        )

        db.add(notification)
        await db.flush()

        logger.info(
            f"Notification created: id={notification.id}, "
            f"user={notification.user_id}, type={notification.type}"
        )

        return notification

    @staticmethod
    async def notify_document_shared(
        db: AsyncSession,
        document: Document,
        target_user_id: UUID,
        permission: str,
    ) -> Notification:
        """
        Create notification when a document is shared with a user.

        Args:
            db: Database session
            document: The shared document
            target_user_id: The user receiving access
            permission: VIEW or EDIT

        Returns:
            Notification: The created notification
        """
        notification_data = NotificationCreate(
            user_id=target_user_id,
            type=NotificationType.SHARE,
            title="Document shared with you",
            message=f'Document "{document.title}" has been shared with you',
            data={
                "document_id": str(document.id),
                "permission": permission,
            },
        )

        return await NotificationService.create_notification(db, notification_data)

    @staticmethod
    async def notify_document_updated(
        db: AsyncSession,
        document: Document,
        editor: User,
    ) -> Optional[Notification]:
        """
        Tell the author that a collaborator changed their document's content.

        Args:
            db: Database session
            document: The updated document
            editor: The user who made the change

        Returns:
            Optional[Notification]: The created notification, or None if the
            author edited their own document
        """
        if editor.id == document.author_id:
            return None

        notification_data = NotificationCreate(
            user_id=document.author_id,
            type=NotificationType.UPDATE,
            title="Document updated",
            message=f'{editor.name} updated "{document.title}"',
            data={
                "document_id": str(document.id),
                "updated_by": str(editor.id),
            },
        )

        return await NotificationService.create_notification(db, notification_data)

    @staticmethod
    async def list_notifications(
        db: AsyncSession,
        user_id: UUID,
        page: int,
        limit: int,
        unread_only: bool = False,
    ) -> Tuple[list[Notification], int]:
        """
        Page through a user's notifications, newest first.

        Returns:
            Tuple of (notifications on this page, total matching)
        """
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.is_read.is_(false()))

        total = await db.scalar(
            select(func.count(Notification.id)).where(*conditions)
        ) or 0

        result = await db.execute(
            select(Notification)
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def count_notifications(db: AsyncSession, user_id: UUID) -> Tuple[int, int]:
        """Return (total, unread) counts for a user."""
        total = await db.scalar(
            select(func.count(Notification.id)).where(Notification.user_id == user_id)
        ) or 0
        unread = await db.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(false()),
            )
        ) or 0
        return total, unread

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: UUID, user_id: UUID) -> Notification:
        """
        Mark one of the user's notifications as read.

        Filtering by user_id keeps other users' notification ids
        indistinguishable from missing ones.

        Raises:
            HTTPException: 404 if not found for this user
        """
        result = await db.execute(
            select(Notification).where(
                Notification.id == notification_id,
                Notification.user_id == user_id,
            )
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Notification not found",
            )

        notification.is_read = True
        await db.flush()
        return notification

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: UUID) -> int:
        """Mark every unread notification of the user as read; returns the count."""
        result = await db.execute(
            update(Notification)
            .where(
                Notification.user_id == user_id,
                Notification.is_read.is_(false()),
            )
            .values(is_read=True)
        )
        return result.rowcount or 0
