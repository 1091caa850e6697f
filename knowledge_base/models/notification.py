"""Notification SQLAlchemy model for user notifications."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .user import User


class Notification(Base):
    """
    Notification model for in-app user notifications.

    Attributes:
        id: Unique identifier (UUID)
        user_id: FK to the user receiving the notification
        type: MENTION, SHARE or UPDATE
        title: Short notification title
        message: Human-readable notification body
        data: JSON payload with the related entity ids
        is_read: Whether the user has read the notification
        created_at: Timestamp when notification was created
    """

    __tablename__ = "Notifications"
    __allow_unmapped__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(
        String(20),
        nullable=False,
    )

    title = Column(
        String(255),
        nullable=False,
    )

    message = Column(
        Text,
        nullable=False,
    )

    data = Column(
        JSON,
        nullable=True,
    )

    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("type IN ('MENTION', 'SHARE', 'UPDATE')", name="ck_notifications_type"),
        # For the unread badge and the newest-first listing
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )

    # Relationships
    user = relationship(
        "User",
        back_populates="notifications",
        lazy="noload",
    )

    def __repr__(self) -> str:
        """String representation of Notification."""
        return f"<Notification(id={self.id}, user_id={self.user_id}, type={self.type})>"
