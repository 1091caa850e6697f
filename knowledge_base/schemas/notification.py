"""Pydantic schemas for Notification model validation."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    """Notification type enumeration."""

    MENTION = "MENTION"
    SHARE = "SHARE"
    UPDATE = "UPDATE"


class NotificationBase(BaseModel):
    """Base schema with common notification fields."""

    type: NotificationType = Field(
        ...,
        description="Type of notification",
        examples=["SHARE"],
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Notification title",
        examples=["Document shared with you"],
    )
    message: str = Field(
        ...,
        description="Detailed notification message",
        examples=['Document "Onboarding" has been shared with you'],
    )
    data: Optional[dict[str, Any]] = Field(
        None,
        description="Related entity ids (document_id, permission, ...)",
    )


class NotificationCreate(NotificationBase):
    """Schema for creating a new notification."""

    user_id: UUID = Field(
        ...,
        description="ID of the user receiving the notification",
    )


class NotificationResponse(NotificationBase):
    """Schema for notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        ...,
        description="Unique notification identifier",
    )
    user_id: UUID
    is_read: bool = Field(
        False,
        description="Whether the notification has been read",
    )
    created_at: datetime = Field(
        ...,
        description="When the notification was created",
    )


class NotificationCount(BaseModel):
    """Schema for notification count response."""

    total: int = Field(
        ...,
        ge=0,
        description="Total number of notifications",
    )
    unread: int = Field(
        ...,
        ge=0,
        description="Number of unread notifications",
    )
