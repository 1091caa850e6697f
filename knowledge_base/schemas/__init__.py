"""Pydantic schemas package for request/response validation."""

from .common import APIResponse, ErrorResponse, PaginatedResponse, Pagination
from .document import (
    DocumentCreate,
    DocumentDetail,
    DocumentListItem,
    DocumentUpdate,
    ShareRequest,
    SharedDocumentItem,
    UnshareRequest,
    UserMentionItem,
    VersionItem,
)
from .notification import (
    NotificationCount,
    NotificationCreate,
    NotificationResponse,
    NotificationType,
)
from .user import (
    AuthPayload,
    CurrentUserPayload,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    RoleUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
    UserSearchResult,
    UserUpdate,
)

__all__ = [
    # Common
    "APIResponse",
    "ErrorResponse",
    "PaginatedResponse",
    "Pagination",
    # Document
    "DocumentCreate",
    "DocumentDetail",
    "DocumentListItem",
    "DocumentUpdate",
    "ShareRequest",
    "SharedDocumentItem",
    "UnshareRequest",
    "UserMentionItem",
    "VersionItem",
    # Notification
    "NotificationCount",
    "NotificationCreate",
    "NotificationResponse",
    "NotificationType",
    # User
    "AuthPayload",
    "CurrentUserPayload",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "RoleUpdate",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserSearchResult",
    "UserUpdate",
]
