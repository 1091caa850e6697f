"""SQLAlchemy ORM models package."""

from .document import Document
from .document_share import DocumentShare, SharePermission
from .document_version import DocumentVersion
from .mention import Mention
from .notification import Notification
from .user import User, UserRole

__all__ = [
    "Document",
    "DocumentShare",
    "DocumentVersion",
    "Mention",
    "Notification",
    "SharePermission",
    "User",
    "UserRole",
]
