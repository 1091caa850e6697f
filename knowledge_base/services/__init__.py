"""Business logic services."""

from .access_service import (
    AccessBasis,
    AccessDecision,
    AccessService,
    get_access_service,
    get_document_or_404,
    resolve_access,
    visible_to,
)
from .auth_service import (
    authenticate_user,
    create_access_token,
    create_token_for_user,
    create_user,
    get_current_user,
    get_optional_user,
    get_user_by_email,
    require_admin,
)
from .document_service import (
    create_document,
    delete_document,
    get_document_detail,
    get_version,
    list_versions,
    update_document,
)
from .listing_service import (
    clamp_pagination,
    list_authored_documents,
    list_documents,
    list_shared_documents,
    list_user_mentions,
)
from .mention_service import extract_mentions_from_html, record_mentions
from .notification_service import NotificationService
from .share_service import share_document, unshare_document

__all__ = [
    # Access
    "AccessBasis",
    "AccessDecision",
    "AccessService",
    "get_access_service",
    "get_document_or_404",
    "resolve_access",
    "visible_to",
    # Auth
    "authenticate_user",
    "create_access_token",
    "create_token_for_user",
    "create_user",
    "get_current_user",
    "get_optional_user",
    "get_user_by_email",
    "require_admin",
    # Documents
    "create_document",
    "delete_document",
    "get_document_detail",
    "get_version",
    "list_versions",
    "update_document",
    # Listings
    "clamp_pagination",
    "list_authored_documents",
    "list_documents",
    "list_shared_documents",
    "list_user_mentions",
    # Mentions
    "extract_mentions_from_html",
    "record_mentions",
    # Notifications
    "NotificationService",
    # Sharing
    "share_document",
    "unshare_document",
]
