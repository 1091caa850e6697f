"""Access service deciding who may read, edit and manage a document.

Access Model (first matching rule wins):
- Caller is the author: full access (read, edit, delete, manage shares)
- Public document: anyone may read it, including anonymous callers
- Private document, no caller: denied, authentication required
- Caller holds a DocumentShare: read access; edit as well with EDIT permission
- Anyone else: denied, forbidden

Deleting a document and managing its shares are reserved for the author.
The same visibility rule is exposed as a SQL expression for listings.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import exists, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import lazyload

from ..models.document import Document
from ..models.document_share import DocumentShare, SharePermission

logger = logging.getLogger(__name__)


class AccessBasis(str, enum.Enum):
    """Reason access was granted, or DENIED."""

    PUBLIC = "PUBLIC"
    AUTHOR = "AUTHOR"
    SHARE = "SHARE"
    DENIED = "DENIED"


@dataclass(frozen=True)
class AccessDecision:
    """
    Outcome of resolving a caller against a document.

    Attributes:
        granted: Whether read access is granted
        basis: Why access was granted (DENIED when it was not)
        share: The caller's share grant, when one exists
        authenticated: Whether a caller was identified at all
    """

    granted: bool
    basis: AccessBasis
    share: Optional[DocumentShare] = None
    authenticated: bool = False

    @property
    def permission(self) -> Optional[str]:
        return self.share.permission if self.share is not None else None

    @property
    def can_edit(self) -> bool:
        """Author, or a share holder with EDIT permission."""
        if self.basis == AccessBasis.AUTHOR:
            return True
        return self.granted and self.permission == SharePermission.EDIT

    @property
    def can_manage(self) -> bool:
        """Delete and share management belong to the author alone."""
        return self.basis == AccessBasis.AUTHOR


def resolve_access(
    document: Document,
    user_id: Optional[UUID],
    share: Optional[DocumentShare] = None,
) -> AccessDecision:
    """
    Apply the access rules to an already-loaded document and share.

    The author check runs before the public check so that the author of a
    public document keeps edit and manage rights; every other caller of a
    public document gets basis PUBLIC, carrying their share (if any) so an
    EDIT grant still allows editing.

    Args:
        document: The document being accessed
        user_id: The caller's id, or None for anonymous callers
        share: The caller's DocumentShare on this document, if any

    Returns:
        AccessDecision describing whether and why access is granted
    """
    authenticated = user_id is not None

    if authenticated and document.author_id == user_id:
        return AccessDecision(True, AccessBasis.AUTHOR, authenticated=True)

    if document.is_public:
        return AccessDecision(True, AccessBasis.PUBLIC, share=share, authenticated=authenticated)

    if not authenticated:
        return AccessDecision(False, AccessBasis.DENIED)

    if share is not None and share.document_id == document.id:
        return AccessDecision(True, AccessBasis.SHARE, share=share, authenticated=True)

    return AccessDecision(False, AccessBasis.DENIED, authenticated=True)


def visible_to(user_id: Optional[UUID]):
    """
    SQL filter matching the documents a caller may read.

    Anonymous callers see public documents only; authenticated callers also
    see documents they wrote or that were shared with them.
    """
    if user_id is None:
        return Document.is_public.is_(true())

    shared = exists().where(
        DocumentShare.document_id == Document.id,
        DocumentShare.user_id == user_id,
    )
    return or_(
        Document.is_public.is_(true()),
        Document.author_id == user_id,
        shared,
    )


class AccessService:
    """
    Service class resolving document access against the database.

    Looks up the caller's share grant and applies the access rules, and
    provides raising helpers for routers.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the AccessService.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    async def get_share(self, document_id: UUID, user_id: UUID) -> Optional[DocumentShare]:
        """Return the user's share on the document, if any."""
        result = await self.db.execute(
            select(DocumentShare).where(
                DocumentShare.document_id == document_id,
                DocumentShare.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def resolve_access(
        self,
        document: Document,
        user_id: Optional[UUID],
    ) -> AccessDecision:
        """
        Resolve the caller's access to a document.

        The share table is consulted for every caller other than the author;
        on a public document an EDIT grant still matters for editing.
        """
        needs_share = (
            user_id is not None
            and document.author_id != user_id
        )
        share = await self.get_share(document.id, user_id) if needs_share else None
        return resolve_access(document, user_id, share)

    async def require_read(
        self,
        document: Document,
        user_id: Optional[UUID],
    ) -> AccessDecision:
        """
        Resolve access and raise unless reading is allowed.

        Raises:
            HTTPException: 401 for anonymous callers on private documents,
                403 for authenticated callers without access
        """
        decision = await self.resolve_access(document, user_id)
        if decision.granted:
            return decision

        if not decision.authenticated:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required to access this document",
                headers={"WWW-Authenticate": "Bearer"},
            )

        logger.info(f"Read access denied: document={document.id}, user={user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access this document",
        )

    async def require_edit(self, document: Document, user_id: UUID) -> AccessDecision:
        """
        Raise unless the caller may change the document's fields.

        Raises:
            HTTPException: 403 when the caller is neither the author nor an
                EDIT share holder
        """
        decision = await self.require_read(document, user_id)
        if not decision.can_edit:
            logger.info(f"Edit access denied: document={document.id}, user={user_id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to edit this document",
            )
        return decision

    async def require_author(
        self,
        document: Document,
        user_id: UUID,
        detail: str = "Only the author can perform this action",
    ) -> AccessDecision:
        """
        Raise unless the caller is the document's author.

        Raises:
            HTTPException: 403 for everyone but the author
        """
        decision = await self.require_read(document, user_id)
        if not decision.can_manage:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=detail,
            )
        return decision


async def get_document_or_404(
    db: AsyncSession,
    document_id: UUID,
    for_update: bool = False,
) -> Document:
    """
    Load a document by id or raise 404.

    With for_update the row is locked until the transaction ends, which
    serializes concurrent edits of the same document.
    """
    query = select(Document).where(Document.id == document_id)
    if for_update:
        # The joined author load would put the lock on an outer join
        query = query.options(lazyload(Document.author)).with_for_update()

    result = await db.execute(query)
    document = result.unique().scalar_one_or_none()

    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found",
        )
    return document


def get_access_service(db: AsyncSession) -> AccessService:
    """
    Factory function to create an AccessService instance.

    Args:
        db: SQLAlchemy async database session

    Returns:
        AccessService instance
    """
    return AccessService(db)
