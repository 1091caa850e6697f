"""Share service for granting and revoking per-user document access.

Only a document's author manages its shares. Granting upserts the single
(document, user) row and notifies the target user; revoking is idempotent.
"""

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document_share import DocumentShare
from ..models.user import User
from ..schemas.document import ShareItem, ShareRequest
from .access_service import get_access_service, get_document_or_404
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


async def share_document(
    db: AsyncSession,
    document_id: UUID,
    share_data: ShareRequest,
    actor: User,
) -> ShareItem:
    """
    Grant a user VIEW or EDIT access, replacing any earlier grant.

    The document row is locked for the rest of the transaction, so two
    concurrent grants to the same user resolve to one row.

    Args:
        db: Database session
        document_id: UUID of the document
        share_data: Target user and permission
        actor: The authenticated user, who must be the author

    Returns:
        ShareItem describing the grant

    Raises:
        HTTPException: 404 if the document or target user does not exist,
            403 for non-authors, 400 when sharing with oneself
    """
    document = await get_document_or_404(db, document_id, for_update=True)
    await get_access_service(db).require_author(
        document,
        actor.id,
        detail="Only the author can share this document",
    )

    if share_data.user_id == actor.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot share a document with yourself",
        )

    target = await db.get(User, share_data.user_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    result = await db.execute(
        select(DocumentShare).where(
            DocumentShare.document_id == document.id,
            DocumentShare.user_id == target.id,
        )
    )
    share = result.unique().scalar_one_or_none()

    if share is None:
        share = DocumentShare(
            document_id=document.id,
            user_id=target.id,
            permission=share_data.permission,
        )
        db.add(share)
    else:
        share.permission = share_data.permission

    await db.flush()

    await NotificationService.notify_document_shared(
        db, document, target.id, share_data.permission
    )

    logger.info(
        f"Document shared: id={document.id}, user={target.id}, "
        f"permission={share_data.permission}"
    )

    return ShareItem(
        id=share.id,
        permission=share.permission,
        created_at=share.created_at,
        user_id=target.id,
        user_name=target.name,
        user_email=target.email,
    )


async def unshare_document(
    db: AsyncSession,
    document_id: UUID,
    user_id: UUID,
    actor: User,
) -> bool:
    """
    Revoke a user's share; succeeds whether or not one existed.

    Returns:
        True if a share row was removed

    Raises:
        HTTPException: 404 if the document does not exist, 403 for
            non-authors
    """
    document = await get_document_or_404(db, document_id)
    await get_access_service(db).require_author(
        document,
        actor.id,
        detail="Only the author can manage sharing for this document",
    )

    result = await db.execute(
        delete(DocumentShare).where(
            DocumentShare.document_id == document.id,
            DocumentShare.user_id == user_id,
        )
    )
    removed = (result.rowcount or 0) > 0

    logger.info(
        f"Document unshared: id={document.id}, user={user_id}, removed={removed}"
    )
    return removed
