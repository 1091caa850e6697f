"""Document business logic service.

Provides the document mutation rules:
- Create a document together with its first version
- Partial updates, appending a version whenever the content changes
- Author-only deletion (children go through ON DELETE CASCADE)
- Version history reads
- Serialization of documents, shares and mentions for responses
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document import Document
from ..models.document_share import DocumentShare
from ..models.document_version import DocumentVersion
from ..models.mention import Mention
from ..models.user import User
from ..schemas.document import (
    AuthorSummary,
    DocumentCreate,
    DocumentDetail,
    DocumentListItem,
    DocumentUpdate,
    MentionItem,
    ShareItem,
    VersionItem,
)
from .access_service import AccessDecision, get_access_service, get_document_or_404
from .mention_service import record_mentions
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


# ============================================================================
# Serialization
# ============================================================================


def to_list_item(
    document: Document,
    author: Optional[User] = None,
    relevance: Optional[int] = None,
) -> DocumentListItem:
    """Flatten a document and its author into a list row."""
    author = author or document.author
    return DocumentListItem(
        id=document.id,
        title=document.title,
        content=document.content,
        is_public=document.is_public,
        author_id=document.author_id,
        author_name=author.name,
        author_email=author.email,
        created_at=document.created_at,
        updated_at=document.updated_at,
        relevance=relevance,
    )


def to_version_item(version: DocumentVersion) -> VersionItem:
    return VersionItem(
        id=version.id,
        document_id=version.document_id,
        content=version.content,
        version=version.version,
        created_at=version.created_at,
        author_id=version.author_id,
        author_name=version.author.name,
        author_email=version.author.email,
    )


# ============================================================================
# Mutations
# ============================================================================


async def _next_version_number(db: AsyncSession, document_id: UUID) -> int:
    """max(version) + 1 for the document; the caller holds the row lock."""
    current = await db.scalar(
        select(func.max(DocumentVersion.version)).where(
            DocumentVersion.document_id == document_id
        )
    )
    return (current or 0) + 1


async def create_document(
    db: AsyncSession,
    document_data: DocumentCreate,
    author: User,
) -> Document:
    """
    Create a document and its first version in one transaction.

    Args:
        db: Database session
        document_data: Validated title, content and visibility
        author: The authenticated user creating the document

    Returns:
        The created Document, with author populated
    """
    document = Document(
        title=document_data.title,
        content=document_data.content,
        is_public=document_data.is_public,
        author_id=author.id,
    )
    document.author = author
    db.add(document)
    await db.flush()

    db.add(
        DocumentVersion(
            document_id=document.id,
            content=document.content,
            version=1,
            author_id=author.id,
        )
    )
    await db.flush()

    await record_mentions(db, document, author.id, document.content)

    logger.info(f"Document created: id={document.id}, author={author.id}")
    return document


async def update_document(
    db: AsyncSession,
    document_id: UUID,
    update_data: DocumentUpdate,
    editor: User,
) -> Document:
    """
    Apply a partial update to a document.

    The document row stays locked (SELECT ... FOR UPDATE) until the
    transaction ends, so concurrent content edits append versions one at
    a time and never compute the same version number.

    Args:
        db: Database session
        document_id: UUID of the document
        update_data: Fields to change; None means not supplied
        editor: The authenticated user performing the change

    Returns:
        The updated Document

    Raises:
        HTTPException: 404 if the document does not exist, 403 without
            edit rights, 400 when nothing is supplied
    """
    document = await get_document_or_404(db, document_id, for_update=True)
    await get_access_service(db).require_edit(document, editor.id)

    changes = update_data.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    for field, value in changes.items():
        setattr(document, field, value)
    document.updated_at = datetime.utcnow()

    if "content" in changes:
        db.add(
            DocumentVersion(
                document_id=document.id,
                content=changes["content"],
                version=await _next_version_number(db, document.id),
                author_id=editor.id,
            )
        )
        await record_mentions(db, document, editor.id, changes["content"])
        await NotificationService.notify_document_updated(db, document, editor)

    await db.flush()
    await db.refresh(document, attribute_names=["author"])

    logger.info(
        f"Document updated: id={document.id}, by={editor.id}, fields={sorted(changes)}"
    )
    return document


async def delete_document(db: AsyncSession, document_id: UUID, user: User) -> None:
    """
    Delete a document; only its author may do so.

    Shares, versions and mentions are removed by the foreign keys'
    ON DELETE CASCADE.

    Raises:
        HTTPException: 404 if not found, 403 for anyone but the author
    """
    document = await get_document_or_404(db, document_id)
    await get_access_service(db).require_author(
        document,
        user.id,
        detail="Only the author can delete this document",
    )

    await db.delete(document)
    await db.flush()

    logger.info(f"Document deleted: id={document_id}, by={user.id}")


# ============================================================================
# Reads
# ============================================================================


async def get_document_detail(
    db: AsyncSession,
    document_id: UUID,
    user_id: Optional[UUID],
) -> DocumentDetail:
    """
    Load a readable document with its author, shares and mentions.

    Raises:
        HTTPException: 404 if not found, 401/403 without read access
    """
    document = await get_document_or_404(db, document_id)
    decision = await get_access_service(db).require_read(document, user_id)
    return await build_document_detail(db, document, decision)


async def build_document_detail(
    db: AsyncSession,
    document: Document,
    decision: AccessDecision,
) -> DocumentDetail:
    """Assemble the detail payload for a document the caller may read."""
    shares_result = await db.execute(
        select(DocumentShare)
        .where(DocumentShare.document_id == document.id)
        .order_by(DocumentShare.created_at.asc())
    )
    shares = [
        ShareItem(
            id=share.id,
            permission=share.permission,
            created_at=share.created_at,
            user_id=share.user_id,
            user_name=share.user.name,
            user_email=share.user.email,
        )
        for share in shares_result.unique().scalars().all()
    ]

    mentions_result = await db.execute(
        select(Mention)
        .where(Mention.document_id == document.id)
        .order_by(Mention.created_at.desc())
    )
    mentions = [
        MentionItem(
            id=mention.id,
            created_at=mention.created_at,
            user_id=mention.user_id,
            user_name=mention.user.name,
            user_email=mention.user.email,
            mentioned_by_id=mention.mentioned_by,
            mentioned_by_name=mention.mentioner.name,
        )
        for mention in mentions_result.unique().scalars().all()
    ]

    return DocumentDetail(
        id=document.id,
        title=document.title,
        content=document.content,
        is_public=document.is_public,
        author_id=document.author_id,
        created_at=document.created_at,
        updated_at=document.updated_at,
        author=AuthorSummary.model_validate(document.author),
        shares=shares,
        mentions=mentions,
        access=decision.basis.value,
        can_edit=decision.can_edit,
        can_manage=decision.can_manage,
    )


async def list_versions(
    db: AsyncSession,
    document_id: UUID,
    user_id: Optional[UUID],
) -> List[VersionItem]:
    """
    List a document's versions, newest first.

    Raises:
        HTTPException: 404 if not found, 401/403 without read access
    """
    document = await get_document_or_404(db, document_id)
    await get_access_service(db).require_read(document, user_id)

    result = await db.execute(
        select(DocumentVersion)
        .where(DocumentVersion.document_id == document.id)
        .order_by(DocumentVersion.version.desc())
    )
    return [to_version_item(v) for v in result.unique().scalars().all()]


async def get_version(
    db: AsyncSession,
    document_id: UUID,
    version_id: UUID,
    user_id: Optional[UUID],
) -> VersionItem:
    """
    Fetch one version of a document.

    Raises:
        HTTPException: 404 if the document is missing or the version does
            not belong to it, 401/403 without read access
    """
    document = await get_document_or_404(db, document_id)
    await get_access_service(db).require_read(document, user_id)

    result = await db.execute(
        select(DocumentVersion).where(
            DocumentVersion.id == version_id,
            DocumentVersion.document_id == document.id,
        )
    )
    version = result.unique().scalar_one_or_none()
    if version is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Version not found",
        )
    return to_version_item(version)
