"""Listing and search service for documents.

Every listing is offset-paginated and reports a COUNT-based total of the
filtered set. Public listings apply the same visibility rule as single
document reads.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import case, func, null, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.document import Document
from ..models.document_share import DocumentShare
from ..models.mention import Mention
from ..schemas.document import DocumentListItem, SharedDocumentItem, UserMentionItem
from .access_service import visible_to
from .document_service import to_list_item


def clamp_pagination(
    page: Optional[int],
    limit: Optional[int],
    default_limit: Optional[int] = None,
) -> Tuple[int, int]:
    """Coerce page to >= 1 and limit into 1..max_page_size."""
    page = max(page or 1, 1)
    if limit is None:
        limit = default_limit or settings.default_page_size
    limit = min(max(limit, 1), settings.max_page_size)
    return page, limit


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def list_documents(
    db: AsyncSession,
    user_id: Optional[UUID],
    page: int,
    limit: int,
    search: Optional[str] = None,
) -> Tuple[List[DocumentListItem], int]:
    """
    List the documents visible to a caller, optionally filtered by a term.

    Without a term documents are ordered by updated_at, newest first. With
    a term only title or content substring matches (case-insensitive) are
    kept and ordered by relevance (title hit 2, content hit 1) first.

    Args:
        db: Database session
        user_id: The caller, or None for anonymous callers
        page: 1-based page number
        limit: Page size
        search: Optional search term

    Returns:
        Tuple of (items on this page, total matching documents)
    """
    conditions = [visible_to(user_id)]
    term = (search or "").strip()

    if term:
        pattern = _like_pattern(term)
        title_hit = Document.title.ilike(pattern, escape="\\")
        content_hit = Document.content.ilike(pattern, escape="\\")
        conditions.append(or_(title_hit, content_hit))
        relevance = case((title_hit, 2), (content_hit, 1), else_=0)
        order_by = [relevance.desc(), Document.updated_at.desc(), Document.id.desc()]
    else:
        relevance = null()
        order_by = [Document.updated_at.desc(), Document.id.desc()]

    total = await db.scalar(
        select(func.count(Document.id)).where(*conditions)
    ) or 0

    result = await db.execute(
        select(Document, relevance.label("relevance"))
        .where(*conditions)
        .order_by(*order_by)
        .offset((page - 1) * limit)
        .limit(limit)
    )

    items = [
        to_list_item(document, relevance=score if term else None)
        for document, score in result.unique().all()
    ]
    return items, total


async def list_authored_documents(
    db: AsyncSession,
    author_id: UUID,
    page: int,
    limit: int,
) -> Tuple[List[DocumentListItem], int]:
    """Documents written by a user, most recently updated first."""
    total = await db.scalar(
        select(func.count(Document.id)).where(Document.author_id == author_id)
    ) or 0

    result = await db.execute(
        select(Document)
        .where(Document.author_id == author_id)
        .order_by(Document.updated_at.desc(), Document.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return [to_list_item(d) for d in result.unique().scalars().all()], total


async def list_shared_documents(
    db: AsyncSession,
    user_id: UUID,
    page: int,
    limit: int,
) -> Tuple[List[SharedDocumentItem], int]:
    """Documents shared with a user, newest grant first."""
    total = await db.scalar(
        select(func.count(DocumentShare.id)).where(DocumentShare.user_id == user_id)
    ) or 0

    result = await db.execute(
        select(Document, DocumentShare)
        .join(DocumentShare, DocumentShare.document_id == Document.id)
        .where(DocumentShare.user_id == user_id)
        .order_by(DocumentShare.created_at.desc(), DocumentShare.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    items = []
    for document, share in result.unique().all():
        base = to_list_item(document)
        items.append(
            SharedDocumentItem(
                **base.model_dump(),
                permission=share.permission,
                shared_at=share.created_at,
            )
        )
    return items, total


async def list_user_mentions(
    db: AsyncSession,
    user_id: UUID,
    page: int,
    limit: int,
) -> Tuple[List[UserMentionItem], int]:
    """Mentions of a user across documents, newest first."""
    total = await db.scalar(
        select(func.count(Mention.id)).where(Mention.user_id == user_id)
    ) or 0

    result = await db.execute(
        select(Mention, Document.title)
        .join(Document, Document.id == Mention.document_id)
        .where(Mention.user_id == user_id)
        .order_by(Mention.created_at.desc(), Mention.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )

    items = [
        UserMentionItem(
            id=mention.id,
            created_at=mention.created_at,
            document_id=mention.document_id,
            document_title=title,
            mentioned_by_id=mention.mentioned_by,
            mentioned_by_name=mention.mentioner.name,
            mentioned_by_email=mention.mentioner.email,
        )
        for mention, title in result.unique().all()
    ]
    return items, total
