"""Mention service for @mentions inside document content.

Provides business logic for:
- Extracting @mentions from the editor's HTML output
- Recording Mention rows for newly mentioned users
"""

import logging
from html.parser import HTMLParser
from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.document import Document
from ..models.mention import Mention
from ..models.user import User

logger = logging.getLogger(__name__)


# ============================================================================
# Mention Extraction
# ============================================================================


class _MentionParser(HTMLParser):
    """Collect data-id attributes of elements marked data-type="mention"."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.mentioned_ids: List[str] = []

    def handle_starttag(self, tag, attrs) -> None:
        attributes = dict(attrs)
        if attributes.get("data-type") != "mention":
            return
        user_id = attributes.get("data-id")
        if user_id:
            self.mentioned_ids.append(user_id.strip())

    handle_startendtag = handle_starttag


def extract_mentions_from_html(content: str) -> List[str]:
    """
    Extract mentioned user IDs from HTML document content.

    The editor renders a mention as an inline element such as
    <span data-type="mention" data-id="{user uuid}">@Jane</span>.

    Args:
        content: HTML document content

    Returns:
        List of user ID strings found in mentions, in document order
    """
    if not content:
        return []

    parser = _MentionParser()
    parser.feed(content)
    parser.close()
    return parser.mentioned_ids


def parse_mentioned_user_ids(content: str) -> List[UUID]:
    """Extract mentions and keep the well-formed, distinct UUIDs."""
    seen: List[UUID] = []
    for raw_id in extract_mentions_from_html(content):
        try:
            user_id = UUID(raw_id)
        except ValueError:
            continue
        if user_id not in seen:
            seen.append(user_id)
    return seen


# ============================================================================
# Mention Recording
# ============================================================================


async def record_mentions(
    db: AsyncSession,
    document: Document,
    mentioned_by: UUID,
    content: str,
) -> List[Mention]:
    """
    Create Mention rows for users newly mentioned in the content.

    Self-mentions, unknown users and users already recorded as mentioned
    in this document are skipped. Rows are flushed, not committed, so they
    share the caller's transaction.

    Args:
        db: Database session
        document: The document containing the content
        mentioned_by: The user who wrote the content
        content: The new HTML content

    Returns:
        List of created Mention rows
    """
    candidate_ids = [uid for uid in parse_mentioned_user_ids(content) if uid != mentioned_by]
    if not candidate_ids:
        return []

    result = await db.execute(select(User.id).where(User.id.in_(candidate_ids)))
    existing_users = set(result.scalars().all())

    result = await db.execute(
        select(Mention.user_id).where(
            Mention.document_id == document.id,
            Mention.user_id.in_(candidate_ids),
        )
    )
    already_mentioned = set(result.scalars().all())

    created: List[Mention] = []
    for user_id in candidate_ids:
        if user_id not in existing_users or user_id in already_mentioned:
            continue
        mention = Mention(
            document_id=document.id,
            user_id=user_id,
            mentioned_by=mentioned_by,
        )
        db.add(mention)
        created.append(mention)

    if created:
        await db.flush()
        logger.info(
            f"Recorded {len(created)} mention(s) in document {document.id} by user {mentioned_by}"
        )

    return created
