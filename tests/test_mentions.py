"""Tests for mention extraction and recording."""

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_base.models import Document, Mention, User
from knowledge_base.services.mention_service import (
    extract_mentions_from_html,
    parse_mentioned_user_ids,
    record_mentions,
)


def _mention(user_id, label="@someone") -> str:
    return f'<span data-type="mention" data-id="{user_id}">{label}</span>'


class TestExtractMentions:
    """Tests for parsing mentions out of HTML content."""

    def test_empty_content(self):
        assert extract_mentions_from_html("") == []

    def test_plain_text_has_no_mentions(self):
        assert extract_mentions_from_html("<p>@bob hello</p>") == []

    def test_extracts_in_document_order(self):
        first, second = uuid4(), uuid4()
        content = f"<p>{_mention(first)} and {_mention(second)}</p>"

        assert extract_mentions_from_html(content) == [str(first), str(second)]

    def test_ignores_other_data_types(self):
        content = f'<span data-type="tag" data-id="{uuid4()}">#tag</span>'

        assert extract_mentions_from_html(content) == []

    def test_attribute_order_does_not_matter(self):
        user_id = uuid4()
        content = f'<span class="mention" data-id="{user_id}" data-type="mention">@x</span>'

        assert extract_mentions_from_html(content) == [str(user_id)]

    def test_parse_dedupes_and_drops_malformed_ids(self):
        user_id = uuid4()
        content = _mention(user_id) + _mention("not-a-uuid") + _mention(user_id)

        assert parse_mentioned_user_ids(content) == [user_id]


@pytest.mark.asyncio
class TestRecordMentions:
    """Tests for storing mentions."""

    async def test_records_existing_users_only(
        self,
        db_session: AsyncSession,
        private_document: Document,
        test_user: User,
        test_user_2: User,
    ):
        content = _mention(test_user_2.id) + _mention(uuid4()) + _mention(test_user.id)

        created = await record_mentions(db_session, private_document, test_user.id, content)
        await db_session.commit()

        assert [m.user_id for m in created] == [test_user_2.id]

    async def test_already_mentioned_users_are_skipped(
        self,
        db_session: AsyncSession,
        private_document: Document,
        test_user: User,
        test_user_2: User,
        test_user_3: User,
    ):
        await record_mentions(
            db_session, private_document, test_user.id, _mention(test_user_2.id)
        )
        created = await record_mentions(
            db_session,
            private_document,
            test_user.id,
            _mention(test_user_2.id) + _mention(test_user_3.id),
        )
        await db_session.commit()

        assert [m.user_id for m in created] == [test_user_3.id]
        result = await db_session.execute(
            select(Mention.user_id).where(Mention.document_id == private_document.id)
        )
        assert set(result.scalars().all()) == {test_user_2.id, test_user_3.id}
