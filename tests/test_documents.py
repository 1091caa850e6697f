"""Tests for document CRUD and version history endpoints."""

from datetime import datetime
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_base.models import (
    Document,
    DocumentShare,
    DocumentVersion,
    Mention,
    User,
)
from knowledge_base.schemas.document import DocumentCreate
from knowledge_base.services import document_service

from conftest import make_share


async def _version_numbers(db_session: AsyncSession, document_id) -> list:
    document_id = UUID(str(document_id))
    result = await db_session.execute(
        select(DocumentVersion.version)
        .where(DocumentVersion.document_id == document_id)
        .order_by(DocumentVersion.version.asc())
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
class TestCreateDocument:
    """Tests for POST /api/documents."""

    async def test_create_document_records_first_version(
        self, client: AsyncClient, auth_headers: dict, db_session: AsyncSession, test_user: User
    ):
        response = await client.post(
            "/api/documents",
            json={"title": "Onboarding", "content": "<p>Start here</p>", "isPublic": True},
            headers=auth_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["title"] == "Onboarding"
        assert data["is_public"] is True
        assert data["author"]["id"] == str(test_user.id)
        assert data["access"] == "AUTHOR"
        assert data["can_manage"] is True

        versions = await _version_numbers(db_session, data["id"])
        assert versions == [1]

    async def test_create_document_defaults_to_private(
        self, client: AsyncClient, auth_headers: dict
    ):
        response = await client.post(
            "/api/documents",
            json={"title": "Draft", "content": "<p>wip</p>"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["is_public"] is False

    async def test_create_document_accepts_string_flag(
        self, client: AsyncClient, auth_headers: dict
    ):
        response = await client.post(
            "/api/documents",
            json={"title": "Form post", "content": "<p>x</p>", "isPublic": "true"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["data"]["is_public"] is True

    async def test_create_document_requires_auth(self, client: AsyncClient):
        response = await client.post(
            "/api/documents",
            json={"title": "Nope", "content": "<p>x</p>"},
        )

        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_create_document_missing_title(
        self, client: AsyncClient, auth_headers: dict, db_session: AsyncSession
    ):
        response = await client.post(
            "/api/documents",
            json={"content": "<p>x</p>"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation error"
        assert any(d["field"] == "title" for d in body["details"])

        count = await db_session.scalar(select(func.count(Document.id)))
        assert count == 0

    async def test_create_document_blank_title(
        self, client: AsyncClient, auth_headers: dict
    ):
        response = await client.post(
            "/api/documents",
            json={"title": "   ", "content": "<p>x</p>"},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_create_document_records_mentions(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        test_user: User,
        test_user_2: User,
    ):
        content = (
            f'<p>Ping <span data-type="mention" data-id="{test_user_2.id}">@Bob</span> '
            f'and <span data-type="mention" data-id="{test_user.id}">@me</span></p>'
        )
        response = await client.post(
            "/api/documents",
            json={"title": "Mentions", "content": content},
            headers=auth_headers,
        )

        assert response.status_code == 201
        mentions = response.json()["data"]["mentions"]
        assert [m["user_id"] for m in mentions] == [str(test_user_2.id)]
        assert mentions[0]["mentioned_by_name"] == test_user.name

    async def test_failed_first_version_rolls_back_document(
        self, db_session: AsyncSession, test_user: User, monkeypatch
    ):
        def broken_version(**kwargs):
            kwargs["version"] = 0
            return DocumentVersion(**kwargs)

        monkeypatch.setattr(document_service, "DocumentVersion", broken_version)

        with pytest.raises(IntegrityError):
            await document_service.create_document(
                db_session,
                DocumentCreate(title="Doomed", content="<p>never saved</p>"),
                test_user,
            )
        await db_session.rollback()

        remaining = await db_session.scalar(
            select(func.count(Document.id)).where(Document.title == "Doomed")
        )
        assert remaining == 0


@pytest.mark.asyncio
class TestGetDocument:
    """Tests for GET /api/documents/{id}."""

    async def test_get_public_document_anonymous(
        self, client: AsyncClient, public_document: Document
    ):
        response = await client.get(f"/api/documents/{public_document.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["access"] == "PUBLIC"
        assert data["can_edit"] is False

    async def test_get_private_document_anonymous(
        self, client: AsyncClient, private_document: Document
    ):
        response = await client.get(f"/api/documents/{private_document.id}")

        assert response.status_code == 401
        body = response.json()
        assert "content" not in body
        assert body["error"] == "Authentication required to access this document"

    async def test_get_private_document_stranger(
        self, client: AsyncClient, auth_headers_3: dict, private_document: Document
    ):
        response = await client.get(
            f"/api/documents/{private_document.id}", headers=auth_headers_3
        )

        assert response.status_code == 403
        assert "Secret roadmap" not in response.text

    async def test_get_document_with_invalid_token_is_anonymous(
        self, client: AsyncClient, public_document: Document
    ):
        response = await client.get(
            f"/api/documents/{public_document.id}",
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 200

    async def test_get_document_includes_shares(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
        test_user_2: User,
    ):
        await make_share(db_session, private_document, test_user_2, "VIEW")

        response = await client.get(
            f"/api/documents/{private_document.id}", headers=auth_headers
        )

        assert response.status_code == 200
        shares = response.json()["data"]["shares"]
        assert len(shares) == 1
        assert shares[0]["user_email"] == test_user_2.email
        assert shares[0]["permission"] == "VIEW"

    async def test_get_missing_document(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(f"/api/documents/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.asyncio
class TestUpdateDocument:
    """Tests for PUT /api/documents/{id}."""

    async def test_update_title_does_not_add_version(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
    ):
        response = await client.put(
            f"/api/documents/{private_document.id}",
            json={"title": "Renamed"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed"
        assert await _version_numbers(db_session, private_document.id) == [1]

    async def test_content_updates_append_sequential_versions(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
    ):
        for i in range(3):
            response = await client.put(
                f"/api/documents/{private_document.id}",
                json={"content": f"<p>revision {i}</p>"},
                headers=auth_headers,
            )
            assert response.status_code == 200

        assert await _version_numbers(db_session, private_document.id) == [1, 2, 3, 4]

    async def test_update_advances_updated_at(
        self,
        client: AsyncClient,
        auth_headers: dict,
        private_document: Document,
    ):
        before = private_document.updated_at

        response = await client.put(
            f"/api/documents/{private_document.id}",
            json={"isPublic": True},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["is_public"] is True
        assert datetime.fromisoformat(data["updated_at"]) >= before

    async def test_update_without_fields(
        self, client: AsyncClient, auth_headers: dict, private_document: Document
    ):
        response = await client.put(
            f"/api/documents/{private_document.id}",
            json={},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"

    async def test_update_missing_document_without_fields(
        self, client: AsyncClient, auth_headers: dict
    ):
        response = await client.put(
            f"/api/documents/{uuid4()}",
            json={},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Document not found"

    async def test_update_without_fields_by_stranger(
        self, client: AsyncClient, auth_headers_3: dict, private_document: Document
    ):
        response = await client.put(
            f"/api/documents/{private_document.id}",
            json={},
            headers=auth_headers_3,
        )

        assert response.status_code == 403

    async def test_update_with_empty_content(
        self, client: AsyncClient, auth_headers: dict, private_document: Document
    ):
        response = await client.put(
            f"/api/documents/{private_document.id}",
            json={"content": ""},
            headers=auth_headers,
        )

        assert response.status_code == 400

    async def test_update_public_document_by_stranger(
        self, client: AsyncClient, auth_headers_3: dict, public_document: Document
    ):
        response = await client.put(
            f"/api/documents/{public_document.id}",
            json={"title": "Hijacked"},
            headers=auth_headers_3,
        )

        assert response.status_code == 403

    async def test_update_requires_auth(
        self, client: AsyncClient, public_document: Document
    ):
        response = await client.put(
            f"/api/documents/{public_document.id}",
            json={"title": "Anon"},
        )

        assert response.status_code == 401

    async def test_update_records_new_mentions_once(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
        test_user_2: User,
    ):
        content = f'<p><span data-type="mention" data-id="{test_user_2.id}">@Bob</span></p>'
        for _ in range(2):
            response = await client.put(
                f"/api/documents/{private_document.id}",
                json={"content": content},
                headers=auth_headers,
            )
            assert response.status_code == 200

        count = await db_session.scalar(
            select(func.count(Mention.id)).where(Mention.document_id == private_document.id)
        )
        assert count == 1


@pytest.mark.asyncio
class TestSharingScenario:
    """Private document walked through anonymous, VIEW and EDIT access."""

    async def test_view_then_edit_share(
        self,
        client: AsyncClient,
        auth_headers: dict,
        auth_headers_2: dict,
        db_session: AsyncSession,
        test_user_2: User,
    ):
        create = await client.post(
            "/api/documents",
            json={"title": "Design", "content": "<p>v1</p>", "isPublic": False},
            headers=auth_headers,
        )
        document_id = UUID(create.json()["data"]["id"])

        anonymous = await client.get(f"/api/documents/{document_id}")
        assert anonymous.status_code == 401

        share = await client.post(
            f"/api/documents/{document_id}/share",
            json={"userId": str(test_user_2.id), "permission": "VIEW"},
            headers=auth_headers,
        )
        assert share.status_code == 200

        viewer = await client.get(f"/api/documents/{document_id}", headers=auth_headers_2)
        assert viewer.status_code == 200
        assert viewer.json()["data"]["content"] == "<p>v1</p>"
        assert viewer.json()["data"]["access"] == "SHARE"

        denied = await client.put(
            f"/api/documents/{document_id}",
            json={"content": "<p>v2</p>"},
            headers=auth_headers_2,
        )
        assert denied.status_code == 403

        upgrade = await client.post(
            f"/api/documents/{document_id}/share",
            json={"userId": str(test_user_2.id), "permission": "EDIT"},
            headers=auth_headers,
        )
        assert upgrade.status_code == 200

        edited = await client.put(
            f"/api/documents/{document_id}",
            json={"content": "<p>v2</p>"},
            headers=auth_headers_2,
        )
        assert edited.status_code == 200
        assert await _version_numbers(db_session, document_id) == [1, 2]

        shares = await db_session.scalar(
            select(func.count(DocumentShare.id)).where(DocumentShare.document_id == document_id)
        )
        assert shares == 1


@pytest.mark.asyncio
class TestDeleteDocument:
    """Tests for DELETE /api/documents/{id}."""

    async def test_author_deletes_with_cascade(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
        test_user_2: User,
    ):
        await make_share(db_session, private_document, test_user_2, "EDIT")
        document_id = private_document.id

        response = await client.delete(f"/api/documents/{document_id}", headers=auth_headers)

        assert response.status_code == 200
        for model in (DocumentVersion, DocumentShare):
            count = await db_session.scalar(
                select(func.count(model.id)).where(model.document_id == document_id)
            )
            assert count == 0

        missing = await client.get(f"/api/documents/{document_id}", headers=auth_headers)
        assert missing.status_code == 404

    async def test_edit_share_cannot_delete(
        self,
        client: AsyncClient,
        auth_headers_2: dict,
        db_session: AsyncSession,
        private_document: Document,
        test_user_2: User,
    ):
        await make_share(db_session, private_document, test_user_2, "EDIT")

        response = await client.delete(
            f"/api/documents/{private_document.id}", headers=auth_headers_2
        )

        assert response.status_code == 403

    async def test_delete_missing_document(self, client: AsyncClient, auth_headers: dict):
        response = await client.delete(f"/api/documents/{uuid4()}", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.asyncio
class TestVersions:
    """Tests for the version history endpoints."""

    async def test_list_versions_newest_first(
        self, client: AsyncClient, auth_headers: dict, private_document: Document
    ):
        await client.put(
            f"/api/documents/{private_document.id}",
            json={"content": "<p>second</p>"},
            headers=auth_headers,
        )

        response = await client.get(
            f"/api/documents/{private_document.id}/versions", headers=auth_headers
        )

        assert response.status_code == 200
        versions = response.json()["data"]
        assert [v["version"] for v in versions] == [2, 1]
        assert versions[0]["content"] == "<p>second</p>"
        assert versions[0]["author_name"] == "Alice Author"

    async def test_list_versions_gated_by_read_access(
        self, client: AsyncClient, private_document: Document
    ):
        response = await client.get(f"/api/documents/{private_document.id}/versions")

        assert response.status_code == 401

    async def test_get_single_version(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
    ):
        version_id = await db_session.scalar(
            select(DocumentVersion.id).where(DocumentVersion.document_id == private_document.id)
        )

        response = await client.get(
            f"/api/documents/{private_document.id}/versions/{version_id}",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["version"] == 1

    async def test_version_of_other_document_is_404(
        self,
        client: AsyncClient,
        auth_headers: dict,
        db_session: AsyncSession,
        private_document: Document,
        public_document: Document,
    ):
        foreign_version = await db_session.scalar(
            select(DocumentVersion.id).where(DocumentVersion.document_id == public_document.id)
        )

        response = await client.get(
            f"/api/documents/{private_document.id}/versions/{foreign_version}",
            headers=auth_headers,
        )

        assert response.status_code == 404
