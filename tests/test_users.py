"""Tests for the users endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_base.models import Document, Mention, User

from conftest import make_document, make_share, make_user


@pytest.mark.asyncio
class TestSearchUsers:
    """Tests for GET /api/users/search."""

    async def test_search_by_name_or_email(
        self, client: AsyncClient, test_user: User, test_user_2: User
    ):
        by_name = await client.get("/api/users/search?query=alice")
        by_email = await client.get("/api/users/search?query=bob@")

        assert [u["id"] for u in by_name.json()["data"]] == [str(test_user.id)]
        assert [u["id"] for u in by_email.json()["data"]] == [str(test_user_2.id)]
        assert set(by_name.json()["data"][0]) == {"id", "name", "email"}

    async def test_short_query_returns_empty(self, client: AsyncClient, test_user: User):
        response = await client.get("/api/users/search?query=a")

        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_results_are_capped(self, client: AsyncClient, db_session: AsyncSession):
        for i in range(12):
            await make_user(db_session, f"Member {i:02d}", f"member{i}@example.com")

        response = await client.get("/api/users/search?query=member")

        assert len(response.json()["data"]) == 10


@pytest.mark.asyncio
class TestUserProfiles:
    """Tests for profile reads, profile updates and roles."""

    async def test_get_self(self, client: AsyncClient, auth_headers: dict, test_user: User):
        response = await client.get(f"/api/users/{test_user.id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["email"] == test_user.email

    async def test_get_other_user_forbidden(
        self, client: AsyncClient, auth_headers: dict, test_user_2: User
    ):
        response = await client.get(f"/api/users/{test_user_2.id}", headers=auth_headers)

        assert response.status_code == 403

    async def test_admin_gets_any_user(
        self, client: AsyncClient, admin_headers: dict, test_user_2: User
    ):
        response = await client.get(f"/api/users/{test_user_2.id}", headers=admin_headers)

        assert response.status_code == 200

    async def test_admin_gets_missing_user(self, client: AsyncClient, admin_headers: dict):
        response = await client.get(f"/api/users/{uuid4()}", headers=admin_headers)

        assert response.status_code == 404

    async def test_list_users_admin_only(
        self,
        client: AsyncClient,
        auth_headers: dict,
        admin_headers: dict,
        test_user: User,
    ):
        denied = await client.get("/api/users", headers=auth_headers)
        allowed = await client.get("/api/users", headers=admin_headers)

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert len(allowed.json()["data"]) == 2

    async def test_update_profile(self, client: AsyncClient, auth_headers: dict):
        response = await client.put(
            "/api/users/profile",
            json={"name": "Alice Renamed", "email": "ALICE.NEW@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Alice Renamed"
        assert data["email"] == "alice.new@example.com"

    async def test_update_profile_email_taken(
        self, client: AsyncClient, auth_headers: dict, test_user_2: User
    ):
        response = await client.put(
            "/api/users/profile",
            json={"email": test_user_2.email},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Email is already taken"

    async def test_update_profile_without_fields(
        self, client: AsyncClient, auth_headers: dict
    ):
        response = await client.put("/api/users/profile", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"

    async def test_admin_changes_role(
        self, client: AsyncClient, admin_headers: dict, test_user_2: User
    ):
        response = await client.put(
            f"/api/users/{test_user_2.id}/role",
            json={"role": "ADMIN"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "ADMIN"

    async def test_user_cannot_change_role(
        self, client: AsyncClient, auth_headers: dict, test_user: User
    ):
        response = await client.put(
            f"/api/users/{test_user.id}/role",
            json={"role": "ADMIN"},
            headers=auth_headers,
        )

        assert response.status_code == 403


@pytest.mark.asyncio
class TestUserListings:
    """Tests for per-user document, share and mention listings."""

    async def test_authored_documents(
        self,
        client: AsyncClient,
        auth_headers: dict,
        test_user: User,
        public_document: Document,
        private_document: Document,
    ):
        response = await client.get(
            f"/api/users/{test_user.id}/documents", headers=auth_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert {d["id"] for d in body["data"]} == {
            str(public_document.id),
            str(private_document.id),
        }
        assert body["pagination"]["total"] == 2

    async def test_shared_documents(
        self,
        client: AsyncClient,
        auth_headers_2: dict,
        db_session: AsyncSession,
        test_user_2: User,
        private_document: Document,
    ):
        await make_share(db_session, private_document, test_user_2, "EDIT")

        response = await client.get(
            f"/api/users/{test_user_2.id}/shared-documents", headers=auth_headers_2
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["id"] == str(private_document.id)
        assert data[0]["permission"] == "EDIT"
        assert "shared_at" in data[0]

    async def test_mentions(
        self,
        client: AsyncClient,
        auth_headers_2: dict,
        db_session: AsyncSession,
        test_user: User,
        test_user_2: User,
    ):
        document = await make_document(db_session, test_user, title="Standup")
        db_session.add(
            Mention(document_id=document.id, user_id=test_user_2.id, mentioned_by=test_user.id)
        )
        await db_session.commit()

        response = await client.get(
            f"/api/users/{test_user_2.id}/mentions", headers=auth_headers_2
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["document_title"] == "Standup"
        assert data[0]["mentioned_by_name"] == test_user.name

    async def test_listings_of_other_user_forbidden(
        self, client: AsyncClient, auth_headers_3: dict, test_user: User
    ):
        for suffix in ("documents", "shared-documents", "mentions"):
            response = await client.get(
                f"/api/users/{test_user.id}/{suffix}", headers=auth_headers_3
            )
            assert response.status_code == 403
