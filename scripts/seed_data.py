"""
Seed the knowledge base with sample users and documents for local testing.

Creates three users (one ADMIN), a public and two private documents, one
share and one mention. Running it again reuses existing users and skips
documents that already exist.

Usage:
    python scripts/seed_data.py
"""

import asyncio
import sys

sys.path.insert(0, ".")

from sqlalchemy import select

from knowledge_base.database import async_session_maker
from knowledge_base.models import Document, User, UserRole
from knowledge_base.schemas.document import DocumentCreate, ShareRequest
from knowledge_base.services.document_service import create_document
from knowledge_base.services.share_service import share_document
from knowledge_base.utils.security import get_password_hash

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "role": UserRole.ADMIN},
    {"name": "Jane Smith", "email": "jane@example.com", "role": UserRole.USER},
    {"name": "Bob Johnson", "email": "bob@example.com", "role": UserRole.USER},
]


async def get_or_create_user(db, name: str, email: str, role: str) -> User:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user:
        print(f"User {email} already exists")
        return user

    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(SAMPLE_PASSWORD),
        role=role,
    )
    db.add(user)
    await db.flush()
    print(f"Created user: {email} ({role})")
    return user


async def document_exists(db, author: User, title: str) -> bool:
    result = await db.execute(
        select(Document.id).where(Document.author_id == author.id, Document.title == title)
    )
    return result.first() is not None


async def seed():
    async with async_session_maker() as db:
        admin, jane, bob = [
            await get_or_create_user(db, u["name"], u["email"], u["role"])
            for u in SAMPLE_USERS
        ]

        samples = [
            (
                admin,
                DocumentCreate(
                    title="Welcome to the Knowledge Base",
                    content=(
                        "<h1>Welcome</h1><p>This space collects our team's guides "
                        "and notes. Anyone can read public documents.</p>"
                    ),
                    is_public=True,
                ),
            ),
            (
                jane,
                DocumentCreate(
                    title="Project Roadmap",
                    content=(
                        "<p>Quarterly goals and milestones. Review with "
                        f'<span data-type="mention" data-id="{bob.id}">@{bob.name}</span>'
                        " before the planning meeting.</p>"
                    ),
                    is_public=False,
                ),
            ),
            (
                bob,
                DocumentCreate(
                    title="Meeting Notes",
                    content="<p>Notes from the weekly sync.</p>",
                    is_public=False,
                ),
            ),
        ]

        documents = {}
        for author, data in samples:
            if await document_exists(db, author, data.title):
                print(f"Document '{data.title}' already exists")
                continue
            documents[data.title] = await create_document(db, data, author)
            print(f"Created document: {data.title}")

        roadmap = documents.get("Project Roadmap")
        if roadmap is not None:
            await share_document(
                db,
                roadmap.id,
                ShareRequest(user_id=bob.id, permission="EDIT"),
                jane,
            )
            print(f"Shared '{roadmap.title}' with {bob.email} (EDIT)")

        await db.commit()

    print("\nSeed complete. All sample users share the password:", SAMPLE_PASSWORD)


if __name__ == "__main__":
    asyncio.run(seed())
