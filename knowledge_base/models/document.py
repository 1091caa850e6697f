"""Document SQLAlchemy model for the knowledge base.

Documents store rich text (HTML) content authored by exactly one user.
Visibility is controlled by is_public; read access to private documents is
granted per user through DocumentShare rows. Every content change appends
an immutable DocumentVersion.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .document_share import DocumentShare
    from .document_version import DocumentVersion
    from .mention import Mention
    from .user import User


class Document(Base):
    """
    Document model representing a knowledge base document.

    Attributes:
        id: Unique identifier (UUID)
        title: Document title
        content: Rich text content (HTML)
        is_public: Whether anyone, including anonymous users, may read it
        author_id: FK to the owning user
        created_at: Timestamp when document was created
        updated_at: Timestamp when document was last updated
    """

    __tablename__ = "Documents"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Document details
    title = Column(
        String(500),
        nullable=False,
        index=True,
    )

    content = Column(
        Text,
        nullable=False,
    )

    is_public = Column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
    )

    # Ownership
    author_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_documents_public_updated", "is_public", "updated_at"),
    )

    # Relationships
    author = relationship(
        "User",
        back_populates="documents",
        lazy="joined",
    )

    shares = relationship(
        "DocumentShare",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    versions = relationship(
        "DocumentVersion",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    mentions = relationship(
        "Mention",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        """String representation of Document."""
        return f"<Document(id={self.id}, title={self.title[:30] if self.title else ''})>"
