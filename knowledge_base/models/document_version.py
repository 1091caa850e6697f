"""DocumentVersion SQLAlchemy model for document history.

Versions form an append-only log per document: numbering starts at 1 and
increases by one with every content change. Rows are only ever removed by
the cascade when their document is deleted.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .document import Document
    from .user import User


class DocumentVersion(Base):
    """
    Immutable snapshot of a document's content.

    Attributes:
        id: Unique identifier (UUID)
        document_id: FK to the parent document
        content: Content at the time of the change
        version: Sequential number within the document, starting at 1
        author_id: FK to the user who made the change
        created_at: Timestamp when the version was recorded
    """

    __tablename__ = "DocumentVersions"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Parent document
    document_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    content = Column(
        Text,
        nullable=False,
    )

    version = Column(
        Integer,
        nullable=False,
    )

    # Audit
    author_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("document_id", "version", name="uq_document_versions_doc_version"),
        CheckConstraint("version >= 1", name="ck_document_versions_positive"),
    )

    # Relationships
    document = relationship(
        "Document",
        back_populates="versions",
        lazy="noload",
    )

    author = relationship(
        "User",
        foreign_keys=[author_id],
        lazy="joined",
    )

    def __repr__(self) -> str:
        """String representation of DocumentVersion."""
        return f"<DocumentVersion(document_id={self.document_id}, version={self.version})>"
