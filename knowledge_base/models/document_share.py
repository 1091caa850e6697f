"""DocumentShare SQLAlchemy model for per-user document permissions."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .document import Document
    from .user import User


class SharePermission:
    """Allowed values for DocumentShare.permission."""

    VIEW = "VIEW"
    EDIT = "EDIT"

    ALL = (VIEW, EDIT)


class DocumentShare(Base):
    """
    Grant of VIEW or EDIT access on one document to one user.

    At most one grant exists per (document, user) pair; sharing again
    replaces the permission in place.

    Attributes:
        id: Unique identifier (UUID)
        document_id: FK to Documents
        user_id: FK to the user receiving access
        permission: VIEW or EDIT
        created_at: Timestamp when the grant was first created
    """

    __tablename__ = "DocumentShares"
    __allow_unmapped__ = True

    # Primary key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Foreign keys
    document_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("Users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    permission = Column(
        String(10),
        nullable=False,
        default=SharePermission.VIEW,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )

    # Constraints
    __table_args__ = (
        UniqueConstraint("document_id", "user_id", name="uq_document_shares_doc_user"),
        CheckConstraint("permission IN ('VIEW', 'EDIT')", name="ck_document_shares_permission"),
    )

    # Relationships
    document = relationship(
        "Document",
        back_populates="shares",
        lazy="noload",
    )

    user = relationship(
        "User",
        back_populates="shares",
        lazy="joined",
    )

    def __repr__(self) -> str:
        """String representation of DocumentShare."""
        return (
            f"<DocumentShare(document_id={self.document_id}, "
            f"user_id={self.user_id}, permission={self.permission})>"
        )
