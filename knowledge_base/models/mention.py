"""Mention SQLAlchemy model linking users mentioned in documents."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .document import Document
    from .user import User


class Mention(Base):
    """
    Record of a user being @mentioned in a document.

    Attributes:
        id: Unique identifier (UUID)
        document_id: FK to the document containing the mention
        user_id: FK to the mentioned user
        mentioned_by: FK to the user who wrote the mention
        created_at: Timestamp when the mention was recorded
    """

    __tablename__ = "Mentions"
    __allow_unmapped__ = True

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

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

    mentioned_by = Column(
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

    # Relationships
    document = relationship(
        "Document",
        back_populates="mentions",
        lazy="noload",
    )

    user = relationship(
        "User",
        foreign_keys=[user_id],
        lazy="joined",
    )

    mentioner = relationship(
        "User",
        foreign_keys=[mentioned_by],
        lazy="joined",
    )

    def __repr__(self) -> str:
        """String representation of Mention."""
        return f"<Mention(document_id={self.document_id}, user_id={self.user_id})>"
