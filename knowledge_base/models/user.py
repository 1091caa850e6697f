"""User SQLAlchemy model for authentication and user management."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from ..database import Base

if TYPE_CHECKING:
    from .document import Document
    from .document_share import DocumentShare
    from .mention import Mention
    from .notification import Notification


class UserRole:
    """Allowed values for User.role."""

    USER = "USER"
    ADMIN = "ADMIN"

    ALL = (USER, ADMIN)


class User(Base):
    """
    User model representing knowledge base members.

    Attributes:
        id: Unique identifier (UUID)
        name: User's display name
        email: User's email address (unique)
        password_hash: Hashed password for authentication
        role: USER or ADMIN; fixed at creation unless changed by an admin
        created_at: Timestamp when user was created
        updated_at: Timestamp when user was last updated
    """

    __tablename__ = "Users"
    __allow_unmapped__ = True

    # Primary key - UUID
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )

    # Profile fields
    name = Column(
        String(255),
        nullable=False,
    )

    # Authentication fields
    email = Column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    password_hash = Column(
        String(255),
        nullable=False,
    )

    role = Column(
        String(20),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )

    # Timestamps
    created_at = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("role IN ('USER', 'ADMIN')", name="ck_users_role"),
    )

    # Relationships
    documents = relationship(
        "Document",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="write_only",
    )
    shares = relationship(
        "DocumentShare",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="write_only",
    )
    notifications = relationship(
        "Notification",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="write_only",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(id={self.id}, email={self.email})>"
