"""Pydantic schemas for Document, share, version and mention payloads."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_public_flag(value):
    """Accept real booleans and the strings "true"/"false" sent by HTML forms."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in ("true", "false"):
        return value == "true"
    raise ValueError("isPublic must be a boolean")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class DocumentCreate(BaseModel):
    """Schema for creating a new document."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Document title",
        examples=["Getting Started Guide"],
    )
    content: str = Field(
        ...,
        min_length=1,
        description="Rich text (HTML) content",
    )
    is_public: bool = Field(
        False,
        alias="isPublic",
        description="Whether the document is readable without sharing",
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip(value)

    @field_validator("is_public", mode="before")
    @classmethod
    def coerce_public_flag(cls, value):
        if value is None:
            return value
        return _coerce_public_flag(value)


class DocumentUpdate(BaseModel):
    """Partial update; only supplied fields are written."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(
        None,
        min_length=1,
        max_length=500,
        description="Document title",
    )
    content: Optional[str] = Field(
        None,
        min_length=1,
        description="Rich text (HTML) content; a new version is recorded when supplied",
    )
    is_public: Optional[bool] = Field(
        None,
        alias="isPublic",
        description="Visibility flag",
    )

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip(value)

    @field_validator("is_public", mode="before")
    @classmethod
    def coerce_public_flag(cls, value):
        if value is None:
            return value
        return _coerce_public_flag(value)


class ShareRequest(BaseModel):
    """Grant or change a user's access to a document."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId", description="User receiving access")
    permission: Literal["VIEW", "EDIT"] = Field(
        ...,
        description="Permission level",
    )


class UnshareRequest(BaseModel):
    """Revoke a user's access to a document."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId", description="User losing access")


class DocumentListItem(BaseModel):
    """Document row with flattened author information."""

    id: UUID
    title: str
    content: str
    is_public: bool
    author_id: UUID
    author_name: str
    author_email: str
    created_at: datetime
    updated_at: datetime
    relevance: Optional[int] = Field(
        None,
        description="Search relevance (2 = title hit, 1 = content hit); only set when searching",
    )


class SharedDocumentItem(DocumentListItem):
    """Document shared with a user, with the grant details."""

    permission: str
    shared_at: datetime


class AuthorSummary(BaseModel):
    """Minimal author block embedded in document details."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class ShareItem(BaseModel):
    """Share grant embedded in document details."""

    id: UUID
    permission: str
    created_at: datetime
    user_id: UUID
    user_name: str
    user_email: str


class MentionItem(BaseModel):
    """Mention embedded in document details."""

    id: UUID
    created_at: datetime
    user_id: UUID
    user_name: str
    user_email: str
    mentioned_by_id: UUID
    mentioned_by_name: str


class DocumentDetail(BaseModel):
    """Full document with author, shares and mentions."""

    id: UUID
    title: str
    content: str
    is_public: bool
    author_id: UUID
    created_at: datetime
    updated_at: datetime
    author: AuthorSummary
    shares: list[ShareItem] = []
    mentions: list[MentionItem] = []
    access: str = Field(..., description="Why access was granted: PUBLIC, AUTHOR or SHARE")
    can_edit: bool = False
    can_manage: bool = False


class VersionItem(BaseModel):
    """Stored version of a document's content."""

    id: UUID
    document_id: UUID
    content: str
    version: int
    created_at: datetime
    author_id: UUID
    author_name: str
    author_email: str


class UserMentionItem(BaseModel):
    """Mention of a user, as listed on their profile."""

    id: UUID
    created_at: datetime
    document_id: UUID
    document_title: str
    mentioned_by_id: UUID
    mentioned_by_name: str
    mentioned_by_email: str
