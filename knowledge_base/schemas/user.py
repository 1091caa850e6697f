"""Pydantic schemas for User model validation."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserBase(BaseModel):
    """Base schema with common user fields."""

    name: str = Field(
        ...,
        min_length=2,
        max_length=255,
        description="User's display name",
        examples=["John Doe"],
    )
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["user@example.com"],
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, value):
        return value.lower()


class UserCreate(UserBase):
    """Schema for creating a new user (registration)."""

    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="User's password (will be hashed)",
        examples=["SecureP@ssw0rd!"],
    )


class UserLogin(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, value):
        return value.lower()


class UserUpdate(BaseModel):
    """Schema for updating the caller's profile."""

    name: Optional[str] = Field(
        None,
        min_length=2,
        max_length=255,
        description="User's display name",
    )
    email: Optional[EmailStr] = Field(
        None,
        description="New email address (must be unused)",
    )

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, value):
        return value.lower() if value else value


class RoleUpdate(BaseModel):
    """Schema for an admin changing a user's role."""

    role: Literal["USER", "ADMIN"]


class UserResponse(BaseModel):
    """Schema for user response (public data only)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(
        ...,
        description="Unique user identifier",
    )
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = Field(
        None,
        description="When the user was created",
    )


class UserSearchResult(BaseModel):
    """User search result for the share and mention pickers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class AuthPayload(BaseModel):
    """Returned by register and login."""

    user: UserResponse
    token: str


class CurrentUserPayload(BaseModel):
    """Returned by GET /auth/me."""

    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    """Request a password reset link."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Set a new password using a reset token."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=128)
