"""Authentication service with JWT token generation and user management."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..models.user import User, UserRole
from ..schemas.user import UserCreate
from ..utils.security import get_password_hash, password_fingerprint, verify_password

logger = logging.getLogger(__name__)

# OAuth2 scheme for token-based authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Same scheme for endpoints that also serve anonymous callers
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

ACCESS_TOKEN_PURPOSE = "access"
PASSWORD_RESET_PURPOSE = "password_reset"


class TokenData(BaseModel):
    """Token payload data schema."""

    user_id: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


def _encode(data: dict, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time delta

    Returns:
        Encoded JWT token string
    """
    claims = {**data, "purpose": ACCESS_TOKEN_PURPOSE}
    return _encode(
        claims,
        expires_delta or timedelta(minutes=settings.jwt_expiration_minutes),
    )


def create_token_for_user(user: User) -> str:
    """Issue an access token carrying the user's id, email and role."""
    return create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
        }
    )


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token.

    Args:
        token: The JWT token string to decode

    Returns:
        TokenData with user information, or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except JWTError:
        return None

    if payload.get("purpose") != ACCESS_TOKEN_PURPOSE:
        return None

    user_id: str = payload.get("sub")
    if user_id is None:
        return None

    return TokenData(
        user_id=user_id,
        email=payload.get("email"),
        role=payload.get("role"),
    )


def create_password_reset_token(user: User) -> str:
    """
    Create a short-lived password reset token.

    The token is bound to the current password hash, so it stops working
    as soon as the password has been changed once.
    """
    return _encode(
        {
            "sub": str(user.id),
            "purpose": PASSWORD_RESET_PURPOSE,
            "pwd": password_fingerprint(user.password_hash),
        },
        timedelta(minutes=settings.password_reset_expiration_minutes),
    )


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """
    Get a user by their email address.

    Args:
        db: Database session
        email: Email address to search for

    Returns:
        User object if found, None otherwise
    """
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
    """
    Get a user by their ID.

    Args:
        db: Database session
        user_id: User UUID to search for

    Returns:
        User object if found, None otherwise
    """
    return await db.get(User, user_id)


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    """
    Authenticate a user with email and password.

    Args:
        db: Database session
        email: User's email address
        password: Plain text password to verify

    Returns:
        User object if authentication successful, None otherwise
    """
    user = await get_user_by_email(db, email)

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


async def create_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Create a new user in the database.

    New accounts always start with the USER role; only an admin can
    promote them afterwards.

    Args:
        db: Database session
        user_data: User creation data including password

    Returns:
        Created User object

    Raises:
        HTTPException: If email already exists
    """
    existing_user = await get_user_by_email(db, user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    db_user = User(
        name=user_data.name,
        email=user_data.email.lower(),
        password_hash=get_password_hash(user_data.password),
        role=UserRole.USER,
    )

    db.add(db_user)
    await db.flush()
    await db.refresh(db_user)

    logger.info(f"User registered: id={db_user.id}, email={db_user.email}")
    return db_user


async def request_password_reset(db: AsyncSession, email: str) -> Optional[str]:
    """
    Generate a reset token for the account with this email, if any.

    The reset link is logged; delivering it by mail is left to the
    deployment. Returns the token so callers (and tests) can use it.
    """
    user = await get_user_by_email(db, email)
    if user is None:
        logger.info(f"Password reset requested for unknown email {email}")
        return None

    token = create_password_reset_token(user)
    logger.info(
        f"Password reset link for user {user.id}: "
        f"{settings.frontend_url}/reset-password?token={token}"
    )
    return token


async def reset_password(db: AsyncSession, token: str, new_password: str) -> User:
    """
    Set a new password from a reset token.

    Raises:
        HTTPException: 400 if the token is invalid, expired or already used
    """
    invalid_token = HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Invalid or expired reset token",
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise invalid_token

    if payload.get("purpose") != PASSWORD_RESET_PURPOSE:
        raise invalid_token

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise invalid_token

    user = await get_user_by_id(db, user_id)
    if user is None or payload.get("pwd") != password_fingerprint(user.password_hash):
        raise invalid_token

    user.password_hash = get_password_hash(new_password)
    user.updated_at = datetime.utcnow()
    await db.flush()

    logger.info(f"Password reset for user {user.id}")
    return user


async def _resolve_token_user(db: AsyncSession, token: str) -> Optional[User]:
    token_data = decode_access_token(token)
    if token_data is None or token_data.user_id is None:
        return None

    try:
        user_id = UUID(token_data.user_id)
    except ValueError:
        return None

    return await get_user_by_id(db, user_id)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the JWT token.

    This is a FastAPI dependency that extracts and validates
    the JWT token from the Authorization header.

    Args:
        token: JWT token from Authorization header
        db: Database session

    Returns:
        Authenticated User object

    Raises:
        HTTPException: If token is invalid or user not found
    """
    user = await _resolve_token_user(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Resolve the caller if a valid token was sent, else None.

    An invalid or expired token is treated like no token at all.
    """
    if not token:
        return None

    user = await _resolve_token_user(db, token)
    if user is None:
        logger.debug("Ignoring invalid bearer token on optional-auth endpoint")
    return user


async def require_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency that only lets ADMIN users through.

    Raises:
        HTTPException: 403 for non-admin users
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return current_user
