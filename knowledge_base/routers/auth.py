"""Authentication API endpoints.

Provides endpoints for registration, login, logout, the current user's
profile and account, and password reset. Uses stateless JWT bearer tokens.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..models.user import User
from ..schemas.common import APIResponse
from ..schemas.user import (
    AuthPayload,
    CurrentUserPayload,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UserCreate,
    UserLogin,
    UserResponse,
)
from ..services.auth_service import (
    authenticate_user,
    create_token_for_user,
    create_user,
    get_current_user,
    request_password_reset,
    reset_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent"
)


@router.post(
    "/register",
    response_model=APIResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a new user account and return it with an access token.",
    responses={
        201: {"description": "User created successfully"},
        400: {"description": "Email already registered or validation error"},
    },
)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> APIResponse[AuthPayload]:
    """
    Register a new user.

    - **name**: At least 2 characters
    - **email**: Valid email address (unique)
    - **password**: Minimum 6 characters

    Returns the created user and a JWT for immediate use.
    """
    user = await create_user(db, user_data)
    return APIResponse(
        data=AuthPayload(
            user=UserResponse.model_validate(user),
            token=create_token_for_user(user),
        ),
        message="User registered successfully",
    )


@router.post(
    "/login",
    response_model=APIResponse[AuthPayload],
    summary="Login and get access token",
    description="Authenticate with email and password to receive a JWT access token.",
    responses={
        200: {"description": "Successfully authenticated"},
        401: {"description": "Invalid credentials"},
    },
)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> APIResponse[AuthPayload]:
    """
    Login with email and password.

    Returns the user and a JWT access token for subsequent requests.
    """
    user = await authenticate_user(db, credentials.email, credentials.password)

    if not user:
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return APIResponse(
        data=AuthPayload(
            user=UserResponse.model_validate(user),
            token=create_token_for_user(user),
        ),
        message="Login successful",
    )


@router.post(
    "/logout",
    response_model=APIResponse[None],
    summary="Logout current user",
    description="Confirm logout. Client should discard the token.",
    responses={
        200: {"description": "Successfully logged out"},
        401: {"description": "Not authenticated"},
    },
)
async def logout(
    current_user: User = Depends(get_current_user),
) -> APIResponse[None]:
    """
    Logout the current user.

    Tokens are stateless, so this only confirms the intent; the client
    discards its stored token.
    """
    logger.info(f"User logged out: id={current_user.id}")
    return APIResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=APIResponse[CurrentUserPayload],
    summary="Get current user profile",
    responses={
        200: {"description": "User profile retrieved successfully"},
        401: {"description": "Not authenticated"},
    },
)
async def get_me(
    current_user: User = Depends(get_current_user),
) -> APIResponse[CurrentUserPayload]:
    """Return the authenticated user's profile."""
    return APIResponse(
        data=CurrentUserPayload(user=UserResponse.model_validate(current_user)),
    )


@router.delete(
    "/me",
    response_model=APIResponse[None],
    summary="Delete current account",
    description="Delete the authenticated user together with everything they own.",
    responses={
        200: {"description": "Account deleted"},
        401: {"description": "Not authenticated"},
    },
)
async def delete_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """
    Delete the authenticated user's account.

    Documents, shares, versions, mentions and notifications tied to the
    account go with it through the foreign keys' cascades.
    """
    user_id = current_user.id
    await db.delete(current_user)
    await db.flush()

    logger.info(f"User account deleted: id={user_id}")
    return APIResponse(message="Account deleted successfully")


@router.post(
    "/forgot-password",
    response_model=APIResponse[None],
    summary="Request a password reset",
    responses={200: {"description": "Request accepted"}},
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """
    Start a password reset.

    The response is identical whether or not the email is registered.
    """
    await request_password_reset(db, request_data.email)
    return APIResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=APIResponse[None],
    summary="Reset password with a token",
    responses={
        200: {"description": "Password updated"},
        400: {"description": "Invalid or expired token"},
    },
)
async def reset_password_endpoint(
    request_data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
) -> APIResponse[None]:
    """Set a new password using the token from the reset link."""
    await reset_password(db, request_data.token, request_data.password)
    return APIResponse(message="Password has been reset successfully")
