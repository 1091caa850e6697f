"""Security utilities for password hashing and verification."""

import hashlib

from passlib.context import CryptContext

# Configure password hashing context with bcrypt
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if the password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: The plain text password to hash

    Returns:
        The hashed password string
    """
    return pwd_context.hash(password)


def password_fingerprint(hashed_password: str) -> str:
    """
    Short digest of a stored password hash.

    Embedded in password reset tokens; once the password changes the
    fingerprint no longer matches and the token stops working.
    """
    return hashlib.sha256(hashed_password.encode("utf-8")).hexdigest()[:16]
