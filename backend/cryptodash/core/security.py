"""
CryptoDash - Security Module
Password Hashing, Session Token Signing and Verification
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
import uuid

import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError

from cryptodash.config import Settings, settings
from cryptodash.utils.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    TokenSigningError,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The hashed password to compare against

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        return False


def get_password_hash(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The plain text password to hash
        rounds: Work factor; defaults to BCRYPT_ROUNDS

    Returns:
        The hashed password string (salt embedded)
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def create_session_token(
    subject: str | Any,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict] = None,
    jti: Optional[str] = None,
    config: Optional[Settings] = None,
) -> tuple[str, datetime]:
    """
    Create a signed session JWT.

    Args:
        subject: The user id the token asserts
        expires_delta: Optional custom lifetime (default SESSION_EXPIRE_DAYS)
        additional_claims: Optional extra claims (email, username)
        jti: Optional JWT ID (auto-generated if not provided)
        config: Settings to sign with (defaults to global settings)

    Returns:
        Tuple of (encoded JWT token string, expiry datetime)

    Raises:
        TokenSigningError: If the token cannot be encoded
    """
    config = config or settings
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=config.SESSION_EXPIRE_DAYS))

    to_encode = {
        "sub": str(subject),
        "userId": str(subject),
        "iat": now,
        "exp": expire,
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
        "jti": jti or uuid.uuid4().hex,
    }

    if additional_claims:
        to_encode.update(additional_claims)

    try:
        encoded_jwt = jwt.encode(
            to_encode,
            config.JWT_SECRET,
            algorithm=config.JWT_ALGORITHM
        )
    except (JWTError, TypeError, ValueError) as e:
        raise TokenSigningError(f"Could not sign session token: {e}") from e
    return encoded_jwt, expire


def decode_session_token(token: str, config: Optional[Settings] = None) -> dict:
    """
    Decode and validate a session JWT.

    Checks signature, expiry, issuer and audience.

    Args:
        token: The JWT token string to decode
        config: Settings to verify with (defaults to global settings)

    Returns:
        Decoded token payload

    Raises:
        TokenExpiredError: If the token is past its expiry
        InvalidTokenError: For any other verification failure
    """
    config = config or settings
    if not token:
        raise InvalidTokenError("Missing token")

    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
            issuer=config.JWT_ISSUER,
        )
    except ExpiredSignatureError as e:
        raise TokenExpiredError() from e
    except JWTError as e:
        raise InvalidTokenError() from e

    if not payload.get("userId"):
        raise InvalidTokenError("Token has no subject")
    return payload
