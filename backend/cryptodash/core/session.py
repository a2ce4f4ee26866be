"""
CryptoDash - Session Service
Issue and verify signed session tokens carried in an HTTP-only cookie
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger
from starlette.responses import Response

from cryptodash.config import Settings
from cryptodash.core.security import create_session_token, decode_session_token
from cryptodash.schemas.user import UserPublic
from cryptodash.utils.exceptions import (
    AuthenticationError,
    AuthenticationRequiredError,
)


@dataclass
class SessionUser:
    """Identity asserted by a session token's claims."""
    id: str
    email: str = ""
    username: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "username": self.username}


@dataclass
class SessionResult:
    """A freshly minted session."""
    user: UserPublic
    token: str
    expires_at: datetime


@dataclass
class SessionVerification:
    """Tagged outcome of verifying a session token."""
    authenticated: bool
    user: Optional[SessionUser] = None
    error: Optional[str] = None


class SessionService:
    """
    Session management for cookie-based authentication.

    The server keeps no session table: a session is valid as long as its
    token's signature, expiry, issuer and audience check out. Logging out
    only clears the cookie on the client.
    """

    def __init__(self, config: Settings):
        self.config = config

    @property
    def cookie_name(self) -> str:
        return self.config.AUTH_COOKIE_NAME

    @property
    def max_age(self) -> int:
        """Cookie lifetime in seconds."""
        return int(timedelta(days=self.config.SESSION_EXPIRE_DAYS).total_seconds())

    def create_session(self, user: UserPublic) -> SessionResult:
        """
        Mint a session token for an authenticated user.

        Args:
            user: The user the session belongs to

        Returns:
            SessionResult with the user, signed token and expiry

        Raises:
            TokenSigningError: If the token cannot be signed
        """
        token, expires_at = create_session_token(
            subject=user.id,
            additional_claims={"email": user.email, "username": user.username},
            config=self.config,
        )
        logger.debug(f"Session created for user {user.id}")
        return SessionResult(user=user, token=token, expires_at=expires_at)

    def verify_session(self, token: Optional[str]) -> SessionVerification:
        """
        Verify a session token. Never raises.

        Args:
            token: Raw token from the auth cookie (may be None)

        Returns:
            SessionVerification; on failure `authenticated` is False and
            `error` holds a short reason
        """
        if not token:
            return SessionVerification(authenticated=False, error="No session token")

        try:
            payload = decode_session_token(token, config=self.config)
        except AuthenticationError as e:
            return SessionVerification(authenticated=False, error=e.message)

        user = SessionUser(
            id=str(payload["userId"]),
            email=payload.get("email", ""),
            username=payload.get("username", ""),
        )
        return SessionVerification(authenticated=True, user=user)

    def require_auth(self, token: Optional[str]) -> SessionUser:
        """
        Guard for protected operations.

        Raises:
            AuthenticationRequiredError: If there is no valid session
        """
        result = self.verify_session(token)
        if not result.authenticated or result.user is None:
            raise AuthenticationRequiredError()
        return result.user

    def set_auth_cookie(self, response: Response, token: str) -> None:
        """Attach the session cookie to a response."""
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.config.is_production,
            samesite="lax",
        )

    def clear_auth_cookie(self, response: Response) -> None:
        """Overwrite the session cookie with an immediately expired value."""
        response.set_cookie(
            key=self.cookie_name,
            value="",
            max_age=0,
            path="/",
            httponly=True,
            secure=self.config.is_production,
            samesite="lax",
        )
