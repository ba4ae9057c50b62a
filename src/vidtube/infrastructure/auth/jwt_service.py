"""JWT token service.

Provides JWT token creation and validation for authentication. Access and
refresh tokens are signed with independent secrets and lifetimes so that a
token of one kind can never verify as the other.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

import jwt

from vidtube.core.config import Settings
from vidtube.core.exceptions import InvalidTokenError, SigningError, TokenExpiredError
from vidtube.domain.entities import TokenPair

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenSubject(Protocol):
    """Fields of a user record that tokens are minted from."""

    id: str
    email: str
    username: str
    fullname: str


class JWTService:
    """Service for creating and validating JWT tokens.

    Access tokens carry the user's public identity claims and are verified
    statelessly. Refresh tokens carry only the user ID plus a token ID and
    are checked against the stored value by the session service.
    """

    ALGORITHM = "HS256"

    def __init__(self, settings: Settings) -> None:
        """Initialize the JWT service.

        Args:
            settings: Application settings holding secrets, lifetimes and issuer.
        """
        self._settings = settings

    @property
    def issuer(self) -> str:
        return self._settings.jwt_issuer

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self._settings.access_token_expire_minutes)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self._settings.refresh_token_expire_days)

    @staticmethod
    def _require_secret(secret: str | None, kind: str) -> str:
        if not secret or not secret.strip():
            raise SigningError(f"{kind} token secret is not configured")
        return secret

    def _encode(self, payload: dict[str, Any], secret: str) -> str:
        try:
            return jwt.encode(payload, secret, algorithm=self.ALGORITHM)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            raise SigningError(f"Failed to sign token: {e}") from e

    def issue_access_token(self, user: TokenSubject, expires_delta: timedelta | None = None) -> str:
        """Create an access token.

        Args:
            user: The user the token is issued to.
            expires_delta: Custom expiration time. Defaults to config value.

        Returns:
            Encoded JWT access token.

        Raises:
            SigningError: If the access token secret is missing or signing fails.
        """
        secret = self._require_secret(self._settings.access_token_secret, "Access")
        now = datetime.now(timezone.utc)
        payload = {
            "iss": self.issuer,
            "sub": str(user.id),
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.access_token_lifetime),
            "type": ACCESS_TOKEN_TYPE,
            "email": user.email,
            "username": user.username,
            "fullname": user.fullname,
        }
        return self._encode(payload, secret)

    def issue_refresh_token(self, user: TokenSubject, expires_delta: timedelta | None = None) -> str:
        """Create a refresh token.

        Args:
            user: The user the token is issued to. Only the ID is embedded.
            expires_delta: Custom expiration time. Defaults to config value.

        Returns:
            Encoded JWT refresh token.

        Raises:
            SigningError: If the refresh token secret is missing or signing fails.
        """
        secret = self._require_secret(self._settings.refresh_token_secret, "Refresh")
        now = datetime.now(timezone.utc)
        payload = {
            "iss": self.issuer,
            "sub": str(user.id),
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.refresh_token_lifetime),
            "jti": str(uuid.uuid4()),
            "type": REFRESH_TOKEN_TYPE,
        }
        return self._encode(payload, secret)

    def issue_token_pair(self, user: TokenSubject) -> TokenPair:
        """Create a fresh access and refresh token for the user."""
        return TokenPair(
            access_token=self.issue_access_token(user),
            refresh_token=self.issue_refresh_token(user),
        )

    def _decode(self, token: str, secret: str, expected_type: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.ALGORITHM],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

        if payload.get("type") != expected_type:
            raise InvalidTokenError(f"Wrong token type, expected {expected_type}")
        return payload

    def decode_access_token(self, token: str) -> dict[str, Any]:
        """Validate an access token and return its claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, issuer or token type is wrong.
            SigningError: If the access token secret is not configured.
        """
        secret = self._require_secret(self._settings.access_token_secret, "Access")
        return self._decode(token, secret, ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        """Validate a refresh token and return its claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, issuer or token type is wrong.
            SigningError: If the refresh token secret is not configured.
        """
        secret = self._require_secret(self._settings.refresh_token_secret, "Refresh")
        return self._decode(token, secret, REFRESH_TOKEN_TYPE)

    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_token_lifetime.total_seconds())

    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds."""
        return int(self.refresh_token_lifetime.total_seconds())
