"""Authentication infrastructure components.

This module provides password hashing, JWT token services, credential
extraction and access token verification.
"""

from vidtube.infrastructure.auth.jwt_service import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    JWTService,
)
from vidtube.infrastructure.auth.password_hasher import (
    hash_password,
    needs_rehash,
    verify_password,
)
from vidtube.infrastructure.auth.token_extractor import extract_token, parse_bearer

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "JWTService",
    "REFRESH_TOKEN_TYPE",
    "extract_token",
    "hash_password",
    "needs_rehash",
    "parse_bearer",
    "verify_password",
]
