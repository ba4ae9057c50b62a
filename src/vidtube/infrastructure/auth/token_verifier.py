"""Access token verification.

Resolves a raw access token to the user it was issued to. Verification is
stateless apart from the user lookup: the stored refresh token is never
consulted here.
"""

from vidtube.core.exceptions import InvalidTokenError, UnauthenticatedError
from vidtube.core.logging import get_logger
from vidtube.infrastructure.auth.jwt_service import JWTService
from vidtube.infrastructure.persistence.models import UserModel
from vidtube.infrastructure.persistence.repositories import UserRepository

logger = get_logger(__name__)


class TokenVerifier:
    """Verify access tokens and resolve their subject."""

    def __init__(self, jwt_service: JWTService) -> None:
        self.jwt_service = jwt_service

    async def verify(self, token: str | None, user_repo: UserRepository) -> UserModel:
        """Verify an access token and load its user.

        Args:
            token: Raw token, or None if the request carried none.
            user_repo: Repository used to resolve the token subject.

        Returns:
            The user the token was issued to.

        Raises:
            UnauthenticatedError: If no token was presented.
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is malformed, badly signed, or
                its subject no longer exists.
        """
        if not token:
            logger.info("Authentication failed: no access token presented")
            raise UnauthenticatedError("Unauthorized request")

        payload = self.jwt_service.decode_access_token(token)

        user = await user_repo.get_by_id(payload["sub"])
        if user is None:
            logger.info("Authentication failed: token subject not found", user_id=payload["sub"])
            raise InvalidTokenError("Invalid access token")

        return user
