"""Repository for the per-user refresh token.

Each user holds at most one current refresh token, stored as a SHA-256
digest on the user row. Writes go through UPDATE statements that touch
only that column, so they never re-run password hashing or any other
per-field logic.
"""

import hashlib

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.infrastructure.persistence.models import UserModel


class RefreshTokenRepository:
    """Session store for the single current refresh token of each user."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @staticmethod
    def hash_token(token: str) -> str:
        """Hash a token using SHA-256.

        Args:
            token: The raw JWT token string.

        Returns:
            SHA-256 hex digest of the token.
        """
        return hashlib.sha256(token.encode()).hexdigest()

    async def set_refresh_token(self, user_id: str, token: str) -> bool:
        """Overwrite the stored refresh token unconditionally.

        Args:
            user_id: The user's UUID.
            token: The newly issued refresh token.

        Returns:
            True if the user exists and was updated.
        """
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(refresh_token_hash=self.hash_token(token))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def clear_refresh_token(self, user_id: str) -> None:
        """Remove the stored refresh token. Clearing an empty value is a no-op."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(refresh_token_hash=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def get_refresh_token_hash(self, user_id: str) -> str | None:
        """Read the stored digest straight from the database."""
        result = await self._session.execute(
            select(UserModel.refresh_token_hash).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def matches(self, user_id: str, token: str) -> bool:
        """Check whether the token is the user's current refresh token."""
        stored = await self.get_refresh_token_hash(user_id)
        if stored is None:
            return False
        return stored == self.hash_token(token)

    async def rotate(self, user_id: str, expected_token: str, new_token: str) -> bool:
        """Replace the stored refresh token only if it still equals expected_token.

        The comparison and the write happen in one UPDATE statement, so of
        two concurrent rotations presenting the same token at most one wins.

        Returns:
            True if the token was rotated, False if the stored value had
            already changed.
        """
        stmt = (
            update(UserModel)
            .where(
                UserModel.id == user_id,
                UserModel.refresh_token_hash == self.hash_token(expected_token),
            )
            .values(refresh_token_hash=self.hash_token(new_token))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
