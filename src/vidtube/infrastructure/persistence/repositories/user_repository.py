"""User repository for database operations."""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.infrastructure.persistence.models import UserModel


class UserRepository:
    """Repository for user database operations.

    Usernames and emails are stored lowercased; lookups normalize their
    arguments the same way.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def normalize(value: str | None) -> str | None:
        """Trim and lowercase a username or email."""
        if value is None:
            return None
        return value.strip().lower()

    async def create(self, user: UserModel) -> UserModel:
        """Create a new user.

        Args:
            user: User model to create.

        Returns:
            Created user model.

        Raises:
            sqlalchemy.exc.IntegrityError: If the username or email is taken.
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: UserModel) -> UserModel:
        """Persist changes made to a user and reload server-side values."""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        """Get a user by ID.

        Args:
            user_id: User ID (UUID string).

        Returns:
            User model if found, None otherwise.
        """
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> UserModel | None:
        result = await self.session.execute(
            select(UserModel).where(UserModel.username == self.normalize(username))
        )
        return result.scalar_one_or_none()

    async def find_by_username_or_email(
        self, username: str | None = None, email: str | None = None
    ) -> UserModel | None:
        """Get the first user matching either the username or the email.

        Args:
            username: Username to match, if given.
            email: Email to match, if given.

        Returns:
            User model if found, None otherwise (also None when neither is given).
        """
        conditions = []
        if username and username.strip():
            conditions.append(UserModel.username == self.normalize(username))
        if email and email.strip():
            conditions.append(UserModel.email == self.normalize(email))
        if not conditions:
            return None

        result = await self.session.execute(
            select(UserModel).where(or_(*conditions)).limit(1)
        )
        return result.scalar_one_or_none()

    async def exists_by_username_or_email(self, username: str, email: str) -> bool:
        """Check whether any user already holds the username or the email."""
        result = await self.session.execute(
            select(UserModel.id)
            .where(
                or_(
                    UserModel.username == self.normalize(username),
                    UserModel.email == self.normalize(email),
                )
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def email_taken_by_other(self, email: str, user_id: str) -> bool:
        """Check whether another user already uses the email."""
        result = await self.session.execute(
            select(UserModel.id)
            .where(UserModel.email == self.normalize(email), UserModel.id != user_id)
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
