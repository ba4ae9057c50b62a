"""Profile operations for authenticated users.

Account detail updates, avatar and cover image replacement, the public
channel profile and the watch history.
"""

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.exceptions import ConflictError, NotFoundError, ValidationError
from vidtube.core.logging import get_logger
from vidtube.domain.entities import ChannelProfile
from vidtube.domain.services.account_validation import (
    check_field_lengths,
    required_field_errors,
    validate_email_address,
)
from vidtube.infrastructure.persistence.models import UserModel, WatchHistoryModel
from vidtube.infrastructure.persistence.repositories import (
    SubscriptionRepository,
    UserRepository,
    WatchHistoryRepository,
)
from vidtube.infrastructure.storage import MediaService, has_file

logger = get_logger(__name__)


class ProfileService:
    """Service for reading and updating user profiles."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        subscription_repo: SubscriptionRepository,
        watch_history_repo: WatchHistoryRepository,
        media_service: MediaService,
    ) -> None:
        self.session = session
        self.user_repo = user_repo
        self.subscription_repo = subscription_repo
        self.watch_history_repo = watch_history_repo
        self.media_service = media_service

    async def get_current_user(self, user_id: str) -> UserModel:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_account_details(
        self, user_id: str, fullname: str | None, email: str | None
    ) -> UserModel:
        """Change the user's display name and email.

        Raises:
            ValidationError: A field is blank or the email is malformed.
            ConflictError: Another user already has the email.
        """
        missing = [
            name
            for name, value in (("fullname", fullname), ("email", email))
            if value is None or not value.strip()
        ]
        if missing:
            raise ValidationError("All fields are required", details=required_field_errors(missing))

        check_field_lengths(fullname=fullname, email=email)
        normalized_email = validate_email_address(email)
        if await self.user_repo.email_taken_by_other(normalized_email, user_id):
            raise ConflictError("Email is already in use")

        user = await self.get_current_user(user_id)
        user.fullname = fullname.strip()
        user.email = normalized_email

        try:
            await self.user_repo.update(user)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Email is already in use") from e

        logger.info("Account details updated", user_id=user_id)
        return user

    async def update_avatar(self, user_id: str, upload: UploadFile | None) -> UserModel:
        """Replace the user's avatar image.

        Raises:
            ValidationError: No file attached, or the file breaks upload limits.
            UploadError: The media store failed.
        """
        return await self._replace_image(user_id, upload, "avatar")

    async def update_cover_image(self, user_id: str, upload: UploadFile | None) -> UserModel:
        """Replace the user's cover image.

        Raises:
            ValidationError: No file attached, or the file breaks upload limits.
            UploadError: The media store failed.
        """
        return await self._replace_image(user_id, upload, "cover_image")

    async def _replace_image(
        self, user_id: str, upload: UploadFile | None, attribute: str
    ) -> UserModel:
        if not has_file(upload):
            raise ValidationError(
                f"{attribute.replace('_', ' ').capitalize()} file is missing",
                details=required_field_errors([attribute]),
            )

        user = await self.get_current_user(user_id)
        media = await self.media_service.upload(upload)

        setattr(user, attribute, media.url)
        await self.user_repo.update(user)
        await self.session.commit()

        logger.info("Profile image updated", user_id=user_id, field=attribute, key=media.key)
        return user

    async def get_channel_profile(
        self, username: str | None, viewer_id: str | None = None
    ) -> ChannelProfile:
        """Public channel view for a username.

        Args:
            username: Channel owner's username (case-insensitive).
            viewer_id: The requesting user, used for is_subscribed.

        Raises:
            ValidationError: Username is blank.
            NotFoundError: No such channel.
        """
        if username is None or not username.strip():
            raise ValidationError("Username is missing")

        user = await self.user_repo.get_by_username(username)
        if user is None:
            raise NotFoundError("Channel does not exist")

        return ChannelProfile(
            user=user,
            subscribers_count=await self.subscription_repo.count_subscribers(user.id),
            channels_subscribed_to_count=await self.subscription_repo.count_subscriptions(
                user.id
            ),
            is_subscribed=(
                await self.subscription_repo.is_subscribed(viewer_id, user.id)
                if viewer_id
                else False
            ),
        )

    async def get_watch_history(self, user_id: str) -> list[WatchHistoryModel]:
        """The user's watch history, most recent first, with video owners loaded."""
        return await self.watch_history_repo.list_for_user(user_id)
