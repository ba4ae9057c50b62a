"""Session lifecycle service.

Implements registration, login, logout, refresh-token rotation and password
changes on top of the user directory, the refresh token store, the token
issuer and the media service.

Session states per user: anonymous -> authenticated -> refreshed* -> logged out.
A user holds at most one live refresh token. Every login or refresh replaces
it, and logout clears it.
"""

import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import Settings
from vidtube.core.exceptions import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    SigningError,
    TokenExpiredError,
    UnauthenticatedError,
    UploadError,
    ValidationError,
)
from vidtube.core.logging import get_logger
from vidtube.domain.entities import RegistrationInput, SessionResult, TokenPair
from vidtube.domain.services.account_validation import (
    check_field_lengths,
    required_field_errors,
    validate_email_address,
)
from vidtube.infrastructure.auth import (
    JWTService,
    hash_password,
    needs_rehash,
    verify_password,
)
from vidtube.infrastructure.persistence.models import UserModel
from vidtube.infrastructure.persistence.repositories import (
    RefreshTokenRepository,
    UserRepository,
)
from vidtube.infrastructure.storage import MediaService, UploadedMedia, has_file

logger = get_logger(__name__)


class SessionService:
    """Orchestrates the authentication and session lifecycle."""

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        refresh_token_repo: RefreshTokenRepository,
        jwt_service: JWTService,
        media_service: MediaService,
        settings: Settings,
    ) -> None:
        """Initialize the session service.

        Args:
            session: SQLAlchemy async session; the service owns commits.
            user_repo: Repository for user records.
            refresh_token_repo: Store for the current refresh token per user.
            jwt_service: Token issuer and decoder.
            media_service: Upload service for avatar and cover images.
            settings: Application settings.
        """
        self.session = session
        self.user_repo = user_repo
        self.refresh_token_repo = refresh_token_repo
        self.jwt_service = jwt_service
        self.media_service = media_service
        self.settings = settings

    async def register(self, data: RegistrationInput) -> UserModel:
        """Create a new user account.

        Flow:
        1. Validate required fields, lengths and email syntax
        2. Check username/email uniqueness
        3. Check both images, then upload the avatar (required) and the cover image (optional)
        4. Hash the password and create the user
        5. Re-fetch the stored record

        Returns:
            The stored user.

        Raises:
            ValidationError: Missing fields, invalid email, missing avatar,
                or an image that breaks upload limits.
            ConflictError: Username or email already registered.
            UploadError: The avatar could not be uploaded.
            InternalError: The created user could not be read back.
        """
        missing = data.missing_fields()
        if missing:
            logger.info("Registration failed: missing fields", fields=missing)
            raise ValidationError("All fields are required", details=required_field_errors(missing))

        check_field_lengths(username=data.username, email=data.email, fullname=data.fullname)
        username = UserRepository.normalize(data.username)
        email = validate_email_address(data.email)

        if await self.user_repo.exists_by_username_or_email(username, email):
            logger.info("Registration failed: user exists", username=username)
            raise ConflictError("User with this username or email already exists")

        if not has_file(data.avatar):
            logger.info("Registration failed: avatar missing", username=username)
            raise ValidationError(
                "Avatar file is required",
                details=required_field_errors(["avatar"]),
            )

        # Both images pass the limits before either is stored
        await self.media_service.check(data.avatar)
        await self.media_service.check(data.cover_image)

        avatar = await self.media_service.upload(data.avatar)
        cover_image = await self._upload_optional(data.cover_image, username)

        user = UserModel(
            id=str(uuid.uuid4()),
            username=username,
            email=email,
            fullname=data.fullname.strip(),
            avatar=avatar.url,
            cover_image=cover_image.url if cover_image else "",
            password_hash=hash_password(data.password),
        )

        try:
            await self.user_repo.create(user)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.info("Registration failed: unique constraint", username=username)
            await self.media_service.discard(avatar, cover_image)
            raise ConflictError("User with this username or email already exists") from e

        created = await self.user_repo.get_by_id(user.id)
        if created is None:
            logger.error("Registered user could not be read back", user_id=user.id)
            raise InternalError("Something went wrong while registering the user")

        logger.info("User registered successfully", user_id=created.id, username=username)
        return created

    async def _upload_optional(self, upload, username: str) -> UploadedMedia | None:
        # A failed cover upload leaves the cover empty rather than failing registration
        try:
            return await self.media_service.upload(upload)
        except UploadError:
            logger.warning("Cover image upload failed, continuing without it", username=username)
            return None

    async def login(
        self,
        password: str | None,
        username: str | None = None,
        email: str | None = None,
    ) -> SessionResult:
        """Authenticate by username or email and start a new session.

        Returns:
            The user and a freshly issued token pair.

        Raises:
            ValidationError: Neither username nor email, or no password, given.
            NotFoundError: No matching user.
            InvalidCredentialsError: Wrong password.
            InternalError: Tokens could not be issued or persisted.
        """
        if not (username and username.strip()) and not (email and email.strip()):
            raise ValidationError("Username or email is required")
        if not password:
            raise ValidationError(
                "Password is required",
                details=required_field_errors(["password"]),
            )

        user = await self.user_repo.find_by_username_or_email(username=username, email=email)
        if user is None:
            logger.info("Login failed: user not found", username=username, email=email)
            raise NotFoundError("User does not exist")

        if not verify_password(password, user.password_hash):
            logger.info("Login failed: invalid password", user_id=user.id)
            raise InvalidCredentialsError("Invalid user credentials")

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(password)
            await self.user_repo.update(user)

        tokens = await self._start_session(user)

        logger.info("User logged in successfully", user_id=user.id)
        return SessionResult(user=user, tokens=tokens)

    async def _start_session(self, user: UserModel) -> TokenPair:
        """Issue a token pair and persist its refresh token before returning."""
        try:
            tokens = self.jwt_service.issue_token_pair(user)
            await self.refresh_token_repo.set_refresh_token(user.id, tokens.refresh_token)
            await self.session.commit()
        except (SigningError, SQLAlchemyError) as e:
            await self.session.rollback()
            logger.error("Token generation failed", user_id=user.id, error=str(e))
            raise InternalError(
                "Something went wrong while generating access and refresh tokens"
            ) from e
        return tokens

    async def logout(self, user_id: str) -> None:
        """End the user's session by clearing the stored refresh token.

        Logging out twice is not an error.
        """
        await self.refresh_token_repo.clear_refresh_token(user_id)
        await self.session.commit()
        logger.info("User logged out", user_id=user_id)

    async def refresh(self, incoming_token: str | None) -> SessionResult:
        """Exchange a refresh token for a new token pair (rotation).

        The presented token must be the one currently stored for the user.
        On success it is replaced, so it can never be used again.

        Raises:
            UnauthenticatedError: No refresh token presented.
            InvalidTokenError: Bad signature, wrong type, or unknown user.
            TokenExpiredError: Token expired, already rotated, or revoked.
            InternalError: New tokens could not be issued.
        """
        if not incoming_token:
            logger.info("Refresh failed: no refresh token presented")
            raise UnauthenticatedError("Unauthorized request")

        payload = self.jwt_service.decode_refresh_token(incoming_token)

        user = await self.user_repo.get_by_id(payload["sub"])
        if user is None:
            logger.info("Refresh failed: token subject not found", user_id=payload["sub"])
            raise InvalidTokenError("Invalid refresh token")

        if not await self.refresh_token_repo.matches(user.id, incoming_token):
            logger.info("Refresh failed: token superseded or revoked", user_id=user.id)
            raise TokenExpiredError("Refresh token is expired or used")

        try:
            tokens = self.jwt_service.issue_token_pair(user)
        except SigningError as e:
            logger.error("Token generation failed", user_id=user.id, error=str(e))
            raise InternalError(
                "Something went wrong while generating access and refresh tokens"
            ) from e

        rotated = await self.refresh_token_repo.rotate(
            user.id, incoming_token, tokens.refresh_token
        )
        if not rotated:
            await self.session.rollback()
            logger.info("Refresh failed: lost rotation race", user_id=user.id)
            raise TokenExpiredError("Refresh token is expired or used")
        await self.session.commit()

        logger.info("Session refreshed", user_id=user.id)
        return SessionResult(user=user, tokens=tokens)

    async def change_password(
        self, user_id: str, old_password: str | None, new_password: str | None
    ) -> None:
        """Replace the user's password after checking the old one.

        Existing tokens stay valid unless settings.revoke_sessions_on_password_change
        is enabled, in which case the stored refresh token is cleared.

        Raises:
            ValidationError: Old or new password missing.
            NotFoundError: The user no longer exists.
            InvalidCredentialsError: The old password is wrong.
        """
        missing = [
            name
            for name, value in (("oldPassword", old_password), ("newPassword", new_password))
            if value is None or not value.strip()
        ]
        if missing:
            raise ValidationError(
                "Old and new password are required",
                details=required_field_errors(missing),
            )

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        if not verify_password(old_password, user.password_hash):
            logger.info("Password change failed: invalid old password", user_id=user_id)
            raise InvalidCredentialsError("Invalid old password")

        user.password_hash = hash_password(new_password)
        await self.user_repo.update(user)

        if self.settings.revoke_sessions_on_password_change:
            await self.refresh_token_repo.clear_refresh_token(user_id)

        await self.session.commit()
        logger.info(
            "Password changed",
            user_id=user_id,
            sessions_revoked=self.settings.revoke_sessions_on_password_change,
        )
