"""Unit tests for SessionService."""

from io import BytesIO
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.datastructures import Headers

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
from vidtube.domain.entities import RegistrationInput, TokenPair
from vidtube.domain.services.session_service import SessionService
from vidtube.infrastructure.auth import hash_password
from vidtube.infrastructure.storage import UploadedMedia


def make_upload(filename: str = "avatar.png") -> UploadFile:
    return UploadFile(
        file=BytesIO(b"\x89PNG"),
        filename=filename,
        headers=Headers({"content-type": "image/png"}),
    )


def make_user(password: str = "secret123"):
    user = MagicMock()
    user.id = "user-123"
    user.username = "ann"
    user.email = "ann@x.com"
    user.fullname = "Ann Lee"
    user.password_hash = hash_password(password)
    return user


@pytest.fixture
def session():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def user_repo():
    repo = MagicMock()
    repo.exists_by_username_or_email = AsyncMock(return_value=False)
    repo.create = AsyncMock(side_effect=lambda user: user)
    repo.update = AsyncMock(side_effect=lambda user: user)
    repo.get_by_id = AsyncMock(return_value=None)
    repo.find_by_username_or_email = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def token_repo():
    repo = MagicMock()
    repo.set_refresh_token = AsyncMock(return_value=True)
    repo.clear_refresh_token = AsyncMock()
    repo.matches = AsyncMock(return_value=True)
    repo.rotate = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def media_service():
    media = MagicMock()
    media.check = AsyncMock()
    media.discard = AsyncMock()
    media.upload = AsyncMock(
        return_value=UploadedMedia(
            url="http://test/media/a.png", key="a.png", size=4, mime_type="image/png"
        )
    )
    return media


@pytest.fixture
def service(session, user_repo, token_repo, jwt_service, media_service, settings):
    return SessionService(
        session=session,
        user_repo=user_repo,
        refresh_token_repo=token_repo,
        jwt_service=jwt_service,
        media_service=media_service,
        settings=settings,
    )


def registration(**overrides) -> RegistrationInput:
    fields = {
        "fullname": "Ann Lee",
        "username": "Ann",
        "email": "Ann@X.com",
        "password": "secret123",
        "avatar": make_upload(),
    }
    fields.update(overrides)
    return RegistrationInput(**fields)


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_hashed_normalized_user(self, service, user_repo, session):
        user_repo.get_by_id.side_effect = lambda user_id: user_repo.create.call_args.args[0]

        user = await service.register(registration())

        assert user.username == "ann"
        assert user.email == "ann@x.com"
        assert user.avatar == "http://test/media/a.png"
        assert user.cover_image == ""
        assert user.password_hash.startswith("$argon2id$")
        assert "secret123" not in user.password_hash
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["fullname", "username", "email", "password"])
    async def test_blank_field_rejected(self, service, user_repo, field):
        with pytest.raises(ValidationError) as exc_info:
            await service.register(registration(**{field: "   "}))

        assert exc_info.value.details[0]["field"] == field
        user_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_email_rejected(self, service):
        with pytest.raises(ValidationError, match="Invalid email"):
            await service.register(registration(email="not-an-email"))

    @pytest.mark.asyncio
    async def test_conflict_checked_before_upload(self, service, user_repo, media_service):
        user_repo.exists_by_username_or_email.return_value = True

        with pytest.raises(ConflictError):
            await service.register(registration())

        media_service.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_avatar(self, service, media_service):
        with pytest.raises(ValidationError, match="Avatar"):
            await service.register(registration(avatar=None))

        media_service.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_avatar_upload_failure_creates_nothing(self, service, user_repo, media_service):
        media_service.upload.side_effect = UploadError("Failed to upload file")

        with pytest.raises(UploadError):
            await service.register(registration())

        user_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cover_upload_failure_leaves_cover_empty(self, service, user_repo, media_service):
        avatar = UploadedMedia(url="http://test/media/a.png", key="a.png", size=4, mime_type="image/png")
        media_service.upload.side_effect = [avatar, UploadError("Failed to upload file")]
        user_repo.get_by_id.side_effect = lambda user_id: user_repo.create.call_args.args[0]

        user = await service.register(registration(cover_image=make_upload("cover.png")))

        assert user.avatar == avatar.url
        assert user.cover_image == ""

    @pytest.mark.asyncio
    async def test_unique_constraint_race_is_conflict(self, service, user_repo, session, media_service):
        user_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE"))

        with pytest.raises(ConflictError):
            await service.register(registration())

        session.rollback.assert_awaited_once()
        media_service.discard.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_cover_rejected_before_any_upload(self, service, user_repo, media_service):
        media_service.check.side_effect = [None, ValidationError("File type 'text/plain' is not allowed")]

        with pytest.raises(ValidationError):
            await service.register(registration(cover_image=make_upload("cover.txt")))

        media_service.upload.assert_not_awaited()
        user_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_overlong_username_rejected(self, service, media_service):
        with pytest.raises(ValidationError) as exc_info:
            await service.register(registration(username="a" * 65))

        assert exc_info.value.details[0]["field"] == "username"
        media_service.upload.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refetch_missing_is_internal_error(self, service, user_repo):
        user_repo.get_by_id.return_value = None

        with pytest.raises(InternalError):
            await service.register(registration())


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_and_persists_tokens(self, service, user_repo, token_repo, session):
        user = make_user()
        user_repo.find_by_username_or_email.return_value = user

        result = await service.login(password="secret123", username="ann")

        assert result.user is user
        token_repo.set_refresh_token.assert_awaited_once_with(user.id, result.tokens.refresh_token)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_login_requires_identity(self, service):
        with pytest.raises(ValidationError, match="Username or email"):
            await service.login(password="secret123", username=" ", email=None)

    @pytest.mark.asyncio
    async def test_login_requires_password(self, service):
        with pytest.raises(ValidationError, match="Password"):
            await service.login(password="", username="ann")

    @pytest.mark.asyncio
    async def test_unknown_user(self, service):
        with pytest.raises(NotFoundError):
            await service.login(password="secret123", email="nobody@x.com")

    @pytest.mark.asyncio
    async def test_wrong_password_stores_nothing(self, service, user_repo, token_repo):
        user_repo.find_by_username_or_email.return_value = make_user()

        with pytest.raises(InvalidCredentialsError):
            await service.login(password="wrong", username="ann")

        token_repo.set_refresh_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_signing_failure_is_internal_error(self, service, user_repo, jwt_service, session):
        user_repo.find_by_username_or_email.return_value = make_user()
        jwt_service.issue_token_pair = MagicMock(side_effect=SigningError("no secret"))

        with pytest.raises(InternalError, match="generating access and refresh tokens"):
            await service.login(password="secret123", username="ann")

        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_store_failure_is_internal_error(self, service, user_repo, token_repo):
        user_repo.find_by_username_or_email.return_value = make_user()
        token_repo.set_refresh_token.side_effect = OperationalError("UPDATE", {}, Exception("locked"))

        with pytest.raises(InternalError):
            await service.login(password="secret123", username="ann")


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_clears_token(self, service, token_repo, session):
        await service.logout("user-123")

        token_repo.clear_refresh_token.assert_awaited_once_with("user-123")
        session.commit.assert_awaited_once()


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_rotates(self, service, user_repo, token_repo, jwt_service, session):
        user = make_user()
        user_repo.get_by_id.return_value = user
        old = jwt_service.issue_refresh_token(user)

        result = await service.refresh(old)

        assert result.tokens.refresh_token != old
        token_repo.rotate.assert_awaited_once_with(user.id, old, result.tokens.refresh_token)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_token(self, service):
        with pytest.raises(UnauthenticatedError):
            await service.refresh(None)

    @pytest.mark.asyncio
    async def test_superseded_token(self, service, user_repo, token_repo, jwt_service):
        user = make_user()
        user_repo.get_by_id.return_value = user
        token_repo.matches.return_value = False

        with pytest.raises(TokenExpiredError):
            await service.refresh(jwt_service.issue_refresh_token(user))

        token_repo.rotate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_rotation_race(self, service, user_repo, token_repo, jwt_service, session):
        user = make_user()
        user_repo.get_by_id.return_value = user
        token_repo.rotate.return_value = False

        with pytest.raises(TokenExpiredError):
            await service.refresh(jwt_service.issue_refresh_token(user))

        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_subject(self, service, jwt_service):
        with pytest.raises(InvalidTokenError):
            await service.refresh(jwt_service.issue_refresh_token(make_user()))

    @pytest.mark.asyncio
    async def test_access_token_rejected(self, service, jwt_service):
        with pytest.raises(InvalidTokenError):
            await service.refresh(jwt_service.issue_access_token(make_user()))


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_change_password(self, service, user_repo, token_repo):
        user = make_user()
        user_repo.get_by_id.return_value = user

        await service.change_password(user.id, "secret123", "n3w-secret")

        assert user.password_hash.startswith("$argon2id$")
        assert "n3w-secret" not in user.password_hash
        user_repo.update.assert_awaited_once_with(user)
        token_repo.clear_refresh_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_wrong_old_password(self, service, user_repo):
        user_repo.get_by_id.return_value = make_user()

        with pytest.raises(InvalidCredentialsError):
            await service.change_password("user-123", "wrong", "n3w-secret")

        user_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_fields(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.change_password("user-123", "", None)

        assert [d["field"] for d in exc_info.value.details] == ["oldPassword", "newPassword"]

    @pytest.mark.asyncio
    async def test_blank_new_password_rejected(self, service, user_repo):
        user_repo.get_by_id.return_value = make_user()

        with pytest.raises(ValidationError) as exc_info:
            await service.change_password("user-123", "secret123", "   ")

        assert [d["field"] for d in exc_info.value.details] == ["newPassword"]
        user_repo.update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_revokes_sessions_when_enabled(
        self, session, user_repo, token_repo, jwt_service, media_service, settings
    ):
        service = SessionService(
            session=session,
            user_repo=user_repo,
            refresh_token_repo=token_repo,
            jwt_service=jwt_service,
            media_service=media_service,
            settings=settings.model_copy(update={"revoke_sessions_on_password_change": True}),
        )
        user_repo.get_by_id.return_value = make_user()

        await service.change_password("user-123", "secret123", "n3w-secret")

        token_repo.clear_refresh_token.assert_awaited_once_with("user-123")


def test_token_pair_is_immutable():
    pair = TokenPair(access_token="a", refresh_token="r")

    with pytest.raises(AttributeError):
        pair.access_token = "b"
