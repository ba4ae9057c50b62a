"""FastAPI dependencies for authentication and service wiring.

Settings, the JWT service and the media store live on ``app.state`` and are
created once by the application factory. Services are built per request
around the request's database session.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import Settings
from vidtube.domain.services import ProfileService, SessionService
from vidtube.infrastructure.auth import JWTService, extract_token
from vidtube.infrastructure.auth.token_verifier import TokenVerifier
from vidtube.infrastructure.persistence.database import get_db_session
from vidtube.infrastructure.persistence.repositories import (
    RefreshTokenRepository,
    SubscriptionRepository,
    UserRepository,
    WatchHistoryRepository,
)
from vidtube.infrastructure.storage import MediaService


def get_app_settings(request: Request) -> Settings:
    """Settings instance the application was created with."""
    return request.app.state.settings


def get_jwt_service(request: Request) -> JWTService:
    return request.app.state.jwt_service


def get_media_service(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MediaService:
    return MediaService(request.app.state.media_store, settings)


@dataclass
class CurrentUser:
    """Represents the current authenticated user context.

    Resolved from a valid access token and the user record it names.
    """

    user_id: str
    username: str
    email: str
    fullname: str


async def get_current_user(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
) -> CurrentUser:
    """Authenticate the request from the access token cookie or Bearer header.

    The resolved identity is also stored on ``request.state.user``.

    Raises:
        UnauthenticatedError: No token presented.
        TokenExpiredError: The access token has expired.
        InvalidTokenError: Bad token or unknown subject.
    """
    token = extract_token(
        request.cookies,
        request.headers.get("Authorization"),
        settings.access_token_cookie,
    )
    user = await TokenVerifier(jwt_service).verify(token, UserRepository(session))

    current_user = CurrentUser(
        user_id=user.id,
        username=user.username,
        email=user.email,
        fullname=user.fullname,
    )
    request.state.user = current_user
    return current_user


# Type alias for dependency injection
AuthenticatedUser = Annotated[CurrentUser, Depends(get_current_user)]


def get_session_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    jwt_service: Annotated[JWTService, Depends(get_jwt_service)],
    media_service: Annotated[MediaService, Depends(get_media_service)],
) -> SessionService:
    return SessionService(
        session=session,
        user_repo=UserRepository(session),
        refresh_token_repo=RefreshTokenRepository(session),
        jwt_service=jwt_service,
        media_service=media_service,
        settings=settings,
    )


def get_profile_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    media_service: Annotated[MediaService, Depends(get_media_service)],
) -> ProfileService:
    return ProfileService(
        session=session,
        user_repo=UserRepository(session),
        subscription_repo=SubscriptionRepository(session),
        watch_history_repo=WatchHistoryRepository(session),
        media_service=media_service,
    )
