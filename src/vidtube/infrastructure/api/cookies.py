"""Session cookie helpers.

Both tokens travel in httpOnly cookies. The secure flag is dropped only when
the environment is development.
"""

from fastapi import Response

from vidtube.core.config import Settings
from vidtube.domain.entities import TokenPair
from vidtube.infrastructure.auth import JWTService


def set_session_cookies(
    response: Response, tokens: TokenPair, settings: Settings, jwt_service: JWTService
) -> None:
    """Attach the access and refresh token cookies to a response."""
    response.set_cookie(
        key=settings.access_token_cookie,
        value=tokens.access_token,
        httponly=True,
        secure=settings.secure_cookies,
        samesite=settings.cookie_samesite,
        max_age=jwt_service.access_token_max_age(),
        path="/",
    )
    response.set_cookie(
        key=settings.refresh_token_cookie,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.secure_cookies,
        samesite=settings.cookie_samesite,
        max_age=jwt_service.refresh_token_max_age(),
        path="/",
    )


def clear_session_cookies(response: Response, settings: Settings) -> None:
    """Expire both session cookies."""
    for name in (settings.access_token_cookie, settings.refresh_token_cookie):
        response.delete_cookie(
            key=name,
            path="/",
            httponly=True,
            secure=settings.secure_cookies,
            samesite=settings.cookie_samesite,
        )
