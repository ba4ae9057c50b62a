"""Value objects passed between the session lifecycle and the API layer."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import UploadFile

    from vidtube.infrastructure.persistence.models import UserModel


@dataclass(frozen=True)
class TokenPair:
    """An access token and the refresh token minted alongside it."""

    access_token: str
    refresh_token: str


@dataclass
class SessionResult:
    """Outcome of a successful login or refresh."""

    user: "UserModel"
    tokens: TokenPair


@dataclass
class RegistrationInput:
    """Raw registration input as received from the client.

    Attributes:
        fullname: Display name.
        username: Requested username (normalized to lowercase on save).
        email: Email address (normalized to lowercase on save).
        password: Plaintext password; hashed before persistence.
        avatar: Uploaded avatar image (required).
        cover_image: Uploaded cover image (optional).
    """

    fullname: str | None
    username: str | None
    email: str | None
    password: str | None
    avatar: "UploadFile | None" = None
    cover_image: "UploadFile | None" = None

    def missing_fields(self) -> list[str]:
        """Names of required text fields that are absent or blank."""
        values = {
            "fullname": self.fullname,
            "username": self.username,
            "email": self.email,
            "password": self.password,
        }
        return [name for name, value in values.items() if value is None or not value.strip()]


@dataclass
class ChannelProfile:
    """Public view of a user's channel with subscription counts."""

    user: "UserModel"
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False

