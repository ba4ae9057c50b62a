"""Pydantic schemas for the users API.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema that serializes field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Success envelope wrapping every users API response."""

    success: bool = True
    message: str = Field(..., description="Human-readable outcome")
    data: T | None = None


class UserResponse(CamelModel):
    """Sanitized user. Never carries the password or refresh token."""

    id: str
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoginRequest(CamelModel):
    """Request body for login. One of username or email is required."""

    username: str | None = Field(None, description="Username (case-insensitive)")
    email: str | None = Field(None, description="Email address (case-insensitive)")
    password: str | None = Field(None, description="Account password")


class TokenResponse(CamelModel):
    """Token pair returned by refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResponse(TokenResponse):
    """Token pair plus the authenticated user."""

    user: UserResponse


class RefreshTokenRequest(CamelModel):
    """Request body for refresh when the cookie is not available."""

    refresh_token: str | None = Field(None, description="The current refresh token")


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None


class UpdateAccountRequest(CamelModel):
    fullname: str | None = None
    email: str | None = None


class ChannelProfileResponse(CamelModel):
    """Public channel view with subscription counts."""

    id: str
    username: str
    fullname: str
    email: str
    avatar: str
    cover_image: str = ""
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


class VideoOwnerResponse(CamelModel):
    username: str
    fullname: str
    avatar: str


class WatchHistoryItem(CamelModel):
    """A watched video with its owner's public details."""

    id: str
    title: str
    description: str = ""
    thumbnail: str
    video_file: str
    duration: float = 0.0
    views: int = 0
    owner: VideoOwnerResponse
    watched_at: datetime | None = None


class ValidationErrorDetail(BaseModel):
    """Detail for a single validation error."""

    field: str = Field(..., description="Field name that failed validation")
    message: str = Field(..., description="Human-readable error message")
    code: str | None = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Error envelope returned for every failure."""

    success: bool = False
    error: str = Field(..., description="Error kind, e.g. TokenExpired")
    message: str = Field(..., description="Human-readable error message")
    status: int = Field(..., description="HTTP status code")
    details: list[ValidationErrorDetail] | None = None
