"""Pydantic schemas for API requests and responses."""

from vidtube.infrastructure.api.schemas.user_schemas import (
    ApiResponse,
    ChangePasswordRequest,
    ChannelProfileResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenResponse,
    UpdateAccountRequest,
    UserResponse,
    ValidationErrorDetail,
    VideoOwnerResponse,
    WatchHistoryItem,
)

__all__ = [
    "ApiResponse",
    "ChangePasswordRequest",
    "ChannelProfileResponse",
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "RefreshTokenRequest",
    "TokenResponse",
    "UpdateAccountRequest",
    "UserResponse",
    "ValidationErrorDetail",
    "VideoOwnerResponse",
    "WatchHistoryItem",
]
