"""Users API routes.

Registration, session management (login, logout, token refresh, password
change) and the authenticated profile endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status

from vidtube.core.config import Settings
from vidtube.domain.entities import RegistrationInput
from vidtube.domain.services import ProfileService, SessionService
from vidtube.infrastructure.api.cookies import clear_session_cookies, set_session_cookies
from vidtube.infrastructure.api.dependencies import (
    AuthenticatedUser,
    get_app_settings,
    get_jwt_service,
    get_profile_service,
    get_session_service,
)
from vidtube.infrastructure.api.schemas import (
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
    VideoOwnerResponse,
    WatchHistoryItem,
)
from vidtube.infrastructure.auth import JWTService, extract_token

router = APIRouter()

SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]

AUTH_RESPONSES = {401: {"model": ErrorResponse, "description": "Not authenticated"}}


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Validation error or missing avatar"},
        409: {"model": ErrorResponse, "description": "Username or email already exists"},
        500: {"model": ErrorResponse, "description": "Upload or internal failure"},
    },
)
async def register(
    service: SessionServiceDep,
    fullname: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UserResponse]:
    """Register a new user.

    Takes multipart form fields plus an avatar image (required) and a cover
    image (optional). Does not log the user in.
    """
    user = await service.register(
        RegistrationInput(
            fullname=fullname,
            username=username,
            email=email,
            password=password,
            avatar=avatar,
            cover_image=cover_image,
        )
    )
    return ApiResponse(
        message="User registered successfully",
        data=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    responses={
        400: {"model": ErrorResponse, "description": "Missing username/email or password"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        404: {"model": ErrorResponse, "description": "User does not exist"},
    },
)
async def login(
    body: LoginRequest,
    response: Response,
    service: SessionServiceDep,
    settings: SettingsDep,
    jwt_service: JWTServiceDep,
) -> ApiResponse[LoginResponse]:
    """Log in with username or email and set the session cookies."""
    result = await service.login(
        password=body.password,
        username=body.username,
        email=body.email,
    )
    set_session_cookies(response, result.tokens, settings, jwt_service)
    return ApiResponse(
        message="User logged in successfully",
        data=LoginResponse(
            user=UserResponse.model_validate(result.user),
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
    )


@router.post("/logout", response_model=ApiResponse[dict], responses=AUTH_RESPONSES)
async def logout(
    current_user: AuthenticatedUser,
    response: Response,
    service: SessionServiceDep,
    settings: SettingsDep,
) -> ApiResponse[dict]:
    """Log out: revoke the stored refresh token and clear the cookies."""
    await service.logout(current_user.user_id)
    clear_session_cookies(response, settings)
    return ApiResponse(message="User logged out", data={})


@router.post(
    "/refresh-token",
    response_model=ApiResponse[TokenResponse],
    responses=AUTH_RESPONSES,
)
async def refresh_access_token(
    request: Request,
    response: Response,
    service: SessionServiceDep,
    settings: SettingsDep,
    jwt_service: JWTServiceDep,
    body: RefreshTokenRequest | None = None,
) -> ApiResponse[TokenResponse]:
    """Rotate the refresh token and issue a new access token.

    The refresh token is read from its cookie, or from the JSON body.
    """
    incoming = extract_token(request.cookies, None, settings.refresh_token_cookie)
    if incoming is None and body is not None:
        incoming = body.refresh_token

    result = await service.refresh(incoming)
    set_session_cookies(response, result.tokens, settings, jwt_service)
    return ApiResponse(
        message="Access token refreshed",
        data=TokenResponse(
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
    )


@router.post("/change-password", response_model=ApiResponse[dict], responses=AUTH_RESPONSES)
async def change_password(
    body: ChangePasswordRequest,
    current_user: AuthenticatedUser,
    service: SessionServiceDep,
) -> ApiResponse[dict]:
    await service.change_password(current_user.user_id, body.old_password, body.new_password)
    return ApiResponse(message="Password changed successfully", data={})


@router.get("/current-user", response_model=ApiResponse[UserResponse], responses=AUTH_RESPONSES)
async def get_current_user(
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
) -> ApiResponse[UserResponse]:
    user = await service.get_current_user(current_user.user_id)
    return ApiResponse(
        message="Current user fetched successfully",
        data=UserResponse.model_validate(user),
    )


@router.patch("/update-account", response_model=ApiResponse[UserResponse], responses=AUTH_RESPONSES)
async def update_account_details(
    body: UpdateAccountRequest,
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
) -> ApiResponse[UserResponse]:
    user = await service.update_account_details(current_user.user_id, body.fullname, body.email)
    return ApiResponse(
        message="Account details updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.patch("/update-avatar", response_model=ApiResponse[UserResponse], responses=AUTH_RESPONSES)
async def update_avatar(
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse[UserResponse]:
    user = await service.update_avatar(current_user.user_id, avatar)
    return ApiResponse(
        message="Avatar updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.patch("/update-cover", response_model=ApiResponse[UserResponse], responses=AUTH_RESPONSES)
async def update_cover_image(
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse[UserResponse]:
    user = await service.update_cover_image(current_user.user_id, cover_image)
    return ApiResponse(
        message="Cover image updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.get(
    "/channel/{username}",
    response_model=ApiResponse[ChannelProfileResponse],
    responses={**AUTH_RESPONSES, 404: {"model": ErrorResponse, "description": "No such channel"}},
)
async def get_channel_profile(
    username: str,
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
) -> ApiResponse[ChannelProfileResponse]:
    """Public channel profile with subscriber counts."""
    profile = await service.get_channel_profile(username, viewer_id=current_user.user_id)
    channel = profile.user
    return ApiResponse(
        message="Channel fetched successfully",
        data=ChannelProfileResponse(
            id=channel.id,
            username=channel.username,
            fullname=channel.fullname,
            email=channel.email,
            avatar=channel.avatar,
            cover_image=channel.cover_image,
            subscribers_count=profile.subscribers_count,
            channels_subscribed_to_count=profile.channels_subscribed_to_count,
            is_subscribed=profile.is_subscribed,
        ),
    )


@router.get("/history", response_model=ApiResponse[list[WatchHistoryItem]], responses=AUTH_RESPONSES)
async def get_watch_history(
    current_user: AuthenticatedUser,
    service: ProfileServiceDep,
) -> ApiResponse[list[WatchHistoryItem]]:
    """The current user's watch history, most recent first."""
    entries = await service.get_watch_history(current_user.user_id)
    return ApiResponse(
        message="Watch history fetched successfully",
        data=[
            WatchHistoryItem(
                id=entry.video.id,
                title=entry.video.title,
                description=entry.video.description,
                thumbnail=entry.video.thumbnail,
                video_file=entry.video.video_file,
                duration=entry.video.duration,
                views=entry.video.views,
                owner=VideoOwnerResponse.model_validate(entry.video.owner),
                watched_at=entry.watched_at,
            )
            for entry in entries
        ],
    )
