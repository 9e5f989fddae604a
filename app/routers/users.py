"""User API endpoints: registration, sessions, profile and channel queries."""

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import (
    REFRESH_COOKIE_NAME,
    clear_auth_cookies,
    get_current_user,
    set_auth_cookies,
)
from app.errors import ValidationError
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.response import api_response
from app.schemas.user import ChangePasswordRequest, LoginRequest, UpdateAccountRequest, UserResponse
from app.services.auth import get_auth_service
from app.services.channel import get_channel_service
from app.services.media import MediaService, get_media_service
from app.services.user import check_password_length, get_user_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _public(user: User) -> dict:
    return UserResponse.model_validate(user).to_public()


async def _upload_or_none(media: MediaService, upload: UploadFile | None) -> str | None:
    try:
        result = await media.upload_file(upload)
    except ValueError as e:
        raise ValidationError(str(e)) from None
    return result.url if result else None


@router.post("/register", status_code=201)
@limiter.limit("5/minute")
async def register(
    request: Request,
    full_name: str = Form("", alias="fullName"),
    email: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> dict:
    """Register a new user with an avatar and optional cover image."""
    users = get_user_service()

    if any(not field.strip() for field in (full_name, email, username, password)):
        raise ValidationError("All fields are required")

    check_password_length(password)
    users.ensure_available(db, username, email)

    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar file is required")

    avatar_url = await _upload_or_none(media, avatar)
    cover_image_url = await _upload_or_none(media, cover_image)

    if not avatar_url:
        raise ValidationError("Avatar file is required")

    user = users.create_user(
        db,
        full_name=full_name,
        email=email,
        username=username,
        password=password,
        avatar=avatar_url,
        cover_image=cover_image_url or "",
    )
    return api_response(200, _public(user), "User registered successfully")


@router.post("/login")
@limiter.limit("10/minute")
def login(request: Request, response: Response, body: LoginRequest, db: Session = Depends(get_db)) -> dict:
    """Log in with username or email and receive access and refresh tokens."""
    result = get_auth_service().login(db, body.username, body.email, body.password)

    set_auth_cookies(response, result.tokens.access_token, result.tokens.refresh_token)
    return api_response(
        200,
        {
            "user": _public(result.user),
            "accessToken": result.tokens.access_token,
            "refreshToken": result.tokens.refresh_token,
        },
        "User logged in successfully",
    )


@router.post("/logout")
def logout(response: Response, user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    """Revoke the refresh token and clear session cookies."""
    get_auth_service().logout(db, user)
    clear_auth_cookies(response)
    return api_response(200, None, "User logged out successfully")


@router.post("/refreshToken")
@limiter.limit("30/minute")
def refresh_access_token(request: Request, response: Response, db: Session = Depends(get_db)) -> dict:
    """Rotate the session using the refresh token cookie."""
    tokens = get_auth_service().refresh(db, request.cookies.get(REFRESH_COOKIE_NAME))

    set_auth_cookies(response, tokens.access_token, tokens.refresh_token)
    return api_response(
        200,
        {"accessToken": tokens.access_token, "refreshToken": tokens.refresh_token},
        "Access token refreshed successfully",
    )


@router.get("/currentUser")
def get_current_user_profile(user: User = Depends(get_current_user)) -> dict:
    return api_response(200, _public(user), "Current user fetched successfully")


@router.patch("/updatePassword")
def change_current_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Change the password. Existing tokens stay valid until they expire."""
    get_auth_service().change_password(db, user.id, body.old_password, body.new_password)
    return api_response(200, {}, "Password changed successfully")


@router.patch("/updateAccountDetails")
def update_account_details(
    body: UpdateAccountRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    updated = get_user_service().update_account_details(db, user, full_name=body.full_name, email=body.email)
    return api_response(200, _public(updated), "Account details updated successfully")


@router.patch("/updateAvatar")
async def update_user_avatar(
    avatar: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> dict:
    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar file is missing")

    url = await _upload_or_none(media, avatar)
    if not url:
        raise ValidationError("Error while uploading avatar")

    updated = get_user_service().update_avatar(db, user, url)
    return api_response(200, _public(updated), "Avatar updated successfully")


@router.patch("/updateCoverImage")
async def update_user_cover_image(
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
) -> dict:
    if cover_image is None or not cover_image.filename:
        raise ValidationError("Cover image file is missing")

    url = await _upload_or_none(media, cover_image)
    if not url:
        raise ValidationError("Error while uploading cover image")

    updated = get_user_service().update_cover_image(db, user, url)
    return api_response(200, _public(updated), "Cover image updated successfully")


@router.get("/channelProfile/{username}")
def get_user_channel_profile(
    username: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Channel profile with subscriber counts and the viewer's subscription state."""
    channel = get_channel_service().get_channel_profile(db, username, user.id)
    return api_response(200, channel, "User channel fetched successfully")


@router.get("/watchHistory")
def get_watch_history(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> dict:
    history = get_channel_service().get_watch_history(db, user.id)
    return api_response(200, history, "Watch history fetched successfully")
