"""Authentication dependencies and cookie helpers for FastAPI routes."""

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AuthError
from app.models.user import User
from app.services.jwt import get_jwt_service
from app.services.user import get_user_service

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"
BEARER_PREFIX = "Bearer "

# httpOnly + secure: scripts in the browser cannot read or alter the tokens
COOKIE_OPTIONS = {"httponly": True, "secure": True}


def extract_access_token(request: Request) -> str | None:
    """Read the access token from the cookie, falling back to the Authorization header."""
    token = request.cookies.get(ACCESS_COOKIE_NAME)
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith(BEARER_PREFIX):
        return auth_header[len(BEARER_PREFIX) :].strip() or None
    return None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Verify the access token and load its user. Raises 401 if anything is off."""
    token = extract_access_token(request)
    if not token:
        raise AuthError("Unauthorized")

    claims = get_jwt_service().verify_access_token(token)
    try:
        user_id = int(claims["sub"])
    except ValueError:
        raise AuthError("Invalid access token") from None

    user = get_user_service().get_user(db, user_id)
    if not user:
        raise AuthError("Invalid access token")

    request.state.user = user
    return user


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set both session cookies."""
    response.set_cookie(key=ACCESS_COOKIE_NAME, value=access_token, **COOKIE_OPTIONS)
    response.set_cookie(key=REFRESH_COOKIE_NAME, value=refresh_token, **COOKIE_OPTIONS)


def clear_auth_cookies(response: Response) -> None:
    """Clear both session cookies."""
    response.delete_cookie(key=ACCESS_COOKIE_NAME, **COOKIE_OPTIONS)
    response.delete_cookie(key=REFRESH_COOKIE_NAME, **COOKIE_OPTIONS)
