"""Authentication service: login, logout, refresh rotation and password change."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.errors import AuthError, InvalidTokenError, NotFoundError, ValidationError
from app.models.user import User
from app.services.jwt import JWTService, get_jwt_service
from app.services.user import UserService, get_user_service

logger = logging.getLogger("streamline.auth")


@dataclass
class SessionTokens:
    """A freshly issued token pair."""

    access_token: str
    refresh_token: str


@dataclass
class LoginResult:
    """Result of a successful login."""

    user: User
    tokens: SessionTokens


class AuthService:
    """Orchestrates the credential store and the token issuer."""

    def __init__(self, users: UserService, tokens: JWTService) -> None:
        self.users = users
        self.tokens = tokens

    def generate_tokens(self, db: Session, user: User) -> SessionTokens:
        """Issue a token pair and store the refresh token as the current session."""
        access_token, refresh_token = self.tokens.issue_token_pair(user)
        self.users.set_refresh_token(db, user.id, refresh_token)
        return SessionTokens(access_token=access_token, refresh_token=refresh_token)

    def login(self, db: Session, username: str | None, email: str | None, password: str | None) -> LoginResult:
        """Authenticate by username or email plus password."""
        if not (username or email):
            raise ValidationError("username or email is required")

        user = self.users.find_by_username_or_email(db, username, email)
        if not user:
            raise NotFoundError("User does not exist")

        if not self.users.verify_password(user, password):
            logger.info("Failed login for user id=%s", user.id)
            raise AuthError("Invalid user credentials")

        tokens = self.generate_tokens(db, user)
        logger.info("User id=%s logged in", user.id)
        return LoginResult(user=user, tokens=tokens)

    def logout(self, db: Session, user: User) -> None:
        """Revoke the server-side refresh token."""
        self.users.set_refresh_token(db, user.id, "")
        logger.info("User id=%s logged out", user.id)

    def refresh(self, db: Session, incoming_token: str | None) -> SessionTokens:
        """Exchange a refresh token for a new pair, rotating the stored token.

        A token that verifies but no longer matches the stored value was
        superseded (rotation or logout) and is rejected.
        """
        if not incoming_token:
            raise AuthError("Unauthorized request")

        try:
            claims = self.tokens.verify_refresh_token(incoming_token)
        except InvalidTokenError:
            raise AuthError("Invalid refresh token") from None

        try:
            user_id = int(claims["sub"])
        except ValueError:
            raise AuthError("Invalid refresh token") from None

        user = self.users.get_user(db, user_id, include_secrets=True)
        if not user:
            raise AuthError("Invalid refresh token")

        if incoming_token != user.refresh_token:
            logger.warning("Stale refresh token presented for user id=%s", user.id)
            raise AuthError("Refresh token is expired or used")

        return self.generate_tokens(db, user)

    def change_password(self, db: Session, user_id: int, old_password: str | None, new_password: str | None) -> None:
        """Change the password after checking the old one. Existing sessions stay valid."""
        user = self.users.get_user(db, user_id, include_secrets=True)
        if not user:
            raise NotFoundError("User not found")

        if not self.users.verify_password(user, old_password):
            raise ValidationError("Invalid old password")

        self.users.set_password(db, user, new_password or "")
        logger.info("Password changed for user id=%s", user.id)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_user_service(), get_jwt_service())
    return _auth_service
