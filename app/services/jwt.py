"""JWT Token Service."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import Settings, get_settings
from app.errors import InvalidTokenError, UnexpectedError
from app.models.user import User

logger = logging.getLogger("streamline.jwt")


class JWTService:
    """Issues and verifies access and refresh tokens.

    Access and refresh tokens use independent secrets and lifetimes, so a
    leaked access token cannot mint new sessions.
    """

    def __init__(self, settings: Settings) -> None:
        self.access_secret = settings.ACCESS_TOKEN_SECRET
        self.refresh_secret = settings.REFRESH_TOKEN_SECRET
        self.access_lifetime = settings.access_token_lifetime
        self.refresh_lifetime = settings.refresh_token_lifetime
        self.algorithm = settings.JWT_ALGORITHM

    def _sign(self, claims: dict[str, Any], secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + lifetime,
            # Keeps two tokens issued in the same second distinct
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access_token(self, claims: dict[str, Any]) -> str:
        """Create a short-lived access token from identity claims (id, email, username, fullName)."""
        return self._sign(
            {
                "sub": str(claims["id"]),
                "email": claims["email"],
                "username": claims["username"],
                "fullName": claims["fullName"],
            },
            self.access_secret,
            self.access_lifetime,
        )

    def issue_refresh_token(self, user_id: int) -> str:
        """Create a long-lived refresh token carrying only the user id."""
        return self._sign({"sub": str(user_id)}, self.refresh_secret, self.refresh_lifetime)

    def issue_token_pair(self, user: User) -> tuple[str, str]:
        """Return ``(access_token, refresh_token)`` for the given user."""
        try:
            access_token = self.issue_access_token(
                {"id": user.id, "email": user.email, "username": user.username, "fullName": user.full_name}
            )
            refresh_token = self.issue_refresh_token(user.id)
        except (JWTError, KeyError, TypeError) as e:
            logger.error("Token generation failed for user %s: %s", user.id, e)
            raise UnexpectedError("Something went wrong while generating access and refresh token") from e
        return access_token, refresh_token

    def verify(self, token: str, secret: str) -> dict[str, Any]:
        """Decode and validate signature and expiry. Raises InvalidTokenError on any failure."""
        try:
            claims = jwt.decode(token, secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidTokenError() from None
        if "sub" not in claims:
            raise InvalidTokenError()
        return claims

    def verify_access_token(self, token: str) -> dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        return self.verify(token, self.refresh_secret)


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance, built from settings at first use."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService(get_settings())
    return _jwt_service
