"""Tests for the token issuer."""

from datetime import timedelta

import pytest
from jose import jwt

from app.config import Settings
from app.errors import InvalidTokenError
from app.services.jwt import JWTService

CLAIMS = {"id": 7, "email": "bob@example.com", "username": "bob", "fullName": "Bob Builder"}


@pytest.fixture(name="service")
def service_fixture() -> JWTService:
    settings = Settings()
    settings.ACCESS_TOKEN_SECRET = "access-secret"
    settings.REFRESH_TOKEN_SECRET = "refresh-secret"
    settings.ACCESS_TOKEN_EXPIRY = "15m"
    settings.REFRESH_TOKEN_EXPIRY = "7d"
    return JWTService(settings)


class TestAccessToken:
    def test_roundtrip_claims(self, service: JWTService):
        token = service.issue_access_token(CLAIMS)
        claims = service.verify(token, "access-secret")
        assert claims["sub"] == "7"
        assert claims["email"] == "bob@example.com"
        assert claims["username"] == "bob"
        assert claims["fullName"] == "Bob Builder"

    def test_wrong_secret(self, service: JWTService):
        token = service.issue_access_token(CLAIMS)
        with pytest.raises(InvalidTokenError):
            service.verify(token, "refresh-secret")

    def test_lifetime(self, service: JWTService):
        claims = service.verify_access_token(service.issue_access_token(CLAIMS))
        assert claims["exp"] - claims["iat"] == 15 * 60

    def test_expired(self, service: JWTService):
        service.access_lifetime = timedelta(seconds=-10)
        token = service.issue_access_token(CLAIMS)
        with pytest.raises(InvalidTokenError):
            service.verify_access_token(token)

    def test_malformed(self, service: JWTService):
        with pytest.raises(InvalidTokenError):
            service.verify_access_token("definitely-not-a-jwt")

    def test_missing_subject(self, service: JWTService):
        token = jwt.encode({"email": "x@example.com"}, "access-secret", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            service.verify_access_token(token)


class TestRefreshToken:
    def test_carries_only_user_id(self, service: JWTService):
        claims = service.verify_refresh_token(service.issue_refresh_token(7))
        assert claims["sub"] == "7"
        assert "email" not in claims
        assert "username" not in claims
        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_not_valid_as_access_token(self, service: JWTService):
        with pytest.raises(InvalidTokenError):
            service.verify_access_token(service.issue_refresh_token(7))

    def test_consecutive_tokens_differ(self, service: JWTService):
        assert service.issue_refresh_token(7) != service.issue_refresh_token(7)
