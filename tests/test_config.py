"""Tests for settings parsing and validation."""

from datetime import timedelta
from pathlib import Path

import pytest

from app.config import Settings, parse_duration


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("15m", timedelta(minutes=15)),
        ("1d", timedelta(days=1)),
        ("10d", timedelta(days=10)),
        ("12h", timedelta(hours=12)),
        ("30s", timedelta(seconds=30)),
        ("3600", timedelta(seconds=3600)),
    ],
)
def test_parse_duration(value: str, expected: timedelta):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "tomorrow", "5w", "-1d"])
def test_parse_duration_rejects(value: str):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_settings_from_environment():
    settings = Settings()
    assert settings.ACCESS_TOKEN_SECRET == "test-access-secret"
    assert settings.access_token_lifetime == timedelta(minutes=15)
    assert settings.refresh_token_lifetime == timedelta(days=7)


def test_validate_flags_shared_secret():
    settings = Settings()
    settings.REFRESH_TOKEN_SECRET = settings.ACCESS_TOKEN_SECRET
    assert any("must differ" in warning for warning in settings.validate())


def test_check_token_lifetimes_accepts_valid_expiries():
    Settings().check_token_lifetimes()


@pytest.mark.parametrize("name", ["ACCESS_TOKEN_EXPIRY", "REFRESH_TOKEN_EXPIRY"])
def test_check_token_lifetimes_rejects_bad_expiry(name: str):
    settings = Settings()
    setattr(settings, name, "15min")
    with pytest.raises(ValueError, match=name):
        settings.check_token_lifetimes()


def test_default_upload_dir_is_not_public():
    settings = Settings()
    public = Path(settings.PUBLIC_DIR).resolve()
    assert public not in Path(settings.UPLOAD_DIR).resolve().parents
    assert not any("UPLOAD_DIR" in warning for warning in settings.validate())


def test_validate_flags_public_upload_dir():
    settings = Settings()
    settings.UPLOAD_DIR = str(Path(settings.PUBLIC_DIR) / "temp")
    assert any(warning.startswith("UPLOAD_DIR") for warning in settings.validate())
