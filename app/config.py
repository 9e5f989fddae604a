"""Configuration settings for Streamline."""

import os
import re
import secrets
from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Parse an expiry like '15m', '1d', '10d' or a bare number of seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration '{value}'. Use <n>s, <n>m, <n>h, <n>d or seconds.")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./streamline.db")

    # Tokens
    ACCESS_TOKEN_SECRET: str = os.getenv("ACCESS_TOKEN_SECRET", "")
    ACCESS_TOKEN_EXPIRY: str = os.getenv("ACCESS_TOKEN_EXPIRY", "1d")
    REFRESH_TOKEN_SECRET: str = os.getenv("REFRESH_TOKEN_SECRET", "")
    REFRESH_TOKEN_EXPIRY: str = os.getenv("REFRESH_TOKEN_EXPIRY", "10d")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Passwords
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # Media host
    CLOUDINARY_CLOUD_NAME: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY: str = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET: str = os.getenv("CLOUDINARY_API_SECRET", "")
    MEDIA_UPLOAD_TIMEOUT: float = float(os.getenv("MEDIA_UPLOAD_TIMEOUT", "60"))

    # Upload
    PUBLIC_DIR: str = os.getenv("PUBLIC_DIR", "public")
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "tmp/uploads")  # never under PUBLIC_DIR, which is served at /
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "16"))

    # Application
    CORS_ORIGIN: str = os.getenv("CORS_ORIGIN", "*")
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    def __init__(self) -> None:
        # Unset secrets fall back to per-process random values
        self.access_secret_generated = not self.ACCESS_TOKEN_SECRET
        self.refresh_secret_generated = not self.REFRESH_TOKEN_SECRET
        if self.access_secret_generated:
            self.ACCESS_TOKEN_SECRET = secrets.token_urlsafe(32)
        if self.refresh_secret_generated:
            self.REFRESH_TOKEN_SECRET = secrets.token_urlsafe(32)

    @property
    def access_token_lifetime(self) -> timedelta:
        return parse_duration(self.ACCESS_TOKEN_EXPIRY)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return parse_duration(self.REFRESH_TOKEN_EXPIRY)

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if self.access_secret_generated:
            errors.append("ACCESS_TOKEN_SECRET is not set - using auto-generated key (not persistent across restarts)")
        if self.refresh_secret_generated:
            errors.append("REFRESH_TOKEN_SECRET is not set - using auto-generated key (not persistent across restarts)")
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            errors.append("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        if not (self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET):
            errors.append("Cloudinary configuration is missing - media uploads will fail")
        if Path(self.PUBLIC_DIR).resolve() in Path(self.UPLOAD_DIR).resolve().parents:
            errors.append("UPLOAD_DIR is inside PUBLIC_DIR - staged uploads are publicly downloadable")
        return errors

    def check_token_lifetimes(self) -> None:
        """Raise ValueError naming the first token expiry that does not parse."""
        for name in ("ACCESS_TOKEN_EXPIRY", "REFRESH_TOKEN_EXPIRY"):
            try:
                parse_duration(getattr(self, name))
            except ValueError as e:
                raise ValueError(f"{name}: {e}") from None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
