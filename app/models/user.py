"""User model and password hashing hooks."""

from datetime import datetime

import bcrypt
from sqlalchemy import Column, DateTime, Integer, String, event, inspect

from app.database import Base

# bcrypt ignores (v4) or rejects (v5) input past this many bytes
MAX_PASSWORD_BYTES = 72

# Work factor used by the persist hooks; set from settings at startup
_bcrypt_rounds = 10


def configure_hashing(rounds: int) -> None:
    global _bcrypt_rounds
    _bcrypt_rounds = rounds


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds or _bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Compare a plaintext candidate with a stored bcrypt hash."""
    candidate = password.encode("utf-8")
    if not password_hash or len(candidate) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(candidate, password_hash.encode("utf-8"))
    except ValueError:
        return False


class User(Base):
    """Registered user / channel owner."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    full_name = Column(String(256), nullable=False, index=True)
    avatar = Column(String(1024), nullable=False)  # media host url
    cover_image = Column(String(1024), nullable=False, default="")  # media host url
    password = Column(String(256), nullable=False)  # bcrypt hash once flushed
    refresh_token = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


@event.listens_for(User, "before_insert")
def _hash_password_on_insert(mapper, connection, target: User) -> None:
    target.password = hash_password(target.password)


@event.listens_for(User, "before_update")
def _hash_password_on_update(mapper, connection, target: User) -> None:
    # Only rehash when the password itself was assigned in this unit of work
    if inspect(target).attrs.password.history.has_changes():
        target.password = hash_password(target.password)
