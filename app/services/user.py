"""User service: persistence and credential handling for user records."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, defer

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import MAX_PASSWORD_BYTES, User, check_password

logger = logging.getLogger("streamline.users")

REQUIRED_FIELDS = ("full_name", "email", "username", "password")


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def check_password_length(password: str) -> None:
    """Reject passwords bcrypt cannot hash in full."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


class UserService:
    """Handles creation, lookup and mutation of user records."""

    def get_user(self, db: Session, user_id: int, include_secrets: bool = False) -> User | None:
        """Get a user by id. Password and refresh token are deferred unless requested."""
        query = db.query(User).filter(User.id == user_id)
        if not include_secrets:
            query = query.options(defer(User.password), defer(User.refresh_token))
        return query.first()

    def find_by_username_or_email(self, db: Session, username: str | None, email: str | None) -> User | None:
        """Find the first user matching either identifier (case-normalized)."""
        conditions = []
        if _normalize(username):
            conditions.append(User.username == _normalize(username))
        if _normalize(email):
            conditions.append(User.email == _normalize(email))
        if not conditions:
            return None
        return db.query(User).filter(or_(*conditions)).first()

    def ensure_available(self, db: Session, username: str, email: str) -> None:
        """Raise ConflictError if the username or email is already taken."""
        if self.find_by_username_or_email(db, username, email):
            raise ConflictError("User with email or username already exists")

    def create_user(
        self,
        db: Session,
        *,
        full_name: str,
        email: str,
        username: str,
        password: str,
        avatar: str,
        cover_image: str = "",
    ) -> User:
        """Create a user. The password is hashed by the model's pre-persist hook."""
        fields = {"full_name": full_name, "email": email, "username": username, "password": password}
        if any(not (fields[name] or "").strip() for name in REQUIRED_FIELDS):
            raise ValidationError("All fields are required")
        if not avatar:
            raise ValidationError("Avatar file is required")
        check_password_length(password)
        self.ensure_available(db, username, email)

        user = User(
            full_name=full_name.strip(),
            email=_normalize(email),
            username=_normalize(username),
            password=password,
            avatar=avatar,
            cover_image=cover_image or "",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    def verify_password(self, user: User, candidate: str | None) -> bool:
        """One-way comparison of a candidate password with the stored hash."""
        if not candidate:
            return False
        return check_password(candidate, user.password)

    def set_password(self, db: Session, user: User, new_password: str) -> None:
        """Replace the password; only this column is rehashed on flush."""
        if not (new_password or "").strip():
            raise ValidationError("New password is required")
        check_password_length(new_password)
        user.password = new_password
        db.commit()

    def set_refresh_token(self, db: Session, user_id: int, token: str) -> None:
        """Persist the current refresh token. An empty token revokes the session."""
        updated = db.query(User).filter(User.id == user_id).update({User.refresh_token: token or ""})
        db.commit()
        if not updated:
            raise NotFoundError("User does not exist")

    def update_account_details(
        self, db: Session, user: User, full_name: str | None = None, email: str | None = None
    ) -> User:
        """Update full name and/or email."""
        if full_name is None and email is None:
            raise ValidationError("At least one of the fields (fullName, email) must be present")
        if full_name is not None:
            if not full_name.strip():
                raise ValidationError("fullName cannot be empty")
            user.full_name = full_name.strip()
        if email is not None:
            normalized = _normalize(email)
            if not normalized:
                raise ValidationError("email cannot be empty")
            taken = db.query(User).filter(User.email == normalized, User.id != user.id).first()
            if taken:
                raise ConflictError("User with email or username already exists")
            user.email = normalized
        db.commit()
        db.refresh(user)
        return user

    def update_avatar(self, db: Session, user: User, url: str) -> User:
        user.avatar = url
        db.commit()
        db.refresh(user)
        return user

    def update_cover_image(self, db: Session, user: User, url: str) -> User:
        user.cover_image = url
        db.commit()
        db.refresh(user)
        return user


_user_service: UserService | None = None


def get_user_service() -> UserService:
    """Get singleton user service instance."""
    global _user_service
    if _user_service is None:
        _user_service = UserService()
    return _user_service
