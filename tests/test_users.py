"""Tests for the user service and password hashing."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.subscription import Subscription
from app.models.user import User, configure_hashing, hash_password
from app.services.user import UserService

FIELDS = {
    "full_name": "Alice Liddell",
    "email": "alice@example.com",
    "username": "alice",
    "password": "wonderland",
    "avatar": "http://media.test/alice.png",
}


@pytest.fixture(name="service")
def service_fixture() -> UserService:
    return UserService()


class TestCreateUser:
    def test_password_is_hashed(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        assert user.password != "wonderland"
        assert service.verify_password(user, "wonderland") is True
        assert service.verify_password(user, "Wonderland") is False
        assert service.verify_password(user, "") is False

    @pytest.mark.parametrize("field", ["full_name", "email", "username", "password"])
    def test_blank_required_field(self, service: UserService, db_session: Session, field: str):
        with pytest.raises(ValidationError):
            service.create_user(db_session, **{**FIELDS, field: "  "})

    def test_missing_avatar(self, service: UserService, db_session: Session):
        with pytest.raises(ValidationError):
            service.create_user(db_session, **{**FIELDS, "avatar": ""})

    def test_duplicate_username(self, service: UserService, db_session: Session):
        service.create_user(db_session, **FIELDS)
        with pytest.raises(ConflictError):
            service.create_user(db_session, **{**FIELDS, "email": "other@example.com"})

    def test_duplicate_email(self, service: UserService, db_session: Session):
        service.create_user(db_session, **FIELDS)
        with pytest.raises(ConflictError):
            service.create_user(db_session, **{**FIELDS, "username": "ALICE2", "email": "Alice@Example.com"})

    def test_oversized_password(self, service: UserService, db_session: Session):
        with pytest.raises(ValidationError):
            service.create_user(db_session, **{**FIELDS, "password": "x" * 100})


class TestHashing:
    def test_configured_rounds(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        assert user.password.startswith("$2b$04$")

    def test_explicit_rounds_win(self):
        assert hash_password("pw", rounds=5).startswith("$2b$05$")

    def test_configure_hashing(self):
        configure_hashing(5)
        try:
            assert hash_password("pw").startswith("$2b$05$")
        finally:
            configure_hashing(4)


class TestPasswordWrites:
    def test_set_password_rehashes(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        old_hash = user.password

        service.set_password(db_session, user, "through-the-looking-glass")

        db_session.expire_all()
        stored = db_session.get(User, user.id)
        assert stored.password != old_hash
        assert stored.password != "through-the-looking-glass"
        assert service.verify_password(stored, "through-the-looking-glass")
        assert not service.verify_password(stored, "wonderland")

    def test_unrelated_write_keeps_hash(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        old_hash = user.password

        service.update_account_details(db_session, user, full_name="Alice L.")
        service.set_refresh_token(db_session, user.id, "some-token")

        db_session.expire_all()
        stored = db_session.get(User, user.id)
        assert stored.password == old_hash
        assert stored.full_name == "Alice L."
        assert service.verify_password(stored, "wonderland")


class TestRefreshTokenStorage:
    def test_set_and_revoke(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        service.set_refresh_token(db_session, user.id, "token-1")
        assert service.get_user(db_session, user.id, include_secrets=True).refresh_token == "token-1"

        service.set_refresh_token(db_session, user.id, "")
        db_session.expire_all()
        assert db_session.get(User, user.id).refresh_token == ""

    def test_unknown_user(self, service: UserService, db_session: Session):
        with pytest.raises(NotFoundError):
            service.set_refresh_token(db_session, 999, "token")


class TestAccountDetails:
    def test_requires_a_field(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        with pytest.raises(ValidationError):
            service.update_account_details(db_session, user)

    def test_email_conflict(self, service: UserService, db_session: Session):
        service.create_user(db_session, **FIELDS)
        other = service.create_user(db_session, **{**FIELDS, "username": "bob", "email": "bob@example.com"})
        with pytest.raises(ConflictError):
            service.update_account_details(db_session, other, email="ALICE@example.com")

    def test_lookup_by_either_identifier(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        assert service.find_by_username_or_email(db_session, "ALICE", None).id == user.id
        assert service.find_by_username_or_email(db_session, None, "alice@example.com").id == user.id
        assert service.find_by_username_or_email(db_session, None, None) is None


class TestForeignKeys:
    def test_subscription_needs_existing_users(self, service: UserService, db_session: Session):
        user = service.create_user(db_session, **FIELDS)
        db_session.add(Subscription(subscriber_id=user.id, channel_id=999))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()
