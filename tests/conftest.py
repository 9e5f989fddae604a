"""Pytest configuration and fixtures."""

import os

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("ACCESS_TOKEN_EXPIRY", "15m")
os.environ.setdefault("REFRESH_TOKEN_EXPIRY", "7d")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, build_engine, get_db
from app.models.subscription import Subscription  # noqa: F401
from app.models.user import User, configure_hashing
from app.models.video import Video, WatchHistoryEntry  # noqa: F401
from app.services.media import MediaUploadResult, get_media_service
from app.services.user import UserService

TEST_PASSWORD = "password123"

configure_hashing(int(os.environ["BCRYPT_ROUNDS"]))


class FakeMediaService:
    """Stands in for the media host. Records uploads, can be told to fail."""

    def __init__(self) -> None:
        self.fail = False
        self.uploaded: list[str] = []

    async def upload_file(self, upload: UploadFile | None) -> MediaUploadResult | None:
        if upload is None or not upload.filename:
            return None
        await upload.read()
        if self.fail:
            return None
        self.uploaded.append(upload.filename)
        return MediaUploadResult(url=f"http://media.test/{upload.filename}")


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = build_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="media")
def media_fixture() -> FakeMediaService:
    return FakeMediaService()


@pytest.fixture(name="client")
def client_fixture(db_session: Session, media: FakeMediaService):
    """Create a test client with overridden DB and media dependencies and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media
    limiter.enabled = False
    # https so the cookie jar keeps and sends the secure session cookies
    with TestClient(app, base_url="https://testserver") as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> User:
    """Create user 'bob' directly in the store."""
    return UserService().create_user(
        db_session,
        full_name="Bob Builder",
        email="bob@example.com",
        username="bob",
        password=TEST_PASSWORD,
        avatar="http://media.test/bob.png",
    )


@pytest.fixture(name="logged_in")
def logged_in_fixture(client: TestClient, test_user: User) -> dict:
    """Log bob in through the API. Returns the response data (user + tokens)."""
    response = client.post("/api/v1/users/login", json={"username": "bob", "password": TEST_PASSWORD})
    assert response.status_code == 200
    return response.json()["data"]
