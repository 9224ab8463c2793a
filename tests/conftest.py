"""Pytest configuration and fixtures."""

import os

# Must be set before jolly_auth.config is imported
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from jolly_auth.config import get_settings  # noqa: E402
from jolly_auth.database import Base, get_db  # noqa: E402
from jolly_auth.models.reset_token import ResetToken  # noqa: E402, F401
from jolly_auth.models.user import User  # noqa: E402, F401
from jolly_auth.services.auth import AuthService  # noqa: E402
from jolly_auth.services.jwt import get_jwt_service  # noqa: E402
from jolly_auth.services.mailer import MailerError, get_mailer  # noqa: E402


class FakeMailer:
    """Records outgoing mail instead of talking to an SMTP server."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, subject: str, body: str, send_to: str, sent_from: str | None = None) -> None:
        if self.fail:
            raise MailerError("Connection refused")
        self.sent.append({"subject": subject, "body": body, "send_to": send_to, "sent_from": sent_from})


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mailer")
def mailer_fixture() -> FakeMailer:
    return FakeMailer()


@pytest.fixture(name="auth_service")
def auth_service_fixture() -> AuthService:
    return AuthService(get_settings(), get_jwt_service())


@pytest.fixture(name="client")
def client_fixture(db_session: Session, mailer: FakeMailer):
    """Create a test client with overridden DB and mailer dependencies."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, auth_service: AuthService):
    """Create a test user and return its public fields plus token."""
    result = auth_service.register(db_session, "Test User", "test@example.com", "password123")

    return {
        "id": result.user.id,
        "name": result.user.name,
        "email": result.user.email,
        "token": result.token,
    }
