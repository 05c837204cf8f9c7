import os

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["APP_SECRET"] = "test-secret"
os.environ["APP_ENV"] = "test"
os.environ["REDIS_URL"] = ""
os.environ["EMAIL_HOST"] = ""
os.environ["LEAD_EMAIL"] = ""
os.environ["RATE_LIMIT_AUTH"] = "100/minute"
os.environ["RATE_LIMIT_CONTACT"] = "100/minute"
os.environ["RATE_LIMIT_NEWSLETTER"] = "100/minute"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.agency.db import get_db
from backend.agency.main import app
from backend.agency.models import Base
from backend.agency.ratelimit import limiter
from backend.agency.services.auth_service import SessionService, TokenSigner


PASSWORD = "secret123"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(db):
    service = SessionService(db)
    accounts = {
        "super_admin": service.create_admin("root@example.com", PASSWORD, "Root", "User", role="super_admin"),
        "admin": service.create_admin("admin@example.com", PASSWORD, "Ada", "Admin", role="admin"),
        "editor": service.create_admin("editor@example.com", PASSWORD, "Eddie", "Editor", role="editor"),
    }
    inactive = service.create_admin("gone@example.com", PASSWORD, "Gone", "User", role="admin")
    accounts["inactive"] = service.deactivate(inactive)
    return accounts


@pytest.fixture
def token_for(users):
    signer = TokenSigner()

    def _token(role: str) -> str:
        return signer.issue(users[role])

    return _token


@pytest.fixture
def auth_headers(token_for):
    def _headers(role: str) -> dict:
        return {"Authorization": f"Bearer {token_for(role)}"}

    return _headers


@pytest.fixture
def client(session_factory, users):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    limiter.reset()
    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
