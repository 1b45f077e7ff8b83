"""
Pytest configuration and fixtures for Marketplace tests.
"""

import io
import os

# Must be set before marketplace is imported: database.py builds its engine at import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("PUBLIC_DIR", "./test_public")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

from marketplace import auth, crud
from marketplace.database import Base, get_db
from marketplace.main import app as application
from marketplace.storage import AssetStore, get_asset_store


FIXED_TIME = 1700000000

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 64


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Provide database session for tests."""
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Storage Fixtures
# =============================================================================

@pytest.fixture
def store(tmp_path) -> AssetStore:
    """Asset store rooted in a temporary directory with a frozen clock."""
    return AssetStore(tmp_path, clock=lambda: FIXED_TIME)


def make_upload(filename="tomate.jpg", content=JPEG_BYTES, content_type="image/jpeg") -> UploadFile:
    """Build an UploadFile the way FastAPI hands one to a route."""
    return UploadFile(
        file=io.BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload():
    return make_upload


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def make_user(db_session):
    """Factory creating users directly through crud."""
    def _make_user(name="Ana Silva", email="ana@example.com", password="senha1234", avatar_ref=None):
        return crud.create_user(
            db_session,
            name=name,
            email=email,
            password_hash=auth.get_password_hash(password),
            avatar_ref=avatar_ref,
        )
    return _make_user


@pytest.fixture
def ctx_for():
    """Wrap a user in an AuthContext, as get_current_user would."""
    def _ctx_for(user, token_id=None):
        return auth.AuthContext(user=user, token_id=token_id or f"token-{user.id}")
    return _ctx_for


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(session_factory, store):
    """FastAPI application wired to the test database and asset store."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_asset_store] = lambda: store

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Provide HTTP client for API tests."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register through the API and return auth headers plus the response body."""
    def _register(name="Ana Silva", email="ana@example.com", password="senha1234", image=None):
        files = {"image": image} if image else None
        response = client.post(
            "/register",
            data={
                "name": name,
                "email": email,
                "password": password,
                "password_confirmation": password,
            },
            files=files,
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body
    return _register
