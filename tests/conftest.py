import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORAGE_ROOT", tempfile.mkdtemp(prefix="catalog-storage-"))
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.deps import get_blob_store
from app.database import Base, get_db
from app.models.product import Category, Color
from app.utils.cache import cache_service
from app.utils.storage import BlobStore


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


class InMemoryRedis:
    """Minimal stand-in for the Redis calls made by CacheService."""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop them afterwards."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def fake_cache(monkeypatch):
    client = InMemoryRedis()
    monkeypatch.setattr(cache_service, "client", client)
    return client


@pytest.fixture
def storage(tmp_path):
    """Blob store rooted in a per-test temporary directory."""
    store = BlobStore(str(tmp_path))
    app.dependency_overrides[get_blob_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_blob_store, None)


@pytest.fixture
def db_session():
    """Create database session for direct database access in tests."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def reference_data(db_session):
    """Seed one category and one color (both with ID 1)."""
    db_session.add_all([Category(id=1, name="Shoes"), Color(id=1, name="Red")])
    db_session.commit()


@pytest.fixture
def client(storage):
    """Create test client with fresh database for each test."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    """Register an admin, log in and return the Authorization header."""
    client.post(
        "/api/v1/admin/register",
        json={
            "first_name": "Ada",
            "last_name": "Admin",
            "email": "ada@example.com",
            "password": "s3cret-pass",
        },
    )
    response = client.post(
        "/api/v1/admin/login",
        json={"email": "ada@example.com", "password": "s3cret-pass"},
    )
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


def product_form(**overrides):
    """Multipart form fields for a valid product."""
    form = {
        "name": "Red Shoe",
        "description": "A red shoe",
        "status": "true",
        "stock": "10",
        "price": "49.90",
        "weight": "0.8",
        "category_id": "1",
        "color_id": "1",
    }
    form.update(overrides)
    return form


def image(name="photo.jpg", content=b"\xff\xd8\xff-fake-jpeg", content_type="image/jpeg"):
    return (name, content, content_type)
