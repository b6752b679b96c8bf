"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from proflow.auth.schemas import Identity
from proflow.db.database import build_engine, init_db
from proflow.db.models import Base, Stage
from proflow.items.schemas import WorkItemDocument, WorkItemResponse
from proflow.store.cache import ItemCache
from proflow.store.sql import SqlItemStore

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = build_engine(SQLALCHEMY_TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    init_db(engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store(db: Session) -> SqlItemStore:
    """Create an item store on the test database."""
    return SqlItemStore(TestingSessionLocal)


@pytest.fixture
def cache(store: SqlItemStore) -> Generator[ItemCache, None, None]:
    """Create a cache subscribed to the test store."""
    item_cache = ItemCache()
    item_cache.attach(store)
    yield item_cache
    item_cache.detach()


@pytest.fixture
def make_document() -> Callable[..., WorkItemDocument]:
    """Factory for work item documents with sensible defaults."""

    def _make(**overrides) -> WorkItemDocument:
        fields = {
            "title": "DH-001",
            "client": "Anh Minh",
            "task_name": "Thiết kế tủ bếp",
            "stage": Stage.DESIGN,
            "start_date": "2024-03-05",
            "duration": 5,
            "priority": "Medium",
            "progress": 0,
            "created_at": 1_700_000_000_000,
        }
        fields.update(overrides)
        return WorkItemDocument(**fields)

    return _make


@pytest.fixture
def make_item(make_document) -> Callable[..., WorkItemResponse]:
    """Factory for stored-looking work items (with an id)."""
    counter = {"n": 0}

    def _make(**overrides) -> WorkItemResponse:
        counter["n"] += 1
        item_id = overrides.pop("id", f"item-{counter['n']}")
        document = make_document(**overrides)
        return WorkItemResponse(id=item_id, **document.model_dump())

    return _make


@pytest.fixture(scope="function")
def client(db: Session, store: SqlItemStore, cache: ItemCache) -> Generator[TestClient, None, None]:
    """Create a test client wired to the test store and cache."""
    # Import here to ensure env vars are set
    from proflow.dependencies import get_cache, get_db, get_store
    from proflow.main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_cache] = lambda: cache
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def test_identity() -> Identity:
    """An anonymous signed-in identity."""
    return Identity(user_id="anon-test-user")


@pytest.fixture
def authenticated_client(client: TestClient, test_identity: Identity) -> TestClient:
    """Create a signed-in test client."""
    from proflow.dependencies import require_user
    from proflow.main import app

    app.dependency_overrides[require_user] = lambda: test_identity
    yield client
    if require_user in app.dependency_overrides:
        del app.dependency_overrides[require_user]
