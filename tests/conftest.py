"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from leaveflow.core.approval import (
    ApprovalService,
    InMemoryApprovalRepository,
    RequestLockRegistry,
    WorkflowCatalog,
)
from leaveflow.db.base import Base
from leaveflow.db.seed import seed_users
from leaveflow.db.session import build_engine

from tests.factories import ALICE, BOB, JANE, make_request


@pytest.fixture
def two_level_request():
    """Levels [{Jane, Bob; ANY}, {Alice; ALL}], nothing decided yet."""
    return make_request()


@pytest.fixture
def memory_repository():
    return InMemoryApprovalRepository()


@pytest.fixture
def service(memory_repository):
    """Approval service over an in-memory store with its own lock registry."""
    return ApprovalService(
        memory_repository,
        catalog=WorkflowCatalog.default(),
        locks=RequestLockRegistry(),
    )


@pytest.fixture
def db_engine():
    """In-memory SQLite database shared across threads."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    """API client backed by the in-memory database and the default catalog."""
    from leaveflow.api.deps import get_catalog, get_db
    from leaveflow.api.main import app

    session = session_factory()
    seed_users(session, [JANE, BOB, ALICE])
    session.close()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = WorkflowCatalog.default
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
