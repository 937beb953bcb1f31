"""
Shared fixtures: in-memory SQLite database, per-test attachment storage,
profile factory and authenticated TestClient.
"""
import os

# must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_CREATE_ALL"] = "0"
os.environ["ENABLE_SCHEDULER"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aviasafe.core.auth import get_db
from aviasafe.core.security import create_access_token
from aviasafe.crud.profile import create_profile
from aviasafe.main import app
from aviasafe.models import Base
from aviasafe.services.storage import ObjectStorage, get_storage

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage(tmp_path):
    store = ObjectStorage(root=str(tmp_path / "objects"), bucket="attachments")
    store.ensure_bucket()
    return store


@pytest.fixture
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role="reporter", email=None, full_name=None, password=TEST_PASSWORD):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        return create_profile(
            db,
            email=email,
            password=password,
            full_name=full_name or f"{role.title()} {counter['n']}",
            role=role,
        )

    return _make


def _bearer_for(profile):
    token = create_access_token({"sub": profile.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer_for():
    return _bearer_for


@pytest.fixture
def reporter(make_profile):
    return make_profile("reporter")


@pytest.fixture
def investigator(make_profile):
    return make_profile("investigator", full_name="Ana Investigator")


@pytest.fixture
def admin(make_profile):
    return make_profile("admin")


@pytest.fixture
def auth_client(client, reporter):
    client.headers.update(_bearer_for(reporter))
    return client


@pytest.fixture
def occurrence(auth_client):
    resp = auth_client.post(
        "/api/occurrences",
        json={"title": "Bird strike on final approach", "severity": "high"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["occurrence"]
