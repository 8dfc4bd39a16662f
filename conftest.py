"""
Fixtures compartidos: SQLite en memoria (StaticPool) y TestClient con get_db sobreescrito.
Ejecutar desde la raíz: pytest
"""
import os
from datetime import datetime, timezone

# Antes de importar gpt_habits: la config se lee al importar
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LIVE_AUTO_ADVANCE"] = "false"
os.environ["ADMIN_PASSPHRASE"] = "test-passphrase"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gpt_habits.db.base import Base
from gpt_habits.db.session import get_db
from gpt_habits.main import app

T0 = datetime(2026, 3, 4, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        s = session_factory()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    r = client.post("/api/v1/auth/admin/login", json={"passphrase": "test-passphrase"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}
