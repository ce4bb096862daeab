"""
Configuration partagée pour tous les tests.
Base SQLite en mémoire (une par test) à la place du fichier de stockage réel,
et backend d'extraction remplacé par un stub.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import get_extraction_backend
from app.main import app
from app.models.storage_entry import StorageEntry  # noqa: F401
from app.services.extraction_backend import ExtractionBackend
from app.services.local_storage import LocalStorage
from app.services.student_store import StudentStore


class StubBackend(ExtractionBackend):
    """Backend factice : retourne une réponse fixée (ou lève une erreur) et enregistre les appels."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, prompt, document_uri, response_schema):
        self.calls.append({"prompt": prompt, "document_uri": document_uri, "response_schema": response_schema})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def db_session():
    """Session sur une base SQLite en mémoire, partagée entre threads (TestClient)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def storage(db_session):
    return LocalStorage(db_session)


@pytest.fixture
def store(storage):
    """Store fraîchement initialisé (contient les deux élèves d'exemple)."""
    return StudentStore(storage)


@pytest.fixture
def make_backend():
    """Fabrique de backends factices (réponse fixée ou erreur)."""
    return StubBackend


@pytest.fixture
def stub_backend():
    return StubBackend(response={
        "studentName": "Jane Doe",
        "studentId": "S2002",
        "courses": [{"name": "Calculus I", "grade": "A", "credits": 3}],
    })


@pytest.fixture
def client(db_session, stub_backend):
    """Client HTTP de test avec la BDD en mémoire et le backend d'extraction stubé."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_extraction_backend] = lambda: stub_backend
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
