"""
Dépendances FastAPI partagées par les routers.

Le store est construit par requête à partir de la session BDD : il se charge
depuis le miroir durable à chaque initialisation (aucun singleton global).
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.services.extraction_backend import ExtractionBackend, GeminiBackend
from app.services.local_storage import LocalStorage
from app.services.student_store import StudentStore


def get_storage(db: Session = Depends(get_db)) -> LocalStorage:
    return LocalStorage(db)


def get_student_store(storage: LocalStorage = Depends(get_storage)) -> StudentStore:
    return StudentStore(storage)


def get_extraction_backend() -> ExtractionBackend:
    """Backend d'extraction configuré (surchargé par un stub dans les tests)."""
    return GeminiBackend(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_API_BASE_URL,
        timeout=settings.EXTRACTION_TIMEOUT_SECONDS,
    )
