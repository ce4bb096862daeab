"""
Configuration de la connexion à la base de données.
Le stockage durable est une simple table clé/valeur (voir app.models.storage_entry).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

from app.config import settings

# SQLite : la session est utilisée depuis le threadpool de FastAPI
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Crée les tables manquantes (appelé au démarrage de l'API)."""
    # Enregistre les modèles dans Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
