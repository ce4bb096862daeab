"""
Stockage durable clé/valeur (équivalent serveur du localStorage navigateur).

Chaque clé contient un blob texte, en pratique du JSON :
- STUDENTS_STORAGE_KEY : tableau des élèves
- USERS_STORAGE_KEY : mapping username → identifiant (magasin d'identifiants fictif)

Chaque écriture est commitée immédiatement : au retour de set_item, la base
reflète la nouvelle valeur, sinon PersistenceError est levée.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import PersistenceError
from app.models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)


class LocalStorage:
    """Accès aux blobs par clé, sur une session SQLAlchemy fournie par l'appelant."""

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        """Retourne le blob associé à la clé, ou None si la clé n'existe pas."""
        try:
            entry = self.db.get(StorageEntry, key)
        except SQLAlchemyError as exc:
            logger.error("Lecture impossible de la clé %s : %s", key, exc)
            raise PersistenceError(f"Lecture impossible de la clé {key}.") from exc
        return entry.value if entry is not None else None

    def set_item(self, key: str, value: str) -> None:
        """Crée ou remplace le blob de la clé et commit."""
        try:
            entry = self.db.get(StorageEntry, key)
            if entry is None:
                self.db.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Écriture impossible de la clé %s : %s", key, exc)
            raise PersistenceError(f"Écriture impossible de la clé {key}.") from exc

    def remove_item(self, key: str) -> None:
        """Supprime la clé si elle existe (sans erreur sinon)."""
        try:
            entry = self.db.get(StorageEntry, key)
            if entry is not None:
                self.db.delete(entry)
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Suppression impossible de la clé %s : %s", key, exc)
            raise PersistenceError(f"Suppression impossible de la clé {key}.") from exc
