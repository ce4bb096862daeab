"""
Magasin d'identifiants fictif, partageant le stockage clé/valeur des élèves.

- USERS_STORAGE_KEY : mapping JSON username → hash bcrypt du mot de passe
- CURRENT_USER_STORAGE_KEY : {"username": ...} de la session courante

Ce n'est pas un système d'authentification : une seule session globale,
aucune notion de jeton.
"""

import json
import logging
from typing import Dict, Optional

import bcrypt

from app.config import settings
from app.exceptions import InvalidInputError, UserAlreadyExistsError
from app.schemas.auth import Credentials
from app.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)

# bcrypt ne hache que les 72 premiers octets et refuse au-delà
BCRYPT_MAX_PASSWORD_BYTES = 72


def _get_users(storage: LocalStorage) -> Dict[str, str]:
    raw = storage.get_item(settings.USERS_STORAGE_KEY)
    if not raw:
        return {}
    try:
        users = json.loads(raw)
    except ValueError as exc:
        logger.error("Liste d'utilisateurs illisible : %s", exc)
        return {}
    return users if isinstance(users, dict) else {}


def _save_users(storage: LocalStorage, users: Dict[str, str]) -> None:
    storage.set_item(settings.USERS_STORAGE_KEY, json.dumps(users))


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def register(storage: LocalStorage, credentials: Credentials) -> None:
    """
    Enregistre un nouvel utilisateur.
    Lève InvalidInputError si un champ est vide ou le mot de passe trop long,
    UserAlreadyExistsError si le nom d'utilisateur existe déjà.
    """
    username = credentials.username.strip()
    if not username or not credentials.password:
        raise InvalidInputError("Nom d'utilisateur et mot de passe obligatoires.")
    if len(credentials.password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise InvalidInputError(
            f"Le mot de passe ne peut pas dépasser {BCRYPT_MAX_PASSWORD_BYTES} octets."
        )

    users = _get_users(storage)
    if username in users:
        raise UserAlreadyExistsError("Ce nom d'utilisateur existe déjà.")

    users[username] = _hash_password(credentials.password)
    _save_users(storage, users)
    logger.info("Utilisateur enregistré : %s", username)


def login(storage: LocalStorage, credentials: Credentials) -> Optional[str]:
    """Ouvre la session si les identifiants sont valides. Retourne le nom d'utilisateur, ou None."""
    username = credentials.username.strip()
    hashed = _get_users(storage).get(username)
    if hashed is None or not _check_password(credentials.password, hashed):
        logger.warning("Échec de connexion pour %s", username or "(vide)")
        return None

    storage.set_item(settings.CURRENT_USER_STORAGE_KEY, json.dumps({"username": username}))
    logger.info("Connexion : %s", username)
    return username


def logout(storage: LocalStorage) -> None:
    """Ferme la session courante."""
    storage.remove_item(settings.CURRENT_USER_STORAGE_KEY)


def get_current_user(storage: LocalStorage) -> Optional[str]:
    """
    Retourne l'utilisateur de la session courante, ou None.
    Une session dont l'utilisateur n'existe plus est effacée.
    """
    raw = storage.get_item(settings.CURRENT_USER_STORAGE_KEY)
    if not raw:
        return None

    try:
        username = json.loads(raw).get("username")
    except (ValueError, AttributeError):
        username = None

    if not username or username not in _get_users(storage):
        storage.remove_item(settings.CURRENT_USER_STORAGE_KEY)
        return None
    return username
