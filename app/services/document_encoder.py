"""
Encodeur de documents : fichier uploadé → data URI (data:<mime>;base64,<payload>).

Types acceptés : tout `text/*` et le format de document désigné (PDF).
Le type est vérifié avant toute lecture ; un type refusé ne déclenche aucun encodage.
"""

import base64
import binascii
import logging
import re
from typing import Tuple

from fastapi import UploadFile

from app.exceptions import EncodingError, InvalidInputError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

DOCUMENT_CONTENT_TYPES = {"application/pdf"}

DATA_URI_REGEX = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[^;,]*)*;base64,(?P<payload>[A-Za-z0-9+/=]+)$"
)


def _base_content_type(content_type: str) -> str:
    """Retire les paramètres (`; charset=...`) et normalise la casse."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_supported_content_type(content_type: str) -> bool:
    """Vrai pour les fichiers texte (`text/*`) et les documents PDF."""
    base = _base_content_type(content_type)
    return base.startswith("text/") or base in DOCUMENT_CONTENT_TYPES


def check_content_type(content_type: str) -> str:
    """Retourne le type de base normalisé. Lève UnsupportedFileTypeError s'il est refusé."""
    base = _base_content_type(content_type)
    if not is_supported_content_type(base):
        logger.warning("Type de fichier refusé : %s", content_type or "inconnu")
        raise UnsupportedFileTypeError(
            f"Type de fichier non supporté : {content_type or 'inconnu'}. "
            "Seuls les fichiers texte et PDF sont acceptés."
        )
    return base


def encode_document(content: bytes, content_type: str) -> str:
    """
    Encode le contenu d'un fichier en data URI.

    Lève UnsupportedFileTypeError si le type n'est pas accepté (avant encodage),
    InvalidInputError si le fichier est vide.
    """
    mime = check_content_type(content_type)
    if not content:
        raise InvalidInputError("Le fichier est vide.")
    payload = base64.b64encode(content).decode("ascii")
    return f"data:{mime};base64,{payload}"


async def encode_upload(file: UploadFile, max_size_bytes: int) -> str:
    """
    Lit un fichier uploadé et retourne son data URI.

    Ordre des vérifications : type déclaré, lecture, taille, encodage.
    Une erreur de lecture lève EncodingError : aucun URI partiel n'est produit.
    """
    check_content_type(file.content_type)

    try:
        content = await file.read()
    except OSError as exc:
        logger.error("Lecture du fichier %s impossible : %s", file.filename, exc)
        raise EncodingError(f"Impossible de lire le fichier {file.filename}.") from exc

    if len(content) > max_size_bytes:
        raise InvalidInputError(
            f"Fichier trop volumineux. Taille maximale : {max_size_bytes // (1024 * 1024)} Mo."
        )

    return encode_document(content, file.content_type)


def split_data_uri(uri: str) -> Tuple[str, str]:
    """
    Valide un data URI et retourne (type MIME, payload base64).
    Lève InvalidInputError si le format est incorrect ou le payload vide.
    """
    match = DATA_URI_REGEX.match((uri or "").strip())
    if not match:
        raise InvalidInputError(
            "Format de document invalide. Attendu : 'data:<mimetype>;base64,<encoded_data>'."
        )
    payload = match.group("payload")
    try:
        base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidInputError("Le contenu base64 du document est invalide.") from exc
    return match.group("mime").lower(), payload
