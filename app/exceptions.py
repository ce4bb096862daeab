"""
Taxonomie des erreurs métier de StudentHub.

Chaque erreur porte le code HTTP vers lequel elle est traduite par le handler
enregistré dans app.main. Une absence (élève introuvable) n'est pas une erreur :
les services retournent None / False.
"""

from typing import Any, List, Optional


class StudentHubError(Exception):
    """Erreur de base. `status_code` est utilisé par le handler FastAPI."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(StudentHubError, ValueError):
    """Données fournies par l'appelant vides ou malformées (avant tout effet externe)."""

    status_code = 400


class UnsupportedFileTypeError(StudentHubError):
    """Type MIME refusé par l'encodeur de documents."""

    status_code = 415


class EncodingError(StudentHubError):
    """Lecture ou encodage du fichier impossible."""

    status_code = 400


class BackendUnavailableError(StudentHubError):
    """Échec transport ou service lors de l'appel au backend d'extraction."""

    status_code = 503


class SchemaViolationError(StudentHubError):
    """Le backend a répondu, mais le contenu ne respecte pas le schéma de sortie."""

    status_code = 502

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.errors = errors or []


class PersistenceError(StudentHubError):
    """L'écriture du miroir durable n'a pas abouti."""

    status_code = 500


class UserAlreadyExistsError(StudentHubError, ValueError):
    """Nom d'utilisateur déjà enregistré dans le magasin d'identifiants."""

    status_code = 409
