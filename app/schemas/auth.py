"""
Schémas Pydantic du magasin d'identifiants fictif.
"""

from pydantic import BaseModel


class Credentials(BaseModel):
    """Couple nom d'utilisateur / mot de passe (inscription et connexion)."""
    username: str
    password: str


class UserResponse(BaseModel):
    username: str
