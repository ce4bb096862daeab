"""
Router du magasin d'identifiants fictif (inscription, connexion, session courante).
"""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_storage
from app.schemas.auth import Credentials, UserResponse
from app.services import auth_service
from app.services.local_storage import LocalStorage

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/register", status_code=201, response_model=UserResponse, summary="Créer un compte")
def register(data: Credentials, storage: LocalStorage = Depends(get_storage)):
    """Crée un compte. Nom déjà pris → 409, champ vide ou mot de passe trop long → 400."""
    auth_service.register(storage, data)
    return UserResponse(username=data.username.strip())


@router.post("/login", response_model=UserResponse, summary="Se connecter")
def login(data: Credentials, storage: LocalStorage = Depends(get_storage)):
    username = auth_service.login(storage, data)
    if username is None:
        raise HTTPException(status_code=401, detail="Nom d'utilisateur ou mot de passe invalide.")
    return UserResponse(username=username)


@router.post("/logout", status_code=204, summary="Se déconnecter")
def logout(storage: LocalStorage = Depends(get_storage)):
    auth_service.logout(storage)


@router.get("/me", response_model=UserResponse, summary="Utilisateur connecté")
def current_user(storage: LocalStorage = Depends(get_storage)):
    username = auth_service.get_current_user(storage)
    if username is None:
        raise HTTPException(status_code=401, detail="Aucun utilisateur connecté.")
    return UserResponse(username=username)
