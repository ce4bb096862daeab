"""
Point d'entrée principal de l'API StudentHub.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.database import init_db
from app.exceptions import SchemaViolationError, StudentHubError
from app.routers import auth, students, transcripts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : crée la table de stockage si nécessaire."""
    init_db()
    yield


app = FastAPI(
    title="StudentHub API",
    description="Gestion des dossiers élèves et extraction assistée de relevés de notes",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(students.router)
app.include_router(transcripts.router)
app.include_router(auth.router)


@app.exception_handler(StudentHubError)
async def studenthub_exception_handler(request: Request, exc: StudentHubError) -> JSONResponse:
    """
    Traduit la taxonomie d'erreurs métier en réponses HTTP (voir app.exceptions).
    Une violation de schéma inclut le détail des erreurs de validation.
    """
    if exc.status_code >= 500:
        logger.error("%s sur %s : %s", type(exc).__name__, request.url.path, exc.message)
    else:
        logger.warning("%s sur %s : %s", type(exc).__name__, request.url.path, exc.message)

    content = {"detail": exc.message, "error": type(exc).__name__}
    if isinstance(exc, SchemaViolationError):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "StudentHub API", "version": "0.1.0"}
