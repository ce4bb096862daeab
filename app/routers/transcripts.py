"""
Router pour l'outil d'extraction de relevés de notes.
Upload + extraction (POST /api/v1/transcripts/extract)
Extraction depuis un data URI déjà encodé (POST /api/v1/transcripts/extract-uri)
Brouillon d'inscription (POST /api/v1/transcripts/draft)
"""

from fastapi import APIRouter, Depends, File, UploadFile

from app.config import settings
from app.dependencies import get_extraction_backend
from app.schemas.extraction import ExtractionResult, ExtractTranscriptInput
from app.services import enrollment_service
from app.services.document_encoder import encode_upload
from app.services.extraction_backend import ExtractionBackend
from app.services.transcript_extraction import extract_transcript_data

router = APIRouter(prefix="/api/v1/transcripts", tags=["Relevés de notes"])


@router.post("/extract", response_model=ExtractionResult, summary="Extraire les données d'un relevé")
async def extract_from_upload(
    file: UploadFile = File(...),
    backend: ExtractionBackend = Depends(get_extraction_backend),
):
    """
    Encode le fichier uploadé (texte ou PDF) puis extrait nom, identifiant et cours.

    Erreurs :
    - 415 : type de fichier non supporté (aucun appel au backend)
    - 400 : fichier vide, trop volumineux ou illisible
    - 502 : réponse du backend non conforme au schéma
    - 503 : backend indisponible
    """
    document_uri = await encode_upload(file, settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024)
    return await extract_transcript_data(ExtractTranscriptInput(document_uri=document_uri), backend)


@router.post("/extract-uri", response_model=ExtractionResult, summary="Extraire depuis un document encodé")
async def extract_from_uri(
    data: ExtractTranscriptInput,
    backend: ExtractionBackend = Depends(get_extraction_backend),
):
    """
    Même extraction à partir d'un data URI déjà encodé.
    Permet de relancer une extraction échouée sans ré-uploader le document.
    """
    return await extract_transcript_data(data, backend)


@router.post("/draft", summary="Préparer une inscription depuis un résultat d'extraction")
def build_enrollment_draft(result: ExtractionResult):
    """
    Retourne le brouillon d'inscription (`draft`, à confirmer via POST /students/from-draft)
    et sa version formulaire (`formData`, crédits en texte) pour l'édition.
    Aucune persistance.
    """
    draft = enrollment_service.reconcile_extraction(result)
    return {
        "draft": draft.model_dump(mode="json", by_alias=True),
        "formData": enrollment_service.draft_to_form_data(draft),
    }
