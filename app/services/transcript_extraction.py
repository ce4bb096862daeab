"""
Service d'extraction de relevés de notes.

Flux :
  1. Valider l'entrée (un data URI non vide, bien formé, d'un type accepté) : aucun appel externe sinon
  2. Soumettre l'instruction fixe + le document au backend, avec le schéma de sortie
  3. Valider la réponse contre ExtractionResult : toute non-conformité est une erreur,
     jamais un résultat partiel

Pas de retry, pas de cache : chaque appel est indépendant.
"""

import logging

from pydantic import ValidationError

from app.exceptions import InvalidInputError, SchemaViolationError
from app.schemas.extraction import EXTRACTION_RESPONSE_SCHEMA, ExtractionResult, ExtractTranscriptInput
from app.services.document_encoder import check_content_type, split_data_uri
from app.services.extraction_backend import ExtractionBackend

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """You are an expert at extracting data from student transcripts.

Given a student transcript, extract the following information:

- A list of courses, including the name, grade, and credits earned for each course.
- The student's ID.
- The student's name.

If the student's name or ID cannot be identified with confidence, return an empty string for it.
If no course can be found, return an empty list of courses.
Credits must be a non-negative number.

The transcript is attached to this message.

Ensure that the extracted data is accurate and complete.
Return the data in JSON format.
"""


def validate_extraction_result(payload) -> ExtractionResult:
    """Valide une réponse brute du backend. Lève SchemaViolationError si elle est non conforme."""
    try:
        return ExtractionResult.model_validate(payload)
    except ValidationError as exc:
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        logger.warning("Réponse d'extraction non conforme au schéma : %d erreur(s)", len(errors))
        raise SchemaViolationError(
            "La réponse du backend ne respecte pas le schéma d'extraction.",
            errors=errors,
        ) from exc


async def extract_transcript_data(data: ExtractTranscriptInput, backend: ExtractionBackend) -> ExtractionResult:
    """
    Extrait nom, identifiant et cours d'un relevé encodé en data URI.

    Lève :
    - InvalidInputError : URI vide ou malformé (le backend n'est pas appelé)
    - UnsupportedFileTypeError : type MIME du document refusé (le backend n'est pas appelé)
    - BackendUnavailableError : échec transport/service du backend
    - SchemaViolationError : réponse non conforme à ExtractionResult
    """
    if not data.document_uri or not data.document_uri.strip():
        raise InvalidInputError("Aucun document fourni pour l'extraction.")
    mime_type, _ = split_data_uri(data.document_uri)
    check_content_type(mime_type)

    logger.info("Extraction demandée : document %s", mime_type)
    raw = await backend.generate(
        prompt=EXTRACTION_PROMPT,
        document_uri=data.document_uri.strip(),
        response_schema=EXTRACTION_RESPONSE_SCHEMA,
    )

    result = validate_extraction_result(raw)
    logger.info(
        "Extraction terminée : élève %s, %d cours",
        result.student_id or "non identifié", len(result.courses),
    )
    return result
