"""
Schémas Pydantic de l'extraction de relevés de notes.

Entrée : un unique champ `documentUri` (data:<mime>;base64,<payload>).
Sortie : ExtractionResult, validé strictement (aucune conversion de type,
toutes les clés obligatoires, null refusé).
"""

from typing import List

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.student import CamelModel


class ExtractTranscriptInput(CamelModel):
    """Requête d'extraction : le document encodé, rien d'autre."""
    document_uri: str = Field(
        description=(
            "Relevé de notes sous forme de data URI avec type MIME et encodage Base64. "
            "Format attendu : 'data:<mimetype>;base64,<encoded_data>'."
        ),
    )

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class ExtractedCourse(CamelModel):
    """Cours identifié dans le relevé."""
    name: str = Field(strict=True)
    grade: str = Field(strict=True)
    credits: float = Field(ge=0, strict=True, allow_inf_nan=False)


class ExtractionResult(CamelModel):
    """
    Résultat de l'extraction (éphémère, jamais stocké).
    Nom et identifiant valent "" s'ils n'ont pas été trouvés ; courses vaut [] si aucun cours.
    """
    student_name: str = Field(strict=True)
    student_id: str = Field(strict=True)
    courses: List[ExtractedCourse]


# Schéma de réponse déclaré au backend (sous-ensemble OpenAPI accepté par responseSchema).
# Doit rester aligné avec ExtractionResult.
EXTRACTION_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "courses": {
            "type": "ARRAY",
            "description": "A list of courses extracted from the transcript.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING", "description": "The name of the course."},
                    "grade": {"type": "STRING", "description": "The grade received in the course."},
                    "credits": {
                        "type": "NUMBER",
                        "description": "The number of credits earned for the course.",
                    },
                },
                "required": ["name", "grade", "credits"],
            },
        },
        "studentId": {"type": "STRING", "description": "The ID of the student."},
        "studentName": {"type": "STRING", "description": "The name of the student."},
    },
    "required": ["courses", "studentId", "studentName"],
}
