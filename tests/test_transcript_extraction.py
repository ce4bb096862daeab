"""
Tests unitaires pour le service d'extraction de relevés de notes.
Le backend est remplacé par un stub : aucun appel réseau.
"""

import asyncio
import json
import base64

import pytest
from pydantic import ValidationError

from app.exceptions import BackendUnavailableError, InvalidInputError, SchemaViolationError, UnsupportedFileTypeError
from app.schemas.extraction import EXTRACTION_RESPONSE_SCHEMA, ExtractionResult, ExtractTranscriptInput
from app.services.document_encoder import encode_document
from app.services.transcript_extraction import EXTRACTION_PROMPT, extract_transcript_data

TRANSCRIPT_TEXT = b"Jane Doe, ID S2002, Calculus I - A (3 credits)"


def make_input(content=TRANSCRIPT_TEXT, content_type="text/plain") -> ExtractTranscriptInput:
    return ExtractTranscriptInput(document_uri=encode_document(content, content_type))


def run(data, backend):
    return asyncio.run(extract_transcript_data(data, backend))


# ============================================================
# Cas nominaux
# ============================================================

def test_extraction_scenario_complet(make_backend):
    """Relevé texte → nom, identifiant et cours structurés."""
    backend = make_backend(response={
        "studentName": "Jane Doe",
        "studentId": "S2002",
        "courses": [{"name": "Calculus I", "grade": "A", "credits": 3}],
    })

    result = run(make_input(), backend)

    assert result.student_name == "Jane Doe"
    assert result.student_id == "S2002"
    assert len(result.courses) == 1
    assert result.courses[0].name == "Calculus I"
    assert result.courses[0].grade == "A"
    assert result.courses[0].credits == 3


def test_backend_recoit_instruction_document_et_schema(make_backend):
    backend = make_backend(response={"studentName": "", "studentId": "", "courses": []})
    data = make_input()

    run(data, backend)

    assert len(backend.calls) == 1
    call = backend.calls[0]
    assert call["prompt"] == EXTRACTION_PROMPT
    assert call["document_uri"] == data.document_uri
    assert call["response_schema"] is EXTRACTION_RESPONSE_SCHEMA


def test_champs_vides_acceptes(make_backend):
    """Nom/identifiant non trouvés → chaînes vides ; aucun cours → liste vide."""
    backend = make_backend(response={"studentName": "", "studentId": "", "courses": []})

    result = run(make_input(), backend)

    assert result.student_name == ""
    assert result.student_id == ""
    assert result.courses == []


def test_credits_decimaux(make_backend):
    backend = make_backend(response={
        "studentName": "Jane Doe",
        "studentId": "S2002",
        "courses": [{"name": "Physics", "grade": "B", "credits": 3.5}],
    })

    result = run(make_input(), backend)

    assert result.courses[0].credits == 3.5


def test_appels_independants(make_backend):
    """Pas de cache : deux appels identiques interrogent deux fois le backend."""
    backend = make_backend(response={"studentName": "", "studentId": "", "courses": []})
    data = make_input()

    run(data, backend)
    run(data, backend)

    assert len(backend.calls) == 2


def test_pdf_accepte(make_backend):
    backend = make_backend(response={"studentName": "", "studentId": "", "courses": []})
    run(make_input(b"%PDF-1.4 ...", "application/pdf"), backend)
    assert backend.calls[0]["document_uri"].startswith("data:application/pdf;base64,")


# ============================================================
# Entrée invalide (aucun appel backend)
# ============================================================

def test_uri_vide(make_backend):
    backend = make_backend(response={})

    with pytest.raises(InvalidInputError):
        run(ExtractTranscriptInput(document_uri=""), backend)

    assert backend.calls == []


def test_uri_malforme(make_backend):
    backend = make_backend(response={})

    with pytest.raises(InvalidInputError):
        run(ExtractTranscriptInput(document_uri="pas un data uri"), backend)

    assert backend.calls == []


def test_type_mime_refuse(make_backend):
    """Un data URI d'image n'est jamais transmis au backend."""
    backend = make_backend(response={})
    uri = "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()

    with pytest.raises(UnsupportedFileTypeError):
        run(ExtractTranscriptInput(document_uri=uri), backend)

    assert backend.calls == []


def test_entree_champ_supplementaire_refuse():
    """L'entrée contient exactement un champ."""
    uri = "data:text/plain;base64," + base64.b64encode(b"x").decode()
    with pytest.raises(ValidationError):
        ExtractTranscriptInput.model_validate({"documentUri": uri, "extra": "x"})


def test_entree_accepte_alias_camel_case():
    uri = "data:text/plain;base64," + base64.b64encode(b"x").decode()
    assert ExtractTranscriptInput.model_validate({"documentUri": uri}).document_uri == uri


# ============================================================
# Violations de schéma
# ============================================================

def test_cles_manquantes(make_backend):
    """{studentName} sans courses ni studentId → SchemaViolation, pas de résultat partiel."""
    backend = make_backend(response={"studentName": "X"})

    with pytest.raises(SchemaViolationError) as exc_info:
        run(make_input(), backend)

    missing = {err["loc"][0] for err in exc_info.value.errors if err["type"] == "missing"}
    assert missing == {"studentId", "courses"}


@pytest.mark.parametrize("response", [
    {"studentName": None, "studentId": "S1", "courses": []},
    {"studentName": "X", "studentId": 2002, "courses": []},
    {"studentName": "X", "studentId": "S1", "courses": None},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A", "credits": "3"}]},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A"}]},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A", "credits": -1}]},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A", "credits": True}]},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A", "credits": float("inf")}]},
    {"studentName": "X", "studentId": "S1", "courses": [{"name": "Maths", "grade": "A", "credits": float("nan")}]},
    ["Jane Doe", "S2002"],
    "Jane Doe",
    None,
])
def test_reponses_non_conformes(response, make_backend):
    with pytest.raises(SchemaViolationError):
        run(make_input(), make_backend(response=response))


def test_credits_infinity_json_refuses(make_backend):
    """json.loads accepte le jeton Infinity : il doit tout de même être refusé."""
    response = json.loads('{"studentName": "J", "studentId": "S", '
                          '"courses": [{"name": "C", "grade": "A", "credits": Infinity}]}')

    with pytest.raises(SchemaViolationError) as exc_info:
        run(make_input(), make_backend(response=response))

    assert exc_info.value.errors[0]["loc"] == ("courses", 0, "credits")


# ============================================================
# Erreurs backend
# ============================================================

def test_backend_indisponible_propage(make_backend):
    """Aucun retry : l'erreur remonte telle quelle, après un seul appel."""
    backend = make_backend(error=BackendUnavailableError("timeout"))

    with pytest.raises(BackendUnavailableError):
        run(make_input(), backend)

    assert len(backend.calls) == 1


# ============================================================
# Schéma déclaré au backend
# ============================================================

def test_schema_declare_aligne_sur_le_modele():
    """Les clés obligatoires déclarées au backend correspondent aux alias du modèle."""
    aliases = {field.alias for field in ExtractionResult.model_fields.values()}

    assert set(EXTRACTION_RESPONSE_SCHEMA["required"]) == aliases
    assert set(EXTRACTION_RESPONSE_SCHEMA["properties"]) == aliases
    course_schema = EXTRACTION_RESPONSE_SCHEMA["properties"]["courses"]["items"]
    assert set(course_schema["required"]) == {"name", "grade", "credits"}
