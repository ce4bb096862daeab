"""
Réconciliation extraction → inscription.

Transforme un ExtractionResult en brouillon d'élève (StudentDraft) :
- studentId → external_student_id, studentName → full_name
- chaque cours extrait devient une ligne de cours (crédits numériques, id neuf)
- email vide (à saisir par l'opérateur), date d'inscription = aujourd'hui

Le brouillon n'est jamais persisté ici : confirm_enrollment le fait passer par
le chemin de création normal du store, qui le valide.
"""

import logging
from datetime import date
from typing import Optional

from pydantic import ValidationError

from app.exceptions import InvalidInputError
from app.schemas.enrollment import CourseDraft, StudentDraft
from app.schemas.extraction import ExtractionResult
from app.schemas.student import CourseEntryInput, Student, StudentCreate, StudentFormData, parse_credits_or_zero
from app.services.student_store import StudentStore

logger = logging.getLogger(__name__)


def reconcile_extraction(result: ExtractionResult, today: Optional[date] = None) -> StudentDraft:
    """Construit le brouillon d'inscription à partir d'un résultat d'extraction."""
    return StudentDraft(
        external_student_id=result.student_id or "",
        full_name=result.student_name or "",
        email="",
        enrollment_date=today or date.today(),
        courses=[
            CourseDraft(name=c.name, grade=c.grade, credits=c.credits)
            for c in result.courses
        ],
    )


def _format_credits(credits: float) -> str:
    """3.0 → "3", 3.5 → "3.5" (affichage dans un champ texte)."""
    return str(int(credits)) if float(credits).is_integer() else str(credits)


def draft_to_form_data(draft: StudentDraft) -> dict:
    """
    Pré-remplissage du formulaire d'inscription (clés camelCase).
    Les crédits sont convertis en texte, les champs optionnels absents en chaîne vide.
    """
    return {
        "externalStudentId": draft.external_student_id,
        "fullName": draft.full_name,
        "email": draft.email,
        "phone": draft.phone or "",
        "address": draft.address or "",
        "enrollmentDate": draft.enrollment_date.isoformat(),
        "profilePictureUrl": draft.profile_picture_url or "",
        "courses": [
            {"id": c.id, "name": c.name, "grade": c.grade, "credits": _format_credits(c.credits)}
            for c in draft.courses
        ],
        "academicNotes": draft.academic_notes or "",
    }


def form_data_to_create(form: StudentFormData) -> StudentCreate:
    """
    Frontière formulaire → store : les crédits texte sont convertis
    (valeur illisible → 0), les champs optionnels vides deviennent absents.
    """
    try:
        return StudentCreate(
            external_student_id=form.external_student_id,
            full_name=form.full_name,
            email=form.email,
            phone=form.phone or None,
            address=form.address or None,
            enrollment_date=form.enrollment_date,
            profile_picture_url=form.profile_picture_url or None,
            courses=[
                CourseEntryInput(name=c.name, grade=c.grade, credits=parse_credits_or_zero(c.credits))
                for c in form.courses
            ],
            academic_notes=form.academic_notes or None,
        )
    except ValidationError as exc:
        raise InvalidInputError(f"Formulaire invalide : {exc.error_count()} erreur(s).") from exc


def confirm_enrollment(store: StudentStore, draft: StudentDraft) -> Student:
    """
    Inscrit l'élève décrit par le brouillon via le chemin de création du store.
    Lève InvalidInputError si le brouillon ne passe pas la validation (ex. nom vide).
    """
    payload = draft.model_dump()
    for field in ("phone", "address", "profile_picture_url", "academic_notes"):
        if not payload.get(field):
            payload[field] = None

    student = store.create_student(payload)
    logger.info("Inscription confirmée depuis un relevé : %s (%s)", student.full_name, student.id)
    return student
