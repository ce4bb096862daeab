"""
Router pour les élèves.
Listage / recherche (GET /api/v1/students)
Détail (GET /api/v1/students/{id})
Inscription manuelle (POST /api/v1/students)
Inscription depuis un brouillon de relevé (POST /api/v1/students/from-draft)
Mise à jour (PUT /api/v1/students/{id})
Suppression (DELETE /api/v1/students/{id})
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_student_store
from app.schemas.enrollment import StudentDraft
from app.schemas.student import Student, StudentFormData, StudentUpdate
from app.services import enrollment_service
from app.services.student_store import StudentStore

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])


@router.get("", response_model=List[Student], summary="Lister les élèves")
def list_students(q: Optional[str] = None, store: StudentStore = Depends(get_student_store)):
    """Retourne tous les élèves dans l'ordre d'inscription, filtrés par nom, identifiant ou email si `q` est fourni."""
    return store.search_students(q or "")


@router.get("/{student_id}", response_model=Student, summary="Détail d'un élève")
def get_student(student_id: str, store: StudentStore = Depends(get_student_store)):
    student = store.get_student(student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    return student


@router.post("", response_model=Student, status_code=201, summary="Inscrire un élève manuellement")
def create_student(data: StudentFormData, store: StudentStore = Depends(get_student_store)):
    """
    Inscrit un élève depuis le formulaire manuel.
    Les crédits sont saisis en texte : une valeur illisible est enregistrée comme 0.
    """
    return store.create_student(enrollment_service.form_data_to_create(data))


@router.post("/from-draft", response_model=Student, status_code=201,
             summary="Inscrire un élève depuis un brouillon de relevé")
def create_student_from_draft(draft: StudentDraft, store: StudentStore = Depends(get_student_store)):
    """
    Confirme un brouillon issu d'une extraction de relevé.
    Le brouillon passe par la validation de création : un nom vide est refusé (400).
    """
    return enrollment_service.confirm_enrollment(store, draft)


@router.put("/{student_id}", response_model=Student, summary="Modifier un élève")
def update_student(student_id: str, data: StudentUpdate, store: StudentStore = Depends(get_student_store)):
    """Met à jour les champs fournis d'un élève. Les champs absents ne sont pas modifiés."""
    student = store.update_student(student_id, data)
    if student is None:
        raise HTTPException(status_code=404, detail="Élève introuvable.")
    return student


@router.delete("/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(student_id: str, store: StudentStore = Depends(get_student_store)):
    """Supprime définitivement un élève."""
    if not store.delete_student(student_id):
        raise HTTPException(status_code=404, detail="Élève introuvable.")
