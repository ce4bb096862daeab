"""
Schémas Pydantic du brouillon d'inscription issu d'une extraction de relevé.

Un brouillon n'est pas encore un élève : il n'a pas d'id et n'est pas validé
par le store. Il passe par StudentCreate lors de la confirmation.
"""

from datetime import date
from typing import List, Optional

from pydantic import Field

from app.schemas.student import CamelModel, new_id


class CourseDraft(CamelModel):
    """Cours pré-rempli (crédits numériques, id stable pour la session d'édition)."""
    id: str = Field(default_factory=new_id)
    name: str
    grade: str
    credits: float = Field(allow_inf_nan=False)


class StudentDraft(CamelModel):
    """Élève pré-rempli à partir d'un relevé. L'email reste vide, à saisir par l'opérateur."""
    external_student_id: str = ""
    full_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: date
    profile_picture_url: Optional[str] = None
    courses: List[CourseDraft] = []
    academic_notes: Optional[str] = None
