"""
Schémas Pydantic pour les élèves et leurs cours.

Les champs sont en snake_case côté Python et sérialisés en camelCase
(blob JSON durable et corps HTTP). Les deux écritures sont acceptées en entrée.
"""

import math
import uuid
from datetime import date
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


def parse_credits_or_zero(value: Any) -> float:
    """
    Convertit une valeur de crédits saisie (souvent une chaîne) en nombre.

    "3.5" → 3.5 ; "abc", "", "nan", "inf" ou None → 0.
    Les nombres sont retournés tels quels (float), hors NaN/infini → 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def new_id() -> str:
    """Identifiant unique (uuid4) pour un élève ou une ligne de cours."""
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(v: str) -> str:
    if not v.strip():
        raise ValueError("Le champ ne peut pas être vide.")
    return v.strip()


class CourseEntry(CamelModel):
    """Un cours suivi par l'élève (tel que stocké)."""
    id: str = Field(default_factory=new_id)
    name: str
    grade: str
    credits: float = Field(ge=0, allow_inf_nan=False)

    @field_validator("name", "grade")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("credits", mode="before")
    @classmethod
    def parse_credits(cls, v: Any) -> float:
        return parse_credits_or_zero(v)


class CourseEntryInput(CourseEntry):
    """Cours reçu en entrée : l'id est conservé s'il est fourni, généré sinon."""
    id: Optional[str] = None


class Student(CamelModel):
    """Élève tel que stocké dans le miroir durable et retourné par l'API."""
    id: str
    external_student_id: str = ""
    full_name: str
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: date
    profile_picture_url: Optional[str] = None
    courses: List[CourseEntry] = []
    academic_notes: Optional[str] = None

    @field_validator("id", "full_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v)


class StudentCreate(CamelModel):
    """Données de création d'un élève (chemin de validation du store)."""
    external_student_id: str = ""
    full_name: str
    email: Union[Literal[""], EmailStr] = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: date
    profile_picture_url: Optional[str] = None
    courses: List[CourseEntryInput] = []
    academic_notes: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("external_student_id")
    @classmethod
    def strip_external_id(cls, v: str) -> str:
        return v.strip()


class StudentUpdate(CamelModel):
    """
    Mise à jour partielle (PUT /students/{id}).
    Seuls les champs présents dans le corps sont remplacés ; `courses` est remplacé en bloc.
    """
    external_student_id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[Union[Literal[""], EmailStr]] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: Optional[date] = None
    profile_picture_url: Optional[str] = None
    courses: Optional[List[CourseEntryInput]] = None
    academic_notes: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return _not_blank(v)
        return v

    @field_validator("external_student_id")
    @classmethod
    def strip_external_id(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v is not None else v


class CourseFormData(CamelModel):
    """Ligne de cours du formulaire : les crédits arrivent sous forme de texte."""
    name: str
    grade: str
    credits: str = ""

    @field_validator("credits", mode="before")
    @classmethod
    def credits_as_text(cls, v: Any) -> str:
        # Un nombre JSON est accepté et ramené à sa forme texte
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class StudentFormData(CamelModel):
    """Formulaire d'inscription manuelle (POST /students) : identifiant externe et email obligatoires."""
    external_student_id: str
    full_name: str
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    enrollment_date: date
    profile_picture_url: Optional[str] = None
    courses: List[CourseFormData] = []
    academic_notes: Optional[str] = None

    @field_validator("external_student_id", "full_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _not_blank(v)
