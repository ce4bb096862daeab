"""
Store des élèves : collection en mémoire, miroir durable dans LocalStorage.

Règles :
- Chaque mutation (create / update / delete) écrit d'abord la collection complète
  dans le stockage ; la collection en mémoire n'est remplacée qu'après succès.
  En cas d'échec (PersistenceError), mémoire et abonnés restent inchangés.
- Premier démarrage (clé absente) : deux élèves d'exemple sont créés et persistés.
  Ensuite, chargement strict depuis le stockage, sans re-seed.
  Un élève invalide dans le blob est ignoré (journalisé) sans écarter les autres.
- Les abonnés sont notifiés après une mutation réussie ; l'échec d'un abonné
  est journalisé et n'annule pas la mutation.
- Écritures concurrentes : dernier écrivain gagnant, sans contrôle de version.
"""

import json
import logging
from datetime import date
from typing import Callable, List, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import ValidationError

from app.config import settings
from app.exceptions import InvalidInputError
from app.schemas.student import CourseEntry, CourseEntryInput, Student, StudentCreate, StudentUpdate, new_id
from app.services.local_storage import LocalStorage

logger = logging.getLogger(__name__)

Listener = Callable[[List[Student]], None]


def placeholder_avatar_url(full_name: str) -> str:
    """Avatar par défaut, dérivé de l'initiale du nom complet."""
    initial = full_name.strip()[:1]
    return f"{settings.PLACEHOLDER_AVATAR_URL}?text={quote(initial)}"


def _seed_students() -> List[Student]:
    """Deux élèves d'exemple pour un tout premier démarrage."""
    return [
        Student(
            id=new_id(),
            external_student_id="S1001",
            full_name="Alice Wonderland",
            email="alice@example.com",
            phone="123-456-7890",
            address="123 Fantasy Lane, Dreamland",
            enrollment_date=date(2023, 9, 1),
            profile_picture_url=settings.PLACEHOLDER_AVATAR_URL,
            courses=[
                CourseEntry(name="Introduction to Magic", grade="A", credits=3),
                CourseEntry(name="Advanced Potion Making", grade="B+", credits=4),
            ],
            academic_notes="Excels in creative subjects.",
        ),
        Student(
            id=new_id(),
            external_student_id="S1002",
            full_name="Bob The Builder",
            email="bob@example.com",
            phone="987-654-3210",
            address="456 Construction Rd, Toontown",
            enrollment_date=date(2022, 8, 15),
            profile_picture_url=settings.PLACEHOLDER_AVATAR_URL,
            courses=[
                CourseEntry(name="Engineering Basics", grade="A-", credits=4),
                CourseEntry(name="Project Management", grade="A", credits=3),
            ],
            academic_notes="Strong practical skills.",
        ),
    ]


def _to_course_entries(courses: List[CourseEntryInput]) -> List[CourseEntry]:
    """Conserve l'id d'un cours déjà connu, en génère un sinon."""
    return [
        CourseEntry(id=c.id or new_id(), name=c.name, grade=c.grade, credits=c.credits)
        for c in courses
    ]


def serialize_students(students: List[Student]) -> str:
    """Forme durable de la collection : tableau JSON en camelCase, dates ISO."""
    return json.dumps(
        [s.model_dump(mode="json", by_alias=True, exclude_none=True) for s in students],
        ensure_ascii=False,
    )


def deserialize_students(raw: str) -> List[Student]:
    """
    Relit la collection durable, enregistrement par enregistrement.
    Un élève invalide est journalisé et ignoré ; les autres sont conservés.
    Lève ValueError si le blob n'est pas un tableau JSON.
    """
    items = json.loads(raw)
    if not isinstance(items, list):
        raise ValueError(f"tableau JSON attendu, reçu {type(items).__name__}")

    students = []
    for position, item in enumerate(items):
        try:
            students.append(Student.model_validate(item))
        except ValidationError as exc:
            logger.error("Élève ignoré au chargement (position %d) : %d erreur(s)", position, exc.error_count())
    return students


class StudentStore:
    """
    Propriétaire de la collection d'élèves.
    Instancié explicitement avec un LocalStorage et passé aux consommateurs.
    """

    def __init__(self, storage: LocalStorage, storage_key: Optional[str] = None):
        self.storage = storage
        self.storage_key = storage_key or settings.STUDENTS_STORAGE_KEY
        self._students: List[Student] = []
        self._listeners: List[Listener] = []
        self._load()

    # --- Chargement ---

    def _load(self) -> None:
        raw = self.storage.get_item(self.storage_key)
        if raw is None:
            seeded = _seed_students()
            self._persist(seeded)
            self._students = seeded
            logger.info("Store initialisé avec %d élèves d'exemple", len(seeded))
            return

        try:
            self._students = deserialize_students(raw)
        except ValueError as exc:
            logger.error("Données élèves illisibles dans le stockage (%s) : %s", self.storage_key, exc)
            self._students = []

    def _persist(self, students: List[Student]) -> None:
        self.storage.set_item(self.storage_key, serialize_students(students))

    def _commit(self, students: List[Student]) -> None:
        """Persiste puis remplace la collection en mémoire."""
        self._persist(students)
        self._students = students

    def _notify(self) -> None:
        """Notifie les abonnés. Une mutation déjà persistée n'échoue pas à cause d'un abonné."""
        for listener in list(self._listeners):
            try:
                listener(list(self._students))
            except Exception as exc:
                logger.error("Abonné du store en échec : %s", exc, exc_info=True)

    # --- Abonnements ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Enregistre un abonné notifié après chaque mutation réussie. Retourne la fonction de désabonnement."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Lecture ---

    def list_students(self) -> List[Student]:
        """Collection complète, dans l'ordre d'insertion."""
        return list(self._students)

    def search_students(self, term: str = "") -> List[Student]:
        """Filtre par nom, identifiant externe ou email (insensible à la casse)."""
        needle = (term or "").strip().lower()
        if not needle:
            return self.list_students()
        return [
            s for s in self._students
            if needle in s.full_name.lower()
            or needle in s.external_student_id.lower()
            or needle in s.email.lower()
        ]

    def get_student(self, student_id: str) -> Optional[Student]:
        """Retourne l'élève, ou None s'il n'existe pas."""
        return next((s for s in self._students if s.id == student_id), None)

    # --- Mutations ---

    def create_student(self, data: Union[StudentCreate, Mapping]) -> Student:
        """
        Crée un élève : id neuf, ids de cours manquants générés, avatar par défaut si absent.
        Lève InvalidInputError si les données sont invalides, PersistenceError si l'écriture échoue.
        """
        if not isinstance(data, StudentCreate):
            try:
                data = StudentCreate.model_validate(data)
            except ValidationError as exc:
                raise InvalidInputError(f"Données élève invalides : {exc.error_count()} erreur(s).") from exc

        fields = data.model_dump(exclude={"courses"})
        if not fields.get("profile_picture_url"):
            fields["profile_picture_url"] = placeholder_avatar_url(data.full_name)

        student = Student(id=new_id(), courses=_to_course_entries(data.courses), **fields)
        self._commit(self._students + [student])

        logger.info("Élève créé : %s (%s)", student.full_name, student.id)
        self._notify()
        return student

    def update_student(self, student_id: str, patch: Union[StudentUpdate, Mapping]) -> Optional[Student]:
        """
        Remplace les champs présents dans le patch (courses remplacé en bloc s'il est fourni).
        Retourne l'élève mis à jour, ou None s'il n'existe pas.
        """
        if not isinstance(patch, StudentUpdate):
            try:
                patch = StudentUpdate.model_validate(patch)
            except ValidationError as exc:
                raise InvalidInputError(f"Mise à jour invalide : {exc.error_count()} erreur(s).") from exc

        index = next((i for i, s in enumerate(self._students) if s.id == student_id), None)
        if index is None:
            return None

        changes = patch.model_dump(exclude_unset=True, exclude={"courses"})
        if "courses" in patch.model_fields_set:
            if patch.courses is None:
                raise InvalidInputError("La liste des cours ne peut pas être nulle.")
            changes["courses"] = _to_course_entries(patch.courses)

        merged = self._students[index].model_dump()
        merged.update(changes)
        try:
            updated = Student.model_validate(merged)
        except ValidationError as exc:
            raise InvalidInputError(f"Mise à jour invalide : {exc.error_count()} erreur(s).") from exc

        students = list(self._students)
        students[index] = updated
        self._commit(students)

        logger.info("Élève mis à jour : %s (%s) : champs %s", updated.full_name, updated.id, sorted(changes))
        self._notify()
        return updated

    def delete_student(self, student_id: str) -> bool:
        """Supprime l'élève. Retourne False (collection inchangée) s'il n'existe pas."""
        remaining = [s for s in self._students if s.id != student_id]
        if len(remaining) == len(self._students):
            return False

        self._commit(remaining)
        logger.info("Élève supprimé : %s", student_id)
        self._notify()
        return True
