"""
Tests unitaires pour la réconciliation extraction → brouillon d'inscription,
et pour la frontière formulaire (crédits saisis en texte).
"""

from datetime import date

import pytest

from app.exceptions import InvalidInputError
from app.schemas.extraction import ExtractionResult
from app.schemas.student import StudentFormData, parse_credits_or_zero
from app.services.enrollment_service import (
    confirm_enrollment,
    draft_to_form_data,
    form_data_to_create,
    reconcile_extraction,
)

TODAY = date(2026, 10, 19)


def make_result(**kwargs) -> ExtractionResult:
    data = {
        "studentName": "Jane Doe",
        "studentId": "S2002",
        "courses": [{"name": "Calculus I", "grade": "A", "credits": 3}],
    }
    data.update(kwargs)
    return ExtractionResult.model_validate(data)


def make_form(**kwargs) -> StudentFormData:
    data = {
        "externalStudentId": "S2002",
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "enrollmentDate": "2026-10-19",
        "courses": [{"name": "Calculus I", "grade": "A", "credits": "3"}],
    }
    data.update(kwargs)
    return StudentFormData.model_validate(data)


# ============================================================
# parse_credits_or_zero
# ============================================================

@pytest.mark.parametrize("value, expected", [
    ("3.5", 3.5),
    ("3", 3.0),
    (" 4 ", 4.0),
    ("abc", 0.0),
    ("", 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    (None, 0.0),
    (True, 0.0),
    (2, 2.0),
    (2.5, 2.5),
])
def test_parse_credits_or_zero(value, expected):
    result = parse_credits_or_zero(value)

    assert result == expected
    assert isinstance(result, float)


# ============================================================
# reconcile_extraction
# ============================================================

def test_scenario_jane_doe():
    draft = reconcile_extraction(make_result(), today=TODAY)

    assert draft.full_name == "Jane Doe"
    assert draft.external_student_id == "S2002"
    assert draft.email == ""
    assert draft.enrollment_date == TODAY
    assert len(draft.courses) == 1
    course = draft.courses[0]
    assert (course.name, course.grade, course.credits) == ("Calculus I", "A", 3)
    assert course.id


def test_resultat_vide():
    """Nom, identifiant et cours vides → brouillon vide, jamais None ni exception."""
    draft = reconcile_extraction(make_result(studentName="", studentId="", courses=[]), today=TODAY)

    assert draft.full_name == ""
    assert draft.external_student_id == ""
    assert draft.courses == []


def test_date_par_defaut_aujourd_hui():
    assert reconcile_extraction(make_result()).enrollment_date == date.today()


def test_ids_de_cours_distincts():
    draft = reconcile_extraction(make_result(courses=[
        {"name": "Calculus I", "grade": "A", "credits": 3},
        {"name": "Physics", "grade": "B", "credits": 4},
    ]))

    assert draft.courses[0].id != draft.courses[1].id


def test_reconciliation_sans_persistance(store):
    before = store.list_students()

    reconcile_extraction(make_result())

    assert store.list_students() == before


# ============================================================
# Formulaire
# ============================================================

def test_draft_vers_formulaire():
    draft = reconcile_extraction(make_result(courses=[
        {"name": "Calculus I", "grade": "A", "credits": 3},
        {"name": "Physics", "grade": "B", "credits": 3.5},
    ]), today=TODAY)

    form = draft_to_form_data(draft)

    assert form["fullName"] == "Jane Doe"
    assert form["externalStudentId"] == "S2002"
    assert form["email"] == ""
    assert form["enrollmentDate"] == "2026-10-19"
    assert [c["credits"] for c in form["courses"]] == ["3", "3.5"]
    assert form["courses"][0]["id"] == draft.courses[0].id


def test_formulaire_vers_creation():
    create = form_data_to_create(make_form(
        phone="",
        courses=[
            {"name": "Calculus I", "grade": "A", "credits": "3.5"},
            {"name": "Physics", "grade": "B", "credits": "abc"},
        ],
    ))

    assert [c.credits for c in create.courses] == [3.5, 0.0]
    assert create.phone is None


def test_formulaire_credits_negatifs_refuses():
    with pytest.raises(InvalidInputError):
        form_data_to_create(make_form(courses=[{"name": "Maths", "grade": "A", "credits": "-1"}]))


# ============================================================
# confirm_enrollment
# ============================================================

def test_confirmation_cree_l_eleve(store):
    draft = reconcile_extraction(make_result(), today=TODAY)

    student = confirm_enrollment(store, draft)

    assert store.get_student(student.id) == student
    assert student.full_name == "Jane Doe"
    assert student.external_student_id == "S2002"
    assert student.email == ""
    assert student.enrollment_date == TODAY
    assert student.courses[0].id == draft.courses[0].id


def test_confirmation_nom_vide_refusee(store):
    """Le brouillon passe par la validation de création : un nom vide est refusé."""
    draft = reconcile_extraction(make_result(studentName=""), today=TODAY)
    before = store.list_students()

    with pytest.raises(InvalidInputError):
        confirm_enrollment(store, draft)

    assert store.list_students() == before
