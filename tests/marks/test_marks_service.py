from __future__ import annotations

import logging

import pytest

from src.academic_records.academic_records.core.enums import ExamType
from src.academic_records.academic_records.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.academic_records.academic_records.marks.service import build_entry, normalize_exam_type


def add(world, faculty, student, *, obtained=45, max_marks=50, subject="Mathematics", exam_type="quiz", exam_date="2026-03-01"):
    return world.container.marks_service.add(
        world.caller(faculty),
        student_id=student.student_id,
        subject=subject,
        exam_type=exam_type,
        max_marks=max_marks,
        marks_obtained=obtained,
        exam_date=exam_date,
    )


def test_normalize_exam_type():
    assert normalize_exam_type("Mid-term") is ExamType.MIDTERM
    assert normalize_exam_type(" FINAL ") is ExamType.FINAL
    with pytest.raises(ValidationError, match="Valid values"):
        normalize_exam_type("oral")


def test_build_entry_derives_percentage_and_grade():
    entry = build_entry(subject="Programming", exam_type="project", max_marks="40", marks_obtained=37, exam_date="2026-03-01")
    assert entry.percentage == 93
    assert entry.grade == "A+"


@pytest.mark.parametrize(
    "max_marks, obtained",
    [
        (0, 0),
        (-5, 1),
        (50, 51),
        (50, -1),
        ("abc", 3),
        (50, None),
        ("nan", 3),
        (50, "nan"),
        ("inf", 3),
        (float("nan"), 3),
        (50, float("-inf")),
        (1_000_000, 3),
    ],
)
def test_build_entry_rejects_bad_numbers(max_marks, obtained):
    with pytest.raises(ValidationError):
        build_entry(subject="Math", exam_type="quiz", max_marks=max_marks, marks_obtained=obtained, exam_date="2026-03-01")


def test_add_recomputes_average_and_grade(world):
    result = add(world, world.faculty_a, world.alice, obtained=45, max_marks=50)

    assert result.record.percentage == 90
    assert result.record.grade == "A+"
    assert result.metrics_synced is True
    alice = world.reload(world.alice)
    assert (alice.average_marks, alice.overall_grade) == (90, "A+")

    add(world, world.faculty_a, world.alice, obtained=19, max_marks=20)
    alice = world.reload(world.alice)
    assert (alice.average_marks, alice.overall_grade) == (93, "A+")


def test_average_in_d_band(world):
    add(world, world.faculty_a, world.bob, obtained=45, max_marks=100)
    add(world, world.faculty_a, world.bob, obtained=40, max_marks=100)

    bob = world.reload(world.bob)
    assert (bob.average_marks, bob.overall_grade) == (43, "D")
    # The record ladder has no D.
    assert {m.grade for m in world.marks.list_all()} == {"F"}


def test_only_assigned_faculty_may_add(world):
    with pytest.raises(AuthorizationError):
        add(world, world.faculty_b, world.alice)
    with pytest.raises(AuthorizationError):
        add(world, world.admin, world.alice)
    assert world.marks.list_all() == []


def test_unknown_subject_is_logged_not_rejected(world, caplog):
    caplog.set_level(logging.WARNING, logger="academic_records")

    result = add(world, world.faculty_a, world.alice, subject="Astronomy")

    assert result.record.subject == "Astronomy"
    assert "not part of course" in caplog.text


def test_update_by_author_recomputes(world):
    record = add(world, world.faculty_a, world.alice, obtained=45, max_marks=50).record
    service = world.container.marks_service

    result = service.update(world.caller(world.faculty_a), record.mark_id, marks_obtained=30)

    assert result.record.percentage == 60
    assert result.record.grade == "C+"
    alice = world.reload(world.alice)
    assert (alice.average_marks, alice.overall_grade) == (60, "C+")


def test_update_validates_merged_values(world):
    record = add(world, world.faculty_a, world.alice, obtained=45, max_marks=50).record

    with pytest.raises(ValidationError):
        world.container.marks_service.update(world.caller(world.faculty_a), record.mark_id, max_marks=40)


def test_only_author_may_update_or_delete(world):
    record = add(world, world.faculty_a, world.alice).record
    service = world.container.marks_service

    # Reassign Alice to faculty B; the record still belongs to its author.
    world.students.update_assignment(world.alice.student_id, faculty_id=world.faculty_b.principal_id)

    with pytest.raises(AuthorizationError):
        service.update(world.caller(world.faculty_b), record.mark_id, marks_obtained=10)
    with pytest.raises(AuthorizationError):
        service.delete(world.caller(world.admin), record.mark_id)
    with pytest.raises(AuthorizationError):
        service.delete(world.student_caller(world.alice), record.mark_id)

    service.delete(world.caller(world.faculty_a), record.mark_id)
    alice = world.reload(world.alice)
    assert (alice.average_marks, alice.overall_grade) == (0, "N/A")


def test_delete_missing_record(world):
    with pytest.raises(NotFoundError):
        world.container.marks_service.delete(world.caller(world.faculty_a), 404)


def test_faculty_listing_is_limited_to_own_authored_marks(world):
    add(world, world.faculty_a, world.alice)
    add(world, world.faculty_a, world.bob)
    add(world, world.faculty_b, world.carol)
    # Carol moves to faculty A; her existing mark was authored by B.
    world.students.update_assignment(world.carol.student_id, faculty_id=world.faculty_a.principal_id)
    service = world.container.marks_service

    listed = service.list_marks(world.caller(world.faculty_a))
    assert {m.student_id for m in listed} == {world.alice.student_id, world.bob.student_id}
    assert service.list_for_student(world.caller(world.faculty_a), world.carol.student_id) == []
    assert len(service.list_marks(world.caller(world.admin))) == 3
    assert [m.student_id for m in service.list_marks(world.student_caller(world.carol))] == [world.carol.student_id]


def test_student_filters(world):
    add(world, world.faculty_a, world.alice, subject="Mathematics", exam_type="quiz")
    add(world, world.faculty_a, world.alice, subject="Mathematics", exam_type="Mid-term")
    add(world, world.faculty_a, world.alice, subject="Programming", exam_type="quiz")
    service = world.container.marks_service
    me = world.student_caller(world.alice)

    assert len(service.list_for_student(me, world.alice.student_id, subject="Mathematics")) == 2
    assert len(service.list_for_student(me, world.alice.student_id, exam_type="midterm")) == 1
    assert len(service.list_for_student(me, world.alice.student_id, subject="Programming", exam_type="quiz")) == 1

    with pytest.raises(AuthorizationError):
        service.list_for_student(me, world.bob.student_id)
