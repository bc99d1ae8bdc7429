from __future__ import annotations

import pytest

from conftest import add_principal

from src.academic_records.academic_records.core.enums import Role
from src.academic_records.academic_records.core.exceptions import (
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ReassignmentRequiredError,
    ValidationError,
)


def add_students(world, faculty, count):
    ids = []
    for i in range(count):
        account = add_principal(world.principals, f"Extra {i}", f"extra{i}@example.edu", Role.STUDENT)
        ids.append(
            world.students.create(
                user_id=account.principal_id,
                course_id=world.course.course_id,
                faculty_id=faculty.principal_id,
            )
        )
    return ids


def test_delete_without_dependents_needs_no_target(world):
    lonely = add_principal(world.principals, "Lonely Faculty", "lonely@example.edu", Role.FACULTY)

    result = world.container.faculty_service.delete_faculty(world.caller(world.admin), lonely.principal_id)

    assert result.students_reassigned == 0
    assert world.principals.get_by_id(lonely.principal_id) is None


def test_zero_dependents_ignores_bad_target(world):
    lonely = add_principal(world.principals, "Lonely Faculty", "lonely@example.edu", Role.FACULTY)

    result = world.container.faculty_service.delete_faculty(world.caller(world.admin), lonely.principal_id, reassign_to="999")

    assert result.to_dict()["studentsReassigned"] == 0


def test_dependents_require_reassignment(world):
    service = world.container.faculty_service
    before = world.students.list_all()

    with pytest.raises(ReassignmentRequiredError) as excinfo:
        service.delete_faculty(world.caller(world.admin), world.faculty_a.principal_id)

    assert excinfo.value.student_count == 2
    assert world.students.list_all() == before
    assert world.principals.get_by_id(world.faculty_a.principal_id) is not None


def test_reassign_then_delete(world):
    other = add_principal(world.principals, "Xavier Faculty", "xavier@example.edu", Role.FACULTY)
    add_students(world, world.faculty_a, 1)

    result = world.container.faculty_service.delete_faculty(
        world.caller(world.admin),
        str(world.faculty_a.principal_id),
        reassign_to=str(other.principal_id),
    )

    assert result.to_dict() == {
        "message": "Faculty deleted",
        "studentsReassigned": 3,
        "reassignedTo": other.principal_id,
    }
    assert world.students.count_by_faculty(world.faculty_a.principal_id) == 0
    assert world.students.count_by_faculty(other.principal_id) == 3
    assert world.principals.get_by_id(world.faculty_a.principal_id) is None
    # Untouched faculty keeps its student.
    assert world.students.count_by_faculty(world.faculty_b.principal_id) == 1


@pytest.mark.parametrize("target", ["self", "admin", "student", "999"])
def test_invalid_reassignment_target_changes_nothing(world, target):
    reassign_to = {
        "self": world.faculty_a.principal_id,
        "admin": world.admin.principal_id,
        "student": world.alice.user_id,
        "999": 999,
    }[target]

    with pytest.raises(ValidationError):
        world.container.faculty_service.delete_faculty(
            world.caller(world.admin),
            world.faculty_a.principal_id,
            reassign_to=reassign_to,
        )
    assert world.students.count_by_faculty(world.faculty_a.principal_id) == 2
    assert world.principals.get_by_id(world.faculty_a.principal_id) is not None


def test_failed_final_delete_is_retryable(world):
    service = world.container.faculty_service
    world.principals.fail_next_delete = True

    with pytest.raises(RuntimeError):
        service.delete_faculty(
            world.caller(world.admin),
            world.faculty_a.principal_id,
            reassign_to=world.faculty_b.principal_id,
        )
    # Dependents already moved; the orphaned principal is harmless.
    assert world.students.count_by_faculty(world.faculty_a.principal_id) == 0
    assert world.principals.get_by_id(world.faculty_a.principal_id) is not None

    result = service.delete_faculty(world.caller(world.admin), world.faculty_a.principal_id)

    assert result.students_reassigned == 0
    assert world.principals.get_by_id(world.faculty_a.principal_id) is None
    assert world.students.count_by_faculty(world.faculty_b.principal_id) == 3


def test_delete_unknown_or_non_faculty(world):
    service = world.container.faculty_service
    with pytest.raises(NotFoundError):
        service.delete_faculty(world.caller(world.admin), 999)
    with pytest.raises(NotFoundError):
        service.delete_faculty(world.caller(world.admin), world.admin.principal_id)


def test_faculty_crud_is_admin_only(world):
    service = world.container.faculty_service
    with pytest.raises(AuthorizationError):
        service.list_faculty(world.caller(world.faculty_a))
    with pytest.raises(AuthorizationError):
        service.delete_faculty(world.caller(world.faculty_b), world.faculty_a.principal_id, reassign_to=world.faculty_b.principal_id)
    assert world.students.count_by_faculty(world.faculty_a.principal_id) == 2


def test_create_update_and_count(world):
    service = world.container.faculty_service
    admin = world.caller(world.admin)

    created = service.create_faculty(admin, name="Hal Faculty", email="HAL@example.edu", password="hal12345")
    assert created.role is Role.FACULTY
    assert created.email == "hal@example.edu"

    with pytest.raises(DuplicateError):
        service.create_faculty(admin, name="Hal Two", email="hal@example.edu", password="hal12345")
    with pytest.raises(ValidationError):
        service.create_faculty(admin, name="No Password", email="np@example.edu", password="")

    updated = service.update_faculty(admin, created.principal_id, name="Hal Renamed")
    assert updated.name == "Hal Renamed"
    with pytest.raises(DuplicateError):
        service.update_faculty(admin, created.principal_id, email="frank@example.edu")

    assert [f.name for f in service.list_faculty(admin)] == ["Frank Faculty", "Grace Faculty", "Hal Renamed"]
    assert service.student_count(admin, world.faculty_a.principal_id) == 2
    assert service.student_count(admin, created.principal_id) == 0
