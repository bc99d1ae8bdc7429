from __future__ import annotations

from datetime import date

from conftest import marks_entry

from src.academic_records.academic_records.core.enums import AttendanceStatus


def test_recompute_from_raw_records(world):
    for day, status in ((1, AttendanceStatus.PRESENT), (2, AttendanceStatus.LATE), (3, AttendanceStatus.ABSENT)):
        world.attendance.create(
            student_id=world.alice.student_id,
            faculty_id=world.faculty_a.principal_id,
            attendance_date=date(2026, 3, day),
            status=status,
        )
    world.marks.create(student_id=world.alice.student_id, created_by=world.faculty_a.principal_id, entry=marks_entry(percentage=90, grade="A+"))
    world.marks.create(student_id=world.alice.student_id, created_by=world.faculty_a.principal_id, entry=marks_entry(percentage=95, grade="A+"))

    metrics = world.container.metrics_service.recompute_student(world.alice.student_id)

    assert metrics.to_dict() == {
        "studentId": world.alice.student_id,
        "attendancePercentage": 67,
        "marks": 93,
        "overallGrade": "A+",
    }
    stored = world.reload(world.alice)
    assert (stored.attendance_percentage, stored.average_marks, stored.overall_grade) == (67, 93, "A+")


def test_recompute_is_idempotent(world):
    world.attendance.create(
        student_id=world.bob.student_id,
        faculty_id=world.faculty_a.principal_id,
        attendance_date=date(2026, 3, 1),
        status=AttendanceStatus.ABSENT,
    )
    service = world.container.metrics_service

    first = service.recompute_student(world.bob.student_id)
    snapshot = world.reload(world.bob)
    second = service.recompute_student(world.bob.student_id)

    assert first == second
    assert world.reload(world.bob) == snapshot


def test_no_records_means_defaults(world):
    world.students.update_metrics(world.carol.student_id, attendance_percentage=55, average_marks=70, overall_grade="B")

    world.container.metrics_service.recompute_student(world.carol.student_id)

    carol = world.reload(world.carol)
    assert (carol.attendance_percentage, carol.average_marks, carol.overall_grade) == (0, 0, "N/A")


def test_refresh_reports_failure_without_raising(world):
    world.students.fail_metrics = True

    assert world.container.metrics_service.refresh_after_attendance_write(world.alice.student_id) is False
    assert world.container.metrics_service.refresh_after_marks_write(world.alice.student_id) is False


def test_reconcile_all_rebuilds_every_student(world):
    # Simulate drift left behind by a failed post-write recomputation.
    world.students.update_metrics(world.alice.student_id, attendance_percentage=12, average_marks=99, overall_grade="A+")
    world.attendance.create(
        student_id=world.bob.student_id,
        faculty_id=world.faculty_a.principal_id,
        attendance_date=date(2026, 3, 1),
        status=AttendanceStatus.PRESENT,
    )

    report = world.container.metrics_service.reconcile_all()

    assert report.to_dict() == {"checked": 3, "reconciled": 3, "failed": []}
    alice = world.reload(world.alice)
    assert (alice.attendance_percentage, alice.average_marks, alice.overall_grade) == (0, 0, "N/A")
    assert world.reload(world.bob).attendance_percentage == 100


def test_reconcile_all_collects_failures(world):
    world.students.fail_metrics = True

    report = world.container.metrics_service.reconcile_all()

    assert report.checked == 3
    assert report.failed == [world.alice.student_id, world.bob.student_id, world.carol.student_id]
