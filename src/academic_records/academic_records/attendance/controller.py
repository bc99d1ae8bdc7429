from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)
    attendance = container.attendance_service

    @app.route("/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_attendance():
        return jsonify([r.to_dict() for r in attendance.list_attendance(current_principal())])

    @app.route("/attendance/faculty-list", methods=["GET"], endpoint="attendance_faculty_list")
    @login_required
    def faculty_list():
        faculty = container.faculty_service.list_faculty(current_principal())
        return jsonify([{"id": f.principal_id, "name": f.name, "email": f.email} for f in faculty])

    @app.route("/attendance/student/<student_id>", methods=["GET"], endpoint="attendance_for_student")
    @login_required
    def list_for_student(student_id: str):
        return jsonify([r.to_dict() for r in attendance.list_for_student(current_principal(), student_id)])

    @app.route("/attendance", methods=["POST"], endpoint="attendance_mark")
    @login_required
    def mark():
        data = json_body()
        result = attendance.mark(
            current_principal(),
            student_id=data.get("studentId"),
            attendance_date=data.get("date"),
            status=data.get("status"),
            remarks=data.get("remarks"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    @login_required
    def mark_bulk():
        data = json_body()
        result = attendance.mark_bulk(
            current_principal(),
            attendance_date=data.get("date"),
            entries=data.get("attendanceRecords"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/attendance/<attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def update(attendance_id: str):
        data = json_body()
        result = attendance.update(
            current_principal(),
            attendance_id,
            status=data.get("status"),
            remarks=data.get("remarks"),
        )
        return jsonify(result.to_dict())

    @app.route("/attendance/<attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def delete(attendance_id: str):
        result = attendance.delete(current_principal(), attendance_id)
        return jsonify({"message": "Attendance record deleted successfully", **result.to_dict()})
