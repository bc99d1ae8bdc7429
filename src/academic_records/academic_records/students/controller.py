from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)
    students = container.student_service

    @app.route("/students", methods=["GET"], endpoint="students_list")
    @login_required
    def list_students():
        return jsonify([students.describe(s) for s in students.list_students(current_principal())])

    @app.route("/students/me", methods=["GET"], endpoint="students_me")
    @login_required
    def my_profile():
        return jsonify(students.describe(students.get_own_profile(current_principal())))

    @app.route("/students/faculty-list", methods=["GET"], endpoint="students_faculty_list")
    @login_required
    def faculty_list():
        faculty = container.faculty_service.list_faculty(current_principal())
        return jsonify([{"id": f.principal_id, "name": f.name, "email": f.email} for f in faculty])

    @app.route("/students/reconcile", methods=["POST"], endpoint="students_reconcile")
    @login_required
    def reconcile():
        return jsonify(students.reconcile_all(current_principal()).to_dict())

    @app.route("/students/<student_id>", methods=["GET"], endpoint="students_get")
    @login_required
    def get_student(student_id: str):
        return jsonify(students.describe(students.get_student(current_principal(), student_id)))

    @app.route("/students/<student_id>/recompute", methods=["POST"], endpoint="students_recompute")
    @login_required
    def recompute(student_id: str):
        return jsonify(students.recompute(current_principal(), student_id).to_dict())

    @app.route("/students", methods=["POST"], endpoint="students_create")
    @login_required
    def create_student():
        data = json_body()
        student = students.create_student(
            current_principal(),
            course_id=data.get("courseId"),
            faculty_id=data.get("facultyId"),
            user_id=data.get("userId"),
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify(students.describe(student)), 201

    @app.route("/students/<student_id>", methods=["PUT"], endpoint="students_update")
    @login_required
    def update_student(student_id: str):
        # Derived fields (marks, overallGrade, attendancePercentage) are never read from the body.
        data = json_body()
        student = students.update_student(
            current_principal(),
            student_id,
            course_id=data.get("courseId"),
            faculty_id=data.get("facultyId"),
            name=data.get("name"),
            email=data.get("email"),
        )
        return jsonify(students.describe(student))

    @app.route("/students/<student_id>", methods=["DELETE"], endpoint="students_delete")
    @login_required
    def delete_student(student_id: str):
        students.delete_student(current_principal(), student_id)
        return jsonify({"message": "Student deleted successfully"})
