from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)
    marks = container.marks_service

    @app.route("/marks", methods=["GET"], endpoint="marks_list")
    @login_required
    def list_marks():
        return jsonify([m.to_dict() for m in marks.list_marks(current_principal())])

    @app.route("/marks/student/<student_id>", methods=["GET"], endpoint="marks_for_student")
    @login_required
    def list_for_student(student_id: str):
        records = marks.list_for_student(
            current_principal(),
            student_id,
            subject=request.args.get("subject"),
            exam_type=request.args.get("examType"),
        )
        return jsonify([m.to_dict() for m in records])

    @app.route("/marks", methods=["POST"], endpoint="marks_add")
    @login_required
    def add():
        data = json_body()
        result = marks.add(
            current_principal(),
            student_id=data.get("studentId"),
            subject=data.get("subject"),
            exam_type=data.get("examType"),
            max_marks=data.get("maxMarks"),
            marks_obtained=data.get("marksObtained"),
            exam_date=data.get("examDate"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/marks/<mark_id>", methods=["PUT"], endpoint="marks_update")
    @login_required
    def update(mark_id: str):
        # percentage and grade are recomputed; any values sent for them are ignored.
        data = json_body()
        result = marks.update(
            current_principal(),
            mark_id,
            subject=data.get("subject"),
            exam_type=data.get("examType"),
            max_marks=data.get("maxMarks"),
            marks_obtained=data.get("marksObtained"),
            exam_date=data.get("examDate"),
        )
        return jsonify(result.to_dict())

    @app.route("/marks/<mark_id>", methods=["DELETE"], endpoint="marks_delete")
    @login_required
    def delete(mark_id: str):
        result = marks.delete(current_principal(), mark_id)
        return jsonify({"message": "Marks deleted successfully", **result.to_dict()})
