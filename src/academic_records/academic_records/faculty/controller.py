from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)
    faculty = container.faculty_service

    @app.route("/faculty", methods=["GET"], endpoint="faculty_list")
    @login_required
    def list_faculty():
        return jsonify([f.summary() for f in faculty.list_faculty(current_principal())])

    @app.route("/faculty/<faculty_id>/students/count", methods=["GET"], endpoint="faculty_student_count")
    @login_required
    def student_count(faculty_id: str):
        return jsonify({"count": faculty.student_count(current_principal(), faculty_id)})

    @app.route("/faculty", methods=["POST"], endpoint="faculty_create")
    @login_required
    def create_faculty():
        data = json_body()
        created = faculty.create_faculty(
            current_principal(),
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify({"message": "Faculty created", "faculty": created.summary()}), 201

    @app.route("/faculty/<faculty_id>", methods=["PUT"], endpoint="faculty_update")
    @login_required
    def update_faculty(faculty_id: str):
        data = json_body()
        updated = faculty.update_faculty(
            current_principal(),
            faculty_id,
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify({"message": "Faculty updated", "faculty": updated.summary()})

    @app.route("/faculty/<faculty_id>", methods=["DELETE"], endpoint="faculty_delete")
    @login_required
    def delete_faculty(faculty_id: str):
        result = faculty.delete_faculty(current_principal(), faculty_id, reassign_to=json_body().get("reassignTo"))
        return jsonify(result.to_dict())
