from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)
    courses = container.course_service

    @app.route("/courses", methods=["GET"], endpoint="courses_list")
    @login_required
    def list_courses():
        return jsonify([c.to_dict() for c in courses.list_courses(current_principal())])

    @app.route("/courses/<course_id>", methods=["GET"], endpoint="courses_get")
    @login_required
    def get_course(course_id: str):
        return jsonify(courses.get_course(current_principal(), course_id).to_dict())

    @app.route("/courses", methods=["POST"], endpoint="courses_create")
    @login_required
    def create_course():
        data = json_body()
        course = courses.create_course(current_principal(), name=data.get("name"), subjects=data.get("subjects"))
        return jsonify(course.to_dict()), 201

    @app.route("/courses/<course_id>", methods=["PUT"], endpoint="courses_update")
    @login_required
    def update_course(course_id: str):
        data = json_body()
        course = courses.update_course(
            current_principal(),
            course_id,
            name=data.get("name"),
            subjects=data.get("subjects"),
        )
        return jsonify(course.to_dict())

    @app.route("/courses/<course_id>", methods=["DELETE"], endpoint="courses_delete")
    @login_required
    def delete_course(course_id: str):
        courses.delete_course(current_principal(), course_id)
        return jsonify({"message": "Course deleted successfully"})
