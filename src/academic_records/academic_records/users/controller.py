from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_principal, json_body, make_login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    login_required = make_login_required(container.auth_service.authenticate_header)

    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        result = container.auth_service.login(data.get("email"), data.get("password"))
        return jsonify(result.to_dict())

    @app.route("/auth/register", methods=["POST"], endpoint="auth_register")
    def register_account():
        data = json_body()
        result = container.auth_service.register(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
        )
        return jsonify(result.to_dict()), 201

    @app.route("/auth/verify", methods=["GET"], endpoint="auth_verify")
    @login_required
    def verify():
        principal = container.auth_service.verify(current_principal())
        return jsonify({"valid": True, "user": principal.summary()})

    @app.route("/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @login_required
    def change_password():
        data = json_body()
        container.auth_service.change_password(
            current_principal(),
            current_password=data.get("currentPassword"),
            new_password=data.get("newPassword"),
        )
        return jsonify({"message": "Password changed successfully"})
