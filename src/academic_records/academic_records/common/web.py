from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateError,
    NotFoundError,
    ReassignmentRequiredError,
    ValidationError,
)
from ..core.logger import get_logger
from ..users.model import AuthenticatedPrincipal

logger = get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type, int]] = [
    # Most specific first.
    (DuplicateError, 409),
    (ReassignmentRequiredError, 409),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
]


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def current_principal() -> AuthenticatedPrincipal:
    return g.principal


def make_login_required(authenticate: Callable[[Any], AuthenticatedPrincipal]):
    """Build the bearer-token guard; runs before any handler logic."""

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.principal = authenticate(request.headers.get("Authorization"))
            return view(*args, **kwargs)

        return wrapper

    return login_required


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        body: dict = {"message": str(error)}
        if isinstance(error, ReassignmentRequiredError):
            body["error"] = "Reassignment required"
            body["studentCount"] = error.student_count
        response = jsonify(body)
        response.status_code = status
        if status == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        if bool(app.config.get("DEBUG", False)):
            return jsonify({"message": "Internal server error", "error": str(error)}), 500
        return jsonify({"message": "Internal server error"}), 500
