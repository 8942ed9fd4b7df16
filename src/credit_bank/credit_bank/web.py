"""Shared HTTP plumbing for the feature controllers.

- bearer-token guard (``auth_required``) that resolves the caller's identity
- JSON error responses for domain exceptions
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from .core.enums import Role
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClassMismatchError,
    DomainError,
    DuplicateError,
    ExpiredError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from .container import Container

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    ValidationError: 400,
    ClassMismatchError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    DuplicateError: 409,
    ExpiredError: 410,
}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def _bearer_token() -> str:
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationError("Access token required")

    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Invalid Authorization header format")
    return token.strip()


def auth_required(container: "Container", *roles: Role):
    """Require a valid bearer token, and one of ``roles`` when given.

    The verified identity is stored in ``flask.g.identity``.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = container.auth_service.verify(_bearer_token())
            if roles and identity.role not in roles:
                raise AuthorizationError("Insufficient permissions")
            g.identity = identity
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        body = {"message": str(exc), "error": type(exc).__name__}
        response = jsonify(body)
        if status == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response, status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        message = "Route not found" if exc.code == 404 else exc.description
        return jsonify({"message": message}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        message = str(exc) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"message": "Something went wrong!", "error": message}), 500
