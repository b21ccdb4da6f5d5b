"""Shared JSON plumbing for the Flask controllers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
)
from ..users.model import Actor

logger = logging.getLogger(__name__)

_CORS_METHODS = "GET, POST, PATCH, PUT, DELETE, OPTIONS"
_CORS_HEADERS = "Content-Type, Authorization, X-Requested-With"


def status_for(e: DomainError) -> int:
    if isinstance(e, AuthenticationError):
        return 401
    if isinstance(e, AuthorizationError):
        return 403
    if isinstance(e, NotFoundError):
        return 404
    return 400


def read_json() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def current_actor(container) -> Optional[Actor]:
    return container.auth_service.resolve(session.get("user_id"))


def install_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        return jsonify({"error": str(e)}), status_for(e)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def _pick_origin(allowed: Iterable[str]) -> str:
    allowed = [o.strip() for o in allowed if o and o.strip()]
    if not allowed or "*" in allowed:
        return "*"
    origin = request.headers.get("Origin")
    return origin if origin in allowed else allowed[0]


def install_cors(app: Flask, allowed_origins: Iterable[str]) -> None:
    """Add CORS headers to every /api/ response and answer preflights."""
    allowed_origins = list(allowed_origins)

    @app.before_request
    def _preflight():
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            return app.make_response(("", 200))
        return None

    @app.after_request
    def _cors_headers(response):
        if request.path.startswith("/api/"):
            response.headers["Access-Control-Allow-Origin"] = _pick_origin(allowed_origins)
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = _CORS_METHODS
            response.headers["Access-Control-Allow-Headers"] = _CORS_HEADERS
        return response
