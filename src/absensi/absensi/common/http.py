from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Dict, Optional, Type

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core import exceptions as exc

logger = logging.getLogger(__name__)

# Most specific classes first: lookup walks the exception's MRO.
STATUS_BY_ERROR: Dict[Type[exc.DomainError], int] = {
    exc.OutsideGeofence: 422,
    exc.QuotaExceeded: 422,
    exc.AlreadyCheckedIn: 409,
    exc.NotCheckedInOrAlreadyCheckedOut: 409,
    exc.Conflict: 409,
    exc.NotFound: 404,
    exc.InvalidKind: 400,
    exc.ResetDisabled: 403,
    exc.AuthorizationError: 403,
    exc.AuthenticationError: 401,
    exc.ValidationError: 400,
    exc.StoreUnavailable: 500,
}


def status_for(error: exc.DomainError) -> int:
    for klass in type(error).__mro__:
        if klass in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[klass]
    return 400


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


def error_response(code: str, message: str, status: int, details: Optional[Dict[str, Any]] = None):
    return jsonify(error_body(code, message, details)), status


def register_error_handlers(app: Flask) -> None:
    def handle_domain_error(error: exc.DomainError):
        status = status_for(error)
        if isinstance(error, exc.StoreUnavailable):
            logger.warning("store unavailable on %s %s: %s", request.method, request.path, error.__cause__ or error)
        return error_response(error.code, error.message, status, error.details)

    def handle_http_error(error: HTTPException):
        code = (error.name or "http_error").lower().replace(" ", "_")
        return error_response(code, error.description or error.name, error.code or 500)

    def handle_unexpected(error: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return error_response("internal_error", "Internal server error", 500)

    app.register_error_handler(exc.DomainError, handle_domain_error)
    app.register_error_handler(HTTPException, handle_http_error)
    app.register_error_handler(Exception, handle_unexpected)


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise exc.ValidationError("invalid json")
    return data


def optional_json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise exc.AuthenticationError("missing bearer token")
    return token.strip()


def make_auth_required(token_service):
    """Build a decorator that resolves the caller identity into `g.identity`."""

    def auth_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.identity = token_service.parse_access_token(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    return auth_required
