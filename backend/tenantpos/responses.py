# Overview: Success envelope for JSON responses.
#
# Every response has the shape {success, message?, data?, error?}. Failures
# are rendered by the error handlers registered in create_app().

from __future__ import annotations

from flask import jsonify


def ok(data=None, message: str | None = None, status: int = 200, **extra):
    payload = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status


def created(data, message: str | None = None):
    return ok(data, message=message, status=201)


def page(result: dict, message: str | None = None):
    """Render a scope_service.paginate() result."""
    return ok(result["data"], message=message, pagination=result["pagination"])


def fail(message: str, error: str, status: int, **details):
    payload = {"success": False, "message": message, "error": error}
    if details:
        payload["details"] = details
    return jsonify(payload), status
