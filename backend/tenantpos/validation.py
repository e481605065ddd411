# Overview: Request input parsing shared by the route modules.

from __future__ import annotations

from datetime import datetime
from typing import Any

from flask import current_app, request

from .errors import ValidationError


def json_body() -> dict:
    """The request's JSON object; anything else is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def body_value(data: dict, *names: str, default: Any = None) -> Any:
    """
    First present key among names.

    Clients send either camelCase or snake_case (e.g. "openingCash" or
    "opening_cash"); routes list both spellings.
    """
    for name in names:
        if name in data:
            return data[name]
    return default


def optional_text(value: Any, field: str, limit: int | None = None) -> str | None:
    """Stripped free text; None and blank strings come back as None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    text = value.strip()
    if limit is not None and len(text) > limit:
        raise ValidationError(f"{field} must be at most {limit} characters", field=field)
    return text or None


def required_text(value: Any, field: str, limit: int | None = None) -> str:
    text = optional_text(value, field, limit)
    if text is None:
        raise ValidationError(f"{field} is required", field=field)
    return text


def parse_int(value: Any, field: str, *, required: bool = True, minimum: int | None = None) -> int | None:
    """
    Strict integer parsing: rejects bools, floats with a fraction,
    decimal strings and scientific notation.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)

    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be an integer, not a decimal", field=field)
        result = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be a plain integer", field=field)
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", field=field)
    else:
        raise ValidationError(f"{field} must be an integer", field=field)

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}", field=field)
    return result


def parse_bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValidationError(f"{name} must be true or false", field=name)


def parse_date_arg(name: str) -> datetime | None:
    """YYYY-MM-DD query parameter as a naive UTC midnight; absent means None."""
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"{name} must be a date in YYYY-MM-DD format", field=name)


def page_args() -> tuple[int, int]:
    """page (1-based) and limit from the query string, limit capped at MAX_PAGE_LIMIT."""
    page = parse_int(request.args.get("page"), "page", required=False, minimum=1) or 1
    limit = parse_int(request.args.get("limit"), "limit", required=False, minimum=1)
    if limit is None:
        limit = current_app.config["DEFAULT_PAGE_LIMIT"]
    return page, min(limit, current_app.config["MAX_PAGE_LIMIT"])
