"""Shared request helpers used by every blueprint.

parse_pagination:  limit/offset query params → validated ints
pagination_meta:   {total, limit, offset, hasMore} block of the envelope
parse_bool:        "true"/"1"/"yes" style query flags
json_body:         request body as dict, ValidationError otherwise
client_ip:         caller address for the activity log
"""

from flask import request

from pmo_dashboard.core.exceptions import ValidationError

_TRUE = {"1", "true", "yes", "on"}

# Largest value a signed 64-bit INTEGER column can bind
MAX_DB_INT = 2**63 - 1


def _parse_int(name: str, raw, default: int, minimum: int, maximum: int, errors: list) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        errors.append({"field": name, "reason": "must be an integer"})
        return default
    if value < minimum:
        errors.append({"field": name, "reason": f"must be at least {minimum}"})
    elif value > maximum:
        errors.append({"field": name, "reason": f"must be at most {maximum}"})
    return value


def parse_pagination(args=None, *, default_limit: int = 100, max_limit: int = 1000) -> tuple[int, int]:
    """Return ``(limit, offset)`` from the query string.

    Raises ValidationError listing both params when both are bad.
    """
    args = request.args if args is None else args
    errors: list[dict] = []
    limit = _parse_int("limit", args.get("limit"), default_limit, 1, max_limit, errors)
    offset = _parse_int("offset", args.get("offset"), 0, 0, MAX_DB_INT, errors)
    if errors:
        raise ValidationError("Invalid pagination parameters", details=errors)
    return limit, offset


def parse_int_param(name: str, args=None, *, default=None, minimum: int = 1, maximum: int = MAX_DB_INT):
    """Optional bounded integer query param (e.g. ``project_id``, ``limit``)."""
    args = request.args if args is None else args
    raw = args.get(name)
    if raw is None or raw == "":
        return default
    errors: list[dict] = []
    value = _parse_int(name, raw, default, minimum, maximum, errors)
    if errors:
        raise ValidationError(f"Invalid {name}", details=errors)
    return value


def pagination_meta(total: int, limit: int, offset: int, returned: int) -> dict:
    return {
        "total": total,
        "limit": limit,
        "offset": offset,
        "hasMore": offset + returned < total,
    }


def parse_bool(value) -> bool:
    return str(value).strip().lower() in _TRUE if value is not None else False


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError(
            "Request body must be a JSON object",
            details=[{"field": "body", "reason": "must be a JSON object"}],
        )
    return data


def client_ip() -> str | None:
    return request.remote_addr
