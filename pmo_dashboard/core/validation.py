"""
Declarative payload contracts.

A ``Contract`` is a named list of ``Field`` rules. ``Contract.validate``
checks a JSON body against every rule before anything touches storage and
raises one ``ValidationError`` listing all violations, each as
``{"field": ..., "reason": ...}``.

Rules mirror the column definitions in ``pmo_dashboard.models``:
optional text fields accept ``null`` or ``""``; required text fields must be
non-blank; unknown keys are rejected.
"""

from __future__ import annotations

from typing import Any

from email_validator import EmailNotValidError, validate_email

from pmo_dashboard.core.exceptions import ValidationError

_MISSING = object()


def _validate_enum(value: str, allowed) -> str | None:
    """Return error message if value not in allowed set, else None."""
    if value not in allowed:
        return f"must be one of {list(allowed)}"
    return None


def _validate_length(value: str, max_len: int | None, min_len: int | None) -> str | None:
    if max_len is not None and len(value) > max_len:
        return f"must be at most {max_len} characters"
    if min_len is not None and len(value) < min_len:
        return f"must be at least {min_len} characters"
    return None


class Field:
    """One field rule.

    Args:
        name: JSON key.
        kind: ``"string"``, ``"boolean"``, ``"integer"`` or ``"email"``.
        required: Must be present and non-blank (ignored in partial mode when absent).
        max_length / min_length: Bounds for string values.
        max_bytes: Bound on the UTF-8 encoded size of a string value.
        choices: Closed set of accepted values.
    """

    def __init__(
        self,
        name: str,
        kind: str = "string",
        *,
        required: bool = False,
        max_length: int | None = None,
        min_length: int | None = None,
        max_bytes: int | None = None,
        choices=None,
    ) -> None:
        self.name = name
        self.kind = kind
        self.required = required
        self.max_length = max_length
        self.min_length = min_length
        self.max_bytes = max_bytes
        self.choices = tuple(choices) if choices is not None else None

    def check(self, value: Any) -> tuple[Any, str | None]:
        """Return ``(cleaned_value, error_reason)``."""
        if value is None:
            if self.required:
                return None, "is required"
            return None, None

        if self.kind == "boolean":
            if not isinstance(value, bool):
                return value, "must be a boolean"
            return value, None

        if self.kind == "integer":
            if isinstance(value, bool) or not isinstance(value, int):
                return value, "must be an integer"
            return value, None

        if not isinstance(value, str):
            return value, "must be a string"

        if value.strip() == "":
            if self.required:
                return value, "is required"
            return value, None

        reason = _validate_length(value, self.max_length, self.min_length)
        if reason:
            return value, reason
        if self.max_bytes is not None and len(value.encode("utf-8")) > self.max_bytes:
            return value, f"must be at most {self.max_bytes} bytes"

        if self.choices is not None:
            reason = _validate_enum(value, self.choices)
            if reason:
                return value, reason

        if self.kind == "email":
            try:
                info = validate_email(value, check_deliverability=False)
            except EmailNotValidError:
                return value, "must be a valid email"
            return info.normalized, None

        return value, None


class Contract:
    """A resource kind's request body rules."""

    def __init__(self, name: str, fields: list[Field]) -> None:
        self.name = name
        self.fields = {f.name: f for f in fields}

    def validate(self, payload: Any, *, partial: bool = False) -> dict:
        """Validate ``payload`` and return the cleaned dict.

        In partial mode, absent fields are skipped (only keys present in the
        payload are checked and returned).

        Raises:
            ValidationError: with every violated field in ``details``.
        """
        if not isinstance(payload, dict):
            raise ValidationError(
                "Request body must be a JSON object",
                details=[{"field": "body", "reason": "must be a JSON object"}],
            )

        errors: list[dict] = []
        cleaned: dict = {}

        for key in payload:
            if key not in self.fields:
                errors.append({"field": key, "reason": "is not allowed"})

        for name, rule in self.fields.items():
            value = payload.get(name, _MISSING)
            if value is _MISSING:
                if partial:
                    continue
                if rule.required:
                    errors.append({"field": name, "reason": "is required"})
                continue
            value, reason = rule.check(value)
            if reason:
                errors.append({"field": name, "reason": reason})
            else:
                cleaned[name] = value

        if errors:
            raise ValidationError(f"Invalid {self.name} data", details=errors)
        return cleaned
