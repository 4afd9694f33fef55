"""Unit tests for the declarative payload contracts."""

import pytest

from pmo_dashboard.core.contracts import DROPDOWN_OPTION, USER_CREATE, USER_UPDATE
from pmo_dashboard.core.exceptions import ValidationError
from pmo_dashboard.core.validation import Contract, Field

SAMPLE = Contract("sample", [
    Field("name", required=True, max_length=5),
    Field("note"),
    Field("flag", "boolean"),
    Field("count", "integer"),
    Field("kind", choices=("a", "b")),
])


def _details(exc_info):
    return {d["field"]: d["reason"] for d in exc_info.value.details}


class TestField:
    def test_required_rejects_missing_none_and_blank(self):
        for payload in ({}, {"name": None}, {"name": "  "}):
            with pytest.raises(ValidationError) as exc:
                SAMPLE.validate(payload)
            assert _details(exc) == {"name": "is required"}

    def test_max_length(self):
        with pytest.raises(ValidationError) as exc:
            SAMPLE.validate({"name": "abcdef"})
        assert _details(exc) == {"name": "must be at most 5 characters"}

    def test_types(self):
        with pytest.raises(ValidationError) as exc:
            SAMPLE.validate({"name": "ok", "flag": "yes", "count": True, "note": 3})
        assert _details(exc) == {
            "flag": "must be a boolean",
            "count": "must be an integer",
            "note": "must be a string",
        }

    def test_choices(self):
        with pytest.raises(ValidationError) as exc:
            SAMPLE.validate({"name": "ok", "kind": "c"})
        assert "kind" in _details(exc)

    def test_optional_values_pass_through(self):
        assert SAMPLE.validate({"name": "ok", "note": None, "kind": ""}) == {
            "name": "ok", "note": None, "kind": "",
        }


class TestContract:
    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError) as exc:
            SAMPLE.validate({"name": "ok", "extra": 1})
        assert _details(exc) == {"extra": "is not allowed"}
        assert exc.value.message == "Invalid sample data"

    def test_non_object_body(self):
        with pytest.raises(ValidationError):
            SAMPLE.validate(["name"])

    def test_partial_skips_absent_fields(self):
        assert SAMPLE.validate({"note": "hi"}, partial=True) == {"note": "hi"}

    def test_email_is_validated_and_normalised(self):
        data = USER_CREATE.validate({
            "username": "bob", "email": "bob@EXAMPLE.com", "role": "viewer", "password": "secret1",
        })
        assert data["email"] == "bob@example.com"

        with pytest.raises(ValidationError) as exc:
            USER_CREATE.validate({
                "username": "bob", "email": "bob@", "role": "viewer", "password": "secret1",
            })
        assert _details(exc) == {"email": "must be a valid email"}

    def test_update_password_optional_but_bounded(self):
        base = {"username": "bob", "email": "bob@example.com", "role": "viewer"}
        assert "password" not in USER_UPDATE.validate(base)
        with pytest.raises(ValidationError) as exc:
            USER_UPDATE.validate({**base, "password": "123"})
        assert _details(exc) == {"password": "must be at least 6 characters"}

    def test_dropdown_type_is_closed(self):
        assert DROPDOWN_OPTION.validate({"type": "end_months", "value": "Oct'26"})["type"] == "end_months"
        with pytest.raises(ValidationError):
            DROPDOWN_OPTION.validate({"type": "colours", "value": "Red"})
