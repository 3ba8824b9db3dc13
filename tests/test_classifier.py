"""Tests for argument classification and assignment parsing."""

import pytest
from rau.classifier import Request, classify, parse_value, split_assignment
from rau.errors import MalformedArgumentError


class TestFlags:

    def test_schema_ignores_positionals(self):
        assert classify(["rec1", "Name=x"], schema=True) == Request(Request.SCHEMA)

    def test_fields(self):
        assert classify([], fields=True).kind == Request.FIELDS

    def test_recent(self):
        assert classify(["rec1"], recent=True).kind == Request.RECENT

    def test_flag_priority(self):
        assert classify([], schema=True, fields=True, recent=True).kind == Request.SCHEMA
        assert classify([], fields=True, recent=True).kind == Request.FIELDS


class TestPositionals:

    def test_no_arguments_creates_empty_record(self):
        request = classify([])
        assert request.kind == Request.CREATE
        assert request.assignments == {}

    def test_record_id_alone_is_get(self):
        request = classify(["recABC"])
        assert request == Request(Request.GET, record_id="recABC")

    def test_record_id_with_field_names_is_query(self):
        request = classify(["recABC", "Name", "Age"])
        assert request.kind == Request.QUERY
        assert request.record_id == "recABC"
        assert request.field_names == ["Name", "Age"]

    def test_record_id_with_assignments_is_update(self):
        request = classify(["recABC", "Name=Ada", "Age=36"])
        assert request.kind == Request.UPDATE
        assert request.record_id == "recABC"
        assert request.assignments == {"Name": "Ada", "Age": 36}

    def test_assignments_without_id_is_create(self):
        request = classify(["Name=Ada", "Tags=[\"a\", \"b\"]"])
        assert request.kind == Request.CREATE
        assert request.record_id is None
        assert request.assignments == {"Name": "Ada", "Tags": ["a", "b"]}

    def test_mixed_tokens_after_id_rejected(self):
        with pytest.raises(MalformedArgumentError) as exc:
            classify(["recABC", "Name", "Age=3"])
        assert "Name" in str(exc.value)

    def test_bare_token_in_create_rejected(self):
        with pytest.raises(MalformedArgumentError):
            classify(["Name=Ada", "Age"])

    def test_empty_key_rejected(self):
        with pytest.raises(MalformedArgumentError):
            classify(["recABC", "=value"])

    def test_later_assignment_wins(self):
        assert classify(["rec1", "A=1", "A=2"]).assignments == {"A": 2}


class TestValues:

    @pytest.mark.parametrize("raw,expected", [
        ("36", 36),
        ("1.5", 1.5),
        ("true", True),
        ("null", None),
        ('["x", "y"]', ["x", "y"]),
        ('{"a": 1}', {"a": 1}),
        ('"quoted"', "quoted"),
        ("plain text", "plain text"),
        ("NaN", "NaN"),
        ("Infinity", "Infinity"),
        ("-Infinity", "-Infinity"),
        ("[1, NaN]", "[1, NaN]"),
        ("", ""),
    ])
    def test_parse_value(self, raw, expected):
        assert parse_value(raw) == expected

    def test_split_on_first_equals(self):
        assert split_assignment("Formula=a=b") == ("Formula", "a=b")

    def test_empty_value(self):
        assert split_assignment("Notes=") == ("Notes", "")
