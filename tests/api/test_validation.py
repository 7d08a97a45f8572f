"""
Unit tests for book body validation.
"""

import pytest

from api import messages
from api.models import BookOperation, BookPayload, ViolationReason
from api.validation import parse_book_body, validate_book_body


class TestValidateBookBody:
    """Test cases for validate_book_body."""

    @pytest.mark.parametrize("operation", [BookOperation.CREATE, BookOperation.UPDATE])
    def test_valid_body(self, sample_book_body, operation):
        """A complete body produces no violations."""
        assert validate_book_body(sample_book_body, operation) == []

    @pytest.mark.parametrize("operation", [BookOperation.CREATE, BookOperation.UPDATE])
    def test_empty_body_reports_every_field(self, operation):
        """Every missing field is reported, in field order."""
        violations = validate_book_body({}, operation)

        assert [v.field for v in violations] == ["name", "author", "description", "price"]
        assert all(v.reason == ViolationReason.REQUIRED for v in violations)

    def test_partial_body_reports_only_missing_fields(self, sample_book_body):
        """Fields that are present and valid are not reported."""
        del sample_book_body["author"]
        del sample_book_body["price"]

        violations = validate_book_body(sample_book_body, BookOperation.CREATE)

        assert [(v.field, v.reason) for v in violations] == [
            ("author", ViolationReason.REQUIRED),
            ("price", ViolationReason.REQUIRED),
        ]

    def test_field_specific_messages(self):
        """Each violation carries a message naming its field."""
        violations = validate_book_body({}, BookOperation.CREATE)

        assert [v.message for v in violations] == [
            messages.BOOK_NAME_REQUIRED,
            messages.AUTHOR_REQUIRED,
            messages.DESCRIPTION_REQUIRED,
            messages.PRICE_REQUIRED,
        ]

    @pytest.mark.parametrize("value", [123, 1.5, None, ["Dune"], {"title": "Dune"}, True])
    def test_non_string_text_field(self, sample_book_body, value):
        """Non-string names are type mismatches."""
        sample_book_body["name"] = value

        violations = validate_book_body(sample_book_body, BookOperation.CREATE)

        assert len(violations) == 1
        assert violations[0].field == "name"
        assert violations[0].reason == ViolationReason.INVALID_TYPE
        assert violations[0].message == messages.BOOK_NAME_INVALID

    @pytest.mark.parametrize("value", ["", "   ", "\t\n"])
    def test_blank_text_fields(self, sample_book_body, value):
        """Whitespace-only strings are empty after trimming."""
        sample_book_body["author"] = value
        sample_book_body["description"] = value

        violations = validate_book_body(sample_book_body, BookOperation.UPDATE)

        assert [(v.field, v.reason) for v in violations] == [
            ("author", ViolationReason.EMPTY),
            ("description", ViolationReason.EMPTY),
        ]
        assert violations[0].message == messages.AUTHOR_EMPTY
        assert violations[1].message == messages.DESCRIPTION_EMPTY

    @pytest.mark.parametrize("value", ["abc", "", None, True, [25], "nan", float("inf")])
    def test_non_numeric_price(self, sample_book_body, value):
        """Prices that are not finite numbers are rejected."""
        sample_book_body["price"] = value

        violations = validate_book_body(sample_book_body, BookOperation.CREATE)

        assert len(violations) == 1
        assert violations[0].reason == ViolationReason.NOT_A_NUMBER
        assert violations[0].message == messages.PRICE_INVALID

    def test_mixed_violations(self):
        """Different violation kinds are aggregated in one pass."""
        body = {"name": 42, "author": "  ", "price": "cheap"}

        violations = validate_book_body(body, BookOperation.CREATE)

        assert [(v.field, v.reason) for v in violations] == [
            ("name", ViolationReason.INVALID_TYPE),
            ("author", ViolationReason.EMPTY),
            ("description", ViolationReason.REQUIRED),
            ("price", ViolationReason.NOT_A_NUMBER),
        ]

    @pytest.mark.parametrize("body", [None, [], "Dune", 42])
    def test_non_mapping_body(self, body):
        """A body that is not an object is treated as empty."""
        violations = validate_book_body(body, BookOperation.CREATE)

        assert len(violations) == 4


class TestPriceRules:
    """Test cases for the price field of BookPayload."""

    @pytest.mark.parametrize("value,expected", [
        (25, 25.0),
        (-5, -5.0),
        (0, 0.0),
        (19.99, 19.99),
        ("42.5", 42.5),
        (1e27, 1e27),
    ])
    def test_numeric_values(self, sample_book_body, value, expected):
        sample_book_body["price"] = value

        payload, violations = parse_book_body(sample_book_body, BookOperation.CREATE)

        assert violations == []
        assert payload.price == expected

    @pytest.mark.parametrize("value", [False, "12abc", "  ", float("nan"), float("-inf"), 10 ** 400])
    def test_rejected_values(self, sample_book_body, value):
        sample_book_body["price"] = value

        violations = validate_book_body(sample_book_body, BookOperation.CREATE)

        assert [(v.field, v.reason) for v in violations] == [("price", ViolationReason.NOT_A_NUMBER)]

    def test_int_beyond_float_range(self, sample_book_body):
        """An int too large for a float is a bad number, not an error."""
        sample_book_body["price"] = 10 ** 400

        payload, violations = parse_book_body(sample_book_body, BookOperation.UPDATE)

        assert payload is None
        assert violations[0].message == messages.PRICE_INVALID


class TestParseBookBody:
    """Test cases for parse_book_body."""

    def test_builds_trimmed_payload(self):
        """Accepted bodies become a trimmed, typed payload."""
        body = {"name": "  Dune ", "author": "Herbert\n", "description": " Epic", "price": "25"}

        payload, violations = parse_book_body(body, BookOperation.CREATE)

        assert violations == []
        assert payload == BookPayload(name="Dune", author="Herbert", description="Epic", price=25.0)

    def test_drops_unknown_and_derived_fields(self, sample_book_body):
        """Callers cannot set formatted_price or other extra keys."""
        sample_book_body["formatted_price"] = "$0.01"
        sample_book_body["id"] = "6523f1c2a1b2c3d4e5f60718"

        payload, _ = parse_book_body(sample_book_body, BookOperation.UPDATE)

        assert set(payload.model_dump()) == {"name", "author", "description", "price"}

    def test_rejected_body_has_no_payload(self):
        payload, violations = parse_book_body({"name": "Dune"}, BookOperation.CREATE)

        assert payload is None
        assert len(violations) == 3

    def test_negative_price_is_accepted(self, sample_book_body):
        """No sign rule is enforced on price."""
        sample_book_body["price"] = -5

        payload, violations = parse_book_body(sample_book_body, BookOperation.UPDATE)

        assert violations == []
        assert payload.price == -5.0
