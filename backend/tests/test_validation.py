# Overview: Pytest coverage for payload validation and coercion.

"""
Payload validation tests against the Product column metadata.

Verifies:
- integers are strict, dates accept ISO strings and datetimes
- only writable fields pass; store timestamps are never client-settable
"""

from datetime import date, datetime

import pytest

from textrack.models import Product
from textrack.routes.products import PRODUCT_POLICY
from textrack.validation import ValidationError, enforce_rules_progress, parse_year_month, validate_payload


def _validate(payload, *, partial=True):
    return validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)


class TestCoercion:

    def test_integer_strings_are_accepted(self):
        assert _validate({"quantity": " 12 "}) == {"quantity": 12}

    @pytest.mark.parametrize("value", ["1e3", "12.5", 2.0, True, ""])
    def test_non_integers_rejected(self, value):
        with pytest.raises(ValidationError):
            _validate({"quantity": value})

    def test_due_date_from_iso_string(self):
        assert _validate({"due_date": "2030-01-15"}) == {"due_date": date(2030, 1, 15)}

    def test_due_date_from_datetime_keeps_date_part(self):
        assert _validate({"due_date": datetime(2030, 1, 15, 18, 30)}) == {"due_date": date(2030, 1, 15)}

    @pytest.mark.parametrize("value", ["2030-13-01", "mañana", 20300115])
    def test_bad_due_date_rejected(self, value):
        with pytest.raises(ValidationError):
            _validate({"due_date": value})

    def test_text_is_stripped(self):
        assert _validate({"color": "  Rojo "}) == {"color": "Rojo"}


class TestWritableFields:

    @pytest.mark.parametrize("field", ["created_at", "updated_at", "version_id", "quantity_completed", "id"])
    def test_store_managed_fields_rejected(self, field):
        with pytest.raises(ValidationError, match="Field not allowed"):
            _validate({field: "2030-01-01T00:00:00Z"})

    def test_missing_required_on_create(self):
        with pytest.raises(ValidationError, match="due_date"):
            _validate({"client_name": "A", "product_type": "B", "quantity": 1}, partial=False)


class TestProgressRule:

    @pytest.mark.parametrize("value,expected", [(3, 3), ("4", 4), (" 5 ", 5)])
    def test_valid(self, value, expected):
        assert enforce_rules_progress(value, remaining=5) == expected

    def test_over_remaining_message(self):
        with pytest.raises(ValidationError, match="You can only add up to 5 units"):
            enforce_rules_progress(6, remaining=5)


class TestYearMonthParams:

    def test_defaults_when_absent_or_blank(self):
        assert parse_year_month({}, default=date(2030, 4, 9)) == (2030, 4)
        assert parse_year_month({"month": " "}, default=date(2030, 4, 9)) == (2030, 4)

    def test_explicit_values(self):
        assert parse_year_month({"year": "2029", "month": "12"}, default=date(2030, 4, 9)) == (2029, 12)

    @pytest.mark.parametrize("args", [{"month": "abc"}, {"year": "20x0"}, {"month": "-1"}, {"month": "3.5"}])
    def test_malformed_rejected(self, args):
        with pytest.raises(ValidationError):
            parse_year_month(args, default=date(2030, 4, 9))
