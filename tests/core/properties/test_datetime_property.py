"""Tests for DateTimeProperty."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from modelprops.core.properties.datetime import parse_datetime
from modelprops.shared.constants import CheckNames
from modelprops.shared.errors import ErrorCode, InvalidValueError


@pytest.fixture
def prop(factory):
    return factory.build({"type": "date-time"}, ident="published")


class TestParseDatetime:
    """Test cases for date-time string parsing."""

    def test_iso(self):
        """ISO 8601 strings are parsed."""
        assert parse_datetime("2020-01-02T03:04:05") == datetime(2020, 1, 2, 3, 4, 5)

    def test_alternative_layouts(self):
        """Common non-ISO layouts are parsed."""
        assert parse_datetime("2020/01/02") == datetime(2020, 1, 2)
        assert parse_datetime("2 January 2020") == datetime(2020, 1, 2)

    def test_unknown_layout(self):
        """Unparseable strings return None."""
        assert parse_datetime("not a date") is None


class TestDateTimeValue:
    """Test cases for date-time coercion."""

    def test_string_input(self, prop):
        """Strings are parsed into instants."""
        assert prop.set_val("2020-01-02 03:04:05").val() == datetime(2020, 1, 2, 3, 4, 5)

    def test_date_input(self, prop):
        """Dates become midnight instants."""
        assert prop.set_val(date(2020, 1, 2)).val() == datetime(2020, 1, 2)

    def test_fragments_are_joined(self, prop):
        """Date and time fragments are joined before parsing."""
        assert prop.set_val(["2020-01-02", "10:30"]).val() == datetime(2020, 1, 2, 10, 30)
        assert prop.set_val({"date": "2020-01-02", "time": ""}).val() == datetime(2020, 1, 2)

    def test_blank_is_null(self, prop):
        """Blank input is null when null is allowed."""
        assert prop.set_val("  ").val() is None
        assert prop.set_val(["", ""]).val() is None

    def test_blank_not_allowed(self, factory):
        """Blank input fails when null is not allowed."""
        prop = factory.build({"type": "date-time", "allow_null": False}, ident="d")

        with pytest.raises(InvalidValueError) as exc_info:
            prop.set_val("")

        assert exc_info.value.code == ErrorCode.NULL_NOT_ALLOWED

    def test_invalid(self, prop):
        """Unparseable input fails."""
        with pytest.raises(InvalidValueError) as exc_info:
            prop.set_val("not a date")

        assert exc_info.value.code == ErrorCode.INVALID_DATETIME

    def test_multiple_rejected(self, prop):
        """A date-time can never be multiple."""
        with pytest.raises(InvalidValueError) as exc_info:
            prop.set_multiple(True)

        assert exc_info.value.code == ErrorCode.INVALID_OPTION
        assert prop.multiple is False


class TestDateTimeRendering:
    """Test cases for date-time rendering and storage."""

    def test_input_and_storage_layout(self, prop):
        """input_val and storage_val use the fixed layout."""
        prop.set_val("2020-01-02T03:04:05")
        assert prop.input_val() == "2020-01-02 03:04:05"
        assert prop.storage_val() == "2020-01-02 03:04:05"

    def test_display_val_uses_format(self, factory):
        """display_val uses the configured format."""
        prop = factory.build({"type": "date-time", "format": "%d/%m/%Y", "val": "2020-01-02"}, ident="d")
        assert prop.display_val() == "02/01/2020"

    def test_display_val_of_null(self, prop):
        """A null value displays as an empty string."""
        assert prop.display_val() == ""

    def test_storage_val_of_null(self, factory, prop):
        """A missing value is stored as None only when null is allowed."""
        assert prop.storage_val() is None

        strict = factory.build({"type": "date-time", "allow_null": False}, ident="d")
        with pytest.raises(InvalidValueError):
            strict.storage_val(None)

    def test_json_serialize(self, prop):
        """JSON output is ISO 8601."""
        assert prop.json_serialize() is None
        prop.set_val("2020-01-02 03:04:05")
        assert prop.json_serialize() == "2020-01-02T03:04:05"

    def test_sql_type(self, prop):
        assert prop.sql_type() == "DATETIME"


class TestDateTimeBounds:
    """Test cases for min / max checks."""

    def test_unset_bounds_pass(self, prop):
        """Checks pass trivially without bounds."""
        prop.set_val("2019-12-31")
        assert prop.validate_min() is True
        assert prop.validate_max() is True

    def test_min_fails_before_bound(self, prop):
        """A value before min fails and records a min issue."""
        prop.set_min("2020-01-01").set_val("2019-12-31")

        assert prop.validate_min() is False
        assert [issue.code for issue in prop.errors()] == [CheckNames.MIN]

    def test_validate_reports_min(self, prop):
        """validate() runs min after the base checks."""
        prop.set_min("2020-01-01").set_val("2019-12-31")

        assert prop.validate() is False
        assert [issue.code for issue in prop.errors()] == [CheckNames.MIN]

    def test_max_fails_after_bound(self, prop):
        """A value after max fails."""
        prop.set_max(datetime(2020, 1, 1)).set_val("2020-06-01")
        assert prop.validate_max() is False

    def test_aware_and_naive_compare(self, prop):
        """Naive values compare with aware bounds as UTC."""
        prop.set_min("2020-01-01T00:00:00+00:00").set_val("2019-12-31 23:59:59")
        assert prop.validate_min() is False

    def test_invalid_bound(self, prop):
        """Bounds must be dates or date strings."""
        with pytest.raises(InvalidValueError) as exc_info:
            prop.set_min(12)

        assert exc_info.value.code == ErrorCode.INVALID_OPTION
