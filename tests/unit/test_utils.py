"""
Unit Tests for core.utils

Run with:
    pytest tests/unit/test_utils.py -v
"""

from datetime import datetime, timezone

import pytest

from core.utils import current_utc_timestamp, safe_float, safe_string, seconds_to_milliseconds, to_utc_datetime


class TestTimeConversion:

    @pytest.mark.parametrize("value, expected", [
        (1509469200, 1509469200000),
        ("1509469200", 1509469200000),
        (1509469200.7, 1509469200000),
        (None, None),
        ("", None),
        ("abc", None),
        (True, None),
        ("inf", None),
        ("nan", None),
    ])
    def test_seconds_to_milliseconds(self, value, expected):
        assert seconds_to_milliseconds(value) == expected

    def test_to_utc_datetime_detects_milliseconds(self):
        expected = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert to_utc_datetime(1704110400000) == expected
        assert to_utc_datetime(1704110400) == expected

    def test_to_utc_datetime_rejects_negative(self):
        with pytest.raises(ValueError):
            to_utc_datetime(-1)

    def test_current_timestamp_units(self):
        seconds = current_utc_timestamp()
        millis = current_utc_timestamp(milliseconds=True)
        assert millis // 1000 >= seconds


class TestSafeAccessors:

    def test_safe_float_parses_strings(self):
        assert safe_float({"price": "50000"}, "price") == 50000.0

    def test_zero_is_not_missing(self):
        assert safe_float({"price": "0"}, "price", 7.0) == 0.0

    @pytest.mark.parametrize("data", [
        None, {}, {"price": None}, {"price": "n/a"}, {"other": 1},
        {"price": "NaN"}, {"price": "inf"}, {"price": float("-inf")},
    ])
    def test_safe_float_default(self, data):
        assert safe_float(data, "price") is None
        assert safe_float(data, "price", 0.0) == 0.0

    def test_safe_string(self):
        assert safe_string({"order_id": 12345}, "order_id") == "12345"
        assert safe_string({"order_id": None}, "order_id", "x") == "x"
        assert safe_string(None, "order_id") is None
