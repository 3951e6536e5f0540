"""
Unit Tests for the Indodax Error Classifier

Run with:
    pytest tests/unit/test_error_classifier.py -v
"""

import json

import pytest

from core.errors import (
    AuthenticationError,
    ExchangeError,
    InsufficientFunds,
    InvalidOrder,
    MalformedResponse,
    OrderNotFound,
    UnclassifiedExchangeError,
)
from exchanges.indodax.error_classifier import check_response, classify_message


def check(response, payload_key="return"):
    check_response(json.dumps(response), response, payload_key)


# ============================================
# Known Messages
# ============================================

class TestKnownMessages:
    """Every message in the error table maps to its canonical kind"""

    @pytest.mark.parametrize("message, expected", [
        ("Insufficient balance.", InsufficientFunds),
        ("invalid order.", OrderNotFound),
        ("Minimum price 5000 IDR", InvalidOrder),
        ("Minimum order 50000 IDR", InvalidOrder),
        ("Invalid credentials. API not found or session has expired.", AuthenticationError),
        ("Invalid credentials. Bad sign.", AuthenticationError),
    ])
    def test_failure_raises_mapped_error(self, message, expected):
        response = {"success": 0, "error": message}

        with pytest.raises(expected) as exc_info:
            check(response)

        assert exc_info.value.response == response
        assert message in str(exc_info.value)

    @pytest.mark.parametrize("message, expected", [
        ("Insufficient balance.", InsufficientFunds),
        ("Minimum order 0.0001 BTC", InvalidOrder),
        ("something else", UnclassifiedExchangeError),
        (None, UnclassifiedExchangeError),
    ])
    def test_classify_message(self, message, expected):
        assert classify_message(message) is expected

    def test_exact_messages_need_exact_match(self):
        """Verify near-misses of exact entries are not classified"""
        assert classify_message("Insufficient balance") is UnclassifiedExchangeError
        assert classify_message("Invalid order.") is UnclassifiedExchangeError

    def test_success_as_string_zero_is_failure(self):
        with pytest.raises(InsufficientFunds):
            check({"success": "0", "error": "Insufficient balance."})


# ============================================
# Unknown Failures
# ============================================

class TestUnknownFailures:

    def test_unknown_message_is_unclassified(self):
        response = {"success": 0, "error": "Pair is being maintained."}

        with pytest.raises(UnclassifiedExchangeError) as exc_info:
            check(response)

        assert "Pair is being maintained." in str(exc_info.value)
        assert exc_info.value.response == response

    def test_failure_without_message_is_unclassified(self):
        with pytest.raises(UnclassifiedExchangeError):
            check({"success": 0})

    def test_all_errors_share_a_base(self):
        with pytest.raises(ExchangeError):
            check({"success": 0, "error": "whatever"})


# ============================================
# Pass-Through
# ============================================

class TestPassThrough:
    """Responses that are not failures must not raise"""

    def test_bare_list(self):
        check([{"tid": "1"}])

    def test_object_without_success(self):
        check({"ticker": {"last": "1"}})

    def test_success_with_payload(self):
        check({"success": 1, "return": {"balance": {}}})

    def test_success_as_string_one(self):
        check({"success": "1", "return": {}})

    def test_non_text_body(self):
        check_response(None, {"success": 0, "error": "Insufficient balance."})

    def test_unparsed_body(self):
        check_response("<html>bad gateway</html>", None)

    def test_flat_success_without_payload_key(self):
        check({"success": 1, "txid": "abc"}, payload_key=None)


# ============================================
# Malformed Success
# ============================================

class TestMalformedSuccess:

    def test_success_without_return(self):
        response = {"success": 1}

        with pytest.raises(MalformedResponse) as exc_info:
            check(response)

        assert exc_info.value.response == response

    def test_custom_payload_key(self):
        with pytest.raises(MalformedResponse):
            check({"success": 1, "return": {}}, payload_key="data")
