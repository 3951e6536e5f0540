"""
Indodax Error Classifier

Every Indodax response passes through check_response() before it reaches
a parser. The private API wraps results in an envelope:

    { "success": 1, "return": { ... } }
    { "success": 0, "error": "Insufficient balance." }

while the public API returns bare objects or arrays with no envelope.

Failure messages are free text, so they are matched against
ERROR_MESSAGE_MAP (exact or substring, first match wins). Updating the
exchange's wording only means editing that table.
"""

import json
from typing import Any, List, Optional, Tuple, Type

from core.errors import (
    AuthenticationError,
    ExchangeError,
    InsufficientFunds,
    InvalidOrder,
    MalformedResponse,
    OrderNotFound,
    UnclassifiedExchangeError,
)
from core.logging import get_logger


EXACT = "exact"
CONTAINS = "contains"

# (match mode, message text, error class), checked in order
ERROR_MESSAGE_MAP: List[Tuple[str, str, Type[ExchangeError]]] = [
    (EXACT, "Insufficient balance.", InsufficientFunds),
    (EXACT, "invalid order.", OrderNotFound),
    (CONTAINS, "Minimum price ", InvalidOrder),
    (CONTAINS, "Minimum order ", InvalidOrder),
    (EXACT, "Invalid credentials. API not found or session has expired.", AuthenticationError),
    (EXACT, "Invalid credentials. Bad sign.", AuthenticationError),
]

logger = get_logger(__name__)


def classify_message(message: Optional[str]) -> Type[ExchangeError]:
    """
    Map an Indodax error message to a canonical error class.

    Args:
        message: The `error` field of a failed response

    Returns:
        The matching class, or UnclassifiedExchangeError

    Example:
        >>> classify_message("Minimum order 50000 IDR")
        <class 'core.errors.InvalidOrder'>
    """
    if not isinstance(message, str):
        return UnclassifiedExchangeError

    for mode, text, error_class in ERROR_MESSAGE_MAP:
        if mode == EXACT and message == text:
            return error_class
        if mode == CONTAINS and text in message:
            return error_class

    return UnclassifiedExchangeError


def _dump(response: Any) -> str:
    try:
        return json.dumps(response, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return repr(response)


def _is_success(value: Any) -> bool:
    return value == 1 or value == "1"


def check_response(body: Any, response: Any, payload_key: Optional[str] = "return") -> None:
    """
    Raise the canonical error for a failed response, or return quietly.

    Args:
        body: Raw response body as received (classification needs text)
        response: The parsed JSON body (None when the body was not JSON)
        payload_key: Key a successful envelope must carry; None for
            endpoints that answer with a flat object (withdrawCoin)

    Raises:
        MalformedResponse: success == 1 but no payload_key in the envelope
        InsufficientFunds, OrderNotFound, InvalidOrder, AuthenticationError:
            known failure messages
        UnclassifiedExchangeError: any other failure; carries the raw message
    """
    if not isinstance(body, str) or response is None:
        return

    # public endpoints may return bare arrays
    if isinstance(response, list):
        return

    if not isinstance(response, dict) or "success" not in response:
        return

    feedback = f"indodax {_dump(response)}"

    if _is_success(response["success"]):
        if payload_key is not None and payload_key not in response:
            logger.warning(f"Malformed response: {feedback}")
            raise MalformedResponse(f"indodax: malformed response: {_dump(response)}", response=response)
        return

    message = response.get("error")
    error_class = classify_message(message)

    if error_class is UnclassifiedExchangeError:
        logger.warning(f"Unclassified error: {feedback}")
        raise UnclassifiedExchangeError(f"indodax: unknown error: {_dump(response)}", response=response)

    logger.warning(f"{error_class.__name__}: {message}")
    raise error_class(feedback, response=response)
