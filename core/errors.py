"""
Canonical Exchange Errors

This module defines the exception taxonomy that every connector raises.
Exchange-specific error text is translated into these classes in exactly
one place per connector (its error classifier), so callers only ever need
to handle the canonical kinds below.

Hierarchy:
    ExchangeError
    ├── AuthenticationError         server rejected the API key or signature
    │   └── ConfigurationError      credentials missing before any request is sent
    ├── InsufficientFunds
    ├── InvalidOrder                price/cost below the market minimum, unsupported order type
    ├── OrderNotFound               unknown or already finalized order id
    ├── MalformedResponse           success envelope without its payload key
    ├── UnclassifiedExchangeError   any failure message not in the known table
    ├── NotFound                    market directory lookup miss
    ├── ArgumentsRequired           operation called without a mandatory argument
    └── NetworkError                transport failure

Usage:
    from core.errors import ExchangeError, InsufficientFunds

    try:
        await exchange.create_order("BTC/IDR", "limit", "buy", 0.1, 500_000_000)
    except InsufficientFunds as e:
        logger.warning(f"Not enough balance: {e.response}")

Notes:
    - Errors are terminal for the call. Nothing in the core retries them.
    - `response` always holds the raw exchange payload (or None when the
      failure happened before a response existed).
"""

from typing import Any, Optional


class ExchangeError(Exception):
    """Base class for all exchange-related errors."""

    def __init__(self, message: str = "", response: Optional[Any] = None):
        super().__init__(message)
        self.response = response


class AuthenticationError(ExchangeError):
    """API key or signature rejected by the exchange."""


class ConfigurationError(AuthenticationError):
    """API key or secret missing; raised before a private request is built."""


class InsufficientFunds(ExchangeError):
    """Insufficient balance for the requested operation."""


class InvalidOrder(ExchangeError):
    """Order parameters rejected (below minimum price/cost, bad type)."""


class OrderNotFound(ExchangeError):
    """Order id is unknown or the order is already finalized."""


class MalformedResponse(ExchangeError):
    """Successful envelope missing its expected payload."""


class UnclassifiedExchangeError(ExchangeError):
    """Failure message that is not in the known error table."""


class NotFound(ExchangeError):
    """Requested market is not in the market directory."""


class ArgumentsRequired(ExchangeError):
    """A mandatory argument was not supplied."""


class NetworkError(ExchangeError):
    """Transport-level failure (timeouts, connection errors, non-JSON errors)."""
