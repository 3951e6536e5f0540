"""
Indodax Request Signer

Builds ready-to-send requests for both Indodax APIs:

Public API (GET, no authentication):
    <public_url>/<pair>/<suffix>, e.g. https://indodax.com/api/btc_idr/ticker

Private trade API (POST, authenticated):
    body:    method=<endpoint>&nonce=<n>&<caller params in insertion order>
    headers: Content-Type: application/x-www-form-urlencoded
             Key:  <api key>
             Sign: hex(HMAC-SHA512(secret, body))

Nonces:
    Indodax rejects a signed request whose nonce is not greater than the
    last one it saw for the key. One NonceGenerator is owned by each signer
    (i.e. per credential set); it is seeded from the millisecond clock and
    guarded by a lock, so concurrent callers (threads or coroutines) never
    receive equal or decreasing values.
"""

import hashlib
import hmac
import re
import threading
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

from core.errors import ArgumentsRequired, ConfigurationError
from core.logging import get_logger
from core.schemas import Credentials, SignedRequest
from core.utils.time import current_utc_timestamp


PUBLIC_ENDPOINTS: Dict[str, str] = {
    "ticker": "{pair}/ticker",
    "trades": "{pair}/trades",
    "depth": "{pair}/depth",
}

PRIVATE_ENDPOINTS: Tuple[str, ...] = (
    "getInfo",
    "transHistory",
    "trade",
    "tradeHistory",
    "getOrder",
    "openOrders",
    "cancelOrder",
    "orderHistory",
    "withdrawCoin",
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_RESERVED_FIELDS = ("method", "nonce")

logger = get_logger(__name__)


class NonceGenerator:
    """
    Strictly increasing nonce source.

    Args:
        clock: Millisecond clock (defaults to the UTC wall clock)

    Each call to next() returns the clock value when it has moved past the
    previous nonce, and previous + 1 otherwise.

    Example:
        >>> nonces = NonceGenerator()
        >>> a, b = nonces.next(), nonces.next()
        >>> b > a
        True
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._clock = clock or (lambda: current_utc_timestamp(milliseconds=True))
        self._lock = threading.Lock()
        self._last = self._clock() - 1

    def next(self) -> int:
        with self._lock:
            now = self._clock()
            value = now if now > self._last else self._last + 1
            self._last = value
            return value

    @property
    def last(self) -> int:
        return self._last


def format_param(value: Any) -> str:
    """
    Render a parameter value for the form body.

    Floats are written in plain decimal notation (never "1e-05").
    """
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return format(Decimal(repr(value)), "f")
    return str(value)


def implode_params(template: str, params: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Substitute `{name}` placeholders in an endpoint template.

    Returns:
        (path, leftover params that were not placeholders)

    Raises:
        ArgumentsRequired: If a placeholder has no value
    """
    remaining = dict(params)

    def _replace(match: "re.Match") -> str:
        key = match.group(1)
        if key not in remaining:
            raise ArgumentsRequired(f"indodax {template} requires a '{key}' parameter")
        return quote(format_param(remaining.pop(key)), safe="")

    return _PLACEHOLDER.sub(_replace, template), remaining


class RequestSigner:
    """
    Turns (endpoint, params) into a SignedRequest for one credential set.

    Args:
        credentials: API key and secret (may be empty for public-only use)
        public_url: Public API base URL
        private_url: Private trade API URL
        nonce: Shared NonceGenerator (one is created when omitted)

    Example:
        >>> signer = RequestSigner(Credentials(api_key="k", secret="s"))
        >>> signer.sign("ticker", {"pair": "btc_idr"}).url
        'https://indodax.com/api/btc_idr/ticker'
        >>> req = signer.sign("getInfo")
        >>> req.headers["Key"]
        'k'
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        public_url: str = "https://indodax.com/api",
        private_url: str = "https://indodax.com/tapi",
        nonce: Optional[NonceGenerator] = None
    ):
        self.credentials = credentials or Credentials()
        self.public_url = public_url.rstrip("/")
        self.private_url = private_url
        self.nonce = nonce or NonceGenerator()

    @staticmethod
    def is_private(endpoint: str) -> bool:
        return endpoint in PRIVATE_ENDPOINTS

    def sign(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> SignedRequest:
        """
        Build the request for an endpoint.

        Args:
            endpoint: Public endpoint name ("ticker", "trades", "depth") or
                private method name ("getInfo", "trade", ...)
            params: Path placeholders / query params for public calls,
                form fields for private calls

        Returns:
            SignedRequest ready for the transport

        Raises:
            ConfigurationError: Private endpoint without API key or secret
            ArgumentsRequired: Public endpoint missing a path placeholder
            ValueError: Unknown endpoint name
        """
        params = dict(params or {})

        if endpoint in PRIVATE_ENDPOINTS:
            return self._sign_private(endpoint, params)

        template = PUBLIC_ENDPOINTS.get(endpoint)
        if template is None:
            raise ValueError(f"Unknown indodax endpoint: {endpoint}")

        path, query = implode_params(template, params)
        url = f"{self.public_url}/{path}"
        if query:
            url += "?" + urlencode({k: format_param(v) for k, v in query.items() if v is not None})
        return SignedRequest(url=url, method="GET")

    def check_required_credentials(self) -> None:
        """
        Raises:
            ConfigurationError: If the API key or secret is empty
        """
        missing = [name for name, value in (("apiKey", self.credentials.api_key), ("secret", self.credentials.secret)) if not value]
        if missing:
            raise ConfigurationError(f"indodax requires {' and '.join(missing)} for private endpoints")

    def encode_body(self, endpoint: str, nonce: int, params: Mapping[str, Any]) -> str:
        """Form-encode method, nonce, then caller params in insertion order."""
        fields: List[Tuple[str, str]] = [
            ("method", endpoint),
            ("nonce", str(nonce)),
        ]
        fields.extend(
            (key, format_param(value))
            for key, value in params.items()
            if value is not None and key not in _RESERVED_FIELDS
        )
        return urlencode(fields)

    def signature(self, body: str) -> str:
        """Hex HMAC-SHA512 of the exact body, keyed by the secret."""
        return hmac.new(
            self.credentials.secret.encode("utf-8"),
            body.encode("utf-8"),
            hashlib.sha512
        ).hexdigest()

    def _sign_private(self, endpoint: str, params: Dict[str, Any]) -> SignedRequest:
        self.check_required_credentials()

        nonce = self.nonce.next()
        body = self.encode_body(endpoint, nonce, params)
        headers = {
            "Content-Type": FORM_CONTENT_TYPE,
            "Key": self.credentials.api_key,
            "Sign": self.signature(body),
        }
        logger.debug(f"Signed private request: {endpoint} (nonce={nonce})")
        return SignedRequest(url=self.private_url, method="POST", body=body, headers=headers)
