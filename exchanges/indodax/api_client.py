"""
Indodax REST API Client

Thin async transport for the Indodax public and private APIs. It handles:
- Signing every request through RequestSigner
- HTTP via aiohttp (GET for public, form POST for private)
- Retry with backoff on rate limits for public GETs only
- Passing every response through the error classifier

Parsing into canonical models is done by the caller (IndodaxExchange)
with the functions in parsers.py.

API Documentation:
    https://indodax.com/downloads/BITCOINCOID-API-DOCUMENTATION.pdf

Usage:
    async with IndodaxAPIClient(RequestSigner(credentials)) as client:
        ticker = await client.request("ticker", {"pair": "btc_idr"})
        info = await client.request("getInfo")
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional, Tuple

import aiohttp

from core.errors import NetworkError
from core.logging import get_logger, log_api_request, log_api_response
from core.schemas import SignedRequest
from exchanges.indodax.error_classifier import check_response
from exchanges.indodax.signer import RequestSigner


RATE_LIMIT_STATUSES = (418, 429, 503)

# Key a successful private envelope must carry (default "return")
PAYLOAD_KEYS: Dict[str, Optional[str]] = {
    "withdrawCoin": None,
}


class IndodaxAPIClient:
    """
    Async HTTP client for the Indodax REST APIs.

    Attributes:
        signer: RequestSigner for this credential set
        timeout: Per-request timeout in seconds
        max_retries: Attempts for public GETs that hit rate limits
        session: aiohttp ClientSession (created in __aenter__)

    Notes:
        - Private POSTs are sent exactly once; a rate-limited or timed out
          order placement is reported, not replayed
        - Exchange-level failures ({"success": 0, ...}) become canonical
          errors via error_classifier.check_response
    """

    def __init__(self, signer: RequestSigner, timeout: int = 10, max_retries: int = 3):
        self.signer = signer
        self.timeout = timeout
        self.max_retries = max_retries
        self.logger = get_logger(__name__)
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self.logger.debug("IndodaxAPIClient session created")

    async def close(self) -> None:
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("IndodaxAPIClient session closed")

    # ============================================
    # Public Entry Point
    # ============================================

    async def request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Sign, send and classify one request.

        Args:
            endpoint: Endpoint name ("ticker", "depth", "getInfo", "trade", ...)
            params: Endpoint parameters

        Returns:
            Parsed JSON body

        Raises:
            ConfigurationError: Private endpoint without credentials
            ExchangeError subclasses: Classified exchange failures
            NetworkError: Transport failures or non-JSON error responses
        """
        signed = self.signer.sign(endpoint, params)
        log_api_request("indodax", endpoint, params)

        started = time.monotonic()
        if signed.method == "GET":
            status, text = await self._get(signed)
        else:
            status, text = await self._post(signed)
        log_api_response("indodax", endpoint, status, time.monotonic() - started)

        data = self._decode(text)
        check_response(text, data, PAYLOAD_KEYS.get(endpoint, "return"))

        if status >= 400 or data is None:
            raise NetworkError(f"indodax {endpoint} HTTP {status}: {text[:200]}", response=text)

        return data

    # ============================================
    # HTTP
    # ============================================

    @staticmethod
    def _decode(text: str) -> Any:
        try:
            return json.loads(text)
        except (TypeError, ValueError):
            return None

    def _require_session(self) -> aiohttp.ClientSession:
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")
        return self.session

    async def _get(self, signed: SignedRequest) -> Tuple[int, str]:
        """
        GET with retry on rate limits and timeouts.

        Retry delay: 1.5s * (attempt + 1); no delay after the last attempt

        Raises:
            NetworkError: If every attempt failed
        """
        session = self._require_session()

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                async with session.get(
                    signed.url,
                    headers=signed.headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as resp:
                    text = await resp.text()

                    if resp.status in RATE_LIMIT_STATUSES:
                        delay = 1.5 * (attempt + 1)
                        self.logger.warning(
                            f"Rate limited (HTTP {resp.status}) on {signed.url} "
                            f"(attempt {attempt + 1}/{self.max_retries})"
                        )
                        if not last_attempt:
                            await asyncio.sleep(delay)
                        continue

                    return resp.status, text

            except asyncio.TimeoutError:
                self.logger.error(f"Timeout on {signed.url} (attempt {attempt + 1}/{self.max_retries})")
                if not last_attempt:
                    await asyncio.sleep(1.0 * (attempt + 1))

            except aiohttp.ClientError as e:
                self.logger.error(f"Request failed on {signed.url}: {e} (attempt {attempt + 1}/{self.max_retries})")
                if not last_attempt:
                    await asyncio.sleep(1.0 * (attempt + 1))

        raise NetworkError(f"Failed to fetch {signed.url} after {self.max_retries} attempts")

    async def _post(self, signed: SignedRequest) -> Tuple[int, str]:
        """
        Single-attempt form POST.

        Raises:
            NetworkError: On timeout or connection failure
        """
        session = self._require_session()

        try:
            async with session.post(
                signed.url,
                data=signed.body,
                headers=signed.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                return resp.status, await resp.text()

        except asyncio.TimeoutError as e:
            self.logger.error(f"Timeout on {signed.url}")
            raise NetworkError(f"indodax request timed out: {signed.url}") from e

        except aiohttp.ClientError as e:
            self.logger.error(f"Request failed on {signed.url}: {e}")
            raise NetworkError(f"indodax request failed: {e}") from e
