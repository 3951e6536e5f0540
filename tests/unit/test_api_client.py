"""
Unit Tests for the Indodax API Client

Most tests monkeypatch the HTTP layer (_get/_post) to check what the
client does around it: signing, routing GET vs POST, decoding and error
classification. TestRetries drives _get/_post through a scripted session
to check the retry and single-send rules.

Run with:
    pytest tests/unit/test_api_client.py -v
"""

import asyncio
import json

import aiohttp
import pytest

from core.errors import InsufficientFunds, MalformedResponse, NetworkError
from core.schemas import Credentials
from exchanges.indodax.api_client import IndodaxAPIClient
from exchanges.indodax.signer import NonceGenerator, RequestSigner


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def client():
    signer = RequestSigner(
        Credentials(api_key="key", secret="secret"),
        nonce=NonceGenerator(clock=lambda: 1700000000000),
    )
    return IndodaxAPIClient(signer, timeout=5, max_retries=2)


def fake_transport(status, payload, calls):
    """Build an async stand-in for _get/_post returning a canned body."""
    text = payload if isinstance(payload, str) else json.dumps(payload)

    async def send(signed):
        calls.append(signed)
        return status, text

    return send


# ============================================
# Routing
# ============================================

class TestRouting:

    @pytest.mark.asyncio
    async def test_public_endpoint_uses_get(self, client, monkeypatch):
        calls = []
        monkeypatch.setattr(client, "_get", fake_transport(200, {"ticker": {"last": "1"}}, calls))

        data = await client.request("ticker", {"pair": "btc_idr"})

        assert data == {"ticker": {"last": "1"}}
        assert calls[0].url == "https://indodax.com/api/btc_idr/ticker"
        assert calls[0].method == "GET"

    @pytest.mark.asyncio
    async def test_private_endpoint_uses_signed_post(self, client, monkeypatch):
        calls = []
        monkeypatch.setattr(client, "_post", fake_transport(200, {"success": 1, "return": {}}, calls))

        await client.request("getInfo")

        signed = calls[0]
        assert signed.method == "POST"
        assert signed.url == "https://indodax.com/tapi"
        assert signed.body == "method=getInfo&nonce=1700000000000"
        assert signed.headers["Key"] == "key"
        assert "Sign" in signed.headers

    @pytest.mark.asyncio
    async def test_public_arrays_pass_through(self, client, monkeypatch):
        trades = [{"tid": "1", "price": "10", "amount": "1", "date": "1", "type": "buy"}]
        monkeypatch.setattr(client, "_get", fake_transport(200, trades, []))

        assert await client.request("trades", {"pair": "btc_idr"}) == trades


# ============================================
# Error Handling
# ============================================

class TestErrorHandling:

    @pytest.mark.asyncio
    async def test_exchange_failure_is_classified(self, client, monkeypatch):
        monkeypatch.setattr(
            client, "_post",
            fake_transport(200, {"success": 0, "error": "Insufficient balance."}, []),
        )

        with pytest.raises(InsufficientFunds):
            await client.request("trade", {"pair": "btc_idr", "type": "buy", "price": 1, "idr": 1})

    @pytest.mark.asyncio
    async def test_success_without_return_is_malformed(self, client, monkeypatch):
        monkeypatch.setattr(client, "_post", fake_transport(200, {"success": 1}, []))

        with pytest.raises(MalformedResponse):
            await client.request("getInfo")

    @pytest.mark.asyncio
    async def test_withdrawal_has_flat_success(self, client, monkeypatch):
        """Verify withdrawCoin answers are not required to carry `return`"""
        body = {"success": 1, "status": "approved", "txid": "abc"}
        monkeypatch.setattr(client, "_post", fake_transport(200, body, []))

        assert await client.request("withdrawCoin", {"currency": "btc"}) == body

    @pytest.mark.asyncio
    async def test_non_json_error_is_network_error(self, client, monkeypatch):
        monkeypatch.setattr(client, "_get", fake_transport(502, "<html>Bad Gateway</html>", []))

        with pytest.raises(NetworkError):
            await client.request("ticker", {"pair": "btc_idr"})

    @pytest.mark.asyncio
    async def test_http_error_with_json_body_is_network_error(self, client, monkeypatch):
        monkeypatch.setattr(client, "_get", fake_transport(500, {"message": "oops"}, []))

        with pytest.raises(NetworkError):
            await client.request("depth", {"pair": "btc_idr"})

    @pytest.mark.asyncio
    async def test_request_without_session_raises(self, client):
        """Verify using the client outside 'async with' fails loudly"""
        with pytest.raises(RuntimeError):
            await client.request("ticker", {"pair": "btc_idr"})


# ============================================
# Session Lifecycle
# ============================================

class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self, client):
        async with client as c:
            assert c.session is not None
            assert not c.session.closed

        assert client.session is None

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self, client):
        await client.open()
        session = client.session
        await client.open()

        assert client.session is session
        await client.close()


# ============================================
# Retry and Single-Send Behavior
# ============================================

class MockResponse:
    def __init__(self, status, text=""):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass


class MockSession:
    """Replays one scripted outcome per call; exceptions are raised."""

    def __init__(self, get_outcomes=(), post_outcomes=()):
        self.get_outcomes = list(get_outcomes)
        self.post_outcomes = list(post_outcomes)
        self.get_calls = 0
        self.post_calls = 0
        self.closed = False

    def _next(self, outcomes):
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, headers=None, timeout=None):
        self.get_calls += 1
        return self._next(self.get_outcomes)

    def post(self, url, data=None, headers=None, timeout=None):
        self.post_calls += 1
        return self._next(self.post_outcomes)


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping"""
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


class TestRetries:
    """Public GETs retry; private POSTs are sent once"""

    @pytest.mark.asyncio
    async def test_get_retries_on_rate_limit(self, client, sleeps):
        """Verify a 429 followed by a 200 succeeds on the second attempt"""
        client.session = MockSession(get_outcomes=[
            MockResponse(429, "Too Many Requests"),
            MockResponse(200, json.dumps({"ticker": {"last": "1"}})),
        ])

        data = await client.request("ticker", {"pair": "btc_idr"})

        assert data == {"ticker": {"last": "1"}}
        assert client.session.get_calls == 2
        assert sleeps == [1.5]

    @pytest.mark.asyncio
    async def test_get_fails_after_max_retries(self, client, sleeps):
        """Verify a permanent 429 gives up without sleeping after the last attempt"""
        client.session = MockSession(get_outcomes=[MockResponse(429, "Too Many Requests")])

        with pytest.raises(NetworkError, match="after 2 attempts"):
            await client.request("ticker", {"pair": "btc_idr"})

        assert client.session.get_calls == client.max_retries
        assert sleeps == [1.5]

    @pytest.mark.asyncio
    async def test_get_retries_after_timeout(self, client, sleeps):
        client.session = MockSession(get_outcomes=[
            asyncio.TimeoutError(),
            MockResponse(200, json.dumps([])),
        ])

        assert await client.request("trades", {"pair": "btc_idr"}) == []
        assert client.session.get_calls == 2
        assert sleeps == [1.0]

    @pytest.mark.asyncio
    async def test_get_connection_errors_exhaust_retries(self, client, sleeps):
        client.session = MockSession(get_outcomes=[aiohttp.ClientConnectionError("refused")])

        with pytest.raises(NetworkError):
            await client.request("depth", {"pair": "btc_idr"})

        assert client.session.get_calls == 2

    @pytest.mark.asyncio
    async def test_post_timeout_is_not_retried(self, client, sleeps):
        client.session = MockSession(post_outcomes=[asyncio.TimeoutError()])

        with pytest.raises(NetworkError, match="timed out"):
            await client.request("getInfo")

        assert client.session.post_calls == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_post_rate_limit_is_not_retried(self, client, sleeps):
        """Verify a rate-limited private call is reported, not replayed"""
        client.session = MockSession(post_outcomes=[MockResponse(429, "Too Many Requests")])

        with pytest.raises(NetworkError, match="HTTP 429"):
            await client.request("trade", {"pair": "btc_idr", "type": "sell", "price": 1, "btc": 1})

        assert client.session.post_calls == 1
        assert sleeps == []
