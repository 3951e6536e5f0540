"""
Indodax Exchange Connector

This module implements SpotExchangeInterface for Indodax, the Indonesian
spot exchange (IDR markets).

API Documentation:
    https://indodax.com/downloads/BITCOINCOID-API-DOCUMENTATION.pdf

Endpoints Used:
    Public (GET https://indodax.com/api/<pair>/...):
        - ticker - Last price, best bid/ask, 24h volumes
        - depth  - Order book snapshot
        - trades - Recent public trades

    Private (POST https://indodax.com/tapi, method=<name>):
        - getInfo       - Balances
        - trade         - Place a limit order
        - getOrder      - One order
        - openOrders    - Open orders (one pair or all pairs)
        - orderHistory  - Past orders
        - tradeHistory  - Own fills
        - cancelOrder   - Cancel an order
        - withdrawCoin  - Withdraw to an external address

Flow of every operation:
    MarketDirectory lookup -> RequestSigner -> IndodaxAPIClient (transport
    + error classifier) -> parsers -> canonical model

Structure:
    exchanges/indodax/
    ├── __init__.py          # This file (IndodaxExchange class)
    ├── api_client.py        # aiohttp transport
    ├── error_classifier.py  # Exchange error text -> canonical errors
    ├── markets.py           # Static market directory
    ├── parsers.py           # Response -> canonical models
    └── signer.py            # Nonce + HMAC-SHA512 request signing
"""

from typing import Any, Dict, List, Optional

from core.errors import ArgumentsRequired, InvalidOrder, MalformedResponse
from core.exchange_interface import SpotExchangeInterface
from core.logging import logger
from core.schemas import (
    BalanceSet,
    Credentials,
    MarketDescriptor,
    Order,
    OrderBookSnapshot,
    OrderReceipt,
    Ticker,
    Trade,
    WithdrawalResult,
)
from core.utils.time import current_utc_timestamp
from .api_client import IndodaxAPIClient
from .markets import MarketDirectory
from .parsers import (
    parse_balance,
    parse_open_orders,
    parse_order,
    parse_order_book,
    parse_orders,
    parse_ticker,
    parse_trade_history,
    parse_trades,
    parse_withdrawal,
)
from .signer import RequestSigner


def _payload(response: Any, *keys: str) -> Any:
    """
    Walk nested keys of a response.

    Raises:
        MalformedResponse: If a level is missing or not an object
    """
    value = response
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            raise MalformedResponse(f"indodax: response has no '{'.'.join(keys)}'", response=response)
        value = value[key]
    return value


def _object(response: Any, *keys: str) -> Dict[str, Any]:
    """
    Like _payload, but the value found must be a JSON object.

    Raises:
        MalformedResponse: If it is missing or not an object
    """
    payload = _payload(response, *keys)
    if not isinstance(payload, dict):
        raise MalformedResponse(f"indodax: '{'.'.join(keys)}' is not an object", response=response)
    return payload


class IndodaxExchange(SpotExchangeInterface):
    """
    Indodax Spot Exchange Connector

    Args:
        credentials: API key/secret (defaults to the configured ones)
        markets: Market directory (defaults to the static Indodax table)
        client: Transport (defaults to an IndodaxAPIClient over a new signer)

    Example:
        >>> exchange = IndodaxExchange()
        >>> await exchange.initialize()
        >>> ticker = await exchange.fetch_ticker("BTC/IDR")
        >>> orders = await exchange.fetch_open_orders()
        >>> await exchange.shutdown()

    Notes:
        - Only limit orders exist on Indodax
        - Order sizes are always returned in the base asset
        - One signer (and so one nonce counter) per connector instance
    """

    name = "indodax"

    capabilities = {
        "fetchTicker": True,
        "fetchTickers": False,
        "fetchOrderBook": True,
        "fetchTrades": True,
        "fetchBalance": True,
        "fetchOrder": True,
        "fetchOrders": False,
        "fetchOpenOrders": True,
        "fetchClosedOrders": True,
        "fetchTradeHistory": True,
        "fetchMyTrades": False,
        "fetchCurrencies": False,
        "createOrder": True,
        "createMarketOrder": False,
        "cancelOrder": True,
        "withdraw": True,
    }

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        markets: Optional[MarketDirectory] = None,
        client: Optional[IndodaxAPIClient] = None
    ):
        # Import settings here to avoid circular imports
        from core.config import settings

        self.markets = markets or MarketDirectory.default()

        if client is None:
            signer = RequestSigner(
                credentials or settings.credentials,
                public_url=settings.indodax_public_url,
                private_url=settings.indodax_private_url,
            )
            client = IndodaxAPIClient(
                signer,
                timeout=settings.request_timeout,
                max_retries=settings.max_retries,
            )
        self.client = client

        logger.debug(f"IndodaxExchange created ({len(self.markets)} markets)")

    async def initialize(self) -> None:
        logger.info("Initializing Indodax exchange connector...")
        await self.client.open()

    async def shutdown(self) -> None:
        logger.info("Shutting down Indodax exchange connector...")
        await self.client.close()

    def market(self, symbol: str) -> MarketDescriptor:
        """
        Raises:
            NotFound: If the symbol is not listed
        """
        return self.markets.lookup(symbol)

    def _require_symbol(self, symbol: Optional[str], operation: str) -> MarketDescriptor:
        if symbol is None:
            raise ArgumentsRequired(f"indodax {operation} requires a symbol")
        return self.market(symbol)

    # ============================================
    # Public Market Data
    # ============================================

    async def fetch_ticker(self, symbol: str) -> Ticker:
        market = self.market(symbol)
        response = await self.client.request("ticker", {"pair": market.id})
        return parse_ticker(_object(response, "ticker"), market)

    async def fetch_order_book(self, symbol: str) -> OrderBookSnapshot:
        market = self.market(symbol)
        response = await self.client.request("depth", {"pair": market.id})
        if not isinstance(response, dict):
            raise MalformedResponse("indodax: order book is not an object", response=response)
        return parse_order_book(response, market)

    async def fetch_trades(self, symbol: str) -> List[Trade]:
        market = self.market(symbol)
        response = await self.client.request("trades", {"pair": market.id})
        if not isinstance(response, list):
            raise MalformedResponse("indodax: trades response is not a list", response=response)
        trades = parse_trades(response, market)
        logger.info(f"Fetched {len(trades)} trades for {market.symbol}")
        return trades

    # ============================================
    # Private Account Data
    # ============================================

    async def fetch_balance(self) -> BalanceSet:
        response = await self.client.request("getInfo")
        return parse_balance(_object(response, "return"), self.markets.currencies())

    async def fetch_order(self, order_id: str, symbol: Optional[str] = None) -> Order:
        market = self._require_symbol(symbol, "fetch_order")
        response = await self.client.request("getOrder", {
            "pair": market.id,
            "order_id": order_id,
        })
        order = {"id": order_id, **_object(response, "return", "order")}
        return parse_order(order, market)

    async def fetch_open_orders(self, symbol: Optional[str] = None) -> List[Order]:
        market = None
        request: Dict[str, Any] = {}
        if symbol is not None:
            market = self.market(symbol)
            request["pair"] = market.id

        response = await self.client.request("openOrders", request)
        # orders is null when there are none
        raw_orders = _object(response, "return").get("orders")
        orders = parse_open_orders(raw_orders, self.markets, market)

        logger.info(f"Fetched {len(orders)} open orders{' for ' + market.symbol if market else ''}")
        return orders

    async def fetch_closed_orders(self, symbol: Optional[str] = None) -> List[Order]:
        market = self._require_symbol(symbol, "fetch_closed_orders")
        response = await self.client.request("orderHistory", {"pair": market.id})
        orders = parse_orders(_object(response, "return").get("orders"), market)
        return [order for order in orders if order.status == "closed"]

    async def fetch_trade_history(self, symbol: Optional[str] = None) -> List[Trade]:
        market = self._require_symbol(symbol, "fetch_trade_history")
        response = await self.client.request("tradeHistory", {"pair": market.id})
        return parse_trade_history(_object(response, "return").get("trades"), market)

    # ============================================
    # Private Write Operations
    # ============================================

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: Optional[float] = None
    ) -> OrderReceipt:
        """
        Place a limit order.

        Buy orders carry the quote total (amount * price, rounded to the
        market's price precision) and the base amount; sell orders carry
        the base amount.

        Raises:
            InvalidOrder: For anything but a limit buy/sell
            ArgumentsRequired: If price is missing
        """
        if type != "limit":
            raise InvalidOrder(f"indodax allows limit orders only, got '{type}'")
        if side not in ("buy", "sell"):
            raise InvalidOrder(f"indodax order side must be 'buy' or 'sell', got '{side}'")
        if price is None:
            raise ArgumentsRequired("indodax create_order requires a price")

        market = self.market(symbol)
        request: Dict[str, Any] = {
            "pair": market.id,
            "type": side,
            "price": price,
        }
        if side == "buy":
            request[market.quote_id] = round(amount * price, market.price_precision)
        request[market.base_id] = amount

        response = await self.client.request("trade", request)
        order_id = _payload(response, "return", "order_id")

        logger.info(f"Placed {side} limit order {order_id} on {market.symbol}: {amount} @ {price}")
        return OrderReceipt(id=str(order_id), info=response)

    async def cancel_order(
        self,
        order_id: str,
        symbol: Optional[str] = None,
        side: Optional[str] = None
    ) -> Dict[str, Any]:
        market = self._require_symbol(symbol, "cancel_order")
        if side is None:
            raise ArgumentsRequired("indodax cancel_order requires the order side")

        response = await self.client.request("cancelOrder", {
            "pair": market.id,
            "order_id": order_id,
            "type": side,
        })
        logger.info(f"Canceled order {order_id} on {market.symbol}")
        return _object(response, "return")

    async def withdraw(
        self,
        code: str,
        amount: float,
        address: str,
        tag: Optional[str] = None
    ) -> WithdrawalResult:
        """
        Withdraw to an external address.

        request_id is the current millisecond clock; Indodax forwards it to
        the callback URL configured for the API key.
        """
        if not address:
            raise ArgumentsRequired("indodax withdraw requires an address")

        request: Dict[str, Any] = {
            "currency": self.markets.currency_id(code),
            "withdraw_amount": amount,
            "withdraw_address": address,
            "request_id": str(current_utc_timestamp(milliseconds=True)),
        }
        if tag:
            request["withdraw_memo"] = tag

        response = await self.client.request("withdrawCoin", request)
        result = parse_withdrawal(response)
        logger.info(f"Withdrawal of {amount} {code.upper()} submitted (txid={result.id})")
        return result


__all__ = ["IndodaxExchange"]
