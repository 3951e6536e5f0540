"""
Spot Exchange Interface: Abstract Contract for Spot Connectors

This module defines the abstract base class every spot exchange connector
implements. Callers work against SpotExchangeInterface and receive the
canonical models from core.schemas, whatever the exchange's wire format.

Example:
    class IndodaxExchange(SpotExchangeInterface):
        name = "indodax"

        async def fetch_ticker(self, symbol):
            ...

    exchange = IndodaxExchange()
    await exchange.initialize()
    ticker = await exchange.fetch_ticker("BTC/IDR")
    await exchange.shutdown()

Capabilities System:
    Each exchange declares which optional features it supports via the
    `capabilities` dict, so callers can degrade gracefully:

        capabilities = {
            "createMarketOrder": False,
            "fetchClosedOrders": True,
            "withdraw": True,
        }
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.schemas import (
    BalanceSet,
    Order,
    OrderBookSnapshot,
    OrderReceipt,
    Ticker,
    Trade,
    WithdrawalResult,
)


class SpotExchangeInterface(ABC):
    """
    Abstract Base Class for Spot Exchange Connectors

    Class Attributes:
        name: Unique identifier for the exchange (lowercase, e.g., "indodax")
        capabilities: Dictionary indicating which optional features are supported

    Abstract Methods (MUST be implemented):
        - fetch_ticker, fetch_order_book, fetch_trades
        - fetch_balance
        - fetch_order, fetch_open_orders
        - create_order, cancel_order

    Optional Methods (raise NotImplementedError unless overridden):
        - fetch_closed_orders, fetch_trade_history, withdraw
        - initialize / shutdown (no-ops by default)

    Raises (all methods):
        core.errors.ExchangeError subclasses; see core/errors.py
    """

    name: str
    """Unique exchange identifier (lowercase)"""

    capabilities: Dict[str, bool] = {
        "fetchTicker": False,
        "fetchOrderBook": False,
        "fetchTrades": False,
        "fetchBalance": False,
        "fetchOrder": False,
        "fetchOpenOrders": False,
        "fetchClosedOrders": False,
        "fetchTradeHistory": False,
        "createOrder": False,
        "createMarketOrder": False,
        "cancelOrder": False,
        "withdraw": False,
    }

    # ============================================
    # Public Market Data
    # ============================================

    @abstractmethod
    async def fetch_ticker(self, symbol: str) -> Ticker:
        """
        Fetch the current ticker for a market.

        Args:
            symbol: Canonical symbol (e.g., "BTC/IDR")

        Returns:
            Ticker: Snapshot with unknown values left as None

        Raises:
            NotFound: If the symbol is not a known market
        """
        ...

    @abstractmethod
    async def fetch_order_book(self, symbol: str) -> OrderBookSnapshot:
        """
        Fetch a one-shot order book snapshot.

        Returns:
            OrderBookSnapshot: bids descending, asks ascending by price
        """
        ...

    @abstractmethod
    async def fetch_trades(self, symbol: str) -> List[Trade]:
        """Fetch recent public trades for a market."""
        ...

    # ============================================
    # Private Account Data
    # ============================================

    @abstractmethod
    async def fetch_balance(self) -> BalanceSet:
        """
        Fetch balances for every asset the connector knows about.

        Raises:
            ConfigurationError: If credentials are not configured
            AuthenticationError: If the exchange rejects them
        """
        ...

    @abstractmethod
    async def fetch_order(self, order_id: str, symbol: Optional[str] = None) -> Order:
        """Fetch one order by id."""
        ...

    @abstractmethod
    async def fetch_open_orders(self, symbol: Optional[str] = None) -> List[Order]:
        """
        Fetch open orders, for one market or for all markets when symbol is None.

        Returns:
            List[Order]: Flat list in the order the exchange returned them
        """
        ...

    async def fetch_closed_orders(self, symbol: Optional[str] = None) -> List[Order]:
        """Fetch closed orders (optional capability)."""
        raise NotImplementedError(f"{self.name} does not support fetch_closed_orders")

    async def fetch_trade_history(self, symbol: Optional[str] = None) -> List[Trade]:
        """Fetch the account's own fills (optional capability)."""
        raise NotImplementedError(f"{self.name} does not support fetch_trade_history")

    # ============================================
    # Private Write Operations
    # ============================================

    @abstractmethod
    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: Optional[float] = None
    ) -> OrderReceipt:
        """
        Place an order.

        Args:
            symbol: Canonical symbol
            type: Order type ("limit", "market", ...)
            side: "buy" or "sell"
            amount: Size in base asset
            price: Limit price

        Raises:
            InvalidOrder: If the order type is unsupported or limits are violated
            InsufficientFunds: If the account cannot cover the order
        """
        ...

    @abstractmethod
    async def cancel_order(self, order_id: str, symbol: Optional[str] = None, side: Optional[str] = None) -> Dict[str, Any]:
        """
        Cancel an open order.

        Raises:
            OrderNotFound: If the order does not exist or is already finalized
        """
        ...

    async def withdraw(
        self,
        code: str,
        amount: float,
        address: str,
        tag: Optional[str] = None
    ) -> WithdrawalResult:
        """Withdraw funds to an external address (optional capability)."""
        raise NotImplementedError(f"{self.name} does not support withdraw")

    # ============================================
    # Optional Lifecycle Methods
    # ============================================

    async def initialize(self) -> None:
        """
        Initialize the connector (open HTTP sessions, etc.).

        Should be idempotent (safe to call multiple times).
        """
        pass

    async def shutdown(self) -> None:
        """
        Release connector resources.

        Should not raise.
        """
        pass

    # ============================================
    # Helper Methods
    # ============================================

    def supports(self, feature: str) -> bool:
        """
        Check if this exchange supports a specific feature.

        Example:
            >>> if exchange.supports("withdraw"):
            ...     await exchange.withdraw("BTC", 0.1, address)
        """
        return self.capabilities.get(feature, False)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}')>"
