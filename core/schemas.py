"""
Normalized Data Schemas

This module defines Pydantic models for the canonical trading data model.
Whatever idiosyncratic shape an exchange uses on the wire, its connector
normalizes responses into these models.

Models:
    - MarketDescriptor: Static description of one tradable pair
    - Ticker: Point-in-time price/volume snapshot
    - OrderBookSnapshot: One-shot bids/asks snapshot
    - Trade: One historical fill (public trade or own trade)
    - Order: One limit order with derived fill state
    - Balance / BalanceSet: Per-asset free/used/total funds
    - OrderReceipt, WithdrawalResult: Results of write operations
    - Credentials, SignedRequest: Inputs and outputs of the request signer

Conventions:
    - Timestamps are integer milliseconds since epoch (None when unknown)
    - Numeric fields the exchange did not report are None, never 0.0
    - Every entity parsed from a response keeps the raw payload in `raw`
    - Entities are frozen once constructed
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.utils.time import to_utc_datetime


# ============================================
# Market Descriptor
# ============================================

class MarketDescriptor(BaseModel):
    """
    Static description of one tradable pair.

    Attributes:
        id: Exchange-native market id (e.g., "btc_idr")
        symbol: Canonical symbol "BASE/QUOTE" (e.g., "BTC/IDR")
        base_asset / quote_asset: Canonical uppercase asset codes
        base_id / quote_id: Lowercase native asset codes; the exchange uses
            them as JSON field-name suffixes ("vol_btc", "order_idr")
        amount_precision / price_precision: Decimal places
        min_amount / max_amount: Order size limits in base asset (None = no limit)

    Example:
        >>> MarketDescriptor(
        ...     id="btc_idr", symbol="BTC/IDR",
        ...     base_asset="BTC", quote_asset="IDR",
        ...     base_id="btc", quote_id="idr",
        ...     amount_precision=8, price_precision=0,
        ...     min_amount=0.0001,
        ... )
    """

    id: str = Field(..., description="Exchange-native market id", examples=["btc_idr"])
    symbol: str = Field(..., description="Canonical BASE/QUOTE symbol", examples=["BTC/IDR"])
    base_asset: str
    quote_asset: str
    base_id: str
    quote_id: str
    amount_precision: int = Field(8, ge=0)
    price_precision: int = Field(0, ge=0)
    min_amount: Optional[float] = Field(None, ge=0)
    max_amount: Optional[float] = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator('base_id', 'quote_id', 'id')
    @classmethod
    def validate_native_ids(cls, v: str) -> str:
        """Native ids are lowercase"""
        return v.lower()

    @field_validator('symbol', 'base_asset', 'quote_asset')
    @classmethod
    def validate_canonical_codes(cls, v: str) -> str:
        """Canonical codes are uppercase"""
        return v.upper()


# ============================================
# Base Market Data Model
# ============================================

class BaseMarketModel(BaseModel):
    """
    Base model for entities parsed from one exchange response.

    Common fields:
        - exchange: Source exchange (lowercase)
        - symbol: Canonical symbol, None when the market could not be resolved
        - timestamp: Milliseconds since epoch, None when not reported
        - raw: The exchange payload the entity was built from
    """

    exchange: str = Field(
        "indodax",
        description="Source exchange identifier (lowercase)"
    )

    symbol: Optional[str] = Field(
        None,
        description="Canonical BASE/QUOTE symbol",
        examples=["BTC/IDR", "ETH/IDR"]
    )

    timestamp: Optional[int] = Field(
        None,
        description="Event time in milliseconds since epoch"
    )

    raw: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw exchange payload"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator('symbol')
    @classmethod
    def validate_symbol(cls, v: Optional[str]) -> Optional[str]:
        """Ensure symbol is uppercase"""
        return v.upper() if v is not None else v

    @field_validator('exchange')
    @classmethod
    def validate_exchange(cls, v: str) -> str:
        """Ensure exchange is lowercase"""
        return v.lower()

    @property
    def datetime_utc(self) -> Optional[datetime]:
        """Timestamp as a UTC datetime (None when unknown)"""
        if self.timestamp is None:
            return None
        return to_utc_datetime(self.timestamp)


# ============================================
# Ticker Schema
# ============================================

class Ticker(BaseMarketModel):
    """
    Ticker Data Model

    Point-in-time price snapshot. Any value the exchange did not report
    stays None.

    Attributes:
        high / low: 24h range
        bid / ask: Best buy / best sell price
        last / close: Last traded price (close mirrors last)
        base_volume: 24h volume in base asset
        quote_volume: 24h volume in quote asset
    """

    high: Optional[float] = None
    low: Optional[float] = None
    bid: Optional[float] = None
    ask: Optional[float] = None
    last: Optional[float] = None
    close: Optional[float] = None
    base_volume: Optional[float] = None
    quote_volume: Optional[float] = None


# ============================================
# Order Book Schema
# ============================================

class OrderBookSnapshot(BaseMarketModel):
    """
    One-shot order book snapshot.

    Invariant:
        bids are non-increasing by price, asks are non-decreasing by price.
        Equal prices keep the order in which the exchange sent them.
    """

    bids: List[Tuple[float, float]] = Field(default_factory=list)
    asks: List[Tuple[float, float]] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_sorted(self) -> 'OrderBookSnapshot':
        """Reject snapshots whose sides are out of order"""
        for (higher, _), (lower, _) in zip(self.bids, self.bids[1:]):
            if lower > higher:
                raise ValueError(f"Bids not sorted descending: {lower} after {higher}")
        for (lower, _), (higher, _) in zip(self.asks, self.asks[1:]):
            if higher < lower:
                raise ValueError(f"Asks not sorted ascending: {higher} after {lower}")
        return self


# ============================================
# Trade Schema
# ============================================

class Trade(BaseMarketModel):
    """
    One historical fill.

    Public trades only carry id/side/price/amount. Own trades from the
    private trade history also carry order_id, cost and fee.

    `type` (order type) stays None: the exchange does not report it.
    """

    id: Optional[str] = None
    side: Optional[str] = None
    type: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    cost: Optional[float] = None
    fee: Optional[float] = None
    order_id: Optional[str] = None


# ============================================
# Order Schema
# ============================================

OrderStatus = Literal["open", "closed", "canceled"]


class Order(BaseMarketModel):
    """
    Order Data Model

    Attributes:
        id: Exchange order id
        type: Always "limit" (the exchange has no other order type)
        side: "buy" or "sell"
        price: Limit price
        amount: Order size in base asset
        filled / remaining: Executed and open size in base asset
        cost: Order total as reported by the exchange
        average: cost / filled, None when nothing has been filled
        status: One of "open", "closed", "canceled"

    Invariants:
        amount == filled + remaining when both are known;
        average == cost / filled when filled > 0.
    """

    id: Optional[str] = None
    type: Literal["limit"] = "limit"
    side: Optional[str] = None
    price: Optional[float] = None
    amount: Optional[float] = None
    filled: Optional[float] = None
    remaining: Optional[float] = None
    cost: Optional[float] = None
    average: Optional[float] = None
    status: OrderStatus = "open"


# ============================================
# Balance Schemas
# ============================================

class Balance(BaseModel):
    """Funds for one asset. total == free + used."""

    free: float = 0.0
    used: float = 0.0
    total: float = 0.0

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_total(self) -> 'Balance':
        if not math.isclose(self.total, self.free + self.used, rel_tol=1e-12, abs_tol=1e-12):
            raise ValueError(f"total ({self.total}) != free ({self.free}) + used ({self.used})")
        return self


class BalanceSet(BaseModel):
    """
    Balances for every known asset code, rebuilt on each fetch.

    Example:
        >>> balances["BTC"].free
        0.5
        >>> balances.total["IDR"]
        1250000.0
    """

    balances: Dict[str, Balance] = Field(default_factory=dict)
    raw: Dict[str, Any] = Field(default_factory=dict)

    def __getitem__(self, code: str) -> Balance:
        return self.balances[code.upper()]

    def __contains__(self, code: str) -> bool:
        return code.upper() in self.balances

    @property
    def free(self) -> Dict[str, float]:
        return {code: b.free for code, b in self.balances.items()}

    @property
    def used(self) -> Dict[str, float]:
        return {code: b.used for code, b in self.balances.items()}

    @property
    def total(self) -> Dict[str, float]:
        return {code: b.total for code, b in self.balances.items()}


# ============================================
# Write Operation Results
# ============================================

class OrderReceipt(BaseModel):
    """Result of placing an order: the new order id plus the raw response."""

    id: str
    info: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


class WithdrawalResult(BaseModel):
    """Result of a withdrawal; id is the transaction id once one exists."""

    id: Optional[str] = None
    info: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


# ============================================
# Signing Schemas
# ============================================

class Credentials(BaseModel):
    """API key and secret for one account."""

    api_key: str = ""
    secret: str = ""

    model_config = ConfigDict(frozen=True)

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return f"Credentials(api_key='{masked}')"

    __str__ = __repr__


class SignedRequest(BaseModel):
    """
    A request ready for the transport.

    Public requests have no body and no auth headers. Private requests
    carry a form-encoded body and Key/Sign headers.
    """

    url: str
    method: Literal["GET", "POST"] = "GET"
    body: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)
