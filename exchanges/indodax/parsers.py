"""
Indodax Response Parsers

Pure functions turning one Indodax JSON payload (plus the relevant market
descriptor) into canonical models. No network access, no side effects
beyond DEBUG/WARNING logging.

Wire quirks handled here:
    - Volumes and order sizes live under field names built from native
      asset codes: "vol_btc", "order_idr", "remain_btc". field_for()
      builds them.
    - Depending on the market, an order's size is reported either in the
      quote asset ("order_idr" = total IDR) or in the base asset
      ("order_btc"). parse_order() handles both.
    - When the local currency (IDR) is involved, the exchange may use the
      token "rp" instead of "idr" in those field names.
    - Times are whole seconds; the canonical model uses milliseconds.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.logging import get_logger
from core.schemas import (
    Balance,
    BalanceSet,
    MarketDescriptor,
    Order,
    OrderBookSnapshot,
    Ticker,
    Trade,
    WithdrawalResult,
)
from core.utils.safe import safe_float, safe_string
from core.utils.time import seconds_to_milliseconds
from exchanges.indodax.markets import MarketDirectory


LOCAL_CURRENCY_ID = "idr"
LOCAL_CURRENCY_TOKEN = "rp"

ORDER_STATUSES: Dict[str, str] = {
    "filled": "closed",
    "cancelled": "canceled",
}

logger = get_logger(__name__)


# ============================================
# Field Name Helpers
# ============================================

def field_for(prefix: str, asset_id: str) -> str:
    """
    Build an asset-keyed field name.

    Example:
        >>> field_for("vol", "BTC")
        'vol_btc'
        >>> field_for("order", "idr")
        'order_idr'
    """
    return f"{prefix}_{asset_id.lower()}"


def order_field_keys(order: Mapping[str, Any], market: MarketDescriptor) -> Tuple[str, str]:
    """
    Asset tokens used in an order's size fields.

    Returns:
        (quote token, base token); normally the market's native asset ids,
        replaced by "rp" when the local currency is on that side and the
        order actually carries "rp" fields.
    """
    quote_key = market.quote_id
    base_key = market.base_id

    if market.quote_id == LOCAL_CURRENCY_ID and field_for("order", LOCAL_CURRENCY_TOKEN) in order:
        quote_key = LOCAL_CURRENCY_TOKEN
    # The exchange also does this on the base side
    if market.base_id == LOCAL_CURRENCY_ID and field_for("remain", LOCAL_CURRENCY_TOKEN) in order:
        base_key = LOCAL_CURRENCY_TOKEN

    return quote_key, base_key


def normalize_order_status(status: Optional[str]) -> str:
    """
    Translate the exchange's status vocabulary.

    "filled" -> "closed", "cancelled" -> "canceled", anything else -> "open".
    """
    return ORDER_STATUSES.get(status, "open")


# ============================================
# Public Market Data
# ============================================

def parse_ticker(ticker: Mapping[str, Any], market: MarketDescriptor) -> Ticker:
    """
    Parse the inner `ticker` object of a `{pair}/ticker` response.

    Response Format:
        {
          "high": "520000000", "low": "500000000",
          "vol_btc": "12.5", "vol_idr": "6400000000",
          "last": "510000000", "buy": "509000000", "sell": "511000000",
          "server_time": 1700000000
        }
    """
    last = safe_float(ticker, "last")
    return Ticker(
        symbol=market.symbol,
        timestamp=seconds_to_milliseconds(ticker.get("server_time")),
        high=safe_float(ticker, "high"),
        low=safe_float(ticker, "low"),
        bid=safe_float(ticker, "buy"),
        ask=safe_float(ticker, "sell"),
        last=last,
        close=last,
        base_volume=safe_float(ticker, field_for("vol", market.base_id)),
        quote_volume=safe_float(ticker, field_for("vol", market.quote_id)),
        raw=dict(ticker),
    )


def parse_bids_asks(levels: Optional[Iterable[Any]], price_key: int = 0, amount_key: int = 1) -> List[Tuple[float, float]]:
    """Convert `[price, amount, ...]` rows to float pairs, dropping unparseable rows."""
    result: List[Tuple[float, float]] = []
    for level in levels or []:
        try:
            result.append((float(level[price_key]), float(level[amount_key])))
        except (TypeError, ValueError, IndexError, KeyError):
            logger.debug(f"Skipping malformed order book level: {level!r}")
    return result


def parse_order_book(
    orderbook: Mapping[str, Any],
    market: Optional[MarketDescriptor] = None,
    timestamp: Optional[int] = None,
    bids_key: str = "buy",
    asks_key: str = "sell",
    price_key: int = 0,
    amount_key: int = 1
) -> OrderBookSnapshot:
    """
    Parse a `{pair}/depth` response.

    Bids are sorted descending and asks ascending by price. Both sorts are
    stable, so equal prices keep the exchange's order. A missing side
    yields an empty list.

    Response Format:
        { "buy": [["509000000", "0.5"], ...], "sell": [["511000000", "0.2"], ...] }
    """
    bids = parse_bids_asks(orderbook.get(bids_key), price_key, amount_key)
    asks = parse_bids_asks(orderbook.get(asks_key), price_key, amount_key)

    return OrderBookSnapshot(
        symbol=market.symbol if market is not None else None,
        timestamp=timestamp,
        bids=sorted(bids, key=lambda level: level[0], reverse=True),
        asks=sorted(asks, key=lambda level: level[0]),
    )


def parse_trade(trade: Mapping[str, Any], market: MarketDescriptor) -> Trade:
    """
    Parse one element of a `{pair}/trades` response.

    Response Format:
        { "date": "1700000000", "price": "510000000", "amount": "0.01", "tid": "123", "type": "buy" }
    """
    return Trade(
        id=safe_string(trade, "tid"),
        symbol=market.symbol,
        timestamp=seconds_to_milliseconds(trade.get("date")),
        side=safe_string(trade, "type"),
        type=None,
        price=safe_float(trade, "price"),
        amount=safe_float(trade, "amount"),
        raw=dict(trade),
    )


def parse_trades(trades: Optional[Iterable[Mapping[str, Any]]], market: MarketDescriptor) -> List[Trade]:
    return [parse_trade(trade, market) for trade in trades or []]


# ============================================
# Orders
# ============================================

def parse_order(order: Mapping[str, Any], market: Optional[MarketDescriptor] = None) -> Order:
    """
    Parse one order object from getOrder / openOrders / orderHistory.

    Size derivation:
        1. Pick the quote/base tokens (see order_field_keys).
        2. Quote-denominated: "order_<quote>" present and non-zero
           -> cost = order_<quote>, amount = cost / price,
              remaining = remain_<quote> / price, filled = amount - remaining
        3. Otherwise base-denominated:
           -> amount = cost = order_<base>, remaining = remain_<base>,
              filled = amount - remaining
        4. average = cost / filled only when filled is non-zero.

    Without a market descriptor the size fields cannot be located and
    stay None.

    Response Format:
        {
          "order_id": "94425", "submit_time": "1700000000", "price": "50000",
          "type": "buy", "status": "open",
          "order_idr": "1000000", "remain_idr": "250000"
        }
    """
    price = safe_float(order, "price")

    symbol = None
    amount = None
    remaining = None
    filled = None
    cost = None

    if market is not None:
        symbol = market.symbol
        quote_key, base_key = order_field_keys(order, market)

        cost = safe_float(order, field_for("order", quote_key))
        if cost:
            if price:
                amount = cost / price
                remaining_cost = safe_float(order, field_for("remain", quote_key))
                if remaining_cost is not None:
                    remaining = remaining_cost / price
                    filled = amount - remaining
        else:
            amount = safe_float(order, field_for("order", base_key))
            cost = amount
            remaining = safe_float(order, field_for("remain", base_key))
            if amount is not None and remaining is not None:
                filled = amount - remaining

    average = None
    if filled and cost is not None:
        average = cost / filled

    return Order(
        id=safe_string(order, "order_id", safe_string(order, "id")),
        symbol=symbol,
        timestamp=seconds_to_milliseconds(order.get("submit_time")),
        side=safe_string(order, "type"),
        price=price,
        amount=amount,
        filled=filled,
        remaining=remaining,
        cost=cost,
        average=average,
        status=normalize_order_status(safe_string(order, "status")),
        raw=dict(order),
    )


def parse_orders(orders: Optional[Iterable[Mapping[str, Any]]], market: Optional[MarketDescriptor] = None) -> List[Order]:
    return [parse_order(order, market) for order in orders or []]


def parse_open_orders(
    raw_orders: Any,
    directory: MarketDirectory,
    market: Optional[MarketDescriptor] = None
) -> List[Order]:
    """
    Parse `return.orders` of an openOrders response.

    Shapes:
        null                                   -> no open orders
        [ {order}, ... ]                       -> fetched for one pair
        { "btc_idr": [ {order}, ... ], ... }   -> fetched across all pairs

    For the nested shape every native market id is resolved through the
    directory and the groups are concatenated in response order. Orders
    under an id the directory does not know are still returned, without
    a symbol.
    """
    if not raw_orders:
        return []

    if not isinstance(raw_orders, Mapping):
        return parse_orders(raw_orders, market)

    result: List[Order] = []
    for market_id, market_orders in raw_orders.items():
        descriptor = directory.find_by_id(market_id)
        if descriptor is None:
            logger.warning(f"Open orders for unknown market id '{market_id}'; parsing without market")
        result.extend(parse_orders(market_orders, descriptor))

    logger.debug(f"Parsed {len(result)} open orders across {len(raw_orders)} markets")
    return result


# ============================================
# Own Trade History
# ============================================

def parse_trade_history_entry(entry: Mapping[str, Any], market: MarketDescriptor) -> Trade:
    """
    Parse one element of a tradeHistory response.

    The filled size is in the base asset, under the bare base id
    ("btc"), or under "order_<base>" in older payloads.

    Response Format:
        {
          "trade_id": "3", "order_id": "94425", "type": "sell",
          "btc": "0.01", "price": "510000000", "fee": "0",
          "trade_time": "1700000000"
        }
    """
    price = safe_float(entry, "price")
    amount = safe_float(entry, market.base_id)
    if amount is None:
        amount = safe_float(entry, field_for("order", market.base_id))

    cost = None
    if amount is not None and price is not None:
        cost = amount * price

    return Trade(
        id=safe_string(entry, "trade_id"),
        order_id=safe_string(entry, "order_id"),
        symbol=market.symbol,
        timestamp=seconds_to_milliseconds(entry.get("trade_time")),
        side=safe_string(entry, "type"),
        price=price,
        amount=amount,
        cost=cost,
        fee=safe_float(entry, "fee"),
        raw=dict(entry),
    )


def parse_trade_history(entries: Optional[Iterable[Mapping[str, Any]]], market: MarketDescriptor) -> List[Trade]:
    return [parse_trade_history_entry(entry, market) for entry in entries or []]


# ============================================
# Account
# ============================================

def parse_balance(info: Mapping[str, Any], currencies: Mapping[str, str]) -> BalanceSet:
    """
    Parse `return` of a getInfo response.

    Args:
        info: { "balance": {"idr": ..., "btc": ...}, "balance_hold": {...}, ... }
        currencies: Canonical code -> native id for every known asset

    Missing amounts count as 0.0; total is always free + used.
    """
    free_by_id = info.get("balance") or {}
    used_by_id = info.get("balance_hold") or {}

    balances: Dict[str, Balance] = {}
    for code, currency_id in currencies.items():
        free = safe_float(free_by_id, currency_id, 0.0)
        used = safe_float(used_by_id, currency_id, 0.0)
        balances[code] = Balance(free=free, used=used, total=free + used)

    return BalanceSet(balances=balances, raw=dict(info))


def parse_withdrawal(response: Mapping[str, Any]) -> WithdrawalResult:
    """
    Parse a withdrawCoin response.

    The id is the blockchain txid once the exchange reports a non-empty one.
    """
    txid = safe_string(response, "txid")
    return WithdrawalResult(
        id=txid if txid else None,
        info=dict(response),
    )
