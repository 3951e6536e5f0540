"""
Indodax Market Directory

Indodax has no endpoint that lists its markets, so the tradable pairs are
a static table. The directory is built once at startup and is read-only.

Lookups go both ways:
    - lookup("BTC/IDR") for caller-facing canonical symbols
    - lookup_by_id("btc_idr") for responses keyed by native market id
      (e.g., open orders fetched across all markets)
"""

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from core.errors import NotFound
from core.schemas import MarketDescriptor


# (symbol, native id, base, quote, base id, quote id, amount precision, price precision, min amount)
MARKET_TABLE: Tuple[Tuple, ...] = (
    ("BTC/IDR", "btc_idr", "BTC", "IDR", "btc", "idr", 8, 0, 0.0001),
    ("BSV/IDR", "bchsv_idr", "BSV", "IDR", "bchsv", "idr", 8, 0, None),
    ("ACT/IDR", "act_idr", "ACT", "IDR", "act", "idr", 8, 0, None),
    ("AOA/IDR", "aoa_idr", "AOA", "IDR", "aoa", "idr", 8, 0, None),
    ("ADA/IDR", "ada_idr", "ADA", "IDR", "ada", "idr", 8, 0, None),
    ("BCD/IDR", "bcd_idr", "BCD", "IDR", "bcd", "idr", 8, 0, None),
    ("BCH/IDR", "bchabc_idr", "BCHABC", "IDR", "bchabc", "idr", 8, 0, 0.001),
    ("BTG/IDR", "btg_idr", "BTG", "IDR", "btg", "idr", 8, 0, 0.01),
    ("BTS/IDR", "bts_idr", "BTS", "IDR", "bts", "idr", 8, 0, 0.01),
    ("COAL/IDR", "coal_idr", "COAL", "IDR", "coal", "idr", 8, 0, 0.01),
    ("DASH/IDR", "drk_idr", "DASH", "IDR", "drk", "idr", 8, 0, 0.01),
    ("DOGE/IDR", "doge_idr", "DOGE", "IDR", "doge", "idr", 8, 0, 1000),
    ("ETH/IDR", "eth_idr", "ETH", "IDR", "eth", "idr", 8, 0, 0.01),
    ("ETC/IDR", "etc_idr", "ETC", "IDR", "etc", "idr", 8, 0, 0.1),
    ("GSC/IDR", "gsc_idr", "GSC", "IDR", "gsc", "idr", 8, 0, 0.1),
    ("HPB/IDR", "hpb_idr", "HPB", "IDR", "hpb", "idr", 8, 0, 0.1),
    ("IGNIS/IDR", "ignis_idr", "IGNIS", "IDR", "ignis", "idr", 8, 0, 1),
    ("LTC/IDR", "ltc_idr", "LTC", "IDR", "ltc", "idr", 8, 0, 0.01),
    ("NXT/IDR", "nxt_idr", "NXT", "IDR", "nxt", "idr", 8, 0, 5),
    ("OKB/IDR", "okb_idr", "OKB", "IDR", "okb", "idr", 8, 0, None),
    ("TEN/IDR", "ten_idr", "TEN", "IDR", "ten", "idr", 8, 0, 5),
    ("TRX/IDR", "trx_idr", "TRX", "IDR", "trx", "idr", 8, 0, None),
    ("WAVES/IDR", "waves_idr", "WAVES", "IDR", "waves", "idr", 8, 0, 0.1),
    ("XEM/IDR", "nem_idr", "XEM", "IDR", "nem", "idr", 8, 0, 1),
    ("XLM/IDR", "str_idr", "XLM", "IDR", "str", "idr", 8, 0, 20),
    ("XRP/IDR", "xrp_idr", "XRP", "IDR", "xrp", "idr", 8, 0, 10),
    ("XZC/IDR", "xzc_idr", "XZC", "IDR", "xzc", "idr", 8, 0, 0.1),
    ("SUMO/IDR", "sumo_idr", "SUMO", "IDR", "sumo", "idr", 8, 8, 0.01),
)


def _descriptor_from_row(row: Tuple) -> MarketDescriptor:
    symbol, market_id, base, quote, base_id, quote_id, amount_precision, price_precision, min_amount = row
    return MarketDescriptor(
        id=market_id,
        symbol=symbol,
        base_asset=base,
        quote_asset=quote,
        base_id=base_id,
        quote_id=quote_id,
        amount_precision=amount_precision,
        price_precision=price_precision,
        min_amount=min_amount,
        max_amount=None,
    )


class MarketDirectory:
    """
    Read-only mapping between canonical symbols and market descriptors.

    Args:
        markets: Descriptors to index; symbols and native ids must be unique

    Raises:
        ValueError: On duplicate symbol or native id

    Example:
        >>> directory = MarketDirectory.default()
        >>> directory.lookup("BTC/IDR").id
        'btc_idr'
        >>> directory.lookup_by_id("eth_idr").symbol
        'ETH/IDR'
    """

    def __init__(self, markets: Iterable[MarketDescriptor]):
        self._by_symbol: Dict[str, MarketDescriptor] = {}
        self._by_id: Dict[str, MarketDescriptor] = {}

        for market in markets:
            if market.symbol in self._by_symbol:
                raise ValueError(f"Duplicate market symbol: {market.symbol}")
            if market.id in self._by_id:
                raise ValueError(f"Duplicate market id: {market.id}")
            self._by_symbol[market.symbol] = market
            self._by_id[market.id] = market

    @classmethod
    def from_table(cls, table: Iterable[Tuple]) -> "MarketDirectory":
        return cls(_descriptor_from_row(row) for row in table)

    @classmethod
    def default(cls) -> "MarketDirectory":
        """Directory of every market Indodax lists."""
        return cls.from_table(MARKET_TABLE)

    def lookup(self, symbol: str) -> MarketDescriptor:
        """
        Resolve a canonical symbol.

        Raises:
            NotFound: If the symbol is not listed
        """
        market = self._by_symbol.get(symbol.upper())
        if market is None:
            raise NotFound(f"indodax does not have market symbol {symbol}")
        return market

    def lookup_by_id(self, market_id: str) -> MarketDescriptor:
        """
        Resolve a native market id (e.g., "btc_idr").

        Raises:
            NotFound: If the id is not listed
        """
        market = self._by_id.get(market_id.lower())
        if market is None:
            raise NotFound(f"indodax does not have market id {market_id}")
        return market

    def find_by_id(self, market_id: str) -> Optional[MarketDescriptor]:
        """Like lookup_by_id, but returns None for unknown ids."""
        return self._by_id.get(market_id.lower())

    @property
    def symbols(self) -> List[str]:
        return list(self._by_symbol)

    def currencies(self) -> Dict[str, str]:
        """
        Every asset code the directory knows, mapped to its native id.

        Returns:
            e.g. {"BTC": "btc", "IDR": "idr", "DASH": "drk", ...}
        """
        result: Dict[str, str] = {}
        for market in self._by_symbol.values():
            result.setdefault(market.base_asset, market.base_id)
            result.setdefault(market.quote_asset, market.quote_id)
        return result

    def currency_id(self, code: str) -> str:
        """
        Native id for an asset code.

        Raises:
            NotFound: If no market trades the asset
        """
        currency_id = self.currencies().get(code.upper())
        if currency_id is None:
            raise NotFound(f"indodax does not have currency {code}")
        return currency_id

    def __contains__(self, symbol: str) -> bool:
        return symbol.upper() in self._by_symbol

    def __iter__(self) -> Iterator[MarketDescriptor]:
        return iter(self._by_symbol.values())

    def __len__(self) -> int:
        return len(self._by_symbol)
