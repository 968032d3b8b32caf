"""
Price Enricher
==============
Attach live CoinGecko figures to the ranked trending symbols.

Output keeps the input order and length: an unresolvable symbol, or one
CoinGecko left out of its answer, still gets a PriceResult with every
figure set to None. The one exception is a failed CoinGecko call, which
yields an empty list unless `keep_parity_on_failure` is set.
"""

import logging
from typing import Dict, List, Optional, Sequence

from market_data import MarketData
from models import PriceResult
from ticker_resolver import DEFAULT_DICTIONARY, SymbolDictionary

logger = logging.getLogger("PriceEnricher")


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _to_price_result(symbol: str, entry: Dict) -> PriceResult:
    return PriceResult(
        symbol=symbol,
        price=_as_number(entry.get("current_price")),
        price_change_24h=_as_number(entry.get("price_change_percentage_24h")),
        market_cap=_as_number(entry.get("market_cap")),
    )


async def enrich_prices(
    symbols: Sequence[str],
    dictionary: Optional[SymbolDictionary] = None,
    market: Optional[MarketData] = None,
    keep_parity_on_failure: bool = False,
) -> List[PriceResult]:
    """
    Resolve symbols to coin ids, fetch them in one batch, map results back.

    Args:
        symbols: Ranked ticker symbols.
        dictionary: Symbol -> coin id mapping (process-wide default if None).
        market: CoinGecko client (a default one is built if None).
        keep_parity_on_failure: On provider failure return all-empty results
            instead of an empty list.
    """
    if not symbols:
        return []

    dictionary = dictionary or DEFAULT_DICTIONARY
    resolved = [(symbol, dictionary.resolve(symbol)) for symbol in symbols]

    coin_ids: List[str] = []
    for symbol, coin_id in resolved:
        if coin_id is None:
            logger.info(f"No CoinGecko id for {symbol}, price will be empty.")
        elif coin_id not in coin_ids:
            coin_ids.append(coin_id)

    if not coin_ids:
        return [PriceResult.absent(symbol) for symbol in symbols]

    market = market or MarketData()
    outcome = await market.fetch_coin_markets(coin_ids)

    if not outcome.ok:
        logger.error(f"Error fetching token prices: {outcome.error}")
        if keep_parity_on_failure:
            return [PriceResult.absent(symbol) for symbol in symbols]
        return []

    by_id: Dict[str, Dict] = {}
    for entry in outcome.data:
        if isinstance(entry, dict) and entry.get("id"):
            by_id.setdefault(entry["id"], entry)

    results: List[PriceResult] = []
    for symbol, coin_id in resolved:
        entry = by_id.get(coin_id) if coin_id else None
        if entry is None:
            if coin_id:
                logger.info(f"CoinGecko returned no data for {symbol} ({coin_id}).")
            results.append(PriceResult.absent(symbol))
        else:
            results.append(_to_price_result(symbol, entry))
    return results
