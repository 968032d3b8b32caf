"""
Ticker Resolver
===============
Static dictionary of the ticker symbols we look for in news text and the
CoinGecko ids they resolve to.

The candidate list keeps its declaration order: that order breaks ties
when ranking trending tokens. Duplicates in the list are tolerated and
collapse onto their first position.
"""

import logging
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

# Declaration order matters (tie-break for equal mention counts).
COMMON_TOKENS = (
    'BTC', 'ETH', 'SOL', 'DOGE', 'ADA', 'XRP', 'DOT', 'LINK', 'LTC', 'BCH',
    'XLM', 'VET', 'TRX', 'FIL', 'UNI', 'ATOM', 'NEO', 'CAKE', 'AVAX', 'ALGO',
    'MATIC', 'FTM', 'SAND', 'MANA', 'SHIB', 'LUNC', 'BUSD', 'USDC', 'USDT', 'DAI',
    'WBTC', 'WETH', 'AAVE', 'COMP', 'MKR', 'SNX', 'CRV', 'YFI', 'SUSHI', '1INCH',
    'BAL', 'REN', 'BAND', 'ZRX', 'BAT', 'ENJ', 'CHZ', 'HOT', 'WIN', 'TRX',
    'ONT', 'ICX', 'ZIL', 'VET', 'THETA', 'TFUEL', 'HBAR', 'ONE', 'HARMONY', 'ZEN',
    'QTUM', 'IOTA', 'NANO', 'XMR', 'DASH', 'ZEC', 'RVN', 'GRT', 'OCEAN', 'RLC',
    'ANKR', 'COTI', 'CELO', 'KAVA', 'ZEN', 'RSR', 'STORJ', 'SKL', 'NU', 'API3',
    'PERP', 'RAD', 'BADGER', 'FARM', 'PICKLE', 'CREAM', 'ALPHA', 'BETA', 'GAMMA',
    'DELTA', 'EPSILON', 'ZETA', 'ETA', 'THETA', 'IOTA', 'KAPPA', 'LAMBDA', 'MU',
)

COINGECKO_IDS = {
    'BTC': 'bitcoin', 'ETH': 'ethereum', 'SOL': 'solana', 'DOGE': 'dogecoin',
    'ADA': 'cardano', 'XRP': 'ripple', 'DOT': 'polkadot', 'LINK': 'chainlink',
    'LTC': 'litecoin', 'BCH': 'bitcoin-cash', 'XLM': 'stellar', 'VET': 'vechain',
    'TRX': 'tron', 'FIL': 'filecoin', 'UNI': 'uniswap', 'ATOM': 'cosmos',
    'NEO': 'neo', 'CAKE': 'pancakeswap-token', 'AVAX': 'avalanche-2',
    'ALGO': 'algorand', 'MATIC': 'matic-network', 'FTM': 'fantom',
    'SAND': 'the-sandbox', 'MANA': 'decentraland', 'SHIB': 'shiba-inu',
    'LUNC': 'terra-luna', 'BUSD': 'binance-usd', 'USDC': 'usd-coin',
    'USDT': 'tether', 'DAI': 'dai', 'WBTC': 'wrapped-bitcoin',
    'WETH': 'weth', 'AAVE': 'aave', 'COMP': 'compound-governance-token',
    'MKR': 'maker', 'SNX': 'havven', 'CRV': 'curve-dao-token',
    'YFI': 'yearn-finance', 'SUSHI': 'sushi', '1INCH': '1inch',
    'BAL': 'balancer', 'REN': 'republic-protocol', 'BAND': 'band-protocol',
    'ZRX': '0x', 'BAT': 'basic-attention-token', 'ENJ': 'enjincoin',
    'CHZ': 'chiliz', 'HOT': 'holochain', 'WIN': 'wink', 'ONT': 'ontology',
    'ICX': 'icon', 'ZIL': 'zilliqa', 'THETA': 'theta-token', 'TFUEL': 'theta-fuel',
    'HBAR': 'hedera-hashgraph', 'ONE': 'harmony', 'HARMONY': 'harmony',
    'ZEN': 'horizen', 'QTUM': 'qtum', 'IOTA': 'iota', 'NANO': 'nano',
    'XMR': 'monero', 'DASH': 'dash', 'ZEC': 'zcash', 'RVN': 'ravencoin',
    'GRT': 'the-graph', 'OCEAN': 'ocean-protocol', 'RLC': 'iexec-rlc',
    'ANKR': 'ankr', 'COTI': 'coti', 'CELO': 'celo', 'KAVA': 'kava',
    'RSR': 'reserve-rights-token', 'STORJ': 'storj', 'SKL': 'skale',
    'NU': 'nucypher', 'API3': 'api3', 'PERP': 'perpetual-protocol',
    'RAD': 'radicle', 'BADGER': 'badger-dao', 'FARM': 'harvest-finance',
    'PICKLE': 'pickle-finance', 'CREAM': 'cream-2', 'ALPHA': 'alpha-finance',
    'BETA': 'beta-finance', 'GAMMA': 'gamma-strategies', 'DELTA': 'delta-exchange-token',
    'EPSILON': 'epsilon', 'ZETA': 'zeta', 'ETA': 'eta',
    'KAPPA': 'kappa', 'LAMBDA': 'lambda', 'MU': 'mu',
}


def _normalize(symbol) -> str:
    if not isinstance(symbol, str):
        return ""
    return symbol.strip().upper()


class SymbolDictionary:
    """
    Read-only pairing of declared candidate symbols and their provider ids.

    Args:
        symbols: Candidate tickers in declaration order (duplicates allowed).
        coin_ids: Ticker -> CoinGecko id. Tickers missing here are unresolvable.
    """

    def __init__(self, symbols: Iterable[str], coin_ids: Mapping[str, str]):
        ordered = []
        seen = set()
        for raw in symbols:
            symbol = _normalize(raw)
            if symbol and symbol not in seen:
                seen.add(symbol)
                ordered.append(symbol)

        self._symbols: Tuple[str, ...] = tuple(ordered)
        self._positions = MappingProxyType({s: i for i, s in enumerate(self._symbols)})
        self._coin_ids = MappingProxyType(
            {_normalize(k): v for k, v in coin_ids.items() if _normalize(k) and v}
        )

    @property
    def symbols(self) -> Tuple[str, ...]:
        return self._symbols

    @property
    def coin_ids(self) -> Mapping[str, str]:
        return self._coin_ids

    def resolve(self, symbol: str) -> Optional[str]:
        """Return the CoinGecko id for a ticker, or None if unresolvable."""
        return self._coin_ids.get(_normalize(symbol))

    def position(self, symbol: str) -> Optional[int]:
        """Declaration index of a ticker, or None if it was never declared."""
        return self._positions.get(_normalize(symbol))

    def __contains__(self, symbol) -> bool:
        return _normalize(symbol) in self._positions

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolDictionary(symbols={len(self._symbols)}, resolvable={len(self._coin_ids)})"


DEFAULT_DICTIONARY = SymbolDictionary(COMMON_TOKENS, COINGECKO_IDS)


def resolve_ticker(ticker: str, dictionary: Optional[SymbolDictionary] = None) -> Optional[str]:
    """
    Resolve a ticker to its CoinGecko id using the process-wide dictionary.

    Returns:
        The provider id (e.g. "bitcoin" for "BTC") or None.
    """
    coin_id = (dictionary or DEFAULT_DICTIONARY).resolve(ticker)
    if coin_id is None:
        logger.debug(f"Ticker {ticker!r} has no CoinGecko mapping.")
    return coin_id
