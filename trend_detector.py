"""
Trend Detector
==============
Keyword-frequency detection of trending tokens in a batch of news.

1. scan_mentions: whole-word, case-insensitive count per candidate symbol.
2. rank_mentions: count descending, ties by dictionary declaration order, top-K.
"""

import logging
import re
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Optional

from ticker_resolver import DEFAULT_DICTIONARY, SymbolDictionary

logger = logging.getLogger("TrendDetector")

DEFAULT_TOP_K = 5


@lru_cache(maxsize=512)
def _mention_pattern(symbol: str):
    # A hit must not touch another letter or digit on either side ("BETA" vs "BETATEST").
    return re.compile(rf"(?<![A-Z0-9]){re.escape(symbol)}(?![A-Z0-9])")


def _article_text(article) -> str:
    if isinstance(article, Mapping):
        title = article.get("title")
        summary = article.get("summary")
    else:
        title = getattr(article, "title", "")
        summary = getattr(article, "summary", "")
    return f"{title or ''} {summary or ''}"


def scan_mentions(articles: Iterable, symbols: Iterable[str]) -> Dict[str, int]:
    """
    Count whole-word mentions of each candidate symbol across all articles.

    Title and summary of every article are joined into one uppercase blob.
    Symbols with no match are left out of the result.
    """
    corpus = " ".join(_article_text(a) for a in articles).upper()

    counts: Dict[str, int] = {}
    seen = set()
    for raw in symbols:
        symbol = str(raw).strip().upper()
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)

        hits = len(_mention_pattern(symbol).findall(corpus))
        if hits:
            counts[symbol] = hits
    return counts


def rank_mentions(
    counts: Mapping[str, int],
    k: int = DEFAULT_TOP_K,
    dictionary: Optional[SymbolDictionary] = None,
) -> List[str]:
    """
    Return at most `k` symbols ordered by mention count, highest first.

    Equal counts keep the dictionary's declaration order, independent of the
    iteration order of `counts`. Undeclared symbols sort after declared ones.
    """
    if k <= 0 or not counts:
        return []

    dictionary = dictionary or DEFAULT_DICTIONARY
    undeclared = len(dictionary)

    def sort_key(symbol):
        position = dictionary.position(symbol)
        return (-counts[symbol], undeclared if position is None else position, symbol)

    mentioned = [symbol for symbol, count in counts.items() if count > 0]
    return sorted(mentioned, key=sort_key)[:k]


def detect_trending_tokens(
    articles: Iterable,
    dictionary: Optional[SymbolDictionary] = None,
    k: int = DEFAULT_TOP_K,
) -> List[str]:
    """Scan the articles against the dictionary and return the top-K symbols."""
    dictionary = dictionary or DEFAULT_DICTIONARY
    counts = scan_mentions(articles, dictionary.symbols)
    trending = rank_mentions(counts, k, dictionary)
    logger.info(f"Mention counts: {counts}")
    logger.info(f"🔥 Trending: {', '.join(trending) if trending else 'none'}")
    return trending
