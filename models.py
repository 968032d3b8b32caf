from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Article:
    """
    One news headline as delivered by the news source.

    Only `title` and `summary` feed trend detection; the other fields are
    carried through to the report untouched.
    """
    title: str
    summary: str = ""
    source: str = "Unknown Source"
    published_at: str = ""
    url: str = ""
    sentiment: int = 0  # passthrough placeholder, never computed
    currencies: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PriceResult:
    """Price snapshot for one trending symbol. Missing figures stay None."""
    symbol: str
    price: Optional[float] = None
    price_change_24h: Optional[float] = None
    market_cap: Optional[float] = None

    @classmethod
    def absent(cls, symbol: str) -> "PriceResult":
        return cls(symbol=symbol)

    @property
    def has_quote(self) -> bool:
        return self.price is not None and self.price_change_24h is not None
