import feedparser
import html
import logging
import re
from typing import List, Optional

import requests

from config import DEFAULT_CRYPTOPANIC_BASE_URL
from models import Article
from outcome import Err, Ok, Outcome

# Configure logging
logger = logging.getLogger(__name__)

CRYPTO_RSS_FEEDS = [
    "https://cointelegraph.com/rss",
    "https://www.coindesk.com/arc/outboundfeeds/rss/",
    "https://decrypt.co/feed",
    "https://www.theblock.co/rss.xml",
    "https://cryptoslate.com/feed/",
]

MOCK_CRYPTO_NEWS = (
    Article(
        title="Bitcoin Surges Past $50,000 as Institutional Adoption Grows",
        source="CryptoNews",
        published_at="2024-01-15T10:30:00Z",
        summary="Bitcoin has reached a new milestone, crossing the $50,000 mark for the first time in months, driven by increased institutional investment and positive market sentiment.",
        url="https://example.com/bitcoin-surge",
        sentiment=85,
        currencies=("BTC",),
    ),
    Article(
        title="Ethereum 2.0 Upgrade Shows Promising Results in Testnet",
        source="BlockchainDaily",
        published_at="2024-01-15T09:15:00Z",
        summary="The latest Ethereum 2.0 testnet deployment has demonstrated significant improvements in transaction speed and reduced gas fees, signaling a successful transition to proof-of-stake.",
        url="https://example.com/ethereum-upgrade",
        sentiment=78,
        currencies=("ETH",),
    ),
    Article(
        title="Major Bank Announces Plans to Offer Crypto Custody Services",
        source="FinanceCrypto",
        published_at="2024-01-15T08:45:00Z",
        summary="A leading global bank has revealed its intention to provide cryptocurrency custody services, marking a significant step toward mainstream financial institution adoption of digital assets.",
        url="https://example.com/bank-crypto",
        sentiment=92,
        currencies=("BTC", "ETH"),
    ),
    Article(
        title="DeFi Protocol Reports Record-Breaking TVL Growth",
        source="DeFiInsider",
        published_at="2024-01-15T07:20:00Z",
        summary="A prominent decentralized finance protocol has achieved unprecedented total value locked (TVL), indicating growing confidence in DeFi platforms and yield farming strategies.",
        url="https://example.com/defi-growth",
        sentiment=88,
        currencies=("ETH", "USDC"),
    ),
    Article(
        title="Regulatory Framework for Cryptocurrencies Proposed in Major Economy",
        source="CryptoRegulation",
        published_at="2024-01-15T06:30:00Z",
        summary="Government officials have introduced comprehensive cryptocurrency regulations aimed at protecting investors while fostering innovation in the digital asset space.",
        url="https://example.com/regulation",
        sentiment=65,
        currencies=("BTC", "ETH"),
    ),
)


def get_mock_crypto_news() -> List[Article]:
    """Fixed fallback corpus used whenever the live source fails."""
    return list(MOCK_CRYPTO_NEWS)


def _strip_html(text: str) -> str:
    plain = re.sub(r"<[^>]+>", " ", text or "")
    return " ".join(html.unescape(plain).split())


class NewsHunter:
    """
    Collects crypto headlines from CryptoPanic (default) or crypto RSS feeds.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        news_count: int = 10,
        sentiment_filter: str = "important",
        source: str = "cryptopanic",
        base_url: str = DEFAULT_CRYPTOPANIC_BASE_URL,
        timeout: float = 10,
        rss_feeds: Optional[List[str]] = None,
    ):
        self.api_key = api_key
        self.news_count = news_count
        self.sentiment_filter = sentiment_filter
        self.source = source
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.rss_feeds = list(rss_feeds or CRYPTO_RSS_FEEDS)

    @classmethod
    def from_settings(cls, settings) -> "NewsHunter":
        return cls(
            api_key=settings.cryptopanic_api_key,
            news_count=settings.news_count,
            sentiment_filter=settings.news_sentiment,
            source=settings.news_source,
            base_url=settings.cryptopanic_base_url,
            timeout=settings.http_timeout_sec,
        )

    def fetch_cryptopanic(self) -> Outcome:
        """Fetch the latest posts from the CryptoPanic v2 developer API."""
        if not self.api_key:
            return Err("CRYPTOPANIC_API_KEY is not set in environment variables. Please check your .env file.")

        params = {"auth_token": self.api_key}
        if self.sentiment_filter:
            params["filter"] = self.sentiment_filter

        logger.info("🔗 Fetching news from CryptoPanic API...")
        try:
            response = requests.get(f"{self.base_url}/posts/", params=params, timeout=self.timeout)
            if response.status_code != 200:
                return Err(f"CryptoPanic API error: {response.status_code} {response.reason}")
            data = response.json()
        except Exception as e:
            return Err(f"CryptoPanic request failed: {e}")

        # v1 answers under "results", some v2 plans under "data"
        results = (data.get("results") or data.get("data") or []) if isinstance(data, dict) else None
        if not isinstance(results, list):
            return Err("Invalid response format from CryptoPanic API")

        articles = []
        for post in results[: self.news_count]:
            if not isinstance(post, dict):
                continue
            source = post.get("source") or {}
            articles.append(
                Article(
                    title=post.get("title") or "",
                    source=(source.get("title") if isinstance(source, dict) else None) or "Unknown Source",
                    published_at=post.get("published_at") or "",
                    summary=post.get("description") or "General Crypto News",
                    url=f"https://cryptopanic.com/news/{post.get('slug', '')}/",
                )
            )
        return Ok(articles)

    def fetch_rss(self) -> Outcome:
        """Read the crypto RSS feeds one after another until `news_count` items are collected."""
        articles: List[Article] = []
        errors = []

        for url in self.rss_feeds:
            if len(articles) >= self.news_count:
                break
            try:
                feed = feedparser.parse(url)
            except Exception as e:
                errors.append(f"{url}: {e}")
                continue

            if feed.bozo and not feed.entries:
                errors.append(f"{url}: {feed.bozo_exception}")
                continue

            source = feed.feed.get("title", "Unknown Source")
            for entry in feed.entries:
                if len(articles) >= self.news_count:
                    break
                articles.append(
                    Article(
                        title=_strip_html(entry.get("title", "")),
                        summary=_strip_html(entry.get("summary", "") or entry.get("description", "")) or "General Crypto News",
                        source=source,
                        published_at=entry.get("published", ""),
                        url=entry.get("link", ""),
                    )
                )

        if not articles:
            return Err("No RSS items fetched" + (f" ({'; '.join(errors)})" if errors else ""))
        if errors:
            logger.warning(f"Some RSS feeds failed: {errors}")
        return Ok(articles)

    def fetch_news(self) -> List[Article]:
        """
        Fetch headlines from the configured source.
        Any failure falls back to the fixed mock corpus; callers never see the difference.
        """
        outcome = self.fetch_rss() if self.source == "rss" else self.fetch_cryptopanic()
        if outcome.ok:
            logger.info(f"✅ Fetched {len(outcome.data)} news articles")
            return outcome.data

        logger.error(f"Error fetching news from {self.source}: {outcome.error}")
        logger.info("⚠️  Falling back to mock data...")
        return get_mock_crypto_news()
