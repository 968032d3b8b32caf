import pytest
import os
import sys

# Ensure the root directory is in the path so we can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models import Article
from ticker_resolver import SymbolDictionary


class DummyResponse:
    def __init__(self, status_code=200, payload=None, reason_phrase="OK", json_error=None):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.reason = reason_phrase
        self._payload = payload
        self._json_error = json_error
        self.text = "" if payload is None else str(payload)

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class DummyAsyncClient:
    """Stands in for httpx.AsyncClient; records every GET."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.init_kwargs = {}

    def __call__(self, **kwargs):
        self.init_kwargs = kwargs
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def get(self, url, params=None):
        self.calls.append({"url": url, "params": params})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def small_dictionary():
    """Five-symbol dictionary; ZZZ is declared but unresolvable."""
    return SymbolDictionary(
        ["BTC", "ETH", "ZZZ", "BETA", "SOL"],
        {"BTC": "bitcoin", "ETH": "ethereum", "BETA": "beta-finance", "SOL": "solana"},
    )


@pytest.fixture
def make_article():
    def _make(title, summary="", **kwargs):
        return Article(title=title, summary=summary, **kwargs)
    return _make


@pytest.fixture
def coingecko_client(mocker):
    """Patch httpx.AsyncClient inside market_data with a configurable dummy."""
    client = DummyAsyncClient(response=DummyResponse(200, []))
    mocker.patch("market_data.httpx.AsyncClient", client)
    return client


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every setting the app reads so defaults apply."""
    for key in (
        "OPENROUTER_API_KEY", "DEEPSEEK_API_KEY", "OPENROUTER_MODEL", "GEMINI_API_KEY", "GEMINI_MODEL",
        "CRYPTOPANIC_API_KEY", "CRYPTOPANIC_BASE_URL", "NEWS_SOURCE", "NEWS_COUNT", "NEWS_SENTIMENT",
        "COINGECKO_API_KEY", "COINGECKO_BASE_URL", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
        "TRENDING_TOP_K", "SCHEDULE_INTERVAL_MINUTES", "HTTP_TIMEOUT_SEC", "PRICE_PARITY_ON_FAILURE",
        "DRY_RUN",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
