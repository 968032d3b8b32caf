"""
Settings
========
Environment driven configuration for the digest run.
`load_dotenv()` is called by the entrypoint before `Settings.from_env()`.
"""

import os
from dataclasses import dataclass

DEFAULT_CRYPTOPANIC_BASE_URL = "https://cryptopanic.com/api/developer/v2"
DEFAULT_COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
DEFAULT_OPENROUTER_MODEL = "deepseek/deepseek-chat"
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Missing or invalid configuration. Fatal to the current run."""


def _get(key: str, default: str = "") -> str:
    value = os.environ.get(key)
    if value is None:
        return default
    return value.strip()


def _get_int(key: str, default: int, minimum: int = 0) -> int:
    raw = _get(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"Invalid integer for {key}: {raw!r}")
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def _get_bool(key: str) -> bool:
    return _get(key).lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str = ""
    openrouter_model: str = DEFAULT_OPENROUTER_MODEL
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL

    cryptopanic_api_key: str = ""
    cryptopanic_base_url: str = DEFAULT_CRYPTOPANIC_BASE_URL
    news_source: str = "cryptopanic"
    news_count: int = 10
    news_sentiment: str = "important"

    coingecko_api_key: str = ""
    coingecko_base_url: str = DEFAULT_COINGECKO_BASE_URL

    telegram_bot_token: str = ""
    telegram_chat_id: str = ""

    trending_top_k: int = 5
    schedule_interval_minutes: int = 2
    http_timeout_sec: int = 10
    price_parity_on_failure: bool = False
    dry_run: bool = False

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    def require_llm_credentials(self) -> None:
        """The summary step cannot run without at least one text-generation key."""
        if not self.openrouter_api_key and not self.gemini_api_key:
            raise ConfigError(
                "OPENROUTER_API_KEY (or DEEPSEEK_API_KEY) is not set in environment variables. "
                "Please check your .env file."
            )

    @staticmethod
    def from_env() -> "Settings":
        news_source = _get("NEWS_SOURCE", "cryptopanic").lower() or "cryptopanic"
        if news_source not in ("cryptopanic", "rss"):
            raise ConfigError(f"Unknown NEWS_SOURCE: {news_source!r} (expected 'cryptopanic' or 'rss')")

        return Settings(
            openrouter_api_key=_get("OPENROUTER_API_KEY") or _get("DEEPSEEK_API_KEY"),
            openrouter_model=_get("OPENROUTER_MODEL") or DEFAULT_OPENROUTER_MODEL,
            gemini_api_key=_get("GEMINI_API_KEY"),
            gemini_model=_get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
            cryptopanic_api_key=_get("CRYPTOPANIC_API_KEY"),
            cryptopanic_base_url=_get("CRYPTOPANIC_BASE_URL") or DEFAULT_CRYPTOPANIC_BASE_URL,
            news_source=news_source,
            news_count=_get_int("NEWS_COUNT", 10, minimum=1),
            news_sentiment=_get("NEWS_SENTIMENT", "important"),
            coingecko_api_key=_get("COINGECKO_API_KEY"),
            coingecko_base_url=_get("COINGECKO_BASE_URL") or DEFAULT_COINGECKO_BASE_URL,
            telegram_bot_token=_get("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_get("TELEGRAM_CHAT_ID"),
            trending_top_k=_get_int("TRENDING_TOP_K", 5),
            schedule_interval_minutes=_get_int("SCHEDULE_INTERVAL_MINUTES", 2, minimum=1),
            http_timeout_sec=_get_int("HTTP_TIMEOUT_SEC", 10, minimum=1),
            price_parity_on_failure=_get_bool("PRICE_PARITY_ON_FAILURE"),
            dry_run=_get_bool("DRY_RUN"),
        )
