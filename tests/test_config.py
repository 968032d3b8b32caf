import pytest

from config import DEFAULT_COINGECKO_BASE_URL, DEFAULT_OPENROUTER_MODEL, ConfigError, Settings


def test_defaults_apply_on_empty_environment(clean_env):
    settings = Settings.from_env()

    assert settings.news_source == "cryptopanic"
    assert settings.news_count == 10
    assert settings.news_sentiment == "important"
    assert settings.trending_top_k == 5
    assert settings.schedule_interval_minutes == 2
    assert settings.http_timeout_sec == 10
    assert settings.coingecko_base_url == DEFAULT_COINGECKO_BASE_URL
    assert settings.openrouter_model == DEFAULT_OPENROUTER_MODEL
    assert settings.price_parity_on_failure is False
    assert settings.dry_run is False
    assert settings.telegram_configured is False


def test_values_are_read_from_environment(clean_env):
    clean_env.setenv("DEEPSEEK_API_KEY", "legacy-key")
    clean_env.setenv("NEWS_SOURCE", "RSS")
    clean_env.setenv("TRENDING_TOP_K", "3")
    clean_env.setenv("PRICE_PARITY_ON_FAILURE", "yes")
    clean_env.setenv("DRY_RUN", "1")
    clean_env.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    clean_env.setenv("TELEGRAM_CHAT_ID", " 42 ")

    settings = Settings.from_env()

    assert settings.openrouter_api_key == "legacy-key"
    assert settings.news_source == "rss"
    assert settings.trending_top_k == 3
    assert settings.price_parity_on_failure is True
    assert settings.dry_run is True
    assert settings.telegram_chat_id == "42"
    assert settings.telegram_configured is True


def test_openrouter_key_wins_over_legacy_alias(clean_env):
    clean_env.setenv("OPENROUTER_API_KEY", "new")
    clean_env.setenv("DEEPSEEK_API_KEY", "old")

    assert Settings.from_env().openrouter_api_key == "new"


@pytest.mark.parametrize(
    "key,value",
    [
        ("NEWS_COUNT", "ten"),
        ("NEWS_COUNT", "0"),
        ("SCHEDULE_INTERVAL_MINUTES", "0"),
        ("HTTP_TIMEOUT_SEC", "-1"),
        ("TRENDING_TOP_K", "-2"),
        ("NEWS_SOURCE", "twitter"),
    ],
)
def test_invalid_values_raise_config_error(clean_env, key, value):
    clean_env.setenv(key, value)

    with pytest.raises(ConfigError):
        Settings.from_env()


def test_require_llm_credentials():
    with pytest.raises(ConfigError, match="OPENROUTER_API_KEY"):
        Settings().require_llm_credentials()

    Settings(openrouter_api_key="k").require_llm_credentials()
    Settings(gemini_api_key="g").require_llm_credentials()
