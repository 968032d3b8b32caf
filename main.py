import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from dateutil import parser as date_parser
from dotenv import load_dotenv

# Load env vars if running locally
load_dotenv()

from config import ConfigError, Settings
from hunter import NewsHunter
from brain import Brain, SummaryError
from market_data import MarketData
from models import Article, PriceResult
from price_enricher import enrich_prices
from run_observability import RunObservability
from telegram_bot import TelegramNotifier
from ticker_resolver import DEFAULT_DICTIONARY
from trend_detector import detect_trending_tokens

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("MainController")


def _safe_parse_published_datetime(raw_published) -> Optional[datetime]:
    """Parse a published timestamp and always return a timezone-aware datetime or None."""
    if isinstance(raw_published, datetime):
        return raw_published if raw_published.tzinfo else raw_published.replace(tzinfo=timezone.utc)
    if not raw_published:
        return None

    try:
        parsed = date_parser.parse(str(raw_published))
    except (ValueError, OverflowError) as e:
        logger.debug(f"Invalid published date '{raw_published}': {e}")
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _format_published(raw_published) -> str:
    parsed = _safe_parse_published_datetime(raw_published)
    if parsed is None:
        return str(raw_published or "Unknown date")
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def format_price_line(result: PriceResult, bold: bool = False) -> Optional[str]:
    """One price line, or None when the price or the 24h change is missing."""
    if not result.has_quote:
        return None
    change = result.price_change_24h
    arrow = "📈" if change >= 0 else "📉"
    direction = "up" if change >= 0 else "down"
    name = f"**{result.symbol}**" if bold else result.symbol
    return f"{arrow} {name}: ${result.price:.2f} ({direction} {abs(change):.1f}% in 24h)"


def _build_price_summary(price_results: Sequence[PriceResult]) -> str:
    lines = [line for line in (format_price_line(r, bold=True) for r in price_results) if line]
    if not lines:
        return ""
    return "💰 **Price Impact Summary:**\n" + "\n".join(lines)


def _build_digest_message(
    articles: Sequence[Article],
    summary: str,
    trending: Sequence[str],
    price_results: Sequence[PriceResult],
) -> str:
    """Build the single Telegram message for a digest run."""
    headlines = "\n\n".join(
        f"{index}. **{article.title}**\n   📅 {_format_published(article.published_at)}\n   🔗 {article.url}"
        for index, article in enumerate(articles, start=1)
    )
    sections = [
        "🤖 **Crypto News Summary**",
        f"📰 **Latest Crypto News Headlines:**\n\n{headlines}" if headlines else "📰 **Latest Crypto News Headlines:**\nNo headlines.",
        f"📊 **AI-Generated Summary:**\n\n{summary}",
        f"🔥 **Trending Tokens:** {', '.join(trending) if trending else 'none detected'}",
        _build_price_summary(price_results),
    ]
    return "\n\n".join(s for s in sections if s)


def _log_headlines(articles: Sequence[Article]) -> None:
    logger.info("📋 Raw News Headlines:")
    for index, article in enumerate(articles, start=1):
        logger.info(f"{index}. {article.title}")
        logger.info(f"   Source: {article.source}")
        logger.info(f"   Published: {_format_published(article.published_at)}")
        if article.currencies:
            logger.info(f"   Currencies: {', '.join(article.currencies)}")
        if article.sentiment:
            logger.info(f"   Sentiment Score: {article.sentiment}")
        logger.info(f"   URL: {article.url}")


async def run_async_pipeline(settings: Optional[Settings] = None) -> dict:
    """
    One digest run: news -> summary -> trending tokens -> prices -> Telegram.

    Raises ConfigError or SummaryError when the run has to be aborted; every
    other external failure degrades the report instead.
    """
    logger.info("🚀 Starting Crypto News Summarization...")
    run_observer = RunObservability("digest", context={"entrypoint": "main.run_async_pipeline"})

    try:
        with run_observer.stage("config"):
            settings = settings or Settings.from_env()
            settings.require_llm_credentials()
    except ConfigError as e:
        logger.error(f"❌ Configuration error: {e}")
        run_observer.finalize(status="error", summary="Configuration error, run aborted.")
        raise

    run_observer.dry_run = settings.dry_run
    hunter = NewsHunter.from_settings(settings)
    brain = Brain.from_settings(settings)
    market = MarketData.from_settings(settings)
    notifier = TelegramNotifier.from_settings(settings)

    # 1. News (blocking HTTP, run off the event loop)
    logger.info("📰 Fetching latest crypto news headlines...")
    with run_observer.stage("fetch_news"):
        articles: List[Article] = await asyncio.to_thread(hunter.fetch_news)
    _log_headlines(articles)
    run_observer.add_event("fetch_news", {"count": len(articles), "source": settings.news_source})

    # 2. AI summary
    try:
        with run_observer.stage("summary"):
            summary = await asyncio.to_thread(brain.summarize_news, articles)
    except SummaryError as e:
        logger.error(f"❌ Error summarizing news: {e}")
        run_observer.finalize(
            status="error",
            summary="Summary generation failed, run aborted.",
            kpis={"news_items_processed": len(articles)},
        )
        raise

    logger.info("📊 AI-GENERATED SUMMARY:")
    logger.info("=" * 50)
    logger.info(summary)
    logger.info("=" * 50)

    # 3. Trending tokens
    logger.info("🔍 Detecting trending tokens...")
    with run_observer.stage("trending"):
        trending = detect_trending_tokens(articles, DEFAULT_DICTIONARY, settings.trending_top_k)

    # 4. Prices (skipped when nothing is trending)
    price_results: List[PriceResult] = []
    if trending:
        with run_observer.stage("prices"):
            price_results = await enrich_prices(
                trending,
                DEFAULT_DICTIONARY,
                market,
                keep_parity_on_failure=settings.price_parity_on_failure,
            )
        price_lines = [line for line in (format_price_line(r) for r in price_results) if line]
        if price_lines:
            logger.info("💰 Price Impact Summary:")
            for line in price_lines:
                logger.info(line)

    # 5. Delivery
    delivered_parts = 0
    if notifier.configured:
        logger.info("📱 Sending summary to Telegram...")
        message = _build_digest_message(articles, summary, trending, price_results)
        with run_observer.stage("delivery"):
            delivered_parts = await notifier.send_report(message)
    else:
        logger.warning(
            "⚠️  Telegram not configured. Set TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID to enable Telegram notifications."
        )

    logger.info("✅ News summarization completed successfully!")
    return run_observer.finalize(
        status="success",
        summary="Digest pipeline completed.",
        kpis={
            "news_items_processed": len(articles),
            "trending_tokens": list(trending),
            "priced_tokens": sum(1 for r in price_results if r.price is not None),
            "telegram_parts_delivered": delivered_parts,
        },
        context={
            "model_used": brain.last_run_details.get("model", "unknown"),
            "dry_run": settings.dry_run,
        },
    )


def run_pipeline(settings: Optional[Settings] = None) -> dict:
    return asyncio.run(run_async_pipeline(settings))


def seconds_until_next_run(now: datetime, interval_minutes: int) -> float:
    """Seconds until the next wall-clock multiple of the interval (cron-style)."""
    period = interval_minutes * 60
    return period - (now.timestamp() % period)


async def run_scheduled_task() -> None:
    """One scheduled invocation. Errors are logged so the scheduler keeps going."""
    logger.info(f"🕐 Scheduled task triggered at: {datetime.now(timezone.utc).isoformat()}")
    logger.info("=" * 60)
    try:
        await run_async_pipeline()
    except Exception as e:
        logger.error(f"❌ Error in scheduled task: {e}")
    logger.info("=" * 60)
    logger.info(f"✅ Scheduled task completed at: {datetime.now(timezone.utc).isoformat()}")


async def run_forever(interval_minutes: int) -> None:
    """Run immediately, then on every interval boundary. Runs never overlap."""
    logger.info("🚀 Initializing Crypto News Agent scheduler...")
    logger.info(f"📅 Scheduled to run every {interval_minutes} minute(s) (UTC)")

    await run_scheduled_task()
    while True:
        delay = seconds_until_next_run(datetime.now(timezone.utc), interval_minutes)
        logger.info(f"⏰ Next run in {delay:.0f}s")
        await asyncio.sleep(delay)
        await run_scheduled_task()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Crypto news digest: trending tokens, live prices and an AI summary delivered to Telegram."
    )
    parser.add_argument("--once", action="store_true", help="Run a single digest and exit.")
    parser.add_argument(
        "--interval-minutes",
        type=int,
        default=None,
        help="Minutes between scheduled runs (default: SCHEDULE_INTERVAL_MINUTES or 2).",
    )
    args = parser.parse_args(argv)

    if args.once:
        try:
            run_pipeline()
        except (ConfigError, SummaryError) as e:
            logger.error(f"❌ Error: {e}")
            return 1
        return 0

    interval = args.interval_minutes
    if interval is None:
        try:
            interval = Settings.from_env().schedule_interval_minutes
        except ConfigError as e:
            logger.error(f"❌ Configuration error: {e}")
            return 1
    if interval < 1:
        parser.error("--interval-minutes must be >= 1")

    try:
        asyncio.run(run_forever(interval))
    except KeyboardInterrupt:
        logger.info("Scheduler stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
