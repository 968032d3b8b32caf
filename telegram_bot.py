import os
import logging
import asyncio
import html
import re
from typing import Iterator, List, Optional, Tuple
from telegram import Bot

# Configure logging
logger = logging.getLogger(__name__)

# Telegram caps messages at 4096 characters; keep a buffer for the part prefix.
MAX_MESSAGE_LENGTH = 4000
PART_DELAY_SECONDS = 1.0


def _segments(text: str, max_len: int) -> Iterator[Tuple[str, str]]:
    """
    Yield (separator, segment) pairs, no segment longer than max_len.
    Paragraphs stay whole when they fit, otherwise lines do, otherwise a
    line is cut into fixed-width slices joined by an empty separator.
    """
    separator = ""
    for paragraph in text.split("\n\n"):
        if len(paragraph) <= max_len:
            yield separator, paragraph
        else:
            for line_no, line in enumerate(paragraph.split("\n")):
                line_separator = separator if line_no == 0 else "\n"
                for start in range(0, len(line) or 1, max_len):
                    yield (line_separator if start == 0 else ""), line[start:start + max_len]
        separator = "\n\n"


def split_telegram_message(text: str, max_len: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """Pack the text into as few parts as fit; the separator at each cut is dropped."""
    if len(text) <= max_len:
        return [text]

    parts: List[str] = []
    current = ""
    for separator, segment in _segments(text, max_len):
        if current and len(current) + len(separator) + len(segment) <= max_len:
            current += separator + segment
            continue
        if current:
            parts.append(current)
        current = segment
    if current:
        parts.append(current)
    return parts


class TelegramNotifier:
    def __init__(self, token: Optional[str] = None, chat_id: Optional[str] = None, dry_run: bool = False):
        self.token = token if token is not None else os.environ.get("TELEGRAM_BOT_TOKEN")
        self.chat_id = chat_id if chat_id is not None else os.environ.get("TELEGRAM_CHAT_ID")
        self.dry_run = dry_run

    @classmethod
    def from_settings(cls, settings) -> "TelegramNotifier":
        return cls(
            token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
            dry_run=settings.dry_run,
        )

    @property
    def configured(self) -> bool:
        return bool(self.token and self.chat_id)

    @staticmethod
    def _markdownish_to_html(text: str) -> str:
        """
        Convert simple markdown-like formatting to safe HTML for Telegram.
        Supported:
        - **bold** -> <b>bold</b>
        - `code` -> <code>code</code>
        """
        safe = html.escape(text or "")
        safe = re.sub(r"\*\*(.+?)\*\*", r"<b>\1</b>", safe, flags=re.DOTALL)
        safe = re.sub(r"`([^`]+?)`", r"<code>\1</code>", safe)
        return safe

    async def send_message(self, chat_id, message) -> bool:
        """Send a message to a specific chat_id with robust HTML-first fallback."""
        if not self.token or self.dry_run:
            logger.info(f"Mock Alert (No Bot Configured / Dry Run): {message}")
            return False

        if not chat_id:
            logger.error("Attempted to send message but Chat ID is None.")
            return False

        try:
            async with Bot(token=self.token) as bot:
                try:
                    html_msg = self._markdownish_to_html(message)
                    await bot.send_message(chat_id=chat_id, text=html_msg, parse_mode='HTML')
                    logger.info(f"Telegram message sent to {chat_id} (HTML).")
                except Exception as html_err:
                    logger.warning(f"HTML send failed ({html_err}), retrying as plain text...")
                    clean_msg = (message or "").replace("**", "").replace("__", "").replace("`", "")
                    await bot.send_message(chat_id=chat_id, text=clean_msg)
                    logger.info(f"Telegram message sent to {chat_id} (Plain Text).")
            return True
        except Exception as e:
            logger.error(f"Failed to send Telegram message: {e}")
            return False

    async def send_report(self, message: str) -> int:
        """
        Deliver a report to the default chat, split into parts when too long.
        Parts after the first carry a "(Part i/n)" header.

        Returns:
            Number of parts Telegram accepted.
        """
        parts = split_telegram_message(message, max_len=MAX_MESSAGE_LENGTH - 20)
        total = len(parts)
        delivered = 0

        for idx, part in enumerate(parts, start=1):
            text = part if idx == 1 else f"(Part {idx}/{total})\n\n{part}"
            if await self.send_message(self.chat_id, text):
                delivered += 1
            if idx < total:
                await asyncio.sleep(PART_DELAY_SECONDS)

        if delivered == total:
            logger.info("✅ Message sent to Telegram successfully!")
        return delivered
