from google import genai
from google.genai import types
import logging
import os
from typing import Iterable, List, Optional

import requests

from config import DEFAULT_GEMINI_MODEL, DEFAULT_OPENROUTER_MODEL
from outcome import Err, Ok, Outcome

# Configure logging
logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

SYSTEM_PROMPT = (
    "You are a cryptocurrency news analyst. Provide clear, concise, and professional summaries "
    "of crypto news. Pay attention to specific cryptocurrencies mentioned and market sentiment."
)

MAX_TOKENS = 1200
TEMPERATURE = 0.7


class SummaryError(Exception):
    """Raised when no text-generation provider produced a summary."""


def build_news_prompt(articles: Iterable) -> str:
    """Render the article list into the summarization prompt."""
    blocks = []
    for index, article in enumerate(articles, start=1):
        currency_info = f"[{', '.join(article.currencies)}]" if article.currencies else ""
        sentiment_info = f"(Sentiment: {article.sentiment})" if article.sentiment else ""
        blocks.append(
            f"{index}. {article.title} {currency_info} {sentiment_info}\n"
            f"   Source: {article.source}\n"
            f"   Summary: {article.summary}\n"
            f"   URL: {article.url}"
        )
    news_content = "\n\n".join(blocks)

    return (
        "Please provide a comprehensive summary of the following cryptocurrency news headlines. "
        "Focus on the key trends, market movements, and significant developments. "
        "Format the summary in a clear, professional manner:\n\n"
        f"{news_content}\n\n"
        "Please provide:\n"
        "1. A brief overview of the main themes and cryptocurrencies mentioned\n"
        "2. Key market developments and their potential impact\n"
        "3. Notable trends or patterns in the news\n"
        "4. Sentiment analysis and market implications\n"
        "5. Specific cryptocurrencies that are trending or facing challenges"
    )


class Brain:
    def __init__(
        self,
        openrouter_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
        openrouter_model: str = DEFAULT_OPENROUTER_MODEL,
        gemini_model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 60,
    ):
        # OpenRouter API key (primary)
        self.openrouter_api_key = openrouter_api_key if openrouter_api_key is not None else os.environ.get("OPENROUTER_API_KEY")
        self.openrouter_base_url = OPENROUTER_BASE_URL
        self.openrouter_model = openrouter_model
        self.timeout = timeout

        # Fallback: Direct Gemini (if OpenRouter fails AND key is available)
        self.gemini_api_key = gemini_api_key if gemini_api_key is not None else os.environ.get("GEMINI_API_KEY")
        self.gemini_model = gemini_model
        self.gemini_client = genai.Client(api_key=self.gemini_api_key) if self.gemini_api_key else None

        # Track last execution details for reporting
        self.last_run_details = {}

        logger.info(
            f"Brain initialized: OpenRouter={'YES' if self.openrouter_api_key else 'NO'}, "
            f"Gemini Fallback={'YES' if self.gemini_client else 'NO'}"
        )

    @classmethod
    def from_settings(cls, settings) -> "Brain":
        return cls(
            openrouter_api_key=settings.openrouter_api_key,
            gemini_api_key=settings.gemini_api_key,
            openrouter_model=settings.openrouter_model,
            gemini_model=settings.gemini_model,
        )

    def _call_openrouter(self, messages: List[dict]) -> Outcome:
        """Single OpenRouter chat completion."""
        if not self.openrouter_api_key:
            return Err("OPENROUTER_API_KEY not configured")

        headers = {
            "Authorization": f"Bearer {self.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://crypto-news-agent.com",
            "X-Title": "Crypto News Agent",
        }
        payload = {
            "model": self.openrouter_model,
            "messages": messages,
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

        try:
            response = requests.post(
                f"{self.openrouter_base_url}/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
            if response.status_code != 200:
                error_text = response.text[:300] if response.text else ""
                return Err(f"OpenRouter API error: {response.status_code} {error_text}")

            data = response.json()
            choice = data["choices"][0]["message"]
        except Exception as e:
            return Err(f"OpenRouter call failed: {e}")

        content = choice.get("content") or ""
        # DeepSeek reasoning models may answer only in reasoning_content
        if not content.strip():
            content = choice.get("reasoning_content") or ""
        if not content.strip():
            return Err(f"OpenRouter model {self.openrouter_model} returned empty content")

        self.last_run_details = {
            "model": self.openrouter_model,
            "usage": data.get("usage", {}),
            "provider": "OpenRouter",
        }
        return Ok(content)

    def _call_gemini_fallback(self, prompt: str) -> Outcome:
        """Direct Gemini API call as last-resort fallback."""
        if not self.gemini_client:
            return Err("No Gemini client available for fallback")

        config = types.GenerateContentConfig(
            system_instruction=SYSTEM_PROMPT,
            temperature=TEMPERATURE,
            max_output_tokens=MAX_TOKENS,
        )
        logger.info(f"Gemini Call: Using model {self.gemini_model}")

        try:
            response = self.gemini_client.models.generate_content(
                model=self.gemini_model,
                contents=prompt,
                config=config,
            )
            content = response.text if response else None
        except Exception as e:
            return Err(f"Gemini ({self.gemini_model}) failed: {e}")

        if not content or not content.strip():
            return Err(f"Gemini ({self.gemini_model}) returned empty content")

        usage = {"total_tokens": "N/A (Direct)"}
        metadata = getattr(response, "usage_metadata", None)
        if metadata is not None and getattr(metadata, "total_token_count", None) is not None:
            usage = {"total_tokens": metadata.total_token_count}

        self.last_run_details = {
            "model": f"google/{self.gemini_model} (Direct)",
            "usage": usage,
            "provider": "Google Direct",
        }
        return Ok(content)

    def _generate_with_fallback(self, prompt: str) -> str:
        """
        OpenRouter first, then one Gemini attempt.
        Raises SummaryError when both fail.
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        primary = self._call_openrouter(messages)
        if primary.ok:
            return primary.data
        logger.warning(f"OpenRouter failed: {primary.error}")

        fallback = self._call_gemini_fallback(prompt)
        if fallback.ok:
            return fallback.data
        logger.error(f"Gemini fallback failed: {fallback.error}")

        raise SummaryError(f"AI Generation Failed: {primary.error}; {fallback.error}")

    def summarize_news(self, articles: Iterable) -> str:
        """Produce the AI summary of a batch of news articles."""
        logger.info("🤖 Generating AI-powered summary...")
        return self._generate_with_fallback(build_news_prompt(articles))
