"""
Market Data
===========
CoinGecko client for live token prices.

One call covers every requested coin id (`/coins/markets` with a
comma-joined `ids`), so a run costs a single request whatever the number
of trending tokens.
"""

import logging
from typing import Dict, Optional, Sequence

import httpx

from config import DEFAULT_COINGECKO_BASE_URL
from outcome import Err, Ok, Outcome

# Configure logging
logger = logging.getLogger(__name__)


class MarketData:
    def __init__(
        self,
        base_url: str = DEFAULT_COINGECKO_BASE_URL,
        api_key: Optional[str] = None,
        timeout: float = 10,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or None
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "MarketData":
        return cls(
            base_url=settings.coingecko_base_url,
            api_key=settings.coingecko_api_key,
            timeout=settings.http_timeout_sec,
        )

    def _headers(self) -> Dict[str, str]:
        # User-Agent avoids the 403s CoinGecko hands to anonymous clients
        headers = {"Accept": "application/json", "User-Agent": "Mozilla/5.0"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    @staticmethod
    def markets_params(coin_ids: Sequence[str]) -> Dict[str, str]:
        return {
            "vs_currency": "usd",
            "ids": ",".join(coin_ids),
            "order": "market_cap_desc",
            "per_page": "50",
            "page": "1",
            "sparkline": "false",
            "price_change_percentage": "24h",
        }

    async def fetch_coin_markets(self, coin_ids: Sequence[str]) -> Outcome:
        """
        Fetch price, 24h change and market cap for a batch of coin ids.

        Returns:
            Ok(list of market dicts as sent by CoinGecko) or Err(reason).
            Never raises.
        """
        if not coin_ids:
            return Ok([])

        url = f"{self.base_url}/coins/markets"
        logger.info(f"💰 Fetching price data from CoinGecko for {len(coin_ids)} coin(s)...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers()) as client:
                response = await client.get(url, params=self.markets_params(coin_ids))

            if not 200 <= response.status_code < 300:
                return Err(f"CoinGecko API error: {response.status_code} {response.reason_phrase}")

            data = response.json()
        except Exception as e:
            logger.warning(f"CoinGecko request failed: {e}")
            return Err(f"CoinGecko request failed: {e}")

        if not isinstance(data, list):
            return Err("Invalid response format from CoinGecko API")
        return Ok(data)
