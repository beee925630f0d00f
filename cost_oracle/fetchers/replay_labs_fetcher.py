"""
Replay Labs orderbook fetcher.

Fetches raw orderbook JSON for Kalshi and Polymarket markets. Parsing is left
to OrderbookNormalizer.
"""
import asyncio
from typing import Dict, Optional

import httpx

from ..errors import OrderbookFetchError, OrderbookUnavailableError
from ..logger import setup_logger
from ..models import Venue

DEFAULT_BASE_URL = "https://replay-lab-delta.preview.recall.network"


class ReplayLabsFetcher:
    """Fetches live orderbooks from the Replay Labs API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 10,
        retry_attempts: int = 3,
        retry_delay: float = 1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self.logger = setup_logger("replay_labs_fetcher")

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "x-api-key": api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            follow_redirects=True,
            transport=transport,
        )

    async def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """GET with retry on timeouts; every other failure raises OrderbookFetchError."""
        for attempt in range(self.retry_attempts):
            try:
                response = await self.client.get(endpoint, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                if attempt < self.retry_attempts - 1:
                    self.logger.warning(f"Timeout on attempt {attempt + 1}/{self.retry_attempts}. Retrying...")
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                else:
                    self.logger.error(f"Replay Labs request timeout after all retries: {endpoint}")
                    raise OrderbookFetchError(f"Replay Labs request timed out: {endpoint}") from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                self.logger.error(f"Replay Labs API error {status} for {endpoint}")
                raise OrderbookFetchError(
                    f"Replay Labs API error: {status} {e.response.reason_phrase}"
                ) from e
            except httpx.HTTPError as e:
                self.logger.error(f"Error making request to {endpoint}: {e}")
                raise OrderbookFetchError(f"Replay Labs request failed: {e}") from e
            except ValueError as e:
                # Body was not JSON
                raise OrderbookFetchError(f"Replay Labs returned invalid JSON for {endpoint}") from e

        raise OrderbookFetchError(f"Replay Labs request failed: {endpoint}")

    async def get_kalshi_orderbook(self, ticker: str) -> Dict:
        return await self._make_request(f"/api/kalshi/markets/{ticker}/orderbook")

    async def get_polymarket_orderbook(self, token_id: str) -> Dict:
        return await self._make_request("/api/polymarket/clob/book", params={"token_id": token_id})

    async def fetch_orderbook(self, venue: Venue, market_id: str) -> Dict:
        """
        Fetch the raw orderbook payload for a market.

        Raises:
            OrderbookUnavailableError: Venue has no orderbook endpoint
            OrderbookFetchError: Request failed after retries
        """
        venue = Venue(venue)
        self.logger.debug(f"Fetching {venue.value} orderbook for {market_id}")

        if venue == Venue.KALSHI:
            return await self.get_kalshi_orderbook(market_id)
        if venue == Venue.POLYMARKET:
            return await self.get_polymarket_orderbook(market_id)

        raise OrderbookUnavailableError(f"Orderbook not supported for venue: {venue.value}")

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()
