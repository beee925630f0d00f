"""
Normalizes raw venue orderbook payloads into a canonical OrderbookSnapshot.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..errors import OrderbookUnavailableError
from ..logger import setup_logger
from ..models import BookSide, OrderbookLevel, OrderbookSnapshot, Venue, utc_now


def _parse_timestamp(value) -> datetime:
    """Epoch milliseconds, epoch seconds, or ISO-8601; now() when absent."""
    if value in (None, ""):
        return utc_now()
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
    # Epoch seconds stay below 1e11 until the year 5138
    if value > 1e11:
        value = value / 1000
    return datetime.fromtimestamp(value, tz=timezone.utc)


class OrderbookNormalizer:
    """Builds OrderbookSnapshot objects from Kalshi and Polymarket book payloads."""

    def __init__(self):
        self.logger = setup_logger("orderbook_normalizer")

    def normalize(self, venue: Venue, market_id: str, payload: Dict) -> OrderbookSnapshot:
        venue = Venue(venue)
        if not isinstance(payload, dict):
            raise OrderbookUnavailableError(f"{venue.value} orderbook payload for {market_id} is not an object")

        try:
            if venue == Venue.KALSHI:
                return self.normalize_kalshi(market_id, payload)
            if venue == Venue.POLYMARKET:
                return self.normalize_polymarket(market_id, payload)
        except OrderbookUnavailableError:
            raise
        except (KeyError, TypeError, ValueError, IndexError) as e:
            self.logger.warning(f"Malformed {venue.value} orderbook for {market_id}: {e}")
            raise OrderbookUnavailableError(f"Malformed {venue.value} orderbook for {market_id}: {e}") from e

        raise OrderbookUnavailableError(f"Orderbook not supported for venue: {venue.value}")

    def normalize_kalshi(self, market_id: str, payload: Dict) -> OrderbookSnapshot:
        """
        Kalshi lists resting YES and NO bids. YES bids are the book's bids;
        a NO bid at p is a YES ask at 1 - p. Dollar arrays are preferred,
        cent arrays are the fallback.
        """
        orderbook = payload.get("orderbook")
        if not isinstance(orderbook, dict):
            raise OrderbookUnavailableError(f"Kalshi payload for {market_id} has no orderbook")

        yes_levels = self._kalshi_side(orderbook, "yes")
        no_levels = self._kalshi_side(orderbook, "no")

        bids = [
            OrderbookLevel(price=price, size=size, side=BookSide.BID)
            for price, size in yes_levels
        ]
        asks = [
            OrderbookLevel(price=1 - price, size=size, side=BookSide.ASK)
            for price, size in no_levels
        ]
        return self._build_snapshot(Venue.KALSHI, market_id, bids, asks)

    @staticmethod
    def _kalshi_side(orderbook: Dict, side: str) -> List:
        dollars = orderbook.get(f"{side}_dollars")
        if dollars is not None:
            return [(float(price), float(qty)) for price, qty in dollars]

        cents = orderbook.get(side)
        if cents is not None:
            return [(float(price) / 100, float(qty)) for price, qty in cents]

        return []

    def normalize_polymarket(self, market_id: str, payload: Dict) -> OrderbookSnapshot:
        """Polymarket CLOB prices are already 0-1 probabilities."""
        bids = [
            OrderbookLevel(price=float(level["price"]), size=float(level["size"]), side=BookSide.BID)
            for level in payload.get("bids") or []
        ]
        asks = [
            OrderbookLevel(price=float(level["price"]), size=float(level["size"]), side=BookSide.ASK)
            for level in payload.get("asks") or []
        ]
        return self._build_snapshot(
            Venue.POLYMARKET,
            market_id,
            bids,
            asks,
            timestamp=self._book_timestamp(market_id, payload.get("timestamp")),
        )

    def _book_timestamp(self, market_id: str, value) -> datetime:
        """Parsed book timestamp, or now() with a warning when unparseable."""
        try:
            return _parse_timestamp(value)
        except (ValueError, TypeError, OverflowError, OSError) as e:
            self.logger.warning(f"Unparseable orderbook timestamp for {market_id} ({value!r}): {e}")
            return utc_now()

    def _build_snapshot(
        self,
        venue: Venue,
        market_id: str,
        bids: List[OrderbookLevel],
        asks: List[OrderbookLevel],
        timestamp: Optional[datetime] = None,
    ) -> OrderbookSnapshot:
        bids = sorted(bids, key=lambda level: level.price, reverse=True)
        asks = sorted(asks, key=lambda level: level.price)

        best_bid = bids[0].price if bids else 0.0
        best_ask = asks[0].price if asks else 1.0
        mid_price = (best_bid + best_ask) / 2
        spread = best_ask - best_bid
        spread_bps = spread / mid_price * 10000 if mid_price > 0 else 0.0

        crossed = bool(bids and asks and best_bid > best_ask)
        if crossed:
            self.logger.warning(f"Crossed {venue.value} book for {market_id}: bid {best_bid} > ask {best_ask}")

        return OrderbookSnapshot(
            venue=venue,
            market_id=market_id,
            timestamp=timestamp or utc_now(),
            best_bid=best_bid,
            best_ask=best_ask,
            mid_price=mid_price,
            spread=spread,
            spread_bps=spread_bps,
            bid_depth_usd=sum(level.price * level.size for level in bids),
            ask_depth_usd=sum(level.price * level.size for level in asks),
            levels=[*bids, *asks],
            is_crossed=crossed,
        )
