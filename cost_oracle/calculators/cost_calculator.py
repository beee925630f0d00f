"""
Implicit trading costs: spread and slippage.

With a live orderbook the book is walked level by level. Without one, venue
heuristics give a rough figure that callers must flag as low confidence.
"""
import math
from typing import Optional

from ..models import OrderbookSnapshot, Side, SlippageResult, Venue
from ..venues import is_prediction_market

# Typical quoted spread. Probability points for prediction markets, a
# fraction of price everywhere else.
DEFAULT_TYPICAL_SPREADS = {
    Venue.KALSHI: 0.02,
    Venue.POLYMARKET: 0.01,
    Venue.HYPERLIQUID: 0.0002,
    Venue.AERODROME: 0.001,
}

# Slippage as a fraction of size at the reference trade size
DEFAULT_BASE_SLIPPAGE_PCT = {
    Venue.KALSHI: 0.001,
    Venue.POLYMARKET: 0.0005,
    Venue.HYPERLIQUID: 0.0002,
    Venue.AERODROME: 0.001,
}

FALLBACK_TYPICAL_SPREAD = 0.02
FALLBACK_BASE_SLIPPAGE_PCT = 0.001
REFERENCE_SIZE_USD = 1000.0
DEFAULT_PRICE = 0.5


def calculate_spread_cost(orderbook: OrderbookSnapshot, size_usd: float, side: Side) -> float:
    """
    Half-spread cost of crossing the book at the top level.

    BUY pays the ask against a fair value of mid: (ask - mid) x contracts.
    SELL receives the bid: (mid - bid) x contracts.
    """
    if side == Side.BUY:
        touch = orderbook.best_ask
        half_spread = orderbook.best_ask - orderbook.mid_price
    else:
        touch = orderbook.best_bid
        half_spread = orderbook.mid_price - orderbook.best_bid

    if touch <= 0:
        return 0.0
    return max(0.0, half_spread * size_usd / touch)


def calculate_slippage(orderbook: OrderbookSnapshot, size_usd: float, side: Side) -> SlippageResult:
    """
    Walk one side of the book best-first until size_usd is filled.

    Any unfilled remainder is priced at the worst visible level and the result
    is marked as not fully filled.
    """
    if side == Side.BUY:
        levels = sorted(orderbook.asks, key=lambda level: level.price)
    else:
        levels = sorted(orderbook.bids, key=lambda level: level.price, reverse=True)

    if not levels:
        return SlippageResult(
            spread_cost_usd=0.0,
            slippage_usd=0.0,
            effective_price=orderbook.best_ask if side == Side.BUY else orderbook.best_bid,
            price_impact_pct=0.0,
            levels_consumed=0,
            fully_filled=False,
        )

    best_price = levels[0].price
    remaining_usd = size_usd
    total_contracts = 0.0
    weighted_price_sum = 0.0
    levels_consumed = 0

    for level in levels:
        if remaining_usd <= 0:
            break
        if level.price <= 0:
            continue

        fill_usd = min(remaining_usd, level.price * level.size)
        fill_contracts = fill_usd / level.price

        weighted_price_sum += level.price * fill_contracts
        total_contracts += fill_contracts
        remaining_usd -= fill_usd
        levels_consumed += 1

    fully_filled = remaining_usd <= 0
    if not fully_filled:
        last_price = levels[-1].price
        if last_price > 0:
            remaining_contracts = remaining_usd / last_price
            weighted_price_sum += last_price * remaining_contracts
            total_contracts += remaining_contracts

    effective_price = weighted_price_sum / total_contracts if total_contracts > 0 else best_price

    slippage_per_contract = abs(effective_price - best_price)
    slippage_usd = slippage_per_contract * total_contracts
    price_impact_pct = slippage_per_contract / best_price * 100 if best_price > 0 else 0.0

    if side == Side.BUY:
        spread_per_contract = best_price - orderbook.mid_price
    else:
        spread_per_contract = orderbook.mid_price - best_price
    spread_cost_usd = max(0.0, spread_per_contract * total_contracts)

    return SlippageResult(
        spread_cost_usd=spread_cost_usd,
        slippage_usd=slippage_usd,
        effective_price=effective_price,
        price_impact_pct=price_impact_pct,
        levels_consumed=levels_consumed,
        filled_contracts=total_contracts,
        fully_filled=fully_filled,
    )


def estimate_spread_cost(
    venue: Venue,
    size_usd: float,
    price: Optional[float] = None,
    typical_spread: Optional[float] = None,
) -> float:
    """Half of the venue's typical spread, applied per contract or per dollar."""
    if size_usd <= 0:
        return 0.0
    if typical_spread is None:
        typical_spread = DEFAULT_TYPICAL_SPREADS.get(venue, FALLBACK_TYPICAL_SPREAD)
    half_spread = typical_spread / 2

    if is_prediction_market(venue):
        if price is None or price <= 0 or price >= 1:
            price = DEFAULT_PRICE
        return half_spread * size_usd / price

    return half_spread * size_usd


def estimate_slippage(
    venue: Venue,
    size_usd: float,
    base_slippage_pct: Optional[float] = None,
    reference_size: float = REFERENCE_SIZE_USD,
) -> float:
    """base_pct x size x sqrt(size / reference_size): sub-linear growth with size."""
    if size_usd <= 0 or reference_size <= 0:
        return 0.0
    if base_slippage_pct is None:
        base_slippage_pct = DEFAULT_BASE_SLIPPAGE_PCT.get(venue, FALLBACK_BASE_SLIPPAGE_PCT)
    return size_usd * base_slippage_pct * math.sqrt(size_usd / reference_size)
