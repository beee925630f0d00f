"""
Venue metadata and the cross-venue arbitrage compatibility relation.
"""
from enum import Enum
from typing import Dict, List

from .models import Venue


class VenueCategory(str, Enum):
    PREDICTION_MARKET = "PREDICTION_MARKET"
    PERPS = "PERPS"
    SPOT_DEX = "SPOT_DEX"


VENUE_INFO: Dict[Venue, Dict] = {
    Venue.KALSHI: {
        "category": VenueCategory.PREDICTION_MARKET,
        "description": "US-regulated prediction market for binary event contracts",
    },
    Venue.POLYMARKET: {
        "category": VenueCategory.PREDICTION_MARKET,
        "description": "Crypto-native prediction market on Polygon",
    },
    Venue.HYPERLIQUID: {
        "category": VenueCategory.PERPS,
        "description": "On-chain perpetual futures exchange",
    },
    Venue.AERODROME: {
        "category": VenueCategory.SPOT_DEX,
        "description": "Spot DEX on Base L2",
    },
}

SUPPORTED_VENUES: List[Venue] = list(VENUE_INFO)

PREDICTION_VENUES: List[Venue] = [
    venue for venue, info in VENUE_INFO.items()
    if info["category"] == VenueCategory.PREDICTION_MARKET
]


def venue_category(venue: Venue) -> VenueCategory:
    return VENUE_INFO[Venue(venue)]["category"]


def is_prediction_market(venue: Venue) -> bool:
    return venue_category(venue) == VenueCategory.PREDICTION_MARKET


def can_arbitrage(venue_a: Venue, venue_b: Venue) -> bool:
    """
    Two venues can be used for cross-venue arbitrage only if they are distinct
    and trade the same kind of asset (e.g. both list binary event contracts).
    """
    if Venue(venue_a) == Venue(venue_b):
        return False
    return venue_category(venue_a) == venue_category(venue_b)
