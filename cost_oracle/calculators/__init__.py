from typing import Dict, Optional

from ..models import HyperliquidUserContext, Venue
from .aerodrome import AerodromeFeeCalculator
from .base import BaseFeeCalculator
from .hyperliquid import HyperliquidFeeCalculator
from .kalshi import KalshiFeeCalculator
from .polymarket import PolymarketFeeCalculator

__all__ = [
    "AerodromeFeeCalculator",
    "BaseFeeCalculator",
    "HyperliquidFeeCalculator",
    "KalshiFeeCalculator",
    "PolymarketFeeCalculator",
    "default_calculators",
]


def default_calculators(
    hyperliquid_context: Optional[HyperliquidUserContext] = None,
) -> Dict[Venue, BaseFeeCalculator]:
    """One calculator per supported venue, loaded from the packaged schedules."""
    calculators = [
        KalshiFeeCalculator(),
        PolymarketFeeCalculator(),
        HyperliquidFeeCalculator(user_context=hyperliquid_context),
        AerodromeFeeCalculator(),
    ]
    return {calculator.venue: calculator for calculator in calculators}
