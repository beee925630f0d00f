"""
Replay cost oracle: trading cost estimation across prediction markets,
perps and DEX venues.
"""
from .calculators import (
    AerodromeFeeCalculator,
    BaseFeeCalculator,
    HyperliquidFeeCalculator,
    KalshiFeeCalculator,
    PolymarketFeeCalculator,
)
from .errors import (
    CostOracleError,
    DataUnavailableError,
    InvalidTradeCompatibilityError,
    OrderbookFetchError,
    OrderbookUnavailableError,
    UnsupportedVenueError,
)
from .models import (
    ArbitrageAnalysis,
    Confidence,
    CostEstimateMode,
    FeeEstimate,
    FeeSchedule,
    HyperliquidUserContext,
    OrderType,
    PoolContext,
    PoolType,
    Side,
    TradeLeg,
    TradeRequest,
    TradingCost,
    Venue,
)
from .oracle import CostOracle, create_oracle, get_oracle, init_oracle_with_replay_labs, reset_oracle
from .venues import VENUE_INFO, VenueCategory, can_arbitrage, is_prediction_market

__all__ = [
    "AerodromeFeeCalculator",
    "ArbitrageAnalysis",
    "BaseFeeCalculator",
    "Confidence",
    "CostEstimateMode",
    "CostOracle",
    "CostOracleError",
    "DataUnavailableError",
    "FeeEstimate",
    "FeeSchedule",
    "HyperliquidFeeCalculator",
    "HyperliquidUserContext",
    "InvalidTradeCompatibilityError",
    "KalshiFeeCalculator",
    "OrderType",
    "OrderbookFetchError",
    "OrderbookUnavailableError",
    "PolymarketFeeCalculator",
    "PoolContext",
    "PoolType",
    "Side",
    "TradeLeg",
    "TradeRequest",
    "TradingCost",
    "UnsupportedVenueError",
    "VENUE_INFO",
    "Venue",
    "VenueCategory",
    "can_arbitrage",
    "create_oracle",
    "get_oracle",
    "init_oracle_with_replay_labs",
    "is_prediction_market",
    "reset_oracle",
]
