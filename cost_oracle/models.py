"""
Pydantic models for trade requests, fee and cost estimates, and orderbook data.

"Cost" is broader than "fee":
- Fee = the venue's cut plus gas (explicit)
- Cost = fee + gas + spread + slippage (total trading friction)
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Venue(str, Enum):
    """Supported trading venues."""
    KALSHI = "KALSHI"
    POLYMARKET = "POLYMARKET"
    HYPERLIQUID = "HYPERLIQUID"
    AERODROME = "AERODROME"


class OrderType(str, Enum):
    """MARKET = taker (consumes liquidity), LIMIT = maker (rests on the book)."""
    MARKET = "MARKET"
    LIMIT = "LIMIT"


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class BookSide(str, Enum):
    BID = "BID"
    ASK = "ASK"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CostEstimateMode(str, Enum):
    """
    How an estimate was computed.

    PUBLIC_SCHEDULE: publicly documented fee schedules + heuristic spread/slippage.
    LIVE_ORDERBOOK: real-time orderbook for spread/slippage.
    ACCOUNT_SPECIFIC: caller-supplied account data (volume, staking).
    """
    PUBLIC_SCHEDULE = "PUBLIC_SCHEDULE"
    LIVE_ORDERBOOK = "LIVE_ORDERBOOK"
    ACCOUNT_SPECIFIC = "ACCOUNT_SPECIFIC"


class PoolType(str, Enum):
    CONCENTRATED = "concentrated"
    STABLE = "stable"
    VOLATILE = "volatile"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TradeRequest(BaseModel):
    """Parameters for a single-venue fee or cost estimate."""
    model_config = ConfigDict(frozen=True)

    venue: Venue = Field(..., description="Trading venue")
    size_usd: float = Field(..., description="Trade size in quote currency (USD)")
    order_type: OrderType = Field(OrderType.MARKET, description="MARKET = taker, LIMIT = maker")
    price: Optional[float] = Field(None, description="Contract price (0-1) for prediction markets")
    market_id: Optional[str] = Field(None, description="Market ticker, token id or pool identifier")
    side: Optional[Side] = Field(None, description="Trade side; BUY when omitted")


class FeeBreakdown(BaseModel):
    """Explicit cost components. The rebate subtracts from the total."""
    exchange_fee: float = 0.0
    gas_fee: float = 0.0
    settlement_fee: float = 0.0
    slippage_estimate: float = 0.0
    rebate: float = 0.0

    @property
    def total(self) -> float:
        # Not clamped at zero: a rebate larger than the gross fee stays visible.
        return (
            self.exchange_fee
            + self.gas_fee
            + self.settlement_fee
            + self.slippage_estimate
            - self.rebate
        )


class FeeEstimate(BaseModel):
    """Explicit-cost estimate produced by a venue fee calculator."""
    kind: Literal["FEE"] = "FEE"
    venue: Venue
    size_usd: float
    total_fee_usd: float
    fee_pct: float
    breakdown: FeeBreakdown
    confidence: Confidence
    mode: CostEstimateMode = CostEstimateMode.PUBLIC_SCHEDULE
    assumptions: List[str] = Field(default_factory=list)
    schedule_version: Optional[str] = None
    estimated_at: datetime = Field(default_factory=utc_now)

    @property
    def total_usd(self) -> float:
        return self.total_fee_usd


class OrderbookLevel(BaseModel):
    price: float
    size: float = Field(..., description="Quantity in contracts")
    side: BookSide


class OrderbookSnapshot(BaseModel):
    """Canonical orderbook: bids sorted descending, asks ascending."""
    venue: Venue
    market_id: str
    timestamp: datetime = Field(default_factory=utc_now)
    best_bid: float
    best_ask: float
    mid_price: float
    spread: float
    spread_bps: float
    bid_depth_usd: float
    ask_depth_usd: float
    levels: List[OrderbookLevel] = Field(default_factory=list)
    is_crossed: bool = Field(default=False, description="best_bid above best_ask")

    @property
    def bids(self) -> List[OrderbookLevel]:
        return [level for level in self.levels if level.side == BookSide.BID]

    @property
    def asks(self) -> List[OrderbookLevel]:
        return [level for level in self.levels if level.side == BookSide.ASK]


class SlippageResult(BaseModel):
    """Outcome of walking one side of an orderbook."""
    spread_cost_usd: float
    slippage_usd: float
    effective_price: float
    price_impact_pct: float
    levels_consumed: int
    filled_contracts: float = 0.0
    fully_filled: bool = True


class CostBreakdown(BaseModel):
    """Explicit and implicit components plus the market data they came from."""
    exchange_fee: float
    gas_fee: float
    settlement_fee: float = 0.0
    rebate: float = 0.0
    spread_cost: float
    slippage: float
    best_bid: Optional[float] = None
    best_ask: Optional[float] = None
    mid_price: Optional[float] = None
    spread_bps: Optional[float] = None
    effective_price: Optional[float] = None
    price_impact_pct: Optional[float] = None
    levels_consumed: Optional[int] = None


class TradingCost(BaseModel):
    """Full trading cost: explicit fees plus implicit spread and slippage."""
    kind: Literal["COST"] = "COST"
    venue: Venue
    size_usd: float
    side: Side

    exchange_fee_usd: float
    gas_fee_usd: float
    explicit_cost_usd: float

    spread_cost_usd: float
    slippage_usd: float
    implicit_cost_usd: float

    total_cost_usd: float
    total_cost_pct: float

    breakdown: CostBreakdown
    confidence: Confidence
    mode: CostEstimateMode
    assumptions: List[str] = Field(default_factory=list)
    estimated_at: datetime = Field(default_factory=utc_now)
    orderbook_snapshot: Optional[OrderbookSnapshot] = None
    fee_estimate: FeeEstimate

    @property
    def total_usd(self) -> float:
        return self.total_cost_usd


LegEstimate = Annotated[Union[FeeEstimate, TradingCost], Field(discriminator="kind")]


class TradeLeg(BaseModel):
    """One side of a multi-venue trade."""
    model_config = ConfigDict(frozen=True)

    venue: Venue
    direction: Side
    size_usd: float
    price: Optional[float] = None
    market_id: Optional[str] = None
    order_type: Optional[OrderType] = None


class ArbitrageAnalysis(BaseModel):
    """Go/no-go verdict for a cross-venue arbitrage after costs."""
    legs: List[TradeLeg]
    gross_profit_usd: float
    total_fees_usd: float = Field(..., description="Sum of per-leg totals (fees, or full costs for live legs)")
    net_profit_usd: float
    net_profit_pct: float
    total_notional_usd: float
    leg_estimates: List[LegEstimate]
    is_profitable: bool
    min_profit_threshold_pct: float


class VolumeTier(BaseModel):
    tier: Optional[int] = None
    min_volume_usd: float
    max_volume_usd: Optional[float] = None
    maker_fee_bps: float
    taker_fee_bps: float


class PoolFees(BaseModel):
    concentrated_bps: float
    stable_bps: float
    volatile_bps: float


class GasEstimate(BaseModel):
    chain: str
    avg_gas_units: Optional[int] = None
    avg_gas_price_gwei: Optional[float] = None
    avg_cost_usd: float


class FeeSchedule(BaseModel):
    """Static fee schedule metadata for one venue."""
    venue: Venue
    updated_at: str
    version: str
    maker_fee_bps: float
    taker_fee_bps: float
    tiers: Optional[List[VolumeTier]] = None
    pool_fees: Optional[PoolFees] = None
    gas_estimate: Optional[GasEstimate] = None
    source: str
    source_url: str
    disclaimer: str


class PoolContext(BaseModel):
    """Pool details for an Aerodrome swap, usually taken from a quoter."""
    pool_type: PoolType
    tick_spacing: Optional[int] = Field(None, description="Concentrated pools only: 1, 10, 100 or 200")
    price_impact_pct: Optional[float] = Field(None, description="Quoted price impact in percent")


class HyperliquidUserContext(BaseModel):
    """Caller-supplied account data for Hyperliquid fee tiers."""
    volume_14d_usd: Optional[float] = None
    hype_staked: Optional[float] = None
