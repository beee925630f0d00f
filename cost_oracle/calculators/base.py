"""
Fee calculator base class.

All venue-specific calculators derive from BaseFeeCalculator so the oracle can
route any TradeRequest through the same two calls: estimate() and get_schedule().
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..logger import setup_logger
from ..models import (
    Confidence,
    CostEstimateMode,
    FeeBreakdown,
    FeeEstimate,
    FeeSchedule,
    TradeRequest,
    Venue,
)
from ..schedules import load_schedule

MODE_DISCLAIMERS = {
    CostEstimateMode.PUBLIC_SCHEDULE: "PUBLIC_SCHEDULE mode: public fee schedule, not account-specific",
    CostEstimateMode.ACCOUNT_SPECIFIC: "ACCOUNT_SPECIFIC mode: uses caller-supplied account data",
    CostEstimateMode.LIVE_ORDERBOOK: "LIVE_ORDERBOOK mode: spread and slippage from the live orderbook",
}


def percent_of(amount: float, size_usd: float) -> float:
    """amount as a percentage of size_usd, 0 when size_usd is 0."""
    if size_usd == 0:
        return 0.0
    return amount / size_usd * 100


def bps_to_rate(bps: float) -> float:
    return bps / 10000


class BaseFeeCalculator(ABC):
    """Common estimate pipeline; subclasses supply the venue formula."""

    venue: Venue

    def __init__(self, schedule: Optional[Dict] = None):
        self.schedule = schedule if schedule is not None else load_schedule(self.venue)
        self.logger = setup_logger(f"{self.venue.value.lower()}_fee_calculator")

    async def estimate(self, request: TradeRequest) -> FeeEstimate:
        """Estimate explicit fees for a trade."""
        if request.size_usd <= 0:
            self.logger.warning(f"{self.venue.value}: non-positive size {request.size_usd}, returning zero estimate")
            return self._create_estimate(
                request,
                FeeBreakdown(),
                Confidence.LOW,
                [f"Non-positive trade size (${request.size_usd}): no fee computed"],
            )

        estimate = self._calculate(request)
        self.logger.debug(
            f"{self.venue.value} estimate: ${estimate.total_fee_usd:.4f} "
            f"({estimate.fee_pct:.4f}%) on ${estimate.size_usd}"
        )
        return estimate

    @abstractmethod
    def _calculate(self, request: TradeRequest) -> FeeEstimate:
        """Apply the venue's fee formula to a trade with a positive size."""

    @abstractmethod
    def get_schedule(self) -> FeeSchedule:
        """Static snapshot of the venue's fee schedule."""

    def can_handle(self, request: TradeRequest) -> bool:
        return request.venue == self.venue

    def _schedule_metadata(self) -> Dict:
        return {
            "venue": self.venue,
            "updated_at": self.schedule["updated_at"],
            "version": self.schedule["version"],
            "source": self.schedule["source"],
            "source_url": self.schedule["source_url"],
            "disclaimer": self.schedule["disclaimer"],
        }

    def _create_estimate(
        self,
        request: TradeRequest,
        breakdown: FeeBreakdown,
        confidence: Confidence,
        assumptions: List[str],
        mode: CostEstimateMode = CostEstimateMode.PUBLIC_SCHEDULE,
    ) -> FeeEstimate:
        """Build a FeeEstimate with totals, percentages and the mode disclaimer."""
        total_fee = breakdown.total
        return FeeEstimate(
            venue=self.venue,
            size_usd=request.size_usd,
            total_fee_usd=total_fee,
            fee_pct=percent_of(total_fee, request.size_usd),
            breakdown=breakdown,
            confidence=confidence,
            mode=mode,
            assumptions=[*assumptions, MODE_DISCLAIMERS[mode]],
            schedule_version=self.schedule.get("version"),
        )
