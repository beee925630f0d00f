"""
Cross-venue arbitrage analysis.

Validates that all legs trade on compatible venues, estimates every leg
concurrently and reduces the results into a go/no-go verdict.
"""
import asyncio
from typing import Dict, List, Optional

from .calculators.base import BaseFeeCalculator, percent_of
from .cost_estimator import CostEstimator
from .errors import InvalidTradeCompatibilityError, UnsupportedVenueError
from .logger import setup_logger
from .models import ArbitrageAnalysis, OrderType, TradeLeg, TradeRequest, Venue
from .venues import can_arbitrage, venue_category


class ArbitrageAnalyzer:
    """Net profitability of multi-leg trades after fees and, when available, live costs."""

    def __init__(
        self,
        calculators: Dict[Venue, BaseFeeCalculator],
        cost_estimator: Optional[CostEstimator] = None,
        min_profit_threshold_pct: float = 0.5,
    ):
        """
        Args:
            calculators: Venue registry shared with the oracle
            cost_estimator: Used per leg when it has a live orderbook source
            min_profit_threshold_pct: Default profitability threshold (e.g. 0.5 = 0.5%)
        """
        self.calculators = calculators
        self.cost_estimator = cost_estimator
        self.min_profit_threshold_pct = min_profit_threshold_pct
        self.logger = setup_logger("arbitrage_analyzer")

    def validate_legs(self, legs: List[TradeLeg]) -> None:
        """
        Raises:
            UnsupportedVenueError: A leg venue has no registered calculator
            InvalidTradeCompatibilityError: Two leg venues fail can_arbitrage
        """
        venues = list(dict.fromkeys(Venue(leg.venue) for leg in legs))

        for venue in venues:
            if venue not in self.calculators:
                self.logger.error(f"Arbitrage leg on unregistered venue: {venue.value}")
                raise UnsupportedVenueError(venue)

        for i, venue_a in enumerate(venues):
            for venue_b in venues[i + 1:]:
                if not can_arbitrage(venue_a, venue_b):
                    category_a = venue_category(venue_a).value
                    category_b = venue_category(venue_b).value
                    self.logger.error(
                        f"Incompatible arbitrage legs: {venue_a.value} ({category_a}) "
                        f"vs {venue_b.value} ({category_b})"
                    )
                    raise InvalidTradeCompatibilityError(venue_a.value, category_a, venue_b.value, category_b)

    async def _estimate_leg(self, leg: TradeLeg):
        request = TradeRequest(
            venue=leg.venue,
            size_usd=leg.size_usd,
            order_type=leg.order_type or OrderType.MARKET,
            price=leg.price,
            market_id=leg.market_id,
            side=leg.direction,
        )
        if self.cost_estimator is not None and self.cost_estimator.has_live_data:
            return await self.cost_estimator.estimate_cost(request)
        return await self.calculators[request.venue].estimate(request)

    async def analyze(
        self,
        legs: List[TradeLeg],
        gross_profit: float,
        min_profit_threshold_pct: Optional[float] = None,
    ) -> ArbitrageAnalysis:
        """
        Analyze a cross-venue arbitrage.

        Args:
            legs: Trade legs (buy/sell on compatible venues)
            gross_profit: Expected gross profit before costs, in USD
            min_profit_threshold_pct: Net profit % required to be profitable (inclusive)

        Returns:
            ArbitrageAnalysis verdict
        """
        if min_profit_threshold_pct is None:
            min_profit_threshold_pct = self.min_profit_threshold_pct

        self.validate_legs(legs)

        leg_estimates = list(await asyncio.gather(*(self._estimate_leg(leg) for leg in legs)))

        total_costs = sum(estimate.total_usd for estimate in leg_estimates)
        net_profit = gross_profit - total_costs
        total_notional = sum(leg.size_usd for leg in legs)
        net_profit_pct = percent_of(net_profit, total_notional)
        is_profitable = net_profit_pct >= min_profit_threshold_pct

        self.logger.info(
            f"Arbitrage over {len(legs)} leg(s): gross ${gross_profit:.2f}, costs ${total_costs:.2f}, "
            f"net ${net_profit:.2f} ({net_profit_pct:.3f}%) -> "
            f"{'PROFITABLE' if is_profitable else 'not profitable'} at {min_profit_threshold_pct}%"
        )

        return ArbitrageAnalysis(
            legs=legs,
            gross_profit_usd=gross_profit,
            total_fees_usd=total_costs,
            net_profit_usd=net_profit,
            net_profit_pct=net_profit_pct,
            total_notional_usd=total_notional,
            leg_estimates=leg_estimates,
            is_profitable=is_profitable,
            min_profit_threshold_pct=min_profit_threshold_pct,
        )
