"""
Aerodrome fee calculator.

DEX swaps pay a pool-specific fee plus Base L2 gas. Concentrated-liquidity
pools pick their fee by tick spacing.
"""
from typing import Optional

from ..models import (
    Confidence,
    FeeBreakdown,
    FeeEstimate,
    FeeSchedule,
    GasEstimate,
    PoolContext,
    PoolFees,
    PoolType,
    TradeRequest,
    Venue,
)
from .base import BaseFeeCalculator, bps_to_rate

TICK_SPACINGS = (1, 10, 100, 200)
DEFAULT_TICK_SPACING = 100


class AerodromeFeeCalculator(BaseFeeCalculator):
    venue = Venue.AERODROME

    def get_pool_fee_bps(self, pool_type: PoolType, tick_spacing: Optional[int] = None) -> float:
        pool_fees = self.schedule["pool_fees"]

        if pool_type == PoolType.CONCENTRATED:
            if tick_spacing not in TICK_SPACINGS:
                tick_spacing = DEFAULT_TICK_SPACING
            return pool_fees["concentrated_liquidity"][f"tick_spacing_{tick_spacing}"]["fee_bps"]

        if pool_type == PoolType.STABLE:
            return pool_fees["stable_pools"]["fee_bps"]

        return pool_fees["volatile_pools"]["fee_bps"]

    def estimate_gas_cost(self) -> float:
        # Pre-computed: gas units x gas price x ETH price
        return self.schedule["gas_estimate"]["avg_cost_usd"]

    def _calculate(self, request: TradeRequest) -> FeeEstimate:
        pool_type = PoolType.VOLATILE
        fee_bps = self.get_pool_fee_bps(pool_type)
        exchange_fee = request.size_usd * bps_to_rate(fee_bps)
        gas_fee = self.estimate_gas_cost()

        assumptions = [
            f"Pool type: {pool_type.value} (default, use estimate_with_pool_context for specific pools)",
            f"Pool fee: {fee_bps / 100:.2f}%",
            f"Gas estimate: ${gas_fee:.4f} (Base L2)",
            "Slippage not included: supply a quoted price impact for an accurate estimate",
        ]

        return self._create_estimate(
            request,
            FeeBreakdown(exchange_fee=exchange_fee, gas_fee=gas_fee),
            Confidence.MEDIUM,
            assumptions,
        )

    async def estimate_with_pool_context(self, request: TradeRequest, pool_context: PoolContext) -> FeeEstimate:
        """Estimate for a known pool; a quoted price impact becomes the slippage component."""
        if request.size_usd <= 0:
            return await self.estimate(request)

        fee_bps = self.get_pool_fee_bps(pool_context.pool_type, pool_context.tick_spacing)
        exchange_fee = request.size_usd * bps_to_rate(fee_bps)
        gas_fee = self.estimate_gas_cost()

        slippage = 0.0
        if pool_context.price_impact_pct is not None:
            slippage = request.size_usd * pool_context.price_impact_pct / 100

        assumptions = [f"Pool type: {pool_context.pool_type.value}"]
        if pool_context.pool_type == PoolType.CONCENTRATED:
            if pool_context.tick_spacing in TICK_SPACINGS:
                assumptions.append(f"Tick spacing: {pool_context.tick_spacing}")
            else:
                assumptions.append(
                    f"Tick spacing {pool_context.tick_spacing} not published: using {DEFAULT_TICK_SPACING}"
                )
        assumptions.append(f"Pool fee: {fee_bps / 100:.2f}%")
        assumptions.append(f"Gas estimate: ${gas_fee:.4f} (Base L2)")

        if pool_context.price_impact_pct is not None:
            assumptions.append(f"Price impact: {pool_context.price_impact_pct:.3f}%")
            confidence = Confidence.HIGH
        else:
            confidence = Confidence.MEDIUM

        return self._create_estimate(
            request,
            FeeBreakdown(exchange_fee=exchange_fee, gas_fee=gas_fee, slippage_estimate=slippage),
            confidence,
            assumptions,
        )

    def get_schedule(self) -> FeeSchedule:
        pool_fees = self.schedule["pool_fees"]
        return FeeSchedule(
            **self._schedule_metadata(),
            # No maker/taker split on an AMM
            maker_fee_bps=0,
            taker_fee_bps=pool_fees["volatile_pools"]["fee_bps"],
            pool_fees=PoolFees(
                concentrated_bps=pool_fees["concentrated_liquidity"][f"tick_spacing_{DEFAULT_TICK_SPACING}"]["fee_bps"],
                stable_bps=pool_fees["stable_pools"]["fee_bps"],
                volatile_bps=pool_fees["volatile_pools"]["fee_bps"],
            ),
            gas_estimate=GasEstimate(**self.schedule["gas_estimate"]),
        )
