"""
Hyperliquid fee calculator.

Volume-tiered maker/taker fees with a staking discount:
    effective_bps = tier_bps(14d volume) x (1 - staking_discount(HYPE staked))
"""
from typing import Dict, Optional

from ..models import (
    Confidence,
    CostEstimateMode,
    FeeBreakdown,
    FeeEstimate,
    FeeSchedule,
    HyperliquidUserContext,
    OrderType,
    TradeRequest,
    Venue,
    VolumeTier,
)
from .base import BaseFeeCalculator, bps_to_rate


class HyperliquidFeeCalculator(BaseFeeCalculator):
    venue = Venue.HYPERLIQUID

    def __init__(
        self,
        user_context: Optional[HyperliquidUserContext] = None,
        schedule: Optional[Dict] = None,
    ):
        super().__init__(schedule)
        self.user_context = user_context

    def set_user_context(self, context: Optional[HyperliquidUserContext]) -> None:
        """Set account data for personalised fee tiers (None clears it)."""
        self.user_context = context

    def get_volume_tier(self, volume_14d: float) -> Dict:
        """Highest tier whose threshold is at or below the 14-day volume."""
        tiers = sorted(self.schedule["volume_tiers"], key=lambda t: t["min_volume_14d_usd"])
        for tier in reversed(tiers):
            if volume_14d >= tier["min_volume_14d_usd"]:
                return tier
        return tiers[0]

    def get_staking_discount(self, hype_staked: float) -> float:
        """Discount fraction (0-1) from the highest staking tier reached."""
        tiers = sorted(
            self.schedule["staking_discounts"]["tiers"],
            key=lambda t: t["min_hype_staked"],
        )
        for tier in reversed(tiers):
            if hype_staked >= tier["min_hype_staked"]:
                return tier["discount_pct"] / 100
        return 0.0

    def _calculate(self, request: TradeRequest) -> FeeEstimate:
        is_taker = request.order_type == OrderType.MARKET
        context = self.user_context

        volume_14d = (context.volume_14d_usd if context else None) or 0.0
        hype_staked = (context.hype_staked if context else None) or 0.0

        tier = self.get_volume_tier(volume_14d)
        base_fee_bps = tier["taker_fee_bps"] if is_taker else tier["maker_fee_bps"]

        staking_discount = self.get_staking_discount(hype_staked)
        effective_fee_bps = base_fee_bps * (1 - staking_discount)
        fee_rate = bps_to_rate(effective_fee_bps)
        exchange_fee = request.size_usd * fee_rate

        assumptions = [
            f"{'Taker' if is_taker else 'Maker'} order",
            f"Volume tier {tier['tier']}: ${volume_14d / 1_000_000:.1f}M 14d volume",
            f"Base fee: {base_fee_bps:.2f} bps",
        ]
        if staking_discount > 0:
            assumptions.append(f"Staking discount: {staking_discount * 100:.0f}% ({hype_staked:,.0f} HYPE)")
        assumptions.append(f"Effective fee: {effective_fee_bps:.2f} bps ({fee_rate * 100:.4f}%)")

        if context is None:
            confidence = Confidence.MEDIUM
            mode = CostEstimateMode.PUBLIC_SCHEDULE
            assumptions.append("Using default tier: no user context provided (0 volume, 0 HYPE staked)")
        else:
            confidence = Confidence.HIGH
            mode = CostEstimateMode.ACCOUNT_SPECIFIC

        return self._create_estimate(
            request,
            FeeBreakdown(exchange_fee=exchange_fee),
            confidence,
            assumptions,
            mode=mode,
        )

    def get_schedule(self) -> FeeSchedule:
        tiers = [
            VolumeTier(
                tier=t.get("tier"),
                min_volume_usd=t["min_volume_14d_usd"],
                max_volume_usd=t.get("max_volume_14d_usd"),
                maker_fee_bps=t["maker_fee_bps"],
                taker_fee_bps=t["taker_fee_bps"],
            )
            for t in self.schedule["volume_tiers"]
        ]
        return FeeSchedule(
            **self._schedule_metadata(),
            maker_fee_bps=self.schedule["base_fees"]["maker_fee_bps"],
            taker_fee_bps=self.schedule["base_fees"]["taker_fee_bps"],
            tiers=tiers,
        )
