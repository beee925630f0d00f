"""
Polymarket fee calculator.

Flat maker/taker model: 0 bps maker and 1 bp taker on most markets, a higher
taker rate on short-duration crypto markets, a minimum fee floor, and a
constant Polygon gas addend.
"""
from typing import Optional

from ..models import (
    Confidence,
    FeeBreakdown,
    FeeEstimate,
    FeeSchedule,
    GasEstimate,
    OrderType,
    TradeRequest,
    Venue,
)
from .base import BaseFeeCalculator, bps_to_rate


class PolymarketFeeCalculator(BaseFeeCalculator):
    venue = Venue.POLYMARKET

    @staticmethod
    def is_short_duration_crypto(market_id: Optional[str]) -> bool:
        """15-minute crypto markets carry '15m' or 'crypto' + 'minute' in their identifier."""
        if not market_id:
            return False
        lowered = market_id.lower()
        return '15m' in lowered or ('crypto' in lowered and 'minute' in lowered)

    def _calculate(self, request: TradeRequest) -> FeeEstimate:
        base_fees = self.schedule["base_fees"]
        rebates = self.schedule.get("maker_rebates", {})
        assumptions = []
        rebate = 0.0

        if request.order_type == OrderType.MARKET:
            short_duration = self.is_short_duration_crypto(request.market_id)
            if short_duration:
                fee_rate_bps = self.schedule["special_markets"]["short_duration_crypto"]["taker_fee_bps"]
            else:
                fee_rate_bps = base_fees["taker_fee_bps"]
            assumptions.append("Taker order (market order)")
            if short_duration:
                assumptions.append("Short-duration crypto market -> higher taker fee")
        else:
            fee_rate_bps = base_fees["maker_fee_bps"]
            assumptions.append(f"Maker order (limit order) -> {fee_rate_bps} bps fee")
            if rebates.get("enabled"):
                rebate_bps = rebates.get("rebate_bps", 0)
                rebate = request.size_usd * bps_to_rate(rebate_bps)
                if rebate_bps:
                    assumptions.append(f"Maker rebate: {rebate_bps} bps (${rebate:.4f})")
                else:
                    assumptions.append("Eligible for maker rebates program (amount not modelled)")

        fee_rate = bps_to_rate(fee_rate_bps)
        min_fee = self.schedule.get("min_fee_usd", 0.0)
        exchange_fee = max(request.size_usd * fee_rate, min_fee)

        gas_fee = self.schedule["gas_estimate"]["avg_cost_usd"]
        assumptions.append(f"Gas estimate: ${gas_fee:.4f} (Polygon)")
        assumptions.append(f"Fee rate: {fee_rate_bps} bps ({fee_rate * 100:.3f}%), minimum ${min_fee}")

        # Polymarket fees are well-documented and predictable
        return self._create_estimate(
            request,
            FeeBreakdown(exchange_fee=exchange_fee, gas_fee=gas_fee, rebate=rebate),
            Confidence.HIGH,
            assumptions,
        )

    def get_schedule(self) -> FeeSchedule:
        return FeeSchedule(
            **self._schedule_metadata(),
            maker_fee_bps=self.schedule["base_fees"]["maker_fee_bps"],
            taker_fee_bps=self.schedule["base_fees"]["taker_fee_bps"],
            gas_estimate=GasEstimate(**self.schedule["gas_estimate"]),
        )
