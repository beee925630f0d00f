"""
Kalshi fee calculator.

Kalshi charges formula-based fees:
    taker_fee = 0.07   x contracts x P x (1 - P)
    maker_fee = 0.0175 x contracts x P x (1 - P)   [sports/macro series]
    maker_fee = 0                                  [most other markets]

The P x (1 - P) term peaks at 0.25 when P = 0.50 and approaches 0 at the
extremes, so fees are highest at 50/50 odds and symmetric around them.
"""
from typing import Optional

from ..models import (
    Confidence,
    FeeBreakdown,
    FeeEstimate,
    FeeSchedule,
    OrderType,
    TradeRequest,
    Venue,
)
from .base import BaseFeeCalculator

DEFAULT_PRICE = 0.5


def variance_term(price: float) -> float:
    return price * (1 - price)


def usd_to_contracts(size_usd: float, price: float) -> float:
    """
    Each contract costs `price` dollars and pays $1 if correct, so
    $100 at $0.50 buys 200 contracts. Prices outside (0, 1) buy nothing.
    """
    if price <= 0 or price >= 1:
        return 0.0
    return size_usd / price


class KalshiFeeCalculator(BaseFeeCalculator):
    """Probability-scaled fees for Kalshi binary event contracts."""

    venue = Venue.KALSHI

    @property
    def taker_coefficient(self) -> float:
        return self.schedule["coefficients"]["taker"]

    @property
    def maker_coefficient_special(self) -> float:
        return self.schedule["coefficients"]["maker_special"]

    @property
    def maker_coefficient_default(self) -> float:
        return self.schedule["coefficients"]["maker_default"]

    def is_special_market(self, market_id: Optional[str]) -> bool:
        """Sports/macro series charge maker fees; matched by ticker prefix."""
        if not market_id:
            return False
        ticker = market_id.upper()
        return any(ticker.startswith(series) for series in self.schedule.get("maker_fee_series", []))

    def coefficient_for(self, order_type: OrderType, is_special_market: bool = False) -> float:
        if order_type == OrderType.MARKET:
            return self.taker_coefficient
        if is_special_market:
            return self.maker_coefficient_special
        return self.maker_coefficient_default

    @staticmethod
    def calculate_fee(contracts: float, price: float, coefficient: float) -> float:
        """fee = coefficient x contracts x P x (1 - P)"""
        return coefficient * contracts * variance_term(price)

    def _calculate(self, request: TradeRequest) -> FeeEstimate:
        confidence = Confidence.HIGH
        assumptions = []

        price = request.price
        if price is None:
            price = DEFAULT_PRICE
            confidence = Confidence.MEDIUM
            assumptions.append(f"No contract price supplied: assuming {DEFAULT_PRICE:.2f}")

        contracts = usd_to_contracts(request.size_usd, price)
        if contracts == 0:
            confidence = Confidence.LOW
            assumptions.append(f"Price {price} outside (0, 1): contract count set to 0, no fee computed")

        is_taker = request.order_type == OrderType.MARKET
        special = self.is_special_market(request.market_id)
        coefficient = self.coefficient_for(request.order_type, special)
        exchange_fee = self.calculate_fee(contracts, price, coefficient)

        assumptions.extend([
            f"{'Taker' if is_taker else 'Maker'} order",
            f"Formula: {coefficient} x {contracts:.0f} contracts x {price:.2f} x {1 - price:.2f}",
            f"P x (1-P) = {variance_term(price):.4f} (max 0.25 at 50%)",
            f"Fee: ${exchange_fee:.2f}",
        ])
        if not is_taker:
            if special:
                assumptions.append(f"Sports/macro market: maker coefficient {self.maker_coefficient_special}")
            else:
                assumptions.append(
                    f"Maker fee is 0 for most markets, "
                    f"{self.maker_coefficient_special} x C x P x (1-P) for sports/macro"
                )

        return self._create_estimate(
            request,
            FeeBreakdown(exchange_fee=exchange_fee),
            confidence,
            assumptions,
        )

    async def estimate_by_contracts(
        self,
        contracts: float,
        price: float,
        order_type: OrderType = OrderType.MARKET,
        is_special_market: bool = False,
    ) -> FeeEstimate:
        """Estimate with an explicit contract count instead of a USD size."""
        if contracts <= 0:
            self.logger.warning(f"{self.venue.value}: non-positive contract count {contracts}, returning zero estimate")
            request = TradeRequest(venue=self.venue, size_usd=0, price=price, order_type=order_type)
            return self._create_estimate(
                request,
                FeeBreakdown(),
                Confidence.LOW,
                [f"Non-positive contract count ({contracts}): no fee computed"],
            )

        coefficient = self.coefficient_for(order_type, is_special_market)
        valid_price = 0 < price < 1
        exchange_fee = self.calculate_fee(contracts, price, coefficient) if valid_price else 0.0
        request = TradeRequest(
            venue=self.venue,
            size_usd=contracts * price,
            price=price,
            order_type=order_type,
        )

        assumptions = [
            f"{'Taker' if order_type == OrderType.MARKET else 'Maker'} order",
            f"Formula: {coefficient} x {contracts} x {price:.2f} x {1 - price:.2f}",
            f"P x (1-P) = {variance_term(price):.4f}",
            "Sports/macro market (maker fee applies)" if is_special_market else "Standard market",
        ]
        confidence = Confidence.HIGH
        if not valid_price:
            confidence = Confidence.LOW
            assumptions.append(f"Price {price} outside (0, 1): no fee computed")

        return self._create_estimate(request, FeeBreakdown(exchange_fee=exchange_fee), confidence, assumptions)

    def get_schedule(self) -> FeeSchedule:
        display = self.schedule.get("display", {})
        return FeeSchedule(
            **self._schedule_metadata(),
            maker_fee_bps=display.get("maker_fee_bps", 0),
            # ~1.75% at P = 0.50 (0.07 x 0.25)
            taker_fee_bps=display.get("taker_fee_bps", self.taker_coefficient * 0.25 * 10000),
        )
