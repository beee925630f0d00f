"""
Full trading cost estimation.

Explicit costs come from the venue fee calculator. Implicit costs (spread and
slippage) come from the live orderbook when one can be fetched, otherwise from
per-venue heuristics with the estimate flagged as low confidence.
"""
from typing import Dict, List, Optional, Tuple

from .calculators.base import BaseFeeCalculator, percent_of
from .calculators.cost_calculator import calculate_slippage, estimate_slippage, estimate_spread_cost
from .config_loader import HeuristicsConfig
from .errors import DataUnavailableError, UnsupportedVenueError
from .logger import setup_logger
from .models import (
    Confidence,
    CostBreakdown,
    CostEstimateMode,
    FeeEstimate,
    OrderbookSnapshot,
    Side,
    SlippageResult,
    TradeRequest,
    TradingCost,
    Venue,
)
from .normalizers.orderbook_normalizer import OrderbookNormalizer

CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


def lowest_confidence(*levels: Confidence) -> Confidence:
    return min(levels, key=CONFIDENCE_RANK.__getitem__)


class CostEstimator:
    """
    Combines fee calculators with live or heuristic spread/slippage.

    The fetcher is any object with an async fetch_orderbook(venue, market_id)
    returning the raw venue payload; ReplayLabsFetcher is the shipped one.
    """

    def __init__(
        self,
        calculators: Dict[Venue, BaseFeeCalculator],
        fetcher=None,
        normalizer: Optional[OrderbookNormalizer] = None,
        heuristics: Optional[HeuristicsConfig] = None,
    ):
        self.calculators = calculators
        self.fetcher = fetcher
        self.normalizer = normalizer or OrderbookNormalizer()
        self.heuristics = heuristics or HeuristicsConfig()
        self.logger = setup_logger("cost_estimator")

    @property
    def has_live_data(self) -> bool:
        return self.fetcher is not None

    def _get_calculator(self, venue: Venue) -> BaseFeeCalculator:
        calculator = self.calculators.get(venue)
        if calculator is None:
            self.logger.error(f"No calculator registered for venue: {getattr(venue, 'value', venue)}")
            raise UnsupportedVenueError(venue)
        return calculator

    async def _fetch_snapshot(self, venue: Venue, market_id: str) -> OrderbookSnapshot:
        payload = await self.fetcher.fetch_orderbook(venue, market_id)
        return self.normalizer.normalize(venue, market_id, payload)

    async def _live_snapshot(self, request: TradeRequest, side: Side) -> Tuple[Optional[OrderbookSnapshot], str]:
        """Snapshot usable for this trade, or None with the reason it is not."""
        if request.size_usd <= 0:
            return None, f"Non-positive trade size (${request.size_usd}): no implicit costs"
        if self.fetcher is None:
            return None, "No live orderbook source configured"
        if not request.market_id:
            return None, "No market_id supplied: live orderbook not fetched"

        try:
            snapshot = await self._fetch_snapshot(request.venue, request.market_id)
        except Exception as e:
            self.logger.warning(
                f"Orderbook unavailable for {request.venue.value} {request.market_id}, "
                f"falling back to heuristics: {e}"
            )
            return None, f"Orderbook unavailable ({e})"

        relevant = snapshot.asks if side == Side.BUY else snapshot.bids
        if not relevant:
            book_side = "ask" if side == Side.BUY else "bid"
            self.logger.warning(f"Empty {book_side} side for {request.venue.value} {request.market_id}")
            return None, f"Orderbook has no {book_side} levels for a {side.value}"

        return snapshot, ""

    async def estimate_cost(self, request: TradeRequest, require_live: bool = False) -> TradingCost:
        """
        Estimate explicit plus implicit cost of a trade.

        Args:
            request: Trade parameters
            require_live: Raise instead of falling back to heuristics when no
                usable orderbook can be obtained

        Raises:
            UnsupportedVenueError: No calculator for the venue
            DataUnavailableError: require_live is set and no live book was usable
        """
        side = request.side or Side.BUY
        calculator = self._get_calculator(request.venue)
        fee_estimate = await calculator.estimate(request)

        snapshot, reason = await self._live_snapshot(request, side)
        if snapshot is None and require_live and request.size_usd > 0:
            self.logger.error(f"Live orderbook required for {request.venue.value}: {reason}")
            raise DataUnavailableError(f"Live orderbook required but unavailable: {reason}")

        if snapshot is not None:
            result = calculate_slippage(snapshot, request.size_usd, side)
            cost = self._live_cost(request, side, fee_estimate, snapshot, result)
        else:
            cost = self._heuristic_cost(request, side, fee_estimate, reason)

        self.logger.debug(
            f"{request.venue.value} {side.value} ${request.size_usd}: total ${cost.total_cost_usd:.4f} "
            f"({cost.total_cost_pct:.4f}%), mode {cost.mode.value}, confidence {cost.confidence.value}"
        )
        return cost

    def _live_cost(
        self,
        request: TradeRequest,
        side: Side,
        fee_estimate: FeeEstimate,
        snapshot: OrderbookSnapshot,
        result: SlippageResult,
    ) -> TradingCost:
        assumptions = list(fee_estimate.assumptions)
        assumptions.append(
            f"Live orderbook: bid {snapshot.best_bid:.4f} / ask {snapshot.best_ask:.4f} "
            f"({snapshot.spread_bps:.1f} bps spread)"
        )
        assumptions.append(
            f"Walked {result.levels_consumed} level(s): effective price {result.effective_price:.4f}, "
            f"impact {result.price_impact_pct:.3f}%"
        )

        book_confidence = Confidence.HIGH
        if not result.fully_filled:
            book_confidence = Confidence.MEDIUM
            assumptions.append("Order exceeds visible depth: remainder priced at the last visible level")
        if snapshot.is_crossed:
            book_confidence = Confidence.LOW
            assumptions.append(
                f"Crossed book (bid {snapshot.best_bid:.4f} > ask {snapshot.best_ask:.4f}): "
                f"mid and spread are unreliable"
            )

        return self._build_cost(
            request,
            side,
            fee_estimate,
            spread_cost=result.spread_cost_usd,
            slippage=result.slippage_usd,
            confidence=lowest_confidence(fee_estimate.confidence, book_confidence),
            mode=CostEstimateMode.LIVE_ORDERBOOK,
            assumptions=assumptions,
            snapshot=snapshot,
            market_data={
                "best_bid": snapshot.best_bid,
                "best_ask": snapshot.best_ask,
                "mid_price": snapshot.mid_price,
                "spread_bps": snapshot.spread_bps,
                "effective_price": result.effective_price,
                "price_impact_pct": result.price_impact_pct,
                "levels_consumed": result.levels_consumed,
            },
        )

    def _heuristic_cost(
        self,
        request: TradeRequest,
        side: Side,
        fee_estimate: FeeEstimate,
        reason: str,
    ) -> TradingCost:
        venue = request.venue
        typical_spread = self.heuristics.typical_spread(venue)
        base_slippage_pct = self.heuristics.base_slippage_pct(venue)

        spread_cost = estimate_spread_cost(venue, request.size_usd, request.price, typical_spread)
        slippage = estimate_slippage(
            venue,
            request.size_usd,
            base_slippage_pct,
            self.heuristics.reference_size_usd,
        )

        assumptions = list(fee_estimate.assumptions)
        assumptions.append(f"{reason}: spread and slippage are heuristic estimates")
        assumptions.append(
            f"Typical spread {typical_spread} (half applied), "
            f"slippage {base_slippage_pct * 100:.3f}% at ${self.heuristics.reference_size_usd:,.0f}"
        )

        return self._build_cost(
            request,
            side,
            fee_estimate,
            spread_cost=spread_cost,
            slippage=slippage,
            confidence=Confidence.LOW,
            mode=fee_estimate.mode,
            assumptions=assumptions,
        )

    @staticmethod
    def _build_cost(
        request: TradeRequest,
        side: Side,
        fee_estimate: FeeEstimate,
        spread_cost: float,
        slippage: float,
        confidence: Confidence,
        mode: CostEstimateMode,
        assumptions: List[str],
        snapshot: Optional[OrderbookSnapshot] = None,
        market_data: Optional[Dict] = None,
    ) -> TradingCost:
        fees = fee_estimate.breakdown
        explicit = fee_estimate.total_fee_usd
        implicit = spread_cost + slippage
        total = explicit + implicit

        return TradingCost(
            venue=request.venue,
            size_usd=request.size_usd,
            side=side,
            exchange_fee_usd=fees.exchange_fee,
            gas_fee_usd=fees.gas_fee,
            explicit_cost_usd=explicit,
            spread_cost_usd=spread_cost,
            slippage_usd=slippage,
            implicit_cost_usd=implicit,
            total_cost_usd=total,
            total_cost_pct=percent_of(total, request.size_usd),
            breakdown=CostBreakdown(
                exchange_fee=fees.exchange_fee,
                gas_fee=fees.gas_fee,
                settlement_fee=fees.settlement_fee,
                rebate=fees.rebate,
                spread_cost=spread_cost,
                slippage=slippage,
                **(market_data or {}),
            ),
            confidence=confidence,
            mode=mode,
            assumptions=assumptions,
            orderbook_snapshot=snapshot,
            fee_estimate=fee_estimate,
        )
