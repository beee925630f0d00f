"""
Cost oracle: unified entry point for fee, cost and arbitrage estimates.
"""
import asyncio
from typing import Dict, Iterable, List, Optional

from .arbitrage_analyzer import ArbitrageAnalyzer
from .calculators import BaseFeeCalculator, default_calculators
from .config_loader import Config, default_config
from .cost_estimator import CostEstimator
from .errors import UnsupportedVenueError
from .fetchers.replay_labs_fetcher import ReplayLabsFetcher
from .logger import setup_logger
from .models import (
    ArbitrageAnalysis,
    FeeEstimate,
    FeeSchedule,
    OrderType,
    PoolContext,
    TradeLeg,
    TradeRequest,
    TradingCost,
    Venue,
)
from .normalizers.orderbook_normalizer import OrderbookNormalizer


class CostOracle:
    """Registry of venue calculators plus the optional live orderbook source."""

    def __init__(
        self,
        calculators: Optional[Iterable[BaseFeeCalculator]] = None,
        fetcher=None,
        config: Optional[Config] = None,
        normalizer: Optional[OrderbookNormalizer] = None,
    ):
        self.config = config or Config()
        self.logger = setup_logger(
            "oracle",
            self.config.logging.level,
            self.config.logging.file,
            self.config.logging.max_bytes,
            self.config.logging.backup_count,
        )

        self._calculators: Dict[Venue, BaseFeeCalculator] = {}
        if calculators is None:
            calculators = default_calculators().values()
        for calculator in calculators:
            self.register_calculator(calculator)

        self.fetcher = fetcher
        self.cost_estimator = CostEstimator(
            self._calculators,
            fetcher=fetcher,
            normalizer=normalizer,
            heuristics=self.config.heuristics,
        )
        self.arbitrage_analyzer = ArbitrageAnalyzer(
            self._calculators,
            cost_estimator=self.cost_estimator,
            min_profit_threshold_pct=self.config.arbitrage.min_profit_threshold_pct,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def register_calculator(self, calculator: BaseFeeCalculator) -> None:
        """Register (or replace) the calculator for its venue."""
        self._calculators[calculator.venue] = calculator

    def get_calculator(self, venue: Venue) -> Optional[BaseFeeCalculator]:
        return self._calculators.get(Venue(venue))

    def get_supported_venues(self) -> List[Venue]:
        return list(self._calculators)

    @property
    def has_live_data(self) -> bool:
        return self.fetcher is not None

    def _require_calculator(self, venue: Venue) -> BaseFeeCalculator:
        calculator = self._calculators.get(Venue(venue))
        if calculator is None:
            self.logger.error(f"No calculator registered for venue: {getattr(venue, 'value', venue)}")
            raise UnsupportedVenueError(venue)
        return calculator

    async def estimate(self, request: TradeRequest) -> FeeEstimate:
        """Explicit fees for a single trade."""
        return await self._require_calculator(request.venue).estimate(request)

    async def estimate_cost(self, request: TradeRequest, require_live: bool = False) -> TradingCost:
        """Fees plus spread and slippage, from the live book when available."""
        return await self.cost_estimator.estimate_cost(request, require_live=require_live)

    async def estimate_with_pool_context(self, request: TradeRequest, pool_context: PoolContext) -> FeeEstimate:
        """Fee estimate for a specific DEX pool (Aerodrome)."""
        calculator = self._require_calculator(request.venue)
        if not hasattr(calculator, "estimate_with_pool_context"):
            raise ValueError(f"Pool context is not supported for venue: {request.venue.value}")
        return await calculator.estimate_with_pool_context(request, pool_context)

    def get_schedule(self, venue: Venue) -> Optional[FeeSchedule]:
        calculator = self.get_calculator(venue)
        if calculator is None:
            return None
        return calculator.get_schedule()

    def get_all_schedules(self) -> List[FeeSchedule]:
        return [calculator.get_schedule() for calculator in self._calculators.values()]

    async def analyze_arbitrage(
        self,
        legs: List[TradeLeg],
        gross_profit: float,
        min_profit_threshold_pct: Optional[float] = None,
    ) -> ArbitrageAnalysis:
        """
        Analyze a cross-venue arbitrage.

        Only venues of the same category can be combined (e.g. Kalshi and
        Polymarket both list binary event contracts). Perps and spot DEX legs
        need a different analysis and are rejected.
        """
        return await self.arbitrage_analyzer.analyze(legs, gross_profit, min_profit_threshold_pct)

    async def compare_venues(
        self,
        size_usd: float,
        price: Optional[float] = None,
        order_type: OrderType = OrderType.MARKET,
    ) -> List[FeeEstimate]:
        """Fee estimates for the same trade on every registered venue."""
        return list(await asyncio.gather(*(
            self.estimate(TradeRequest(venue=venue, size_usd=size_usd, price=price, order_type=order_type))
            for venue in self.get_supported_venues()
        )))

    async def close(self):
        """Release the orderbook fetcher's HTTP client."""
        if self.fetcher is not None and hasattr(self.fetcher, "close"):
            await self.fetcher.close()


def create_oracle(
    config: Optional[Config] = None,
    fetcher=None,
    calculators: Optional[Iterable[BaseFeeCalculator]] = None,
) -> CostOracle:
    """New, independent oracle (for tests or custom configuration)."""
    return CostOracle(calculators=calculators, fetcher=fetcher, config=config)


def init_oracle_with_replay_labs(
    api_key: str,
    base_url: Optional[str] = None,
    config: Optional[Config] = None,
) -> CostOracle:
    """Oracle with live Kalshi/Polymarket orderbooks from Replay Labs."""
    config = config or default_config()
    settings = config.replay_labs
    fetcher = ReplayLabsFetcher(
        api_key=api_key,
        base_url=base_url or settings.base_url,
        timeout=settings.timeout,
        retry_attempts=settings.retry_attempts,
        retry_delay=settings.retry_delay,
    )
    return create_oracle(config=config, fetcher=fetcher)


_default_oracle: Optional[CostOracle] = None


def get_oracle() -> CostOracle:
    """
    Process-wide oracle, created on first use.

    Uses live orderbooks when REPLAY_LABS_API_KEY is set. The instance is kept
    until reset_oracle() is called.
    """
    global _default_oracle
    if _default_oracle is None:
        config = default_config()
        if config.replay_labs.api_key:
            _default_oracle = init_oracle_with_replay_labs(config.replay_labs.api_key, config=config)
        else:
            _default_oracle = create_oracle(config=config)
    return _default_oracle


def reset_oracle() -> Optional[CostOracle]:
    """
    Drop the process-wide oracle so the next get_oracle() builds a new one.

    Returns the dropped instance (or None); the caller should await its
    close() if it holds a live fetcher.
    """
    global _default_oracle
    previous, _default_oracle = _default_oracle, None
    return previous
