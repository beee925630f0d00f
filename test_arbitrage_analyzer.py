import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from cost_oracle.arbitrage_analyzer import ArbitrageAnalyzer
from cost_oracle.calculators import KalshiFeeCalculator, PolymarketFeeCalculator, default_calculators
from cost_oracle.cost_estimator import CostEstimator
from cost_oracle.errors import InvalidTradeCompatibilityError, UnsupportedVenueError
from cost_oracle.models import Confidence, FeeBreakdown, FeeEstimate, Side, TradeLeg, TradingCost, Venue


def fee_estimate(venue, total):
    return FeeEstimate(
        venue=venue,
        size_usd=1000,
        total_fee_usd=total,
        fee_pct=total / 1000 * 100,
        breakdown=FeeBreakdown(exchange_fee=total),
        confidence=Confidence.HIGH,
    )


PREDICTION_LEGS = [
    TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=1000, price=0.475),
    TradeLeg(venue=Venue.POLYMARKET, direction=Side.SELL, size_usd=1000, price=0.525),
]


class TestArbitrageAnalyzer(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.calculators = default_calculators()
        self.analyzer = ArbitrageAnalyzer(self.calculators)

    async def test_kalshi_polymarket_arbitrage(self):
        analysis = await self.analyzer.analyze(PREDICTION_LEGS, gross_profit=50)

        # Kalshi: 0.07 x 1000 x (1 - 0.475); Polymarket: 1 bp + gas
        expected_costs = 36.75 + 0.1 + 0.005
        self.assertAlmostEqual(analysis.total_fees_usd, expected_costs, places=6)
        self.assertAlmostEqual(analysis.net_profit_usd, 50 - expected_costs, places=6)
        self.assertAlmostEqual(analysis.net_profit_pct, (50 - expected_costs) / 2000 * 100, places=6)
        self.assertEqual(analysis.total_notional_usd, 2000)
        self.assertTrue(analysis.is_profitable)
        self.assertEqual(len(analysis.leg_estimates), 2)
        self.assertEqual(analysis.min_profit_threshold_pct, 0.5)

    async def test_threshold_is_inclusive(self):
        with patch.object(self.calculators[Venue.KALSHI], "estimate",
                          AsyncMock(return_value=fee_estimate(Venue.KALSHI, 15.0))), \
             patch.object(self.calculators[Venue.POLYMARKET], "estimate",
                          AsyncMock(return_value=fee_estimate(Venue.POLYMARKET, 25.0))):
            threshold = 10.0 / 2000.0 * 100
            analysis = await self.analyzer.analyze(PREDICTION_LEGS, 50.0, min_profit_threshold_pct=threshold)

        self.assertEqual(analysis.total_fees_usd, 40.0)
        self.assertEqual(analysis.net_profit_usd, 10.0)
        self.assertEqual(analysis.net_profit_pct, threshold)
        self.assertTrue(analysis.is_profitable)

    async def test_unprofitable_after_costs(self):
        analysis = await self.analyzer.analyze(PREDICTION_LEGS, gross_profit=30)
        self.assertLess(analysis.net_profit_usd, 0)
        self.assertFalse(analysis.is_profitable)

    async def test_incompatible_legs_raise_before_costing(self):
        legs = [
            TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=1000, price=0.5),
            TradeLeg(venue=Venue.HYPERLIQUID, direction=Side.SELL, size_usd=1000),
        ]
        spies = {venue: AsyncMock() for venue in self.calculators}
        for venue, spy in spies.items():
            self.calculators[venue].estimate = spy

        with self.assertRaises(InvalidTradeCompatibilityError) as ctx:
            await self.analyzer.analyze(legs, gross_profit=20)

        message = str(ctx.exception)
        for part in ("KALSHI", "PREDICTION_MARKET", "HYPERLIQUID", "PERPS"):
            self.assertIn(part, message)
        for spy in spies.values():
            spy.assert_not_awaited()

    async def test_unregistered_venue(self):
        analyzer = ArbitrageAnalyzer({Venue.KALSHI: KalshiFeeCalculator()})
        legs = [
            TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=100, price=0.5),
            TradeLeg(venue=Venue.POLYMARKET, direction=Side.SELL, size_usd=100, price=0.5),
        ]
        with self.assertRaises(UnsupportedVenueError):
            await analyzer.analyze(legs, gross_profit=5)

    async def test_zero_legs(self):
        analysis = await self.analyzer.analyze([], gross_profit=0)
        self.assertEqual(analysis.total_fees_usd, 0)
        self.assertEqual(analysis.net_profit_pct, 0)
        self.assertFalse(analysis.is_profitable)

        analysis = await self.analyzer.analyze([], gross_profit=0, min_profit_threshold_pct=0)
        self.assertTrue(analysis.is_profitable)

    async def test_single_venue_legs_are_valid(self):
        legs = [
            TradeLeg(venue=Venue.POLYMARKET, direction=Side.BUY, size_usd=500, price=0.4),
            TradeLeg(venue=Venue.POLYMARKET, direction=Side.BUY, size_usd=500, price=0.55),
        ]
        analysis = await self.analyzer.analyze(legs, gross_profit=25)
        self.assertEqual(len(analysis.leg_estimates), 2)

    async def test_live_legs_use_cost_estimator(self):
        fetcher = MagicMock()
        fetcher.fetch_orderbook = AsyncMock(return_value={
            "bids": [{"price": "0.52", "size": "5000"}],
            "asks": [{"price": "0.53", "size": "5000"}],
        })
        calculators = {
            Venue.KALSHI: KalshiFeeCalculator(),
            Venue.POLYMARKET: PolymarketFeeCalculator(),
        }
        analyzer = ArbitrageAnalyzer(calculators, CostEstimator(calculators, fetcher=fetcher))
        legs = [
            TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=1000, price=0.475),
            TradeLeg(venue=Venue.POLYMARKET, direction=Side.SELL, size_usd=1000, price=0.525, market_id="7123"),
        ]

        analysis = await analyzer.analyze(legs, gross_profit=50)

        self.assertTrue(all(isinstance(estimate, TradingCost) for estimate in analysis.leg_estimates))
        self.assertAlmostEqual(
            analysis.total_fees_usd,
            sum(estimate.total_cost_usd for estimate in analysis.leg_estimates),
            places=9,
        )
        fetcher.fetch_orderbook.assert_awaited_once_with(Venue.POLYMARKET, "7123")


if __name__ == "__main__":
    unittest.main()
