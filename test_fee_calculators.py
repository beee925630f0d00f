import asyncio
import unittest

import pytest

from cost_oracle.calculators import (
    AerodromeFeeCalculator,
    HyperliquidFeeCalculator,
    KalshiFeeCalculator,
    PolymarketFeeCalculator,
)
from cost_oracle.models import (
    Confidence,
    CostEstimateMode,
    HyperliquidUserContext,
    OrderType,
    PoolContext,
    PoolType,
    TradeRequest,
    Venue,
)
from cost_oracle.schedules import load_schedule


class TestKalshiFeeCalculator(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.calculator = KalshiFeeCalculator()

    async def test_taker_fee_at_midpoint(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.5)
        )
        # 0.07 x 2000 contracts x 0.25
        self.assertAlmostEqual(estimate.total_fee_usd, 35.0, places=6)
        self.assertAlmostEqual(estimate.fee_pct, 3.5, places=6)
        self.assertEqual(estimate.confidence, Confidence.HIGH)
        self.assertEqual(estimate.kind, "FEE")

    async def test_fee_pct_matches_total(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=750, price=0.3)
        )
        self.assertAlmostEqual(estimate.fee_pct, estimate.total_fee_usd / 750 * 100, places=9)

    async def test_symmetric_in_price_for_fixed_contracts(self):
        low = await self.calculator.estimate_by_contracts(100, 0.3)
        high = await self.calculator.estimate_by_contracts(100, 0.7)
        self.assertAlmostEqual(low.breakdown.exchange_fee, high.breakdown.exchange_fee, places=9)

    def test_fee_peaks_at_midpoint(self):
        peak = KalshiFeeCalculator.calculate_fee(100, 0.5, 0.07)
        for price in (0.01, 0.1, 0.25, 0.4, 0.49, 0.51, 0.6, 0.75, 0.9, 0.99):
            self.assertLess(KalshiFeeCalculator.calculate_fee(100, price, 0.07), peak)

    async def test_maker_fee_zero_on_standard_market(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.5,
                         order_type=OrderType.LIMIT, market_id="KXHIGHNY-25JAN15")
        )
        self.assertEqual(estimate.total_fee_usd, 0)

    async def test_maker_fee_on_sports_series(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.5,
                         order_type=OrderType.LIMIT, market_id="KXNFLGAME-25JAN12-KC")
        )
        # 0.0175 x 2000 x 0.25
        self.assertAlmostEqual(estimate.total_fee_usd, 8.75, places=6)

    async def test_missing_price_assumes_midpoint(self):
        estimate = await self.calculator.estimate(TradeRequest(venue=Venue.KALSHI, size_usd=1000))
        self.assertAlmostEqual(estimate.total_fee_usd, 35.0, places=6)
        self.assertEqual(estimate.confidence, Confidence.MEDIUM)
        self.assertTrue(any("assuming 0.50" in a for a in estimate.assumptions))

    async def test_price_out_of_range_fails_closed(self):
        for price in (0.0, 1.0, 1.2):
            estimate = await self.calculator.estimate(
                TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=price)
            )
            self.assertEqual(estimate.total_fee_usd, 0)
            self.assertEqual(estimate.confidence, Confidence.LOW)

    async def test_zero_size_is_flagged_not_raised(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=0, price=0.5)
        )
        self.assertEqual(estimate.total_fee_usd, 0)
        self.assertEqual(estimate.fee_pct, 0)
        self.assertEqual(estimate.confidence, Confidence.LOW)

    async def test_non_positive_contracts_are_flagged_not_raised(self):
        for contracts in (0, -100):
            estimate = await self.calculator.estimate_by_contracts(contracts, 0.5)
            self.assertEqual(estimate.total_fee_usd, 0)
            self.assertEqual(estimate.fee_pct, 0)
            self.assertEqual(estimate.confidence, Confidence.LOW)
            self.assertTrue(any("Non-positive contract count" in a for a in estimate.assumptions))

    async def test_assumptions_end_with_mode_disclaimer(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.KALSHI, size_usd=100, price=0.2)
        )
        self.assertTrue(estimate.assumptions[-1].startswith("PUBLIC_SCHEDULE"))
        self.assertEqual(estimate.schedule_version, "2025.01")

    def test_schedule_snapshot(self):
        schedule = self.calculator.get_schedule()
        self.assertEqual(schedule.venue, Venue.KALSHI)
        self.assertEqual(schedule.taker_fee_bps, 175)
        self.assertEqual(schedule.maker_fee_bps, 0)


class TestPolymarketFeeCalculator(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.calculator = PolymarketFeeCalculator()

    async def test_taker_one_basis_point(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=10000, price=0.5)
        )
        self.assertAlmostEqual(estimate.breakdown.exchange_fee, 1.0, places=6)
        self.assertAlmostEqual(estimate.breakdown.gas_fee, 0.005, places=9)
        self.assertAlmostEqual(estimate.total_fee_usd, 1.005, places=6)
        self.assertEqual(estimate.confidence, Confidence.HIGH)

    async def test_maker_pays_minimum_fee(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=1000, order_type=OrderType.LIMIT)
        )
        self.assertEqual(estimate.breakdown.exchange_fee, 0.0001)

    async def test_short_duration_crypto_rate(self):
        estimate = await self.calculator.estimate(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=1000, market_id="btc-updown-15m-1736900000")
        )
        self.assertAlmostEqual(estimate.breakdown.exchange_fee, 10.0, places=6)

    def test_short_duration_detection(self):
        self.assertTrue(PolymarketFeeCalculator.is_short_duration_crypto("ETH-15M-UP"))
        self.assertTrue(PolymarketFeeCalculator.is_short_duration_crypto("crypto-5-minute-btc"))
        self.assertFalse(PolymarketFeeCalculator.is_short_duration_crypto("crypto-weekly-btc"))
        self.assertFalse(PolymarketFeeCalculator.is_short_duration_crypto(None))

    async def test_rebate_larger_than_fee_is_not_clamped(self):
        schedule = load_schedule(Venue.POLYMARKET)
        schedule["maker_rebates"] = {"enabled": True, "rebate_bps": 2}
        calculator = PolymarketFeeCalculator(schedule=schedule)

        estimate = await calculator.estimate(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=10000, order_type=OrderType.LIMIT)
        )
        self.assertAlmostEqual(estimate.breakdown.rebate, 2.0, places=6)
        self.assertAlmostEqual(estimate.total_fee_usd, 0.0001 + 0.005 - 2.0, places=6)
        self.assertLess(estimate.total_fee_usd, 0)


class TestHyperliquidFeeCalculator(unittest.IsolatedAsyncioTestCase):

    async def test_base_tier_without_context(self):
        calculator = HyperliquidFeeCalculator()
        estimate = await calculator.estimate(TradeRequest(venue=Venue.HYPERLIQUID, size_usd=10000))
        self.assertAlmostEqual(estimate.total_fee_usd, 3.5, places=6)
        self.assertEqual(estimate.confidence, Confidence.MEDIUM)
        self.assertEqual(estimate.mode, CostEstimateMode.PUBLIC_SCHEDULE)
        self.assertTrue(any("no user context" in a for a in estimate.assumptions))

    async def test_volume_tier_from_context(self):
        calculator = HyperliquidFeeCalculator(
            user_context=HyperliquidUserContext(volume_14d_usd=10_000_000)
        )
        estimate = await calculator.estimate(TradeRequest(venue=Venue.HYPERLIQUID, size_usd=10000))
        self.assertAlmostEqual(estimate.total_fee_usd, 2.5, places=6)
        self.assertEqual(estimate.confidence, Confidence.HIGH)
        self.assertEqual(estimate.mode, CostEstimateMode.ACCOUNT_SPECIFIC)

    async def test_staking_discount(self):
        calculator = HyperliquidFeeCalculator()
        calculator.set_user_context(HyperliquidUserContext(hype_staked=10_000))
        estimate = await calculator.estimate(TradeRequest(venue=Venue.HYPERLIQUID, size_usd=10000))
        # 3.5 bps x (1 - 10%)
        self.assertAlmostEqual(estimate.total_fee_usd, 3.15, places=6)

    async def test_clearing_context_restores_base_tier(self):
        calculator = HyperliquidFeeCalculator(
            user_context=HyperliquidUserContext(volume_14d_usd=50_000_000, hype_staked=500_000)
        )
        calculator.set_user_context(None)
        estimate = await calculator.estimate(TradeRequest(venue=Venue.HYPERLIQUID, size_usd=10000))
        self.assertAlmostEqual(estimate.total_fee_usd, 3.5, places=6)

    async def test_maker_rate(self):
        calculator = HyperliquidFeeCalculator()
        estimate = await calculator.estimate(
            TradeRequest(venue=Venue.HYPERLIQUID, size_usd=10000, order_type=OrderType.LIMIT)
        )
        self.assertAlmostEqual(estimate.total_fee_usd, 1.0, places=6)

    def test_tier_and_discount_lookup(self):
        calculator = HyperliquidFeeCalculator()
        self.assertEqual(calculator.get_volume_tier(0)["tier"], 1)
        self.assertEqual(calculator.get_volume_tier(7_000_000)["tier"], 2)
        self.assertEqual(calculator.get_volume_tier(5_000_000_000)["tier"], 6)
        self.assertEqual(calculator.get_staking_discount(999), 0.0)
        self.assertAlmostEqual(calculator.get_staking_discount(1000), 0.05)

    def test_schedule_lists_tiers(self):
        schedule = HyperliquidFeeCalculator().get_schedule()
        self.assertEqual(len(schedule.tiers), 6)
        self.assertEqual(schedule.taker_fee_bps, 3.5)


class TestAerodromeFeeCalculator(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.calculator = AerodromeFeeCalculator()

    async def test_default_volatile_pool(self):
        estimate = await self.calculator.estimate(TradeRequest(venue=Venue.AERODROME, size_usd=1000))
        self.assertAlmostEqual(estimate.breakdown.exchange_fee, 3.0, places=6)
        self.assertLess(estimate.breakdown.gas_fee, 0.1)
        self.assertEqual(estimate.confidence, Confidence.MEDIUM)

    async def test_stable_pool_with_price_impact(self):
        estimate = await self.calculator.estimate_with_pool_context(
            TradeRequest(venue=Venue.AERODROME, size_usd=1000),
            PoolContext(pool_type=PoolType.STABLE, price_impact_pct=0.1),
        )
        self.assertAlmostEqual(estimate.breakdown.exchange_fee, 0.4, places=6)
        self.assertAlmostEqual(estimate.breakdown.slippage_estimate, 1.0, places=6)
        self.assertEqual(estimate.confidence, Confidence.HIGH)

    async def test_concentrated_pool_tick_spacing(self):
        estimate = await self.calculator.estimate_with_pool_context(
            TradeRequest(venue=Venue.AERODROME, size_usd=1000),
            PoolContext(pool_type=PoolType.CONCENTRATED, tick_spacing=1),
        )
        self.assertAlmostEqual(estimate.breakdown.exchange_fee, 0.1, places=6)
        self.assertEqual(estimate.confidence, Confidence.MEDIUM)

    def test_unknown_tick_spacing_uses_tick_100_rate(self):
        self.assertEqual(self.calculator.get_pool_fee_bps(PoolType.CONCENTRATED, None), 30)
        self.assertEqual(self.calculator.get_pool_fee_bps(PoolType.CONCENTRATED, 50), 30)
        self.assertEqual(self.calculator.get_pool_fee_bps(PoolType.CONCENTRATED, 200), 100)

    def test_schedule_pool_fees(self):
        schedule = self.calculator.get_schedule()
        self.assertEqual(schedule.pool_fees.stable_bps, 4)
        self.assertEqual(schedule.pool_fees.volatile_bps, 30)
        self.assertEqual(schedule.gas_estimate.chain, "base")


def polymarket_with_large_rebate():
    schedule = load_schedule(Venue.POLYMARKET)
    schedule["maker_rebates"] = {"enabled": True, "rebate_bps": 2}
    return PolymarketFeeCalculator(schedule=schedule)


@pytest.mark.parametrize("make_calculator", [
    KalshiFeeCalculator,
    PolymarketFeeCalculator,
    polymarket_with_large_rebate,
    HyperliquidFeeCalculator,
    AerodromeFeeCalculator,
])
@pytest.mark.parametrize("size_usd", [1, 250, 10_000, 2_500_000])
@pytest.mark.parametrize("order_type", [OrderType.MARKET, OrderType.LIMIT])
def test_fee_pct_is_total_over_size(make_calculator, size_usd, order_type):
    calculator = make_calculator()
    estimate = asyncio.run(calculator.estimate(
        TradeRequest(venue=calculator.venue, size_usd=size_usd, price=0.5, order_type=order_type)
    ))
    assert estimate.fee_pct == pytest.approx(estimate.total_fee_usd / size_usd * 100)


if __name__ == "__main__":
    unittest.main()
