"""
Walk through the cost oracle: venue categories, single-trade estimates,
venue comparison, arbitrage checks and fee schedules.

Usage: python run_demo.py [config/config.yaml]
"""
import asyncio
import sys
from pathlib import Path

from cost_oracle import (
    InvalidTradeCompatibilityError,
    OrderType,
    PoolContext,
    PoolType,
    Side,
    TradeLeg,
    TradeRequest,
    Venue,
    VENUE_INFO,
    can_arbitrage,
    create_oracle,
    init_oracle_with_replay_labs,
)
from cost_oracle.config_loader import default_config, load_config
from cost_oracle.logger import setup_logger


def section(logger, title: str):
    logger.info("=" * 60)
    logger.info(title)
    logger.info("=" * 60)


async def main(config_path: str = "config/config.yaml"):
    config = load_config(config_path) if Path(config_path).exists() else default_config()
    logger = setup_logger(
        "demo",
        config.logging.level,
        config.logging.file,
        config.logging.max_bytes,
        config.logging.backup_count,
    )

    if config.replay_labs.api_key:
        oracle = init_oracle_with_replay_labs(config.replay_labs.api_key, config=config)
        logger.info("Live orderbooks enabled (Replay Labs)")
    else:
        oracle = create_oracle(config=config)
        logger.info("No REPLAY_LABS_API_KEY: fee schedules and heuristics only")

    async with oracle:
        section(logger, "VENUE CATEGORIES")
        for venue, info in VENUE_INFO.items():
            logger.info(f"  {venue.value} [{info['category'].value}]: {info['description']}")
        for other in (Venue.POLYMARKET, Venue.HYPERLIQUID, Venue.AERODROME):
            verdict = "yes" if can_arbitrage(Venue.KALSHI, other) else "no"
            logger.info(f"  KALSHI <-> {other.value}: {verdict}")

        section(logger, "SINGLE TRADE FEE ESTIMATES")
        trades = [
            (TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.50), "Kalshi @ 50% (worst case)"),
            (TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.10), "Kalshi @ 10%"),
            (TradeRequest(venue=Venue.KALSHI, size_usd=1000, price=0.90), "Kalshi @ 90%"),
            (TradeRequest(venue=Venue.POLYMARKET, size_usd=1000, price=0.50), "Polymarket @ 50%"),
            (TradeRequest(venue=Venue.HYPERLIQUID, size_usd=1000), "Hyperliquid (base tier)"),
            (TradeRequest(venue=Venue.AERODROME, size_usd=1000), "Aerodrome (volatile pool)"),
        ]
        for request, label in trades:
            estimate = await oracle.estimate(request)
            logger.info(
                f"  {label}: ${estimate.total_fee_usd:.4f} ({estimate.fee_pct:.4f}%) "
                f"[{estimate.confidence.value}]"
            )

        pool_estimate = await oracle.estimate_with_pool_context(
            TradeRequest(venue=Venue.AERODROME, size_usd=1000),
            PoolContext(pool_type=PoolType.STABLE, price_impact_pct=0.1),
        )
        logger.info(f"  Aerodrome stable pool, 0.1% impact: ${pool_estimate.total_fee_usd:.4f}")

        section(logger, "FULL TRADING COST")
        cost = await oracle.estimate_cost(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=5000, price=0.55, side=Side.BUY)
        )
        logger.info(
            f"  Polymarket $5000 BUY @ 0.55: fees ${cost.explicit_cost_usd:.4f} + "
            f"spread ${cost.spread_cost_usd:.4f} + slippage ${cost.slippage_usd:.4f} = "
            f"${cost.total_cost_usd:.4f} ({cost.mode.value}, {cost.confidence.value})"
        )

        section(logger, "VENUE COMPARISON ($10,000 MARKET)")
        for estimate in await oracle.compare_venues(10000, price=0.5):
            logger.info(f"  {estimate.venue.value:<12} ${estimate.total_fee_usd:>9.4f} ({estimate.fee_pct:.4f}%)")

        section(logger, "ARBITRAGE ANALYSIS")
        legs = [
            TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=1000, price=0.475),
            TradeLeg(venue=Venue.POLYMARKET, direction=Side.SELL, size_usd=1000, price=0.525),
        ]
        analysis = await oracle.analyze_arbitrage(legs, gross_profit=50)
        logger.info(
            f"  Kalshi BUY 0.475 / Polymarket SELL 0.525: net ${analysis.net_profit_usd:.2f} "
            f"({analysis.net_profit_pct:.3f}%) profitable={analysis.is_profitable}"
        )

        try:
            await oracle.analyze_arbitrage(
                [
                    TradeLeg(venue=Venue.KALSHI, direction=Side.BUY, size_usd=1000, price=0.5),
                    TradeLeg(venue=Venue.HYPERLIQUID, direction=Side.SELL, size_usd=1000),
                ],
                gross_profit=20,
            )
        except InvalidTradeCompatibilityError as e:
            logger.info(f"  Rejected as expected: {e}")

        section(logger, "FEE SCHEDULES")
        for schedule in oracle.get_all_schedules():
            logger.info(
                f"  {schedule.venue.value}: maker {schedule.maker_fee_bps} bps / taker "
                f"{schedule.taker_fee_bps} bps (v{schedule.version}, {schedule.source})"
            )

        limit = await oracle.estimate(
            TradeRequest(venue=Venue.POLYMARKET, size_usd=1000, order_type=OrderType.LIMIT)
        )
        logger.info(f"  Polymarket maker $1000: ${limit.total_fee_usd:.4f}")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:2]))
