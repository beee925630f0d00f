"""
Configuration loader with environment variable support.
"""
import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .calculators.cost_calculator import (
    DEFAULT_BASE_SLIPPAGE_PCT,
    DEFAULT_TYPICAL_SPREADS,
    FALLBACK_BASE_SLIPPAGE_PCT,
    FALLBACK_TYPICAL_SPREAD,
    REFERENCE_SIZE_USD,
)
from .fetchers.replay_labs_fetcher import DEFAULT_BASE_URL
from .models import Venue


# Load environment variables
load_dotenv()


class ReplayLabsConfig(BaseModel):
    """Replay Labs API configuration."""
    api_key: str = Field(default="", description="Replay Labs API key (empty = no live orderbooks)")
    base_url: str = DEFAULT_BASE_URL
    timeout: int = Field(default=10, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)


class ArbitrageConfig(BaseModel):
    """Arbitrage verdict configuration."""
    min_profit_threshold_pct: float = Field(default=0.5, description="Minimum net profit percentage")


class VenueHeuristics(BaseModel):
    """Fallback spread/slippage assumptions for one venue."""
    typical_spread: float = Field(ge=0)
    base_slippage_pct: float = Field(ge=0)


def _default_venue_heuristics() -> Dict[Venue, VenueHeuristics]:
    return {
        venue: VenueHeuristics(
            typical_spread=DEFAULT_TYPICAL_SPREADS[venue],
            base_slippage_pct=DEFAULT_BASE_SLIPPAGE_PCT[venue],
        )
        for venue in Venue
    }


class HeuristicsConfig(BaseModel):
    """Spread/slippage heuristics used when no live orderbook is available."""
    reference_size_usd: float = Field(default=REFERENCE_SIZE_USD, gt=0)
    venues: Dict[Venue, VenueHeuristics] = Field(default_factory=_default_venue_heuristics)

    @field_validator("venues")
    @classmethod
    def fill_missing_venues(cls, venues: Dict[Venue, VenueHeuristics]) -> Dict[Venue, VenueHeuristics]:
        """Venues absent from the file keep their built-in heuristics."""
        return {**_default_venue_heuristics(), **venues}

    def typical_spread(self, venue: Venue) -> float:
        heuristics = self.venues.get(Venue(venue))
        return heuristics.typical_spread if heuristics else FALLBACK_TYPICAL_SPREAD

    def base_slippage_pct(self, venue: Venue) -> float:
        heuristics = self.venues.get(Venue(venue))
        return heuristics.base_slippage_pct if heuristics else FALLBACK_BASE_SLIPPAGE_PCT


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10485760
    backup_count: int = 5


class Config(BaseModel):
    """Main configuration model."""
    replay_labs: ReplayLabsConfig = ReplayLabsConfig()
    arbitrage: ArbitrageConfig = ArbitrageConfig()
    heuristics: HeuristicsConfig = HeuristicsConfig()
    logging: LoggingConfig = LoggingConfig()


def apply_env_overrides(config_dict: Dict) -> Dict:
    """Environment variables win over values from the YAML file."""
    replay_labs = config_dict.setdefault('replay_labs', {}) or {}
    config_dict['replay_labs'] = replay_labs

    env_api_key = os.getenv('REPLAY_LABS_API_KEY')
    env_base_url = os.getenv('REPLAY_LABS_BASE_URL')

    if env_api_key:
        replay_labs['api_key'] = env_api_key
    if env_base_url:
        replay_labs['base_url'] = env_base_url

    return config_dict


def load_config(config_path: str = "config/config.yaml") -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to configuration YAML file

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If configuration is invalid
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_file, 'r') as f:
        config_dict = yaml.safe_load(f) or {}

    return Config(**apply_env_overrides(config_dict))


def default_config() -> Config:
    """Built-in defaults plus environment overrides, for running without a config file."""
    return Config(**apply_env_overrides({}))
