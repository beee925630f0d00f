import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from cost_oracle.config_loader import Config, default_config, load_config
from cost_oracle.fetchers import DEFAULT_BASE_URL
from cost_oracle.models import Venue

REPO_CONFIG = Path(__file__).parent / "config" / "config.yaml"


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_repository_config_loads():
    with patch.dict(os.environ, {"REPLAY_LABS_API_KEY": "", "REPLAY_LABS_BASE_URL": ""}):
        config = load_config(str(REPO_CONFIG))
    assert config.arbitrage.min_profit_threshold_pct == 0.5
    assert config.replay_labs.base_url == DEFAULT_BASE_URL
    assert config.heuristics.typical_spread(Venue.KALSHI) == 0.02


def test_missing_sections_use_defaults(tmp_path):
    path = write_config(tmp_path, "arbitrage:\n  min_profit_threshold_pct: 1.25\n")
    with patch.dict(os.environ, {"REPLAY_LABS_API_KEY": ""}):
        config = load_config(path)
    assert config.arbitrage.min_profit_threshold_pct == 1.25
    assert config.replay_labs.retry_attempts == 3
    assert config.logging.file is None
    assert config.heuristics.reference_size_usd == 1000


def test_partial_venue_heuristics_keep_defaults(tmp_path):
    path = write_config(
        tmp_path,
        "heuristics:\n"
        "  venues:\n"
        "    KALSHI:\n"
        "      typical_spread: 0.05\n"
        "      base_slippage_pct: 0.002\n",
    )
    config = load_config(path)
    assert config.heuristics.typical_spread(Venue.KALSHI) == 0.05
    assert config.heuristics.base_slippage_pct(Venue.KALSHI) == 0.002
    assert config.heuristics.typical_spread(Venue.POLYMARKET) == 0.01


def test_env_overrides_file(tmp_path):
    path = write_config(tmp_path, "replay_labs:\n  api_key: from-file\n")
    env = {"REPLAY_LABS_API_KEY": "from-env", "REPLAY_LABS_BASE_URL": "https://replay.test"}
    with patch.dict(os.environ, env):
        config = load_config(path)
    assert config.replay_labs.api_key == "from-env"
    assert config.replay_labs.base_url == "https://replay.test"


def test_empty_file_is_all_defaults(tmp_path):
    path = write_config(tmp_path, "")
    with patch.dict(os.environ, {"REPLAY_LABS_API_KEY": "", "REPLAY_LABS_BASE_URL": ""}):
        assert load_config(path) == Config()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_invalid_values(tmp_path):
    path = write_config(tmp_path, "replay_labs:\n  timeout: 0\n")
    with pytest.raises(ValidationError):
        load_config(path)


def test_default_config_reads_environment():
    with patch.dict(os.environ, {"REPLAY_LABS_API_KEY": "env-only"}):
        assert default_config().replay_labs.api_key == "env-only"
