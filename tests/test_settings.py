"""TOML config loading, profile overlay and derived value objects."""

from pathlib import Path

import pytest

from predamm.config import get_settings, load_config

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config"


@pytest.fixture
def config_dir(tmp_path):
    (tmp_path / "default.toml").write_text(
        """
[fees]
creator_fee = 0.1
platform_fee = 0.02

[amm]
max_probability = 0.9

[league]
excluded_contract_slugs = ["skip-me"]
season_start_ms = 1000
season_end_ms = 2000

[logging]
level = "INFO"
"""
    )
    (tmp_path / "dev.toml").write_text('[logging]\nlevel = "debug"\n\n[amm]\nmax_probability = 0.95\n')
    return tmp_path


def test_default_only(config_dir):
    s = get_settings(config_dir=config_dir)
    assert s.fee_schedule.creator_fee == 0.1
    assert s.fee_schedule.purchase_fee == 0.0
    assert s.amm_limits.max_probability == 0.9
    assert s.logging_level == "INFO"


def test_profile_overlay_merges(config_dir):
    s = get_settings("dev", config_dir)
    assert s.logging_level == "DEBUG"
    assert s.amm_limits.max_probability == 0.95
    # untouched keys survive the merge
    assert s.fee_schedule.platform_fee == 0.02


def test_unknown_profile_falls_back_to_default(config_dir):
    assert load_config("nope", config_dir) == load_config(None, config_dir)


def test_ranking_policy(config_dir):
    policy = get_settings(config_dir=config_dir).ranking_policy
    assert policy.excluded_slugs == frozenset({"skip-me"})
    assert policy.season.start == 1000
    assert policy.season.end == 2000


def test_missing_config_dir_uses_defaults(tmp_path):
    s = get_settings(config_dir=tmp_path / "absent")
    assert s.fee_schedule.creator_fee == 0.04
    assert s.amm_limits.max_probability == 0.99
    assert s.season is None
    assert s.numeric_bucket_count == 10


def test_repo_config_loads():
    s = get_settings(config_dir=REPO_CONFIG)
    assert s.amm_limits.max_probability == 0.99
    assert len(s.excluded_contract_slugs) == 3
    assert s.ranking_policy.season is None
    assert get_settings("dev", REPO_CONFIG).logging_level == "DEBUG"
