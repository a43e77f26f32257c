"""Tests for config loading."""

import os
import tempfile

from prodexp.analysis import AnalysisThresholds
from prodexp.config import DEFAULT_DB_PATH, AppConfig, load_config


def test_load_config_defaults(monkeypatch):
    """Loading with no path returns all defaults."""
    monkeypatch.delenv("PRODEXP_DB_PATH", raising=False)
    config = load_config()
    assert isinstance(config, AppConfig)
    assert config.database.path == DEFAULT_DB_PATH
    assert config.analysis.urgent_days == 3
    assert config.analysis.fast_pace_ratio == 1.5
    assert config.notifications.daily_within_days == 7
    assert config.notifications.weekly_within_days == 30
    assert config.notifications.low_remaining == 2.0
    assert config.scheduler.recompute_schedule == "0 0 * * *"
    assert config.scheduler.user_ids == []


def test_load_config_nonexistent_file(monkeypatch):
    """Loading a nonexistent file returns defaults."""
    monkeypatch.delenv("PRODEXP_DB_PATH", raising=False)
    config = load_config("/nonexistent/path.toml")
    assert config.database.path == DEFAULT_DB_PATH


def test_load_config_from_toml():
    """Loading a valid TOML file populates config."""
    toml_content = b"""\
[database]
path = "/var/lib/prodexp.db"

[analysis]
urgent_days = 5
fast_pace_ratio = 2.0

[notifications]
daily_within_days = 3
low_remaining = 1.0

[scheduler]
recompute_schedule = "30 6 * * *"
user_ids = ["alice", "bob"]
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)

    assert config.database.path == "/var/lib/prodexp.db"
    assert config.analysis.urgent_days == 5
    assert config.analysis.fast_pace_ratio == 2.0
    assert config.notifications.daily_within_days == 3
    assert config.notifications.weekly_within_days == 30
    assert config.notifications.low_remaining == 1.0
    assert config.scheduler.recompute_schedule == "30 6 * * *"
    assert config.scheduler.user_ids == ["alice", "bob"]


def test_load_config_env_override(monkeypatch):
    """Environment variable fills an unset database path."""
    monkeypatch.setenv("PRODEXP_DB_PATH", "/tmp/env.db")
    config = load_config()
    assert config.database.path == "/tmp/env.db"


def test_load_config_file_path_takes_precedence(monkeypatch):
    monkeypatch.setenv("PRODEXP_DB_PATH", "/tmp/env.db")

    toml_content = b"""\
[database]
path = "/tmp/file.db"
"""
    with tempfile.NamedTemporaryFile(suffix=".toml", delete=False) as f:
        f.write(toml_content)
        f.flush()
        config = load_config(f.name)

    os.unlink(f.name)
    assert config.database.path == "/tmp/file.db"


def test_thresholds_from_config():
    config = load_config()
    assert config.analysis.thresholds() == AnalysisThresholds()
    assert config.notifications.thresholds().daily_within_days == 7
