"""Tests for runtime settings."""

import pytest
from protean.exceptions import ValidationError

from pizzeria.utils.settings import DEFAULT_CUSTOM_PRICE, DEFAULT_TICK_INTERVAL, Settings


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("PIZZERIA_TICK_INTERVAL", "PIZZERIA_CUSTOM_PRICE", "PIZZERIA_LOG_DIR", "PIZZERIA_ENV"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PROTEAN_ENV", "test")
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.tick_interval == DEFAULT_TICK_INTERVAL
    assert settings.custom_price == DEFAULT_CUSTOM_PRICE
    assert settings.log_dir == "logs"
    assert settings.environment == "test"


def test_read_from_environment(clean_env):
    clean_env.setenv("PIZZERIA_TICK_INTERVAL", "2.5")
    clean_env.setenv("PIZZERIA_CUSTOM_PRICE", "18")
    clean_env.setenv("PIZZERIA_ENV", "Production")

    settings = Settings.from_env()
    assert settings.tick_interval == 2.5
    assert settings.custom_price == 18.0
    assert settings.environment == "production"


@pytest.mark.parametrize("raw", ["0", "-1", "soon"])
def test_invalid_tick_interval(clean_env, raw):
    clean_env.setenv("PIZZERIA_TICK_INTERVAL", raw)
    with pytest.raises(ValidationError) as exc_info:
        Settings.from_env()
    assert "tick_interval" in exc_info.value.messages


def test_overrides_skip_none():
    settings = Settings().with_overrides(tick_interval=None, environment="staging")
    assert settings.tick_interval == DEFAULT_TICK_INTERVAL
    assert settings.environment == "staging"


def test_override_tick_interval_validated():
    assert Settings().with_overrides(tick_interval="0.5").tick_interval == 0.5
    with pytest.raises(ValidationError):
        Settings().with_overrides(tick_interval=0)
