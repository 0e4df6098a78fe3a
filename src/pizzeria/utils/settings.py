"""Runtime settings, read from the environment and overridable from the CLI."""

import os
from dataclasses import dataclass, replace

from protean.exceptions import ValidationError

from pizzeria.utils.logging import get_environment

DEFAULT_TICK_INTERVAL = 10.0
DEFAULT_CUSTOM_PRICE = 20.0


def _positive_float(name: str, raw: str | float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError({name: [f"Expected a number, got {raw!r}"]}) from None
    if value <= 0:
        raise ValidationError({name: [f"Must be greater than zero, got {value}"]})
    return value


@dataclass(frozen=True)
class Settings:
    tick_interval: float = DEFAULT_TICK_INTERVAL
    environment: str = "development"
    log_dir: str = "logs"
    custom_price: float = DEFAULT_CUSTOM_PRICE

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from PIZZERIA_* variables, falling back to defaults."""
        return cls(
            tick_interval=_positive_float(
                "tick_interval", os.getenv("PIZZERIA_TICK_INTERVAL", DEFAULT_TICK_INTERVAL)
            ),
            environment=get_environment(),
            log_dir=os.getenv("PIZZERIA_LOG_DIR", "logs"),
            custom_price=_positive_float(
                "custom_price", os.getenv("PIZZERIA_CUSTOM_PRICE", DEFAULT_CUSTOM_PRICE)
            ),
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with the non-None overrides applied (used by CLI flags)."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if "tick_interval" in values:
            values["tick_interval"] = _positive_float("tick_interval", values["tick_interval"])
        return replace(self, **values)
