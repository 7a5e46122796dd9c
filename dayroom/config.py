"""
Centralized configuration with environment variable overrides.

Booking hours, step size, minimum durations and the statuses that free a
slot are configurable here. The engine itself never reads settings; callers
pass these values in.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime

from dotenv import load_dotenv

from dayroom.engine.slots import MIN_STEP_MINUTES, OperatingWindow

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


def _is_clock_time(value: str) -> bool:
    """Validate time is in HH:MM format."""
    try:
        datetime.strptime(value.strip(), "%H:%M")
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class PolicyConfig:
    """Platform-wide operating hours and picker granularity."""

    daytime_start: str = os.getenv("DAYTIME_START", "08:00")
    daytime_end: str = os.getenv("DAYTIME_END", "17:00")
    time_step_minutes: int = _safe_int("TIME_STEP_MINUTES", "30")
    min_booking_minutes: int = _safe_int("MIN_BOOKING_MINUTES", "30")
    edit_min_booking_minutes: int = _safe_int("EDIT_MIN_BOOKING_MINUTES", "120")

    @property
    def window(self) -> OperatingWindow:
        return OperatingWindow.from_strings(self.daytime_start, self.daytime_end)


@dataclass(frozen=True)
class BookingStoreConfig:
    """Bookings store behaviour."""

    non_blocking_statuses: tuple[str, ...] = _split_csv(
        os.getenv("NON_BLOCKING_STATUSES", "rejected,cancelled")
    )
    booking_ref_prefix: str = os.getenv("BOOKING_REF_PREFIX", "BK")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    policy: PolicyConfig = field(default_factory=PolicyConfig)
    store: BookingStoreConfig = field(default_factory=BookingStoreConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "dayroom")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    policy = config.policy
    for name, value in [
        ("DAYTIME_START", policy.daytime_start),
        ("DAYTIME_END", policy.daytime_end),
    ]:
        if not _is_clock_time(value):
            raise ValueError(f"{name} must be HH:MM, got {value!r}")

    try:
        window = policy.window
    except ValueError:
        raise ValueError(
            f"DAYTIME_START must be before DAYTIME_END, got "
            f"{policy.daytime_start}-{policy.daytime_end}"
        ) from None

    if not MIN_STEP_MINUTES <= policy.time_step_minutes <= window.length:
        raise ValueError(
            f"TIME_STEP_MINUTES must be between {MIN_STEP_MINUTES} and {window.length}, "
            f"got {policy.time_step_minutes}"
        )

    for name, value in [
        ("MIN_BOOKING_MINUTES", policy.min_booking_minutes),
        ("EDIT_MIN_BOOKING_MINUTES", policy.edit_min_booking_minutes),
    ]:
        if value < policy.time_step_minutes:
            raise ValueError(
                f"{name} must be >= TIME_STEP_MINUTES ({policy.time_step_minutes}), got {value}"
            )
        if value > window.length:
            raise ValueError(
                f"{name} must fit inside the operating window ({window.length} min), got {value}"
            )

    if not config.store.booking_ref_prefix.strip():
        raise ValueError("BOOKING_REF_PREFIX must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info(
        "Configuration loaded for '%s' (%s-%s, %d min steps)",
        config.app_name,
        config.policy.daytime_start,
        config.policy.daytime_end,
        config.policy.time_step_minutes,
    )
    return config


# Singleton instance
settings = load_config()
