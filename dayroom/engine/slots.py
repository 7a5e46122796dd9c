"""
Slot enumeration for start/end pickers.

Produces the ordered list of selectable time points between a window's
start and end (inclusive) at a fixed step, and narrows it to the valid
start and end candidates a booking form may offer.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, Union

from dayroom.engine.timepoints import (
    LAST_MINUTE_OF_DAY,
    minutes_to_label,
    minutes_to_time_value,
    parse_time_to_minutes,
)

logger = logging.getLogger(__name__)

DEFAULT_STEP_MINUTES = 30
MIN_STEP_MINUTES = 5

TimeInput = Union[int, str]


@dataclass(frozen=True)
class OperatingWindow:
    """Daily hours during which bookings are allowed, as minutes since midnight."""

    policy_start: int
    policy_end: int

    def __post_init__(self) -> None:
        for bound in (self.policy_start, self.policy_end):
            if not 0 <= bound <= LAST_MINUTE_OF_DAY:
                raise ValueError(
                    f"Operating window bounds must fall within one day (0-{LAST_MINUTE_OF_DAY}), got {bound}"
                )
        if self.policy_start >= self.policy_end:
            raise ValueError(
                f"Operating window start must be before end, got "
                f"{minutes_to_time_value(self.policy_start)}-{minutes_to_time_value(self.policy_end)}"
            )

    @classmethod
    def from_strings(cls, start: str, end: str) -> "OperatingWindow":
        return cls(parse_time_to_minutes(start), parse_time_to_minutes(end))

    @property
    def length(self) -> int:
        return self.policy_end - self.policy_start

    def contains_start(self, minutes: int) -> bool:
        return self.policy_start <= minutes < self.policy_end

    def contains_end(self, minutes: int) -> bool:
        return self.policy_start < minutes <= self.policy_end


@dataclass(frozen=True)
class SlotOption:
    """One selectable time point in a picker."""

    value: str
    label: str
    minutes: int
    disabled: bool = False

    @classmethod
    def at(cls, minutes: int, disabled: bool = False) -> "SlotOption":
        return cls(
            value=minutes_to_time_value(minutes),
            label=minutes_to_label(minutes),
            minutes=minutes,
            disabled=disabled,
        )

    def with_disabled(self, disabled: bool) -> "SlotOption":
        return replace(self, disabled=disabled)


def normalize_step(step_minutes: Any) -> int:
    """Zero or non-numeric steps fall back to the default; others floor at 5 minutes."""
    try:
        step = int(step_minutes)
    except (TypeError, ValueError):
        step = 0
    if not step:
        return DEFAULT_STEP_MINUTES
    return max(MIN_STEP_MINUTES, step)


def _coerce_minutes(value: TimeInput) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return min(LAST_MINUTE_OF_DAY, max(0, value))
    return parse_time_to_minutes(value)


def build_time_options(
    start: TimeInput,
    end: TimeInput,
    step_minutes: Any = DEFAULT_STEP_MINUTES,
) -> list[SlotOption]:
    """
    Enumerate options from ``start`` to ``end`` inclusive at ``step_minutes``.

    ``end`` is included only when it lands exactly on a step boundary.
    """
    start_m = _coerce_minutes(start)
    end_m = _coerce_minutes(end)
    step = normalize_step(step_minutes)

    options = [SlotOption.at(m) for m in range(start_m, end_m + 1, step)]
    logger.debug(
        "Built %d time options %s-%s every %d min",
        len(options), minutes_to_time_value(start_m), minutes_to_time_value(end_m), step,
    )
    return options


def start_candidates(
    options: Iterable[SlotOption],
    window: OperatingWindow,
    step_minutes: Any = DEFAULT_STEP_MINUTES,
) -> list[SlotOption]:
    """Options a booking may start at: the last start leaves room for one step."""
    last_start = window.policy_end - normalize_step(step_minutes)
    return [o for o in options if window.policy_start <= o.minutes <= last_start]


def end_candidates(
    options: Iterable[SlotOption],
    start: int,
    window: OperatingWindow,
    min_duration: int,
) -> list[SlotOption]:
    """Options a booking starting at ``start`` may end at."""
    min_end = start + min_duration
    return [o for o in options if min_end <= o.minutes <= window.policy_end]
