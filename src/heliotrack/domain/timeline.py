# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Virtual timeline clock.

Simulated time is a scrubber position in [0, SCRUBBER_MAX] mapped
affinely onto a [window_start, window_end] interval. The clock never
reads the wall clock: playback advances only through tick(), called
once per animation frame with the real frame delta.

User-originated commands never raise. Invalid input (non-finite values,
unknown step direction, non-positive speed, naive or inverted window)
is ignored and reported by a False return value.
"""
import logging
import math
import numbers
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from heliotrack.domain.cme import CmeEvent

logger = logging.getLogger(__name__)

SCRUBBER_MAX: float = 1000.0
PLAYBACK_SPEEDS: tuple[float, ...] = (0.5, 1.0, 2.0, 5.0, 10.0, 20.0)

_HOUR_MS = 3_600_000.0


class PlayState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


class TimeRange(Enum):
    """Catalog look-back ranges, in days."""
    H24 = 1
    D3 = 3
    D7 = 7


@dataclass(frozen=True)
class TimelineConfig:
    """Scrubber stepping and playback rate.

    fallback_step: scrubber units per step/hour when the window has zero
        width.
    simulated_hours_per_second: simulated hours advanced per real second
        at a speed multiplier of 1.
    end_threshold: scrubber value at or above which play() rewinds first.
    focus_padding_hours: window slack after a selected event's arrival.
    focus_span_days: window length for a selected event with no arrival.
    """
    fallback_step: float = 10.0
    simulated_hours_per_second: float = 1.0
    end_threshold: float = 999.0
    forecast_days: float = 3.0
    focus_padding_hours: float = 12.0
    focus_span_days: float = 4.0

    def __post_init__(self) -> None:
        if self.fallback_step <= 0:
            raise ValueError(f"fallback_step must be positive, got {self.fallback_step}")
        if self.simulated_hours_per_second <= 0:
            raise ValueError(
                f"simulated_hours_per_second must be positive, "
                f"got {self.simulated_hours_per_second}"
            )
        if self.focus_padding_hours < 0:
            raise ValueError(
                f"focus_padding_hours must be non-negative, got {self.focus_padding_hours}"
            )
        if self.focus_span_days <= 0:
            raise ValueError(f"focus_span_days must be positive, got {self.focus_span_days}")


DEFAULT_TIMELINE = TimelineConfig()


@dataclass(frozen=True)
class TimelineState:
    """Read-only snapshot of the clock."""
    window_start: datetime
    window_end: datetime
    scrubber: float
    play_state: PlayState
    speed_multiplier: float

    @property
    def window_ms(self) -> float:
        return (self.window_end - self.window_start).total_seconds() * 1000.0

    @property
    def simulated_instant(self) -> datetime:
        return scrubber_to_instant(self.window_start, self.window_end, self.scrubber)


def clamp_scrubber(value: float) -> float:
    return min(max(value, 0.0), SCRUBBER_MAX)


def scrubber_to_instant(start: datetime, end: datetime, scrubber: float) -> datetime:
    """Affine map from scrubber units onto the window."""
    return start + (end - start) * (clamp_scrubber(scrubber) / SCRUBBER_MAX)


def instant_to_scrubber(start: datetime, end: datetime, instant: datetime) -> float:
    """Inverse of scrubber_to_instant, clamped; 0 for a zero-width window."""
    width = (end - start).total_seconds()
    if width <= 0:
        return 0.0
    return clamp_scrubber((instant - start).total_seconds() / width * SCRUBBER_MAX)


def hour_step(
    start: datetime,
    end: datetime,
    config: TimelineConfig = DEFAULT_TIMELINE,
) -> float:
    """Scrubber units corresponding to one simulated hour."""
    width_ms = (end - start).total_seconds() * 1000.0
    if width_ms > 0:
        return _HOUR_MS / width_ms * SCRUBBER_MAX
    return config.fallback_step


def default_window(
    events: Iterable[CmeEvent],
    days: int | float | TimeRange,
    now: datetime,
    config: TimelineConfig = DEFAULT_TIMELINE,
) -> tuple[datetime, datetime]:
    """Window covering the look-back range and a short forecast horizon.

    Starts at the earlier of (now - days) and the earliest launch, ends
    config.forecast_days after now. Zero width at now when no events.
    """
    if isinstance(days, TimeRange):
        days = days.value
    starts = [e.start_time for e in events]
    if not starts:
        return now, now
    start = min(now - timedelta(days=days), min(starts))
    return start, now + timedelta(days=config.forecast_days)


def focus_window(
    event: CmeEvent,
    config: TimelineConfig = DEFAULT_TIMELINE,
) -> tuple[datetime, datetime]:
    """Window for a single-event deep dive.

    From launch to the predicted arrival plus config.focus_padding_hours,
    or config.focus_span_days after launch when no arrival follows launch.
    """
    start = event.start_time
    arrival = event.predicted_arrival_time
    if arrival is not None and arrival > start:
        return start, arrival + timedelta(hours=config.focus_padding_hours)
    return start, start + timedelta(days=config.focus_span_days)


def is_valid_window(window_start: object, window_end: object) -> bool:
    """Both bounds timezone-aware datetimes and the window not inverted."""
    for bound in (window_start, window_end):
        if not isinstance(bound, datetime) or bound.tzinfo is None:
            return False
    return window_start <= window_end


class VirtualClock:
    """Owns the scrubber, play state and speed multiplier."""

    def __init__(
        self,
        window_start: datetime,
        window_end: datetime,
        config: TimelineConfig = DEFAULT_TIMELINE,
    ) -> None:
        if not is_valid_window(window_start, window_end):
            raise ValueError(
                f"window must be two timezone-aware datetimes where window_end "
                f"never precedes window_start, got {window_start!r} .. {window_end!r}"
            )
        self._config = config
        self._start = window_start
        self._end = window_end
        self._scrubber = 0.0
        self._play_state = PlayState.STOPPED
        self._speed = 1.0

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def window_start(self) -> datetime:
        return self._start

    @property
    def window_end(self) -> datetime:
        return self._end

    @property
    def scrubber(self) -> float:
        return self._scrubber

    @property
    def play_state(self) -> PlayState:
        return self._play_state

    @property
    def is_playing(self) -> bool:
        return self._play_state is PlayState.PLAYING

    @property
    def speed_multiplier(self) -> float:
        return self._speed

    @property
    def at_end(self) -> bool:
        return self._scrubber >= SCRUBBER_MAX

    @property
    def simulated_instant(self) -> datetime:
        return scrubber_to_instant(self._start, self._end, self._scrubber)

    @property
    def state(self) -> TimelineState:
        return TimelineState(
            window_start=self._start,
            window_end=self._end,
            scrubber=self._scrubber,
            play_state=self._play_state,
            speed_multiplier=self._speed,
        )

    def scrubber_for(self, instant: datetime) -> float:
        """Scrubber position of an instant on the current window."""
        return instant_to_scrubber(self._start, self._end, instant)

    def hour_step(self) -> float:
        return hour_step(self._start, self._end, self._config)

    def reset(self) -> None:
        """Rewind to the start of the window and stop."""
        self._scrubber = 0.0
        self._play_state = PlayState.STOPPED

    def set_window(self, window_start: datetime, window_end: datetime) -> bool:
        """Replace the window; always resets the scrubber and stops."""
        if not is_valid_window(window_start, window_end):
            logger.debug("Ignoring window %r .. %r", window_start, window_end)
            return False
        self._start = window_start
        self._end = window_end
        self.reset()
        return True

    def play(self) -> bool:
        if self._scrubber >= self._config.end_threshold:
            self._scrubber = 0.0
        self._play_state = PlayState.PLAYING
        return True

    def pause(self) -> bool:
        self._play_state = PlayState.STOPPED
        return True

    def scrub(self, value: float) -> bool:
        if not _is_finite_number(value):
            logger.debug("Ignoring scrub to %r", value)
            return False
        self._scrubber = clamp_scrubber(float(value))
        self._play_state = PlayState.STOPPED
        return True

    def step(self, direction: int) -> bool:
        """Move one simulated hour backward (-1) or forward (+1)."""
        if isinstance(direction, bool) or direction not in (-1, 1):
            logger.debug("Ignoring step direction %r", direction)
            return False
        self._play_state = PlayState.STOPPED
        self._scrubber = clamp_scrubber(self._scrubber + direction * self.hour_step())
        return True

    def set_speed(self, multiplier: float) -> bool:
        if not _is_finite_number(multiplier) or multiplier <= 0:
            logger.debug("Ignoring playback speed %r", multiplier)
            return False
        self._speed = float(multiplier)
        return True

    def tick(self, real_delta_s: float) -> bool:
        """Advance playback by one frame.

        Returns:
            True exactly when this tick reached the end of the timeline
            (the clock is then stopped); False otherwise.
        """
        if not self.is_playing:
            return False
        if not _is_finite_number(real_delta_s) or real_delta_s < 0:
            logger.debug("Ignoring tick delta %r", real_delta_s)
            return False
        simulated_hours = real_delta_s * self._speed * self._config.simulated_hours_per_second
        advanced = self._scrubber + simulated_hours * self.hour_step()
        if advanced >= SCRUBBER_MAX:
            self._scrubber = SCRUBBER_MAX
            self._play_state = PlayState.STOPPED
            return True
        self._scrubber = advanced
        return False


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)
