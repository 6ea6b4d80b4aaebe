# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Modeler session: the single command surface over the CME state triad.

A ModelerSession owns the normalized catalog (with its active filter),
the VirtualClock and the FocusController. Presentation collaborators
send commands (play, scrub, select_event, ...) and read frozen frame
snapshots; they never touch the underlying state directly.

Reloading the catalog or changing the time window is one synchronous
transaction: the clock and focus are reset in the same call, so no
frame can observe a stale scrubber against a new window.

Selecting an event narrows the clock to that event's own window (launch
to predicted arrival plus padding); leaving the selection by clear, play,
scrub or a filter change restores the catalog window.
"""
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from heliotrack.domain.arrival import ArrivalConfig, DEFAULT_ARRIVAL, match_arrival
from heliotrack.domain.cme import ArrivalSource, CmeEvent, CmeFilter, sort_most_recent_first
from heliotrack.domain.focus import FocusController, FocusMode, FocusState
from heliotrack.domain.normalizer import (
    DEFAULT_NORMALIZER,
    NormalizerConfig,
    normalize_records,
)
from heliotrack.domain.propagation import (
    DEFAULT_PROPAGATION,
    KinematicState,
    PropagationConfig,
    propagate,
)
from heliotrack.domain.timeline import (
    DEFAULT_TIMELINE,
    SCRUBBER_MAX,
    PlayState,
    TimeRange,
    TimelineConfig,
    TimelineState,
    VirtualClock,
    default_window,
    focus_window,
    is_valid_window,
)

logger = logging.getLogger(__name__)

EventPredicate = Callable[[CmeEvent], bool]
EndListener = Callable[[], None]


@dataclass(frozen=True)
class ModelerConfig:
    """Aggregate of every tunable used by a session.

    match_focus_arrival: while one Earth-directed event is selected, move
        it under the constant rate that lands it at 1 AU exactly at its
        predicted arrival.
    """
    normalizer: NormalizerConfig = DEFAULT_NORMALIZER
    propagation: PropagationConfig = DEFAULT_PROPAGATION
    arrival: ArrivalConfig = DEFAULT_ARRIVAL
    timeline: TimelineConfig = DEFAULT_TIMELINE
    match_focus_arrival: bool = True


DEFAULT_MODELER = ModelerConfig()


@dataclass(frozen=True)
class CmeProjection:
    """Per-event geometry handed to renderers for one frame."""
    id: str
    launched: bool
    distance_au: float
    display_distance_au: float
    speed_km_s: float
    shock_radius: float
    core_radius: float
    wake_length: float
    angular_position_deg: float
    latitude_deg: float
    earth_separation_deg: float
    earth_impact: bool
    predicted_arrival_time: datetime | None
    arrival_source: ArrivalSource


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything a presentation surface needs for one frame."""
    instant: datetime
    scrubber: float
    play_state: PlayState
    speed_multiplier: float
    focus_mode: FocusMode
    selected_id: str | None
    projections: tuple[CmeProjection, ...] = field(default_factory=tuple)

    @property
    def impacts(self) -> tuple[str, ...]:
        """Ids whose front crossed Earth during this frame's step."""
        return tuple(p.id for p in self.projections if p.earth_impact)


def project(event: CmeEvent, state: KinematicState) -> CmeProjection:
    """Flatten an event and its kinematic state for renderers."""
    return CmeProjection(
        id=event.id,
        launched=state.launched,
        distance_au=state.distance_au,
        display_distance_au=state.display_distance_au,
        speed_km_s=state.speed_km_s,
        shock_radius=state.shock_radius,
        core_radius=state.core_radius,
        wake_length=state.wake_length,
        angular_position_deg=event.longitude_deg,
        latitude_deg=event.latitude_deg,
        earth_separation_deg=state.earth_separation_deg,
        earth_impact=state.earth_impact,
        predicted_arrival_time=event.predicted_arrival_time,
        arrival_source=event.linked_arrival_source,
    )


class ModelerSession:
    """Owns catalog, filter, clock and focus; mutated only via commands."""

    def __init__(
        self,
        window_start: datetime,
        window_end: datetime,
        events: Iterable[CmeEvent] = (),
        config: ModelerConfig = DEFAULT_MODELER,
    ) -> None:
        self._config = config
        self._catalog: list[CmeEvent] = sort_most_recent_first(list(events))
        self._filter: EventPredicate = CmeFilter.ALL
        self._filtered: list[CmeEvent] = list(self._catalog)
        self._clock = VirtualClock(window_start, window_end, config.timeline)
        self._base_window = (window_start, window_end)
        self._focus = FocusController()
        self._previous_instant: datetime | None = None
        self._end_listeners: list[EndListener] = []

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict[str, Any]],
        now: datetime,
        days: int | float | TimeRange = TimeRange.D3,
        config: ModelerConfig = DEFAULT_MODELER,
    ) -> "ModelerSession":
        """Normalize raw records and open a session on the default window."""
        events = normalize_records(records, config.normalizer, config.arrival)
        start, end = default_window(events, days, now, config.timeline)
        logger.info(
            "Loaded %d modelable CMEs, window %s .. %s",
            len(events), start.isoformat(), end.isoformat(),
        )
        return cls(start, end, events, config)

    # --- Read-only projections ---

    @property
    def config(self) -> ModelerConfig:
        return self._config

    @property
    def catalog(self) -> tuple[CmeEvent, ...]:
        return tuple(self._catalog)

    @property
    def filtered_events(self) -> tuple[CmeEvent, ...]:
        """Events passing the active filter, most recent first."""
        return tuple(self._filtered)

    @property
    def active_events(self) -> tuple[CmeEvent, ...]:
        """Events rendered this frame: the selection alone, else the filtered set."""
        if self._focus.mode is FocusMode.SINGLE_EVENT:
            return tuple(e for e in self._filtered if e.id == self._focus.selected_id)
        return tuple(self._filtered)

    @property
    def timeline(self) -> TimelineState:
        return self._clock.state

    @property
    def focus(self) -> FocusState:
        return self._focus.state

    @property
    def simulated_instant(self) -> datetime:
        return self._clock.simulated_instant

    def event(self, event_id: str) -> CmeEvent | None:
        for e in self._catalog:
            if e.id == event_id:
                return e
        return None

    def scrubber_for(self, instant: datetime) -> float:
        """Scrubber position of an instant (e.g. the wall-clock 'now' marker)."""
        return self._clock.scrubber_for(instant)

    def state_of(self, event_id: str) -> KinematicState | None:
        """Kinematic state of one catalog event at the current instant."""
        e = self.event(event_id)
        if e is None:
            return None
        return propagate(
            self._kinematics(e), self._clock.simulated_instant,
            config=self._config.propagation,
        )

    # --- Transactions ---

    def load_events(
        self,
        events: Iterable[CmeEvent],
        window_start: datetime,
        window_end: datetime,
    ) -> bool:
        """Replace catalog and window together, resetting clock and focus."""
        if not is_valid_window(window_start, window_end):
            logger.debug("Ignoring load with window %r .. %r", window_start, window_end)
            return False
        self._catalog = sort_most_recent_first(list(events))
        self._filtered = [e for e in self._catalog if self._filter(e)]
        self._clock.set_window(window_start, window_end)
        self._focus.reset()
        self._base_window = (window_start, window_end)
        self._previous_instant = None
        logger.info(
            "Catalog replaced: %d events (%d after filter)",
            len(self._catalog), len(self._filtered),
        )
        return True

    def load_records(
        self,
        records: Iterable[dict[str, Any]],
        window_start: datetime,
        window_end: datetime,
    ) -> bool:
        events = normalize_records(records, self._config.normalizer, self._config.arrival)
        return self.load_events(events, window_start, window_end)

    def set_time_window(self, window_start: datetime, window_end: datetime) -> bool:
        if not self._clock.set_window(window_start, window_end):
            return False
        self._base_window = (window_start, window_end)
        self._focus.reset()
        self._previous_instant = None
        logger.info(
            "Time window set to %s .. %s",
            window_start.isoformat(), window_end.isoformat(),
        )
        return True

    def set_active_filter(self, predicate: EventPredicate) -> bool:
        if not callable(predicate):
            logger.debug("Ignoring non-callable filter %r", predicate)
            return False
        self._filter = predicate
        self._filtered = [e for e in self._catalog if predicate(e)]
        self._clock.reset()
        self._previous_instant = None
        if self._focus.reconcile({e.id for e in self._filtered}):
            self._restore_base_window()
        if not self._filtered and self._focus.mode is FocusMode.TIMELINE:
            self._focus.reset()
        return True

    # --- Clock commands ---

    def play(self) -> bool:
        if not self._filtered:
            logger.debug("Ignoring play with an empty event set")
            return False
        if self._focus.mode is FocusMode.SINGLE_EVENT:
            self._restore_base_window()
        elif self._clock.scrubber >= self._clock.config.end_threshold:
            self._previous_instant = None
        self._focus.enter_timeline()
        return self._clock.play()

    def pause(self) -> bool:
        return self._clock.pause()

    def scrub(self, value: float) -> bool:
        if not self._clock.scrub(value):
            return False
        if self._focus.mode is FocusMode.SINGLE_EVENT:
            self._restore_base_window()
            self._clock.scrub(value)
        self._focus.enter_timeline()
        return True

    def step(self, direction: int) -> bool:
        return self._clock.step(direction)

    def set_speed(self, multiplier: float) -> bool:
        return self._clock.set_speed(multiplier)

    def tick(self, real_delta_s: float) -> bool:
        """Advance playback one frame; True when the timeline just ended."""
        ended = self._clock.tick(real_delta_s)
        if ended:
            logger.debug("Timeline reached its end")
            for listener in list(self._end_listeners):
                listener()
        return ended

    def add_end_listener(self, listener: EndListener) -> None:
        self._end_listeners.append(listener)

    def remove_end_listener(self, listener: EndListener) -> None:
        if listener in self._end_listeners:
            self._end_listeners.remove(listener)

    # --- Focus commands ---

    def select_event(self, event_id: str) -> bool:
        """Deep-dive on one filtered event, stopped at the start of its window."""
        if not self._focus.select(event_id, {e.id for e in self._filtered}):
            return False
        start, end = focus_window(self.event(event_id), self._config.timeline)
        self._clock.set_window(start, end)
        self._previous_instant = None
        return True

    def clear_selection(self) -> None:
        """Drop the selection and return to the catalog window."""
        if self._focus.mode is FocusMode.SINGLE_EVENT:
            self._restore_base_window()
        self._focus.clear(bool(self._filtered))

    def _restore_base_window(self) -> None:
        start, end = self._base_window
        self._clock.set_window(start, end)
        self._previous_instant = None

    def _kinematics(self, event: CmeEvent) -> CmeEvent:
        """Event as propagated: arrival-matched while it is the selection."""
        if (
            self._config.match_focus_arrival
            and self._focus.mode is FocusMode.SINGLE_EVENT
            and self._focus.selected_id == event.id
        ):
            return match_arrival(event)
        return event

    # --- Frame evaluation ---

    def frame(self) -> FrameSnapshot:
        """Evaluate every active event at the current simulated instant.

        Advances the previous-instant marker used by the edge-triggered
        Earth impact test, so each crossing is reported by one frame.
        """
        instant = self._clock.simulated_instant
        previous = self._previous_instant
        projections = tuple(
            project(e, propagate(self._kinematics(e), instant, previous, self._config.propagation))
            for e in self.active_events
        )
        self._previous_instant = instant
        clock = self._clock.state
        focus = self._focus.state
        return FrameSnapshot(
            instant=instant,
            scrubber=clock.scrubber,
            play_state=clock.play_state,
            speed_multiplier=clock.speed_multiplier,
            focus_mode=focus.mode,
            selected_id=focus.selected_id,
            projections=projections,
        )


def sample_frames(session: ModelerSession, count: int) -> list[FrameSnapshot]:
    """Scrub evenly across the window and collect count frames.

    Headless rendering aid: leaves the session stopped in TIMELINE mode at
    the end of the window.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    frames: list[FrameSnapshot] = []
    for i in range(count):
        position = 0.0 if count == 1 else SCRUBBER_MAX * i / (count - 1)
        session.scrub(position)
        frames.append(session.frame())
    return frames
