# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Kinematic CME propagation.

Pure functions mapping (CmeEvent, simulated instant) to the radial
position, speed and envelope geometry of the ejecta front, plus the
time-dependent Earth-crossing test.

Kinematic model:
    constant speed        r(t) = v0 t
    constant deceleration v(t) = max(0, v0 + a t)
                          r(t) = v0 t + a t^2 / 2          for t <= t_stop
                          r(t) = r(t_stop) = v0^2 / (2|a|) for t >  t_stop
    with t_stop = -v0 / a (only when a < 0).

No external dependencies: only stdlib math, dataclasses and datetime.
"""
import math
from dataclasses import dataclass
from datetime import datetime

from heliotrack.domain.cme import CmeEvent
from heliotrack.domain.heliosphere import (
    AU_KM,
    angular_separation_deg,
    earth_heliocentric_longitude_deg,
)


@dataclass(frozen=True)
class PropagationConfig:
    """Rendering-scale bounds and envelope shape constants.

    display_min_au/display_max_au only keep drawings on screen; they are
    never applied to the physical distance.
    """
    display_min_au: float = 0.05
    display_max_au: float = 1.35
    shock_base: float = 18.0
    shock_gain: float = 0.6
    core_ratio: float = 0.55
    wake_ratio: float = 1.4

    def __post_init__(self) -> None:
        if not 0.0 <= self.display_min_au <= self.display_max_au:
            raise ValueError(
                f"display bounds must satisfy 0 <= min <= max, got "
                f"[{self.display_min_au}, {self.display_max_au}]"
            )
        if self.shock_gain <= 0:
            raise ValueError(f"shock_gain must be positive, got {self.shock_gain}")
        if self.shock_base < 0:
            raise ValueError(f"shock_base must be non-negative, got {self.shock_base}")


DEFAULT_PROPAGATION = PropagationConfig()


@dataclass(frozen=True)
class EnvelopeGeometry:
    """Presentation-scale cross-section of the ejecta envelope."""
    shock_radius: float
    core_radius: float
    wake_length: float


@dataclass(frozen=True)
class KinematicState:
    """Instantaneous state of one CME front."""
    event_id: str
    instant: datetime
    launched: bool
    elapsed_s: float
    distance_au: float
    display_distance_au: float
    speed_km_s: float
    envelope: EnvelopeGeometry
    heliocentric_longitude_deg: float
    earth_separation_deg: float
    earth_impact: bool

    @property
    def shock_radius(self) -> float:
        return self.envelope.shock_radius

    @property
    def core_radius(self) -> float:
        return self.envelope.core_radius

    @property
    def wake_length(self) -> float:
        return self.envelope.wake_length


def elapsed_seconds(event: CmeEvent, instant: datetime) -> float:
    """Seconds since launch, floored at zero."""
    return max(0.0, (instant - event.start_time).total_seconds())


def stop_time_s(event: CmeEvent) -> float | None:
    """Time after launch at which a decelerating front stalls, else None."""
    a = event.deceleration_km_s2
    if a is None or a >= 0:
        return None
    return event.speed_km_s / -a


def speed_at(event: CmeEvent, t_s: float) -> float:
    """Front speed in km/s, t_s seconds after launch. Never negative."""
    t = max(0.0, t_s)
    a = event.deceleration_km_s2
    if a is None:
        return event.speed_km_s
    return max(0.0, event.speed_km_s + a * t)


def distance_km_at(event: CmeEvent, t_s: float) -> float:
    """Heliocentric distance travelled by the front, in km."""
    t = max(0.0, t_s)
    v0 = event.speed_km_s
    a = event.deceleration_km_s2
    if a is None or a == 0:
        return v0 * t
    t_stop = stop_time_s(event)
    if t_stop is not None and t > t_stop:
        # Stalled at zero speed: no further distance.
        t = t_stop
    return v0 * t + 0.5 * a * t * t


def distance_au_at(event: CmeEvent, t_s: float) -> float:
    """Heliocentric distance travelled by the front, in AU."""
    return distance_km_at(event, t_s) / AU_KM


def display_distance_au(
    distance_au: float,
    config: PropagationConfig = DEFAULT_PROPAGATION,
) -> float:
    """Clamp a physical distance into the display-stable range."""
    return min(max(distance_au, config.display_min_au), config.display_max_au)


def envelope_geometry(
    half_angle_deg: float,
    config: PropagationConfig = DEFAULT_PROPAGATION,
) -> EnvelopeGeometry:
    """Shock/core/wake sizes; wider cones get larger cross-sections."""
    shock = config.shock_base + config.shock_gain * half_angle_deg
    return EnvelopeGeometry(
        shock_radius=shock,
        core_radius=config.core_ratio * shock,
        wake_length=config.wake_ratio * shock,
    )


def launch_heliocentric_longitude_deg(event: CmeEvent) -> float:
    """Inertial longitude of the launch direction, fixed at launch time."""
    earth_lon = earth_heliocentric_longitude_deg(event.start_time)
    return (earth_lon + event.longitude_deg) % 360.0


def earth_separation_deg(event: CmeEvent, instant: datetime) -> float:
    """Angle between the CME axis and Earth's position at instant."""
    return angular_separation_deg(
        launch_heliocentric_longitude_deg(event),
        event.latitude_deg,
        earth_heliocentric_longitude_deg(instant),
        0.0,
    )


def crosses_earth_orbit(
    event: CmeEvent,
    previous_instant: datetime | None,
    instant: datetime,
) -> bool:
    """True if the front passes 1 AU inside (previous_instant, instant]."""
    if previous_instant is None or instant < event.start_time:
        return False
    before = distance_au_at(event, (previous_instant - event.start_time).total_seconds())
    now = distance_au_at(event, (instant - event.start_time).total_seconds())
    return before < 1.0 <= now


def propagate(
    event: CmeEvent,
    instant: datetime,
    previous_instant: datetime | None = None,
    config: PropagationConfig = DEFAULT_PROPAGATION,
) -> KinematicState:
    """Evaluate the kinematic state of a CME at a simulated instant.

    Args:
        event: Normalized CME.
        instant: Simulated UTC instant.
        previous_instant: Instant of the preceding evaluation step, used
            for the edge-triggered Earth impact test. None disables it.
        config: Display and envelope constants.

    Returns:
        KinematicState. Before launch the front sits at the Sun with its
        launch speed and no impact; this is not an error.
    """
    envelope = envelope_geometry(event.half_angle_deg, config)
    helio_lon = launch_heliocentric_longitude_deg(event)
    separation = earth_separation_deg(event, instant)

    if instant < event.start_time:
        return KinematicState(
            event_id=event.id,
            instant=instant,
            launched=False,
            elapsed_s=0.0,
            distance_au=0.0,
            display_distance_au=0.0,
            speed_km_s=event.speed_km_s,
            envelope=envelope,
            heliocentric_longitude_deg=helio_lon,
            earth_separation_deg=separation,
            earth_impact=False,
        )

    t = elapsed_seconds(event, instant)
    distance = distance_au_at(event, t)
    impact = (
        separation <= event.half_angle_deg
        and crosses_earth_orbit(event, previous_instant, instant)
    )
    return KinematicState(
        event_id=event.id,
        instant=instant,
        launched=True,
        elapsed_s=t,
        distance_au=distance,
        display_distance_au=display_distance_au(distance, config),
        speed_km_s=speed_at(event, t),
        envelope=envelope,
        heliocentric_longitude_deg=helio_lon,
        earth_separation_deg=separation,
        earth_impact=impact,
    )


def time_to_distance_km(event: CmeEvent, distance_km: float) -> float | None:
    """Closed-form inverse of distance_km_at, or None if never reached."""
    if distance_km <= 0:
        return 0.0
    v0 = event.speed_km_s
    a = event.deceleration_km_s2
    if a is None or a == 0:
        return distance_km / v0
    disc = v0 * v0 + 2.0 * a * distance_km
    if disc < 0:
        return None
    return (-v0 + math.sqrt(disc)) / a
