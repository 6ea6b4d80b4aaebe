# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Earth arrival prediction for CMEs.

Resolution order:
    1. Observed link: a linked geomagnetic storm (GST) activity whose id
       embeds its own timestamp, e.g. "2024-05-10T17:00:00-GST-001".
    2. Kinematic extrapolation: solve r(t) = 1 AU under the event's
       kinematic model (closed form at constant speed, bisection when
       decelerating or accelerating).
    3. Nothing: the front stalls short of 1 AU, or arrives past the
       extrapolation horizon.

match_arrival() goes the other way: given a predicted arrival, it fits
the constant rate that lands the front at 1 AU at that instant.
"""
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any

from heliotrack.domain.cme import ArrivalSource, CmeEvent
from heliotrack.domain.heliosphere import AU_KM
from heliotrack.domain.propagation import (
    distance_km_at,
    stop_time_s,
    time_to_distance_km,
)

logger = logging.getLogger(__name__)

_STORM_MARKER = "-GST"


@dataclass(frozen=True)
class ArrivalConfig:
    """Kinematic extrapolation settings."""
    kinematic_fallback: bool = True
    max_horizon_days: float = 30.0
    tolerance_s: float = 1.0
    max_iterations: int = 200

    def __post_init__(self) -> None:
        if self.max_horizon_days <= 0:
            raise ValueError(f"max_horizon_days must be positive, got {self.max_horizon_days}")
        if self.tolerance_s <= 0:
            raise ValueError(f"tolerance_s must be positive, got {self.tolerance_s}")


DEFAULT_ARRIVAL = ArrivalConfig()


@dataclass(frozen=True)
class ArrivalPrediction:
    """Predicted Earth arrival and its provenance."""
    time: datetime | None
    source: ArrivalSource
    transit_hours: float | None = None


NO_ARRIVAL = ArrivalPrediction(time=None, source=ArrivalSource.NONE)


def parse_storm_link(activity_id: str) -> datetime | None:
    """Extract the UTC timestamp embedded in a GST activity id.

    Returns None if the id is not a storm link or the token is malformed.
    """
    idx = activity_id.find(_STORM_MARKER)
    if idx <= 0:
        return None
    token = activity_id[:idx]
    if token.endswith("Z"):
        token = token[:-1]
    try:
        parsed = datetime.fromisoformat(token)
    except ValueError:
        logger.warning("Could not parse predicted arrival time from %r", activity_id)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def find_storm_arrival(linked_events: Iterable[Any] | None) -> datetime | None:
    """First parseable storm-link timestamp among DONKI linkedEvents."""
    if not linked_events:
        return None
    for linked in linked_events:
        if not isinstance(linked, dict):
            continue
        activity_id = linked.get("activityID")
        if not isinstance(activity_id, str) or _STORM_MARKER not in activity_id:
            continue
        arrival = parse_storm_link(activity_id)
        if arrival is not None:
            return arrival
    return None


def solve_arrival_seconds(
    event: CmeEvent,
    config: ArrivalConfig = DEFAULT_ARRIVAL,
) -> float | None:
    """Seconds after launch at which the front reaches 1 AU, or None."""
    horizon_s = config.max_horizon_days * 86400.0
    if event.deceleration_km_s2 is None or event.deceleration_km_s2 == 0:
        seconds = time_to_distance_km(event, AU_KM)
        if seconds is None or seconds > horizon_s:
            return None
        return seconds

    t_stop = stop_time_s(event)
    if t_stop is not None:
        if distance_km_at(event, t_stop) < AU_KM:
            return None
        hi = t_stop
    else:
        hi = AU_KM / event.speed_km_s
        while distance_km_at(event, hi) < AU_KM:
            hi *= 2.0
            if hi > horizon_s:
                return None

    lo = 0.0
    for _ in range(config.max_iterations):
        if hi - lo <= config.tolerance_s:
            break
        mid = 0.5 * (lo + hi)
        if distance_km_at(event, mid) < AU_KM:
            lo = mid
        else:
            hi = mid
    if hi > horizon_s:
        return None
    return hi


def extrapolate_arrival(
    event: CmeEvent,
    config: ArrivalConfig = DEFAULT_ARRIVAL,
) -> ArrivalPrediction:
    """Kinematic-only arrival prediction."""
    seconds = solve_arrival_seconds(event, config)
    if seconds is None or not math.isfinite(seconds):
        return NO_ARRIVAL
    try:
        time = event.start_time + timedelta(seconds=seconds)
    except OverflowError:
        logger.debug("Arrival of %s falls outside the datetime range", event.id)
        return NO_ARRIVAL
    return ArrivalPrediction(
        time=time,
        source=ArrivalSource.KINEMATIC_EXTRAPOLATION,
        transit_hours=seconds / 3600.0,
    )


def predict_arrival(
    event: CmeEvent,
    linked_events: Iterable[Any] | None = None,
    config: ArrivalConfig = DEFAULT_ARRIVAL,
) -> ArrivalPrediction:
    """Resolve the predicted Earth arrival for one CME.

    Args:
        event: Normalized CME (its own prediction fields are ignored).
        linked_events: Raw DONKI linkedEvents list, may be None.
        config: Extrapolation settings.

    Returns:
        ArrivalPrediction; a linked storm always wins over extrapolation.
    """
    observed = find_storm_arrival(linked_events)
    if observed is not None:
        transit = (observed - event.start_time).total_seconds() / 3600.0
        return ArrivalPrediction(
            time=observed,
            source=ArrivalSource.OBSERVED_STORM_LINK,
            transit_hours=transit,
        )
    if not config.kinematic_fallback:
        return NO_ARRIVAL
    return extrapolate_arrival(event, config)


def implied_deceleration(event: CmeEvent) -> float | None:
    """Constant rate (km/s^2) that puts the front at 1 AU at its predicted arrival.

    From r(T) = v0 T + a T^2 / 2 = 1 AU. None when there is no arrival,
    the transit is not positive, or the front would have to stall first
    (v0 T > 2 AU).
    """
    arrival = event.predicted_arrival_time
    if arrival is None:
        return None
    transit_s = (arrival - event.start_time).total_seconds()
    if transit_s <= 0:
        return None
    v0 = event.speed_km_s
    if v0 * transit_s > 2.0 * AU_KM:
        return None
    return 2.0 * (AU_KM - v0 * transit_s) / (transit_s * transit_s)


def match_arrival(event: CmeEvent) -> CmeEvent:
    """Copy of an Earth-directed event whose kinematics hit 1 AU at its arrival.

    Events that are not Earth-directed, or whose arrival cannot be matched,
    are returned unchanged.
    """
    if not event.is_earth_directed:
        return event
    rate = implied_deceleration(event)
    if rate is None:
        return event
    return replace(event, deceleration_km_s2=rate)
