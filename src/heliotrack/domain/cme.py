# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
CME domain entity.

A CmeEvent is the strict, fully resolved form of one catalog eruption.
It is built once by the normalizer and never mutated; everything
downstream (propagation, arrival, timeline) reads it without rechecking
optional fields.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ArrivalSource(Enum):
    """Where a predicted Earth arrival time came from."""
    OBSERVED_STORM_LINK = "observed-storm-link"
    KINEMATIC_EXTRAPOLATION = "kinematic-extrapolation"
    NONE = "none"


@dataclass(frozen=True)
class CmeEvent:
    """Normalized coronal mass ejection.

    Longitude/latitude are Stonyhurst heliographic coordinates of the
    launch direction (longitude 0 points at Earth at launch time).
    """
    id: str
    start_time: datetime
    speed_km_s: float
    longitude_deg: float
    latitude_deg: float
    half_angle_deg: float
    deceleration_km_s2: float | None = None
    is_earth_directed: bool = False
    predicted_arrival_time: datetime | None = None
    linked_arrival_source: ArrivalSource = ArrivalSource.NONE
    note: str = "No additional details."
    link: str = ""
    instruments: str = "N/A"
    source_location: str = "N/A"
    catalog: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("id must be a non-empty string")
        if self.start_time.tzinfo is None:
            raise ValueError(f"start_time must be timezone-aware, got {self.start_time!r}")
        if not math.isfinite(self.speed_km_s) or self.speed_km_s <= 0:
            raise ValueError(f"speed_km_s must be positive and finite, got {self.speed_km_s}")
        if not math.isfinite(self.half_angle_deg) or self.half_angle_deg <= 0:
            raise ValueError(
                f"half_angle_deg must be positive and finite, got {self.half_angle_deg}"
            )
        if not (math.isfinite(self.longitude_deg) and math.isfinite(self.latitude_deg)):
            raise ValueError(
                f"launch direction must be finite, got "
                f"({self.longitude_deg}, {self.latitude_deg})"
            )
        if self.deceleration_km_s2 is not None and not math.isfinite(self.deceleration_km_s2):
            raise ValueError(
                f"deceleration_km_s2 must be finite or None, got {self.deceleration_km_s2}"
            )

    @property
    def has_arrival_prediction(self) -> bool:
        return self.predicted_arrival_time is not None


class CmeFilter(Enum):
    """Event-list filter on the coarse Earth-directed flag."""
    ALL = "all"
    EARTH_DIRECTED = "earth"
    NOT_EARTH_DIRECTED = "not-earth"

    def matches(self, event: CmeEvent) -> bool:
        if self is CmeFilter.EARTH_DIRECTED:
            return event.is_earth_directed
        if self is CmeFilter.NOT_EARTH_DIRECTED:
            return not event.is_earth_directed
        return True

    def __call__(self, event: CmeEvent) -> bool:
        return self.matches(event)


def sort_most_recent_first(events: list[CmeEvent]) -> list[CmeEvent]:
    """Order events by launch time, most recent first."""
    return sorted(events, key=lambda e: e.start_time, reverse=True)
