# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Catalog record normalization.

Converts loosely typed DONKI CME records into CmeEvent entities. Records
that cannot be modeled (no analysis, missing speed/direction, bad start
time, non-positive half-angle) are dropped here and logged at DEBUG;
nothing downstream ever sees them.

Expected record shape (extra keys ignored):
    {
      "activityID": "2024-05-10T16:36:00-CME-001",
      "startTime": "2024-05-10T16:36Z",
      "cmeAnalyses": [{"speed": 1200, "longitude": 10, "latitude": -5,
                       "halfAngle": 40, "isMostAccurate": true}, ...],
      "linkedEvents": [{"activityID": "2024-05-11T17:00:00-GST-001"}],
      "instruments": [{"displayName": "SOHO: LASCO/C2"}],
      "sourceLocation": "S17W34", "note": "...", "link": "...",
    }
"""
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

from heliotrack.domain.arrival import ArrivalConfig, DEFAULT_ARRIVAL, predict_arrival
from heliotrack.domain.cme import CmeEvent, sort_most_recent_first

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizerConfig:
    """Earth-directed heuristic thresholds and analysis defaults."""
    earth_longitude_limit_deg: float = 45.0
    earth_latitude_limit_deg: float = 30.0
    default_half_angle_deg: float = 30.0

    def __post_init__(self) -> None:
        if self.default_half_angle_deg <= 0:
            raise ValueError(
                f"default_half_angle_deg must be positive, got {self.default_half_angle_deg}"
            )


DEFAULT_NORMALIZER = NormalizerConfig()


def _finite_float(value: Any) -> float | None:
    """Coerce a JSON scalar to a finite float, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def parse_start_time(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive and 'Z' suffixed values are UTC."""
    if not isinstance(value, str) or not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def select_analysis(analyses: Any) -> dict[str, Any] | None:
    """Pick the analysis flagged most accurate, else the first one."""
    if not isinstance(analyses, list):
        return None
    candidates = [a for a in analyses if isinstance(a, dict)]
    if not candidates:
        return None
    for analysis in candidates:
        if analysis.get("isMostAccurate"):
            return analysis
    return candidates[0]


def is_earth_directed(
    longitude_deg: float,
    latitude_deg: float,
    config: NormalizerConfig = DEFAULT_NORMALIZER,
) -> bool:
    """Coarse fan-alignment heuristic; not a physical intersection test."""
    return (
        abs(longitude_deg) < config.earth_longitude_limit_deg
        and abs(latitude_deg) < config.earth_latitude_limit_deg
    )


def _instrument_names(instruments: Any) -> str:
    if not isinstance(instruments, list):
        return "N/A"
    names = [
        str(inst.get("displayName"))
        for inst in instruments
        if isinstance(inst, dict) and inst.get("displayName")
    ]
    return ", ".join(names) if names else "N/A"


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def normalize_record(
    record: dict[str, Any],
    config: NormalizerConfig = DEFAULT_NORMALIZER,
    arrival_config: ArrivalConfig = DEFAULT_ARRIVAL,
) -> CmeEvent | None:
    """Convert one raw catalog record, or return None if unmodelable."""
    if not isinstance(record, dict):
        logger.debug("Skipping non-object record: %r", record)
        return None

    activity_id = record.get("activityID")
    if not isinstance(activity_id, str) or not activity_id:
        logger.debug("Skipping record without activityID")
        return None

    analysis = select_analysis(record.get("cmeAnalyses"))
    if analysis is None:
        logger.debug("Skipping %s: no CME analysis", activity_id)
        return None

    speed = _finite_float(analysis.get("speed"))
    longitude = _finite_float(analysis.get("longitude"))
    latitude = _finite_float(analysis.get("latitude"))
    if speed is None or longitude is None or latitude is None:
        logger.debug("Skipping %s: unresolved speed or direction", activity_id)
        return None

    start_time = parse_start_time(record.get("startTime"))
    if start_time is None:
        logger.debug("Skipping %s: bad startTime %r", activity_id, record.get("startTime"))
        return None

    raw_half_angle = analysis.get("halfAngle")
    if raw_half_angle is None or raw_half_angle == 0:
        # Catalog analyses report an unmeasured width as 0.
        half_angle = config.default_half_angle_deg
    else:
        half_angle = _finite_float(raw_half_angle)
        if half_angle is None:
            logger.debug("Skipping %s: bad halfAngle %r", activity_id, raw_half_angle)
            return None

    deceleration = _finite_float(analysis.get("deceleration"))

    try:
        event = CmeEvent(
            id=activity_id,
            start_time=start_time,
            speed_km_s=speed,
            longitude_deg=longitude,
            latitude_deg=latitude,
            half_angle_deg=half_angle,
            deceleration_km_s2=deceleration,
            is_earth_directed=is_earth_directed(longitude, latitude, config),
            note=_text(record.get("note"), "No additional details."),
            link=_text(record.get("link"), ""),
            instruments=_instrument_names(record.get("instruments")),
            source_location=_text(record.get("sourceLocation"), "N/A"),
            catalog=_text(record.get("catalog"), ""),
        )
    except ValueError as exc:
        logger.debug("Skipping %s: %s", activity_id, exc)
        return None

    prediction = predict_arrival(event, record.get("linkedEvents"), arrival_config)
    return replace(
        event,
        predicted_arrival_time=prediction.time,
        linked_arrival_source=prediction.source,
    )


def normalize_records(
    records: Iterable[dict[str, Any]],
    config: NormalizerConfig = DEFAULT_NORMALIZER,
    arrival_config: ArrivalConfig = DEFAULT_ARRIVAL,
) -> list[CmeEvent]:
    """Normalize a batch of records into the modelable event set.

    Returns:
        Events sorted by start time, most recent first. Repeated ids keep
        their first occurrence.
    """
    events: list[CmeEvent] = []
    seen: set[str] = set()
    total = 0
    for record in records:
        total += 1
        event = normalize_record(record, config, arrival_config)
        if event is None:
            continue
        if event.id in seen:
            logger.debug("Skipping duplicate activityID %s", event.id)
            continue
        seen.add(event.id)
        events.append(event)
    logger.debug("Normalized %d of %d catalog records", len(events), total)
    return sort_most_recent_first(events)
