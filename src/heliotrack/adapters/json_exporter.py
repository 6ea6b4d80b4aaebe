# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
JSON frame exporter.

Writes sampled frames as a JSON array, each frame carrying its clock and
focus state plus the nested per-CME projections.
External dependencies (json, file I/O) are confined to this adapter.
"""
import json
from typing import Any

from heliotrack.ports import FrameExporter
from heliotrack.domain.session import CmeProjection, FrameSnapshot


def _projection_dict(proj: CmeProjection) -> dict[str, Any]:
    arrival = proj.predicted_arrival_time
    return {
        'id': proj.id,
        'launched': proj.launched,
        'distance_au': round(proj.distance_au, 6),
        'display_distance_au': round(proj.display_distance_au, 6),
        'speed_km_s': round(proj.speed_km_s, 3),
        'shock_radius': round(proj.shock_radius, 3),
        'core_radius': round(proj.core_radius, 3),
        'wake_length': round(proj.wake_length, 3),
        'angular_position_deg': proj.angular_position_deg,
        'latitude_deg': proj.latitude_deg,
        'earth_separation_deg': round(proj.earth_separation_deg, 3),
        'earth_impact': proj.earth_impact,
        'predicted_arrival_time': arrival.isoformat() if arrival else None,
        'arrival_source': proj.arrival_source.value,
    }


def frame_to_dict(frame: FrameSnapshot) -> dict[str, Any]:
    """Plain-JSON form of one frame."""
    return {
        'instant': frame.instant.isoformat(),
        'scrubber': round(frame.scrubber, 3),
        'play_state': frame.play_state.value,
        'speed_multiplier': frame.speed_multiplier,
        'focus_mode': frame.focus_mode.value,
        'selected_id': frame.selected_id,
        'cmes': [_projection_dict(p) for p in frame.projections],
    }


class JsonFrameExporter(FrameExporter):
    """Exports sampled frames as a JSON array."""

    def export(self, frames: list[FrameSnapshot], path: str) -> int:
        payload = [frame_to_dict(frame) for frame in frames]
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        return len(payload)
