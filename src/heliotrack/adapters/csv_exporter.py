# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
CSV frame exporter.

Writes one row per (frame, CME) pair of a sampled timeline, suitable for
plotting distance/time curves in a spreadsheet.
External dependencies (csv, file I/O) are confined to this adapter.
"""
import csv
import logging

from heliotrack.ports import FrameExporter
from heliotrack.domain.session import FrameSnapshot

logger = logging.getLogger(__name__)

_HEADER = [
    'instant', 'scrubber', 'focus_mode', 'id',
    'launched', 'distance_au', 'display_distance_au', 'speed_km_s',
    'shock_radius', 'core_radius', 'wake_length',
    'angular_position_deg', 'latitude_deg', 'earth_separation_deg',
    'earth_impact', 'predicted_arrival_time', 'arrival_source',
]


class CsvFrameExporter(FrameExporter):
    """Exports sampled frames to CSV, one row per projected CME."""

    def export(self, frames: list[FrameSnapshot], path: str) -> int:
        rows = 0
        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(_HEADER)

            for frame in frames:
                instant_str = frame.instant.isoformat()
                for proj in frame.projections:
                    arrival = proj.predicted_arrival_time
                    writer.writerow([
                        instant_str,
                        f'{frame.scrubber:.3f}',
                        frame.focus_mode.value,
                        proj.id,
                        int(proj.launched),
                        f'{proj.distance_au:.6f}',
                        f'{proj.display_distance_au:.6f}',
                        f'{proj.speed_km_s:.3f}',
                        f'{proj.shock_radius:.3f}',
                        f'{proj.core_radius:.3f}',
                        f'{proj.wake_length:.3f}',
                        f'{proj.angular_position_deg:.3f}',
                        f'{proj.latitude_deg:.3f}',
                        f'{proj.earth_separation_deg:.3f}',
                        int(proj.earth_impact),
                        arrival.isoformat() if arrival else '',
                        proj.arrival_source.value,
                    ])
                    rows += 1

        if rows == 0:
            logger.warning("No CME rows written to %s (empty frames)", path)
        return rows
