# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for headless CME modeling.

Usage:
    # Ranked event list with arrival predictions (3-day look-back)
    heliotrack -i donki_cme.json

    # Pin "now" for reproducible windows, only Earth-directed events
    heliotrack -i donki_cme.json --now 2024-05-12T00:00:00Z --filter earth

    # Sample the timeline and export frames
    heliotrack -i donki_cme.json --days 7 --samples 96 --export-csv frames.csv
    heliotrack -i donki_cme.json --export-json frames.json
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone

from heliotrack.adapters.json_catalog import JsonCatalogReader
from heliotrack.adapters.csv_exporter import CsvFrameExporter
from heliotrack.adapters.json_exporter import JsonFrameExporter
from heliotrack.domain.cme import CmeEvent, CmeFilter
from heliotrack.domain.normalizer import parse_start_time
from heliotrack.domain.session import ModelerSession, sample_frames
from heliotrack.domain.timeline import TimeRange


def _parse_now(value: str | None) -> datetime:
    if value is None:
        return datetime.now(tz=timezone.utc)
    parsed = parse_start_time(value)
    if parsed is None:
        raise ValueError(f"Invalid --now timestamp: {value!r}")
    return parsed


def format_event_line(rank: int, event: CmeEvent) -> str:
    """One ranked list row: id, launch, speed, direction, arrival."""
    arrival = event.predicted_arrival_time
    arrival_str = arrival.strftime('%Y-%m-%d %H:%M UTC') if arrival else 'n/a'
    flag = 'E' if event.is_earth_directed else ' '
    return (
        f"{rank:3d}. [{flag}] {event.id}  "
        f"{event.start_time.strftime('%Y-%m-%d %H:%M')}  "
        f"{event.speed_km_s:7.0f} km/s  "
        f"lon {event.longitude_deg:+6.1f}  lat {event.latitude_deg:+5.1f}  "
        f"half-angle {event.half_angle_deg:4.0f}  "
        f"arrival {arrival_str} ({event.linked_arrival_source.value})"
    )


def run(
    input_path: str,
    now: datetime,
    days: int = 3,
    cme_filter: CmeFilter = CmeFilter.ALL,
) -> ModelerSession:
    """
    Load a catalog file and open a session on the default window.

    Returns:
        ModelerSession with the requested filter applied.
    """
    records = JsonCatalogReader(input_path).load_records()
    session = ModelerSession.from_records(records, now=now, days=TimeRange(days))
    session.set_active_filter(cme_filter)
    return session


def main():
    parser = argparse.ArgumentParser(
        description="Propagate DONKI CME catalog records on a virtual timeline"
    )
    parser.add_argument(
        '--input', '-i', required=True,
        help="Path to a DONKI CME JSON file (array of records)"
    )
    parser.add_argument(
        '--days', type=int, default=3, choices=[r.value for r in TimeRange],
        help="Look-back range in days (default: 3)"
    )
    parser.add_argument(
        '--now',
        help="Reference 'now' as ISO-8601 UTC (default: wall clock)"
    )
    parser.add_argument(
        '--filter', default=CmeFilter.ALL.value,
        choices=[f.value for f in CmeFilter],
        help="Event filter on the coarse Earth-directed flag (default: all)"
    )
    parser.add_argument(
        '--verbose', '-v', action='store_true', default=False,
        help="Log catalog loading details"
    )

    export_group = parser.add_argument_group('export')
    export_group.add_argument(
        '--samples', type=int, default=49,
        help="Number of evenly spaced frames to sample (default: 49)"
    )
    export_group.add_argument(
        '--export-csv',
        help="Export sampled frames to CSV (one row per frame and CME)"
    )
    export_group.add_argument(
        '--export-json',
        help="Export sampled frames to JSON"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.samples < 1:
        parser.error("--samples must be at least 1")

    try:
        now = _parse_now(args.now)
        session = run(
            input_path=args.input,
            now=now,
            days=args.days,
            cme_filter=CmeFilter(args.filter),
        )

        events = session.filtered_events
        timeline = session.timeline
        print(
            f"{len(events)} modelable CMEs "
            f"({len(session.catalog)} before filter), window "
            f"{timeline.window_start.isoformat()} .. {timeline.window_end.isoformat()}"
        )
        for rank, event in enumerate(events, start=1):
            print(format_event_line(rank, event))

        if args.export_csv or args.export_json:
            frames = sample_frames(session, args.samples)

            if args.export_csv:
                n = CsvFrameExporter().export(frames, args.export_csv)
                print(f"Exported {n} rows to {args.export_csv}")

            if args.export_json:
                n = JsonFrameExporter().export(frames, args.export_json)
                print(f"Exported {n} frames to {args.export_json}")

    except FileNotFoundError:
        print(
            f"Error: Input file not found: {args.input}\n"
            f"Expected a DONKI CME JSON array.",
            file=sys.stderr,
        )
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Malformed JSON in {args.input}: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
