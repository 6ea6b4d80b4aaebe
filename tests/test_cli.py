# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""CLI tests: ranked listing, filters, export dispatch and error handling."""
import csv
import json
import sys
from datetime import datetime, timezone

import pytest


_NOW = "2024-05-12T00:00:00Z"


def _records():
    return [
        {
            "activityID": "2024-05-11T06:00:00-CME-001",
            "startTime": "2024-05-11T06:00Z",
            "cmeAnalyses": [{"speed": 1200, "longitude": 10, "latitude": -5,
                             "halfAngle": 40, "isMostAccurate": True}],
            "linkedEvents": [{"activityID": "2024-05-12T20:00:00-GST-001"}],
        },
        {
            "activityID": "2024-05-10T12:00:00-CME-001",
            "startTime": "2024-05-10T12:00Z",
            "cmeAnalyses": [{"speed": 600, "longitude": 80, "latitude": 20,
                             "halfAngle": 25}],
        },
        {
            "activityID": "2024-05-10T18:00:00-CME-001",
            "startTime": "2024-05-10T18:00Z",
            "cmeAnalyses": [],
        },
    ]


def _write_catalog(tmp_path, payload=None):
    path = tmp_path / "cme.json"
    path.write_text(json.dumps(_records() if payload is None else payload), encoding="utf-8")
    return str(path)


class TestCliListing:

    def test_ranked_output(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path)
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', path, '--now', _NOW])
        main()

        out = capsys.readouterr().out
        assert "2 modelable CMEs (2 before filter)" in out
        lines = [line for line in out.splitlines() if line.strip().startswith(("1.", "2."))]
        assert "2024-05-11T06:00:00-CME-001" in lines[0]
        assert "observed-storm-link" in lines[0]
        assert "2024-05-10T12:00:00-CME-001" in lines[1]
        assert "kinematic-extrapolation" in lines[1]

    def test_earth_filter(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path)
        monkeypatch.setattr(sys, 'argv', [
            'heliotrack', '-i', path, '--now', _NOW, '--filter', 'earth',
        ])
        main()

        out = capsys.readouterr().out
        assert "1 modelable CMEs (2 before filter)" in out
        assert "2024-05-10T12:00:00-CME-001" not in out

    def test_run_returns_session(self, tmp_path):
        from heliotrack.cli import run
        from heliotrack.domain.cme import CmeFilter

        path = _write_catalog(tmp_path)
        now = datetime(2024, 5, 12, tzinfo=timezone.utc)
        session = run(path, now=now, days=7, cme_filter=CmeFilter.NOT_EARTH_DIRECTED)
        assert [e.id for e in session.filtered_events] == ["2024-05-10T12:00:00-CME-001"]
        assert (session.timeline.window_end - session.timeline.window_start).days == 10

    def test_format_event_line(self):
        from heliotrack.cli import format_event_line
        from heliotrack.domain.cme import CmeEvent

        event = CmeEvent(
            id="X", start_time=datetime(2024, 5, 10, 16, 36, tzinfo=timezone.utc),
            speed_km_s=1000.0, longitude_deg=10.0, latitude_deg=-5.0,
            half_angle_deg=30.0, is_earth_directed=True,
        )
        line = format_event_line(1, event)
        assert line.startswith("  1. [E] X")
        assert "1000 km/s" in line
        assert "arrival n/a (none)" in line


class TestCliExport:

    def test_csv_and_json_export(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path)
        csv_path = str(tmp_path / "frames.csv")
        json_path = str(tmp_path / "frames.json")
        monkeypatch.setattr(sys, 'argv', [
            'heliotrack', '-i', path, '--now', _NOW, '--samples', '5',
            '--export-csv', csv_path, '--export-json', json_path,
        ])
        main()

        out = capsys.readouterr().out
        assert f"Exported 10 rows to {csv_path}" in out
        assert f"Exported 5 frames to {json_path}" in out
        with open(csv_path, newline='') as f:
            assert len(list(csv.reader(f))) == 11
        with open(json_path, encoding='utf-8') as f:
            assert len(json.load(f)) == 5

    def test_zero_samples_rejected(self, tmp_path, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path)
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', path, '--samples', '0'])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_empty_catalog_export(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path, payload=[])
        csv_path = str(tmp_path / "frames.csv")
        monkeypatch.setattr(sys, 'argv', [
            'heliotrack', '-i', path, '--now', _NOW, '--export-csv', csv_path,
        ])
        main()
        assert "Exported 0 rows" in capsys.readouterr().out


class TestCliErrors:

    def test_missing_input_file(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        nonexistent = str(tmp_path / "nonexistent.json")
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', nonexistent])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err.lower()

    def test_malformed_json(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', str(path)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Malformed JSON" in capsys.readouterr().err

    def test_bad_now(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path)
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', path, '--now', 'tomorrow'])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Invalid --now" in capsys.readouterr().err

    def test_non_array_payload(self, tmp_path, capsys, monkeypatch):
        from heliotrack.cli import main

        path = _write_catalog(tmp_path, payload="just a string")
        monkeypatch.setattr(sys, 'argv', ['heliotrack', '-i', path])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "Expected a JSON array" in capsys.readouterr().err

    def test_input_required(self, monkeypatch):
        from heliotrack.cli import main

        monkeypatch.setattr(sys, 'argv', ['heliotrack'])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2
