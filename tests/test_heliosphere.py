# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""Tests for heliospheric constants and circular-orbit Earth geometry."""
import ast
from datetime import datetime, timedelta, timezone

import pytest

from heliotrack.domain.heliosphere import (
    AU_KM,
    EARTH_LONGITUDE_J2000_DEG,
    angular_separation_deg,
    earth_heliocentric_longitude_deg,
    km_to_au,
)


J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestConstants:

    def test_au_km(self):
        assert AU_KM == pytest.approx(149_597_870.7)

    def test_km_to_au_unity(self):
        assert km_to_au(AU_KM) == pytest.approx(1.0)


class TestEarthLongitude:
    """Circular-orbit Earth longitude."""

    def test_reference_longitude_at_j2000(self):
        assert earth_heliocentric_longitude_deg(J2000) == pytest.approx(EARTH_LONGITUDE_J2000_DEG)

    def test_full_period_returns_to_start(self):
        later = J2000 + timedelta(days=365.25)
        assert earth_heliocentric_longitude_deg(later) == pytest.approx(
            EARTH_LONGITUDE_J2000_DEG, abs=1e-6,
        )

    def test_quarter_period_advances_90_deg(self):
        later = J2000 + timedelta(days=365.25 / 4.0)
        assert earth_heliocentric_longitude_deg(later) == pytest.approx(
            EARTH_LONGITUDE_J2000_DEG + 90.0, abs=1e-6,
        )

    def test_about_one_degree_per_day(self):
        epoch = datetime(2024, 5, 10, tzinfo=timezone.utc)
        a = earth_heliocentric_longitude_deg(epoch)
        b = earth_heliocentric_longitude_deg(epoch + timedelta(days=1))
        assert (b - a) % 360.0 == pytest.approx(360.0 / 365.25)

    def test_range_normalized(self):
        for year in range(1990, 2040, 3):
            lon = earth_heliocentric_longitude_deg(datetime(year, 7, 1, tzinfo=timezone.utc))
            assert 0.0 <= lon < 360.0

    def test_naive_treated_as_utc(self):
        naive = datetime(2024, 5, 10, 12, 0, 0)
        aware = naive.replace(tzinfo=timezone.utc)
        assert earth_heliocentric_longitude_deg(naive) == earth_heliocentric_longitude_deg(aware)


class TestAngularSeparation:

    def test_identical_directions(self):
        assert angular_separation_deg(42.0, 10.0, 42.0, 10.0) == pytest.approx(0.0, abs=1e-9)

    def test_quarter_turn_on_equator(self):
        assert angular_separation_deg(0.0, 0.0, 90.0, 0.0) == pytest.approx(90.0)

    def test_antipodal(self):
        assert angular_separation_deg(0.0, 0.0, 180.0, 0.0) == pytest.approx(180.0)

    def test_pole_to_equator(self):
        assert angular_separation_deg(0.0, 90.0, 123.0, 0.0) == pytest.approx(90.0)

    def test_wraps_across_zero_longitude(self):
        assert angular_separation_deg(359.0, 0.0, 1.0, 0.0) == pytest.approx(2.0)

    def test_symmetric(self):
        a = angular_separation_deg(10.0, 20.0, 50.0, -15.0)
        b = angular_separation_deg(50.0, -15.0, 10.0, 20.0)
        assert a == pytest.approx(b)

    def test_latitude_only_offset(self):
        assert angular_separation_deg(30.0, 25.0, 30.0, 0.0) == pytest.approx(25.0)


class TestHeliospherePurity:

    def test_no_forbidden_imports(self):
        import heliotrack.domain.heliosphere as mod

        with open(mod.__file__) as f:
            tree = ast.parse(f.read())

        allowed_top = {"math", "numpy", "dataclasses", "typing", "datetime"}
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    assert alias.name.split(".")[0] in allowed_top, \
                        f"Forbidden import: {alias.name}"
            elif isinstance(node, ast.ImportFrom):
                if node.module and node.level == 0:
                    top = node.module.split(".")[0]
                    assert top in allowed_top or node.module.startswith("heliotrack"), \
                        f"Forbidden import from: {node.module}"
