from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import numpy as np
import pytest

from orbitwatch.errors import TLEParseError
from orbitwatch.geometry.topocentric import TopocentricProjector
from orbitwatch.models import BodyState, GeoPoint, Illumination, Observer
from orbitwatch.propagation.skyfield_propagator import SkyfieldPropagator, parse_tle

ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   14020.93268519  .00009878  00000-0  18200-3 0  5082"
ISS_LINE2 = "2 25544  51.6498 109.4756 0003572  55.9686 274.8005 15.49815350868473"
NEAR_EPOCH = datetime(2014, 1, 21, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def iss():
    return SkyfieldPropagator.from_tle(ISS_LINE1, ISS_LINE2, ISS_NAME)


class TestParseTle:
    def test_three_lines(self):
        name, l1, l2 = parse_tle(f"{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}\n")
        assert name == ISS_NAME
        assert l1 == ISS_LINE1
        assert l2 == ISS_LINE2

    def test_two_lines_use_default_name(self):
        name, _, _ = parse_tle(f"{ISS_LINE1}\n{ISS_LINE2}", default_name="ISS")
        assert name == "ISS"

    def test_blank_lines_ignored(self):
        name, _, _ = parse_tle(f"\n{ISS_NAME}\n\n{ISS_LINE1}\n{ISS_LINE2}\n\n")
        assert name == ISS_NAME

    def test_wrong_line_count(self):
        with pytest.raises(TLEParseError):
            parse_tle(ISS_LINE1)

    def test_wrong_line_prefix(self):
        with pytest.raises(TLEParseError):
            parse_tle(f"{ISS_LINE2}\n{ISS_LINE1}")


class TestSkyfieldPropagator:
    def test_name(self, iss):
        assert iss.name == ISS_NAME

    def test_propagate_near_epoch(self, iss):
        state = iss.propagate(NEAR_EPOCH)

        assert isinstance(state, BodyState)
        assert 300.0 < state.position.altitude_km < 500.0
        assert abs(state.position.latitude) <= 52.0
        assert -180.0 <= state.position.longitude <= 180.0
        assert state.velocity_km_s == pytest.approx(7.66, abs=0.1)
        assert state.illumination is Illumination.UNKNOWN

    def test_naive_datetime_is_utc(self, iss):
        aware = iss(NEAR_EPOCH)
        naive = iss(NEAR_EPOCH.replace(tzinfo=None))
        assert naive.latitude == pytest.approx(aware.latitude)
        assert naive.longitude == pytest.approx(aware.longitude)

    def test_callable_returns_geopoint(self, iss):
        assert isinstance(iss(NEAR_EPOCH), GeoPoint)

    def test_moves_between_samples(self, iss):
        a = iss(NEAR_EPOCH)
        b = iss(NEAR_EPOCH + timedelta(seconds=60))
        assert (a.latitude, a.longitude) != (b.latitude, b.longitude)

    def test_drives_projector(self, iss):
        projector = TopocentricProjector(Observer(37.386, -122.084), iss)
        la = projector.at(NEAR_EPOCH)
        assert 0.0 <= la.azimuth_deg < 360.0
        assert -90.0 <= la.elevation_deg <= 90.0

    def test_failed_solution_returns_none(self):
        nan = np.array([np.nan, np.nan, np.nan])
        failed = SimpleNamespace(
            position=SimpleNamespace(km=nan),
            message="mrt is less than 1.0 which indicates the satellite has decayed",
        )
        satellite = SimpleNamespace(name="DEBRIS", at=lambda t: failed)

        propagator = SkyfieldPropagator(satellite)
        assert propagator.propagate(NEAR_EPOCH) is None
        assert propagator(NEAR_EPOCH) is None
