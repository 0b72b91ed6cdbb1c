from datetime import datetime, timezone

import pytest

from orbitwatch.models import LookAngle, ProjectionMode
from orbitwatch.projection.sky import (
    RADAR_FRAME,
    SOUTH_PANORAMA,
    PanoramaFrame,
    PolarFrame,
    cylindrical_path,
    cylindrical_point,
    polar_path,
    polar_point,
    relative_azimuth,
)

WHEN = datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)


class TestPolar:
    @pytest.mark.parametrize("heading", [0.0, 90.0, 213.0])
    def test_zenith_at_center(self, heading):
        p = polar_point(heading, 90.0, RADAR_FRAME, heading)
        assert p.x == pytest.approx(RADAR_FRAME.center_x)
        assert p.y == pytest.approx(RADAR_FRAME.center_y)
        assert p.mode is ProjectionMode.POLAR

    @pytest.mark.parametrize("az", [0.0, 37.0, 90.0, 180.0, 271.0, 359.9])
    def test_horizon_on_ring(self, az):
        p = polar_point(az, 0.0)
        r = ((p.x - RADAR_FRAME.center_x) ** 2 + (p.y - RADAR_FRAME.center_y) ** 2) ** 0.5
        assert r == pytest.approx(RADAR_FRAME.radius)
        assert p.visible

    def test_heading_points_up(self):
        p = polar_point(135.0, 0.0, heading=135.0)
        assert p.x == pytest.approx(RADAR_FRAME.center_x)
        assert p.y == pytest.approx(RADAR_FRAME.center_y - RADAR_FRAME.radius)

    def test_east_is_right_when_facing_north(self):
        p = polar_point(90.0, 0.0)
        assert p.x == pytest.approx(RADAR_FRAME.center_x + RADAR_FRAME.radius)
        assert p.y == pytest.approx(RADAR_FRAME.center_y)

    def test_below_horizon_pinned_to_rim(self):
        p = polar_point(45.0, -20.0)
        rim = polar_point(45.0, 0.0)
        assert not p.visible
        assert (p.x, p.y) == pytest.approx((rim.x, rim.y))

    def test_custom_frame(self):
        frame = PolarFrame(radius=140.0, center_x=150.0, center_y=150.0)
        p = polar_point(0.0, 45.0, frame)
        assert p.y == pytest.approx(150.0 - 70.0)

    def test_path(self):
        looks = [LookAngle(az, 30.0, 800.0, WHEN) for az in (200.0, 180.0, 160.0)]
        points = polar_path(looks)
        assert len(points) == 3
        assert all(pt.visible for pt in points)


def test_relative_azimuth():
    assert relative_azimuth(10.0, 350.0) == pytest.approx(20.0)
    assert relative_azimuth(350.0, 10.0) == pytest.approx(340.0)
    assert relative_azimuth(0.0, 0.0) == 0.0


class TestCylindrical:
    def test_window_edges(self):
        left = cylindrical_point(90.0, 0.0)
        right = cylindrical_point(270.0, 0.0)
        assert left.x == pytest.approx(0.0)
        assert right.x == pytest.approx(SOUTH_PANORAMA.width)
        assert left.y == pytest.approx(SOUTH_PANORAMA.baseline)

    def test_south_at_middle(self):
        p = cylindrical_point(180.0, SOUTH_PANORAMA.el_max)
        assert p.x == pytest.approx(SOUTH_PANORAMA.width / 2)
        assert p.y == pytest.approx(0.0)
        assert p.visible

    def test_outside_window_clamped_and_hidden(self):
        p = cylindrical_point(10.0, 30.0)
        assert not p.visible
        assert 0.0 <= p.x <= SOUTH_PANORAMA.width

    def test_high_elevation_clamped(self):
        p = cylindrical_point(180.0, 89.0)
        assert p.y == 0.0

    def test_window_across_north(self):
        frame = PanoramaFrame(az_min=300.0, az_max=60.0)
        assert frame.span == pytest.approx(120.0)
        p = cylindrical_point(0.0, 10.0, frame)
        assert p.x == pytest.approx(frame.width / 2)
        assert p.visible
        assert not cylindrical_point(180.0, 10.0, frame).visible

    def test_empty_window_rejected(self):
        with pytest.raises(ValueError):
            PanoramaFrame(az_min=100.0, az_max=100.0)

    def test_oversized_window_rejected(self):
        with pytest.raises(ValueError):
            PanoramaFrame(az_min=0.0, az_max=400.0)

    @pytest.mark.parametrize("az_min, az_max", [(0.0, 360.0), (-90.0, 270.0)])
    def test_full_circle_window(self, az_min, az_max):
        frame = PanoramaFrame(az_min=az_min, az_max=az_max)
        assert frame.span == pytest.approx(360.0)

        p = cylindrical_point(180.0, 20.0, frame)
        assert p.x == pytest.approx((180.0 - az_min) % 360.0 / 360.0 * frame.width)
        assert p.visible
        assert all(frame.contains(az) for az in (0.0, 90.0, 300.0, 359.9))

    def test_path_drops_hidden_points(self):
        track = [(80.0, 20.0), (120.0, -1.0), (150.0, 0.0), (180.0, 20.0), (200.0, 30.0), (300.0, 10.0)]
        points = cylindrical_path(track)
        assert len(points) == 2
        assert all(pt.visible for pt in points)
