"""Azimuth/elevation to 2D display coordinates.

Every chart goes through these functions so the radar and the panorama
place the same look angle consistently. All functions are pure.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..models.geo import LookAngle, ProjectedPoint, ProjectionMode
from ..geometry.geodesy import normalize_degrees


@dataclass(frozen=True)
class PolarFrame:
    radius: float = 160.0
    center_x: float = 170.0
    center_y: float = 170.0


RADAR_FRAME = PolarFrame()
STARMAP_FRAME = PolarFrame(radius=140.0)


@dataclass(frozen=True)
class PanoramaFrame:
    width: float = 700.0
    height: float = 280.0
    az_min: float = 90.0
    az_max: float = 270.0
    el_max: float = 70.0
    skyline_height: float = 30.0

    def __post_init__(self):
        if not 0.0 < self.span <= 360.0:
            raise ValueError(
                f"Panorama azimuth window must span (0, 360] degrees, got {self.span:g}"
            )
        if self.el_max <= 0:
            raise ValueError("el_max must be positive")

    @property
    def baseline(self) -> float:
        return self.height - self.skyline_height

    @property
    def plot_height(self) -> float:
        return self.height - self.skyline_height

    @property
    def span(self) -> float:
        """Angular width of the window, accounting for windows across north.

        An increasing window keeps its plain width, so 0..360 spans the full
        circle rather than collapsing to zero.
        """
        if self.az_min < self.az_max:
            return self.az_max - self.az_min
        return (self.az_max - self.az_min) % 360.0

    @property
    def full_circle(self) -> bool:
        return self.span >= 360.0

    def contains(self, az: float) -> bool:
        if self.full_circle:
            return True
        if self.az_min < self.az_max:
            return self.az_min <= az <= self.az_max
        return az >= self.az_min or az <= self.az_max


SOUTH_PANORAMA = PanoramaFrame()


def relative_azimuth(az: float, heading: float) -> float:
    return normalize_degrees(az - heading + 360.0)


def polar_point(
    az: float, el: float, frame: PolarFrame = RADAR_FRAME, heading: float = 0.0
) -> ProjectedPoint:
    """Project onto a radar disc with the heading at the top.

    The zenith maps to the centre and the horizon to the rim. Points below
    the horizon are flagged not visible; their coordinates sit on the rim.
    """
    rel = relative_azimuth(az, heading)
    r = frame.radius * (1.0 - max(0.0, el) / 90.0)
    theta = math.radians(rel - 90.0)
    return ProjectedPoint(
        x=frame.center_x + r * math.cos(theta),
        y=frame.center_y + r * math.sin(theta),
        mode=ProjectionMode.POLAR,
        visible=el >= 0.0,
    )


def cylindrical_point(
    az: float, el: float, frame: PanoramaFrame = SOUTH_PANORAMA
) -> ProjectedPoint:
    """Project onto a horizon panorama spanning [az_min, az_max].

    Coordinates are clamped to the image; `visible` is set only for azimuths
    inside the window at or above the horizon.
    """
    offset = (az - frame.az_min) % 360.0
    x = offset / frame.span * frame.width
    y = frame.baseline - (max(0.0, el) / frame.el_max) * frame.plot_height
    return ProjectedPoint(
        x=max(0.0, min(frame.width, x)),
        y=max(0.0, min(frame.height, y)),
        mode=ProjectionMode.CYLINDRICAL,
        visible=frame.contains(az) and el >= 0.0,
    )


def polar_path(
    looks: Iterable[LookAngle],
    frame: PolarFrame = RADAR_FRAME,
    heading: float = 0.0,
) -> list[ProjectedPoint]:
    """Project a pass track; below-horizon samples are pinned to the rim."""
    return [polar_point(la.azimuth_deg, la.elevation_deg, frame, heading) for la in looks]


def cylindrical_path(
    az_el: Sequence[tuple[float, float]], frame: PanoramaFrame = SOUTH_PANORAMA
) -> list[ProjectedPoint]:
    """Project a trajectory, keeping only points above the horizon inside the window."""
    return [
        cylindrical_point(az, el, frame)
        for az, el in az_el
        if el > 0.0 and frame.contains(az)
    ]
