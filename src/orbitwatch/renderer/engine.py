"""Raster radar and panorama charts drawn through the shared sky projection."""

from typing import Optional, Sequence

from PIL import Image, ImageDraw

from ..models.geo import LookAngle, ProjectedPoint
from ..models.passes import Pass
from ..models.rating import Rating
from ..projection.sky import (
    RADAR_FRAME,
    SOUTH_PANORAMA,
    PanoramaFrame,
    PolarFrame,
    cylindrical_path,
    cylindrical_point,
    polar_path,
    polar_point,
)

COLOR_SIM = "#00bcd4"
COLOR_LIVE = "#00e676"
BACKGROUND = "#05070d"
GRID = "#2a3344"
LABEL = "#8a96ab"
GROUND = "#0b0f18"

RATING_COLORS = {
    "green": "#00e676",
    "yellow": "#ffd600",
    "red": "#ff5252",
}

RING_ELEVATIONS = (0.0, 30.0, 60.0)
CARDINALS = (("N", 0.0), ("E", 90.0), ("S", 180.0), ("W", 270.0))


def _xy(points: Sequence[ProjectedPoint]) -> list[tuple[float, float]]:
    return [(p.x, p.y) for p in points]


def _circle(draw: ImageDraw.ImageDraw, x: float, y: float, r: float, **kwargs) -> None:
    draw.ellipse((x - r, y - r, x + r, y + r), **kwargs)


class RadarChart:
    """Polar sky chart with the observer's heading at the top."""

    def __init__(self, frame: PolarFrame = RADAR_FRAME, heading: float = 0.0):
        self.frame = frame
        self.heading = heading
        self.width = int(round(frame.center_x * 2))
        self.height = int(round(frame.center_y * 2))
        self.image = Image.new("RGB", (self.width, self.height), BACKGROUND)
        self._draw = ImageDraw.Draw(self.image)
        self._draw_grid()

    def _draw_grid(self) -> None:
        f = self.frame
        for el in RING_ELEVATIONS:
            r = f.radius * (1.0 - el / 90.0)
            _circle(self._draw, f.center_x, f.center_y, r, outline=GRID)

        for name, az in CARDINALS:
            edge = polar_point(az, 0.0, f, self.heading)
            self._draw.text((edge.x - 3, edge.y - 5), name, fill=LABEL)

    def draw_track(
        self,
        looks: Sequence[LookAngle],
        color: str = COLOR_SIM,
        width: int = 2,
    ) -> None:
        """Draw a pass track with open circles at rise and set."""
        if len(looks) < 2:
            return

        points = polar_path(looks, self.frame, self.heading)
        self._draw.line(_xy(points), fill=color, width=width)
        for endpoint in (points[0], points[-1]):
            _circle(self._draw, endpoint.x, endpoint.y, 4, outline=color)

    def draw_blip(self, az: float, el: float, color: str = COLOR_LIVE) -> bool:
        """Mark the current position; returns False when it is below the horizon."""
        point = polar_point(az, el, self.frame, self.heading)
        if not point.visible:
            return False
        _circle(self._draw, point.x, point.y, 5, fill=color)
        return True


class PanoramaChart:
    """Cylindrical horizon view of an azimuth window."""

    def __init__(self, frame: PanoramaFrame = SOUTH_PANORAMA):
        self.frame = frame
        self.image = Image.new(
            "RGB", (int(frame.width), int(frame.height)), BACKGROUND
        )
        self._draw = ImageDraw.Draw(self.image)
        self._draw_grid()

    def _draw_grid(self) -> None:
        f = self.frame
        for el in range(10, int(f.el_max) + 1, 10):
            y = cylindrical_point(f.az_min, float(el), f).y
            self._draw.line([(0, y), (f.width, y)], fill=GRID)

        for az_offset in range(0, int(f.span) + 1, 45):
            az = (f.az_min + az_offset) % 360.0
            x = f.width * az_offset / f.span
            self._draw.line([(x, 0), (x, f.baseline)], fill=GRID)
            self._draw.text((x + 2, f.baseline + 4), f"{az:.0f}", fill=LABEL)

        self._draw.rectangle((0, f.baseline, f.width, f.height), fill=GROUND)

    def draw_trajectory(
        self, az_el: Sequence[tuple[float, float]], color: str = COLOR_LIVE, width: int = 2
    ) -> int:
        """Draw the in-window part of a trajectory; returns the point count drawn."""
        points = cylindrical_path(az_el, self.frame)
        if len(points) >= 2:
            self._draw.line(_xy(points), fill=color, width=width)
        return len(points)


def render_radar(
    pass_: Optional[Pass] = None,
    heading: float = 0.0,
    current: Optional[LookAngle] = None,
    rating: Optional[Rating] = None,
    live: bool = False,
    frame: PolarFrame = RADAR_FRAME,
) -> Image.Image:
    """Render a radar chart for a pass and/or the current look angle.

    Args:
        pass_: Pass whose track is drawn
        heading: Compass heading at the top of the chart
        current: Current look angle drawn as a blip
        rating: When given, the track takes the rating's color
        live: Draw the track in the live color instead of the preview color
        frame: Chart geometry

    Returns:
        PIL Image in RGB mode
    """
    chart = RadarChart(frame, heading)
    if pass_ is not None:
        color = COLOR_LIVE if live else COLOR_SIM
        if rating is not None:
            color = RATING_COLORS.get(rating.color, color)
        chart.draw_track(pass_.points, color=color)
    if current is not None:
        chart.draw_blip(current.azimuth_deg, current.elevation_deg)
    return chart.image


def render_panorama(
    az_el: Sequence[tuple[float, float]],
    frame: PanoramaFrame = SOUTH_PANORAMA,
    color: str = COLOR_LIVE,
) -> Image.Image:
    """Render a horizon panorama with one trajectory."""
    chart = PanoramaChart(frame)
    chart.draw_trajectory(az_el, color=color)
    return chart.image
