from .engine import PanoramaChart, RadarChart, render_panorama, render_radar
from .stars import landmark_hint

__all__ = [
    "PanoramaChart",
    "RadarChart",
    "render_panorama",
    "render_radar",
    "landmark_hint",
]
