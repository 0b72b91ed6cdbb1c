from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    altitude_km: float = 0.0


class Illumination(Enum):
    SUNLIT = "daylight"
    ECLIPSED = "eclipsed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BodyState:
    """Geographic fix of an orbiting body as delivered by an ephemeris source."""

    position: GeoPoint
    velocity_km_s: Optional[float] = None
    illumination: Illumination = Illumination.UNKNOWN


@dataclass(frozen=True)
class LookAngle:
    azimuth_deg: float
    elevation_deg: float
    range_km: float
    timestamp: datetime


class ProjectionMode(Enum):
    POLAR = "polar"
    CYLINDRICAL = "cylindrical"


@dataclass(frozen=True)
class ProjectedPoint:
    x: float
    y: float
    mode: ProjectionMode
    visible: bool = True
