"""SGP4 propagation through skyfield, resolved to geographic fixes."""

import logging
from datetime import datetime, timezone
from typing import Optional

import numpy as np
from skyfield.api import EarthSatellite, load, wgs84

from ..errors import TLEParseError
from ..models.geo import BodyState, GeoPoint, Illumination

logger = logging.getLogger(__name__)


def parse_tle(text: str, default_name: str = "SATELLITE") -> tuple[str, str, str]:
    """Split two- or three-line element text into (name, line1, line2).

    Raises:
        TLEParseError: If the element lines are missing or malformed
    """
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    if len(lines) == 2:
        name, line1, line2 = default_name, lines[0], lines[1]
    elif len(lines) == 3:
        name, line1, line2 = lines[0].strip(), lines[1], lines[2]
    else:
        raise TLEParseError(f"expected 2 or 3 non-empty lines, got {len(lines)}")

    if not line1.startswith("1 ") or not line2.startswith("2 "):
        raise TLEParseError("element lines must start with '1 ' and '2 '")

    return name, line1, line2


class SkyfieldPropagator:
    """Callable ephemeris backed by skyfield's EarthSatellite.

    Args:
        satellite: Loaded EarthSatellite
        ephemeris: Optional planetary ephemeris (e.g. de421) used to decide
            whether the satellite is sunlit; without it illumination is unknown
    """

    def __init__(self, satellite: EarthSatellite, ephemeris=None):
        self.satellite = satellite
        self.ephemeris = ephemeris
        self._ts = load.timescale()

    @classmethod
    def from_tle(
        cls, line1: str, line2: str, name: str = "SATELLITE", ephemeris=None
    ) -> "SkyfieldPropagator":
        ts = load.timescale()
        try:
            satellite = EarthSatellite(line1, line2, name, ts)
        except ValueError as e:
            raise TLEParseError(str(e))
        return cls(satellite, ephemeris)

    @property
    def name(self) -> str:
        return self.satellite.name

    def propagate(self, when: datetime) -> Optional[BodyState]:
        """Geographic state at `when`, or None if SGP4 cannot solve it."""
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)

        t = self._ts.from_datetime(when)
        geocentric = self.satellite.at(t)

        position_km = geocentric.position.km
        message = getattr(geocentric, "message", None)
        if message or not np.all(np.isfinite(position_km)):
            logger.debug("SGP4 failed for %s at %s: %s", self.name, when, message)
            return None

        geographic = wgs84.geographic_position_of(geocentric)
        velocity = float(np.linalg.norm(geocentric.velocity.km_per_s))

        illumination = Illumination.UNKNOWN
        if self.ephemeris is not None:
            illumination = (
                Illumination.SUNLIT
                if bool(geocentric.is_sunlit(self.ephemeris))
                else Illumination.ECLIPSED
            )

        return BodyState(
            position=GeoPoint(
                latitude=float(geographic.latitude.degrees),
                longitude=float(geographic.longitude.degrees),
                altitude_km=float(geographic.elevation.km),
            ),
            velocity_km_s=velocity,
            illumination=illumination,
        )

    def __call__(self, when: datetime) -> Optional[GeoPoint]:
        state = self.propagate(when)
        if state is None:
            return None
        return state.position
