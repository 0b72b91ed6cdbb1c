"""Bright star catalog, horizon coordinates and sky landmark hints."""

from dataclasses import dataclass
from datetime import datetime

import numpy as np

from ..geometry.geodesy import bearing_to_cardinal
from ..geometry.solar import J2000_JD, julian_date

# Bright stars (RA in hours, Dec in degrees, V magnitude)
STAR_NAMES = (
    "Sirius", "Canopus", "Arcturus", "Vega", "Capella", "Rigel", "Procyon",
    "Betelgeuse", "Altair", "Aldebaran", "Spica", "Antares", "Pollux",
    "Fomalhaut", "Deneb", "Regulus", "Castor", "Bellatrix", "Polaris",
    "Dubhe", "Merak", "Phecda", "Megrez", "Alioth", "Mizar", "Alkaid",
    "Schedar", "Caph", "Tsih", "Ruchbah", "Segin", "Mintaka", "Alnilam",
    "Alnitak", "Saiph", "Denebola",
)

BRIGHT_STARS = np.array(
    [
        (6.752, -16.72, -1.46),  # Sirius
        (6.399, -52.70, -0.74),  # Canopus
        (14.261, 19.18, -0.05),  # Arcturus
        (18.616, 38.78, 0.03),  # Vega
        (5.278, 46.00, 0.08),  # Capella
        (5.242, -8.20, 0.13),  # Rigel
        (7.655, 5.22, 0.34),  # Procyon
        (5.919, 7.41, 0.42),  # Betelgeuse
        (19.846, 8.87, 0.76),  # Altair
        (4.599, 16.51, 0.85),  # Aldebaran
        (13.420, -11.16, 0.97),  # Spica
        (16.490, -26.43, 1.09),  # Antares
        (7.755, 28.03, 1.14),  # Pollux
        (22.961, -29.62, 1.16),  # Fomalhaut
        (20.690, 45.28, 1.25),  # Deneb
        (10.140, 11.97, 1.40),  # Regulus
        (7.577, 31.89, 1.58),  # Castor
        (5.419, 6.35, 1.64),  # Bellatrix
        (2.530, 89.26, 1.98),  # Polaris
        (11.062, 61.75, 1.79),  # Dubhe
        (11.031, 56.38, 2.37),  # Merak
        (11.897, 53.69, 2.44),  # Phecda
        (12.257, 57.03, 3.31),  # Megrez
        (12.900, 55.96, 1.77),  # Alioth
        (13.399, 54.93, 2.27),  # Mizar
        (13.792, 49.31, 1.86),  # Alkaid
        (0.675, 56.54, 2.24),  # Schedar
        (0.153, 59.15, 2.28),  # Caph
        (0.945, 60.72, 2.47),  # Tsih
        (1.430, 60.24, 2.68),  # Ruchbah
        (1.907, 63.67, 3.37),  # Segin
        (5.533, -0.30, 2.23),  # Mintaka
        (5.603, -1.20, 1.69),  # Alnilam
        (5.679, -1.94, 1.77),  # Alnitak
        (5.796, -9.67, 2.09),  # Saiph
        (11.818, 14.57, 2.14),  # Denebola
    ],
    dtype=np.float64,
)

CONSTELLATIONS = {
    "Big Dipper": (
        ("Dubhe", "Merak"), ("Dubhe", "Megrez"), ("Megrez", "Phecda"),
        ("Phecda", "Merak"), ("Megrez", "Alioth"), ("Alioth", "Mizar"),
        ("Mizar", "Alkaid"),
    ),
    "Cassiopeia": (
        ("Segin", "Ruchbah"), ("Ruchbah", "Tsih"), ("Tsih", "Schedar"),
        ("Schedar", "Caph"),
    ),
    "Orion": (
        ("Betelgeuse", "Bellatrix"), ("Betelgeuse", "Mintaka"),
        ("Bellatrix", "Mintaka"), ("Mintaka", "Alnilam"),
        ("Alnilam", "Alnitak"), ("Alnitak", "Saiph"),
        ("Mintaka", "Rigel"), ("Alnitak", "Rigel"), ("Betelgeuse", "Saiph"),
    ),
    "Summer Triangle": (("Vega", "Altair"), ("Altair", "Deneb"), ("Deneb", "Vega")),
}


@dataclass(frozen=True)
class Landmark:
    name: str
    az_min: float
    az_max: float
    dec_min: float

    def contains(self, az: float) -> bool:
        if self.az_min < self.az_max:
            return self.az_min <= az <= self.az_max
        return az >= self.az_min or az <= self.az_max


LANDMARKS = (
    Landmark("Big Dipper", 300, 60, 40),
    Landmark("Orion", 150, 250, -10),
    Landmark("Cassiopeia", 330, 70, 50),
    Landmark("Polaris (North Star)", 345, 15, 85),
    Landmark("Summer Triangle", 60, 180, 20),
)

HINT_STAR_MAX_MAGNITUDE = 1.5
HINT_MAX_AZ_DISTANCE_DEG = 40.0


def get_bright_stars(max_magnitude: float = 2.0) -> np.ndarray:
    """Get bright stars from the catalog.

    Args:
        max_magnitude: Maximum visual magnitude (lower = brighter)

    Returns:
        Array of (RA_hours, Dec_deg, magnitude) for stars brighter than max_magnitude
    """
    mask = BRIGHT_STARS[:, 2] <= max_magnitude
    return BRIGHT_STARS[mask]


def star_index(name: str) -> int:
    return STAR_NAMES.index(name)


def local_sidereal_degrees(when: datetime, longitude: float) -> float:
    """Local mean sidereal time in degrees, [0, 360)."""
    jd = julian_date(when)
    t = (jd - J2000_JD) / 36525.0
    gmst = (
        280.46061837
        + 360.98564736629 * (jd - J2000_JD)
        + 0.000387933 * t * t
        - t * t * t / 38710000.0
    )
    return (gmst + longitude) % 360.0


def ra_dec_to_az_el(
    ra_hours: np.ndarray,
    dec_deg: np.ndarray,
    when: datetime,
    latitude: float,
    longitude: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Convert equatorial coordinates to horizon coordinates (vectorized).

    Args:
        ra_hours: Right ascension in hours
        dec_deg: Declination in degrees
        when: Observation instant
        latitude: Observer latitude in degrees
        longitude: Observer longitude in degrees

    Returns:
        (azimuth_deg, elevation_deg) arrays, azimuth clockwise from north
    """
    ra_hours = np.asarray(ra_hours, dtype=np.float64)
    dec = np.radians(np.asarray(dec_deg, dtype=np.float64))
    lat = np.radians(latitude)

    hour_angle = np.radians((local_sidereal_degrees(when, longitude) - ra_hours * 15.0) % 360.0)

    sin_alt = np.sin(dec) * np.sin(lat) + np.cos(dec) * np.cos(lat) * np.cos(hour_angle)
    alt = np.arcsin(np.clip(sin_alt, -1.0, 1.0))

    cos_az = (np.sin(dec) - np.sin(alt) * np.sin(lat)) / (np.cos(alt) * np.cos(lat))
    az = np.degrees(np.arccos(np.clip(cos_az, -1.0, 1.0)))
    az = np.where(np.sin(hour_angle) > 0, 360.0 - az, az)

    return az, np.degrees(alt)


def landmark_hint(az: float, el: float) -> str:
    """Short phrase pointing a viewer toward a part of the sky.

    Tries the nearest bright star by azimuth, then a constellation region,
    then falls back to a compass direction and elevation.
    """
    bright = BRIGHT_STARS[:, 2] < HINT_STAR_MAX_MAGNITUDE
    star_az = (BRIGHT_STARS[bright, 0] * 15.0) % 360.0
    d_az = np.abs(az - star_az)
    d_az = np.where(d_az > 180.0, 360.0 - d_az, d_az)

    best = int(np.argmin(d_az))
    if d_az[best] < HINT_MAX_AZ_DISTANCE_DEG:
        names = [n for n, keep in zip(STAR_NAMES, bright) if keep]
        return f"Look near {names[best]}"

    for landmark in LANDMARKS:
        if landmark.contains(az):
            return f"Look near {landmark.name}"

    return f"Look {bearing_to_cardinal(az, points=8)} at {el:.0f}° elevation"
