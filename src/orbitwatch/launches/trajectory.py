"""Ground-projected launch trajectories and their look angles from an observer."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..geometry.geodesy import destination_point, distance, initial_bearing
from ..geometry.topocentric import azimuth, elevation
from ..models.geo import GeoPoint
from ..models.launch import LAUNCH_SITES, Launch
from ..models.observer import Observer

SITE_MATCH_RADIUS_KM = 50.0
DIRECT_VIEW_RADIUS_KM = 400.0
FLARE_VIEW_RADIUS_KM = 2000.0


@dataclass(frozen=True)
class ProfilePoint:
    t: float
    alt_km: float
    downrange_km: float


@dataclass(frozen=True)
class TrajectoryPoint:
    t: float
    position: GeoPoint


# Falcon 9 nominal ascent (seconds after T-0, km altitude, km downrange)
ASCENT_PROFILE = (
    ProfilePoint(0, 0, 0),
    ProfilePoint(30, 7, 2),
    ProfilePoint(60, 30, 20),
    ProfilePoint(90, 55, 55),
    ProfilePoint(120, 80, 100),
    ProfilePoint(150, 100, 160),
    ProfilePoint(160, 110, 180),
    ProfilePoint(180, 130, 220),
    ProfilePoint(240, 180, 350),
    ProfilePoint(300, 230, 500),
    ProfilePoint(360, 280, 680),
    ProfilePoint(420, 320, 850),
    ProfilePoint(480, 350, 1050),
    ProfilePoint(540, 380, 1250),
)

BOOSTER_DRONESHIP_PROFILE = (
    ProfilePoint(160, 110, 180),
    ProfilePoint(200, 120, 250),
    ProfilePoint(240, 90, 350),
    ProfilePoint(280, 55, 450),
    ProfilePoint(320, 20, 550),
    ProfilePoint(360, 5, 600),
    ProfilePoint(400, 0, 630),
)

# Second-stage burns above this altitude light up as a "jellyfish" flare
FLARE_MIN_ALT_KM = 200.0


@dataclass(frozen=True)
class LaunchVisibility:
    visible: bool
    distance_km: float
    kind: str


@dataclass(frozen=True)
class LaunchBearing:
    azimuth_deg: float
    distance_km: float
    launch: Launch
    site_name: str


def compute_trajectory(
    site: GeoPoint, heading_deg: float, profile: Iterable[ProfilePoint]
) -> list[TrajectoryPoint]:
    """Lay an altitude/downrange profile along a great circle from the pad."""
    trajectory = []
    for pt in profile:
        ground = destination_point(site, heading_deg, pt.downrange_km)
        trajectory.append(
            TrajectoryPoint(
                t=pt.t,
                position=GeoPoint(ground.latitude, ground.longitude, pt.alt_km),
            )
        )
    return trajectory


def flare_profile() -> tuple[ProfilePoint, ...]:
    return tuple(p for p in ASCENT_PROFILE if p.alt_km >= FLARE_MIN_ALT_KM)


def trajectory_look_angles(
    observer: Observer, trajectory: Sequence[TrajectoryPoint]
) -> list[tuple[float, float]]:
    """(azimuth, elevation) of each trajectory point as seen from the ground.

    Launch arcs are measured from sea level so far-away plumes are not
    pushed below the horizon by the observer's own altitude.
    """
    ground_observer = Observer(observer.latitude, observer.longitude, 0.0)
    return [
        (azimuth(ground_observer, p.position), elevation(ground_observer, p.position))
        for p in trajectory
    ]


def identify_site(pad_latitude: float, pad_longitude: float) -> Optional[str]:
    """Key of the nearest known launch site within SITE_MATCH_RADIUS_KM."""
    pad = GeoPoint(pad_latitude, pad_longitude)
    best_key = None
    best_dist = float("inf")
    for key, site in LAUNCH_SITES.items():
        d = distance(pad, GeoPoint(site.latitude, site.longitude))
        if d < best_dist:
            best_dist = d
            best_key = key
    return best_key if best_dist < SITE_MATCH_RADIUS_KM else None


def launch_visibility(observer: Observer, launch: Launch) -> LaunchVisibility:
    """Whether a launch is seen directly, as a high-altitude flare, or not at all."""
    dist = distance(observer, GeoPoint(launch.pad_latitude, launch.pad_longitude))
    if dist < DIRECT_VIEW_RADIUS_KM:
        return LaunchVisibility(True, dist, "direct")
    if dist < FLARE_VIEW_RADIUS_KM:
        return LaunchVisibility(True, dist, "flare")
    return LaunchVisibility(False, dist, "none")


def launch_trajectory(launch: Launch) -> list[TrajectoryPoint]:
    """Nominal ascent trajectory for a launch from its site's default heading."""
    site = launch.site
    if site is None:
        raise ValueError(f"Unknown launch site for {launch.mission_name}")
    pad = GeoPoint(launch.pad_latitude, launch.pad_longitude)
    return compute_trajectory(pad, site.default_heading_deg, ASCENT_PROFILE)


def next_launch_bearing(
    observer: Observer, launches: Sequence[Launch], now: datetime
) -> Optional[LaunchBearing]:
    """Bearing and distance to the next upcoming launch from a known site."""
    if not launches:
        return None

    upcoming = next((l for l in launches if l.net is not None and l.net > now), None)
    launch = upcoming or launches[0]
    if launch.site is None:
        return None

    pad = GeoPoint(launch.pad_latitude, launch.pad_longitude)
    return LaunchBearing(
        azimuth_deg=initial_bearing(observer, pad),
        distance_km=distance(observer, pad),
        launch=launch,
        site_name=launch.location_name or launch.site.label,
    )


def flight_phase(alt_km: float) -> str:
    if alt_km < 100:
        return "ASCENT"
    if alt_km < 200:
        return "MECO"
    return "UPPER STAGE"
