from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class LaunchSite:
    key: str
    label: str
    latitude: float
    longitude: float
    default_heading_deg: float
    color: str = "#ffffff"


LAUNCH_SITES = {
    "vandenberg": LaunchSite(
        key="vandenberg",
        label="Vandenberg SFB",
        latitude=34.632,
        longitude=-120.611,
        default_heading_deg=196.0,
        color="#00e5ff",
    ),
    "canaveral": LaunchSite(
        key="canaveral",
        label="Cape Canaveral",
        latitude=28.562,
        longitude=-80.577,
        default_heading_deg=90.0,
        color="#ff9800",
    ),
    "kennedy": LaunchSite(
        key="kennedy",
        label="Kennedy Space Center",
        latitude=28.573,
        longitude=-80.649,
        default_heading_deg=90.0,
        color="#ff9800",
    ),
    "boca_chica": LaunchSite(
        key="boca_chica",
        label="Starbase",
        latitude=25.997,
        longitude=-97.157,
        default_heading_deg=90.0,
        color="#ff5252",
    ),
}


@dataclass(frozen=True)
class Launch:
    name: str
    mission_name: str
    status: str
    net: Optional[datetime]
    pad_latitude: float
    pad_longitude: float
    location_name: str = ""
    site_key: Optional[str] = None
    orbit: str = "LEO"

    @property
    def site(self) -> Optional[LaunchSite]:
        if self.site_key is None:
            return None
        return LAUNCH_SITES.get(self.site_key)
