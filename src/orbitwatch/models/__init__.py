from .geo import BodyState, GeoPoint, Illumination, LookAngle, ProjectedPoint, ProjectionMode
from .launch import LAUNCH_SITES, Launch, LaunchSite
from .observer import DEFAULT_OBSERVER, Observer
from .passes import Pass
from .rating import Rating

__all__ = [
    "BodyState",
    "GeoPoint",
    "Illumination",
    "LookAngle",
    "ProjectedPoint",
    "ProjectionMode",
    "LAUNCH_SITES",
    "Launch",
    "LaunchSite",
    "DEFAULT_OBSERVER",
    "Observer",
    "Pass",
    "Rating",
]
