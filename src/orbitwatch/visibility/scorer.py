import math
from typing import Optional

from ..models.passes import Pass
from ..models.rating import Rating

UNKNOWN = Rating(label="Unknown", color="yellow", icon="❓")
EXCELLENT = Rating(label="Excellent", color="green", icon="✨")
GOOD = Rating(label="Good", color="green", icon="👍")
FAIR = Rating(label="Fair", color="yellow", icon="🌥️")
POOR = Rating(label="Poor", color="red", icon="☁️")

HIGH_PASS = Rating(label="High Pass", color="green")
MEDIUM_PASS = Rating(label="Medium", color="yellow")
LOW_PASS = Rating(label="Low Pass", color="red")

HIGH_ELEVATION_DEG = 45.0
MEDIUM_ELEVATION_DEG = 25.0
SCORE_OFFSET = 0.5


def _is_known(cloud_cover_pct: Optional[float]) -> bool:
    return cloud_cover_pct is not None and not math.isnan(cloud_cover_pct)


def cloud_band(cloud_cover_pct: float) -> int:
    """0 (clear) to 3 (overcast)."""
    if cloud_cover_pct < 25:
        return 0
    if cloud_cover_pct < 50:
        return 1
    if cloud_cover_pct < 75:
        return 2
    return 3


def elevation_band(max_el: float) -> int:
    """0 (high pass) to 2 (low pass)."""
    if max_el >= HIGH_ELEVATION_DEG:
        return 0
    if max_el >= MEDIUM_ELEVATION_DEG:
        return 1
    return 2


def overall_rating(cloud_cover_pct: Optional[float]) -> Rating:
    """Rate the sky as a whole from cloud cover alone.

    Args:
        cloud_cover_pct: Cloud cover percentage, or None when unknown

    Returns:
        Unknown when there is no cloud data, otherwise Excellent to Poor
    """
    if not _is_known(cloud_cover_pct):
        return UNKNOWN

    return (EXCELLENT, GOOD, FAIR, POOR)[cloud_band(cloud_cover_pct)]


def pass_score(max_el: float, cloud_cover_pct: float) -> float:
    return cloud_band(cloud_cover_pct) + elevation_band(max_el) + SCORE_OFFSET


def pass_rating(pass_: Pass, cloud_cover_pct: Optional[float]) -> Rating:
    """Rate a pass from its peak elevation and, when known, cloud cover.

    Args:
        pass_: Accepted pass
        cloud_cover_pct: Cloud cover percentage, or None when unknown

    Returns:
        High Pass / Medium / Low Pass without cloud data, otherwise
        Excellent / Good / Fair / Poor from the additive score
    """
    if not _is_known(cloud_cover_pct):
        if pass_.max_el >= HIGH_ELEVATION_DEG:
            return HIGH_PASS
        if pass_.max_el >= MEDIUM_ELEVATION_DEG:
            return MEDIUM_PASS
        return LOW_PASS

    score = pass_score(pass_.max_el, cloud_cover_pct)
    if score <= 1.5:
        return Rating(label=EXCELLENT.label, color=EXCELLENT.color)
    if score <= 3:
        return Rating(label=GOOD.label, color=GOOD.color)
    if score <= 4:
        return Rating(label=FAIR.label, color=FAIR.color)
    return Rating(label=POOR.label, color=POOR.color)
