from datetime import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..models.passes import Pass
    from ..models.rating import Rating


def format_time(when: datetime) -> str:
    return when.strftime("%H:%M:%S")


def format_date(when: datetime) -> str:
    return f"{when.strftime('%a, %b')} {when.day}"


def format_coordinate(value: float, positive: str, negative: str) -> str:
    direction = positive if value >= 0 else negative
    return f"{abs(value):.4f}° {direction}"


def generate_caption(
    pass_: "Pass",
    rating: Optional["Rating"] = None,
    hint: str = "",
    live: bool = False,
    name: str = "ISS",
) -> str:
    """Generate a one-line summary of a pass.

    Args:
        pass_: Accepted pass
        rating: Optional visibility rating to append
        hint: Optional sky landmark hint
        live: Mark the pass as in progress
        name: Display name of the tracked body

    Returns:
        Human-readable caption string.
    """
    title = f"{name} Pass — LIVE NOW" if live else f"{name} Pass"
    parts = [
        f"{title}: {format_date(pass_.rise_time)} "
        f"{format_time(pass_.rise_time)} → {format_time(pass_.set_time)}"
    ]

    parts.append(
        f"Max El {pass_.max_el:.1f}°, Duration {round(pass_.duration)}s, "
        f"Az Arc {pass_.rise_az:.0f}°→{pass_.set_az:.0f}°"
    )

    if rating is not None:
        parts.append(f"Visibility: {rating.label}")

    if hint:
        parts.append(hint)

    return ". ".join(parts) + "."
