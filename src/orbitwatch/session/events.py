"""Unified, sortable list of upcoming passes and launches."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence, Union

from ..caption.generator import format_date, format_time
from ..geometry.solar import is_dark_enough
from ..models.launch import Launch
from ..models.observer import Observer
from ..models.passes import Pass
from ..renderer.stars import landmark_hint
from ..visibility.scorer import pass_rating

LAUNCH_LIVE_WINDOW = timedelta(minutes=30)
SORT_MODES = ("date", "elevation")
EVENT_FILTERS = ("all", "pass", "launch")

# Launches without a NET sort after everything dated
_UNDATED_OFFSET = timedelta(days=10000)


@dataclass(frozen=True)
class Event:
    kind: str
    sort_time: datetime
    title: str
    subtitle: str
    label: str
    color: str
    max_el: float = 0.0
    live: bool = False
    hint: str = ""
    stats: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    source: Optional[Union[Pass, Launch]] = None


def _pass_event(pass_: Pass, cloud_cover: Optional[float], now: datetime) -> Event:
    live = pass_.is_live(now)
    rating = pass_rating(pass_, cloud_cover)
    return Event(
        kind="pass",
        sort_time=pass_.rise_time,
        title="ISS Pass — LIVE NOW" if live else "ISS Pass",
        subtitle=(
            f"{format_date(pass_.rise_time)}  {format_time(pass_.rise_time)}"
            f" → {format_time(pass_.set_time)}"
        ),
        label=rating.label,
        color=rating.color,
        max_el=pass_.max_el,
        live=live,
        hint=landmark_hint(pass_.max_el_az, pass_.max_el),
        stats=(
            (f"{pass_.max_el:.1f}°", "Max El"),
            (f"{round(pass_.duration)}s", "Duration"),
            (f"{pass_.rise_az:.0f}°→{pass_.set_az:.0f}°", "Az Arc"),
        ),
        source=pass_,
    )


def _launch_event(launch: Launch, now: datetime) -> Event:
    if launch.net is not None:
        live = abs(launch.net - now) < LAUNCH_LIVE_WINDOW
        subtitle = f"{format_date(launch.net)}  {format_time(launch.net)}  •  {launch.location_name}"
    else:
        live = False
        subtitle = f"TBD  •  {launch.location_name}"

    go = launch.status == "Go"
    return Event(
        kind="launch",
        sort_time=launch.net if launch.net is not None else now + _UNDATED_OFFSET,
        title=launch.mission_name,
        subtitle=subtitle,
        label=launch.status,
        color="green" if go else "yellow",
        live=live,
        stats=((launch.status, "Status"), (launch.orbit or "LEO", "Orbit")),
        source=launch,
    )


def build_events(
    passes: Sequence[Pass],
    launches: Sequence[Launch],
    cloud_cover: Optional[float],
    now: datetime,
    sort_mode: str = "date",
    event_filter: str = "all",
    observer: Optional[Observer] = None,
) -> list[Event]:
    """Merge passes and launches into one display list.

    Launches with a NET in daylight at the observer are dropped, since the
    plume cannot be seen against a bright sky. Without an observer no
    daylight check is made.

    Args:
        passes: Accepted passes
        launches: Upcoming launches
        cloud_cover: Cloud cover percentage, or None when unknown
        now: Reference time for the live flags
        sort_mode: "date" (ascending) or "elevation" (highest first)
        event_filter: "all", "pass" or "launch"
        observer: Location for the daylight check on launches

    Returns:
        Sorted and filtered events
    """
    if sort_mode not in SORT_MODES:
        raise ValueError(f"sort_mode must be one of {SORT_MODES}, got {sort_mode!r}")
    if event_filter not in EVENT_FILTERS:
        raise ValueError(f"event_filter must be one of {EVENT_FILTERS}, got {event_filter!r}")

    events = [_pass_event(p, cloud_cover, now) for p in passes]

    for launch in launches:
        if (
            observer is not None
            and launch.net is not None
            and not is_dark_enough(launch.net, observer)
        ):
            continue
        events.append(_launch_event(launch, now))

    if sort_mode == "elevation":
        events.sort(key=lambda e: e.max_el, reverse=True)
    else:
        events.sort(key=lambda e: e.sort_time)

    if event_filter == "all":
        return events
    return [e for e in events if e.kind == event_filter]
