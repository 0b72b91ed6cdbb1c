import argparse
import asyncio
import logging
import sys
import threading
import time
from datetime import datetime, timezone
from itertools import cycle
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .caption.generator import generate_caption
from .config import DEFAULT_HORIZON_DAYS, DEFAULT_RISE_ELEVATION_DEG, DEFAULT_STEP_S, ScanConfig
from .errors import OrbitWatchError, TimeParseError, TLEParseError, handle_error
from .metadata.embedder import embed_metadata
from .models import DEFAULT_OBSERVER, Observer, Pass
from .propagation.skyfield_propagator import SkyfieldPropagator, parse_tle
from .renderer.engine import render_radar
from .renderer.stars import landmark_hint
from .session.events import SORT_MODES, build_events
from .session.tracker import TrackerSession
from .visibility.scorer import overall_rating, pass_rating

logger = logging.getLogger(__name__)


class Spinner:
    """Simple terminal spinner for long-running operations."""

    def __init__(self, message: str):
        self.message = message
        self._stop_event = threading.Event()
        self._spinner_thread = None
        self._chars = cycle(["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"])

    def _spin(self):
        while not self._stop_event.is_set():
            char = next(self._chars)
            sys.stdout.write(f"\r{self.message} {char} ")
            sys.stdout.flush()
            time.sleep(0.1)

    def start(self):
        self._stop_event.clear()
        self._spinner_thread = threading.Thread(target=self._spin, daemon=True)
        self._spinner_thread.start()

    def stop(self):
        if self._spinner_thread:
            self._stop_event.set()
            self._spinner_thread.join()
            self._spinner_thread = None
            sys.stdout.write("\r" + " " * (len(self.message) + 3) + "\r")
            sys.stdout.flush()


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Predict visible satellite passes for a ground observer."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--tle",
        type=str,
        help="File holding a two- or three-line element set",
    )
    source.add_argument("--line1", type=str, help="First element line")
    parser.add_argument("--line2", type=str, help="Second element line (with --line1)")
    parser.add_argument(
        "--lat", type=float, default=DEFAULT_OBSERVER.latitude, help="Observer latitude in degrees"
    )
    parser.add_argument(
        "--lon", type=float, default=DEFAULT_OBSERVER.longitude, help="Observer longitude in degrees"
    )
    parser.add_argument(
        "--alt",
        type=float,
        default=DEFAULT_OBSERVER.altitude_km,
        help="Observer altitude in km above sea level",
    )
    parser.add_argument(
        "--start",
        type=str,
        default=None,
        help="ISO-8601 UTC start of the scan window (default: now)",
    )
    parser.add_argument(
        "--days", type=float, default=DEFAULT_HORIZON_DAYS, help="Scan window length in days"
    )
    parser.add_argument(
        "--step", type=float, default=DEFAULT_STEP_S, help="Sampling step in seconds"
    )
    parser.add_argument(
        "--min-elevation",
        type=float,
        default=DEFAULT_RISE_ELEVATION_DEG,
        help="Elevation in degrees above which the body counts as risen",
    )
    parser.add_argument(
        "--cloud-cover",
        type=float,
        default=None,
        help="Cloud cover percentage used for ratings (default: unknown)",
    )
    parser.add_argument(
        "--radar",
        type=str,
        default=None,
        help="Write a radar chart PNG of the first pass to this path",
    )
    parser.add_argument(
        "--heading",
        type=float,
        default=0.0,
        help="Compass heading at the top of the radar chart",
    )
    parser.add_argument(
        "--sort",
        type=str,
        choices=SORT_MODES,
        default="date",
        help="Order passes by date or by peak elevation",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"orbitwatch {__version__}")

    args = parser.parse_args(argv)
    if args.line1 is not None and args.line2 is None:
        parser.error("--line1 requires --line2")
    return args


def parse_start(value: Optional[str]) -> datetime:
    """Parse an ISO-8601 UTC timestamp; naive values are taken as UTC.

    Raises:
        TimeParseError: If the value cannot be parsed
    """
    if value is None:
        return datetime.now(timezone.utc)

    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise TimeParseError(value)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def load_propagator(
    tle_path: Optional[str], line1: Optional[str], line2: Optional[str]
) -> SkyfieldPropagator:
    if tle_path is not None:
        try:
            text = Path(tle_path).read_text()
        except OSError as e:
            raise TLEParseError(f"cannot read {tle_path}: {e.strerror}")
        name, line1, line2 = parse_tle(text)
    else:
        name, line1, line2 = parse_tle(f"{line1}\n{line2}")
    return SkyfieldPropagator.from_tle(line1, line2, name)


async def scan_once(
    propagator, observer: Observer, start: datetime, config: ScanConfig
) -> tuple[Pass, ...]:
    session = TrackerSession(propagator, observer=observer, scan_config=config)
    passes = await session.request_scan(start)
    return passes or ()


def predict_passes(
    observer: Observer,
    propagator,
    start: datetime,
    config: ScanConfig,
    cloud_cover: Optional[float] = None,
    sort_mode: str = "date",
    radar_path: Optional[str] = None,
    heading: float = 0.0,
) -> int:
    """Scan for passes, print a caption for each and optionally save a radar chart.

    Returns:
        Exit code (0 for success)
    """
    name = getattr(propagator, "name", "ISS")
    print(f"Predicting passes of {name}")
    print(f"  Location: {observer.latitude:.4f}°, {observer.longitude:.4f}°")
    print(f"  Window: {start.isoformat(timespec='seconds')} + {config.horizon_days:g} days")
    print()

    spinner = Spinner("Scanning")
    spinner.start()
    try:
        passes = asyncio.run(scan_once(propagator, observer, start, config))
    finally:
        spinner.stop()

    print(f"Sky conditions: {overall_rating(cloud_cover).label}")
    if not passes:
        print("No visible passes found")
        return 0

    events = build_events(
        passes, [], cloud_cover, start, sort_mode=sort_mode, event_filter="pass"
    )
    for event in events:
        pass_ = event.source
        caption = generate_caption(
            pass_,
            rating=pass_rating(pass_, cloud_cover),
            hint=event.hint,
            live=event.live,
            name=name,
        )
        print(caption)

    if radar_path is not None:
        first = passes[0]
        image = render_radar(first, heading=heading, rating=pass_rating(first, cloud_cover))
        output_file = Path(radar_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        embed_metadata(
            image,
            observer,
            str(output_file),
            pass_=first,
            extra={
                "satellite": name,
                "hint": landmark_hint(first.max_el_az, first.max_el),
                "renderer_id": f"orbitwatch-{__version__}",
            },
        )
        print(f"Radar chart saved to: {output_file}")

    return 0


def main(argv: Optional[Sequence[str]] = None):
    """CLI entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        observer = Observer(args.lat, args.lon, args.alt)
        start = parse_start(args.start)
        config = ScanConfig(
            rise_elevation_deg=args.min_elevation,
            step_s=args.step,
            horizon_days=args.days,
        )
        propagator = load_propagator(args.tle, args.line1, args.line2)
    except TimeParseError as e:
        sys.exit(handle_error(e, "parsing start time"))
    except OrbitWatchError as e:
        sys.exit(handle_error(e))
    except ValueError as e:
        sys.exit(handle_error(e, "reading options"))

    try:
        exit_code = predict_passes(
            observer,
            propagator,
            start,
            config,
            cloud_cover=args.cloud_cover,
            sort_mode=args.sort,
            radar_path=args.radar,
            heading=args.heading,
        )
    except Exception as e:
        exit_code = handle_error(e, "predicting passes")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
