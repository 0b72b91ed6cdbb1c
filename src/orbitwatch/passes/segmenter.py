"""Forward-stepping scan that cuts a look-angle series into discrete passes."""

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator, Optional

import numpy as np

from ..config import ScanConfig
from ..geometry.solar import is_dark_enough
from ..geometry.topocentric import TopocentricProjector
from ..models.geo import LookAngle
from ..models.observer import Observer
from ..models.passes import Pass

logger = logging.getLogger(__name__)


class SegmenterState(Enum):
    IDLE = "idle"
    IN_PASS = "in_pass"


class _OpenPass:
    """Running extremes of a pass that has risen but not yet set."""

    def __init__(self, look: LookAngle):
        self.rise_time = look.timestamp
        self.rise_az = look.azimuth_deg
        self.max_el = look.elevation_deg
        self.max_el_time = look.timestamp
        self.max_el_az = look.azimuth_deg
        self.set_time = look.timestamp
        self.set_az = look.azimuth_deg
        self.points: list[LookAngle] = []

    def add(self, look: LookAngle) -> None:
        if look.elevation_deg > self.max_el:
            self.max_el = look.elevation_deg
            self.max_el_time = look.timestamp
            self.max_el_az = look.azimuth_deg
        self.set_time = look.timestamp
        self.set_az = look.azimuth_deg
        self.points.append(look)

    def to_pass(self) -> Pass:
        return Pass(
            rise_time=self.rise_time,
            rise_az=self.rise_az,
            max_el_time=self.max_el_time,
            max_el=self.max_el,
            max_el_az=self.max_el_az,
            set_time=self.set_time,
            set_az=self.set_az,
            points=tuple(self.points),
        )


class PassSegmenter:
    """Two-state machine (idle / in pass) fed one sample at a time.

    Args:
        observer: Location used for the dark-sky acceptance check
        config: Thresholds; defaults to ScanConfig()
    """

    def __init__(self, observer: Observer, config: Optional[ScanConfig] = None):
        self.observer = observer
        self.config = config or ScanConfig()
        self.state = SegmenterState.IDLE
        self.rejected = 0
        self._open: Optional[_OpenPass] = None
        self._failures = 0

    def feed(self, when: datetime, look: Optional[LookAngle]) -> Optional[Pass]:
        """Consume one sample; return a pass if this sample closed an accepted one.

        A None look means the propagator had no solution for `when`. The sample
        is skipped, and an open pass is only closed once more than
        `max_consecutive_failures` samples in a row have failed.
        """
        if look is None:
            self._failures += 1
            if (
                self.state is SegmenterState.IN_PASS
                and self._failures > self.config.max_consecutive_failures
            ):
                logger.debug("Closing pass at %s after %d failed samples", when, self._failures)
                return self._close()
            return None

        self._failures = 0

        if look.elevation_deg >= self.config.rise_elevation_deg:
            if self.state is SegmenterState.IDLE:
                self._open = _OpenPass(look)
                self.state = SegmenterState.IN_PASS
            self._open.add(look)
            return None

        if self.state is SegmenterState.IN_PASS:
            return self._close()
        return None

    def finish(self) -> Optional[Pass]:
        """Close a pass still open when the scan window ends."""
        if self.state is SegmenterState.IN_PASS:
            return self._close()
        return None

    def _close(self) -> Optional[Pass]:
        candidate = self._open.to_pass()
        self._open = None
        self.state = SegmenterState.IDLE

        if candidate.duration < self.config.min_duration_s:
            self.rejected += 1
            logger.debug(
                "Rejected pass at %s: duration %.0fs below %.0fs",
                candidate.rise_time,
                candidate.duration,
                self.config.min_duration_s,
            )
            return None

        if not is_dark_enough(
            candidate.max_el_time,
            self.observer,
            self.config.dark_sky_sun_altitude_deg,
        ):
            self.rejected += 1
            logger.debug("Rejected pass at %s: sky not dark at peak", candidate.rise_time)
            return None

        return candidate


def sample_times(start: datetime, config: ScanConfig) -> Iterator[datetime]:
    """Evenly spaced instants covering [start, start + horizon)."""
    offsets = np.arange(config.sample_count, dtype=np.float64) * config.step_s
    for offset in offsets:
        yield start + timedelta(seconds=float(offset))


def iter_scan(
    projector: TopocentricProjector,
    start: datetime,
    config: Optional[ScanConfig] = None,
) -> Iterator[tuple[datetime, Optional[LookAngle]]]:
    """Yield (instant, look angle or None) across the scan window."""
    config = config or ScanConfig()
    for when in sample_times(start, config):
        yield when, projector.at(when)


def scan_in_chunks(
    projector: TopocentricProjector,
    start: datetime,
    config: Optional[ScanConfig] = None,
) -> Iterator[list[Pass]]:
    """Run a full scan, yielding the passes accepted in each batch of samples.

    One list is yielded after every `config.chunk_size` samples (possibly
    empty), and a final list after the window closes. Callers that must stay
    responsive hand control back to their event loop between batches.
    """
    config = config or ScanConfig()
    segmenter = PassSegmenter(projector.observer, config)
    batch: list[Pass] = []

    for index, (when, look) in enumerate(iter_scan(projector, start, config), 1):
        accepted = segmenter.feed(when, look)
        if accepted is not None:
            batch.append(accepted)
        if index % config.chunk_size == 0:
            yield batch
            batch = []

    tail = segmenter.finish()
    if tail is not None:
        batch.append(tail)
    yield batch


def scan_passes(
    projector: TopocentricProjector,
    start: datetime,
    config: Optional[ScanConfig] = None,
) -> list[Pass]:
    """Blocking scan returning every accepted pass in time order."""
    passes: list[Pass] = []
    for batch in scan_in_chunks(projector, start, config):
        passes.extend(batch)
    return passes
