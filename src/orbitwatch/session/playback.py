"""Accelerated, cancellable playback of a pass or launch with proximity cues."""

import asyncio
import contextlib
import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

import numpy as np

from ..geometry.geodesy import angular_difference, normalize_degrees
from ..launches.trajectory import TrajectoryPoint, flight_phase, trajectory_look_angles
from ..models.observer import Observer
from ..models.passes import Pass

logger = logging.getLogger(__name__)

PASS_SPEEDUP = 4.0
MAX_PASS_PLAYBACK_S = 20.0
SYNTHETIC_PLAYBACK_S = 15.0
LAUNCH_PLAYBACK_S = 12.0
FRAME_INTERVAL_S = 1.0 / 30.0

CUE_BASE_FREQ_HZ = 1200.0
CUE_FREQ_SPAN_HZ = 600.0
CUE_BASE_VOLUME = 0.04
CUE_VOLUME_SPAN = 0.46
CUE_BASE_INTERVAL_MS = 2500.0
CUE_INTERVAL_SPAN_MS = 2000.0
CUE_MIN_INTERVAL_MS = 100.0


@dataclass(frozen=True)
class PlaybackFrame:
    progress: float
    azimuth_deg: float
    elevation_deg: float
    altitude_km: Optional[float] = None
    phase: str = ""


@dataclass(frozen=True)
class BeepCue:
    frequency_hz: float
    volume: float
    interval_ms: float


FrameCallback = Callable[[PlaybackFrame], None]
CueCallback = Callable[[BeepCue], None]


def gaussian(t: float, sigma: float) -> float:
    return math.exp(-(t * t) / (2.0 * sigma * sigma))


def beep_cue(seconds_from_peak: float, sigma: float) -> BeepCue:
    """Cue whose pitch, loudness and cadence rise toward the peak."""
    g = gaussian(seconds_from_peak, sigma)
    interval = CUE_BASE_INTERVAL_MS - CUE_INTERVAL_SPAN_MS * g
    return BeepCue(
        frequency_hz=CUE_BASE_FREQ_HZ + CUE_FREQ_SPAN_HZ * g,
        volume=CUE_BASE_VOLUME + CUE_VOLUME_SPAN * g,
        interval_ms=max(CUE_MIN_INTERVAL_MS, interval),
    )


def live_pass_cue(pass_: Pass, now: datetime) -> Optional[BeepCue]:
    """Real-time cue for a pass in progress; None once it has set."""
    if now > pass_.set_time:
        return None
    sigma = pass_.duration / 4.0
    if sigma <= 0:
        return None
    offset = (now - pass_.max_el_time).total_seconds()
    return beep_cue(offset, sigma)


def playback_duration(pass_: Optional[Pass]) -> float:
    """Seconds of playback: a quarter of the pass, capped, or the synthetic length."""
    if pass_ is None or len(pass_.points) < 2:
        return SYNTHETIC_PLAYBACK_S
    return min(pass_.duration / PASS_SPEEDUP, MAX_PASS_PLAYBACK_S)


def interpolate_track(
    az_el: Sequence[tuple[float, float]], progress: float
) -> tuple[float, float]:
    """Linear interpolation along a sampled (az, el) track at progress in [0, 1].

    Azimuth is interpolated along the short way round so a track crossing
    north does not sweep through south.
    """
    if len(az_el) < 2:
        raise ValueError("Need at least two points to interpolate")

    progress = min(max(progress, 0.0), 1.0)
    idx = progress * (len(az_el) - 1)
    i = min(int(math.floor(idx)), len(az_el) - 2)
    frac = idx - i

    az0, el0 = az_el[i]
    az1, el1 = az_el[i + 1]
    az = normalize_degrees(az0 + angular_difference(az1, az0) * frac)
    return az, el0 + (el1 - el0) * frac


class SyntheticArc:
    """Stand-in track used when there is no pass to replay."""

    def __init__(self, seed: Optional[int] = None):
        rng = np.random.default_rng(seed)
        self.start_az = float(rng.uniform(0.0, 360.0))
        self.sweep = float(rng.uniform(120.0, 180.0))

    def at(self, progress: float) -> tuple[float, float]:
        az = (self.start_az + self.sweep * progress) % 360.0
        el = 10.0 + 70.0 * (1.0 - (2.0 * progress - 1.0) ** 2)
        return az, el


class _TimedPlayback:
    """Drives frames at a fixed cadence for `duration_s` until done or cancelled.

    `cancel()` is synchronous: once it returns no callback fires again, even
    if the underlying task has not yet observed its cancellation.

    Subclasses supply the trajectory by overriding `frame_at`.
    """

    def __init__(
        self,
        duration_s: float,
        on_frame: Optional[FrameCallback] = None,
        frame_interval_s: float = FRAME_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        if duration_s <= 0:
            raise ValueError("Playback duration must be positive")
        self.duration_s = duration_s
        self.frame_interval_s = frame_interval_s
        self.progress = 0.0
        self.finished = False
        self._on_frame = on_frame
        self._clock = clock
        self._cancelled = False
        self._task: Optional[asyncio.Task] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def frame_at(self, progress: float) -> PlaybackFrame:
        """Frame for `progress` in [0, 1]; subclasses must override this hook."""
        raise NotImplementedError(f"{type(self).__name__} does not define frame_at")

    def start(self) -> asyncio.Task:
        """Schedule playback on the running event loop."""
        if self._task is not None:
            raise RuntimeError("Playback already started")
        self._task = asyncio.create_task(self.run())
        return self._task

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    def _emit_frame(self, frame: PlaybackFrame) -> None:
        if self._cancelled or self._on_frame is None:
            return
        self._on_frame(frame)

    async def _frames(self) -> None:
        started = self._clock()
        while not self._cancelled:
            progress = min((self._clock() - started) / self.duration_s, 1.0)
            if progress >= 1.0:
                break
            self.progress = progress
            self._emit_frame(self.frame_at(progress))
            await asyncio.sleep(self.frame_interval_s)

        if not self._cancelled:
            self.progress = 1.0
            self.finished = True

    async def run(self) -> None:
        await self._frames()


class PlaybackTask(_TimedPlayback):
    """Replay a pass (or a synthetic arc) faster than real time with beep cues.

    Args:
        pass_: Pass to replay; None (or fewer than two points) plays a synthetic arc
        on_frame: Called with each PlaybackFrame
        on_cue: Called with each BeepCue
        duration_s: Override the computed playback length
        seed: Seed for the synthetic arc
    """

    def __init__(
        self,
        pass_: Optional[Pass] = None,
        on_frame: Optional[FrameCallback] = None,
        on_cue: Optional[CueCallback] = None,
        duration_s: Optional[float] = None,
        seed: Optional[int] = None,
        frame_interval_s: float = FRAME_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(
            duration_s if duration_s is not None else playback_duration(pass_),
            on_frame=on_frame,
            frame_interval_s=frame_interval_s,
            clock=clock,
        )
        self.pass_ = pass_
        self._on_cue = on_cue
        self.sigma = self.duration_s / 4.0

        if pass_ is not None and len(pass_.points) >= 2:
            self._track = [(p.azimuth_deg, p.elevation_deg) for p in pass_.points]
            self.synthetic = None
        else:
            self._track = None
            self.synthetic = SyntheticArc(seed)

    def position_at(self, progress: float) -> tuple[float, float]:
        if self._track is not None:
            return interpolate_track(self._track, progress)
        return self.synthetic.at(progress)

    def frame_at(self, progress: float) -> PlaybackFrame:
        az, el = self.position_at(progress)
        return PlaybackFrame(progress=progress, azimuth_deg=az, elevation_deg=el)

    def cue_at(self, elapsed_s: float) -> BeepCue:
        """Cue for a playback clock reading; the peak sits at the midpoint."""
        return beep_cue(elapsed_s - self.duration_s / 2.0, self.sigma)

    async def _cues(self) -> None:
        started = self._clock()
        while not self._cancelled:
            elapsed = self._clock() - started
            if elapsed > self.duration_s:
                return
            cue = self.cue_at(elapsed)
            if self._on_cue is not None:
                self._on_cue(cue)
            await asyncio.sleep(cue.interval_ms / 1000.0)

    async def run(self) -> None:
        logger.debug("Starting playback for %.1fs", self.duration_s)
        cues = asyncio.create_task(self._cues())
        try:
            await self._frames()
        finally:
            cues.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cues


class LaunchPlayback(_TimedPlayback):
    """Trace a launch trajectory across the observer's sky.

    Frames carry the nominal altitude and flight phase at each point of
    the ascent.
    """

    def __init__(
        self,
        observer: Observer,
        trajectory: Sequence[TrajectoryPoint],
        on_frame: Optional[FrameCallback] = None,
        duration_s: float = LAUNCH_PLAYBACK_S,
        frame_interval_s: float = FRAME_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        if len(trajectory) < 2:
            raise ValueError("Need at least two trajectory points")
        super().__init__(
            duration_s,
            on_frame=on_frame,
            frame_interval_s=frame_interval_s,
            clock=clock,
        )
        self.trajectory = list(trajectory)
        self.az_el = trajectory_look_angles(observer, self.trajectory)

    def frame_at(self, progress: float) -> PlaybackFrame:
        az, el = interpolate_track(self.az_el, progress)
        last = len(self.trajectory) - 1
        alt_km = self.trajectory[min(int(progress * last), last)].position.altitude_km
        return PlaybackFrame(
            progress=progress,
            azimuth_deg=az,
            elevation_deg=el,
            altitude_km=alt_km,
            phase=flight_phase(alt_km),
        )
