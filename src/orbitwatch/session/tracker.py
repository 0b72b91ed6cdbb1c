"""Observer session: owns the location and pass list, schedules scans and polling."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..config import PollingConfig, ScanConfig
from ..errors import UpstreamUnavailableError
from ..geometry.topocentric import Ephemeris, TopocentricProjector, look_angle
from ..models.geo import BodyState, LookAngle
from ..models.observer import DEFAULT_OBSERVER, Observer
from ..models.passes import Pass
from ..passes.segmenter import scan_in_chunks

logger = logging.getLogger(__name__)

PositionSource = Callable[[datetime], Optional[BodyState]]
CloudCoverSource = Callable[[Observer], Optional[float]]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class TrackerSession:
    """Single owner of the observer and the accepted passes.

    The observer is only written by `relocate` and the pass list only by a
    completed scan whose request token is still current. Everything else
    reads immutable snapshots. All work runs on one asyncio event loop.

    Args:
        ephemeris: Callable returning the body's geographic fix for a time
        observer: Initial observer; defaults to DEFAULT_OBSERVER
        scan_config: Pass scan thresholds
        polling: Periodic refresh intervals
        position_source: Live state source; defaults to wrapping `ephemeris`
        cloud_source: Cloud cover lookup for an observer, percent or None
        clock: Current time provider
    """

    def __init__(
        self,
        ephemeris: Ephemeris,
        observer: Optional[Observer] = None,
        scan_config: Optional[ScanConfig] = None,
        polling: Optional[PollingConfig] = None,
        position_source: Optional[PositionSource] = None,
        cloud_source: Optional[CloudCoverSource] = None,
        clock: Clock = utc_now,
    ):
        self.ephemeris = ephemeris
        self.scan_config = scan_config or ScanConfig()
        self.polling = polling or PollingConfig()
        self._position_source = position_source
        self._cloud_source = cloud_source
        self._clock = clock

        self._observer = observer or DEFAULT_OBSERVER
        self._passes: tuple[Pass, ...] = ()
        self._current_look: Optional[LookAngle] = None
        self._current_state: Optional[BodyState] = None
        self._live_pass: Optional[Pass] = None
        self._cloud_cover: Optional[float] = None
        self.last_cloud_cover: Optional[float] = None

        self._scan_token = 0
        self._scan_task: Optional[asyncio.Task] = None
        self._weather_task: Optional[asyncio.Task] = None
        self._periodic: list[asyncio.Task] = []

        self._observer_listeners: list[Callable[[Observer], Any]] = []
        self._pass_listeners: list[Callable[[tuple[Pass, ...]], Any]] = []
        self._live_listeners: list[Callable[[Optional[Pass]], Any]] = []

    # Snapshots

    @property
    def observer(self) -> Observer:
        return self._observer

    @property
    def passes(self) -> tuple[Pass, ...]:
        return self._passes

    @property
    def current_look(self) -> Optional[LookAngle]:
        return self._current_look

    @property
    def current_state(self) -> Optional[BodyState]:
        return self._current_state

    @property
    def cloud_cover(self) -> Optional[float]:
        """Cloud cover for ratings; None (Unknown) after a failed refresh."""
        return self._cloud_cover

    @property
    def scan_in_progress(self) -> bool:
        return self._scan_task is not None and not self._scan_task.done()

    @property
    def running(self) -> bool:
        return bool(self._periodic)

    # Listeners

    def on_observer_change(self, callback: Callable[[Observer], Any]) -> None:
        self._observer_listeners.append(callback)

    def on_passes_updated(self, callback: Callable[[tuple[Pass, ...]], Any]) -> None:
        self._pass_listeners.append(callback)

    def on_live_pass_change(self, callback: Callable[[Optional[Pass]], Any]) -> None:
        self._live_listeners.append(callback)

    def _notify(self, listeners: list, value) -> None:
        for callback in listeners:
            try:
                callback(value)
            except Exception:
                logger.exception("Listener %r failed", callback)

    # Scanning

    def request_scan(self, start: Optional[datetime] = None) -> asyncio.Task:
        """Start a scan from `start` (default now), superseding any in flight.

        Must be called with a running event loop. Only the most recent
        request may publish its passes.
        """
        self._scan_token += 1
        token = self._scan_token

        if self.scan_in_progress:
            logger.debug("Cancelling scan superseded by request %d", token)
            self._scan_task.cancel()

        start = start or self._clock()
        self._scan_task = asyncio.create_task(self._run_scan(token, self._observer, start))
        return self._scan_task

    async def _scan(self, observer: Observer, start: datetime) -> list[Pass]:
        projector = TopocentricProjector(observer, self.ephemeris)
        found: list[Pass] = []
        for batch in scan_in_chunks(projector, start, self.scan_config):
            found.extend(batch)
            await asyncio.sleep(0)
        return found

    async def _run_scan(
        self, token: int, observer: Observer, start: datetime
    ) -> Optional[tuple[Pass, ...]]:
        while True:
            try:
                found = await self._scan(observer, start)
                break
            except UpstreamUnavailableError as e:
                logger.warning("Scan failed: %s", e.message)
            if not self.running or token != self._scan_token:
                return None
            await asyncio.sleep(self.polling.scan_retry_s)

        if token != self._scan_token:
            logger.debug(
                "Discarding stale scan result (request %d, current %d)",
                token,
                self._scan_token,
            )
            return None

        self._passes = tuple(found)
        logger.info("Scan %d accepted %d passes", token, len(found))
        self._notify(self._pass_listeners, self._passes)
        return self._passes

    # Observer

    def relocate(
        self, latitude: float, longitude: float, altitude_km: Optional[float] = None
    ) -> Optional[asyncio.Task]:
        """Move the observer and rescan.

        Raises:
            InvalidObserverError: If the coordinates are out of range; the
                session is left untouched

        Returns:
            The new scan task, or None when no event loop is running
        """
        if altitude_km is None:
            altitude_km = self._observer.altitude_km
        observer = Observer(latitude, longitude, altitude_km)

        self._scan_token += 1
        if self.scan_in_progress:
            self._scan_task.cancel()
        if self._weather_task is not None and not self._weather_task.done():
            self._weather_task.cancel()

        self._observer = observer
        self._current_look = None
        self._current_state = None
        logger.info(
            "Observer moved to %.4f, %.4f (%.3f km)", latitude, longitude, altitude_km
        )
        self._notify(self._observer_listeners, observer)

        # Passes were computed for the previous observer.
        had_live = self._live_pass is not None
        self._passes = ()
        self._live_pass = None
        self._notify(self._pass_listeners, self._passes)
        if had_live:
            self._notify(self._live_listeners, None)

        if not _loop_running():
            return None

        if self._cloud_source is not None:
            self._weather_task = asyncio.create_task(self.refresh_weather())
        return self.request_scan()

    def set_ephemeris(self, ephemeris: Ephemeris) -> Optional[asyncio.Task]:
        """Swap in freshly loaded orbital elements and rescan when a loop is running."""
        self.ephemeris = ephemeris
        logger.info("Ephemeris replaced")
        if not _loop_running():
            return None
        return self.request_scan()

    # Position and live pass

    def _fetch_state(self, when: datetime) -> Optional[BodyState]:
        if self._position_source is not None:
            return self._position_source(when)
        position = self.ephemeris(when)
        if position is None:
            return None
        return BodyState(position=position)

    async def poll_position(self, when: Optional[datetime] = None) -> Optional[LookAngle]:
        """Refresh the current look angle; keeps the last one on failure."""
        when = when or self._clock()
        observer = self._observer
        try:
            state = await asyncio.to_thread(self._fetch_state, when)
        except UpstreamUnavailableError as e:
            logger.warning("Position update failed: %s", e.message)
            return self._current_look

        if state is None:
            logger.debug("No position available at %s", when)
            return self._current_look
        if observer is not self._observer:
            return self._current_look

        self._current_state = state
        self._current_look = look_angle(observer, state.position, when)
        return self._current_look

    def live_pass(self, now: Optional[datetime] = None) -> Optional[Pass]:
        now = now or self._clock()
        return next((p for p in self._passes if p.is_live(now)), None)

    def check_live(self, now: Optional[datetime] = None) -> Optional[Pass]:
        """Recompute the live pass and notify listeners when it changes."""
        live = self.live_pass(now)
        if live != self._live_pass:
            self._live_pass = live
            if live is not None:
                logger.info("Pass in progress, rose at %s", live.rise_time)
            self._notify(self._live_listeners, live)
        return live

    # Weather

    async def refresh_weather(self) -> Optional[float]:
        if self._cloud_source is None:
            return None

        observer = self._observer
        try:
            value = await asyncio.to_thread(self._cloud_source, observer)
        except UpstreamUnavailableError as e:
            logger.warning("Cloud cover refresh failed: %s", e.message)
            self._cloud_cover = None
            return None

        if observer is not self._observer:
            logger.debug("Discarding cloud cover for a previous location")
            return None

        self._cloud_cover = value
        if value is not None:
            self.last_cloud_cover = value
        return value

    # Lifecycle

    async def _every(self, interval_s: float, action: Callable[[], Any]) -> None:
        while True:
            try:
                result = action()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Periodic %s failed", getattr(action, "__name__", action))
            await asyncio.sleep(interval_s)

    def start(self) -> asyncio.Task:
        """Start periodic polling and an initial scan on the running loop."""
        if self.running:
            raise RuntimeError("Session already started")

        self._periodic = [
            asyncio.create_task(self._every(self.polling.position_interval_s, self.poll_position)),
            asyncio.create_task(self._every(self.polling.live_check_interval_s, self.check_live)),
        ]
        if self._cloud_source is not None:
            self._periodic.append(
                asyncio.create_task(
                    self._every(self.polling.weather_interval_s, self.refresh_weather)
                )
            )
        return self.request_scan()

    async def stop(self) -> None:
        """Cancel every task the session owns and wait for them to finish."""
        tasks = list(self._periodic)
        self._periodic = []
        for task in (self._scan_task, self._weather_task):
            if task is not None:
                tasks.append(task)

        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._scan_task = None
        self._weather_task = None
