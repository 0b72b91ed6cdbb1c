import asyncio
from datetime import timedelta

import pytest

from orbitwatch.config import PollingConfig
from orbitwatch.errors import InvalidObserverError, UpstreamUnavailableError
from orbitwatch.models import BodyState, Observer
from orbitwatch.session.tracker import TrackerSession

from conftest import NIGHT, NOON, arc_profile, body_at, profile_ephemeris, short_window

ORIGIN = NIGHT + timedelta(minutes=5)

FAST_POLLING = PollingConfig(
    position_interval_s=0.01,
    live_check_interval_s=0.01,
    weather_interval_s=0.01,
    scan_retry_s=0.01,
)


def make_session(observer, **kwargs):
    kwargs.setdefault("scan_config", short_window(chunk_size=5))
    kwargs.setdefault("clock", lambda: NIGHT)
    return TrackerSession(
        profile_ephemeris(observer, ORIGIN, arc_profile()), observer=observer, **kwargs
    )


class TestScan:
    def test_scan_publishes_passes(self, observer):
        session = make_session(observer)
        received = []
        session.on_passes_updated(received.append)

        async def run():
            task = session.request_scan(NIGHT)
            assert session.scan_in_progress
            return await task

        passes = asyncio.run(run())

        assert len(passes) == 1
        assert session.passes == passes
        assert received == [passes]
        assert not session.scan_in_progress

    def test_scan_defaults_to_clock(self, observer):
        session = make_session(observer)

        async def run():
            return await session.request_scan()

        assert len(asyncio.run(run())) == 1

    def test_latest_request_wins(self, observer):
        session = make_session(observer)
        received = []
        session.on_passes_updated(received.append)

        async def run():
            first = session.request_scan(NIGHT)
            second = session.request_scan(NOON)
            result = await second
            await asyncio.sleep(0)
            return first, result

        first, result = asyncio.run(run())

        assert first.cancelled()
        assert result == ()
        assert session.passes == ()
        assert received == [()]

    def test_upstream_failure_keeps_previous_passes(self, observer):
        def failing(when):
            raise UpstreamUnavailableError("ephemeris", "timeout")

        session = TrackerSession(failing, observer=observer, scan_config=short_window())

        async def run():
            return await session.request_scan(NIGHT)

        assert asyncio.run(run()) is None
        assert session.passes == ()

    def test_failing_listener_does_not_block_others(self, observer):
        session = make_session(observer)
        received = []
        session.on_passes_updated(lambda passes: 1 / 0)
        session.on_passes_updated(received.append)

        async def run():
            return await session.request_scan(NIGHT)

        asyncio.run(run())
        assert len(received) == 1


class TestRelocate:
    def test_invalid_location_leaves_session_untouched(self, observer):
        session = make_session(observer)
        changes = []
        session.on_observer_change(changes.append)

        with pytest.raises(InvalidObserverError):
            session.relocate(95.0, 0.0)

        assert session.observer == observer
        assert changes == []

    def test_relocate_without_loop(self, observer):
        session = make_session(observer)
        changes = []
        session.on_observer_change(changes.append)

        assert session.relocate(40.0, -105.0, 1.6) is None
        assert session.observer == Observer(40.0, -105.0, 1.6)
        assert changes == [session.observer]

    def test_altitude_kept_when_omitted(self, observer):
        session = make_session(observer)
        session.relocate(40.0, -105.0)
        assert session.observer.altitude_km == observer.altitude_km

    def test_relocate_cancels_scan_and_rescans(self, observer):
        session = make_session(observer)
        received = []
        session.on_passes_updated(received.append)

        async def run():
            stale = session.request_scan(NIGHT)
            fresh = session.relocate(37.4, -122.0)
            await fresh
            await asyncio.sleep(0)
            return stale, fresh

        stale, fresh = asyncio.run(run())

        assert stale.cancelled()
        assert fresh.done()
        assert len(received) == 2
        assert received[0] == ()
        assert session.observer.latitude == 37.4

    def test_relocate_discards_previous_passes(self, observer):
        session = make_session(observer)
        received, live_changes = [], []

        async def run():
            return await session.request_scan(NIGHT)

        (pass_,) = asyncio.run(run())
        during = pass_.rise_time + timedelta(seconds=60)
        session.check_live(during)
        session.on_passes_updated(received.append)
        session.on_live_pass_change(live_changes.append)

        session.relocate(-33.9, 151.2)

        assert session.passes == ()
        assert session.live_pass(during) is None
        assert session.check_live(during) is None
        assert received == [()]
        assert live_changes == [None]

    def test_relocate_with_failing_rescan_keeps_no_passes(self, observer):
        session = make_session(observer)

        async def run():
            await session.request_scan(NIGHT)

            def failing(when):
                raise UpstreamUnavailableError("ephemeris", "timeout")

            session.ephemeris = failing
            return await session.relocate(-33.9, 151.2)

        assert asyncio.run(run()) is None
        assert session.passes == ()


class TestEphemerisRefresh:
    def test_new_elements_trigger_rescan(self, observer):
        session = make_session(observer)

        async def run():
            await session.request_scan(NIGHT)
            return await session.set_ephemeris(lambda when: None)

        assert asyncio.run(run()) == ()
        assert session.passes == ()

    def test_without_loop(self, observer):
        session = make_session(observer)
        assert session.set_ephemeris(lambda when: None) is None


class TestLivePass:
    def test_live_transitions_notify_once(self, observer):
        session = make_session(observer)
        changes = []
        session.on_live_pass_change(changes.append)

        async def run():
            return await session.request_scan(NIGHT)

        (pass_,) = asyncio.run(run())
        during = pass_.rise_time + timedelta(seconds=60)

        assert session.live_pass(NIGHT) is None
        assert session.check_live(during) == pass_
        assert session.check_live(during + timedelta(seconds=5)) == pass_
        assert session.check_live(pass_.set_time + timedelta(seconds=1)) is None
        assert changes == [pass_, None]


class TestPolling:
    def test_position_from_source(self, observer):
        state = BodyState(position=body_at(observer, 90.0, 40.0))
        session = make_session(observer, position_source=lambda when: state)

        look = asyncio.run(session.poll_position(NIGHT))

        assert look.azimuth_deg == pytest.approx(90.0, abs=1e-6)
        assert look.elevation_deg == pytest.approx(40.0, abs=1e-6)
        assert session.current_look == look
        assert session.current_state == state

    def test_position_falls_back_to_ephemeris(self, observer):
        session = make_session(observer)
        look = asyncio.run(session.poll_position(ORIGIN + timedelta(seconds=180)))
        assert look.elevation_deg == pytest.approx(52.0, abs=1e-3)

    def test_position_failure_keeps_last_look(self, observer):
        responses = [BodyState(position=body_at(observer, 45.0, 30.0))]

        def source(when):
            if responses:
                return responses.pop()
            raise UpstreamUnavailableError("position", "HTTP 503")

        session = make_session(observer, position_source=source)

        async def run():
            first = await session.poll_position(NIGHT)
            second = await session.poll_position(NIGHT + timedelta(seconds=5))
            return first, second

        first, second = asyncio.run(run())
        assert second == first

    def test_weather_failure_reports_unknown(self, observer):
        responses = [42.0]

        def source(obs):
            if responses:
                return responses.pop()
            raise UpstreamUnavailableError("weather", "HTTP 500")

        session = make_session(observer, cloud_source=source)

        assert asyncio.run(session.refresh_weather()) == 42.0
        assert session.cloud_cover == 42.0

        assert asyncio.run(session.refresh_weather()) is None
        assert session.cloud_cover is None
        assert session.last_cloud_cover == 42.0

    def test_no_weather_source(self, observer):
        session = make_session(observer)
        assert asyncio.run(session.refresh_weather()) is None
        assert session.cloud_cover is None


class TestLifecycle:
    def test_start_and_stop(self, observer):
        session = make_session(observer, polling=FAST_POLLING, cloud_source=lambda obs: 20.0)

        async def run():
            scan = session.start()
            assert session.running
            with pytest.raises(RuntimeError):
                session.start()
            await scan
            await asyncio.sleep(0.05)
            await session.stop()

        asyncio.run(run())

        assert not session.running
        assert not session.scan_in_progress
        assert len(session.passes) == 1
        assert session.current_look is not None
        assert session.cloud_cover == 20.0

    def test_unexpected_source_error_keeps_polling(self, observer):
        calls = []

        def flaky(when):
            calls.append(when)
            if len(calls) == 1:
                raise OSError("connection reset")
            return BodyState(position=body_at(observer, 120.0, 35.0))

        session = make_session(observer, polling=FAST_POLLING, position_source=flaky)

        async def run():
            await session.start()
            await asyncio.sleep(0.05)
            await session.stop()

        asyncio.run(run())

        assert len(calls) > 1
        assert session.current_look.azimuth_deg == pytest.approx(120.0, abs=1e-6)
