from .events import Event, build_events
from .playback import LaunchPlayback, PlaybackTask
from .tracker import TrackerSession

__all__ = ["Event", "build_events", "LaunchPlayback", "PlaybackTask", "TrackerSession"]
