from dataclasses import dataclass, field
from datetime import datetime

from .geo import LookAngle


@dataclass(frozen=True)
class Pass:
    """One contiguous interval with the body above the rise threshold.

    The peak may coincide with rise: a body already culminating when the
    scan starts, or one that only descends, peaks at its first sample. So
    the ordering enforced is rise <= peak <= set, not a strict rise < peak.
    """

    rise_time: datetime
    rise_az: float
    max_el_time: datetime
    max_el: float
    max_el_az: float
    set_time: datetime
    set_az: float
    points: tuple[LookAngle, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not (self.rise_time <= self.max_el_time <= self.set_time):
            raise ValueError("Pass times must satisfy rise <= peak <= set")

    @property
    def duration(self) -> float:
        """Seconds between the first and last above-threshold samples."""
        return (self.set_time - self.rise_time).total_seconds()

    def is_live(self, now: datetime) -> bool:
        return self.rise_time <= now <= self.set_time
