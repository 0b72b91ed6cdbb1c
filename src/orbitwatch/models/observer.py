from dataclasses import dataclass

from ..errors import InvalidObserverError


@dataclass(frozen=True)
class Observer:
    latitude: float
    longitude: float
    altitude_km: float = 0.04

    def __post_init__(self):
        if not (
            -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
            and self.altitude_km >= 0.0
        ):
            raise InvalidObserverError(self.latitude, self.longitude, self.altitude_km)


DEFAULT_OBSERVER = Observer(latitude=37.3861, longitude=-122.0839, altitude_km=0.04)
