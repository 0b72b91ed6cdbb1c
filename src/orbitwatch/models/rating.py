from dataclasses import dataclass


@dataclass(frozen=True)
class Rating:
    label: str
    color: str
    icon: str = ""
