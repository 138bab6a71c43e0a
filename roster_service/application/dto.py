from dataclasses import dataclass
from enum import Enum


class ViewMode(str, Enum):
    COMPOSE = "compose"
    BROWSE = "browse"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str
