"""
Animal Life — Simulation Context
Clock, randomness, environment snapshot and economy handed to every subsystem.

Nothing in the engine reads wall-clock time or the global random module;
a context built from a fixed seed and start time replays identically.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from enum import Enum, auto
import random
import logging

from .store import Economy
from ..config import SimulationConfig, SIMULATION, Weather, Season

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    """Things the engine tells the host about."""
    ANIMAL_CREATED = auto()
    ANIMAL_BIRTH = auto()
    BREEDING_FAILED = auto()
    DISEASE_ONSET = auto()
    DISEASE_CONTAGION = auto()
    DISEASE_RECOVERED = auto()
    PRODUCT_READY = auto()
    PRODUCTS_COLLECTED = auto()
    MUTATION = auto()
    SPECIALIZATION_APPLIED = auto()


@dataclass
class Notification:
    kind: NotificationKind
    time: int
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"kind": self.kind.name.lower(), "time": self.time, **self.payload}


class Clock:
    """Simulation time in milliseconds, advanced only by the host."""

    def __init__(self, start_ms: int = 0):
        self.now = start_ms

    def advance(self, delta_ms: float) -> int:
        if delta_ms < 0:
            raise ValueError(f"Cannot advance clock by negative delta: {delta_ms}")
        self.now += delta_ms
        return self.now


@dataclass
class Environment:
    weather: Weather = Weather.SUNNY
    season: Season = Season.SUMMER


class SimulationContext:
    """
    Shared, explicitly injected state.

    Subsystems read time from `now`, draw randomness from `rng`, consult
    `environment`, charge and credit `economy`, and report through `emit`.
    """

    def __init__(self, config: SimulationConfig = SIMULATION,
                 rng: Optional[random.Random] = None,
                 clock: Optional[Clock] = None,
                 economy: Optional[Economy] = None):
        self.config = config
        self.rng = rng or random.Random(config.seed)
        self.clock = clock or Clock(config.start_time_ms)
        self.environment = Environment()
        self.economy = economy or Economy(config.starting_coins)

        self.notifications: List[Notification] = []
        self._subscribers: List[Callable[[Notification], None]] = []

    @property
    def now(self) -> int:
        return self.clock.now

    @property
    def weather(self) -> Weather:
        return self.environment.weather

    @property
    def season(self) -> Season:
        return self.environment.season

    def subscribe(self, callback: Callable[[Notification], None]):
        self._subscribers.append(callback)

    def emit(self, kind: NotificationKind, **payload) -> Notification:
        notification = Notification(kind, self.now, payload)
        self.notifications.append(notification)

        limit = self.config.notification_history_limit
        if len(self.notifications) > limit:
            del self.notifications[:len(self.notifications) - limit]

        for callback in self._subscribers:
            callback(notification)

        return notification

    def recent(self, kind: Optional[NotificationKind] = None) -> List[Notification]:
        if kind is None:
            return list(self.notifications)
        return [n for n in self.notifications if n.kind == kind]
