"""
Animal Life — Subsystem Base Class
Common contract for the care, health, breeding and production engines.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from enum import Enum, auto
import logging

from .context import SimulationContext
from .registry import AnimalRegistry

logger = logging.getLogger(__name__)


class SubsystemState(Enum):
    """Whether the host's tick reaches a subsystem."""
    RUNNING = auto()
    PAUSED = auto()


class Subsystem(ABC):
    """
    Base class for tick-driven engines.

    A subsystem:
    - Reads time, randomness and environment from the shared context
    - Reads and mutates animals only through the registry
    - Advances only when the host calls `tick`/`update`; it owns no timer
    - Snapshots its own state through `save`/`load`
    """

    name = "subsystem"

    def __init__(self, context: SimulationContext, registry: AnimalRegistry):
        self.context = context
        self.registry = registry
        self.state = SubsystemState.RUNNING

        # Statistics
        self.ticks_processed = 0
        self.ticks_skipped = 0
        self.time_processed = 0.0

    @property
    def is_running(self) -> bool:
        return self.state == SubsystemState.RUNNING

    def pause(self):
        self.state = SubsystemState.PAUSED
        logger.info(f"{self.name}: Paused")

    def resume(self):
        self.state = SubsystemState.RUNNING
        logger.info(f"{self.name}: Resumed")

    def tick(self, delta_time: float) -> Dict:
        """
        Advance this subsystem by `delta_time` ms unless paused.

        Returns:
            Dictionary of metrics from this tick.
        """
        if not self.is_running:
            self.ticks_skipped += 1
            return {"name": self.name, "state": self.state.name}

        metrics = self.update(delta_time) or {}
        self.ticks_processed += 1
        self.time_processed += delta_time
        return {"name": self.name, "state": self.state.name, **metrics}

    @abstractmethod
    def update(self, delta_time: float) -> Optional[Dict]:
        """Subsystem-specific processing for one tick of `delta_time` ms."""
        pass

    def save(self) -> dict:
        return {}

    def load(self, state: dict):
        pass

    def get_status(self) -> Dict:
        return {
            "name": self.name,
            "state": self.state.name,
            "ticks_processed": self.ticks_processed,
            "ticks_skipped": self.ticks_skipped,
            "time_processed": self.time_processed,
        }


class SubsystemManager:
    """
    Runs registered subsystems in registration order.

    Registration order is the tick order.
    """

    def __init__(self):
        self.subsystems: Dict[str, Subsystem] = {}
        self.order: List[str] = []

    def add(self, subsystem: Subsystem):
        if subsystem.name in self.subsystems:
            raise ValueError(f"Subsystem already registered: {subsystem.name}")
        self.subsystems[subsystem.name] = subsystem
        self.order.append(subsystem.name)

    def get(self, name: str) -> Optional[Subsystem]:
        return self.subsystems.get(name)

    def tick_all(self, delta_time: float) -> Dict[str, Dict]:
        return {name: self.subsystems[name].tick(delta_time) for name in self.order}

    def save_all(self) -> Dict[str, dict]:
        return {name: self.subsystems[name].save() for name in self.order}

    def load_all(self, state: Dict[str, dict]):
        for name in self.order:
            if name in state:
                self.subsystems[name].load(state[name])

    def get_all_status(self) -> Dict[str, Dict]:
        return {name: self.subsystems[name].get_status() for name in self.order}
