"""
Animal Life — Simulation Engine
Herd orchestrator: tick loop, command surface, daily summaries and snapshots.
"""

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Union
import json
import logging

from .context import SimulationContext
from .module import SubsystemManager
from .registry import AnimalRegistry
from ..animals.animal import Activity, Animal
from ..animals.factory import AnimalFactory
from ..config import (
    DAY_MS,
    BREEDING,
    CARE,
    GENETICS,
    HEALTH,
    PRODUCTION,
    SIMULATION,
    BreedingConfig,
    CareConfig,
    GeneticsConfig,
    HealthConfig,
    Mood,
    ProductionConfig,
    Season,
    Severity,
    SimulationConfig,
    Weather,
)
from ..systems.breeding import BreedingCoordinator, BreedResult, CompatibilityResult
from ..systems.care import CareEngine, CareResult
from ..systems.genetics import GeneticsEngine
from ..systems.health import HealthEngine, HealthReport, TreatmentResult
from ..systems.production import CollectionResult, ProductionEngine, SpecializationResult

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """Current state of the simulation."""
    current_tick: int = 0
    current_day: int = 0

    is_running: bool = False
    is_paused: bool = False


class AnimalSimulation:
    """
    Main simulation engine.

    Manages:
    - The shared context, registry and the four tick-driven subsystems
    - Tick loop (care -> health -> breeding -> production -> behavior)
    - Daily summaries
    - Save/load of the whole herd
    """

    def __init__(self, config: SimulationConfig = SIMULATION,
                 context: Optional[SimulationContext] = None,
                 genetics_config: GeneticsConfig = GENETICS,
                 care_config: CareConfig = CARE,
                 health_config: HealthConfig = HEALTH,
                 breeding_config: BreedingConfig = BREEDING,
                 production_config: ProductionConfig = PRODUCTION):
        self.config = config
        self.context = context or SimulationContext(config)
        self.registry = AnimalRegistry()

        self.genetics = GeneticsEngine(self.context, genetics_config)
        self.factory = AnimalFactory(self.context, self.registry, self.genetics)

        self.care = CareEngine(self.context, self.registry, care_config)
        self.health = HealthEngine(self.context, self.registry, health_config)
        self.breeding = BreedingCoordinator(self.context, self.registry, self.genetics, self.factory,
                                            breeding_config)
        self.production = ProductionEngine(self.context, self.registry, self.health, production_config)

        # Registration order is tick order
        self.subsystems = SubsystemManager()
        for subsystem in (self.care, self.health, self.breeding, self.production):
            self.subsystems.add(subsystem)

        self.state = SimulationState(current_day=int(self.context.now // DAY_MS))
        self.day_summaries: List[Dict] = []

        # Callbacks
        self.on_tick_complete: Optional[Callable] = None
        self.on_day_complete: Optional[Callable] = None

        logger.info("Simulation initialized")

    @property
    def now(self) -> int:
        return self.context.now

    @property
    def current_tick(self) -> int:
        return self.state.current_tick

    @property
    def current_day(self) -> int:
        return self.state.current_day

    # -------------------------------------------------------------------------
    # Animals
    # -------------------------------------------------------------------------

    def create_animal(self, species: str, **overrides) -> Animal:
        """
        Create and register an animal.

        Unknown species are accepted and use default traits and lifespan.
        """
        return self.factory.create(species, **overrides)

    def get_animal(self, animal_id: str) -> Animal:
        return self.registry.get(animal_id)

    def get_all_animals(self) -> List[Animal]:
        return self.registry.all()

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def perform_care(self, animal_id: str, care_type: str,
                     options: Optional[Dict[str, Any]] = None) -> CareResult:
        return self.care.perform_care(animal_id, care_type, options)

    def can_breed(self, parent1_id: str, parent2_id: str) -> CompatibilityResult:
        return self.breeding.can_breed(parent1_id, parent2_id)

    def breed(self, parent1_id: str, parent2_id: str) -> BreedResult:
        return self.breeding.breed(parent1_id, parent2_id)

    def get_breeding_status(self, animal_id: str) -> Dict:
        return self.breeding.get_breeding_status(animal_id)

    def get_all_pregnancies(self) -> List[Dict]:
        return self.breeding.get_all_pregnancies()

    def check_health(self, animal_id: str) -> HealthReport:
        return self.health.check_health(animal_id)

    def treat_disease(self, animal_id: str, treatment_id: str) -> TreatmentResult:
        return self.health.treat_disease(animal_id, treatment_id)

    def apply_preventive_care(self, animal_id: str) -> Dict:
        return self.health.apply_preventive_care(animal_id)

    def infect(self, animal_id: str, disease_id: str, severity: Severity = Severity.MILD) -> bool:
        return self.health.infect(animal_id, disease_id, severity)

    def get_production_stats(self, animal_id: str) -> Dict:
        return self.production.get_production_stats(animal_id)

    def collect_products(self, animal_id: str) -> CollectionResult:
        return self.production.collect_products(animal_id)

    def get_all_pending_products(self):
        return self.production.get_all_pending_products()

    def get_available_specializations(self, animal_id: str) -> List[Dict]:
        return self.production.get_available_specializations(animal_id)

    def apply_specialization(self, animal_id: str, specialization_id: str) -> SpecializationResult:
        return self.production.apply_specialization(animal_id, specialization_id)

    def get_seasonal_behavior(self, animal_id: str) -> Dict:
        """The current season's modifiers for an animal's species."""
        animal = self.registry.get(animal_id)
        behavior = self.production.seasonal_behavior(animal)
        return {"season": self.context.season.name.lower(), **asdict(behavior)}

    # -------------------------------------------------------------------------
    # Environment
    # -------------------------------------------------------------------------

    def set_weather(self, weather: Union[Weather, str]):
        if isinstance(weather, str):
            weather = Weather[weather.upper()]
        self.context.environment.weather = weather
        logger.info(f"Weather is now {weather.name.lower()}")

    def set_season(self, season: Union[Season, str]):
        if isinstance(season, str):
            season = Season[season.upper()]
        self.context.environment.season = season
        logger.info(f"Season is now {season.name.lower()}")

    # -------------------------------------------------------------------------
    # Tick loop
    # -------------------------------------------------------------------------

    def update(self, delta_time: float) -> Dict:
        """
        Advance the clock by `delta_time` ms and run every subsystem once.

        Returns:
            Dictionary of metrics from this tick.
        """
        self.context.clock.advance(delta_time)
        subsystem_metrics = self.subsystems.tick_all(delta_time)
        self.update_behavior()

        tick_data = {
            "tick": self.current_tick,
            "time": self.now,
            "day": self.current_day,
            "animals": len(self.registry),
            "subsystems": subsystem_metrics,
        }
        self.state.current_tick += 1

        day = int(self.now // DAY_MS)
        if day > self.state.current_day:
            self.state.current_day = day
            self._on_day_complete()

        if self.on_tick_complete:
            self.on_tick_complete(tick_data)

        return tick_data

    def tick(self) -> Dict:
        """Execute one tick of the default length."""
        return self.update(self.config.default_tick_ms)

    def run(self, ticks: int, tick_ms: Optional[float] = None):
        """
        Run the simulation for a number of ticks.

        Args:
            ticks: Number of ticks to run.
            tick_ms: Tick length, default_tick_ms if None.
        """
        self.state.is_running = True
        delta = tick_ms or self.config.default_tick_ms

        for _ in range(ticks):
            if self.state.is_paused:
                break
            self.update(delta)

        self.state.is_running = False

    def run_days(self, days: int):
        """Run whole days at the default tick length."""
        self.run(int(days * DAY_MS // self.config.default_tick_ms))

    def pause(self):
        self.state.is_paused = True

    def resume(self):
        self.state.is_paused = False

    def update_behavior(self):
        """Derive mood from stats and pick an activity for every animal."""
        rng = self.context.rng
        for animal in self.registry:
            stats = animal.stats
            behavior = animal.behavior

            if stats.health < 0.3 or stats.happiness < 0.3:
                behavior.mood = Mood.SICK
            elif stats.happiness > 0.8 and stats.health > 0.8:
                behavior.mood = Mood.HAPPY
            elif stats.hunger > 0.8:
                behavior.mood = Mood.HUNGRY
            else:
                behavior.mood = Mood.CONTENT

            pregnancy = self.registry.pregnancy_for(animal.animal_id)
            if pregnancy is not None and pregnancy.progress(self.now) > self.breeding.config.resting_progress:
                behavior.activity = Activity.RESTING
            elif stats.energy < 0.3:
                behavior.activity = Activity.RESTING
            elif stats.hunger > 0.7:
                behavior.activity = Activity.GRAZING
            else:
                behavior.activity = rng.choice([
                    Activity.GRAZING, Activity.RESTING, Activity.SOCIALIZING, Activity.EXPLORING,
                ])

    def _on_day_complete(self):
        animals = self.registry.all()
        summary = {
            "day": self.current_day,
            "animals": len(animals),
            "average_health": sum(a.stats.health for a in animals) / len(animals) if animals else 0.0,
            "average_happiness": sum(a.stats.happiness for a in animals) / len(animals) if animals else 0.0,
            "sick_animals": len(self.registry.all_diseases()),
            "pregnancies": len(self.registry.pregnancies()),
            "pending_products": sum(len(p) for p in self.production.pending.values()),
            "coins": self.context.economy.coins,
        }
        self.day_summaries.append(summary)

        if self.on_day_complete:
            self.on_day_complete(summary)

        if self.current_day % 30 == 0:
            logger.info(f"Day {self.current_day} complete: {summary['animals']} animals, "
                        f"{summary['sick_animals']} sick")

    # -------------------------------------------------------------------------
    # Status and persistence
    # -------------------------------------------------------------------------

    def get_status(self) -> Dict:
        """Get current simulation status."""
        return {
            "tick": self.current_tick,
            "day": self.current_day,
            "time": self.now,
            "weather": self.context.weather.name.lower(),
            "season": self.context.season.name.lower(),
            "is_running": self.state.is_running,
            "is_paused": self.state.is_paused,
            "animals": len(self.registry),
            "coins": self.context.economy.coins,
            "subsystems": self.subsystems.get_all_status(),
        }

    def save(self) -> Dict:
        """Snapshot the whole simulation as plain, JSON-serializable data."""
        version, internal, gauss = self.context.rng.getstate()
        return {
            "time": self.now,
            "tick": self.current_tick,
            "weather": self.context.weather.name,
            "season": self.context.season.name,
            "rng_state": [version, list(internal), gauss],
            "mutation_count": self.genetics.mutation_count,
            "economy": self.context.economy.save(),
            "animals": self.registry.to_records(),
            "subsystems": self.subsystems.save_all(),
            "day_summaries": list(self.day_summaries),
        }

    def load(self, state: Dict):
        """Restore a snapshot produced by save()."""
        self.context.clock.now = state["time"]
        self.state.current_tick = state.get("tick", 0)
        self.state.current_day = int(self.now // DAY_MS)
        self.context.environment.weather = Weather[state.get("weather", Weather.SUNNY.name)]
        self.context.environment.season = Season[state.get("season", Season.SUMMER.name)]

        if "rng_state" in state:
            version, internal, gauss = state["rng_state"]
            self.context.rng.setstate((version, tuple(internal), gauss))
        self.genetics.mutation_count = state.get("mutation_count", 0)

        self.context.economy.load(state.get("economy", {}))
        self.registry.from_records(state.get("animals", []))
        self.subsystems.load_all(state.get("subsystems", {}))
        self.day_summaries = list(state.get("day_summaries", []))

        logger.info(f"Loaded {len(self.registry)} animals at t={self.now}")

    def export_animals_json(self, filepath: Optional[str] = None) -> str:
        """Serialize the herd to JSON, optionally writing it to a file."""
        text = json.dumps(self.registry.to_records(), indent=2)
        if filepath:
            with open(filepath, 'w') as f:
                f.write(text)
            logger.info(f"Exported {len(self.registry)} animals to {filepath}")
        return text

    def import_animals_json(self, text: str) -> List[Animal]:
        """
        Add animals from export_animals_json output.

        Imported animals carry no pregnancy; colliding ids are reissued.
        """
        imported = []
        for record in json.loads(text):
            animal = Animal.from_dict(record)
            if animal.animal_id in self.registry:
                old_id = animal.animal_id
                animal.animal_id = self.registry.new_id()
                logger.warning(f"Imported animal id {old_id} already in use, reissued as {animal.animal_id}")
            animal.breeding.pregnancy_id = None
            self.registry.add(animal)
            imported.append(animal)
        return imported

    def export_log(self, filepath: str):
        """Export a full snapshot to a JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.save(), f, indent=2, default=str)

        logger.info(f"Simulation snapshot exported to {filepath}")
