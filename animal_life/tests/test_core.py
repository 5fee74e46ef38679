"""
Tests for the core framework:
- Economy stores and costs
- Simulation context (clock, notifications)
- Animal registry and its pregnancy/disease indices
- Subsystem base class and manager
"""

import pytest

from animal_life.config import DAY_MS, Severity, SimulationConfig
from animal_life.core.context import Clock, NotificationKind, SimulationContext
from animal_life.core.errors import AnimalNotFoundError, NotFoundError, SimulationError
from animal_life.core.module import Subsystem, SubsystemManager, SubsystemState
from animal_life.core.registry import AnimalRegistry
from animal_life.core.store import Cost, Economy, ResourceType, Store
from animal_life.animals import (
    Animal,
    DiseaseInstance,
    Gender,
    LitterEstimate,
    Position,
    Pregnancy,
    Stats,
)


def make_animal(animal_id: str, gender: Gender = Gender.FEMALE, x: float = 0.0, z: float = 0.0) -> Animal:
    animal = Animal(animal_id, "cow_holstein", f"Cow {animal_id}", gender)
    animal.behavior.position = Position(x, 0.0, z)
    return animal


# =============================================================================
# ECONOMY TESTS
# =============================================================================

class TestStore:
    """Tests for a single store balance."""

    def test_add_and_remove(self):
        """Test basic store operations."""
        store = Store("hay", ResourceType.FEED, current_level=10.0)

        assert store.add(5.0) == 5.0
        assert store.current_level == 15.0
        assert store.remove(20.0) == 15.0
        assert store.is_empty
        assert store.total_inflow == 5.0
        assert store.total_outflow == 15.0

    def test_capacity(self):
        """Test adding past capacity is capped."""
        store = Store("bedding", ResourceType.SUPPLY, current_level=8.0, capacity=10.0)
        assert store.add(5.0) == 2.0
        assert store.current_level == 10.0

    def test_negative_amounts_rejected(self):
        store = Store("coins", ResourceType.CURRENCY)
        with pytest.raises(ValueError):
            store.add(-1.0)
        with pytest.raises(ValueError):
            store.remove(-1.0)

    def test_on_empty_callback(self):
        emptied = []
        store = Store("vaccine", ResourceType.MEDICINE, current_level=1.0, on_empty=emptied.append)
        store.remove(1.0)
        assert emptied == [store]


class TestEconomy:
    """Tests for coin and inventory handling."""

    def test_spend_is_all_or_nothing(self):
        """A cost that cannot be covered in full withdraws nothing."""
        economy = Economy(starting_coins=10.0)
        economy.add_item("brush", 1)

        assert not economy.spend(Cost(coins=5.0, items={"brush": 2}))
        assert economy.coins == 10.0
        assert economy.item_count("brush") == 1

        assert economy.spend(Cost(coins=5.0, items={"brush": 1}))
        assert economy.coins == 5.0
        assert economy.item_count("brush") == 0

    def test_can_afford_reasons(self):
        economy = Economy(starting_coins=2.0)

        affordable, reason = economy.can_afford(Cost(coins=3.0))
        assert not affordable
        assert "coins" in reason

        affordable, reason = economy.can_afford(Cost(items={"toy": 1}))
        assert not affordable
        assert "toy" in reason

        assert economy.can_afford(Cost()) == (True, "")

    def test_credit_and_ledger(self):
        economy = Economy()
        economy.credit(12.5, reason="products:animal_0001")
        economy.spend(Cost(coins=2.5), reason="feed:animal_0001")

        assert economy.coins == 10.0
        assert [entry["kind"] for entry in economy.ledger] == ["credit", "spend"]

    def test_save_load(self):
        economy = Economy(starting_coins=50.0)
        economy.add_item("milk", 4.0)

        restored = Economy()
        restored.load(economy.save())

        assert restored.coins == 50.0
        assert restored.item_count("milk") == 4.0
        assert restored.get("milk").resource_type == ResourceType.SUPPLY


# =============================================================================
# CONTEXT TESTS
# =============================================================================

class TestContext:
    """Tests for the injected clock, RNG and notification bus."""

    def test_clock_advances(self):
        clock = Clock(start_ms=100)
        assert clock.advance(DAY_MS) == 100 + DAY_MS

    def test_clock_rejects_negative_delta(self):
        with pytest.raises(ValueError):
            Clock().advance(-1)

    def test_seeded_rng_is_reproducible(self):
        a = SimulationContext(SimulationConfig(seed=7))
        b = SimulationContext(SimulationConfig(seed=7))
        assert [a.rng.random() for _ in range(5)] == [b.rng.random() for _ in range(5)]

    def test_emit_and_subscribe(self):
        context = SimulationContext(SimulationConfig(seed=1))
        received = []
        context.subscribe(received.append)

        context.emit(NotificationKind.ANIMAL_CREATED, animal_id="animal_0001")

        assert len(received) == 1
        assert received[0].kind == NotificationKind.ANIMAL_CREATED
        assert received[0].to_dict() == {"kind": "animal_created", "time": 0, "animal_id": "animal_0001"}

    def test_notification_history_limit(self):
        context = SimulationContext(SimulationConfig(seed=1, notification_history_limit=3))
        for i in range(5):
            context.emit(NotificationKind.MUTATION, index=i)

        assert len(context.notifications) == 3
        assert [n.payload["index"] for n in context.notifications] == [2, 3, 4]
        assert context.recent(NotificationKind.ANIMAL_BIRTH) == []


# =============================================================================
# REGISTRY TESTS
# =============================================================================

class TestRegistry:
    """Tests for the animal arena and its indices."""

    def test_new_ids_skip_taken(self):
        registry = AnimalRegistry()
        registry.add(make_animal("animal_0001"))

        assert registry.new_id() == "animal_0002"

    def test_get_unknown_raises(self):
        registry = AnimalRegistry()
        with pytest.raises(AnimalNotFoundError) as excinfo:
            registry.get("animal_9999")

        assert isinstance(excinfo.value, NotFoundError)
        assert isinstance(excinfo.value, LookupError)
        assert isinstance(excinfo.value, SimulationError)
        assert registry.find("animal_9999") is None

    def test_duplicate_id_rejected(self):
        registry = AnimalRegistry()
        registry.add(make_animal("animal_0001"))
        with pytest.raises(ValueError):
            registry.add(make_animal("animal_0001"))

    def test_one_pregnancy_per_mother(self):
        registry = AnimalRegistry()
        registry.add(make_animal("animal_0001"))
        registry.add(make_animal("animal_0002", Gender.MALE))

        pregnancy = Pregnancy("pregnancy_0001", "animal_0001", "animal_0002", "cow_holstein",
                              0, 300 * DAY_MS, LitterEstimate(1, 1, 1))
        registry.add_pregnancy(pregnancy)
        assert registry.get("animal_0001").breeding.pregnancy_id == "pregnancy_0001"

        with pytest.raises(ValueError):
            registry.add_pregnancy(pregnancy)

        registry.remove_pregnancy("animal_0001")
        assert registry.get("animal_0001").breeding.pregnancy_id is None
        assert registry.pregnancies() == []

    def test_one_instance_per_disease(self):
        registry = AnimalRegistry()
        registry.add(make_animal("animal_0001"))

        first = DiseaseInstance("mastitis", "Mastitis", Severity.MILD, 0, 7 * DAY_MS)
        second = DiseaseInstance("mastitis", "Mastitis", Severity.SEVERE, 0, 7 * DAY_MS)

        assert registry.add_disease("animal_0001", first)
        assert not registry.add_disease("animal_0001", second)
        assert registry.diseases_of("animal_0001") == [first]

        registry.remove_disease("animal_0001", "mastitis")
        assert registry.all_diseases() == {}

    def test_remove_clears_indices_and_bonds(self):
        registry = AnimalRegistry()
        cow = registry.add(make_animal("animal_0001"))
        friend = registry.add(make_animal("animal_0002"))
        cow.behavior.social_bonds.add(friend.animal_id)
        friend.behavior.social_bonds.add(cow.animal_id)
        registry.add_disease(friend.animal_id, DiseaseInstance("mastitis", "Mastitis", Severity.MILD, 0, DAY_MS))

        registry.remove(friend.animal_id)

        assert friend.animal_id not in registry
        assert cow.behavior.social_bonds == set()
        assert registry.all_diseases() == {}

    def test_neighbors_use_ground_distance(self):
        registry = AnimalRegistry()
        center = registry.add(make_animal("animal_0001", x=0.0, z=0.0))
        registry.add(make_animal("animal_0002", x=3.0, z=4.0))
        registry.add(make_animal("animal_0003", x=6.0, z=0.0))

        assert [a.animal_id for a in registry.neighbors(center, 5.0)] == ["animal_0002"]

    def test_records_round_trip(self):
        registry = AnimalRegistry()
        registry.add(make_animal("animal_0001"))
        registry.add(make_animal("animal_0007", Gender.MALE))

        restored = AnimalRegistry()
        restored.from_records(registry.to_records())

        assert restored.to_records() == registry.to_records()
        assert restored.new_id() == "animal_0008"


class TestStats:
    """Tests for stat clamping."""

    def test_out_of_range_values_clamped(self):
        stats = Stats(health=1.5, hunger=-0.2)
        assert stats.health == 1.0
        assert stats.hunger == 0.0

    def test_adjust_clamps(self):
        stats = Stats()
        assert stats.adjust("energy", 5.0) == 1.0
        assert stats.adjust("energy", -5.0) == 0.0


# =============================================================================
# SUBSYSTEM TESTS
# =============================================================================

class CountingSubsystem(Subsystem):
    """Records the order it was ticked in."""

    def __init__(self, name, context, registry, log):
        super().__init__(context, registry)
        self.name = name
        self.log = log

    def update(self, delta_time):
        self.log.append(self.name)
        return {"delta": delta_time}


class TestSubsystems:
    """Tests for the subsystem contract and tick ordering."""

    def setup_method(self):
        self.context = SimulationContext(SimulationConfig(seed=3))
        self.registry = AnimalRegistry()
        self.log = []

    def test_registration_order_is_tick_order(self):
        manager = SubsystemManager()
        for name in ("care", "health", "breeding", "production"):
            manager.add(CountingSubsystem(name, self.context, self.registry, self.log))

        metrics = manager.tick_all(1000)

        assert self.log == ["care", "health", "breeding", "production"]
        assert metrics["health"]["delta"] == 1000

    def test_duplicate_name_rejected(self):
        manager = SubsystemManager()
        manager.add(CountingSubsystem("care", self.context, self.registry, self.log))
        with pytest.raises(ValueError):
            manager.add(CountingSubsystem("care", self.context, self.registry, self.log))

    def test_paused_subsystem_skips_tick(self):
        subsystem = CountingSubsystem("care", self.context, self.registry, self.log)
        subsystem.pause()

        result = subsystem.tick(1000)

        assert result["state"] == SubsystemState.PAUSED.name
        assert subsystem.ticks_skipped == 1
        assert self.log == []

        subsystem.resume()
        subsystem.tick(1000)
        assert subsystem.ticks_processed == 1
        assert subsystem.time_processed == 1000


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
