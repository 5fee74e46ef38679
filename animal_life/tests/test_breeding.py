"""
Tests for the breeding coordinator:
- Compatibility gates and success rate
- Conception, cooldowns and pregnancy effects
- Delivery of litters
- Persistence of pregnancies
"""

import pytest

from animal_life import AnimalSimulation, SimulationConfig
from animal_life.animals import Activity, Gender, MedicationType, Position
from animal_life.config import (
    BASE_SPECIES,
    DAY_MS,
    HOUR_MS,
    YEAR_MS,
    BreedingConfig,
    HealthConfig,
    Personality,
)
from animal_life.core.context import NotificationKind
from animal_life.core.errors import AnimalNotFoundError

ALWAYS = dict(min_success_rate=1.0, max_success_rate=1.0)
NEVER = dict(min_success_rate=0.0, max_success_rate=0.0)


def make_simulation(seed: int = 42, **breeding) -> AnimalSimulation:
    return AnimalSimulation(
        SimulationConfig(seed=seed),
        breeding_config=BreedingConfig(**breeding),
        health_config=HealthConfig(base_onset_rate=0.0),
    )


def make_pair(sim: AnimalSimulation, species: str = "cow_holstein", age: float = 3 * YEAR_MS,
              health: float = 0.9, happiness: float = 0.9):
    """Two unrelated, mature animals with clearly different traits."""
    stats = {"health": health, "happiness": happiness}
    female = sim.create_animal(species, name="Daisy", gender=Gender.FEMALE, age=age,
                               stats=dict(stats), position=Position(0.0, 0.0, 0.0))
    male = sim.create_animal(species, name="Ferdinand", gender=Gender.MALE, age=age,
                             stats=dict(stats), position=Position(1.0, 0.0, 0.0))
    female.genetics.traits = {trait: 0.8 for trait in female.genetics.traits}
    male.genetics.traits = {trait: 0.3 for trait in male.genetics.traits}
    return female, male


# =============================================================================
# COMPATIBILITY TESTS
# =============================================================================

class TestCompatibility:
    """Tests for can_breed gates."""

    def test_healthy_unrelated_pair(self):
        """Mature, healthy, unrelated opposite-gender animals can breed."""
        sim = make_simulation()
        female, male = make_pair(sim)

        result = sim.can_breed(female.animal_id, male.animal_id)

        assert result.can_breed
        assert result.reason == ""
        assert 0.10 <= result.success_rate <= 0.95
        assert result.gestation_period == 300 * DAY_MS
        assert result.estimated_offspring.to_dict() == {"min": 1, "max": 1, "estimated": 1}

    def test_unknown_animal_raises(self):
        sim = make_simulation()
        female, _ = make_pair(sim)
        with pytest.raises(AnimalNotFoundError):
            sim.can_breed(female.animal_id, "animal_9999")

    def test_same_animal(self):
        sim = make_simulation()
        female, _ = make_pair(sim)
        assert sim.can_breed(female.animal_id, female.animal_id).reason == "Cannot breed animal with itself"

    def test_same_gender(self):
        sim = make_simulation()
        female, male = make_pair(sim)
        male.gender = Gender.FEMALE
        assert sim.can_breed(female.animal_id, male.animal_id).reason == "Both animals are the same gender"

    def test_incompatible_species(self):
        sim = make_simulation()
        cow, _ = make_pair(sim)
        rooster = sim.create_animal("chicken_leghorn", gender=Gender.MALE, age=YEAR_MS)

        result = sim.can_breed(cow.animal_id, rooster.animal_id)
        assert result.reason == "Species not compatible for breeding"

    def test_compatible_breeds(self):
        sim = make_simulation()
        holstein, _ = make_pair(sim)
        angus = sim.create_animal("cow_angus", gender=Gender.MALE, age=3 * YEAR_MS,
                                  stats={"health": 0.9, "happiness": 0.9})
        angus.genetics.traits = {trait: 0.3 for trait in angus.genetics.traits}

        assert sim.can_breed(holstein.animal_id, angus.animal_id).can_breed

    def test_too_young(self):
        sim = make_simulation()
        female, male = make_pair(sim)
        female.age = 100 * DAY_MS

        assert sim.can_breed(female.animal_id, male.animal_id).reason == \
            "Daisy is too young to breed (100/365 days)"

    def test_condition_gates(self):
        sim = make_simulation()
        female, male = make_pair(sim)

        male.stats.set("health", 0.5)
        assert sim.can_breed(female.animal_id, male.animal_id).reason == \
            "Ferdinand is not healthy enough to breed"

        male.stats.set("health", 0.9)
        female.stats.set("happiness", 0.3)
        assert sim.can_breed(female.animal_id, male.animal_id).reason == \
            "Daisy is not happy enough to breed"

    def test_related_pair(self):
        sim = make_simulation()
        female, male = make_pair(sim)
        female.genetics.pedigree.father_id = "animal_0100"
        male.genetics.pedigree.father_id = "animal_0100"

        assert sim.can_breed(female.animal_id, male.animal_id).reason == "High inbreeding risk"


class TestSuccessRate:
    """Tests for the success-rate formula."""

    def test_documented_product(self):
        sim = make_simulation()
        female, male = make_pair(sim)

        expected = 0.7 * 0.95 * 0.98 * 1.0 * (1 - 0.15) * 1.0 * 1.1
        assert sim.breeding.calculate_success_rate(female, male) == pytest.approx(expected)

    def test_always_within_bounds(self):
        sim = make_simulation()
        female, male = make_pair(sim)

        for health in (0.0, 0.3, 0.6, 1.0):
            for happiness in (0.0, 0.5, 1.0):
                for age_days in (10, 1000, 6000):
                    for animal in (female, male):
                        animal.stats.set("health", health)
                        animal.stats.set("happiness", happiness)
                        animal.age = age_days * DAY_MS
                    rate = sim.breeding.calculate_success_rate(female, male)
                    assert 0.10 <= rate <= 0.95

    def test_breeding_season_bonus(self):
        """Goats breed more readily in autumn despite the general autumn dip."""
        sim = make_simulation(max_success_rate=1.0)
        doe, buck = make_pair(sim, "goat_nubian")
        cow, bull = make_pair(sim)
        summer_goat = sim.breeding.calculate_success_rate(doe, buck)
        summer_cow = sim.breeding.calculate_success_rate(cow, bull)

        sim.set_season("autumn")

        assert sim.breeding.calculate_success_rate(doe, buck) == pytest.approx(summer_goat * 0.9 * 1.5)
        assert sim.breeding.calculate_success_rate(cow, bull) == pytest.approx(summer_cow * 0.9)

    def test_age_factor(self):
        sim = make_simulation()
        female, male = make_pair(sim)
        assert sim.breeding.age_factor(female, male) == 1.0

        female.age = 365 * DAY_MS
        male.age = 365 * DAY_MS
        assert sim.breeding.age_factor(female, male) == pytest.approx(0.5)

    def test_litter_estimate_scales_with_health(self):
        sim = make_simulation()
        hen, rooster = make_pair(sim, "chicken_leghorn", age=YEAR_MS, health=0.9)
        assert sim.breeding.estimate_offspring(hen, rooster).estimated == 5

        for animal in (hen, rooster):
            animal.stats.set("health", 0.4)
        assert sim.breeding.estimate_offspring(hen, rooster).estimated == 3


# =============================================================================
# BREEDING TESTS
# =============================================================================

class TestBreeding:
    """Tests for breed outcomes."""

    def test_conception(self):
        sim = make_simulation(**ALWAYS)
        female, male = make_pair(sim)
        hunger = female.stats.hunger

        # Either argument order works
        result = sim.breed(male.animal_id, female.animal_id)

        assert result.success
        assert result.mother == "Daisy"
        assert result.father == "Ferdinand"
        assert result.due_time == sim.now + 300 * DAY_MS
        assert female.is_pregnant
        assert sim.registry.pregnancy_for(female.animal_id) is result.pregnancy
        assert female.stats.hunger == pytest.approx(hunger + 0.1)
        assert female.behavior.activity == Activity.RESTING

    def test_failed_attempt_still_sets_cooldown(self):
        sim = make_simulation(**NEVER)
        female, male = make_pair(sim)

        result = sim.breed(female.animal_id, male.animal_id)

        assert not result.success
        assert result.reason == "Breeding attempt was unsuccessful"
        assert result.next_attempt == sim.now + 365 * DAY_MS
        assert not female.is_pregnant
        assert sim.context.recent(NotificationKind.BREEDING_FAILED)

        again = sim.can_breed(female.animal_id, male.animal_id)
        assert again.reason == "Daisy must wait 365 more days to breed again"

    def test_rejected_attempt_reports_reason(self):
        sim = make_simulation(**ALWAYS)
        female, male = make_pair(sim)
        female.stats.set("health", 0.1)

        result = sim.breed(female.animal_id, male.animal_id)

        assert not result.success
        assert result.reason == "Daisy is not healthy enough to breed"
        assert sim.breeding.cooldowns == {}

    def test_cooldowns_expire(self):
        sim = make_simulation(**NEVER)
        hen, rooster = make_pair(sim, "chicken_leghorn", age=YEAR_MS)
        sim.breed(hen.animal_id, rooster.animal_id)

        sim.context.clock.advance(30 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        assert sim.breeding.cooldowns == {}

    def test_breeding_status(self):
        sim = make_simulation(**ALWAYS)
        female, male = make_pair(sim)
        assert sim.get_breeding_status(female.animal_id)["can_breed"]

        sim.breed(female.animal_id, male.animal_id)
        sim.context.clock.advance(150 * DAY_MS)
        status = sim.get_breeding_status(female.animal_id)

        assert status["is_pregnant"]
        assert not status["can_breed"]
        assert status["pregnancy_progress"] == pytest.approx(0.5)
        assert status["cooldown_remaining"] == 215 * DAY_MS


# =============================================================================
# DELIVERY TESTS
# =============================================================================

class TestDelivery:
    """Tests for litters."""

    def test_litter_when_due(self):
        """A due chicken pregnancy delivers a litter within the species range."""
        sim = make_simulation(**ALWAYS)
        hen, rooster = make_pair(sim, "chicken_leghorn", age=YEAR_MS)
        sim.breed(hen.animal_id, rooster.animal_id)

        sim.context.clock.advance(21 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        litter = BASE_SPECIES["chicken"].litter
        offspring = [sim.get_animal(i) for i in hen.breeding.offspring]
        assert litter.minimum <= len(offspring) <= litter.maximum
        assert rooster.breeding.offspring == hen.breeding.offspring
        assert not hen.is_pregnant
        assert sim.registry.pregnancies() == []

        for chick in offspring:
            assert chick.species == "chicken_leghorn"
            assert chick.genetics.pedigree.mother_id == hen.animal_id
            assert chick.genetics.pedigree.father_id == rooster.animal_id
            assert chick.genetics.pedigree.generation == 2
            assert set(chick.genetics.traits) == set(sim.genetics.config.traits_for("chicken_leghorn"))
            assert all(0.0 <= value <= 1.0 for value in chick.genetics.traits.values())
            assert chick.age == 0.0
            assert chick.care.needs_special_care
            assert chick.stats.energy == 0.3
            assert " Jr." in chick.name

        event = sim.context.recent(NotificationKind.ANIMAL_BIRTH)[0]
        assert event.payload["mother"] == "Daisy"
        assert len(event.payload["offspring"]) == len(offspring)

    def test_post_birth_effects(self):
        sim = make_simulation(**ALWAYS)
        hen, rooster = make_pair(sim, "chicken_leghorn", age=YEAR_MS)
        sim.breed(hen.animal_id, rooster.animal_id)

        sim.context.clock.advance(21 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        assert hen.stats.energy >= 0.2
        recovery = hen.medications_of(MedicationType.POST_BIRTH_RECOVERY, sim.now)
        assert len(recovery) == 1
        assert recovery[0].strength == 0.5

    def test_single_calf_name(self):
        sim = make_simulation(**ALWAYS)
        cow, bull = make_pair(sim)
        sim.breed(cow.animal_id, bull.animal_id)

        sim.context.clock.advance(300 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        calves = [sim.get_animal(i) for i in cow.breeding.offspring]
        assert len(calves) == 1
        assert calves[0].name.endswith(" Jr.")
        assert calves[0].name[:-len(" Jr.")] in BASE_SPECIES["cow"].names

    def test_litter_names_are_numbered(self):
        sim = make_simulation(**ALWAYS)
        sow, boar = make_pair(sim, "pig_yorkshire", age=YEAR_MS)
        sim.breed(sow.animal_id, boar.animal_id)

        sim.context.clock.advance(120 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        piglets = [sim.get_animal(i) for i in sow.breeding.offspring]
        assert len(piglets) > 1
        for index, piglet in enumerate(piglets, 1):
            assert piglet.name.endswith(f" Jr.{index}")

    def test_missing_father(self):
        sim = make_simulation(**ALWAYS)
        hen, rooster = make_pair(sim, "chicken_leghorn", age=YEAR_MS)
        sim.breed(hen.animal_id, rooster.animal_id)
        sim.registry.remove(rooster.animal_id)

        sim.context.clock.advance(21 * DAY_MS)
        sim.breeding.update(HOUR_MS)

        assert hen.breeding.offspring
        chick = sim.get_animal(hen.breeding.offspring[0])
        assert chick.genetics.pedigree.father_id == rooster.animal_id

    def test_personality_inheritance(self):
        sim = make_simulation(personality_inheritance=1.0, **ALWAYS)
        mother, father = make_pair(sim)
        mother.behavior.personality = Personality.FRIENDLY
        father.behavior.personality = Personality.FRIENDLY

        assert sim.breeding.inherit_personality(mother, father) == Personality.FRIENDLY


# =============================================================================
# PERSISTENCE TESTS
# =============================================================================

class TestPersistence:
    """Tests for breeding save/load."""

    def test_round_trip(self):
        sim = make_simulation(**ALWAYS)
        female, male = make_pair(sim)
        sim.breed(female.animal_id, male.animal_id)
        state = sim.breeding.save()

        sim.breeding.load(state)

        assert sim.breeding.save() == state
        assert female.is_pregnant
        assert sim.get_all_pregnancies()[0]["mother_id"] == female.animal_id

    def test_load_drops_unknown_mothers(self):
        sim = make_simulation(**ALWAYS)
        female, male = make_pair(sim)
        sim.breed(female.animal_id, male.animal_id)
        state = sim.breeding.save()
        state["pregnancies"][0]["mother_id"] = "animal_9999"

        sim.breeding.load(state)

        assert sim.registry.pregnancies() == []
        assert not female.is_pregnant


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
