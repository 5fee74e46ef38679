"""
Tests for the health engine:
- Disease onset, stages and recovery
- Contagion between neighbors
- Treatments and preventive care
- Health reports and persistence
"""

import pytest

from animal_life import AnimalSimulation, SimulationConfig
from animal_life.animals import DiseaseStage, Medication, MedicationType, Position, Vaccination
from animal_life.config import DAY_MS, HOUR_MS, YEAR_MS, HealthConfig, Severity, Weather
from animal_life.core.context import NotificationKind
from animal_life.core.errors import AnimalNotFoundError, TreatmentNotFoundError


def make_simulation(seed: int = 42, starting_coins: float = 1000.0, **health) -> AnimalSimulation:
    """A simulation with spontaneous onset disabled unless asked for."""
    health.setdefault("base_onset_rate", 0.0)
    return AnimalSimulation(
        SimulationConfig(seed=seed, starting_coins=starting_coins),
        health_config=HealthConfig(**health),
    )


def make_animal(sim: AnimalSimulation, species: str = "cow_holstein", x: float = 0.0, **overrides):
    overrides.setdefault("age", 3 * YEAR_MS)
    return sim.create_animal(species, position=Position(x, 0.0, 0.0), **overrides)


# =============================================================================
# DISEASE LIFECYCLE TESTS
# =============================================================================

class TestDiseaseLifecycle:
    """Tests for infection, stages and recovery."""

    def test_untreated_disease_runs_its_course(self):
        """A 7-day disease is gone after 7 days of ticks and leaves immunity."""
        sim = make_simulation()
        cow = make_animal(sim)
        assert sim.infect(cow.animal_id, "mastitis")

        sim.run(7 * 24)

        assert not sim.registry.has_disease(cow.animal_id, "mastitis")
        immunity = cow.medications_of(MedicationType.DISEASE_IMMUNITY, sim.now)
        assert len(immunity) == 1
        assert immunity[0].target == "mastitis"
        assert immunity[0].strength == 0.8
        assert immunity[0].duration == 180 * DAY_MS
        assert sim.context.recent(NotificationKind.DISEASE_RECOVERED)

    def test_still_sick_before_recovery_time(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis")

        sim.run(7 * 24 - 1)

        assert sim.registry.has_disease(cow.animal_id, "mastitis")

    def test_stage_follows_progress(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis")
        instance = sim.registry.diseases_of(cow.animal_id)[0]

        assert instance.stage == DiseaseStage.ONSET
        assert instance.symptoms == ["lethargy", "mild_discomfort"]

        instance.duration = 3 * DAY_MS
        sim.health.refresh_stage(instance)
        assert instance.stage == DiseaseStage.ACTIVE
        assert instance.symptoms == ["reduced_milk", "lethargy", "fever"]

        instance.duration = 6 * DAY_MS
        sim.health.refresh_stage(instance)
        assert instance.stage == DiseaseStage.RECOVERY

    def test_infect_rules(self):
        sim = make_simulation()
        cow = make_animal(sim)

        assert sim.infect(cow.animal_id, "mastitis")
        assert not sim.infect(cow.animal_id, "mastitis")
        assert not sim.infect(cow.animal_id, "bird_flu")
        assert len(sim.registry.diseases_of(cow.animal_id)) == 1

        with pytest.raises(AnimalNotFoundError):
            sim.infect("animal_9999", "mastitis")

    def test_spontaneous_onset(self):
        """With a certain onset roll, an unprotected animal catches a species disease."""
        sim = make_simulation(base_onset_rate=1.0 / HOUR_MS)
        hen = make_animal(sim, "chicken_leghorn")
        hen.genetics.traits["disease_resistance"] = 0.0

        sim.health.update_health(hen, HOUR_MS)

        assert sim.registry.has_disease(hen.animal_id, "fowl_pox")
        assert sim.context.recent(NotificationKind.DISEASE_ONSET)

    def test_general_protection_blocks_onset(self):
        sim = make_simulation(base_onset_rate=1.0 / HOUR_MS)
        hen = make_animal(sim, "chicken_leghorn")
        hen.genetics.traits["disease_resistance"] = 0.0
        hen.add_medication(Medication(MedicationType.DISEASE_PREVENTION, 1.0, sim.now, DAY_MS))

        sim.health.update_health(hen, HOUR_MS)

        assert sim.registry.diseases_of(hen.animal_id) == []


# =============================================================================
# RISK TESTS
# =============================================================================

class TestRisk:
    """Tests for the risk profile and initial severity."""

    def test_risk_factors_multiply(self):
        sim = make_simulation()
        cow = make_animal(sim, stats={"health": 0.3, "cleanliness": 0.2, "happiness": 0.2})
        cow.genetics.traits["disease_resistance"] = 0.4
        sim.set_weather(Weather.STORMY)

        factors = sim.health.calculate_risk_factors(cow)

        assert factors["poor_health"] == 2.0
        assert factors["poor_hygiene"] == 1.5
        assert factors["stress"] == 1.3
        assert factors["bad_weather"] == 1.2
        assert factors["total"] == pytest.approx(2.0 * 1.5 * 1.3 * 1.2 * (1 - 0.4 * 0.5))

    def test_young_animals_at_risk(self):
        sim = make_simulation()
        calf = make_animal(sim, age=0.0)
        assert "young_age" in sim.health.calculate_risk_factors(calf)

    def test_initial_severity_bands(self):
        sim = make_simulation()
        cow = make_animal(sim)

        cow.genetics.traits["disease_resistance"] = 0.9
        cow.stats.set("health", 1.0)
        assert sim.health.initial_severity(cow) == Severity.MILD

        cow.genetics.traits["disease_resistance"] = 0.1
        cow.stats.set("health", 0.2)
        assert sim.health.initial_severity(cow) == Severity.CRITICAL


# =============================================================================
# CONTAGION TESTS
# =============================================================================

class TestContagion:
    """Tests for disease spread between neighbors."""

    def setup_method(self):
        self.sim = make_simulation(contagion_scale=100.0 / HOUR_MS)
        self.source = make_animal(self.sim, x=0.0)
        self.neighbor = make_animal(self.sim, x=2.0)
        self.distant = make_animal(self.sim, x=15.0)
        self.hen = make_animal(self.sim, "chicken_leghorn", x=1.0)
        for animal in (self.neighbor, self.distant):
            animal.genetics.traits["disease_resistance"] = 0.2
        self.sim.infect(self.source.animal_id, "mastitis")

    def test_spreads_to_same_species_neighbor(self):
        self.sim.update(HOUR_MS)

        assert self.sim.registry.has_disease(self.neighbor.animal_id, "mastitis")
        assert self.sim.health.total_contagions >= 1
        event = self.sim.context.recent(NotificationKind.DISEASE_CONTAGION)[0]
        assert event.payload["source_id"] == self.source.animal_id

    def test_skips_distant_and_other_species(self):
        self.sim.update(HOUR_MS)

        assert not self.sim.registry.has_disease(self.distant.animal_id, "mastitis")
        assert self.sim.registry.diseases_of(self.hen.animal_id) == []

    def test_immune_neighbor_protected(self):
        self.neighbor.add_medication(Medication(
            MedicationType.DISEASE_IMMUNITY, 1.0, self.sim.now, 180 * DAY_MS, "mastitis",
        ))

        self.sim.update(HOUR_MS)

        assert not self.sim.registry.has_disease(self.neighbor.animal_id, "mastitis")


# =============================================================================
# TREATMENT TESTS
# =============================================================================

class TestTreatment:
    """Tests for treatments and their preconditions."""

    def test_unknown_treatment_raises(self):
        sim = make_simulation()
        cow = make_animal(sim)
        with pytest.raises(TreatmentNotFoundError):
            sim.treat_disease(cow.animal_id, "leeches")

    def test_nothing_to_treat(self):
        sim = make_simulation()
        cow = make_animal(sim)

        result = sim.treat_disease(cow.animal_id, "antibiotics")

        assert not result.success
        assert result.reason == "No compatible diseases to treat"

    def test_wrong_treatment_for_disease(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis")

        assert sim.treat_disease(cow.animal_id, "antiviral").reason == "No compatible diseases to treat"
        assert sim.treat_disease(cow.animal_id, "natural_remedy").success

    def test_insufficient_coins(self):
        sim = make_simulation(starting_coins=10)
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis")

        result = sim.treat_disease(cow.animal_id, "antibiotics")

        assert not result.success
        assert result.reason == "Insufficient coins"
        assert sim.context.economy.coins == 10

    def test_treatment_applies_and_charges(self):
        sim = make_simulation()
        cow = make_animal(sim, stats={"health": 0.5})
        sim.infect(cow.animal_id, "mastitis")

        result = sim.treat_disease(cow.animal_id, "antibiotics")

        assert result.success
        assert result.treated == ["Mastitis"]
        assert result.cost == 50
        assert cow.stats.health == pytest.approx(0.6)
        assert sim.context.economy.coins == 950
        instance = sim.registry.diseases_of(cow.animal_id)[0]
        assert instance.current_treatment.treatment_id == "antibiotics"
        assert len(instance.treatment_history) == 1

    def test_severity_steps_down_once(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis", Severity.SEVERE)
        sim.treat_disease(cow.animal_id, "antibiotics")
        instance = sim.registry.diseases_of(cow.animal_id)[0]

        sim.run(3 * 24)
        assert instance.severity == Severity.SEVERE

        sim.run(24)
        assert instance.severity == Severity.MODERATE

        sim.run(2 * 24)
        assert instance.severity == Severity.MODERATE

    def test_requirements(self):
        sim = make_simulation()
        treatment = sim.health.config.treatments["natural_remedy"]
        treatment.requirements = {"min_health": 0.5}
        cow = make_animal(sim, stats={"health": 0.3})
        sim.infect(cow.animal_id, "mastitis")

        assert sim.treat_disease(cow.animal_id, "natural_remedy").reason == "Requirement not met: min_health"

    def test_vaccination_is_preventive(self):
        sim = make_simulation()
        cow = make_animal(sim)

        result = sim.treat_disease(cow.animal_id, "vaccination")

        assert result.success
        assert result.treated == []
        assert sim.health.protection(cow, "mastitis") == pytest.approx(0.7)
        assert sim.context.economy.coins == 975

    def test_vaccine_protects_only_its_targets(self):
        sim = make_simulation()
        pig = make_animal(sim, "pig_yorkshire")
        pig.care.vaccinations.append(Vaccination("poultry_general", sim.now, 0.8, YEAR_MS, ["fowl_pox"]))

        assert sim.health.protection(pig, "swine_flu") == 0.0
        assert sim.health.protection(pig, "general") == 0.0
        assert sim.health.protection(pig, "fowl_pox") == pytest.approx(0.8)

    def test_scheduled_vaccines_carry_targets(self):
        sim = make_simulation()
        cow = make_animal(sim)

        sim.apply_preventive_care(cow.animal_id)

        assert sim.health.protection(cow, "mastitis") == pytest.approx(0.8)
        assert sim.health.protection(cow, "swine_flu") == 0.0

        sim.context.clock.advance(YEAR_MS)
        assert sim.health.protection(cow, "mastitis") == 0.0


# =============================================================================
# REPORT TESTS
# =============================================================================

class TestReports:
    """Tests for health checks and preventive care."""

    def test_check_health(self):
        sim = make_simulation()
        cow = make_animal(sim, stats={"cleanliness": 0.2})
        sim.infect(cow.animal_id, "mastitis")

        report = sim.check_health(cow.animal_id)

        assert report.active_diseases[0]["disease_id"] == "mastitis"
        assert "Treat Mastitis immediately" in report.recommendations
        assert "Schedule routine veterinary checkup" in report.recommendations
        assert {"type": "poor_hygiene", "severity": "medium",
                "description": "Poor hygiene increases disease risk"} in report.health_risks
        assert report.to_dict()["name"] == cow.name

    def test_preventive_care(self):
        sim = make_simulation()
        cow = make_animal(sim, stats={"health": 0.5})

        result = sim.apply_preventive_care(cow.animal_id)

        assert result["success"]
        assert result["vaccinations"] == ["bovine_general", "mastitis_prevention"]
        assert result["message"] == f"{cow.name} received comprehensive preventive care"
        assert cow.stats.health == pytest.approx(0.6)
        assert cow.care.last_vet_visit == sim.now
        assert cow.medications_of(MedicationType.HEALTH_BOOST)

        # Current vaccinations are not repeated
        assert sim.apply_preventive_care(cow.animal_id)["vaccinations"] == []

    def test_production_modifier(self):
        sim = make_simulation()
        cow = make_animal(sim)
        assert sim.health.production_modifier(cow, "milk_production") == 1.0

        sim.infect(cow.animal_id, "mastitis", Severity.MODERATE)
        assert sim.health.production_modifier(cow, "milk_production") == pytest.approx(0.5)
        assert sim.health.production_modifier(cow, "egg_production") == 1.0

    def test_daily_health_history(self):
        sim = make_simulation()
        cow = make_animal(sim)

        sim.run(3 * 24)

        history = sim.health.health_history[cow.animal_id]
        assert [entry["day"] for entry in history] == [0, 1, 2, 3]


# =============================================================================
# PERSISTENCE TESTS
# =============================================================================

class TestPersistence:
    """Tests for health save/load."""

    def test_round_trip(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis", Severity.SEVERE)
        sim.treat_disease(cow.animal_id, "antibiotics")
        sim.run(30)
        state = sim.health.save()

        sim.health.load(state)

        assert sim.health.save() == state

    def test_load_skips_unknown_records(self):
        sim = make_simulation()
        cow = make_animal(sim)
        sim.infect(cow.animal_id, "mastitis")
        state = sim.health.save()
        state["active_diseases"]["animal_9999"] = state["active_diseases"][cow.animal_id]
        state["active_diseases"][cow.animal_id].append(
            dict(state["active_diseases"][cow.animal_id][0], disease_id="unknown_pox"),
        )

        sim.health.load(state)

        assert list(sim.registry.all_diseases()) == [cow.animal_id]
        assert [d.disease_id for d in sim.registry.diseases_of(cow.animal_id)] == ["mastitis"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
