"""
Tests for the genetics engine:
- Founder trait generation per species
- Allele encoding and dominance
- Inheritance, mutation and inbreeding
"""

import pytest

from animal_life.animals import Genetics, Pedigree
from animal_life.config import GeneticsConfig, SimulationConfig
from animal_life.core.context import NotificationKind, SimulationContext
from animal_life.systems.genetics import (
    GeneticsEngine,
    ParentGenes,
    allele_label,
    allele_value,
)


def make_engine(seed: int = 42, **config) -> GeneticsEngine:
    return GeneticsEngine(SimulationContext(SimulationConfig(seed=seed)), GeneticsConfig(**config))


def uniform_genetics(engine: GeneticsEngine, species: str, value: float, **pedigree) -> Genetics:
    """Genetics with every trait at `value` and matching alleles."""
    genetics = Genetics(pedigree=Pedigree(**pedigree))
    for trait in engine.config.traits_for(species):
        genetics.traits[trait] = value
        genetics.dominant_genes.append(engine.make_allele(trait, value, dominant=True))
        genetics.recessive_genes.append(engine.make_allele(trait, value, dominant=False))
    return genetics


# =============================================================================
# FOUNDER TESTS
# =============================================================================

class TestFounders:
    """Tests for first-generation genetics."""

    def test_cow_traits_within_ranges(self):
        """Test founder traits respect each species trait range."""
        engine = make_engine()
        specs = engine.config.traits_for("cow_holstein")

        for _ in range(50):
            genetics = engine.generate_genetics("cow_holstein")
            assert set(genetics.traits) == set(specs)
            for trait, value in genetics.traits.items():
                assert specs[trait].minimum <= value <= specs[trait].maximum

    def test_species_specific_traits(self):
        engine = make_engine()

        assert "egg_production" in engine.generate_genetics("chicken_leghorn").traits
        assert "truffle_finding" in engine.generate_genetics("pig_yorkshire").traits
        assert "egg_production" not in engine.generate_genetics("cow_angus").traits

    def test_unknown_species_uses_base_table(self):
        engine = make_engine()
        genetics = engine.generate_genetics("alpaca_suri")

        assert set(genetics.traits) == set(engine.config.base_traits)

    def test_founder_pedigree(self):
        genetics = make_engine().generate_genetics("sheep_merino")

        assert genetics.pedigree.generation == 1
        assert genetics.pedigree.parents == []
        assert len(genetics.dominant_genes) == len(genetics.traits)
        assert len(genetics.recessive_genes) == len(genetics.traits)

    def test_same_seed_same_genetics(self):
        assert make_engine(seed=9).generate_genetics("cow_holstein").traits == \
            make_engine(seed=9).generate_genetics("cow_holstein").traits


# =============================================================================
# ALLELE TESTS
# =============================================================================

class TestAlleles:
    """Tests for allele tags and dominance resolution."""

    def test_make_allele(self):
        engine = make_engine()
        assert engine.make_allele("milk_production", 0.75, dominant=True) == "milk_production_high_0.85"
        assert engine.make_allele("milk_production", 0.05, dominant=False) == "milk_production_low_0.00"
        assert engine.make_allele("milk_production", 0.95, dominant=True) == "milk_production_high_1.00"

    def test_ruled_traits_use_intensity_scale(self):
        engine = make_engine()
        assert engine.make_allele("size", 0.75, dominant=True) == "size_large_0.85"
        assert engine.make_allele("size", 0.5, dominant=False) == "size_medium_0.40"
        assert engine.make_allele("size", 0.05, dominant=False) == "size_small_0.00"

    def test_allele_value(self):
        assert allele_value("milk_production_high_0.80") == pytest.approx(0.8)
        assert allele_value("coat_pattern_spotted") == 0.5

    def test_allele_label(self):
        assert allele_label("size_large_0.80", "size") == "large"
        assert allele_label("disease_resistance_low_0.40", "disease_resistance") == "low"

    def test_dominance_rule_orders_alleles(self):
        engine = make_engine()
        dominant, recessive = engine.resolve_dominance("size_small_0.40", "size_large_0.80", "size")

        assert dominant == "size_large_0.80"
        assert recessive == "size_small_0.40"

    def test_dominance_rule_decides_inherited_size(self):
        """A large-bodied parent's allele always dominates a small one's."""
        engine = make_engine(mutation_rate=0.0)
        father = uniform_genetics(engine, "cow_holstein", 0.9)
        mother = uniform_genetics(engine, "cow_holstein", 0.1)

        for _ in range(10):
            offspring = engine.generate_genetics(
                "cow_holstein",
                (ParentGenes("animal_0001", father), ParentGenes("animal_0002", mother)),
            )
            dominant = [a for a in offspring.dominant_genes if a.startswith("size_")]
            recessive = [a for a in offspring.recessive_genes if a.startswith("size_")]
            assert [allele_label(a, "size") for a in dominant] == ["large"]
            assert [allele_label(a, "size") for a in recessive] == ["small"]

    def test_mutation_markers_excluded_from_pool(self):
        engine = make_engine()
        genetics = uniform_genetics(engine, "cow_holstein", 0.6)
        genetics.dominant_genes.append("size_mutation_1")

        assert "size_mutation_1" not in engine.trait_alleles(genetics, "size")
        assert len(engine.trait_alleles(genetics, "size")) == 2


# =============================================================================
# INHERITANCE TESTS
# =============================================================================

class TestInheritance:
    """Tests for offspring genetics."""

    def test_offspring_pedigree(self):
        engine = make_engine(mutation_rate=0.0)
        father = uniform_genetics(engine, "cow_holstein", 0.6, generation=2)
        mother = uniform_genetics(engine, "cow_holstein", 0.6, generation=3)

        child = engine.generate_genetics("cow_holstein", (
            ParentGenes("animal_0001", father),
            ParentGenes("animal_0002", mother),
        ))

        assert child.pedigree.father_id == "animal_0001"
        assert child.pedigree.mother_id == "animal_0002"
        assert child.pedigree.generation == 4

    def test_offspring_traits_between_parent_alleles(self):
        """Without mutation a child's trait lies within its parents' allele span."""
        engine = make_engine(mutation_rate=0.0)
        father = uniform_genetics(engine, "chicken_leghorn", 0.6)
        mother = uniform_genetics(engine, "chicken_leghorn", 0.6)

        for _ in range(30):
            child = engine.generate_genetics("chicken_leghorn", (
                ParentGenes("animal_0001", father),
                ParentGenes("animal_0002", mother),
            ))
            for value in child.traits.values():
                assert 0.5 - 1e-9 <= value <= 0.7 + 1e-9
            assert child.mutations == []

    def test_forced_mutation(self):
        engine = make_engine(mutation_rate=1.0)
        events = []
        engine.context.subscribe(events.append)
        father = uniform_genetics(engine, "cow_holstein", 0.5)
        mother = uniform_genetics(engine, "cow_holstein", 0.5)

        child = engine.generate_genetics("cow_holstein", (
            ParentGenes("animal_0001", father),
            ParentGenes("animal_0002", mother),
        ))

        trait_count = len(child.traits)
        assert engine.mutation_count == trait_count
        assert sorted(child.mutations) == sorted(child.traits)
        assert len([g for g in child.dominant_genes if "_mutation_" in g]) == trait_count
        assert len([e for e in events if e.kind == NotificationKind.MUTATION]) == trait_count
        assert all(0.0 <= v <= 1.0 for v in child.traits.values())


# =============================================================================
# RELATEDNESS TESTS
# =============================================================================

class TestRelatedness:
    """Tests for inbreeding and compatibility."""

    def test_siblings_are_related(self):
        engine = make_engine()
        a = uniform_genetics(engine, "cow_holstein", 0.2, father_id="animal_0001", mother_id="animal_0002")
        b = uniform_genetics(engine, "cow_holstein", 0.9, father_id="animal_0001", mother_id="animal_0003")

        assert engine.calculate_inbreeding_level(a, b) == 0.5
        assert engine.are_compatible(a, b, "cow_holstein").reason == "High inbreeding risk"

    def test_parent_and_offspring_are_related(self):
        engine = make_engine()
        parent = uniform_genetics(engine, "cow_holstein", 0.2)
        child = uniform_genetics(engine, "cow_holstein", 0.9, mother_id="animal_0001")

        assert engine.calculate_inbreeding_level(parent, child, "animal_0001", "animal_0005") == 0.5

    def test_founders_scored_by_similarity(self):
        """Founders never share a null parent; only trait similarity counts."""
        engine = make_engine()
        low = uniform_genetics(engine, "cow_holstein", 0.3)
        high = uniform_genetics(engine, "cow_holstein", 0.8)

        assert engine.calculate_inbreeding_level(low, high) == pytest.approx(0.5 * 0.3)
        assert engine.are_compatible(low, high, "cow_holstein").compatible

    def test_identical_founders_too_similar(self):
        engine = make_engine()
        a = uniform_genetics(engine, "cow_holstein", 0.6)
        b = uniform_genetics(engine, "cow_holstein", 0.6)

        assert engine.calculate_inbreeding_level(a, b) == pytest.approx(0.3)
        assert not engine.are_compatible(a, b, "cow_holstein").compatible

    def test_species_compatibility(self):
        engine = make_engine()
        assert engine.species_compatible("cow_holstein", "cow_holstein")
        assert engine.species_compatible("cow_angus", "cow_holstein")
        assert not engine.species_compatible("cow_holstein", "chicken_leghorn")

    def test_breeding_value(self):
        engine = make_engine()
        assert engine.calculate_breeding_value(uniform_genetics(engine, "pig_yorkshire", 0.5)) == pytest.approx(0.5)
        assert engine.calculate_breeding_value(Genetics()) == 0.5

        strong = Genetics(traits={"milk_production": 1.0, "temperament": 0.0})
        assert engine.calculate_breeding_value(strong) == pytest.approx(0.3 / 0.4)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
