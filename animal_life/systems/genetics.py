"""
Animal Life — Genetics Engine

Trait generation and inheritance:
- Founders sample each trait from a clamped normal distribution
- Offspring draw one allele per parent, resolve dominance, and blend the
  result with the parents' average by the trait's heritability
- Offspring traits mutate with a small fixed probability
- Inbreeding is scored from pedigree links and trait similarity
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple
import math
import re
import logging

from ..animals.animal import Genetics, Pedigree, clamp
from ..config import GeneticsConfig, GENETICS, TraitSpec
from ..core.context import SimulationContext, NotificationKind

logger = logging.getLogger(__name__)


ALLELE_VALUE = re.compile(r"_(\d+\.?\d*)$")


@dataclass
class ParentGenes:
    """One parent's contribution: its id (for the pedigree) and genetics."""
    animal_id: str
    genetics: Genetics


@dataclass
class GeneticCompatibility:
    compatible: bool
    reason: str = ""
    inbreeding_level: float = 0.0


def allele_value(allele: str) -> float:
    """Numeric value encoded at the end of an allele tag, 0.5 if none."""
    match = ALLELE_VALUE.search(allele)
    return float(match.group(1)) if match else 0.5


def allele_label(allele: str, trait: str) -> str:
    """The intensity label of an allele: "size_large_0.80" -> "large"."""
    return allele[len(trait) + 1:].split("_")[0]


class GeneticsEngine:
    """Generates and inherits trait sets, alleles and mutations."""

    def __init__(self, context: SimulationContext, config: GeneticsConfig = GENETICS):
        self.context = context
        self.config = config
        self.mutation_count = 0

    @property
    def rng(self):
        return self.context.rng

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    def generate_genetics(self, species: str,
                          parents: Optional[Tuple[ParentGenes, ParentGenes]] = None) -> Genetics:
        """
        Generate genetics for a new animal.

        Args:
            species: Species key; unknown species use the base trait table.
            parents: (father, mother) for offspring, or None for a founder.
        """
        if parents is None:
            return self._generate_founder(species)
        return self._inherit(species, parents[0], parents[1])

    def _generate_founder(self, species: str) -> Genetics:
        genetics = Genetics(pedigree=Pedigree(generation=1))
        for trait, spec in self.config.traits_for(species).items():
            value = self._sample_trait(spec)
            genetics.traits[trait] = value
            genetics.dominant_genes.append(self.make_allele(trait, value, dominant=True))
            genetics.recessive_genes.append(self.make_allele(trait, value, dominant=False))
        return genetics

    def _sample_trait(self, spec: TraitSpec) -> float:
        """Box-Muller normal sample, clamped to the trait's range."""
        u1 = 1.0 - self.rng.random()    # (0, 1], keeps log() finite
        u2 = self.rng.random()
        normal = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        value = spec.mean + normal * math.sqrt(spec.variance)
        return clamp(value, spec.minimum, spec.maximum)

    def make_allele(self, trait: str, value: float, dominant: bool) -> str:
        offset = self.config.allele_offset
        allele_value = min(1.0, value + offset) if dominant else max(0.0, value - offset)
        return f"{trait}_{self.intensity_label(trait, allele_value, dominant)}_{allele_value:.2f}"

    def intensity_label(self, trait: str, value: float, dominant: bool) -> str:
        """Label on the trait's dominance scale ("large"/"medium"/"small"), else high/low."""
        scale = self.config.dominance_rules.get(trait)
        if not scale:
            return "high" if dominant else "low"
        # Scale runs most dominant first, which is the high end of the value range
        return scale[min(len(scale) - 1, int((1.0 - value) * len(scale)))]

    # -------------------------------------------------------------------------
    # Inheritance
    # -------------------------------------------------------------------------

    def _inherit(self, species: str, father: ParentGenes, mother: ParentGenes) -> Genetics:
        genetics = Genetics(pedigree=Pedigree(
            father_id=father.animal_id,
            mother_id=mother.animal_id,
            generation=max(father.genetics.pedigree.generation, mother.genetics.pedigree.generation) + 1,
        ))

        for trait, spec in self.config.traits_for(species).items():
            value, dominant, recessive = self._inherit_trait(trait, spec, father.genetics, mother.genetics)
            genetics.traits[trait] = value
            genetics.dominant_genes.append(dominant)
            genetics.recessive_genes.append(recessive)

        self._apply_mutations(genetics)
        return genetics

    def _inherit_trait(self, trait: str, spec: TraitSpec,
                       father: Genetics, mother: Genetics) -> Tuple[float, str, str]:
        from_father = self.rng.choice(self.trait_alleles(father, trait))
        from_mother = self.rng.choice(self.trait_alleles(mother, trait))
        dominant, recessive = self.resolve_dominance(from_father, from_mother, trait)

        weight = self.config.dominant_weight
        raw = allele_value(dominant) * weight + allele_value(recessive) * (1.0 - weight)

        parent_average = (father.trait(trait) + mother.trait(trait)) / 2
        heritability = spec.heritability
        value = clamp(raw * heritability + parent_average * (1.0 - heritability))
        return value, dominant, recessive

    def trait_alleles(self, genetics: Genetics, trait: str) -> List[str]:
        """A parent's allele pool for one trait, excluding mutation markers."""
        labels = ("high", "low") + tuple(self.config.dominance_rules.get(trait, []))
        alleles = [
            allele for allele in genetics.dominant_genes + genetics.recessive_genes
            if allele.startswith(f"{trait}_") and allele_label(allele, trait) in labels
        ]
        if not alleles:
            value = genetics.trait(trait)
            alleles = [self.make_allele(trait, value, True), self.make_allele(trait, value, False)]
        return alleles

    def resolve_dominance(self, allele1: str, allele2: str, trait: str) -> Tuple[str, str]:
        """Order two alleles as (dominant, recessive)."""
        rule = self.config.dominance_rules.get(trait)
        if rule:
            label1 = allele_label(allele1, trait)
            label2 = allele_label(allele2, trait)
            if label1 in rule and label2 in rule:
                if rule.index(label1) <= rule.index(label2):
                    return allele1, allele2
                return allele2, allele1

        if self.rng.random() < 0.5:
            return allele1, allele2
        return allele2, allele1

    def _apply_mutations(self, genetics: Genetics):
        magnitude = self.config.mutation_magnitude
        for trait in list(genetics.traits):
            if self.rng.random() < self.config.mutation_rate:
                change = self.rng.uniform(-magnitude, magnitude)
                genetics.traits[trait] = clamp(genetics.traits[trait] + change)

                self.mutation_count += 1
                genetics.dominant_genes.append(f"{trait}_mutation_{self.mutation_count}")
                genetics.mutations.append(trait)

                logger.debug(f"Mutation applied to {trait}: {change:+.3f}")
                self.context.emit(NotificationKind.MUTATION, trait=trait, change=change)

    # -------------------------------------------------------------------------
    # Relatedness
    # -------------------------------------------------------------------------

    def calculate_inbreeding_level(self, genetics1: Genetics, genetics2: Genetics,
                                   animal_id1: Optional[str] = None,
                                   animal_id2: Optional[str] = None) -> float:
        """
        Inbreeding score in [0, related_inbreeding_level].

        Siblings, half-siblings and parent-offspring pairs score the fixed
        related level. Founders have no recorded parents and are never
        treated as related to each other.
        """
        pedigree1 = genetics1.pedigree
        pedigree2 = genetics2.pedigree

        shares_father = pedigree1.father_id is not None and pedigree1.father_id == pedigree2.father_id
        shares_mother = pedigree1.mother_id is not None and pedigree1.mother_id == pedigree2.mother_id
        parent_of_1 = animal_id2 is not None and animal_id2 in pedigree1.parents
        parent_of_2 = animal_id1 is not None and animal_id1 in pedigree2.parents

        if shares_father or shares_mother or parent_of_1 or parent_of_2:
            return self.config.related_inbreeding_level

        traits = [t for t in genetics1.traits if t in genetics2.traits]
        if not traits:
            return 0.0

        similarity = sum(
            (1.0 - abs(genetics1.traits[t] - genetics2.traits[t])) / len(traits) for t in traits
        )
        return similarity * self.config.similarity_weight

    def species_compatible(self, species1: str, species2: str) -> bool:
        if species1 == species2:
            return True
        return any(
            (a == species1 and b == species2) or (a == species2 and b == species1)
            for a, b in self.config.compatible_pairs
        )

    def are_compatible(self, genetics1: Genetics, genetics2: Genetics, species: str,
                       other_species: Optional[str] = None,
                       animal_ids: Tuple[Optional[str], Optional[str]] = (None, None)) -> GeneticCompatibility:
        level = self.calculate_inbreeding_level(genetics1, genetics2, *animal_ids)
        if level > self.config.max_inbreeding:
            return GeneticCompatibility(False, "High inbreeding risk", level)

        if other_species is not None and not self.species_compatible(species, other_species):
            return GeneticCompatibility(False, "Species incompatible", level)

        return GeneticCompatibility(True, "", level)

    def calculate_breeding_value(self, genetics: Genetics) -> float:
        """Weighted average of traits; economically important traits weigh more."""
        weights = self.config.breeding_value_weights
        value = 0.0
        total_weight = 0.0
        for trait, trait_value in genetics.traits.items():
            weight = weights.get(trait, self.config.default_breeding_weight)
            value += trait_value * weight
            total_weight += weight
        return value / total_weight if total_weight > 0 else 0.5
