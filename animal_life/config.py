"""
Animal Life — Configuration
Species catalog, tuning tables, and simulation parameters.

Every hand-tuned threshold lives here as data so hosts and tests can pass
adjusted copies into the engines instead of patching constants.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from enum import Enum, auto


HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS
YEAR_MS = 365 * DAY_MS


class Weather(Enum):
    """Weather snapshot supplied by the host."""
    SUNNY = auto()
    RAINY = auto()
    STORMY = auto()
    SNOWY = auto()
    WINDY = auto()


class Season(Enum):
    """Season snapshot supplied by the host."""
    SPRING = auto()
    SUMMER = auto()
    AUTUMN = auto()
    WINTER = auto()


class Personality(Enum):
    """Inherited temperament of an animal."""
    FRIENDLY = auto()
    SHY = auto()
    AGGRESSIVE = auto()
    CALM = auto()
    PLAYFUL = auto()


class Mood(Enum):
    """Mood derived from stats each tick."""
    HAPPY = auto()
    CONTENT = auto()
    HUNGRY = auto()
    SAD = auto()
    SICK = auto()
    ANGRY = auto()


class Severity(Enum):
    """Disease severity bands, mildest first."""
    MILD = 1
    MODERATE = 2
    SEVERE = 3
    CRITICAL = 4

    def step_down(self) -> "Severity":
        return Severity(max(1, self.value - 1))


# =============================================================================
# SPECIES CATALOG
# =============================================================================

@dataclass
class LitterSize:
    minimum: int
    maximum: int
    typical: int


@dataclass
class ProductSpec:
    """What an animal produces and how the product spoils."""
    product_type: str
    name: str
    base_value: float           # Coins per unit at standard quality
    base_quantity: float
    frequency_ms: int           # Base interval between productions
    energy_cost: float = 0.05
    spoilage_rate: float = 0.0  # 0 = never spoils
    time_to_spoil_ms: Optional[int] = None

    @property
    def spoils(self) -> bool:
        return self.spoilage_rate > 0 and self.time_to_spoil_ms is not None


@dataclass
class VaccineSpec:
    """A scheduled vaccine and the disease ids it protects against."""
    name: str
    strength: float
    duration_ms: int
    targets: List[str] = field(default_factory=list)


@dataclass
class SeasonalBehavior:
    """Per-species seasonal modifiers; 1.0 everywhere means no change."""
    appetite: float = 1.0           # Hunger decay multiplier
    production_speed: float = 1.0   # Production interval is divided by this
    production_quantity: float = 1.0
    breeding_bonus: float = 1.0     # Success-rate multiplier in breeding season


NO_SEASONAL_CHANGE = SeasonalBehavior()


@dataclass
class SpeciesProfile:
    """Biology shared by every breed of a base species."""
    base_species: str
    lifespan_days: int = 2555
    gestation_days: int = 150
    litter: LitterSize = field(default_factory=lambda: LitterSize(1, 2, 1))
    breeding_cooldown_days: int = 180
    weaning_days: int = 90
    optimal_breeding_age: Tuple[int, int] = (365, 1825)
    min_production_age_days: int = 365
    production_trait: str = "production_efficiency"
    product: Optional[ProductSpec] = None
    production_age_curve: Tuple[int, int, int] = (365, 1460, 2920)  # start, peak end, decline end
    names: List[str] = field(default_factory=lambda: ["Friend"])
    vaccines: List[VaccineSpec] = field(default_factory=list)
    secondary_product: Optional[ProductSpec] = None
    seasonal: Dict[Season, SeasonalBehavior] = field(default_factory=dict)

    def seasonal_behavior(self, season: Season) -> SeasonalBehavior:
        return self.seasonal.get(season, NO_SEASONAL_CHANGE)

    def vaccine(self, name: str) -> Optional[VaccineSpec]:
        return next((v for v in self.vaccines if v.name == name), None)


@dataclass
class BreedProfile:
    """A concrete "base_breed" species key."""
    species: str
    display_name: str
    base_species: str
    maturity_days: int = 365
    male_ratio: float = 0.5

    @property
    def female_ratio(self) -> float:
        return 1.0 - self.male_ratio


BASE_SPECIES: Dict[str, SpeciesProfile] = {
    "cow": SpeciesProfile(
        base_species="cow",
        lifespan_days=2555,
        gestation_days=300,
        litter=LitterSize(1, 1, 1),
        breeding_cooldown_days=365,
        weaning_days=180,
        optimal_breeding_age=(730, 2190),
        min_production_age_days=730,
        production_trait="milk_production",
        product=ProductSpec("milk", "Milk", 5, 2.0, 12 * HOUR_MS, 0.05, 0.002, 24 * HOUR_MS),
        production_age_curve=(1095, 2190, 4380),
        names=["Bessie", "Moobert", "Daisy", "Ferdinand", "Clarabelle"],
        vaccines=[
            VaccineSpec("bovine_general", 0.8, YEAR_MS, ["mastitis"]),
            VaccineSpec("mastitis_prevention", 0.7, 180 * DAY_MS, ["mastitis"]),
        ],
    ),
    "chicken": SpeciesProfile(
        base_species="chicken",
        lifespan_days=2190,
        gestation_days=21,
        litter=LitterSize(1, 8, 4),
        breeding_cooldown_days=30,
        weaning_days=42,
        optimal_breeding_age=(180, 1095),
        min_production_age_days=150,
        production_trait="egg_production",
        product=ProductSpec("eggs", "Eggs", 2, 1.0, 24 * HOUR_MS, 0.03, 0.001, 48 * HOUR_MS),
        production_age_curve=(180, 730, 1460),
        names=["Henrietta", "Clucky", "Feathers", "Pecky", "Scrambles"],
        vaccines=[VaccineSpec("poultry_general", 0.75, 180 * DAY_MS, ["fowl_pox"])],
    ),
    "pig": SpeciesProfile(
        base_species="pig",
        lifespan_days=2920,
        gestation_days=120,
        litter=LitterSize(4, 12, 8),
        breeding_cooldown_days=180,
        weaning_days=56,
        optimal_breeding_age=(270, 1460),
        min_production_age_days=365,
        production_trait="truffle_finding",
        product=ProductSpec("truffles", "Truffles", 8, 1.0, 48 * HOUR_MS, 0.08, 0.0005, 72 * HOUR_MS),
        production_age_curve=(365, 1095, 2190),
        names=["Babe", "Porky", "Hamlet", "Peppa", "Snorts"],
        vaccines=[VaccineSpec("swine_general", 0.8, YEAR_MS, ["swine_flu"])],
    ),
    "sheep": SpeciesProfile(
        base_species="sheep",
        lifespan_days=2555,
        gestation_days=150,
        litter=LitterSize(1, 3, 2),
        breeding_cooldown_days=180,
        weaning_days=120,
        optimal_breeding_age=(365, 1825),
        min_production_age_days=365,
        production_trait="wool_production",
        product=ProductSpec("wool", "Wool", 15, 3.0, 30 * DAY_MS, 0.02),
        production_age_curve=(365, 1825, 3650),
        names=["Woolly", "Shaun", "Dolly", "Fluffy", "Baxter"],
        secondary_product=ProductSpec("sheep_milk", "Sheep Milk", 4, 0.8, 12 * HOUR_MS, 0.03, 0.002, 24 * HOUR_MS),
        seasonal={
            Season.SPRING: SeasonalBehavior(appetite=1.2, production_speed=1.3, breeding_bonus=1.5),
        },
    ),
    "horse": SpeciesProfile(
        base_species="horse",
        lifespan_days=10950,
        gestation_days=336,
        litter=LitterSize(1, 1, 1),
        breeding_cooldown_days=365,
        weaning_days=180,
        optimal_breeding_age=(1095, 5475),
        min_production_age_days=1095,
        production_trait="work_efficiency",
        product=ProductSpec("work_hours", "Work Hours", 10, 8.0, 24 * HOUR_MS, 0.1),
        production_age_curve=(1460, 3650, 7300),
        names=["Thunder", "Spirit", "Star", "Midnight", "Blaze"],
        secondary_product=ProductSpec("manure", "Manure", 1, 3.0, 24 * HOUR_MS, 0.02),
        seasonal={
            Season.WINTER: SeasonalBehavior(appetite=1.3, production_quantity=0.8),
        },
    ),
    "goat": SpeciesProfile(
        base_species="goat",
        lifespan_days=2920,
        gestation_days=150,
        litter=LitterSize(1, 4, 2),
        breeding_cooldown_days=180,
        weaning_days=90,
        optimal_breeding_age=(365, 2190),
        min_production_age_days=365,
        production_trait="milk_production",
        product=ProductSpec("goat_milk", "Goat Milk", 6, 1.5, 12 * HOUR_MS, 0.04, 0.002, 24 * HOUR_MS),
        production_age_curve=(365, 1460, 2920),
        names=["Billy", "Gruff", "Nan", "Buck", "Pepper"],
        secondary_product=ProductSpec("land_clearing", "Land Clearing", 2, 2.0, 24 * HOUR_MS, 0.05),
        seasonal={
            Season.AUTUMN: SeasonalBehavior(breeding_bonus=1.5),
        },
    ),
    "duck": SpeciesProfile(
        base_species="duck",
        lifespan_days=2555,
        gestation_days=28,
        litter=LitterSize(2, 12, 6),
        breeding_cooldown_days=30,
        weaning_days=56,
        optimal_breeding_age=(180, 1460),
        min_production_age_days=180,
        production_trait="egg_production",
        product=ProductSpec("duck_eggs", "Duck Eggs", 3, 1.0, 24 * HOUR_MS, 0.03, 0.001, 48 * HOUR_MS),
        production_age_curve=(180, 730, 1460),
        names=["Quackers", "Puddles", "Splash", "Waddles", "Donald"],
        secondary_product=ProductSpec("feathers", "Feathers", 3, 0.5, 30 * DAY_MS, 0.01),
        seasonal={
            Season.SPRING: SeasonalBehavior(production_quantity=1.3),
            Season.WINTER: SeasonalBehavior(production_quantity=0.5),
        },
    ),
}

DEFAULT_SPECIES = SpeciesProfile(base_species="default")


SPECIES: Dict[str, BreedProfile] = {
    breed.species: breed for breed in [
        BreedProfile("cow_holstein", "Holstein Cow", "cow", maturity_days=365, male_ratio=0.1),
        BreedProfile("cow_angus", "Angus Cow", "cow", maturity_days=365, male_ratio=0.3),
        BreedProfile("chicken_leghorn", "Leghorn Chicken", "chicken", maturity_days=150, male_ratio=0.1),
        BreedProfile("chicken_rhode_island", "Rhode Island Red", "chicken", maturity_days=150, male_ratio=0.15),
        BreedProfile("pig_yorkshire", "Yorkshire Pig", "pig", maturity_days=240, male_ratio=0.3),
        BreedProfile("pig_hampshire", "Hampshire Pig", "pig", maturity_days=240, male_ratio=0.3),
        BreedProfile("sheep_suffolk", "Suffolk Sheep", "sheep", maturity_days=365, male_ratio=0.2),
        BreedProfile("sheep_merino", "Merino Sheep", "sheep", maturity_days=365, male_ratio=0.2),
        BreedProfile("horse_quarter", "Quarter Horse", "horse", maturity_days=1095, male_ratio=0.4),
        BreedProfile("goat_nubian", "Nubian Goat", "goat", maturity_days=365, male_ratio=0.15),
        BreedProfile("duck_pekin", "Pekin Duck", "duck", maturity_days=180, male_ratio=0.3),
    ]
}


def base_species_of(species: str) -> str:
    """"cow_holstein" -> "cow"."""
    return species.split("_")[0]


def get_species_profile(species: str) -> SpeciesProfile:
    """Profile for a species key or base name, falling back to defaults."""
    return BASE_SPECIES.get(base_species_of(species), DEFAULT_SPECIES)


def get_breed(species: str) -> BreedProfile:
    breed = SPECIES.get(species)
    if breed is None:
        breed = BreedProfile(species, species.replace("_", " ").title(), base_species_of(species))
    return breed


# =============================================================================
# SIMULATION
# =============================================================================

@dataclass
class SimulationConfig:
    """Clock, RNG and bookkeeping parameters."""
    seed: Optional[int] = None
    start_time_ms: int = 0
    default_tick_ms: int = HOUR_MS
    starting_coins: float = 1000.0
    notification_history_limit: int = 500
    health_history_days: int = 30
    pen_size: float = 20.0      # Newly created animals are scattered over this square


# =============================================================================
# GENETICS
# =============================================================================

@dataclass
class TraitSpec:
    minimum: float
    maximum: float
    mean: float
    variance: float
    heritability: float


@dataclass
class GeneticsConfig:
    """Trait tables and inheritance thresholds."""

    base_traits: Dict[str, TraitSpec] = field(default_factory=lambda: {
        "milk_production": TraitSpec(0.2, 1.0, 0.6, 0.1, 0.7),
        "disease_resistance": TraitSpec(0.1, 0.9, 0.5, 0.15, 0.4),
        "growth_rate": TraitSpec(0.3, 1.0, 0.7, 0.1, 0.6),
        "temperament": TraitSpec(0.0, 1.0, 0.5, 0.2, 0.3),
        "size": TraitSpec(0.4, 1.0, 0.7, 0.1, 0.8),
    })

    # Per base species: trait -> replacement spec (adds the trait if missing)
    species_traits: Dict[str, Dict[str, TraitSpec]] = field(default_factory=lambda: {
        "cow": {"milk_production": TraitSpec(0.2, 1.0, 0.8, 0.15, 0.7)},
        "chicken": {"egg_production": TraitSpec(0.3, 1.0, 0.7, 0.1, 0.6)},
        "pig": {"truffle_finding": TraitSpec(0.1, 0.9, 0.4, 0.2, 0.5)},
        "sheep": {"wool_production": TraitSpec(0.3, 1.0, 0.6, 0.1, 0.6)},
        "horse": {"work_efficiency": TraitSpec(0.3, 1.0, 0.6, 0.1, 0.5)},
    })

    # Trait -> intensity labels, most dominant (highest values) first
    dominance_rules: Dict[str, List[str]] = field(default_factory=lambda: {
        "size": ["large", "medium", "small"],
    })

    compatible_pairs: List[Tuple[str, str]] = field(default_factory=lambda: [
        ("cow_holstein", "cow_angus"),
        ("chicken_leghorn", "chicken_rhode_island"),
        ("pig_yorkshire", "pig_hampshire"),
        ("sheep_suffolk", "sheep_merino"),
    ])

    breeding_value_weights: Dict[str, float] = field(default_factory=lambda: {
        "milk_production": 0.3,
        "disease_resistance": 0.2,
        "growth_rate": 0.2,
        "temperament": 0.1,
        "size": 0.1,
        "egg_production": 0.3,
        "truffle_finding": 0.3,
    })
    default_breeding_weight: float = 0.1

    allele_offset: float = 0.1
    dominant_weight: float = 0.7
    mutation_rate: float = 0.05
    mutation_magnitude: float = 0.1
    related_inbreeding_level: float = 0.5
    similarity_weight: float = 0.3
    max_inbreeding: float = 0.25

    def traits_for(self, species: str) -> Dict[str, TraitSpec]:
        traits = dict(self.base_traits)
        traits.update(self.species_traits.get(base_species_of(species), {}))
        return traits


# =============================================================================
# CARE
# =============================================================================

@dataclass
class FeedType:
    quality: float
    cost: float
    preferences: Dict[str, float] = field(default_factory=dict)
    default_preference: float = 1.0


@dataclass
class CareConfig:
    """Care actions, decay rates and effectiveness modifiers."""

    feed_types: Dict[str, FeedType] = field(default_factory=lambda: {
        "basic": FeedType(0.5, 1),
        "premium_hay": FeedType(0.8, 3, {"cow": 1.2, "sheep": 1.1, "horse": 1.3}, 0.9),
        "grain_mix": FeedType(0.7, 2, {"chicken": 1.3, "pig": 1.2, "duck": 1.2}, 0.8),
        "organic_feed": FeedType(0.9, 5, {}, 1.1),
    })
    reference_feed: str = "basic"
    unknown_feed_quality: float = 0.5

    mood_modifiers: Dict[Mood, float] = field(default_factory=lambda: {
        Mood.HAPPY: 1.2,
        Mood.CONTENT: 1.0,
        Mood.HUNGRY: 1.0,
        Mood.SAD: 0.8,
        Mood.SICK: 0.6,
        Mood.ANGRY: 0.5,
    })
    personality_modifiers: Dict[Personality, float] = field(default_factory=lambda: {
        Personality.FRIENDLY: 1.1,
        Personality.SHY: 0.9,
        Personality.AGGRESSIVE: 0.8,
        Personality.CALM: 1.0,
        Personality.PLAYFUL: 1.05,
    })
    weather_modifiers: Dict[Weather, float] = field(default_factory=lambda: {
        Weather.SUNNY: 1.0,
        Weather.RAINY: 0.9,
        Weather.STORMY: 0.7,
        Weather.SNOWY: 0.8,
        Weather.WINDY: 0.95,
    })
    season_modifiers: Dict[Season, float] = field(default_factory=lambda: {
        Season.SPRING: 1.1,
        Season.SUMMER: 1.0,
        Season.AUTUMN: 1.0,
        Season.WINTER: 0.9,
    })
    min_effectiveness: float = 0.3
    max_effectiveness: float = 2.0

    # Need decay per ms, calibrated in simulated hours
    decay_rates: Dict[str, float] = field(default_factory=lambda: {
        "hunger": 0.04 / HOUR_MS,
        "cleanliness": 0.02 / HOUR_MS,
        "energy": 0.012 / HOUR_MS,
        "social": 0.008 / HOUR_MS,
    })
    personality_decay: Dict[Personality, Dict[str, float]] = field(default_factory=lambda: {
        Personality.FRIENDLY: {"social": 0.8},
        Personality.SHY: {"social": 1.2},
        Personality.AGGRESSIVE: {"social": 1.3, "energy": 1.1},
        Personality.CALM: {"energy": 0.9},
        Personality.PLAYFUL: {"energy": 1.2, "social": 0.9},
    })
    weather_decay: Dict[Weather, float] = field(default_factory=lambda: {
        Weather.SUNNY: 1.0,
        Weather.RAINY: 1.1,
        Weather.STORMY: 1.3,
        Weather.SNOWY: 1.2,
        Weather.WINDY: 1.1,
    })
    young_age_days: int = 30
    young_decay_factor: float = 1.5
    crowding_radius: float = 3.0
    crowding_threshold: int = 2
    crowding_factor: float = 1.2

    good_care_health_rate: float = 0.004 / HOUR_MS
    poor_care_health_rate: float = 0.012 / HOUR_MS
    old_age_health_rate: float = 0.008 / HOUR_MS
    old_age_ratio: float = 0.8

    happiness_weights: Dict[str, float] = field(default_factory=lambda: {
        "health": 0.3,
        "hunger": 0.2,      # Applied to (1 - hunger)
        "cleanliness": 0.2,
        "energy": 0.1,
        "social": 0.2,
    })
    bond_bonus_per_bond: float = 0.02
    max_bond_bonus: float = 0.1
    personality_happiness: Dict[Personality, float] = field(default_factory=lambda: {
        Personality.FRIENDLY: 1.1,
        Personality.SHY: 0.9,
        Personality.AGGRESSIVE: 0.8,
        Personality.CALM: 1.0,
        Personality.PLAYFUL: 1.2,
    })

    default_prevention_days: int = 7
    default_boost_hours: int = 24
    default_mood_boost_hours: int = 12


# =============================================================================
# HEALTH
# =============================================================================

@dataclass
class DiseaseDefinition:
    disease_id: str
    name: str
    species: List[str]
    symptoms: List[str]
    effects: Dict[str, float]       # Stat deltas plus "contagiousness"
    recovery_days: int

    @property
    def recovery_time_ms(self) -> int:
        return self.recovery_days * DAY_MS


@dataclass
class TreatmentDefinition:
    treatment_id: str
    name: str
    treats: List[str]               # Disease ids, "all", or "preventive"
    effectiveness: float
    duration_ms: int
    cost: float
    effects: Dict[str, float] = field(default_factory=dict)
    requirements: Dict[str, object] = field(default_factory=dict)
    prevention_strength: float = 0.0

    @property
    def is_preventive(self) -> bool:
        return bool(self.treats) and self.treats[0] == "preventive"


@dataclass
class HealthConfig:
    """Disease catalogue, treatments and risk model."""

    diseases: Dict[str, DiseaseDefinition] = field(default_factory=lambda: {
        d.disease_id: d for d in [
            DiseaseDefinition(
                "mastitis", "Mastitis", ["cow", "goat", "sheep"],
                ["reduced_milk", "lethargy", "fever"],
                {"milk_production": -0.5, "happiness": -0.3, "contagiousness": 0.2},
                7,
            ),
            DiseaseDefinition(
                "fowl_pox", "Fowl Pox", ["chicken", "duck"],
                ["skin_lesions", "reduced_appetite", "lethargy"],
                {"egg_production": -0.3, "happiness": -0.2, "contagiousness": 0.3},
                14,
            ),
            DiseaseDefinition(
                "swine_flu", "Swine Flu", ["pig"],
                ["coughing", "fever", "reduced_appetite"],
                {"truffle_finding": -0.6, "health": -0.4, "happiness": -0.5, "contagiousness": 0.5},
                21,
            ),
        ]
    })

    treatments: Dict[str, TreatmentDefinition] = field(default_factory=lambda: {
        t.treatment_id: t for t in [
            TreatmentDefinition("antibiotics", "Antibiotics", ["mastitis", "swine_flu"],
                                0.8, 7 * DAY_MS, 50, {"health": 0.1}),
            TreatmentDefinition("vaccination", "Vaccination", ["preventive"],
                                0.8, YEAR_MS, 25, {}, prevention_strength=0.7),
            TreatmentDefinition("antiviral", "Antiviral", ["fowl_pox"],
                                0.6, 14 * DAY_MS, 30, {"health": 0.05}),
            TreatmentDefinition("natural_remedy", "Natural Remedy", ["all"],
                                0.4, 14 * DAY_MS, 15, {"health": 0.03, "happiness": 0.1}),
        ]
    })

    severity_multipliers: Dict[Severity, float] = field(default_factory=lambda: {
        Severity.MILD: 0.5,
        Severity.MODERATE: 1.0,
        Severity.SEVERE: 1.5,
        Severity.CRITICAL: 2.0,
    })
    # Upper bounds of the (1 - resistance) + (1 - health) score
    severity_bands: List[Tuple[float, Severity]] = field(default_factory=lambda: [
        (0.5, Severity.MILD),
        (1.0, Severity.MODERATE),
        (1.5, Severity.SEVERE),
    ])

    onset_stage_end: float = 0.25
    active_stage_end: float = 0.75
    onset_symptoms: List[str] = field(default_factory=lambda: ["lethargy", "mild_discomfort"])
    recovery_symptoms: List[str] = field(default_factory=lambda: ["improving", "restlessness"])

    base_onset_rate: float = 0.0005 / HOUR_MS     # Before risk scaling
    effect_scale: float = 0.004 / HOUR_MS
    poor_health_threshold: float = 0.5
    poor_health_factor: float = 2.0
    poor_hygiene_threshold: float = 0.3
    poor_hygiene_factor: float = 1.5
    stress_threshold: float = 0.4
    stress_factor: float = 1.3
    young_age_days: int = 30
    young_factor: float = 1.4
    old_age_ratio: float = 0.8
    old_factor: float = 1.6
    resistance_discount: float = 0.5
    storm_factor: float = 1.2
    high_risk_threshold: float = 1.5

    contagion_radius: float = 5.0
    contagion_scale: float = 0.01 / HOUR_MS

    recovery_health_bonus: float = 0.1
    recovery_happiness_bonus: float = 0.05
    immunity_strength: float = 0.8
    immunity_duration_ms: int = 180 * DAY_MS

    treatment_step_down_progress: float = 0.5
    treatment_health_scale: float = 0.004 / HOUR_MS

    young_frailty_rate: float = 0.0002 / HOUR_MS
    old_age_decline_rate: float = 0.004 / HOUR_MS

    vet_interval_ms: int = 90 * DAY_MS
    booster_strength: float = 0.05
    booster_duration_ms: int = 30 * DAY_MS


# =============================================================================
# BREEDING
# =============================================================================

@dataclass
class BreedingConfig:
    """Breeding gates, success-rate factors and newborn defaults."""
    min_health: float = 0.6
    min_happiness: float = 0.4
    base_success_rate: float = 0.7
    min_success_rate: float = 0.10
    max_success_rate: float = 0.95
    min_inbreeding_factor: float = 0.3

    base_care_quality: float = 0.7
    fed_window_ms: int = DAY_MS
    fed_bonus: float = 0.1
    cleaned_window_ms: int = 2 * DAY_MS
    cleaned_bonus: float = 0.05

    weather_modifiers: Dict[Weather, float] = field(default_factory=lambda: {
        Weather.SUNNY: 1.1,
        Weather.RAINY: 0.9,
        Weather.STORMY: 0.7,
        Weather.SNOWY: 0.8,
        Weather.WINDY: 0.95,
    })
    season_modifiers: Dict[Season, float] = field(default_factory=lambda: {
        Season.SPRING: 1.2,
        Season.SUMMER: 1.0,
        Season.AUTUMN: 0.9,
        Season.WINTER: 0.7,
    })

    healthy_litter_bonus: float = 1.2
    sickly_litter_penalty: float = 0.8

    pregnancy_hunger: float = 0.1
    pregnancy_energy: float = 0.1
    late_progress: float = 0.5
    resting_progress: float = 0.8
    late_hunger_rate: float = 0.01 / HOUR_MS
    late_energy_rate: float = 0.005 / HOUR_MS

    personality_inheritance: float = 0.7
    newborn_energy: float = 0.3
    newborn_hunger: float = 0.8

    mother_energy_loss: float = 0.3
    mother_min_energy: float = 0.2
    mother_happiness_gain: float = 0.2
    mother_health_loss: float = 0.1
    recovery_production_penalty: float = 0.5
    recovery_duration_ms: int = 7 * DAY_MS


# =============================================================================
# PRODUCTION
# =============================================================================

@dataclass
class QualityTier:
    name: str
    upper_bound: float
    multiplier: float


@dataclass
class Specialization:
    """A certified role that multiplies an animal's production."""
    specialization_id: str
    name: str
    species: List[str]                                      # Base species
    product_types: List[str] = field(default_factory=list)  # Boosted products, empty means all
    trait_minimums: Dict[str, float] = field(default_factory=dict)
    stat_minimums: Dict[str, float] = field(default_factory=dict)
    quantity_multiplier: float = 1.0
    quality_multiplier: float = 1.0
    interval_multiplier: float = 1.0                        # < 1 produces sooner
    value_multiplier: float = 1.0
    cost: float = 0.0
    items: Dict[str, float] = field(default_factory=dict)   # Consumed on unlock

    def boosts(self, product_type: str) -> bool:
        return not self.product_types or product_type in self.product_types


@dataclass
class ProductionConfig:
    """Production rate, quantity, quality and value tables."""
    min_interval_ms: int = HOUR_MS
    min_trait: float = 0.5

    season_rate_modifiers: Dict[Season, float] = field(default_factory=lambda: {
        Season.SPRING: 0.9,
        Season.SUMMER: 1.0,
        Season.AUTUMN: 1.0,
        Season.WINTER: 1.2,
    })
    weather_quality_bonus: Dict[Weather, float] = field(default_factory=lambda: {
        Weather.SUNNY: 0.05,
        Weather.RAINY: -0.02,
        Weather.STORMY: -0.1,
        Weather.SNOWY: -0.05,
        Weather.WINDY: -0.02,
    })
    season_quality_bonus: Dict[Season, float] = field(default_factory=lambda: {
        Season.SPRING: 0.1,
        Season.SUMMER: 0.05,
        Season.AUTUMN: 0.0,
        Season.WINTER: -0.05,
    })
    feed_quality_bonus: Dict[str, float] = field(default_factory=lambda: {
        "basic": 0.0,
        "premium_hay": 0.05,
        "grain_mix": 0.03,
        "organic_feed": 0.1,
        "specialty_feed": 0.15,
    })
    quality_tiers: List[QualityTier] = field(default_factory=lambda: [
        QualityTier("poor", 0.2, 0.5),
        QualityTier("below_average", 0.4, 0.7),
        QualityTier("standard", 0.6, 1.0),
        QualityTier("good", 0.8, 1.3),
        QualityTier("premium", 0.9, 1.8),
        QualityTier("exceptional", float("inf"), 2.5),
    ])

    # Care quality used for production
    base_care_quality: float = 0.5
    recently_fed_ms: int = 12 * HOUR_MS
    recently_fed_bonus: float = 0.2
    hungry_after_ms: int = DAY_MS
    hungry_penalty: float = 0.2

    variation_range: Tuple[float, float] = (0.8, 1.2)
    min_quantity: float = 0.1
    recent_vet_ms: int = 30 * DAY_MS
    overproduction_ratio: float = 1.5
    overproduction_energy: float = 0.05
    hunger_cost: float = 0.1
    hunger_products: List[str] = field(default_factory=lambda: ["milk", "goat_milk", "sheep_milk", "eggs", "duck_eggs"])
    happiness_gain: float = 0.02

    specializations: Dict[str, Specialization] = field(default_factory=lambda: {
        s.specialization_id: s for s in [
            Specialization(
                "dairy_specialist", "Dairy Specialist", ["cow", "goat", "sheep"],
                product_types=["milk", "goat_milk", "sheep_milk"],
                trait_minimums={"milk_production": 0.8},
                stat_minimums={"health": 0.7},
                quantity_multiplier=1.3, quality_multiplier=1.2, interval_multiplier=0.9,
                cost=100, items={"veterinary_certificate": 1},
            ),
            Specialization(
                "wool_producer", "Premium Wool Producer", ["sheep"],
                product_types=["wool"],
                trait_minimums={"wool_production": 0.7},
                stat_minimums={"cleanliness": 0.8},
                quality_multiplier=1.5, value_multiplier=1.4,
                cost=150, items={"shearing_certification": 1},
            ),
            Specialization(
                "working_horse", "Working Horse", ["horse"],
                product_types=["work_hours"],
                trait_minimums={"work_efficiency": 0.7, "temperament": 0.6},
                quantity_multiplier=1.4,
                cost=300, items={"work_harness": 1},
            ),
        ]
    })


SIMULATION = SimulationConfig()
GENETICS = GeneticsConfig()
CARE = CareConfig()
HEALTH = HealthConfig()
BREEDING = BreedingConfig()
PRODUCTION = ProductionConfig()
