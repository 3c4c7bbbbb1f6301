"""
Pydantic schemas for libreconomy agent state.

All per-agent data structures read by the decision engine are defined here.

Design Philosophy:
- Out-of-range runtime state is clamped at the model boundary (validators and
  saturating mutators), so the decision engine always receives valid input and
  never has to fail on bad state.
- Configuration (weights, thresholds) is different: it is validated and
  rejected, because a bad threshold is a setup mistake, not runtime drift.
- Species are data-driven profiles rather than a class hierarchy. A diet is a
  capability set (which foods, which prey), a terrain cost is a lookup table.
"""

import math
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


AgentId = int
TerrainKind = str

MIN_NEED = 0.0
MAX_NEED = 100.0
MAX_STACK = 1_000_000
"""Upper bound for a single inventory stack (saturating add)."""
DEFAULT_PLANT_FOODS = ("grass", "food")


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``; NaN collapses to ``lower``."""
    if value is None or math.isnan(value):
        return lower
    return min(max(value, lower), upper)


class Terrain:
    """Well-known terrain kinds. Hosts may report any other string."""

    WATER = "water"
    GRASS = "grass"
    ROCKY = "rocky"
    DIRT = "dirt"


class NeedType(str, Enum):
    """Needs tracked per agent. Values double as NeedsState field names."""

    THIRST = "thirst"
    HUNGER = "hunger"
    TIREDNESS = "tiredness"


# ============================================================================
# Needs / Energy
# ============================================================================


class NeedsState(BaseModel):
    """Per-agent needs, each clamped to ``[0, max_value]``.

    Needs rise through decay and fall through consumption/rest. Use ``set``,
    ``adjust``, ``increase`` and ``decrease`` for mutation; they clamp at the
    point of mutation so no consumer ever observes an out-of-range value.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Declared first so the field validators below can read it from info.data
    max_value: float = Field(MAX_NEED, gt=0, description="Configured maximum for every need")
    thirst: float = Field(MIN_NEED, description="Thirst level (0 = sated)")
    hunger: float = Field(MIN_NEED, description="Hunger level (0 = sated)")
    tiredness: float = Field(MIN_NEED, description="Tiredness level (0 = rested)")

    @field_validator("thirst", "hunger", "tiredness")
    @classmethod
    def _clamp_need(cls, value: float, info: ValidationInfo) -> float:
        return clamp(value, MIN_NEED, info.data.get("max_value", MAX_NEED))

    def get(self, need: NeedType) -> float:
        return getattr(self, NeedType(need).value)

    def set(self, need: NeedType, value: float) -> float:
        """Set a need (clamped) and return the stored value."""
        stored = clamp(value, MIN_NEED, self.max_value)
        setattr(self, NeedType(need).value, stored)
        return stored

    def adjust(self, need: NeedType, delta: float) -> float:
        return self.set(need, self.get(need) + delta)

    def increase(self, need: NeedType, amount: float) -> float:
        return self.adjust(need, abs(amount))

    def decrease(self, need: NeedType, amount: float) -> float:
        return self.adjust(need, -abs(amount))


class EnergyState(BaseModel):
    """Energy reserve with saturating restore/deplete."""

    model_config = ConfigDict(validate_assignment=True)

    max_energy: float = Field(100.0, gt=0, description="Maximum energy (may vary with age)")
    current: float = Field(100.0, description="Current energy, clamped to [0, max_energy]")

    @field_validator("current")
    @classmethod
    def _clamp_current(cls, value: float, info: ValidationInfo) -> float:
        return clamp(value, 0.0, info.data.get("max_energy", 100.0))

    def restore(self, amount: float) -> float:
        self.current = clamp(self.current + max(amount, 0.0), 0.0, self.max_energy)
        return self.current

    def deplete(self, amount: float) -> float:
        self.current = clamp(self.current - max(amount, 0.0), 0.0, self.max_energy)
        return self.current

    def set_max(self, max_energy: float) -> None:
        """Change the ceiling (e.g. with age); current is re-clamped."""
        if max_energy <= 0:
            raise ValueError("max_energy must be positive")
        self.max_energy = max_energy
        self.current = clamp(self.current, 0.0, max_energy)

    @property
    def fraction(self) -> float:
        return self.current / self.max_energy


# ============================================================================
# Species
# ============================================================================


class DietType(str, Enum):
    HERBIVORE = "herbivore"
    CARNIVORE = "carnivore"
    OMNIVORE = "omnivore"


class SpeciesProfile(BaseModel):
    """Read-only reference data shared by every agent of a species.

    The diet is expressed as capabilities: ``plant_foods`` are items eaten
    directly, ``prey`` lists species that can be hunted for ``meat_item``.
    Herbivores never hunt and carnivores never graze, regardless of what the
    lists contain.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Species identifier (e.g. 'rabbit')")
    diet: DietType = Field(..., description="Herbivore, carnivore or omnivore")
    plant_foods: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PLANT_FOODS),
        description="Plant items this species eats; empty falls back to grass/food",
    )
    prey: List[str] = Field(default_factory=list, description="Species names this species hunts")
    meat_item: str = Field("rabbit_meat", description="Item obtained by hunting")
    # Multiplier on traversal cost; unlisted terrain costs 1.0.
    # Values below 1 make terrain cheaper, math.inf makes it impassable.
    terrain_penalty: Dict[TerrainKind, float] = Field(
        default_factory=dict, description="TerrainKind -> traversal cost multiplier"
    )

    @field_validator("plant_foods")
    @classmethod
    def _default_plants(cls, value: List[str]) -> List[str]:
        return list(value) if value else list(DEFAULT_PLANT_FOODS)

    @field_validator("terrain_penalty")
    @classmethod
    def _non_negative_penalty(cls, value: Dict[str, float]) -> Dict[str, float]:
        for terrain, multiplier in value.items():
            if multiplier < 0 or math.isnan(multiplier):
                raise ValueError(f"terrain penalty for '{terrain}' must be >= 0, got {multiplier}")
        return value

    @property
    def eats_plants(self) -> bool:
        return self.diet in (DietType.HERBIVORE, DietType.OMNIVORE)

    @property
    def eats_meat(self) -> bool:
        return self.diet in (DietType.CARNIVORE, DietType.OMNIVORE)

    def can_hunt(self, species_name: Optional[str]) -> bool:
        return self.eats_meat and species_name is not None and species_name in self.prey

    def can_eat(self, item_id: str) -> bool:
        if self.eats_plants and item_id in self.plant_foods:
            return True
        return self.eats_meat and item_id == self.meat_item

    def penalty_for(self, terrain: Optional[TerrainKind]) -> float:
        if terrain is None:
            return 1.0
        return self.terrain_penalty.get(terrain, 1.0)

    @classmethod
    def rabbit(cls) -> "SpeciesProfile":
        return cls(
            name="rabbit",
            diet=DietType.HERBIVORE,
            plant_foods=["grass"],
            terrain_penalty={Terrain.WATER: 4.0, Terrain.ROCKY: 2.0},
        )

    @classmethod
    def human(cls) -> "SpeciesProfile":
        return cls(
            name="human",
            diet=DietType.OMNIVORE,
            plant_foods=["food", "grass"],
            prey=["rabbit"],
            meat_item="rabbit_meat",
            terrain_penalty={Terrain.WATER: 3.0, Terrain.ROCKY: 1.5},
        )


# ============================================================================
# Preferences / Configuration
# ============================================================================


class UtilityWeights(BaseModel):
    """Relative importance of survival, comfort and efficiency scores."""

    survival: float = Field(2.0, ge=0, description="Weight on urgent needs (thirst, hunger)")
    comfort: float = Field(1.0, ge=0, description="Weight on rest / energy recovery")
    efficiency: float = Field(0.5, ge=0, description="Weight on proximity, work and trade gains")


class UrgencyCurve(str, Enum):
    """How urgency grows once a need passes its threshold."""

    LINEAR = "linear"
    QUADRATIC = "quadratic"


class PreferenceProfile(BaseModel):
    """Per-agent tunables. Changed only by explicit configuration, never by the engine."""

    utility_weights: UtilityWeights = Field(default_factory=UtilityWeights)
    # 0 = risk-averse (sparse trust evidence is heavily discounted), 1 = takes evidence at face value
    risk_tolerance: float = Field(0.5, description="Risk tolerance in [0, 1]")
    urgency_curve: UrgencyCurve = Field(UrgencyCurve.LINEAR, description="Urgency shaping past threshold")

    @field_validator("risk_tolerance")
    @classmethod
    def _clamp_risk(cls, value: float) -> float:
        return clamp(value, 0.0, 1.0)


class DecisionThresholds(BaseModel):
    """Cutoffs separating a merely present need from an urgent or critical one.

    A need at or below its ``high_*`` threshold contributes nothing to
    urgency; at or above ``critical_*`` the resulting intent is flagged
    critical. ``low_energy`` is a percentage of max energy below which
    resting becomes attractive.
    """

    need_max: float = Field(MAX_NEED, gt=0, description="Maximum need value thresholds are checked against")
    high_thirst: float = Field(60.0, ge=0)
    critical_thirst: float = Field(80.0, ge=0)
    high_hunger: float = Field(50.0, ge=0)
    critical_hunger: float = Field(70.0, ge=0)
    high_tiredness: float = Field(70.0, ge=0)
    critical_tiredness: float = Field(85.0, ge=0)
    low_energy: float = Field(20.0, ge=0, le=100, description="Energy percentage considered low")

    @model_validator(mode="after")
    def _check_ranges(self) -> "DecisionThresholds":
        for need in NeedType:
            high = self.high_for(need)
            critical = self.critical_for(need)
            if high > self.need_max or critical > self.need_max:
                raise ValueError(
                    f"{need.value} thresholds must lie within [0, {self.need_max}] "
                    f"(high={high}, critical={critical})"
                )
            if critical < high:
                raise ValueError(
                    f"critical_{need.value} ({critical}) must be >= high_{need.value} ({high})"
                )
        return self

    def high_for(self, need: NeedType) -> float:
        return getattr(self, f"high_{NeedType(need).value}")

    def critical_for(self, need: NeedType) -> float:
        return getattr(self, f"critical_{NeedType(need).value}")


# ============================================================================
# Economic State
# ============================================================================


class Skills(BaseModel):
    """Skill levels (0-10 scale by convention)."""

    levels: Dict[str, float] = Field(default_factory=dict, description="skill -> level")

    @field_validator("levels")
    @classmethod
    def _non_negative(cls, value: Dict[str, float]) -> Dict[str, float]:
        return {skill: clamp(level, 0.0, math.inf) for skill, level in value.items()}

    def level(self, skill: str) -> float:
        return self.levels.get(skill, 0.0)

    def best_match(self, skill_types: Iterable[str]) -> float:
        return max((self.level(skill) for skill in skill_types), default=0.0)


class Knowledge(BaseModel):
    """What an agent has learned about prices, partners and employers."""

    known_prices: Dict[str, float] = Field(default_factory=dict, description="item -> last seen price")
    trade_partners: List[AgentId] = Field(default_factory=list, description="Agents traded with before")
    known_employers: Dict[AgentId, float] = Field(
        default_factory=dict, description="employer agent -> offered wage"
    )

    def learn_price(self, item: str, price: float) -> None:
        self.known_prices[item] = max(price, 0.0)

    def add_partner(self, agent_id: AgentId) -> None:
        if agent_id not in self.trade_partners:
            self.trade_partners.append(agent_id)


class Employment(BaseModel):
    job_status: Optional[str] = Field(None, description="Current job title, None when unemployed")
    employer: Optional[AgentId] = Field(None, description="Employing agent")
    employees: List[AgentId] = Field(default_factory=list, description="Agents employed by this one")

    @property
    def is_employed(self) -> bool:
        return self.employer is not None or self.job_status is not None


class Inventory(BaseModel):
    """Item stacks with saturating add/remove."""

    items: Dict[str, int] = Field(default_factory=dict, description="item -> quantity")

    @field_validator("items")
    @classmethod
    def _clamp_stacks(cls, value: Dict[str, int]) -> Dict[str, int]:
        return {item: int(clamp(qty, 0, MAX_STACK)) for item, qty in value.items() if qty > 0}

    def quantity(self, item: str) -> int:
        return self.items.get(item, 0)

    def add(self, item: str, quantity: int = 1) -> int:
        """Add up to ``quantity``; returns the amount actually stored."""
        current = self.quantity(item)
        stored = int(clamp(current + max(quantity, 0), 0, MAX_STACK))
        if stored:
            self.items[item] = stored
        return stored - current

    def remove(self, item: str, quantity: int = 1) -> int:
        """Remove up to ``quantity``; returns the amount actually removed."""
        current = self.quantity(item)
        removed = min(current, max(quantity, 0))
        remaining = current - removed
        if remaining:
            self.items[item] = remaining
        else:
            self.items.pop(item, None)
        return removed


class AgentState(BaseModel):
    """Full snapshot of one agent as seen by the decision engine.

    Agents live in an arena (``AgentId -> AgentState``); relationships to other
    agents are ids only, and trust lives in the flat ReputationBook.
    """

    model_config = ConfigDict(validate_assignment=True)

    agent_id: AgentId = Field(..., ge=0, description="Arena index of this agent")
    species: SpeciesProfile = Field(..., description="Shared species profile")
    needs: NeedsState = Field(default_factory=NeedsState)
    energy: EnergyState = Field(default_factory=EnergyState)
    preferences: PreferenceProfile = Field(default_factory=PreferenceProfile)
    skills: Skills = Field(default_factory=Skills)
    knowledge: Knowledge = Field(default_factory=Knowledge)
    employment: Employment = Field(default_factory=Employment)
    inventory: Inventory = Field(default_factory=Inventory)
    currency: float = Field(0.0, description="Wallet balance, never negative")
    # Paused agents are skipped by the simulation's decision phase
    paused: bool = Field(False, description="Skip this agent's decision phase")

    @field_validator("currency")
    @classmethod
    def _clamp_currency(cls, value: float) -> float:
        return clamp(value, 0.0, math.inf)

    def can_afford(self, amount: float) -> bool:
        return self.currency >= amount

    def spend(self, amount: float) -> bool:
        """Deduct ``amount`` if affordable; returns False and changes nothing otherwise."""
        if amount < 0 or not self.can_afford(amount):
            return False
        self.currency -= amount
        return True

    def earn(self, amount: float) -> None:
        self.currency += max(amount, 0.0)
