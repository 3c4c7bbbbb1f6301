"""Need decay and consumption.

Runs first in every tick: needs creep up, energy drains, and resting agents
recover. Consumption goes through ``consume_item`` so item effects always
come from the ItemRegistry and are clamped like every other need mutation.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .items import ItemRegistry, ItemType
from .schemas import AgentState, NeedType, SpeciesProfile


class NeedDecayConfig(BaseModel):
    """Per-tick rates. Needs rise, energy falls, resting reverses both."""

    thirst_rate: float = Field(1.0, ge=0, description="Thirst added per tick")
    hunger_rate: float = Field(0.8, ge=0, description="Hunger added per tick")
    tiredness_rate: float = Field(0.5, ge=0, description="Tiredness added per tick")
    energy_drain: float = Field(0.5, ge=0, description="Energy lost per tick")
    rest_recovery: float = Field(10.0, ge=0, description="Tiredness removed per tick of rest")
    rest_energy: float = Field(15.0, ge=0, description="Energy restored per tick of rest")

    def rate_for(self, need: NeedType) -> float:
        return getattr(self, f"{NeedType(need).value}_rate")


class NeedDecaySystem:
    """Apply per-tick need growth to every agent."""

    def __init__(self, config: Optional[NeedDecayConfig] = None) -> None:
        self.config = config or NeedDecayConfig()

    def run(self, agents: Iterable[AgentState]) -> None:
        for agent in agents:
            self.tick(agent)

    def tick(self, agent: AgentState) -> None:
        for need in NeedType:
            agent.needs.increase(need, self.config.rate_for(need))
        agent.energy.deplete(self.config.energy_drain)

    def rest(self, agent: AgentState) -> None:
        agent.needs.decrease(NeedType.TIREDNESS, self.config.rest_recovery)
        agent.energy.restore(self.config.rest_energy)


def can_consume(species: SpeciesProfile, item: ItemType) -> bool:
    """Anything that feeds must suit the diet; pure drinks suit everyone."""
    return item.satisfaction(NeedType.HUNGER) <= 0 or species.can_eat(item.item_id)


def consume_item(agent: AgentState, item_id: str, registry: ItemRegistry) -> bool:
    """Apply an item's satisfaction values to ``agent``'s needs.

    Returns False (and changes nothing) for unknown items or items the
    species cannot eat. Inventory is not touched; callers decide where the
    item came from.
    """
    item = registry.lookup(item_id)
    if item is None or not can_consume(agent.species, item):
        return False
    for need, amount in item.satisfies.items():
        agent.needs.decrease(need, amount)
    return True
