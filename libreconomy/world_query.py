"""
WorldQuery: the host's read-only proximity interface.

libreconomy never simulates space. Position, pathfinding and rendering belong
to the host, which exposes only what the decision engine needs to ask:
who is nearby, what items are nearby, what terrain lies somewhere, and whether
two agents are close enough to interact.

Contract:
- Calls are synchronous and read-only; the engine receives the capability as
  a parameter and never stores it.
- Results may be empty. An empty result is a valid answer, never an error.
- Sequences are ordered nearest first, ties broken by id/coordinates, so
  identical worlds yield identical answers.

``InMemoryWorldQuery`` is a small reference implementation used by tests,
examples and hosts that do not need their own spatial index.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .schemas import AgentId, Terrain, TerrainKind


Position = Tuple[float, float]


class ResourceLocation(BaseModel):
    """An item visible from some agent, with its distance from that agent."""

    item_type: str = Field(..., description="Item id found at this location")
    x: float = Field(..., description="World x coordinate")
    y: float = Field(..., description="World y coordinate")
    distance: float = Field(..., ge=0, description="Distance from the querying agent")

    @property
    def position(self) -> Position:
        return (self.x, self.y)


class WorldQuery(ABC):
    """Abstract read-only view of the host world."""

    @abstractmethod
    def nearby_agents(self, center: AgentId, radius: float) -> List[AgentId]:
        """Agents within ``radius`` of ``center``, nearest first (``center`` excluded)."""

    @abstractmethod
    def nearby_items(
        self,
        center: AgentId,
        radius: float,
        item_type: Optional[str] = None,
    ) -> List[ResourceLocation]:
        """Items within ``radius`` of ``center``, nearest first, optionally filtered by type."""

    @abstractmethod
    def terrain_at(self, position: Position) -> Optional[TerrainKind]:
        """Terrain kind at ``position`` (None when the host has no terrain data)."""

    @abstractmethod
    def distance(self, a: AgentId, b: AgentId) -> Optional[float]:
        """Distance between two agents, None if either is unknown to the host."""

    @abstractmethod
    def species_of(self, agent_id: AgentId) -> Optional[str]:
        """Species name of an agent, None if unknown."""

    def position_of(self, agent_id: AgentId) -> Optional[Position]:
        """Position of an agent, if the host chooses to expose it."""
        return None

    def can_interact(self, a: AgentId, b: AgentId) -> bool:
        """Whether ``a`` may act on ``b`` this tick. Defaults to "both are known"."""
        return a != b and self.distance(a, b) is not None


@dataclass
class TerrainGrid:
    """Sparse terrain map; unlisted cells report ``default``."""

    cell_size: float = 1.0
    default: Optional[TerrainKind] = Terrain.GRASS
    cells: Dict[Tuple[int, int], TerrainKind] = field(default_factory=dict)

    def cell_for(self, position: Position) -> Tuple[int, int]:
        x, y = position
        return (math.floor(x / self.cell_size), math.floor(y / self.cell_size))

    def set(self, col: int, row: int, terrain: TerrainKind) -> None:
        self.cells[(col, row)] = terrain

    def fill(self, cols: range, rows: range, terrain: TerrainKind) -> None:
        for col in cols:
            for row in rows:
                self.cells[(col, row)] = terrain

    def terrain_at(self, position: Position) -> Optional[TerrainKind]:
        return self.cells.get(self.cell_for(position), self.default)


@dataclass
class PlacedAgent:
    species: str
    x: float
    y: float


@dataclass
class PlacedItem:
    item_type: str
    x: float
    y: float


class InMemoryWorldQuery(WorldQuery):
    """Dictionary-backed WorldQuery with Euclidean distances.

    Hosts mutate it between ticks (``place_agent``, ``move_agent``,
    ``add_item``, ``take_item``); the engine only reads it.
    """

    def __init__(
        self,
        *,
        terrain: Optional[TerrainGrid] = None,
        interaction_range: float = 50.0,
    ) -> None:
        self.terrain = terrain or TerrainGrid()
        self.interaction_range = interaction_range
        self._agents: Dict[AgentId, PlacedAgent] = {}
        self._items: List[PlacedItem] = []

    # ------------------------------------------------------------------
    # Host-side mutation
    # ------------------------------------------------------------------

    def place_agent(self, agent_id: AgentId, species: str, x: float, y: float) -> None:
        self._agents[agent_id] = PlacedAgent(species=species, x=x, y=y)

    def move_agent(self, agent_id: AgentId, x: float, y: float) -> None:
        placed = self._agents[agent_id]
        placed.x, placed.y = x, y

    def remove_agent(self, agent_id: AgentId) -> None:
        self._agents.pop(agent_id, None)

    def add_item(self, item_type: str, x: float, y: float) -> None:
        self._items.append(PlacedItem(item_type=item_type, x=x, y=y))

    def take_item(self, item_type: str, x: float, y: float) -> bool:
        """Remove one item of ``item_type`` at exactly (x, y); True if one was there."""
        for index, item in enumerate(self._items):
            if item.item_type == item_type and item.x == x and item.y == y:
                del self._items[index]
                return True
        return False

    def item_count(self, item_type: Optional[str] = None) -> int:
        return sum(1 for item in self._items if item_type is None or item.item_type == item_type)

    # ------------------------------------------------------------------
    # WorldQuery
    # ------------------------------------------------------------------

    def nearby_agents(self, center: AgentId, radius: float) -> List[AgentId]:
        origin = self._agents.get(center)
        if origin is None:
            return []
        found = []
        for agent_id, placed in self._agents.items():
            if agent_id == center:
                continue
            dist = math.hypot(placed.x - origin.x, placed.y - origin.y)
            if dist <= radius:
                found.append((dist, agent_id))
        return [agent_id for _, agent_id in sorted(found)]

    def nearby_items(
        self,
        center: AgentId,
        radius: float,
        item_type: Optional[str] = None,
    ) -> List[ResourceLocation]:
        origin = self._agents.get(center)
        if origin is None:
            return []
        found = []
        for item in self._items:
            if item_type is not None and item.item_type != item_type:
                continue
            dist = math.hypot(item.x - origin.x, item.y - origin.y)
            if dist <= radius:
                found.append(ResourceLocation(item_type=item.item_type, x=item.x, y=item.y, distance=dist))
        found.sort(key=lambda loc: (loc.distance, loc.x, loc.y, loc.item_type))
        return found

    def terrain_at(self, position: Position) -> Optional[TerrainKind]:
        return self.terrain.terrain_at(position)

    def distance(self, a: AgentId, b: AgentId) -> Optional[float]:
        first, second = self._agents.get(a), self._agents.get(b)
        if first is None or second is None:
            return None
        return math.hypot(first.x - second.x, first.y - second.y)

    def species_of(self, agent_id: AgentId) -> Optional[str]:
        placed = self._agents.get(agent_id)
        return placed.species if placed else None

    def position_of(self, agent_id: AgentId) -> Optional[Position]:
        placed = self._agents.get(agent_id)
        return (placed.x, placed.y) if placed else None

    def can_interact(self, a: AgentId, b: AgentId) -> bool:
        if a == b:
            return False
        dist = self.distance(a, b)
        return dist is not None and dist <= self.interaction_range
