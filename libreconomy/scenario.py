"""
Scenario loading for JSON-defined populations.

A scenario bundles everything a run needs: decision configuration, reputation
settings, need decay rates, species profiles, a small in-memory world (terrain
and items), the agent population and optionally some pre-existing beliefs.

Design philosophy:
- Scenarios are data (JSON), not code
- All validation happens here, at load time. Any invalid threshold, weight,
  species or agent raises ConfigurationError and the simulation never starts
- Species are shared: every agent of a species references the same profile

Scenario file structure:
```json
{
  "name": "Meadow",
  "description": "...",
  "decision": {"thresholds": {"high_hunger": 70}, "search_radius": 200},
  "reputation": {"update": {"evidence_weight": 1.0}, "decay": {"decay_factor": 0.99, "interval": 5}},
  "needs": {"thirst_rate": 1.0},
  "species": {"rabbit": {"preset": "rabbit"}, "fox": {"diet": "carnivore", "prey": ["rabbit"]}},
  "world": {
    "interaction_range": 40,
    "terrain": {"cell_size": 10, "default": "grass", "cells": [{"col": 2, "row": 3, "terrain": "water"}]},
    "items": [{"item_type": "water", "x": 25, "y": 35}]
  },
  "agents": [{"agent_id": 0, "species": "rabbit", "x": 5, "y": 5, "needs": {"hunger": 40}}],
  "initial_reputation": [{"observer": 1, "subject": 2, "alpha": 4, "beta": 1}]
}
```

Usage:
    loader = ScenarioLoader()
    scenario = loader.load("meadow")
    simulation = scenario.build_simulation()
"""

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .config import Config, parse_config
from .decision.engine import DecisionConfig, UtilityMaximizer
from .errors import ConfigurationError
from .items import ItemRegistry, ItemType
from .needs import NeedDecayConfig, NeedDecaySystem
from .reputation.systems import (
    ReputationDecayConfig,
    ReputationDecaySystem,
    ReputationUpdateConfig,
    ReputationUpdateSystem,
)
from .reputation.view import NEUTRAL_ALPHA, NEUTRAL_BETA, Provenance, ReputationBook, ReputationView
from .schemas import AgentState, SpeciesProfile
from .simulation import Simulation
from .world_query import InMemoryWorldQuery, TerrainGrid


SPECIES_PRESETS = {
    "rabbit": SpeciesProfile.rabbit,
    "human": SpeciesProfile.human,
}

AGENT_POSITION_KEYS = ("x", "y")


@dataclass
class Scenario:
    """A validated, ready-to-run scenario."""

    name: str
    description: str
    decision: DecisionConfig
    update: ReputationUpdateConfig
    decay: ReputationDecayConfig
    needs: NeedDecayConfig
    species: Dict[str, SpeciesProfile]
    items: ItemRegistry
    world: InMemoryWorldQuery
    agents: List[AgentState]
    reputation: ReputationBook = field(default_factory=ReputationBook)

    def build_simulation(self, **kwargs: Any) -> Simulation:
        """Wire a Simulation from this scenario; keyword arguments override components.

        Every call runs on its own copies of the agents, world and beliefs, so
        one Scenario can seed any number of independent runs. Species profiles
        stay shared.
        """
        memo: Dict[int, Any] = {id(profile): profile for profile in self.species.values()}
        agents, world, reputation = copy.deepcopy((self.agents, self.world, self.reputation), memo)
        need_decay = NeedDecaySystem(self.needs)
        options: Dict[str, Any] = {
            "decision_maker": UtilityMaximizer(self.decision, self.items),
            "reputation": reputation,
            "update_system": ReputationUpdateSystem(self.update),
            "decay_system": ReputationDecaySystem(self.decay),
            "need_decay": need_decay,
            "items": self.items,
        }
        options.update(kwargs)
        return Simulation(agents, world, **options)


class ScenarioLoader:
    """Load and validate scenarios from JSON files.

    Directory structure:
    - Default: Config.SCENARIOS_DIR ({PROJECT_ROOT}/examples/scenarios/)
    - Override via constructor: ScenarioLoader(Path("/custom/scenarios"))
    - Scenario files: {scenario_name}.json

    Validation:
    - Required fields: name, species, agents (at least one)
    - Every agent must reference a declared species and have x/y
    - Agent ids must be unique
    - Raises ConfigurationError (a ValueError) on any invalid block
    """

    def __init__(self, scenarios_dir: Optional[Path] = None):
        self.scenarios_dir = scenarios_dir or Config.SCENARIOS_DIR

    def load(self, scenario_name: str) -> Scenario:
        """Load ``{scenario_name}.json`` from the scenarios directory.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If any block fails validation
            json.JSONDecodeError: If the file contains invalid JSON
        """
        scenario_path = self.scenarios_dir / f"{scenario_name}.json"

        if not scenario_path.exists():
            raise FileNotFoundError(
                f"Scenario '{scenario_name}' not found at {scenario_path}"
            )

        data = json.loads(scenario_path.read_text())
        return self.load_data(data)

    def load_data(self, data: Mapping[str, Any]) -> Scenario:
        """Build a Scenario from an already-parsed mapping."""
        self._validate_scenario(data)

        # Scenario blocks override the LIBRECONOMY_* environment values
        decision = DecisionConfig.from_env(data.get("decision"))
        reputation_block = data.get("reputation") or {}
        update = ReputationUpdateConfig.from_env(reputation_block.get("update"))
        decay = ReputationDecayConfig.from_env(reputation_block.get("decay"))
        needs = parse_config(NeedDecayConfig, data.get("needs"))

        species = {
            name: self._parse_species(name, block) for name, block in data["species"].items()
        }
        items = self._parse_items(data.get("items"))
        world = self._parse_world(data.get("world") or {})

        agents: List[AgentState] = []
        seen: set = set()
        for agent_data in data["agents"]:
            agent = self._parse_agent(agent_data, species)
            if agent.agent_id in seen:
                raise ConfigurationError("Duplicate agent id", field="agents.agent_id", value=agent.agent_id)
            seen.add(agent.agent_id)
            agents.append(agent)
            world.place_agent(agent.agent_id, agent.species.name, agent_data["x"], agent_data["y"])

        reputation = self._parse_reputation(data.get("initial_reputation") or [], seen)

        return Scenario(
            name=data["name"],
            description=data.get("description", ""),
            decision=decision,
            update=update,
            decay=decay,
            needs=needs,
            species=species,
            items=items,
            world=world,
            agents=agents,
            reputation=reputation,
        )

    def _validate_scenario(self, data: Mapping[str, Any]) -> None:
        for key in ("name", "species", "agents"):
            if key not in data:
                raise ConfigurationError(f"Scenario missing required field: {key}", field=key)

        if not isinstance(data["species"], dict) or not data["species"]:
            raise ConfigurationError("Scenario must declare at least one species", field="species")

        if not isinstance(data["agents"], list) or not data["agents"]:
            raise ConfigurationError("Scenario must have at least one agent", field="agents")

        for index, agent in enumerate(data["agents"]):
            for key in ("agent_id", "species") + AGENT_POSITION_KEYS:
                if key not in agent:
                    raise ConfigurationError(f"Agent {index} missing '{key}'", field=f"agents[{index}].{key}")
            if agent["species"] not in data["species"]:
                raise ConfigurationError(
                    f"Agent {agent['agent_id']} references unknown species",
                    field=f"agents[{index}].species",
                    value=agent["species"],
                )

    def _parse_species(self, name: str, block: Any) -> SpeciesProfile:
        if isinstance(block, str):
            block = {"preset": block}
        preset = block.get("preset")
        if preset is not None:
            if preset not in SPECIES_PRESETS:
                raise ConfigurationError("Unknown species preset", field=f"species.{name}.preset", value=preset)
            return SPECIES_PRESETS[preset]()
        return parse_config(SpeciesProfile, {"name": name, **block})

    def _parse_items(self, block: Optional[List[Dict[str, Any]]]) -> ItemRegistry:
        registry = ItemRegistry()
        for item_data in block or []:
            registry.register(parse_config(ItemType, item_data))
        return registry

    def _parse_world(self, block: Mapping[str, Any]) -> InMemoryWorldQuery:
        terrain_block = block.get("terrain") or {}
        cell_size = terrain_block.get("cell_size", 1.0)
        if cell_size <= 0:
            raise ConfigurationError("Terrain cell_size must be positive", field="world.terrain.cell_size", value=cell_size)
        terrain = TerrainGrid(cell_size=cell_size, default=terrain_block.get("default", "grass"))
        for cell in terrain_block.get("cells", []):
            terrain.set(cell["col"], cell["row"], cell["terrain"])

        world = InMemoryWorldQuery(terrain=terrain, interaction_range=block.get("interaction_range", 50.0))
        for item in block.get("items", []):
            world.add_item(item["item_type"], item["x"], item["y"])
        return world

    def _parse_agent(self, agent_data: Mapping[str, Any], species: Dict[str, SpeciesProfile]) -> AgentState:
        fields = {key: value for key, value in agent_data.items() if key not in AGENT_POSITION_KEYS}
        fields["species"] = species[agent_data["species"]]
        try:
            return AgentState.model_validate(fields)
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid agent {agent_data.get('agent_id')}: {exc.errors()[0]['msg']}",
                field="agents",
                value=agent_data.get("agent_id"),
            ) from exc

    def _parse_reputation(self, block: List[Dict[str, Any]], agent_ids: set) -> ReputationBook:
        book = ReputationBook()
        for entry in block:
            observer, subject = entry.get("observer"), entry.get("subject")
            if observer not in agent_ids or subject not in agent_ids or observer == subject:
                raise ConfigurationError(
                    "initial_reputation entries need two distinct known agents",
                    field="initial_reputation",
                    value=(observer, subject),
                )
            view = parse_config(
                ReputationView,
                {key: entry[key] for key in ("alpha", "beta", "interaction_count") if key in entry},
            )
            if view.alpha + view.beta < NEUTRAL_ALPHA + NEUTRAL_BETA:
                raise ConfigurationError(
                    "initial_reputation needs alpha + beta >= 2 (the neutral prior)",
                    field="initial_reputation",
                    value=(view.alpha, view.beta),
                )
            provenance = entry.get("provenance", Provenance.FIRST_HAND.value)
            if provenance not in {p.value for p in Provenance}:
                raise ConfigurationError("Unknown provenance", field="initial_reputation.provenance", value=provenance)
            book.set(observer, subject, view, Provenance(provenance))
        return book
