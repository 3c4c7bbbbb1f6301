"""
Libreconomy - pure-logic economic agent simulation.

Agents with needs, skills, wealth and beliefs about each other decide once
per tick what to do (utility maximisation), and completed exchanges feed a
Beta-distribution trust model.

No spatial simulation, no I/O, no persistence beyond an in-memory log.
The host world is reached only through the WorldQuery interface.
"""

__version__ = "0.2.0"

# Main simulation components
from .simulation import (
    ActionExecutor,
    DefaultActionExecutor,
    Simulation,
    SimulationHaltedError,
    TickListener,
    TickReport,
)
from .scenario import Scenario, ScenarioLoader
from .cadence import CurrentTick, TickInterval

# Decision engine
from .decision import (
    NO_FEASIBLE_TARGET,
    NO_VISIBLE_RESOURCE,
    Action,
    ActionKind,
    Decision,
    DecisionConfig,
    DecisionMaker,
    Intent,
    IntentKind,
    TargetingConfig,
    TargetSelector,
    TradeTerms,
    UtilityMaximizer,
    effective_trust,
    load_decision_config,
)

# Reputation
from .reputation import (
    DecayMode,
    HearsayReport,
    Outcome,
    Provenance,
    ReputationBook,
    ReputationDecayConfig,
    ReputationDecaySystem,
    ReputationUpdateConfig,
    ReputationUpdateSystem,
    ReputationView,
    TransactionArchive,
    TransactionEvent,
    TransactionLog,
)

# Core schemas
from .schemas import (
    AgentId,
    AgentState,
    DecisionThresholds,
    DietType,
    Employment,
    EnergyState,
    Inventory,
    Knowledge,
    NeedsState,
    NeedType,
    PreferenceProfile,
    Skills,
    SpeciesProfile,
    Terrain,
    TerrainKind,
    UrgencyCurve,
    UtilityWeights,
)
from .items import ItemRegistry, ItemType
from .needs import NeedDecayConfig, NeedDecaySystem, consume_item
from .world_query import InMemoryWorldQuery, ResourceLocation, TerrainGrid, WorldQuery

# Configuration and errors
from .config import Config, parse_config
from .errors import ConfigurationError, InvariantViolation, LibreconomyError

__all__ = [
    # Version
    "__version__",
    # Simulation
    "ActionExecutor",
    "DefaultActionExecutor",
    "Simulation",
    "SimulationHaltedError",
    "TickListener",
    "TickReport",
    "Scenario",
    "ScenarioLoader",
    "CurrentTick",
    "TickInterval",
    # Decision
    "NO_FEASIBLE_TARGET",
    "NO_VISIBLE_RESOURCE",
    "Action",
    "ActionKind",
    "Decision",
    "DecisionConfig",
    "DecisionMaker",
    "Intent",
    "IntentKind",
    "TargetingConfig",
    "TargetSelector",
    "TradeTerms",
    "UtilityMaximizer",
    "effective_trust",
    "load_decision_config",
    # Reputation
    "DecayMode",
    "HearsayReport",
    "Outcome",
    "Provenance",
    "ReputationBook",
    "ReputationDecayConfig",
    "ReputationDecaySystem",
    "ReputationUpdateConfig",
    "ReputationUpdateSystem",
    "ReputationView",
    "TransactionArchive",
    "TransactionEvent",
    "TransactionLog",
    # Schemas
    "AgentId",
    "AgentState",
    "DecisionThresholds",
    "DietType",
    "Employment",
    "EnergyState",
    "Inventory",
    "Knowledge",
    "NeedsState",
    "NeedType",
    "PreferenceProfile",
    "Skills",
    "SpeciesProfile",
    "Terrain",
    "TerrainKind",
    "UrgencyCurve",
    "UtilityWeights",
    "ItemRegistry",
    "ItemType",
    "NeedDecayConfig",
    "NeedDecaySystem",
    "consume_item",
    "InMemoryWorldQuery",
    "ResourceLocation",
    "TerrainGrid",
    "WorldQuery",
    # Config / errors
    "Config",
    "parse_config",
    "ConfigurationError",
    "InvariantViolation",
    "LibreconomyError",
]
