"""Decision engine: utility-based intent selection and target resolution."""

from .engine import DecisionConfig, DecisionMaker, UtilityMaximizer, load_decision_config
from .scoring import distance_factor, energy_deficit, need_urgency, skill_match, wealth_pressure
from .targeting import RankedCandidate, TargetingConfig, TargetSelector, effective_trust, observer_trust
from .types import (
    NO_FEASIBLE_TARGET,
    NO_VISIBLE_RESOURCE,
    Action,
    ActionKind,
    Decision,
    Intent,
    IntentKind,
    TradeTerms,
)

__all__ = [
    "DecisionConfig",
    "DecisionMaker",
    "UtilityMaximizer",
    "load_decision_config",
    "distance_factor",
    "energy_deficit",
    "need_urgency",
    "skill_match",
    "wealth_pressure",
    "RankedCandidate",
    "TargetingConfig",
    "TargetSelector",
    "effective_trust",
    "observer_trust",
    "NO_FEASIBLE_TARGET",
    "NO_VISIBLE_RESOURCE",
    "Action",
    "ActionKind",
    "Decision",
    "Intent",
    "IntentKind",
    "TradeTerms",
]
