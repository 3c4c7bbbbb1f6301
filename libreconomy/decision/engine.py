"""
Utility-maximising decision engine.

Given one agent's snapshot and a read-only WorldQuery, the engine picks one
Intent for the tick and resolves it into one Action.

Algorithm:
1. Urgency per need from DecisionThresholds (0 below the high threshold,
   rising linearly or quadratically past it), weighted by ``survival``.
2. Comfort (tiredness, low energy) and efficiency (work, selling surplus)
   scores, weighted by ``comfort`` / ``efficiency``.
3. Candidate intents valid for the species. Herbivores never consider
   hunting. Reachability of the best source enters through a terrain-adjusted
   distance factor weighted by ``efficiency``.
4. Highest utility wins; ties are broken by a fixed priority order (thirst,
   hunger, buying, rest, work, selling, wander) so output never depends on
   iteration order.
5. Agent-directed intents pick a target via TargetSelector. No feasible
   target degrades the action to Wander (a normal outcome, not an error).

The engine is a pure function of its inputs: no randomness, no mutation, no
I/O beyond optional verbose logging. Configuration is validated when it is
loaded, never during a decision.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from ..config import Config, parse_config
from ..items import ItemRegistry
from ..logging_utils import is_verbose, log_decision, log_warning
from ..needs import can_consume
from ..reputation.view import ReputationBook
from ..schemas import AgentState, DecisionThresholds, NeedType
from ..world_query import ResourceLocation, WorldQuery
from .scoring import distance_factor, energy_deficit, need_urgency, skill_match, wealth_pressure
from .targeting import TargetingConfig, TargetSelector
from .types import (
    NO_FEASIBLE_TARGET,
    NO_VISIBLE_RESOURCE,
    Action,
    Decision,
    Intent,
    IntentKind,
    TradeTerms,
)


# Lower value wins a utility tie
PRIORITY_THIRST = 0
PRIORITY_HUNGER = 1
PRIORITY_BUY = 2
PRIORITY_REST = 3
PRIORITY_WORK = 4
PRIORITY_SELL = 5
PRIORITY_WANDER = 6


class DecisionConfig(BaseModel):
    """Everything the engine needs besides agent state. Validated at load time."""

    thresholds: DecisionThresholds = Field(default_factory=DecisionThresholds)
    targeting: TargetingConfig = Field(default_factory=TargetingConfig)
    search_radius: float = Field(1000.0, gt=0, description="Resource and partner search radius")
    max_nearby_agents: int = Field(10, ge=1, description="Cap on candidates considered per query")
    wander_utility: float = Field(0.1, ge=0, description="Baseline utility of wandering")
    # Buying food from someone is worth this fraction of finding it directly
    trade_discount: float = Field(0.8, ge=0, le=1, description="Survival weight multiplier for buying")
    comfortable_wealth: float = Field(100.0, gt=0, description="Wealth at which work/selling stop paying off")
    max_skill_level: float = Field(10.0, gt=0, description="Skill level treated as a perfect match")
    surplus_quantity: int = Field(5, ge=1, description="Stack size considered surplus for selling")

    @classmethod
    def from_env(cls, overrides: Optional[Mapping[str, Any]] = None) -> "DecisionConfig":
        """Environment values first, then any explicit ``overrides`` on top."""
        data: Dict[str, Any] = {
            "search_radius": Config.SEARCH_RADIUS,
            "max_nearby_agents": Config.MAX_NEARBY_AGENTS,
        }
        data.update(overrides or {})
        return parse_config(cls, data)


def load_decision_config(data: Optional[Mapping[str, Any]] = None) -> DecisionConfig:
    """Build a DecisionConfig from plain data, raising ConfigurationError if invalid."""
    return parse_config(DecisionConfig, data)


@dataclass(frozen=True)
class _Candidate:
    """An intent plus what is needed to turn it into an action."""

    intent: Intent
    priority: int
    location: Optional[ResourceLocation] = None
    from_inventory: bool = False
    hunt_target: Optional[int] = None
    price: Optional[float] = None

    @property
    def sort_key(self) -> Tuple[float, int]:
        return (-self.intent.utility, self.priority)


class DecisionMaker(ABC):
    """Pluggable per-agent decision strategy."""

    @abstractmethod
    def decide(
        self,
        agent: AgentState,
        world: WorldQuery,
        reputation: Optional[ReputationBook] = None,
        *,
        tick: int = 0,
    ) -> Decision:
        """Return this agent's Intent and Action for ``tick``."""


class UtilityMaximizer(DecisionMaker):
    """Default DecisionMaker: pick the intent with the highest composite utility."""

    def __init__(
        self,
        config: Optional[DecisionConfig] = None,
        items: Optional[ItemRegistry] = None,
    ) -> None:
        self.config = config if config is not None else DecisionConfig.from_env()
        self.items = items if items is not None else ItemRegistry()
        self.selector = TargetSelector(self.config.targeting)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def decide(
        self,
        agent: AgentState,
        world: WorldQuery,
        reputation: Optional[ReputationBook] = None,
        *,
        tick: int = 0,
    ) -> Decision:
        best = self._candidates(agent, world, reputation)[0]
        action, reason = self._resolve(best, agent, world, reputation)
        decision = Decision(agent_id=agent.agent_id, tick=tick, intent=best.intent, action=action, reason=reason)

        if is_verbose():
            if reason is not None:
                log_warning(f"[Tick {tick}] {decision.summary()}")
            else:
                log_decision(f"[Tick {tick}] {decision.summary()}")
        return decision

    def evaluate(
        self,
        agent: AgentState,
        world: WorldQuery,
        reputation: Optional[ReputationBook] = None,
    ) -> List[Intent]:
        """Every candidate intent, best first. Useful for debugging and analysis."""
        return [candidate.intent for candidate in self._candidates(agent, world, reputation)]

    @staticmethod
    def calculate_utility(urgency: float, distance: float, max_radius: float, survival: float = 2.0, efficiency: float = 0.5) -> float:
        """Utility of a seek intent: urgency * survival + distance factor * efficiency."""
        return urgency * survival + distance_factor(distance, max_radius) * efficiency

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------

    def _candidates(
        self,
        agent: AgentState,
        world: WorldQuery,
        reputation: Optional[ReputationBook],
    ) -> List[_Candidate]:
        candidates: List[_Candidate] = []
        partners = self.selector.partners(
            agent, world, reputation, self.config.search_radius, self.config.max_nearby_agents
        )
        # Closeness of the nearest feasible partner; None when nobody qualifies
        reach = max(partner.proximity for partner in partners) if partners else None

        for need, priority in ((NeedType.THIRST, PRIORITY_THIRST), (NeedType.HUNGER, PRIORITY_HUNGER)):
            seek = self._seek_item(agent, world, need, priority)
            if seek is not None:
                candidates.append(seek)
                buy = self._buy(agent, need, seek.intent.urgency, reach)
                if buy is not None:
                    candidates.append(buy)

        for candidate in (self._rest(agent), self._find_work(agent), self._sell(agent, reach)):
            if candidate is not None:
                candidates.append(candidate)

        candidates.append(_Candidate(Intent.wander(self.config.wander_utility), PRIORITY_WANDER))
        candidates.sort(key=lambda candidate: candidate.sort_key)
        return candidates

    def _foods_for(self, agent: AgentState, need: NeedType) -> List[str]:
        """Registry items that satisfy ``need`` and that this species may consume."""
        return [item.item_id for item in self.items.items_satisfying(need) if can_consume(agent.species, item)]

    def _seek_item(self, agent: AgentState, world: WorldQuery, need: NeedType, priority: int) -> Optional[_Candidate]:
        thresholds = self.config.thresholds
        urgency = need_urgency(
            agent.needs.get(need),
            thresholds.high_for(need),
            thresholds.need_max,
            agent.preferences.urgency_curve,
        )
        if urgency <= 0:
            return None

        weights = agent.preferences.utility_weights
        critical = agent.needs.get(need) >= thresholds.critical_for(need)
        foods = self._foods_for(agent, need)
        radius = self.config.search_radius

        # Already carrying something suitable: distance zero
        for item in foods:
            if agent.inventory.quantity(item) > 0:
                intent = Intent(
                    kind=IntentKind.SEEK_ITEM, item_type=item, need=need, urgency=urgency, critical=critical,
                    utility=urgency * weights.survival + weights.efficiency,
                )
                return _Candidate(intent, priority, from_inventory=True)

        best_location: Optional[ResourceLocation] = None
        best_factor = 0.0
        for item in foods:
            for location in world.nearby_items(agent.agent_id, radius, item)[: self.config.max_nearby_agents]:
                penalty = agent.species.penalty_for(world.terrain_at(location.position))
                factor = distance_factor(location.distance, radius, penalty)
                if best_location is None or factor > best_factor:
                    best_location, best_factor = location, factor

        hunt_target = None
        if need == NeedType.HUNGER:
            prey = self.selector.prey(agent, world, radius, self.config.max_nearby_agents)
            if prey and (best_location is None or prey[0].proximity > best_factor):
                hunt_target, best_factor = prey[0].agent_id, prey[0].proximity
                best_location = None

        if hunt_target is not None:
            item_type = agent.species.meat_item
        elif best_location is not None:
            item_type = best_location.item_type
        else:
            item_type = foods[0] if foods else None

        utility = urgency * weights.survival
        if hunt_target is not None or best_location is not None:
            utility += best_factor * weights.efficiency

        intent = Intent(
            kind=IntentKind.SEEK_ITEM, item_type=item_type, need=need, urgency=urgency,
            critical=critical, utility=utility,
        )
        return _Candidate(intent, priority, location=best_location, hunt_target=hunt_target)

    def _price_of(self, agent: AgentState, item: str) -> Optional[float]:
        if item in agent.knowledge.known_prices:
            return agent.knowledge.known_prices[item]
        registered = self.items.lookup(item)
        return registered.base_price if registered is not None else None

    def _buy(self, agent: AgentState, need: NeedType, urgency: float, reach: Optional[float]) -> Optional[_Candidate]:
        """Buy a satisfying item from someone nearby, if affordable."""
        if reach is None:
            return None
        # Items with a known price first
        foods = sorted(self._foods_for(agent, need), key=lambda item: item not in agent.knowledge.known_prices)
        for item in foods:
            price = self._price_of(agent, item)
            if price is None or not agent.can_afford(price):
                continue
            weights = agent.preferences.utility_weights
            intent = Intent(
                kind=IntentKind.SEEK_TRADE, item_type=item, need=need, urgency=urgency, buying=True,
                utility=urgency * weights.survival * self.config.trade_discount + reach * weights.efficiency,
            )
            return _Candidate(intent, PRIORITY_BUY, price=price)
        return None

    def _rest(self, agent: AgentState) -> Optional[_Candidate]:
        thresholds = self.config.thresholds
        tiredness = agent.needs.get(NeedType.TIREDNESS)
        comfort = max(
            need_urgency(
                tiredness,
                thresholds.high_tiredness,
                thresholds.need_max,
                agent.preferences.urgency_curve,
            ),
            energy_deficit(agent.energy, thresholds.low_energy),
        )
        if comfort <= 0:
            return None
        intent = Intent(
            kind=IntentKind.REST, need=NeedType.TIREDNESS, urgency=comfort,
            critical=tiredness >= thresholds.critical_tiredness,
            utility=comfort * agent.preferences.utility_weights.comfort,
        )
        return _Candidate(intent, PRIORITY_REST)

    def _find_work(self, agent: AgentState) -> Optional[_Candidate]:
        if agent.employment.is_employed:
            return None
        skills = sorted(skill for skill, level in agent.skills.levels.items() if level > 0)
        if not skills:
            return None
        pressure = wealth_pressure(agent.currency, self.config.comfortable_wealth)
        if pressure <= 0:
            return None
        match = skill_match(agent.skills.best_match(skills), self.config.max_skill_level)
        utility = agent.preferences.utility_weights.efficiency * pressure * (0.5 + 0.5 * match)
        intent = Intent(kind=IntentKind.FIND_WORK, skill_types=skills, urgency=pressure, utility=utility)
        return _Candidate(intent, PRIORITY_WORK)

    def _sell(self, agent: AgentState, reach: Optional[float]) -> Optional[_Candidate]:
        """Sell the largest surplus stack that has a price."""
        if reach is None:
            return None
        pressure = wealth_pressure(agent.currency, self.config.comfortable_wealth)
        if pressure <= 0:
            return None
        stacks = sorted(agent.inventory.items.items(), key=lambda pair: (-pair[1], pair[0]))
        for item, quantity in stacks:
            if quantity < self.config.surplus_quantity:
                break
            price = self._price_of(agent, item)
            if price is None or price <= 0:
                continue
            intent = Intent(
                kind=IntentKind.SEEK_TRADE, item_type=item, buying=False, urgency=pressure,
                utility=agent.preferences.utility_weights.efficiency * pressure * (0.5 + 0.5 * reach),
            )
            return _Candidate(intent, PRIORITY_SELL, price=price)
        return None

    # ------------------------------------------------------------------
    # Intent -> Action
    # ------------------------------------------------------------------

    def _resolve(
        self,
        candidate: _Candidate,
        agent: AgentState,
        world: WorldQuery,
        reputation: Optional[ReputationBook],
    ) -> Tuple[Action, Optional[str]]:
        intent = candidate.intent
        radius = self.config.search_radius
        limit = self.config.max_nearby_agents

        if intent.kind == IntentKind.WANDER:
            return Action.wander(), None

        if intent.kind == IntentKind.REST:
            return Action.rest(), None

        if intent.kind == IntentKind.SEEK_ITEM:
            if candidate.hunt_target is not None:
                return Action.hunt(candidate.hunt_target), None
            if candidate.from_inventory or candidate.location is not None:
                return Action.consume(intent.item_type, candidate.location), None
            return Action.wander(), NO_VISIBLE_RESOURCE

        if intent.kind == IntentKind.SEEK_TRADE:
            ranked = self.selector.partners(agent, world, reputation, radius, limit, item=intent.item_type)
            if not ranked:
                return Action.wander(), NO_FEASIBLE_TARGET
            terms = TradeTerms(item=intent.item_type, quantity=1, price=candidate.price, buying=bool(intent.buying))
            return Action.trade(ranked[0].agent_id, terms), None

        if intent.kind == IntentKind.FIND_WORK:
            ranked = self.selector.employers(agent, world, reputation, radius, limit)
            if not ranked:
                return Action.wander(), NO_FEASIBLE_TARGET
            target = ranked[0].agent_id
            return Action.apply_for_work(target, agent.knowledge.known_employers[target]), None

        return Action.wander(), None
