"""
Target selection for agent-directed intents (trade, hunt, employment).

Candidates come from WorldQuery and are filtered for feasibility before any
scoring:
- never the acting agent itself
- distance known and within the search radius
- diet-compatible: hunt targets must be prey, trade/work partners must not be

Feasible candidates are ranked by a weighted sum of proximity (terrain
adjusted), effective trust, and what the agent knows about them (past trade
partner, known price, offered wage). The top candidate wins; ties go to the
closer agent, then the lower id.

Effective trust
---------------
The raw Beta mean treats Beta(1, 1) and Beta(100, 100) the same (both 0.5),
and Beta(2, 1) looks as good as Beta(200, 100). ``effective_trust`` discounts
sparse evidence according to risk tolerance:

    n      = alpha + beta - 2                       (evidence beyond the prior)
    k      = (1 - risk_tolerance) * prior_strength  (pseudo-observations of doubt)
    shrunk = 0.5 + (mean - 0.5) * n / (n + k)
    trust  = shrunk - (1 - risk_tolerance) * uncertainty_aversion * std_dev

A fully risk-tolerant agent (1.0) uses the mean as-is. A risk-averse agent
pulls thin evidence back toward 0.5 and additionally subtracts a penalty
proportional to the Beta standard deviation, so an unknown agent ranks below
a well-known good one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..reputation.view import NEUTRAL_ALPHA, NEUTRAL_BETA, Provenance, ReputationBook, ReputationView
from ..schemas import AgentId, AgentState, clamp
from ..world_query import WorldQuery
from .scoring import distance_factor


class TargetingConfig(BaseModel):
    """Weights of the secondary score used to rank candidate agents."""

    proximity_weight: float = Field(1.0, ge=0, description="Weight on terrain-adjusted closeness")
    trust_weight: float = Field(1.0, ge=0, description="Weight on effective trust")
    value_weight: float = Field(0.5, ge=0, description="Weight on price/skill/wage knowledge")
    prior_strength: float = Field(10.0, ge=0, description="Doubt pseudo-observations at risk tolerance 0")
    uncertainty_aversion: float = Field(0.5, ge=0, description="Std-dev penalty at risk tolerance 0")
    hearsay_discount: float = Field(0.5, gt=0, le=1, description="Fraction of hearsay evidence believed")


def effective_trust(
    view: Optional[ReputationView],
    risk_tolerance: float,
    config: TargetingConfig,
    provenance: Provenance = Provenance.FIRST_HAND,
) -> float:
    """Risk-adjusted trust in [0, 1]; unknown agents start from Beta(1, 1)."""
    alpha = view.alpha if view is not None else NEUTRAL_ALPHA
    beta = view.beta if view is not None else NEUTRAL_BETA
    if provenance == Provenance.HEARSAY:
        alpha = NEUTRAL_ALPHA + (alpha - NEUTRAL_ALPHA) * config.hearsay_discount
        beta = NEUTRAL_BETA + (beta - NEUTRAL_BETA) * config.hearsay_discount

    total = alpha + beta
    mean = alpha / total
    caution = 1.0 - clamp(risk_tolerance, 0.0, 1.0)

    evidence = max(total - (NEUTRAL_ALPHA + NEUTRAL_BETA), 0.0)
    doubt = caution * config.prior_strength
    weight = 1.0 if doubt == 0 else evidence / (evidence + doubt)
    shrunk = 0.5 + (mean - 0.5) * weight

    std_dev = math.sqrt((alpha * beta) / (total * total * (total + 1.0)))
    return clamp(shrunk - caution * config.uncertainty_aversion * std_dev, 0.0, 1.0)


def observer_trust(
    book: Optional[ReputationBook],
    observer: AgentId,
    subject: AgentId,
    risk_tolerance: float,
    config: TargetingConfig,
) -> float:
    """Effective trust from the best available belief (first-hand over hearsay)."""
    if book is None:
        return effective_trust(None, risk_tolerance, config)
    first_hand = book.get(observer, subject, Provenance.FIRST_HAND)
    if first_hand is not None:
        return effective_trust(first_hand, risk_tolerance, config)
    hearsay = book.get(observer, subject, Provenance.HEARSAY)
    return effective_trust(hearsay, risk_tolerance, config, Provenance.HEARSAY)


@dataclass(frozen=True)
class RankedCandidate:
    agent_id: AgentId
    distance: float
    proximity: float
    trust: float
    value: float
    score: float


class TargetSelector:
    """Filter and rank WorldQuery-visible agents for one acting agent."""

    def __init__(self, config: Optional[TargetingConfig] = None) -> None:
        self.config = config or TargetingConfig()

    def visible(self, agent: AgentState, world: WorldQuery, radius: float) -> List[Tuple[AgentId, float]]:
        """Nearby agents with a known distance inside ``radius`` (self excluded), nearest first.

        Uncapped; each role caps its own eligible candidates.
        """
        found: List[Tuple[AgentId, float]] = []
        for other in world.nearby_agents(agent.agent_id, radius):
            if other == agent.agent_id:
                continue
            dist = world.distance(agent.agent_id, other)
            if dist is None or dist > radius:
                continue
            found.append((other, dist))
        return sorted(found, key=lambda pair: (pair[1], pair[0]))

    def _proximity(self, agent: AgentState, world: WorldQuery, other: AgentId, dist: float, radius: float) -> float:
        position = world.position_of(other)
        terrain = world.terrain_at(position) if position is not None else None
        return distance_factor(dist, radius, agent.species.penalty_for(terrain))

    def _rank(self, candidates: Iterable[RankedCandidate]) -> List[RankedCandidate]:
        return sorted(candidates, key=lambda c: (-c.score, c.distance, c.agent_id))

    def prey(self, agent: AgentState, world: WorldQuery, radius: float, limit: int) -> List[RankedCandidate]:
        """Huntable agents ranked by proximity alone. Empty for herbivores."""
        if not agent.species.eats_meat or not agent.species.prey:
            return []
        ranked = []
        for other, dist in self.visible(agent, world, radius):
            if not agent.species.can_hunt(world.species_of(other)):
                continue
            proximity = self._proximity(agent, world, other, dist, radius)
            if proximity <= 0:
                continue
            ranked.append(RankedCandidate(other, dist, proximity, 0.0, 0.0, proximity))
            if len(ranked) >= limit:
                break
        return self._rank(ranked)

    def partners(
        self,
        agent: AgentState,
        world: WorldQuery,
        book: Optional[ReputationBook],
        radius: float,
        limit: int,
        *,
        item: Optional[str] = None,
    ) -> List[RankedCandidate]:
        """Trade partners ranked by proximity, trust and trading history."""
        cfg = self.config
        ranked = []
        for other, dist in self.visible(agent, world, radius):
            if agent.species.can_hunt(world.species_of(other)):
                continue
            proximity = self._proximity(agent, world, other, dist, radius)
            trust = observer_trust(book, agent.agent_id, other, agent.preferences.risk_tolerance, cfg)
            value = 0.0
            if other in agent.knowledge.trade_partners:
                value += 0.5
            if item is not None and item in agent.knowledge.known_prices:
                value += 0.5
            score = cfg.proximity_weight * proximity + cfg.trust_weight * trust + cfg.value_weight * value
            ranked.append(RankedCandidate(other, dist, proximity, trust, value, score))
            if len(ranked) >= limit:
                break
        return self._rank(ranked)

    def employers(
        self,
        agent: AgentState,
        world: WorldQuery,
        book: Optional[ReputationBook],
        radius: float,
        limit: int,
    ) -> List[RankedCandidate]:
        """Known employers in view, ranked by proximity, trust and offered wage."""
        cfg = self.config
        wages = agent.knowledge.known_employers
        if not wages:
            return []
        best_wage = max(wages.values()) or 1.0
        ranked = []
        for other, dist in self.visible(agent, world, radius):
            if other not in wages or agent.species.can_hunt(world.species_of(other)):
                continue
            proximity = self._proximity(agent, world, other, dist, radius)
            trust = observer_trust(book, agent.agent_id, other, agent.preferences.risk_tolerance, cfg)
            value = clamp(wages[other] / best_wage, 0.0, 1.0)
            score = cfg.proximity_weight * proximity + cfg.trust_weight * trust + cfg.value_weight * value
            ranked.append(RankedCandidate(other, dist, proximity, trust, value, score))
            if len(ranked) >= limit:
                break
        return self._rank(ranked)
