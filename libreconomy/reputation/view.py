"""
Beta-distribution trust beliefs and the flat reputation book.

Each (observer, subject, provenance) triple owns one ``ReputationView`` holding
Beta(alpha, beta) shape parameters. alpha accumulates positive evidence, beta
negative evidence, and the prior Beta(1, 1) means "no idea" (mean 0.5).

Layout:
- The book is a flat dict keyed by id triples. Agents hold no references to
  each other, so there are no ownership cycles and any pair can be looked up
  in O(1).
- First-hand and hearsay beliefs are separate entries. ``belief()`` prefers
  first-hand, so a direct experience overrides rumours without erasing them.
- Views are created lazily on first observation.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..errors import InvariantViolation
from ..schemas import AgentId
from .events import Outcome


NEUTRAL_ALPHA = 1.0
NEUTRAL_BETA = 1.0
NEUTRAL_SCORE = 0.5


class Provenance(str, Enum):
    FIRST_HAND = "first_hand"
    HEARSAY = "hearsay"


class ReputationView(BaseModel):
    """One observer's belief about one subject."""

    # Direct assignment is validated too, so alpha/beta can never be set <= 0
    model_config = ConfigDict(validate_assignment=True)

    alpha: float = Field(NEUTRAL_ALPHA, gt=0, description="Positive evidence (+ prior)")
    beta: float = Field(NEUTRAL_BETA, gt=0, description="Negative evidence (+ prior)")
    interaction_count: int = Field(0, ge=0, description="Events folded into this view")
    last_interaction_tick: Optional[int] = Field(None, description="Tick of the latest event")

    # ------------------------------------------------------------------
    # Read-only statistics
    # ------------------------------------------------------------------

    @property
    def mean(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    def score(self) -> float:
        """Mean trust in [0, 1]."""
        return self.mean

    @property
    def confidence(self) -> float:
        """Precision of the belief: alpha + beta (2.0 for the neutral prior)."""
        return self.alpha + self.beta

    @property
    def evidence(self) -> float:
        """Evidence accumulated beyond the neutral prior."""
        return self.alpha + self.beta - (NEUTRAL_ALPHA + NEUTRAL_BETA)

    @property
    def variance(self) -> float:
        total = self.alpha + self.beta
        return (self.alpha * self.beta) / (total * total * (total + 1.0))

    @property
    def std_dev(self) -> float:
        return math.sqrt(self.variance)

    def is_trusted(self, threshold: float = 0.6) -> bool:
        return self.mean >= threshold

    def score_with_decay(self, current_tick: int, decay_rate: float) -> float:
        """Mean trust as it would look after ``current_tick - last`` ticks of staleness.

        Read-only: the view is not modified. Each idle tick pulls both
        parameters toward the prior by a factor ``1 - decay_rate``.
        """
        if self.last_interaction_tick is None or decay_rate <= 0:
            return self.mean
        idle = max(current_tick - self.last_interaction_tick, 0)
        factor = (1.0 - min(decay_rate, 1.0)) ** idle
        alpha = NEUTRAL_ALPHA + (self.alpha - NEUTRAL_ALPHA) * factor
        beta = NEUTRAL_BETA + (self.beta - NEUTRAL_BETA) * factor
        return alpha / (alpha + beta)

    # ------------------------------------------------------------------
    # Mutation (every path writes through _store)
    # ------------------------------------------------------------------

    def observe(
        self,
        outcome: Outcome,
        *,
        weight: float,
        tick: Optional[int] = None,
        neutral_nudge: float = 0.0,
    ) -> None:
        """Fold one outcome into the belief (conjugate Beta update)."""
        alpha, beta = self.alpha, self.beta
        if outcome == Outcome.POSITIVE:
            alpha += weight
        elif outcome == Outcome.NEGATIVE:
            beta += weight
        elif neutral_nudge > 0:
            alpha += neutral_nudge
            beta += neutral_nudge
        self._store(alpha, beta)
        self.interaction_count += 1
        if tick is not None:
            self.last_interaction_tick = max(tick, self.last_interaction_tick or tick)

    def decay(self, factor: float, *, preserve_mean: bool = True) -> None:
        """Pull the belief toward neutral confidence.

        preserve_mean=True shrinks alpha + beta toward 2 and splits the new
        total in the old proportion, so only confidence decays. With
        preserve_mean=False each parameter decays independently,
        ``x <- 1 + (x - 1) * factor``, which also drifts the mean toward 0.5.
        ``factor == 1`` is an exact no-op in both modes.

        Views built with alpha + beta below the neutral 2 move *up* to 2 in
        symmetric mode; ScenarioLoader rejects such views, and every update
        path starts from and stays at or above 2.
        """
        if not 0 < factor <= 1:
            raise ValueError(f"decay factor must lie in (0, 1], got {factor}")
        if factor == 1.0:
            return
        if preserve_mean:
            total = self.alpha + self.beta
            prior_total = NEUTRAL_ALPHA + NEUTRAL_BETA
            new_total = prior_total + (total - prior_total) * factor
            alpha = self.alpha / total * new_total
            self._store(alpha, new_total - alpha)
        else:
            self._store(
                NEUTRAL_ALPHA + (self.alpha - NEUTRAL_ALPHA) * factor,
                NEUTRAL_BETA + (self.beta - NEUTRAL_BETA) * factor,
            )

    def cap_confidence(self, max_confidence: float) -> bool:
        """Rescale so alpha + beta <= max_confidence, keeping the mean. True if rescaled."""
        total = self.alpha + self.beta
        if total <= max_confidence:
            return False
        scale = max_confidence / total
        self._store(self.alpha * scale, self.beta * scale)
        return True

    def _store(self, alpha: float, beta: float) -> None:
        """Write new parameters, refusing any pair outside alpha > 0, beta > 0."""
        if not (alpha > 0 and beta > 0) or math.isinf(alpha) or math.isinf(beta):
            raise InvariantViolation(alpha=alpha, beta=beta)
        self.alpha = alpha
        self.beta = beta


ReputationKey = Tuple[AgentId, AgentId, Provenance]


class ReputationBook:
    """Flat mapping (observer, subject, provenance) -> ReputationView."""

    def __init__(self) -> None:
        self._views: Dict[ReputationKey, ReputationView] = {}

    def get(
        self,
        observer: AgentId,
        subject: AgentId,
        provenance: Provenance = Provenance.FIRST_HAND,
    ) -> Optional[ReputationView]:
        return self._views.get((observer, subject, Provenance(provenance)))

    def view(
        self,
        observer: AgentId,
        subject: AgentId,
        provenance: Provenance = Provenance.FIRST_HAND,
    ) -> ReputationView:
        """Return the view for the triple, creating a neutral one on first use."""
        if observer == subject:
            raise ValueError(f"agent {observer} cannot hold a reputation view of itself")
        key = (observer, subject, Provenance(provenance))
        view = self._views.get(key)
        if view is None:
            view = ReputationView()
            self._views[key] = view
        return view

    def set(
        self,
        observer: AgentId,
        subject: AgentId,
        view: ReputationView,
        provenance: Provenance = Provenance.FIRST_HAND,
    ) -> None:
        if observer == subject:
            raise ValueError(f"agent {observer} cannot hold a reputation view of itself")
        self._views[(observer, subject, Provenance(provenance))] = view

    def belief(self, observer: AgentId, subject: AgentId) -> Optional[ReputationView]:
        """Best available belief: first-hand when present, otherwise hearsay."""
        first_hand = self.get(observer, subject, Provenance.FIRST_HAND)
        if first_hand is not None:
            return first_hand
        return self.get(observer, subject, Provenance.HEARSAY)

    def score(self, observer: AgentId, subject: AgentId) -> float:
        belief = self.belief(observer, subject)
        return belief.mean if belief is not None else NEUTRAL_SCORE

    def confidence(self, observer: AgentId, subject: AgentId) -> float:
        belief = self.belief(observer, subject)
        return belief.confidence if belief is not None else NEUTRAL_ALPHA + NEUTRAL_BETA

    def is_trusted(self, observer: AgentId, subject: AgentId, threshold: float = 0.6) -> bool:
        return self.score(observer, subject) >= threshold

    def known_subjects(self, observer: AgentId) -> List[AgentId]:
        return sorted({subject for (obs, subject, _) in self._views if obs == observer})

    def most_trusted(self, observer: AgentId, n: int) -> List[Tuple[AgentId, float]]:
        """Top ``n`` subjects by belief mean (ties by id)."""
        ranked = [(subject, self.score(observer, subject)) for subject in self.known_subjects(observer)]
        ranked.sort(key=lambda pair: (-pair[1], pair[0]))
        return ranked[:n]

    def entries(self) -> Iterator[Tuple[ReputationKey, ReputationView]]:
        """All views in deterministic key order."""
        for key in sorted(self._views, key=lambda k: (k[0], k[1], k[2].value)):
            yield key, self._views[key]

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, key: object) -> bool:
        return key in self._views
