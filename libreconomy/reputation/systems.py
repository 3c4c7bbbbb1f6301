"""
Reputation systems run once per tick, after actions have been resolved.

ReputationUpdateSystem drains the tick's TransactionLog and folds every entry
into the ReputationBook in append order. Updates are additive, so several
events about the same pair in one tick accumulate to the same result in any
order; processing in append order keeps auxiliary fields (interaction count,
last tick) reproducible too.

ReputationDecaySystem then weakens every belief toward neutral confidence on
its configured cadence. Decay never removes an entry.

Neither system reads agent state or calls the decision engine; the book and
the log are the only shared data.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from ..cadence import TickInterval
from ..config import Config, parse_config
from ..errors import InvariantViolation
from ..logging_utils import is_verbose, log_reputation
from ..schemas import AgentId
from .events import HearsayReport, LogEntry, Outcome, TransactionArchive, TransactionEvent, TransactionLog
from .view import Provenance, ReputationBook, ReputationView


class ReputationUpdateConfig(BaseModel):
    """Evidence magnitudes used when folding outcomes into beliefs."""

    evidence_weight: float = Field(1.0, gt=0, description="w: added to alpha/beta per Positive/Negative")
    neutral_nudge: float = Field(0.0, ge=0, description="Added to both parameters on Neutral (0 = no-op)")
    hearsay_weight: float = Field(1.0, gt=0, description="Multiplier on w for hearsay reports")
    max_confidence: Optional[float] = Field(
        1000.0, gt=2, description="Cap on alpha + beta; views above it are rescaled keeping the mean"
    )

    @classmethod
    def from_env(cls, overrides: Optional[Mapping[str, Any]] = None) -> "ReputationUpdateConfig":
        data: Dict[str, Any] = {
            "evidence_weight": Config.EVIDENCE_WEIGHT,
            "neutral_nudge": Config.NEUTRAL_NUDGE,
            "hearsay_weight": Config.HEARSAY_WEIGHT,
        }
        data.update(overrides or {})
        return parse_config(cls, data)


class ReputationUpdateSystem:
    """Fold TransactionLog entries into the ReputationBook."""

    def __init__(
        self,
        config: Optional[ReputationUpdateConfig] = None,
        archive: Optional[TransactionArchive] = None,
    ) -> None:
        self.config = config if config is not None else ReputationUpdateConfig.from_env()
        self.archive = archive

    def run(self, log: TransactionLog, book: ReputationBook) -> int:
        """Drain ``log`` into ``book``; returns the number of entries processed."""
        entries = log.drain()
        for entry in entries:
            self.apply(entry, book)
            if self.archive is not None:
                self.archive.record(entry.tick, [entry])
        return len(entries)

    def apply(self, entry: LogEntry, book: ReputationBook) -> None:
        """Apply a single entry. First-hand events update both participants."""
        if isinstance(entry, TransactionEvent):
            first, second = entry.participants
            weight = entry.weight or self.config.evidence_weight
            self._fold(book, first, second, Provenance.FIRST_HAND, entry.outcome, weight, entry.tick)
            self._fold(book, second, first, Provenance.FIRST_HAND, entry.outcome, weight, entry.tick)
        elif isinstance(entry, HearsayReport):
            weight = (entry.weight or self.config.evidence_weight) * self.config.hearsay_weight
            self._fold(book, entry.observer, entry.subject, Provenance.HEARSAY, entry.outcome, weight, entry.tick)
        else:
            raise TypeError(f"Unsupported log entry: {type(entry).__name__}")

    def _fold(
        self,
        book: ReputationBook,
        observer: AgentId,
        subject: AgentId,
        provenance: Provenance,
        outcome: Outcome,
        weight: float,
        tick: int,
    ) -> None:
        view = book.view(observer, subject, provenance)
        try:
            view.observe(outcome, weight=weight, tick=tick, neutral_nudge=self.config.neutral_nudge)
            if self.config.max_confidence is not None:
                view.cap_confidence(self.config.max_confidence)
        except InvariantViolation as exc:
            raise InvariantViolation(
                alpha=exc.alpha, beta=exc.beta, observer=observer, subject=subject
            ) from exc

        if is_verbose():
            log_reputation(
                f"[Tick {tick}] {observer} -> {subject} ({provenance.value}) {outcome.value}: "
                f"alpha={view.alpha:.2f} beta={view.beta:.2f} mean={view.mean:.3f}"
            )


class DecayMode(str, Enum):
    """SYMMETRIC keeps the mean and shrinks confidence; PRIOR_PULL decays each parameter toward 1."""

    SYMMETRIC = "symmetric"
    PRIOR_PULL = "prior_pull"


class ReputationDecayConfig(BaseModel):
    decay_factor: float = Field(0.99, gt=0, le=1, description="d in (0, 1]; 1 disables decay")
    interval: int = Field(1, ge=1, description="Run every N ticks")
    mode: DecayMode = Field(DecayMode.SYMMETRIC, description="How alpha/beta move toward neutral")

    @property
    def cadence(self) -> TickInterval:
        return TickInterval(every=self.interval)

    @classmethod
    def from_env(cls, overrides: Optional[Mapping[str, Any]] = None) -> "ReputationDecayConfig":
        data: Dict[str, Any] = {"decay_factor": Config.DECAY_FACTOR, "interval": Config.DECAY_INTERVAL}
        data.update(overrides or {})
        return parse_config(cls, data)


class ReputationDecaySystem:
    """Periodically pull every ReputationView toward neutral confidence."""

    def __init__(self, config: Optional[ReputationDecayConfig] = None) -> None:
        self.config = config if config is not None else ReputationDecayConfig.from_env()
        self.last_run_tick: Optional[int] = None

    def run(self, book: ReputationBook, tick: int) -> bool:
        """Decay ``book`` if the cadence fires on ``tick``; returns whether it ran."""
        if not self.config.cadence.is_due(tick=tick, last_run_tick=self.last_run_tick):
            return False
        decayed = self.apply(book)
        self.last_run_tick = tick
        if is_verbose() and decayed:
            log_reputation(
                f"[Tick {tick}] Decayed {decayed} view(s) with d={self.config.decay_factor} "
                f"({self.config.mode.value})"
            )
        return True

    def apply(self, book: ReputationBook) -> int:
        """Decay every view once, ignoring cadence; returns the number of views touched."""
        preserve_mean = self.config.mode == DecayMode.SYMMETRIC
        count = 0
        for (observer, subject, _), view in book.entries():
            self._decay_view(view, observer, subject, preserve_mean)
            count += 1
        return count

    def _decay_view(
        self,
        view: ReputationView,
        observer: AgentId,
        subject: AgentId,
        preserve_mean: bool,
    ) -> None:
        try:
            view.decay(self.config.decay_factor, preserve_mean=preserve_mean)
        except InvariantViolation as exc:
            raise InvariantViolation(
                alpha=exc.alpha, beta=exc.beta, observer=observer, subject=subject
            ) from exc
