"""
Transaction events and the per-tick transaction log.

The execution layer appends one entry per resolved exchange, in resolution
order. The reputation update system drains the log exactly once per tick,
after which entries are immutable history (kept by ``TransactionArchive``
for analytics only).

Two entry kinds share the log:
- TransactionEvent: first-hand, both participants observe each other.
- HearsayReport: ``reporter`` tells ``observer`` how an interaction with
  ``subject`` went; only the observer's hearsay belief changes.
"""

from __future__ import annotations

from collections import OrderedDict
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..schemas import AgentId


class Outcome(str, Enum):
    """How an exchange went, from the reputation system's point of view."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class TransactionEvent(BaseModel):
    """Immutable record of a completed exchange between two agents."""

    model_config = ConfigDict(frozen=True)

    participants: Tuple[AgentId, AgentId] = Field(..., description="The two agents involved (A, B)")
    outcome: Outcome = Field(..., description="Outcome classification")
    tick: int = Field(..., ge=0, description="Tick the exchange resolved on")
    # Overrides the configured evidence weight for this one event
    weight: Optional[float] = Field(None, gt=0, description="Evidence weight override")
    # Free-form context: item, price, quantity, action kind...
    context: Dict[str, Any] = Field(default_factory=dict, description="What was exchanged")

    @model_validator(mode="after")
    def _distinct_participants(self) -> "TransactionEvent":
        first, second = self.participants
        if first == second:
            raise ValueError(f"a transaction needs two distinct participants, got ({first}, {second})")
        return self

    @classmethod
    def successful_trade(
        cls, agent1: AgentId, agent2: AgentId, item: str, price: float, tick: int
    ) -> "TransactionEvent":
        return cls(
            participants=(agent1, agent2),
            outcome=Outcome.POSITIVE,
            tick=tick,
            context={"kind": "trade", "item": item, "price": price},
        )

    @classmethod
    def failed_trade(
        cls, agent1: AgentId, agent2: AgentId, item: str, price: float, tick: int
    ) -> "TransactionEvent":
        return cls(
            participants=(agent1, agent2),
            outcome=Outcome.NEGATIVE,
            tick=tick,
            context={"kind": "trade", "item": item, "price": price},
        )

    @classmethod
    def positive_interaction(cls, agent1: AgentId, agent2: AgentId, tick: int) -> "TransactionEvent":
        return cls(participants=(agent1, agent2), outcome=Outcome.POSITIVE, tick=tick)

    @classmethod
    def negative_interaction(cls, agent1: AgentId, agent2: AgentId, tick: int) -> "TransactionEvent":
        return cls(participants=(agent1, agent2), outcome=Outcome.NEGATIVE, tick=tick)


class HearsayReport(BaseModel):
    """Second-hand report: ``reporter`` tells ``observer`` about ``subject``."""

    model_config = ConfigDict(frozen=True)

    observer: AgentId = Field(..., description="Agent receiving the report")
    subject: AgentId = Field(..., description="Agent the report is about")
    reporter: AgentId = Field(..., description="Agent passing the information on")
    outcome: Outcome = Field(..., description="Outcome the reporter experienced")
    tick: int = Field(..., ge=0, description="Tick the report was made")
    weight: Optional[float] = Field(None, gt=0, description="Evidence weight override")

    @model_validator(mode="after")
    def _not_about_self(self) -> "HearsayReport":
        if self.observer == self.subject:
            raise ValueError("an agent cannot receive hearsay about itself")
        return self


LogEntry = Union[TransactionEvent, HearsayReport]


class TransactionLog:
    """Append-only (until drained) ordered sequence of log entries for one tick."""

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def extend(self, entries: List[LogEntry]) -> None:
        for entry in entries:
            self.append(entry)

    def entries(self) -> List[LogEntry]:
        """Snapshot of pending entries in append order."""
        return list(self._entries)

    def drain(self) -> List[LogEntry]:
        """Return all pending entries in append order and empty the log."""
        drained, self._entries = self._entries, []
        return drained

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)


class TransactionArchive:
    """In-memory history of processed entries, keyed by tick.

    ``max_ticks`` bounds memory by keeping only the most recent N ticks.
    """

    def __init__(self, max_ticks: Optional[int] = None) -> None:
        if max_ticks is not None and max_ticks < 1:
            raise ValueError("max_ticks must be >= 1 when set")
        self.max_ticks = max_ticks
        self._by_tick: "OrderedDict[int, List[LogEntry]]" = OrderedDict()

    def record(self, tick: int, entries: List[LogEntry]) -> None:
        self._by_tick.setdefault(tick, []).extend(entries)
        if self.max_ticks is not None:
            while len(self._by_tick) > self.max_ticks:
                self._by_tick.popitem(last=False)

    def entries_for(self, tick: int) -> List[LogEntry]:
        return list(self._by_tick.get(tick, []))

    def all_entries(self) -> List[LogEntry]:
        return [entry for entries in self._by_tick.values() for entry in entries]

    def involving(self, agent_id: AgentId) -> List[LogEntry]:
        """Entries where ``agent_id`` took part (first-hand) or was observer/subject (hearsay)."""
        matches: List[LogEntry] = []
        for entry in self.all_entries():
            if isinstance(entry, TransactionEvent):
                if agent_id in entry.participants:
                    matches.append(entry)
            elif agent_id in (entry.observer, entry.subject):
                matches.append(entry)
        return matches

    def ticks(self) -> List[int]:
        return list(self._by_tick.keys())

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._by_tick.values())
