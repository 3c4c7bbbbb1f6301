"""
Tick orchestrator.

Coordinates one deterministic, ordered pass per tick:
1. Need decay (NeedDecaySystem)
2. Decisions for every non-paused agent, in ascending AgentId order
3. Action resolution by the injected ActionExecutor, which appends the
   resulting log entries in resolution order
4. Reputation update (drains the TransactionLog)
5. Periodic reputation decay
6. Tick listeners

Decisions within a tick are independent pure computations. They all finish
before any reputation record is touched, so beliefs never race with the
decisions that read them.

The world itself is external. Hosts with their own spatial model pass their
own WorldQuery and ActionExecutor; ``InMemoryWorldQuery`` together with
``DefaultActionExecutor`` is enough for tests, examples and small runs.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .cadence import CurrentTick
from .config import Config
from .decision.engine import DecisionMaker, UtilityMaximizer
from .decision.types import ActionKind, Decision
from .errors import LibreconomyError
from .items import ItemRegistry
from .logging_utils import log_error, log_info, log_success
from .needs import NeedDecaySystem, can_consume, consume_item
from .reputation.events import HearsayReport, LogEntry, Outcome, TransactionArchive, TransactionEvent, TransactionLog
from .reputation.systems import ReputationDecaySystem, ReputationUpdateSystem
from .reputation.view import ReputationBook
from .schemas import AgentId, AgentState
from .world_query import InMemoryWorldQuery, WorldQuery


# =============================
# Module-level Exceptions
# =============================

class SimulationHaltedError(LibreconomyError):
    """Raised when the host's ActionExecutor fails during a tick."""

    def __init__(self, *, tick: int, underlying: Exception) -> None:
        self.tick = tick
        self.underlying = underlying
        message = (
            f"Action resolution failed at tick {tick}: {underlying}\n\n"
            "Remediation tips:\n"
            "  - Check the ActionExecutor handles every ActionKind\n"
            "  - Ensure returned entries are TransactionEvent or HearsayReport\n"
            "  - LIBRECONOMY_VERBOSE=true prints each decision before resolution"
        )
        super().__init__(message)


# =============================
# Execution layer
# =============================

class ActionExecutor(ABC):
    """Host-side layer that applies Actions to the world.

    Receives the tick's decisions in AgentId order and returns the log
    entries produced, in the order the actions were resolved.
    """

    @abstractmethod
    def resolve(
        self,
        decisions: List[Decision],
        agents: Dict[AgentId, AgentState],
        tick: int,
    ) -> List[LogEntry]:
        """Apply world effects and return completed exchanges."""


class DefaultActionExecutor(ActionExecutor):
    """Deterministic resolution against an InMemoryWorldQuery.

    - Consume: eat from inventory or pick the item up from the map
    - Hunt: prey in interaction range is removed; the hunter gains meat
    - Trade: transfers item and currency; Positive if both sides can honour
      the terms, Negative if not. Out of range means no exchange happened.
    - ApplyForWork: employer pays the first wage; Negative if it cannot
    - Rest: recovers tiredness and energy; Wander: no effect here
    """

    def __init__(
        self,
        world: InMemoryWorldQuery,
        items: Optional[ItemRegistry] = None,
        need_decay: Optional[NeedDecaySystem] = None,
    ) -> None:
        self.world = world
        self.items = items if items is not None else ItemRegistry()
        self.need_decay = need_decay or NeedDecaySystem()

    def resolve(
        self,
        decisions: List[Decision],
        agents: Dict[AgentId, AgentState],
        tick: int,
    ) -> List[LogEntry]:
        entries: List[LogEntry] = []
        for decision in decisions:
            agent = agents.get(decision.agent_id)
            # Killed earlier in this tick
            if agent is None:
                continue
            action = decision.action
            if action.kind == ActionKind.REST:
                self.need_decay.rest(agent)
            elif action.kind == ActionKind.CONSUME:
                self._consume(agent, action.item, action.location)
            elif action.kind == ActionKind.HUNT:
                self._hunt(agent, action.target, agents)
            elif action.kind == ActionKind.TRADE:
                event = self._trade(agent, decision, agents, tick)
                if event is not None:
                    entries.append(event)
            elif action.kind == ActionKind.APPLY_FOR_WORK:
                event = self._hire(agent, decision, agents, tick)
                if event is not None:
                    entries.append(event)
        return entries

    def _consume(self, agent: AgentState, item: Optional[str], location) -> None:
        registered = self.items.lookup(item) if item is not None else None
        # Refused items stay where they are
        if registered is None or not can_consume(agent.species, registered):
            return
        if location is None:
            if agent.inventory.remove(item, 1):
                consume_item(agent, item, self.items)
        elif self.world.take_item(item, location.x, location.y):
            consume_item(agent, item, self.items)

    def _hunt(self, hunter: AgentState, target: Optional[AgentId], agents: Dict[AgentId, AgentState]) -> None:
        if target is None or target not in agents or not self.world.can_interact(hunter.agent_id, target):
            return
        del agents[target]
        self.world.remove_agent(target)
        hunter.inventory.add(hunter.species.meat_item, 1)

    def _trade(
        self,
        agent: AgentState,
        decision: Decision,
        agents: Dict[AgentId, AgentState],
        tick: int,
    ) -> Optional[TransactionEvent]:
        terms = decision.action.terms
        partner = agents.get(decision.action.target)
        if terms is None or partner is None or not self.world.can_interact(agent.agent_id, partner.agent_id):
            return None

        buyer, seller = (agent, partner) if terms.buying else (partner, agent)
        if seller.inventory.quantity(terms.item) < terms.quantity or not buyer.can_afford(terms.total):
            return TransactionEvent.failed_trade(agent.agent_id, partner.agent_id, terms.item, terms.price, tick)

        seller.inventory.remove(terms.item, terms.quantity)
        buyer.inventory.add(terms.item, terms.quantity)
        buyer.spend(terms.total)
        seller.earn(terms.total)
        for side, other in ((buyer, seller), (seller, buyer)):
            side.knowledge.learn_price(terms.item, terms.price)
            side.knowledge.add_partner(other.agent_id)
        return TransactionEvent.successful_trade(agent.agent_id, partner.agent_id, terms.item, terms.price, tick)

    def _hire(
        self,
        agent: AgentState,
        decision: Decision,
        agents: Dict[AgentId, AgentState],
        tick: int,
    ) -> Optional[TransactionEvent]:
        employer = agents.get(decision.action.target)
        wage = decision.action.wage or 0.0
        if employer is None or not self.world.can_interact(agent.agent_id, employer.agent_id):
            return None
        context = {"kind": "employment", "wage": wage}
        if not employer.spend(wage):
            return TransactionEvent(
                participants=(agent.agent_id, employer.agent_id),
                outcome=Outcome.NEGATIVE, tick=tick, context=context,
            )
        agent.earn(wage)
        agent.employment.employer = employer.agent_id
        agent.employment.job_status = "employed"
        if agent.agent_id not in employer.employment.employees:
            employer.employment.employees.append(agent.agent_id)
        return TransactionEvent(
            participants=(agent.agent_id, employer.agent_id),
            outcome=Outcome.POSITIVE, tick=tick, context=context,
        )


# =============================
# Orchestrator
# =============================

class TickReport(BaseModel):
    """What happened during one tick."""

    tick: int = Field(..., ge=0)
    decisions: List[Decision] = Field(default_factory=list)
    events_processed: int = Field(0, ge=0)
    decay_applied: bool = False

    def count_actions(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for decision in self.decisions:
            key = decision.action.kind.value
            counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items()))


TickListener = Callable[[TickReport], None]


class Simulation:
    """Runs the per-tick system pass over an arena of agents."""

    def __init__(
        self,
        agents: Iterable[AgentState],
        world: WorldQuery,
        *,
        decision_maker: Optional[DecisionMaker] = None,
        executor: Optional[ActionExecutor] = None,
        reputation: Optional[ReputationBook] = None,
        update_system: Optional[ReputationUpdateSystem] = None,
        decay_system: Optional[ReputationDecaySystem] = None,
        need_decay: Optional[NeedDecaySystem] = None,
        items: Optional[ItemRegistry] = None,
        archive: Optional[TransactionArchive] = None,
        start_tick: int = 0,
        tick_listeners: Optional[List[TickListener]] = None,
    ) -> None:
        """Wire the systems together.

        Args:
            agents: Initial population; ids must be unique.
            world: Host WorldQuery (read-only for the engine).
            executor: Required unless ``world`` is an InMemoryWorldQuery, in
                which case DefaultActionExecutor is used.
            archive: Receives processed log entries; a fresh unbounded
                archive is created when omitted.
            tick_listeners: Callables receiving each TickReport. Failures
                are logged and do not stop the run.
        """
        self.agents: Dict[AgentId, AgentState] = {}
        for agent in agents:
            if agent.agent_id in self.agents:
                raise ValueError(f"duplicate agent id {agent.agent_id}")
            self.agents[agent.agent_id] = agent

        self.world = world
        self.items = items if items is not None else ItemRegistry()
        self.decision_maker = decision_maker or UtilityMaximizer(items=self.items)
        self.need_decay = need_decay or NeedDecaySystem()
        if executor is None:
            if not isinstance(world, InMemoryWorldQuery):
                raise ValueError("an ActionExecutor is required unless world is an InMemoryWorldQuery")
            executor = DefaultActionExecutor(world, self.items, self.need_decay)
        self.executor = executor

        self.reputation = reputation if reputation is not None else ReputationBook()
        self.log = TransactionLog()
        self.update_system = update_system or ReputationUpdateSystem()
        if archive is None:
            archive = self.update_system.archive if self.update_system.archive is not None else TransactionArchive()
        self.archive = archive
        self.update_system.archive = archive
        self.decay_system = decay_system or ReputationDecaySystem()
        self.clock = CurrentTick(start_tick)
        self.tick_listeners = tick_listeners or []

    @property
    def tick(self) -> int:
        return self.clock.value

    def report_hearsay(self, observer: AgentId, subject: AgentId, reporter: AgentId, outcome: Outcome) -> None:
        """Queue a second-hand report for the next reputation update."""
        self.log.append(
            HearsayReport(observer=observer, subject=subject, reporter=reporter, outcome=outcome, tick=self.tick)
        )

    def step(self) -> TickReport:
        """Advance exactly one tick."""
        tick = self.clock.advance()

        # 1. Needs decay
        self.need_decay.run(self.agents[agent_id] for agent_id in sorted(self.agents))

        # 2. Decisions (ascending id, paused agents skipped)
        decisions = [
            self.decision_maker.decide(self.agents[agent_id], self.world, self.reputation, tick=tick)
            for agent_id in sorted(self.agents)
            if not self.agents[agent_id].paused
        ]

        # 3. Execution; entries keep resolution order
        try:
            entries = self.executor.resolve(decisions, self.agents, tick)
        except LibreconomyError:
            raise
        except Exception as exc:
            raise SimulationHaltedError(tick=tick, underlying=exc) from exc
        self.log.extend(entries)

        # 4. Reputation update, then 5. periodic decay
        processed = self.update_system.run(self.log, self.reputation)
        decayed = self.decay_system.run(self.reputation, tick)

        report = TickReport(tick=tick, decisions=decisions, events_processed=processed, decay_applied=decayed)

        # 6. Listeners are diagnostic hooks; failures never stop the run
        for listener in self.tick_listeners:
            try:
                listener(report)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"[Analysis] Listener failed: {exc}")
        return report

    def run(self, num_ticks: Optional[int] = None) -> Dict[str, Any]:
        """Run ``num_ticks`` steps (default Config.DEFAULT_TICK_COUNT) and return a summary."""
        if num_ticks is None:
            num_ticks = Config.DEFAULT_TICK_COUNT
        print(f"Starting simulation at tick {self.tick}")
        print(f"Agents: {len(self.agents)}, Ticks: {num_ticks}\n")

        reports: List[TickReport] = []
        for _ in range(num_ticks):
            report = self.step()
            reports.append(report)
            actions = ", ".join(f"{kind}={count}" for kind, count in report.count_actions().items())
            decay = " decay" if report.decay_applied else ""
            log_info(f"[Tick {report.tick}] {actions or 'no agents'} | events={report.events_processed}{decay}")

        print()
        log_success("Simulation complete!")
        return {
            "final_tick": self.tick,
            "ticks_run": num_ticks,
            "agents": len(self.agents),
            "events_processed": sum(report.events_processed for report in reports),
            "reputation_entries": len(self.reputation),
            "reports": reports,
        }
