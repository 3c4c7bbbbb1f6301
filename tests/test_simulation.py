"""Tests for the tick orchestrator and the default action executor."""

import pytest

from libreconomy.config import Config
from libreconomy.decision import Action, ActionKind, Decision, Intent, IntentKind
from libreconomy.items import ItemRegistry, ItemType
from libreconomy.reputation import (
    Outcome,
    Provenance,
    ReputationDecayConfig,
    ReputationDecaySystem,
)
from libreconomy.schemas import AgentState, Inventory, Knowledge, NeedsState, NeedType, SpeciesProfile
from libreconomy.simulation import ActionExecutor, DefaultActionExecutor, Simulation, SimulationHaltedError
from libreconomy.world_query import InMemoryWorldQuery, WorldQuery


def make_agent(agent_id, species=None, *, x=0, y=0, world=None, **fields):
    needs = {key: fields.pop(key) for key in ("thirst", "hunger", "tiredness") if key in fields}
    agent = AgentState(
        agent_id=agent_id,
        species=species or SpeciesProfile.human(),
        needs=NeedsState(**needs),
        **fields,
    )
    if world is not None:
        world.place_agent(agent_id, agent.species.name, x, y)
    return agent


def no_decay():
    return ReputationDecaySystem(ReputationDecayConfig(decay_factor=1.0))


def make_market():
    world = InMemoryWorldQuery()
    buyer = make_agent(
        1, world=world, hunger=95, currency=50, knowledge=Knowledge(known_prices={"food": 3})
    )
    seller = make_agent(2, world=world, x=10, currency=100, inventory=Inventory(items={"food": 5}))
    return Simulation([buyer, seller], world, decay_system=no_decay())


def test_trade_creates_symmetric_reputation_and_moves_goods():
    simulation = make_market()

    report = simulation.step()

    buyer, seller = simulation.agents[1], simulation.agents[2]
    assert report.tick == 1
    assert report.decisions[0].action.kind == ActionKind.TRADE
    assert report.events_processed == 1
    assert simulation.reputation.get(1, 2).alpha == 2.0
    assert simulation.reputation.get(2, 1).alpha == 2.0
    assert buyer.inventory.quantity("food") == 1
    assert seller.inventory.quantity("food") == 4
    assert buyer.currency == 47
    assert seller.currency == 103
    assert buyer.knowledge.known_prices["food"] == 3
    assert 1 in seller.knowledge.trade_partners
    assert len(simulation.archive) == 1
    assert len(simulation.log) == 0


def test_hunt_then_eat_the_catch():
    world = InMemoryWorldQuery()
    hunter = make_agent(1, world=world, hunger=95)
    rabbit = make_agent(2, SpeciesProfile.rabbit(), world=world, x=10)
    simulation = Simulation([hunter, rabbit], world, decay_system=no_decay())

    first = simulation.step()

    assert first.decisions[0].action.kind == ActionKind.HUNT
    assert 2 not in simulation.agents
    assert world.species_of(2) is None
    assert hunter.inventory.quantity("rabbit_meat") == 1

    second = simulation.step()

    assert [d.action.kind for d in second.decisions] == [ActionKind.CONSUME]
    assert hunter.inventory.quantity("rabbit_meat") == 0
    assert hunter.needs.hunger < 60


def test_executor_leaves_items_the_species_cannot_eat():
    items = ItemRegistry()
    items.register(ItemType(item_id="melon_meat", satisfies={NeedType.THIRST: 20, NeedType.HUNGER: 10}))
    world = InMemoryWorldQuery()
    rabbit = make_agent(
        1, SpeciesProfile.rabbit(), world=world, thirst=90, inventory=Inventory(items={"melon_meat": 1})
    )
    world.add_item("melon_meat", 5, 0)
    location = world.nearby_items(1, 100, "melon_meat")[0]
    intent = Intent(kind=IntentKind.SEEK_ITEM, item_type="melon_meat", need=NeedType.THIRST)
    decisions = [
        Decision(agent_id=1, intent=intent, action=Action.consume("melon_meat")),
        Decision(agent_id=1, intent=intent, action=Action.consume("melon_meat", location)),
    ]

    DefaultActionExecutor(world, items).resolve(decisions, {1: rabbit}, tick=1)

    assert rabbit.inventory.quantity("melon_meat") == 1
    assert world.item_count("melon_meat") == 1
    assert rabbit.needs.thirst == 90


def test_paused_agents_are_skipped():
    world = InMemoryWorldQuery()
    active = make_agent(1, world=world)
    paused = make_agent(2, world=world, paused=True)
    simulation = Simulation([active, paused], world)

    report = simulation.step()

    assert [decision.agent_id for decision in report.decisions] == [1]
    assert paused.needs.thirst > 0


def test_duplicate_agent_ids_rejected():
    world = InMemoryWorldQuery()

    with pytest.raises(ValueError):
        Simulation([make_agent(1), make_agent(1)], world)


def test_custom_world_requires_executor():
    class EmptyWorld(WorldQuery):
        def nearby_agents(self, center, radius):
            return []

        def nearby_items(self, center, radius, item_type=None):
            return []

        def terrain_at(self, position):
            return None

        def distance(self, a, b):
            return None

        def species_of(self, agent_id):
            return None

    with pytest.raises(ValueError):
        Simulation([make_agent(1)], EmptyWorld())


def test_executor_failure_halts_with_tick():
    class BrokenExecutor(ActionExecutor):
        def resolve(self, decisions, agents, tick):
            raise RuntimeError("host exploded")

    world = InMemoryWorldQuery()
    simulation = Simulation([make_agent(1, world=world)], world, executor=BrokenExecutor())

    with pytest.raises(SimulationHaltedError) as excinfo:
        simulation.step()

    assert excinfo.value.tick == 1
    assert isinstance(excinfo.value.underlying, RuntimeError)
    assert "Remediation tips" in str(excinfo.value)


def test_listeners_receive_reports_and_failures_do_not_stop_run(capsys):
    seen = []

    def broken(report):
        raise KeyError("listener bug")

    world = InMemoryWorldQuery()
    simulation = Simulation(
        [make_agent(1, world=world)], world, tick_listeners=[broken, seen.append]
    )

    simulation.step()
    simulation.step()

    assert [report.tick for report in seen] == [1, 2]
    assert "Listener failed" in capsys.readouterr().out


def test_decay_follows_interval():
    world = InMemoryWorldQuery()
    simulation = Simulation(
        [make_agent(1, world=world)],
        world,
        decay_system=ReputationDecaySystem(ReputationDecayConfig(interval=2)),
    )

    applied = [simulation.step().decay_applied for _ in range(4)]

    assert applied == [False, True, False, True]


def test_hearsay_reports_are_processed_next_step():
    world = InMemoryWorldQuery()
    agents = [make_agent(i, world=world, x=i * 500) for i in (1, 2, 3)]
    simulation = Simulation(agents, world, decay_system=no_decay())

    simulation.report_hearsay(1, 2, 3, Outcome.NEGATIVE)
    report = simulation.step()

    assert report.events_processed == 1
    assert simulation.reputation.get(1, 2, Provenance.HEARSAY).beta == 2.0
    assert simulation.reputation.get(1, 2) is None


def test_run_prints_progress_and_returns_summary(monkeypatch, capsys):
    monkeypatch.setenv("LIBRECONOMY_NO_COLOR", "1")
    simulation = make_market()

    result = simulation.run(3)

    out = capsys.readouterr().out
    assert "Starting simulation at tick 0" in out
    assert "[Tick 1]" in out
    assert "Simulation complete!" in out
    assert result["final_tick"] == 3
    assert result["ticks_run"] == 3
    assert result["agents"] == 2
    assert len(result["reports"]) == 3
    assert result["reputation_entries"] == 2


def test_run_defaults_to_configured_tick_count(monkeypatch, capsys):
    monkeypatch.setattr(Config, "DEFAULT_TICK_COUNT", 2)
    simulation = make_market()

    result = simulation.run()

    assert result["ticks_run"] == 2
    assert simulation.tick == 2
    assert "Agents: 2, Ticks: 2" in capsys.readouterr().out


def test_default_reputation_systems_follow_environment(monkeypatch):
    monkeypatch.setattr(Config, "EVIDENCE_WEIGHT", 5.0)
    monkeypatch.setattr(Config, "DECAY_INTERVAL", 3)
    monkeypatch.setattr(Config, "DECAY_FACTOR", 1.0)
    world = InMemoryWorldQuery()
    buyer = make_agent(
        1, world=world, hunger=95, currency=50, knowledge=Knowledge(known_prices={"food": 3})
    )
    seller = make_agent(2, world=world, x=10, currency=100, inventory=Inventory(items={"food": 5}))
    simulation = Simulation([buyer, seller], world)

    simulation.step()

    assert simulation.update_system.config.evidence_weight == 5.0
    assert simulation.decay_system.config.interval == 3
    assert simulation.reputation.get(1, 2).alpha == 6.0


def test_identical_setups_produce_identical_runs():
    def trace():
        simulation = make_market()
        reports = [simulation.step() for _ in range(6)]
        actions = [decision.action for report in reports for decision in report.decisions]
        beliefs = [(key, view.alpha, view.beta) for key, view in simulation.reputation.entries()]
        return actions, beliefs

    assert trace() == trace()
