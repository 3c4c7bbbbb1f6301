"""Tests for scenario loading via ScenarioLoader."""

import json

import pytest

from libreconomy.config import Config
from libreconomy.errors import ConfigurationError
from libreconomy.reputation import DecayMode, Provenance
from libreconomy.scenario import ScenarioLoader
from libreconomy.schemas import DietType


def minimal_scenario(**overrides):
    data = {
        "name": "Tiny",
        "species": {"rabbit": "rabbit"},
        "agents": [{"agent_id": 0, "species": "rabbit", "x": 0, "y": 0}],
    }
    data.update(overrides)
    return data


def test_meadow_scenario_loads():
    scenario = ScenarioLoader().load("meadow")
    agents = {agent.agent_id: agent for agent in scenario.agents}

    assert scenario.name == "Meadow Market"
    assert len(agents) == 5
    assert agents[0].species is agents[1].species
    assert agents[2].species.diet == DietType.HERBIVORE
    assert agents[1].knowledge.known_employers == {3: 5.0}
    assert agents[0].inventory.quantity("food") == 8
    assert scenario.decision.search_radius == 200
    assert scenario.decay.interval == 5
    assert scenario.decay.mode == DecayMode.SYMMETRIC
    assert scenario.world.item_count("water") == 2
    assert scenario.world.species_of(4) == "rabbit"


def test_meadow_initial_reputation():
    scenario = ScenarioLoader().load("meadow")

    assert scenario.reputation.get(1, 0).alpha == 4
    assert scenario.reputation.get(0, 1) is None
    assert scenario.reputation.get(0, 1, Provenance.HEARSAY).beta == 2


def test_meadow_builds_a_running_simulation():
    simulation = ScenarioLoader().load("meadow").build_simulation()

    reports = [simulation.step() for _ in range(5)]

    assert simulation.tick == 5
    assert reports[-1].decay_applied
    assert not any(report.decay_applied for report in reports[:-1])


def test_each_build_starts_from_the_loaded_state():
    scenario = ScenarioLoader().load("meadow")
    hunger = {agent.agent_id: agent.needs.hunger for agent in scenario.agents}
    food = scenario.world.item_count()

    first = scenario.build_simulation()
    for _ in range(5):
        first.step()
    second = scenario.build_simulation()

    assert second.tick == 0
    assert {agent_id: agent.needs.hunger for agent_id, agent in second.agents.items()} == hunger
    assert second.world.item_count() == food
    assert second.reputation.get(1, 0).alpha == 4
    assert len(second.reputation) == len(scenario.reputation) == 2
    assert second.agents[0] is not first.agents[0]
    assert second.agents[0].species is scenario.species["human"]
    assert scenario.world.item_count() == food


def test_environment_defaults_under_scenario_blocks(monkeypatch):
    monkeypatch.setattr(Config, "EVIDENCE_WEIGHT", 3.0)
    monkeypatch.setattr(Config, "DECAY_INTERVAL", 4)
    monkeypatch.setattr(Config, "SEARCH_RADIUS", 400.0)
    data = minimal_scenario(
        reputation={"decay": {"interval": 7}},
        decision={"thresholds": {"high_hunger": 70}},
    )

    scenario = ScenarioLoader().load_data(data)

    assert scenario.update.evidence_weight == 3.0
    assert scenario.decay.interval == 7
    assert scenario.decision.search_radius == 400.0
    assert scenario.decision.thresholds.high_hunger == 70


def test_load_from_custom_directory(tmp_path):
    (tmp_path / "tiny.json").write_text(json.dumps(minimal_scenario()))

    scenario = ScenarioLoader(tmp_path).load("tiny")

    assert scenario.name == "Tiny"
    assert scenario.description == ""
    assert len(scenario.agents) == 1


def test_missing_scenario_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ScenarioLoader(tmp_path).load("absent")


def test_custom_species_profile():
    data = minimal_scenario(
        species={"fox": {"diet": "carnivore", "prey": ["rabbit"], "meat_item": "rabbit_meat"}},
        agents=[{"agent_id": 0, "species": "fox", "x": 0, "y": 0}],
    )

    scenario = ScenarioLoader().load_data(data)

    assert scenario.species["fox"].name == "fox"
    assert scenario.species["fox"].can_hunt("rabbit")


@pytest.mark.parametrize(
    "overrides",
    [
        {"decision": {"thresholds": {"high_hunger": -3}}},
        {"reputation": {"decay": {"decay_factor": 1.5}}},
        {"reputation": {"update": {"evidence_weight": 0}}},
        {"species": {"rabbit": {"preset": "dragon"}}},
        {"agents": [{"agent_id": 0, "species": "wolf", "x": 0, "y": 0}]},
        {"agents": [{"agent_id": 0, "species": "rabbit", "x": 0}]},
        {"agents": []},
        {
            "agents": [
                {"agent_id": 0, "species": "rabbit", "x": 0, "y": 0},
                {"agent_id": 0, "species": "rabbit", "x": 5, "y": 5},
            ]
        },
        {"agents": [{"agent_id": 0, "species": "rabbit", "x": 0, "y": 0, "currency": "lots"}]},
        {"initial_reputation": [{"observer": 0, "subject": 0, "alpha": 2, "beta": 1}]},
        {
            "agents": [
                {"agent_id": 0, "species": "rabbit", "x": 0, "y": 0},
                {"agent_id": 1, "species": "rabbit", "x": 5, "y": 5},
            ],
            "initial_reputation": [{"observer": 0, "subject": 1, "alpha": 0.5, "beta": 0.5}],
        },
        {"world": {"terrain": {"cell_size": 0}}},
    ],
)
def test_invalid_scenarios_raise_configuration_error(overrides):
    with pytest.raises(ConfigurationError):
        ScenarioLoader().load_data(minimal_scenario(**overrides))


def test_missing_required_field_names_it():
    data = minimal_scenario()
    del data["species"]

    with pytest.raises(ConfigurationError) as excinfo:
        ScenarioLoader().load_data(data)

    assert excinfo.value.field == "species"
