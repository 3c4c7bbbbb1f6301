"""Tests for agent-state schemas: clamping, species capabilities, config validation."""

import math
import random

import pytest
from pydantic import ValidationError

from libreconomy.schemas import (
    AgentState,
    DecisionThresholds,
    DietType,
    EnergyState,
    Inventory,
    NeedsState,
    NeedType,
    PreferenceProfile,
    SpeciesProfile,
    Terrain,
    UtilityWeights,
)


def test_needs_clamped_on_construction():
    needs = NeedsState(thirst=150, hunger=-5, tiredness=float("nan"))

    assert needs.thirst == 100
    assert needs.hunger == 0
    assert needs.tiredness == 0


def test_needs_respect_custom_max():
    needs = NeedsState(max_value=50, thirst=80)

    assert needs.thirst == 50
    assert needs.increase(NeedType.HUNGER, 70) == 50


def test_need_mutations_stay_in_bounds():
    rng = random.Random(7)
    needs = NeedsState()

    for _ in range(500):
        need = rng.choice(list(NeedType))
        delta = rng.uniform(-250, 250)
        needs.adjust(need, delta)
        for each in NeedType:
            assert 0 <= needs.get(each) <= needs.max_value


def test_decrease_and_increase_ignore_sign():
    needs = NeedsState(hunger=40)

    needs.decrease(NeedType.HUNGER, -10)
    assert needs.hunger == 30
    needs.increase(NeedType.HUNGER, -10)
    assert needs.hunger == 40


def test_energy_saturates():
    energy = EnergyState(max_energy=50, current=70)
    assert energy.current == 50

    energy.deplete(80)
    assert energy.current == 0
    energy.restore(1e9)
    assert energy.current == 50
    assert energy.fraction == 1.0


def test_energy_set_max_reclamps():
    energy = EnergyState(max_energy=100, current=90)

    energy.set_max(60)

    assert energy.current == 60
    with pytest.raises(ValueError):
        energy.set_max(0)


def test_direct_assignment_is_clamped():
    needs = NeedsState(max_value=80)
    energy = EnergyState(max_energy=50)
    agent = AgentState(agent_id=0, species=SpeciesProfile.rabbit())

    needs.hunger = 500
    needs.thirst = -20
    energy.current = -5
    agent.currency = -10

    assert needs.hunger == 80
    assert needs.thirst == 0
    assert energy.current == 0
    assert agent.currency == 0

    energy.current = 75
    assert energy.current == 50


def test_rabbit_preset_is_strict_herbivore():
    rabbit = SpeciesProfile.rabbit()

    assert rabbit.diet == DietType.HERBIVORE
    assert rabbit.can_eat("grass")
    assert not rabbit.can_eat("rabbit_meat")
    assert not rabbit.can_hunt("rabbit")
    assert rabbit.plant_foods == ["grass"]


def test_human_preset_hunts_rabbits():
    human = SpeciesProfile.human()

    assert human.can_hunt("rabbit")
    assert not human.can_hunt("human")
    assert not human.can_hunt(None)
    assert human.can_eat("rabbit_meat")
    assert human.can_eat("food") and human.can_eat("grass")


def test_herbivore_with_prey_list_still_cannot_hunt():
    odd = SpeciesProfile(name="deer", diet=DietType.HERBIVORE, prey=["rabbit"])

    assert not odd.can_hunt("rabbit")
    assert not odd.eats_meat


def test_species_plant_defaults_and_carnivore_foods():
    grazer = SpeciesProfile(name="cow", diet=DietType.HERBIVORE)
    fox = SpeciesProfile(name="fox", diet=DietType.CARNIVORE, prey=["rabbit"])

    assert grazer.plant_foods == ["grass", "food"]
    assert fox.can_eat("rabbit_meat")
    assert not fox.can_eat("grass")


def test_terrain_penalty_lookup_and_validation():
    rabbit = SpeciesProfile.rabbit()

    assert rabbit.penalty_for(Terrain.WATER) == 4.0
    assert rabbit.penalty_for(Terrain.DIRT) == 1.0
    assert rabbit.penalty_for(None) == 1.0

    with pytest.raises(ValidationError):
        SpeciesProfile(name="bad", diet=DietType.OMNIVORE, terrain_penalty={"lava": -1})

    impassable = SpeciesProfile(name="mole", diet=DietType.HERBIVORE, terrain_penalty={"water": math.inf})
    assert math.isinf(impassable.penalty_for("water"))


def test_species_profile_is_read_only():
    rabbit = SpeciesProfile.rabbit()

    with pytest.raises(ValidationError):
        rabbit.diet = DietType.CARNIVORE


def test_utility_weights_reject_negative():
    with pytest.raises(ValidationError):
        UtilityWeights(survival=-1)


def test_risk_tolerance_is_clamped():
    assert PreferenceProfile(risk_tolerance=4).risk_tolerance == 1.0
    assert PreferenceProfile(risk_tolerance=-2).risk_tolerance == 0.0


def test_thresholds_defaults_and_lookup():
    thresholds = DecisionThresholds()

    assert thresholds.high_for(NeedType.THIRST) == 60
    assert thresholds.critical_for(NeedType.HUNGER) == 70
    assert thresholds.critical_for(NeedType.TIREDNESS) == 85


@pytest.mark.parametrize(
    "overrides",
    [
        {"high_hunger": -1},
        {"high_thirst": 120},
        {"high_tiredness": 90, "critical_tiredness": 80},
        {"need_max": 50},
    ],
)
def test_thresholds_reject_out_of_range(overrides):
    with pytest.raises(ValidationError):
        DecisionThresholds(**overrides)


def test_inventory_saturating_operations():
    inventory = Inventory(items={"food": 3, "junk": -4})

    assert "junk" not in inventory.items
    assert inventory.remove("food", 10) == 3
    assert inventory.quantity("food") == 0
    assert "food" not in inventory.items
    assert inventory.add("water", 2) == 2
    assert inventory.remove("water", -1) == 0


def test_agent_wallet_never_negative():
    agent = AgentState(agent_id=1, species=SpeciesProfile.human(), currency=-10)
    assert agent.currency == 0

    agent.earn(5)
    assert not agent.spend(6)
    assert agent.currency == 5
    assert agent.spend(5)
    assert agent.currency == 0
    assert not agent.spend(-1)


def test_agents_share_species_profile():
    human = SpeciesProfile.human()
    first = AgentState(agent_id=1, species=human)
    second = AgentState(agent_id=2, species=human)

    assert first.species is second.species
