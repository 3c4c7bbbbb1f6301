"""Tests for the in-memory WorldQuery reference implementation."""

import pytest

from libreconomy.schemas import Terrain
from libreconomy.world_query import InMemoryWorldQuery, ResourceLocation, TerrainGrid, WorldQuery


def make_world():
    world = InMemoryWorldQuery(interaction_range=10)
    world.place_agent(1, "human", 0, 0)
    world.place_agent(2, "rabbit", 3, 4)
    world.place_agent(3, "rabbit", 30, 40)
    world.place_agent(4, "human", -6, 8)
    return world


def test_nearby_agents_sorted_and_excludes_center():
    world = make_world()

    assert world.nearby_agents(1, 20) == [2, 4]
    assert world.nearby_agents(1, 100) == [2, 4, 3]
    assert world.nearby_agents(99, 100) == []


def test_nearby_items_filter_and_order():
    world = make_world()
    world.add_item("water", 10, 0)
    world.add_item("water", 2, 0)
    world.add_item("grass", 1, 0)

    water = world.nearby_items(1, 50, "water")
    everything = world.nearby_items(1, 5)

    assert [loc.distance for loc in water] == [2, 10]
    assert [loc.item_type for loc in everything] == ["grass", "water"]
    assert isinstance(water[0], ResourceLocation)
    assert water[0].position == (2, 0)


def test_take_item_removes_exactly_one():
    world = make_world()
    world.add_item("grass", 1, 1)
    world.add_item("grass", 1, 1)

    assert world.take_item("grass", 1, 1)
    assert world.item_count("grass") == 1
    assert not world.take_item("grass", 5, 5)


def test_distance_species_and_interaction():
    world = make_world()

    assert world.distance(1, 2) == pytest.approx(5)
    assert world.distance(1, 42) is None
    assert world.species_of(3) == "rabbit"
    assert world.can_interact(1, 2)
    assert not world.can_interact(1, 3)
    assert not world.can_interact(1, 1)


def test_move_and_remove_agent():
    world = make_world()

    world.move_agent(3, 1, 1)
    assert world.nearby_agents(1, 2) == [3]
    world.remove_agent(3)
    assert world.position_of(3) is None


def test_terrain_grid_cells_and_default():
    grid = TerrainGrid(cell_size=10, default=Terrain.GRASS)
    grid.set(1, 0, Terrain.WATER)
    grid.fill(range(0, 2), range(2, 3), Terrain.ROCKY)
    world = InMemoryWorldQuery(terrain=grid)

    assert world.terrain_at((15, 5)) == Terrain.WATER
    assert world.terrain_at((5, 25)) == Terrain.ROCKY
    assert world.terrain_at((-3, -3)) == Terrain.GRASS


def test_world_query_defaults_for_custom_hosts():
    class TwoAgentWorld(WorldQuery):
        def nearby_agents(self, center, radius):
            return [2] if center == 1 else [1]

        def nearby_items(self, center, radius, item_type=None):
            return []

        def terrain_at(self, position):
            return None

        def distance(self, a, b):
            return 1.0 if {a, b} == {1, 2} else None

        def species_of(self, agent_id):
            return "human"

    world = TwoAgentWorld()

    assert world.position_of(1) is None
    assert world.can_interact(1, 2)
    assert not world.can_interact(1, 3)
