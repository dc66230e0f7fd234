"""
Grid helper and data model tests.

Run with: pytest tests/test_utils.py -v
"""

import math

import pytest

from unleash_agent.model import ItemType, Vec, initial_world
from unleash_agent.utils import all_cells, distance_to_edge, neighbours, within_bounds


def test_vec_distances_and_tag():
    a, b = Vec(1, 2), Vec(4, 6)
    assert a.l1(b) == 7
    assert math.isclose(a.distance(b), 5.0)
    assert str(a) == "1,2"
    assert len({Vec(1, 2), a}) == 1


def test_neighbours_includes_origin_in_row_major_order():
    world = initial_world(5, 5)
    cells = list(neighbours(Vec(2, 2), world))
    assert cells == [Vec(2, 1), Vec(1, 2), Vec(2, 2), Vec(3, 2), Vec(2, 3)]


def test_neighbours_clipped_at_corner():
    world = initial_world(5, 5)
    assert set(neighbours(Vec(0, 0), world, 2)) == {
        Vec(0, 0), Vec(1, 0), Vec(2, 0), Vec(0, 1), Vec(1, 1), Vec(0, 2),
    }


def test_all_cells_and_bounds():
    world = initial_world(3, 2)
    cells = list(all_cells(world))
    assert len(cells) == 6 and cells[0] == Vec(0, 0) and cells[-1] == Vec(2, 1)
    assert within_bounds(Vec(2, 1), world)
    assert not within_bounds(Vec(3, 1), world)
    assert not within_bounds(Vec(0, -1), world)
    assert distance_to_edge(Vec(1, 0), world) == 0


def test_initial_world():
    world = initial_world(30, 15)
    assert world.tick == 0
    assert all(cell.ore is None and not cell.hole for cell in world.cells())
    assert world.robots(ItemType.ROBOT_TEAM0) == []

    with pytest.raises(ValueError):
        initial_world(0, 15)


def test_clone_is_independent(make_world):
    world = make_world(robots=[(0, 1, 1)], cells={Vec(2, 2): 3})
    copy = world.clone()
    copy.cell(2, 2).ore = 0
    copy.entity(0).pos = Vec(4, 4)
    copy.teams[0].score = 9

    assert world.cell(2, 2).ore == 3
    assert world.entity(0).pos == Vec(1, 1)
    assert world.teams[0].score == 0
