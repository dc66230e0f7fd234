"""Pytest configuration and shared world-building fixtures."""

from typing import Dict, Iterable, Optional, Tuple

import pytest

from unleash_agent.model import Entity, ItemType, Vec, initial_world
from unleash_agent.agent.params import Params


@pytest.fixture(autouse=True)
def restore_params():
    """Undo any Params overrides a test makes."""
    saved = Params.snapshot()
    yield
    for key, value in saved.items():
        setattr(Params, key, value)


def build_world(
    width: int = 10,
    height: int = 5,
    tick: int = 1,
    ore: Optional[int] = None,
    cells: Optional[Dict[Vec, int]] = None,
    holes: Iterable[Vec] = (),
    robots: Iterable[Tuple[int, int, int]] = (),
    enemies: Iterable[Tuple[int, int, int]] = (),
    radars: Iterable[Tuple[int, int, int]] = (),
    traps: Iterable[Tuple[int, int, int]] = (),
    carrying: Optional[Dict[int, ItemType]] = None,
    radar_cooldown: int = 0,
    trap_cooldown: int = 0,
):
    """World snapshot from compact descriptions.

    `ore` fills every cell's visible ore count (None = not visible), `cells`
    overrides single cells, and entity tuples are ``(id, x, y)``.
    """
    world = initial_world(width, height)
    world.tick = tick
    world.teams[0].radar_cooldown = radar_cooldown
    world.teams[0].trap_cooldown = trap_cooldown
    carrying = carrying or {}

    for cell in world.cells():
        cell.ore = ore
    for pos, count in (cells or {}).items():
        world.cell(pos.x, pos.y).ore = count
    for pos in holes:
        world.cell(pos.x, pos.y).hole = True

    for kind, group in (
        (ItemType.ROBOT_TEAM0, robots),
        (ItemType.ROBOT_TEAM1, enemies),
        (ItemType.RADAR, radars),
        (ItemType.TRAP, traps),
    ):
        for entity_id, x, y in group:
            world.entities.append(
                Entity(entity_id, kind, Vec(x, y), carrying.get(entity_id, ItemType.NONE))
            )
    return world


@pytest.fixture
def make_world():
    """Factory fixture around `build_world`."""
    return build_world
