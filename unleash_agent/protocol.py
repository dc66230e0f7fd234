"""Engine line protocol: parse snapshots from stdin, format actions for stdout.

Parsing works on plain line sequences so it can be tested without a
running engine; ``read_initial`` / ``read_turn`` only gather the lines.
"""
from __future__ import annotations

from typing import Callable, List, Sequence

from unleash_agent.model import Action, Entity, ItemType, Vec, World, initial_world
from unleash_agent.utils import within_bounds


class ProtocolError(ValueError):
    pass


def _ints(line: str, count: int, what: str) -> List[int]:
    parts = line.split()
    if len(parts) != count:
        raise ProtocolError(f"{what}: expected {count} values, got {line!r}")
    try:
        return [int(p) for p in parts]
    except ValueError as e:
        raise ProtocolError(f"{what}: {e}") from e


def _next(it, what: str) -> str:
    try:
        return next(it)
    except StopIteration:
        raise ProtocolError(f"unexpected end of input reading {what}") from None


def parse_initial(lines: Sequence[str]) -> World:
    width, height = _ints(_next(iter(lines), "dimensions"), 2, "dimensions")
    try:
        return initial_world(width, height)
    except ValueError as e:
        raise ProtocolError(str(e)) from e


def parse_turn(previous: World, lines: Sequence[str]) -> World:
    """Build the next snapshot from one turn's block of engine lines."""
    world = previous.clone()
    world.tick = previous.tick + 1
    world.actions = []
    it = iter(lines)

    world.teams[0].score, world.teams[1].score = _ints(_next(it, "scores"), 2, "scores")

    for y in range(world.height):
        tokens = _next(it, f"row {y}").split()
        if len(tokens) != 2 * world.width:
            raise ProtocolError(f"row {y}: expected {2 * world.width} tokens, got {len(tokens)}")
        for x in range(world.width):
            ore, hole = tokens[2 * x], tokens[2 * x + 1]
            cell = world.cell(x, y)
            try:
                cell.ore = None if ore == "?" else int(ore)
                cell.hole = int(hole) != 0
            except ValueError as e:
                raise ProtocolError(f"row {y}: {e}") from e

    count, radar_cooldown, trap_cooldown = _ints(_next(it, "entity header"), 3, "entity header")
    world.teams[0].radar_cooldown = radar_cooldown
    world.teams[0].trap_cooldown = trap_cooldown

    entities: List[Entity] = []
    for _ in range(count):
        entity_id, kind, x, y, item = _ints(_next(it, "entity"), 5, "entity")
        try:
            entity_type = ItemType(kind)
            carrying = ItemType(item)
        except ValueError as e:
            raise ProtocolError(f"entity {entity_id}: {e}") from e

        if x < 0:
            # Dead robots are reported off the map; keep their last known position
            before = previous.entity(entity_id)
            pos = before.pos if before is not None else Vec(0, 0)
            entities.append(Entity(entity_id, entity_type, pos, ItemType.NONE, dead=True))
        else:
            pos = Vec(x, y)
            if not within_bounds(pos, world):
                raise ProtocolError(f"entity {entity_id}: position {pos} outside the map")
            entities.append(Entity(entity_id, entity_type, pos, carrying))
    world.entities = entities
    return world


def format_action(action: Action) -> str:
    if action.type == "move" and action.target is not None:
        line = f"MOVE {action.target.x} {action.target.y}"
    elif action.type == "dig" and action.target is not None:
        line = f"DIG {action.target.x} {action.target.y}"
    elif action.type == "request" and action.item is not None:
        line = f"REQUEST {action.item.name}"
    else:
        line = "WAIT"
    if action.tag:
        line += f" {action.tag}"
    return line


def read_initial(read: Callable[[], str] = input) -> World:
    return parse_initial([read()])


def read_turn(previous: World, read: Callable[[], str] = input) -> World:
    lines: List[str] = [read()]
    for _ in range(previous.height):
        lines.append(read())
    header = read()
    lines.append(header)
    count = _ints(header, 3, "entity header")[0]
    for _ in range(count):
        lines.append(read())
    return parse_turn(previous, lines)
