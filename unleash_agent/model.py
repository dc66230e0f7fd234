"""World snapshot and action types for Unleash The Geek."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Iterator, List, Optional

MAX_TICKS = 200
DIG_RANGE = 1
RADAR_RANGE = 5
TRAP_RANGE = 1
MOVEMENT_SPEED = 4
NUM_ROBOTS = 5


@dataclass(frozen=True)
class Vec:
    x: int
    y: int

    def l1(self, other: Vec) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def distance(self, other: Vec) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def __str__(self) -> str:
        return f"{self.x},{self.y}"


class ItemType(IntEnum):
    NONE = -1
    ROBOT_TEAM0 = 0
    ROBOT_TEAM1 = 1
    RADAR = 2
    TRAP = 3
    ORE = 4


@dataclass
class Team:
    team_id: int
    score: int = 0
    radar_cooldown: int = 0
    trap_cooldown: int = 0


@dataclass
class Cell:
    pos: Vec
    ore: Optional[int] = None  # None while not visible
    hole: bool = False


@dataclass
class Entity:
    id: int
    type: ItemType
    pos: Vec
    carrying: ItemType = ItemType.NONE
    dead: bool = False


@dataclass(frozen=True)
class Action:
    entity_id: int
    type: str
    target: Optional[Vec] = None
    item: Optional[ItemType] = None
    tag: Optional[str] = None

    @staticmethod
    def wait(entity_id: int, tag: Optional[str] = None) -> Action:
        return Action(entity_id, "wait", tag=tag)

    @staticmethod
    def move(entity_id: int, target: Vec, tag: Optional[str] = None) -> Action:
        return Action(entity_id, "move", target=target, tag=tag)

    @staticmethod
    def dig(entity_id: int, target: Vec, tag: Optional[str] = None) -> Action:
        return Action(entity_id, "dig", target=target, tag=tag)

    @staticmethod
    def request(entity_id: int, item: ItemType, tag: Optional[str] = None) -> Action:
        return Action(entity_id, "request", item=item, tag=tag)


@dataclass
class World:
    """One tick's snapshot, plus the actions chosen on that tick."""

    tick: int
    width: int
    height: int
    teams: List[Team]
    grid: List[List[Cell]]  # grid[y][x]
    entities: List[Entity] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    num_robots: int = NUM_ROBOTS

    def cell(self, x: int, y: int) -> Cell:
        return self.grid[y][x]

    def cells(self) -> Iterator[Cell]:
        for row in self.grid:
            yield from row

    def entity(self, entity_id: int) -> Optional[Entity]:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def action_for(self, entity_id: int) -> Optional[Action]:
        for action in self.actions:
            if action.entity_id == entity_id:
                return action
        return None

    def robots(self, item_type: ItemType = ItemType.ROBOT_TEAM0) -> List[Entity]:
        return [e for e in self.entities if e.type == item_type]

    def clone(self) -> World:
        return World(
            tick=self.tick,
            width=self.width,
            height=self.height,
            teams=[replace(team) for team in self.teams],
            grid=[[replace(cell) for cell in row] for row in self.grid],
            entities=[replace(entity) for entity in self.entities],
            actions=list(self.actions),
            num_robots=self.num_robots,
        )


def initial_world(width: int, height: int) -> World:
    if width <= 0 or height <= 0:
        raise ValueError("world dimensions must be positive")
    grid = [[Cell(Vec(x, y)) for x in range(width)] for y in range(height)]
    return World(
        tick=0,
        width=width,
        height=height,
        teams=[Team(0), Team(1)],
        grid=grid,
    )
