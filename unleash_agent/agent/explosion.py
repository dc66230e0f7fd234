"""Blast projection around enemy robots, and per-tick hazard claims."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Optional, Set, Tuple

import numpy as np

from unleash_agent.model import DIG_RANGE, MOVEMENT_SPEED, TRAP_RANGE, ItemType, Vec, World
from unleash_agent.utils import Bounds, neighbours
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.params import Params

if TYPE_CHECKING:
    from unleash_agent.agent.path_map import PathMap

logger = logging.getLogger(__name__)


class ExplosionMap:
    """Cells an enemy could blow up before one of our robots can get clear.

    Every independent flood from a plausible trap gets its own explosion id;
    a cell reached by several floods belongs to all of them.
    """

    def __init__(self, bounds: Bounds) -> None:
        self.bounds = bounds
        self.num_explosions = 0
        self._probability = np.zeros((bounds.height, bounds.width), dtype=np.float64)
        self._ids: List[List[Set[int]]] = [
            [set() for _ in range(bounds.width)] for _ in range(bounds.height)
        ]

    def explode_probability(self, x: int, y: int) -> float:
        return float(self._probability[y, x])

    def get_explosion_ids(self, x: int, y: int) -> FrozenSet[int]:
        return frozenset(self._ids[y][x])

    @property
    def probabilities(self) -> np.ndarray:
        return self._probability

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs) -> ExplosionMap:
        result = cls(world)

        next_id = 1
        for enemy in world.robots(ItemType.ROBOT_TEAM1):
            if enemy.dead:
                continue

            carrying = beliefs.carrying_probability(enemy.id)
            if carrying > 0:
                # The enemy can plant a trap next to itself and set it off before we escape
                visited: Set[Vec] = set()
                for trap in neighbours(enemy.pos, world, DIG_RANGE):
                    if trap.x > 0:
                        result._explode(next_id, trap, carrying, beliefs, visited)
                next_id += 1

            # The enemy can reach an existing trap and set it off before we escape
            for trap in neighbours(enemy.pos, world, MOVEMENT_SPEED + DIG_RANGE):
                trap_probability = beliefs.trap_probability(trap.x, trap.y)
                if trap.x > 0 and trap_probability > 0:
                    result._explode(next_id, trap, trap_probability, beliefs, set())
                    next_id += 1

        return result

    def _explode(
        self,
        explosion_id: int,
        origin: Vec,
        trap_probability: float,
        beliefs: Beliefs,
        visited: Set[Vec],
    ) -> None:
        stack: List[Tuple[Vec, float]] = [(origin, trap_probability)]
        while stack:
            trap, probability = stack.pop()
            if probability <= 0 or trap in visited:
                continue
            visited.add(trap)
            self.num_explosions += 1

            blast = list(neighbours(trap, self.bounds, TRAP_RANGE))
            for cell in blast:
                if self._probability[cell.y, cell.x] < probability:
                    self._probability[cell.y, cell.x] = probability
                self._ids[cell.y][cell.x].add(explosion_id)

            for cell in blast:
                if cell.x == 0 or cell in visited:
                    continue
                chained = beliefs.trap_probability(cell.x, cell.y)
                if chained > 0:
                    stack.append((cell, chained))


class ExplosionAvoider:
    """Lets at most one robot per tick walk into any given blast group.

    If an enemy kamikazes on that robot it is a fair 1-for-1 trade; letting a
    second robot in would hand the enemy a 2-for-1.
    """

    def __init__(self, explosion_map: ExplosionMap, bounds: Bounds, allow_trades: Optional[bool] = None) -> None:
        self.explosion_map = explosion_map
        self.bounds = bounds
        self.allow_trades = Params.ALLOW_EXPLOSION_TRADES if allow_trades is None else allow_trades
        self._claimed: Dict[int, int] = {}  # explosion id -> robot id

    def assigned_robots(self, target: Vec) -> List[int]:
        ids = self.explosion_map.get_explosion_ids(target.x, target.y)
        return sorted({self._claimed[i] for i in ids if i in self._claimed})

    def claim_path(self, robot_id: int, path_map: PathMap, target: Vec) -> Vec:
        if not self.allow_trades:
            return self.avoidance_path(robot_id, path_map, target)

        direct = min(
            neighbours(path_map.origin, self.bounds, MOVEMENT_SPEED),
            key=lambda n: n.distance(target),
        )
        if self._claim(robot_id, direct):
            return direct

        logger.debug("Robot %d avoiding %s", robot_id, direct)
        return self.avoidance_path(robot_id, path_map, target)

    def avoidance_path(self, robot_id: int, path_map: PathMap, target: Vec) -> Vec:
        return path_map.path_to(target)[0]

    def _claim(self, robot_id: int, pos: Vec) -> bool:
        ids = self.explosion_map.get_explosion_ids(pos.x, pos.y)
        for explosion_id in ids:
            owner = self._claimed.get(explosion_id)
            if owner is not None and owner != robot_id:
                return False
        for explosion_id in ids:
            self._claimed[explosion_id] = robot_id
        return True
