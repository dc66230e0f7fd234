"""Persistent beliefs about hidden ore, hidden traps and enemy cargo.

Beliefs are the only state carried from tick to tick. Each tick they are
updated from the difference between two consecutive snapshots; everything
else the planner uses is rebuilt from them.
"""
from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Dict, List, Optional

from unleash_agent.model import DIG_RANGE, Entity, ItemType, Vec, World
from unleash_agent.utils import Bounds, distance_to_edge, neighbours
from unleash_agent.agent.params import Params

logger = logging.getLogger(__name__)


def _logistic(belief: float) -> float:
    if belief >= 0:
        return 1.0 / (1.0 + math.exp(-belief))
    z = math.exp(belief)
    return z / (1.0 + z)


class CellBelief:
    """Ore and trap estimate for one grid cell.

    ``ore_known`` and ``trap_known`` are tri-state latches: -1 known absent,
    0 unknown, +1 known present. A latched value overrides the continuous
    belief in the probability accessors.
    """

    def __init__(self, pos: Vec) -> None:
        self.pos = pos

        self.ore_belief = 0.0
        self.ore_known = 0
        self.had_ore = False

        self.trap_belief = 0.0
        self.trap_known = 0

        self.appears_trapped = False

    @classmethod
    def create(cls, pos: Vec, bounds: Bounds) -> CellBelief:
        belief = cls(pos)
        belief.ore_belief = cls.prior_ore_belief(pos, bounds)
        return belief

    @staticmethod
    def prior_ore_belief(pos: Vec, bounds: Bounds) -> float:
        prior = 0.0
        if pos.x < Params.ORE_START_X:
            proportion = 1 - pos.x / Params.ORE_START_X
            prior += proportion * Params.ORE_BEFORE_START_X_PRIOR_BELIEF
        edge = distance_to_edge(pos, bounds)
        if edge <= Params.ORE_MARGIN:
            proportion = max(0.0, 1 - edge / Params.ORE_MARGIN)
            prior += proportion * Params.ORE_MARGIN_PRIOR_BELIEF
        return prior

    def observed_self_dig(self, success: bool) -> None:
        if success:
            self.ore_belief = 1.0
            self.ore_known = 1
            self.had_ore = True
        else:
            self.ore_belief = -1.0
            self.ore_known = -1
        self.observed_clear()

    def observed_self_dig_neighbour(self, success: bool, dug: CellBelief) -> None:
        modifier = math.exp(-self.pos.l1(dug.pos))
        if success:
            self.ore_belief += Params.ORE_NEIGHBOUR_BELIEF * modifier
        elif dug.had_ore:
            # We dig a cell until it runs dry, so its exhaustion says nothing about us
            pass
        else:
            self.ore_belief -= Params.ORE_NEIGHBOUR_BELIEF * modifier

    def mark_appears_trapped(self) -> None:
        self.appears_trapped = True

    def observed_clear(self) -> None:
        """A robot dug here and survived, so no trap was here."""
        if self.trap_known <= 0:
            self.trap_known = -1
            self.trap_belief = 0.0

    def observed_enemy_dig(self, carrying_probability: float) -> None:
        if carrying_probability > 0:
            self._raise_trap_belief(Params.ENEMY_DIG_TRAP_BELIEF)
        else:
            self.observed_clear()

    def observed_ambiguous_enemy_dig(self, carrying_probability: float) -> None:
        if carrying_probability > 0:
            self._raise_trap_belief(Params.ENEMY_DIG_TRAP_BELIEF)

    def observed_still_enemy(self, carrying_probability: float) -> None:
        weight = max(carrying_probability, Params.STILL_ENEMY_MIN_CARRYING)
        self._raise_trap_belief(Params.STILL_ENEMY_TRAP_BELIEF * weight)

    def observed_enemy_dig_neighbour(self, dig_target: Vec) -> None:
        modifier = math.exp(-self.pos.l1(dig_target))
        self.ore_belief += Params.ENEMY_ORE_NEIGHBOUR_BELIEF * modifier

    def observed_ore(self, success: bool) -> None:
        if success:
            self.ore_belief = 1.0
            self.ore_known = 1
            self.had_ore = True
        else:
            self.ore_belief = -1.0
            self.ore_known = -1

    def observed_trap(self) -> None:
        self.trap_known = 1

    def _raise_trap_belief(self, amount: float) -> None:
        if self.trap_known < 0:
            self.trap_known = 0
        self.trap_belief += amount

    def ore_probability(self) -> float:
        if self.pos.x == 0:
            return 0.0  # never any ore in the headquarters column
        if self.ore_known < 0:
            return 0.0
        if self.ore_known > 0:
            return 1.0
        return _logistic(self.ore_belief)

    def trap_probability(self) -> float:
        if self.pos.x == 0:
            return 0.0  # traps cannot be placed in the headquarters column
        if self.trap_known > 0:
            return 1.0
        if self.trap_known < 0:
            return -1.0
        return 1.0 - math.exp(-self.trap_belief)


class EnemyRobotBelief:
    """How likely an enemy robot is to be carrying an item (radar or trap)."""

    def __init__(self, entity_id: int) -> None:
        self.entity_id = entity_id
        self.carrying_belief = 0.0

    def observed_still_at_headquarters(self) -> None:
        self.carrying_belief = 1.0

    def observed_dig(self) -> None:
        self.carrying_belief = -1.0

    def observed_potential_dig(self) -> None:
        self.carrying_belief -= Params.POTENTIAL_DIG_CARRYING_DECAY

    def carrying_probability(self) -> float:
        return max(0.0, 1.0 - math.exp(-self.carrying_belief))


class Beliefs:
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._cells: List[List[CellBelief]] = [
            [CellBelief.create(Vec(x, y), self) for x in range(width)] for y in range(height)
        ]
        self._enemies: Dict[int, EnemyRobotBelief] = {}

    def cell(self, x: int, y: int) -> CellBelief:
        return self._cells[y][x]

    def enemy(self, robot_id: int) -> Optional[EnemyRobotBelief]:
        return self._enemies.get(robot_id)

    def ore_probability(self, x: int, y: int) -> float:
        return self._cells[y][x].ore_probability()

    def trap_probability(self, x: int, y: int) -> float:
        return self._cells[y][x].trap_probability()

    def appears_trapped(self, x: int, y: int) -> bool:
        return self._cells[y][x].appears_trapped

    def carrying_probability(self, robot_id: int) -> float:
        belief = self.enemy(robot_id)
        return belief.carrying_probability() if belief else 0.0

    def update(self, previous: World, world: World) -> None:
        unexplained = self._find_digs(previous, world)
        self._update_from_self_digs(previous, world, unexplained)
        self._update_from_enemies(previous, world, unexplained)
        self._update_from_map(world)
        self._update_from_entities(world)

    @staticmethod
    def _find_digs(previous: World, world: World) -> Counter:
        """Multiset of cells dug this tick, one entry per observed dig."""
        digs: Counter = Counter()
        for cell in world.cells():
            old = previous.cell(cell.pos.x, cell.pos.y)
            count = 1 if cell.hole and not old.hole else 0
            if cell.ore is not None and old.ore is not None and cell.ore < old.ore:
                count = max(count, old.ore - cell.ore)
            if count > 0:
                digs[cell.pos] = count
        return digs

    def _update_from_self_digs(self, previous: World, world: World, unexplained: Counter) -> None:
        for robot in world.robots(ItemType.ROBOT_TEAM0):
            if robot.dead:
                continue
            before = previous.entity(robot.id)
            action = previous.action_for(robot.id)
            if before is None or action is None or action.type != "dig" or action.target is None:
                continue
            if before.pos != robot.pos or action.target.l1(before.pos) > DIG_RANGE:
                continue

            target = action.target
            if unexplained[target] > 0:
                unexplained[target] -= 1

            belief = self.cell(target.x, target.y)
            if before.carrying == ItemType.ORE:
                # Already full, so nothing could be picked up and nothing is learnt about ore
                if not previous.cell(target.x, target.y).hole:
                    belief.mark_appears_trapped()
                belief.observed_clear()
                logger.debug("Self squirrel %d at %s", robot.id, target)
                continue

            success = robot.carrying == ItemType.ORE
            logger.debug("Self dig %d at %s, success=%s", robot.id, target, success)
            belief.observed_self_dig(success)
            for n in neighbours(target, world, Params.ORE_NEIGHBOUR_RANGE):
                if n != target:
                    self.cell(n.x, n.y).observed_self_dig_neighbour(success, belief)

    def _update_from_enemies(self, previous: World, world: World, unexplained: Counter) -> None:
        still: List[Entity] = []
        for robot in sorted(world.robots(ItemType.ROBOT_TEAM1), key=lambda r: r.id):
            if robot.dead:
                continue
            self._get_or_create_enemy(robot.id)
            before = previous.entity(robot.id)
            if before is not None and not before.dead and before.pos == robot.pos:
                still.append(robot)

        # Read every carrying probability before any of this tick's updates apply
        carrying = {robot.id: self.carrying_probability(robot.id) for robot in still}

        candidates = {
            robot.id: [dig for dig in unexplained if dig.l1(robot.pos) <= DIG_RANGE]
            for robot in still
        }
        assigned: Dict[int, Vec] = {}
        changed = True
        while changed:
            changed = False
            for robot in still:
                if robot.id in assigned:
                    continue
                options = [dig for dig in candidates[robot.id] if unexplained[dig] > 0]
                if len(options) == 1:
                    dig = options[0]
                    unexplained[dig] -= 1
                    assigned[robot.id] = dig
                    changed = True

        for robot in still:
            belief = self._enemies[robot.id]
            probability = carrying[robot.id]
            options = [dig for dig in candidates[robot.id] if unexplained[dig] > 0]

            if robot.id in assigned:
                dig = assigned[robot.id]
                logger.debug("Enemy dig %d: carrying=%.2f at %s", robot.id, probability, dig)
                belief.observed_dig()
                self.cell(dig.x, dig.y).observed_enemy_dig(probability)
                for n in neighbours(dig, world, Params.ORE_NEIGHBOUR_RANGE):
                    self.cell(n.x, n.y).observed_enemy_dig_neighbour(dig)
            elif options:
                logger.debug(
                    "Enemy dig %d ambiguous: carrying=%.2f at %s",
                    robot.id,
                    probability,
                    " ".join(str(d) for d in options),
                )
                belief.observed_dig()
                for dig in options:
                    self.cell(dig.x, dig.y).observed_ambiguous_enemy_dig(probability)
            else:
                potential_dig = False
                for n in neighbours(robot.pos, world, DIG_RANGE):
                    if n.x > 0 and world.cell(n.x, n.y).hole:
                        potential_dig = True
                        self.cell(n.x, n.y).observed_still_enemy(probability)
                if potential_dig:
                    logger.debug("Enemy still %d: carrying=%.2f", robot.id, probability)
                    belief.observed_potential_dig()

            if robot.pos.x == 0:
                logger.debug("Enemy pickup %d possible", robot.id)
                belief.observed_still_at_headquarters()

    def _update_from_map(self, world: World) -> None:
        for cell in world.cells():
            if cell.ore is not None:
                self.cell(cell.pos.x, cell.pos.y).observed_ore(cell.ore > 0)

    def _update_from_entities(self, world: World) -> None:
        for entity in world.entities:
            if entity.type == ItemType.TRAP and not entity.dead:
                self.cell(entity.pos.x, entity.pos.y).observed_trap()

    def _get_or_create_enemy(self, robot_id: int) -> EnemyRobotBelief:
        belief = self._enemies.get(robot_id)
        if belief is None:
            belief = EnemyRobotBelief(robot_id)
            self._enemies[robot_id] = belief
        return belief
