"""Per-robot candidate intents and their values."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from unleash_agent.model import MOVEMENT_SPEED, DIG_RANGE, RADAR_RANGE, Entity, ItemType, Vec, World
from unleash_agent.utils import distance_to_edge, neighbours
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.explosion import ExplosionMap
from unleash_agent.agent.intents import (
    BluffIntent,
    BluffScheduler,
    DigIntent,
    Intent,
    RequestIntent,
    ReturnIntent,
    SquirrelIntent,
    WaitIntent,
)
from unleash_agent.agent.maps import PayoffMap, RadarMap, ReturnMap, SquirrelMap
from unleash_agent.agent.params import Params, discount
from unleash_agent.agent.path_map import PathMap

logger = logging.getLogger(__name__)


@dataclass
class TickMaps:
    """Everything derived from (world, beliefs) for one tick, built once."""

    world: World
    beliefs: Beliefs
    explosion_map: ExplosionMap
    payoff_map: PayoffMap
    radar_map: RadarMap
    return_map: ReturnMap
    squirrel_map: SquirrelMap
    path_maps: Dict[int, PathMap] = field(default_factory=dict)
    bait_id: Optional[int] = None

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs) -> TickMaps:
        explosion_map = ExplosionMap.generate(world, beliefs)
        squirrel_map = SquirrelMap.generate(world, beliefs)
        maps = cls(
            world=world,
            beliefs=beliefs,
            explosion_map=explosion_map,
            payoff_map=PayoffMap.generate(world, beliefs, squirrel_map),
            radar_map=RadarMap.generate(world, beliefs),
            return_map=ReturnMap.generate(world, beliefs, squirrel_map),
            squirrel_map=squirrel_map,
            bait_id=choose_bait(world),
        )
        for robot in world.robots(ItemType.ROBOT_TEAM0):
            if not robot.dead:
                bait = robot.id == maps.bait_id
                maps.path_maps[robot.id] = PathMap.generate(robot.pos, world, explosion_map, bait=bait)
        return maps


def choose_bait(world: World) -> Optional[int]:
    """Lowest-id own robot, when we can afford to trade it for an enemy."""
    if not Params.BAIT_ENABLED:
        return None
    own = sorted(r.id for r in world.robots(ItemType.ROBOT_TEAM0) if not r.dead)
    enemies = [r for r in world.robots(ItemType.ROBOT_TEAM1) if not r.dead]
    if own and len(own) > len(enemies):
        return own[0]
    return None


class IntentEvaluator:
    def __init__(self, maps: TickMaps, bluff_scheduler: Optional[BluffScheduler] = None) -> None:
        self.maps = maps
        self.world = maps.world
        self.bluff_scheduler = bluff_scheduler

        self.visible_ore = self._count_visible_ore()
        self.live_robots = len([r for r in self.world.robots(ItemType.ROBOT_TEAM0) if not r.dead])
        self.own_traps = len([e for e in self.world.entities if e.type == ItemType.TRAP and not e.dead])

    def evaluate(self, robot: Entity) -> List[Intent]:
        """All candidate intents for `robot`, best first."""
        path_map = self.maps.path_maps.get(robot.id)
        if robot.dead or path_map is None:
            return [WaitIntent(robot.id, 0.0)]

        intents: List[Intent] = []
        if robot.carrying == ItemType.ORE and robot.pos.x > 0:
            best_return = self.best_return(robot, path_map)
            intents.append(best_return)
            intents.extend(self.squirrels(robot, path_map))
        else:
            radar = self.request_radar(robot, path_map)
            if radar is not None:
                intents.append(radar)
            trap = self.request_trap(robot, path_map)
            if trap is not None:
                intents.append(trap)
            bluff = self.bluff(robot, path_map)
            if bluff is not None:
                intents.append(bluff)
            intents.extend(self.digs(robot, path_map))

        if not intents:
            intents.append(WaitIntent(robot.id, 0.0))
        intents.sort(key=lambda intent: intent.sort_key())
        return intents

    # --- Requests ---

    def request_radar(self, robot: Entity, path_map: PathMap) -> Optional[RequestIntent]:
        team = self.world.teams[0]
        if robot.carrying != ItemType.NONE or team.radar_cooldown > 0:
            return None
        short_of_ore = self.visible_ore < Params.MINIMUM_VISIBLE_ORE_PER_ROBOT * max(1, self.live_robots)
        if robot.pos.x != 0 and not short_of_ore:
            return None
        if self.visible_ore >= Params.MAXIMUM_VISIBLE_ORE:
            return None
        if self.maps.radar_map.coverage >= Params.MAXIMUM_RADAR_COVERAGE:
            return None

        radar_map = self.maps.radar_map
        return self._best_home_row(
            robot,
            path_map,
            lambda y: 1.0 + Params.RADAR_PLACEMENT_WEIGHT * radar_map.request_payoff(y),
            lambda value, target: RequestIntent(robot.id, value, ItemType.RADAR, target),
        )

    def request_trap(self, robot: Entity, path_map: PathMap) -> Optional[RequestIntent]:
        team = self.world.teams[0]
        if robot.carrying != ItemType.NONE or robot.pos.x != 0 or team.trap_cooldown > 0:
            return None
        if self.own_traps >= Params.MAXIMUM_TRAPS:
            return None
        return self._best_home_row(
            robot,
            path_map,
            lambda y: Params.TRAP_PLACEMENT_WEIGHT,
            lambda value, target: RequestIntent(robot.id, value, ItemType.TRAP, target),
        )

    def bluff(self, robot: Entity, path_map: PathMap) -> Optional[BluffIntent]:
        if not Params.BLUFF_ENABLED or self.bluff_scheduler is None:
            return None
        if robot.carrying != ItemType.NONE or robot.pos.x != 0:
            return None
        if not self.bluff_scheduler.ready(self.world.tick):
            return None
        return self._best_home_row(
            robot,
            path_map,
            lambda y: Params.BLUFF_WEIGHT,
            lambda value, target: BluffIntent(robot.id, value, target),
        )

    def _best_home_row(self, robot, path_map, payoff_for_row, make):
        best = None
        for y in range(self.world.height):
            target = Vec(0, y)
            ticks = path_map.cost(target)
            if not math.isfinite(ticks):
                continue
            if self.maps.explosion_map.explode_probability(target.x, target.y) > 0:
                ticks += Params.EXPLOSION_COST
            value = discount(payoff_for_row(y), ticks)
            if best is None or value > best.value:
                best = make(value, target)
        return best

    # --- Digging ---

    def digs(self, robot: Entity, path_map: PathMap) -> List[DigIntent]:
        candidates: List[DigIntent] = []
        for y in range(self.world.height):
            for x in range(1, self.world.width):
                intent = self.evaluate_dig(robot, Vec(x, y), path_map)
                if intent is not None:
                    candidates.append(intent)
        candidates.sort(key=lambda intent: intent.sort_key())
        return candidates[: Params.DIG_CANDIDATES]

    def evaluate_dig(self, robot: Entity, target: Vec, path_map: PathMap) -> Optional[DigIntent]:
        destination = min(
            neighbours(target, self.world, DIG_RANGE),
            key=lambda n: path_map.cost(n) + n.x / MOVEMENT_SPEED,
        )
        move_cost = path_map.cost(destination)
        if not math.isfinite(move_cost):
            return None

        divisor = 1.0
        if robot.carrying == ItemType.TRAP:
            divisor += self.placement_cost(target)
        if robot.carrying == ItemType.RADAR:
            divisor += 3 * self.radar_cost(target)

        payoff = self.maps.payoff_map.payoff(target.x, target.y)
        value = payoff / (1 + divisor)
        if robot.carrying == ItemType.RADAR:
            value += Params.RADAR_PLACEMENT_WEIGHT * self.maps.radar_map.coverage_gain(target.x, target.y)
        value = discount(value, move_cost)

        if payoff > 0:
            value += self.future_dig_bonus(target, payoff, move_cost)

        return DigIntent(robot.id, value, target, destination)

    def future_dig_bonus(self, target: Vec, payoff: float, move_cost: float) -> float:
        """Value of the later digs at a multi-ore cell, if we get there first."""
        ore = self.world.cell(target.x, target.y).ore
        if ore is None or ore <= 1:
            return 0.0
        if move_cost >= self._enemy_arrival(target):
            return 0.0

        round_trip = 2 * math.ceil(target.x / MOVEMENT_SPEED)
        bonus = sum(discount(payoff, k * round_trip) for k in range(1, ore))
        return Params.FUTURE_DIG_WEIGHT * bonus

    def _enemy_arrival(self, target: Vec) -> float:
        """Ticks until the first possibly-trap-carrying enemy could dig `target`."""
        arrival = math.inf
        for enemy in self.world.robots(ItemType.ROBOT_TEAM1):
            if enemy.dead or self.maps.beliefs.carrying_probability(enemy.id) <= 0:
                continue
            ticks = math.ceil(max(0, enemy.pos.l1(target) - DIG_RANGE) / MOVEMENT_SPEED)
            arrival = min(arrival, ticks)
        return arrival

    def placement_cost(self, target: Vec) -> float:
        """Closeness to the nearest enemy, in [0, 1)."""
        outside = Params.TRAP_PLACEMENT_RANGE + 1
        closest = outside
        for enemy in self.world.robots(ItemType.ROBOT_TEAM1):
            if not enemy.dead:
                closest = min(closest, enemy.pos.l1(target))
        return (outside - closest) / outside

    def radar_cost(self, target: Vec) -> float:
        """Closeness to existing radars or the map edge, in [0, 1]."""
        outside = 2 * RADAR_RANGE + 1  # two radars' ranges can overlap
        # The edge has no radar beyond it, so double its distance to match scale
        closest = min(outside, 2 * distance_to_edge(target, self.world))
        for radar in self.world.entities:
            if radar.type == ItemType.RADAR and not radar.dead:
                closest = min(closest, radar.pos.l1(target))
        return (outside - closest) / outside

    # --- Returning ---

    def best_return(self, robot: Entity, path_map: PathMap) -> ReturnIntent:
        best: Optional[ReturnIntent] = None
        for y in range(self.world.height):
            target = Vec(0, y)
            ticks = path_map.cost(target) + Params.RETURN_STRAIGHT_WEIGHT * target.distance(robot.pos) / MOVEMENT_SPEED
            value = discount(1.0, ticks) + Params.RETURN_NEXT_ORE_WEIGHT * self.maps.return_map.next_ore_value(y)
            if best is None or value > best.value:
                best = ReturnIntent(robot.id, value, target)
        return best

    def squirrels(self, robot: Entity, path_map: PathMap) -> List[SquirrelIntent]:
        if not self.maps.squirrel_map.squirrelling:
            return []

        intents: List[SquirrelIntent] = []
        for target in self.maps.squirrel_map.locations:
            if target.x < Params.MIN_SQUIRREL_X or target.x > robot.pos.x:
                continue  # only hide ore on the way home
            destination = min(neighbours(target, self.world, DIG_RANGE), key=path_map.cost)
            ticks = path_map.cost(destination)
            if not math.isfinite(ticks):
                continue
            value = Params.SQUIRREL_WEIGHT * discount(1.0, ticks)
            intents.append(SquirrelIntent(robot.id, value, target, destination))
        return intents

    def _count_visible_ore(self) -> int:
        total = 0
        for cell in self.world.cells():
            if cell.ore and self.maps.beliefs.trap_probability(cell.pos.x, cell.pos.y) <= 0:
                total += cell.ore
        return total
