"""One tick of planning: derived maps, evaluation, coordination, realization."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from unleash_agent.model import Action, ItemType, Vec, World
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.coordinator import Coordinator
from unleash_agent.agent.evaluator import IntentEvaluator, TickMaps
from unleash_agent.agent.explosion import ExplosionAvoider
from unleash_agent.agent.intents import BluffScheduler, Intent, WaitIntent

logger = logging.getLogger(__name__)


class Actor:
    def __init__(self, world: World, beliefs: Beliefs, bluff_scheduler: Optional[BluffScheduler] = None) -> None:
        self.world = world
        self.beliefs = beliefs
        self.maps = TickMaps.generate(world, beliefs)
        self.evaluator = IntentEvaluator(self.maps, bluff_scheduler)
        self.chosen: Dict[int, Intent] = {}

    def choose(self) -> Dict[int, Action]:
        """Map each own robot id to its action for this tick."""
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Tick %d hazards:\n%s", self.world.tick, self.format_map())

        robots = sorted(self.world.robots(ItemType.ROBOT_TEAM0), key=lambda r: r.id)
        intents: Dict[int, List[Intent]] = {robot.id: self.evaluator.evaluate(robot) for robot in robots}

        Coordinator(self.world, self.maps.explosion_map).coordinate(intents)

        avoider = ExplosionAvoider(self.maps.explosion_map, self.world)
        actions: Dict[int, Action] = {}
        for robot in robots:
            candidates = intents[robot.id]
            intent = candidates[0] if candidates else WaitIntent(robot.id, 0.0)
            self.chosen[robot.id] = intent
            path_map = self.maps.path_maps.get(robot.id)
            actions[robot.id] = intent.to_action(robot, avoider, path_map)
            if not robot.dead:
                logger.debug("Robot %d: %r -> %s", robot.id, intent, actions[robot.id].type)
        return actions

    def format_map(self) -> str:
        enemies = {r.pos for r in self.world.robots(ItemType.ROBOT_TEAM1) if not r.dead}
        explosion_map = self.maps.explosion_map

        lines = [" " + "".join(str(x % 10) for x in range(self.world.width))]
        for y in range(self.world.height):
            line = str(y % 10)
            for x in range(self.world.width):
                trap = self.beliefs.trap_probability(x, y) > 0
                explosion = explosion_map.explode_probability(x, y) > 0
                c = "."
                if explosion:
                    c = "*" if trap else "x"
                elif trap:
                    c = "t"
                elif Vec(x, y) in enemies:
                    c = "e"
                line += c
            lines.append(line)
        return "\n".join(lines)
