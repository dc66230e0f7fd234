"""Match-long agent: owns the persistent beliefs."""
from __future__ import annotations

import logging
from typing import List

from unleash_agent.model import Action, ItemType, World
from unleash_agent.utils import Bounds
from unleash_agent.agent.actor import Actor
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.intents import BluffIntent, BluffScheduler

logger = logging.getLogger(__name__)


class Agent:
    def __init__(self, bounds: Bounds) -> None:
        self.beliefs = Beliefs(bounds.width, bounds.height)
        self.bluff_scheduler = BluffScheduler()

    def choose(self, previous: World, world: World) -> List[Action]:
        """Actions for every own robot, in the order the engine lists them."""
        self.beliefs.update(previous, world)

        actor = Actor(world, self.beliefs, self.bluff_scheduler)
        actions = actor.choose()

        if any(isinstance(intent, BluffIntent) for intent in actor.chosen.values()):
            logger.info("Bluffing on tick %d", world.tick)
            self.bluff_scheduler.bluff(world.tick)

        return [actions[robot.id] for robot in world.robots(ItemType.ROBOT_TEAM0)]
