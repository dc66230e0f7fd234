"""Candidate plans for a single robot, and how each becomes an engine action.

Every intent carries its owning robot id and a discounted value. Intents
that would spend the same discrete resource ``duplicate`` each other; the
coordinator uses ``subsumes`` to hand that resource to exactly one robot.
"""
from __future__ import annotations

from typing import Optional, Tuple

from unleash_agent.model import Action, Entity, ItemType, Vec
from unleash_agent.agent.explosion import ExplosionAvoider
from unleash_agent.agent.params import Params
from unleash_agent.agent.path_map import PathMap


class Intent:
    kind = "intent"

    def __init__(self, robot_id: int, value: float) -> None:
        self.robot_id = robot_id
        self.value = value

    def sort_key(self) -> Tuple[float, int]:
        """Best first: higher value, then lower robot id."""
        return (-self.value, self.robot_id)

    def duplicates(self, other: Intent) -> bool:
        return False

    def subsumes(self, other: Intent) -> bool:
        if not self.duplicates(other):
            return False
        # Strict total order so exactly one of two duplicates wins
        return self.value > other.value or (self.value == other.value and self.robot_id < other.robot_id)

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(robot={self.robot_id}, value={self.value:.4f})"


class WaitIntent(Intent):
    kind = "wait"

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        return Action.wait(robot.id)


class RequestIntent(Intent):
    """Collect a radar or trap from the headquarters column."""

    kind = "request"

    def __init__(self, robot_id: int, value: float, item: ItemType, target: Vec) -> None:
        super().__init__(robot_id, value)
        self.item = item
        self.target = target

    def duplicates(self, other: Intent) -> bool:
        return isinstance(other, RequestIntent) and other.item == self.item

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        if robot.pos.x == 0 or path_map is None:
            return Action.request(robot.id, self.item)
        step = avoider.claim_path(robot.id, path_map, self.target)
        return Action.move(robot.id, step, tag=self.item.name.lower())

    def __repr__(self) -> str:
        return f"RequestIntent(robot={self.robot_id}, item={self.item.name}, value={self.value:.4f})"


class DigIntent(Intent):
    """Walk to `destination` and dig `target` from there."""

    kind = "dig"

    def __init__(self, robot_id: int, value: float, target: Vec, destination: Vec) -> None:
        super().__init__(robot_id, value)
        self.target = target
        self.destination = destination

    def duplicates(self, other: Intent) -> bool:
        return isinstance(other, DigIntent) and other.kind == self.kind and other.target == self.target

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        tag = self.tag()
        if robot.pos == self.destination or path_map is None:
            return Action.dig(robot.id, self.target, tag=tag)
        step = avoider.claim_path(robot.id, path_map, self.destination)
        return Action.move(robot.id, step, tag=tag)

    def tag(self) -> str:
        return str(self.target)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(robot={self.robot_id}, target={self.target}, value={self.value:.4f})"


class SquirrelIntent(DigIntent):
    """Dig known ore while already carrying ore, so the hole looks trapped."""

    kind = "squirrel"

    def tag(self) -> str:
        return f"({self.target})"


class ReturnIntent(Intent):
    """Carry ore back to one cell of the headquarters column."""

    kind = "return"

    def __init__(self, robot_id: int, value: float, target: Vec) -> None:
        super().__init__(robot_id, value)
        self.target = target

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        if path_map is None:
            return Action.move(robot.id, self.target)
        return Action.move(robot.id, avoider.claim_path(robot.id, path_map, self.target))


class BluffIntent(Intent):
    """Loiter on the headquarters column as if collecting an item."""

    kind = "bluff"

    def __init__(self, robot_id: int, value: float, target: Vec) -> None:
        super().__init__(robot_id, value)
        self.target = target

    def duplicates(self, other: Intent) -> bool:
        return isinstance(other, BluffIntent)

    def to_action(self, robot: Entity, avoider: ExplosionAvoider, path_map: Optional[PathMap]) -> Action:
        if robot.pos == self.target or path_map is None:
            return Action.move(robot.id, self.target, tag="bluff")
        return Action.move(robot.id, avoider.claim_path(robot.id, path_map, self.target), tag="bluff")


class BluffScheduler:
    """Spaces bluffs out so at most one happens every ``Params.BLUFF_INTERVAL`` ticks."""

    def __init__(self) -> None:
        self.next_bluff = 0

    def bluff(self, tick: int) -> None:
        self.next_bluff = tick + Params.BLUFF_INTERVAL

    def ready(self, tick: int) -> bool:
        return tick >= self.next_bluff
