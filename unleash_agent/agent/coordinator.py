"""Cross-robot conflict resolution over each robot's ranked intents."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List

from unleash_agent.model import Vec, World
from unleash_agent.agent.explosion import ExplosionMap
from unleash_agent.agent.intents import DigIntent, Intent, SquirrelIntent
from unleash_agent.agent.params import Params

logger = logging.getLogger(__name__)


class Coordinator:
    """Pops contested intents until every robot's best intent is uncontested.

    ``intents`` maps robot id to that robot's candidates, best first; the
    lists are mutated in place. Robots are always visited in id order, so
    the outcome does not depend on dict ordering.
    """

    def __init__(self, world: World, explosion_map: ExplosionMap) -> None:
        self.world = world
        self.explosion_map = explosion_map

    def coordinate(self, intents: Dict[int, List[Intent]]) -> int:
        """Run every pass to a fixpoint; return the number of rounds that changed something."""
        rounds = 0
        for _ in range(Params.COORDINATION_ROUNDS):
            changed = self.coordinate_capacity(intents)
            changed = self.coordinate_destinations(intents) or changed
            changed = self.subsume(intents) or changed
            if not changed:
                break
            rounds += 1
        if rounds:
            logger.debug("Coordination settled after %d rounds", rounds)
        return rounds

    def capacity(self, target: Vec, intents: Dict[int, List[Intent]]) -> int:
        for candidates in intents.values():
            for intent in candidates:
                if isinstance(intent, SquirrelIntent) and intent.target == target:
                    return 1  # the first to dig it spoils the hiding place
        ore = self.world.cell(target.x, target.y).ore
        return max(1, ore or 0)

    def coordinate_capacity(self, intents: Dict[int, List[Intent]]) -> bool:
        groups: Dict[Vec, List[DigIntent]] = defaultdict(list)
        for robot_id in sorted(intents):
            best = _best(intents, robot_id)
            if isinstance(best, DigIntent):
                groups[best.target].append(best)

        changed = False
        for target, group in groups.items():
            capacity = self.capacity(target, intents)
            if len(group) <= capacity:
                continue
            group.sort(key=lambda intent: intent.sort_key())
            for excess in group[capacity:]:
                logger.debug("Robot %d over capacity at %s", excess.robot_id, target)
                intents[excess.robot_id].pop(0)
                changed = True
        return changed

    def coordinate_destinations(self, intents: Dict[int, List[Intent]]) -> bool:
        groups: Dict[Vec, List[DigIntent]] = defaultdict(list)
        for robot_id in sorted(intents):
            best = _best(intents, robot_id)
            if isinstance(best, DigIntent):
                destination = best.destination
                if self.explosion_map.explode_probability(destination.x, destination.y) > 0:
                    groups[destination].append(best)

        changed = False
        for destination, group in groups.items():
            if len(group) <= 1:
                continue
            group.sort(key=lambda intent: intent.sort_key())
            for excess in group[1:]:
                logger.debug("Robot %d kept out of hazardous %s", excess.robot_id, destination)
                intents[excess.robot_id].pop(0)
                changed = True
        return changed

    def subsume(self, intents: Dict[int, List[Intent]]) -> bool:
        changed = False
        robot_ids = sorted(intents)
        for winner_id in robot_ids:
            for loser_id in robot_ids:
                if winner_id == loser_id:
                    continue
                winner = _best(intents, winner_id)
                loser = _best(intents, loser_id)
                if winner is not None and loser is not None and winner.subsumes(loser):
                    # Give the resource to the winner, the loser falls back to its next choice
                    intents[loser_id].pop(0)
                    changed = True
        return changed


def _best(intents: Dict[int, List[Intent]], robot_id: int):
    candidates = intents[robot_id]
    return candidates[0] if candidates else None
