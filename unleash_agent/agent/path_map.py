"""Single-source shortest-cost map for one robot.

A robot moves up to ``MOVEMENT_SPEED`` cells (L1) per tick, so every cell in
that diamond is a graph neighbour. A hop costs one tick, plus
``Params.EXPLOSION_COST`` when it lands on a cell an enemy could blow up.
"""
from __future__ import annotations

import heapq
from typing import List, Tuple

import numpy as np

from unleash_agent.model import MOVEMENT_SPEED, Vec
from unleash_agent.utils import Bounds, neighbours
from unleash_agent.agent.explosion import ExplosionMap
from unleash_agent.agent.params import Params


class PathMap:
    def __init__(self, origin: Vec, bounds: Bounds, costs: np.ndarray) -> None:
        self.origin = origin
        self.bounds = bounds
        self._costs = costs

    def cost(self, target: Vec) -> float:
        return float(self._costs[target.y, target.x])

    @property
    def costs(self) -> np.ndarray:
        return self._costs

    def path_to(self, target: Vec) -> List[Vec]:
        """Waypoints from the origin (exclusive) to `target` (inclusive).

        Walks the cost field downhill from the target; ties go to the
        neighbour nearest the target. When `target` is the origin or cannot
        be reached, the path is just ``[target]``.
        """
        if target == self.origin or not np.isfinite(self._costs[target.y, target.x]):
            return [target]

        path: List[Vec] = []
        current = target
        limit = self.bounds.width * self.bounds.height
        while current != self.origin and len(path) < limit:
            path.append(current)
            current = min(
                neighbours(current, self.bounds, MOVEMENT_SPEED),
                key=lambda n: (self._costs[n.y, n.x], n.distance(target)),
            )
        path.reverse()
        return path

    @classmethod
    def generate(cls, origin: Vec, bounds: Bounds, explosion_map: ExplosionMap, bait: bool = False) -> PathMap:
        costs = np.full((bounds.height, bounds.width), np.inf, dtype=np.float64)
        costs[origin.y, origin.x] = 0.0

        expanded = np.zeros((bounds.height, bounds.width), dtype=bool)
        pq: List[Tuple[float, int, int]] = [(0.0, origin.y, origin.x)]

        while pq:
            cost, y, x = heapq.heappop(pq)
            if expanded[y, x] or cost > costs[y, x]:
                continue
            expanded[y, x] = True

            for n in neighbours(Vec(x, y), bounds, MOVEMENT_SPEED):
                if expanded[n.y, n.x]:
                    continue
                step = 1.0
                if not bait and explosion_map.explode_probability(n.x, n.y) > 0:
                    step += Params.EXPLOSION_COST
                next_cost = cost + step
                if next_cost < costs[n.y, n.x]:
                    costs[n.y, n.x] = next_cost
                    heapq.heappush(pq, (next_cost, n.y, n.x))

        return cls(origin, bounds, costs)
