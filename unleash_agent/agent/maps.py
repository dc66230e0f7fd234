"""Per-tick value grids derived from beliefs.

All grids are ``numpy`` arrays indexed ``[y, x]`` (rows for ReturnMap).
"""
from __future__ import annotations

from typing import FrozenSet, List

import numpy as np

from unleash_agent.model import MOVEMENT_SPEED, RADAR_RANGE, ItemType, Vec, World
from unleash_agent.utils import Bounds, all_cells, neighbours
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.params import Params, discount


class SquirrelMap:
    """Known ore we could hide from the enemy, and ore we have already hidden.

    Hiding means digging a hole over ore while already carrying ore: nothing
    is picked up, but to the enemy the hole looks like a freshly planted trap.
    Hidden cells are left alone until ``Params.UNSQUIRREL_TICK``.
    """

    def __init__(self, locations: List[Vec], hidden: FrozenSet[Vec], squirrelling: bool) -> None:
        self.locations = locations
        self.hidden = hidden
        self.squirrelling = squirrelling

    def is_hidden(self, pos: Vec) -> bool:
        return self.squirrelling and pos in self.hidden

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs) -> SquirrelMap:
        squirrelling = bool(Params.SQUIRREL_ENABLED) and world.tick < Params.UNSQUIRREL_TICK

        locations: List[Vec] = []
        hidden = set()
        for cell in world.cells():
            x, y = cell.pos.x, cell.pos.y
            if beliefs.appears_trapped(x, y):
                hidden.add(cell.pos)
                continue
            if cell.ore is None or cell.hole or x < Params.MIN_SQUIRREL_X:
                continue
            if 1 <= cell.ore <= Params.MAX_SQUIRREL_ORE and beliefs.trap_probability(x, y) <= 0:
                locations.append(cell.pos)

        return cls(locations, frozenset(hidden), squirrelling)


class PayoffMap:
    """Discounted reward of digging each cell and carrying the ore home."""

    def __init__(self, payoffs: np.ndarray) -> None:
        self._payoffs = payoffs

    def payoff(self, x: int, y: int) -> float:
        return float(self._payoffs[y, x])

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs, squirrel_map: SquirrelMap) -> PayoffMap:
        payoffs = np.zeros((world.height, world.width), dtype=np.float64)
        for y in range(world.height):
            for x in range(1, world.width):  # no payoff when digging headquarters
                if beliefs.trap_probability(x, y) > 0:
                    payoffs[y, x] = -1.0  # never dig somewhere which could be trapped
                elif squirrel_map.is_hidden(Vec(x, y)):
                    payoffs[y, x] = 0.0
                else:
                    ore_payoff = beliefs.ore_probability(x, y) ** Params.ORE_PAYOFF_POWER
                    payoffs[y, x] = discount(ore_payoff, x / MOVEMENT_SPEED)
        return cls(payoffs)


class RadarMap:
    """Marginal value of new radar coverage."""

    def __init__(self, bounds: Bounds, payoffs: np.ndarray, request_payoffs: np.ndarray, coverage: float) -> None:
        self.bounds = bounds
        self._payoffs = payoffs
        self._request_payoffs = request_payoffs
        self.coverage = coverage

    def payoff(self, x: int, y: int) -> float:
        return float(self._payoffs[y, x])

    def request_payoff(self, y: int) -> float:
        return float(self._request_payoffs[y])

    def coverage_gain(self, x: int, y: int) -> float:
        """Mean uncovered ore value a radar placed at (x, y) would reveal."""
        cells = list(neighbours(Vec(x, y), self.bounds, RADAR_RANGE))
        return float(sum(self._payoffs[n.y, n.x] for n in cells) / len(cells))

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs) -> RadarMap:
        payoffs = np.zeros((world.height, world.width), dtype=np.float64)
        for pos in all_cells(world):
            payoffs[pos.y, pos.x] = beliefs.ore_probability(pos.x, pos.y) ** Params.ORE_PAYOFF_POWER

        # Visible cells and cells under our radars have nothing left to reveal
        covered = np.zeros((world.height, world.width), dtype=bool)
        for pos in all_cells(world):
            covered[pos.y, pos.x] = world.cell(pos.x, pos.y).ore is not None
        for radar in world.entities:
            if radar.type == ItemType.RADAR and not radar.dead:
                for n in neighbours(radar.pos, world, RADAR_RANGE):
                    covered[n.y, n.x] = True
        payoffs[covered] = 0.0

        request_payoffs = payoffs.sum(axis=1) / world.width
        coverage = float(covered.sum()) / (world.width * world.height)
        return cls(world, payoffs, request_payoffs, coverage)


class ReturnMap:
    """Value of delivering at each home row, judged by how close it leaves us to more ore."""

    def __init__(self, values: np.ndarray) -> None:
        self._values = values

    def next_ore_value(self, y: int) -> float:
        return float(self._values[y])

    @classmethod
    def generate(cls, world: World, beliefs: Beliefs, squirrel_map: SquirrelMap) -> ReturnMap:
        distances = np.array(
            [cls._find_ore_distance(y, world, beliefs, squirrel_map) for y in range(world.height)],
            dtype=np.float64,
        )

        # Ore on one row can be reached from the other rows at +1 per row, walking along headquarters
        rows = np.arange(world.height)
        for y in range(world.height):
            if np.isfinite(distances[y]):
                distances = np.minimum(distances, distances[y] + np.abs(rows - y))

        ticks = np.minimum(distances, world.width) / MOVEMENT_SPEED
        values = np.array([discount(1.0, t) for t in ticks], dtype=np.float64)
        return cls(values)

    @staticmethod
    def _find_ore_distance(y: int, world: World, beliefs: Beliefs, squirrel_map: SquirrelMap) -> float:
        for x in range(1, world.width):
            if squirrel_map.is_hidden(Vec(x, y)):
                continue
            if beliefs.ore_probability(x, y) >= 1 and beliefs.trap_probability(x, y) <= 0:
                return float(x)
        return float("inf")
