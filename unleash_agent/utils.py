"""Grid traversal helpers shared by the planner."""
from __future__ import annotations

from typing import Iterator, Protocol

from unleash_agent.model import Vec


class Bounds(Protocol):
    width: int
    height: int


def all_cells(bounds: Bounds) -> Iterator[Vec]:
    for y in range(bounds.height):
        for x in range(bounds.width):
            yield Vec(x, y)


def distance_to_edge(p: Vec, bounds: Bounds) -> int:
    return min(p.x, bounds.width - p.x - 1, p.y, bounds.height - p.y - 1)


def within_bounds(p: Vec, bounds: Bounds) -> bool:
    return distance_to_edge(p, bounds) >= 0


def neighbours(pos: Vec, bounds: Bounds, distance: int = 1) -> Iterator[Vec]:
    """Yield every in-bounds cell within L1 `distance` of `pos`, `pos` included.

    Order is row-major (y, then x), which callers rely on for deterministic
    tie-breaking.
    """
    for y in range(max(0, pos.y - distance), min(bounds.height, pos.y + distance + 1)):
        span = distance - abs(y - pos.y)
        for x in range(max(0, pos.x - span), min(bounds.width, pos.x + span + 1)):
            yield Vec(x, y)
