"""Game loop: stdin snapshots in, one action line per own robot out."""
from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, TextIO

from unleash_agent.model import NUM_ROBOTS, Action, ItemType, World
from unleash_agent.protocol import ProtocolError, format_action, read_initial, read_turn
from unleash_agent.agent.agent import Agent

logger = logging.getLogger(__name__)


def configure_logging(level: str = "WARNING") -> None:
    # stdout belongs to the engine; diagnostics go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def play_turn(agent: Agent, previous: World, read: Callable[[], str] = input, out: Optional[TextIO] = None) -> World:
    out = out or sys.stdout
    world = read_turn(previous, read)
    try:
        actions = agent.choose(previous, world)
    except Exception:
        logger.exception("Turn %d failed, waiting", world.tick)
        actions = [Action.wait(r.id) for r in world.robots(ItemType.ROBOT_TEAM0)]
    world.actions = list(actions)
    for action in actions:
        print(format_action(action), file=out)
    out.flush()
    return world


def _print_waits(world: World, out: TextIO) -> None:
    count = len(world.robots(ItemType.ROBOT_TEAM0)) or NUM_ROBOTS
    for _ in range(count):
        print("WAIT", file=out)
    out.flush()


def main(read: Callable[[], str] = input, out: Optional[TextIO] = None) -> None:
    if not logging.getLogger().handlers:
        configure_logging()

    world = read_initial(read)
    agent = Agent(world)
    while True:
        try:
            world = play_turn(agent, world, read, out)
        except EOFError:
            break
        except ProtocolError:
            logger.exception("Unreadable turn after tick %d, waiting", world.tick)
            _print_waits(world, out or sys.stdout)


if __name__ == "__main__":
    main()
