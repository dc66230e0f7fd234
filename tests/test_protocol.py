"""
Engine protocol tests: snapshot parsing, action formatting, the bot loop.

Run with: pytest tests/test_protocol.py -v
"""

import io

import pytest

from unleash_agent import bot
from unleash_agent.model import Action, ItemType, Vec, initial_world
from unleash_agent.protocol import ProtocolError, format_action, parse_initial, parse_turn, read_turn


def _turn_lines(width=4, height=2, entities=("0 0 0 1 -1", "5 1 3 0 4"), rows=None, cooldowns="0 3"):
    rows = rows or [" ".join(["?", "0"] * width) for _ in range(height)]
    return ["7 4", *rows, f"{len(entities)} {cooldowns}", *entities]


def test_parse_initial():
    world = parse_initial(["30 15"])
    assert (world.width, world.height, world.tick) == (30, 15, 0)
    assert world.cell(29, 14).ore is None

    with pytest.raises(ProtocolError):
        parse_initial(["30"])
    with pytest.raises(ProtocolError):
        parse_initial(["0 15"])


def test_parse_turn():
    previous = initial_world(4, 2)
    rows = ["? 0 2 1 0 1 ? 0", "? 0 ? 0 ? 0 1 0"]
    world = parse_turn(previous, _turn_lines(rows=rows))

    assert world.tick == 1
    assert (world.teams[0].score, world.teams[1].score) == (7, 4)
    assert (world.teams[0].radar_cooldown, world.teams[0].trap_cooldown) == (0, 3)
    assert world.cell(1, 0).ore == 2 and world.cell(1, 0).hole
    assert world.cell(2, 0).ore == 0 and world.cell(2, 0).hole
    assert world.cell(0, 0).ore is None
    assert world.cell(3, 1).ore == 1

    robot = world.entity(0)
    assert (robot.type, robot.pos, robot.carrying) == (ItemType.ROBOT_TEAM0, Vec(0, 1), ItemType.NONE)
    enemy = world.entity(5)
    assert (enemy.type, enemy.carrying) == (ItemType.ROBOT_TEAM1, ItemType.ORE)

    # The previous snapshot is untouched
    assert previous.cell(1, 0).ore is None and previous.entities == []


def test_dead_robot_keeps_last_position():
    first = parse_turn(initial_world(4, 2), _turn_lines(entities=("0 0 2 1 -1",)))
    second = parse_turn(first, _turn_lines(entities=("0 0 -1 -1 -1",)))

    robot = second.entity(0)
    assert robot.dead
    assert robot.pos == Vec(2, 1)


@pytest.mark.parametrize(
    "lines",
    [
        ["7"],
        ["7 4", "? 0 ? 0", "? 0 ? 0 ? 0 ? 0", "0 0 0"],
        ["7 4", "? 0 ? 0 ? 0 ? 0", "? 0 ? 0 ? 0 ? x", "0 0 0"],
        _turn_lines(entities=("0 9 0 1 -1",)),
        _turn_lines()[:-1],
    ],
)
def test_malformed_turn_raises(lines):
    with pytest.raises(ProtocolError):
        parse_turn(initial_world(4, 2), lines)


def test_protocol_error_is_value_error():
    assert issubclass(ProtocolError, ValueError)


def test_format_action():
    assert format_action(Action.wait(0)) == "WAIT"
    assert format_action(Action.move(0, Vec(3, 4))) == "MOVE 3 4"
    assert format_action(Action.dig(0, Vec(5, 6), tag="5,6")) == "DIG 5 6 5,6"
    assert format_action(Action.request(0, ItemType.RADAR)) == "REQUEST RADAR"
    assert format_action(Action.request(0, ItemType.TRAP)) == "REQUEST TRAP"


def test_read_turn_reads_exactly_one_block():
    lines = iter(_turn_lines() + ["leftover"])
    world = read_turn(initial_world(4, 2), lambda: next(lines))

    assert len(world.entities) == 2
    assert next(lines) == "leftover"


def _reader(lines):
    it = iter(lines)

    def read():
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None

    return read


def test_bot_plays_until_end_of_input():
    lines = ["5 3"] + _turn_lines(width=5, height=3, entities=("0 0 0 1 -1", "1 0 0 2 -1"))
    out = io.StringIO()
    bot.main(_reader(lines), out)

    answer = out.getvalue().splitlines()
    assert len(answer) == 2
    assert answer[0] == "REQUEST RADAR"


def test_bot_waits_when_planning_fails(monkeypatch):
    def boom(self, previous, world):
        raise RuntimeError("planner exploded")

    monkeypatch.setattr(bot.Agent, "choose", boom)
    lines = ["5 3"] + _turn_lines(width=5, height=3, entities=("0 0 0 1 -1", "1 0 0 2 -1"))
    out = io.StringIO()
    bot.main(_reader(lines), out)

    assert out.getvalue().splitlines() == ["WAIT", "WAIT"]


def test_bot_waits_on_unreadable_turn():
    lines = ["5 3", "7 4", "garbage", "? 0", "? 0", "0 0 0"]
    out = io.StringIO()
    bot.main(_reader(lines), out)

    assert out.getvalue().splitlines() == ["WAIT"] * 5
