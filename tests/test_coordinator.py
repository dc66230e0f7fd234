"""
Coordinator tests: capacity, hazardous destinations and subsumption.

Run with: pytest tests/test_coordinator.py -v
"""

from unleash_agent.model import ItemType, Vec
from unleash_agent.agent.beliefs import Beliefs
from unleash_agent.agent.coordinator import Coordinator
from unleash_agent.agent.explosion import ExplosionMap
from unleash_agent.agent.intents import DigIntent, RequestIntent, SquirrelIntent, WaitIntent


def _coordinator(world, beliefs=None):
    beliefs = beliefs or Beliefs(world.width, world.height)
    return Coordinator(world, ExplosionMap.generate(world, beliefs))


def _candidates(robot_id, value, target):
    return [DigIntent(robot_id, value, target, Vec(target.x - 1, target.y)), WaitIntent(robot_id, 0.0)]


def test_equal_duplicates_go_to_lower_robot_id_in_any_order(make_world):
    world = make_world(cells={Vec(3, 2): 1})
    target = Vec(3, 2)

    forward = {0: _candidates(0, 0.5, target), 1: _candidates(1, 0.5, target)}
    backward = {1: _candidates(1, 0.5, target), 0: _candidates(0, 0.5, target)}
    _coordinator(world).coordinate(forward)
    _coordinator(world).coordinate(backward)

    for result in (forward, backward):
        assert isinstance(result[0][0], DigIntent)
        assert isinstance(result[1][0], WaitIntent)


def test_higher_value_wins_regardless_of_id(make_world):
    world = make_world(cells={Vec(3, 2): 1})
    intents = {0: _candidates(0, 0.4, Vec(3, 2)), 1: _candidates(1, 0.5, Vec(3, 2))}
    _coordinator(world).coordinate(intents)

    assert isinstance(intents[0][0], WaitIntent)
    assert isinstance(intents[1][0], DigIntent)


def test_request_items_are_shared_out(make_world):
    world = make_world()
    intents = {
        0: [RequestIntent(0, 2.0, ItemType.RADAR, Vec(0, 1)), WaitIntent(0, 0.0)],
        1: [RequestIntent(1, 3.0, ItemType.RADAR, Vec(0, 2)), WaitIntent(1, 0.0)],
        2: [RequestIntent(2, 1.0, ItemType.TRAP, Vec(0, 3)), WaitIntent(2, 0.0)],
    }
    _coordinator(world).coordinate(intents)

    assert isinstance(intents[0][0], WaitIntent)
    assert intents[1][0].item == ItemType.RADAR
    assert intents[2][0].item == ItemType.TRAP


def test_squirrel_limits_capacity_to_one(make_world):
    world = make_world(cells={Vec(6, 2): 2})
    coordinator = _coordinator(world)
    target = Vec(6, 2)

    digs = {0: _candidates(0, 0.5, target)}
    assert coordinator.capacity(target, digs) == 2
    digs[1] = [SquirrelIntent(1, 0.3, target, Vec(5, 2))]
    assert coordinator.capacity(target, digs) == 1

    intents = {
        0: _candidates(0, 0.5, target),
        1: [SquirrelIntent(1, 0.7, target, Vec(5, 2)), WaitIntent(1, 0.0)],
    }
    coordinator.coordinate(intents)
    assert isinstance(intents[0][0], WaitIntent)
    assert isinstance(intents[1][0], SquirrelIntent)


def test_unknown_ore_counts_as_capacity_one(make_world):
    world = make_world()
    assert _coordinator(world).capacity(Vec(4, 4), {}) == 1


def test_only_one_robot_heads_for_each_hazardous_destination(make_world):
    world = make_world(enemies=[(5, 6, 2)])
    beliefs = Beliefs(10, 5)
    beliefs.cell(3, 2).observed_trap()
    coordinator = _coordinator(world, beliefs)

    shared = Vec(4, 2)  # inside the blast around (3,2)
    intents = {
        0: [DigIntent(0, 0.3, Vec(5, 2), shared), WaitIntent(0, 0.0)],
        1: [DigIntent(1, 0.4, Vec(4, 1), shared), WaitIntent(1, 0.0)],
        2: [DigIntent(2, 0.2, Vec(8, 2), Vec(8, 1)), WaitIntent(2, 0.0)],
        3: [DigIntent(3, 0.1, Vec(8, 4), Vec(8, 3)), WaitIntent(3, 0.0)],
    }
    coordinator.coordinate(intents)

    assert isinstance(intents[0][0], WaitIntent)
    assert isinstance(intents[1][0], DigIntent)
    assert isinstance(intents[2][0], DigIntent)
    assert isinstance(intents[3][0], DigIntent)


def test_exhausted_candidates_stay_empty(make_world):
    world = make_world(cells={Vec(3, 2): 1})
    target = Vec(3, 2)
    intents = {0: [DigIntent(0, 0.5, target, Vec(2, 2))], 1: [DigIntent(1, 0.5, target, Vec(2, 2))]}
    _coordinator(world).coordinate(intents)

    assert len(intents[0]) == 1
    assert intents[1] == []
