from __future__ import annotations

import pytest

from nomads.sim.core.agent import Action, Color, Nomad, Personality
from nomads.sim.core.errors import UnsupportedOperation
from nomads.sim.core.rng import DeterministicRng
from nomads.sim.core.topology import Direction, GridTopology, Position
from nomads.sim.systems import behavior

AVOIDANCE_RANGE = 3.0


def _nomad(agent_id: int, color: Color, row: int, column: int) -> Nomad:
    return Nomad(id=agent_id, position=Position(row, column), color=color)


def test_defensive_moves_away_from_adjacent_threat():
    topology = GridTopology(10, 10)
    defender = _nomad(0, Color.BLUE, 5, 5)
    threat = _nomad(1, Color.RED, 4, 5)
    start = defender.position

    action = behavior.act(defender, [defender, threat], topology, DeterministicRng(1), AVOIDANCE_RANGE)

    assert action == Action.EVADE
    assert topology.direction_to(start, defender.position) != Direction.N
    assert defender.position == Position(6, 6)
    assert topology.distance(defender.position, threat.position) > topology.distance(start, threat.position)


def test_defensive_without_threats_random_walks():
    topology = GridTopology(10, 10)
    defender = _nomad(0, Color.BLUE, 5, 5)
    friend = _nomad(1, Color.BLUE, 5, 6)
    far_threat = _nomad(2, Color.RED, 0, 0)

    action = behavior.act(defender, [defender, friend, far_threat], topology, DeterministicRng(2), AVOIDANCE_RANGE)

    assert action == Action.WANDER
    assert topology.distance(Position(5, 5), defender.position) in (1.0, pytest.approx(2**0.5))


def test_defensive_scores_absolute_positions_at_the_wrap():
    topology = GridTopology(10, 10)
    defender = _nomad(0, Color.BLUE, 0, 5)
    # Adjacent through the top edge, but far away in absolute coordinates.
    threat = _nomad(1, Color.RED, 9, 5)

    position, action = behavior.evade(defender, [defender, threat], topology, DeterministicRng(3), AVOIDANCE_RANGE)

    assert action == Action.EVADE
    assert position == Position(0, 6)


def test_defensive_holds_when_no_move_helps():
    topology = GridTopology(1, 1)
    defender = _nomad(0, Color.BLUE, 0, 0)
    threat = _nomad(1, Color.RED, 0, 0)

    action = behavior.act(defender, [defender, threat], topology, DeterministicRng(4), AVOIDANCE_RANGE)

    assert action == Action.HOLD
    assert defender.position == Position(0, 0)


def test_offensive_closes_in_on_target_each_tick():
    topology = GridTopology(10, 10)
    attacker = _nomad(0, Color.RED, 5, 5)
    target = _nomad(1, Color.BLUE, 5, 7)
    rng = DeterministicRng(5)

    distances = [topology.distance(attacker.position, target.position)]
    for _ in range(2):
        action = behavior.act(attacker, [attacker, target], topology, rng, AVOIDANCE_RANGE)
        assert action == Action.PURSUE
        distances.append(topology.distance(attacker.position, target.position))

    assert distances == [2.0, 1.0, 0.0]
    assert attacker.position == target.position


def test_offensive_pursues_across_the_wrap():
    topology = GridTopology(10, 10)
    attacker = _nomad(0, Color.RED, 0, 0)
    target = _nomad(1, Color.BLUE, 0, 8)

    position, action = behavior.pursue(attacker, [attacker, target], topology, DeterministicRng(6), AVOIDANCE_RANGE)

    assert action == Action.PURSUE
    assert position == Position(0, 9)


def test_offensive_ignores_targets_out_of_range():
    topology = GridTopology(20, 20)
    attacker = _nomad(0, Color.RED, 0, 0)
    target = _nomad(1, Color.BLUE, 10, 10)

    action = behavior.act(attacker, [attacker, target], topology, DeterministicRng(7), AVOIDANCE_RANGE)

    assert action == Action.WANDER


def test_offensive_breaks_distance_ties_at_random():
    topology = GridTopology(10, 10)
    chosen = set()
    for seed in range(20):
        attacker = _nomad(0, Color.RED, 5, 5)
        east = _nomad(1, Color.BLUE, 5, 7)
        west = _nomad(2, Color.BLUE, 5, 3)
        position, _ = behavior.pursue(attacker, [attacker, east, west], topology, DeterministicRng(seed), AVOIDANCE_RANGE)
        assert position in (Position(5, 6), Position(5, 4))
        chosen.add(position)
    assert chosen == {Position(5, 6), Position(5, 4)}


def test_nearby_filters_by_personality_and_range():
    topology = GridTopology(10, 10)
    agent = _nomad(0, Color.BLUE, 0, 0)
    others = [
        agent,
        _nomad(1, Color.RED, 0, 3),
        _nomad(2, Color.RED, 0, 5),
        _nomad(3, Color.BLUE, 1, 1),
        _nomad(4, Color.RED, 9, 9),
    ]

    found = behavior.nearby(agent, others, Personality.OFFENSIVE, topology, AVOIDANCE_RANGE)

    assert [other.id for other in found] == [1, 4]


def test_dispatch_outside_closed_personality_set_is_unsupported(monkeypatch):
    topology = GridTopology(5, 5)
    agent = _nomad(0, Color.BLUE, 2, 2)
    monkeypatch.delitem(behavior.POLICIES, Personality.DEFENSIVE)

    with pytest.raises(UnsupportedOperation):
        behavior.act(agent, [agent], topology, DeterministicRng(8), AVOIDANCE_RANGE)
