from wumpus_env import Action, Coordinate, Direction, Map
from pathfinding import path_to_actions, pathfind

C = Coordinate


def test_start_to_itself():
    m = Map(discovered={C(0, 0)})
    links, costs = pathfind(C(0, 0), Direction.EAST, m)
    assert links[C(0, 0)] == C(0, 0)
    assert costs[C(0, 0)] == 0
    assert path_to_actions(C(0, 0), Direction.EAST, links) == []


def test_first_steps_from_spawn():
    m = Map(discovered={C(0, 0)})
    links, costs = pathfind(C(0, 0), Direction.EAST, m)

    assert costs[C(1, 0)] == 2
    assert path_to_actions(C(1, 0), Direction.EAST, links) == [Action.WALK]

    assert costs[C(0, 1)] == 3
    assert path_to_actions(C(0, 1), Direction.EAST, links) == [Action.LEFT, Action.WALK]

    # undiscovered cells are leaves
    assert set(costs) == {C(0, 0), C(1, 0), C(0, 1)}


def test_unreachable_target():
    m = Map(discovered={C(0, 0)})
    links, _ = pathfind(C(0, 0), Direction.EAST, m)
    assert path_to_actions(C(3, 3), Direction.EAST, links) is None


def test_reversal():
    m = Map(discovered={C(0, 0), C(1, 0)})
    links, costs = pathfind(C(1, 0), Direction.EAST, m)
    assert costs[C(0, 0)] == 4
    assert path_to_actions(C(0, 0), Direction.EAST, links) == [Action.RIGHT, Action.RIGHT, Action.WALK]


def test_right_turn():
    m = Map(discovered={C(0, 1), C(0, 0)})
    links, costs = pathfind(C(0, 1), Direction.EAST, m)
    assert costs[C(0, 0)] == 3
    assert path_to_actions(C(0, 0), Direction.EAST, links) == [Action.RIGHT, Action.WALK]


def test_multi_step_route():
    m = Map(discovered={C(0, 0), C(1, 0), C(1, 1)})
    links, costs = pathfind(C(0, 0), Direction.EAST, m)

    assert costs[C(2, 0)] == 4
    assert costs[C(1, 1)] == 5
    assert costs[C(1, 2)] == 7
    assert costs[C(2, 1)] == 8
    # (0,1) stays reached directly from the start
    assert costs[C(0, 1)] == 3
    assert links[C(0, 1)] == C(0, 0)

    assert path_to_actions(C(1, 2), Direction.EAST, links) == [
        Action.WALK, Action.LEFT, Action.WALK, Action.WALK,
    ]


def test_known_hazards_are_expensive_but_passable():
    m = Map(discovered={C(0, 0), C(1, 0)}, pits={C(1, 0)})
    links, costs = pathfind(C(0, 0), Direction.EAST, m)
    assert costs[C(1, 0)] == 102
    assert costs[C(2, 0)] == 104
    assert costs[C(1, 1)] == 105
    assert path_to_actions(C(2, 0), Direction.EAST, links) == [Action.WALK, Action.WALK]

    m = Map(discovered={C(0, 0)}, wumpuses={C(1, 0)})
    _, costs = pathfind(C(0, 0), Direction.EAST, m)
    assert costs[C(1, 0)] == 202


def test_cheaper_detour_is_preferred():
    # (1,0) holds a known pit; going around through (0,1),(1,1) is cheaper
    m = Map(
        discovered={C(0, 0), C(1, 0), C(0, 1), C(1, 1)},
        pits={C(1, 0)},
    )
    links, costs = pathfind(C(0, 0), Direction.NORTH, m)
    assert costs[C(1, 1)] == 5
    assert links[C(1, 1)] == C(0, 1)
    assert path_to_actions(C(1, 1), Direction.NORTH, links) == [
        Action.WALK, Action.RIGHT, Action.WALK,
    ]
