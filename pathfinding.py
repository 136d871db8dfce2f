# pathfinding.py
# =========================================================
# Cost-aware path search and action planner
# ---------------------------------------------------------
# pathfind() relaxes costs breadth-first through discovered
# cells; undiscovered cells are costed as leaves only.
# Traversal order is the enqueue order, so a cell whose cost
# improves after it was dequeued is not expanded again.
#
# path_to_actions() turns the resulting predecessor links
# into primitive actions (turns + walks).
# =========================================================

from __future__ import annotations
import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from wumpus_env import (
    SCORE_ACTION,
    SCORE_PIT,
    SCORE_WUMPUS,
    Action,
    Coordinate,
    Direction,
    Map,
)

logger = logging.getLogger(__name__)

STEP_COST = 1
TURN_COST = 1
REVERSE_COST = 2

Links = Dict[Coordinate, Coordinate]
Costs = Dict[Coordinate, int]


def step_cost(current_direction: Direction, new_direction: Direction) -> int:
    """Cost of one Walk (plus the action itself) after turning as needed."""
    # one step plus the base action charge (-SCORE_ACTION)
    cost = STEP_COST - SCORE_ACTION
    if new_direction in (current_direction.left(), current_direction.right()):
        cost += TURN_COST
    elif new_direction == current_direction.back():
        cost += REVERSE_COST
    return cost


def pathfind(location: Coordinate, direction: Direction, map: Map) -> Tuple[Links, Costs]:
    """
    Cheapest known predecessor link and cumulative cost for every cell
    reachable through discovered cells, starting from (location, direction).

    The start is linked to itself with cost 0. Known wumpus and pit
    cells are made expensive (the negated penalty is added) but not
    forbidden.
    """
    links: Links = {location: location}
    dirs: Dict[Coordinate, Direction] = {location: direction}
    costs: Costs = {location: 0}

    queue = deque([location])
    while queue:
        current = queue.popleft()
        for new_location in map.neighbors(current):

            # Only discovered cells are expanded further
            if new_location in map.discovered and new_location not in links:
                queue.append(new_location)

            new_direction = current.relative_direction(new_location)
            new_cost = costs[current] + step_cost(dirs[current], new_direction)
            if new_location in map.wumpuses:
                new_cost -= SCORE_WUMPUS
            if new_location in map.pits:
                new_cost -= SCORE_PIT

            if new_cost < costs.get(new_location, float("inf")):
                links[new_location] = current
                dirs[new_location] = new_direction
                costs[new_location] = new_cost

    return links, costs


def path_to_actions(target: Coordinate, direction: Direction, links: Links) -> Optional[List[Action]]:
    """
    Actions that walk from the start of `links` to target, starting
    with the given facing. Returns None when target is unreachable.
    """
    if target not in links:
        return None

    path = [target]
    location = target
    while links[location] != location:
        location = links[location]
        path.append(location)
    path.reverse()

    actions: List[Action] = []
    for location, new_location in zip(path, path[1:]):
        new_direction = location.relative_direction(new_location)
        if new_direction is None:
            raise ValueError(f"{location} and {new_location} are not adjacent")
        if new_direction == direction.back():
            actions += [Action.RIGHT, Action.RIGHT]
        elif new_direction == direction.right():
            actions.append(Action.RIGHT)
        elif new_direction == direction.left():
            actions.append(Action.LEFT)
        actions.append(Action.WALK)
        direction = new_direction

    return actions
