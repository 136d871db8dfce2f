# agents.py
# =========================================================
# Agents: random baseline, manual prompt, Bayesian explorer
# ---------------------------------------------------------
# Every agent exposes run(game) -> Action and is called once
# per step with the latest (redacted) game snapshot. Agents
# may keep state between calls.
# =========================================================

from __future__ import annotations
import logging
import random
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from wumpus_env import Action, Class, ClassField, Coordinate, WumpusGame, parse_action
from inference import (
    Blacklist,
    InferenceError,
    calculate_map_possibilities,
    estimate_classes,
)
from pathfinding import path_to_actions, pathfind

logger = logging.getLogger(__name__)

TREASURE_THRESHOLD = 0.25
WUMPUS_SUSPICION_PENALTY = 0.9999
EXPLORATION_COST_OFFSET = 20


class Agent:
    """Capability interface: choose the next action for a game snapshot."""

    def run(self, game: WumpusGame) -> Action:
        raise NotImplementedError


# =========================================================
# Random Agent (Baseline)
# =========================================================

class RandomAgent(Agent):
    """
    A baseline agent that chooses actions uniformly at random.
    Ignores the snapshot entirely.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)
        self.actions = list(Action)

    def run(self, game: WumpusGame) -> Action:
        return self.rng.choice(self.actions)


# =========================================================
# Manual Agent
# =========================================================

class ManualAgent(Agent):
    """Asks a human for every action until the answer parses."""

    PROMPT = "What do you want to do? "

    def __init__(self, read: Callable[[str], str] = input, write: Callable[[str], None] = print):
        self.read = read
        self.write = write

    def run(self, game: WumpusGame) -> Action:
        while True:
            try:
                return parse_action(self.read(self.PROMPT))
            except ValueError:
                self.write("Unrecognized action. Try again.")


# =========================================================
# Bayesian Agent
# =========================================================

class BayesAgent(Agent):
    """
    Explores with a naive-Bayes estimate over all layouts consistent
    with what has been seen so far.

    Each decision picks an abstract goal and queues the actions that
    reach it; queued actions are replayed on the following calls
    before anything is recomputed. Goals, in order:
      - dig the cheapest cell whose treasure posterior is >= 0.25
      - shoot the cheapest cell whose wumpus posterior is exactly 1
      - walk to the undiscovered cell with the best cost/safety score
    Resolved cells are blacklisted so they are not proposed again.
    """

    def __init__(self, workers: Optional[int] = None):
        self.workers = workers
        self.treasures_found = 0
        self.wumpuses_killed = 0
        self.blacklist: Blacklist = {}
        self.action_queue: Deque[Action] = deque()
        self.last_estimates: Dict[Coordinate, ClassField[float]] = {}

    def possible_treasures(self, game: WumpusGame) -> List[Coordinate]:
        """Discovered non-hazard neighbors of glitter markers."""
        m = game.map
        cells = {
            n
            for glitter in m.glitters
            for n in glitter.neighbors()
            if n in m.discovered and n not in m.wumpuses and n not in m.pits
        }
        return sorted(cells, key=lambda c: (c.x, c.y))

    def estimate(self, game: WumpusGame) -> Dict[Coordinate, ClassField[float]]:
        frontier = sorted(game.map.frontier(), key=lambda c: (c.x, c.y))
        total, tallies = calculate_map_possibilities(
            frontier,
            self.possible_treasures(game),
            game.map,
            self.blacklist,
            workers=self.workers,
        )
        estimates = estimate_classes(
            total, tallies, game.map, self.treasures_found, self.wumpuses_killed
        )
        self.last_estimates = estimates
        return estimates

    def _queue_route(self, target: Coordinate, game: WumpusGame, links) -> None:
        actions = path_to_actions(target, game.direction, links)
        if actions is None:
            raise InferenceError(f"no path to chosen target {target}")
        self.action_queue.extend(actions)

    def run(self, game: WumpusGame) -> Action:
        if game.events.treasure:
            self.treasures_found += 1
        if game.events.scream:
            self.wumpuses_killed += 1

        if self.action_queue:
            return self.action_queue.popleft()

        links, costs = pathfind(game.location, game.direction, game.map)
        estimates = self.estimate(game)

        # Dig up a likely treasure
        treasures = [l for l, c in estimates.items() if c.treasure >= TREASURE_THRESHOLD]
        if treasures:
            target = min(treasures, key=lambda l: costs[l])
            logger.debug("Digging at %s (p=%.3f)", target, estimates[target].treasure)
            self.blacklist[target] = Class.TREASURE
            self._queue_route(target, game, links)
            self.action_queue.append(Action.DIG)
            return self.action_queue.popleft()

        # Shoot a certain wumpus: face it instead of walking in
        wumpuses = [l for l, c in estimates.items() if c.wumpus == 1.0]
        if wumpuses:
            target = min(wumpuses, key=lambda l: costs[l])
            logger.debug("Shooting at %s", target)
            self.blacklist[target] = Class.WUMPUS
            self._queue_route(target, game, links)
            self.action_queue.pop()
            self.action_queue.append(Action.SHOOT)
            return self.action_queue.popleft()

        # Explore the most rewarding undiscovered cell
        def score(location: Coordinate) -> float:
            c = estimates[location]
            safety = 1.0 - (WUMPUS_SUSPICION_PENALTY if c.wumpus != 0.0 else c.pit)
            return safety / (costs[location] + EXPLORATION_COST_OFFSET)

        candidates = [l for l in estimates if l not in game.map.discovered]
        if not candidates:
            raise InferenceError("no cell left to explore")
        target = max(candidates, key=score)
        logger.debug("Exploring %s (score=%.5f)", target, score(target))
        self._queue_route(target, game, links)
        return self.action_queue.popleft()


AGENTS: Dict[str, Callable[[], Agent]] = {
    "random": RandomAgent,
    "manual": ManualAgent,
    "bayes": BayesAgent,
}


def make_agent(name: str) -> Agent:
    """Build an agent by name (random, manual, bayes)."""
    try:
        factory = AGENTS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown agent: {name!r}") from None
    return factory()
