# wumpus_env.py
# =========================================================
# Wumpus World Environment (treasure-hunt variant)
# ---------------------------------------------------------
# Purpose:
#   This file defines the *environment* (the "world") and the
#   data structures shared by the reasoning modules and agents
#   (coordinates, directions, actions, classes, events, map).
#
# Key design principle:
#   - The environment owns the ground-truth map and the agent's
#     situated state; it is mutated only through step().
#   - Agents receive a redacted snapshot (hidden()) in which
#     hazards are visible only on discovered cells and buried
#     treasures are never visible.
#
# Compatible with:
#   - Streamlit UI (app.py)
#   - TCP transport (transport.py)
#   - Batch simulations
# =========================================================

from __future__ import annotations
import json
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Generic, Iterable, List, Optional, Set, TypeVar

logger = logging.getLogger(__name__)


# =========================================================
# Rule constants
# =========================================================

MAP_SIZE_X = 4  # inclusive upper corner
MAP_SIZE_Y = 4

SPAWN_ARROWS = 1

COUNT_TREASURES = 2
COUNT_WUMPUSES = 1
COUNT_PITS = 3

SCORE_ACTION = -1      # every action
SCORE_SHOT = -10       # shooting an arrow
SCORE_DUG = -50        # digging for a treasure
SCORE_TREASURE = 250   # finding a treasure
SCORE_WUMPUS = -200    # walking into a wumpus
SCORE_PIT = -100       # falling into a pit


# =========================================================
# Enums: Direction, Action, Class
# =========================================================

class Direction(Enum):
    """
    Agent orientation in the grid.
    The value is the lowercase keyword used on the wire.
    """
    EAST = "east"
    SOUTH = "south"
    WEST = "west"
    NORTH = "north"

    def __str__(self) -> str:
        return self.value

    def left(self) -> "Direction":
        """Return the direction after a 90-degree left turn."""
        return {
            Direction.EAST: Direction.NORTH,
            Direction.SOUTH: Direction.EAST,
            Direction.WEST: Direction.SOUTH,
            Direction.NORTH: Direction.WEST,
        }[self]

    def right(self) -> "Direction":
        """Return the direction after a 90-degree right turn."""
        return {
            Direction.EAST: Direction.SOUTH,
            Direction.SOUTH: Direction.WEST,
            Direction.WEST: Direction.NORTH,
            Direction.NORTH: Direction.EAST,
        }[self]

    def back(self) -> "Direction":
        """Return the direction after a 180-degree turn."""
        return {
            Direction.EAST: Direction.WEST,
            Direction.SOUTH: Direction.NORTH,
            Direction.WEST: Direction.EAST,
            Direction.NORTH: Direction.SOUTH,
        }[self]


class Action(Enum):
    """
    The set of legal actions.
    The value is the lowercase keyword used on the wire and at the prompt.
    """
    WALK = "walk"
    LEFT = "left"
    RIGHT = "right"
    DIG = "dig"
    SHOOT = "shoot"

    def __str__(self) -> str:
        return self.value


class Class(Enum):
    """What a single cell holds. At most one of treasure/wumpus/pit."""
    EMPTY = "empty"
    TREASURE = "treasure"
    WUMPUS = "wumpus"
    PIT = "pit"


def parse_direction(text: str) -> Direction:
    """Parse a direction keyword, raising ValueError on anything else."""
    return Direction(text.strip().lower())


def parse_action(text: str) -> Action:
    """Parse an action keyword, raising ValueError on anything else."""
    return Action(text.strip().lower())


# =========================================================
# Data Structures: Coordinate, ClassField, Events
# =========================================================

@dataclass(frozen=True)
class Coordinate:
    """
    2D grid position (x, y).
    (0,0) is the bottom-left corner; y grows towards North.
    NOWHERE and UNKNOWN are sentinels and never valid map cells.
    """
    x: int
    y: int

    NOWHERE: ClassVar["Coordinate"]
    UNKNOWN: ClassVar["Coordinate"]

    def __str__(self) -> str:
        return f"({self.x},{self.y})"

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Parse the textual form "(x,y)" with signed integers."""
        text = text.strip()
        if not (text.startswith("(") and text.endswith(")")):
            raise ValueError(f"malformed coordinate: {text!r}")
        parts = text[1:-1].split(",")
        if len(parts) != 2:
            raise ValueError(f"malformed coordinate: {text!r}")
        try:
            return cls(int(parts[0]), int(parts[1]))
        except ValueError:
            raise ValueError(f"malformed coordinate: {text!r}") from None

    def front(self, direction: Direction) -> "Coordinate":
        """The adjacent cell one step towards direction."""
        if direction == Direction.EAST:
            return Coordinate(self.x + 1, self.y)
        if direction == Direction.SOUTH:
            return Coordinate(self.x, self.y - 1)
        if direction == Direction.WEST:
            return Coordinate(self.x - 1, self.y)
        return Coordinate(self.x, self.y + 1)

    def neighbors(self) -> List["Coordinate"]:
        """
        Return the 4-neighborhood (East, South, West, North).
        The caller must still check bounds.
        """
        return [self.front(d) for d in Direction]

    def cluster(self) -> List["Coordinate"]:
        """This cell followed by its 4-neighborhood."""
        return [self] + self.neighbors()

    def relative_direction(self, other: "Coordinate") -> Optional[Direction]:
        """Direction from this cell to an orthogonally adjacent cell, else None."""
        for d in (Direction.EAST, Direction.NORTH, Direction.WEST, Direction.SOUTH):
            if self.front(d) == other:
                return d
        return None


Coordinate.NOWHERE = Coordinate(-1, -1)
Coordinate.UNKNOWN = Coordinate(-2, -2)


T = TypeVar("T", int, float)


@dataclass
class ClassField(Generic[T]):
    """
    One slot per Class. Used both as a hypothesis tally (int)
    and as a posterior vector (float, not normalized).
    """
    empty: T = 0
    treasure: T = 0
    wumpus: T = 0
    pit: T = 0

    def __getitem__(self, cls: Class) -> T:
        return getattr(self, cls.value)

    def __setitem__(self, cls: Class, value: T) -> None:
        setattr(self, cls.value, value)

    def __add__(self, other: "ClassField[T]") -> "ClassField[T]":
        return ClassField(
            self.empty + other.empty,
            self.treasure + other.treasure,
            self.wumpus + other.wumpus,
            self.pit + other.pit,
        )

    def __str__(self) -> str:
        return f"({self.treasure},{self.wumpus},{self.pit})"


EVENT_KEYWORDS = (
    "treasure", "wumpus", "pit", "glitter", "stench",
    "breeze", "bonked", "scream", "gameover",
)


@dataclass
class Events:
    """
    Flags describing what happened during the last step:
      - treasure : a treasure was dug up
      - wumpus   : the agent walked onto the wumpus
      - pit      : the agent fell into a pit
      - glitter  : a treasure is adjacent to the agent
      - stench   : the wumpus is adjacent to the agent
      - breeze   : a pit is adjacent to the agent
      - bonked   : the last Walk hit a wall
      - scream   : the arrow killed the wumpus
      - gameover : the episode has ended
    """
    treasure: bool = False
    wumpus: bool = False
    pit: bool = False
    glitter: bool = False
    stench: bool = False
    breeze: bool = False
    bonked: bool = False
    scream: bool = False
    gameover: bool = False

    def active(self) -> List[str]:
        return [k for k in EVENT_KEYWORDS if getattr(self, k)]

    def __str__(self) -> str:
        return ",".join(self.active())

    @classmethod
    def parse(cls, text: str) -> "Events":
        words = set(text.split(","))
        return cls(**{k: k in words for k in EVENT_KEYWORDS})


# =========================================================
# Map: ground truth, percept markers, discovered cells
# =========================================================

MARKED_CLASSES = (Class.TREASURE, Class.WUMPUS, Class.PIT)


@dataclass
class Map:
    """
    Bounded rectangle with inclusive upper corner `size`.

    treasures/wumpuses/pits are the occupants; glitters/stenches/breezes
    are markers on every in-bounds neighbor of an occupant of the
    matching class; discovered holds the cells the agent has visited.
    """
    size: Coordinate = field(default_factory=lambda: Coordinate(MAP_SIZE_X, MAP_SIZE_Y))
    treasures: Set[Coordinate] = field(default_factory=set)
    wumpuses: Set[Coordinate] = field(default_factory=set)
    pits: Set[Coordinate] = field(default_factory=set)
    glitters: Set[Coordinate] = field(default_factory=set)
    stenches: Set[Coordinate] = field(default_factory=set)
    breezes: Set[Coordinate] = field(default_factory=set)
    discovered: Set[Coordinate] = field(default_factory=set)

    def encompass(self, location: Coordinate) -> bool:
        """Check whether a position is inside the grid."""
        return 0 <= location.x <= self.size.x and 0 <= location.y <= self.size.y

    def cells(self) -> List[Coordinate]:
        return [
            Coordinate(x, y)
            for x in range(self.size.x + 1)
            for y in range(self.size.y + 1)
        ]

    def cell_count(self) -> int:
        return (self.size.x + 1) * (self.size.y + 1)

    def neighbors(self, location: Coordinate) -> List[Coordinate]:
        """In-bounds 4-neighborhood of location."""
        return [n for n in location.neighbors() if self.encompass(n)]

    def occupants(self, cls: Class) -> Set[Coordinate]:
        return {
            Class.TREASURE: self.treasures,
            Class.WUMPUS: self.wumpuses,
            Class.PIT: self.pits,
        }[cls]

    def markers(self, cls: Class) -> Set[Coordinate]:
        return {
            Class.TREASURE: self.glitters,
            Class.WUMPUS: self.stenches,
            Class.PIT: self.breezes,
        }[cls]

    def class_at(self, location: Coordinate) -> Class:
        for cls in MARKED_CLASSES:
            if location in self.occupants(cls):
                return cls
        return Class.EMPTY

    # -----------------------------------------------------
    # Occupant mutation (keeps markers consistent)
    # -----------------------------------------------------

    def add(self, cls: Class, location: Coordinate) -> None:
        self.occupants(cls).add(location)
        self.markers(cls).update(self.neighbors(location))

    def remove(self, cls: Class, location: Coordinate) -> None:
        """
        Remove an occupant and recompute the marker of each neighbor:
        a neighbor keeps its marker while another occupant of the same
        class is still adjacent to it.
        """
        occupants = self.occupants(cls)
        markers = self.markers(cls)
        occupants.discard(location)
        for neighbor in self.neighbors(location):
            if not any(n in occupants for n in neighbor.neighbors()):
                markers.discard(neighbor)

    def add_treasure(self, location: Coordinate) -> None:
        self.add(Class.TREASURE, location)

    def add_wumpus(self, location: Coordinate) -> None:
        self.add(Class.WUMPUS, location)

    def add_pit(self, location: Coordinate) -> None:
        self.add(Class.PIT, location)

    def remove_treasure(self, location: Coordinate) -> None:
        self.remove(Class.TREASURE, location)

    def remove_wumpus(self, location: Coordinate) -> None:
        self.remove(Class.WUMPUS, location)

    def remove_pit(self, location: Coordinate) -> None:
        self.remove(Class.PIT, location)

    def apply_classes(self, locations: Iterable[Coordinate], classes: Iterable[Class]) -> None:
        """
        Overwrite the occupant of each location (scratch maps only).
        Markers are left untouched: they are the observations the
        hypothesis has to explain.
        """
        for location, cls in zip(locations, classes):
            self.treasures.discard(location)
            self.wumpuses.discard(location)
            self.pits.discard(location)
            if cls != Class.EMPTY:
                self.occupants(cls).add(location)

    def frontier(self) -> Set[Coordinate]:
        """Undiscovered in-bounds cells adjacent to a discovered cell."""
        return {
            n
            for location in self.discovered
            for n in self.neighbors(location)
            if n not in self.discovered
        }

    def copy(self) -> "Map":
        return Map(
            size=self.size,
            treasures=set(self.treasures),
            wumpuses=set(self.wumpuses),
            pits=set(self.pits),
            glitters=set(self.glitters),
            stenches=set(self.stenches),
            breezes=set(self.breezes),
            discovered=set(self.discovered),
        )

    def to_dict(self) -> Dict[str, object]:
        def cells(s: Set[Coordinate]) -> List[List[int]]:
            return [[c.x, c.y] for c in sorted(s, key=lambda c: (c.x, c.y))]

        return {
            "size": [self.size.x, self.size.y],
            "treasures": cells(self.treasures),
            "wumpuses": cells(self.wumpuses),
            "pits": cells(self.pits),
            "glitters": cells(self.glitters),
            "stenches": cells(self.stenches),
            "breezes": cells(self.breezes),
            "discovered": cells(self.discovered),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Map":
        def cells(key: str) -> Set[Coordinate]:
            return {Coordinate(int(x), int(y)) for x, y in data.get(key, [])}

        x, y = data["size"]
        return cls(
            size=Coordinate(int(x), int(y)),
            treasures=cells("treasures"),
            wumpuses=cells("wumpuses"),
            pits=cells("pits"),
            glitters=cells("glitters"),
            stenches=cells("stenches"),
            breezes=cells("breezes"),
            discovered=cells("discovered"),
        )


def hide_map(map: Map) -> None:
    """
    Redact ground truth in place. Buried treasures are never revealed;
    everything else survives only on discovered cells.
    """
    map.treasures.clear()
    map.wumpuses &= map.discovered
    map.pits &= map.discovered
    map.glitters &= map.discovered
    map.stenches &= map.discovered
    map.breezes &= map.discovered


# =========================================================
# Environment: WumpusGame
# =========================================================

SPAWN_LOCATION = Coordinate(0, 0)
SPAWN_DIRECTION = Direction.EAST


class WumpusGame:
    """
    Environment simulator (Running -> GameOver state machine).

    Separation of responsibilities:
      - The game stores the complete world state and applies rules.
      - Agents choose actions from a redacted snapshot (hidden()).

    Score deltas (cumulative):
      - -1 per action
      - -10 for shooting an arrow, -50 for digging
      - +250 for digging up a treasure
      - -100 for falling into a pit (not terminal)
      - -200 for walking onto the wumpus (terminal)
    """

    def __init__(
        self,
        map: Optional[Map] = None,
        location: Coordinate = SPAWN_LOCATION,
        direction: Direction = SPAWN_DIRECTION,
        arrows: int = SPAWN_ARROWS,
        score: int = 0,
        events: Optional[Events] = None,
        game_over: bool = False,
        steps: int = 0,
    ):
        self.map = map if map is not None else Map()
        self.location = location
        self.direction = direction
        self.arrows = arrows
        self.score = score
        self.events = events if events is not None else Events()
        self.game_over = game_over
        self.steps = steps

    @classmethod
    def new_random(cls, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> "WumpusGame":
        """
        Start a new episode: spawn at (0,0) facing East with one arrow,
        and draw treasures, the wumpus and pits from the other cells
        without collisions.
        """
        rng = rng if rng is not None else random.Random(seed)
        map = Map()

        candidates = [c for c in map.cells() if c != SPAWN_LOCATION]
        special = rng.sample(candidates, COUNT_TREASURES + COUNT_WUMPUSES + COUNT_PITS)
        treasures = special[:COUNT_TREASURES]
        wumpuses = special[COUNT_TREASURES:COUNT_TREASURES + COUNT_WUMPUSES]
        pits = special[COUNT_TREASURES + COUNT_WUMPUSES:]

        for location in treasures:
            map.add_treasure(location)
        for location in wumpuses:
            map.add_wumpus(location)
        for location in pits:
            map.add_pit(location)

        game = cls(map=map)
        game._place_player(SPAWN_LOCATION)
        game.update_senses()
        logger.debug("New game: treasures=%s wumpuses=%s pits=%s", treasures, wumpuses, pits)
        return game

    # =====================================================
    # Internal helpers
    # =====================================================

    def _place_player(self, location: Coordinate) -> None:
        self.map.discovered.add(location)

        if location in self.map.wumpuses:
            self.game_over = True
            self.events.gameover = True
            self.events.wumpus = True
            self.score += SCORE_WUMPUS

        if location in self.map.pits:
            self.events.pit = True
            self.score += SCORE_PIT

        self.location = location

    def update_senses(self) -> None:
        """Recompute the three "-here" percepts from the map markers."""
        self.events.glitter = self.location in self.map.glitters
        self.events.stench = self.location in self.map.stenches
        self.events.breeze = self.location in self.map.breezes

    # =====================================================
    # Public API
    # =====================================================

    def is_terminal(self) -> bool:
        """Return True if the episode has ended."""
        return self.game_over

    def step(self, action: Action) -> Events:
        """
        Apply one action and return the resulting events.

        Once the game is over, every action only re-asserts the
        gameover event.
        """
        if self.game_over:
            self.events.gameover = True
            return self.events

        self.steps += 1
        self.events = Events()
        self.score += SCORE_ACTION

        if action == Action.WALK:
            new_location = self.location.front(self.direction)
            if self.map.encompass(new_location):
                self._place_player(new_location)
            else:
                self.events.bonked = True

        elif action == Action.LEFT:
            self.direction = self.direction.left()

        elif action == Action.RIGHT:
            self.direction = self.direction.right()

        elif action == Action.DIG:
            self.score += SCORE_DUG
            if self.location in self.map.treasures:
                self.map.remove_treasure(self.location)
                self.score += SCORE_TREASURE
                self.events.treasure = True
            if not self.map.treasures:
                self.events.gameover = True
                self.game_over = True

        elif action == Action.SHOOT:
            # No arrow left: only the base action cost applies
            if self.arrows > 0:
                self.arrows -= 1
                self.score += SCORE_SHOT
                target = self.location.front(self.direction)
                if target in self.map.wumpuses:
                    self.map.remove_wumpus(target)
                    self.events.scream = True

        self.update_senses()
        if self.game_over:
            logger.info("Game over after %d steps, score %d", self.steps, self.score)
        return self.events

    def hidden(self) -> "WumpusGame":
        """A copy of the game with ground truth redacted for the player."""
        game = self.copy()
        hide_map(game.map)
        return game

    def copy(self) -> "WumpusGame":
        return WumpusGame(
            map=self.map.copy(),
            location=self.location,
            direction=self.direction,
            arrows=self.arrows,
            score=self.score,
            events=Events(**vars(self.events)),
            game_over=self.game_over,
            steps=self.steps,
        )

    # =====================================================
    # Snapshot codec (transport boundary)
    # =====================================================

    def to_dict(self) -> Dict[str, object]:
        return {
            "map": self.map.to_dict(),
            "location": [self.location.x, self.location.y],
            "direction": self.direction.value,
            "events": vars(self.events).copy(),
            "game_over": self.game_over,
            "score": self.score,
            "arrows": self.arrows,
            "steps": self.steps,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "WumpusGame":
        x, y = data["location"]
        return cls(
            map=Map.from_dict(data["map"]),
            location=Coordinate(int(x), int(y)),
            direction=parse_direction(data["direction"]),
            arrows=int(data["arrows"]),
            score=int(data["score"]),
            events=Events(**{k: bool(v) for k, v in data["events"].items() if k in EVENT_KEYWORDS}),
            game_over=bool(data["game_over"]),
            steps=int(data.get("steps", 0)),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "WumpusGame":
        return cls.from_dict(json.loads(text))
