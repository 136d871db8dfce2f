# inference.py
# =========================================================
# Map consistency, hypothesis enumeration and naive Bayes
# ---------------------------------------------------------
# is_map_valid() decides whether a fully specified layout
# explains every observed marker (and nothing more).
#
# calculate_map_possibilities() walks the mixed-radix index
# space of per-cell class choices (4 classes for frontier
# cells, empty/treasure for treasure candidates), keeps the
# layouts accepted by is_map_valid() and tallies classes.
# Large spaces are split into index ranges and reduced from
# a multiprocessing pool.
#
# estimate_classes() turns the tallies into independent
# per-class posteriors.
# =========================================================

from __future__ import annotations
import logging
import multiprocessing as mp
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from wumpus_env import (
    COUNT_PITS,
    COUNT_TREASURES,
    COUNT_WUMPUSES,
    MARKED_CLASSES,
    Class,
    ClassField,
    Coordinate,
    Map,
)

logger = logging.getLogger(__name__)

CLASS_COUNTS = {
    Class.TREASURE: COUNT_TREASURES,
    Class.WUMPUS: COUNT_WUMPUSES,
    Class.PIT: COUNT_PITS,
}

FRONTIER_CLASSES = (Class.EMPTY, Class.TREASURE, Class.WUMPUS, Class.PIT)
CANDIDATE_CLASSES = (Class.EMPTY, Class.TREASURE)

PARALLEL_THRESHOLD = 1 << 16

Blacklist = Dict[Coordinate, Class]
Tallies = Dict[Coordinate, ClassField[int]]


class InferenceError(RuntimeError):
    """The reasoning core reached a state that a finite map cannot produce."""


# =========================================================
# Validator
# =========================================================

def is_map_valid(map: Map, blacklist: Blacklist) -> bool:
    """
    Whether a hypothetical layout is consistent with the observations:
      1. every occupant lies inside the map
      2. no blacklisted cell holds its forbidden class
         (EMPTY forbids every occupant)
      3. class counts do not exceed the totals
      4. every discovered neighbor of an occupant carries its marker
      5. every marker has an in-bounds neighbor holding its class
    Read-only; safe to call from several workers at once.
    Class totals (rule 3) are checked first.
    """
    for cls, total in CLASS_COUNTS.items():
        if len(map.occupants(cls)) > total:
            return False

    for cls in MARKED_CLASSES:
        if not all(map.encompass(c) for c in map.occupants(cls)):
            return False

    for location, cls in blacklist.items():
        if cls == Class.EMPTY:
            if map.class_at(location) != Class.EMPTY:
                return False
        elif location in map.occupants(cls):
            return False

    for cls in MARKED_CLASSES:
        markers = map.markers(cls)
        for occupant in map.occupants(cls):
            for n in occupant.neighbors():
                if n in map.discovered and n not in markers:
                    return False

    for cls in MARKED_CLASSES:
        occupants = map.occupants(cls)
        for marker in map.markers(cls):
            if not any(n in occupants for n in map.neighbors(marker)):
                return False

    return True


def check_blacklist(map: Map, blacklist: Blacklist) -> None:
    for location in blacklist:
        if not map.encompass(location):
            raise InferenceError(f"blacklisted cell {location} is outside the map")


# =========================================================
# Hypothesis enumeration
# =========================================================

def _decode(radices: Sequence[int], index: int) -> List[int]:
    digits = []
    for radix in radices:
        digits.append(index % radix)
        index //= radix
    return digits


def _assignments(
    radices: Sequence[int],
    start: int,
    stop: int,
    prune: Optional[Callable[[List[int]], int]] = None,
) -> Iterator[List[int]]:
    """
    Mixed-radix counter over [start, stop). The first digit varies
    fastest. Yields the same list object, updated in place.

    prune(digits) returns -1 to keep the assignment, or a position i
    meaning every assignment sharing digits[i:] is rejected; the
    counter then jumps past that whole block.
    """
    weights = [1]
    for radix in radices:
        weights.append(weights[-1] * radix)

    index = start
    digits = _decode(radices, start)
    while index < stop:
        level = prune(digits) if prune is not None else -1
        if level >= 0:
            index += weights[level] - index % weights[level]
            digits = _decode(radices, index)
            continue
        yield digits
        index += 1
        for i, radix in enumerate(radices):
            digits[i] += 1
            if digits[i] < radix:
                break
            digits[i] = 0


def _quota_pruner(
    locations: List[Coordinate],
    choices: List[Tuple[Class, ...]],
    map: Map,
) -> Optional[Callable[[List[int]], int]]:
    """
    Pruner for _assignments rejecting blocks whose slow digits already
    exceed a class total once the fixed occupants are counted.
    None when the fixed occupants alone exceed a total.
    """
    assigned = set(locations)
    room = {
        cls: total - len(map.occupants(cls) - assigned)
        for cls, total in CLASS_COUNTS.items()
    }
    if any(r < 0 for r in room.values()):
        return None

    def prune(digits: List[int]) -> int:
        used = dict.fromkeys(room, 0)
        for i in range(len(digits) - 1, -1, -1):
            cls = choices[i][digits[i]]
            if cls == Class.EMPTY:
                continue
            used[cls] += 1
            if used[cls] > room[cls]:
                return i
        return -1

    return prune


def _count_range(
    locations: List[Coordinate],
    choices: List[Tuple[Class, ...]],
    map: Map,
    blacklist: Blacklist,
    start: int,
    stop: int,
) -> Tuple[int, List[List[int]]]:
    """Valid-layout count and per-location class tallies for one index range."""
    scratch = map.copy()
    radices = [len(c) for c in choices]
    tallies = [[0] * len(FRONTIER_CLASSES) for _ in locations]
    total = 0

    prune = _quota_pruner(locations, choices, map)
    if prune is None:
        return total, tallies

    for digits in _assignments(radices, start, stop, prune):
        classes = [choices[i][d] for i, d in enumerate(digits)]
        scratch.apply_classes(locations, classes)
        if not is_map_valid(scratch, blacklist):
            continue
        total += 1
        for i, cls in enumerate(classes):
            tallies[i][FRONTIER_CLASSES.index(cls)] += 1

    return total, tallies


def _chunks(size: int, parts: int) -> List[Tuple[int, int]]:
    step = -(-size // parts)
    return [(i, min(i + step, size)) for i in range(0, size, step)]


def calculate_map_possibilities(
    frontier: Sequence[Coordinate],
    possible_treasures: Sequence[Coordinate],
    map: Map,
    blacklist: Blacklist,
    workers: Optional[int] = None,
) -> Tuple[int, Tallies]:
    """
    Enumerate every class assignment of frontier x candidate cells
    (4^|frontier| * 2^|candidates| layouts) and count the valid ones.

    Returns (total_possibilities, per-location class tallies).

    workers: None picks a pool only for large spaces; 1 forces
    inline evaluation.
    """
    check_blacklist(map, blacklist)

    locations = list(frontier) + list(possible_treasures)
    choices = [FRONTIER_CLASSES] * len(frontier) + [CANDIDATE_CLASSES] * len(possible_treasures)
    size = 1
    for c in choices:
        size *= len(c)

    if workers is None:
        workers = mp.cpu_count() if size >= PARALLEL_THRESHOLD else 1

    logger.debug(
        "Enumerating %d layouts (%d frontier, %d candidates, %d workers)",
        size, len(frontier), len(possible_treasures), workers,
    )

    if workers <= 1:
        parts = [_count_range(locations, choices, map, blacklist, 0, size)]
    else:
        args = [(locations, choices, map, blacklist, a, b) for a, b in _chunks(size, workers)]
        with mp.Pool(workers) as pool:
            parts = pool.starmap(_count_range, args)

    total = 0
    tallies = [[0] * len(FRONTIER_CLASSES) for _ in locations]
    for part_total, part_tallies in parts:
        total += part_total
        for row, part_row in zip(tallies, part_tallies):
            for i, value in enumerate(part_row):
                row[i] += value

    counts: Tallies = {}
    for location, row in zip(locations, tallies):
        counts[location] = ClassField(*row)

    logger.debug("%d valid layouts", total)
    return total, counts


# =========================================================
# Naive Bayes estimate
# =========================================================

def naive_bayes(count: float, population: float, hits: float, total: float) -> float:
    """
    P(A|B) = P(B|A)P(A) / (P(B|A)P(A) + P(B|!A)P(!A))
    with P(A) = count/population and P(B|A) = hits/total.
    Degenerate inputs (no population, no valid layout, zero evidence)
    give 0.0.
    """
    if population == 0 or total == 0:
        return 0.0
    prior = count / population
    likelihood = hits / total
    evidence = prior * likelihood + (1.0 - prior) * (1.0 - likelihood)
    if evidence == 0:
        return 0.0
    return (prior * likelihood) / evidence


def remaining_counts(map: Map, treasures_found: int = 0, wumpuses_killed: int = 0) -> Tuple[int, ClassField[int]]:
    """
    Undiscovered cell count and the per-class number of occupants not
    yet accounted for (visible on the map, dug up or killed).
    """
    undiscovered = map.cell_count() - len(map.discovered)
    treasures = COUNT_TREASURES - len(map.treasures) - treasures_found
    wumpuses = COUNT_WUMPUSES - len(map.wumpuses) - wumpuses_killed
    pits = COUNT_PITS - len(map.pits)
    empties = undiscovered - treasures - wumpuses - pits
    return undiscovered, ClassField(empties, treasures, wumpuses, pits)


def estimate_classes(
    total: int,
    tallies: Tallies,
    map: Map,
    treasures_found: int = 0,
    wumpuses_killed: int = 0,
) -> Dict[Coordinate, ClassField[float]]:
    """Independent naive-Bayes posterior per location and class."""
    undiscovered, left = remaining_counts(map, treasures_found, wumpuses_killed)
    estimates: Dict[Coordinate, ClassField[float]] = {}
    for location, tally in tallies.items():
        posterior = ClassField(0.0, 0.0, 0.0, 0.0)
        for cls in FRONTIER_CLASSES:
            posterior[cls] = naive_bayes(left[cls], undiscovered, tally[cls], total)
        estimates[location] = posterior
    return estimates
