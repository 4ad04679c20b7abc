"""
Highest-probability faceting path via best-first search.

Finds the single most likely sequence of rolls (line choice plus outcome) that
takes a stone from its start state to a goal state of the target, and returns
the states along that sequence.

Path probabilities are kept exact: a path score is the product of its outcome
weights scaled to the common denominator ``20 ** depth`` (depth = rolls left at
the start), so every edge multiplies by the weight and divides by 20 without
remainder.  Scores only decrease along a path, so popping states in order of
decreasing score makes the first goal popped the most probable goal overall.

Duplicate states reached by different paths keep the higher score; the
frontier uses lazy deletion (stale entries are skipped when popped) instead of
decrease-key.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from fractions import Fraction

from facet.engine.chance import SCALE
from facet.engine.exact import checked_pow
from facet.engine.stone import LINES, Stone
from facet.engine.target import DEFAULT_TARGET, Target

logger = logging.getLogger(__name__)


# ─── Transition helpers ───────────────────────────────────────────────────────


def transition_of(before: Stone, after: Stone) -> tuple[int, bool] | None:
    """Return the ``(line, succeeded)`` roll that turns *before* into *after*.

    Returns None when no single roll does.
    """
    for line in LINES:
        if after == before.succeed(line):
            return line, True
        if after == before.fail(line):
            return line, False
    return None


def is_valid_transition(before: Stone, after: Stone) -> bool:
    return transition_of(before, after) is not None


def path_moves(path: list[Stone]) -> list[tuple[int, bool]]:
    """Return the ``(line, succeeded)`` records along *path*.

    The inverse of :meth:`Stone.from_sequence` when *path* starts from a
    fresh stone.

    Raises:
        ValueError: if two adjacent states are not one roll apart.
    """
    moves: list[tuple[int, bool]] = []
    for before, after in zip(path, path[1:]):
        move = transition_of(before, after)
        if move is None:
            raise ValueError(f"No single roll leads from {before} to {after}.")
        moves.append(move)
    return moves


def path_probability(path: list[Stone]) -> Fraction:
    """Exact probability of following *path* roll by roll.

    Raises:
        ValueError: if two adjacent states are not one roll apart.
    """
    probability = Fraction(1)
    for before, (_, succeeded) in zip(path, path_moves(path)):
        weight = before.chance.success() if succeeded else before.chance.failure()
        probability *= Fraction(weight, SCALE)
    return probability


def _reconstruct(goal: Stone, parent: dict[Stone, Stone]) -> list[Stone]:
    """Walk predecessor links back to the start and return start → goal."""
    path = [goal]
    while path[-1] in parent:
        path.append(parent[path[-1]])
    path.reverse()
    return path


# ─── Search ───────────────────────────────────────────────────────────────────


def find_best_path(
    start: Stone | None = None,
    target: Target = DEFAULT_TARGET,
) -> list[Stone] | None:
    """Most probable sequence of states from *start* to a goal of *target*.

    Args:
        start:  Initial state; defaults to a fresh 75% stone.
        target: Thresholds and budgets.  A goal is a terminal stone (every
                budget spent) that satisfies the thresholds.

    Returns:
        States from *start* to the goal, inclusive, or None when no goal is
        reachable from *start*.

    Raises:
        ValueError: if *start* has used more rolls than the budget allows.
    """
    start = Stone.default() if start is None else start
    target.validate(start)

    start_score = checked_pow(SCALE, target.remaining(start))
    counter = itertools.count()
    frontier: list[tuple[int, int, Stone]] = [(-start_score, next(counter), start)]
    best: dict[Stone, int] = {start: start_score}
    parent: dict[Stone, Stone] = {}
    finalised: set[Stone] = set()

    while frontier:
        neg_score, _, stone = heapq.heappop(frontier)
        if stone in finalised:
            continue
        finalised.add(stone)

        if target.is_goal(stone):
            path = _reconstruct(stone, parent)
            logger.debug(
                "Goal %s reached after finalising %d states (%d generated)",
                stone,
                len(finalised),
                len(best),
            )
            return path

        score = -neg_score
        for line in LINES:
            if not target.can_roll(stone, line):
                continue
            on_success, on_failure = target.roll(stone, line)
            for child, weight in (
                (on_success, stone.chance.success()),
                (on_failure, stone.chance.failure()),
            ):
                if child in finalised or not target.is_reachable(child):
                    continue
                child_score = score * weight // SCALE
                if child_score > best.get(child, 0):
                    best[child] = child_score
                    parent[child] = stone
                    heapq.heappush(frontier, (-child_score, next(counter), child))

    logger.debug("No goal reachable from %s (%d states finalised)", start, len(finalised))
    return None


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    result = find_best_path()
    if result is None:
        print("No solution.")
    else:
        for state in result:
            print(state)
        print(f"Path probability: {float(path_probability(result)):.6e}")
