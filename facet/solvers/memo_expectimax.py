"""
Recursive expectimax with a dictionary memo keyed by Stone.

Same values as the dense solver in expectimax.py, computed top-down: only the
states reachable from the start stone are visited, and each is stored under
the Stone itself.  Simpler and slower; kept as a regression oracle for the
dense table.
"""

from __future__ import annotations

from facet.engine.chance import SCALE
from facet.engine.exact import checked_add, checked_mul, checked_pow
from facet.engine.stone import LINES, Stone
from facet.engine.target import DEFAULT_TARGET, Target


def _optimal_value(stone: Stone, target: Target, memo: dict[Stone, int]) -> int:
    """Unnormalised optimal value of *stone* (scale 20 ** remaining rolls).

    Args:
        stone:  Current state.
        target: Thresholds and budgets.
        memo:   Cache shared within a single top-level evaluation.
    """
    if stone in memo:
        return memo[stone]

    if target.is_terminal(stone):
        result = 1 if target.is_satisfied(stone) else 0
    else:
        result = max(_select_value(stone, line, target, memo) for line in LINES)

    memo[stone] = result
    return result


def _select_value(stone: Stone, line: int, target: Target, memo: dict[Stone, int]) -> int:
    """Unnormalised value of rolling *line* next; 0 if the line is spent."""
    if not target.can_roll(stone, line):
        return 0
    on_success, on_failure = target.roll(stone, line)
    return checked_add(
        checked_mul(stone.chance.success(), _optimal_value(on_success, target, memo)),
        checked_mul(stone.chance.failure(), _optimal_value(on_failure, target, memo)),
    )


def expectimax_memo(
    stone: Stone,
    target: Target = DEFAULT_TARGET,
) -> tuple[tuple[int, int, int], int]:
    """Recursive counterpart of :func:`facet.solvers.expectimax.expectimax`.

    Returns:
        ``(numerators, denominator)`` with the same meaning and the same
        values as the dense solver.
    """
    target.validate(stone)
    if target.is_terminal(stone):
        return (0, 0, 0), 1
    denominator = checked_pow(SCALE, target.remaining(stone))
    memo: dict[Stone, int] = {}
    numerators = tuple(_select_value(stone, line, target, memo) for line in LINES)
    return numerators, denominator  # type: ignore[return-value]
