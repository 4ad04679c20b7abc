"""
Exact expectimax solver for ability-stone faceting using backward induction.

At every state the player picks one of the (up to) three lines with budget
left; the roll then succeeds or fails with the current ladder weight.  The
value of a state is the best achievable probability of ending on a goal state.

Values are exact: they are carried as integers scaled by SCALE=20 per trial,
so a value v at a state with k trials remaining means probability v / 20**k.

State space is enumerated densely rather than hashed.  Per line, the pairs
(rolls, successes) with successes ≤ rolls ≤ budget are numbered
``r(r+1)/2 + s``; the table index composes the chance index with the three
per-line numbers in mixed radix:

    index = ((chance * s0 + t0) * s1 + t1) * s2 + t2

The table is filled bottom-up: first the terminal layer (every budget spent),
then shells of decreasing total rolls used, so every dependency (one more roll)
is always filled before it is read.
"""

from __future__ import annotations

import logging
import time
from fractions import Fraction

from facet.engine.chance import SCALE, Chance
from facet.engine.exact import (
    check_u192,
    checked_add,
    checked_mul,
    checked_pow,
    to_decimal,
    to_float,
    to_fraction,
)
from facet.engine.stone import LINES, Stone, check_line
from facet.engine.target import DEFAULT_TARGET, Target

logger = logging.getLogger(__name__)

NUM_CHANCES: int = len(Chance)


def _triangle(n: int) -> int:
    """Number of (rolls, successes) pairs with successes ≤ rolls ≤ n."""
    return (n + 1) * (n + 2) // 2


# ─── Engine ───────────────────────────────────────────────────────────────────


class Expectimax:
    """Dense memo table of optimal values for one target.

    Building the engine fills the whole table; afterwards any stone inside the
    target's budget can be evaluated by table lookups alone.  The table is
    owned by this instance and never shared.

    Args:
        target: Success thresholds and per-line budgets.

    Raises:
        OverflowError: if the total budget is too deep for the 192-bit
            accumulator (checked before the table is allocated).
    """

    def __init__(self, target: Target) -> None:
        self.target = target
        # Largest value in the table is 20 ** total_rolls (probability 1 at the root).
        checked_pow(SCALE, target.total_rolls)

        self.sizes: tuple[int, int, int] = tuple(_triangle(r) for r in target.rolls)  # type: ignore[assignment]
        s0, s1, s2 = self.sizes
        self._strides: tuple[int, int, int] = (s1 * s2, s2, 1)
        self._chance_stride: int = s0 * s1 * s2
        self.table: list[int | None] = [None] * (self._chance_stride * NUM_CHANCES)

        start = time.perf_counter()
        self._compute_terminal()
        self._compute_all()
        logger.debug(
            "Filled %d cells for target %s in %.3f s",
            len(self.table),
            target,
            time.perf_counter() - start,
        )

    # ── Indexing ──────────────────────────────────────────────────────────────

    def index(self, stone: Stone) -> int:
        """Position of *stone* in the flat table (bijective within the budget)."""
        index = int(stone.chance)
        for line in LINES:
            roll = stone.rolls[line]
            index = index * self.sizes[line] + roll * (roll + 1) // 2 + stone.lines[line]
        return index

    def _read(self, index: int) -> int:
        value = self.table[index]
        if value is None:
            raise RuntimeError(f"Memo cell {index} read before it was filled.")
        return value

    # ── Fill ──────────────────────────────────────────────────────────────────

    def _compute_terminal(self) -> None:
        """Fill every state with all budgets spent: 1 if satisfied, else 0."""
        budget0, budget1, budget2 = self.target.rolls
        need0, need1, cap2 = self.target.lines
        stride0, stride1, _ = self._strides
        base0 = budget0 * (budget0 + 1) // 2
        base1 = budget1 * (budget1 + 1) // 2
        base2 = budget2 * (budget2 + 1) // 2

        for chance in Chance:
            offset = chance * self._chance_stride
            for line2 in range(budget2 + 1):
                for line1 in range(budget1 + 1):
                    for line0 in range(budget0 + 1):
                        index = (
                            offset
                            + (base0 + line0) * stride0
                            + (base1 + line1) * stride1
                            + base2
                            + line2
                        )
                        satisfied = line0 >= need0 and line1 >= need1 and line2 <= cap2
                        self.table[index] = 1 if satisfied else 0

    def _compute_all(self) -> None:
        """Fill every non-terminal state, shell by shell, most rolls used first."""
        budget0, budget1, budget2 = self.target.rolls
        stride0, stride1, stride2 = self._strides
        chance_stride = self._chance_stride
        table = self.table

        for roll_total in reversed(range(self.target.total_rolls)):
            min_two = max(0, roll_total - budget1 - budget0)
            max_two = min(roll_total, budget2)

            for roll2 in range(min_two, max_two + 1):
                min_one = max(0, roll_total - roll2 - budget0)
                max_one = min(roll_total - roll2, budget1)

                for roll1 in range(min_one, max_one + 1):
                    roll0 = roll_total - roll2 - roll1
                    rolls = (roll0, roll1, roll2)

                    # (success offset, failure offset) of each line that can still roll.
                    moves = [
                        ((rolls[line] + 2) * stride, (rolls[line] + 1) * stride)
                        for line, (stride, budget) in enumerate(
                            zip((stride0, stride1, stride2), (budget0, budget1, budget2))
                        )
                        if rolls[line] < budget
                    ]

                    base0 = roll0 * (roll0 + 1) // 2
                    base1 = roll1 * (roll1 + 1) // 2
                    base2 = roll2 * (roll2 + 1) // 2

                    for chance in Chance:
                        offset = chance * chance_stride
                        success_offset = chance.succeed() * chance_stride
                        failure_offset = chance.fail() * chance_stride
                        win = chance.success()
                        lose = chance.failure()

                        for line2 in range(roll2 + 1):
                            for line1 in range(roll1 + 1):
                                partial = (base1 + line1) * stride1 + base2 + line2
                                for line0 in range(roll0 + 1):
                                    cell = (base0 + line0) * stride0 + partial
                                    best = 0
                                    for on_success, on_failure in moves:
                                        after_success = table[success_offset + cell + on_success]
                                        after_failure = table[failure_offset + cell + on_failure]
                                        if after_success is None or after_failure is None:
                                            raise RuntimeError(
                                                f"Dependency of memo cell {offset + cell} "
                                                "read before it was filled."
                                            )
                                        value = win * after_success + lose * after_failure
                                        if value > best:
                                            best = value
                                    table[offset + cell] = check_u192(best)

    # ── Queries ───────────────────────────────────────────────────────────────

    def select(self, stone: Stone, line: int) -> int:
        """Unnormalised value of rolling *line* from *stone*, then playing optimally.

        A line with no budget left contributes 0.
        """
        check_line(line)
        if not self.target.can_roll(stone, line):
            return 0
        chance = stone.chance
        return checked_add(
            checked_mul(chance.success(), self._read(self.index(stone.succeed(line)))),
            checked_mul(chance.failure(), self._read(self.index(stone.fail(line)))),
        )

    def value(self, stone: Stone) -> int:
        """Unnormalised optimal value of *stone* (scale 20 ** remaining rolls)."""
        return self._read(self.index(self.target.validate(stone)))

    def probability(self, stone: Stone) -> Fraction:
        """Exact optimal probability of reaching the goal from *stone*."""
        return to_fraction(self.value(stone), SCALE ** self.target.remaining(stone))

    def evaluate(self, stone: Stone) -> tuple[tuple[int, int, int], int]:
        """Return ``(numerators, denominator)`` for each first-line choice.

        ``numerators[line] / denominator`` is the exact probability of meeting
        the target when *line* is rolled next and every later choice is
        optimal.  A terminal stone has no choices: all numerators are 0.
        """
        self.target.validate(stone)
        if self.target.is_terminal(stone):
            return (0, 0, 0), 1
        denominator = checked_pow(SCALE, self.target.remaining(stone))
        numerators = tuple(self.select(stone, line) for line in LINES)
        return numerators, denominator  # type: ignore[return-value]

    def best_line(self, stone: Stone) -> int | None:
        """Line to roll next under optimal play (lowest index on ties).

        Returns None for a terminal stone.
        """
        if self.target.is_terminal(self.target.validate(stone)):
            return None
        candidates = [line for line in LINES if self.target.can_roll(stone, line)]
        return max(candidates, key=lambda line: (self.select(stone, line), -line))


# ─── Public API ───────────────────────────────────────────────────────────────


def expectimax(
    stone: Stone,
    target: Target = DEFAULT_TARGET,
) -> tuple[tuple[int, int, int], int]:
    """Probability of reaching *target* from *stone* for each first-line choice.

    Args:
        stone:  Current state (must fit inside the target budget).
        target: Thresholds and per-line budgets.

    Returns:
        ``(numerators, denominator)`` — ``numerators[line] / denominator`` is
        the exact success probability when *line* is chosen first.  The
        denominator is ``20 ** (budget_total - used_total)``.

    Raises:
        ValueError:    if *stone* has used more rolls than the budget allows.
        OverflowError: if the budget is too deep for the 192-bit accumulator.
    """
    target.validate(stone)
    return Expectimax(target).evaluate(stone)


def expectimax_decimal(
    stone: Stone,
    target: Target = DEFAULT_TARGET,
    precision: int = 6,
) -> tuple[str, str, str]:
    """:func:`expectimax` rendered as truncated decimal strings."""
    numerators, denominator = expectimax(stone, target)
    return tuple(to_decimal(n, denominator, precision) for n in numerators)  # type: ignore[return-value]


def expectimax_floats(
    stone: Stone,
    target: Target = DEFAULT_TARGET,
    precision: int = 15,
) -> tuple[float, float, float]:
    """:func:`expectimax` as floats, truncated to *precision* digits first."""
    numerators, denominator = expectimax(stone, target)
    return tuple(to_float(n, denominator, precision) for n in numerators)  # type: ignore[return-value]


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    start_stone = Stone.default()
    print(f"Start:  {start_stone}")
    print(f"Target: {DEFAULT_TARGET}")
    t0 = time.perf_counter()
    nums, den = expectimax(start_stone, DEFAULT_TARGET)
    elapsed = time.perf_counter() - t0
    for line_index, numerator in enumerate(nums):
        print(f"  line {line_index}: {to_decimal(numerator, den, 10)}")
    print(f"Solved in {elapsed:.2f}s")
