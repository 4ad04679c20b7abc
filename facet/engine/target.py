"""
Faceting target: success thresholds and per-line trial budgets.

    lines[0], lines[1] — minimum successes required on the two engraving lines
    lines[2]           — maximum successes allowed on the penalty line
    rolls[i]           — trial budget of line i

A stone is terminal once every line has consumed its whole budget.  The goal
is a terminal stone that satisfies the thresholds.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .stone import LINES, Stone, _triple, check_line


@dataclass(frozen=True)
class Target:
    """Immutable success thresholds and trial budgets for one evaluation."""

    lines: tuple[int, int, int]
    rolls: tuple[int, int, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", _triple(self.lines, "target lines"))
        object.__setattr__(self, "rolls", _triple(self.rolls, "target rolls"))

    @classmethod
    def of(cls, lines: Iterable[int], rolls: Iterable[int]) -> Target:
        return cls(tuple(lines), tuple(rolls))  # type: ignore[arg-type]

    @property
    def total_rolls(self) -> int:
        """Total trial budget across all lines."""
        return sum(self.rolls)

    # ── Predicates ────────────────────────────────────────────────────────────

    def is_satisfied(self, stone: Stone) -> bool:
        """True if *stone*'s successes meet the thresholds."""
        return (
            stone.lines[0] >= self.lines[0]
            and stone.lines[1] >= self.lines[1]
            and stone.lines[2] <= self.lines[2]
        )

    def is_terminal(self, stone: Stone) -> bool:
        """True if every line has consumed its whole budget."""
        return all(stone.rolls[line] >= self.rolls[line] for line in LINES)

    def is_goal(self, stone: Stone) -> bool:
        return self.is_terminal(stone) and self.is_satisfied(stone)

    def can_roll(self, stone: Stone, line: int) -> bool:
        """True if *line* still has budget left."""
        check_line(line)
        return stone.rolls[line] < self.rolls[line]

    def remaining(self, stone: Stone) -> int:
        """Trials left across all lines."""
        return self.total_rolls - stone.rolls_used

    def is_reachable(self, stone: Stone) -> bool:
        """True if the goal can still be met from *stone*.

        Lines 0/1 need enough budget left to reach their minimum; line 2 must
        not already be over its cap.
        """
        for line in (0, 1):
            left = self.rolls[line] - stone.rolls[line]
            if stone.lines[line] + left < self.lines[line]:
                return False
        return stone.lines[2] <= self.lines[2]

    # ── Validation / transitions ──────────────────────────────────────────────

    def validate(self, stone: Stone) -> Stone:
        """Return *stone* unchanged if it fits inside the budget.

        Raises:
            ValueError: if any line has consumed more rolls than its budget.
        """
        for line in LINES:
            if stone.rolls[line] > self.rolls[line]:
                raise ValueError(
                    f"Line {line} has used {stone.rolls[line]} rolls, "
                    f"over its budget of {self.rolls[line]}."
                )
        return stone

    def roll(self, stone: Stone, line: int) -> tuple[Stone, Stone]:
        """Return the (success, failure) successors of rolling *line*.

        Raises:
            ValueError: if *line* has no budget left.
        """
        if not self.can_roll(stone, line):
            raise ValueError(
                f"Line {line} is at its budget of {self.rolls[line]} rolls; it cannot be rolled."
            )
        return stone.succeed(line), stone.fail(line)

    def __str__(self) -> str:
        return (
            f">= {self.lines[0]}/{self.rolls[0]} | "
            f">= {self.lines[1]}/{self.rolls[1]} | "
            f"<= {self.lines[2]}/{self.rolls[2]}"
        )


DEFAULT_TARGET: Target = Target((7, 7, 4), (10, 10, 10))
"""Canonical target: 7/7 on the engraving lines, at most 4 on the penalty line, 10 rolls each."""
