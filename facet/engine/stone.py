"""
Ability-stone state and its transitions.

A Stone is an immutable snapshot of a faceting session:

    chance  — current success-rate level (see chance.py)
    lines   — successful trials so far, per line
    rolls   — trials consumed so far, per line   (lines[i] ≤ rolls[i])

Lines 0 and 1 are the engravings being raised; line 2 is the penalty line
whose successes the player wants to keep low.  The asymmetry lives entirely in
Target (target.py); the state model treats the three lines identically.

Transitions never mutate: succeed()/fail() return a new Stone.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .chance import Chance

# ─── Constants ────────────────────────────────────────────────────────────────

NUM_LINES: int = 3
"""Number of independent lines on a stone."""

LINES: tuple[int, ...] = (0, 1, 2)
"""Valid line indices."""


def check_line(line: int) -> int:
    """Return *line* unchanged if it is a valid line index.

    Raises:
        ValueError: if *line* is not 0, 1 or 2.
    """
    if isinstance(line, bool) or not isinstance(line, int) or line not in LINES:
        raise ValueError(f"Invalid line index {line!r}; expected 0, 1 or 2.")
    return line


def _triple(values: Iterable[int], name: str) -> tuple[int, int, int]:
    """Coerce *values* to a 3-tuple of non-negative ints or raise ValueError."""
    result = tuple(values)
    if len(result) != NUM_LINES:
        raise ValueError(f"{name} must have exactly {NUM_LINES} entries, got {len(result)}.")
    for value in result:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} entries must be integers, got {value!r}.")
        if value < 0:
            raise ValueError(f"{name} entries must be non-negative, got {value}.")
    return result  # type: ignore[return-value]


# ─── Stone ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Stone:
    """Immutable faceting state.

    Frozen (hashable) so it can be used as a key in memoisation tables and as
    a node in the path search.

    Raises:
        ValueError: if any counter is negative, a triple does not have three
            entries, or a line has more successes than rolls.
    """

    chance: Chance = Chance.P75
    lines: tuple[int, int, int] = field(default=(0, 0, 0))
    rolls: tuple[int, int, int] = field(default=(0, 0, 0))

    def __post_init__(self) -> None:
        if not isinstance(self.chance, Chance):
            raise ValueError(f"chance must be a Chance, got {self.chance!r}.")
        lines = _triple(self.lines, "lines")
        rolls = _triple(self.rolls, "rolls")
        for line in LINES:
            if lines[line] > rolls[line]:
                raise ValueError(
                    f"Line {line} has {lines[line]} successes but only {rolls[line]} rolls."
                )
        # Normalise list inputs to tuples so equality/hashing stay structural.
        object.__setattr__(self, "lines", lines)
        object.__setattr__(self, "rolls", rolls)

    # ── Constructors ──────────────────────────────────────────────────────────

    @classmethod
    def default(cls) -> Stone:
        """Fresh stone: 75%, no rolls on any line."""
        return cls()

    @classmethod
    def from_sequence(cls, sequence: Iterable[tuple[int, bool]]) -> Stone:
        """Rebuild a state from a faceting history.

        Args:
            sequence: ``(line, succeeded)`` records in the order they happened,
                      starting from a fresh stone.

        Returns:
            The Stone reached after applying every record.

        Examples:
            >>> str(Stone.from_sequence([(0, True), (2, False)]))
            '75% | 1/1 | 0/0 | 0/1'
        """
        stone = cls.default()
        for line, succeeded in sequence:
            stone = stone.succeed(line) if succeeded else stone.fail(line)
        return stone

    # ── Transitions ───────────────────────────────────────────────────────────

    def succeed(self, line: int) -> Stone:
        """State after a successful roll on *line*."""
        check_line(line)
        lines = list(self.lines)
        rolls = list(self.rolls)
        lines[line] += 1
        rolls[line] += 1
        return Stone(self.chance.succeed(), tuple(lines), tuple(rolls))

    def fail(self, line: int) -> Stone:
        """State after a failed roll on *line*."""
        check_line(line)
        rolls = list(self.rolls)
        rolls[line] += 1
        return Stone(self.chance.fail(), self.lines, tuple(rolls))

    # ── Queries ───────────────────────────────────────────────────────────────

    @property
    def rolls_used(self) -> int:
        """Total trials consumed across all lines."""
        return sum(self.rolls)

    def __str__(self) -> str:
        parts = [str(self.chance)]
        parts.extend(f"{self.lines[line]}/{self.rolls[line]}" for line in LINES)
        return " | ".join(parts)
