"""
Success-rate ladder for ability-stone faceting.

Six discrete levels, labelled by percentage and indexed 0–5:

    P25=0  P35=1  P45=2  P55=3  P65=4  P75=5

A success moves the level one step toward 25% (floor at 25%); a failure moves
it one step toward 75% (ceiling at 75%).  Every faceting session starts at 75%.

Weights are scaled by SCALE=20 so that a single trial is expressed in small
integers (5, 7, … 15) and exact probabilities can be carried as integers.
"""

from __future__ import annotations

from enum import IntEnum

# ─── Constants ────────────────────────────────────────────────────────────────

SCALE: int = 20
"""Per-trial scale factor: success weight + failure weight == SCALE."""

_SUCCESS_WEIGHTS: tuple[int, ...] = (5, 7, 9, 11, 13, 15)
"""Success weight (percent / 5) by ladder index."""


# ─── Chance ───────────────────────────────────────────────────────────────────


class Chance(IntEnum):
    """One rung of the success-rate ladder.  The value is the ladder index."""

    P25 = 0
    P35 = 1
    P45 = 2
    P55 = 3
    P65 = 4
    P75 = 5

    @classmethod
    def from_percent(cls, percent: int) -> Chance:
        """Return the level labelled *percent*.

        Raises:
            ValueError: if *percent* is not one of 25, 35, 45, 55, 65, 75.

        Examples:
            >>> Chance.from_percent(75)
            <Chance.P75: 5>
            >>> Chance.from_percent(30)
            Traceback (most recent call last):
            ...
            ValueError: Invalid chance level 30%; expected one of 25, 35, 45, 55, 65, 75.
        """
        if isinstance(percent, bool) or not isinstance(percent, int) or percent not in _PERCENTS:
            raise ValueError(
                f"Invalid chance level {percent}%; expected one of "
                f"{', '.join(str(p) for p in _PERCENTS)}."
            )
        return cls(_PERCENTS.index(percent))

    @classmethod
    def default(cls) -> Chance:
        """Level at the start of every faceting session (75%)."""
        return cls.P75

    @property
    def percent(self) -> int:
        """Percentage label of this level (25 … 75)."""
        return _PERCENTS[self]

    def succeed(self) -> Chance:
        """Level after a successful trial (one step toward 25%)."""
        return Chance(max(self - 1, Chance.P25))

    def fail(self) -> Chance:
        """Level after a failed trial (one step toward 75%)."""
        return Chance(min(self + 1, Chance.P75))

    def success(self) -> int:
        """Probability of success, multiplied by SCALE."""
        return _SUCCESS_WEIGHTS[self]

    def failure(self) -> int:
        """Probability of failure, multiplied by SCALE."""
        return SCALE - _SUCCESS_WEIGHTS[self]

    def __str__(self) -> str:
        return f"{self.percent}%"

    # IntEnum formats as the bare int otherwise ("5" instead of "75%").
    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


_PERCENTS: tuple[int, ...] = (25, 35, 45, 55, 65, 75)
"""Percentage labels by ladder index."""
