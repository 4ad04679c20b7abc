"""
Shared pytest fixtures for faceting solver tests.

Provides a convenience constructor for stones and a small target whose dense
table solves in milliseconds.
"""

from __future__ import annotations

import pytest

from facet.engine.chance import Chance
from facet.engine.stone import Stone
from facet.engine.target import Target
from facet.solvers.expectimax import Expectimax

SMALL_TARGET: Target = Target((2, 2, 1), (3, 3, 3))
"""7/7/4-style target scaled down to three rolls per line."""


def stone(
    percent: int = 75,
    lines: tuple[int, int, int] = (0, 0, 0),
    rolls: tuple[int, int, int] = (0, 0, 0),
) -> Stone:
    """Build a Stone from a percentage label and two triples.

    Examples:
        >>> str(stone(55, (1, 0, 0), (2, 1, 0)))
        '55% | 1/2 | 0/1 | 0/0'
    """
    return Stone(Chance.from_percent(percent), lines, rolls)


@pytest.fixture
def small_target() -> Target:
    return SMALL_TARGET


@pytest.fixture(scope="session")
def small_engine() -> Expectimax:
    """Dense engine solved once for SMALL_TARGET."""
    return Expectimax(SMALL_TARGET)

