"""
Monte Carlo simulator for faceting strategy validation.

Plays whole stones roll by roll with a NumPy random generator, letting a
policy pick the line each time, and counts how often the final stone meets the
target.  With the optimal policy from the dense solver the observed success
rate should fall within its 95% confidence interval of the exact probability
most of the time; a naive fixed-order policy should do measurably worse on
targets where the line order matters.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from fractions import Fraction

import numpy as np

from facet.engine.chance import SCALE
from facet.engine.stone import LINES, Stone
from facet.engine.target import DEFAULT_TARGET, Target
from facet.solvers.expectimax import Expectimax

# policy(stone) -> line to roll next (only called on non-terminal stones)
Policy = Callable[[Stone], int]


# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo run.

    Attributes:
        n_stones:     Number of stones simulated.
        n_successes:  Stones that ended on a goal state.
        success_rate: n_successes / n_stones.
        std:          Sample standard deviation of the per-stone 0/1 outcome.
        ci_95_low:    Lower bound of the 95% confidence interval.
        ci_95_high:   Upper bound of the 95% confidence interval.
        exact:        Exact optimal probability from the solver, if known.
        outcomes:     Raw per-stone outcome array (bool), or None if
                      simulate_stones() was called with return_outcomes=False.
    """

    n_stones: int
    n_successes: int
    success_rate: float
    std: float
    ci_95_low: float
    ci_95_high: float
    exact: Fraction | None = None
    outcomes: np.ndarray | None = None

    def __str__(self) -> str:
        text = (
            f"Stones: {self.n_stones:,} | "
            f"Success: {self.success_rate:.4f} ({self.success_rate * 100:.2f}%) | "
            f"95% CI: [{self.ci_95_low:.4f}, {self.ci_95_high:.4f}]"
        )
        if self.exact is not None:
            text += f" | Exact: {float(self.exact):.4f}"
        return text


# ─── Policies ─────────────────────────────────────────────────────────────────


def make_optimal_policy(engine: Expectimax) -> Policy:
    """Return a policy that rolls the solver's best line in every state.

    Decisions are cached per state for the lifetime of the policy.
    """
    cache: dict[Stone, int] = {}

    def _policy(stone: Stone) -> int:
        line = cache.get(stone)
        if line is None:
            line = engine.best_line(stone)
            if line is None:
                raise ValueError(f"Policy asked for a move on terminal stone {stone}.")
            cache[stone] = line
        return line

    return _policy


def make_fixed_order_policy(target: Target, order: tuple[int, ...] = LINES) -> Policy:
    """Return a baseline policy: finish each line in *order* before the next."""

    def _policy(stone: Stone) -> int:
        for line in order:
            if target.can_roll(stone, line):
                return line
        raise ValueError(f"Policy asked for a move on terminal stone {stone}.")

    return _policy


# ─── Core simulation loop ─────────────────────────────────────────────────────


def play_stone(
    start: Stone,
    target: Target,
    policy: Policy,
    rng: np.random.Generator,
) -> Stone:
    """Play *start* to the end of its budget and return the terminal stone."""
    stone = target.validate(start)
    while not target.is_terminal(stone):
        line = policy(stone)
        on_success, on_failure = target.roll(stone, line)
        succeeded = rng.random() < stone.chance.success() / SCALE
        stone = on_success if succeeded else on_failure
    return stone


def simulate_stones(
    target: Target = DEFAULT_TARGET,
    start: Stone | None = None,
    policy: Policy | None = None,
    n_stones: int = 10_000,
    seed: int | None = 42,
    return_outcomes: bool = False,
) -> SimulationResult:
    """Simulate *n_stones* faceting sessions and return aggregate statistics.

    Args:
        target:          Thresholds and budgets.
        start:           Initial state of every session; defaults to a fresh stone.
        policy:          Line-choice callable.  None builds the optimal policy
                         from a dense solve and also reports the exact value.
        n_stones:        Number of sessions (at least 2).
        seed:            Seed for ``np.random.default_rng``; None for a
                         non-deterministic run.
        return_outcomes: If True, attach the per-stone outcome array.

    Returns:
        SimulationResult for the run.
    """
    if n_stones < 2:
        raise ValueError(f"n_stones must be at least 2, got {n_stones}.")

    start = Stone.default() if start is None else start
    exact: Fraction | None = None
    if policy is None:
        engine = Expectimax(target)
        policy = make_optimal_policy(engine)
        exact = engine.probability(target.validate(start))

    rng = np.random.default_rng(seed)
    outcomes = np.empty(n_stones, dtype=bool)
    for i in range(n_stones):
        final = play_stone(start, target, policy, rng)
        outcomes[i] = target.is_satisfied(final)

    n_successes = int(outcomes.sum())
    rate = n_successes / n_stones
    std = float(np.std(outcomes.astype(np.float64), ddof=1))
    ci_margin = 1.96 * std / math.sqrt(n_stones)

    return SimulationResult(
        n_stones=n_stones,
        n_successes=n_successes,
        success_rate=rate,
        std=std,
        ci_95_low=rate - ci_margin,
        ci_95_high=rate + ci_margin,
        exact=exact,
        outcomes=outcomes if return_outcomes else None,
    )


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print(f"Faceting Monte Carlo Validation — target {DEFAULT_TARGET}\n")
    optimal = simulate_stones(n_stones=20_000)
    print(f"optimal:     {optimal}")
    naive = simulate_stones(policy=make_fixed_order_policy(DEFAULT_TARGET), n_stones=20_000)
    print(f"fixed order: {naive}")
