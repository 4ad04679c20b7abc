"""
Tests for facet/solvers/expectimax.py and facet/solvers/memo_expectimax.py.

Covers:
    - Hand-computed values for one- and two-roll targets
    - Every state of a small target: bounds, terminal values, index bijection
    - Dense table agrees with the recursive dictionary-memo solver
    - Monotonicity in the engraving-line budgets
    - Error contract: over-budget stones, 192-bit overflow, unfilled cells
    - Canonical 7/7/4 target (marked slow)
"""

from __future__ import annotations

from fractions import Fraction

import pytest

from facet.engine.chance import Chance
from facet.engine.exact import to_decimal
from facet.engine.stone import Stone
from facet.engine.target import DEFAULT_TARGET, Target
from facet.solvers.expectimax import (
    Expectimax,
    expectimax,
    expectimax_decimal,
    expectimax_floats,
)
from facet.solvers.memo_expectimax import _optimal_value, expectimax_memo
from tests.conftest import SMALL_TARGET, stone

ONE_ROLL = Target((1, 0, 1), (1, 0, 0))
TWO_ROLLS = Target((1, 0, 0), (1, 0, 1))


def all_stones(target: Target):
    """Every valid stone inside *target*'s budget."""
    budget0, budget1, budget2 = target.rolls
    for chance in Chance:
        for roll0 in range(budget0 + 1):
            for roll1 in range(budget1 + 1):
                for roll2 in range(budget2 + 1):
                    for line0 in range(roll0 + 1):
                        for line1 in range(roll1 + 1):
                            for line2 in range(roll2 + 1):
                                yield Stone(chance, (line0, line1, line2), (roll0, roll1, roll2))


# ─── Hand-computed values ─────────────────────────────────────────────────────


class TestHandComputed:
    def test_single_roll(self):
        # Only line 0 has budget; it must succeed at 75%.
        assert expectimax(Stone.default(), ONE_ROLL) == ((15, 0, 0), 20)

    def test_single_roll_decimal(self):
        assert expectimax_decimal(Stone.default(), ONE_ROLL) == ("0.750000", "0.000000", "0.000000")
        assert expectimax_floats(Stone.default(), ONE_ROLL) == (0.75, 0.0, 0.0)

    def test_order_matters(self):
        # Line 0 must succeed and line 2 must fail.
        # Line 0 first: 15/20 then 7/20 at 65%  → 105/400.
        # Line 2 first: 5/20 then 15/20 at 75%  → 75/400.
        assert expectimax(Stone.default(), TWO_ROLLS) == ((105, 0, 75), 400)

    def test_order_matters_best_line(self):
        assert Expectimax(TWO_ROLLS).best_line(Stone.default()) == 0

    def test_everything_satisfies(self):
        target = Target((0, 0, 3), (1, 1, 1))
        assert expectimax(Stone.default(), target) == ((8000, 8000, 8000), 8000)

    def test_probability_is_reduced_fraction(self):
        assert Expectimax(TWO_ROLLS).probability(Stone.default()) == Fraction(21, 80)

    def test_floats_truncate(self):
        assert expectimax_floats(Stone.default(), TWO_ROLLS, precision=2) == (0.26, 0.0, 0.18)

    def test_denominator_is_twenty_to_remaining(self):
        s = stone(55, (1, 0, 0), (1, 2, 0))
        _, den = expectimax(s, SMALL_TARGET)
        assert den == 20 ** (9 - 3)


# ─── Whole small target ───────────────────────────────────────────────────────


class TestSmallTarget:
    def test_index_is_bijective(self, small_engine):
        indices = [small_engine.index(s) for s in all_stones(SMALL_TARGET)]
        assert len(indices) == len(small_engine.table)
        assert sorted(indices) == list(range(len(small_engine.table)))

    def test_table_fully_filled(self, small_engine):
        assert all(cell is not None for cell in small_engine.table)

    def test_bounds(self, small_engine):
        for s in all_stones(SMALL_TARGET):
            numerators, den = small_engine.evaluate(s)
            for n in numerators:
                assert 0 <= n <= den

    def test_terminal_states_are_zero_or_one(self, small_engine):
        for s in all_stones(SMALL_TARGET):
            if SMALL_TARGET.is_terminal(s):
                expected = 1 if SMALL_TARGET.is_satisfied(s) else 0
                assert small_engine.probability(s) == expected

    def test_value_is_best_choice(self, small_engine):
        for s in all_stones(SMALL_TARGET):
            if SMALL_TARGET.is_terminal(s):
                continue
            numerators, _ = small_engine.evaluate(s)
            assert small_engine.value(s) == max(numerators)

    def test_spent_line_scores_zero(self, small_engine):
        s = stone(75, (2, 0, 0), (3, 0, 0))
        numerators, _ = small_engine.evaluate(s)
        assert numerators[0] == 0
        assert numerators[1] > 0

    def test_terminal_start(self, small_engine):
        done = stone(35, (2, 2, 0), (3, 3, 3))
        assert small_engine.evaluate(done) == ((0, 0, 0), 1)
        assert expectimax(done, SMALL_TARGET) == ((0, 0, 0), 1)
        assert expectimax_memo(done, SMALL_TARGET) == ((0, 0, 0), 1)
        assert small_engine.best_line(done) is None

    def test_idempotent(self):
        first = expectimax(Stone.default(), SMALL_TARGET)
        second = expectimax(Stone.default(), SMALL_TARGET)
        assert first == second

    def test_best_line_matches_evaluate(self, small_engine):
        for s in all_stones(SMALL_TARGET):
            if SMALL_TARGET.is_terminal(s):
                continue
            numerators, _ = small_engine.evaluate(s)
            best = small_engine.best_line(s)
            assert numerators[best] == max(numerators)
            assert SMALL_TARGET.can_roll(s, best)


# ─── Dense vs recursive ───────────────────────────────────────────────────────


class TestAgainstMemo:
    def test_every_state_agrees(self, small_engine):
        memo: dict[Stone, int] = {}
        for s in all_stones(SMALL_TARGET):
            assert small_engine.value(s) == _optimal_value(s, SMALL_TARGET, memo)

    @pytest.mark.parametrize(
        "start",
        [
            Stone.default(),
            stone(25, (1, 0, 0), (2, 0, 0)),
            stone(45, (0, 1, 1), (1, 1, 2)),
            stone(65, (2, 2, 1), (2, 2, 2)),
        ],
    )
    def test_first_moves_agree(self, start):
        assert expectimax(start, SMALL_TARGET) == expectimax_memo(start, SMALL_TARGET)

    def test_asymmetric_budget(self):
        target = Target((3, 1, 2), (4, 2, 5))
        for start in (Stone.default(), stone(55, (1, 0, 1), (2, 1, 1))):
            assert expectimax(start, target) == expectimax_memo(start, target)


# ─── Monotonicity ─────────────────────────────────────────────────────────────


class TestMonotonicity:
    @pytest.mark.parametrize("line", [0, 1])
    def test_more_engraving_budget_never_hurts(self, line):
        rolls = list(SMALL_TARGET.rolls)
        rolls[line] += 1
        bigger = Target(SMALL_TARGET.lines, tuple(rolls))

        small_nums, small_den = expectimax(Stone.default(), SMALL_TARGET)
        big_nums, big_den = expectimax(Stone.default(), bigger)
        for before, after in zip(small_nums, big_nums):
            assert Fraction(after, big_den) >= Fraction(before, small_den)

    def test_extra_penalty_budget_is_forced(self):
        # Every budgeted roll must be taken, so an extra penalty roll is a risk.
        free = expectimax(Stone.default(), Target((0, 0, 0), (1, 0, 0)))
        risky = expectimax(Stone.default(), Target((0, 0, 0), (1, 0, 1)))
        assert Fraction(free[0][0], free[1]) == 1
        assert Fraction(risky[0][0], risky[1]) < 1


# ─── Error contract ───────────────────────────────────────────────────────────


class TestErrors:
    def test_over_budget_stone(self):
        with pytest.raises(ValueError, match="over its budget"):
            expectimax(stone(75, (0, 0, 0), (4, 0, 0)), SMALL_TARGET)
        with pytest.raises(ValueError):
            expectimax_memo(stone(75, (0, 0, 0), (4, 0, 0)), SMALL_TARGET)

    def test_over_budget_stone_on_engine(self, small_engine):
        with pytest.raises(ValueError):
            small_engine.evaluate(stone(75, (0, 0, 0), (0, 0, 4)))

    def test_overflow_before_allocation(self):
        too_deep = Target((7, 7, 4), (15, 15, 15))
        with pytest.raises(OverflowError):
            Expectimax(too_deep)
        with pytest.raises(OverflowError):
            expectimax(Stone.default(), too_deep)

    def test_unfilled_cell(self):
        engine = Expectimax(ONE_ROLL)
        engine.table[engine.index(Stone.default())] = None
        with pytest.raises(RuntimeError, match="before it was filled"):
            engine.value(Stone.default())

    def test_unfilled_dependency_during_fill(self):
        class SkipsTerminalLayer(Expectimax):
            def _compute_terminal(self) -> None:
                pass

        with pytest.raises(RuntimeError, match="Dependency of memo cell"):
            SkipsTerminalLayer(ONE_ROLL)

    def test_invalid_line_in_select(self, small_engine):
        with pytest.raises(ValueError):
            small_engine.select(Stone.default(), 3)


# ─── Canonical target ─────────────────────────────────────────────────────────


@pytest.fixture(scope="module")
def canonical_engine() -> Expectimax:
    return Expectimax(DEFAULT_TARGET)


@pytest.mark.slow
class TestCanonical:
    def test_table_size(self, canonical_engine):
        assert len(canonical_engine.table) == 6 * 66**3

    def test_fresh_stone_bounds(self, canonical_engine):
        numerators, den = canonical_engine.evaluate(Stone.default())
        assert den == 20**30
        assert all(0 < n < den for n in numerators)

    def test_fresh_stone_agrees_with_memo(self, canonical_engine):
        fresh = Stone.default()
        assert canonical_engine.evaluate(fresh) == expectimax_memo(fresh, DEFAULT_TARGET)

    def test_fresh_stone_known_value(self, canonical_engine):
        numerators, den = canonical_engine.evaluate(Stone.default())
        assert to_decimal(max(numerators), den, 6) == "0.048144"

    @pytest.mark.parametrize(
        "start",
        [
            stone(55, (5, 4, 2), (7, 6, 5)),
            stone(25, (6, 6, 4), (8, 9, 7)),
            stone(75, (3, 3, 0), (4, 5, 3)),
        ],
    )
    def test_mid_game_agrees_with_memo(self, canonical_engine, start):
        assert canonical_engine.evaluate(start) == expectimax_memo(start, DEFAULT_TARGET)

    def test_decimal_output(self, canonical_engine):
        numerators, den = canonical_engine.evaluate(Stone.default())
        decimals = expectimax_decimal(Stone.default())
        for n, text in zip(numerators, decimals):
            assert text.startswith("0.")
            assert len(text) == 8
            assert int(text[2:]) == n * 10**6 // den
