"""Text reports for the faceting solvers.

    format_probabilities(stone, target, numerators, denominator, precision)
        — one line per candidate first move, best move marked
    print_probabilities(stone, target, precision)
        — solve with the dense engine and print the table above
    format_path(path) / print_path(path)
        — the most probable path, one state per line, plus its probability
"""

from __future__ import annotations

from facet.engine.exact import to_decimal
from facet.engine.stone import LINES, Stone
from facet.engine.target import DEFAULT_TARGET, Target
from facet.solvers.expectimax import expectimax
from facet.solvers.path_search import path_moves, path_probability

_LINE_LABELS: tuple[str, ...] = ("Engraving 1", "Engraving 2", "Penalty    ")


def format_probabilities(
    stone: Stone,
    target: Target,
    numerators: tuple[int, int, int],
    denominator: int,
    precision: int = 6,
) -> list[str]:
    """Render solver output as report lines.

    Lines with no budget left are shown as ``spent``; the move with the
    highest numerator (lowest index on ties) is marked ``<- best``.
    """
    open_lines = [line for line in LINES if target.can_roll(stone, line)]
    best = max(open_lines, key=lambda line: (numerators[line], -line)) if open_lines else None

    out = [
        f"State:  {stone}",
        f"Target: {target}",
    ]
    for line in LINES:
        label = _LINE_LABELS[line]
        if line not in open_lines:
            out.append(f"  {label}  spent")
            continue
        value = to_decimal(numerators[line], denominator, precision)
        marker = "  <- best" if line == best else ""
        out.append(f"  {label}  {value}{marker}")
    if best is None:
        out.append("  No rolls left.")
    return out


def print_probabilities(
    stone: Stone,
    target: Target = DEFAULT_TARGET,
    precision: int = 6,
) -> None:
    """Solve *stone* against *target* and print the first-move table."""
    numerators, denominator = expectimax(stone, target)
    for row in format_probabilities(stone, target, numerators, denominator, precision):
        print(row)


def format_path(path: list[Stone]) -> list[str]:
    """Render a path as numbered states with the roll that led to each."""
    out = [f"  0. {path[0]}"]
    for step, (state, (line, succeeded)) in enumerate(zip(path[1:], path_moves(path)), start=1):
        outcome = "success" if succeeded else "fail"
        out.append(f"{step:>3}. {state}   (line {line} {outcome})")
    probability = path_probability(path)
    out.append(f"Path probability: {float(probability):.6e}  ({probability})")
    return out


def print_path(path: list[Stone] | None) -> None:
    if path is None:
        print("No solution: the target cannot be reached from this state.")
        return
    for row in format_path(path):
        print(row)
