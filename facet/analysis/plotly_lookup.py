"""Plotly lookup figures for the faceting solver.

Two public functions:

    build_lookup_figure(engine, rolls, penalty, chance)
        — heatmap of P(goal) over one slice of the state space; hovering a
          cell shows the state, the probability of each first move and the
          best line.
    save_lookup_html(fig, path)
        — export a figure to a self-contained HTML file.

Figures are in-memory Plotly objects; nothing here serves or listens.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from facet.analysis.heat_maps import build_best_line_data, build_probability_data
from facet.engine.chance import Chance
from facet.engine.exact import to_decimal
from facet.engine.stone import LINES, Stone
from facet.solvers.expectimax import Expectimax

# ─── Constants ────────────────────────────────────────────────────────────────

_COLORSCALE: str = "RdYlGn"


# ─── Hover text builder ───────────────────────────────────────────────────────


def _build_hover(
    engine: Expectimax,
    rolls: tuple[int, int, int],
    penalty: int,
    chance: Chance,
    best_line: np.ndarray,
) -> list[list[str]]:
    """Return a hover-string grid matching the slice matrices.

    Each cell shows the rendered state, the probability of every line that
    can still roll and the best line.
    """
    rows: list[list[str]] = []
    for r in range(rolls[0] + 1):
        row: list[str] = []
        for c in range(rolls[1] + 1):
            stone = Stone(chance, (r, c, penalty), rolls)
            numerators, denominator = engine.evaluate(stone)
            parts = [f"State: <b>{stone}</b>"]
            for line in LINES:
                if engine.target.can_roll(stone, line):
                    parts.append(f"Line {line}: {to_decimal(numerators[line], denominator, 4)}")
            if np.isnan(best_line[r, c]):
                parts.append("No rolls left")
            else:
                parts.append(f"Best: <b>line {int(best_line[r, c])}</b>")
            row.append("<br>".join(parts))
        rows.append(row)
    return rows


# ─── Public figure builders ───────────────────────────────────────────────────


def build_lookup_figure(
    engine: Expectimax,
    rolls: tuple[int, int, int],
    penalty: int = 0,
    chance: Chance = Chance.P75,
) -> go.Figure:
    """Build a Plotly heatmap of P(goal) across one slice of the state space.

    Args:
        engine:  Solved engine for the target of interest.
        rolls:   Rolls used per line.
        penalty: Successes already on line 2.
        chance:  Current chance level.

    Returns:
        go.Figure with one heatmap trace; rows = successes on line 0,
        cols = successes on line 1.
    """
    prob = build_probability_data(engine, rolls, penalty, chance)
    best = build_best_line_data(engine, rolls, penalty, chance)
    hover = _build_hover(engine, rolls, penalty, chance, best)

    fig = go.Figure(
        go.Heatmap(
            z=prob.tolist(),
            x=[str(c) for c in range(rolls[1] + 1)],
            y=[str(r) for r in range(rolls[0] + 1)],
            colorscale=_COLORSCALE,
            zmin=0.0,
            zmax=1.0,
            text=hover,
            hovertemplate="%{text}<extra></extra>",
            colorbar={"title": "P(goal)"},
            name="P(goal)",
        )
    )
    fig.update_layout(
        title_text=(
            f"Faceting Lookup — target {engine.target} — "
            f"rolls {rolls[0]}/{rolls[1]}/{rolls[2]}, penalty {penalty}, chance {chance}"
        ),
        title_font_size=14,
        height=520,
        width=640,
    )
    fig.update_xaxes(title_text="Successes on line 1")
    fig.update_yaxes(title_text="Successes on line 0")
    return fig


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from facet.engine.target import DEFAULT_TARGET

    print(f"Solving {DEFAULT_TARGET} …")
    figure = build_lookup_figure(Expectimax(DEFAULT_TARGET), (5, 5, 5), penalty=2)
    save_lookup_html(figure, "faceting_lookup.html")
    print("Saved: faceting_lookup.html")
