"""Progress heat maps for the faceting solver.

Two public data-builder functions return NumPy matrices for one "slice" of the
state space — a fixed number of rolls used per line, a fixed penalty-line
success count and a fixed chance level — indexed by the successes on the two
engraving lines:

    build_probability_data(engine, rolls, penalty, chance)  — optimal P(goal)
    build_best_line_data(engine, rolls, penalty, chance)    — line to roll next

Two public plot functions render matplotlib figures:

    plot_progress_heatmaps(prob, best, title, ...)  — 1×2 figure
    plot_stone_heatmaps(target, rolls, ...)         — convenience wrapper

Matrix convention (both builders):
    Shape  : (rolls[0] + 1, rolls[1] + 1) — rows = successes on line 0,
                                            cols = successes on line 1
    Values : probability in [0, 1], or line index 0/1/2
             np.nan = no move left (terminal slice)
"""

from __future__ import annotations

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from facet.engine.chance import Chance
from facet.engine.stone import Stone
from facet.engine.target import Target
from facet.solvers.expectimax import Expectimax

# ─── Constants ────────────────────────────────────────────────────────────────

_NAN_COLOR: str = "#cccccc"
_LINE_COLORS: list[str] = ["#1f77b4", "#2ca02c", "#d62728"]
_LINE_NAMES: list[str] = ["L0", "L1", "L2"]


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_line_cmap() -> matplotlib.colors.ListedColormap:
    """Blue=line 0, green=line 1, red=line 2, grey=no move (NaN)."""
    cmap = matplotlib.colors.ListedColormap(_LINE_COLORS)
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


def _make_continuous_cmap() -> matplotlib.colors.Colormap:
    """RdYlGn gradient: red=P(goal)=0, green=P(goal)=1."""
    cmap = matplotlib.colormaps["RdYlGn"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_LINE_CMAP: matplotlib.colors.Colormap = _make_line_cmap()
_CONTINUOUS_CMAP: matplotlib.colors.Colormap = _make_continuous_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def _slice_stones(
    rolls: tuple[int, int, int],
    penalty: int,
    chance: Chance,
):
    """Yield ``(row, col, stone)`` for every engraving-success pair of the slice."""
    for row in range(rolls[0] + 1):
        for col in range(rolls[1] + 1):
            yield row, col, Stone(chance, (row, col, penalty), rolls)


def build_probability_data(
    engine: Expectimax,
    rolls: tuple[int, int, int],
    penalty: int = 0,
    chance: Chance = Chance.P75,
) -> np.ndarray:
    """Return the optimal probability of reaching the goal across one slice.

    Args:
        engine:  Solved engine for the target of interest.
        rolls:   Rolls used per line (must fit the engine's budget).
        penalty: Successes already on line 2.
        chance:  Current chance level.

    Returns:
        float64 matrix of shape (rolls[0] + 1, rolls[1] + 1).

    Raises:
        ValueError: if *rolls* exceeds the budget or *penalty* exceeds rolls[2].
    """
    data = np.full((rolls[0] + 1, rolls[1] + 1), np.nan)
    for row, col, stone in _slice_stones(rolls, penalty, chance):
        data[row, col] = float(engine.probability(stone))
    return data


def build_best_line_data(
    engine: Expectimax,
    rolls: tuple[int, int, int],
    penalty: int = 0,
    chance: Chance = Chance.P75,
) -> np.ndarray:
    """Return the optimal next line (0, 1, 2) across one slice; NaN if terminal."""
    data = np.full((rolls[0] + 1, rolls[1] + 1), np.nan)
    for row, col, stone in _slice_stones(rolls, penalty, chance):
        line = engine.best_line(stone)
        if line is not None:
            data[row, col] = float(line)
    return data


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    lines: bool,
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage."""
    masked = np.ma.masked_invalid(data)
    if lines:
        im = ax.imshow(masked, cmap=_LINE_CMAP, vmin=-0.5, vmax=2.5, aspect="auto", origin="lower")
    else:
        im = ax.imshow(masked, cmap=_CONTINUOUS_CMAP, vmin=0.0, vmax=1.0, aspect="auto", origin="lower")

    ax.set_xticks(range(data.shape[1]))
    ax.set_yticks(range(data.shape[0]))

    # Annotations get unreadable past ~12×12.
    if data.shape[0] * data.shape[1] <= 144:
        for r in range(data.shape[0]):
            for c in range(data.shape[1]):
                val = data[r, c]
                if np.isnan(val):
                    continue
                if lines:
                    text = _LINE_NAMES[int(val)]
                    text_color = "white"
                else:
                    text = f"{val:.2f}"
                    text_color = "black" if 0.25 < val < 0.75 else "white"
                ax.text(c, r, text, ha="center", va="center", fontsize=8, color=text_color)

    return im


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_progress_heatmaps(
    probability_data: np.ndarray,
    best_line_data: np.ndarray,
    title: str,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot probability and best-line heat maps side by side.

    Args:
        probability_data: Matrix from :func:`build_probability_data`.
        best_line_data:   Matrix from :func:`build_best_line_data`.
        title:            Figure suptitle.
        show:             If True, call plt.show() after rendering.
        save_path:        If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    fig, (ax_prob, ax_line) = plt.subplots(1, 2, figsize=(11, 5))
    fig.suptitle(title, fontsize=13, fontweight="bold")

    im_prob = _render_panel(ax_prob, probability_data, lines=False)
    _render_panel(ax_line, best_line_data, lines=True)

    ax_prob.set_title("P(goal) under optimal play", fontsize=10)
    ax_line.set_title("Best line to roll next", fontsize=10)
    for ax in (ax_prob, ax_line):
        ax.set_xlabel("Successes on line 1", fontsize=9)
        ax.set_ylabel("Successes on line 0", fontsize=9)

    plt.colorbar(im_prob, ax=ax_prob, label="P(goal)", fraction=0.046, pad=0.04)
    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


def plot_stone_heatmaps(
    target: Target,
    rolls: tuple[int, int, int],
    penalty: int = 0,
    chance: Chance = Chance.P75,
    *,
    engine: Expectimax | None = None,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Convenience: solve *target* (unless *engine* is given) and plot one slice."""
    engine = Expectimax(target) if engine is None else engine
    prob = build_probability_data(engine, rolls, penalty, chance)
    best = build_best_line_data(engine, rolls, penalty, chance)
    title = (
        f"Target {target}  |  rolls {rolls[0]}/{rolls[1]}/{rolls[2]}, "
        f"penalty {penalty}, chance {chance}"
    )
    return plot_progress_heatmaps(prob, best, title, show=show, save_path=save_path)


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from facet.engine.target import DEFAULT_TARGET

    print(f"Solving {DEFAULT_TARGET} …")
    plot_stone_heatmaps(DEFAULT_TARGET, (5, 5, 5), penalty=2, show=False, save_path="progress_5_5_5.png")
    print("Saved: progress_5_5_5.png")
