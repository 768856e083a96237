"""
Chart rendering on matplotlib (Agg) and GIF assembly with Pillow.

render()  : tidy table -> one matplotlib Figure (polar bars or lines)
animate() : frame callback -> GIF file
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from PIL import Image

from config import FIGURE_SIZE, FIGURE_DPI, FONT_FAMILY
from utils.io_utils import ensure_dir

CHART_KINDS = ("polar", "line")


@dataclass
class StyleConfig:
    """Presentation settings for one family of charts."""
    palette: Union[dict, Sequence[str]]
    title_template: str = ""
    kind: str = "polar"
    ylim: Optional[Tuple[float, float]] = None
    dimensions: Tuple[float, float] = FIGURE_SIZE
    dpi: int = FIGURE_DPI
    font_family: str = FONT_FAMILY
    xlabel: str = ""
    ylabel: str = ""

    def color_for(self, key, i: int) -> str:
        if isinstance(self.palette, dict):
            if key in self.palette:
                return self.palette[key]
            colors = list(self.palette.values())
        else:
            colors = list(self.palette)
        return colors[i % len(colors)] if colors else "grey"


def _levels(series: pd.Series, observed_only: bool) -> list:
    """Distinct values, following categorical order when there is one."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        cats = list(series.cat.categories)
        if observed_only:
            present = set(series.dropna().unique())
            return [c for c in cats if c in present]
        return cats
    return sorted(series.dropna().unique().tolist())


def _group_colors(table, group, color, groups, style):
    colors = {}
    for i, g in enumerate(groups):
        sub = table.loc[table[group] == g, color]
        key = sub.iloc[0] if len(sub) else g
        colors[g] = style.color_for(key, i)
    return colors


def _draw_polar(fig, table, x, y, group, color, style):
    ax = fig.add_subplot(111, projection="polar")
    x_levels = _levels(table[x], observed_only=False)
    groups = _levels(table[group], observed_only=True)
    colors = _group_colors(table, group, color, groups, style)

    n_x = max(len(x_levels), 1)
    sector = 2 * np.pi / n_x
    theta = np.arange(n_x) * sector
    width = sector * 0.9 / max(len(groups), 1)

    for j, g in enumerate(groups):
        sub = table[table[group] == g].set_index(x)[y]
        heights = sub.groupby(level=0, observed=True).mean().reindex(x_levels).fillna(0).to_numpy(dtype=float)
        ax.bar(theta + j * width, heights, width=width, align="edge",
               color=colors[g], edgecolor="white", linewidth=0.5, label=str(g))

    ax.set_xticks(theta + sector * 0.45)
    ax.set_xticklabels([str(v) for v in x_levels])
    ax.set_theta_zero_location("N")
    ax.set_theta_direction(-1)
    if style.ylim is not None:
        ax.set_ylim(*style.ylim)
    if groups:
        ax.legend(loc="upper right", bbox_to_anchor=(1.25, 1.1), fontsize="small", frameon=False)
    return ax


def _draw_lines(fig, table, x, y, group, color, style):
    ax = fig.add_subplot(111)
    groups = _levels(table[group], observed_only=True)
    colors = _group_colors(table, group, color, groups, style)

    for g in groups:
        sub = table[table[group] == g].sort_values(x)
        ax.plot(sub[x], sub[y], marker="o", linewidth=1.2, color=colors[g], label=str(g))

    if style.ylim is not None:
        ax.set_ylim(*style.ylim)
    ax.set_xlabel(style.xlabel or x)
    ax.set_ylabel(style.ylabel or y)
    ax.grid(True, linewidth=0.3, alpha=0.5)
    if groups:
        ax.legend(fontsize="small", frameon=False, ncol=2)
    fig.autofmt_xdate()
    return ax


def render(
    table: pd.DataFrame,
    x: str,
    y: str,
    group: str,
    color: str,
    style: StyleConfig,
    title_fields: Optional[dict] = None,
):
    """Draw `table` as one figure. The caller owns (and closes) the figure."""
    if style.kind not in CHART_KINDS:
        raise ValueError(f"Unknown chart kind '{style.kind}'; expected one of {CHART_KINDS}")
    missing = [c for c in (x, y, group, color) if c not in table.columns]
    if missing:
        raise KeyError(f"Columns {missing} not in table to render")

    with plt.rc_context({"font.family": style.font_family}):
        fig = plt.figure(figsize=style.dimensions, dpi=style.dpi)
        if style.kind == "polar":
            _draw_polar(fig, table, x, y, group, color, style)
        else:
            _draw_lines(fig, table, x, y, group, color, style)
        if style.title_template:
            fig.suptitle(style.title_template.format(**(title_fields or {})))
    return fig


def figure_to_image(fig) -> Image.Image:
    fig.canvas.draw()
    return Image.fromarray(np.asarray(fig.canvas.buffer_rgba()).copy()).convert("RGBA")


def animate(
    renderable: Callable[[int], "plt.Figure"],
    frame_count: int,
    frame_rate: float,
    dimensions: Tuple[float, float],
    end_pause: float,
    loop: bool,
    path: str,
) -> str:
    """
    Rasterise `renderable(0..frame_count-1)` and write them as a GIF.

    The last frame is held for an extra `end_pause` seconds. With `loop`
    the GIF repeats forever, otherwise it plays once.
    """
    if frame_count < 1:
        raise ValueError("animate() needs at least one frame")

    frames = []
    for i in range(frame_count):
        fig = renderable(i)
        try:
            fig.set_size_inches(*dimensions)
            frames.append(figure_to_image(fig))
        finally:
            plt.close(fig)

    frame_ms = int(round(1000 / frame_rate))
    durations = [frame_ms] * len(frames)
    durations[-1] += int(round(end_pause * 1000))

    # Adaptive palette keeps GIF colours close to the RGBA render
    frames_p = [f.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE) for f in frames]

    ensure_dir(path)
    save_kwargs = dict(save_all=True, append_images=frames_p[1:], duration=durations, optimize=False)
    if loop:
        save_kwargs["loop"] = 0
    frames_p[0].save(path, **save_kwargs)
    return path


def save_figure(fig, path: str) -> str:
    ensure_dir(path)
    try:
        fig.savefig(path, dpi=fig.dpi, bbox_inches="tight")
    finally:
        plt.close(fig)
    return path
