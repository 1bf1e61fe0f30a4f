"""Render age-length keys as bar, area, line, spline and bubble plots.

All renderers receive a key that has already passed
:func:`fishstats.alk.check_alk` and draw onto a single matplotlib axis.
"""

from __future__ import annotations

import logging
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from statsmodels.nonparametric.smoothers_lowess import lowess

from ..alk.key import adjust_key_for_xlim, bubble_table, check_alk, find_ages_and_lens
from .style import (
    BUBBLE_EDGE_COLOR,
    DEFAULT_BUBBLE_COLOR,
    DEFAULT_GRID_COLOR,
    FONT_SIZES,
    PALETTES,
    STYLE,
    apply_rcparams,
    choose_colors,
    clean_axis,
    label_text_colors,
    save_figure_bundle,
    set_axis_labels,
)

logger = logging.getLogger(__name__)

ALK_PLOT_TYPES: tuple[str, ...] = ("barplot", "area", "lines", "splines", "bubble")
SPLINE_GRID_STEP = 0.1


def _fmt_age(age: float) -> str:
    return f"{age:g}"


def _add_legend(ax: Axes, ages: np.ndarray, colors: Sequence[str], leg_scale: float) -> Axes:
    """Draw a one-row colour strip above ``ax`` labelled with the age range."""
    strip = ax.inset_axes([0.0, 1.03, 1.0, 0.06])
    n = len(colors)
    strip.barh(0, np.ones(n), left=np.arange(n), height=1.0, color=colors, edgecolor="black", linewidth=0.5)
    strip.set_xlim(0, n)
    strip.set_ylim(-0.5, 0.5)
    strip.axis("off")
    size = FONT_SIZES["legend"] * leg_scale
    strip.text(0.5, 0, _fmt_age(ages.min()), color="white", ha="center", va="center", fontsize=size)
    strip.text(n - 0.5, 0, _fmt_age(ages.max()), color="black", ha="center", va="center", fontsize=size)
    return strip


def _label_maxima(ax: Axes, x: np.ndarray, curves: Sequence[np.ndarray], ages: np.ndarray, size: float) -> None:
    """Write each age at the first maximum of its curve."""
    for curve, age in zip(curves, ages):
        if not np.any(np.isfinite(curve)):
            continue
        idx = int(np.nanargmax(curve))
        ax.text(x[idx], curve[idx], _fmt_age(age), ha="center", va="center", fontsize=size)


def _plot_bar(ax, key, xlim, ylim, lbl_size, pal, show_legend):
    key = adjust_key_for_xlim(key, xlim)
    alsum = find_ages_and_lens(key)
    colors = choose_colors(pal, alsum.num_ages)
    values = key.to_numpy(dtype=float)
    filled = np.nan_to_num(values, nan=0.0)
    pos = np.arange(alsum.num_lens) + 0.5
    bottom = np.zeros(alsum.num_lens)
    for j in range(alsum.num_ages):
        ax.bar(pos, filled[:, j], width=1.0, bottom=bottom, color=colors[j], edgecolor="black", linewidth=0.5)
        bottom = bottom + filled[:, j]
    ax.set_xlim(0, alsum.num_lens)
    ax.set_xticks(pos)
    ax.set_xticklabels([f"{v:g}" for v in alsum.lens])
    if ylim is not None:
        ax.set_ylim(*ylim)

    if show_legend:
        return alsum.ages, colors
    text_colors = label_text_colors(colors)
    for i in range(alsum.num_lens):
        if np.all(np.isnan(values[i])):
            continue
        prv = 0.0
        for j in range(alsum.num_ages):
            if prv >= 1:
                break
            val = filled[i, j]
            if val > 0:
                ax.text(pos[i], prv + val / 2, _fmt_age(alsum.ages[j]), color=text_colors[j],
                        ha="center", va="center", fontsize=lbl_size)
            prv += val
    return alsum.ages, colors


def _plot_area(ax, key, xlim, ylim, pal):
    key = key.copy()
    key.loc[key.isna().any(axis=1)] = 0.0
    key = adjust_key_for_xlim(key, xlim)
    alsum = find_ages_and_lens(key)
    colors = choose_colors(pal, alsum.num_ages)
    pos = np.arange(1, alsum.num_lens + 1)
    ax.stackplot(pos, key.to_numpy(dtype=float).T, colors=colors, edgecolor="black", linewidth=0.5)
    ax.set_xticks(pos)
    ax.set_xticklabels([f"{v:g}" for v in alsum.lens])
    ax.set_xlim(pos.min(), pos.max())
    if ylim is not None:
        ax.set_ylim(*ylim)
    return alsum.ages, colors


def _plot_lines(ax, key, alsum, colors, lwd, xlim, ylim) -> list[np.ndarray]:
    curves = []
    for j in range(alsum.num_ages):
        y = key.iloc[:, j].to_numpy(dtype=float)
        ax.plot(alsum.lens, y, color=colors[j], linewidth=lwd)
        curves.append(y)
    ax.set_xlim(*(xlim if xlim is not None else (alsum.lens.min(), alsum.lens.max())))
    ax.set_ylim(*(ylim if ylim is not None else (0, 1)))
    return curves


def _smooth_age(lens: np.ndarray, props: np.ndarray, grid: np.ndarray, span: float) -> np.ndarray:
    """Lowess-smooth one age's proportions and evaluate them on ``grid``."""
    ok = np.isfinite(props)
    if ok.sum() < 2:
        return np.full(grid.shape, np.nan)
    fitted = lowess(props[ok], lens[ok], frac=span, return_sorted=False)
    return np.interp(grid, lens[ok], fitted)


def _plot_splines(ax, key, alsum, colors, lwd, span, xlim, ylim) -> tuple[np.ndarray, list[np.ndarray]]:
    grid = np.arange(alsum.lens.min(), alsum.lens.max() + SPLINE_GRID_STEP / 2, SPLINE_GRID_STEP)
    curves = []
    for j in range(alsum.num_ages):
        smooth = _smooth_age(alsum.lens, key.iloc[:, j].to_numpy(dtype=float), grid, span)
        ax.plot(grid, smooth, color=colors[j], linewidth=lwd)
        curves.append(smooth)
    ax.set_xlim(*(xlim if xlim is not None else (alsum.lens.min(), alsum.lens.max())))
    ax.set_ylim(*(ylim if ylim is not None else (0, 1)))
    return grid, curves


def _bubble_max_radius(ax: Axes, lens: np.ndarray, ages: np.ndarray, buf: float) -> float:
    """Largest bubble radius in points: ``buf`` times the smaller adjacent spacing."""
    trans = ax.transData
    spacings = []
    if len(lens) > 1:
        a, b = trans.transform([(lens[0], ages[0]), (lens[1], ages[0])])
        spacings.append(abs(b[0] - a[0]))
    if len(ages) > 1:
        a, b = trans.transform([(lens[0], ages[0]), (lens[0], ages[1])])
        spacings.append(abs(b[1] - a[1]))
    if not spacings:
        a, b = trans.transform([(0, 0), (1, 1)])
        spacings = [abs(b[0] - a[0]), abs(b[1] - a[1])]
    pixels = min(spacings) * buf
    return pixels * 72.0 / ax.figure.dpi


def _plot_bubble(ax, key, xlim, ylim, grid, buf, col, add) -> None:
    alsum = find_ages_and_lens(key)
    if isinstance(grid, bool):
        grid = DEFAULT_GRID_COLOR if grid else None
    if not add:
        ax.set_xlim(*(xlim if xlim is not None else (alsum.lens.min() - buf, alsum.lens.max() + buf)))
        ax.set_ylim(*(ylim if ylim is not None else (alsum.ages.min() - buf, alsum.ages.max() + buf)))
        if grid is not None:
            for age in alsum.ages:
                ax.axhline(age, color=grid, linestyle="--", linewidth=0.8, zorder=0)
            for length in alsum.lens:
                ax.axvline(length, color=grid, linestyle="--", linewidth=0.8, zorder=0)

    table = bubble_table(key)
    if table.empty:
        logger.info("No positive proportions in 'key'; no bubbles drawn.")
        return
    r_max = _bubble_max_radius(ax, alsum.lens, alsum.ages, buf)
    radii = r_max * np.sqrt(table["prop"].to_numpy()) / np.sqrt(table["prop"].max())
    ax.scatter(table["len"], table["age"], s=(2 * radii) ** 2, c=col,
               edgecolors=[BUBBLE_EDGE_COLOR], linewidths=0.8, zorder=3)


def alk_plot(
    key: pd.DataFrame | np.ndarray,
    type: str = "barplot",
    xlab: str = "Length",
    ylab: str | None = None,
    xlim: Sequence[float] | None = None,
    ylim: Sequence[float] | None = None,
    show_legend: bool = False,
    lbl_scale: float = 1.25,
    leg_scale: float = 1.0,
    lwd: float = 2,
    span: float = 0.25,
    pal: str = "default",
    grid: bool | str = True,
    col: str = DEFAULT_BUBBLE_COLOR,
    buf: float = 0.45,
    add: bool = False,
    ax: Axes | None = None,
    savepath: str | None = None,
) -> Axes:
    """Plot an age-length key.

    Args:
        key: Rows are length-interval lower bounds, columns are ages.
        type (str): One of :data:`ALK_PLOT_TYPES`.
        xlab (str): X-axis label.
        ylab (str, optional): Y-axis label. Defaults to ``"Proportion"``, or
            ``"Age"`` for bubble plots.
        xlim, ylim: Axis limits. For bar and area plots ``xlim`` also drops
            lengths outside the range.
        show_legend (bool): Draw an age colour strip above the plot instead of
            labelling bars or lines (ignored for bubbles).
        lbl_scale (float): Scale for the age labels.
        leg_scale (float): Scale for the legend text.
        lwd (float): Line width for line and spline plots.
        span (float): Lowess span for spline plots.
        pal (str): One of :data:`fishstats.plotting.style.PALETTES`.
        grid (bool or str): Bubble grid; ``True`` uses light grey, a string
            sets the colour, ``False`` draws none.
        col (str): Bubble fill colour.
        buf (float): Largest bubble radius as a fraction of the spacing
            between adjacent lengths or ages.
        add (bool): Add bubbles to the existing axis ``ax``.
        ax (Axes, optional): Axis to draw on; a new figure is made if omitted.
        savepath (str, optional): PNG path; PNG, PDF and SVG are saved.

    Returns:
        matplotlib.axes.Axes: The axis holding the plot.

    Raises:
        ValueError: If ``type`` or ``pal`` is unknown, ``key`` is invalid,
            ``xlim`` leaves fewer than two ages, or ``add`` is set without
            ``ax``.
    """
    if type not in ALK_PLOT_TYPES:
        raise ValueError(f"'type' must be one of {ALK_PLOT_TYPES}; got {type!r}.")
    if pal not in PALETTES:
        raise ValueError(f"'pal' must be one of {PALETTES}; got {pal!r}.")
    if add and ax is None:
        raise ValueError("'add=True' requires an existing 'ax'.")
    key = check_alk(key)
    if ylab is None:
        ylab = "Age" if type == "bubble" else "Proportion"

    apply_rcparams()
    if ax is None:
        figsize = STYLE.FIGSIZE_LEGEND if show_legend else STYLE.FIGSIZE_SINGLE
        _, ax = plt.subplots(figsize=figsize)
    lbl_size = FONT_SIZES["annotation"] * lbl_scale
    legend = show_legend and type != "bubble"

    if type == "barplot":
        ages, colors = _plot_bar(ax, key, xlim, ylim, lbl_size, pal, legend)
    elif type == "area":
        ages, colors = _plot_area(ax, key, xlim, ylim, pal)
    elif type == "lines":
        alsum = find_ages_and_lens(key)
        colors = choose_colors(pal, alsum.num_ages)
        curves = _plot_lines(ax, key, alsum, colors, lwd, xlim, ylim)
        if not legend:
            _label_maxima(ax, alsum.lens, curves, alsum.ages, lbl_size)
        ages = alsum.ages
    elif type == "splines":
        alsum = find_ages_and_lens(key)
        colors = choose_colors(pal, alsum.num_ages)
        grid_x, curves = _plot_splines(ax, key, alsum, colors, lwd, span, xlim, ylim)
        if not legend:
            _label_maxima(ax, grid_x, curves, alsum.ages, lbl_size)
        ages = alsum.ages
    else:
        _plot_bubble(ax, key, xlim, ylim, grid, buf, col, add)

    if legend:
        _add_legend(ax, ages, colors, leg_scale)
    if not add:
        set_axis_labels(ax, xlab, ylab)
        clean_axis(ax)
    if savepath is not None:
        saved = save_figure_bundle(ax.figure, savepath)
        logger.info("Saved ALK %s plot to %s", type, saved)
    return ax
