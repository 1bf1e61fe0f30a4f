"""Centralized plotting style, palettes, and save helpers."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.colors import LinearSegmentedColormap, to_hex, to_rgb
from matplotlib.figure import Figure

OUTPUT_FORMATS: tuple[str, ...] = ("png", "pdf", "svg")
FIGURE_DPI = 300
_STYLE_STATE = {"initialized": False}


@dataclass(frozen=True)
class StyleConfig:
    BASE_FONTSIZE: float = 11.0
    LABEL_FONTSIZE: float = 12.0
    TICK_FONTSIZE: float = 10.0
    LEGEND_FONTSIZE: float = 10.0
    ANNOTATION_FONTSIZE: float = 10.0
    LINEWIDTH: float = 2.0
    LINEWIDTH_THIN: float = 1.0
    MARKERSIZE: float = 5.0
    GRID_ALPHA: float = 0.20
    FIGSIZE_SINGLE: tuple[float, float] = (7.0, 4.6)
    FIGSIZE_LEGEND: tuple[float, float] = (7.0, 5.2)


STYLE = StyleConfig()

FONT_SIZES = {
    "base": STYLE.BASE_FONTSIZE,
    "axis_label": STYLE.LABEL_FONTSIZE,
    "tick": STYLE.TICK_FONTSIZE,
    "legend": STYLE.LEGEND_FONTSIZE,
    "annotation": STYLE.ANNOTATION_FONTSIZE,
}

# Dark text on light fills, light text on dark fills; mean RGB (0-255) cutoff.
LABEL_DARK_CUTOFF = 120

DEFAULT_GRID_COLOR = "#CCCCCC"
DEFAULT_BUBBLE_COLOR = "#CCCCCC"
BUBBLE_EDGE_COLOR = (0.0, 0.0, 0.0, 0.5)

PALETTES: tuple[str, ...] = (
    "rich",
    "cm",
    "default",
    "grey",
    "gray",
    "heat",
    "jet",
    "rainbow",
    "topo",
    "terrain",
)

_CUSTOM_MAPS = {
    "rich": ["#000033", "#0000CC", "#0066FF", "#00CC99", "#66FF00", "#FFCC00", "#FF3300"],
    "cm": ["#80FFFF", "#FFFFFF", "#FF80FF"],
    "topo": ["#4C00FF", "#004CFF", "#00E5FF", "#00FF4D", "#E6FF00", "#FFFF00", "#FFE0B3"],
}


def apply_global_style(font_scale: float = 1.0) -> None:
    """Apply global Matplotlib style scaled by ``font_scale``."""
    scale = float(font_scale)
    plt.rcParams.update(
        {
            "font.family": "STIXGeneral",
            "font.size": STYLE.BASE_FONTSIZE * scale,
            "axes.labelsize": STYLE.LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "ytick.labelsize": STYLE.TICK_FONTSIZE * scale,
            "legend.fontsize": STYLE.LEGEND_FONTSIZE * scale,
            "mathtext.fontset": "stix",
            "mathtext.default": "regular",
            "axes.labelpad": 4,
            "axes.linewidth": STYLE.LINEWIDTH_THIN,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "xtick.major.size": 3.0,
            "ytick.major.size": 3.0,
            "grid.alpha": STYLE.GRID_ALPHA,
            "axes.grid": False,
            "legend.frameon": False,
            "lines.linewidth": STYLE.LINEWIDTH,
            "lines.markersize": STYLE.MARKERSIZE,
            "figure.dpi": 120,
            "savefig.dpi": FIGURE_DPI,
            "savefig.bbox": "tight",
            "savefig.pad_inches": 0.12,
        }
    )


def apply_rcparams() -> None:
    """Apply the project plotting style once per process."""
    if not _STYLE_STATE["initialized"]:
        apply_global_style(font_scale=1.0)
        _STYLE_STATE["initialized"] = True


def choose_colors(pal: str = "default", num: int = 1) -> list[str]:
    """Return ``num`` hex colors from the named palette.

    Args:
        pal (str): One of :data:`PALETTES`.
        num (int): Number of colors (one per age in ALK plots).

    Raises:
        ValueError: If ``pal`` is unknown or ``num`` is less than 1.
    """
    if pal not in PALETTES:
        raise ValueError(f"'pal' must be one of {PALETTES}; got {pal!r}.")
    num = int(num)
    if num < 1:
        raise ValueError("'num' must be at least 1.")

    if pal == "default":
        cmap = matplotlib.colormaps["tab10"]
        return [to_hex(cmap(i % cmap.N)) for i in range(num)]
    if pal in ("grey", "gray"):
        return [to_hex(str(v)) for v in np.linspace(0.3, 0.9, num)]

    positions = np.linspace(0.0, 1.0, num) if num > 1 else np.array([0.0])
    if pal in _CUSTOM_MAPS:
        cmap = LinearSegmentedColormap.from_list(pal, _CUSTOM_MAPS[pal])
    elif pal == "heat":
        cmap = matplotlib.colormaps["autumn"]
    elif pal == "rainbow":
        cmap = matplotlib.colormaps["hsv"]
        positions = np.arange(num) / num
    elif pal == "terrain":
        cmap = matplotlib.colormaps["terrain"]
        positions = positions * 0.85
    else:
        cmap = matplotlib.colormaps["jet"]
    return [to_hex(cmap(float(p))) for p in positions]


def label_text_colors(colors: Sequence[str]) -> list[str]:
    """Return ``"white"`` for dark fill colors and ``"black"`` for light ones."""
    out = []
    for c in colors:
        mean_rgb = float(np.mean(to_rgb(c))) * 255.0
        out.append("white" if mean_rgb < LABEL_DARK_CUTOFF else "black")
    return out


def clean_axis(ax: Axes) -> None:
    """Apply consistent tick and spine formatting to one axis."""
    ax.tick_params(axis="both", which="major", labelsize=FONT_SIZES["tick"], width=1.0)
    for side in ("left", "bottom"):
        ax.spines[side].set_linewidth(STYLE.LINEWIDTH_THIN)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)


def set_axis_labels(ax: Axes, x: str | None = None, y: str | None = None) -> None:
    """Apply axis labels with project typography."""
    if x is not None:
        ax.set_xlabel(x, fontsize=FONT_SIZES["axis_label"])
    if y is not None:
        ax.set_ylabel(y, fontsize=FONT_SIZES["axis_label"])


def save_figure(
    fig: Figure,
    savepath_base: str | Path,
    formats: Sequence[str] = OUTPUT_FORMATS,
    dpi: int = FIGURE_DPI,
    *,
    bbox_inches: str = "tight",
    pad_inches: float = 0.12,
) -> Path:
    """Save a figure to multiple formats using one extensionless base path."""
    base = Path(savepath_base)
    base.parent.mkdir(parents=True, exist_ok=True)
    for ext in formats:
        if ext not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported extension '{ext}'. Expected one of {OUTPUT_FORMATS}."
            )
        target = base.with_suffix(f".{ext}")
        fig.savefig(
            str(target),
            dpi=dpi if ext == "png" else None,
            bbox_inches=bbox_inches,
            pad_inches=pad_inches,
        )
    return base.with_suffix(".png")


def save_figure_bundle(fig: Figure, png_path: str) -> str:
    """Save synchronized PNG, PDF, and SVG files for a figure."""
    base = Path(os.path.splitext(png_path)[0])
    return str(save_figure(fig, base))


def sanitize_filename(name: str) -> str:
    """Normalize a filename component into a stable, filesystem-safe token."""
    text = re.sub(r"\s+", "_", str(name).strip())
    text = re.sub(r"[^A-Za-z0-9._-]+", "_", text)
    text = re.sub(r"_+", "_", text).strip("._")
    return text or "figure"
