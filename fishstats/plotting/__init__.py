"""
Matplotlib figures for age-length keys.

Modules:
    alk_plots:
        ``alk_plot`` renders a key as stacked bars, a stacked area, one
        line or lowess smooth per age, or a bubble plot.

    style:
        Shared rcParams, palettes (``choose_colors``) and multi-format
        figure saving.

Design Principle:
    No estimation in plotting code. Keys are checked by
    ``fishstats.alk.check_alk`` and then drawn as given.
"""

from .alk_plots import ALK_PLOT_TYPES, alk_plot
from .style import PALETTES, apply_rcparams, choose_colors, save_figure_bundle

__all__ = [
    "ALK_PLOT_TYPES",
    "PALETTES",
    "alk_plot",
    "apply_rcparams",
    "choose_colors",
    "save_figure_bundle",
]
