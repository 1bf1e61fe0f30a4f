"""Tests for age-length key plots and palettes."""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.axes import Axes

from fishstats.plotting import ALK_PLOT_TYPES, PALETTES, alk_plot, choose_colors
from fishstats.plotting.style import label_text_colors


@pytest.fixture
def smooth_key():
    a = np.linspace(0.0, 1.0, 12)
    return pd.DataFrame(
        np.column_stack([(1 - a) ** 2, 2 * a * (1 - a), a**2]),
        index=np.arange(10, 130, 10),
        columns=[1, 2, 3],
    )


@pytest.mark.parametrize("pal", PALETTES)
def test_choose_colors_returns_hex(pal):
    colors = choose_colors(pal, 5)
    assert len(colors) == 5
    assert all(c.startswith("#") and len(c) == 7 for c in colors)


def test_choose_colors_rejects_unknown_palette():
    with pytest.raises(ValueError, match="'pal' must be one of"):
        choose_colors("viridis", 3)


def test_label_text_colors_contrast():
    assert label_text_colors(["#000000", "#FFFFFF", "#1F1F1F"]) == ["white", "black", "white"]


@pytest.mark.parametrize("kind", ALK_PLOT_TYPES)
def test_every_plot_type_renders(kind, smooth_key):
    ax = alk_plot(smooth_key, type=kind, span=0.5)
    assert isinstance(ax, Axes)
    assert ax.get_xlabel() == "Length"
    assert ax.get_ylabel() == ("Age" if kind == "bubble" else "Proportion")


def test_rejects_unknown_type_and_palette(alk_key):
    with pytest.raises(ValueError, match="'type' must be one of"):
        alk_plot(alk_key, type="pie")
    with pytest.raises(ValueError, match="'pal' must be one of"):
        alk_plot(alk_key, pal="viridis")


def test_barplot_labels_each_positive_segment(alk_key):
    ax = alk_plot(alk_key, type="barplot", pal="grey")
    labels = [t for t in ax.texts]
    assert len(labels) == 8
    age_one = [t for t in labels if t.get_text() == "1"]
    assert age_one and all(t.get_color() == "white" for t in age_one)
    assert all(t.get_color() == "black" for t in labels if t.get_text() == "3")


def test_barplot_legend_replaces_labels(alk_key):
    ax = alk_plot(alk_key, type="barplot", show_legend=True)
    assert len(ax.texts) == 0
    assert len(ax.child_axes) == 1
    strip_labels = [t.get_text() for t in ax.child_axes[0].texts]
    assert strip_labels == ["1", "3"]


def test_barplot_xlim_restricts_key(alk_key):
    ax = alk_plot(alk_key, type="barplot", xlim=(10, 20))
    assert len(ax.patches) == 4
    assert [t.get_text() for t in ax.get_xticklabels()] == ["10", "20"]


def test_area_plot_has_one_layer_per_age(alk_key):
    ax = alk_plot(alk_key, type="area")
    assert len(ax.collections) == 3
    ax = alk_plot(alk_key, type="area", xlim=(10, 20))
    assert len(ax.collections) == 2


def test_lines_labelled_at_maximum(alk_key):
    ax = alk_plot(alk_key, type="lines")
    assert len(ax.lines) == 3
    positions = {t.get_text(): t.get_position() for t in ax.texts}
    assert positions["1"] == (10, 1.0)
    assert positions["3"] == (40, 0.5)


def test_splines_evaluated_on_fine_grid(smooth_key):
    ax = alk_plot(smooth_key, type="splines", span=0.5)
    assert len(ax.lines) == 3
    xdata = np.asarray(ax.lines[0].get_xdata())
    assert len(xdata) == 1101
    assert np.diff(xdata) == pytest.approx(0.1)
    assert ax.get_ylim() == (0.0, 1.0)


def test_bubble_sizes_scale_with_proportion(alk_key):
    ax = alk_plot(alk_key, type="bubble")
    bubbles = ax.collections[0]
    sizes = np.asarray(bubbles.get_sizes())
    props = np.array([1.0, 0.5, 0.25, 0.5, 0.5, 0.5, 0.25, 0.5])
    assert len(bubbles.get_offsets()) == 8
    np.testing.assert_allclose(sizes / sizes.max(), props / props.max())
    assert len(ax.lines) == 7


def test_bubble_grid_can_be_disabled(alk_key):
    ax = alk_plot(alk_key, type="bubble", grid=False)
    assert len(ax.lines) == 0
    ax = alk_plot(alk_key, type="bubble", grid="red")
    assert ax.lines[0].get_color() == "red"


def test_bubble_add_to_existing_axis(alk_key):
    fig, ax = plt.subplots()
    alk_plot(alk_key, type="bubble", ax=ax)
    alk_plot(alk_key, type="bubble", add=True, ax=ax, col="#FF0000")
    assert len(ax.collections) == 2


def test_add_requires_axis(alk_key):
    with pytest.raises(ValueError, match="requires an existing 'ax'"):
        alk_plot(alk_key, type="bubble", add=True)


def test_savepath_writes_all_formats(alk_key, tmp_path):
    alk_plot(alk_key, savepath=str(tmp_path / "alk.png"))
    for ext in ("png", "pdf", "svg"):
        assert (tmp_path / f"alk.{ext}").exists()
