"""Pytest configuration for repository-relative imports and headless plotting."""

import os
import sys

import matplotlib

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture
def method_b_tables():
    """Four-event Method B table small enough to check by hand."""
    events = [1, 2, 3, 4]
    nan = np.nan
    top = pd.DataFrame(
        [
            [nan, 10, 3, 1],
            [nan, nan, 12, 2],
            [nan, nan, nan, 15],
            [nan, nan, nan, nan],
        ],
        index=events,
        columns=events,
    )
    m = [0, 10, 15, 18]
    n = [50, 60, 70, 65]
    bot = pd.DataFrame(
        [m, [a - b for a, b in zip(n, m)], n, [50, 58, 68, 65]],
        index=["m", "u", "n", "R"],
        columns=events,
    )
    return top, bot


@pytest.fixture
def capture_histories():
    """Six fish over three events with an identifier column."""
    return pd.DataFrame(
        {
            "id": ["a", "b", "c", "d", "e", "f"],
            "s1": [1, 1, 1, 0, 0, 1],
            "s2": [1, 0, 1, 1, 0, 0],
            "s3": [0, 1, 1, 1, 1, 0],
        }
    )


@pytest.fixture
def alk_key():
    """Four length intervals by three ages, rows summing to 1."""
    return pd.DataFrame(
        [
            [1.0, 0.0, 0.0],
            [0.5, 0.5, 0.0],
            [0.25, 0.5, 0.25],
            [0.0, 0.5, 0.5],
        ],
        index=[10, 20, 30, 40],
        columns=[1, 2, 3],
    )
