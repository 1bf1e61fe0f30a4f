"""Build, check and reshape age-length keys.

An age-length key is a table whose rows are length intervals (labelled by
their lower bound) and whose columns are ages. Each cell holds the
proportion of fish in that length interval that have that age, so rows sum
to 1 ("vertically conditional").
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

ROW_SUM_TOL = 0.01


@dataclass(frozen=True)
class AgeLengthSummary:
    """Numeric ages and lengths of a key and how many of each."""

    ages: np.ndarray
    lens: np.ndarray

    @property
    def num_ages(self) -> int:
        return int(len(self.ages))

    @property
    def num_lens(self) -> int:
        return int(len(self.lens))


def _numeric_labels(labels: pd.Index, what: str) -> pd.Index:
    values = pd.to_numeric(pd.Series(labels, dtype=object), errors="coerce")
    if values.isna().any():
        raise ValueError(f"The {what} of 'key' must be numeric.")
    return pd.Index(values.to_numpy())


def check_alk(key: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """Validate an age-length key and return it as a float DataFrame.

    Args:
        key: Rows are length-interval lower bounds, columns are ages. Counts
            are accepted and converted to row proportions.

    Returns:
        pandas.DataFrame: Key with numeric row/column labels and row
        proportions.

    Raises:
        ValueError: If labels are not numeric, values are not numeric, or any
            value is negative.

    Note:
        Warns (``UserWarning``) when counts were converted, when a non-empty
        row does not sum to 1, and when some rows hold no fish.
    """
    out = pd.DataFrame(key).copy()
    try:
        out = out.astype(float)
    except (TypeError, ValueError) as exc:
        raise ValueError("'key' must contain only numeric values.") from exc
    out.index = _numeric_labels(out.index, "row names (lengths)")
    out.columns = _numeric_labels(out.columns, "column names (ages)")

    values = out.to_numpy(dtype=float)
    if np.any(values[np.isfinite(values)] < 0):
        raise ValueError("'key' cannot contain negative values.")

    row_sums = out.sum(axis=1, skipna=True)
    if (row_sums > 1 + ROW_SUM_TOL).any():
        warnings.warn(
            "'key' contained values greater than 1; assumed to be counts and "
            "converted to row proportions.",
            UserWarning,
            stacklevel=2,
        )
        out = out.div(row_sums.where(row_sums > 0), axis=0)
        row_sums = out.sum(axis=1, skipna=True)

    off = (row_sums > 0) & ((row_sums - 1.0).abs() > ROW_SUM_TOL)
    if off.any():
        warnings.warn(
            f"'key' contained a row that does not sum to 1 "
            f"(lengths {list(out.index[off])}).",
            UserWarning,
            stacklevel=2,
        )
    if (row_sums == 0).any():
        warnings.warn(
            f"'key' contained rows that sum to 0 "
            f"(lengths {list(out.index[row_sums == 0])}).",
            UserWarning,
            stacklevel=2,
        )
    return out


def length_categories(
    lengths: Sequence[float] | np.ndarray,
    width: float,
    start: float | None = None,
) -> np.ndarray:
    """Return the lower bound of the ``width``-wide interval holding each length.

    Raises:
        ValueError: If ``width`` is not positive or a length is below ``start``.
    """
    if not np.isfinite(width) or width <= 0:
        raise ValueError("'width' must be positive.")
    arr = np.asarray(lengths, dtype=float)
    finite = arr[np.isfinite(arr)]
    if start is None:
        start = float(np.floor(np.min(finite) / width) * width) if len(finite) else 0.0
    if np.any(finite < start):
        raise ValueError("'start' must not exceed the smallest length.")
    cats = start + np.floor((arr - start) / width) * width
    return np.round(cats, 10)


def age_length_key(
    lengths: Sequence[float] | np.ndarray,
    ages: Sequence[float] | np.ndarray,
    width: float,
    start: float | None = None,
) -> pd.DataFrame:
    """Cross-tabulate aged fish into a row-proportion age-length key.

    Fish with a missing length or age are dropped.
    """
    df = pd.DataFrame(
        {"len": np.asarray(lengths, dtype=float), "age": np.asarray(ages, dtype=float)}
    ).dropna()
    if df.empty:
        raise ValueError("No fish with both a length and an age.")
    df["LCat"] = length_categories(df["len"].to_numpy(), width, start=start)
    if np.all(np.mod(df["age"], 1) == 0):
        df["age"] = df["age"].astype(int)
    key = pd.crosstab(df["LCat"], df["age"], normalize="index")
    return key.sort_index().sort_index(axis=1)


def find_ages_and_lens(key: pd.DataFrame) -> AgeLengthSummary:
    """Return the numeric ages (columns) and lengths (rows) of ``key``."""
    return AgeLengthSummary(
        ages=np.asarray(key.columns, dtype=float),
        lens=np.asarray(key.index, dtype=float),
    )


def adjust_key_for_xlim(
    key: pd.DataFrame, xlim: Sequence[float] | None
) -> pd.DataFrame:
    """Restrict ``key`` to lengths inside ``xlim`` and drop empty ages.

    Lengths with no fish (all ``NaN``) are ignored when summing an age.
    An age whose sum over the remaining lengths is ``NaN`` or zero is dropped.

    Raises:
        ValueError: If fewer than two lengths or two ages remain.
    """
    if xlim is None:
        return key
    lo, hi = sorted(float(v) for v in xlim)
    lens = np.asarray(key.index, dtype=float)
    out = key.loc[(lens >= lo) & (lens <= hi)]
    if out.shape[0] < 2:
        raise ValueError("'xlim' is too restrictive (only one length).")
    sums = out.loc[out.notna().any(axis=1)].sum(axis=0, skipna=False)
    out = out.loc[:, sums.notna() & (sums != 0)]
    if out.shape[1] < 2:
        raise ValueError("'xlim' is too restrictive (only one age).")
    return out


def bubble_table(key: pd.DataFrame) -> pd.DataFrame:
    """Reshape ``key`` to long form (``len``, ``age``, ``prop``), positive cells only."""
    alsum = find_ages_and_lens(key)
    long = pd.DataFrame(
        {
            "len": np.tile(alsum.lens, alsum.num_ages),
            "age": np.repeat(alsum.ages, alsum.num_lens),
            "prop": key.to_numpy(dtype=float).ravel(order="F"),
        }
    )
    return long[long["prop"] > 0].reset_index(drop=True)
