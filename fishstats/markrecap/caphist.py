"""Summarize individual capture histories into a Method B table.

Input is a wide table with one row per fish and one 0/1 column per sampling
event. The Method B "top" counts, for each pair of events ``i < j``, the fish
recaptured at ``j`` whose most recent previous capture was at ``i``. The
"bottom" holds the per-event totals used by :func:`fishstats.markrecap.mr_open`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

MB_BOT_ROWS: tuple[str, ...] = ("m", "u", "n", "R")


@dataclass(frozen=True)
class CapHistSummary:
    """Summaries of a set of capture histories.

    Attributes:
        caphist: Frequency of each distinct history string (e.g. ``"0110"``).
        totals: Per-event ``n`` (caught), ``m`` (marked caught) and ``R``
            (released), one row per event.
        mb_top: Square Method B top; ``NaN`` on and below the diagonal.
        mb_bot: Method B bottom with rows ``m``, ``u``, ``n``, ``R``.
    """

    caphist: pd.Series
    totals: pd.DataFrame
    mb_top: pd.DataFrame
    mb_bot: pd.DataFrame

    @property
    def events(self) -> list[str]:
        return [str(c) for c in self.mb_bot.columns]


def _resolve_columns(
    df: pd.DataFrame,
    cols: Sequence[int | str] | int | str,
) -> list:
    if isinstance(cols, (int, str, np.integer)):
        cols = [cols]
    resolved = []
    for c in cols:
        if isinstance(c, (int, np.integer)) and c not in df.columns:
            resolved.append(df.columns[int(c)])
        elif c in df.columns:
            resolved.append(c)
        else:
            raise KeyError(f"Column {c!r} not found in capture-history table.")
    return resolved


def select_event_columns(
    df: pd.DataFrame,
    cols2use: Sequence[int | str] | int | str | None = None,
    cols2ignore: Sequence[int | str] | int | str | None = None,
) -> pd.DataFrame:
    """Return the capture-event columns of ``df``.

    Raises:
        ValueError: If both ``cols2use`` and ``cols2ignore`` are given.
        KeyError: If a requested column does not exist.
    """
    if cols2use is not None and cols2ignore is not None:
        raise ValueError("Cannot use both 'cols2use' and 'cols2ignore'.")
    if cols2use is not None:
        return df[_resolve_columns(df, cols2use)]
    if cols2ignore is not None:
        drop = set(_resolve_columns(df, cols2ignore))
        return df[[c for c in df.columns if c not in drop]]
    return df


def _history_matrix(events: pd.DataFrame) -> np.ndarray:
    missing = events.isna().to_numpy()
    values = events.apply(pd.to_numeric, errors="coerce").to_numpy(dtype=float)
    present = values[~missing]
    if np.any(np.isnan(present)) or np.any((present != 0) & (present != 1)):
        raise ValueError("Capture histories must contain only 0s and 1s.")
    return np.nan_to_num(values, nan=0.0).astype(int)


def cap_hist_sum(
    df: pd.DataFrame,
    cols2use: Sequence[int | str] | int | str | None = None,
    cols2ignore: Sequence[int | str] | int | str | None = None,
) -> CapHistSummary:
    """Summarize capture histories for open-population estimation.

    Args:
        df (pandas.DataFrame): One row per fish, one 0/1 column per event.
            Missing values are treated as "not captured".
        cols2use: Event columns to keep (labels or positions).
        cols2ignore: Columns to drop, such as a fish identifier.

    Returns:
        CapHistSummary: History frequencies, per-event totals and the Method B
        top and bottom tables.

    Raises:
        ValueError: If fewer than two events remain or histories are not 0/1.

    Note:
        Every captured fish is assumed to be released (``R = n``).
    """
    events = select_event_columns(df, cols2use=cols2use, cols2ignore=cols2ignore)
    if events.shape[1] < 2:
        raise ValueError("Capture histories must contain at least two sampling events.")

    labels = [str(c) for c in events.columns]
    hist = _history_matrix(events)
    k = hist.shape[1]

    n = hist.sum(axis=0)
    seen_before = np.cumsum(hist, axis=1) - hist > 0
    m = np.sum((hist == 1) & seen_before, axis=0)
    released = n.copy()

    top = np.full((k, k), np.nan)
    top[np.triu_indices(k, 1)] = 0.0
    for j in range(1, k):
        prior = hist[hist[:, j] == 1, :j]
        prior = prior[prior.any(axis=1)]
        if len(prior) == 0:
            continue
        last = j - 1 - np.argmax(prior[:, ::-1], axis=1)
        top[:j, j] += np.bincount(last, minlength=j)

    caphist = (
        pd.Series(["".join(str(v) for v in row) for row in hist])
        .value_counts()
        .sort_index()
    )
    caphist.name = "freq"

    totals = pd.DataFrame({"n": n, "m": m, "R": released}, index=labels)
    mb_top = pd.DataFrame(top, index=labels, columns=labels)
    mb_bot = pd.DataFrame(
        [m, n - m, n, released], index=list(MB_BOT_ROWS), columns=labels
    ).astype(float)

    return CapHistSummary(caphist=caphist, totals=totals, mb_top=mb_top, mb_bot=mb_bot)
