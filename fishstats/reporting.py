"""Round abundance, survival and recruitment estimates to their standard errors.

A standard error is kept to one significant figure, or two when its leading
digit is 1 (an SE of 0.14 stays 0.14, 0.23 becomes 0.2). The estimate is
then shown with the same number of decimal places. Events where a parameter
is not estimable have no SE and are written as ``"NA"``.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np
import pandas as pd

MISSING_TEXT = "NA"


def _has_se(se: float) -> bool:
    return bool(np.isfinite(se) and se > 0)


def round_se(se: float) -> tuple[float, int]:
    """Round a standard error for a report table.

    Args:
        se (float): Standard error of an estimate such as N or phi.

    Returns:
        tuple[float, int]: The rounded SE and the number of decimals to
        print it (and its estimate) with.

    Raises:
        ValueError: If ``se`` is not a finite positive number.
    """
    se = float(se)
    if not _has_se(se):
        raise ValueError(f"Standard error must be finite and > 0, got {se!r}")

    def digits(x: float) -> int:
        magnitude = math.floor(math.log10(x))
        figures = 2 if f"{x:e}"[0] == "1" else 1
        return figures - 1 - magnitude

    rounded = round(se, digits(se))
    # 0.096 rounds up to 0.1, which then keeps two figures.
    ndigits = digits(rounded)
    return float(round(rounded, ndigits)), max(0, ndigits)


def se_decimal_places(se: float) -> int:
    """Decimals implied by a rounded standard error."""
    return round_se(se)[1]


def format_estimate(value: float, se: float) -> str:
    """Print an estimate with as many decimals as its rounded SE."""
    return f"{float(value):.{se_decimal_places(se)}f}"


def add_reported_columns(
    estimates: pd.DataFrame,
    estimate_se_pairs: Iterable[tuple[str, str]],
    suffix: str = " (reported)",
) -> pd.DataFrame:
    """Add text columns for estimates and their standard errors.

    Args:
        estimates (pandas.DataFrame): Numeric per-event estimates, e.g.
            :attr:`MrOpenResult.estimates`.
        estimate_se_pairs: ``(estimate_column, se_column)`` pairs such as
            ``("N", "N.se")``.
        suffix (str, optional): Appended to each new column name.

    Returns:
        pandas.DataFrame: Copy of ``estimates`` with the text columns added.

    Raises:
        KeyError: If an estimate or SE column is absent.
    """
    pairs = list(estimate_se_pairs)
    for est_col, se_col in pairs:
        if est_col not in estimates.columns:
            raise KeyError(f"Missing estimate column '{est_col}'.")
        if se_col not in estimates.columns:
            raise KeyError(f"Missing standard error column '{se_col}' for '{est_col}'.")

    out = estimates.copy()
    for est_col, se_col in pairs:
        values = pd.to_numeric(out[est_col], errors="coerce")
        ses = pd.to_numeric(out[se_col], errors="coerce")
        est_text, se_text = [], []
        for value, se in zip(values, ses):
            if not _has_se(se):
                est_text.append(MISSING_TEXT)
                se_text.append(MISSING_TEXT)
                continue
            rounded, dp = round_se(se)
            est_text.append(f"{value:.{dp}f}" if np.isfinite(value) else MISSING_TEXT)
            se_text.append(f"{rounded:.{dp}f}")
        out[f"{est_col}{suffix}"] = est_text
        out[f"{se_col}{suffix}"] = se_text
    return out
