"""Structural checks for Method B tables.

Each check raises ``ValueError`` naming the violated constraint; nothing is
computed until both tables pass.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from .caphist import MB_BOT_ROWS


def check_conf_level(conf_level: float) -> float:
    """Return ``conf_level`` as float if it lies strictly between 0 and 1."""
    level = float(conf_level)
    if not np.isfinite(level) or level <= 0 or level >= 1:
        raise ValueError(f"'conf_level' must be between 0 and 1 (exclusive); got {conf_level!r}.")
    return level


def check_mb_top(mb_top: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """Validate the Method B top and return it as a float DataFrame.

    Raises:
        ValueError: If the table is not square, has a non-``NaN`` value on
            or below the diagonal, has a ``NaN`` above the diagonal, or has an
            infinite or negative value.
    """
    top = pd.DataFrame(mb_top)
    if top.shape[0] != top.shape[1]:
        raise ValueError(f"'mb_top' must be square; got shape {top.shape}.")
    try:
        values = top.to_numpy(dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValueError("'mb_top' must contain only numeric values.") from exc

    k = values.shape[0]
    lower = np.tril_indices(k)
    upper = np.triu_indices(k, 1)
    if not np.all(np.isnan(values[lower])):
        raise ValueError("Lower triangle and diagonal of 'mb_top' must be all 'NaN'.")
    if np.any(np.isnan(values[upper])):
        raise ValueError("Upper triangle of 'mb_top' cannot contain any 'NaN'.")
    if np.any(np.isinf(values[upper])):
        raise ValueError("All non-NaN values in 'mb_top' must be finite.")
    if np.any(values[upper] < 0):
        raise ValueError("All non-NaN values in 'mb_top' must be non-negative.")
    return pd.DataFrame(values, index=top.index, columns=top.columns)


def check_mb_bot(mb_bot: pd.DataFrame, mb_top: pd.DataFrame) -> pd.DataFrame:
    """Validate the Method B bottom against its top.

    Returns:
        pandas.DataFrame: Float copy with rows ordered ``m``, ``u``, ``n``, ``R``.

    Raises:
        ValueError: For a wrong row count, wrong row names, a column count
            that does not match ``mb_top``, negative, missing or infinite
            values, or a non-zero first ``m``.
    """
    bot = pd.DataFrame(mb_bot)
    expected = ", ".join(f"'{r}'" for r in MB_BOT_ROWS)
    if bot.shape[0] != len(MB_BOT_ROWS):
        raise ValueError(
            f"'mb_bot' must contain four rows with the following names: {expected}."
        )
    if set(str(r) for r in bot.index) != set(MB_BOT_ROWS):
        raise ValueError(f"The rownames of 'mb_bot' must be {expected}.")
    if bot.shape[1] != mb_top.shape[1]:
        raise ValueError(
            f"'mb_bot' must have the same number of columns as 'mb_top' "
            f"({bot.shape[1]} vs {mb_top.shape[1]})."
        )
    try:
        bot = bot.astype(float)
    except (TypeError, ValueError) as exc:
        raise ValueError("'mb_bot' must contain only numeric values.") from exc
    bot.index = [str(r) for r in bot.index]
    bot = bot.loc[list(MB_BOT_ROWS)]

    values = bot.to_numpy(dtype=float)
    if np.any(values[np.isfinite(values)] < 0):
        raise ValueError("All values in 'mb_bot' must be non-negative.")
    if np.any(np.isnan(values)):
        raise ValueError("All values in 'mb_bot' must be non-NaN.")
    if np.any(np.isinf(values)):
        raise ValueError("All values in 'mb_bot' must be finite.")
    if bot.loc["m"].iloc[0] != 0:
        raise ValueError("First value of 'm' row in 'mb_bot' must be 0.")
    return bot
