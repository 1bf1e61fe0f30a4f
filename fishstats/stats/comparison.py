"""Compare nested models with extra sum-of-squares and likelihood-ratio tests.

Each simpler ("sim") model is compared with one more complex ("com")
model. The simpler models need not be nested in each other, only in the
complex model.
"""

from __future__ import annotations

import math
import warnings
from typing import List, Sequence

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats

from .models import model_kind, model_statistics

EXTRA_SS_COLUMNS = ["DfO", "RSSO", "DfA", "RSSA", "Df", "SS", "F", "Pr(>F)"]
LRT_COLUMNS = ["DfO", "logLikO", "DfA", "logLikA", "Df", "logLik", "Chisq", "Pr(>Chisq)"]


def _check_models(sim: Sequence[object], com: object | None) -> None:
    if not sim:
        raise ValueError("At least one simpler model must be given.")
    if com is None:
        raise ValueError("A more complex model must be given with 'com='.")
    kinds = {model_kind(m) for m in list(sim) + [com]}
    if len(kinds) > 1:
        raise TypeError(
            f"All models must be of the same type; got {sorted(kinds)}."
        )


def _model_names(
    n_sim: int, sim_names: Sequence[str] | None, com_name: str | None
) -> tuple[List[str], str]:
    if sim_names is None:
        names = [f"Model {i}" for i in range(1, n_sim + 1)]
    else:
        names = [str(s) for s in sim_names]
        if len(names) != n_sim:
            raise ValueError(
                f"'sim_names' has {len(names)} entries but {n_sim} simple models were given."
            )
    return names, str(com_name) if com_name is not None else "Model A"


def _warn_if_not_more_complex(df_o: float, df_a: float, label: str) -> None:
    if not df_a < df_o:
        warnings.warn(
            f"More 'complex' model does not appear to be more complex than "
            f"simple model {label} (residual df {df_a:g} vs {df_o:g}).",
            UserWarning,
            stacklevel=3,
        )


def extra_ss(
    *sim: object,
    com: object = None,
    sim_names: Sequence[str] | None = None,
    com_name: str | None = None,
) -> pd.DataFrame:
    """Run extra sum-of-squares F-tests of each simple model against ``com``.

    Args:
        *sim: Fitted simpler models (:class:`~fishstats.stats.models.ModelFit`
            or statsmodels regression results).
        com: The fitted more complex model.
        sim_names (sequence of str, optional): Labels for the simple models.
        com_name (str, optional): Label for the complex model.

    Returns:
        pandas.DataFrame: One row per simple model (``"1vA"``, ``"2vA"``, ...)
        with columns ``DfO``, ``RSSO``, ``DfA``, ``RSSA``, ``Df``, ``SS``,
        ``F`` and ``Pr(>F)``. Model labels are kept in ``attrs``.

    Raises:
        ValueError: If no simple model or no complex model is given.
        TypeError: If the models are of different types or lack a residual
            sum of squares.

    Note:
        ``F`` uses the complex model's residual mean square as denominator,
        so each row matches the final row of a sequential ANOVA of the same
        nested pair.
    """
    _check_models(sim, com)
    names, cname = _model_names(len(sim), sim_names, com_name)

    rss_a, df_a, _ = model_statistics(com)
    if not np.isfinite(rss_a):
        raise TypeError("The complex model does not provide a residual sum of squares.")
    rows = []
    for i, model in enumerate(sim, start=1):
        rss_o, df_o, _ = model_statistics(model)
        if not np.isfinite(rss_o):
            raise TypeError(f"Simple model {i} does not provide a residual sum of squares.")
        _warn_if_not_more_complex(df_o, df_a, str(i))
        df = df_o - df_a
        ss = rss_o - rss_a
        if df > 0 and df_a > 0 and rss_a > 0:
            f_stat = float((ss / df) / (rss_a / df_a))
            pvalue = float(scipy_stats.f.sf(f_stat, df, df_a))
        else:
            f_stat = math.nan
            pvalue = math.nan
        rows.append([df_o, rss_o, df_a, rss_a, df, ss, f_stat, pvalue])

    table = pd.DataFrame(
        rows,
        columns=EXTRA_SS_COLUMNS,
        index=[f"{i}vA" for i in range(1, len(sim) + 1)],
    )
    table.attrs["test"] = "extra_ss"
    table.attrs["sim_names"] = names
    table.attrs["com_name"] = cname
    return table


def lrt(
    *sim: object,
    com: object = None,
    sim_names: Sequence[str] | None = None,
    com_name: str | None = None,
) -> pd.DataFrame:
    """Run likelihood-ratio tests of each simple model against ``com``.

    Returns:
        pandas.DataFrame: One row per simple model with columns ``DfO``,
        ``logLikO``, ``DfA``, ``logLikA``, ``Df``, ``logLik``, ``Chisq`` and
        ``Pr(>Chisq)``, where ``Chisq = -2 * (logLikO - logLikA)``.

    Raises:
        ValueError: If no simple model or no complex model is given.
        TypeError: If the models are of different types or are unsupported.
    """
    _check_models(sim, com)
    names, cname = _model_names(len(sim), sim_names, com_name)

    _, df_a, llf_a = model_statistics(com)
    rows = []
    for i, model in enumerate(sim, start=1):
        _, df_o, llf_o = model_statistics(model)
        _warn_if_not_more_complex(df_o, df_a, str(i))
        df = df_o - df_a
        loglik = llf_o - llf_a
        chisq = -2.0 * loglik
        pvalue = float(scipy_stats.chi2.sf(chisq, df)) if df > 0 else math.nan
        rows.append([df_o, llf_o, df_a, llf_a, df, loglik, chisq, pvalue])

    table = pd.DataFrame(
        rows,
        columns=LRT_COLUMNS,
        index=[f"{i}vA" for i in range(1, len(sim) + 1)],
    )
    table.attrs["test"] = "lrt"
    table.attrs["sim_names"] = names
    table.attrs["com_name"] = cname
    return table


def _format_pvalue(value: float) -> str:
    if not np.isfinite(value):
        return "NA"
    if value < 1e-4:
        return "<0.0001"
    return f"{value:.4f}"


def format_comparison(table: pd.DataFrame, digits: int = 4) -> str:
    """Render an ``extra_ss``/``lrt`` table with its model legend."""
    sim_names = table.attrs.get("sim_names", [f"Model {i}" for i in range(1, len(table) + 1)])
    com_name = table.attrs.get("com_name", "Model A")

    lines = [f"Model {i}: {name}" for i, name in enumerate(sim_names, start=1)]
    lines.append(f"Model A: {com_name}")
    lines.append("")

    shown = table.copy()
    pcol = shown.columns[-1]
    shown[pcol] = [_format_pvalue(v) for v in shown[pcol]]
    for col in shown.columns[:-1]:
        shown[col] = [f"{v:.{digits}g}" if np.isfinite(v) else "NA" for v in shown[col]]
    lines.append(shown.to_string())
    return "\n".join(lines)
