"""Write estimate and model-comparison tables to CSV files."""

from __future__ import annotations

import logging
import os
from typing import Tuple

import pandas as pd

from .markrecap.mr_open import MrOpenResult, iter_estimate_pairs
from .reporting import add_reported_columns
from .schema import EstimateColumns

logger = logging.getLogger(__name__)

COLS = EstimateColumns()


def save_mr_open_to_csv(
    result: MrOpenResult, output_dir: str = "output"
) -> Tuple[str, str, str]:
    """Save Jolly-Seber observables, estimates and confidence limits.

    Args:
        result (MrOpenResult): Output of :func:`fishstats.markrecap.mr_open`.
        output_dir (str): Directory where CSV outputs are written.

    Returns:
        tuple[str, str, str]: Paths to ``observables.csv``, ``estimates.csv``
        and ``confint.csv``.

    Note:
        ``estimates.csv`` carries a text column per estimate and standard
        error, rounded to the standard error's precision.
    """
    os.makedirs(output_dir, exist_ok=True)

    obs_path = os.path.join(output_dir, "observables.csv")
    est_path = os.path.join(output_dir, "estimates.csv")
    ci_path = os.path.join(output_dir, "confint.csv")

    estimates = add_reported_columns(
        result.estimates, iter_estimate_pairs(), suffix=COLS.reported_suffix
    )

    result.observables.to_csv(obs_path, index_label="event")
    estimates.to_csv(est_path, index_label="event")
    result.ci.to_csv(ci_path, index_label="event")

    logger.info("Saved observables to %s", obs_path)
    logger.info("Saved estimates to %s", est_path)
    logger.info("Saved confidence intervals to %s", ci_path)
    return obs_path, est_path, ci_path


def save_comparison_to_csv(table: pd.DataFrame, path: str) -> str:
    """Save an ``extra_ss`` or ``lrt`` table, keeping its row labels."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    table.to_csv(path, index_label="comparison")
    logger.info("Saved %s table to %s", table.attrs.get("test", "comparison"), path)
    return path
