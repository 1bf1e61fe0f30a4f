"""Least-squares fit containers used by the model-comparison tests.

This module supports:
- polynomial (linear in the parameters) least-squares fits,
- nonlinear least-squares fits through ``scipy.optimize.curve_fit``, and
- extraction of RSS, residual df and log-likelihood from fitted models,
  including statsmodels results objects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

import numpy as np
from scipy.optimize import curve_fit


@dataclass(frozen=True)
class ModelFit:
    """Container for least-squares fit outputs."""

    model: str
    params: np.ndarray
    fitted: np.ndarray
    resid: np.ndarray
    ss_res: float
    df_res: int
    n_obs: int
    r2: float
    kind: str = "polynomial"

    @property
    def n_params(self) -> int:
        return int(len(self.params))

    @property
    def llf(self) -> float:
        """Gaussian log-likelihood at the least-squares solution.

        Note:
            Matches ``logLik`` for ``lm``/``nls`` fits in R and ``llf`` for
            statsmodels OLS results (error variance profiled out as RSS/n).
        """
        n = float(self.n_obs)
        if n <= 0 or self.ss_res <= 0:
            return math.nan
        return float(-0.5 * n * (math.log(2.0 * math.pi) + math.log(self.ss_res / n) + 1.0))


def _finite_pairs(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.shape != y_arr.shape:
        raise ValueError("x and y must have the same shape.")
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    return x_arr[mask], y_arr[mask]


def _r_squared(y: np.ndarray, ss_res: float) -> float:
    ss_tot = float(np.sum(np.square(y - np.mean(y))))
    return float(1.0 - ss_res / ss_tot) if ss_tot > 0 else math.nan


def fit_polynomial_model(
    x: np.ndarray,
    y: np.ndarray,
    degree: int,
    model_name: str,
    weights: np.ndarray | None = None,
) -> ModelFit:
    """Fit an unweighted or weighted polynomial model by least squares.

    Args:
        x (numpy.ndarray): Predictor values.
        y (numpy.ndarray): Response values.
        degree (int): Polynomial degree; ``0`` fits the mean only.
        model_name (str): Label used in comparison tables.
        weights (numpy.ndarray, optional): Positive observation weights.

    Returns:
        ModelFit: Fit summary with residual sum of squares and residual df.

    Raises:
        ValueError: If ``degree`` is negative, there are not more finite
            points than parameters, or weights are invalid.
    """
    if degree < 0:
        raise ValueError("degree must be >= 0.")
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if weights is not None:
        w = np.asarray(weights, dtype=float)
        if len(w) != len(x_arr):
            raise ValueError("weights length must match x/y length.")
        if np.any(w <= 0) or np.any(~np.isfinite(w)):
            raise ValueError("weights must be finite and positive.")
    mask = np.isfinite(x_arr) & np.isfinite(y_arr)
    x_arr = x_arr[mask]
    y_arr = y_arr[mask]
    n = int(len(x_arr))
    if n <= degree + 1:
        raise ValueError(
            f"Insufficient valid data for a degree-{degree} fit "
            f"({n} points, {degree + 1} parameters)."
        )

    design = np.vander(x_arr, N=degree + 1, increasing=True)
    if weights is None:
        beta, *_ = np.linalg.lstsq(design, y_arr, rcond=None)
        resid = y_arr - design @ beta
        ss_res = float(np.sum(np.square(resid)))
    else:
        w = np.asarray(weights, dtype=float)[mask]
        sqrt_w = np.sqrt(w)
        beta, *_ = np.linalg.lstsq(design * sqrt_w[:, None], y_arr * sqrt_w, rcond=None)
        resid = y_arr - design @ beta
        ss_res = float(np.sum(w * np.square(resid)))

    fitted = design @ beta
    return ModelFit(
        model=model_name,
        params=np.asarray(beta, dtype=float),
        fitted=np.asarray(fitted, dtype=float),
        resid=np.asarray(resid, dtype=float),
        ss_res=ss_res,
        df_res=int(n - (degree + 1)),
        n_obs=n,
        r2=_r_squared(y_arr, ss_res),
        kind="polynomial",
    )


def fit_nonlinear_model(
    func: Callable[..., np.ndarray],
    x: np.ndarray,
    y: np.ndarray,
    p0: Sequence[float],
    model_name: str,
    **curve_fit_kwargs,
) -> ModelFit:
    """Fit a nonlinear model ``y = func(x, *params)`` by least squares.

    Typical fisheries uses are von Bertalanffy growth curves with parameters
    shared or separated among groups, compared afterwards with
    :func:`fishstats.stats.comparison.extra_ss`.

    Raises:
        ValueError: If there are not more finite points than parameters.
        RuntimeError: Propagated from ``curve_fit`` when it fails to converge.
    """
    x_arr, y_arr = _finite_pairs(x, y)
    n_par = len(p0)
    n = int(len(x_arr))
    if n <= n_par:
        raise ValueError(
            f"Insufficient valid data for a nonlinear fit "
            f"({n} points, {n_par} parameters)."
        )

    params, _ = curve_fit(func, x_arr, y_arr, p0=list(p0), **curve_fit_kwargs)
    fitted = np.asarray(func(x_arr, *params), dtype=float)
    resid = y_arr - fitted
    ss_res = float(np.sum(np.square(resid)))
    return ModelFit(
        model=model_name,
        params=np.asarray(params, dtype=float),
        fitted=fitted,
        resid=resid,
        ss_res=ss_res,
        df_res=int(n - n_par),
        n_obs=n,
        r2=_r_squared(y_arr, ss_res),
        kind="nonlinear",
    )


def model_kind(model: object) -> str:
    """Return a label used to check that compared models are alike."""
    if isinstance(model, ModelFit):
        return f"ModelFit[{model.kind}]"
    return type(model).__name__


def model_statistics(model: object) -> Tuple[float, float, float]:
    """Return ``(rss, df_resid, llf)`` for a supported fitted model.

    Supported objects are :class:`ModelFit` and statsmodels results exposing
    ``df_resid`` and ``llf`` (``ssr`` is optional; GLM results lack it and
    report ``nan`` RSS).

    Raises:
        TypeError: If the object does not expose residual df and a
            log-likelihood.
    """
    if isinstance(model, ModelFit):
        return float(model.ss_res), float(model.df_res), float(model.llf)

    if not (hasattr(model, "df_resid") and hasattr(model, "llf")):
        raise TypeError(
            f"Unsupported model object of type {type(model).__name__!r}; "
            "expected a ModelFit or a statsmodels results object."
        )
    rss = float(getattr(model, "ssr", math.nan))
    return rss, float(model.df_resid), float(model.llf)
