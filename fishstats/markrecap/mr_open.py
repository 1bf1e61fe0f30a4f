"""Jolly-Seber open-population estimates from a Method B table.

Point estimates use Seber's bias-adjusted (+1) forms:

    M_i   = m_i + (R_i + 1) z_i / (r_i + 1)        marked fish at risk
    N_i   = (n_i + 1) M_i / (m_i + 1)              population size
    p_i   = n_i / N_i                              capture probability
    phi_i = M_{i+1} / (M_i - m_i + R_i)            apparent survival
    B_i   = N_{i+1} - phi_i (N_i - n_i + R_i)      additions

where ``r_i`` is the number of the ``R_i`` released fish that were seen again
and ``z_i`` the number marked before ``i``, missed at ``i`` and seen after
``i``. ``M``, ``N`` and ``p`` are estimable for events 2..k-1, ``phi`` for
1..k-2 and ``B`` for 2..k-2.

Standard errors follow Jolly (1965) as given by Pollock et al. (1990) and
Krebs (1999). Confidence intervals are normal-theory for ``method="jolly"``
and use Manly's (1984) transformations for ``method="manly"``.

References:
    Jolly, G.M. 1965. Biometrika 52:225-247.
    Seber, G.A.F. 1965. Biometrika 52:249-259.
    Manly, B.F.J. 1984. Biometrics 40:749-758.
    Pollock, K.H., J.D. Nichols, C. Brownie, and J.E. Hines. 1990.
    Wildlife Monographs 107.
    Krebs, C.J. 1999. Ecological Methodology, 2nd ed.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd
from scipy.stats import norm

from ..schema import EstimateColumns
from .caphist import CapHistSummary
from .validation import check_conf_level, check_mb_bot, check_mb_top

logger = logging.getLogger(__name__)

METHODS: tuple[str, ...] = ("jolly", "manly")
SUMMARY_PARMS: tuple[str, ...] = ("M", "N", "p", "phi", "B")
CONFINT_PARMS: tuple[str, ...] = ("N", "p", "phi", "B")
DEFAULT_CONF_LEVEL = 0.95
MIN_EVENTS = 3

COLS = EstimateColumns()


@dataclass
class MrOpenResult:
    """Jolly-Seber results with their observables and confidence intervals.

    Attributes:
        mb_top: Validated Method B top.
        mb_bot: Validated Method B bottom (rows ``m``, ``u``, ``n``, ``R``).
        observables: Per-event ``m``, ``n``, ``R``, ``r`` and ``z``.
        estimates: Per-event estimates and standard errors.
        ci: Per-event confidence limits for ``N``, ``p``, ``phi`` and ``B``.
        method: ``"jolly"`` or ``"manly"`` (confidence-interval method).
        conf_level: Confidence level fixed when the object was built.
        phi_full: Whether the ``phi`` standard error includes individual
            survival variability.
    """

    mb_top: pd.DataFrame
    mb_bot: pd.DataFrame
    observables: pd.DataFrame
    estimates: pd.DataFrame
    ci: pd.DataFrame
    method: str
    conf_level: float
    phi_full: bool

    def summary(
        self, parm: str | Sequence[str] | None = None, verbose: bool = False
    ) -> pd.DataFrame:
        """Return estimates and standard errors for the requested parameters.

        Args:
            parm: Any of ``"M"``, ``"N"``, ``"p"``, ``"phi"``, ``"B"``;
                ``None`` returns all of them.
            verbose (bool): Print the observables table and an estimates
                heading before returning.

        Raises:
            ValueError: If ``parm`` names an unknown parameter.
        """
        parms = _match_parms(parm, SUMMARY_PARMS, default=SUMMARY_PARMS)
        if verbose:
            print("Observables:")
            print(self.observables.to_string())
            print()
            print(
                f"Estimates (phi.se includes "
                f"{'sampling and individual' if self.phi_full else 'only sampling'} "
                "variability):"
            )
        cols = []
        for p in parms:
            cols.extend([p, f"{p}{COLS.se_suffix}"])
        return self.estimates[cols].copy()

    def confint(
        self,
        parm: str | Sequence[str] = "all",
        conf_level: float | None = None,
    ) -> pd.DataFrame:
        """Return confidence limits computed when the object was built.

        Args:
            parm: ``"all"`` or any of ``"N"``, ``"p"``, ``"phi"``, ``"B"``.
            conf_level: Ignored with a warning; the level is fixed by
                :func:`mr_open`.

        Raises:
            ValueError: If ``parm`` names an unknown parameter.
        """
        if conf_level is not None:
            warnings.warn(
                f"The confidence level was set to {self.conf_level:g} in "
                "mr_open(). It cannot be changed here.",
                UserWarning,
                stacklevel=2,
            )
        parms = _match_parms(parm, CONFINT_PARMS + ("all",), default=CONFINT_PARMS)
        if "all" in parms:
            parms = CONFINT_PARMS
        if self.method == "manly" and "B" in parms:
            logger.info(
                "Manly did not provide a method for constructing confidence "
                "intervals for B."
            )
        cols = []
        for p in parms:
            cols.extend([f"{p}{COLS.lci_suffix}", f"{p}{COLS.uci_suffix}"])
        return self.ci[cols].copy()


def _match_parms(
    parm: str | Sequence[str] | None,
    choices: Sequence[str],
    default: Sequence[str],
) -> tuple[str, ...]:
    if parm is None:
        return tuple(default)
    requested = [parm] if isinstance(parm, str) else list(parm)
    bad = [p for p in requested if p not in choices]
    if bad or not requested:
        opts = ", ".join(f"'{c}'" for c in choices)
        raise ValueError(f"'parm' should be one of {opts}; got {bad or requested!r}.")
    return tuple(requested)


def _div(num: np.ndarray, den: np.ndarray) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.asarray(num, dtype=float) / np.asarray(den, dtype=float)
    out[~np.isfinite(out)] = np.nan
    return out


def _sqrt(var: np.ndarray) -> np.ndarray:
    var = np.asarray(var, dtype=float)
    out = np.full_like(var, np.nan)
    ok = np.isfinite(var) & (var >= 0)
    out[ok] = np.sqrt(var[ok])
    return out


def _shift(values: np.ndarray) -> np.ndarray:
    """Return ``values[i + 1]`` at position ``i`` (``NaN`` at the end)."""
    out = np.full_like(np.asarray(values, dtype=float), np.nan)
    out[:-1] = values[1:]
    return out


def _mask(values: np.ndarray, start: int, stop: int) -> np.ndarray:
    """Keep ``values[start:stop]`` and blank the rest."""
    out = np.full_like(np.asarray(values, dtype=float), np.nan)
    out[start:stop] = values[start:stop]
    return out


def method_b_observables(mb_top: pd.DataFrame, mb_bot: pd.DataFrame) -> pd.DataFrame:
    """Compute ``r`` and ``z`` from a validated Method B table.

    Returns:
        pandas.DataFrame: One row per event with ``m``, ``n``, ``R``, ``r``, ``z``.
    """
    top = mb_top.to_numpy(dtype=float)
    k = top.shape[0]
    r = np.nansum(top, axis=1)
    z = np.array([np.nansum(top[:i, i + 1 :]) for i in range(k)], dtype=float)
    return pd.DataFrame(
        {
            "m": mb_bot.loc["m"].to_numpy(dtype=float),
            "n": mb_bot.loc["n"].to_numpy(dtype=float),
            "R": mb_bot.loc["R"].to_numpy(dtype=float),
            "r": r,
            "z": z,
        },
        index=mb_bot.columns,
    )


def _jolly_estimates(obs: pd.DataFrame, phi_full: bool) -> dict[str, np.ndarray]:
    m = obs["m"].to_numpy(dtype=float)
    n = obs["n"].to_numpy(dtype=float)
    R = obs["R"].to_numpy(dtype=float)
    r = obs["r"].to_numpy(dtype=float)
    z = obs["z"].to_numpy(dtype=float)
    k = len(m)

    M = m + _div((R + 1.0) * z, r + 1.0)
    N = _div((n + 1.0) * M, m + 1.0)
    at_risk = M - m + R
    phi = _div(_shift(M), at_risk)
    B = _shift(N) - phi * (N - n + R)
    p = _div(n, N)

    dr = 1.0 / (r + 1.0) - 1.0 / (R + 1.0)
    alpha = (m + 1.0) / (n + 1.0)

    var_M = (M - m) * (M - m + R) * dr
    var_N = N * (N - n) * (_div(M - m + R + 1.0, M + 1.0) * dr + (1.0 - alpha) / (m + 1.0))
    rel_var_M_next = _shift(_div(var_M, M**2))
    var_phi = phi**2 * (rel_var_M_next + _div(M - m, at_risk) * dr)
    if phi_full:
        var_phi = var_phi + _div(phi * (1.0 - phi), at_risk)

    N_next = _shift(N)
    var_B = (
        B**2 * rel_var_M_next
        + _div(M - m, at_risk) * (phi * R * (1.0 - alpha) / alpha) ** 2 * dr
        + _div((N - n) * (N_next - B) * (1.0 - alpha) * (1.0 - phi), at_risk)
        + _shift(N * (N - n) * (1.0 - alpha) / (m + 1.0))
        + phi**2 * N * (N - n) * (1.0 - alpha) / (m + 1.0)
    )
    se_N = _sqrt(var_N)

    return {
        "M": _mask(M, 1, k - 1),
        "M.se": _mask(_sqrt(var_M), 1, k - 1),
        "N": _mask(N, 1, k - 1),
        "N.se": _mask(se_N, 1, k - 1),
        "p": _mask(p, 1, k - 1),
        "p.se": _mask(_div(n * se_N, N**2), 1, k - 1),
        "phi": _mask(phi, 0, k - 2),
        "phi.se": _mask(_sqrt(var_phi), 0, k - 2),
        "B": _mask(B, 1, k - 2),
        "B.se": _mask(_sqrt(var_B), 1, k - 2),
        # carried for the Manly limits
        "_dr": dr,
    }


def _normal_limits(est: np.ndarray, se: np.ndarray, zcrit: float) -> tuple[np.ndarray, np.ndarray]:
    return est - zcrit * se, est + zcrit * se


def _manly_limits(
    obs: pd.DataFrame, est: dict[str, np.ndarray], zcrit: float
) -> dict[str, np.ndarray]:
    m = obs["m"].to_numpy(dtype=float)
    n = obs["n"].to_numpy(dtype=float)
    R = obs["R"].to_numpy(dtype=float)
    dr = est["_dr"]
    M = est["M"]
    N = est["N"]
    phi = est["phi"]

    with np.errstate(divide="ignore", invalid="ignore"):
        p_hat = n / N
        t1 = np.log(N) + np.log((1.0 - p_hat / 2.0 + np.sqrt(1.0 - p_hat)) / 2.0)
        var_t1 = _div(M - m + R + 1.0, M + 1.0) * dr + 1.0 / (m + 1.0) - 1.0 / (n + 1.0)
        half = zcrit * _sqrt(var_t1)
        e_lo = np.exp(t1 - half)
        e_hi = np.exp(t1 + half)
        n_lci = (4.0 * e_lo + n) ** 2 / (16.0 * e_lo)
        n_uci = (4.0 * e_hi + n) ** 2 / (16.0 * e_hi)

        var_t2 = dr + _shift(dr) + _shift(1.0 / (m + 1.0) - 1.0 / (n + 1.0))
        half2 = zcrit * _sqrt(var_t2)
        phi_lci = np.exp(np.log(phi) - half2)
        phi_uci = np.exp(np.log(phi) + half2)

    nan = np.full_like(N, np.nan)
    return {
        "N.lci": n_lci,
        "N.uci": n_uci,
        "p.lci": _div(n, n_uci),
        "p.uci": _div(n, n_lci),
        "phi.lci": phi_lci,
        "phi.uci": phi_uci,
        "B.lci": nan,
        "B.uci": nan.copy(),
    }


def mr_open(
    mb_top: pd.DataFrame | CapHistSummary,
    mb_bot: pd.DataFrame | None = None,
    method: str = "jolly",
    conf_level: float = DEFAULT_CONF_LEVEL,
    phi_full: bool = True,
) -> MrOpenResult:
    """Estimate open-population parameters with the Jolly-Seber model.

    Args:
        mb_top: Square Method B top (``NaN`` on and below the diagonal), or a
            :class:`~fishstats.markrecap.caphist.CapHistSummary` when
            ``mb_bot`` is omitted.
        mb_bot (pandas.DataFrame, optional): Method B bottom with rows
            ``m``, ``u``, ``n``, ``R`` and one column per event.
        method (str): Confidence-interval method, ``"jolly"`` or ``"manly"``.
        conf_level (float): Confidence level, strictly between 0 and 1.
        phi_full (bool): Include individual survival variability in the
            ``phi`` standard error.

    Returns:
        MrOpenResult: Observables, estimates, standard errors and limits.

    Raises:
        ValueError: If the inputs violate any structural constraint; the
            message names the constraint.
    """
    if mb_bot is None:
        if isinstance(mb_top, CapHistSummary):
            mb_bot = mb_top.mb_bot
            mb_top = mb_top.mb_top
        else:
            raise ValueError(
                "Must have a 'mb_top' and a 'mb_bot' or a CapHistSummary object."
            )
    method_key = str(method).lower()
    if method_key not in METHODS:
        raise ValueError(f"'method' must be one of {METHODS}; got {method!r}.")
    level = check_conf_level(conf_level)

    top = check_mb_top(mb_top)
    bot = check_mb_bot(mb_bot, top)
    if top.shape[0] < MIN_EVENTS:
        raise ValueError(
            f"Method B tables must cover at least {MIN_EVENTS} sampling events; "
            f"got {top.shape[0]}."
        )

    obs = method_b_observables(top, bot)
    est = _jolly_estimates(obs, phi_full=phi_full)
    zcrit = float(norm.ppf(1.0 - (1.0 - level) / 2.0))

    if method_key == "jolly":
        limits = {}
        for p in CONFINT_PARMS:
            lo, hi = _normal_limits(est[p], est[f"{p}.se"], zcrit)
            limits[f"{p}.lci"] = lo
            limits[f"{p}.uci"] = hi
    else:
        limits = _manly_limits(obs, est, zcrit)

    index = obs.index
    est_cols = [c for c in est if not c.startswith("_")]
    estimates = pd.DataFrame({c: est[c] for c in est_cols}, index=index)
    ci = pd.DataFrame(limits, index=index)

    logger.debug(
        "mr_open: %d events, method=%s, conf_level=%.3f", len(index), method_key, level
    )
    return MrOpenResult(
        mb_top=top,
        mb_bot=bot,
        observables=obs,
        estimates=estimates,
        ci=ci,
        method=method_key,
        conf_level=level,
        phi_full=bool(phi_full),
    )


def iter_estimate_pairs(parms: Iterable[str] = SUMMARY_PARMS) -> list[tuple[str, str]]:
    """Return ``(estimate, standard error)`` column pairs for reporting."""
    return [(p, f"{p}{COLS.se_suffix}") for p in parms]
