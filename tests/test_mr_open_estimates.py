"""Tests for Jolly-Seber point estimates, standard errors and intervals."""

import logging
import math

import numpy as np
import pytest
from scipy.stats import norm

from fishstats.markrecap import cap_hist_sum, method_b_observables, mr_open


def test_observables_r_and_z(method_b_tables):
    top, bot = method_b_tables
    obs = method_b_observables(top, bot)
    assert list(obs["r"]) == [14, 14, 15, 0]
    assert list(obs["z"]) == [0, 4, 3, 0]


def test_point_estimates_by_hand(method_b_tables):
    top, bot = method_b_tables
    est = mr_open(top, bot).estimates

    M2 = 10 + 59 * 4 / 15
    M3 = 15 + 69 * 3 / 16
    N2 = 61 * M2 / 11
    N3 = 71 * M3 / 16
    phi1 = M2 / 50
    phi2 = M3 / (M2 - 10 + 58)

    assert est.loc[2, "M"] == pytest.approx(M2)
    assert est.loc[3, "M"] == pytest.approx(M3)
    assert est.loc[2, "N"] == pytest.approx(N2)
    assert est.loc[3, "N"] == pytest.approx(N3)
    assert est.loc[2, "p"] == pytest.approx(60 / N2)
    assert est.loc[1, "phi"] == pytest.approx(phi1)
    assert est.loc[2, "phi"] == pytest.approx(phi2)
    assert est.loc[2, "B"] == pytest.approx(N3 - phi2 * (N2 - 60 + 58))


def _hand_quantities():
    """Event 2 and 3 quantities for the fixture tables, 1-based events."""
    M2 = 10 + 59 * 4 / 15
    M3 = 15 + 69 * 3 / 16
    N2 = 61 * M2 / 11
    N3 = 71 * M3 / 16
    dr1 = 1 / 15 - 1 / 51
    dr2 = 1 / 15 - 1 / 59
    dr3 = 1 / 16 - 1 / 69
    at_risk2 = M2 - 10 + 58
    return M2, M3, N2, N3, dr1, dr2, dr3, at_risk2


def test_standard_errors_by_hand(method_b_tables):
    est = mr_open(*method_b_tables).estimates
    M2, M3, N2, N3, dr1, dr2, dr3, at_risk2 = _hand_quantities()
    a2 = 11 / 61
    a3 = 16 / 71
    phi1 = M2 / 50
    phi2 = M3 / at_risk2
    B2 = N3 - phi2 * (N2 - 60 + 58)

    var_M2 = (M2 - 10) * (M2 - 10 + 58) * dr2
    var_M3 = (M3 - 15) * (M3 - 15 + 68) * dr3
    var_N2 = N2 * (N2 - 60) * ((M2 - 10 + 59) / (M2 + 1) * dr2 + (1 - a2) / 11)
    var_phi1 = phi1**2 * var_M2 / M2**2 + phi1 * (1 - phi1) / 50
    var_phi2 = (
        phi2**2 * (var_M3 / M3**2 + (M2 - 10) / at_risk2 * dr2)
        + phi2 * (1 - phi2) / at_risk2
    )
    var_B2 = (
        B2**2 * var_M3 / M3**2
        + (M2 - 10) / at_risk2 * (phi2 * 58 * (1 - a2) / a2) ** 2 * dr2
        + (N2 - 60) * (N3 - B2) * (1 - a2) * (1 - phi2) / at_risk2
        + N3 * (N3 - 70) * (1 - a3) / 16
        + phi2**2 * N2 * (N2 - 60) * (1 - a2) / 11
    )

    assert est.loc[2, "M.se"] == pytest.approx(math.sqrt(var_M2))
    assert est.loc[3, "M.se"] == pytest.approx(math.sqrt(var_M3))
    assert est.loc[2, "N.se"] == pytest.approx(math.sqrt(var_N2))
    assert est.loc[2, "p.se"] == pytest.approx(60 * math.sqrt(var_N2) / N2**2)
    assert est.loc[1, "phi.se"] == pytest.approx(math.sqrt(var_phi1))
    assert est.loc[2, "phi.se"] == pytest.approx(math.sqrt(var_phi2))
    assert est.loc[2, "B.se"] == pytest.approx(math.sqrt(var_B2))

    sampling = mr_open(*method_b_tables, phi_full=False).estimates
    assert sampling.loc[1, "phi.se"] == pytest.approx(phi1 * math.sqrt(var_M2) / M2)


def test_manly_limits_by_hand(method_b_tables):
    ci = mr_open(*method_b_tables, method="manly", conf_level=0.95).ci
    M2, M3, N2, _, dr1, dr2, dr3, at_risk2 = _hand_quantities()
    z = norm.ppf(0.975)

    p2 = 60 / N2
    t1 = math.log(N2) + math.log((1 - p2 / 2 + math.sqrt(1 - p2)) / 2)
    half = z * math.sqrt((M2 - 10 + 59) / (M2 + 1) * dr2 + 1 / 11 - 1 / 61)
    e_lo, e_hi = math.exp(t1 - half), math.exp(t1 + half)
    n_lci = (4 * e_lo + 60) ** 2 / (16 * e_lo)
    n_uci = (4 * e_hi + 60) ** 2 / (16 * e_hi)

    assert ci.loc[2, "N.lci"] == pytest.approx(n_lci)
    assert ci.loc[2, "N.uci"] == pytest.approx(n_uci)
    assert ci.loc[2, "p.lci"] == pytest.approx(60 / n_uci)

    phi1 = M2 / 50
    half1 = z * math.sqrt(dr1 + dr2 + 1 / 11 - 1 / 61)
    assert ci.loc[1, "phi.lci"] == pytest.approx(phi1 * math.exp(-half1))
    assert ci.loc[1, "phi.uci"] == pytest.approx(phi1 * math.exp(half1))

    phi2 = M3 / at_risk2
    half2 = z * math.sqrt(dr2 + dr3 + 1 / 16 - 1 / 71)
    assert ci.loc[2, "phi.lci"] == pytest.approx(phi2 * math.exp(-half2))
    assert ci.loc[2, "phi.uci"] == pytest.approx(phi2 * math.exp(half2))


def test_inestimable_events_are_missing(method_b_tables):
    est = mr_open(*method_b_tables).estimates
    for parm in ("M", "N", "p"):
        assert np.isnan(est.loc[1, parm]) and np.isnan(est.loc[4, parm])
    assert np.isnan(est.loc[3, "phi"]) and np.isnan(est.loc[4, "phi"])
    assert est["B"].notna().sum() == 1
    assert (est[["M.se", "N.se", "phi.se"]].dropna() > 0).all().all()


def test_phi_se_without_individual_variability_is_smaller(method_b_tables):
    full = mr_open(*method_b_tables, phi_full=True).estimates
    sampling = mr_open(*method_b_tables, phi_full=False).estimates
    assert (sampling.loc[[1, 2], "phi.se"] < full.loc[[1, 2], "phi.se"]).all()
    assert sampling.loc[2, "N.se"] == pytest.approx(full.loc[2, "N.se"])


def test_jolly_intervals_are_normal_theory(method_b_tables):
    res = mr_open(*method_b_tables, conf_level=0.90)
    z = norm.ppf(0.95)
    ci = res.confint()
    N, se = res.estimates.loc[2, "N"], res.estimates.loc[2, "N.se"]

    assert list(ci.columns) == [
        "N.lci", "N.uci", "p.lci", "p.uci", "phi.lci", "phi.uci", "B.lci", "B.uci"
    ]
    assert ci.loc[2, "N.lci"] == pytest.approx(N - z * se)
    assert ci.loc[2, "N.uci"] == pytest.approx(N + z * se)


def test_manly_intervals(method_b_tables):
    res = mr_open(*method_b_tables, method="manly")
    ci = res.ci
    est = res.estimates

    assert ci.loc[2, "N.lci"] < est.loc[2, "N"] < ci.loc[2, "N.uci"]
    assert ci.loc[2, "p.lci"] == pytest.approx(60 / ci.loc[2, "N.uci"])
    assert ci.loc[2, "p.uci"] == pytest.approx(60 / ci.loc[2, "N.lci"])
    assert ci.loc[1, "phi.lci"] < est.loc[1, "phi"] < ci.loc[1, "phi.uci"]
    assert ci[["B.lci", "B.uci"]].isna().all().all()


def test_manly_b_interval_notice_is_logged(method_b_tables, caplog):
    res = mr_open(*method_b_tables, method="manly")
    with caplog.at_level(logging.INFO, logger="fishstats.markrecap.mr_open"):
        res.confint("B")
    assert "Manly did not provide a method" in caplog.text

    caplog.clear()
    with caplog.at_level(logging.INFO, logger="fishstats.markrecap.mr_open"):
        res.confint("N")
    assert "Manly" not in caplog.text


def test_summary_selects_parameters(method_b_tables, capsys):
    res = mr_open(*method_b_tables, phi_full=False)
    out = res.summary("N")
    assert list(out.columns) == ["N", "N.se"]

    res.summary(verbose=True)
    printed = capsys.readouterr().out
    assert printed.startswith("Observables:")
    assert "phi.se includes only sampling variability" in printed


def test_accepts_capture_history_summary(capture_histories):
    summary = cap_hist_sum(capture_histories, cols2ignore="id")
    from_summary = mr_open(summary)
    from_tables = mr_open(summary.mb_top, summary.mb_bot)

    assert list(from_summary.estimates.index) == ["s1", "s2", "s3"]
    assert from_summary.estimates.equals(from_tables.estimates)
    assert from_summary.estimates.loc["s2", "M"] == pytest.approx(2 + 4 * 1 / 3)
