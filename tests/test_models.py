"""Tests for least-squares fit containers."""

import numpy as np
import pytest
import statsmodels.api as sm

from fishstats.stats.models import (
    ModelFit,
    fit_nonlinear_model,
    fit_polynomial_model,
    model_kind,
    model_statistics,
)


def _quadratic_data(n=40, seed=3):
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 10.0, n)
    y = 1.0 + 0.5 * x + 0.1 * x**2 + rng.normal(0.0, 0.8, n)
    return x, y


def test_polynomial_fit_matches_statsmodels_ols():
    x, y = _quadratic_data()
    fit = fit_polynomial_model(x, y, degree=2, model_name="quadratic")
    ols = sm.OLS(y, np.column_stack([np.ones_like(x), x, x**2])).fit()

    assert fit.df_res == 37
    assert fit.n_params == 3
    assert fit.ss_res == pytest.approx(ols.ssr, rel=1e-9)
    assert fit.llf == pytest.approx(ols.llf, rel=1e-9)
    np.testing.assert_allclose(fit.params, ols.params, rtol=1e-8)


def test_polynomial_fit_drops_nonfinite_points():
    x, y = _quadratic_data()
    y[[0, 5]] = np.nan
    fit = fit_polynomial_model(x, y, degree=1, model_name="linear")
    assert fit.n_obs == 38
    assert fit.df_res == 36


def test_polynomial_fit_requires_more_points_than_parameters():
    with pytest.raises(ValueError, match="Insufficient valid data"):
        fit_polynomial_model([1.0, 2.0, 3.0], [1.0, 2.0, 2.5], degree=2, model_name="q")


def test_polynomial_fit_rejects_nonpositive_weights():
    x, y = _quadratic_data(n=10)
    w = np.ones_like(x)
    w[3] = 0.0
    with pytest.raises(ValueError, match="weights must be finite and positive"):
        fit_polynomial_model(x, y, degree=1, model_name="w", weights=w)


def test_nonlinear_fit_recovers_von_bertalanffy_parameters():
    def vb(age, linf, k, t0):
        return linf * (1.0 - np.exp(-k * (age - t0)))

    ages = np.repeat(np.arange(1.0, 11.0), 3)
    rng = np.random.default_rng(11)
    lengths = vb(ages, 600.0, 0.3, -0.5) + rng.normal(0.0, 5.0, ages.size)

    fit = fit_nonlinear_model(vb, ages, lengths, p0=[500.0, 0.2, 0.0], model_name="vb")

    assert isinstance(fit, ModelFit)
    assert fit.kind == "nonlinear"
    assert fit.df_res == ages.size - 3
    assert fit.params[0] == pytest.approx(600.0, rel=0.05)
    assert fit.params[1] == pytest.approx(0.3, rel=0.2)


def test_model_kind_separates_fit_types():
    x, y = _quadratic_data(n=12)
    poly = fit_polynomial_model(x, y, degree=1, model_name="linear")
    assert model_kind(poly) == "ModelFit[polynomial]"
    ols = sm.OLS(y, sm.add_constant(x)).fit()
    assert model_kind(ols) != model_kind(poly)


def test_model_statistics_reads_statsmodels_results():
    x, y = _quadratic_data(n=20)
    ols = sm.OLS(y, sm.add_constant(x)).fit()
    rss, df_resid, llf = model_statistics(ols)
    assert rss == pytest.approx(ols.ssr)
    assert df_resid == 18
    assert llf == pytest.approx(ols.llf)


def test_model_statistics_rejects_unsupported_objects():
    with pytest.raises(TypeError, match="Unsupported model object"):
        model_statistics({"rss": 1.0})
