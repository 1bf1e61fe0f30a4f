"""
Statistical utilities for model comparison.

This subpackage provides least-squares fit containers and nested-model tests.
All functions operate on arrays and fitted model objects; no fisheries-specific
logic is included.

Modules:
    models:
        Polynomial and nonlinear least-squares fits returning ``ModelFit``,
        plus RSS / residual df / log-likelihood extraction that also accepts
        statsmodels results.

    comparison:
        Extra sum-of-squares F-tests and likelihood-ratio tests of one or
        more simple models against a single more complex model.

Design Principle:
    This subpackage has no dependencies on markrecap/, alk/ or plotting/.
"""

from .comparison import extra_ss, format_comparison, lrt
from .models import (
    ModelFit,
    fit_nonlinear_model,
    fit_polynomial_model,
    model_statistics,
)

__all__ = [
    "extra_ss",
    "lrt",
    "format_comparison",
    "ModelFit",
    "fit_polynomial_model",
    "fit_nonlinear_model",
    "model_statistics",
]
