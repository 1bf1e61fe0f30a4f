"""
A Python package for fisheries stock-assessment statistics.

Compares nested fitted models, estimates open-population abundance from
mark-recapture data and plots age-length keys.

Modules:
    - stats: Extra sum-of-squares F-tests and likelihood-ratio tests.
    - markrecap: Capture-history summaries and Jolly-Seber estimates.
    - alk: Age-length key construction and checks.
    - plotting: Age-length key figures and shared plot style.
    - output: CSV export of estimates and comparison tables.
"""

__version__ = "1.0.0"

from .alk import age_length_key, check_alk
from .markrecap import CapHistSummary, MrOpenResult, cap_hist_sum, mr_open
from .output import save_comparison_to_csv, save_mr_open_to_csv
from .plotting import alk_plot, choose_colors
from .stats import extra_ss, format_comparison, lrt

__all__ = [
    # Model comparison
    "extra_ss",
    "lrt",
    "format_comparison",
    # Mark-recapture
    "CapHistSummary",
    "MrOpenResult",
    "cap_hist_sum",
    "mr_open",
    # Age-length keys
    "age_length_key",
    "check_alk",
    "alk_plot",
    "choose_colors",
    # Output
    "save_mr_open_to_csv",
    "save_comparison_to_csv",
]
