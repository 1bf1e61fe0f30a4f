"""
Mark-recapture estimation for open populations.

Modules:
    caphist:
        Summarize individual 0/1 capture histories into history
        frequencies, per-event totals and a Method B table.

    validation:
        Structural checks on Method B tops and bottoms and on the
        confidence level.

    mr_open:
        Jolly-Seber estimates of marked population, population size,
        capture probability, survival and additions, with Jolly or Manly
        confidence intervals.
"""

from .caphist import CapHistSummary, cap_hist_sum
from .mr_open import MrOpenResult, method_b_observables, mr_open
from .validation import check_conf_level, check_mb_bot, check_mb_top

__all__ = [
    "CapHistSummary",
    "cap_hist_sum",
    "MrOpenResult",
    "mr_open",
    "method_b_observables",
    "check_conf_level",
    "check_mb_top",
    "check_mb_bot",
]
