"""Define standardized column names for estimate tables."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EstimateColumns:
    """Container for standardized column labels.

    These labels are shared by the Jolly-Seber estimate and confidence-interval
    tables and by the CSV export, so downstream code can pair each estimate
    with its uncertainty columns.

    Attributes:
        se_suffix: Appended to a parameter name for its standard error
            (``"N.se"``).
        lci_suffix: Appended to a parameter name for its lower confidence
            limit (``"N.lci"``).
        uci_suffix: Appended to a parameter name for its upper confidence
            limit (``"N.uci"``).
        reported_suffix: Appended to a column name for its formatted,
            uncertainty-rounded text version.
    """

    se_suffix: str = ".se"
    lci_suffix: str = ".lci"
    uci_suffix: str = ".uci"
    reported_suffix: str = " (reported)"
