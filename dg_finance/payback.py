"""Payback locator: first break-even year of a cumulative cash-flow series."""
from __future__ import annotations

from typing import Sequence

PAYBACK_NOT_FOUND = -1


def find_payback_year(cumulative_cash_flows: Sequence[float]) -> int:
    """Return the 1-based year whose cumulative value is first >= 0.

    Returns ``PAYBACK_NOT_FOUND`` (-1) when the series never breaks even
    within the analysis period. The year-0 baseline is not part of the
    series.

    Examples
    --------
    >>> find_payback_year([-300.0, -100.0, 50.0, 200.0])
    3
    >>> find_payback_year([-300.0, -200.0])
    -1
    """
    for i, value in enumerate(cumulative_cash_flows):
        if value >= 0:
            return i + 1
    return PAYBACK_NOT_FOUND


def has_payback(year: int) -> bool:
    return year != PAYBACK_NOT_FOUND


__all__ = ["PAYBACK_NOT_FOUND", "find_payback_year", "has_payback"]
