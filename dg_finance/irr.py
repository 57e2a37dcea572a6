"""NPV and IRR calculations for the DG solar projection.

Two conventions live here:

- ``npv(rate, cashflows)`` is the classic periodic form with the first
  element at t=0 and the rate as a decimal.
- ``project_npv`` / ``solve_irr`` work the way the projection reports them:
  the initial investment sits at t=0, yearly net flows at t=1..N and all
  rates are percentages.

IRR solvers
-----------
``step`` (default) is an adaptive single-direction search: start at 10% with
a 10 pp step, move up while NPV is positive, move down and halve the step
while it is not. The step never re-expands. ``bisection`` brackets the root
on [-99%, 500%] and halves the bracket. On long horizons a bound whose
discount factor underflows or overflows is pulled halfway towards 0 until NPV
is finite. Both are bounded and return a best-effort rate flagged
``converged=False`` instead of raising.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, Optional, Sequence, Tuple

from dg_finance.contracts import IrrResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_TOLERANCE = 1e-6

STEP_INITIAL_GUESS = 0.10
STEP_INITIAL_STEP = 0.10

BISECTION_LOW = -0.99
BISECTION_HIGH = 5.0
BRACKET_SHRINK_ATTEMPTS = 8


# ============================================================================
# NPV
# ============================================================================


def npv(rate: float, cashflows: Sequence[float]) -> float:
    """Classic periodic Net Present Value.

    NPV(r) = sum_{t=0..N} CF[t] / (1+r)^t

    Parameters
    ----------
    rate : float
        Discount rate (decimal, e.g. 0.12 for 12%)
    cashflows : Sequence[float]
        Cashflow series starting at t=0

    Examples
    --------
    >>> round(npv(0.10, [-1000, 500, 500, 500]), 3)
    243.426
    """
    total = 0.0
    for t, cf in enumerate(cashflows):
        total += float(cf) / ((1.0 + rate) ** t)
    return total


def project_npv(
    initial_investment: float,
    cash_flows: Sequence[float],
    discount_rate_pct: float,
) -> float:
    """NPV = -initial + sum_{y=1..N} CF[y] / (1 + r/100)^y. Closed form."""
    return npv(discount_rate_pct / 100.0, [-initial_investment, *cash_flows])


# ============================================================================
# IRR
# ============================================================================


def _safe_npv(rate: float, flows: Sequence[float]) -> Optional[float]:
    """NPV, or None when the discount factor underflows or overflows."""
    try:
        value = npv(rate, flows)
    except (ZeroDivisionError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def _usable_bound(bound: float, flows: Sequence[float]) -> Tuple[float, Optional[float]]:
    """Move ``bound`` towards 0 until NPV can be evaluated there."""
    for _ in range(BRACKET_SHRINK_ATTEMPTS):
        value = _safe_npv(bound, flows)
        if value is not None:
            return bound, value
        bound /= 2.0
    return bound, None


def _irr_step_search(
    initial_investment: float,
    cash_flows: Sequence[float],
    max_iterations: int,
    tolerance: float,
) -> IrrResult:
    """Adaptive decreasing-step search. Internal use only.

    Guess and step are decimals; the result is reported in percent.
    """
    guess = STEP_INITIAL_GUESS
    step = STEP_INITIAL_STEP
    flows = [-initial_investment, *cash_flows]

    for i in range(max_iterations):
        value = _safe_npv(guess, flows)
        if value is None:
            logger.warning(
                "IRR step search: NPV not finite at %.6f%%; stopping after %d iterations",
                guess * 100.0,
                i,
            )
            return IrrResult(guess * 100.0, False, i, "step")

        if abs(value) < tolerance:
            return IrrResult(guess * 100.0, True, i + 1, "step")

        if value > 0:
            guess += step
        else:
            guess -= step
            step /= 2.0

    logger.warning(
        "IRR step search did not converge in %d iterations; returning %.6f%%",
        max_iterations,
        guess * 100.0,
    )
    return IrrResult(guess * 100.0, False, max_iterations, "step")


def _irr_bisection(
    initial_investment: float,
    cash_flows: Sequence[float],
    max_iterations: int,
    tolerance: float,
) -> IrrResult:
    """Bracketing bisection solver. Internal use only.

    Search domain: [-0.99, 5.0] (-99% to 500%), narrowed towards 0 where
    the discount factor leaves the float range.
    """
    flows = [-initial_investment, *cash_flows]
    lo, f_lo = _usable_bound(BISECTION_LOW, flows)
    hi, f_hi = _usable_bound(BISECTION_HIGH, flows)

    if f_lo is None or f_hi is None:
        mid = (lo + hi) / 2.0
        logger.warning(
            "IRR bisection: NPV not finite at the bracket bounds; returning midpoint"
        )
        return IrrResult(mid * 100.0, False, 0, "bisection")

    if abs(f_lo) < tolerance:
        return IrrResult(lo * 100.0, True, 0, "bisection")
    if abs(f_hi) < tolerance:
        return IrrResult(hi * 100.0, True, 0, "bisection")

    if (f_lo > 0) == (f_hi > 0):
        mid = (lo + hi) / 2.0
        logger.warning(
            "IRR bisection: no sign change on [%.2f%%, %.2f%%]; returning midpoint",
            lo * 100.0,
            hi * 100.0,
        )
        return IrrResult(mid * 100.0, False, 0, "bisection")

    for i in range(max_iterations):
        mid = (lo + hi) / 2.0
        f_mid = _safe_npv(mid, flows)
        if f_mid is None:
            break

        if abs(f_mid) < tolerance:
            return IrrResult(mid * 100.0, True, i + 1, "bisection")

        if (f_lo < 0) == (f_mid < 0):
            lo, f_lo = mid, f_mid
        else:
            hi, f_hi = mid, f_mid

    mid = (lo + hi) / 2.0
    logger.warning(
        "IRR bisection did not converge in %d iterations; returning %.6f%%",
        max_iterations,
        mid * 100.0,
    )
    return IrrResult(mid * 100.0, False, max_iterations, "bisection")


_SOLVERS: Dict[str, Callable[[float, Sequence[float], int, float], IrrResult]] = {
    "step": _irr_step_search,
    "bisection": _irr_bisection,
}

IRR_METHODS = tuple(_SOLVERS)


def solve_irr(
    initial_investment: float,
    cash_flows: Sequence[float],
    method: str = "step",
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
) -> IrrResult:
    """Internal Rate of Return of ``-initial`` followed by ``cash_flows``.

    Returns
    -------
    IrrResult
        ``rate_pct`` in percent plus whether ``|NPV| < tolerance`` was reached.

    Notes
    -----
    - Targets the usual single-sign-change profile (one outlay, then inflows).
      Sequences with several sign changes may not converge or may land on a
      spurious root; callers must check ``converged``.

    Raises
    ------
    ValueError
        If ``method`` is not a known solver.
    """
    try:
        solver = _SOLVERS[method]
    except KeyError:
        raise ValueError(
            f"Unknown IRR method '{method}'; expected one of {', '.join(IRR_METHODS)}"
        ) from None

    result = solver(
        float(initial_investment),
        [float(cf) for cf in cash_flows],
        max_iterations,
        tolerance,
    )
    logger.debug(
        "IRR (%s): %.6f%% converged=%s after %d iterations",
        result.method,
        result.rate_pct,
        result.converged,
        result.iterations,
    )
    return result


__all__ = [
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_TOLERANCE",
    "IRR_METHODS",
    "npv",
    "project_npv",
    "solve_irr",
]
