"""Result aggregator: the single public entry point of the engine.

``compute_projection`` runs the cash-flow assembler, the valuation metrics
and the payback locator in dependency order and returns one immutable
:class:`~dg_finance.contracts.ProjectionResult`. It adds no error handling of
its own; malformed inputs surface from the lower layers.
"""

from __future__ import annotations

import logging
from typing import Optional

from dg_finance.cashflow import build_annual_rows
from dg_finance.contracts import (
    CostParams,
    FinancialParams,
    ModelSettings,
    ProjectionResult,
    SystemParams,
    TariffParams,
)
from dg_finance.irr import project_npv, solve_irr
from dg_finance.payback import find_payback_year

logger = logging.getLogger(__name__)


def compute_projection(
    system: SystemParams,
    cost: CostParams,
    tariff: TariffParams,
    financial: FinancialParams,
    settings: Optional[ModelSettings] = None,
) -> ProjectionResult:
    """Project the investment year by year and derive NPV, IRR and paybacks.

    Parameters
    ----------
    system, cost, tariff, financial :
        The four parameter groups, already sanitised by the caller.
    settings : Optional[ModelSettings]
        Business-constant overrides and IRR solver options.

    Returns
    -------
    ProjectionResult
        ``years`` has exactly ``financial.project_years`` records.
    """
    settings = settings or ModelSettings()

    schedule = build_annual_rows(system, cost, tariff, financial, settings)
    cash_flows = [rec.net_cash_flow for rec in schedule.records]

    npv_value = project_npv(
        schedule.initial_investment,
        cash_flows,
        financial.discount_rate_pct,
    )
    irr_result = solve_irr(
        schedule.initial_investment,
        cash_flows,
        method=settings.irr_method,
        max_iterations=settings.irr_max_iterations,
        tolerance=settings.irr_tolerance,
    )

    payback_year = find_payback_year(
        [rec.cumulative_cash_flow for rec in schedule.records]
    )
    discounted_payback_year = find_payback_year(
        [rec.cumulative_discounted_cash_flow for rec in schedule.records]
    )

    logger.info(
        "Projection: investment=%.2f | NPV=%.2f | IRR=%.2f%% | payback=%d | "
        "discounted payback=%d",
        schedule.initial_investment,
        npv_value,
        irr_result.rate_pct,
        payback_year,
        discounted_payback_year,
    )

    return ProjectionResult(
        years=schedule.records,
        initial_investment=schedule.initial_investment,
        npv=npv_value,
        irr=irr_result.rate_pct,
        payback_year=payback_year,
        discounted_payback_year=discounted_payback_year,
        total_revenue=schedule.total_revenue,
        total_operational_costs=schedule.total_operational_costs,
        total_taxes=schedule.total_taxes,
        irr_converged=irr_result.converged,
        meta={
            "irr_method": irr_result.method,
            "irr_iterations": irr_result.iterations,
            "adjustment_type": financial.adjustment_type,
        },
    )


__all__ = ["compute_projection"]
