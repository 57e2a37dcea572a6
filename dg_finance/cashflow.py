"""Cash Flow Module for the DG solar projection engine.

FEATURES & CALCULATION ORDER:
-----------------------------
- Year-by-year schedule for years 1..project_years, strictly increasing
- Net cash flow = revenue - O&M - insurance - admin - rent - inverter
  - ICMS - PIS/COFINS + depreciation tax benefit
- Cumulative nominal and discounted series both start from -initial investment
  (year-0 baseline, not itself a record)
- Running totals of revenue, operating cost and taxes accumulated alongside

The module also registers the config fields it needs with
:mod:`dg_analytics.config_schema` so the schema guard can check scenario
files before the engine runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from dg_analytics.config_schema import RequiredFieldSpec, register_required_fields
from dg_finance import factors
from dg_finance.contracts import (
    ADJUSTMENT_TYPES,
    CostParams,
    FinancialParams,
    ModelSettings,
    SystemParams,
    TariffParams,
    YearlyRecord,
)
from dg_finance.tax import TaxCalculator, indirect_taxes
from dg_finance.utils import as_float, pct

logger = logging.getLogger(__name__)

WATTS_PER_KW = 1000.0


@dataclass(frozen=True)
class CashflowSchedule:
    """Assembled yearly records plus the totals accumulated with them."""

    initial_investment: float
    records: Tuple[YearlyRecord, ...]
    total_revenue: float
    total_operational_costs: float
    total_taxes: float


# =============================================================================
# Initial investment
# =============================================================================


def resolve_initial_investment(system: SystemParams, cost: CostParams) -> float:
    """Direct capex when supplied (non-zero), else per-Wp rate * power in W."""
    if cost.capex_total:
        return float(cost.capex_total)
    return cost.capex_per_wp * system.power_kwp * WATTS_PER_KW


def discount_factor(discount_rate_pct: float, year: int) -> float:
    return (1.0 + pct(discount_rate_pct)) ** year


# =============================================================================
# Yearly assembler
# =============================================================================


def build_annual_rows(
    system: SystemParams,
    cost: CostParams,
    tariff: TariffParams,
    financial: FinancialParams,
    settings: Optional[ModelSettings] = None,
) -> CashflowSchedule:
    """Assemble the yearly cash-flow schedule.

    Parameters
    ----------
    system, cost, tariff, financial :
        Immutable parameter groups for one calculation run.
    settings : Optional[ModelSettings]
        Replacement year / corporate tax rate overrides. Defaults reproduce
        year-10 inverter replacement and a 34% tax shield.

    Returns
    -------
    CashflowSchedule
        Records for years 1..project_years and the running totals.

    Notes
    -----
    - No validation is performed here; ``depreciation_years == 0`` raises
      ZeroDivisionError.
    """
    settings = settings or ModelSettings()
    initial_investment = resolve_initial_investment(system, cost)
    tax_calc = TaxCalculator(
        depreciation_years=financial.depreciation_years,
        corporate_tax_rate_pct=settings.corporate_tax_rate_pct,
    )
    depreciation = tax_calc.depreciation(initial_investment)

    logger.debug(
        "Building schedule: investment=%.2f | years=%d | discount=%.2f%%",
        initial_investment,
        financial.project_years,
        financial.discount_rate_pct,
    )

    # O&M and insurance are flat shares of the fixed investment.
    om = factors.om_cost(initial_investment, cost.om_pct)
    insurance = factors.insurance_cost(initial_investment, cost.insurance_pct)

    records: List[YearlyRecord] = []
    cumulative = -initial_investment
    cumulative_discounted = -initial_investment
    total_revenue = 0.0
    total_opex = 0.0
    total_taxes = 0.0

    for year in range(1, financial.project_years + 1):
        generation = factors.degraded_generation(
            system.annual_generation_mwh,
            financial.annual_degradation_pct,
            year,
        )
        revenue = factors.annual_revenue(
            generation,
            tariff.energy_tariff,
            tariff.tusd,
            system.contracted_demand_kw,
            tariff.tusdg_demand,
            tariff.tusdc_demand,
        )["revenue"]

        adm = factors.adm_cost(revenue, cost.adm_pct)
        rent = factors.rent_cost(cost.rent_monthly, financial.adjustment_rate_pct, year)
        inverter = factors.inverter_cost(
            initial_investment,
            cost.inverter_replace_pct,
            year,
            replacement_year=settings.inverter_replacement_year,
        )
        taxes = indirect_taxes(revenue, tariff.icms_pct, tariff.pis_cofins_pct)
        benefit = tax_calc.tax_benefit(initial_investment, year)

        net = (
            revenue
            - om
            - insurance
            - adm
            - rent
            - inverter
            - taxes["icms"]
            - taxes["pis_cofins"]
            + benefit
        )
        cumulative += net

        discounted = net / discount_factor(financial.discount_rate_pct, year)
        cumulative_discounted += discounted

        opex = om + insurance + adm + rent + inverter
        total_revenue += revenue
        total_opex += opex
        total_taxes += taxes["icms"] + taxes["pis_cofins"]

        records.append(
            YearlyRecord(
                year=year,
                generation=generation,
                revenue=revenue,
                om_cost=om,
                insurance_cost=insurance,
                adm_cost=adm,
                rent_cost=rent,
                inverter_cost=inverter,
                taxes_icms=taxes["icms"],
                taxes_pis_cofins=taxes["pis_cofins"],
                depreciation=depreciation,
                tax_benefit=benefit,
                net_cash_flow=net,
                cumulative_cash_flow=cumulative,
                discounted_cash_flow=discounted,
                cumulative_discounted_cash_flow=cumulative_discounted,
            )
        )

    logger.debug(
        "Schedule built: %d years | revenue=%.2f | opex=%.2f | taxes=%.2f",
        len(records),
        total_revenue,
        total_opex,
        total_taxes,
    )

    return CashflowSchedule(
        initial_investment=initial_investment,
        records=tuple(records),
        total_revenue=total_revenue,
        total_operational_costs=total_opex,
        total_taxes=total_taxes,
    )


# =============================================================================
# Schema registration (consumed by dg_analytics.schema_guard)
# =============================================================================


def _is_number(value: object) -> bool:
    return as_float(value) is not None


def _is_positive_int(value: object) -> bool:
    f = as_float(value)
    return f is not None and f >= 1 and float(f).is_integer()


_CASHFLOW_SPECS = [
    RequiredFieldSpec(
        module="cashflow",
        name="power_kwp",
        paths=[("system", "power_kwp"), ("system", "power")],
        validator=_is_number,
        description="Installed DC power (kWp).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="annual_generation_mwh",
        paths=[("system", "annual_generation_mwh"), ("system", "annual_generation")],
        validator=_is_number,
        description="P90 annual energy yield (MWh/year).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="capex",
        paths=[
            ("cost", "capex_per_wp"),
            ("cost", "capex_total"),
        ],
        validator=_is_number,
        description="Capex as a per-Wp rate or a direct total.",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="energy_tariff",
        paths=[("tariff", "energy_tariff"), ("tariff", "te")],
        validator=_is_number,
        description="Energy tariff TE (currency/MWh).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="discount_rate_pct",
        paths=[("financial", "discount_rate_pct"), ("financial", "discount_rate")],
        validator=_is_number,
        description="Discount rate (% per year).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="depreciation_years",
        paths=[("financial", "depreciation_years")],
        validator=_is_positive_int,
        description="Depreciation period in whole years (>= 1).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="project_years",
        paths=[("financial", "project_years"), ("financial", "project_life_years")],
        validator=_is_positive_int,
        description="Project horizon in whole years (>= 1).",
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="adjustment_type",
        paths=[("financial", "adjustment_type")],
        required=False,
        validator=lambda v: v is None or str(v).upper() in ADJUSTMENT_TYPES,
        description="Rent escalation index: IPCA or ENERGY.",
    ),
]

register_required_fields("cashflow", _CASHFLOW_SPECS)


__all__ = [
    "WATTS_PER_KW",
    "CashflowSchedule",
    "resolve_initial_investment",
    "discount_factor",
    "build_annual_rows",
]
