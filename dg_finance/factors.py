"""Per-year factor calculators for the DG solar cash-flow schedule.

Each function derives one physical or financial quantity for a single project
year from the immutable inputs. They hold no state and have no side effects;
the assembler in :mod:`dg_finance.cashflow` combines them year by year.

Compounding convention
----------------------
Degradation and rent escalation both compound geometrically from a year-0
baseline, so year 1 already carries one full year of decay / escalation.
"""

from __future__ import annotations

from typing import Dict

from dg_finance.utils import pct

MONTHS_PER_YEAR = 12

# =============================================================================
# Generation & revenue
# =============================================================================


def degraded_generation(
    base_generation_mwh: float,
    degradation_pct: float,
    year: int,
) -> float:
    """Energy yield for ``year`` after geometric degradation (MWh)."""
    return base_generation_mwh * ((1.0 - pct(degradation_pct)) ** year)


def energy_revenue(generation_mwh: float, energy_tariff: float, tusd: float) -> float:
    """Energy-side revenue = generation * (TE + TUSD)."""
    return generation_mwh * (energy_tariff + tusd)


def demand_revenue(
    contracted_demand_kw: float,
    tusdg_demand: float,
    tusdc_demand: float,
) -> float:
    """Annualised demand revenue from the monthly generation/consumption
    demand tariffs. Contracted demand does not degrade, so this is constant
    across the horizon."""
    return contracted_demand_kw * (tusdg_demand + tusdc_demand) * MONTHS_PER_YEAR


def annual_revenue(
    generation_mwh: float,
    energy_tariff: float,
    tusd: float,
    contracted_demand_kw: float,
    tusdg_demand: float,
    tusdc_demand: float,
) -> Dict[str, float]:
    """Return the energy, demand and total revenue components for one year."""
    energy = energy_revenue(generation_mwh, energy_tariff, tusd)
    demand = demand_revenue(contracted_demand_kw, tusdg_demand, tusdc_demand)
    return {
        "energy_revenue": energy,
        "demand_revenue": demand,
        "revenue": energy + demand,
    }


# =============================================================================
# Operating costs
# =============================================================================


def om_cost(initial_investment: float, om_pct: float) -> float:
    """O&M as a flat share of the initial investment."""
    return initial_investment * pct(om_pct)


def insurance_cost(initial_investment: float, insurance_pct: float) -> float:
    """Insurance as a flat share of the initial investment."""
    return initial_investment * pct(insurance_pct)


def adm_cost(revenue: float, adm_pct: float) -> float:
    """Administrative cost, the only cost indexed to the year's revenue."""
    return revenue * pct(adm_pct)


def rent_cost(rent_monthly: float, adjustment_rate_pct: float, year: int) -> float:
    """Annual rent escalated from the year-1 monthly value."""
    return rent_monthly * MONTHS_PER_YEAR * ((1.0 + pct(adjustment_rate_pct)) ** year)


def inverter_cost(
    initial_investment: float,
    inverter_replace_pct: float,
    year: int,
    replacement_year: int = 10,
) -> float:
    """One-off inverter replacement, charged only in ``replacement_year``."""
    if year != replacement_year:
        return 0.0
    return initial_investment * pct(inverter_replace_pct)


__all__ = [
    "MONTHS_PER_YEAR",
    "degraded_generation",
    "energy_revenue",
    "demand_revenue",
    "annual_revenue",
    "om_cost",
    "insurance_cost",
    "adm_cost",
    "rent_cost",
    "inverter_cost",
]
