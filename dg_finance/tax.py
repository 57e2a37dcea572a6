"""Tax calculator: indirect taxes on revenue and the depreciation tax shield."""
from __future__ import annotations

from typing import Dict

from dg_finance.utils import pct

DEFAULT_CORPORATE_TAX_RATE_PCT = 34.0


def indirect_taxes(revenue: float, icms_pct: float, pis_cofins_pct: float) -> Dict[str, float]:
    return {
        "icms": revenue * pct(icms_pct),
        "pis_cofins": revenue * pct(pis_cofins_pct),
    }


def annual_depreciation(initial_investment: float, depreciation_years: int) -> float:
    """Straight-line charge. A zero period raises ZeroDivisionError."""
    return initial_investment / depreciation_years


def depreciation_tax_benefit(
    initial_investment: float,
    depreciation_years: int,
    year: int,
    corporate_tax_rate_pct: float = DEFAULT_CORPORATE_TAX_RATE_PCT,
) -> float:
    """Tax saved by deducting depreciation, for years 1..depreciation_years."""
    if year > depreciation_years:
        return 0.0
    return annual_depreciation(initial_investment, depreciation_years) * pct(
        corporate_tax_rate_pct
    )


class TaxCalculator:
    """Tax calculation engine bound to one depreciation policy."""

    def __init__(
        self,
        depreciation_years: int,
        corporate_tax_rate_pct: float = DEFAULT_CORPORATE_TAX_RATE_PCT,
    ) -> None:
        self.depreciation_years: int = depreciation_years
        self.corporate_tax_rate_pct: float = corporate_tax_rate_pct

    def depreciation(self, initial_investment: float) -> float:
        return annual_depreciation(initial_investment, self.depreciation_years)

    def tax_benefit(self, initial_investment: float, year: int) -> float:
        return depreciation_tax_benefit(
            initial_investment,
            self.depreciation_years,
            year,
            self.corporate_tax_rate_pct,
        )


__all__ = [
    "DEFAULT_CORPORATE_TAX_RATE_PCT",
    "indirect_taxes",
    "annual_depreciation",
    "depreciation_tax_benefit",
    "TaxCalculator",
]
