"""Contracts and data structures for the DG solar projection engine.

Central repository for the parameter groups consumed by the engine and the
value objects it produces. Every structure is frozen: a projection run never
mutates its inputs and hands back a result that collaborators read only.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

ADJUSTMENT_TYPES = ("IPCA", "ENERGY")


# =============================================================================
# Input parameter groups
# =============================================================================


@dataclass(frozen=True)
class SystemParams:
    """Technical description of the plant."""

    power_kwp: float
    annual_generation_mwh: float  # P90 yield
    contracted_demand_kw: float


@dataclass(frozen=True)
class CostParams:
    """Capex and operating cost rates.

    ``capex_total`` overrides the per-Wp rate when it is set to a non-zero
    value. Percentages are expressed in percent (1.0 == 1%).
    """

    capex_per_wp: float
    insurance_pct: float
    om_pct: float
    adm_pct: float
    rent_monthly: float  # year-1 value
    inverter_replace_pct: float
    capex_total: Optional[float] = None


@dataclass(frozen=True)
class TariffParams:
    """Energy, distribution and demand tariffs plus indirect tax rates."""

    energy_tariff: float  # currency / MWh
    tusd: float  # currency / MWh
    tusdg_demand: float  # currency / kW / month
    tusdc_demand: float  # currency / kW / month
    icms_pct: float
    pis_cofins_pct: float


@dataclass(frozen=True)
class FinancialParams:
    """Discounting, escalation, degradation and horizon settings."""

    discount_rate_pct: float
    adjustment_rate_pct: float
    annual_degradation_pct: float
    depreciation_years: int
    project_years: int
    adjustment_type: str = "IPCA"


@dataclass(frozen=True)
class ModelSettings:
    """Business constants that a scenario may override.

    Defaults reproduce the standard model: inverters are replaced once in
    year 10 and the depreciation tax shield uses a 34% corporate rate.
    """

    inverter_replacement_year: int = 10
    corporate_tax_rate_pct: float = 34.0
    irr_method: str = "step"
    irr_max_iterations: int = 1000
    irr_tolerance: float = 1e-6


# =============================================================================
# Engine outputs
# =============================================================================


@dataclass(frozen=True)
class YearlyRecord:
    """One project year of the cash-flow schedule (all values in currency
    except ``generation`` in MWh)."""

    year: int
    generation: float
    revenue: float
    om_cost: float
    insurance_cost: float
    adm_cost: float
    rent_cost: float
    inverter_cost: float
    taxes_icms: float
    taxes_pis_cofins: float
    depreciation: float
    tax_benefit: float
    net_cash_flow: float
    cumulative_cash_flow: float
    discounted_cash_flow: float
    cumulative_discounted_cash_flow: float

    @property
    def operating_cost(self) -> float:
        return (
            self.om_cost
            + self.insurance_cost
            + self.adm_cost
            + self.rent_cost
            + self.inverter_cost
        )

    @property
    def total_taxes(self) -> float:
        return self.taxes_icms + self.taxes_pis_cofins


@dataclass(frozen=True)
class IrrResult:
    """IRR solver outcome. ``rate_pct`` is a percentage (12.5 == 12.5%)."""

    rate_pct: float
    converged: bool
    iterations: int
    method: str


@dataclass(frozen=True)
class ProjectionResult:
    """Complete projection: yearly schedule plus aggregate metrics."""

    years: Tuple[YearlyRecord, ...]
    initial_investment: float
    npv: float
    irr: float
    payback_year: int
    discounted_payback_year: int
    total_revenue: float
    total_operational_costs: float
    total_taxes: float
    irr_converged: bool = True
    meta: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    def cash_flows(self) -> List[float]:
        """Net cash flows for years 1..N (initial investment excluded)."""
        return [rec.net_cash_flow for rec in self.years]

    def to_dict(self) -> Dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["years"] = [asdict(rec) for rec in self.years]
        out["meta"] = dict(self.meta)
        return out


__all__ = [
    "ADJUSTMENT_TYPES",
    "SystemParams",
    "CostParams",
    "TariffParams",
    "FinancialParams",
    "ModelSettings",
    "YearlyRecord",
    "IrrResult",
    "ProjectionResult",
]
