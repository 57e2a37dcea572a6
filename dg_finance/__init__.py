"""DG solar projection engine: yearly cash flows, NPV, IRR and payback."""

from dg_finance.contracts import (
    CostParams,
    FinancialParams,
    ModelSettings,
    ProjectionResult,
    SystemParams,
    TariffParams,
    YearlyRecord,
)
from dg_finance.projection import compute_projection

__all__ = [
    "SystemParams",
    "CostParams",
    "TariffParams",
    "FinancialParams",
    "ModelSettings",
    "YearlyRecord",
    "ProjectionResult",
    "compute_projection",
]
