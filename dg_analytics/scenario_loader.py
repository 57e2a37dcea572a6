"""
Scenario configuration loader for the DG solar model.

Responsibilities:
- Load YAML / JSON scenario files.
- Perform light structural checks only; field-level rules live in the
  schema registry (see dg_analytics.schema_guard).
- Turn the raw mapping into the engine's immutable parameter groups.

The loader is the sanitisation boundary in front of the engine: blank or
non-numeric numeric fields become 0, exactly as the input form always did.
The engine itself never coerces or validates.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from dg_analytics.config_schema import RequiredFieldSpec, register_required_fields
from dg_finance.contracts import (
    ADJUSTMENT_TYPES,
    CostParams,
    FinancialParams,
    ModelSettings,
    SystemParams,
    TariffParams,
)
from dg_finance.irr import IRR_METHODS
from dg_finance.utils import as_float, as_int

logger = logging.getLogger(__name__)


class ScenarioConfigError(ValueError):
    """Configuration-level error for scenario loading."""


@dataclass(frozen=True)
class ScenarioInputs:
    """The four engine parameter groups plus model settings."""

    system: SystemParams
    cost: CostParams
    tariff: TariffParams
    financial: FinancialParams
    settings: ModelSettings


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def _load_raw_config(path: Path) -> Dict[str, Any]:
    """
    Load a raw scenario configuration from YAML or JSON.

    Only checks that the top level is a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Scenario config not found: {path}")

    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".yml", ".yaml"):
            data = yaml.safe_load(f)
        elif suffix == ".json":
            data = json.load(f)
        else:
            raise ScenarioConfigError(
                f"Unsupported scenario config extension '{suffix}' for {path}"
            )

    if data is None:
        raise ScenarioConfigError(f"Empty configuration in file: {path}")

    if not isinstance(data, dict):
        raise ScenarioConfigError(
            f"Expected a mapping at top level of {path}, "
            f"got {type(data).__name__}"
        )

    return data


def _ensure_meta_source(cfg: Dict[str, Any], path: Path) -> None:
    """Attach a lightweight 'meta.source_path' breadcrumb if absent."""
    meta = cfg.setdefault("meta", {})
    if isinstance(meta, dict):
        meta.setdefault("source_path", str(path))


def _section(cfg: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = cfg.get(name)
    if section is None:
        return {}
    if not isinstance(section, Mapping):
        raise ScenarioConfigError(
            f"Section '{name}' must be a mapping, got {type(section).__name__}"
        )
    return section


def _resolve_first(section: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-None value among candidate keys."""
    for key in keys:
        val = section.get(key)
        if val is not None:
            return val
    return None


def _num(section: Mapping[str, Any], *keys: str) -> float:
    """Numeric field; blank, missing or non-numeric becomes 0.0."""
    return as_float(_resolve_first(section, *keys), 0.0)


# ---------------------------------------------------------------------------
# Parameter group builders
# ---------------------------------------------------------------------------


def build_system_params(cfg: Mapping[str, Any]) -> SystemParams:
    s = _section(cfg, "system")
    return SystemParams(
        power_kwp=_num(s, "power_kwp", "power"),
        annual_generation_mwh=_num(s, "annual_generation_mwh", "annual_generation"),
        contracted_demand_kw=_num(s, "contracted_demand_kw", "contracted_demand"),
    )


def build_cost_params(cfg: Mapping[str, Any]) -> CostParams:
    c = _section(cfg, "cost")
    capex_total = as_float(_resolve_first(c, "capex_total"), None)
    return CostParams(
        capex_per_wp=_num(c, "capex_per_wp"),
        capex_total=capex_total or None,
        insurance_pct=_num(c, "insurance_pct", "insurance_percent"),
        om_pct=_num(c, "om_pct", "om_percent"),
        adm_pct=_num(c, "adm_pct", "adm_percent"),
        rent_monthly=_num(c, "rent_monthly", "rent"),
        inverter_replace_pct=_num(c, "inverter_replace_pct", "inverter_replace_percent"),
    )


def build_tariff_params(cfg: Mapping[str, Any]) -> TariffParams:
    t = _section(cfg, "tariff")
    return TariffParams(
        energy_tariff=_num(t, "energy_tariff", "te"),
        tusd=_num(t, "tusd"),
        tusdg_demand=_num(t, "tusdg_demand"),
        tusdc_demand=_num(t, "tusdc_demand"),
        icms_pct=_num(t, "icms_pct", "icms_percent"),
        pis_cofins_pct=_num(t, "pis_cofins_pct", "pis_cofins_percent"),
    )


def build_financial_params(cfg: Mapping[str, Any]) -> FinancialParams:
    f = _section(cfg, "financial")

    raw_type = _resolve_first(f, "adjustment_type")
    adjustment_type = "IPCA" if raw_type is None else str(raw_type).strip().upper()
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise ScenarioConfigError(
            f"financial.adjustment_type must be one of {', '.join(ADJUSTMENT_TYPES)}, "
            f"got {raw_type!r}"
        )

    raw_dep = _resolve_first(f, "depreciation_years")
    depreciation_years = as_int(raw_dep, 0)
    if depreciation_years < 1 or as_float(raw_dep) != depreciation_years:
        # Engine divisor; enforced even in relaxed mode.
        raise ScenarioConfigError(
            f"financial.depreciation_years must be a whole number of years >= 1, "
            f"got {raw_dep!r}"
        )

    return FinancialParams(
        discount_rate_pct=_num(f, "discount_rate_pct", "discount_rate"),
        adjustment_type=adjustment_type,
        adjustment_rate_pct=_num(f, "adjustment_rate_pct", "adjustment_rate"),
        annual_degradation_pct=_num(f, "annual_degradation_pct", "annual_degradation"),
        depreciation_years=depreciation_years,
        project_years=as_int(
            _resolve_first(f, "project_years", "project_life_years"), 0
        ),
    )


def build_model_settings(cfg: Mapping[str, Any]) -> ModelSettings:
    """Model overrides from the optional ``model`` section."""
    m = _section(cfg, "model")
    defaults = ModelSettings()

    irr_method = str(_resolve_first(m, "irr_method") or defaults.irr_method).lower()
    if irr_method not in IRR_METHODS:
        raise ScenarioConfigError(
            f"model.irr_method must be one of {', '.join(IRR_METHODS)}, got {irr_method!r}"
        )

    return ModelSettings(
        inverter_replacement_year=as_int(
            _resolve_first(m, "inverter_replacement_year"),
            defaults.inverter_replacement_year,
        ),
        corporate_tax_rate_pct=as_float(
            _resolve_first(m, "corporate_tax_rate_pct"),
            defaults.corporate_tax_rate_pct,
        ),
        irr_method=irr_method,
        irr_max_iterations=as_int(
            _resolve_first(m, "irr_max_iterations"), defaults.irr_max_iterations
        ),
        irr_tolerance=as_float(
            _resolve_first(m, "irr_tolerance"), defaults.irr_tolerance
        ),
    )


def build_scenario_inputs(cfg: Mapping[str, Any]) -> ScenarioInputs:
    """Convert a raw config mapping into engine inputs."""
    inputs = ScenarioInputs(
        system=build_system_params(cfg),
        cost=build_cost_params(cfg),
        tariff=build_tariff_params(cfg),
        financial=build_financial_params(cfg),
        settings=build_model_settings(cfg),
    )
    logger.debug("Scenario inputs resolved: %s", inputs)
    return inputs


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_scenario_config(path: str | Path) -> Dict[str, Any]:
    """
    Load and lightly normalise a scenario configuration.

    - Loads YAML/JSON and ensures a top-level mapping.
    - Attaches meta.source_path for traceability.
    - Does NOT check individual fields; see dg_analytics.schema_guard.
    """
    p = Path(path)
    cfg = _load_raw_config(p)
    _ensure_meta_source(cfg, p)
    logger.debug("Loaded scenario config %s (sections: %s)", p, sorted(cfg))
    return cfg


def scenario_name_for(cfg: Mapping[str, Any], path: Optional[str | Path] = None) -> str:
    name = cfg.get("scenario_name")
    if name:
        return str(name)
    if path is not None:
        return Path(path).stem
    return "default_scenario"


# ---------------------------------------------------------------------------
# Schema registration for the optional ``model`` section
# ---------------------------------------------------------------------------

_SETTINGS_SPECS = [
    RequiredFieldSpec(
        module="settings",
        name="inverter_replacement_year",
        paths=[("model", "inverter_replacement_year")],
        required=False,
        validator=lambda v: v is None or (as_int(v) is not None and as_int(v) >= 1),
        description="Year of the one-off inverter replacement (default 10).",
    ),
    RequiredFieldSpec(
        module="settings",
        name="corporate_tax_rate_pct",
        paths=[("model", "corporate_tax_rate_pct")],
        required=False,
        validator=lambda v: v is None or as_float(v) is not None,
        description="Corporate tax rate for the depreciation shield (default 34%).",
    ),
    RequiredFieldSpec(
        module="settings",
        name="irr_method",
        paths=[("model", "irr_method")],
        required=False,
        validator=lambda v: v is None or str(v).lower() in IRR_METHODS,
        description="IRR solver: 'step' (default) or 'bisection'.",
    ),
]

register_required_fields("settings", _SETTINGS_SPECS)


__all__ = [
    "ScenarioConfigError",
    "ScenarioInputs",
    "load_scenario_config",
    "build_system_params",
    "build_cost_params",
    "build_tariff_params",
    "build_financial_params",
    "build_model_settings",
    "build_scenario_inputs",
    "scenario_name_for",
]
