"""Central scenario evaluator: config file in, projection result out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dg_analytics.scenario_loader import (
    ScenarioInputs,
    build_scenario_inputs,
    load_scenario_config,
    scenario_name_for,
)
from dg_analytics.schema_guard import validate_config
from dg_finance.contracts import ProjectionResult
from dg_finance.projection import compute_projection

logger = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    """Complete evaluation of one scenario file."""

    scenario_name: str
    config_path: str
    inputs: ScenarioInputs
    projection: ProjectionResult
    validation_mode: str = "strict"
    validation_warnings: List[str] = field(default_factory=list)
    config: Dict[str, Any] = field(default_factory=dict)


def evaluate_config(
    config: Dict[str, Any],
    config_path: str = "<memory>",
    scenario_name: Optional[str] = None,
    validation_mode: str = "strict",
) -> ScenarioResult:
    """Validate an already-loaded config mapping and run the projection."""
    warnings = validate_config(
        config,
        config_path=config_path,
        modules=["cashflow", "settings"],
        validation_mode=validation_mode,
    )

    inputs = build_scenario_inputs(config)
    projection = compute_projection(
        inputs.system,
        inputs.cost,
        inputs.tariff,
        inputs.financial,
        inputs.settings,
    )

    if scenario_name is None:
        scenario_name = scenario_name_for(
            config, None if config_path == "<memory>" else config_path
        )

    logger.info(
        "Scenario '%s': NPV=%.2f, IRR=%.2f%%, payback=%d, discounted payback=%d",
        scenario_name,
        projection.npv,
        projection.irr,
        projection.payback_year,
        projection.discounted_payback_year,
    )

    return ScenarioResult(
        scenario_name=scenario_name,
        config_path=str(config_path),
        inputs=inputs,
        projection=projection,
        validation_mode=validation_mode,
        validation_warnings=warnings,
        config=config,
    )


def evaluate_scenario(
    config_path: str | Path,
    scenario_name: Optional[str] = None,
    validation_mode: str = "strict",
) -> ScenarioResult:
    """Evaluate a single scenario file.

    Parameters
    ----------
    config_path : str | Path
        Path to YAML/JSON scenario config.
    scenario_name : Optional[str]
        Override scenario name (default: from config, else file stem).
    validation_mode : str
        "strict" or "relaxed" config validation.
    """
    path_obj = Path(config_path)
    logger.info("Loading scenario: %s", path_obj)
    config = load_scenario_config(path_obj)
    if scenario_name is None:
        scenario_name = scenario_name_for(config, path_obj)
    return evaluate_config(
        config,
        config_path=str(path_obj),
        scenario_name=scenario_name,
        validation_mode=validation_mode,
    )


def evaluate_scenario_as_dict(
    config_path: str | Path,
    validation_mode: str = "strict",
) -> Dict[str, Any]:
    """Flat dict view of :func:`evaluate_scenario` for JSON consumers."""
    result = evaluate_scenario(config_path=config_path, validation_mode=validation_mode)
    proj = result.projection

    return {
        "scenario_name": result.scenario_name,
        "config_path": result.config_path,
        "validation_mode": result.validation_mode,
        "validation_warnings": list(result.validation_warnings),
        "initial_investment": proj.initial_investment,
        "npv": proj.npv,
        "irr_pct": proj.irr,
        "irr_converged": proj.irr_converged,
        "payback_year": proj.payback_year,
        "discounted_payback_year": proj.discounted_payback_year,
        "total_revenue": proj.total_revenue,
        "total_operational_costs": proj.total_operational_costs,
        "total_taxes": proj.total_taxes,
        "years": proj.to_dict()["years"],
    }


__all__ = [
    "ScenarioResult",
    "evaluate_config",
    "evaluate_scenario",
    "evaluate_scenario_as_dict",
]
