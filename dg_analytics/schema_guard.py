"""
Schema guard for DG solar scenario configs.

This module sits on top of dg_analytics.config_schema and:
  * lazily imports engine modules so that their schema registration
    side-effects run; and
  * validates a raw config dict against all registered field specs.

Usage::

    from dg_analytics.schema_guard import validate_config

    validate_config(
        raw_config=config,
        config_path="scenarios/usina_100kwp.yaml",
        modules=["cashflow", "settings"],
    )
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import pandas as pd

from dg_analytics.config_schema import build_schema_dataframe, get_required_fields
from dg_finance.utils import get_nested

logger = logging.getLogger(__name__)

PathSpec = Tuple[str, ...]

DEFAULT_MODULES = ("cashflow", "settings")

VALIDATION_MODES = ("strict", "relaxed")


class ConfigValidationError(RuntimeError):
    """Raised when a YAML / JSON config is missing required fields."""


# ---------------------------------------------------------------------------
# Lazy import map – logical module name -> import path
# ---------------------------------------------------------------------------

_MODULE_IMPORTS: Dict[str, str] = {
    "cashflow": "dg_finance.cashflow",
    "settings": "dg_analytics.scenario_loader",
}


def _ensure_module_registered(name: str) -> None:
    """
    Import the module behind a logical name so its registration has run.
    Unknown names are a no-op.
    """
    module_path = _MODULE_IMPORTS.get(name)
    if not module_path:
        return
    importlib.import_module(module_path)


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------

def _first_resolved_value(raw_config: Mapping[str, Any], paths: Sequence[PathSpec]) -> Any:
    """
    Try each candidate path in order and return the first non-None value.

    A key that is present but null (e.g. ``capex_per_wp: null`` next to a
    ``capex_total``) does not shadow later candidates.
    """
    for path in paths:
        if not path:
            continue
        val = get_nested(raw_config, path)
        if val is not None:
            return val
    return None


def collect_violations(
    raw_config: Mapping[str, Any],
    modules: Sequence[str],
) -> List[str]:
    """
    Return one message per missing/invalid field across ``modules``.

    Warning-severity specs are logged, never returned.
    """
    for m in modules:
        _ensure_module_registered(m)

    specs: List[Any] = []
    for m in modules:
        specs.extend(get_required_fields(m))

    missing: List[str] = []

    for spec in specs:
        val = _first_resolved_value(raw_config, spec.paths)
        ok = True

        if spec.required and val is None:
            ok = False

        if ok and spec.validator is not None:
            try:
                ok = bool(spec.validator(val))
            except (TypeError, ValueError):
                ok = False

        if ok:
            continue

        path_labels = [".".join(p) for p in spec.paths] or ["<no paths registered>"]
        message = f"{spec.name} (paths: {', '.join(path_labels)})"
        if spec.severity.lower() == "error":
            missing.append(message)
        else:
            logger.warning("Config field check (warning): %s", message)

    return sorted(missing)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def describe_schema(modules: Sequence[str] = DEFAULT_MODULES) -> pd.DataFrame:
    """Registered fields of ``modules`` as a table, importing them first."""
    for m in modules:
        _ensure_module_registered(m)
    return build_schema_dataframe(modules)


def validate_config(
    raw_config: Dict[str, Any],
    config_path: str,
    modules: Sequence[str] = DEFAULT_MODULES,
    validation_mode: str = "strict",
) -> List[str]:
    """
    Validate a raw YAML/JSON config against all registered field specs
    for the given logical modules.

    Args:
        raw_config: The configuration dict loaded from YAML/JSON.
        config_path: Identifier used in error messages (usually the path).
        modules: Logical module names, e.g. ["cashflow", "settings"].
        validation_mode: "strict" raises on violations, "relaxed" logs them.

    Returns:
        The list of violation messages (empty when the config is clean).

    Raises:
        ConfigValidationError: in strict mode if any required field is
            missing or invalid.
        ValueError: for an unknown validation mode.
    """
    if validation_mode not in VALIDATION_MODES:
        raise ValueError(
            f"Unknown validation mode '{validation_mode}'; "
            f"expected one of {', '.join(VALIDATION_MODES)}"
        )

    missing = collect_violations(raw_config, modules)
    if not missing:
        return missing

    details = "; ".join(missing)
    if validation_mode == "strict":
        raise ConfigValidationError(
            f"Config '{config_path}' is missing or has invalid required fields: {details}"
        )

    logger.warning(
        "Config '%s' has invalid fields (relaxed mode, continuing): %s",
        config_path,
        details,
    )
    return missing


__all__ = [
    "VALIDATION_MODES",
    "ConfigValidationError",
    "DEFAULT_MODULES",
    "collect_violations",
    "describe_schema",
    "validate_config",
]
