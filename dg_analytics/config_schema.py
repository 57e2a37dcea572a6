"""Field registry for DG solar scenario files.

Modules that consume scenario values declare them here when they are
imported: ``dg_finance.cashflow`` declares the plant, cost, tariff and
financial inputs; ``dg_analytics.scenario_loader`` declares the optional
``model`` overrides. :mod:`dg_analytics.schema_guard` checks raw configs
against whatever has been declared, and the Excel report dumps the same
registry on its "Campos" sheet.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

ValidatorFn = Callable[[Any], bool]
PathSpec = Tuple[str, ...]

SCHEMA_COLUMNS = [
    "module",
    "name",
    "paths",
    "required",
    "severity",
    "description",
]


@dataclass(frozen=True)
class RequiredFieldSpec:
    """One scenario input and where it may live in the file.

    ``paths`` are tried in order, so the canonical key comes first and
    aliases (``te`` for ``energy_tariff``, ``project_life_years`` for
    ``project_years``) follow. A ``warning`` severity is logged by the guard
    but never fails validation. ``validator`` receives the first non-null
    value found, or None when the field is absent.
    """

    module: str
    name: str
    paths: Sequence[PathSpec]
    required: bool = True
    severity: str = "error"
    description: str = ""
    validator: Optional[ValidatorFn] = field(default=None)


_REGISTRY: Dict[str, List[RequiredFieldSpec]] = {}


def register_required_fields(module: str, specs: Iterable[RequiredFieldSpec]) -> None:
    """Declare fields for ``module``; a repeated name overwrites its entry."""
    bucket = _REGISTRY.setdefault(module, [])
    for spec in specs:
        bucket[:] = [s for s in bucket if s.name != spec.name]
        bucket.append(spec)


def get_required_fields(module: Optional[str] = None) -> List[RequiredFieldSpec]:
    if module is not None:
        return list(_REGISTRY.get(module, []))
    return [spec for specs in _REGISTRY.values() for spec in specs]


def build_schema_dataframe(modules: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Registry as a table, one row per declared field.

    ``paths`` is flattened to ``"financial.project_years | financial.project_life_years"``
    so the frame can be written straight to a worksheet.
    """
    selected = modules if modules is not None else sorted(_REGISTRY)
    rows = [
        {
            "module": spec.module,
            "name": spec.name,
            "paths": " | ".join(".".join(p) for p in spec.paths),
            "required": spec.required,
            "severity": spec.severity,
            "description": spec.description,
        }
        for module in selected
        for spec in get_required_fields(module)
    ]
    if not rows:
        return pd.DataFrame(columns=SCHEMA_COLUMNS)
    return pd.DataFrame(rows, columns=SCHEMA_COLUMNS).sort_values(
        ["module", "name"], ignore_index=True
    )


__all__ = [
    "SCHEMA_COLUMNS",
    "RequiredFieldSpec",
    "register_required_fields",
    "get_required_fields",
    "build_schema_dataframe",
]
