from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from dg_analytics.evaluate_scenario import ScenarioResult, evaluate_scenario
from dg_analytics.export_helpers import (
    ChartGenerator,
    ExcelExporter,
    format_currency,
    format_payback,
    format_percentage,
    write_csv,
)
from dg_analytics.scenario_loader import ScenarioConfigError
from dg_analytics.schema_guard import ConfigValidationError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dg-solar",
        description="DG solar investment projection (NPV / IRR / payback).",
    )
    p.add_argument(
        "--config",
        required=True,
        type=str,
        help="Path to YAML/JSON scenario (e.g., scenarios/usina_100kwp.yaml).",
    )
    p.add_argument(
        "--outputs-dir",
        default="outputs",
        type=str,
        help="Directory for artifacts (CSV, XLSX, PNG). Created if missing.",
    )
    p.add_argument(
        "--format",
        dest="format",
        choices=["text", "json", "csv", "xlsx"],
        default="text",
        help="text/json print to stdout; csv/xlsx write a report to outputs-dir.",
    )
    p.add_argument(
        "--charts",
        action="store_true",
        help="Also write the cumulative cash-flow and revenue-vs-costs PNGs.",
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )

    vm = p.add_mutually_exclusive_group()
    vm.add_argument(
        "--strict",
        action="store_true",
        help="Fail on missing/invalid scenario fields (default).",
    )
    vm.add_argument(
        "--relaxed",
        action="store_true",
        help="Log invalid scenario fields and run anyway (blanks become 0).",
    )

    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _render_summary(result: ScenarioResult, console: Console) -> None:
    proj = result.projection
    table = Table(title=f"Resumo do Projeto: {result.scenario_name}")
    table.add_column("Indicador")
    table.add_column("Valor", justify="right")

    irr_label = format_percentage(proj.irr)
    if not proj.irr_converged:
        irr_label += " (aprox.)"

    table.add_row("Investimento Inicial", format_currency(proj.initial_investment))
    table.add_row("VPL", format_currency(proj.npv))
    table.add_row("TIR", irr_label)
    table.add_row("Payback Simples", format_payback(proj.payback_year))
    table.add_row("Payback Descontado", format_payback(proj.discounted_payback_year))
    table.add_row("Receita Total", format_currency(proj.total_revenue))
    table.add_row("Custos Operacionais Totais", format_currency(proj.total_operational_costs))
    table.add_row("Impostos Totais", format_currency(proj.total_taxes))
    console.print(table)


def _result_as_json(result: ScenarioResult) -> str:
    proj = result.projection
    payload = {
        "scenario_name": result.scenario_name,
        "config_path": result.config_path,
        "validation_mode": result.validation_mode,
        "validation_warnings": result.validation_warnings,
        **proj.to_dict(),
    }
    payload.pop("meta", None)
    return json.dumps(payload, indent=2, ensure_ascii=False)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    validation_mode = "relaxed" if args.relaxed else "strict"

    try:
        result = evaluate_scenario(args.config, validation_mode=validation_mode)
    except (FileNotFoundError, ScenarioConfigError, ConfigValidationError) as exc:
        logger.error("Scenario could not be evaluated: %s", exc)
        console.print(f"[bold red]Error:[/bold red] {exc}")
        return EXIT_CONFIG_ERROR

    out_dir = Path(args.outputs_dir)
    chart_paths: List[Path] = []
    if args.charts:
        charts = ChartGenerator(out_dir)
        chart_paths.append(charts.plot_cumulative_cash_flow(result.projection))
        chart_paths.append(charts.plot_revenue_vs_costs(result.projection))

    if args.format == "json":
        print(_result_as_json(result))
    elif args.format == "csv":
        path = write_csv(result.projection, out_dir / f"{result.scenario_name}.csv")
        console.print(f"CSV report exported: {path}")
    elif args.format == "xlsx":
        path = ExcelExporter(out_dir / f"{result.scenario_name}.xlsx").export_projection(
            result.projection,
            scenario_name=result.scenario_name,
            chart_paths=chart_paths,
        )
        console.print(f"Workbook exported: {path}")
    else:
        _render_summary(result, console)

    for chart in chart_paths:
        logger.info("Chart exported: %s", chart)

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
