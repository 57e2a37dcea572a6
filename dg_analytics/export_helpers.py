from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import matplotlib

matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.ticker import FuncFormatter

from dg_analytics.schema_guard import describe_schema
from dg_finance.contracts import ProjectionResult, YearlyRecord
from dg_finance.payback import has_payback

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

REPORT_TITLE = "Análise Financeira - Geração Distribuída"
CSV_DELIMITER = ";"
DEFAULT_CSV_FILENAME = "analise-financeira.csv"
NO_PAYBACK_LABEL = "Não atingido"

# (record attribute, CSV / sheet header)
CASH_FLOW_COLUMNS: List[Tuple[str, str]] = [
    ("year", "Ano"),
    ("generation", "Geração (MWh)"),
    ("revenue", "Receita (R$)"),
    ("om_cost", "Custos O&M (R$)"),
    ("insurance_cost", "Seguros (R$)"),
    ("adm_cost", "Custos ADM (R$)"),
    ("rent_cost", "Aluguel (R$)"),
    ("inverter_cost", "Custos Inversores (R$)"),
    ("taxes_icms", "ICMS (R$)"),
    ("taxes_pis_cofins", "PIS/COFINS (R$)"),
    ("depreciation", "Depreciação (R$)"),
    ("tax_benefit", "Benefício Fiscal (R$)"),
    ("net_cash_flow", "Fluxo de Caixa (R$)"),
    ("cumulative_cash_flow", "Fluxo Acumulado (R$)"),
    ("discounted_cash_flow", "Fluxo Descontado (R$)"),
    ("cumulative_discounted_cash_flow", "Fluxo Descontado Acumulado (R$)"),
]


# =====================================================================
# Formatting
# =====================================================================


def format_currency(value: float) -> str:
    """pt-BR BRL formatting: 1234.5 -> 'R$ 1.234,50' (non-breaking space)."""
    text = f"{abs(value):,.2f}".translate(str.maketrans(",.", ".,"))
    sign = "-" if value < 0 and text != "0,00" else ""
    return f"{sign}R$\u00a0{text}"


def format_percentage(value: float) -> str:
    return f"{value:.2f}%"


def format_number(value: float, decimals: int = 2) -> str:
    return f"{value:.{decimals}f}"


def format_payback(year: int) -> str:
    if not has_payback(year):
        return NO_PAYBACK_LABEL
    return f"{year} anos"


# =====================================================================
# Delimited text report + structured summary
# =====================================================================


def _summary_lines(result: ProjectionResult) -> List[str]:
    d = CSV_DELIMITER
    return [
        "Resumo do Projeto",
        f"Investimento Inicial{d}{format_currency(result.initial_investment)}",
        f"VPL{d}{format_currency(result.npv)}",
        f"TIR{d}{format_percentage(result.irr)}",
        f"Payback Simples{d}{format_payback(result.payback_year)}",
        f"Payback Descontado{d}{format_payback(result.discounted_payback_year)}",
        f"Receita Total{d}{format_currency(result.total_revenue)}",
        f"Custos Operacionais Totais{d}{format_currency(result.total_operational_costs)}",
        f"Impostos Totais{d}{format_currency(result.total_taxes)}",
    ]


def _csv_row(rec: YearlyRecord) -> str:
    cells = [str(rec.year)]
    for attr, _ in CASH_FLOW_COLUMNS[1:]:
        cells.append(format_number(getattr(rec, attr)))
    return CSV_DELIMITER.join(cells)


def generate_csv(result: ProjectionResult) -> str:
    """Semicolon-delimited report: summary block, blank line, yearly table."""
    header = CSV_DELIMITER.join(label for _, label in CASH_FLOW_COLUMNS)
    rows = [_csv_row(rec) for rec in result.years]
    return "\n".join(["", *_summary_lines(result), "", header, *rows])


def write_csv(result: ProjectionResult, path: PathLike = DEFAULT_CSV_FILENAME) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(generate_csv(result), encoding="utf-8")
    logger.info("CSV report written to %s", out)
    return out


def build_report_payload(result: ProjectionResult) -> Dict[str, Any]:
    """Structured summary for external (PDF) rendering.

    Per-year ``costs`` covers O&M, insurance, admin and rent; the one-off
    inverter replacement shows up only in the net cash flow.
    """
    return {
        "title": REPORT_TITLE,
        "summary": {
            "initialInvestment": format_currency(result.initial_investment),
            "npv": format_currency(result.npv),
            "irr": format_percentage(result.irr),
            "payback": format_payback(result.payback_year),
            "discountedPayback": format_payback(result.discounted_payback_year),
        },
        "cashFlow": [
            {
                "year": rec.year,
                "generation": format_number(rec.generation),
                "revenue": format_currency(rec.revenue),
                "costs": format_currency(
                    rec.om_cost + rec.insurance_cost + rec.adm_cost + rec.rent_cost
                ),
                "taxes": format_currency(rec.total_taxes),
                "netCashFlow": format_currency(rec.net_cash_flow),
                "cumulativeCashFlow": format_currency(rec.cumulative_cash_flow),
            }
            for rec in result.years
        ],
    }


# =====================================================================
# DataFrame views
# =====================================================================


def projection_to_dataframe(result: ProjectionResult) -> pd.DataFrame:
    """One row per project year, columns named after the record fields."""
    columns = [attr for attr, _ in CASH_FLOW_COLUMNS]
    df = pd.DataFrame(
        [{attr: getattr(rec, attr) for attr in columns} for rec in result.years],
        columns=columns,
    )
    df["operating_cost"] = [rec.operating_cost for rec in result.years]
    df["total_taxes"] = [rec.total_taxes for rec in result.years]
    return df


def summary_to_dataframe(
    result: ProjectionResult,
    scenario_name: str = "default_scenario",
) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "scenario_name": scenario_name,
                "initial_investment": result.initial_investment,
                "npv": result.npv,
                "irr_pct": result.irr,
                "irr_converged": result.irr_converged,
                "payback_year": result.payback_year,
                "discounted_payback_year": result.discounted_payback_year,
                "total_revenue": result.total_revenue,
                "total_operational_costs": result.total_operational_costs,
                "total_taxes": result.total_taxes,
            }
        ]
    )


# =====================================================================
# Excel export
# =====================================================================


class ExcelExporter:
    """Helper for writing a projection to an Excel workbook.

    Produces a Summary sheet and a cash-flow sheet (headers in the report's
    labels), with bold headers, auto-filter, frozen header row and
    auto-fitted columns.
    """

    def __init__(self, output_path: PathLike) -> None:
        self.output_path = Path(output_path)
        # Created lazily so nothing is written if no sheet is added.
        self._writer: Optional[pd.ExcelWriter] = None

    def _ensure_writer(self) -> pd.ExcelWriter:
        if self._writer is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._writer = pd.ExcelWriter(self.output_path, engine="openpyxl")
        return self._writer

    def save(self) -> None:
        """Persist the workbook to disk. Safe to call more than once."""
        if self._writer is not None:
            self._writer.close()
            self._writer = None
            logger.info("ExcelExporter: wrote workbook to %s", self.output_path)

    def add_dataframe_sheet(
        self,
        sheet_name: str,
        df: pd.DataFrame,
        freeze_panes: Optional[str] = None,
        format_headers: bool = True,
        auto_filter: bool = True,
    ) -> None:
        """Write ``df`` to ``sheet_name`` with light formatting."""
        from openpyxl.styles import Font

        writer = self._ensure_writer()
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        ws = writer.sheets[sheet_name]

        if format_headers:
            for cell in ws[1]:
                cell.font = Font(bold=True)

        if auto_filter:
            ws.auto_filter.ref = ws.dimensions

        if freeze_panes:
            ws.freeze_panes = freeze_panes

    def add_chart_image(
        self,
        sheet_name: str,
        image_path: PathLike,
        cell: str = "D2",
    ) -> None:
        """Embed an existing PNG into the given sheet."""
        from openpyxl.drawing.image import Image as XLImage

        if self._writer is None or sheet_name not in self._writer.sheets:
            logger.warning(
                "ExcelExporter: sheet %s not written yet; chart %s skipped",
                sheet_name,
                image_path,
            )
            return

        try:
            img = XLImage(str(image_path))
        except (OSError, ValueError) as exc:
            logger.warning("ExcelExporter: failed to load image %s: %s", image_path, exc)
            return
        self._writer.sheets[sheet_name].add_image(img, cell)

    def autofit_all(self) -> None:
        """Column auto-fit for every sheet, based on the longest value."""
        if self._writer is None:
            return

        from openpyxl.utils import get_column_letter

        for ws in self._writer.book.worksheets:
            for column_cells in ws.columns:
                lengths = [len(str(c.value)) for c in column_cells if c.value is not None]
                if not lengths:
                    continue
                col_letter = get_column_letter(column_cells[0].column)
                ws.column_dimensions[col_letter].width = max(lengths) + 2

    def export_projection(
        self,
        result: ProjectionResult,
        scenario_name: str = "default_scenario",
        chart_paths: Optional[List[PathLike]] = None,
        include_schema: bool = True,
    ) -> Path:
        """High-level helper: Summary + Fluxo de Caixa sheets, the scenario
        fields on a Campos sheet, optional charts on a Graficos sheet,
        auto-fit and save."""
        logger.info("ExcelExporter: exporting projection to %s", self.output_path)

        self.add_dataframe_sheet(
            "Summary",
            summary_to_dataframe(result, scenario_name),
            freeze_panes="B2",
        )

        cash_flow = projection_to_dataframe(result)[[a for a, _ in CASH_FLOW_COLUMNS]]
        cash_flow = cash_flow.rename(columns=dict(CASH_FLOW_COLUMNS))
        self.add_dataframe_sheet("Fluxo de Caixa", cash_flow, freeze_panes="B2")

        if include_schema:
            self.add_dataframe_sheet("Campos", describe_schema(), freeze_panes="C2")

        if chart_paths:
            self.add_dataframe_sheet(
                "Graficos",
                pd.DataFrame({"chart": [Path(p).name for p in chart_paths]}),
                auto_filter=False,
            )
            for i, chart in enumerate(chart_paths):
                self.add_chart_image("Graficos", chart, cell=f"C{2 + i * 25}")

        self.autofit_all()
        self.save()
        return self.output_path


# =====================================================================
# Charts (PNG generation, CI/CLI friendly)
# =====================================================================


def _currency_axis(value: float, _pos: int) -> str:
    return format_currency(value)


class ChartGenerator:
    """Generate the projection's PNG charts.

        cg = ChartGenerator(output_dir=tmp_path)
        cg.plot_cumulative_cash_flow(result)
        cg.plot_revenue_vs_costs(result)
    """

    def __init__(self, output_dir: PathLike) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _resolve_path(self, output_file: PathLike) -> Path:
        """Resolve output_file relative to output_dir and ensure parent exists."""
        path = Path(output_file)
        if not path.is_absolute():
            path = self.output_dir / path
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def plot_cumulative_cash_flow(
        self,
        result: ProjectionResult,
        output_file: PathLike = "fluxo_acumulado.png",
    ) -> Path:
        """Nominal and discounted cumulative cash flow per year."""
        path = self._resolve_path(output_file)
        years = [rec.year for rec in result.years]

        fig, ax = plt.subplots(figsize=(8, 4))
        ax.plot(
            years,
            [rec.cumulative_cash_flow for rec in result.years],
            linewidth=2,
            label="Fluxo Acumulado",
        )
        ax.plot(
            years,
            [rec.cumulative_discounted_cash_flow for rec in result.years],
            linewidth=2,
            label="Fluxo Descontado Acumulado",
        )
        ax.axhline(0.0, linestyle="--", linewidth=1, color="grey")
        ax.yaxis.set_major_formatter(FuncFormatter(_currency_axis))
        ax.grid(True, linestyle=":")
        ax.set_xlabel("Ano")
        ax.set_title("Fluxo de Caixa Acumulado")
        ax.legend()
        fig.tight_layout()
        fig.savefig(path, dpi=150)
        plt.close(fig)

        logger.info("ChartGenerator: cumulative cash-flow chart written to %s", path)
        return path

    def plot_revenue_vs_costs(
        self,
        result: ProjectionResult,
        output_file: PathLike = "receitas_vs_custos.png",
    ) -> Path:
        """Per-year revenue next to costs + taxes (O&M, insurance, admin,
        rent, ICMS, PIS/COFINS)."""
        path = self._resolve_path(output_file)
        years = [rec.year for rec in result.years]
        costs = [
            rec.om_cost
            + rec.insurance_cost
            + rec.adm_cost
            + rec.rent_cost
            + rec.total_taxes
            for rec in result.years
        ]
        width = 0.4

        fig, ax = plt.subplots(figsize=(8, 4))
        ax.bar(
            [y - width / 2 for y in years],
            [rec.revenue for rec in result.years],
            width=width,
            alpha=0.8,
            label="Receita",
        )
        ax.bar(
            [y + width / 2 for y in years],
            costs,
            width=width,
            alpha=0.8,
            label="Custos + Impostos",
        )
        ax.yaxis.set_major_formatter(FuncFormatter(_currency_axis))
        ax.grid(True, axis="y", linestyle=":")
        ax.set_xlabel("Ano")
        ax.set_title("Receitas vs. Custos")
        ax.legend()
        fig.tight_layout()
        fig.savefig(path, dpi=150)
        plt.close(fig)

        logger.info("ChartGenerator: revenue vs costs chart written to %s", path)
        return path


__all__ = [
    "CASH_FLOW_COLUMNS",
    "NO_PAYBACK_LABEL",
    "format_currency",
    "format_percentage",
    "format_number",
    "format_payback",
    "generate_csv",
    "write_csv",
    "build_report_payload",
    "projection_to_dataframe",
    "summary_to_dataframe",
    "ExcelExporter",
    "ChartGenerator",
]
