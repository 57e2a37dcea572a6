"""
Export helpers: formatting, CSV report, payload, DataFrames, workbook and
charts. Uses the flat case so every printed figure is known in advance.
"""

from __future__ import annotations

import pytest
from openpyxl import load_workbook

from dg_analytics.config_schema import SCHEMA_COLUMNS
from dg_analytics.export_helpers import (
    CASH_FLOW_COLUMNS,
    ChartGenerator,
    ExcelExporter,
    build_report_payload,
    format_currency,
    format_number,
    format_payback,
    format_percentage,
    generate_csv,
    projection_to_dataframe,
    summary_to_dataframe,
    write_csv,
)
from dg_finance import compute_projection

NBSP = "\u00a0"


@pytest.fixture
def flat_result(flat_inputs):
    return compute_projection(*flat_inputs)


def test_format_currency_pt_br():
    assert format_currency(1234.5) == f"R${NBSP}1.234,50"
    assert format_currency(-1234.5) == f"-R${NBSP}1.234,50"
    assert format_currency(1_000_000) == f"R${NBSP}1.000.000,00"
    assert format_currency(-0.001) == f"R${NBSP}0,00"


def test_simple_formatters():
    assert format_percentage(12.3456) == "12.35%"
    assert format_number(149.25) == "149.25"
    assert format_number(1.0, decimals=0) == "1"
    assert format_payback(7) == "7 anos"
    assert format_payback(-1) == "Não atingido"


def test_generate_csv_layout(flat_result):
    lines = generate_csv(flat_result).split("\n")

    assert lines[0] == ""
    assert lines[1] == "Resumo do Projeto"
    assert lines[2] == f"Investimento Inicial;R${NBSP}50.000,00"
    assert lines[3] == f"VPL;R${NBSP}73.000,00"
    assert lines[5] == "Payback Simples;4 anos"
    assert lines[6] == "Payback Descontado;4 anos"
    assert lines[10] == ""
    assert lines[11] == ";".join(label for _, label in CASH_FLOW_COLUMNS)

    rows = lines[12:]
    assert len(rows) == 12
    assert rows[0] == (
        "1;100.00;10000.00;500.00;250.00;0.00;0.00;0.00;0.00;0.00;"
        "10000.00;3400.00;12650.00;-37350.00;12650.00;-37350.00"
    )
    assert rows[9].split(";")[7] == "5000.00"


def test_write_csv_creates_parent_dirs(tmp_path, flat_result):
    path = write_csv(flat_result, tmp_path / "out" / "report.csv")
    assert path.exists()
    assert path.read_text(encoding="utf-8") == generate_csv(flat_result)


def test_report_payload(flat_result):
    payload = build_report_payload(flat_result)

    assert payload["title"] == "Análise Financeira - Geração Distribuída"
    assert payload["summary"]["payback"] == "4 anos"
    assert payload["summary"]["npv"] == f"R${NBSP}73.000,00"
    assert len(payload["cashFlow"]) == 12

    year10 = payload["cashFlow"][9]
    # The inverter swap is not part of the per-year cost column
    assert year10["costs"] == f"R${NBSP}750,00"
    assert year10["netCashFlow"] == f"R${NBSP}4.250,00"


def test_dataframes(flat_result):
    df = projection_to_dataframe(flat_result)
    assert len(df) == 12
    assert list(df.columns[:16]) == [a for a, _ in CASH_FLOW_COLUMNS]
    assert df["operating_cost"].iloc[9] == pytest.approx(5_750.0)
    assert df["net_cash_flow"].sum() == pytest.approx(123_000.0)

    summary = summary_to_dataframe(flat_result, "flat")
    assert summary.loc[0, "scenario_name"] == "flat"
    assert summary.loc[0, "payback_year"] == 4


def test_excel_export(tmp_path, flat_result):
    out = ExcelExporter(tmp_path / "xlsx" / "flat.xlsx").export_projection(
        flat_result, scenario_name="flat"
    )
    assert out.exists()

    wb = load_workbook(out)
    assert wb.sheetnames == ["Summary", "Fluxo de Caixa", "Campos"]

    ws = wb["Fluxo de Caixa"]
    assert ws["A1"].value == "Ano"
    assert ws["A1"].font.bold
    assert ws.max_row == 13
    assert ws.freeze_panes == "B2"
    assert wb["Summary"]["A2"].value == "flat"

    fields = wb["Campos"]
    assert [c.value for c in fields[1]] == list(SCHEMA_COLUMNS)
    names = {row[1] for row in fields.iter_rows(min_row=2, values_only=True)}
    assert {"depreciation_years", "irr_method"} <= names


def test_excel_export_without_schema(tmp_path, flat_result):
    out = ExcelExporter(tmp_path / "plain.xlsx").export_projection(
        flat_result, include_schema=False
    )
    assert load_workbook(out).sheetnames == ["Summary", "Fluxo de Caixa"]


def test_excel_without_sheets_writes_nothing(tmp_path):
    exporter = ExcelExporter(tmp_path / "never.xlsx")
    exporter.autofit_all()
    exporter.save()
    assert not (tmp_path / "never.xlsx").exists()


def test_charts_written_and_embedded(tmp_path, flat_result):
    charts = ChartGenerator(tmp_path / "charts")
    cumulative = charts.plot_cumulative_cash_flow(flat_result)
    bars = charts.plot_revenue_vs_costs(flat_result)

    assert cumulative.name == "fluxo_acumulado.png"
    assert bars.name == "receitas_vs_custos.png"
    assert cumulative.stat().st_size > 0
    assert bars.stat().st_size > 0

    out = ExcelExporter(tmp_path / "with_charts.xlsx").export_projection(
        flat_result, chart_paths=[cumulative, bars]
    )
    assert "Graficos" in load_workbook(out).sheetnames
