"""
Regression tests for the yearly cash-flow assembler.

Focus:
- Shape and ordering of build_annual_rows.
- Initial-investment rule (direct capex vs per-Wp rate).
- Cumulative identities for the nominal and discounted series.
- Hand-checked figures on a flat, undiscounted case.
"""

from dataclasses import replace

import pytest

from dg_finance.cashflow import build_annual_rows, resolve_initial_investment
from dg_finance.contracts import ModelSettings


def test_build_annual_rows_shape_and_order(reference_inputs):
    schedule = build_annual_rows(*reference_inputs)

    assert len(schedule.records) == 25
    assert [r.year for r in schedule.records] == list(range(1, 26))


def test_initial_investment_from_per_wp_rate(reference_inputs):
    system, cost, _, _ = reference_inputs
    assert resolve_initial_investment(system, cost) == 4.5 * 100 * 1000
    assert resolve_initial_investment(system, cost) == pytest.approx(450_000.0)


def test_initial_investment_prefers_direct_capex(reference_inputs):
    system, cost, _, _ = reference_inputs
    direct = replace(cost, capex_total=380_000.0)
    assert resolve_initial_investment(system, direct) == 380_000.0


def test_zero_direct_capex_falls_back_to_rate(reference_inputs):
    system, cost, _, _ = reference_inputs
    assert resolve_initial_investment(system, replace(cost, capex_total=0.0)) == pytest.approx(
        450_000.0
    )


def test_reference_year_one_figures(reference_inputs):
    first = build_annual_rows(*reference_inputs).records[0]

    assert first.generation == pytest.approx(149.25)
    assert first.revenue == pytest.approx(106_125.0)
    assert first.om_cost == pytest.approx(4_500.0)
    assert first.insurance_cost == pytest.approx(2_250.0)
    assert first.adm_cost == pytest.approx(2_122.5)
    assert first.rent_cost == pytest.approx(12_540.0)
    assert first.inverter_cost == 0.0
    assert first.taxes_icms == pytest.approx(19_102.5)
    assert first.taxes_pis_cofins == pytest.approx(9_816.5625)
    assert first.depreciation == pytest.approx(45_000.0)
    assert first.tax_benefit == pytest.approx(15_300.0)


def test_net_cash_flow_formula_holds_every_year(reference_inputs):
    for r in build_annual_rows(*reference_inputs).records:
        expected = (
            r.revenue
            - r.om_cost
            - r.insurance_cost
            - r.adm_cost
            - r.rent_cost
            - r.inverter_cost
            - r.taxes_icms
            - r.taxes_pis_cofins
            + r.tax_benefit
        )
        assert r.net_cash_flow == pytest.approx(expected)


def test_cumulative_identities(reference_inputs):
    schedule = build_annual_rows(*reference_inputs)
    records = schedule.records
    inv = schedule.initial_investment

    assert records[0].cumulative_cash_flow == pytest.approx(-inv + records[0].net_cash_flow)
    for prev, cur in zip(records, records[1:]):
        assert cur.cumulative_cash_flow == pytest.approx(
            prev.cumulative_cash_flow + cur.net_cash_flow
        )
        assert cur.cumulative_discounted_cash_flow == pytest.approx(
            prev.cumulative_discounted_cash_flow + cur.discounted_cash_flow
        )

    assert records[-1].cumulative_cash_flow == pytest.approx(
        -inv + sum(r.net_cash_flow for r in records)
    )
    assert records[-1].cumulative_discounted_cash_flow == pytest.approx(
        -inv + sum(r.discounted_cash_flow for r in records)
    )


def test_discounted_flow_uses_year_exponent(reference_inputs):
    for r in build_annual_rows(*reference_inputs).records:
        assert r.discounted_cash_flow == pytest.approx(r.net_cash_flow / 1.12 ** r.year)


def test_inverter_cost_only_in_year_ten(reference_inputs):
    records = build_annual_rows(*reference_inputs).records
    for r in records:
        if r.year == 10:
            assert r.inverter_cost == pytest.approx(450_000.0 * 0.15)
        else:
            assert r.inverter_cost == 0.0


def test_inverter_never_fires_on_short_horizon(reference_inputs):
    system, cost, tariff, financial = reference_inputs
    short = replace(financial, project_years=9)
    records = build_annual_rows(system, cost, tariff, short).records
    assert len(records) == 9
    assert all(r.inverter_cost == 0.0 for r in records)


def test_tax_benefit_zero_after_depreciation_period(reference_inputs):
    records = build_annual_rows(*reference_inputs).records
    assert all(r.tax_benefit > 0 for r in records[:10])
    assert all(r.tax_benefit == 0.0 for r in records[10:])
    # The book charge itself continues for the whole horizon
    assert all(r.depreciation == pytest.approx(45_000.0) for r in records)


def test_model_settings_override_constants(reference_inputs):
    settings = ModelSettings(inverter_replacement_year=12, corporate_tax_rate_pct=25.0)
    records = build_annual_rows(*reference_inputs, settings=settings).records

    assert records[9].inverter_cost == 0.0
    assert records[11].inverter_cost == pytest.approx(67_500.0)
    assert records[0].tax_benefit == pytest.approx(45_000.0 * 0.25)


def test_flat_case_hand_checked(flat_inputs):
    schedule = build_annual_rows(*flat_inputs)
    nets = [r.net_cash_flow for r in schedule.records]

    assert schedule.initial_investment == pytest.approx(50_000.0)
    assert nets[:5] == pytest.approx([12_650.0] * 5)
    assert nets[5:9] == pytest.approx([9_250.0] * 4)
    assert nets[9] == pytest.approx(4_250.0)
    assert nets[10:] == pytest.approx([9_250.0] * 2)

    assert schedule.total_revenue == pytest.approx(120_000.0)
    assert schedule.total_operational_costs == pytest.approx(14_000.0)
    assert schedule.total_taxes == 0.0
    assert schedule.records[-1].cumulative_cash_flow == pytest.approx(73_000.0)

    # No discounting: both cumulative series coincide
    for r in schedule.records:
        assert r.cumulative_discounted_cash_flow == pytest.approx(r.cumulative_cash_flow)


def test_totals_match_record_sums(reference_inputs):
    schedule = build_annual_rows(*reference_inputs)
    records = schedule.records

    assert schedule.total_revenue == pytest.approx(sum(r.revenue for r in records))
    assert schedule.total_operational_costs == pytest.approx(
        sum(r.operating_cost for r in records)
    )
    assert schedule.total_taxes == pytest.approx(sum(r.total_taxes for r in records))


def test_zero_depreciation_years_raises(reference_inputs):
    system, cost, tariff, financial = reference_inputs
    with pytest.raises(ZeroDivisionError):
        build_annual_rows(system, cost, tariff, replace(financial, depreciation_years=0))
