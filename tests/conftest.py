"""Shared parameter-group builders for the DG solar test-suite."""

from __future__ import annotations

from dataclasses import replace

import pytest

from dg_finance.contracts import (
    CostParams,
    FinancialParams,
    SystemParams,
    TariffParams,
)


def make_reference_inputs():
    """
    The input form defaults: 100 kWp at 4.5 R$/Wp,
    150 MWh P90, 75 kW contracted demand, 25-year horizon.
    """
    system = SystemParams(
        power_kwp=100.0,
        annual_generation_mwh=150.0,
        contracted_demand_kw=75.0,
    )
    cost = CostParams(
        capex_per_wp=4.5,
        insurance_pct=0.5,
        om_pct=1.0,
        adm_pct=2.0,
        rent_monthly=1_000.0,
        inverter_replace_pct=15.0,
    )
    tariff = TariffParams(
        energy_tariff=300.0,
        tusd=200.0,
        tusdg_demand=20.0,
        tusdc_demand=15.0,
        icms_pct=18.0,
        pis_cofins_pct=9.25,
    )
    financial = FinancialParams(
        discount_rate_pct=12.0,
        adjustment_type="IPCA",
        adjustment_rate_pct=4.5,
        annual_degradation_pct=0.5,
        depreciation_years=10,
        project_years=25,
    )
    return system, cost, tariff, financial


def make_flat_inputs():
    """
    Hand-checkable case: 50 000 investment, 10 000 revenue every year,
    750 fixed opex, 5 000 inverter swap in year 10, 3 400 tax shield in
    years 1..5, no taxes, no discounting, 12-year horizon.

    Net flows: 12 650 (y1-5), 9 250 (y6-9, y11-12), 4 250 (y10).
    """
    system = SystemParams(power_kwp=10.0, annual_generation_mwh=100.0, contracted_demand_kw=0.0)
    cost = CostParams(
        capex_per_wp=5.0,
        insurance_pct=0.5,
        om_pct=1.0,
        adm_pct=0.0,
        rent_monthly=0.0,
        inverter_replace_pct=10.0,
    )
    tariff = TariffParams(
        energy_tariff=100.0,
        tusd=0.0,
        tusdg_demand=0.0,
        tusdc_demand=0.0,
        icms_pct=0.0,
        pis_cofins_pct=0.0,
    )
    financial = FinancialParams(
        discount_rate_pct=0.0,
        adjustment_rate_pct=0.0,
        annual_degradation_pct=0.0,
        depreciation_years=5,
        project_years=12,
    )
    return system, cost, tariff, financial


@pytest.fixture
def reference_inputs():
    return make_reference_inputs()


@pytest.fixture
def flat_inputs():
    return make_flat_inputs()


@pytest.fixture
def all_positive_inputs():
    """Reference case without the year-10 inverter swap: one outlay, then
    strictly positive flows."""
    system, cost, tariff, financial = make_reference_inputs()
    return system, replace(cost, inverter_replace_pct=0.0), tariff, financial


@pytest.fixture
def reference_config():
    """Raw scenario mapping equivalent to make_reference_inputs()."""
    return {
        "scenario_name": "usina_100kwp",
        "system": {
            "power_kwp": 100,
            "annual_generation_mwh": 150,
            "contracted_demand_kw": 75,
        },
        "cost": {
            "capex_per_wp": 4.5,
            "capex_total": None,
            "insurance_pct": 0.5,
            "om_pct": 1.0,
            "adm_pct": 2.0,
            "rent_monthly": 1000,
            "inverter_replace_pct": 15,
        },
        "tariff": {
            "energy_tariff": 300,
            "tusd": 200,
            "tusdg_demand": 20,
            "tusdc_demand": 15,
            "icms_pct": 18,
            "pis_cofins_pct": 9.25,
        },
        "financial": {
            "discount_rate_pct": 12,
            "adjustment_type": "IPCA",
            "adjustment_rate_pct": 4.5,
            "annual_degradation_pct": 0.5,
            "depreciation_years": 10,
            "project_years": 25,
        },
    }
