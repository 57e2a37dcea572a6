"""Payback locator: first 1-based year whose cumulative value is >= 0."""

from dg_finance.payback import PAYBACK_NOT_FOUND, find_payback_year, has_payback


def test_first_non_negative_year():
    assert find_payback_year([-300.0, -100.0, 50.0, 200.0]) == 3


def test_exact_zero_counts_as_payback():
    assert find_payback_year([-10.0, 0.0, 5.0]) == 2


def test_first_year_payback():
    assert find_payback_year([1.0, 2.0]) == 1


def test_returns_first_crossing_even_if_it_dips_again():
    assert find_payback_year([-5.0, 1.0, -2.0, 3.0]) == 2


def test_never_breaks_even():
    assert find_payback_year([-300.0, -200.0, -1.0]) == PAYBACK_NOT_FOUND
    assert PAYBACK_NOT_FOUND == -1


def test_empty_series():
    assert find_payback_year([]) == PAYBACK_NOT_FOUND


def test_has_payback():
    assert has_payback(4)
    assert not has_payback(PAYBACK_NOT_FOUND)
