"""
Tests for dg_finance.utils helpers:

- get_nested for normal and missing paths.
- as_float / as_int conversion and the blank-to-default fallbacks the
  scenario loader relies on.
"""

from dg_finance.utils import as_float, as_int, get_nested, pct


def test_get_nested_happy_path_and_missing():
    data = {"financial": {"discount": {"rate_pct": 12}}}

    assert get_nested(data, ["financial", "discount", "rate_pct"]) == 12
    assert get_nested(data, ["financial", "missing"], default="x") == "x"
    # Non-dict along the path should trigger default
    assert get_nested({"a": 1}, ["a", "b"], default="y") == "y"


def test_as_float_success_and_failure():
    assert as_float("3.14", default=None) == 3.14
    assert as_float(2, default=None) == 2.0
    # Comma decimal separator as typed in a pt-BR form
    assert as_float("4,5", default=None) == 4.5
    # Failures, blanks and None use the default
    assert as_float("not-a-number", default=0.5) == 0.5
    assert as_float("", default=0.0) == 0.0
    assert as_float("   ", default=0.0) == 0.0
    assert as_float(None, default=1.23) == 1.23
    assert as_float(float("nan"), default=0.0) == 0.0


def test_as_float_rejects_booleans():
    assert as_float(True, default=0.0) == 0.0


def test_as_int_success_and_failure():
    assert as_int("10", default=None) == 10
    assert as_int(7, default=None) == 7
    assert as_int(25.0, default=None) == 25
    assert as_int("bad", default=-1) == -1
    assert as_int(None, default=99) == 99


def test_pct_converts_percent_to_fraction():
    assert pct(12.5) == 0.125
    assert pct(0.0) == 0.0
