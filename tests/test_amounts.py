from decimal import Decimal

import pytest

from gasless_agentkit.amounts import from_base_units, is_zero, to_base_units


def test_human_amounts_are_scaled():
    assert to_base_units("1.5", 6) == 1_500_000
    assert to_base_units("0.000001", 6) == 1
    assert to_base_units(Decimal("2"), 18) == 2 * 10**18
    assert to_base_units(" 10 ", 0) == 10


def test_converting_twice_never_scales_twice():
    once = to_base_units("1.5", 6)
    assert to_base_units(once, 6) == once


def test_excess_precision_is_rejected():
    with pytest.raises(ValueError, match="more than 6 decimal places"):
        to_base_units("1.0000001", 6)


@pytest.mark.parametrize("bad", ["-1", "abc", "NaN", "Infinity", -5])
def test_invalid_amounts_are_rejected(bad):
    with pytest.raises(ValueError):
        to_base_units(bad, 18)


def test_booleans_are_not_amounts():
    with pytest.raises(ValueError, match="boolean"):
        to_base_units(True, 18)


def test_from_base_units_formats_plainly():
    assert from_base_units(1_500_000, 6) == "1.5"
    assert from_base_units(10**18, 18) == "1"
    assert from_base_units(100 * 10**6, 6) == "100"
    assert from_base_units(0, 18) == "0"
    assert from_base_units(1, 18) == "0.000000000000000001"


def test_is_zero():
    assert is_zero("0")
    assert is_zero("0.000")
    assert not is_zero("0.01")
