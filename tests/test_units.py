"""Unit conversion tests."""

import pytest

from src.services.units import convert, normalize_unit, unit_family


def test_convert_weight_units():
    """Test conversion within the weight family."""
    assert convert(1, "kg", "g") == 1000
    assert convert(500, "g", "kg") == 0.5
    assert convert(2000, "mg", "g") == pytest.approx(2)


def test_convert_volume_units():
    """Test conversion within the volume family."""
    assert convert(1, "l", "ml") == 1000
    assert convert(2, "tbsp", "ml") == 30
    assert convert(3, "tsp", "tbsp") == 1


def test_convert_is_case_and_whitespace_insensitive():
    """Test that units are trimmed and compared case-insensitively."""
    assert convert(1, " KG ", "g") == 1000
    assert convert(1, "L", " Ml") == 1000


def test_convert_same_unit_is_identity():
    """Test converting a unit to itself."""
    assert convert(42.5, "g", "g") == 42.5


@pytest.mark.parametrize(
    ("a", "b"),
    [("g", "kg"), ("mg", "lb"), ("oz", "g"), ("ml", "l"), ("tbsp", "cup"), ("tsp", "l")],
)
def test_round_trip_within_family(a, b):
    """Test converting there and back returns the original quantity."""
    assert convert(convert(7.3, a, b), b, a) == pytest.approx(7.3)


def test_cross_family_returns_quantity_unchanged():
    """Test that weight <-> volume is a silent no-op."""
    assert convert(250, "g", "ml") == 250
    assert convert(2, "cup", "kg") == 2


def test_unknown_or_missing_units_return_quantity_unchanged():
    """Test that unrecognized units don't raise."""
    assert convert(3, "pinch", "g") == 3
    assert convert(3, "g", "handful") == 3
    assert convert(3, None, "g") == 3
    assert convert(3, "g", None) == 3
    assert convert(3, None, None) == 3


def test_unit_family():
    """Test family lookup."""
    assert unit_family("KG") == "weight"
    assert unit_family("tbsp") == "volume"
    assert unit_family("pinch") is None
    assert unit_family(None) is None


def test_normalize_unit():
    """Test unit normalization."""
    assert normalize_unit("  ML ") == "ml"
    assert normalize_unit(None) == ""
