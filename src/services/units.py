"""Unit conversion between measurement units of the same family."""

# Factor from each unit to its family base unit (grams, millilitres)
WEIGHT_UNITS: dict[str, float] = {
    "mg": 0.001,
    "g": 1.0,
    "kg": 1000.0,
    "oz": 28.3495,
    "lb": 453.592,
}

VOLUME_UNITS: dict[str, float] = {
    "ml": 1.0,
    "l": 1000.0,
    "tsp": 5.0,
    "tbsp": 15.0,
    "cup": 240.0,
}

UNIT_FAMILIES: dict[str, dict[str, float]] = {
    "weight": WEIGHT_UNITS,
    "volume": VOLUME_UNITS,
}


def normalize_unit(unit: str | None) -> str:
    """Trim and lowercase a unit name (None becomes "")."""
    return unit.strip().lower() if unit else ""


def unit_family(unit: str | None) -> str | None:
    """Return the family name ("weight", "volume") of a unit, or None if unknown."""
    key = normalize_unit(unit)
    for family, factors in UNIT_FAMILIES.items():
        if key in factors:
            return family
    return None


def convert(quantity: float, from_unit: str | None, to_unit: str | None) -> float:
    """Convert a quantity between two units of the same family.

    Cross-family, unknown or missing units are not an error: the quantity is
    returned unchanged. Callers comparing quantities must keep that in mind.
    """
    from_family = unit_family(from_unit)
    if from_family is None or from_family != unit_family(to_unit):
        return quantity

    factors = UNIT_FAMILIES[from_family]
    return quantity * factors[normalize_unit(from_unit)] / factors[normalize_unit(to_unit)]
