"""Canonical names for ingredients and recipe titles."""


def normalize_name(name: str | None) -> str:
    """Canonical form for ingredient names and recipe titles: trimmed, lowercase."""
    return name.strip().lower() if name else ""
