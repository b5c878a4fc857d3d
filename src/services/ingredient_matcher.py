"""Decide whether a pantry covers a recipe's ingredient requirements."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from src.models.enums import RecipeOrigin
from src.services.naming import normalize_name
from src.services.units import convert

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PantryEntry:
    """An item the user has on hand."""

    name: str
    quantity: float
    unit: str | None = None


@dataclass(frozen=True)
class IngredientRequirement:
    """A quantity of one ingredient a recipe needs."""

    name: str
    quantity: float
    unit: str | None = None


@dataclass(frozen=True)
class RecipeCandidate:
    """Recipe detached from storage, as passed between matcher, generator and cache."""

    title: str
    prep_time_minutes: int
    ingredients: tuple[IngredientRequirement, ...] = ()
    instructions: str | None = None
    origin: RecipeOrigin = RecipeOrigin.STORED
    id: int | None = None

    @property
    def normalized_title(self) -> str:
        return normalize_name(self.title)

    @property
    def is_generated(self) -> bool:
        return self.origin == RecipeOrigin.GENERATED


def _strip_plural(name: str) -> list[str]:
    """Singular forms to try for a possibly plural name, "es" before "s"."""
    forms = []
    if name.endswith("es"):
        forms.append(name[:-2])
    if name.endswith("s"):
        forms.append(name[:-1])
    return [form for form in forms if form]


def find_pantry_match(name: str, pantry: Sequence[PantryEntry]) -> PantryEntry | None:
    """Find the pantry entry a requirement name refers to.

    Tries, in order: exact match, plural-stripped match, then substring
    containment in either direction. The first hit wins; pantry order breaks ties.
    """
    wanted = normalize_name(name)
    if not wanted:
        return None

    by_name: dict[str, PantryEntry] = {}
    for entry in pantry:
        key = normalize_name(entry.name)
        if key:
            by_name.setdefault(key, entry)

    if wanted in by_name:
        return by_name[wanted]

    for singular in _strip_plural(wanted):
        if singular in by_name:
            return by_name[singular]

    for pantry_name, entry in by_name.items():
        if wanted in pantry_name or pantry_name in wanted:
            return entry

    return None


def can_satisfy(requirement: IngredientRequirement, pantry: Sequence[PantryEntry]) -> bool:
    """Check one requirement against the pantry, converting the pantry quantity
    into the requirement's unit before comparing."""
    match = find_pantry_match(requirement.name, pantry)
    if match is None:
        return False

    available = convert(match.quantity, match.unit, requirement.unit)
    return available >= requirement.quantity


def can_make_recipe(recipe: RecipeCandidate, pantry: Sequence[PantryEntry]) -> bool:
    """A recipe is makeable iff every ingredient is satisfied by the same pantry.

    Pantry stock is never reduced between ingredients.
    """
    if not recipe.ingredients:
        return False

    for requirement in recipe.ingredients:
        if not normalize_name(requirement.name):
            return False
        if not can_satisfy(requirement, pantry):
            logger.debug(f"'{recipe.title}' not makeable: missing {requirement.name}")
            return False
    return True


def pantry_names(pantry: Iterable[PantryEntry]) -> set[str]:
    """Normalized names of every pantry entry."""
    return {normalize_name(entry.name) for entry in pantry if normalize_name(entry.name)}
