"""Recipe matching against a pantry snapshot."""

import logging
import math
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from src.config import get_settings
from src.models.enums import RecipeOrigin
from src.models.recipe import Recipe, RecipeIngredient
from src.services.ingredient_matcher import (
    IngredientRequirement,
    PantryEntry,
    RecipeCandidate,
    can_make_recipe,
    normalize_name,
    pantry_names,
)

logger = logging.getLogger(__name__)


class RecipeSource(Protocol):
    """Where known recipes come from."""

    def query_by_prep_time_and_ingredient_names(
        self, min_prep_time: int, max_prep_time: int, names: set[str]
    ) -> list[RecipeCandidate]: ...

    def find_by_title(self, title: str) -> RecipeCandidate | None: ...

    def save_generated(self, recipe: RecipeCandidate) -> RecipeCandidate: ...


def recipe_to_candidate(recipe: Recipe) -> RecipeCandidate:
    """Detach a Recipe row into an immutable candidate.

    Everything read back from storage is a stored recipe from the matcher's
    point of view, whatever produced it originally.
    """
    return RecipeCandidate(
        id=recipe.id,
        title=recipe.title,
        instructions=recipe.instructions,
        prep_time_minutes=recipe.prep_time_minutes,
        ingredients=tuple(
            IngredientRequirement(name=ing.name, quantity=ing.quantity, unit=ing.unit)
            for ing in recipe.ingredients
        ),
        origin=RecipeOrigin.STORED,
    )


class SqlRecipeSource:
    """Recipe source backed by the recipes table.

    Opens a short-lived session per call so it can be used outside the
    request that created it.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def query_by_prep_time_and_ingredient_names(
        self, min_prep_time: int, max_prep_time: int, names: set[str]
    ) -> list[RecipeCandidate]:
        """Coarse pre-filter: prep time in range and at least one shared ingredient name."""
        if not names:
            return []

        db: Session = self.session_factory()
        try:
            matching_ids = (
                db.query(Recipe.id)
                .join(RecipeIngredient, RecipeIngredient.recipe_id == Recipe.id)
                .filter(
                    Recipe.prep_time_minutes >= min_prep_time,
                    Recipe.prep_time_minutes <= max_prep_time,
                    RecipeIngredient.normalized_name.in_(names),
                )
                .distinct()
            )
            recipes = (
                db.query(Recipe)
                .options(selectinload(Recipe.ingredients))
                .filter(Recipe.id.in_(matching_ids))
                .order_by(Recipe.id)
                .all()
            )
            return [recipe_to_candidate(recipe) for recipe in recipes]
        finally:
            db.close()

    def find_by_title(self, title: str) -> RecipeCandidate | None:
        db: Session = self.session_factory()
        try:
            recipe = (
                db.query(Recipe)
                .options(selectinload(Recipe.ingredients))
                .filter(Recipe.normalized_title == normalize_name(title))
                .first()
            )
            return recipe_to_candidate(recipe) if recipe else None
        finally:
            db.close()

    def save_generated(self, recipe: RecipeCandidate) -> RecipeCandidate:
        """Persist an accepted generated recipe.

        If a recipe with the same title already exists, that recipe is reused
        and returned as stored.
        """
        existing = self.find_by_title(recipe.title)
        if existing:
            logger.info(f"Generated recipe '{recipe.title}' already stored, reusing")
            return existing

        db: Session = self.session_factory()
        try:
            row = Recipe(
                title=recipe.title,
                instructions=recipe.instructions,
                prep_time_minutes=recipe.prep_time_minutes,
                origin=RecipeOrigin.GENERATED,
                ingredients=[
                    RecipeIngredient(
                        name=ing.name,
                        quantity=ing.quantity,
                        unit=ing.unit,
                        position=position,
                    )
                    for position, ing in enumerate(recipe.ingredients)
                ],
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            saved = recipe_to_candidate(row)
        except IntegrityError:
            # Another session stored the same title first
            db.rollback()
            saved = None
        finally:
            db.close()

        if saved is None:
            existing = self.find_by_title(recipe.title)
            if existing is None:
                raise RuntimeError(f"Recipe '{recipe.title}' vanished after a title conflict")
            return existing

        logger.info(f"Stored generated recipe {saved.id}: '{saved.title}'")
        return RecipeCandidate(
            id=saved.id,
            title=saved.title,
            instructions=saved.instructions,
            prep_time_minutes=saved.prep_time_minutes,
            ingredients=saved.ingredients,
            origin=RecipeOrigin.GENERATED,
        )


class MatchingEngine:
    """Find makeable recipes and vet generated ones."""

    def __init__(self, source: RecipeSource, generated_ingredient_ratio: float | None = None):
        self.source = source
        if generated_ingredient_ratio is None:
            generated_ingredient_ratio = get_settings().generated_ingredient_ratio
        self.generated_ingredient_ratio = generated_ingredient_ratio

    def find_matches(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
    ) -> list[RecipeCandidate]:
        """Recipes in the prep window that the pantry fully covers, in source order."""
        names = pantry_names(pantry)
        candidates = self.source.query_by_prep_time_and_ingredient_names(
            min_prep_time, max_prep_time, names
        )
        matches = [recipe for recipe in candidates if can_make_recipe(recipe, pantry)]
        logger.info(
            f"Matched {len(matches)} of {len(candidates)} candidate recipes "
            f"(prep {min_prep_time}-{max_prep_time} min, {len(names)} pantry items)"
        )
        return matches

    def max_generated_ingredients(self, pantry_item_count: int) -> int:
        """How many ingredients a generated recipe may list for this pantry size."""
        # Small epsilon keeps exact quotients (e.g. 3 / 0.75) from rounding down
        return math.floor(pantry_item_count / self.generated_ingredient_ratio + 1e-9)

    def validate_generated(self, recipe: RecipeCandidate, pantry_item_count: int) -> str | None:
        """Return why a generated recipe is unacceptable, or None if it is fine."""
        if not recipe.normalized_title:
            return "empty title"
        if not recipe.ingredients:
            return "no ingredients"
        limit = self.max_generated_ingredients(pantry_item_count)
        if len(recipe.ingredients) > limit:
            return f"{len(recipe.ingredients)} ingredients exceeds limit of {limit}"
        return None
