"""SQLAlchemy models."""

from src.models.ingredient import Ingredient
from src.models.pantry import PantryItem
from src.models.recipe import Recipe, RecipeIngredient

__all__ = [
    "Ingredient",
    "PantryItem",
    "Recipe",
    "RecipeIngredient",
]
