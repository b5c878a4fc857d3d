"""Pydantic schemas for API requests and responses."""

from src.schemas.matching import MatchBatchResponse, MatchedIngredient, MatchedRecipe, MatchRequest
from src.schemas.pantry import (
    PantryItemCreate,
    PantryItemIn,
    PantryItemResponse,
    PantryItemUpdate,
)
from src.schemas.recipe import (
    RecipeCreate,
    RecipeIngredientCreate,
    RecipeIngredientResponse,
    RecipeListResponse,
    RecipeResponse,
)

__all__ = [
    "MatchRequest",
    "MatchBatchResponse",
    "MatchedRecipe",
    "MatchedIngredient",
    "PantryItemIn",
    "PantryItemCreate",
    "PantryItemUpdate",
    "PantryItemResponse",
    "RecipeCreate",
    "RecipeIngredientCreate",
    "RecipeIngredientResponse",
    "RecipeResponse",
    "RecipeListResponse",
]
