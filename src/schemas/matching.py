"""Recipe matching schemas."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from src.schemas.pantry import PantryItemIn


class MatchRequest(BaseModel):
    """Start a matching session.

    If ``ingredients`` is omitted, the stored pantry is used.
    """

    ingredients: list[PantryItemIn] | None = None
    min_prep_time: int = Field(0, ge=0)
    max_prep_time: int = Field(..., ge=0)
    batch_size: int | None = Field(None, gt=0, le=50)

    @model_validator(mode="after")
    def validate_prep_window(self) -> "MatchRequest":
        """Check that the prep time window is not inverted."""
        if self.max_prep_time < self.min_prep_time:
            raise ValueError("max_prep_time must not be less than min_prep_time")
        return self


class MatchedIngredient(BaseModel):
    """Ingredient of a suggested recipe."""

    name: str
    quantity: float
    unit: str | None
    image_url: str | None = None


class MatchedRecipe(BaseModel):
    """A suggested recipe."""

    id: int | None
    title: str
    instructions: str | None
    prep_time_minutes: int
    origin: Literal["stored", "generated"]
    ingredients: list[MatchedIngredient]


class MatchBatchResponse(BaseModel):
    """A page of suggestions for a session token."""

    token: str
    recipes: list[MatchedRecipe]
    message: str | None = None
    exhausted: bool = False
