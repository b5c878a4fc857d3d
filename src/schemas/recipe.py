"""Recipe schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# --- Recipe Ingredient ---


class RecipeIngredientCreate(BaseModel):
    """Create a recipe ingredient."""

    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0)
    unit: str | None = Field(None, max_length=50)


class RecipeIngredientResponse(BaseModel):
    """Recipe ingredient response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: float
    unit: str | None


# --- Recipe ---


class RecipeCreate(BaseModel):
    """Create a new recipe."""

    title: str = Field(..., min_length=1, max_length=255)
    instructions: str | None = Field(None, max_length=50000)
    prep_time_minutes: int = Field(..., ge=0)
    ingredients: list[RecipeIngredientCreate] = Field(..., min_length=1)


class RecipeResponse(BaseModel):
    """Recipe response with ingredients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    instructions: str | None
    prep_time_minutes: int
    origin: str  # "stored" | "generated"
    ingredients: list[RecipeIngredientResponse]
    created_at: datetime
    updated_at: datetime


class RecipeListResponse(BaseModel):
    """Recipe list item (without full ingredients)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    prep_time_minutes: int
    origin: str
    ingredient_count: int
    created_at: datetime
