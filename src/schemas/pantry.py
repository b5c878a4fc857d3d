"""Pantry schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PantryItemIn(BaseModel):
    """Pantry item supplied with a matching request."""

    name: str = Field(..., min_length=1, max_length=255)
    quantity: float = Field(..., ge=0)
    unit: str | None = Field(None, max_length=50)


class PantryItemCreate(PantryItemIn):
    """Create a stored pantry item."""


class PantryItemUpdate(BaseModel):
    """Update a pantry item."""

    name: str | None = Field(None, min_length=1, max_length=255)
    quantity: float | None = Field(None, ge=0)
    unit: str | None = Field(None, max_length=50)


class PantryItemResponse(BaseModel):
    """Pantry item response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    normalized_name: str
    quantity: float
    unit: str | None
    created_at: datetime
    updated_at: datetime
