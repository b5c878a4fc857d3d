"""Enums for model fields."""

from enum import StrEnum


class RecipeOrigin(StrEnum):
    """Where a recipe came from."""

    STORED = "stored"
    GENERATED = "generated"
