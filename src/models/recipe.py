"""Recipe and RecipeIngredient models."""

from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from src.database import Base
from src.models.enums import RecipeOrigin
from src.models.mixins import NormalizedNameMixin, TimestampMixin
from src.services.naming import normalize_name


class Recipe(Base, TimestampMixin):
    """Recipe known to the matcher, either curated or accepted from generation."""

    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    normalized_title = Column(String(255), nullable=False, unique=True, index=True)
    instructions = Column(Text, nullable=True)
    prep_time_minutes = Column(Integer, nullable=False, index=True)
    origin = Column(String(20), nullable=False, default=RecipeOrigin.STORED)  # "stored" | "generated"

    # Relationships
    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeIngredient.position",
    )

    @validates("title")
    def validate_title(self, key: str, value: str) -> str:
        self.normalized_title = normalize_name(value)
        return value.strip()


class RecipeIngredient(Base, TimestampMixin, NormalizedNameMixin):
    """Ingredient requirement within a recipe."""

    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    normalized_name = Column(String(255), nullable=False, index=True)
    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String(50), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    recipe = relationship("Recipe", back_populates="ingredients")
