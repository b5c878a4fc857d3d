"""Ingredient model caching image lookups."""

from sqlalchemy import Column, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin


class Ingredient(Base, TimestampMixin):
    """Canonical ingredient name with its looked-up image."""

    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)  # Normalized
    image_url = Column(String(1000), nullable=True)
