"""Pantry item model for the stored pantry."""

from sqlalchemy import Column, Float, Integer, String

from src.database import Base
from src.models.mixins import NormalizedNameMixin, TimestampMixin


class PantryItem(Base, TimestampMixin, NormalizedNameMixin):
    """Pantry item used when a match request does not supply its own pantry."""

    __tablename__ = "pantry_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)  # Display name
    normalized_name = Column(String(255), nullable=False, unique=True)  # Lowercase, trimmed
    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String(50), nullable=True)
