"""Mixins for SQLAlchemy models."""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import validates

from src.services.naming import normalize_name


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class NormalizedNameMixin:
    """Mixin keeping ``normalized_name`` in step with ``name``.

    The model must define both columns. Assigning ``name`` (including through
    the constructor) trims it and refreshes the lookup key.
    """

    @validates("name")
    def validate_name(self, key: str, value: str) -> str:
        self.normalized_name = normalize_name(value)
        return value.strip()
