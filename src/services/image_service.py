"""Ingredient image lookup using the Unsplash API."""

import logging
from collections.abc import Iterable

import httpx
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.ingredient import Ingredient
from src.services.naming import normalize_name

logger = logging.getLogger(__name__)


class IngredientImageService:
    """Service for finding and caching an image URL per ingredient."""

    UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"

    def __init__(self) -> None:
        """Initialize the image service."""
        settings = get_settings()
        self.access_key = settings.unsplash_access_key
        self._configured = bool(self.access_key)
        self._cache: dict[str, str | None] = {}

    @property
    def is_configured(self) -> bool:
        """Check if the Unsplash API is configured."""
        return self._configured

    async def _search_image(self, name: str) -> str | None:
        """Search Unsplash for a photo of the ingredient.

        Args:
            name: Normalized ingredient name

        Returns:
            URL of a small image, or None if nothing was found
        """
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.get(
                self.UNSPLASH_SEARCH_URL,
                params={
                    "query": f"{name} food ingredient",
                    "per_page": 1,
                    "client_id": self.access_key,
                },
            )
            response.raise_for_status()
            data = response.json()

        results = data.get("results", [])
        if not results:
            return None
        return results[0].get("urls", {}).get("small")

    async def get_image_url(self, db: Session, ingredient_name: str) -> str | None:
        """Look up (and persist) the image URL for an ingredient."""
        key = normalize_name(ingredient_name)
        if not key:
            return None
        if key in self._cache:
            return self._cache[key]

        ingredient = db.query(Ingredient).filter(Ingredient.name == key).first()
        if ingredient and ingredient.image_url:
            self._cache[key] = ingredient.image_url
            return ingredient.image_url

        if not self.is_configured:
            return None

        try:
            image_url = await self._search_image(key)
        except httpx.HTTPError as e:
            logger.warning(f"Image lookup failed for '{key}': {e}")
            return None

        self._cache[key] = image_url
        if ingredient is None:
            db.add(Ingredient(name=key, image_url=image_url))
        else:
            ingredient.image_url = image_url
        db.commit()
        return image_url

    @staticmethod
    def cached_image_urls(db: Session, names: Iterable[str]) -> dict[str, str]:
        """Known image URLs for the given ingredient names, keyed by normalized name."""
        keys = {normalize_name(name) for name in names} - {""}
        if not keys:
            return {}
        rows = (
            db.query(Ingredient)
            .filter(Ingredient.name.in_(keys), Ingredient.image_url.is_not(None))
            .all()
        )
        return {row.name: row.image_url for row in rows}
