"""Celery tasks for ingredient image lookups."""

import asyncio
import logging

from src.celery_app import app as celery_app
from src.database import SessionLocal
from src.services.image_service import IngredientImageService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def fetch_ingredient_images(self, ingredient_names: list[str]) -> dict:
    """Look up and store images for ingredients that don't have one yet.

    Args:
        ingredient_names: Ingredient names as they appear in recipes

    Returns:
        dict with lookup results
    """
    image_service = IngredientImageService()
    if not image_service.is_configured:
        logger.info("Unsplash API not configured - skipping image lookup")
        return {"skipped": True, "reason": "API not configured"}

    db = SessionLocal()
    try:
        found = 0
        missing = 0
        for name in ingredient_names:
            image_url = asyncio.run(image_service.get_image_url(db, name))
            if image_url:
                found += 1
            else:
                missing += 1

        logger.info(f"Ingredient image lookup complete: {found} found, {missing} missing")
        return {"success": True, "found": found, "missing": missing}

    except Exception as e:
        logger.error(f"Error fetching ingredient images: {e}", exc_info=True)
        db.rollback()

        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=60) from e

        return {"error": str(e)}
    finally:
        db.close()
