"""FastAPI dependencies for services and database."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from src.database import get_session_factory
from src.services.image_service import IngredientImageService
from src.services.matching import MatchingEngine, SqlRecipeSource
from src.services.pagination import PaginationCoordinator
from src.services.recipe_generator import RecipeGenerator
from src.services.recipe_generator import get_recipe_generator as _get_recipe_generator
from src.services.session_cache import SessionCache
from src.services.session_cache import get_session_cache as _get_session_cache


def get_session_cache() -> SessionCache:
    """Get the process-wide session cache."""
    return _get_session_cache()


def get_recipe_generator() -> RecipeGenerator:
    """Get recipe generator for the configured provider."""
    return _get_recipe_generator()


@lru_cache
def get_image_service() -> IngredientImageService:
    """Get image service (shared so its in-memory cache survives requests)."""
    return IngredientImageService()


def get_matching_engine(
    session_factory: Annotated[sessionmaker, Depends(get_session_factory)],
) -> MatchingEngine:
    """Get matching engine backed by the recipes table."""
    return MatchingEngine(SqlRecipeSource(session_factory))


def get_pagination_coordinator(
    engine: Annotated[MatchingEngine, Depends(get_matching_engine)],
    generator: Annotated[RecipeGenerator, Depends(get_recipe_generator)],
    cache: Annotated[SessionCache, Depends(get_session_cache)],
) -> PaginationCoordinator:
    """Get pagination coordinator with dependencies."""
    return PaginationCoordinator(engine, generator, cache)
