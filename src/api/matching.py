"""Recipe matching API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_image_service, get_pagination_coordinator
from src.config import get_settings
from src.database import get_db
from src.models.pantry import PantryItem
from src.schemas.matching import (
    MatchBatchResponse,
    MatchedIngredient,
    MatchedRecipe,
    MatchRequest,
)
from src.services.image_service import IngredientImageService
from src.services.ingredient_matcher import PantryEntry, normalize_name
from src.services.pagination import BatchResult, PaginationCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/matching-recipes", tags=["matching"])


def build_batch_response(
    result: BatchResult,
    db: Session,
    image_service: IngredientImageService,
) -> MatchBatchResponse:
    """Convert a batch into the API response, attaching known ingredient images.

    Ingredients without a stored image are queued for background lookup.
    """
    names = {ing.name for recipe in result.recipes for ing in recipe.ingredients}
    images = image_service.cached_image_urls(db, names)

    missing = sorted({normalize_name(name) for name in names} - images.keys() - {""})
    if missing and image_service.is_configured:
        from src.tasks.ingredient_images import fetch_ingredient_images

        fetch_ingredient_images.delay(missing)
        logger.info(f"Queued image lookup for {len(missing)} ingredients")

    return MatchBatchResponse(
        token=result.token,
        message=result.message,
        exhausted=result.exhausted,
        recipes=[
            MatchedRecipe(
                id=recipe.id,
                title=recipe.title,
                instructions=recipe.instructions,
                prep_time_minutes=recipe.prep_time_minutes,
                origin=recipe.origin.value,
                ingredients=[
                    MatchedIngredient(
                        name=ing.name,
                        quantity=ing.quantity,
                        unit=ing.unit,
                        image_url=images.get(normalize_name(ing.name)),
                    )
                    for ing in recipe.ingredients
                ],
            )
            for recipe in result.recipes
        ],
    )


@router.post("", response_model=MatchBatchResponse)
async def start_matching(
    request: MatchRequest,
    coordinator: Annotated[PaginationCoordinator, Depends(get_pagination_coordinator)],
    image_service: Annotated[IngredientImageService, Depends(get_image_service)],
    db: Annotated[Session, Depends(get_db)],
):
    """Match recipes against a pantry and return the first batch with a session token.

    Uses the stored pantry when the request carries no ingredients.
    """
    if request.ingredients is None:
        pantry = [
            PantryEntry(name=item.name, quantity=item.quantity, unit=item.unit)
            for item in db.query(PantryItem).order_by(PantryItem.id).all()
        ]
    else:
        pantry = [
            PantryEntry(name=item.name, quantity=item.quantity, unit=item.unit)
            for item in request.ingredients
        ]

    batch_size = request.batch_size or get_settings().recipe_batch_size
    try:
        result = await coordinator.start_session(
            pantry, request.min_prep_time, request.max_prep_time, batch_size
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return build_batch_response(result, db, image_service)


@router.get("/{token}", response_model=MatchBatchResponse)
async def get_next_batch(
    token: str,
    coordinator: Annotated[PaginationCoordinator, Depends(get_pagination_coordinator)],
    image_service: Annotated[IngredientImageService, Depends(get_image_service)],
    db: Annotated[Session, Depends(get_db)],
    batch_size: Annotated[int | None, Query(gt=0, le=50)] = None,
):
    """Get the next batch of recipes for a session.

    Unknown or expired tokens return an empty batch with a message.
    """
    try:
        result = await coordinator.next_batch(
            token, batch_size or get_settings().recipe_batch_size
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return build_batch_response(result, db, image_service)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT)
def end_matching(
    token: str,
    coordinator: Annotated[PaginationCoordinator, Depends(get_pagination_coordinator)],
):
    """Discard a matching session."""
    coordinator.end_session(token)
