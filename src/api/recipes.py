"""Recipe API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from src.database import get_db
from src.models.enums import RecipeOrigin
from src.models.recipe import Recipe, RecipeIngredient
from src.schemas.recipe import RecipeCreate, RecipeListResponse, RecipeResponse
from src.services.naming import normalize_name

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


def get_recipe_or_404(db: Session, recipe_id: int) -> Recipe:
    """Get a recipe by ID."""
    recipe = db.query(Recipe).filter(Recipe.id == recipe_id).first()
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipe not found")
    return recipe


@router.get("", response_model=list[RecipeListResponse])
def list_recipes(
    db: Annotated[Session, Depends(get_db)],
    origin: RecipeOrigin | None = None,
):
    """List recipes, optionally only stored or only generated ones."""
    query = db.query(Recipe).options(selectinload(Recipe.ingredients))
    if origin is not None:
        query = query.filter(Recipe.origin == origin)
    recipes = query.order_by(Recipe.title).all()

    return [
        RecipeListResponse(
            id=r.id,
            title=r.title,
            prep_time_minutes=r.prep_time_minutes,
            origin=r.origin,
            ingredient_count=len(r.ingredients),
            created_at=r.created_at,
        )
        for r in recipes
    ]


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
def create_recipe(
    recipe_data: RecipeCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Create a stored recipe with ingredients."""
    normalized = normalize_name(recipe_data.title)
    if not normalized:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Recipe title must not be blank"
        )

    existing = db.query(Recipe).filter(Recipe.normalized_title == normalized).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Recipe '{existing.title}' already exists",
        )

    recipe = Recipe(
        title=recipe_data.title,
        instructions=recipe_data.instructions,
        prep_time_minutes=recipe_data.prep_time_minutes,
        origin=RecipeOrigin.STORED,
        ingredients=[
            RecipeIngredient(
                name=ing.name,
                quantity=ing.quantity,
                unit=ing.unit,
                position=position,
            )
            for position, ing in enumerate(recipe_data.ingredients)
        ],
    )
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


@router.get("/{recipe_id}", response_model=RecipeResponse)
def get_recipe(
    recipe_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific recipe."""
    return get_recipe_or_404(db, recipe_id)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Delete a recipe."""
    recipe = get_recipe_or_404(db, recipe_id)
    db.delete(recipe)
    db.commit()
