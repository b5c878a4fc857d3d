"""Pantry API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.pantry import PantryItem
from src.schemas.pantry import PantryItemCreate, PantryItemResponse, PantryItemUpdate
from src.services.naming import normalize_name

router = APIRouter(prefix="/api/v1/pantry", tags=["pantry"])


def get_pantry_item_or_404(db: Session, item_id: int) -> PantryItem:
    """Get a pantry item by ID."""
    item = db.query(PantryItem).filter(PantryItem.id == item_id).first()
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pantry item not found")
    return item


@router.get("", response_model=list[PantryItemResponse])
def list_pantry_items(
    db: Annotated[Session, Depends(get_db)],
):
    """List all stored pantry items."""
    return db.query(PantryItem).order_by(PantryItem.name).all()


@router.post("", response_model=PantryItemResponse, status_code=status.HTTP_201_CREATED)
def create_pantry_item(
    item_data: PantryItemCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Add an item to the pantry."""
    normalized = normalize_name(item_data.name)

    existing = db.query(PantryItem).filter(PantryItem.normalized_name == normalized).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Item '{existing.name}' already exists in pantry",
        )

    item = PantryItem(
        name=item_data.name,
        quantity=item_data.quantity,
        unit=item_data.unit,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@router.get("/{item_id}", response_model=PantryItemResponse)
def get_pantry_item(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a specific pantry item."""
    return get_pantry_item_or_404(db, item_id)


@router.put("/{item_id}", response_model=PantryItemResponse)
def update_pantry_item(
    item_id: int,
    item_data: PantryItemUpdate,
    db: Annotated[Session, Depends(get_db)],
):
    """Update a pantry item."""
    item = get_pantry_item_or_404(db, item_id)

    if item_data.name is not None:
        item.name = item_data.name
    if item_data.quantity is not None:
        item.quantity = item_data.quantity
    if item_data.unit is not None:
        item.unit = item_data.unit if item_data.unit else None

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An item with this name already exists in your pantry",
        ) from None
    db.refresh(item)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pantry_item(
    item_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Remove an item from the pantry."""
    item = get_pantry_item_or_404(db, item_id)
    db.delete(item)
    db.commit()
