"""Matching engine and recipe source tests."""

import pytest

from src.models.enums import RecipeOrigin
from src.models.recipe import Recipe
from src.services.ingredient_matcher import PantryEntry
from src.services.matching import MatchingEngine, SqlRecipeSource

from conftest import TestingSessionLocal, add_recipe, make_generated

PANTRY = [
    PantryEntry("flour", 500, "g"),
    PantryEntry("milk", 1, "l"),
    PantryEntry("eggs", 6, None),
]


@pytest.fixture
def source():
    return SqlRecipeSource(TestingSessionLocal)


@pytest.fixture
def engine(source):
    return MatchingEngine(source, generated_ingredient_ratio=0.75)


def test_find_matches_returns_makeable_recipes_in_source_order(db, engine):
    """Test that only fully covered recipes in the window come back, by id."""
    crepes = add_recipe(db, "Crepes", [("flour", 100, "g"), ("milk", 300, "ml")], prep_time=15)
    add_recipe(db, "Too much flour", [("flour", 2, "kg")], prep_time=15)
    omelette = add_recipe(db, "Omelette", [("eggs", 3, None)], prep_time=10)
    add_recipe(db, "Slow bread", [("flour", 400, "g")], prep_time=240)
    add_recipe(db, "Steak", [("beef", 300, "g")], prep_time=20)

    matches = engine.find_matches(PANTRY, 5, 30)

    assert [m.title for m in matches] == ["Crepes", "Omelette"]
    assert [m.id for m in matches] == [crepes.id, omelette.id]
    assert all(m.origin == RecipeOrigin.STORED for m in matches)


def test_find_matches_prep_window_is_inclusive(db, engine):
    """Test the prep time bounds are inclusive."""
    add_recipe(db, "Edge low", [("flour", 100, "g")], prep_time=10)
    add_recipe(db, "Edge high", [("flour", 100, "g")], prep_time=30)

    matches = engine.find_matches(PANTRY, 10, 30)

    assert {m.title for m in matches} == {"Edge low", "Edge high"}


def test_find_matches_prefilter_is_case_insensitive(db, engine):
    """Test that ingredient names are compared after normalization."""
    add_recipe(db, "Milk toast", [("Milk", 100, "ml")], prep_time=5)

    matches = engine.find_matches([PantryEntry("  MILK ", 0.5, "l")], 0, 10)

    assert [m.title for m in matches] == ["Milk toast"]


def test_find_matches_empty_pantry(db, engine):
    """Test that an empty pantry matches nothing."""
    add_recipe(db, "Crepes", [("flour", 100, "g")], prep_time=15)

    assert engine.find_matches([], 0, 60) == []


def test_find_matches_keeps_ingredient_order(db, engine):
    """Test ingredients are returned in their stored order."""
    add_recipe(
        db, "Batter", [("milk", 100, "ml"), ("flour", 50, "g"), ("eggs", 1, None)], prep_time=5
    )

    (match,) = engine.find_matches(PANTRY, 0, 10)

    assert [ing.name for ing in match.ingredients] == ["milk", "flour", "eggs"]


def test_validate_generated_accepts_reasonable_recipe(engine):
    """Test a recipe within limits passes validation."""
    recipe = make_generated("Flatbread", [("flour", 200, "g"), ("milk", 100, "ml")])

    assert engine.validate_generated(recipe, pantry_item_count=3) is None


def test_validate_generated_rejects_blank_title(engine):
    """Test an empty title is rejected."""
    assert engine.validate_generated(make_generated("   "), 3) == "empty title"


def test_validate_generated_rejects_no_ingredients(engine):
    """Test an empty ingredient list is rejected."""
    assert engine.validate_generated(make_generated("Nothing", []), 3) == "no ingredients"


def test_validate_generated_limits_extra_ingredients(engine):
    """Test ingredient count may not exceed floor(pantry / ratio)."""
    # 3 pantry items / 0.75 -> at most 4 ingredients
    four = make_generated("Four", [(f"item {i}", 1, None) for i in range(4)])
    five = make_generated("Five", [(f"item {i}", 1, None) for i in range(5)])

    assert engine.max_generated_ingredients(3) == 4
    assert engine.validate_generated(four, 3) is None
    assert "exceeds limit of 4" in engine.validate_generated(five, 3)


def test_ingredient_ratio_is_configurable(source):
    """Test a different ratio changes the limit."""
    engine = MatchingEngine(source, generated_ingredient_ratio=0.8)

    # 4 / 0.8 = 5
    assert engine.max_generated_ingredients(4) == 5
    # 2 / 0.8 = 2.5 -> 2
    assert engine.max_generated_ingredients(2) == 2


def test_save_generated_persists_recipe(db, source):
    """Test accepted generated recipes are stored with their origin."""
    saved = source.save_generated(
        make_generated("Milk Bread", [("flour", 300, "g"), ("milk", 150, "ml")])
    )

    assert saved.id is not None
    assert saved.origin == RecipeOrigin.GENERATED

    row = db.query(Recipe).filter(Recipe.id == saved.id).first()
    assert row.title == "Milk Bread"
    assert row.normalized_title == "milk bread"
    assert row.origin == RecipeOrigin.GENERATED
    assert [(i.name, i.quantity, i.unit) for i in row.ingredients] == [
        ("flour", 300, "g"),
        ("milk", 150, "ml"),
    ]


def test_save_generated_reuses_stored_title(db, source):
    """Test a generated title matching a stored recipe returns the stored one."""
    stored = add_recipe(db, "Pancakes", [("flour", 100, "g")])

    saved = source.save_generated(make_generated("  PANCAKES "))

    assert saved.id == stored.id
    assert saved.origin == RecipeOrigin.STORED
    assert db.query(Recipe).count() == 1


def test_find_by_title(db, source):
    """Test title lookup is case-insensitive."""
    add_recipe(db, "Banana Bread", [("banana", 3, None)])

    assert source.find_by_title("banana bread").title == "Banana Bread"
    assert source.find_by_title("apple pie") is None
