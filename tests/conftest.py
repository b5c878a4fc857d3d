"""Pytest configuration and fixtures."""

import os

# The app engine is created at import time; keep it off PostgreSQL unless asked
os.environ.setdefault("DATABASE_URL", "sqlite:///./app.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.api.dependencies import (  # noqa: E402
    get_image_service,
    get_recipe_generator,
    get_session_cache,
)
from src.database import Base, get_db, get_session_factory  # noqa: E402
from src.main import app  # noqa: E402
from src.models.enums import RecipeOrigin  # noqa: E402
from src.models.recipe import Recipe, RecipeIngredient  # noqa: E402
from src.services.image_service import IngredientImageService  # noqa: E402
from src.services.ingredient_matcher import (  # noqa: E402
    IngredientRequirement,
    RecipeCandidate,
    normalize_name,
)
from src.services.session_cache import SessionCache  # noqa: E402

# Use test database - PostgreSQL when TEST_DATABASE_URL is set, SQLite locally
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeRecipeGenerator:
    """Recipe generator returning scripted responses.

    Each call pops the next response; an Exception instance is raised instead
    of returned. Once the script runs out, calls return [].
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    async def generate(self, pantry, min_prep_time, max_prep_time, excluded_titles, count):
        self.calls.append(
            {
                "pantry": list(pantry),
                "min_prep_time": min_prep_time,
                "max_prep_time": max_prep_time,
                "excluded_titles": set(excluded_titles),
                "count": count,
            }
        )
        if not self.responses:
            return []
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return list(response)


class InMemoryRecipeSource:
    """Recipe source over a plain list, for engine and coordinator tests."""

    def __init__(self, recipes=None):
        self.recipes = []
        self.saved = []
        for recipe in recipes or []:
            self.add(recipe)

    def add(self, recipe: RecipeCandidate) -> RecipeCandidate:
        stored = RecipeCandidate(
            id=len(self.recipes) + 1,
            title=recipe.title,
            instructions=recipe.instructions,
            prep_time_minutes=recipe.prep_time_minutes,
            ingredients=recipe.ingredients,
            origin=RecipeOrigin.STORED,
        )
        self.recipes.append(stored)
        return stored

    def query_by_prep_time_and_ingredient_names(self, min_prep_time, max_prep_time, names):
        return [
            recipe
            for recipe in self.recipes
            if min_prep_time <= recipe.prep_time_minutes <= max_prep_time
            and any(normalize_name(ing.name) in names for ing in recipe.ingredients)
        ]

    def find_by_title(self, title):
        key = normalize_name(title)
        return next((r for r in self.recipes if r.normalized_title == key), None)

    def save_generated(self, recipe):
        existing = self.find_by_title(recipe.title)
        if existing:
            return existing
        stored = self.add(recipe)
        saved = RecipeCandidate(
            id=stored.id,
            title=stored.title,
            instructions=stored.instructions,
            prep_time_minutes=stored.prep_time_minutes,
            ingredients=stored.ingredients,
            origin=RecipeOrigin.GENERATED,
        )
        self.saved.append(saved)
        return saved


def make_recipe(title, ingredients, prep_time=20, origin=RecipeOrigin.STORED):
    """Build a RecipeCandidate from (name, quantity, unit) tuples."""
    return RecipeCandidate(
        title=title,
        prep_time_minutes=prep_time,
        instructions=f"Cook the {title.lower()}.",
        ingredients=tuple(
            IngredientRequirement(name=name, quantity=quantity, unit=unit)
            for name, quantity, unit in ingredients
        ),
        origin=origin,
    )


def make_generated(title, ingredients=(("flour", 100, "g"),), prep_time=20):
    """Build a generated RecipeCandidate."""
    return make_recipe(title, ingredients, prep_time=prep_time, origin=RecipeOrigin.GENERATED)


def add_recipe(db, title, ingredients, prep_time=20, origin=RecipeOrigin.STORED) -> Recipe:
    """Store a recipe row with (name, quantity, unit) ingredients."""
    recipe = Recipe(
        title=title,
        instructions=f"Cook the {title.lower()}.",
        prep_time_minutes=prep_time,
        origin=origin,
        ingredients=[
            RecipeIngredient(
                name=name,
                quantity=quantity,
                unit=unit,
                position=position,
            )
            for position, (name, quantity, unit) in enumerate(ingredients)
        ],
    )
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def session_cache():
    """A fresh session cache with default limits."""
    return SessionCache(max_generated_per_session=5, ttl_seconds=1800)


@pytest.fixture
def fake_generator():
    """Scripted recipe generator (empty script)."""
    return FakeRecipeGenerator()


@pytest.fixture(scope="function")
def client(db, session_cache, fake_generator):
    """Create a test client with database and service overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    image_service = IngredientImageService()
    image_service.access_key = None
    image_service._configured = False

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_session_cache] = lambda: session_cache
    app.dependency_overrides[get_recipe_generator] = lambda: fake_generator
    app.dependency_overrides[get_image_service] = lambda: image_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
