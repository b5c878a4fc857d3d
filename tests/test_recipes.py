"""Recipe API tests."""

from conftest import add_recipe

PANCAKES = {
    "title": "Pancakes",
    "instructions": "Whisk and fry.",
    "prep_time_minutes": 20,
    "ingredients": [
        {"name": "Flour", "quantity": 200, "unit": "g"},
        {"name": "Milk", "quantity": 300, "unit": "ml"},
        {"name": "Eggs", "quantity": 2},
    ],
}


def test_create_recipe(client):
    """Test creating a recipe with ingredients."""
    response = client.post("/api/v1/recipes", json=PANCAKES)
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Pancakes"
    assert data["origin"] == "stored"
    assert data["prep_time_minutes"] == 20
    assert [(i["name"], i["quantity"], i["unit"]) for i in data["ingredients"]] == [
        ("Flour", 200, "g"),
        ("Milk", 300, "ml"),
        ("Eggs", 2, None),
    ]


def test_create_recipe_requires_ingredients(client):
    """Test a recipe needs at least one ingredient."""
    response = client.post("/api/v1/recipes", json={**PANCAKES, "ingredients": []})
    assert response.status_code == 422


def test_create_recipe_blank_title(client):
    """Test a whitespace-only title is rejected."""
    response = client.post("/api/v1/recipes", json={**PANCAKES, "title": "   "})
    assert response.status_code == 400


def test_create_duplicate_recipe(client):
    """Test titles are unique regardless of case."""
    client.post("/api/v1/recipes", json=PANCAKES)

    response = client.post("/api/v1/recipes", json={**PANCAKES, "title": "PANCAKES"})
    assert response.status_code == 409


def test_list_recipes(client, db):
    """Test listing recipes sorted by title with ingredient counts."""
    add_recipe(db, "Waffles", [("flour", 100, "g"), ("milk", 100, "ml")])
    add_recipe(db, "Crepes", [("flour", 50, "g")])
    add_recipe(db, "Flatbread", [("flour", 200, "g")], origin="generated")

    response = client.get("/api/v1/recipes")
    assert response.status_code == 200
    data = response.json()
    assert [r["title"] for r in data] == ["Crepes", "Flatbread", "Waffles"]
    assert [r["ingredient_count"] for r in data] == [1, 1, 2]


def test_list_recipes_by_origin(client, db):
    """Test filtering recipes by origin."""
    add_recipe(db, "Crepes", [("flour", 50, "g")])
    add_recipe(db, "Flatbread", [("flour", 200, "g")], origin="generated")

    response = client.get("/api/v1/recipes", params={"origin": "generated"})
    assert [r["title"] for r in response.json()] == ["Flatbread"]

    response = client.get("/api/v1/recipes", params={"origin": "unknown"})
    assert response.status_code == 422


def test_get_recipe(client):
    """Test getting a recipe by ID."""
    recipe_id = client.post("/api/v1/recipes", json=PANCAKES).json()["id"]

    response = client.get(f"/api/v1/recipes/{recipe_id}")
    assert response.status_code == 200
    assert response.json()["title"] == "Pancakes"
    assert len(response.json()["ingredients"]) == 3


def test_get_missing_recipe(client):
    """Test 404 for an unknown recipe."""
    assert client.get("/api/v1/recipes/9999").status_code == 404


def test_delete_recipe(client):
    """Test deleting a recipe."""
    recipe_id = client.post("/api/v1/recipes", json=PANCAKES).json()["id"]

    response = client.delete(f"/api/v1/recipes/{recipe_id}")
    assert response.status_code == 204
    assert client.get(f"/api/v1/recipes/{recipe_id}").status_code == 404
