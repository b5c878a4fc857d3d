"""LLM prompt templates for recipe generation."""

from collections.abc import Iterable, Sequence

from src.services.ingredient_matcher import PantryEntry

RECIPE_GENERATION_SYSTEM_PROMPT = """You are a home cooking assistant. You invent practical recipes that can be cooked mostly from the ingredients a user already has.

Rules:
- Use the listed pantry ingredients, in quantities no larger than what is available
- You may optionally add common vegetarian household staples (salt, pepper, oil, water)
- Keep prep time (in minutes) within the requested range
- Never reuse a title from the excluded list
- Quantities must be plain numbers; units should be metric (g, kg, ml, l) or tsp/tbsp/cup

Respond ONLY with a valid JSON array matching this schema:
[
  {
    "title": "string",
    "instructions": "string",
    "prepTime": number,
    "ingredients": [
      {"ingredientName": "string", "quantity": number, "unit": "string"}
    ]
  }
]"""


def format_pantry_line(entry: PantryEntry) -> str:
    """Render a pantry entry as "500 g flour"."""
    quantity = f"{entry.quantity:g}"
    if entry.unit:
        return f"{quantity} {entry.unit} {entry.name}"
    return f"{quantity} {entry.name}"


def get_recipe_generation_prompt(
    pantry: Sequence[PantryEntry],
    min_prep_time: int,
    max_prep_time: int,
    excluded_titles: Iterable[str],
    count: int,
) -> str:
    """Generate prompt asking for `count` new recipes.

    Args:
        pantry: Ingredients the user has
        min_prep_time: Lower prep time bound in minutes
        max_prep_time: Upper prep time bound in minutes
        excluded_titles: Titles that must not be suggested again
        count: Number of recipes wanted
    """
    ingredients = ", ".join(format_pantry_line(entry) for entry in pantry)
    excluded = sorted(excluded_titles)

    prompt = f"""Generate {count} recipes in a JSON array using these ingredients: {ingredients}.

Prep time must be between {min_prep_time} and {max_prep_time} minutes."""

    if excluded:
        excluded_str = ", ".join(f'"{title}"' for title in excluded)
        prompt += f"\n\nDo not use these titles: {excluded_str}."

    prompt += "\n\nReturn ONLY the JSON array, no extra text."
    return prompt
