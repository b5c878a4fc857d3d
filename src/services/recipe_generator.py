"""Recipe generation through an LLM provider."""

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

import anthropic
import httpx

from src.models.enums import RecipeOrigin
from src.services.ingredient_matcher import IngredientRequirement, PantryEntry, RecipeCandidate
from src.services.llm import TextGenerator, get_llm_service
from src.services.llm_prompts import RECIPE_GENERATION_SYSTEM_PROMPT, get_recipe_generation_prompt

logger = logging.getLogger(__name__)

_LINE_COMMENT = re.compile(r"(^|[\s,\[{])//.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


class RecipeGenerationError(Exception):
    """The provider failed or answered with something unusable."""


class RecipeGenerator(Protocol):
    """Produces candidate recipes on demand.

    Results may be fewer than asked, duplicated, or invalid; callers
    deduplicate and validate.
    """

    async def generate(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
        excluded_titles: set[str],
        count: int,
    ) -> list[RecipeCandidate]: ...


def _extract_json_array(text: str) -> str:
    """Pull the outermost JSON array out of a chatty model response."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]

    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or start >= end:
        raise RecipeGenerationError("No JSON array in provider response")

    return text[start : end + 1]


def _strip_comments(array: str) -> str:
    array = _BLOCK_COMMENT.sub("", array)
    return _LINE_COMMENT.sub(r"\1", array)


def _parse_quantity(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        return None
    return quantity if quantity >= 0 else None


def _parse_prep_time(item: dict, default: int) -> int:
    for key in ("prepTime", "prep_time", "prepTimeMinutes", "prep_time_minutes"):
        if key in item:
            try:
                return int(float(item[key]))
            except (TypeError, ValueError):
                break
    return default


def _parse_ingredients(raw: Any, title: str) -> tuple[IngredientRequirement, ...]:
    if not isinstance(raw, list):
        return ()

    ingredients = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        name = entry.get("ingredientName") or entry.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        quantity = _parse_quantity(entry.get("quantity"))
        if quantity is None:
            logger.info(f"Skipping ingredient '{name}' in '{title}': invalid quantity")
            continue
        unit = entry.get("unit")
        ingredients.append(
            IngredientRequirement(
                name=name.strip(),
                quantity=quantity,
                unit=unit.strip() if isinstance(unit, str) and unit.strip() else None,
            )
        )
    return tuple(ingredients)


def parse_recipe_payload(text: str, default_prep_time: int = 0) -> list[RecipeCandidate]:
    """Parse a provider response into generated recipe candidates.

    Raises:
        RecipeGenerationError: if the response holds no parseable JSON array
    """
    array = _extract_json_array(text)
    try:
        data = json.loads(array)
    except json.JSONDecodeError:
        # Comments are stripped only when the raw array fails to parse,
        # so "//" inside string values survives.
        try:
            data = json.loads(_strip_comments(array))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse provider response as JSON: {e}")
            raise RecipeGenerationError(f"Malformed recipe JSON: {e}") from e

    if not isinstance(data, list):
        raise RecipeGenerationError("Provider response is not a JSON array")

    recipes = []
    for item in data:
        if not isinstance(item, dict):
            logger.warning(f"Ignoring non-object recipe entry: {item!r}")
            continue
        title = item.get("title")
        title = title.strip() if isinstance(title, str) else ""
        instructions = item.get("instructions")
        if isinstance(instructions, list):
            instructions = "\n".join(str(step) for step in instructions)
        elif instructions is not None:
            instructions = str(instructions)

        recipes.append(
            RecipeCandidate(
                title=title,
                instructions=instructions,
                prep_time_minutes=_parse_prep_time(item, default_prep_time),
                ingredients=_parse_ingredients(item.get("ingredients"), title),
                origin=RecipeOrigin.GENERATED,
            )
        )
    return recipes


class LLMRecipeGenerator:
    """Generate recipes by prompting an LLM for a JSON array."""

    def __init__(self, llm_service: TextGenerator | None = None):
        self.llm_service = llm_service or get_llm_service()

    async def generate(
        self,
        pantry: Sequence[PantryEntry],
        min_prep_time: int,
        max_prep_time: int,
        excluded_titles: set[str],
        count: int,
    ) -> list[RecipeCandidate]:
        """Ask the provider for `count` recipes avoiding `excluded_titles`.

        Raises:
            RecipeGenerationError: on transport errors or unusable output
        """
        if not pantry or count <= 0:
            return []

        prompt = get_recipe_generation_prompt(
            pantry, min_prep_time, max_prep_time, excluded_titles, count
        )
        try:
            text = await self.llm_service.generate(
                prompt=prompt,
                system_prompt=RECIPE_GENERATION_SYSTEM_PROMPT,
                temperature=0.7,
                max_tokens=4096,
            )
        except (httpx.HTTPError, anthropic.APIError) as e:
            raise RecipeGenerationError(f"Provider request failed: {e}") from e
        except (KeyError, ValueError) as e:
            raise RecipeGenerationError(f"Unexpected provider response: {e}") from e

        if not text or not text.strip():
            return []

        recipes = parse_recipe_payload(text, default_prep_time=min_prep_time)
        logger.info(f"Provider returned {len(recipes)} recipes (asked for {count})")
        return recipes


def get_recipe_generator() -> RecipeGenerator:
    """Get a recipe generator for the configured provider."""
    return LLMRecipeGenerator()
