import json
import logging
from typing import Iterable

from pydantic import ValidationError as PydanticValidationError

from tastebox.app.core.errors import ParseError, ValidationError
from tastebox.app.schemas.nutrition import NutritionIngredient
from tastebox.app.schemas.recipe import NutritionFacts
from tastebox.app.services import llm_client

logger = logging.getLogger(__name__)

MAX_NUTRITION_SERVINGS = 20

NUTRITION_SYSTEM_PROMPT = (
    "You are an expert nutritionist. Use your nutrition knowledge to compute precise, "
    "realistic values. Answer quickly with valid JSON and no extended reasoning."
)

NUTRITION_TEMPLATE = """Calculate the nutrition facts of this recipe as precisely as possible.

RECIPE INGREDIENTS ({servings} servings):
{ingredients}

INSTRUCTIONS:
1. For each ingredient compute calories, total fat, sodium, total carbohydrates, fiber, sugars and protein for the stated amount
2. Add the values up to get the recipe total
3. Divide the total by {servings} servings to get per-serving values

Ingredients without a specific amount ("to taste", "al gusto") get a realistic estimate:
  * Salt: ~1 teaspoon (5g) for savory dishes
  * Pepper: ~1/4 teaspoon (0.5g)
  * Sugar: ~1-2 teaspoons (5-10g) for desserts
  * Cooking oil: ~1-2 tablespoons (15-30ml)
  * Dried spices: ~1/2 teaspoon (1-2g)
  * Fresh herbs: ~1 tablespoon (3-5g)

Answer ONLY with JSON, values PER SERVING (calories in kcal, sodium in mg, everything else in g):
{{
  "calories": number,
  "protein": number,
  "carbohydrates": number,
  "fat": number,
  "fiber": number,
  "sugar": number,
  "sodium": number
}}"""


def format_ingredient_lines(ingredients: Iterable[NutritionIngredient]) -> str:
    lines = []
    for ing in ingredients:
        lines.append(" ".join(part for part in (ing.amount, ing.unit or "", ing.name) if part).strip())
    return "\n".join(lines)


def build_nutrition_prompt(ingredients: Iterable[NutritionIngredient], servings: int) -> str:
    return NUTRITION_TEMPLATE.format(servings=servings, ingredients=format_ingredient_lines(ingredients))


def parse_nutrition(raw: str) -> NutritionFacts:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError("Invalid JSON response from the language model") from exc
    try:
        return NutritionFacts.model_validate(data)
    except PydanticValidationError as exc:
        violations = [
            {"field": ".".join(str(p) for p in err.get("loc", [])) or None, "message": err.get("msg")}
            for err in exc.errors()
        ]
        raise ValidationError("Nutrition response failed validation", violations) from exc


async def calculate_nutrition(ingredients: Iterable[NutritionIngredient], servings: int) -> NutritionFacts:
    ingredients = list(ingredients)
    capped = min(servings, MAX_NUTRITION_SERVINGS)
    if capped != servings:
        logger.info("Capping nutrition servings from %d to %d", servings, capped)
    completion = await llm_client.chat_completion(
        NUTRITION_SYSTEM_PROMPT,
        build_nutrition_prompt(ingredients, capped),
        temperature=0.1,
        max_tokens=500,
    )
    nutrition = parse_nutrition(completion)
    logger.info("Calculated nutrition for %d ingredients: %s kcal/serving", len(ingredients), nutrition.calories)
    return nutrition
