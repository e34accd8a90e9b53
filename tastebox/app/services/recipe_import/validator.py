"""Trust boundary for language model output.

The completion is parsed as JSON and checked against ``ExtractedRecipe``. Nothing
produced by the model reaches a preview or the database without passing here.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from tastebox.app.core.errors import NoRecipeFoundError, ParseError, ValidationError
from tastebox.app.db.models import Difficulty
from tastebox.app.schemas.recipe import MAX_RECIPE_IMAGES, is_absolute_http_url

logger = logging.getLogger(__name__)

DEFAULT_PREP_TIME_MINUTES = 30
DEFAULT_SERVINGS = 4
DEFAULT_DIFFICULTY = Difficulty.MEDIUM


def _round_number(value: Any) -> Any:
    if isinstance(value, float):
        return int(round(value))
    return value


class ExtractedImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    url: str
    alt_text: Optional[str] = Field(None, alias="altText")
    order: int = Field(ge=1, le=MAX_RECIPE_IMAGES)

    @field_validator("url")
    @classmethod
    def absolute_url(cls, value: str) -> str:
        if not is_absolute_http_url(value):
            raise ValueError("Image URL must be absolute")
        return value


class ExtractedIngredient(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    amount: str = Field(min_length=1)
    unit: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}"
        return value


class ExtractedInstruction(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    step: int = Field(ge=1)
    description: str = Field(min_length=1)


class ExtractedRecipe(BaseModel):
    """Normalized extraction result; never persisted directly."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: Optional[str] = None
    images: List[ExtractedImage] = Field(default_factory=list, max_length=MAX_RECIPE_IMAGES)
    ingredients: List[ExtractedIngredient]
    instructions: List[ExtractedInstruction]
    prep_time_minutes: int = Field(DEFAULT_PREP_TIME_MINUTES, alias="prepTime", ge=1)
    cook_time_minutes: Optional[int] = Field(None, alias="cookTime", ge=0)
    servings: int = Field(DEFAULT_SERVINGS, ge=1)
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    recipe_type: Optional[str] = Field(None, alias="recipeType")
    tags: List[str] = Field(default_factory=list)

    @field_validator("prep_time_minutes", mode="before")
    @classmethod
    def default_prep_time(cls, value: Any) -> Any:
        return DEFAULT_PREP_TIME_MINUTES if value is None else _round_number(value)

    @field_validator("cook_time_minutes", mode="before")
    @classmethod
    def round_cook_time(cls, value: Any) -> Any:
        value = _round_number(value)
        # Saved recipes require cook_time_minutes >= 0; a negative guess means unknown
        if isinstance(value, int) and not isinstance(value, bool) and value < 0:
            return None
        return value

    @field_validator("servings", mode="before")
    @classmethod
    def default_servings(cls, value: Any) -> Any:
        return DEFAULT_SERVINGS if value is None else _round_number(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def default_difficulty(cls, value: Any) -> Any:
        return DEFAULT_DIFFICULTY if value is None else value

    @field_validator("images", "tags", mode="before")
    @classmethod
    def null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("description", "recipe_type")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("tags")
    @classmethod
    def drop_blank_tags(cls, value: List[str]) -> List[str]:
        return [tag for tag in value if tag]


def _violations(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []))
        details.append({"field": loc or None, "message": err.get("msg", "Invalid value")})
    return details


def parse_extraction(raw: str) -> ExtractedRecipe:
    """Parse and validate a raw completion into an ``ExtractedRecipe``.

    Raises ``ParseError`` when the text is not JSON, ``NoRecipeFoundError`` when the
    model reports (or the data shows) there is no recipe, and ``ValidationError``
    with field-level violations for anything else out of schema.
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Completion is not valid JSON: %s", raw[:200])
        raise ParseError("Invalid JSON response from the language model") from exc

    if not isinstance(data, dict):
        raise ValidationError(
            "Language model response is not a JSON object",
            [{"field": None, "message": "Expected a JSON object"}],
        )

    if data.get("error") is True:
        raise NoRecipeFoundError("No valid recipe found on this page")

    images = data.get("images")
    if isinstance(images, list) and len(images) > MAX_RECIPE_IMAGES:
        logger.info("Dropping %d extra image candidates", len(images) - MAX_RECIPE_IMAGES)
        data["images"] = images[:MAX_RECIPE_IMAGES]

    try:
        recipe = ExtractedRecipe.model_validate(data)
    except PydanticValidationError as exc:
        violations = _violations(exc)
        logger.warning("Extracted recipe failed validation: %s", violations)
        raise ValidationError("Extracted recipe failed validation", violations) from exc

    if not recipe.ingredients and not recipe.instructions:
        raise NoRecipeFoundError("No valid recipe found on this page")
    return recipe
