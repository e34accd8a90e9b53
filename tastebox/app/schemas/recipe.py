from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tastebox.app.db.models import Difficulty

MAX_RECIPE_IMAGES = 3


def is_absolute_http_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        # urlparse raises on malformed netlocs such as an unclosed IPv6 bracket
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


class NutritionFacts(BaseModel):
    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbohydrates: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float = Field(ge=0)
    sugar: float = Field(ge=0)
    sodium: float = Field(ge=0)


class ImageBase(BaseModel):
    url: str = Field(min_length=1)
    local_path: Optional[str] = None
    order: int = Field(ge=1, le=MAX_RECIPE_IMAGES)
    alt_text: Optional[str] = None


class ImageCreate(ImageBase):
    pass


class ImageRead(ImageBase):
    model_config = ConfigDict(from_attributes=True)


class IngredientBase(BaseModel):
    name: str = Field(min_length=1)
    amount: str = Field(min_length=1)
    unit: Optional[str] = None
    order: int = Field(ge=1)


class IngredientCreate(IngredientBase):
    pass


class IngredientRead(IngredientBase):
    model_config = ConfigDict(from_attributes=True)


class InstructionBase(BaseModel):
    step: int = Field(ge=1)
    description: str = Field(min_length=1)
    time: Optional[str] = None
    temperature: Optional[str] = None
    speed: Optional[str] = None

    def has_appliance_settings(self) -> bool:
        return any(value and value.strip() for value in (self.time, self.temperature, self.speed))


class InstructionCreate(InstructionBase):
    pass


class InstructionRead(InstructionBase):
    model_config = ConfigDict(from_attributes=True)


class RecipeBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    prep_time_minutes: int = Field(ge=1)
    cook_time_minutes: Optional[int] = Field(None, ge=0)
    servings: int = Field(ge=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    recipe_type: Optional[str] = None
    source_url: Optional[str] = None
    nutrition: Optional[NutritionFacts] = None


class RecipeCreate(RecipeBase):
    images: List[ImageCreate] = Field(default_factory=list, max_length=MAX_RECIPE_IMAGES)
    ingredients: List[IngredientCreate] = Field(default_factory=list)
    instructions: List[InstructionCreate] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_absolute_http_url(value):
            raise ValueError("Source URL must be an absolute http(s) URL")
        return value

    @field_validator("images")
    @classmethod
    def validate_images(cls, value: List[ImageCreate]) -> List[ImageCreate]:
        orders = [image.order for image in value]
        if len(set(orders)) != len(orders):
            raise ValueError("Image order values must be unique")
        return value

    @field_validator("instructions")
    @classmethod
    def validate_instructions(cls, value: List[InstructionCreate]) -> List[InstructionCreate]:
        steps = [instruction.step for instruction in value]
        if len(set(steps)) != len(steps):
            raise ValueError("Instruction step numbers must be unique")
        return value


class RecipeUpdate(RecipeCreate):
    pass


class RecipeRead(RecipeBase):
    id: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    images: List[ImageRead]
    ingredients: List[IngredientRead]
    instructions: List[InstructionRead]
    tags: List[str]

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, value):
        return [getattr(tag, "name", tag) for tag in value]

    @computed_field
    @property
    def appliance_specific(self) -> bool:
        return any(instruction.has_appliance_settings() for instruction in self.instructions)
