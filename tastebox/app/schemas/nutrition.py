from typing import List, Optional

from pydantic import BaseModel, Field

from tastebox.app.schemas.recipe import NutritionFacts


class NutritionIngredient(BaseModel):
    name: str = Field(min_length=1)
    # Empty amounts are allowed for "to taste" ingredients
    amount: str = ""
    unit: Optional[str] = None


class NutritionRequest(BaseModel):
    ingredients: List[NutritionIngredient] = Field(min_length=1)
    servings: int = Field(4, ge=1)


class NutritionResponse(BaseModel):
    success: bool = True
    nutrition: NutritionFacts
