from fastapi import APIRouter, Depends

from tastebox.app.api.deps import get_current_user
from tastebox.app.schemas.auth import CurrentUser
from tastebox.app.schemas.nutrition import NutritionRequest, NutritionResponse
from tastebox.app.services import nutrition_service

router = APIRouter(prefix="/nutrition", tags=["nutrition"])


@router.post("/calculate", response_model=NutritionResponse)
async def calculate_nutrition(
    payload: NutritionRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    nutrition = await nutrition_service.calculate_nutrition(payload.ingredients, payload.servings)
    return NutritionResponse(nutrition=nutrition)
