import logging
from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tastebox.app.api.deps import get_current_user, get_db_session, get_storage_provider
from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import ValidationError
from tastebox.app.schemas.auth import CurrentUser
from tastebox.app.schemas.nutrition import NutritionIngredient
from tastebox.app.schemas.recipe import MAX_RECIPE_IMAGES, RecipeCreate, RecipeRead, RecipeUpdate
from tastebox.app.services import nutrition_service, pdf_export, recipes_service
from tastebox.app.services.image_processing import resize_to_fit
from tastebox.app.services.recipe_import.images import recipe_image_filename
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("", response_model=list[RecipeRead])
def list_recipes(
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return recipes_service.list_recipes(db, current_user.id)


@router.post("", response_model=RecipeRead, status_code=status.HTTP_201_CREATED)
def create_recipe(
    payload: RecipeCreate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    recipe = recipes_service.create_recipe(db, current_user.id, payload)
    logger.info("User %s created recipe %s", current_user.id, recipe.id)
    return recipe


class UploadedImage(BaseModel):
    url: str
    local_path: str
    order: int
    alt_text: str


class ImageUploadResponse(BaseModel):
    success: bool = True
    images: List[UploadedImage]


@router.post("/images", response_model=ImageUploadResponse)
def upload_recipe_images(
    images: List[UploadFile] = File(...),
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Resize up to three uploaded images to 800x600 and store them for a recipe form."""
    settings = get_settings()
    if len(images) > MAX_RECIPE_IMAGES:
        raise ValidationError(
            f"At most {MAX_RECIPE_IMAGES} images can be uploaded",
            [{"field": "images", "message": f"Received {len(images)} files"}],
        )

    uploaded: List[UploadedImage] = []
    for index, upload in enumerate(images, start=1):
        if not (upload.content_type or "").startswith("image/"):
            raise ValidationError("Only image files are allowed", [{"field": "images", "message": "Not an image"}])
        data = upload.file.read()
        if not data:
            raise ValidationError("Empty file", [{"field": "images", "message": "Empty file"}])
        if len(data) > settings.recipe_image_max_bytes:
            raise ValidationError(
                "File too large. Maximum size is 5MB per image.",
                [{"field": "images", "message": f"Exceeds {settings.recipe_image_max_bytes} bytes"}],
            )
        try:
            resized, resized_type = resize_to_fit(data, upload.content_type or "image/jpeg")
        except ValidationError:
            logger.warning("Skipping undecodable upload %d (%s)", index, upload.filename)
            continue
        url = storage.save_bytes(recipe_image_filename(index, resized_type), resized, resized_type)
        order = len(uploaded) + 1
        uploaded.append(UploadedImage(url=url, local_path=url, order=order, alt_text=f"Recipe image {order}"))

    if not uploaded:
        raise ValidationError("No valid images provided", [{"field": "images", "message": "No decodable images"}])
    logger.info("User %s uploaded %d recipe images", current_user.id, len(uploaded))
    return ImageUploadResponse(images=uploaded)


@router.get("/{recipe_id}", response_model=RecipeRead)
def get_recipe(
    recipe_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return recipes_service.get_recipe(db, current_user.id, recipe_id)


@router.put("/{recipe_id}", response_model=RecipeRead)
def update_recipe(
    recipe_id: str,
    payload: RecipeUpdate,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return recipes_service.update_recipe(db, current_user.id, recipe_id, payload)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    recipes_service.delete_recipe(db, current_user.id, recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{recipe_id}/nutrition", response_model=RecipeRead)
async def calculate_recipe_nutrition(
    recipe_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    recipe = recipes_service.get_recipe(db, current_user.id, recipe_id)
    ingredients = [
        NutritionIngredient(name=ing.name, amount=ing.amount or "", unit=ing.unit)
        for ing in recipe.ingredients
    ]
    if not ingredients:
        raise ValidationError(
            "Recipe has no ingredients",
            [{"field": "ingredients", "message": "At least one ingredient is required"}],
        )
    nutrition = await nutrition_service.calculate_nutrition(ingredients, recipe.servings)
    return recipes_service.set_nutrition(db, current_user.id, recipe_id, nutrition)


@router.get("/{recipe_id}/pdf")
def export_recipe_pdf(
    recipe_id: str,
    db: Session = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    recipe = RecipeRead.model_validate(recipes_service.get_recipe(db, current_user.id, recipe_id))
    content = pdf_export.export_recipe_pdf(recipe)
    logger.info("User %s exported recipe %s as PDF (%d bytes)", current_user.id, recipe_id, len(content))
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_export.pdf_filename(recipe.title)}"'},
    )
