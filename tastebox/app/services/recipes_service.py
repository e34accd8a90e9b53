from typing import Iterable, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tastebox.app.core.errors import NotFoundError, ValidationError
from tastebox.app.db import models
from tastebox.app.schemas.recipe import (
    ImageCreate,
    IngredientCreate,
    InstructionCreate,
    NutritionFacts,
    RecipeCreate,
    RecipeUpdate,
)


def _get_or_create_tag(db: Session, name: str) -> models.Tag:
    normalized = name.strip()
    if not normalized:
        raise ValidationError("Tag name required", [{"field": "tags", "message": "Tag name required"}])

    stmt = select(models.Tag).where(func.lower(models.Tag.name) == normalized.lower())
    tag = db.scalars(stmt).first()
    if tag:
        return tag

    tag = models.Tag(name=normalized)
    db.add(tag)
    db.flush()
    return tag


def _resolve_tags(db: Session, names: Iterable[str]) -> List[models.Tag]:
    tags: List[models.Tag] = []
    for name in names:
        tag = _get_or_create_tag(db, name)
        if tag not in tags:
            tags.append(tag)
    return tags


def _replace_images(recipe: models.Recipe, images: Iterable[ImageCreate]) -> None:
    recipe.images.clear()
    for image in images:
        recipe.images.append(
            models.RecipeImage(
                url=image.url,
                local_path=image.local_path,
                order=image.order,
                alt_text=image.alt_text,
            )
        )


def _replace_ingredients(recipe: models.Recipe, ingredients: Iterable[IngredientCreate]) -> None:
    recipe.ingredients.clear()
    for ingredient in ingredients:
        recipe.ingredients.append(
            models.Ingredient(
                name=ingredient.name,
                amount=ingredient.amount,
                unit=ingredient.unit,
                order=ingredient.order,
            )
        )


def _replace_instructions(recipe: models.Recipe, instructions: Iterable[InstructionCreate]) -> None:
    recipe.instructions.clear()
    for instruction in instructions:
        recipe.instructions.append(
            models.Instruction(
                step=instruction.step,
                description=instruction.description,
                time=instruction.time,
                temperature=instruction.temperature,
                speed=instruction.speed,
            )
        )


def _apply_scalars(recipe: models.Recipe, data: RecipeCreate) -> None:
    recipe.title = data.title
    recipe.description = data.description
    recipe.prep_time_minutes = data.prep_time_minutes
    recipe.cook_time_minutes = data.cook_time_minutes
    recipe.servings = data.servings
    recipe.difficulty = data.difficulty
    recipe.recipe_type = data.recipe_type
    recipe.source_url = data.source_url
    recipe.nutrition = data.nutrition.model_dump() if data.nutrition else None


def create_recipe(db: Session, user_id: str, data: RecipeCreate) -> models.Recipe:
    recipe = models.Recipe(user_id=user_id)
    _apply_scalars(recipe, data)
    _replace_images(recipe, data.images)
    _replace_ingredients(recipe, data.ingredients)
    _replace_instructions(recipe, data.instructions)
    recipe.tags = _resolve_tags(db, data.tags)

    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


def list_recipes(db: Session, user_id: str) -> List[models.Recipe]:
    stmt = (
        select(models.Recipe)
        .where(models.Recipe.user_id == user_id)
        .order_by(models.Recipe.created_at.desc(), models.Recipe.id)
    )
    return list(db.scalars(stmt).all())


def get_recipe(db: Session, user_id: str, recipe_id: str) -> models.Recipe:
    stmt = select(models.Recipe).where(models.Recipe.user_id == user_id, models.Recipe.id == recipe_id)
    recipe = db.scalars(stmt).first()
    if not recipe:
        # Foreign recipes look exactly like missing ones
        raise NotFoundError("Recipe not found")
    return recipe


def update_recipe(db: Session, user_id: str, recipe_id: str, data: RecipeUpdate) -> models.Recipe:
    recipe = get_recipe(db, user_id, recipe_id)
    _apply_scalars(recipe, data)

    # Old child rows must be gone before new ones reuse their step/order keys
    recipe.images.clear()
    recipe.ingredients.clear()
    recipe.instructions.clear()
    db.flush()

    _replace_images(recipe, data.images)
    _replace_ingredients(recipe, data.ingredients)
    _replace_instructions(recipe, data.instructions)
    recipe.tags = _resolve_tags(db, data.tags)

    db.commit()
    db.refresh(recipe)
    return recipe


def set_nutrition(db: Session, user_id: str, recipe_id: str, nutrition: NutritionFacts) -> models.Recipe:
    recipe = get_recipe(db, user_id, recipe_id)
    recipe.nutrition = nutrition.model_dump()
    db.commit()
    db.refresh(recipe)
    return recipe


def delete_recipe(db: Session, user_id: str, recipe_id: str) -> None:
    recipe = get_recipe(db, user_id, recipe_id)
    owner = recipe.user
    if owner is not None and recipe in owner.recipes:
        owner.recipes.remove(recipe)
    db.delete(recipe)
    db.commit()


def list_tags_for_user(db: Session, user_id: str) -> List[models.Tag]:
    stmt = (
        select(models.Tag)
        .join(models.recipe_tags, models.Tag.id == models.recipe_tags.c.tag_id)
        .join(models.Recipe, models.recipe_tags.c.recipe_id == models.Recipe.id)
        .where(models.Recipe.user_id == user_id)
        .group_by(models.Tag.id)
        .order_by(models.Tag.name.asc())
    )
    return list(db.scalars(stmt).all())
