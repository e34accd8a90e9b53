"""Recipe import orchestration.

fetch -> sanitize -> prompt -> LLM -> validate -> images -> preview. Every stage
runs sequentially inside one request; ``ImportRun`` records the stage so errors
surface with the point where the run stopped. Image retrieval is the only stage
allowed to degrade instead of failing. Uploaded PDF and Word documents join at
the prompt stage with their extracted text in place of sanitized HTML.
"""

import logging
from typing import List, Optional

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import TasteBoxError
from tastebox.app.schemas.recipe import ImageCreate, IngredientCreate, InstructionCreate
from tastebox.app.services import llm_client
from tastebox.app.services.recipe_import.documents import normalize_text
from tastebox.app.services.recipe_import.html_fetcher import fetch_html
from tastebox.app.services.recipe_import.images import download_and_store_images
from tastebox.app.services.recipe_import.models import ImportRun, ImportStage, RecipePreview, StoredImage
from tastebox.app.services.recipe_import.prompts import (
    EXTRACTION_SYSTEM_PROMPT,
    build_document_prompt,
    build_extraction_prompt,
)
from tastebox.app.services.recipe_import.sanitizer import sanitize_html
from tastebox.app.services.recipe_import.validator import ExtractedRecipe, parse_extraction
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)


async def extract_recipe(html: str) -> ExtractedRecipe:
    settings = get_settings()
    prompt = build_extraction_prompt(sanitize_html(html, settings.html_prompt_max_chars))
    return await _complete(prompt)


async def extract_recipe_from_text(text: str) -> ExtractedRecipe:
    settings = get_settings()
    return await _complete(build_document_prompt(normalize_text(text, settings.document_prompt_max_chars)))


async def _complete(prompt: str) -> ExtractedRecipe:
    settings = get_settings()
    completion = await llm_client.chat_completion(
        EXTRACTION_SYSTEM_PROMPT,
        prompt,
        temperature=settings.llm_extraction_temperature,
        max_tokens=settings.llm_extraction_max_tokens,
    )
    return parse_extraction(completion)


def build_preview(extracted: ExtractedRecipe, source_url: Optional[str], images: List[StoredImage]) -> RecipePreview:
    return RecipePreview(
        title=extracted.title,
        description=extracted.description,
        prep_time_minutes=extracted.prep_time_minutes,
        cook_time_minutes=extracted.cook_time_minutes,
        servings=extracted.servings,
        difficulty=extracted.difficulty,
        recipe_type=extracted.recipe_type,
        source_url=source_url,
        images=[ImageCreate(**image.model_dump()) for image in images],
        ingredients=[
            IngredientCreate(name=ing.name, amount=ing.amount, unit=ing.unit, order=index)
            for index, ing in enumerate(extracted.ingredients, start=1)
        ],
        instructions=[
            InstructionCreate(step=inst.step, description=inst.description)
            for inst in extracted.instructions
        ],
        tags=extracted.tags,
    )


async def _finish_preview(
    run: ImportRun, extracted: ExtractedRecipe, source_url: Optional[str], storage: StorageProvider
) -> RecipePreview:
    run.advance(ImportStage.EXTRACTED)
    logger.info("Import %s extracted '%s' with %d image candidates", run.id, extracted.title, len(extracted.images))

    images: List[StoredImage] = []
    if extracted.images:
        run.advance(ImportStage.IMAGES_PROCESSING)
        images = await download_and_store_images([image.url for image in extracted.images], storage)

    preview = build_preview(extracted, source_url, images)
    run.advance(ImportStage.PREVIEW_READY)
    return preview


async def _preview_from_html(run: ImportRun, html: str, storage: StorageProvider) -> RecipePreview:
    run.advance(ImportStage.EXTRACTING)
    extracted = await extract_recipe(html)
    return await _finish_preview(run, extracted, run.source_url, storage)


async def import_recipe_from_url(url: str, storage: StorageProvider) -> RecipePreview:
    run = ImportRun(url)
    try:
        run.advance(ImportStage.FETCHING)
        html = await fetch_html(url)
        run.advance(ImportStage.FETCHED)
        return await _preview_from_html(run, html, storage)
    except TasteBoxError as exc:
        run.fail(exc)
        raise


async def import_recipe_from_html(html: str, url: str, storage: StorageProvider) -> RecipePreview:
    """Same pipeline for pages captured in the browser; the fetch stage is skipped."""
    run = ImportRun(url)
    try:
        run.advance(ImportStage.FETCHED)
        return await _preview_from_html(run, html, storage)
    except TasteBoxError as exc:
        run.fail(exc)
        raise


async def import_recipe_from_document(text: str, filename: str, storage: StorageProvider) -> RecipePreview:
    """Run text already pulled out of an uploaded document through the prompt stage onwards.

    The preview has no ``source_url``; ``filename`` only labels the run in logs.
    """
    run = ImportRun(f"upload:{filename}")
    try:
        run.advance(ImportStage.FETCHED)
        run.advance(ImportStage.EXTRACTING)
        extracted = await extract_recipe_from_text(text)
        return await _finish_preview(run, extracted, None, storage)
    except TasteBoxError as exc:
        run.fail(exc)
        raise
