"""Pydantic models and run state for recipe import."""

import enum
import logging
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from tastebox.app.core.errors import TasteBoxError
from tastebox.app.db.models import Difficulty
from tastebox.app.schemas.recipe import ImageCreate, IngredientCreate, InstructionCreate

logger = logging.getLogger(__name__)


class ImportStage(str, enum.Enum):
    PENDING = "PENDING"
    FETCHING = "FETCHING"
    FETCHED = "FETCHED"
    EXTRACTING = "EXTRACTING"
    EXTRACTED = "EXTRACTED"
    IMAGES_PROCESSING = "IMAGES_PROCESSING"
    PREVIEW_READY = "PREVIEW_READY"
    FAILED = "FAILED"


TERMINAL_STAGES = {ImportStage.PREVIEW_READY, ImportStage.FAILED}


class ImportRun:
    """Tracks one import request through the pipeline stages."""

    def __init__(self, source_url: str):
        self.id = uuid.uuid4().hex[:12]
        self.source_url = source_url
        self.stage = ImportStage.PENDING
        self.history: List[ImportStage] = [ImportStage.PENDING]
        self.failure_reason: Optional[str] = None

    def advance(self, stage: ImportStage) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"Import run {self.id} already finished in {self.stage.value}")
        logger.info("Import %s: %s -> %s (%s)", self.id, self.stage.value, stage.value, self.source_url)
        self.stage = stage
        self.history.append(stage)

    def fail(self, exc: TasteBoxError) -> None:
        if exc.stage is None:
            exc.stage = self.stage.value
        self.failure_reason = exc.message
        logger.warning("Import %s failed during %s: %s", self.id, exc.stage, exc.message)
        self.stage = ImportStage.FAILED
        self.history.append(ImportStage.FAILED)


class StoredImage(BaseModel):
    url: str
    local_path: Optional[str] = None
    order: int
    alt_text: Optional[str] = None


class RecipePreview(BaseModel):
    """Extraction result handed back to the client for confirmation.

    Field names match ``RecipeCreate`` so a confirmed preview can be posted to
    ``POST /recipes`` unchanged.
    """

    title: str
    description: Optional[str] = None
    prep_time_minutes: int
    cook_time_minutes: Optional[int] = None
    servings: int
    difficulty: Difficulty
    recipe_type: Optional[str] = None
    source_url: Optional[str] = None
    images: List[ImageCreate] = Field(default_factory=list)
    ingredients: List[IngredientCreate] = Field(default_factory=list)
    instructions: List[InstructionCreate] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class ImportResponse(BaseModel):
    success: bool = True
    recipe: RecipePreview
    preview: bool = True
