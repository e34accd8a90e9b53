"""Recipe import package.

Turns a recipe page (fetched by URL or captured in the browser) or an uploaded
PDF or Word document into a preview recipe by prompting a language model and
validating its JSON answer.
"""

from tastebox.app.services.recipe_import.html_fetcher import (
    fetch_html,
    is_private_host,
)
from tastebox.app.services.recipe_import.images import download_and_store_images
from tastebox.app.services.recipe_import.models import (
    ImportResponse,
    ImportRun,
    ImportStage,
    RecipePreview,
    StoredImage,
)
from tastebox.app.services.recipe_import.pipeline import (
    import_recipe_from_document,
    import_recipe_from_html,
    import_recipe_from_url,
)
from tastebox.app.services.recipe_import.prompts import build_extraction_prompt
from tastebox.app.services.recipe_import.sanitizer import sanitize_html
from tastebox.app.services.recipe_import.validator import ExtractedRecipe, parse_extraction

__all__ = [
    # Models
    "ExtractedRecipe",
    "ImportResponse",
    "ImportRun",
    "ImportStage",
    "RecipePreview",
    "StoredImage",
    # Pipeline stages
    "fetch_html",
    "is_private_host",
    "sanitize_html",
    "build_extraction_prompt",
    "parse_extraction",
    "download_and_store_images",
    # Entry points
    "import_recipe_from_document",
    "import_recipe_from_html",
    "import_recipe_from_url",
]
