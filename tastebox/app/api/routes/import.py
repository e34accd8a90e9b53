import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette import status

from tastebox.app.api.deps import get_current_user, get_storage_provider
from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import FetchError, NotFoundError, TasteBoxError, ValidationError
from tastebox.app.schemas.auth import CurrentUser
from tastebox.app.schemas.recipe import is_absolute_http_url
from tastebox.app.services.recipe_import import (
    ImportResponse,
    import_recipe_from_document,
    import_recipe_from_html,
    import_recipe_from_url,
)
from tastebox.app.services.recipe_import.documents import (
    DOCX_CONTENT_TYPES,
    PDF_CONTENT_TYPES,
    extract_docx_pages,
    extract_pdf_pages,
    select_pages,
)
from tastebox.app.services.recipe_import.html_fetcher import head_url
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import", tags=["import"])


class ImportUrlRequest(BaseModel):
    url: str


class ImportHtmlRequest(BaseModel):
    html: str = Field(min_length=100)
    url: str
    title: Optional[str] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _error_for(exc: TasteBoxError) -> JSONResponse:
    if isinstance(exc, FetchError):
        return _error(status.HTTP_400_BAD_REQUEST, f"Failed to fetch the page: {exc.message}")
    if isinstance(exc, NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "No recipe found on this page")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to import recipe: {exc.message}")


@router.post("", response_model=ImportResponse)
async def import_from_url(
    payload: ImportUrlRequest,
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    url = payload.url.strip()
    if not is_absolute_http_url(url):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid URL provided")

    logger.info("User %s importing recipe from %s", current_user.id, url)
    try:
        preview = await import_recipe_from_url(url, storage)
    except TasteBoxError as exc:
        return _error_for(exc)
    except Exception:
        logger.exception("Unexpected failure importing %s", url)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to import recipe")
    return ImportResponse(recipe=preview)


@router.post("/html", response_model=ImportResponse)
async def import_from_html(
    payload: ImportHtmlRequest,
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    url = payload.url.strip()
    if not is_absolute_http_url(url):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid URL provided")

    logger.info(
        "User %s importing captured page %s (%s, %d chars)",
        current_user.id,
        url,
        payload.title or "untitled",
        len(payload.html),
    )
    try:
        preview = await import_recipe_from_html(payload.html, url, storage)
    except TasteBoxError as exc:
        return _error_for(exc)
    except Exception:
        logger.exception("Unexpected failure importing captured page %s", url)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to import recipe")
    return ImportResponse(recipe=preview)


class UrlCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    status: Optional[int] = None
    content_type: Optional[str] = Field(None, alias="contentType")
    error: Optional[str] = None


@router.post("/validate-url", response_model=UrlCheckResponse, response_model_exclude_none=True)
async def validate_url(
    payload: ImportUrlRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    url = payload.url.strip()
    if not is_absolute_http_url(url):
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid URL provided")

    try:
        response = await head_url(url)
    except FetchError as exc:
        logger.info("URL check for %s failed: %s", url, exc.message)
        return UrlCheckResponse(valid=False, error="URL not accessible")
    return UrlCheckResponse(
        valid=response.is_success,
        status=response.status_code,
        content_type=response.headers.get("content-type"),
    )


async def _read_document(upload: UploadFile, content_types: set, extension: str) -> bytes:
    settings = get_settings()
    filename = (upload.filename or "").lower()
    if upload.content_type not in content_types and not filename.endswith(extension):
        raise ValidationError(f"Only {extension} files are allowed")
    data = await upload.read()
    if not data:
        raise ValidationError("Empty file")
    if len(data) > settings.document_max_bytes:
        raise ValidationError(f"File too large. Maximum size is {settings.document_max_bytes // (1024 * 1024)}MB")
    return data


async def _import_document(
    upload: UploadFile,
    extractor: Callable[[bytes], List[str]],
    content_types: set,
    extension: str,
    start_page: Optional[int],
    end_page: Optional[int],
    storage: StorageProvider,
    current_user: CurrentUser,
):
    filename = upload.filename or f"upload{extension}"
    try:
        data = await _read_document(upload, content_types, extension)
        pages = await asyncio.to_thread(extractor, data)
        text = select_pages(pages, start_page, end_page)
    except ValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, exc.message)

    logger.info(
        "User %s importing %s (%d pages, %d chars selected)", current_user.id, filename, len(pages), len(text)
    )
    try:
        preview = await import_recipe_from_document(text, filename, storage)
    except TasteBoxError as exc:
        return _error_for(exc)
    except Exception:
        logger.exception("Unexpected failure importing document %s", filename)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to import recipe")
    return ImportResponse(recipe=preview)


@router.post("/pdf", response_model=ImportResponse)
async def import_from_pdf(
    pdf: UploadFile = File(...),
    start_page: Optional[int] = Form(None),
    end_page: Optional[int] = Form(None),
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _import_document(
        pdf, extract_pdf_pages, PDF_CONTENT_TYPES, ".pdf", start_page, end_page, storage, current_user
    )


@router.post("/docx", response_model=ImportResponse)
async def import_from_docx(
    docx: UploadFile = File(...),
    start_page: Optional[int] = Form(None),
    end_page: Optional[int] = Form(None),
    storage: StorageProvider = Depends(get_storage_provider),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await _import_document(
        docx, extract_docx_pages, DOCX_CONTENT_TYPES, ".docx", start_page, end_page, storage, current_user
    )


@router.get("/html/health")
def import_html_health() -> dict[str, str]:
    return {
        "status": "ok",
        "service": "HTML recipe import",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
