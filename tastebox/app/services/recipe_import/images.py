import asyncio
import logging
import time
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse
from uuid import uuid4

import httpx

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import StorageError, ValidationError
from tastebox.app.schemas.recipe import MAX_RECIPE_IMAGES
from tastebox.app.services.image_processing import extension_for, resize_to_fit
from tastebox.app.services.recipe_import.html_fetcher import is_private_host
from tastebox.app.services.recipe_import.models import StoredImage
from tastebox.app.services.storage.base import StorageProvider

logger = logging.getLogger(__name__)


def recipe_image_filename(index: int, content_type: str) -> str:
    # The uuid keeps names unique when imports overlap within the same millisecond
    return f"recipe-image-{int(time.time() * 1000)}-{uuid4().hex[:12]}-{index}.{extension_for(content_type)}"


async def _download(client: httpx.AsyncClient, url: str, index: int) -> Optional[Tuple[bytes, str]]:
    try:
        parsed = urlparse(url)
    except ValueError:
        parsed = None
    if parsed is None or parsed.scheme not in {"http", "https"} or is_private_host(parsed.hostname or ""):
        logger.warning("Skipping image %d: disallowed URL %s", index, url)
        return None
    try:
        response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Failed to download image %d (%s): %s", index, url, exc)
        return None
    if not response.is_success:
        logger.warning("Failed to download image %d (%s): HTTP %s", index, url, response.status_code)
        return None
    content_type = response.headers.get("content-type") or ""
    if not content_type.lower().startswith("image/"):
        logger.warning("Skipping image %d (%s): content type %r", index, url, content_type or None)
        return None
    return response.content, content_type


async def _store(storage: StorageProvider, data: bytes, content_type: str, index: int) -> Optional[str]:
    try:
        resized, resized_type = await asyncio.to_thread(resize_to_fit, data, content_type)
    except ValidationError:
        logger.warning("Skipping image %d: not a decodable image", index)
        return None
    filename = recipe_image_filename(index, resized_type)
    try:
        return await asyncio.to_thread(storage.save_bytes, filename, resized, resized_type)
    except StorageError as exc:
        logger.warning("Failed to store image %d: %s", index, exc)
        return None


async def download_and_store_images(image_urls: Iterable[str], storage: StorageProvider) -> List[StoredImage]:
    """Download up to three images, resize them and persist them to blob storage.

    Downloads run concurrently. A failed download, decode or upload only drops
    that image; survivors keep their candidate order and are renumbered 1..k.
    """
    candidates = list(image_urls)[:MAX_RECIPE_IMAGES]
    if not candidates:
        return []

    settings = get_settings()
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=5.0)
    headers = {"User-Agent": settings.scraper_user_agent, "Accept": "image/*,*/*;q=0.8"}
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, headers=headers) as client:
        downloads = await asyncio.gather(
            *(_download(client, url, index) for index, url in enumerate(candidates, start=1)),
            return_exceptions=True,
        )

    stored: List[StoredImage] = []
    for index, download in enumerate(downloads, start=1):
        if isinstance(download, BaseException):
            logger.warning("Unexpected error downloading image %d: %r", index, download)
            continue
        if download is None:
            continue
        data, content_type = download
        url = await _store(storage, data, content_type, index)
        if url is None:
            continue
        order = len(stored) + 1
        stored.append(StoredImage(url=url, local_path=url, order=order, alt_text=f"Recipe image {order}"))

    logger.info("Stored %d of %d candidate images", len(stored), len(candidates))
    return stored
