"""HTML fetching for URL-based recipe import."""

import ipaddress
import logging
from urllib.parse import urlparse

import httpx

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import FetchError

logger = logging.getLogger(__name__)


def is_private_host(host: str) -> bool:
    """Check if a host is private/localhost."""
    hostname = host.split(":")[0]
    try:
        ip = ipaddress.ip_address(hostname)
        return ip.is_private or ip.is_loopback or ip.is_link_local
    except ValueError:
        return hostname.lower() in {"localhost"}


def browser_headers() -> dict:
    settings = get_settings()
    return {
        "User-Agent": settings.scraper_user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "es-AR,es;q=0.9,en;q=0.8",
        "Accept-Charset": "utf-8",
    }


def ensure_public_http_url(url: str) -> None:
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise FetchError("Malformed URL", url=url) from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise FetchError("URL must start with http or https", url=url)
    if is_private_host(parsed.hostname or ""):
        raise FetchError("URL points to a private or disallowed host", url=url)


async def fetch_html(url: str) -> str:
    """Fetch a page with a browser-like request and return its body as UTF-8 text.

    Single attempt, no retries. Non-2xx responses, network failures and timeouts
    all raise ``FetchError``.
    """
    ensure_public_http_url(url)
    settings = get_settings()
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=5.0)

    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, headers=browser_headers()) as client:
            response = await client.get(url)
    except httpx.TimeoutException as exc:
        raise FetchError(f"Timed out fetching {url}", url=url, reason="timeout") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Network error fetching {url}: {exc}", url=url, reason=str(exc)) from exc

    if not response.is_success:
        reason = response.reason_phrase or "Error"
        logger.info("Fetch of %s returned HTTP %s", url, response.status_code)
        raise FetchError(
            f"HTTP {response.status_code}: {reason}",
            url=url,
            http_status=response.status_code,
            reason=reason,
        )

    # Declared charsets are ignored; invalid sequences become U+FFFD
    return response.content.decode("utf-8", errors="replace")


async def head_url(url: str) -> httpx.Response:
    """Issue a HEAD request with the same guard and headers as ``fetch_html``.

    Any status is returned to the caller; only network failures raise ``FetchError``.
    """
    ensure_public_http_url(url)
    settings = get_settings()
    timeout = httpx.Timeout(settings.fetch_timeout_seconds, connect=5.0)
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, headers=browser_headers()) as client:
            return await client.head(url)
    except httpx.TimeoutException as exc:
        raise FetchError(f"Timed out checking {url}", url=url, reason="timeout") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Network error checking {url}: {exc}", url=url, reason=str(exc)) from exc
