"""Error taxonomy shared by the import pipeline, services and API handlers.

Every error carries a user-facing ``message`` and, when raised inside an import
run, the ``stage`` the run was in. ``status_code`` is the HTTP status used by the
generic exception handlers in ``tastebox.app.main``; the import endpoints map
errors explicitly instead.
"""

from typing import Any, Dict, List, Optional


class TasteBoxError(Exception):
    status_code = 500

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class FetchError(TasteBoxError):
    """Network or HTTP failure reaching a source page or an image."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        http_status: Optional[int] = None,
        reason: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.url = url
        self.http_status = http_status
        self.reason = reason


class LLMError(TasteBoxError):
    """The language model provider returned no usable completion."""


class ParseError(TasteBoxError):
    """A completion was not valid JSON."""


class ValidationError(TasteBoxError):
    status_code = 400

    def __init__(
        self,
        message: str,
        violations: Optional[List[Dict[str, Any]]] = None,
        *,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.violations = violations or []


class AuthError(TasteBoxError):
    status_code = 401


class NotFoundError(TasteBoxError):
    status_code = 404


class NoRecipeFoundError(NotFoundError):
    """The page was fetched and read, but it holds no usable recipe."""


class StorageError(TasteBoxError):
    """Blob storage rejected or failed an upload."""


class ExportError(TasteBoxError):
    """A stored recipe could not be rendered to PDF."""
