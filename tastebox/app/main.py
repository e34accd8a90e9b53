import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette import status

from tastebox.app.api.routes import api_router
from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import AuthError, TasteBoxError, ValidationError

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append({"field": loc or None, "message": msg})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Validation error", "details": details},
    )


async def tastebox_exception_handler(request: Request, exc: TasteBoxError):
    content = {"success": False, "error": exc.message}
    headers = None
    if isinstance(exc, ValidationError) and exc.violations:
        content["details"] = exc.violations
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="TasteBox", version="0.1.0")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(TasteBoxError, tastebox_exception_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials="*" not in settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    app.mount(settings.media_url_prefix, StaticFiles(directory=settings.media_root), name="media")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
