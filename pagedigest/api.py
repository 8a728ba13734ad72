"""FastAPI application exposing the extraction pipeline.

Routes
------
POST /api/fetch-url    Body: {"url": "https://...", "mode": "rich"}

Success returns ``{content, url, title, description}``.  Failures return
``{"error": "..."}``: 400 for a missing or malformed URL, an upstream
non-2xx status or a timeout; 500 for anything else.

Run with::

    uvicorn pagedigest.api:app --reload
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pagedigest import __version__
from pagedigest.items import ExtractionResult
from pagedigest.query import (
    FetchFailedError,
    FetchTimeoutError,
    InvalidURLError,
    Mode,
    fetch,
)
from pagedigest.settings import Settings
from pagedigest.settings import settings as default_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_GENERIC_ERROR = "Failed to fetch URL"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class FetchUrlRequest(BaseModel):
    url: str | None = None
    mode: Mode = "rich"


class ErrorResponse(BaseModel):
    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/fetch-url",
    response_model=ExtractionResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def fetch_url_endpoint(body: FetchUrlRequest, request: Request) -> Any:
    """Fetch a page and return its capped, structured text."""
    cfg: Settings = request.app.state.settings
    try:
        return fetch(body.url, mode=body.mode, settings=cfg)
    except (InvalidURLError, FetchFailedError, FetchTimeoutError) as exc:
        logger.warning("fetch-url rejected %r: %s", body.url, exc)
        return _error(400, str(exc))
    except Exception as exc:
        logger.exception("fetch-url failed for %r", body.url)
        return _error(500, str(exc) or _GENERIC_ERROR)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return _error(400, message)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    cfg = settings or default_settings
    app = FastAPI(
        title="pagedigest API",
        description="Fetch a web page and return LLM-ready structured text.",
        version=__version__,
    )
    app.state.settings = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router, prefix="/api", tags=["fetch"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn pagedigest.api:app --reload
app = create_app()
