"""Global exception handler that avoids leaking internal details."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import HTMLResponse, JSONResponse

from xsrf_guard.services.session_store import SessionStoreError

logger = logging.getLogger(__name__)


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "").lower()
    return "application/json" in accept or request.headers.get("x-requested-with", "").lower() == "xmlhttprequest"


async def generic_exception_handler(request: Request, exc: Exception) -> HTMLResponse | JSONResponse:
    if isinstance(exc, SessionStoreError):
        # Raised before any XSRF token could be issued for this request.
        logger.error("Session store failed on %s %s: %s", request.method, request.url.path, type(exc).__name__)
    else:
        logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, type(exc).__name__)

    if _wants_json(request):
        return JSONResponse(
            content={"error": "An internal error occurred. Please try again."},
            status_code=500,
        )

    return HTMLResponse(
        content="<h1>Something went wrong</h1><p>Please reload the page and try again.</p>",
        status_code=500,
    )
