from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI
from starlette.middleware.sessions import SessionMiddleware

from xsrf_guard.config import Settings, get_settings
from xsrf_guard.dependencies import get_xsrf_token
from xsrf_guard.middleware.error_handler import generic_exception_handler
from xsrf_guard.middleware.xsrf import TOKEN_STATE_FIELD, XSRFMiddleware, XSRFOptions


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Settings | None = None, options: XSRFOptions | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)
        yield

    app = FastAPI(title="XSRF Guard", version="1.0.0", lifespan=lifespan)
    # Added last so it runs first: the guard needs the session already loaded.
    app.add_middleware(XSRFMiddleware, options=options or XSRFOptions.from_settings(settings))
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        session_cookie=settings.session_cookie,
        https_only=settings.environment == "production",
    )
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/xsrf-token")
    def xsrf_token(token: str = Depends(get_xsrf_token)) -> dict[str, str]:
        return {TOKEN_STATE_FIELD: token}

    @app.post("/echo")
    def echo(payload: dict[str, Any] | None = Body(default=None)) -> dict[str, Any]:
        return payload or {}

    return app


app = create_app()
