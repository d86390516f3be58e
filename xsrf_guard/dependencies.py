from __future__ import annotations

from typing import Any

from fastapi import Request

from xsrf_guard.middleware.xsrf import TOKEN_STATE_FIELD


def get_xsrf_token(request: Request) -> str:
    token = getattr(request.state, TOKEN_STATE_FIELD, None)
    if token is None:
        raise RuntimeError("XSRFMiddleware is not installed")
    return token


def xsrf_context(request: Request) -> dict[str, Any]:
    """Jinja2Templates context processor exposing the token to templates."""
    return {TOKEN_STATE_FIELD: getattr(request.state, TOKEN_STATE_FIELD, None)}
