"""XSRF protection bound to a secret kept in the user's session.

On every request the guard:

1. looks up the session's XSRF secret, creating and storing one if absent;
2. issues a fresh token for it on ``request.state.xsrfToken`` and in the
   ``XSRF-TOKEN`` cookie;
3. lets ignored methods (GET, HEAD, OPTIONS) and custom-ignored requests
   through;
4. otherwise requires a token that verifies against the secret, read from the
   ``X-XSRF-TOKEN`` header by default, and answers 412 when it does not.

The cookie and header names match what Angular's HTTP client uses.

The ``ignore`` and ``get_token`` hooks are called with the request only, since
no response exists before the downstream handler runs. Either may be a plain
function or a coroutine function.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from xsrf_guard.config import Settings
from xsrf_guard.services.secret_service import obtain_secret
from xsrf_guard.services.session_store import SessionStore, StarletteSessionStore
from xsrf_guard.services.token_service import SignedTokenProvider, TokenProvider

logger = logging.getLogger(__name__)

TOKEN_STATE_FIELD = "xsrfToken"
REJECTION_STATUS = 412

IgnoreHook = Callable[[Request], bool | Awaitable[bool]]
TokenGetter = Callable[[Request], str | None | Awaitable[str | None]]
SessionFactory = Callable[[Request], SessionStore]


@dataclass(frozen=True, slots=True)
class XSRFOptions:
    ignored_methods: frozenset[str] = frozenset({"get", "head", "options"})
    cookie_name: str = "XSRF-TOKEN"
    header_name: str = "X-XSRF-TOKEN"
    session_key: str = "XSRF-SECRET"
    ignore: IgnoreHook | None = None
    get_token: TokenGetter | None = None
    cookie_path: str = "/"
    cookie_secure: bool = False
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"

    def __post_init__(self) -> None:
        object.__setattr__(self, "ignored_methods", frozenset(m.lower() for m in self.ignored_methods))

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        ignore: IgnoreHook | None = None,
        get_token: TokenGetter | None = None,
    ) -> XSRFOptions:
        return cls(
            ignored_methods=settings.ignored_methods,
            cookie_name=settings.xsrf_cookie_name,
            header_name=settings.xsrf_header_name,
            session_key=settings.xsrf_session_key,
            ignore=ignore,
            get_token=get_token,
            cookie_path=settings.xsrf_cookie_path,
            cookie_secure=settings.xsrf_cookie_secure,
            cookie_samesite=settings.xsrf_cookie_samesite,  # type: ignore[arg-type]
        )


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class XSRFMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        options: XSRFOptions | None = None,
        tokens: TokenProvider | None = None,
        session_factory: SessionFactory = StarletteSessionStore,
    ) -> None:
        super().__init__(app)
        self.options = options or XSRFOptions()
        self.tokens = tokens or SignedTokenProvider()
        self.session_factory = session_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        opts = self.options
        secret = await obtain_secret(self.session_factory(request), opts.session_key, self.tokens)

        token = self.tokens.create_token(secret)
        setattr(request.state, TOKEN_STATE_FIELD, token)

        if await self._must_verify(request) and not await self._verify(request, secret):
            logger.warning("Rejected %s %s: missing or invalid XSRF token", request.method, request.url.path)
            response = Response(status_code=REJECTION_STATUS)
        else:
            response = await call_next(request)

        response.set_cookie(
            opts.cookie_name,
            token,
            path=opts.cookie_path,
            secure=opts.cookie_secure,
            httponly=False,
            samesite=opts.cookie_samesite,
        )
        return response

    async def _must_verify(self, request: Request) -> bool:
        if request.method.lower() in self.options.ignored_methods:
            return False
        if self.options.ignore is not None and await _resolve(self.options.ignore(request)):
            return False
        return True

    async def _verify(self, request: Request, secret: str) -> bool:
        if self.options.get_token is not None:
            # Cache the body so a hook reading the form leaves it for the handler.
            await request.body()
            candidate = await _resolve(self.options.get_token(request))
        else:
            candidate = request.headers.get(self.options.header_name)
        return self.tokens.verify(secret, candidate)
