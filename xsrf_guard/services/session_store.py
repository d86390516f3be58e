from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from starlette.requests import Request


class SessionStoreError(Exception):
    """Base session store exception."""


class SessionUnavailable(SessionStoreError):
    """No session is bound to the current request."""


class SessionStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any | None: ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None: ...


class StarletteSessionStore(SessionStore):
    """Session store over ``request.session`` (requires ``SessionMiddleware``)."""

    def __init__(self, request: Request) -> None:
        self._request = request

    def _session(self) -> dict[str, Any]:
        if "session" not in self._request.scope:
            raise SessionUnavailable("SessionMiddleware must be installed before the XSRF guard")
        return self._request.session

    async def get(self, key: str) -> Any | None:
        return self._session().get(key)

    async def set(self, key: str, value: Any) -> None:
        self._session()[key] = value
