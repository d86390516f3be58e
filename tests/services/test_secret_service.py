from __future__ import annotations

import asyncio
from typing import Any

import pytest

from xsrf_guard.services.secret_service import obtain_secret
from xsrf_guard.services.session_store import SessionStore, SessionStoreError
from xsrf_guard.services.token_service import SignedTokenProvider


class _DummySessionStore(SessionStore):
    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})
        self.writes: list[tuple[str, Any]] = []

    async def get(self, key: str) -> Any | None:
        return self.data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self.writes.append((key, value))
        self.data[key] = value


class _BrokenReadStore(_DummySessionStore):
    async def get(self, key: str) -> Any | None:
        raise SessionStoreError("read failed")


class _BrokenWriteStore(_DummySessionStore):
    async def set(self, key: str, value: Any) -> None:
        raise ConnectionError("write failed")


def test_first_use_creates_and_stores_secret() -> None:
    store = _DummySessionStore()

    secret = asyncio.run(obtain_secret(store, "XSRF-SECRET", SignedTokenProvider()))

    assert secret
    assert store.writes == [("XSRF-SECRET", secret)]


def test_existing_secret_returned_without_write() -> None:
    store = _DummySessionStore({"XSRF-SECRET": "existing"})

    secret = asyncio.run(obtain_secret(store, "XSRF-SECRET", SignedTokenProvider()))

    assert secret == "existing"
    assert store.writes == []


def test_resolving_twice_returns_same_secret() -> None:
    store = _DummySessionStore()
    tokens = SignedTokenProvider()

    first = asyncio.run(obtain_secret(store, "XSRF-SECRET", tokens))
    second = asyncio.run(obtain_secret(store, "XSRF-SECRET", tokens))

    assert first == second
    assert len(store.writes) == 1


def test_empty_value_is_replaced() -> None:
    store = _DummySessionStore({"XSRF-SECRET": ""})

    secret = asyncio.run(obtain_secret(store, "XSRF-SECRET", SignedTokenProvider()))

    assert secret
    assert store.data["XSRF-SECRET"] == secret


def test_custom_session_key_is_used() -> None:
    store = _DummySessionStore()

    asyncio.run(obtain_secret(store, "my-key", SignedTokenProvider()))

    assert list(store.data) == ["my-key"]


def test_read_failure_propagates_without_write() -> None:
    store = _BrokenReadStore()

    with pytest.raises(SessionStoreError, match="read failed"):
        asyncio.run(obtain_secret(store, "XSRF-SECRET", SignedTokenProvider()))
    assert store.writes == []


def test_write_failure_propagates() -> None:
    store = _BrokenWriteStore()

    with pytest.raises(ConnectionError, match="write failed"):
        asyncio.run(obtain_secret(store, "XSRF-SECRET", SignedTokenProvider()))
