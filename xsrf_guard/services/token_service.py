"""Token creation and verification bound to a per-session secret."""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from typing import Any

from itsdangerous import BadData, URLSafeSerializer

_SECRET_BYTES = 18
_SALT_LENGTH = 8
_SIGNER_SALT = "xsrf-token"


class TokenProvider(ABC):
    @abstractmethod
    def generate_secret(self) -> str: ...

    @abstractmethod
    def create_token(self, secret: str) -> str: ...

    @abstractmethod
    def verify(self, secret: str, token: Any) -> bool: ...


class SignedTokenProvider(TokenProvider):
    """Tokens are a random salt signed with the session secret.

    Every call to ``create_token`` returns a different value, and every token
    ever produced for a secret verifies against it. Nothing is stored and
    tokens do not expire.
    """

    def __init__(self, salt_length: int = _SALT_LENGTH, secret_bytes: int = _SECRET_BYTES) -> None:
        self._salt_length = salt_length
        self._secret_bytes = secret_bytes

    def _serializer(self, secret: str) -> URLSafeSerializer:
        return URLSafeSerializer(secret, salt=_SIGNER_SALT)

    def generate_secret(self) -> str:
        return secrets.token_urlsafe(self._secret_bytes)

    def create_token(self, secret: str) -> str:
        salt = secrets.token_urlsafe(self._salt_length)[: self._salt_length]
        return self._serializer(secret).dumps(salt)

    def verify(self, secret: str, token: Any) -> bool:
        if not secret or not token or not isinstance(token, str):
            return False
        try:
            salt = self._serializer(secret).loads(token)
        except BadData:
            return False
        return isinstance(salt, str) and len(salt) == self._salt_length
