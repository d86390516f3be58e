from __future__ import annotations

import logging

from xsrf_guard.services.session_store import SessionStore
from xsrf_guard.services.token_service import TokenProvider

logger = logging.getLogger(__name__)


async def obtain_secret(store: SessionStore, key: str, tokens: TokenProvider) -> str:
    """Return the session's XSRF secret, creating and storing one on first use.

    Store errors propagate unchanged. The read and the write are not locked
    together: two concurrent first requests of one session may each store a
    secret, and the last write wins.
    """
    secret = await store.get(key)
    if secret:
        return secret

    secret = tokens.generate_secret()
    await store.set(key, secret)
    logger.debug("Created XSRF secret under session key %s", key)
    return secret
