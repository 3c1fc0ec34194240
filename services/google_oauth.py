# services/google_oauth.py
# Signed assertion -> short-lived bearer token (urn:ietf:params:oauth:grant-type:jwt-bearer).
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import aiohttp

from services import http_client
from services.errors import TokenEndpointError, TokenResponseMalformed
from services.logger import get_logger
from services.settings import TOKEN_URL

log = get_logger(__name__)

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
DEFAULT_EXPIRES_IN = 3600
EXPIRY_SKEW_SEC = 60


@dataclass(frozen=True)
class BearerToken:
    access_token: str
    expires_in: int = DEFAULT_EXPIRES_IN


async def exchange_assertion(
    session: aiohttp.ClientSession,
    assertion: str,
    token_url: str = TOKEN_URL,
) -> BearerToken:
    status, text, data = await http_client.post(
        session,
        token_url,
        "Token exchange",
        data={"grant_type": GRANT_TYPE, "assertion": assertion},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    if not 200 <= status < 300:
        log.warning("Token endpoint rejected assertion: HTTP %s", status)
        raise TokenEndpointError(status, text)

    token = data.get("access_token") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise TokenResponseMalformed(
            f"Token endpoint answered HTTP {status} without an access_token"
        )

    expires_in = data.get("expires_in", DEFAULT_EXPIRES_IN)
    try:
        expires_in = int(expires_in)
    except (TypeError, ValueError):
        expires_in = DEFAULT_EXPIRES_IN
    return BearerToken(access_token=token, expires_in=expires_in)


class TokenCache:
    """
    In-process bearer tokens keyed by credential fingerprint.
    Entries are dropped EXPIRY_SKEW_SEC before the server-side expiry.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._items: Dict[str, Tuple[str, float]] = {}

    def get(self, fingerprint: str) -> Optional[str]:
        now = self._clock()
        with self._lock:
            item = self._items.get(fingerprint)
            if item is None:
                return None
            token, expires_at = item
            if now >= expires_at - EXPIRY_SKEW_SEC:
                del self._items[fingerprint]
                return None
            return token

    def put(self, fingerprint: str, token: BearerToken) -> None:
        expires_at = self._clock() + max(0, token.expires_in)
        with self._lock:
            self._items[fingerprint] = (token.access_token, expires_at)

    def drop(self, fingerprint: str) -> None:
        with self._lock:
            self._items.pop(fingerprint, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
