# services/http_client.py
import asyncio
import json
from typing import Any, Callable, Dict, Optional, Tuple

import aiohttp

from services.errors import NetworkTimeout, UnexpectedFailure

SessionFactory = Callable[[], aiohttp.ClientSession]


def session_factory(timeout_sec: float) -> SessionFactory:
    """One ClientSession per request, bounded by a total timeout."""
    timeout = aiohttp.ClientTimeout(total=timeout_sec)

    def _make() -> aiohttp.ClientSession:
        return aiohttp.ClientSession(timeout=timeout)

    return _make


async def post(
    session: aiohttp.ClientSession,
    url: str,
    label: str,
    *,
    data: Optional[Dict[str, str]] = None,
    json_body: Optional[Any] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, str]] = None,
) -> Tuple[int, str, Optional[Any]]:
    """
    POST and return (status, raw_text, parsed_json_or_None).
    Non-2xx responses are returned, not raised; the caller decides what they mean.
    """
    try:
        async with session.post(url, data=data, json=json_body, headers=headers, params=params) as resp:
            text = await resp.text()
            status = resp.status
    except asyncio.TimeoutError:
        raise NetworkTimeout(f"{label} timed out @ {url}")
    except aiohttp.ClientError as e:
        raise UnexpectedFailure(f"{label} request failed @ {url}: {e}")

    parsed = None
    if text:
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
    return status, text, parsed
