# services/plates.py
# License plate -> vehicle record via PlateScrape.
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

PLATESCRAPE_BASE = "https://api.platescrape.com/v1/lookup"


class PlateLookupError(RuntimeError):
    pass


def _text(data: Dict[str, Any], key: str) -> str:
    v = data.get(key)
    if v is None or (isinstance(v, str) and not v.strip()):
        return ""
    return str(v).strip()


def lookup_plate(plate: str, state: str, api_key: Optional[str], timeout: float = 15) -> Dict[str, Any]:
    if not api_key:
        raise PlateLookupError("PLATESCRAPE_API_KEY is not configured")
    plate = (plate or "").strip().upper()
    state = (state or "").strip().upper()
    url = f"{PLATESCRAPE_BASE}/{quote(plate, safe='')}/{quote(state, safe='')}"
    try:
        r = requests.get(
            url,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            timeout=timeout,
        )
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise PlateLookupError(f"Failed to lookup license plate: {e}")
    if not isinstance(data, dict):
        raise PlateLookupError("Failed to lookup license plate: unexpected response")

    return {
        "plate": plate,
        "state": state,
        "vin": (data.get("vin") or None),
        "make": _text(data, "make"),
        "model": _text(data, "model"),
        "year": _text(data, "year"),
        "color": _text(data, "color"),
        "owner": _text(data, "owner"),
        "address": _text(data, "address"),
    }
