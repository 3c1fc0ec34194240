# services/analytics.py
import os, json, hashlib, threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LOCK = threading.Lock()

ANALYTICS_ENABLE = os.getenv("ANALYTICS_ENABLE", "0") == "1"
ANALYTICS_PATH = os.getenv("ANALYTICS_PATH", os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "events.jsonl"))

def _ensure_dir(path: str):
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)

def hash_contact(value: Optional[str]) -> str:
    """
    Stable, anonymous id for a phone number or email so events never carry raw contact data.
    Empty input hashes to "".
    """
    value = (value or "").strip()
    if not value:
        return ""
    digits = "".join(ch for ch in value if ch.isalnum()).lower()
    return hashlib.sha256(digits.encode("utf-8")).hexdigest()[:16]

def lead_event(payload: Any, status: int, envelope: Dict[str, Any]) -> Dict[str, Any]:
    payload = payload if isinstance(payload, dict) else {}
    vd = payload.get("vehicleData") if isinstance(payload.get("vehicleData"), dict) else {}
    vehicle = vd.get("vehicle") or vd.get("vehicleInfo") or vd
    vehicle = vehicle if isinstance(vehicle, dict) else {}
    return {
        "type": "lead_saved" if envelope.get("success") else "lead_failed",
        "status": status,
        "error": envelope.get("error"),
        "lookup_type": payload.get("lookupType") or "",
        "contact_hash": hash_contact(str(payload.get("mobileNumber") or "")),
        "make": vehicle.get("make") or "",
        "year": vehicle.get("year") or "",
        "has_part": bool(payload.get("partName")),
    }

def log_event(event: Dict[str, Any], path: Optional[str] = None, enabled: Optional[bool] = None) -> None:
    """
    Append a single JSON event to analytics file if enabled.
    """
    if not (ANALYTICS_ENABLE if enabled is None else enabled):
        return
    path = path or ANALYTICS_PATH
    _ensure_dir(path)
    event = dict(event)
    event["ts_iso"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    line = json.dumps(event, separators=(",", ":"), ensure_ascii=False)
    with _LOCK:
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
