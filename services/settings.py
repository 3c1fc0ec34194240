# services/settings.py
"""
Process-wide configuration for the lead sink.

Built once at startup by main.py (load_settings) and handed to the handler;
nothing below the routers reads os.environ on its own.
"""
import hashlib
import json
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from services.logger import get_logger

log = get_logger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
SHEETS_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
NHTSA_BASE = "https://vpic.nhtsa.dot.gov/api/vehicles"

DEFAULT_RANGE = "Sheet1!A:V"  # 22 columns, see services.row_formatter.COLUMNS
DEFAULT_TIMEOUT_SEC = 15.0


def _sanitize(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


@dataclass(frozen=True)
class ServiceAccount:
    client_email: str
    private_key: str

    def fingerprint(self) -> str:
        h = hashlib.sha256()
        h.update(self.client_email.encode("utf-8"))
        h.update(b"\x00")
        h.update(self.private_key.encode("utf-8"))
        return h.hexdigest()[:16]


@dataclass(frozen=True)
class Settings:
    service_account: Optional[ServiceAccount] = None
    spreadsheet_id: Optional[str] = None
    sheet_range: str = DEFAULT_RANGE
    http_timeout_sec: float = DEFAULT_TIMEOUT_SEC
    token_cache_enabled: bool = False
    platescrape_api_key: Optional[str] = None
    nhtsa_base_url: str = NHTSA_BASE

    def missing(self) -> List[str]:
        out: List[str] = []
        if self.service_account is None:
            out.append("GOOGLE_SERVICE_ACCOUNT_JSON")
        if not self.spreadsheet_id:
            out.append("GOOGLE_SHEETS_SPREADSHEET_ID")
        return out


def _service_account_from_env(env: Mapping[str, str]) -> Optional[ServiceAccount]:
    raw = _sanitize(env.get("GOOGLE_SERVICE_ACCOUNT_JSON"))
    if raw:
        try:
            info = json.loads(raw)
        except ValueError as e:
            log.warning("GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON: %s", e)
            return None
        if not isinstance(info, dict):
            log.warning("GOOGLE_SERVICE_ACCOUNT_JSON must be a JSON object")
            return None
        email = _sanitize(info.get("client_email"))
        key = info.get("private_key") or ""
        if not email or not key.strip():
            log.warning("GOOGLE_SERVICE_ACCOUNT_JSON lacks client_email or private_key")
            return None
        return ServiceAccount(client_email=email, private_key=key)

    # Split form, e.g. when the key lives in its own secret.
    email = _sanitize(env.get("GOOGLE_SERVICE_ACCOUNT_EMAIL"))
    key = _sanitize(env.get("GOOGLE_PRIVATE_KEY"))
    if email and key:
        return ServiceAccount(client_email=email, private_key=key.replace("\\n", "\n"))
    return None


def _float(v: Optional[str], default: float) -> float:
    try:
        x = float(v) if v not in (None, "") else default
    except ValueError:
        log.warning("Ignoring non-numeric timeout %r", v)
        return default
    return x if x > 0 else default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        service_account=_service_account_from_env(env),
        spreadsheet_id=_sanitize(env.get("GOOGLE_SHEETS_SPREADSHEET_ID")),
        sheet_range=_sanitize(env.get("GOOGLE_SHEETS_RANGE")) or DEFAULT_RANGE,
        http_timeout_sec=_float(env.get("SHEETS_HTTP_TIMEOUT_SEC"), DEFAULT_TIMEOUT_SEC),
        token_cache_enabled=(env.get("TOKEN_CACHE_ENABLE", "0").strip() == "1"),
        platescrape_api_key=_sanitize(env.get("PLATESCRAPE_API_KEY")),
        nhtsa_base_url=(_sanitize(env.get("NHTSA_BASE")) or NHTSA_BASE).rstrip("/"),
    )
