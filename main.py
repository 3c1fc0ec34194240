# main.py
from dotenv import load_dotenv
from fastapi import FastAPI

from api_leads import cors, leads_router
from api_lookup import lookup_router
from services.lead_handler import LeadSheetHandler
from services.logger import get_logger, mask
from services.settings import load_settings

# -----------------------------
# Env / settings (read once)
# -----------------------------
load_dotenv()
log = get_logger("main")

SETTINGS = load_settings()
log.info(
    "service account: %s, spreadsheet id: %s, range: %s, token cache: %s",
    mask(SETTINGS.service_account.client_email) if SETTINGS.service_account else "<missing>",
    mask(SETTINGS.spreadsheet_id or ""),
    SETTINGS.sheet_range,
    "on" if SETTINGS.token_cache_enabled else "off",
)

# -----------------------------
# FastAPI setup
# -----------------------------
app = FastAPI(title="Vehicle Lead Sink")

app.middleware("http")(cors)  # OPTIONS preflight + CORS headers on every response

app.state.settings = SETTINGS
app.state.lead_handler = LeadSheetHandler(SETTINGS)

app.include_router(leads_router)    # /save-to-sheets
app.include_router(lookup_router)   # /lookup  (VIN via vPIC, plate via PlateScrape)


@app.get("/health")
def health():
    return {"ok": True, "service": "vehicle-leads", "routes": ["/save-to-sheets", "/lookup"]}


@app.get("/_debug/env")
def debug_env():
    s = app.state.settings
    return {
        "ok": True,
        "has_service_account": s.service_account is not None,
        "has_spreadsheet_id": bool(s.spreadsheet_id),
        "has_platescrape_key": bool(s.platescrape_api_key),
        "sheet_range": s.sheet_range,
        "token_cache_enabled": s.token_cache_enabled,
    }
