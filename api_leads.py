# api_leads.py
# Lead form submissions -> Google Sheets (see services.lead_handler).
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from services.analytics import lead_event, log_event
from services.errors import MalformedPayload
from services.lead_handler import failure_envelope, utc_timestamp
from services.logger import get_logger

leads_router = APIRouter()
log = get_logger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Client-Info", "Apikey"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ",".join(CORS_METHODS),
    "Access-Control-Allow-Headers": ",".join(CORS_ALLOW_HEADERS),
}


async def cors(request: Request, call_next):
    """
    App-wide HTTP middleware. Any OPTIONS (browser preflight or not) gets an
    empty 200 with the fixed CORS headers, before routing; every other
    response gets the same headers added.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@leads_router.post("/save-to-sheets")
async def save_to_sheets(request: Request):
    # Raw body on purpose: a non-object body must come back as MalformedPayload, not a 422.
    try:
        payload = await request.json()
    except ValueError:
        payload = None
        status, body = 500, failure_envelope(
            MalformedPayload("Request body is not valid JSON"), utc_timestamp()
        )
    else:
        status, body = await request.app.state.lead_handler.handle(payload)

    try:
        log_event(lead_event(payload, status, body))
    except Exception as e:
        log.debug("analytics skipped: %s", e)

    return JSONResponse(status_code=status, content=body, headers=CORS_HEADERS)
