# api_lookup.py
from typing import Optional

import anyio
import requests
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from services.history import sample_history
from services.logger import get_logger
from services.nhtsa import decode_vin, is_valid_vin, normalize_vin
from services.plates import PlateLookupError, lookup_plate

lookup_router = APIRouter()
log = get_logger(__name__)


class LookupReq(BaseModel):
    vin: Optional[str] = None
    plate: Optional[str] = None
    state: Optional[str] = None


async def _by_vin(vin: str, base_url: str) -> dict:
    vin = normalize_vin(vin)
    if not is_valid_vin(vin):
        raise HTTPException(status_code=422, detail="VIN must be 17 characters (letters except I, O, Q, and digits)")
    try:
        vehicle = await anyio.to_thread.run_sync(decode_vin, vin, base_url)
    except (requests.RequestException, ValueError) as e:
        log.warning("vPIC decode failed for %s: %s", vin, e)
        raise HTTPException(status_code=502, detail="VIN decoding service unavailable")
    return {"vehicle": vehicle, "history": sample_history(vin)}


async def _by_plate(plate: str, state: str, api_key: Optional[str]) -> dict:
    if not api_key:
        raise HTTPException(status_code=503, detail="Plate lookup is not configured")
    try:
        rec = await anyio.to_thread.run_sync(lookup_plate, plate, state, api_key)
    except PlateLookupError as e:
        log.warning("Plate lookup failed for %s/%s: %s", plate, state, e)
        raise HTTPException(status_code=502, detail="Failed to lookup license plate")
    return {"plate": rec}


@lookup_router.post("/lookup")
async def lookup(req: LookupReq, request: Request):
    settings = request.app.state.settings
    if req.vin and req.vin.strip():
        return await _by_vin(req.vin, settings.nhtsa_base_url)
    if req.plate and req.plate.strip() and req.state and req.state.strip():
        return await _by_plate(req.plate, req.state, settings.platescrape_api_key)
    raise HTTPException(status_code=400, detail="Provide a VIN, or a plate and state.")
