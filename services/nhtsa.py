"""
NHTSA vPIC VIN decoding for the lookup form.

DecodeVinValues returns one flat record per VIN; fields vPIC cannot resolve come
back as empty strings, and ErrorCode/ErrorText describe check-digit or partial
decode problems. A non-zero ErrorCode is passed through in `errors` rather than
raised, since vPIC usually still decodes make/model/year.
"""
import re
from typing import Any, Dict, List

import requests

from services.settings import NHTSA_BASE

_VIN_RE = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")

# vPIC variable -> decoded-vehicle field
_FIELD_MAP = {
    "Make": "make",
    "Model": "model",
    "ModelYear": "year",
    "VehicleType": "vehicleType",
    "BodyClass": "bodyClass",
    "Manufacturer": "manufacturer",
    "PlantCity": "plantCity",
    "PlantCountry": "plantCountry",
    "FuelTypePrimary": "fuelType",
    "EngineCylinders": "engineCylinders",
    "DisplacementL": "displacement",
    "TransmissionStyle": "transmission",
    "DriveType": "driveType",
}

def normalize_vin(vin: str) -> str:
    return re.sub(r"[\s-]+", "", vin or "").upper()

def is_valid_vin(vin: str) -> bool:
    return bool(_VIN_RE.match(vin or ""))

def _errors(rec: Dict[str, Any]) -> List[str]:
    codes = str(rec.get("ErrorCode") or "0").strip()
    if codes in ("", "0"):
        return []
    text = str(rec.get("ErrorText") or "").strip()
    return [t.strip() for t in text.split(";") if t.strip()] or [f"vPIC error code {codes}"]

def to_vehicle_record(vin: str, rec: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"vin": vin}
    for src, dst in _FIELD_MAP.items():
        v = rec.get(src)
        out[dst] = v.strip() if isinstance(v, str) else ("" if v is None else str(v))
    out["errors"] = _errors(rec)
    return out

def decode_vin(vin: str, base_url: str = NHTSA_BASE, timeout: float = 20) -> Dict[str, Any]:
    vin = normalize_vin(vin)
    url = f"{base_url}/DecodeVinValues/{vin}?format=json"
    r = requests.get(url, timeout=timeout)
    r.raise_for_status()
    results = r.json().get("Results") or []
    if not results:
        raise ValueError(f"vPIC returned no results for VIN {vin}")
    return to_vehicle_record(vin, results[0])
