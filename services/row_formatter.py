# services/row_formatter.py
# Lead submission -> one spreadsheet row, in the sheet's header order.
from typing import Any, Dict, List, Mapping

from services.errors import MalformedPayload

COLUMNS: List[str] = [
    "name",
    "partName",
    "lookupType",
    "vin",
    "make",
    "model",
    "year",
    "bodyClass",
    "vehicleType",
    "manufacturer",
    "fuelType",
    "engineCylinders",
    "displacement",
    "engine",
    "transmission",
    "driveType",
    "accidents",
    "ownership",
    "odometer",
    "serviceRecords",
    "recalls",
    "mobileNumber",
]

# (column, path inside the history record)
_HISTORY_FIELDS = [
    ("accidents", ("accidents", "reported")),
    ("odometer", ("odometer", "lastReading")),
    ("serviceRecords", ("serviceRecords", "count")),
    ("recalls", ("recalls", "open")),
]


def _cell(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    if isinstance(v, (list, tuple)):
        return "; ".join(c for c in (_cell(x) for x in v) if c)
    if isinstance(v, dict):
        return ""
    return str(v)


def _as_map(v: Any) -> Mapping[str, Any]:
    return v if isinstance(v, Mapping) else {}


def _dig(obj: Mapping[str, Any], path) -> Any:
    cur: Any = obj
    for key in path:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _first(*values: Any) -> str:
    for v in values:
        s = _cell(v)
        if s:
            return s
    return ""


def split_vehicle_data(vehicle_data: Any) -> Dict[str, Mapping[str, Any]]:
    """
    vehicleData arrives in one of three shapes:
      {vehicle: {...decoded VIN...}, history: {...}, plate: {...}}
      {vehicleInfo: {...free-form...}}
      {...the vehicle record itself...}
    """
    vd = _as_map(vehicle_data)
    vehicle = _as_map(vd.get("vehicle")) or _as_map(vd.get("vehicleInfo")) or vd
    return {
        "vehicle": vehicle,
        "plate": _as_map(vd.get("plate")),
        "history": _as_map(vd.get("history")),
    }


def format_row(payload: Any) -> List[str]:
    """
    Always returns len(COLUMNS) strings; missing fields become "".
    Only a non-mapping payload is rejected.
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayload(f"Expected a JSON object, got {type(payload).__name__}")

    parts = split_vehicle_data(payload.get("vehicleData"))
    vehicle, plate, history = parts["vehicle"], parts["plate"], parts["history"]

    row: Dict[str, str] = {
        "name": _cell(payload.get("name")),
        "partName": _cell(payload.get("partName")),
        "lookupType": _cell(payload.get("lookupType")),
        "mobileNumber": _cell(payload.get("mobileNumber")),
    }
    # decoded vehicle wins; plate lookup fills the gaps
    for col in ("vin", "make", "model", "year"):
        row[col] = _first(vehicle.get(col), plate.get(col))

    for col in ("bodyClass", "vehicleType", "manufacturer", "fuelType",
                "engineCylinders", "displacement", "engine", "transmission", "driveType"):
        row[col] = _cell(vehicle.get(col))

    for col, path in _HISTORY_FIELDS:
        row[col] = _cell(_dig(history, path))
    row["ownership"] = _cell(_dig(history, ("ownershipHistory", "owners")))

    return [row[c] for c in COLUMNS]
