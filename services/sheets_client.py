# services/sheets_client.py
from typing import Any, Dict, List
from urllib.parse import quote

import aiohttp

from services import http_client
from services.errors import AppendRejected
from services.logger import get_logger
from services.settings import SHEETS_BASE

log = get_logger(__name__)


def append_url(spreadsheet_id: str, sheet_range: str, base: str = SHEETS_BASE) -> str:
    return f"{base}/{quote(spreadsheet_id, safe='')}/values/{quote(sheet_range, safe='!:')}:append"


def rejection_hint(status: int, client_email: str = "") -> str:
    if status == 401:
        return "bearer token rejected; check the service account credential and its key"
    if status == 403:
        who = client_email or "the service account"
        return (f"permission denied; share the spreadsheet with {who} "
                f"and give it edit access")
    if status == 404:
        return "spreadsheet not found; check the spreadsheet id (GOOGLE_SHEETS_SPREADSHEET_ID)"
    if status == 400:
        return "request rejected; check GOOGLE_SHEETS_RANGE and the sheet/tab name"
    return "unexpected response from the Sheets API"


def _count(v: Any) -> int:
    try:
        return int(v or 0)
    except (TypeError, ValueError):
        return 0


def _summary(data: Any) -> Dict[str, Any]:
    updates = data.get("updates") if isinstance(data, dict) else None
    updates = updates if isinstance(updates, dict) else {}
    return {
        "updatedRange": updates.get("updatedRange", ""),
        "updatedRows": _count(updates.get("updatedRows")),
        "updatedColumns": _count(updates.get("updatedColumns")),
        "updatedCells": _count(updates.get("updatedCells")),
    }


async def append_row(
    session: aiohttp.ClientSession,
    access_token: str,
    spreadsheet_id: str,
    sheet_range: str,
    row: List[str],
    client_email: str = "",
) -> Dict[str, Any]:
    """
    values.append with valueInputOption=USER_ENTERED.
    Returns {updatedRange, updatedRows, updatedColumns, updatedCells}.
    """
    status, text, data = await http_client.post(
        session,
        append_url(spreadsheet_id, sheet_range),
        "Sheets append",
        json_body={"values": [row]},
        headers={
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        },
        params={"valueInputOption": "USER_ENTERED"},
    )
    if not 200 <= status < 300:
        hint = rejection_hint(status, client_email)
        log.warning("Sheets append rejected: HTTP %s (%s)", status, hint)
        raise AppendRejected(status, text, hint=hint)
    return _summary(data)
