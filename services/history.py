# services/history.py
# Vehicle history is not computed; the lookup page shows this sample record.
from typing import Any, Dict


def sample_history(vin: str) -> Dict[str, Any]:
    return {
        "vin": vin,
        "source": "sample",
        "accidents": {"reported": 1, "summary": "Minor rear-end collision"},
        "ownershipHistory": {"owners": 2, "lastSaleDate": "2022-08-20"},
        "odometer": {"lastReading": 30000, "date": "2022-06-05"},
        "serviceRecords": {"count": 2, "lastService": "2022-06-05"},
        "titleCheck": {"status": "Clean"},
        "recalls": {"open": 0, "resolved": 1},
        "note": "No major issues found",
    }
