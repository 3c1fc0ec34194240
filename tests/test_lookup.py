from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from main import app
from services.nhtsa import decode_vin, is_valid_vin, normalize_vin, to_vehicle_record
from services.settings import Settings

VIN = "1HGCM82633A004352"

VPIC_RESULT = {
    "Make": "HONDA",
    "Model": "Accord",
    "ModelYear": "2003",
    "VehicleType": "PASSENGER CAR",
    "BodyClass": "Coupe",
    "Manufacturer": "AMERICAN HONDA MOTOR CO., INC.",
    "PlantCity": "MARYSVILLE",
    "PlantCountry": "UNITED STATES (USA)",
    "FuelTypePrimary": "Gasoline",
    "EngineCylinders": "6",
    "DisplacementL": "3.0",
    "TransmissionStyle": "Automatic",
    "DriveType": "",
    "ErrorCode": "0",
    "ErrorText": "0 - VIN decoded clean. Check Digit (9th position) is correct",
}


def _resp(payload, status=200):
    r = MagicMock()
    r.status_code = status
    r.json.return_value = payload
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    return r


@pytest.fixture
def client():
    saved = app.state.settings
    app.state.settings = Settings(platescrape_api_key="ps-key")
    with TestClient(app) as c:
        yield c
    app.state.settings = saved


def test_vin_helpers():
    assert normalize_vin(" 1hgcm8-2633a004352 ") == VIN
    assert is_valid_vin(VIN)
    assert not is_valid_vin("1HGCM82633A00435")      # 16 chars
    assert not is_valid_vin("1HGCM82633A00435O")     # O is not a VIN character


def test_vpic_record_mapping_and_errors():
    rec = to_vehicle_record(VIN, VPIC_RESULT)
    assert rec["make"] == "HONDA"
    assert rec["year"] == "2003"
    assert rec["fuelType"] == "Gasoline"
    assert rec["displacement"] == "3.0"
    assert rec["errors"] == []

    bad = to_vehicle_record(VIN, {**VPIC_RESULT, "ErrorCode": "1", "ErrorText": "1 - Check Digit (9th position) does not calculate properly"})
    assert bad["errors"] == ["1 - Check Digit (9th position) does not calculate properly"]


def test_decode_vin_calls_vpic():
    with patch("services.nhtsa.requests.get", return_value=_resp({"Results": [VPIC_RESULT]})) as get:
        rec = decode_vin(VIN.lower())
    assert rec["vin"] == VIN
    assert get.call_args[0][0].endswith(f"/DecodeVinValues/{VIN}?format=json")


def test_lookup_by_vin(client):
    with patch("services.nhtsa.requests.get", return_value=_resp({"Results": [VPIC_RESULT]})):
        r = client.post("/lookup", json={"vin": VIN})
    assert r.status_code == 200
    body = r.json()
    assert body["vehicle"]["model"] == "Accord"
    assert body["history"]["vin"] == VIN
    assert body["history"]["source"] == "sample"


def test_lookup_invalid_vin(client):
    assert client.post("/lookup", json={"vin": "123"}).status_code == 422


def test_lookup_vpic_down(client):
    with patch("services.nhtsa.requests.get", return_value=_resp({}, status=503)):
        r = client.post("/lookup", json={"vin": VIN})
    assert r.status_code == 502


def test_lookup_needs_vin_or_plate(client):
    assert client.post("/lookup", json={}).status_code == 400
    assert client.post("/lookup", json={"plate": "ABC123"}).status_code == 400


def test_lookup_by_plate(client):
    payload = {"vin": None, "make": "Toyota", "model": "Camry", "year": 2018, "color": "Blue"}
    with patch("services.plates.requests.get", return_value=_resp(payload)) as get:
        r = client.post("/lookup", json={"plate": "abc123", "state": "ca"})
    assert r.status_code == 200
    plate = r.json()["plate"]
    assert plate["plate"] == "ABC123"
    assert plate["state"] == "CA"
    assert plate["make"] == "Toyota"
    assert plate["year"] == "2018"
    assert plate["owner"] == ""
    assert plate["vin"] is None
    assert get.call_args[1]["headers"]["Authorization"] == "Bearer ps-key"


def test_lookup_by_plate_without_key(client):
    app.state.settings = Settings()
    r = client.post("/lookup", json={"plate": "ABC123", "state": "CA"})
    assert r.status_code == 503
