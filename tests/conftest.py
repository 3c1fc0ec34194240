# tests/conftest.py
import json

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from services.settings import ServiceAccount, Settings

SPREADSHEET_ID = "sheet-123"
CLIENT_EMAIL = "lead-writer@demo-project.iam.gserviceaccount.com"


class FakeResponse:
    def __init__(self, status, body=""):
        self.status = status
        self._text = body if isinstance(body, str) else json.dumps(body)

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """
    Stand-in for aiohttp.ClientSession. `routes` maps a URL substring to a
    FakeResponse (or an exception to raise). Every POST is recorded in `calls`.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        for needle, reply in self.routes.items():
            if needle in url:
                if isinstance(reply, BaseException):
                    raise reply
                return reply
        raise AssertionError(f"unexpected POST {url}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def token_ok(token="ya29.test-token", expires_in=3599):
    return FakeResponse(200, {"access_token": token, "expires_in": expires_in, "token_type": "Bearer"})


def append_ok(columns=22):
    return FakeResponse(200, {
        "spreadsheetId": SPREADSHEET_ID,
        "tableRange": "Sheet1!A1:V7",
        "updates": {
            "spreadsheetId": SPREADSHEET_ID,
            "updatedRange": "Sheet1!A8:V8",
            "updatedRows": 1,
            "updatedColumns": columns,
            "updatedCells": columns,
        },
    })


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture
def account(rsa_pem):
    return ServiceAccount(client_email=CLIENT_EMAIL, private_key=rsa_pem)


@pytest.fixture
def settings(account):
    return Settings(service_account=account, spreadsheet_id=SPREADSHEET_ID)


@pytest.fixture
def honda_lead():
    return {
        "vehicleData": {"vehicle": {"make": "Honda", "model": "Civic", "year": "2020"}},
        "mobileNumber": "555-0100",
        "partName": "Brake Pads",
    }
