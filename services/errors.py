# services/errors.py
# Failure categories surfaced by the lead -> Google Sheets flow.
# Every one of these ends up in the {success: false, error, details, timestamp} envelope.
from typing import Optional


class LeadSinkError(Exception):
    category = "UnexpectedFailure"
    retryable = False

    def __init__(self, details: str):
        super().__init__(details)
        self.details = details

    def __str__(self) -> str:
        return f"{self.category}: {self.details}"


class ConfigurationMissing(LeadSinkError):
    category = "ConfigurationMissing"


class MalformedPayload(LeadSinkError):
    category = "MalformedPayload"


class InvalidKeyMaterial(LeadSinkError):
    category = "InvalidKeyMaterial"


class TokenEndpointError(LeadSinkError):
    category = "TokenEndpointError"

    def __init__(self, status: int, body: str):
        super().__init__(f"Token endpoint returned HTTP {status}: {_clip(body)}")
        self.status = status
        self.body = body


class TokenResponseMalformed(LeadSinkError):
    category = "TokenResponseMalformed"


class AppendRejected(LeadSinkError):
    category = "AppendRejected"

    def __init__(self, status: int, body: str, hint: Optional[str] = None):
        msg = f"Sheets API returned HTTP {status}"
        if hint:
            msg += f": {hint}"
        msg += f" :: {_clip(body)}"
        super().__init__(msg)
        self.status = status
        self.body = body
        self.hint = hint


class NetworkTimeout(LeadSinkError):
    category = "NetworkTimeout"
    retryable = True


class UnexpectedFailure(LeadSinkError):
    category = "UnexpectedFailure"


def _clip(text: Optional[str], limit: int = 500) -> str:
    text = (text or "").strip()
    return text if len(text) <= limit else text[:limit] + "…"
