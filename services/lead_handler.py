# services/lead_handler.py
"""
Lead submission -> Google Sheets row.

One submission runs straight through:
  validating config -> building row -> signing -> exchanging token -> appending
and any failure jumps to the response with a {success: false, error, details,
timestamp} envelope. Nothing is retried and nothing is compensated: if the
append fails the bearer token is simply dropped.
"""
import functools
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import anyio

from services import google_oauth, jwt_signer, sheets_client
from services.errors import (
    AppendRejected,
    ConfigurationMissing,
    LeadSinkError,
    MalformedPayload,
    UnexpectedFailure,
)
from services.google_oauth import TokenCache
from services.http_client import SessionFactory, session_factory
from services.logger import get_logger, mask
from services.row_formatter import format_row
from services.settings import Settings

log = get_logger(__name__)

SUCCESS_MESSAGE = "Lead saved to Google Sheets"


class Stage(str, Enum):
    RECEIVING = "ReceivingRequest"
    VALIDATING_CONFIG = "ValidatingConfig"
    BUILDING_ROW = "BuildingRow"
    SIGNING = "Signing"
    EXCHANGING_TOKEN = "ExchangingToken"
    APPENDING = "Appending"
    RESPONDING = "Responding"


def utc_timestamp(clock: Callable[[], float] = time.time) -> str:
    return datetime.fromtimestamp(clock(), tz=timezone.utc).isoformat().replace("+00:00", "Z")


def success_envelope(result: Dict[str, Any], timestamp: str) -> Dict[str, Any]:
    return {
        "success": True,
        "message": SUCCESS_MESSAGE,
        "result": result,
        "timestamp": timestamp,
    }


def failure_envelope(err: LeadSinkError, timestamp: str) -> Dict[str, Any]:
    return {
        "success": False,
        "error": err.category,
        "details": err.details,
        "timestamp": timestamp,
    }


class LeadSheetHandler:
    def __init__(
        self,
        settings: Settings,
        sessions: Optional[SessionFactory] = None,
        token_cache: Optional[TokenCache] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.sessions = sessions or session_factory(settings.http_timeout_sec)
        self.clock = clock
        if token_cache is None and settings.token_cache_enabled:
            token_cache = TokenCache(clock=clock)
        self.token_cache = token_cache

    async def handle(self, payload: Any) -> Tuple[int, Dict[str, Any]]:
        """Returns (http_status, envelope). Never raises."""
        stage = Stage.RECEIVING

        def enter(next_stage: Stage) -> None:
            nonlocal stage
            stage = next_stage
            log.debug("lead stage -> %s", next_stage.value)

        try:
            enter(Stage.VALIDATING_CONFIG)
            self._check_config()

            enter(Stage.BUILDING_ROW)
            row = self._build_row(payload)

            result = await self._write(row, enter)
        except LeadSinkError as e:
            return self._fail(e, stage)
        except Exception as e:
            log.exception("Unhandled error while saving lead")
            return self._fail(UnexpectedFailure(str(e) or type(e).__name__), stage)

        enter(Stage.RESPONDING)
        log.info("Lead appended to %s (%s rows)", result.get("updatedRange"), result.get("updatedRows"))
        return 200, success_envelope(result, utc_timestamp(self.clock))

    def _check_config(self) -> None:
        missing = self.settings.missing()
        if missing:
            log.error("Missing configuration: %s", ", ".join(missing))
            raise ConfigurationMissing(
                "Google Sheets configuration missing; set " + " and ".join(missing)
            )

    def _build_row(self, payload: Any):
        row = format_row(payload)
        mobile = payload.get("mobileNumber")
        if mobile is None or not str(mobile).strip():
            raise MalformedPayload("mobileNumber is required")
        return row

    async def _write(self, row, on_stage) -> Dict[str, Any]:
        account = self.settings.service_account
        async with self.sessions() as session:
            token = self.token_cache.get(account.fingerprint()) if self.token_cache else None
            if token is None:
                on_stage(Stage.SIGNING)
                assertion = await anyio.to_thread.run_sync(
                    functools.partial(jwt_signer.sign_assertion, account, clock=self.clock)
                )

                on_stage(Stage.EXCHANGING_TOKEN)
                bearer = await google_oauth.exchange_assertion(session, assertion)
                if self.token_cache is not None:
                    self.token_cache.put(account.fingerprint(), bearer)
                token = bearer.access_token
            else:
                log.debug("Reusing cached token for %s", mask(account.client_email))

            on_stage(Stage.APPENDING)
            try:
                return await sheets_client.append_row(
                    session,
                    token,
                    self.settings.spreadsheet_id,
                    self.settings.sheet_range,
                    row,
                    client_email=account.client_email,
                )
            except AppendRejected as e:
                # a revoked token must not be served again from the cache
                if e.status == 401 and self.token_cache is not None:
                    self.token_cache.drop(account.fingerprint())
                raise

    def _fail(self, err: LeadSinkError, stage: Stage) -> Tuple[int, Dict[str, Any]]:
        log.warning("Lead not saved at %s: %s", stage.value, err)
        return 500, failure_envelope(err, utc_timestamp(self.clock))
