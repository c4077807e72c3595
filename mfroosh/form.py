"""Client-side enquiry form: submission state and the UI derived from it."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

import httpx

from mfroosh.i18n import DEFAULT_LOCALE, translate

logger = logging.getLogger(__name__)

ENQUIRY_ENDPOINT = "/api/send-enquiry"
SUCCESS_DISPLAY_SECONDS = 5.0
FIELDS = ("name", "email", "phone", "company", "product", "message")


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SubmissionState:
    """Current status; error_message is only ever set alongside ERROR."""

    status: SubmissionStatus = SubmissionStatus.IDLE
    error_message: Optional[str] = None


@dataclass
class Banner:
    kind: str  # success or error
    title: str
    text: str


class EnquiryForm:
    """Drives one enquiry form instance through idle -> submitting -> success/error.

    A successful submission reverts to idle after `reset_after` seconds. The
    form owns that timer: a new submission or `close()` cancels it, so a
    stale timer can never knock a newer state back to idle.

    Concurrent `submit()` calls are not coordinated (last response wins);
    callers are expected to respect `can_submit`.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        default_product: Optional[str] = None,
        on_success: Optional[Callable[[], None]] = None,
        locale: str = DEFAULT_LOCALE,
        reset_after: float = SUCCESS_DISPLAY_SECONDS,
        endpoint: str = ENQUIRY_ENDPOINT,
    ):
        self.client = client
        self.default_product = default_product
        self.on_success = on_success
        self.locale = locale
        self.reset_after = reset_after
        self.endpoint = endpoint

        self.values: Dict[str, str] = self._initial_values()
        self.state = SubmissionState()
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self._closed = False

    async def __aenter__(self) -> "EnquiryForm":
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()

    def _initial_values(self) -> Dict[str, str]:
        values = {f: "" for f in FIELDS}
        values["product"] = self.default_product or ""
        return values

    # ------------ Fields ------------

    def update(self, field: str, value: str) -> None:
        if field not in self.values:
            raise KeyError(f"Unknown enquiry field: {field}")
        self.values[field] = value

    # ------------ Derived UI ------------

    @property
    def can_submit(self) -> bool:
        return self.state.status is not SubmissionStatus.SUBMITTING

    @property
    def submit_label(self) -> str:
        if self.state.status is SubmissionStatus.SUBMITTING:
            return translate("enquiry.submit.sending", self.locale)
        return translate("enquiry.submit.send", self.locale)

    @property
    def banner(self) -> Optional[Banner]:
        if self.state.status is SubmissionStatus.SUCCESS:
            return Banner(
                kind="success",
                title=translate("enquiry.successTitle", self.locale),
                text=translate("enquiry.successMessage", self.locale),
            )
        if self.state.status is SubmissionStatus.ERROR:
            return Banner(
                kind="error",
                title=translate("enquiry.errorTitle", self.locale),
                text=self.state.error_message or "",
            )
        return None

    # ------------ Transitions ------------

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _auto_reset(self) -> None:
        self._reset_handle = None
        if self.state.status is SubmissionStatus.SUCCESS:
            self.state = SubmissionState()

    def _fail(self, message: Optional[str]) -> None:
        self.state = SubmissionState(
            SubmissionStatus.ERROR,
            message or translate("enquiry.errorDefault", self.locale),
        )

    async def submit(self) -> SubmissionState:
        """Send the current values once and settle into success or error."""
        if self._closed:
            raise RuntimeError("Form is closed")

        self._cancel_reset()
        self.state = SubmissionState(SubmissionStatus.SUBMITTING)

        try:
            response = await self.client.post(self.endpoint, json=dict(self.values))
        except httpx.HTTPError as e:
            logger.warning("Enquiry request failed: %s", e)
            self._fail(None)
            return self.state

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = {}

        if not response.is_success or not data.get("success"):
            message = data.get("message")
            self._fail(message if isinstance(message, str) else None)
            return self.state

        self.state = SubmissionState(SubmissionStatus.SUCCESS)
        self.values = self._initial_values()
        if not self._closed:
            self._cancel_reset()
            loop = asyncio.get_running_loop()
            self._reset_handle = loop.call_later(self.reset_after, self._auto_reset)
        if self.on_success is not None:
            try:
                self.on_success()
            except Exception:
                logger.exception("Enquiry on_success callback failed")
        return self.state

    def close(self) -> None:
        """Tear the form down; cancels any pending auto-reset."""
        self._closed = True
        self._cancel_reset()
