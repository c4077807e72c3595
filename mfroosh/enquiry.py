"""Enquiry handling: validate, log, notify, respond."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Union
from urllib.parse import parse_qsl

import httpx

from mfroosh.config import Settings
from mfroosh.delivery import DEFAULT_PROVIDERS, BaseProvider, DeliveryOutcome, deliver_enquiry
from mfroosh.models import EnquiryRequest, EnquiryResponse
from mfroosh.validation import validate_enquiry

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Enquiry submitted successfully. We'll contact you soon."
FAILURE_MESSAGE = "Failed to process enquiry. Please try again."

RawBody = Union[bytes, str, Dict[str, Any], None]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class HandlerResult:
    """HTTP status and public response, plus the internal delivery outcome."""

    status_code: int
    response: EnquiryResponse
    delivery: Optional[DeliveryOutcome] = None

    @property
    def accepted(self) -> bool:
        return self.response.success


def _parse_body(raw: RawBody, content_type: Optional[str] = None) -> Dict[str, Any]:
    """Decode the request body; anything that is not a JSON object counts as empty.

    Form-encoded bodies (plain HTML form posts) are decoded as such; everything
    else is read as JSON. Malformed JSON raises ValueError and is handled as an
    unexpected failure.
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not raw.strip():
        return {}
    if content_type and content_type.split(";", 1)[0].strip().lower() == FORM_CONTENT_TYPE:
        return dict(parse_qsl(raw, keep_blank_values=True))
    data = json.loads(raw)
    return data if isinstance(data, dict) else {}


def _to_enquiry(data: Dict[str, Any]) -> EnquiryRequest:
    company = data.get("company")
    return EnquiryRequest(
        name=data["name"],
        email=data["email"],
        phone=data["phone"],
        company=company if isinstance(company, str) and company else None,
        product=data["product"],
        message=data["message"],
    )


class EnquiryHandler:
    """Stateless per-request pipeline behind POST /api/send-enquiry.

    The only thing shared between requests is the pooled HTTP client used
    for provider calls.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        providers: Sequence[BaseProvider] = DEFAULT_PROVIDERS,
    ):
        self.settings = settings
        self.client = client
        self.providers = providers

    def _log_enquiry(self, enquiry: EnquiryRequest) -> None:
        record = enquiry.model_dump()
        record["timestamp"] = datetime.now(timezone.utc).isoformat()
        logger.info("Enquiry received: %s", json.dumps(record, ensure_ascii=False))

    async def handle(self, raw_body: RawBody, content_type: Optional[str] = None) -> HandlerResult:
        try:
            data = _parse_body(raw_body, content_type)

            reason = validate_enquiry(data)
            if reason is not None:
                logger.info("Enquiry rejected: %s", reason)
                return HandlerResult(400, EnquiryResponse(success=False, message=reason))

            enquiry = _to_enquiry(data)
            self._log_enquiry(enquiry)

            delivery = await deliver_enquiry(enquiry, self.settings, self.client, self.providers)
        except Exception:
            logger.exception("Enquiry handler error")
            return HandlerResult(500, EnquiryResponse(success=False, message=FAILURE_MESSAGE))

        return HandlerResult(200, EnquiryResponse(success=True, message=SUCCESS_MESSAGE), delivery)
