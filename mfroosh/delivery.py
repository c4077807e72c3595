"""
Enquiry notification providers.

Providers are tried in a fixed priority order and the first one whose
credentials are configured is used for the request. Exactly one attempt is
made; whatever goes wrong is logged and reported back as a DeliveryOutcome,
never raised to the caller.
"""

from __future__ import annotations

import html
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import httpx

from mfroosh.config import Settings
from mfroosh.models import EnquiryRequest

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class EnquiryEmail:
    """Rendered notification for the operator inbox."""

    sender: str
    recipient: str
    subject: str
    html: str

    def as_payload(self) -> dict:
        return {"from": self.sender, "to": self.recipient, "subject": self.subject, "html": self.html}


@dataclass
class DeliveryOutcome:
    """What happened to the notification for one enquiry.

    Internal only: the HTTP response never reflects it.
    """

    status: DeliveryStatus
    provider: Optional[str] = None
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status is DeliveryStatus.SENT


def _paragraph(label: str, value: str) -> str:
    return f"<p><strong>{label}:</strong> {html.escape(value)}</p>"


def build_enquiry_email(enquiry: EnquiryRequest, settings: Settings) -> EnquiryEmail:
    """Render the subject and HTML body sent to the company inbox."""
    parts = [
        "<h2>New Product Enquiry</h2>",
        _paragraph("Name", enquiry.name),
        _paragraph("Email", enquiry.email),
        _paragraph("Phone", enquiry.phone),
    ]
    if enquiry.company:
        parts.append(_paragraph("Company", enquiry.company))
    parts.append(_paragraph("Product Interest", enquiry.product))
    parts.append("<p><strong>Message:</strong></p>")
    parts.append("<p>" + html.escape(enquiry.message).replace("\n", "<br>") + "</p>")

    return EnquiryEmail(
        sender=settings.sender_email,
        recipient=settings.recipient_email,
        subject=f"New Enquiry from {enquiry.name} - {enquiry.product}",
        html="\n".join(parts),
    )


class BaseProvider(ABC):
    """A backend able to relay an enquiry to a human operator."""

    name: str = "base"

    @abstractmethod
    def is_configured(self, settings: Settings) -> bool:
        """Presence predicate: are this provider's credentials set?"""

    @abstractmethod
    async def send(self, email: EnquiryEmail, settings: Settings, client: httpx.AsyncClient) -> None:
        """Deliver the email; raise on any failure."""


class ResendProvider(BaseProvider):
    """Structured transactional email API keyed by RESEND_API_KEY."""

    name = "resend"

    def is_configured(self, settings: Settings) -> bool:
        return bool(settings.RESEND_API_KEY)

    async def send(self, email: EnquiryEmail, settings: Settings, client: httpx.AsyncClient) -> None:
        response = await client.post(
            settings.RESEND_API_URL,
            json={
                "from": email.sender,
                "to": [email.recipient],
                "subject": email.subject,
                "html": email.html,
            },
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            timeout=settings.DELIVERY_TIMEOUT_SECONDS,
        )
        response.raise_for_status()


class WebhookProvider(BaseProvider):
    """Generic HTTP email gateway (EMAIL_SERVICE_URL + EMAIL_SERVICE_KEY)."""

    name = "webhook"

    def is_configured(self, settings: Settings) -> bool:
        return bool(settings.EMAIL_SERVICE_URL and settings.EMAIL_SERVICE_KEY)

    async def send(self, email: EnquiryEmail, settings: Settings, client: httpx.AsyncClient) -> None:
        response = await client.post(
            settings.EMAIL_SERVICE_URL,
            json=email.as_payload(),
            headers={"Authorization": f"Bearer {settings.EMAIL_SERVICE_KEY}"},
            timeout=settings.DELIVERY_TIMEOUT_SECONDS,
        )
        response.raise_for_status()


# Priority order: the primary API wins whenever its key is present
DEFAULT_PROVIDERS: Sequence[BaseProvider] = (ResendProvider(), WebhookProvider())


def select_provider(
    settings: Settings, providers: Sequence[BaseProvider] = DEFAULT_PROVIDERS
) -> Optional[BaseProvider]:
    for provider in providers:
        if provider.is_configured(settings):
            return provider
    return None


async def deliver_enquiry(
    enquiry: EnquiryRequest,
    settings: Settings,
    client: httpx.AsyncClient,
    providers: Sequence[BaseProvider] = DEFAULT_PROVIDERS,
) -> DeliveryOutcome:
    """Notify the operator through the first configured provider.

    Never raises; failures are logged and returned as a FAILED outcome.
    """
    provider = select_provider(settings, providers)
    if provider is None:
        logger.info("No delivery provider configured; enquiry from %s logged only", enquiry.email)
        return DeliveryOutcome(status=DeliveryStatus.SKIPPED)

    try:
        email = build_enquiry_email(enquiry, settings)
        await provider.send(email, settings, client)
    except httpx.HTTPStatusError as e:
        logger.warning(
            "Enquiry delivery via %s rejected (HTTP %s): %s",
            provider.name,
            e.response.status_code,
            e.response.text[:200],
        )
        return DeliveryOutcome(
            status=DeliveryStatus.FAILED, provider=provider.name, error=f"HTTP {e.response.status_code}"
        )
    except Exception as e:
        logger.warning(
            "Enquiry delivery via %s failed for %s: %s",
            provider.name,
            enquiry.email,
            e,
            exc_info=True,
        )
        return DeliveryOutcome(
            status=DeliveryStatus.FAILED, provider=provider.name, error=str(e) or type(e).__name__
        )

    logger.info("Enquiry notification sent via %s to %s", provider.name, email.recipient)
    return DeliveryOutcome(status=DeliveryStatus.SENT, provider=provider.name)
