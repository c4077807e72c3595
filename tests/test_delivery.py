import json

import httpx
import pytest

from conftest import RecordingTransport, make_settings
from mfroosh.delivery import (
    BaseProvider,
    DeliveryStatus,
    ResendProvider,
    WebhookProvider,
    build_enquiry_email,
    deliver_enquiry,
    select_provider,
)
from mfroosh.models import EnquiryRequest


@pytest.fixture
def enquiry(valid_enquiry):
    return EnquiryRequest(**valid_enquiry)


def test_email_subject_and_addresses_default(enquiry):
    email = build_enquiry_email(enquiry, make_settings())
    assert email.subject == "New Enquiry from Layla Haddad - dates"
    assert email.sender == "noreply@mfrooshtrade.com"
    assert email.recipient == "info@mfrooshtrade.com"


def test_company_email_overrides_both_addresses(enquiry):
    email = build_enquiry_email(enquiry, make_settings(COMPANY_EMAIL="sales@example.com"))
    assert email.sender == "sales@example.com"
    assert email.recipient == "sales@example.com"


def test_html_body_embeds_fields(enquiry):
    body = build_enquiry_email(enquiry, make_settings()).html
    assert "<strong>Name:</strong> Layla Haddad" in body
    assert "<strong>Company:</strong> Haddad Foods" in body
    assert "<strong>Product Interest:</strong> dates" in body
    assert "Looking for 2 tonnes.<br>Please send pricing." in body


def test_html_body_omits_absent_company(valid_enquiry):
    valid_enquiry["company"] = None
    body = build_enquiry_email(EnquiryRequest(**valid_enquiry), make_settings()).html
    assert "Company" not in body


def test_html_body_escapes_markup(valid_enquiry):
    valid_enquiry["message"] = "<script>alert(1)</script>"
    body = build_enquiry_email(EnquiryRequest(**valid_enquiry), make_settings()).html
    assert "<script>" not in body
    assert "&lt;script&gt;" in body


def test_provider_selection_order():
    assert select_provider(make_settings()) is None
    assert isinstance(select_provider(make_settings(RESEND_API_KEY="re_1")), ResendProvider)
    webhook_only = make_settings(EMAIL_SERVICE_URL="https://mail.example.com/send", EMAIL_SERVICE_KEY="k")
    assert isinstance(select_provider(webhook_only), WebhookProvider)
    both = make_settings(RESEND_API_KEY="re_1", EMAIL_SERVICE_URL="https://mail.example.com/send", EMAIL_SERVICE_KEY="k")
    assert isinstance(select_provider(both), ResendProvider)


def test_webhook_needs_url_and_key():
    assert select_provider(make_settings(EMAIL_SERVICE_URL="https://mail.example.com/send")) is None
    assert select_provider(make_settings(EMAIL_SERVICE_KEY="k")) is None


@pytest.mark.asyncio
async def test_no_provider_skips_without_network(enquiry, ok_transport):
    async with httpx.AsyncClient(transport=ok_transport) as client:
        outcome = await deliver_enquiry(enquiry, make_settings(), client)
    assert outcome.status is DeliveryStatus.SKIPPED
    assert outcome.provider is None
    assert ok_transport.requests == []


@pytest.mark.asyncio
async def test_resend_request_shape(enquiry, ok_transport):
    settings = make_settings(RESEND_API_KEY="re_secret", COMPANY_EMAIL="sales@example.com")
    async with httpx.AsyncClient(transport=ok_transport) as client:
        outcome = await deliver_enquiry(enquiry, settings, client)

    assert outcome.status is DeliveryStatus.SENT
    assert outcome.delivered
    assert outcome.provider == "resend"
    assert len(ok_transport.requests) == 1
    req = ok_transport.requests[0]
    assert str(req.url) == "https://api.resend.com/emails"
    assert req.headers["Authorization"] == "Bearer re_secret"
    body = json.loads(req.content)
    assert body["from"] == "sales@example.com"
    assert body["to"] == ["sales@example.com"]
    assert body["subject"] == "New Enquiry from Layla Haddad - dates"


@pytest.mark.asyncio
async def test_webhook_request_shape(enquiry, ok_transport):
    settings = make_settings(EMAIL_SERVICE_URL="https://mail.example.com/send", EMAIL_SERVICE_KEY="gw-key")
    async with httpx.AsyncClient(transport=ok_transport) as client:
        outcome = await deliver_enquiry(enquiry, settings, client)

    assert outcome.status is DeliveryStatus.SENT
    assert outcome.provider == "webhook"
    req = ok_transport.requests[0]
    assert str(req.url) == "https://mail.example.com/send"
    assert req.headers["Authorization"] == "Bearer gw-key"
    body = json.loads(req.content)
    assert body["to"] == "info@mfrooshtrade.com"
    assert "<h2>New Product Enquiry</h2>" in body["html"]


@pytest.mark.asyncio
async def test_only_primary_called_when_both_configured(enquiry, ok_transport):
    settings = make_settings(
        RESEND_API_KEY="re_1", EMAIL_SERVICE_URL="https://mail.example.com/send", EMAIL_SERVICE_KEY="k"
    )
    async with httpx.AsyncClient(transport=ok_transport) as client:
        await deliver_enquiry(enquiry, settings, client)
    assert [r.url.host for r in ok_transport.requests] == ["api.resend.com"]


@pytest.mark.asyncio
async def test_rejected_call_is_contained(enquiry):
    transport = RecordingTransport(lambda request: httpx.Response(422, json={"message": "bad from"}))
    async with httpx.AsyncClient(transport=transport) as client:
        outcome = await deliver_enquiry(enquiry, make_settings(RESEND_API_KEY="re_1"), client)
    assert outcome.status is DeliveryStatus.FAILED
    assert outcome.error == "HTTP 422"
    # no fallback to the webhook, one attempt only
    assert len(transport.requests) == 1


@pytest.mark.asyncio
async def test_network_error_is_contained(enquiry):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    settings = make_settings(EMAIL_SERVICE_URL="https://mail.example.com/send", EMAIL_SERVICE_KEY="k")
    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
        outcome = await deliver_enquiry(enquiry, settings, client)
    assert outcome.status is DeliveryStatus.FAILED
    assert outcome.provider == "webhook"
    assert "connection refused" in outcome.error


@pytest.mark.asyncio
async def test_custom_provider_list(enquiry, ok_transport):
    class AlwaysOn(BaseProvider):
        name = "always"
        calls = 0

        def is_configured(self, settings):
            return True

        async def send(self, email, settings, client):
            AlwaysOn.calls += 1
            raise RuntimeError("boom")

    async with httpx.AsyncClient(transport=ok_transport) as client:
        outcome = await deliver_enquiry(enquiry, make_settings(), client, providers=[AlwaysOn()])
    assert outcome.status is DeliveryStatus.FAILED
    assert outcome.error == "boom"
    assert AlwaysOn.calls == 1
