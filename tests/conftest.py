import os
import sys

import httpx
import pytest

# Ensure project root is on sys.path for `import mfroosh`, `import api`, etc.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mfroosh.config import Settings  # noqa: E402

VALID_ENQUIRY = {
    "name": "Layla Haddad",
    "email": "layla@example.com",
    "phone": "+971 50 123 4567",
    "company": "Haddad Foods",
    "product": "dates",
    "message": "Looking for 2 tonnes.\nPlease send pricing.",
}


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment and .env files."""
    base = dict(
        RESEND_API_KEY=None,
        EMAIL_SERVICE_URL=None,
        EMAIL_SERVICE_KEY=None,
        COMPANY_EMAIL=None,
        PING_MESSAGE="ping",
    )
    base.update(overrides)
    return Settings(_env_file=None, **base)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler):
        self.requests = []

        def _record(request):
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def valid_enquiry():
    return dict(VALID_ENQUIRY)


@pytest.fixture
def ok_transport():
    return RecordingTransport(lambda request: httpx.Response(200, json={"id": "msg_123"}))
