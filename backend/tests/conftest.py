"""
Shared fixtures and helpers.

No test touches the network: the action processor is replaced with an
httpx.MockTransport and tokens are minted locally with PyJWT.
"""

import json
import time

import httpx
import jwt as pyjwt
import pytest
from fastapi.testclient import TestClient

from mailgate.config import Settings
from mailgate.main import create_app

TEST_TOKEN_SECRET = "test-token-secret-for-unit-tests"
TEST_ACTION_SECRET = "test-action-secret"
TEST_WEBHOOK_SECRET = "test-webhook-secret"
TEST_ENDPOINT = "https://actions.example.test/functions/v1/process-email-request"


def make_settings(**overrides) -> Settings:
    values = {
        "action_endpoint_url": TEST_ENDPOINT,
        "action_secret": TEST_ACTION_SECRET,
        "token_secret": TEST_TOKEN_SECRET,
        "inbound_webhook_secret": TEST_WEBHOOK_SECRET,
    }
    values.update(overrides)
    return Settings(**values)


def make_token(
    secret: str = TEST_TOKEN_SECRET,
    user_id="user-abc",
    email: str = "user@example.com",
    token_type: str = "all",
    exp_offset: int = 3600,
    **extra,
) -> str:
    """Sign an action token the way the external issuer does (HS256)."""
    claims = {
        "userId": user_id,
        "email": email,
        "type": token_type,
        "exp": int(time.time()) + exp_offset,
    }
    claims.update(extra)
    return pyjwt.encode(claims, secret, algorithm="HS256")


class RecordingProcessor:
    """
    Stand-in for the downstream action processor.

    Records every request and answers with a fixed status, or raises the
    given exception to simulate a transport failure.
    """

    def __init__(self, status_code: int = 200, body: str = '{"ok": true}', exc=None):
        self.status_code = status_code
        self.body = body
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, text=self.body)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def processor() -> RecordingProcessor:
    return RecordingProcessor()


@pytest.fixture()
def client(settings, processor):
    """TestClient for an app wired to the recording processor."""
    app = create_app(settings=settings, http_client=processor.client())
    return TestClient(app)
