"""Pytest configuration and shared fixtures."""

import json
import time

import httpx
import pytest

from icinga2_downtime.models import EndpointContext


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove Icinga2 environment variables before each test."""
    for var in [
        "ICINGA2_API_HOST",
        "ICINGA2_API_PORT",
        "ICINGA2_API_USER",
        "ICINGA2_API_PASSWORD",
        "ICINGA2_VERIFY_SSL",
        "ICINGA2_DOWNTIME_CONFIG",
    ]:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process timezone; restored after the test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available")

    def switch(tz: str):
        monkeypatch.setenv("TZ", tz)
        time.tzset()

    yield switch

    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def endpoint():
    """Endpoint record pointing at a fake Icinga2 instance."""
    return EndpointContext(
        host="icinga.example.com",
        port=5665,
        username="root",
        password="s3cret",
    )


class FakeIcinga:
    """
    httpx.MockTransport handler replaying canned replies in order.

    A reply is either ``(status, body)`` or an httpx.RequestError subclass,
    which is raised for that request.
    """

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, type) and issubclass(reply, httpx.RequestError):
            raise reply("Connection refused", request=request)
        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def fake_icinga():
    """Factory for FakeIcinga handlers."""
    return FakeIcinga


def ok(*statuses):
    """Icinga2 success body with one result per status line."""
    return 200, {"results": [{"code": 200, "status": s} for s in statuses]}


@pytest.fixture
def ok_reply():
    return ok
