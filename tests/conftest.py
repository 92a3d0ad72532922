"""Shared fixtures."""

import asyncio

import orjson
import pytest

from express_mcp.client import Credentials, Operation, RequestSigner, UpstreamError
from express_mcp.config import ExpressConfig


class FakeTransport:
    """
    In-memory stand-in for Transport.

    Pricing responses are keyed by carrier code; a value may be a dict
    (decoded body), an UpstreamError (raised) or a float (delay in seconds
    before answering with ``slow_response``).
    """

    def __init__(self, tracking=None, pricing=None, slow_response=None):
        self.tracking = tracking if tracking is not None else {}
        self.pricing = pricing or {}
        self.slow_response = slow_response or {"data": {"price": "1"}}
        self.calls: list[tuple[Operation, dict]] = []
        self.closed = False

    async def send(self, operation, form, expect_json=True):
        self.calls.append((operation, form))
        params = orjson.loads(form["param"])

        if operation == Operation.TRACKING:
            action = self.tracking
        else:
            action = self.pricing[params["kuaidicom"]]

        if isinstance(action, UpstreamError):
            raise action
        if isinstance(action, (int, float)):
            await asyncio.sleep(action)
            return self.slow_response
        return action

    async def close(self):
        self.closed = True


@pytest.fixture
def config():
    """Create test configuration."""
    return ExpressConfig(
        customer="TESTCUSTOMER",
        auth_key="test-key",
        price_carriers=["shunfeng", "yuantong", "zhongtong"],
        carrier_timeout=0.2,
    )


@pytest.fixture
def credentials():
    return Credentials(account_id="TESTCUSTOMER", auth_key="test-key")


@pytest.fixture
def signer(credentials):
    return RequestSigner(credentials)


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport
