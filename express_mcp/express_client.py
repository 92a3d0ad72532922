"""
Express client.
Wires credentials, signer and transport into the tracking and pricing services.
"""

from typing import Any, Optional

from express_mcp.client import Operation, RequestSigner, Transport
from express_mcp.config import ExpressConfig
from express_mcp.models import Outcome
from express_mcp.pricing import PriceComparisonEngine
from express_mcp.tracking import TrackingQueryService


class ExpressClient:
    """
    Entry point for tracking queries and price comparisons.

    Built once per process from an ExpressConfig; safe to share
    between concurrent tool calls.
    """

    def __init__(self, config: ExpressConfig, transport: Optional[Transport] = None):
        self.config = config
        self.signer = RequestSigner(config.credentials, method=config.sign_method)
        self.transport = transport or Transport(
            endpoints={
                Operation.TRACKING: config.query_url,
                Operation.PRICING: config.price_url,
            },
            timeout=config.request_timeout,
        )

        self.tracking = TrackingQueryService(self.signer, self.transport)
        self.pricing = PriceComparisonEngine(
            self.signer,
            self.transport,
            carriers=config.price_carriers,
            carrier_timeout=config.carrier_timeout,
        )

    async def query(self, carrier: str, tracking_number: str, **options) -> Outcome:
        """Query real-time tracking for one shipment."""
        return await self.tracking.query(carrier, tracking_number, **options)

    async def compare_price(
        self,
        weight: Any = None,
        length: Any = None,
        width: Any = None,
        height: Any = None,
        *,
        origin: Any,
        destination: Any,
    ) -> Outcome:
        """Compare shipping prices across the configured carriers."""
        return await self.pricing.compare_price(
            weight,
            length,
            width,
            height,
            origin=origin,
            destination=destination,
        )

    async def close(self):
        await self.transport.close()

    async def __aenter__(self) -> "ExpressClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
