"""
Price Comparison Engine.
Fans a price request out to every configured carrier and ranks the quotes.
"""

import asyncio
import math
from typing import Any, Optional

from loguru import logger

from express_mcp.carriers import carrier_name
from express_mcp.client import Operation, RequestSigner, Transport, UpstreamError
from express_mcp.models import (
    CarrierQuote,
    ComparisonResult,
    ErrorKind,
    ExpressError,
    Outcome,
    PriceRequest,
)


class PriceComparisonEngine:
    """
    Multi-carrier price comparison.

    Features:
    - One concurrent request per configured carrier
    - Per-carrier deadline; a slow carrier degrades to a TIMEOUT quote
    - Partial failures kept as error quotes after the priced ones
    """

    def __init__(
        self,
        signer: RequestSigner,
        transport: Transport,
        carriers: list[str],
        carrier_timeout: float = 10.0,
    ):
        self.signer = signer
        self.transport = transport
        self.carriers = list(carriers)
        self.carrier_timeout = carrier_timeout

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
        """
        Compare shipping prices across all configured carriers.

        Args:
            weight: Parcel weight in kg (defaults to 1 if missing or not positive)
            length, width, height: Optional dimensions in cm
            origin: Departure address/city
            destination: Destination address/city

        Returns:
            Outcome with a ComparisonResult value, or ALL_CARRIERS_FAILED
        """
        try:
            request = PriceRequest.build(
                origin,
                destination,
                weight=weight,
                length=length,
                width=width,
                height=height,
            )
        except ExpressError as e:
            return Outcome.fail(e.kind, e.message)

        logger.info(
            f"Comparing prices {request.origin} -> {request.destination} "
            f"({request.weight:g} kg) across {len(self.carriers)} carrier(s)"
        )

        # Tasks are created in carrier order; gather keeps that order in its results
        tasks = [
            asyncio.create_task(self._quote_carrier(carrier, request))
            for carrier in self.carriers
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        quotes = []
        for carrier, result in zip(self.carriers, results):
            if isinstance(result, CarrierQuote):
                quotes.append(result)
            else:
                logger.error(f"Unexpected error quoting {carrier}: {result!r}")
                quotes.append(
                    CarrierQuote.failed(carrier, ErrorKind.TRANSPORT_FAILURE, "unexpected error")
                )

        comparison = ComparisonResult.ranked(quotes)

        if not comparison.successes:
            reasons = "; ".join(
                f"{q.carrier_id}: {q.error.value} ({q.error_message})" for q in comparison.failures
            )
            return Outcome.fail(
                ErrorKind.ALL_CARRIERS_FAILED,
                f"no carrier returned a price - {reasons or 'no carriers configured'}",
            )

        logger.info(
            f"Price comparison done: {len(comparison.successes)} quote(s), "
            f"{len(comparison.failures)} failure(s), cheapest {describe_quote(comparison.cheapest)}"
        )
        return Outcome.ok(comparison)

    async def _quote_carrier(self, carrier: str, request: PriceRequest) -> CarrierQuote:
        """Fetch one carrier's quote; every failure is captured in the returned quote."""
        form = self.signer.sign(request.to_params(carrier))

        try:
            data = await asyncio.wait_for(
                self.transport.send(Operation.PRICING, form),
                timeout=self.carrier_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Price quote from {carrier} timed out after {self.carrier_timeout:g}s")
            return CarrierQuote.failed(
                carrier, ErrorKind.TIMEOUT, f"no response within {self.carrier_timeout:g}s"
            )
        except UpstreamError as e:
            logger.warning(f"Price quote from {carrier} failed: {e.kind.value} - {e.message}")
            return CarrierQuote.failed(carrier, e.kind, e.message)

        return self.parse_quote(carrier, data)

    @staticmethod
    def parse_quote(carrier: str, data: dict) -> CarrierQuote:
        """Normalize a provider price response into a CarrierQuote."""
        payload = data.get("data")
        if not isinstance(payload, dict):
            payload = data

        price = _number(payload.get("price", data.get("price")))
        if price is None:
            return CarrierQuote.failed(carrier, ErrorKind.DECODE_FAILURE, "response has no price")
        if price < 0:
            return CarrierQuote.failed(
                carrier, ErrorKind.DECODE_FAILURE, f"response has a negative price: {price:g}"
            )

        days = _number(payload.get("estimatedDays", payload.get("days")))

        return CarrierQuote(
            carrier_id=carrier,
            price=price,
            currency=str(payload.get("currency") or "CNY"),
            estimated_days=days,
        )


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    # NaN and infinities are not usable prices or durations
    return number if math.isfinite(number) else None


def describe_quote(quote: CarrierQuote) -> str:
    """One-line human-readable rendering of a quote."""
    name = carrier_name(quote.carrier_id) or quote.carrier_id
    if not quote.succeeded:
        return f"{name}: unavailable ({quote.error.value}: {quote.error_message})"
    days = f", ~{quote.estimated_days:g} day(s)" if quote.estimated_days is not None else ""
    return f"{name}: {quote.price:.2f} {quote.currency}{days}"
