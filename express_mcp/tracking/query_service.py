"""
Tracking Query Service.
Runs a single-carrier tracking query against the upstream provider.
"""

from loguru import logger

from express_mcp.carriers import resolve_carrier_code
from express_mcp.client import Operation, RequestSigner, Transport, UpstreamError
from express_mcp.models import (
    ExpressError,
    Outcome,
    ResponseFormat,
    SortOrder,
    TrackingRequest,
)


class TrackingQueryService:
    """
    Stateless tracking lookups.

    One signed request per query; the decoded payload is returned
    unmodified. Failures are returned as a failed Outcome, never raised.
    """

    def __init__(self, signer: RequestSigner, transport: Transport):
        self.signer = signer
        self.transport = transport

    async def query(
        self,
        carrier: str,
        tracking_number: str,
        *,
        phone: str = "",
        origin: str = "",
        destination: str = "",
        extended_status: bool = False,
        response_format: ResponseFormat = ResponseFormat.JSON,
        order: SortOrder = SortOrder.DESC,
    ) -> Outcome:
        """
        Query tracking information for a shipment.

        Args:
            carrier: Carrier code or name (e.g. "shunfeng" or "顺丰")
            tracking_number: The tracking number
            phone: Recipient/sender phone, required by some carriers
            origin: Departure city
            destination: Destination city
            extended_status: Request the provider's extended status codes
            response_format: JSON or raw text
            order: Event order

        Returns:
            Outcome with the decoded tracking payload as value
        """
        try:
            request = TrackingRequest.build(
                carrier,
                tracking_number,
                phone=phone,
                origin=origin,
                destination=destination,
                extended_status=extended_status,
                response_format=response_format,
                order=order,
            )
        except ExpressError as e:
            return Outcome.fail(e.kind, e.message)

        request.carrier = resolve_carrier_code(request.carrier)
        logger.info(f"Tracking query: {request.carrier} {request.tracking_number}")

        form = self.signer.sign(request.to_params())

        try:
            result = await self.transport.send(
                Operation.TRACKING,
                form,
                expect_json=request.response_format == ResponseFormat.JSON,
            )
        except UpstreamError as e:
            logger.warning(f"Tracking {request.tracking_number} failed: {e.kind.value} - {e.message}")
            return Outcome.fail(e.kind, f"{request.carrier}: {e.message}")

        return Outcome.ok(result)

