"""
HTTP transport to the upstream courier-data provider.
One signed POST per call, no retries; failures surface as UpstreamError.
"""

import asyncio
from enum import Enum
from typing import Any, Optional

import aiohttp
import orjson
from loguru import logger

from express_mcp.models import ErrorKind


class Operation(str, Enum):
    """Upstream operation a request targets."""
    TRACKING = "tracking"
    PRICING = "pricing"


class UpstreamError(Exception):
    """Transport or provider failure, classified by ErrorKind."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class Transport:
    """
    Sends signed form requests to the provider endpoints.

    The aiohttp session is created lazily and shared by concurrent calls.
    """

    def __init__(
        self,
        endpoints: dict[Operation, str],
        timeout: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.endpoints = endpoints
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session is created."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def send(
        self,
        operation: Operation,
        form: dict[str, str],
        expect_json: bool = True,
    ) -> dict[str, Any]:
        """
        POST a signed request and return the decoded body.

        Raises:
            UpstreamError: TRANSPORT_FAILURE, TIMEOUT, UPSTREAM_REJECTED or DECODE_FAILURE
        """
        url = self.endpoints[operation]
        session = await self._ensure_session()

        try:
            async with session.post(
                url,
                data=form,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as resp:
                body = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as e:
            raise UpstreamError(ErrorKind.TIMEOUT, f"{operation.value} request timed out") from e
        except (aiohttp.ClientError, OSError) as e:
            logger.debug(f"{operation.value} request to {url} failed: {e!r}")
            raise UpstreamError(
                ErrorKind.TRANSPORT_FAILURE,
                f"could not reach the {operation.value} service",
            ) from e

        if status != 200:
            raise UpstreamError(
                ErrorKind.UPSTREAM_REJECTED,
                f"{operation.value} service returned HTTP {status}",
            )

        if not expect_json:
            return {"raw": body}

        return self.decode(operation, body)

    @staticmethod
    def decode(operation: Operation, body: str) -> dict[str, Any]:
        """Decode a JSON object body and check the provider's error envelope."""
        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise UpstreamError(
                ErrorKind.DECODE_FAILURE,
                f"{operation.value} service returned an unreadable response",
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                ErrorKind.DECODE_FAILURE,
                f"{operation.value} service returned an unexpected response",
            )

        return_code = data.get("returnCode")
        if data.get("result") is False or (return_code is not None and str(return_code) != "200"):
            message = data.get("message") or "request rejected"
            code = f" ({return_code})" if return_code is not None else ""
            raise UpstreamError(ErrorKind.UPSTREAM_REJECTED, f"{message}{code}")

        return data
