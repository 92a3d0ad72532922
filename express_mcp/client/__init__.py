"""
Upstream client module.
Credentials, request signing and HTTP transport for the courier-data provider.
"""

from express_mcp.client.credentials import Credentials
from express_mcp.client.signer import RequestSigner
from express_mcp.client.transport import Operation, Transport, UpstreamError

__all__ = ["Credentials", "RequestSigner", "Operation", "Transport", "UpstreamError"]
