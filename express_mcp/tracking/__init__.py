"""
Tracking module.
Real-time package tracking through the upstream provider.
"""

from express_mcp.tracking.query_service import TrackingQueryService

__all__ = ["TrackingQueryService"]
