"""
Pricing module.
Concurrent multi-carrier price comparison.
"""

from express_mcp.pricing.comparison import PriceComparisonEngine, describe_quote

__all__ = ["PriceComparisonEngine", "describe_quote"]
