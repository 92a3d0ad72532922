"""
Configuration management for the Express MCP server.
Handles loading settings from environment variables, config files and startup flags.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field, replace
from dotenv import load_dotenv

from express_mcp.client.credentials import Credentials


DEFAULT_QUERY_URL = "https://poll.kuaidi100.com/poll/query.do"
DEFAULT_PRICE_URL = "https://poll.kuaidi100.com/order/price.do"

DEFAULT_PRICE_CARRIERS = [
    "shunfeng",
    "jd",
    "debangkuaidi",
    "yuantong",
    "zhongtong",
    "yunda",
    "shentong",
    "ems",
]

SIGN_METHODS = ("md5", "hmac-sha256")


@dataclass
class ExpressConfig:
    """Main configuration class for the Express MCP server."""

    # Upstream identity
    customer: str = ""
    auth_key: str = field(default="", repr=False)

    # Upstream endpoints
    query_url: str = DEFAULT_QUERY_URL
    price_url: str = DEFAULT_PRICE_URL
    sign_method: str = "md5"

    # Price comparison
    price_carriers: list[str] = field(default_factory=lambda: list(DEFAULT_PRICE_CARRIERS))

    # Timeouts (seconds)
    request_timeout: float = 15.0
    carrier_timeout: float = 10.0  # per-carrier deadline during comparison

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "ExpressConfig":
        """Load configuration from environment variables."""

        # Try to load from .env file
        if env_file:
            load_dotenv(env_file)
        else:
            # Try common locations
            for env_path in ["config.env", ".env"]:
                if Path(env_path).exists():
                    load_dotenv(env_path)
                    break

        carriers_str = os.getenv("EXPRESS_PRICE_CARRIERS", "")
        carriers = [c.strip() for c in carriers_str.split(",") if c.strip()]

        return cls(
            customer=os.getenv("EXPRESS_CUSTOMER", ""),
            auth_key=os.getenv("EXPRESS_AUTH_KEY", ""),

            query_url=os.getenv("EXPRESS_QUERY_URL", DEFAULT_QUERY_URL),
            price_url=os.getenv("EXPRESS_PRICE_URL", DEFAULT_PRICE_URL),
            sign_method=os.getenv("EXPRESS_SIGN_METHOD", "md5").lower(),

            price_carriers=carriers or list(DEFAULT_PRICE_CARRIERS),

            request_timeout=float(os.getenv("EXPRESS_REQUEST_TIMEOUT", "15")),
            carrier_timeout=float(os.getenv("EXPRESS_CARRIER_TIMEOUT", "10")),

            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
        )

    def with_overrides(self, **overrides) -> "ExpressConfig":
        """Return a copy with the given non-None fields replaced (startup flags win over env)."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)

    @property
    def credentials(self) -> Credentials:
        return Credentials(account_id=self.customer, auth_key=self.auth_key)

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        # Upstream decides whether to accept unauthenticated calls
        if not self.customer:
            errors.append("Warning: customer not set - requests will be sent unauthenticated")
        if not self.auth_key:
            errors.append("Warning: auth_key not set - requests will be sent unauthenticated")

        if self.sign_method not in SIGN_METHODS:
            errors.append(f"Unknown sign method: {self.sign_method}")
        if not self.price_carriers:
            errors.append("At least one price comparison carrier is required")
        if self.request_timeout <= 0:
            errors.append("EXPRESS_REQUEST_TIMEOUT must be positive")
        if self.carrier_timeout <= 0:
            errors.append("EXPRESS_CARRIER_TIMEOUT must be positive")

        return errors


def load_config(
    env_file: Optional[str] = None,
    auth_key: Optional[str] = None,
    customer: Optional[str] = None,
) -> ExpressConfig:
    """Build the process configuration once at startup."""
    return ExpressConfig.from_env(env_file).with_overrides(
        auth_key=auth_key,
        customer=customer,
    )
