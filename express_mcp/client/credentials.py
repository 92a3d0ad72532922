"""
Upstream account credentials.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """
    Identity values required by the upstream provider.

    Built once at startup and shared read-only by every request.
    Empty values are allowed: the request goes out unauthenticated
    and the provider decides whether to accept it.
    """

    account_id: str = ""
    auth_key: str = field(default="", repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.account_id and self.auth_key)
