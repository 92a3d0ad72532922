"""
Request signing for the upstream courier-data provider.
"""

import hashlib
import hmac
from typing import Mapping

import orjson

from express_mcp.client.credentials import Credentials


class RequestSigner:
    """
    Produces the signed form fields for an upstream request.

    The parameter mapping is serialized to compact JSON (key order kept)
    and sent as ``param`` next to ``customer`` and ``sign``:

    - ``md5``:         upper(md5(param + auth_key + customer))
    - ``hmac-sha256``: upper(hmac_sha256(auth_key, param + customer))
    """

    def __init__(self, credentials: Credentials, method: str = "md5"):
        method = method.lower()
        if method not in ("md5", "hmac-sha256"):
            raise ValueError(f"Unsupported sign method: {method}")
        self.credentials = credentials
        self.method = method

    @staticmethod
    def canonicalize(params: Mapping[str, str]) -> str:
        return orjson.dumps(dict(params)).decode("utf-8")

    def signature(self, param: str) -> str:
        account_id = self.credentials.account_id
        auth_key = self.credentials.auth_key

        if self.method == "md5":
            digest = hashlib.md5(f"{param}{auth_key}{account_id}".encode("utf-8")).hexdigest()
        else:
            digest = hmac.new(
                auth_key.encode("utf-8"),
                f"{param}{account_id}".encode("utf-8"),
                hashlib.sha256,
            ).hexdigest()
        return digest.upper()

    def sign(self, params: Mapping[str, str]) -> dict[str, str]:
        """Return a new dict of form fields; ``params`` is left untouched."""
        param = self.canonicalize(params)
        return {
            "customer": self.credentials.account_id,
            "param": param,
            "sign": self.signature(param),
        }
