"""
Data models for the Express MCP server.
Defines tracking and pricing requests, carrier quotes and the explicit call outcome.
"""

import math
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class ErrorKind(str, Enum):
    """Failure taxonomy shared by the transport, the services and the tool layer."""
    INVALID_ARGUMENT = "invalid_argument"
    TRANSPORT_FAILURE = "transport_failure"
    UPSTREAM_REJECTED = "upstream_rejected"
    DECODE_FAILURE = "decode_failure"
    TIMEOUT = "timeout"
    ALL_CARRIERS_FAILED = "all_carriers_failed"


class ResponseFormat(str, Enum):
    """Upstream response format for tracking queries."""
    JSON = "json"
    RAW = "raw"


class SortOrder(str, Enum):
    """Order of tracking events."""
    ASC = "asc"
    DESC = "desc"


class ExpressError(Exception):
    """Failure carrying an ErrorKind, raised by Outcome.unwrap()."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class Outcome(BaseModel):
    """Result of a tracking query or a price comparison."""

    success: bool
    value: Optional[Any] = None
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: Any) -> "Outcome":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "Outcome":
        return cls(success=False, error_kind=kind, error=message)

    def unwrap(self) -> Any:
        """Return the value or raise ExpressError for a failed outcome."""
        if not self.success:
            raise ExpressError(self.error_kind, self.error or self.error_kind.value)
        return self.value


def _required(value: Any, label: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValueError(f"{label} is required")
    return text


class TrackingRequest(BaseModel):
    """A single-carrier tracking query."""

    carrier: str
    tracking_number: str
    phone: str = ""
    origin: str = ""
    destination: str = ""
    extended_status: bool = False
    response_format: ResponseFormat = ResponseFormat.JSON
    order: SortOrder = SortOrder.DESC

    @field_validator("carrier", mode="before")
    @classmethod
    def _carrier_required(cls, v):
        return _required(v, "carrier (com)")

    @field_validator("tracking_number", mode="before")
    @classmethod
    def _number_required(cls, v):
        return _required(v, "tracking number (num)")

    @classmethod
    def build(cls, carrier: Any, tracking_number: Any, **options) -> "TrackingRequest":
        """Validating factory; raises ExpressError(INVALID_ARGUMENT) on bad input."""
        try:
            return cls(carrier=carrier, tracking_number=tracking_number, **options)
        except ValueError as e:
            raise ExpressError(ErrorKind.INVALID_ARGUMENT, _first_error(e)) from e

    def to_params(self) -> dict[str, str]:
        """Upstream query parameters, in the order the provider documents them."""
        return {
            "com": self.carrier,
            "num": self.tracking_number,
            "phone": self.phone,
            "from": self.origin,
            "to": self.destination,
            "resultv2": "1" if self.extended_status else "0",
            "show": "0" if self.response_format == ResponseFormat.JSON else "3",
            "order": self.order.value,
        }


class PriceRequest(BaseModel):
    """Shipment description used for every carrier in a price comparison."""

    weight: float = 1.0
    length: Optional[float] = Field(default=None, ge=0)
    width: Optional[float] = Field(default=None, ge=0)
    height: Optional[float] = Field(default=None, ge=0)
    origin: str
    destination: str

    @field_validator("weight", mode="before")
    @classmethod
    def _default_weight(cls, v):
        # Missing, non-numeric or non-positive weights fall back to 1 kg
        number = _to_number(v)
        if number is None or number <= 0:
            return 1.0
        return number

    @field_validator("length", "width", "height", mode="before")
    @classmethod
    def _optional_dimension(cls, v):
        # Absent means "unspecified", not zero
        if v is None or v == "" or (isinstance(v, float) and math.isnan(v)):
            return None
        number = _to_number(v)
        if number is None:
            raise ValueError(f"invalid dimension: {v!r}")
        return number

    @field_validator("origin", mode="before")
    @classmethod
    def _origin_required(cls, v):
        return _required(v, "origin (from)")

    @field_validator("destination", mode="before")
    @classmethod
    def _destination_required(cls, v):
        return _required(v, "destination (to)")

    @classmethod
    def build(
        cls,
        origin: Any,
        destination: Any,
        weight: Any = None,
        length: Any = None,
        width: Any = None,
        height: Any = None,
    ) -> "PriceRequest":
        """Validating factory; raises ExpressError(INVALID_ARGUMENT) on bad input."""
        try:
            return cls(
                weight=weight,
                length=length,
                width=width,
                height=height,
                origin=origin,
                destination=destination,
            )
        except ValueError as e:
            raise ExpressError(ErrorKind.INVALID_ARGUMENT, _first_error(e)) from e

    def to_params(self, carrier: str) -> dict[str, str]:
        """Upstream price parameters for one carrier."""
        params = {
            "kuaidicom": carrier,
            "sendAddr": self.origin,
            "recAddr": self.destination,
            "weight": _format_number(self.weight),
        }
        for name in ("length", "width", "height"):
            value = getattr(self, name)
            if value is not None:
                params[name] = _format_number(value)
        return params


class CarrierQuote(BaseModel):
    """One carrier's price estimate, or the reason it could not be obtained."""

    carrier_id: str
    price: Optional[float] = None
    currency: str = "CNY"
    estimated_days: Optional[float] = None
    error: Optional[ErrorKind] = None
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _price_xor_error(self):
        if (self.price is None) == (self.error is None):
            raise ValueError("a quote carries either a price or an error")
        return self

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, carrier_id: str, kind: ErrorKind, message: str) -> "CarrierQuote":
        return cls(carrier_id=carrier_id, error=kind, error_message=message)


class ComparisonResult(BaseModel):
    """Ranked quotes: successes by ascending price, then failures in carrier order."""

    quotes: list[CarrierQuote] = Field(default_factory=list)

    @classmethod
    def ranked(cls, quotes: list[CarrierQuote]) -> "ComparisonResult":
        """Rank quotes given in carrier-enumeration order (sorted() is stable)."""
        successes = sorted((q for q in quotes if q.succeeded), key=lambda q: q.price)
        failures = [q for q in quotes if not q.succeeded]
        return cls(quotes=successes + failures)

    @property
    def successes(self) -> list[CarrierQuote]:
        return [q for q in self.quotes if q.succeeded]

    @property
    def failures(self) -> list[CarrierQuote]:
        return [q for q in self.quotes if not q.succeeded]

    @property
    def cheapest(self) -> Optional[CarrierQuote]:
        successes = self.successes
        return successes[0] if successes else None


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _format_number(value: float) -> str:
    return f"{value:g}"


def _first_error(error: ValueError) -> str:
    """Human-readable message from a pydantic ValidationError."""
    errors = getattr(error, "errors", None)
    if callable(errors):
        details = errors()
        if details:
            first = details[0]
            message = str(first.get("msg", error))
            field_name = ".".join(str(p) for p in first.get("loc", ()))
            message = message.removeprefix("Value error, ")
            if field_name and field_name not in message and field_name.split("_")[0] not in message:
                return f"{field_name}: {message}"
            return message
    return str(error)
