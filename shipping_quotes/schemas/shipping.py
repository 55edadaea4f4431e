"""
Shipping Schemas

Pydantic models for the quote request and the permissive normalizer that
turns loosely-typed caller input into a ShipmentSpec.

Required fields (origin_zip, dest_zip, weight_lb) are NOT enforced here.
Each carrier validates them when it is called so that one carrier's
rejection stays isolated from the other.
"""
import json
import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shipping_quotes.core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

RawPayload = Union[str, bytes, bytearray, Mapping[str, Any], None]


def _blank_to_none(v):
    if v is None:
        return None
    if isinstance(v, str) and v.strip() == "":
        return None
    return v


# ==================== Shipment Schemas ====================


class Dimensions(BaseModel):
    """Package dimensions in inches."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    length: float = Field(..., gt=0, allow_inf_nan=False, description="Length in inches")
    width: float = Field(..., gt=0, allow_inf_nan=False, description="Width in inches")
    height: float = Field(..., gt=0, allow_inf_nan=False, description="Height in inches")


class ShipmentSpec(BaseModel):
    """Canonical shipment description shared by every carrier."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    origin_zip: Optional[str] = None
    dest_zip: Optional[str] = None
    weight_lb: Optional[float] = Field(None, gt=0, allow_inf_nan=False, description="Weight in LBS")
    dimensions_in: Optional[Dimensions] = None
    declared_value: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Declared value in USD")
    ship_date: Optional[str] = Field(None, description="ISO date, YYYY-MM-DD")
    residential: bool = False
    origin_state: Optional[str] = None
    dest_state: Optional[str] = None

    @field_validator("origin_zip", "dest_zip", mode="before")
    @classmethod
    def coerce_postal_code(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("postal code must be a string or number")
        if isinstance(v, (int, float)):
            v = str(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("origin_state", "dest_state", mode="before")
    @classmethod
    def normalize_state(cls, v):
        v = _blank_to_none(v)
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("weight_lb", "declared_value", mode="before")
    @classmethod
    def blank_number(cls, v):
        return _blank_to_none(v)

    @field_validator("declared_value")
    @classmethod
    def zero_value_is_absent(cls, v):
        # A zero declared value carries no coverage; omit it from carrier payloads
        if v is not None and v == 0:
            return None
        return v

    @field_validator("dimensions_in", mode="before")
    @classmethod
    def empty_dimensions(cls, v):
        if v is None or v == {} or v == "":
            return None
        return v

    @field_validator("ship_date", mode="before")
    @classmethod
    def coerce_ship_date(cls, v):
        v = _blank_to_none(v)
        if isinstance(v, date):
            return v.isoformat()
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("residential", mode="before")
    @classmethod
    def coerce_residential(cls, v):
        if v is None or v == "":
            return False
        return v

    def missing_required_fields(self) -> List[str]:
        """Names of the fields every carrier needs but this shipment lacks."""
        missing = []
        if not self.origin_zip:
            missing.append("origin_zip")
        if not self.dest_zip:
            missing.append("dest_zip")
        if self.weight_lb is None:
            missing.append("weight_lb")
        return missing


class QuoteRequest(BaseModel):
    """Full quote request: the shipment plus result options."""
    model_config = ConfigDict(frozen=True)

    shipment: ShipmentSpec = Field(default_factory=ShipmentSpec)
    service_filters: List[str] = Field(default_factory=list)
    only: Optional[str] = None

    @field_validator("service_filters", mode="before")
    @classmethod
    def coerce_filters(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v if item is not None]
        logger.warning(f"Ignoring service_filters of type {type(v).__name__}")
        return []

    @field_validator("only", mode="before")
    @classmethod
    def coerce_only(cls, v):
        v = _blank_to_none(v)
        return str(v).strip() if v is not None else None


# ==================== Normalizer ====================


def parse_payload(raw: RawPayload) -> dict:
    """
    Decode a request body into a dict.

    Raises:
        InvalidInputError: malformed JSON or a non-object payload
    """
    if raw is None:
        return {}
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInputError(f"Request body is not UTF-8: {e}")
    if isinstance(raw, str):
        if raw.strip() == "":
            return {}
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Malformed JSON: {e.msg}", details={"position": e.pos})
    if not isinstance(raw, Mapping):
        raise InvalidInputError(
            f"Request body must be a JSON object, got {type(raw).__name__}"
        )
    return dict(raw)


def parse_shipment(raw: RawPayload) -> ShipmentSpec:
    """
    Strict form of the normalizer.

    Raises:
        InvalidInputError: body cannot be decoded or coerced into a ShipmentSpec
    """
    payload = parse_payload(raw)
    try:
        return ShipmentSpec.model_validate(payload)
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise InvalidInputError(
            f"Invalid shipment fields: {', '.join(fields)}",
            details={"fields": fields},
        )


def normalize_shipment(raw: RawPayload) -> ShipmentSpec:
    """
    Normalize caller input into a ShipmentSpec.

    Never raises for bad input. An undecodable or non-object body becomes an
    empty shipment; a field that fails coercion is dropped on its own and
    the remaining fields are kept, leaving each carrier to reject what is
    still missing.
    """
    try:
        payload = parse_payload(raw)
    except InvalidInputError as e:
        logger.warning(f"Shipment input rejected, using empty shipment: {e.message}")
        return ShipmentSpec()

    # Each pass removes at least one field, so this terminates
    while True:
        try:
            return ShipmentSpec.model_validate(payload)
        except ValidationError as e:
            bad_fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            bad_fields &= set(payload)
            if not bad_fields:
                logger.warning(f"Shipment input rejected, using empty shipment: {e.error_count()} error(s)")
                return ShipmentSpec()
            for name in sorted(bad_fields):
                logger.warning(f"Ignoring invalid shipment field {name}: {payload[name]!r}")
                payload.pop(name)


def normalize_quote_request(raw: RawPayload) -> QuoteRequest:
    """Normalize a full quote request body; never raises for bad input."""
    try:
        payload = parse_payload(raw)
    except InvalidInputError as e:
        logger.warning(f"Quote request body rejected, using empty request: {e.message}")
        return QuoteRequest()

    try:
        options = QuoteRequest.model_validate({
            "service_filters": payload.get("service_filters"),
            "only": payload.get("only"),
        })
    except ValidationError as e:
        logger.warning(f"Ignoring invalid quote options: {e.error_count()} error(s)")
        options = QuoteRequest()

    return options.model_copy(update={"shipment": normalize_shipment(payload)})
