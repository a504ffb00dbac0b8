from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, List, Literal

# Partners send and receive camelCase JSON (partnerKey, totalAmount, ...)
_camel_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Largest amount in cents a partner may send (signed 64-bit)
MAX_AMOUNT = 2**63 - 1


class ItemDetail(BaseModel):
    model_config = _camel_config

    partner_item_ref: str = Field(max_length=50)
    name: str = Field(max_length=100)
    qty: int = Field(ge=1, le=5, strict=True)
    unit_price: int = Field(ge=1, le=MAX_AMOUNT, strict=True) # Amount in cents


# Request body for the submit endpoint
class TrxRequest(BaseModel):
    model_config = _camel_config

    partner_key: str = Field(max_length=50)
    partner_ref_no: str = Field(max_length=50)
    partner_password: str = Field(max_length=50) # Base64 text, checked by the validator
    total_amount: int = Field(ge=1, le=MAX_AMOUNT, strict=True) # Amount in cents
    items: List[ItemDetail] = Field(default_factory=list) # Optional, but empty fails amount validation
    timestamp: str # e.g. "2024-08-15T02:11:22.0000000Z"
    sig: str


class TrxResponse(BaseModel):
    model_config = _camel_config

    result: Literal[1] = 1
    total_amount: int
    total_discount: int = Field(ge=0)
    final_amount: int


class ErrorResponse(BaseModel):
    model_config = _camel_config

    result: Literal[0] = 0
    result_message: str


# --- Model-binding error messages ---

_FIELD_LABELS = {
    "partnerKey": "PartnerKey",
    "partnerRefNo": "PartnerRefNo",
    "partnerPassword": "PartnerPassword",
    "totalAmount": "TotalAmount",
    "timestamp": "Timestamp",
    "sig": "Sig",
    "partnerItemRef": "PartnerItemRef",
    "name": "Name",
    "qty": "Quantity",
    "unitPrice": "UnitPrice",
    "items": "Items",
}

_RANGE_MESSAGES = {
    "qty": "Quantity must be between 1 and 5.",
    "unitPrice": "UnitPrice must be a positive value.",
    "totalAmount": "TotalAmount must be a positive value.",
}


def _describe_error(error: dict[str, Any]) -> str:
    loc = [part for part in error.get("loc", ()) if part != "body"]
    field = next((part for part in reversed(loc) if isinstance(part, str)), None)
    label = _FIELD_LABELS.get(field, field or "Request")
    error_type = error.get("type", "")

    if error_type == "missing":
        return f"{label} is required."
    if error_type == "string_too_long":
        max_length = error.get("ctx", {}).get("max_length")
        return f"{label} cannot exceed {max_length} characters."
    if error_type in ("greater_than_equal", "less_than_equal") and field in _RANGE_MESSAGES:
        return _RANGE_MESSAGES[field]
    return f"{label}: {error.get('msg', 'invalid value')}"


def describe_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Flattens pydantic errors into one human-readable message, duplicates removed."""
    messages = []
    for error in errors:
        message = _describe_error(error)
        if message not in messages:
            messages.append(message)
    return " ".join(messages) or "Invalid request."
