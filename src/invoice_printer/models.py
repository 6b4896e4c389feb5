"""Invoice data models.

Incoming JSON is validated into immutable pydantic models before it
reaches the receipt formatter.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError

from invoice_printer.errors import InvoiceValidationError, MissingFieldError

# Strict numbers so JSON true/false never pass as 1/0
PriceValue = Union[StrictInt, StrictFloat, str]

REQUIRED_FIELDS = (
    "customer_name",
    "date",
    "invoice_number",
    "items",
    "subtotal",
    "discount",
    "grand_total",
)

# Header fields may be omitted from a request and filled from settings
HEADER_FIELDS = ("company_name", "branch_name", "phone")


class LineItem(BaseModel):
    """One itemized line of an invoice."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str
    quantity: Union[StrictInt, StrictFloat]
    price: PriceValue
    total: PriceValue


class InvoiceData(BaseModel):
    """A validated invoice, read-only once constructed."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    company_name: str = Field(min_length=1)
    branch_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    invoice_number: str
    date: str
    customer_name: str
    items: Tuple[LineItem, ...]
    subtotal: PriceValue
    discount: PriceValue
    grand_total: PriceValue


def _error_location(loc: Tuple[Any, ...]) -> str:
    # union errors end in member tags such as "int" or "str"
    known = set(InvoiceData.model_fields) | set(LineItem.model_fields)
    parts = list(loc)
    while parts and isinstance(parts[-1], str) and parts[-1] not in known:
        parts.pop()
    return ".".join(str(part) for part in parts) or "body"


def parse_invoice(
    payload: Any,
    defaults: Optional[Mapping[str, str]] = None,
) -> InvoiceData:
    """Validate a decoded JSON payload into an InvoiceData.

    Args:
        payload: Decoded request body
        defaults: Fallback values for the header fields

    Raises:
        MissingFieldError: If a required field is absent or null
        InvoiceValidationError: If a field has the wrong shape
    """
    if not isinstance(payload, dict):
        raise InvoiceValidationError("body", "expected a JSON object")

    for name in REQUIRED_FIELDS:
        if payload.get(name) is None:
            raise MissingFieldError(name)

    data = dict(payload)
    defaults = defaults or {}
    for name in HEADER_FIELDS:
        value = data.get(name)
        if value is None or str(value).strip() == "":
            value = defaults.get(name, "")
        if not str(value).strip():
            raise MissingFieldError(name)
        data[name] = value

    try:
        return InvoiceData.model_validate(data)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = _error_location(error["loc"])
        if error["type"] == "missing":
            raise MissingFieldError(location) from None
        raise InvoiceValidationError(location, error["msg"]) from None
