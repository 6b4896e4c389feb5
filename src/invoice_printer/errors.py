"""Exceptions raised by invoice-printer."""

from typing import Any, Optional


class InvoicePrintError(Exception):
    """Base class for all invoice-printer errors."""


class FormatError(InvoicePrintError):
    """A price value could not be formatted for display."""

    def __init__(self, field: Optional[str], value: Any):
        self.field = field
        self.value = value
        where = f" for field '{field}'" if field else ""
        super().__init__(f"Cannot format price{where}: {value!r}")


class MissingFieldError(InvoicePrintError):
    """A required invoice field is absent from the request."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field: {field}")


class InvoiceValidationError(InvoicePrintError):
    """A field is present but malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid field {field}: {message}")


class PrinterError(InvoicePrintError):
    """The print spooler rejected or failed a job."""


class PrinterNotFoundError(PrinterError):
    """The configured printer is not known to the spooler."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("Printer not found")
