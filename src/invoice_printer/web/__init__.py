"""HTTP surface for invoice-printer."""

from invoice_printer.web.server import InvoiceServer, create_app

__all__ = ["InvoiceServer", "create_app"]
