"""Printer transports for invoice-printer."""

from invoice_printer.hardware.base import Printer
from invoice_printer.hardware.printer.cups import CupsPrinter, MockPrinter, create_printer

__all__ = [
    "Printer",
    "CupsPrinter",
    "MockPrinter",
    "create_printer",
]
