"""Printing module for invoice-printer - thermal receipt generation."""

from invoice_printer.printing.formatter import ReceiptFormatter
from invoice_printer.printing.instructions import (
    Cut,
    Feed,
    Image,
    Justification,
    RenderInstruction,
    Text,
    TextStyle,
)
from invoice_printer.printing.manager import PrintManager, PrintResult
from invoice_printer.printing.pricing import format_for_display, strip_currency_noise
from invoice_printer.printing.receipt import Receipt, ReceiptCopy, ReceiptGenerator
from invoice_printer.printing.renderer import EscPosRenderer

__all__ = [
    # Formatting
    "ReceiptFormatter",
    "format_for_display",
    "strip_currency_noise",
    # Instructions
    "Cut",
    "Feed",
    "Image",
    "Justification",
    "RenderInstruction",
    "Text",
    "TextStyle",
    # Receipt
    "Receipt",
    "ReceiptCopy",
    "ReceiptGenerator",
    "EscPosRenderer",
    "PrintManager",
    "PrintResult",
]
