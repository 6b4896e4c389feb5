"""Receipt formatter.

Turns an InvoiceData into the ordered render instructions for one
printed copy:

- optional logo (customer copy only)
- header with optional copy banner
- customer details
- itemized lines
- right-aligned totals
- footer
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from invoice_printer.models import InvoiceData
from invoice_printer.printing.instructions import (
    BANNER,
    PLAIN,
    Feed,
    Image,
    Justification,
    RenderInstruction,
    Text,
    TextStyle,
)
from invoice_printer.printing.pricing import format_for_display

logger = logging.getLogger(__name__)

LABEL_WIDTH = 25
VALUE_WIDTH = 15
FULL_RULE = "="
SECTION_RULE = "-"
FOOTER_TEXT = "Thank you for your business!"


def _format_quantity(quantity: Union[int, float]) -> str:
    if isinstance(quantity, float) and quantity.is_integer():
        return str(int(quantity))
    return str(quantity)


class _Builder:
    """Collects instructions while tracking the current justification."""

    def __init__(self) -> None:
        self.instructions: List[RenderInstruction] = []
        self.justification = Justification.LEFT

    def justify(self, justification: Justification) -> None:
        self.justification = justification

    def text(self, content: str, style: TextStyle = PLAIN) -> None:
        self.instructions.append(Text(content, self.justification, style))

    def blank(self) -> None:
        self.text("")

    def feed(self, lines: int = 1) -> None:
        self.instructions.append(Feed(lines))

    def image(self, source: Union[Path, bytes]) -> None:
        self.instructions.append(Image(source, self.justification))


class ReceiptFormatter:
    """Formatter for LBP invoice receipts.

    Pure apart from checking whether the logo file exists. Safe to share
    between concurrent requests.
    """

    def __init__(self, logo: Optional[Union[Path, str, bytes]] = None):
        """Initialize the formatter.

        Args:
            logo: Logo image path or encoded bytes; printed on the copy
                without a banner when it exists
        """
        if isinstance(logo, str):
            logo = Path(logo)
        self._logo = logo

    def _logo_source(self) -> Optional[Union[Path, bytes]]:
        if isinstance(self._logo, bytes):
            return self._logo or None
        if self._logo is not None and self._logo.is_file():
            return self._logo
        return None

    def format(
        self,
        invoice: InvoiceData,
        copy_label: Optional[str] = None,
        line_width: int = 48,
    ) -> Tuple[RenderInstruction, ...]:
        """Format one copy of a receipt.

        Args:
            invoice: Validated invoice
            copy_label: Banner text such as "MERCHANT COPY"; empty or None
                prints the logo instead
            line_width: Printer column count used for separator rules

        Returns:
            Instruction tuple; the caller appends the cut

        Raises:
            FormatError: If a price is neither numeric nor pre-formatted
        """
        width = max(int(line_width), 0)
        out = _Builder()

        if not copy_label:
            self._add_logo(out)
        self._add_header(out, invoice, copy_label, width)
        self._add_customer(out, invoice)
        self._add_items(out, invoice, width)
        self._add_totals(out, invoice, width)
        self._add_footer(out)

        return tuple(out.instructions)

    def _add_logo(self, out: _Builder) -> None:
        source = self._logo_source()
        if source is None:
            logger.debug("No logo available, skipping")
            return
        out.feed()
        out.justify(Justification.CENTER)
        out.image(source)
        out.feed()

    def _add_header(
        self,
        out: _Builder,
        invoice: InvoiceData,
        copy_label: Optional[str],
        width: int,
    ) -> None:
        out.feed()
        out.text(FULL_RULE * width)
        out.justify(Justification.CENTER)

        if copy_label:
            out.feed()
            out.text(f"*** {copy_label} ***", style=BANNER)
            out.feed()
            out.text(FULL_RULE * width)

        out.text(invoice.company_name)
        out.text(f"Branch: {invoice.branch_name}")
        out.text(f"Tel: {invoice.phone}")
        out.text(FULL_RULE * width)

    def _add_customer(self, out: _Builder, invoice: InvoiceData) -> None:
        out.feed()
        out.justify(Justification.LEFT)
        out.text(f"Invoice #: {invoice.invoice_number}")
        out.text(f"Date: {invoice.date}")
        out.text(f"Customer: {invoice.customer_name}")
        out.blank()

    def _add_items(self, out: _Builder, invoice: InvoiceData, width: int) -> None:
        out.text("ITEMS:")
        out.text(SECTION_RULE * width)
        out.feed()

        for index, item in enumerate(invoice.items, start=1):
            prefix = f"items.{index - 1}"
            price = format_for_display(item.price, field=f"{prefix}.price")
            total = format_for_display(item.total, field=f"{prefix}.total")

            out.text(f"{index}. {item.name} - QTY {_format_quantity(item.quantity)}")
            out.text(f"Unit Price: {price}")
            out.text(f"Total: {total}")
            out.blank()

    def _add_totals(self, out: _Builder, invoice: InvoiceData, width: int) -> None:
        out.text(SECTION_RULE * width)
        out.justify(Justification.RIGHT)

        rows = (
            ("Subtotal:", invoice.subtotal, "subtotal"),
            ("Discount:", invoice.discount, "discount"),
            ("Grand Total:", invoice.grand_total, "grand_total"),
        )
        for label, value, field in rows:
            display = format_for_display(value, field=field)
            out.text(label.rjust(LABEL_WIDTH) + display.rjust(VALUE_WIDTH))

    def _add_footer(self, out: _Builder) -> None:
        out.justify(Justification.CENTER)
        out.feed()
        out.text(FOOTER_TEXT)
        out.feed(2)
