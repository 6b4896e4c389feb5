"""Receipt generator for invoices.

Every invoice prints twice on one printer session:
- the merchant copy, with a banner
- the customer copy, with the logo
Each copy is followed by a paper cut.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from invoice_printer.models import InvoiceData
from invoice_printer.printing.formatter import ReceiptFormatter
from invoice_printer.printing.instructions import Cut, RenderInstruction
from invoice_printer.printing.renderer import EscPosRenderer

logger = logging.getLogger(__name__)

MERCHANT_COPY = "MERCHANT COPY"
COPY_LABELS: Tuple[Optional[str], ...] = (MERCHANT_COPY, None)


@dataclass(frozen=True)
class ReceiptCopy:
    """One physical printout."""

    label: Optional[str]
    instructions: Tuple[RenderInstruction, ...]


@dataclass
class Receipt:
    """A generated receipt job ready for printing."""

    invoice_number: str
    copies: Tuple[ReceiptCopy, ...]
    raw_commands: bytes
    preview: str
    timestamp: datetime

    @property
    def instructions(self) -> Tuple[RenderInstruction, ...]:
        return join_copies(self.copies)


def join_copies(copies: Sequence[ReceiptCopy]) -> Tuple[RenderInstruction, ...]:
    """Concatenate copies, cutting the paper after each one."""
    sequence: List[RenderInstruction] = []
    for copy in copies:
        sequence.extend(copy.instructions)
        sequence.append(Cut())
    return tuple(sequence)


class ReceiptGenerator:
    """Builds the merchant and customer copies of an invoice."""

    def __init__(
        self,
        formatter: ReceiptFormatter,
        renderer: EscPosRenderer,
        line_width: int,
        copy_labels: Sequence[Optional[str]] = COPY_LABELS,
    ):
        self._formatter = formatter
        self._renderer = renderer
        self._line_width = line_width
        self._copy_labels = tuple(copy_labels)

    def generate_receipt(self, invoice: InvoiceData) -> Receipt:
        """Generate the full print job for an invoice.

        Raises:
            FormatError: If a price cannot be formatted
        """
        copies = tuple(
            ReceiptCopy(
                label=label,
                instructions=self._formatter.format(invoice, label, self._line_width),
            )
            for label in self._copy_labels
        )
        instructions = join_copies(copies)

        raw_commands = self._renderer.render(instructions)
        preview = self._renderer.preview(instructions, self._line_width)
        logger.debug(
            f"Generated {len(copies)} copies for invoice {invoice.invoice_number} "
            f"({len(raw_commands)} bytes)"
        )

        return Receipt(
            invoice_number=invoice.invoice_number,
            copies=copies,
            raw_commands=raw_commands,
            preview=preview,
            timestamp=datetime.now(),
        )
